"""Slug-related use cases (preview, assignment)."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from bizcard.domain.slugs import generate_unique_slug, normalize_slug
from bizcard.repositories.sql_repository import SQLRepository

logger = logging.getLogger(__name__)


class SlugError(Exception):
    """Base exception for slug workflow."""


class SlugUnavailableError(SlugError):
    """Raised when the storage rejects a slug another card claimed concurrently."""


class CardNotFoundError(SlugError):
    """Raised when trying to update a slug for a non-existent card."""


class SlugService:
    """Provides slug previews and assignment helpers."""

    def __init__(self) -> None:
        self.repository = SQLRepository()

    def _is_taken(self, candidate: str, excluded_owner: str | None) -> bool:
        return self.repository.slug_exists(candidate, excluded_owner=excluded_owner)

    def preview(self, value: str | None, user_id: str | None = None) -> str:
        """Slug the given user would end up with when submitting value."""
        return generate_unique_slug(value, self._is_taken, user_id)

    def is_available(self, value: str | None, user_id: str | None = None) -> bool:
        candidate = normalize_slug(value)
        if not candidate:
            return False
        return not self._is_taken(candidate, user_id)

    def assign_slug(self, user_id: str, slug: str) -> str:
        """Store slug on the user's card and return the value actually written."""
        card = self.repository.get_card_by_owner(user_id)
        if not card:
            raise CardNotFoundError(f"User {user_id} has no card")
        try:
            updated = self.repository.update_card(card.id, {"slug": slug})
        except IntegrityError as exc:
            logger.warning("Slug %r rejected by storage for card %s", slug, card.id)
            raise SlugUnavailableError(slug) from exc
        if not updated:
            raise CardNotFoundError(f"Card {card.id} not found")
        return updated.slug
