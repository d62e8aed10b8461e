"""
Card-related use cases (owner edits, social links, public lookups).
"""

from __future__ import annotations

import logging
import os
import shutil
from typing import Any, Mapping, Optional

from sqlalchemy.exc import IntegrityError

from bizcard.core.config import get_settings
from bizcard.core.utils import normalize_external_url, sanitize_phone
from bizcard.db.models import Card, SocialLink
from bizcard.domain.themes import (
    SOCIAL_PLATFORMS,
    normalize_layout,
    normalize_shape,
    normalize_theme,
    social_link_url,
)
from bizcard.repositories.sql_repository import SQLRepository

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("title", "company", "position", "bio", "avatar_url", "email", "address")
MAX_TEXT_LENGTH = 2000
UPLOADS_URL_PREFIX = "/static/uploads"


def card_uploads_dir(user_id: str, card_id: str) -> str:
    return os.path.join(get_settings().uploads_dir, user_id, card_id)


class CardError(Exception):
    """Base exception for card workflows."""


class CardNotFoundError(CardError):
    """Raised when the card does not exist or belongs to someone else."""


class CardValidationError(CardError):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CardConflictError(CardError):
    """Raised when the storage rejects a write (e.g. concurrent slug claim)."""


class CardService:
    """Owner-side card editing plus public lookups."""

    def __init__(self, repository: SQLRepository | None = None) -> None:
        self.repository = repository or SQLRepository()

    # -------------------------- owner card --------------------------
    def get_card_for_owner(self, user_id: str) -> Optional[Card]:
        return self.repository.get_card_by_owner(user_id)

    def require_card(self, user_id: str) -> Card:
        card = self.repository.get_card_by_owner(user_id)
        if not card:
            raise CardNotFoundError(f"User {user_id} has no card")
        return card

    def _clean(self, data: Mapping[str, Any]) -> dict:
        values: dict[str, Any] = {}
        for key in TEXT_FIELDS:
            if key in data:
                text = (data.get(key) or "").strip()
                if len(text) > MAX_TEXT_LENGTH:
                    raise CardValidationError(f"Field '{key}' is too long.")
                values[key] = text or None
        if "slug" in data:
            values["slug"] = (data.get("slug") or "").strip()
        for key in ("phone", "whatsapp"):
            if key in data:
                values[key] = sanitize_phone(data.get(key)) or None
        for key in ("website", "map_link"):
            if key in data:
                values[key] = normalize_external_url(data.get(key)) or None
        if "theme" in data:
            values["theme"] = normalize_theme(data.get("theme"))
        if "layout" in data:
            values["layout"] = normalize_layout(data.get("layout"))
        if "shape" in data:
            values["shape"] = normalize_shape(data.get("shape"))
        if "is_published" in data:
            values["is_published"] = bool(data.get("is_published"))
        return values

    def save_card(self, user_id: str, data: Mapping[str, Any], *, global_username: str | None = None) -> Card:
        """Insert or update the user's single card; the slug is resolved on write."""
        values = self._clean(data)
        existing = self.repository.get_card_by_owner(user_id)
        try:
            if existing:
                card = self.repository.update_card(existing.id, values)
                if card is None:
                    raise CardNotFoundError(existing.id)
            else:
                values.setdefault("theme", normalize_theme(None))
                values.setdefault("layout", normalize_layout(None))
                card = self.repository.create_card(user_id, values)
                logger.info("Created card %s for user %s with slug %s", card.id, user_id, card.slug)
        except IntegrityError as exc:
            logger.warning("Card write for user %s rejected by storage: %s", user_id, exc.orig)
            raise CardConflictError("The card could not be saved, the slug was taken meanwhile.") from exc

        profile_values: dict[str, Any] = {}
        if "title" in values:
            profile_values["name"] = values["title"]
        if "avatar_url" in values:
            profile_values["avatar_url"] = values["avatar_url"]
        if global_username is not None:
            profile_values["global_username"] = global_username.strip() or None
        if profile_values:
            self.repository.update_profile(user_id, **profile_values)
        return card

    def delete_card(self, user_id: str) -> None:
        card = self.require_card(user_id)
        self.repository.delete_card(card.id)
        try:
            shutil.rmtree(card_uploads_dir(user_id, card.id))
        except FileNotFoundError:
            pass

    # -------------------------- social links --------------------------
    def list_social_links(self, user_id: str) -> list[SocialLink]:
        card = self.require_card(user_id)
        return self.repository.list_social_links(card.id)

    def add_social_link(self, user_id: str, platform: str, username: str | None = None, url: str | None = None) -> SocialLink:
        card = self.require_card(user_id)
        platform = (platform or "").strip()
        if not platform:
            raise CardValidationError("Platform is required.")
        link_url = normalize_external_url(url) or social_link_url(platform, username)
        if not link_url:
            if platform not in SOCIAL_PLATFORMS:
                raise CardValidationError(f"Unknown platform '{platform}', provide the full URL.")
            raise CardValidationError("Provide a username or URL.")
        return self.repository.add_social_link(card.id, platform, link_url, (username or "").strip() or None)

    def remove_social_link(self, user_id: str, link_id: str) -> None:
        card = self.require_card(user_id)
        link = self.repository.get_social_link(link_id)
        if not link or link.card_id != card.id:
            raise CardNotFoundError(f"Social link {link_id} not found")
        self.repository.delete_social_link(link_id)

    # -------------------------- public --------------------------
    def find_public_card(self, slug: str) -> Optional[Card]:
        """Published card for slug, or None so the caller can 404."""
        slug_value = (slug or "").strip()
        if not slug_value:
            return None
        return self.repository.get_card_by_slug(slug_value, published_only=True)

    def record_view(self, card_id: str, *, referrer: str | None = None, user_agent: str | None = None) -> int:
        return self.repository.record_card_view(card_id, referrer=referrer, user_agent=user_agent)
