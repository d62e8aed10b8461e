"""Before-write hooks that assign a unique slug to every card row."""
from __future__ import annotations

import logging

from sqlalchemy import event, inspect, select

from bizcard.domain.slugs import SlugChecker, WriteOperation, resolve_card_slug
from .models import Card

logger = logging.getLogger(__name__)

_cards = Card.__table__


def connection_slug_checker(connection) -> SlugChecker:
    """is_taken predicate running on the flush connection (same transaction)."""

    def _is_taken(candidate: str, excluded_owner: str | None) -> bool:
        stmt = select(_cards.c.id).where(_cards.c.slug == candidate)
        if excluded_owner is not None:
            stmt = stmt.where(_cards.c.user_id != excluded_owner)
        return connection.execute(stmt.limit(1)).first() is not None

    return _is_taken


@event.listens_for(Card, "before_insert")
def _assign_slug_on_insert(mapper, connection, target: Card) -> None:
    target.slug = resolve_card_slug(
        WriteOperation.INSERT,
        target.slug,
        title=target.title,
        owner=target.user_id,
        is_taken=connection_slug_checker(connection),
    )
    logger.debug("Card %s inserted with slug %s", target.id, target.slug)


@event.listens_for(Card, "before_update")
def _assign_slug_on_update(mapper, connection, target: Card) -> None:
    history = inspect(target).attrs.slug.history
    if not history.has_changes():
        return
    if history.deleted:
        old_slug = history.deleted[0]
    else:
        old_slug = connection.execute(select(_cards.c.slug).where(_cards.c.id == target.id)).scalar()
    resolved = resolve_card_slug(
        WriteOperation.UPDATE,
        target.slug,
        old_slug=old_slug,
        title=target.title,
        owner=target.user_id,
        is_taken=connection_slug_checker(connection),
    )
    if resolved != target.slug:
        logger.info("Card %s slug %r resolved to %r", target.id, target.slug, resolved)
    target.slug = resolved
