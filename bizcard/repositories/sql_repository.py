"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

import secrets
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from sqlalchemy import delete, func, select, update

from bizcard.db.models import (
    Card,
    CardView,
    MediaItem,
    Profile,
    Review,
    SocialLink,
    User,
    UserSession,
)
from bizcard.db.session import get_session

CARD_FIELDS = (
    "slug",
    "title",
    "company",
    "position",
    "bio",
    "avatar_url",
    "phone",
    "whatsapp",
    "email",
    "website",
    "address",
    "map_link",
    "theme",
    "layout",
    "shape",
    "is_published",
)


class SQLRepository:
    """CRUD helpers wrapping the SQLAlchemy session."""

    # -------------------------- users --------------------------
    def get_user(self, user_id: str) -> Optional[User]:
        with get_session() as session:
            return session.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        with get_session() as session:
            stmt = select(User).where(User.email == email)
            return session.execute(stmt).scalar_one_or_none()

    def create_user(self, email: str, password_hash: str, name: str | None = None) -> User:
        """Create the user together with its profile row."""
        with get_session() as session:
            user = User(email=email, password_hash=password_hash)
            session.add(user)
            session.flush()
            session.add(Profile(id=user.id, email=email, name=name))
            session.commit()
            session.refresh(user)
            return user

    def update_user_password(self, user_id: str, password_hash: str) -> None:
        with get_session() as session:
            stmt = (
                update(User)
                .where(User.id == user_id)
                .values(password_hash=password_hash, updated_at=datetime.now(timezone.utc))
            )
            session.execute(stmt)
            session.commit()

    def delete_user(self, user_id: str) -> None:
        with get_session() as session:
            user = session.get(User, user_id)
            if user:
                session.delete(user)
                session.commit()

    # -------------------------- sessions --------------------------
    def create_session(self, user_id: str, expires_at: datetime) -> str:
        token = secrets.token_urlsafe(32)
        with get_session() as session:
            session.add(UserSession(token=token, user_id=user_id, expires_at=expires_at))
            session.commit()
        return token

    def get_session(self, token: str) -> Optional[UserSession]:
        with get_session() as session:
            return session.get(UserSession, token)

    def delete_session(self, token: str) -> None:
        with get_session() as session:
            session.execute(delete(UserSession).where(UserSession.token == token))
            session.commit()

    def delete_user_sessions(self, user_id: str) -> None:
        with get_session() as session:
            session.execute(delete(UserSession).where(UserSession.user_id == user_id))
            session.commit()

    # -------------------------- profiles --------------------------
    def get_profile(self, user_id: str) -> Optional[Profile]:
        with get_session() as session:
            return session.get(Profile, user_id)

    def update_profile(self, user_id: str, **values: Any) -> None:
        with get_session() as session:
            profile = session.get(Profile, user_id)
            if not profile:
                profile = Profile(id=user_id)
                session.add(profile)
            for key, value in values.items():
                setattr(profile, key, value)
            profile.updated_at = datetime.now(timezone.utc)
            session.commit()

    # -------------------------- cards --------------------------
    def get_card(self, card_id: str) -> Optional[Card]:
        with get_session() as session:
            return session.get(Card, card_id)

    def get_card_by_owner(self, user_id: str) -> Optional[Card]:
        with get_session() as session:
            stmt = select(Card).where(Card.user_id == user_id)
            return session.execute(stmt).scalar_one_or_none()

    def get_card_by_slug(self, slug: str, *, published_only: bool = False) -> Optional[Card]:
        with get_session() as session:
            stmt = select(Card).where(Card.slug == slug)
            if published_only:
                stmt = stmt.where(Card.is_published.is_(True))
            return session.execute(stmt).scalar_one_or_none()

    def list_cards(self) -> list[Card]:
        with get_session() as session:
            return session.execute(select(Card).order_by(Card.created_at)).scalars().all()

    def slug_exists(self, slug: str, *, excluded_owner: str | None = None) -> bool:
        slug_value = (slug or "").strip()
        if not slug_value:
            return False
        with get_session() as session:
            stmt = select(Card.id).where(Card.slug == slug_value)
            if excluded_owner is not None:
                stmt = stmt.where(Card.user_id != excluded_owner)
            return session.execute(stmt.limit(1)).first() is not None

    def create_card(self, user_id: str, values: Mapping[str, Any]) -> Card:
        """Insert a card; the slug listener resolves values["slug"] during flush."""
        entity = Card(user_id=user_id, theme={}, layout={})
        for key in CARD_FIELDS:
            if key in values:
                setattr(entity, key, values[key])
        with get_session() as session:
            session.add(entity)
            try:
                session.commit()
            except Exception:
                session.rollback()
                raise
            session.refresh(entity)
            return entity

    def update_card(self, card_id: str, values: Mapping[str, Any]) -> Optional[Card]:
        """Apply values through the ORM so the slug listener sees old/new state."""
        with get_session() as session:
            card = session.get(Card, card_id)
            if not card:
                return None
            for key in CARD_FIELDS:
                if key in values:
                    setattr(card, key, values[key])
            try:
                session.commit()
            except Exception:
                session.rollback()
                raise
            session.refresh(card)
            return card

    def delete_card(self, card_id: str) -> None:
        with get_session() as session:
            card = session.get(Card, card_id)
            if card:
                session.delete(card)
                session.commit()

    # -------------------------- views --------------------------
    def record_card_view(self, card_id: str, *, referrer: str | None = None, user_agent: str | None = None) -> int:
        with get_session() as session:
            card = session.get(Card, card_id)
            if not card:
                return 0
            session.execute(update(Card).where(Card.id == card_id).values(view_count=Card.view_count + 1))
            session.add(CardView(card_id=card_id, referrer=referrer, user_agent=user_agent))
            session.commit()
            stmt = select(Card.view_count).where(Card.id == card_id)
            return int(session.execute(stmt).scalar() or 0)

    def count_card_views(self, card_id: str, since: datetime | None = None) -> int:
        with get_session() as session:
            stmt = select(func.count(CardView.id)).where(CardView.card_id == card_id)
            if since is not None:
                stmt = stmt.where(CardView.viewed_at >= since)
            return int(session.execute(stmt).scalar() or 0)

    # -------------------------- social links --------------------------
    def list_social_links(self, card_id: str, *, active_only: bool = False) -> list[SocialLink]:
        with get_session() as session:
            stmt = select(SocialLink).where(SocialLink.card_id == card_id)
            if active_only:
                stmt = stmt.where(SocialLink.is_active.is_(True))
            stmt = stmt.order_by(SocialLink.display_order, SocialLink.created_at)
            return session.execute(stmt).scalars().all()

    def add_social_link(self, card_id: str, platform: str, url: str, username: str | None = None) -> SocialLink:
        with get_session() as session:
            count = session.execute(
                select(func.count(SocialLink.id)).where(SocialLink.card_id == card_id)
            ).scalar() or 0
            link = SocialLink(
                card_id=card_id,
                platform=platform,
                username=username,
                url=url,
                display_order=int(count),
                is_active=True,
            )
            session.add(link)
            session.commit()
            session.refresh(link)
            return link

    def get_social_link(self, link_id: str) -> Optional[SocialLink]:
        with get_session() as session:
            return session.get(SocialLink, link_id)

    def delete_social_link(self, link_id: str) -> None:
        with get_session() as session:
            session.execute(delete(SocialLink).where(SocialLink.id == link_id))
            session.commit()

    # -------------------------- media items --------------------------
    def list_media_items(self, card_id: str, *, active_only: bool = True) -> list[MediaItem]:
        with get_session() as session:
            stmt = select(MediaItem).where(MediaItem.card_id == card_id)
            if active_only:
                stmt = stmt.where(MediaItem.is_active.is_(True))
            stmt = stmt.order_by(MediaItem.display_order, MediaItem.created_at)
            return session.execute(stmt).scalars().all()

    def add_media_item(self, card_id: str, **values: Any) -> MediaItem:
        with get_session() as session:
            count = session.execute(
                select(func.count(MediaItem.id)).where(MediaItem.card_id == card_id)
            ).scalar() or 0
            item = MediaItem(card_id=card_id, display_order=int(count), is_active=True, **values)
            session.add(item)
            session.commit()
            session.refresh(item)
            return item

    def get_media_item(self, item_id: str) -> Optional[MediaItem]:
        with get_session() as session:
            return session.get(MediaItem, item_id)

    def update_media_title(self, item_id: str, title: str) -> None:
        with get_session() as session:
            session.execute(update(MediaItem).where(MediaItem.id == item_id).values(title=title))
            session.commit()

    def delete_media_item(self, item_id: str) -> None:
        with get_session() as session:
            session.execute(delete(MediaItem).where(MediaItem.id == item_id))
            session.commit()

    # -------------------------- reviews --------------------------
    def list_reviews(self, card_id: str, *, featured_only: bool = False) -> list[Review]:
        with get_session() as session:
            stmt = select(Review).where(Review.card_id == card_id)
            if featured_only:
                stmt = stmt.where(Review.is_featured.is_(True))
            stmt = stmt.order_by(Review.created_at.desc())
            return session.execute(stmt).scalars().all()

    def add_review(self, card_id: str, **values: Any) -> Review:
        with get_session() as session:
            review = Review(card_id=card_id, **values)
            session.add(review)
            session.commit()
            session.refresh(review)
            return review

    def get_review(self, review_id: str) -> Optional[Review]:
        with get_session() as session:
            return session.get(Review, review_id)

    def set_review_featured(self, review_id: str, featured: bool) -> None:
        with get_session() as session:
            session.execute(update(Review).where(Review.id == review_id).values(is_featured=featured))
            session.commit()

    def delete_review(self, review_id: str) -> None:
        with get_session() as session:
            session.execute(delete(Review).where(Review.id == review_id))
            session.commit()
