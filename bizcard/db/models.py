"""SQLAlchemy models for users, cards and the content attached to a card."""
from __future__ import annotations

import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    JSON,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from .session import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    card = relationship("Card", uselist=False, back_populates="owner", cascade="all,delete-orphan")
    profile = relationship("Profile", uselist=False, back_populates="user", cascade="all,delete-orphan")
    sessions = relationship("UserSession", cascade="all,delete-orphan")


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    email = Column(String(255), nullable=True)
    name = Column(String(255), nullable=True)
    global_username = Column(String(64), nullable=True)
    avatar_url = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="profile")


class UserSession(Base):
    __tablename__ = "sessions"

    token = Column(String(128), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class Card(Base):
    __tablename__ = "business_cards"
    __table_args__ = (
        UniqueConstraint("user_id", name="business_cards_user_id_unique"),
        UniqueConstraint("slug", name="business_cards_slug_unique"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    slug = Column(String(255), nullable=False)
    title = Column(String(255), nullable=True)
    company = Column(String(255), nullable=True)
    position = Column(String(255), nullable=True)
    bio = Column(Text, nullable=True)
    avatar_url = Column(Text, nullable=True)
    phone = Column(String(64), nullable=True)
    whatsapp = Column(String(64), nullable=True)
    email = Column(String(255), nullable=True)
    website = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    map_link = Column(Text, nullable=True)
    theme = Column(JSON, default=dict, nullable=False)
    layout = Column(JSON, default=dict, nullable=False)
    shape = Column(String(32), default="rectangle", nullable=False)
    is_published = Column(Boolean, default=False, nullable=False)
    view_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    owner = relationship("User", back_populates="card")
    social_links = relationship(
        "SocialLink", back_populates="card", cascade="all,delete-orphan", order_by="SocialLink.display_order"
    )
    media_items = relationship(
        "MediaItem", back_populates="card", cascade="all,delete-orphan", order_by="MediaItem.display_order"
    )
    reviews = relationship("Review", back_populates="card", cascade="all,delete-orphan")
    views = relationship("CardView", cascade="all,delete-orphan")


class SocialLink(Base):
    __tablename__ = "social_links"

    id = Column(String(36), primary_key=True, default=_uuid)
    card_id = Column(String(36), ForeignKey("business_cards.id", ondelete="CASCADE"), nullable=False)
    platform = Column(String(64), nullable=False)
    username = Column(String(255), nullable=True)
    url = Column(Text, nullable=False)
    display_order = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    card = relationship("Card", back_populates="social_links")


class MediaItem(Base):
    __tablename__ = "media_items"

    id = Column(String(36), primary_key=True, default=_uuid)
    card_id = Column(String(36), ForeignKey("business_cards.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(16), nullable=False)
    title = Column(String(255), nullable=False, default="")
    description = Column(Text, nullable=True)
    url = Column(Text, nullable=False)
    thumbnail_url = Column(Text, nullable=True)
    file_size = Column(Integer, nullable=True)
    mime_type = Column(String(128), nullable=True)
    display_order = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    card = relationship("Card", back_populates="media_items")


class Review(Base):
    __tablename__ = "reviews"

    id = Column(String(36), primary_key=True, default=_uuid)
    card_id = Column(String(36), ForeignKey("business_cards.id", ondelete="CASCADE"), nullable=False)
    reviewer_name = Column(String(255), nullable=False)
    reviewer_email = Column(String(255), nullable=True)
    reviewer_avatar = Column(Text, nullable=True)
    rating = Column(Integer, nullable=False, default=5)
    comment = Column(Text, nullable=False)
    source_url = Column(Text, nullable=True)
    is_verified = Column(Boolean, default=False, nullable=False)
    is_featured = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    card = relationship("Card", back_populates="reviews")


class CardView(Base):
    __tablename__ = "card_views"

    id = Column(Integer, primary_key=True, autoincrement=True)
    card_id = Column(String(36), ForeignKey("business_cards.id", ondelete="CASCADE"), nullable=False)
    referrer = Column(Text, nullable=True)
    user_agent = Column(Text, nullable=True)
    viewed_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
