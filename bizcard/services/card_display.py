"""Helpers for the public card page (payloads, share URLs, view tracking)."""
from __future__ import annotations

import urllib.parse as urlparse
from statistics import mean
from typing import Iterable

from fastapi import Request

from bizcard.core.utils import absolute_url
from bizcard.db.models import Card, MediaItem, Review, SocialLink
from bizcard.domain.media import video_embed
from bizcard.domain.themes import card_css_classes, font_family, normalize_layout, normalize_theme


PUBLIC_PREFIX = "/c"


def card_path(slug: str) -> str:
    return f"{PUBLIC_PREFIX}/{(slug or '').strip().lstrip('/')}"


def card_share_url(slug: str) -> str:
    return absolute_url(card_path(slug))


def should_track_view(request: Request, slug: str) -> bool:
    """Skip non-GET requests and reloads/exports coming from the card itself."""
    if request.method.upper() != "GET":
        return False
    referer = request.headers.get("referer", "")
    if not referer:
        return True
    try:
        parsed = urlparse.urlparse(referer)
    except ValueError:
        return True
    ref_host = (parsed.hostname or "").lower()
    current_host = (request.headers.get("host") or "").split(":", 1)[0].lower()
    if ref_host and current_host and ref_host != current_host:
        return True
    return (parsed.path or "").rstrip("/") != card_path(slug)


def rating_summary(reviews: Iterable[Review]) -> dict:
    ratings = [int(r.rating or 0) for r in reviews]
    if not ratings:
        return {"count": 0, "average": None}
    return {"count": len(ratings), "average": round(mean(ratings), 1)}


def social_link_payload(link: SocialLink) -> dict:
    return {
        "id": link.id,
        "platform": link.platform,
        "username": link.username,
        "url": link.url,
        "display_order": link.display_order,
    }


def media_payload(item: MediaItem) -> dict:
    payload = {
        "id": item.id,
        "type": item.type,
        "title": item.title,
        "description": item.description,
        "url": item.url,
        "thumbnail_url": item.thumbnail_url,
        "embed_url": None,
    }
    if item.type == "video":
        embed = video_embed(item.url)
        if embed:
            payload["embed_url"] = embed.embed_url
            payload["thumbnail_url"] = item.thumbnail_url or embed.thumbnail_url
    return payload


def review_payload(review: Review) -> dict:
    return {
        "id": review.id,
        "reviewer_name": review.reviewer_name,
        "reviewer_avatar": review.reviewer_avatar,
        "rating": review.rating,
        "comment": review.comment,
        "source_url": review.source_url,
        "is_verified": review.is_verified,
        "is_featured": review.is_featured,
        "created_at": review.created_at.isoformat() if review.created_at else None,
    }


def card_payload(card: Card) -> dict:
    return {
        "id": card.id,
        "slug": card.slug,
        "title": card.title or "",
        "company": card.company or "",
        "position": card.position or "",
        "bio": card.bio or "",
        "avatar_url": card.avatar_url or "",
        "phone": card.phone or "",
        "whatsapp": card.whatsapp or "",
        "email": card.email or "",
        "website": card.website or "",
        "address": card.address or "",
        "map_link": card.map_link or "",
        "theme": normalize_theme(card.theme),
        "layout": normalize_layout(card.layout),
        "shape": card.shape,
        "is_published": bool(card.is_published),
        "view_count": int(card.view_count or 0),
        "public_url": card_share_url(card.slug),
    }


def public_card_context(
    card: Card,
    social_links: Iterable[SocialLink],
    media_items: Iterable[MediaItem],
    reviews: Iterable[Review],
) -> dict:
    """Everything the public page (HTML or JSON) renders for one card."""
    review_list = list(reviews)
    return {
        "card": card_payload(card),
        "css_classes": card_css_classes(card.theme, card.layout, card.shape),
        "font_family": font_family(card.layout),
        "social_links": [social_link_payload(link) for link in social_links],
        "media_items": [media_payload(item) for item in media_items],
        "reviews": [review_payload(r) for r in review_list if r.is_featured],
        "rating": rating_summary(review_list),
        "share_url": card_share_url(card.slug),
        "qr_url": f"/q/{card.slug}.png",
        "vcard_url": f"/v/{card.slug}.vcf",
    }
