from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel

from bizcard.domain.themes import FONTS, LAYOUT_STYLES, SHAPES, SOCIAL_PLATFORMS, THEMES
from bizcard.repositories.sql_repository import SQLRepository
from bizcard.routers.deps import require_user
from bizcard.services.card_display import (
    card_payload,
    media_payload,
    rating_summary,
    review_payload,
    social_link_payload,
)
from bizcard.services.card_service import (
    CardConflictError,
    CardNotFoundError,
    CardService,
    CardValidationError,
)
from bizcard.services.media_service import MediaService, UnsupportedMediaError, UploadTooLargeError
from bizcard.services.review_service import ReviewService

router = APIRouter(prefix="/api", tags=["dashboard"])

_repo = SQLRepository()
_cards = CardService(_repo)
_media = MediaService(_repo)
_reviews = ReviewService(_repo)


class CardIn(BaseModel):
    title: Optional[str] = None
    slug: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    map_link: Optional[str] = None
    theme: Optional[dict] = None
    layout: Optional[dict] = None
    shape: Optional[str] = None
    is_published: Optional[bool] = None
    global_username: Optional[str] = None


class SocialLinkIn(BaseModel):
    platform: str
    username: str = ""
    url: str = ""


class VideoLinkIn(BaseModel):
    url: str
    title: str = ""


class MediaTitleIn(BaseModel):
    title: str


class ReviewIn(BaseModel):
    reviewer_name: str
    comment: str
    rating: int = 5
    reviewer_email: str = ""
    reviewer_avatar: str = ""
    source_url: str = ""
    is_featured: bool = False


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, CardNotFoundError):
        return HTTPException(404, "Not found")
    if isinstance(exc, CardValidationError):
        return HTTPException(400, exc.message)
    if isinstance(exc, CardConflictError):
        return HTTPException(409, str(exc))
    if isinstance(exc, UploadTooLargeError):
        return HTTPException(413, "File too large")
    return HTTPException(400, str(exc))


@router.get("/presets")
def presets():
    return {
        "themes": THEMES,
        "fonts": FONTS,
        "layout_styles": LAYOUT_STYLES,
        "shapes": SHAPES,
        "social_platforms": sorted(SOCIAL_PLATFORMS),
    }


# -------------------------- card --------------------------
@router.get("/card")
def get_card(user_id: str = Depends(require_user)):
    card = _cards.get_card_for_owner(user_id)
    profile = _repo.get_profile(user_id)
    return {
        "card": card_payload(card) if card else None,
        "profile": {
            "name": profile.name if profile else None,
            "email": profile.email if profile else None,
            "global_username": profile.global_username if profile else None,
        },
    }


@router.put("/card")
def save_card(payload: CardIn, user_id: str = Depends(require_user)):
    data = payload.model_dump(exclude_unset=True)
    global_username = data.pop("global_username", None)
    try:
        card = _cards.save_card(user_id, data, global_username=global_username)
    except (CardValidationError, CardConflictError, CardNotFoundError) as exc:
        raise _http_error(exc) from exc
    return {"card": card_payload(card)}


@router.delete("/card")
def delete_card(user_id: str = Depends(require_user)):
    try:
        _cards.delete_card(user_id)
    except CardNotFoundError as exc:
        raise _http_error(exc) from exc
    return {"ok": True}


@router.get("/card/stats")
def card_stats(user_id: str = Depends(require_user)):
    try:
        card = _cards.require_card(user_id)
    except CardNotFoundError as exc:
        raise _http_error(exc) from exc
    return {"views": int(card.view_count or 0), "tracked_visits": _repo.count_card_views(card.id)}


# -------------------------- social links --------------------------
@router.get("/card/social-links")
def list_social_links(user_id: str = Depends(require_user)):
    try:
        links = _cards.list_social_links(user_id)
    except CardNotFoundError as exc:
        raise _http_error(exc) from exc
    return {"items": [social_link_payload(link) for link in links]}


@router.post("/card/social-links", status_code=201)
def add_social_link(payload: SocialLinkIn, user_id: str = Depends(require_user)):
    try:
        link = _cards.add_social_link(user_id, payload.platform, payload.username, payload.url)
    except (CardNotFoundError, CardValidationError) as exc:
        raise _http_error(exc) from exc
    return social_link_payload(link)


@router.delete("/card/social-links/{link_id}")
def remove_social_link(link_id: str, user_id: str = Depends(require_user)):
    try:
        _cards.remove_social_link(user_id, link_id)
    except CardNotFoundError as exc:
        raise _http_error(exc) from exc
    return {"ok": True}


# -------------------------- media --------------------------
@router.get("/card/media")
def list_media(user_id: str = Depends(require_user)):
    try:
        items = _media.list_items(user_id)
    except CardNotFoundError as exc:
        raise _http_error(exc) from exc
    return {"items": [media_payload(item) for item in items]}


@router.post("/card/media", status_code=201)
async def upload_media(files: list[UploadFile] = File(...), user_id: str = Depends(require_user)):
    batch = [(upload.filename or "file", upload.content_type, await upload.read()) for upload in files]
    try:
        items = _media.upload_many(user_id, batch)
    except (CardNotFoundError, UnsupportedMediaError, UploadTooLargeError) as exc:
        raise _http_error(exc) from exc
    return {"items": [media_payload(item) for item in items]}


@router.post("/card/media/video", status_code=201)
def add_video(payload: VideoLinkIn, user_id: str = Depends(require_user)):
    try:
        item = _media.add_video_link(user_id, payload.url, payload.title)
    except (CardNotFoundError, CardValidationError, UnsupportedMediaError) as exc:
        raise _http_error(exc) from exc
    return media_payload(item)


@router.patch("/card/media/{item_id}")
def rename_media(item_id: str, payload: MediaTitleIn, user_id: str = Depends(require_user)):
    try:
        _media.rename(user_id, item_id, payload.title)
    except CardNotFoundError as exc:
        raise _http_error(exc) from exc
    return {"ok": True}


@router.delete("/card/media/{item_id}")
def remove_media(item_id: str, user_id: str = Depends(require_user)):
    try:
        _media.remove(user_id, item_id)
    except CardNotFoundError as exc:
        raise _http_error(exc) from exc
    return {"ok": True}


# -------------------------- reviews --------------------------
@router.get("/card/reviews")
def list_reviews(user_id: str = Depends(require_user)):
    try:
        reviews = _reviews.list_reviews(user_id)
    except CardNotFoundError as exc:
        raise _http_error(exc) from exc
    return {"items": [review_payload(r) for r in reviews], "summary": rating_summary(reviews)}


@router.post("/card/reviews", status_code=201)
def add_review(payload: ReviewIn, user_id: str = Depends(require_user)):
    try:
        review = _reviews.add_review(user_id, payload.model_dump())
    except (CardNotFoundError, CardValidationError) as exc:
        raise _http_error(exc) from exc
    return review_payload(review)


@router.post("/card/reviews/{review_id}/feature")
def toggle_review_featured(review_id: str, user_id: str = Depends(require_user)):
    try:
        featured = _reviews.toggle_featured(user_id, review_id)
    except CardNotFoundError as exc:
        raise _http_error(exc) from exc
    return {"is_featured": featured}


@router.delete("/card/reviews/{review_id}")
def remove_review(review_id: str, user_id: str = Depends(require_user)):
    try:
        _reviews.remove(user_id, review_id)
    except CardNotFoundError as exc:
        raise _http_error(exc) from exc
    return {"ok": True}
