from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from bizcard.routers.deps import require_user
from bizcard.services.card_display import card_share_url
from bizcard.services.session_service import current_user_id
from bizcard.services.slug_service import (
    CardNotFoundError,
    SlugService,
    SlugUnavailableError,
)

router = APIRouter(prefix="/slug", tags=["slug"])


class SlugIn(BaseModel):
    value: str = ""


def _get_slug_service(request: Request) -> SlugService:
    svc = getattr(getattr(request.app, "state", None), "slug_service", None)
    if not svc:
        raise RuntimeError("SlugService not configured")
    return svc


@router.get("/check")
def slug_check(request: Request, value: str = ""):
    svc = _get_slug_service(request)
    user_id = current_user_id(request)
    resolved = svc.preview(value, user_id)
    return {
        "available": svc.is_available(value, user_id),
        "slug": resolved,
        "public_url": card_share_url(resolved),
    }


@router.post("/select")
def slug_select(payload: SlugIn, request: Request, user_id: str = Depends(require_user)):
    svc = _get_slug_service(request)
    try:
        new_slug = svc.assign_slug(user_id, payload.value)
    except CardNotFoundError:
        raise HTTPException(404, "Card not found")
    except SlugUnavailableError:
        raise HTTPException(409, "Slug unavailable, try another one.")
    return {"slug": new_slug, "public_url": card_share_url(new_slug)}
