from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse, Response

from bizcard.db.models import Card
from bizcard.repositories.sql_repository import SQLRepository
from bizcard.routers.deps import templates
from bizcard.services import export_service
from bizcard.services.card_display import card_share_url, public_card_context, should_track_view
from bizcard.services.card_service import CardService

router = APIRouter(prefix="", tags=["public"])
_repo = SQLRepository()
_cards = CardService(_repo)


def _published_card(slug: str) -> Card:
    card = _cards.find_public_card(slug)
    if not card:
        raise HTTPException(404, "Card not found or not published")
    return card


def _context(card: Card) -> dict:
    return public_card_context(
        card,
        _repo.list_social_links(card.id, active_only=True),
        _repo.list_media_items(card.id),
        _repo.list_reviews(card.id),
    )


def _track(request: Request, card: Card) -> None:
    if not should_track_view(request, card.slug):
        return
    _cards.record_view(
        card.id,
        referrer=request.headers.get("referer"),
        user_agent=request.headers.get("user-agent"),
    )


@router.get("/c/{slug}.json")
def public_card_json(slug: str):
    return _context(_published_card(slug))


@router.get("/c/{slug}/export.png")
def export_png(slug: str):
    card = _published_card(slug)
    return Response(
        export_service.render_png(card),
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{export_service.export_filename(card, "png")}"'},
    )


@router.get("/c/{slug}/export.pdf")
def export_pdf(slug: str):
    card = _published_card(slug)
    return Response(
        export_service.render_pdf(card),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{export_service.export_filename(card, "pdf")}"'},
    )


@router.get("/c/{slug}", response_class=HTMLResponse)
def public_card(slug: str, request: Request):
    card = _published_card(slug)
    _track(request, card)
    return templates(request).TemplateResponse(request, "public_card.html", _context(card))


@router.get("/q/{slug}.png")
def qr(slug: str):
    card = _published_card(slug)
    return Response(export_service.qr_png(card_share_url(card.slug)), media_type="image/png")


@router.get("/q/{slug}.svg")
def qr_svg(slug: str):
    card = _published_card(slug)
    return Response(export_service.qr_svg(card_share_url(card.slug)), media_type="image/svg+xml")


@router.get("/v/{slug}.vcf")
def vcard(slug: str):
    card = _published_card(slug)
    return Response(
        export_service.build_vcard(card),
        media_type="text/vcard; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{card.slug}.vcf"'},
    )
