"""QR codes, vCards and PNG/PDF renderings of a public card."""

from __future__ import annotations

import io
import re

import qrcode
import qrcode.image.svg
from PIL import Image, ImageDraw, ImageFont
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from bizcard.db.models import Card
from bizcard.domain.themes import normalize_theme
from bizcard.services.card_display import card_share_url

EXPORT_SIZE = (1050, 600)
QR_BOX = 220


def export_filename(card: Card, extension: str) -> str:
    base = re.sub(r"[^A-Za-z0-9._-]+", "-", (card.title or "").strip()).strip("-") or "business-card"
    return f"{base}.{extension}"


def qr_image(payload: str):
    qr = qrcode.QRCode(version=None, error_correction=qrcode.constants.ERROR_CORRECT_M, box_size=8, border=4)
    qr.add_data(payload)
    qr.make(fit=True)
    return qr.make_image(fill_color="black", back_color="white").convert("RGB")


def qr_png(payload: str) -> bytes:
    buf = io.BytesIO()
    qr_image(payload).save(buf, format="PNG")
    return buf.getvalue()


def qr_svg(payload: str) -> bytes:
    buf = io.BytesIO()
    qrcode.make(payload, image_factory=qrcode.image.svg.SvgImage).save(buf)
    return buf.getvalue()


def _vcard_escape(value: str | None) -> str:
    v = (value or "").replace("\\", "\\\\")
    return v.replace("\n", "\\n").replace(",", "\\,").replace(";", "\\;")


def build_vcard(card: Card) -> str:
    name = _vcard_escape(card.title)
    lines = [
        "BEGIN:VCARD",
        "VERSION:3.0",
        f"N:{name};;;;",
        f"FN:{name}",
    ]
    if card.company:
        lines.append(f"ORG:{_vcard_escape(card.company)}")
    if card.position:
        lines.append(f"TITLE:{_vcard_escape(card.position)}")
    if card.phone:
        lines.append(f"TEL;TYPE=CELL:{card.phone}")
    if card.whatsapp and card.whatsapp != card.phone:
        lines.append(f"TEL;TYPE=VOICE:{card.whatsapp}")
    if card.email:
        lines.append(f"EMAIL;TYPE=INTERNET:{card.email}")
    if card.website:
        lines.append(f"URL;TYPE=WORK:{card.website}")
    if card.address:
        lines.append(f"ADR;TYPE=WORK:;;{_vcard_escape(card.address)};;;;")
    if card.bio:
        lines.append(f"NOTE:{_vcard_escape(card.bio)}")
    lines.append(f"URL:{card_share_url(card.slug)}")
    lines.append("END:VCARD")
    return "\r\n".join(lines) + "\r\n"


def _card_lines(card: Card) -> list[tuple[str, bool]]:
    """(text, is_heading) rows drawn on exported cards."""
    rows: list[tuple[str, bool]] = [(card.title or "Business Card", True)]
    subtitle = " - ".join(p for p in (card.position, card.company) if p)
    if subtitle:
        rows.append((subtitle, False))
    for value in (card.phone, card.email, card.website, card.address):
        if value:
            rows.append((value, False))
    return rows


def render_png(card: Card) -> bytes:
    theme = normalize_theme(card.theme)
    width, height = EXPORT_SIZE
    image = Image.new("RGB", EXPORT_SIZE, theme["background"])
    draw = ImageDraw.Draw(image)
    draw.rectangle([0, 0, width, 24], fill=theme["primary"])
    draw.rectangle([0, height - 12, width, height], fill=theme["secondary"])
    font = ImageFont.load_default()
    y = 80
    for text, heading in _card_lines(card):
        draw.text((60, y), text, fill=theme["primary"] if heading else theme["text"], font=font)
        y += 56 if heading else 36
    qr = qr_image(card_share_url(card.slug)).resize((QR_BOX, QR_BOX))
    image.paste(qr, (width - QR_BOX - 60, (height - QR_BOX) // 2))
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def render_pdf(card: Card) -> bytes:
    """Single-page PDF with the card rendering scaled to the page width."""
    width, height = EXPORT_SIZE
    packet = io.BytesIO()
    can = canvas.Canvas(packet, pagesize=(width, height))
    can.setTitle(card.title or "Business Card")
    can.drawImage(ImageReader(io.BytesIO(render_png(card))), 0, 0, width=width, height=height)
    can.showPage()
    can.save()
    return packet.getvalue()
