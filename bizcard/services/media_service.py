"""Media items attached to a card (uploads and video links)."""

from __future__ import annotations

import hashlib
import io
import logging
import os
import secrets
import time
from dataclasses import dataclass
from typing import Iterable, Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from bizcard.core.config import get_settings
from bizcard.db.models import MediaItem
from bizcard.domain.media import (
    MEDIA_IMAGE,
    MEDIA_VIDEO,
    is_video_url,
    media_type_for,
    upload_extension,
    video_embed,
)
from bizcard.repositories.sql_repository import SQLRepository
from bizcard.services.card_service import (
    UPLOADS_URL_PREFIX,
    CardNotFoundError,
    CardService,
    CardValidationError,
)

logger = logging.getLogger(__name__)

IMAGE_MAX_SIZE = (1600, 1600)


class MediaError(Exception):
    """Base exception for media workflows."""


class UnsupportedMediaError(MediaError):
    pass


class UploadTooLargeError(MediaError):
    pass


@dataclass
class PreparedUpload:
    """An upload that passed validation and is ready to be written."""

    media_type: str
    title: str
    ext: str
    mime_type: str
    data: bytes


def upload_path_for_url(url: str | None) -> Optional[str]:
    """Map a stored /static/uploads URL back to its file, None for anything else."""
    raw = (url or "").split("?", 1)[0]
    if not raw.startswith(UPLOADS_URL_PREFIX + "/"):
        return None
    root = os.path.realpath(get_settings().uploads_dir)
    path = os.path.realpath(os.path.join(root, raw[len(UPLOADS_URL_PREFIX) + 1 :]))
    if os.path.commonpath([root, path]) != root:
        return None
    return path


class MediaService:
    def __init__(self, repository: SQLRepository | None = None) -> None:
        self.repository = repository or SQLRepository()
        self.cards = CardService(self.repository)

    def _write_upload(self, payload: bytes, rel_path: str) -> str:
        dest_path = os.path.join(get_settings().uploads_dir, rel_path)
        os.makedirs(os.path.dirname(dest_path), exist_ok=True)
        with open(dest_path, "wb") as f:
            f.write(payload)
        etag = hashlib.md5(payload).hexdigest()[:8]
        return f"{UPLOADS_URL_PREFIX}/{rel_path}?v={etag}"

    def _resize_image(self, data: bytes) -> bytes:
        try:
            image = Image.open(io.BytesIO(data))
            image = ImageOps.exif_transpose(image)
            image = image.convert("RGB")
        except (UnidentifiedImageError, OSError) as exc:
            raise UnsupportedMediaError("Invalid image file.") from exc
        image.thumbnail(IMAGE_MAX_SIZE, Image.LANCZOS)
        buffer = io.BytesIO()
        image.save(buffer, format="JPEG", quality=85, optimize=True)
        return buffer.getvalue()

    def prepare(self, filename: str, mime_type: str | None, data: bytes) -> PreparedUpload:
        """Validate one upload without touching the disk or the database."""
        if not data:
            raise UnsupportedMediaError("Empty file.")
        if len(data) > get_settings().max_upload_bytes:
            raise UploadTooLargeError(filename)
        ext = upload_extension(mime_type, filename)
        if ext is None:
            raise UnsupportedMediaError("Only images, videos and PDF or Word documents are accepted.")
        media_type = media_type_for(mime_type)
        stem = os.path.splitext(os.path.basename(filename or ""))[0]
        mime = (mime_type or "").split(";", 1)[0].strip().lower()
        if media_type == MEDIA_IMAGE:
            data, mime = self._resize_image(data), "image/jpeg"
        return PreparedUpload(media_type=media_type, title=stem or media_type, ext=ext, mime_type=mime, data=data)

    def list_items(self, user_id: str) -> list[MediaItem]:
        card = self.cards.require_card(user_id)
        return self.repository.list_media_items(card.id)

    def upload(self, user_id: str, filename: str, mime_type: str | None, data: bytes) -> MediaItem:
        return self.upload_many(user_id, [(filename, mime_type, data)])[0]

    def upload_many(self, user_id: str, files: Iterable[tuple[str, str | None, bytes]]) -> list[MediaItem]:
        """Store uploads under <user>/<card>/; nothing is written unless every file is accepted."""
        card = self.cards.require_card(user_id)
        prepared = [self.prepare(filename, mime_type, data) for filename, mime_type, data in files]
        items = []
        for upload in prepared:
            name = f"{upload.media_type}-{int(time.time() * 1000)}-{secrets.token_hex(3)}{upload.ext}"
            rel_path = f"{user_id}/{card.id}/{name}"
            url = self._write_upload(upload.data, rel_path)
            logger.info("Stored %s upload for card %s at %s", upload.media_type, card.id, rel_path)
            items.append(
                self.repository.add_media_item(
                    card.id,
                    type=upload.media_type,
                    title=upload.title,
                    description="",
                    url=url,
                    file_size=len(upload.data),
                    mime_type=upload.mime_type,
                )
            )
        return items

    def add_video_link(self, user_id: str, url: str, title: str | None = None) -> MediaItem:
        card = self.cards.require_card(user_id)
        link = (url or "").strip()
        if not link:
            raise CardValidationError("Video URL is required.")
        if not is_video_url(link):
            raise UnsupportedMediaError("Only YouTube, Vimeo, Dailymotion and Twitch links are supported.")
        embed = video_embed(link)
        return self.repository.add_media_item(
            card.id,
            type=MEDIA_VIDEO,
            title=(title or "").strip() or "Video Link",
            description="",
            url=link,
            thumbnail_url=embed.thumbnail_url if embed else None,
        )

    def _owned_item(self, user_id: str, item_id: str) -> MediaItem:
        card = self.cards.require_card(user_id)
        item = self.repository.get_media_item(item_id)
        if not item or item.card_id != card.id:
            raise CardNotFoundError(f"Media item {item_id} not found")
        return item

    def rename(self, user_id: str, item_id: str, title: str) -> None:
        self._owned_item(user_id, item_id)
        self.repository.update_media_title(item_id, (title or "").strip())

    def remove(self, user_id: str, item_id: str) -> None:
        item = self._owned_item(user_id, item_id)
        self.repository.delete_media_item(item_id)
        path = upload_path_for_url(item.url)
        if path:
            try:
                os.remove(path)
            except FileNotFoundError:
                logger.warning("Upload %s was already gone", path)

