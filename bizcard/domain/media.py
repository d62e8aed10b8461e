"""Video URL parsing (embed/thumbnail URLs), media type detection and accepted uploads."""
from __future__ import annotations

import os
import re
import urllib.parse as urlparse
from dataclasses import dataclass
from typing import Optional

VIDEO_HOSTS = ("youtube.com", "youtu.be", "vimeo.com", "dailymotion.com", "twitch.tv")

MEDIA_IMAGE = "image"
MEDIA_VIDEO = "video"
MEDIA_DOCUMENT = "document"

_YOUTUBE_ID = re.compile(r"^[A-Za-z0-9_-]{11}$")
_VIMEO_ID = re.compile(r"^\d+$")


@dataclass(frozen=True)
class VideoEmbed:
    provider: str
    video_id: str
    embed_url: str
    thumbnail_url: Optional[str]


def _parse(url: str) -> Optional[urlparse.ParseResult]:
    try:
        return urlparse.urlparse(url if "://" in url else f"https://{url}")
    except ValueError:
        return None


def _host_of(parsed: Optional[urlparse.ParseResult]) -> str:
    if parsed is None:
        return ""
    try:
        host = (parsed.hostname or "").lower()
    except ValueError:
        return ""
    return host[4:] if host.startswith("www.") else host


def _host(url: str) -> str:
    return _host_of(_parse(url))


def _on_domain(host: str, domain: str) -> bool:
    return host == domain or host.endswith("." + domain)


def is_video_url(url: str | None) -> bool:
    host = _host((url or "").strip())
    if not host:
        return False
    return any(_on_domain(host, known) for known in VIDEO_HOSTS)


def youtube_id(url: str | None) -> Optional[str]:
    """Extract the 11-char id from watch, short, embed and shorts URLs."""
    parsed = _parse((url or "").strip())
    host = _host_of(parsed)
    if not host:
        return None
    candidate = ""
    if host == "youtu.be":
        candidate = parsed.path.lstrip("/").split("/", 1)[0]
    elif _on_domain(host, "youtube.com"):
        query = urlparse.parse_qs(parsed.query or "")
        if "v" in query:
            candidate = query["v"][0]
        else:
            parts = [p for p in parsed.path.split("/") if p]
            if len(parts) >= 2 and parts[0] in ("embed", "shorts", "v", "live"):
                candidate = parts[1]
    return candidate if _YOUTUBE_ID.match(candidate or "") else None


def vimeo_id(url: str | None) -> Optional[str]:
    parsed = _parse((url or "").strip())
    if not _on_domain(_host_of(parsed), "vimeo.com"):
        return None
    for part in reversed([p for p in parsed.path.split("/") if p]):
        if _VIMEO_ID.match(part):
            return part
    return None


def video_embed(url: str | None) -> Optional[VideoEmbed]:
    """Return embed info for YouTube/Vimeo links, None for anything else."""
    yt = youtube_id(url)
    if yt:
        return VideoEmbed(
            provider="youtube",
            video_id=yt,
            embed_url=f"https://www.youtube.com/embed/{yt}",
            thumbnail_url=f"https://img.youtube.com/vi/{yt}/hqdefault.jpg",
        )
    vm = vimeo_id(url)
    if vm:
        return VideoEmbed(
            provider="vimeo",
            video_id=vm,
            embed_url=f"https://player.vimeo.com/video/{vm}",
            thumbnail_url=f"https://vumbnail.com/{vm}.jpg",
        )
    return None


def media_type_for(mime_type: str | None) -> str:
    mime = (mime_type or "").lower()
    if mime.startswith("image/"):
        return MEDIA_IMAGE
    if mime.startswith("video/"):
        return MEDIA_VIDEO
    return MEDIA_DOCUMENT


# Accepted uploads: MIME type -> extensions kept on disk. Images are always
# re-encoded to JPEG, so their original extension is never stored.
UPLOAD_TYPES = {
    "image/jpeg": (),
    "image/jpg": (),
    "image/pjpeg": (),
    "image/png": (),
    "image/gif": (),
    "image/webp": (),
    "video/mp4": (".mp4", ".m4v"),
    "video/webm": (".webm",),
    "video/quicktime": (".mov",),
    "video/ogg": (".ogv", ".ogg"),
    "application/pdf": (".pdf",),
    "application/msword": (".doc",),
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": (".docx",),
}

DOCUMENT_EXTENSIONS = (".pdf", ".doc", ".docx")


def upload_extension(mime_type: str | None, filename: str | None) -> Optional[str]:
    """Extension to store an upload under, or None when the upload is not accepted."""
    mime = (mime_type or "").split(";", 1)[0].strip().lower()
    if mime not in UPLOAD_TYPES:
        return None
    if media_type_for(mime) == MEDIA_IMAGE:
        return ".jpg"
    ext = os.path.splitext(os.path.basename(filename or ""))[1].lower()
    return ext if ext in UPLOAD_TYPES[mime] else None
