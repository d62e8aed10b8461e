"""
Utility helpers shared across routers/services.
"""

import re
from typing import Optional

from .config import get_settings


def absolute_url(path: str, base: Optional[str] = None) -> str:
    """
    Turn a relative path into an absolute URL using PUBLIC_BASE_URL.
    """
    settings = get_settings()
    base_url = (base or settings.public_base_url).rstrip("/")
    if not path:
        return base_url + "/"
    if path.startswith("http://") or path.startswith("https://"):
        return path
    if not path.startswith("/"):
        path = "/" + path
    return base_url + path


def normalize_external_url(value: str | None) -> str:
    """
    Ensure external links carry a scheme (https://) when the user omits it.
    mailto: and tel: links are kept as-is.
    """
    v = (value or "").strip()
    if not v:
        return ""
    if re.match(r"^(https?://|mailto:|tel:)", v, re.IGNORECASE):
        return v
    return "https://" + v.lstrip("/")


def sanitize_phone(raw: str | None) -> str:
    s = (raw or "").strip()
    if not s:
        return ""
    keep_plus = s.startswith("+")
    digits = re.sub(r"\D", "", s)
    return ("+" + digits) if keep_plus else digits
