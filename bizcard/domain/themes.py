"""Theme/layout presets and the CSS classes the public card derives from them."""
from __future__ import annotations

import re
import urllib.parse as urlparse
from typing import Any, Mapping

THEMES = [
    {"name": "Ocean Blue", "primary": "#3B82F6", "secondary": "#1E40AF", "background": "#FFFFFF", "text": "#1F2937"},
    {"name": "Forest Green", "primary": "#10B981", "secondary": "#047857", "background": "#FFFFFF", "text": "#1F2937"},
    {"name": "Sunset Orange", "primary": "#F59E0B", "secondary": "#D97706", "background": "#FFFFFF", "text": "#1F2937"},
    {"name": "Royal Purple", "primary": "#8B5CF6", "secondary": "#7C3AED", "background": "#FFFFFF", "text": "#1F2937"},
    {"name": "Rose Pink", "primary": "#EC4899", "secondary": "#DB2777", "background": "#FFFFFF", "text": "#1F2937"},
    {"name": "Dark Mode", "primary": "#60A5FA", "secondary": "#3B82F6", "background": "#1F2937", "text": "#F9FAFB"},
]
DEFAULT_THEME = THEMES[0]

FONTS = ["Inter", "Roboto", "Open Sans", "Lato", "Montserrat", "Poppins"]
LAYOUT_STYLES = ["modern", "classic", "minimal", "bold"]
ALIGNMENTS = ["left", "center", "right"]
SHAPES = ["rectangle", "rounded", "circle"]
DEFAULT_LAYOUT = {"style": "modern", "alignment": "center", "font": "Inter"}

SOCIAL_PLATFORMS = {
    "Instagram": "https://instagram.com/{}",
    "LinkedIn": "https://linkedin.com/in/{}",
    "GitHub": "https://github.com/{}",
    "Twitter": "https://twitter.com/{}",
    "Facebook": "https://facebook.com/{}",
    "YouTube": "https://youtube.com/@{}",
    "TikTok": "https://tiktok.com/@{}",
    "WhatsApp": "https://wa.me/{}",
    "Telegram": "https://t.me/{}",
    "Website": "https://{}",
}

_HEX = re.compile(r"#[0-9a-fA-F]{6}")


def _color(value: Any, fallback: str) -> str:
    v = str(value or "").strip()
    if _HEX.fullmatch(v):
        return v.upper()
    if re.fullmatch(r"[0-9a-fA-F]{6}", v):
        return ("#" + v).upper()
    return fallback


def normalize_theme(theme: Mapping[str, Any] | None) -> dict:
    """Merge a stored/submitted theme with the default preset, dropping bad colors."""
    data = dict(theme or {})
    preset = next((t for t in THEMES if t["name"] == data.get("name")), DEFAULT_THEME)
    return {
        "name": str(data.get("name") or preset["name"]),
        "primary": _color(data.get("primary"), preset["primary"]),
        "secondary": _color(data.get("secondary"), preset["secondary"]),
        "background": _color(data.get("background"), preset["background"]),
        "text": _color(data.get("text"), preset["text"]),
    }


def normalize_layout(layout: Mapping[str, Any] | None) -> dict:
    data = dict(layout or {})
    style = data.get("style") if data.get("style") in LAYOUT_STYLES else DEFAULT_LAYOUT["style"]
    alignment = data.get("alignment") if data.get("alignment") in ALIGNMENTS else DEFAULT_LAYOUT["alignment"]
    font = data.get("font") if data.get("font") in FONTS else DEFAULT_LAYOUT["font"]
    return {"style": style, "alignment": alignment, "font": font}


def normalize_shape(shape: str | None) -> str:
    return shape if shape in SHAPES else SHAPES[0]


def is_dark(theme: Mapping[str, Any]) -> bool:
    bg = _color(theme.get("background"), DEFAULT_THEME["background"]).lstrip("#")
    r, g, b = int(bg[0:2], 16), int(bg[2:4], 16), int(bg[4:6], 16)
    return 0.299 * r + 0.587 * g + 0.114 * b < 128


def card_css_classes(theme: Mapping[str, Any] | None, layout: Mapping[str, Any] | None, shape: str | None) -> str:
    """Class list for the card container, branching on stored theme/layout JSON."""
    t = normalize_theme(theme)
    lay = normalize_layout(layout)
    classes = [
        "card",
        f"card--{lay['style']}",
        f"card--align-{lay['alignment']}",
        f"card--shape-{normalize_shape(shape)}",
        "card--dark" if is_dark(t) else "card--light",
    ]
    return " ".join(classes)


def font_family(layout: Mapping[str, Any] | None) -> str:
    return f"'{normalize_layout(layout)['font']}', sans-serif"


def social_link_url(platform: str, username: str | None) -> str:
    """Build a profile URL for platform/username; empty when it cannot be built."""
    handle = (username or "").strip().lstrip("@")
    if not handle:
        return ""
    if handle.startswith("http://") or handle.startswith("https://"):
        return handle
    template = SOCIAL_PLATFORMS.get(platform)
    if not template:
        return ""
    return template.format(urlparse.quote(handle, safe="/._-+"))
