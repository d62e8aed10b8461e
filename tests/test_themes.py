from __future__ import annotations

from bizcard.domain.themes import (
    DEFAULT_LAYOUT,
    THEMES,
    card_css_classes,
    font_family,
    normalize_layout,
    normalize_theme,
    social_link_url,
)


def test_normalize_theme_falls_back_to_preset_colors():
    theme = normalize_theme({"name": "Dark Mode", "primary": "not-a-color", "text": "ffffff"})
    assert theme["primary"] == "#60A5FA"
    assert theme["text"] == "#FFFFFF"
    assert theme["background"] == "#1F2937"
    assert normalize_theme(None) == THEMES[0]


def test_normalize_layout_rejects_unknown_values():
    assert normalize_layout({"style": "weird", "alignment": "left", "font": "Comic Sans"}) == {
        "style": "modern",
        "alignment": "left",
        "font": "Inter",
    }
    assert normalize_layout(None) == DEFAULT_LAYOUT


def test_card_css_classes_branch_on_theme_and_layout():
    light = card_css_classes(THEMES[0], {"style": "bold", "alignment": "right"}, "rounded")
    assert light.split() == ["card", "card--bold", "card--align-right", "card--shape-rounded", "card--light"]
    dark = card_css_classes(THEMES[-1], None, "hexagon")
    assert "card--dark" in dark.split()
    assert "card--shape-rectangle" in dark.split()


def test_font_family():
    assert font_family({"font": "Poppins"}) == "'Poppins', sans-serif"


def test_social_link_url():
    assert social_link_url("GitHub", "@octocat") == "https://github.com/octocat"
    assert social_link_url("Instagram", "https://instagram.com/me") == "https://instagram.com/me"
    assert social_link_url("Unknown", "me") == ""
    assert social_link_url("GitHub", "") == ""
