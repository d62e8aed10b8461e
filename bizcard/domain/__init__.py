"""Pure domain rules (slugs, media URLs, theme presets) with no storage access."""
