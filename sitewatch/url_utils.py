"""Shared naming utilities: slugs and screenshot artifact names."""

from __future__ import annotations

import re

SLUG_MAX_LENGTH = 80

_SCHEME_RE = re.compile(r"https?://")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def safe_slug(text: str, max_length: int = SLUG_MAX_LENGTH) -> str:
    """Filesystem-safe identifier derived from a site name or URL."""
    slug = _SCHEME_RE.sub("", text.lower())
    slug = _NON_ALNUM_RE.sub("-", slug).strip("-")
    return slug[:max_length].rstrip("-") or "site"


def sequence_width(total: int) -> int:
    """Digits needed so every 1-based position up to ``total`` pads to the same width."""
    return max(2, len(str(total)))


def screenshot_name(position: int, label: str, width: int = 2) -> str:
    """Artifact file name for the site at 1-based ``position``."""
    return f"{position:0{width}d}_{safe_slug(label)}.png"
