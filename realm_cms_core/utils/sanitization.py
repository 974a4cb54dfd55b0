"""
Input sanitization for free-text fields.

Translated names and descriptions end up in rendered pages, so markup
characters, ``javascript:`` URLs and inline event handlers are stripped
before anything is stored.
"""

import re
from typing import Optional

from ..constants import FieldLimit

_MARKUP_CHARS = re.compile(r"[<>]")
_JAVASCRIPT_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+=", re.IGNORECASE)
_SLUG_SEPARATORS = re.compile(r"[\s_]+")
_SLUG_INVALID = re.compile(r"[^a-z0-9-]")
_SLUG_DASHES = re.compile(r"-+")


def sanitize_text(text: Optional[str], max_length: int = FieldLimit.NAME_MAX_LENGTH) -> str:
    """Strip markup and script vectors from ``text`` and cap its length."""
    if not text:
        return ""

    cleaned = text.strip()
    cleaned = _MARKUP_CHARS.sub("", cleaned)
    cleaned = _JAVASCRIPT_PROTOCOL.sub("", cleaned)
    cleaned = _EVENT_HANDLER.sub("", cleaned)
    return cleaned.strip()[:max_length]


def sanitize_optional_text(
    text: Optional[str], max_length: int = FieldLimit.DESCRIPTION_MAX_LENGTH
) -> Optional[str]:
    """Like sanitize_text, but an empty result becomes None."""
    cleaned = sanitize_text(text, max_length)
    return cleaned or None


def sanitize_slug(slug: Optional[str]) -> str:
    """Normalize a slug to lowercase letters, digits and single hyphens."""
    if not slug:
        return ""

    cleaned = _SLUG_SEPARATORS.sub("-", slug.lower().strip())
    cleaned = _SLUG_INVALID.sub("", cleaned)
    cleaned = _SLUG_DASHES.sub("-", cleaned).strip("-")
    return cleaned[: FieldLimit.SLUG_MAX_LENGTH]
