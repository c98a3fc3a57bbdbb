from __future__ import annotations

import re
import unicodedata
from typing import Any, Optional

from markupsafe import Markup

HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")
_FONT_RE = re.compile(r"^[A-Za-z0-9 \-]{1,60}$")


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _strip_tags(text: str) -> str:
    # striptags decodes entities, so "&lt;b&gt;" only turns into a tag after one pass
    while True:
        stripped = str(Markup(text).striptags())
        if stripped == text:
            return stripped
        text = stripped


def sanitize_text_field(value: Any) -> str:
    """Single-line text: tags, control characters and line breaks removed, whitespace collapsed.

    Idempotent: sanitizing the result again returns it unchanged.
    """
    return _strip_tags(_CONTROL_RE.sub("", _text(value)))


def sanitize_textarea_field(value: Any) -> str:
    """Like sanitize_text_field but keeps line breaks."""
    raw = _CONTROL_RE.sub("", _text(value)).replace("\r\n", "\n").replace("\r", "\n")
    lines = [_strip_tags(line) for line in raw.split("\n")]
    return "\n".join(lines).strip()


def sanitize_hex_color(value: Any, default: str) -> str:
    raw = _text(value).strip()
    return raw if HEX_COLOR_RE.match(raw) else default


def sanitize_title(value: Any, fallback: str = "") -> str:
    """URL and filesystem safe slug: 'Café & Co.' -> 'cafe-co'."""
    raw = sanitize_text_field(value)
    ascii_only = unicodedata.normalize("NFKD", raw).encode("ascii", "ignore").decode("ascii")
    slug = _NON_SLUG_RE.sub("-", ascii_only.lower()).strip("-")
    return slug or fallback


def sanitize_font_name(value: Any) -> Optional[str]:
    clean = sanitize_text_field(value).strip("\"'")
    if not clean or not _FONT_RE.match(clean):
        return None
    return clean


def comment_safe(value: str) -> str:
    """Keep a value from closing a CSS comment block."""
    return value.replace("*/", "* /")
