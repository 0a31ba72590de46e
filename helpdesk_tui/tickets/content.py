"""Text helpers shared by ticket and followup rendering."""

from __future__ import annotations

import html
import re
from datetime import datetime

DISPLAY_FORMAT = "%d/%m/%y %H:%M"

_SQL_FORMAT = "%Y-%m-%d %H:%M:%S"
_LINE_BREAK_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_PARAGRAPH_END_RE = re.compile(r"</p\s*>", re.IGNORECASE)
_TAG_RE = re.compile(r"</?[A-Za-z!][^>]*>")


def _clean_pass(text: str) -> str:
    # Content is stored escaped, so the basic entities are decoded before tags
    # can be recognised.
    cleaned = text.replace("&lt;", "<").replace("&gt;", ">").replace("&amp;", "&")
    cleaned = _LINE_BREAK_RE.sub("\n", cleaned)
    cleaned = _PARAGRAPH_END_RE.sub("\n\n", cleaned)
    cleaned = _TAG_RE.sub("", cleaned)
    cleaned = html.unescape(cleaned)
    return cleaned.strip()


def clean_html(text: str) -> str:
    """Turn the API's (often escaped) HTML content into plain text.

    Passes repeat until the text is stable, so markup hidden behind numeric or
    repeated escaping is removed too and cleaning clean text changes nothing.
    """

    if not text:
        return ""
    # Every change shortens the text, so this terminates.
    cleaned = text
    while True:
        next_pass = _clean_pass(cleaned)
        if next_pass == cleaned:
            return cleaned
        cleaned = next_pass


def parse_timestamp(value: str) -> datetime | None:
    """Parse the timestamp shapes the API emits, returning ``None`` when unknown."""

    if not value:
        return None
    candidate = value.strip()
    try:
        return datetime.strptime(candidate, _SQL_FORMAT)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(candidate.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_timestamp(value: str) -> str:
    """Format a timestamp as ``DD/MM/YY HH:MM`` in its own clock.

    Unparsable input is returned unchanged.
    """

    parsed = parse_timestamp(value)
    if parsed is None:
        return value
    return parsed.strftime(DISPLAY_FORMAT)
