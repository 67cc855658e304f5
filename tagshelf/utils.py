"""String, path and date helpers shared by the loader, index and writers."""

from __future__ import annotations

import re
import shutil
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path

MARKDOWN_SUFFIXES = {".md", ".markdown"}

# 2024-04-04, 2024-04-04T10:30, 2024-04-04 10:30:00 +0200, 2024-04-04T10:30:00.5Z
TIMESTAMP_RE = re.compile(
    r"^(?P<year>\d{4})-(?P<month>\d{1,2})-(?P<day>\d{1,2})"
    r"(?:[Tt ]+(?P<hour>\d{1,2}):(?P<minute>\d{2})"
    r"(?::(?P<second>\d{2})(?:\.(?P<fraction>\d+))?)?)?"
    r"\s*(?P<tz>[Zz]|[-+]\d{2}(?::?\d{2})?)?$"
)


def _strip_date_prefix(name: str) -> str:
    parts = name.split("-")
    if len(parts) >= 4 and all(p.isdigit() for p in parts[:3]):
        return "-".join(parts[3:])
    return name


def slugify(name: str, strip_date: bool = True) -> str:
    """Return the URL slug for a file stem; a YYYY-MM-DD- prefix is dropped."""
    cleaned = _strip_date_prefix(name) if strip_date else name
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "-", cleaned)
    cleaned = cleaned.strip("-").lower()
    return cleaned or "index"


def tag_slug(tag: str) -> str:
    """Convert a tag to a URL path segment.

    Unlike slugify, a leading date-like prefix is kept and unicode
    word characters survive.

    Examples:
        >>> tag_slug("Web Frontend")
        'web-frontend'
    """
    cleaned = re.sub(r"[^\w]+", "-", tag.lower(), flags=re.UNICODE)
    return cleaned.strip("-_") or "tag"


def titleize(filename: str) -> str:
    """Fallback title for documents that declare none.

    Examples:
        >>> titleize("2024-04-04-token-swap.md")
        'Token Swap'
    """
    base = _strip_date_prefix(Path(filename).stem)
    words = re.split(r"[\s\-_]+", base)
    return " ".join(word.capitalize() for word in words if word) or "Untitled"


def _parse_offset(value: str | None) -> timezone:
    if not value or value in ("Z", "z"):
        return timezone.utc
    sign = -1 if value[0] == "-" else 1
    digits = value[1:].replace(":", "")
    hours = int(digits[:2])
    minutes = int(digits[2:4]) if len(digits) > 2 else 0
    if hours > 23 or minutes > 59:
        raise ValueError(f"invalid UTC offset: {value}")
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def parse_timestamp(value: object) -> datetime:
    """Parse a front-matter date into a timezone-aware datetime.

    Accepts datetime and date objects (as produced by YAML) and strings in
    ISO-8601-like form, including the ``YYYY-MM-DD HH:MM:SS +HHMM`` form.
    Naive values are taken to be UTC; a bare date means midnight UTC.

    Raises:
        ValueError: If the value cannot be interpreted as a timestamp.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, date):
        return datetime.combine(value, time(0, 0), tzinfo=timezone.utc)
    if not isinstance(value, str):
        raise ValueError(f"expected a timestamp, got {type(value).__name__}")

    match = TIMESTAMP_RE.match(value.strip())
    if not match:
        raise ValueError(f"unrecognized timestamp: {value!r}")
    fraction = (match.group("fraction") or "0")[:6].ljust(6, "0")
    return datetime(
        int(match.group("year")),
        int(match.group("month")),
        int(match.group("day")),
        int(match.group("hour") or 0),
        int(match.group("minute") or 0),
        int(match.group("second") or 0),
        int(fraction),
        tzinfo=_parse_offset(match.group("tz")),
    )


def first_paragraph(text: str, limit: int = 160) -> str:
    """Extract and clean the first prose paragraph of a Markdown body.

    Skips headings, images, code fences and footnote definitions, strips
    HTML tags and footnote references, and collapses whitespace.

    Args:
        text: Markdown text.
        limit: Maximum length of the summary.

    Returns:
        The summary, or an empty string when the body has no prose.
    """
    for para in (p.strip() for p in text.split("\n\n")):
        if not para or para.startswith(("#", "![", "```", "~~~", "[^", "---", "<")):
            continue
        para = re.sub(r"<[^>]+>", "", para)
        para = re.sub(r"\[\^[^\]]+\]", "", para)
        para = re.sub(r"!?\[([^\]]*)\]\([^)]*\)", r"\1", para)
        collapsed = " ".join(para.split())
        return collapsed[:limit]
    return ""


def is_markdown(path: Path) -> bool:
    """True for .md and .markdown files, in any case."""
    return path.suffix.lower() in MARKDOWN_SUFFIXES


def ensure_clean_dir(path: Path) -> None:
    """Remove path if present and recreate it empty."""
    if path.exists():
        shutil.rmtree(str(path))
    path.mkdir(parents=True, exist_ok=True)


def join_root_url(root_url: str, path: str) -> str:
    """Prefix a site-relative path with the configured site URL.

    Examples:
        >>> join_root_url("https://notes.example.com/", "tags/")
        'https://notes.example.com/tags/'
    """
    if not root_url:
        return path
    base = root_url.rstrip("/")
    suffix = path if path.startswith("/") else f"/{path}"
    return f"{base}{suffix}"


def escape_html(text: str) -> str:
    """Escape text for HTML and XML bodies and attribute values."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )
