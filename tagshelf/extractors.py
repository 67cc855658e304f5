"""Metadata extractors for Tagshelf.

This module splits a source file into its YAML front matter and Markdown body,
then runs a set of field extractors over the result. Each extractor handles a
single piece of document metadata.

Key classes:
- LayoutExtractor: Reads the layout variant, applying the configured default.
- TitleExtractor: Reads the title from front matter, a heading, or the filename.
- DateExtractor: Parses the front-matter date into an aware datetime.
- TagExtractor: Normalizes front-matter tags into a frozenset.
- FootnoteExtractor: Collects footnote definitions from the body.
- CompositeMetadataExtractor: Runs all extractors and merges their results.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml

from .errors import MalformedDocument
from .utils import parse_timestamp, titleize

FRONTMATTER_RE = re.compile(r"^---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|$)", re.DOTALL)
FOOTNOTE_DEF_RE = re.compile(r"^\[\^(?P<marker>[^\]\s]+)\]:[ \t]?(?P<text>.*)$")
FENCE_RE = re.compile(r"^(?P<run>`{3,}|~{3,})(?P<info>.*)$")


def extract_frontmatter(text: str, source: str = "") -> tuple[dict[str, Any], str]:
    """Extract YAML front matter from content.

    Args:
        text: Raw file content.
        source: Document identifier used in error messages.

    Returns:
        Tuple of (front matter dict, remaining content).

    Raises:
        MalformedDocument: If the front matter is not valid YAML or not a mapping.
    """
    text = text.lstrip("\ufeff")
    match = FRONTMATTER_RE.match(text)
    if not match:
        return {}, text
    try:
        data = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as exc:
        raise MalformedDocument(source, f"invalid YAML front matter: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedDocument(
            source, f"front matter must be a mapping, got {type(data).__name__}"
        )
    return data, text[match.end() :]


def extract_footnotes(body: str, source: str = "") -> tuple[tuple[str, str], ...]:
    """Collect footnote definitions from a Markdown body.

    A definition is a line ``[^marker]: text``; following lines indented by
    a tab or at least four spaces continue it. Definitions inside fenced code
    blocks are ignored.

    Returns:
        (marker, text) pairs in definition order.

    Raises:
        MalformedDocument: If a marker is defined twice.
    """
    notes: list[list[str]] = []
    seen: set[str] = set()
    current: list[str] | None = None
    fence: str | None = None

    for line in body.splitlines():
        fence_match = FENCE_RE.match(line.lstrip())
        if fence_match:
            run = fence_match.group("run")
            if fence is None:
                fence = run
            elif (
                run[0] == fence[0]
                and len(run) >= len(fence)
                and not fence_match.group("info").strip()
            ):
                fence = None
            current = None
            continue
        if fence is not None:
            continue

        match = FOOTNOTE_DEF_RE.match(line)
        if match:
            marker = match.group("marker")
            if marker in seen:
                raise MalformedDocument(source, f"duplicate footnote marker [^{marker}]")
            seen.add(marker)
            current = [marker, match.group("text").strip()]
            notes.append(current)
        elif current is not None and line.startswith(("\t", "    ")) and line.strip():
            current[1] = f"{current[1]} {line.strip()}".strip()
        elif line.strip():
            current = None

    return tuple((marker, text) for marker, text in notes)


class LayoutExtractor:
    """Reads the layout variant from front matter.

    Unknown values pass through unchanged; the navigation index rejects them.
    """

    def __init__(self, default_layout: str = "post"):
        self.default_layout = default_layout

    def extract(self, frontmatter: dict[str, Any], body: str, path: Path, source: str) -> dict[str, Any]:
        layout = frontmatter.get("layout", self.default_layout)
        return {"layout": str(layout).strip() if layout is not None else ""}


class TitleExtractor:
    """Extracts the title from front matter, a level-1 heading, or the filename."""

    def extract(self, frontmatter: dict[str, Any], body: str, path: Path, source: str) -> dict[str, Any]:
        title = frontmatter.get("title")
        if title is not None:
            return {"title": str(title).strip()}
        for line in body.splitlines():
            stripped = line.strip()
            if stripped.startswith("# "):
                return {"title": stripped.lstrip("# ").strip()}
        return {"title": titleize(path.name)}


class DateExtractor:
    """Parses the front-matter date.

    A missing date yields None; whether that is acceptable depends on the
    layout and is decided by the navigation index.
    """

    def extract(self, frontmatter: dict[str, Any], body: str, path: Path, source: str) -> dict[str, Any]:
        raw = frontmatter.get("date")
        if raw is None or raw == "":
            return {"date": None}
        try:
            return {"date": parse_timestamp(raw)}
        except ValueError as exc:
            raise MalformedDocument(source, f"unparsable date: {exc}") from exc


class TagExtractor:
    """Normalizes front-matter tags.

    Tags may be a YAML sequence or a whitespace-separated string.
    """

    def extract(self, frontmatter: dict[str, Any], body: str, path: Path, source: str) -> dict[str, Any]:
        raw = frontmatter.get("tags")
        if raw is None:
            return {"tags": frozenset()}
        if isinstance(raw, str):
            items = raw.split()
        elif isinstance(raw, (list, tuple, set)):
            items = []
            for item in raw:
                if isinstance(item, (dict, list)):
                    raise MalformedDocument(source, f"tag must be a string, got {type(item).__name__}")
                items.append(str(item).strip())
        else:
            raise MalformedDocument(
                source, f"tags must be a sequence of strings, got {type(raw).__name__}"
            )
        return {"tags": frozenset(item for item in items if item)}


class FootnoteExtractor:
    """Collects the document's footnote definitions."""

    def extract(self, frontmatter: dict[str, Any], body: str, path: Path, source: str) -> dict[str, Any]:
        return {"footnotes": extract_footnotes(body, source)}


class CompositeMetadataExtractor:
    """Splits front matter from the body and runs every field extractor.

    Later extractors can override keys set by earlier ones.
    """

    def __init__(self, extractors: list | None = None, default_layout: str = "post"):
        """Initialize with a list of extractors.

        Args:
            extractors: Field extractors. If None, uses the default set.
            default_layout: Layout applied when front matter has none.
        """
        if extractors is None:
            self._extractors = [
                LayoutExtractor(default_layout),
                TitleExtractor(),
                DateExtractor(),
                TagExtractor(),
                FootnoteExtractor(),
            ]
        else:
            self._extractors = list(extractors)

    def add_extractor(self, extractor) -> None:
        self._extractors.append(extractor)

    def extract(self, content: str, path: Path, source: str) -> dict[str, Any]:
        """Extract all metadata from a raw source file.

        Args:
            content: Raw file content.
            path: Path to the source file.
            source: Document identifier used in error messages.

        Returns:
            Dictionary with 'frontmatter', 'body' and every extracted field.

        Raises:
            MalformedDocument: If any extractor rejects the content.
        """
        frontmatter, body = extract_frontmatter(content, source)
        result: dict[str, Any] = {"frontmatter": frontmatter, "body": body}
        for extractor in self._extractors:
            result.update(extractor.extract(frontmatter, body, path, source))
        return result
