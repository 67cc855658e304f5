"""Content store for Tagshelf.

This module handles discovery and loading of Markdown source files. It extracts
front-matter metadata and creates Document objects representing posts and pages.

Key classes:
- Document: Dataclass representing one source document.
- Footnote: A footnote definition local to one document.
- FileContentLoader: Discovers content files in a directory.
- UrlDeriver: Derives site-relative URLs for documents.
- DocumentBuilder: Builds Document instances from source files.
- ContentStore: Facade that loads every document, collecting content errors.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from .errors import ContentError, MalformedDocument
from .extractors import CompositeMetadataExtractor
from .utils import is_markdown, slugify

logger = logging.getLogger(__name__)


class Layout(str, Enum):
    """Recognized document layouts."""

    POST = "post"
    PAGE = "page"


@dataclass(frozen=True)
class Footnote:
    """A footnote definition.

    Attributes:
        marker: Marker used by inline references, e.g. ``1`` for ``[^1]``.
        text: Footnote text (Markdown).
    """

    marker: str
    text: str


@dataclass(frozen=True)
class Document:
    """Represents a source document with its metadata and Markdown body.

    Attributes:
        path: Identifier of the source file, relative to the content directory.
        layout: Layout variant, ``post`` or ``page``.
        title: Human-readable title.
        body: Markdown body with the front matter removed.
        date: Publication timestamp (posts only).
        tags: Tags declared by the post.
        footnotes: Footnote definitions in definition order.
        slug: URL-friendly slug.
        url: Site-relative URL.
        draft: Whether the source file is a draft.
        frontmatter: Full front-matter mapping, including presentation-only keys.
    """

    path: str
    layout: str
    title: str
    body: str = ""
    date: datetime | None = None
    tags: frozenset[str] = frozenset()
    footnotes: tuple[Footnote, ...] = ()
    slug: str = ""
    url: str = ""
    draft: bool = False
    frontmatter: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def is_post(self) -> bool:
        return self.layout == Layout.POST.value

    @property
    def is_page(self) -> bool:
        return self.layout == Layout.PAGE.value

    @property
    def folder(self) -> str:
        parent = Path(self.path).parent
        return "" if parent == Path(".") else parent.as_posix()


@dataclass
class LoadResult:
    """Result of loading a content directory.

    Attributes:
        documents: Documents that parsed successfully, in path order.
        errors: Content errors for files that could not be parsed.
    """

    documents: list[Document]
    errors: list[ContentError] = field(default_factory=list)


class FileContentLoader:
    """Discovers Markdown files in a content directory.

    Directories whose name starts with an underscore (layouts and the like)
    are skipped. Files whose name starts with an underscore are drafts.

    Attributes:
        content_dir: Directory containing the content.
    """

    def __init__(self, content_dir: Path):
        self.content_dir = content_dir

    def iter_files(self, include_drafts: bool = False) -> list[Path]:
        """List all content files in a stable order.

        Args:
            include_drafts: Whether to include draft files.

        Returns:
            Sorted list of paths to Markdown files.
        """
        files: list[Path] = []
        for path in self.content_dir.rglob("*"):
            if path.is_dir():
                continue
            rel = path.relative_to(self.content_dir)
            if any(part.startswith(("_", ".")) for part in rel.parts[:-1]):
                continue
            if rel.name.startswith("_") and not include_drafts:
                continue
            if is_markdown(path):
                files.append(path)
        return sorted(files, key=lambda p: p.relative_to(self.content_dir).as_posix())


class UrlDeriver:
    """Derives site-relative URLs for documents.

    Documents map to ``/<folder>/<slug>/``; ``index`` files map to their
    folder. Posts use the permalink pattern when one is configured.

    Attributes:
        permalink: Optional pattern with ``{year}``, ``{month}``, ``{day}``,
            ``{slug}`` and ``{folder}`` placeholders.
    """

    def __init__(self, permalink: str | None = None):
        self.permalink = permalink

    def derive(self, rel: Path, slug: str, layout: str, date: datetime | None) -> str:
        folder = "" if rel.parent == Path(".") else rel.parent.as_posix()
        if self.permalink and layout == Layout.POST.value and date is not None:
            path = self.permalink.format(
                year=f"{date.year:04d}",
                month=f"{date.month:02d}",
                day=f"{date.day:02d}",
                slug=slug,
                folder=folder,
            )
            path = "/".join(part for part in path.split("/") if part)
            return f"/{path}/" if path else "/"

        segments = [p for p in rel.parent.parts if p]
        url_parts = segments if slug == "index" else segments + [slug]
        path = "/".join(url_parts)
        return f"/{path}/" if path else "/"


class DocumentBuilder:
    """Builds Document objects from source files.

    Attributes:
        content_dir: Directory containing the content.
        metadata_extractor: Composite metadata extractor.
        url_deriver: URL deriver instance.
    """

    def __init__(
        self,
        content_dir: Path,
        metadata_extractor: CompositeMetadataExtractor | None = None,
        url_deriver: UrlDeriver | None = None,
    ):
        self.content_dir = content_dir
        self.metadata_extractor = metadata_extractor or CompositeMetadataExtractor()
        self.url_deriver = url_deriver or UrlDeriver()

    def build(self, path: Path, draft: bool = False) -> Document:
        """Build a Document from a source file.

        Args:
            path: Path to the source file.
            draft: Whether this is a draft document.

        Returns:
            Document object.

        Raises:
            MalformedDocument: If the front matter or one of its fields is invalid,
                including a declared slug that is not URL-safe.
        """
        rel = path.relative_to(self.content_dir)
        source = rel.as_posix()
        raw = path.read_text(encoding="utf-8")
        metadata = self.metadata_extractor.extract(raw, path, source)

        layout = metadata.get("layout", "")
        date = metadata.get("date")
        declared = metadata["frontmatter"].get("slug")
        slug = _declared_slug(declared, source) if declared else slugify(path.stem)

        return Document(
            path=source,
            layout=layout,
            title=metadata.get("title", ""),
            body=metadata.get("body", raw),
            date=date,
            tags=metadata.get("tags", frozenset()),
            footnotes=tuple(
                Footnote(marker, text) for marker, text in metadata.get("footnotes", ())
            ),
            slug=slug,
            url=self.url_deriver.derive(rel, slug, layout, date),
            draft=draft,
            frontmatter=metadata["frontmatter"],
        )


def _declared_slug(value: Any, source: str) -> str:
    """Return a front-matter slug, which must already be URL-safe."""
    slug = str(value).strip()
    if slugify(slug, strip_date=False) != slug:
        raise MalformedDocument(
            source, f"invalid slug {slug!r}: use lowercase letters, digits and hyphens"
        )
    return slug

class ContentStore:
    """Loads every document in a content directory.

    A file that cannot be parsed is reported in the result and skipped;
    loading never stops on a content error.

    Attributes:
        content_dir: Directory containing the content.
    """

    def __init__(
        self,
        content_dir: Path,
        content_loader: FileContentLoader | None = None,
        document_builder: DocumentBuilder | None = None,
    ):
        self.content_dir = content_dir
        self._content_loader = content_loader or FileContentLoader(content_dir)
        self._document_builder = document_builder or DocumentBuilder(content_dir)

    @classmethod
    def from_config(cls, content_dir: Path, config: dict[str, Any]) -> ContentStore:
        """Create a store whose builder honors the project configuration."""
        builder = DocumentBuilder(
            content_dir,
            metadata_extractor=CompositeMetadataExtractor(
                default_layout=str(config.get("default_layout") or Layout.POST.value)
            ),
            url_deriver=UrlDeriver(config.get("permalink")),
        )
        return cls(content_dir, document_builder=builder)

    def load(self, include_drafts: bool = False) -> LoadResult:
        """Load all content files.

        Args:
            include_drafts: Whether to include draft documents.

        Returns:
            LoadResult with the parsed documents and any content errors.
        """
        result = LoadResult(documents=[])
        for path in self._content_loader.iter_files(include_drafts):
            draft = path.name.startswith("_")
            try:
                document = self._document_builder.build(path, draft=draft)
            except ContentError as exc:
                logger.info("Skipping %s: %s", exc.source_path, exc.message)
                result.errors.append(exc)
                continue
            except UnicodeDecodeError as exc:
                source = path.relative_to(self.content_dir).as_posix()
                error = MalformedDocument(source, f"not valid UTF-8: {exc.reason}")
                logger.info("Skipping %s: %s", source, error.message)
                result.errors.append(error)
                continue
            logger.debug("Loaded %s (%s)", document.path, document.layout)
            result.documents.append(document)
        return result
