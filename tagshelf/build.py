"""Site building functionality for Tagshelf.

This module loads the content store, builds the navigation index, and writes
the static site: one page per document, the chronological listing, the tag
listings, feeds, the ``index.json`` export and the static assets.

Content errors never stop a build. Documents that fail to load or to index
are reported in the result and left out of the output.

Key functions:
- load_index: Load the content store and build the navigation index.
- build_site: Build the entire site into the output directory.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from jinja2 import TemplateError, TemplateSyntaxError

from .assets import AssetPipeline
from .config import load_config
from .documents import ContentStore, Document
from .errors import BuildError, ContentError
from .feeds import write_feeds
from .index import NavigationIndex
from .renderers import MarkdownRenderer
from .templates import TemplateEngine
from .utils import ensure_clean_dir

logger = logging.getLogger(__name__)

INDEX_EXPORT = "index.json"

# Written by the listing pages; "/" is reserved exactly, the others as prefixes.
RESERVED_URLS = ("/", "/tags/")


@dataclass
class IndexResult:
    """Result of loading and indexing a project's content.

    Attributes:
        config: Project configuration.
        index: Navigation index built from the loaded documents.
        errors: Every content error, from loading and from indexing.
    """

    config: dict[str, Any]
    index: NavigationIndex
    errors: list[ContentError] = field(default_factory=list)


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        index: Navigation index the site was built from.
        output_dir: Directory where the site was built.
        config: Project configuration.
        errors: Content errors for documents left out of the site.
        written: Output-relative paths of the files written, excluding assets.
    """

    index: NavigationIndex
    output_dir: Path
    config: dict[str, Any]
    errors: list[ContentError] = field(default_factory=list)
    written: list[str] = field(default_factory=list)


def load_index(
    project_root: Path,
    include_drafts: bool = False,
    config: dict[str, Any] | None = None,
) -> IndexResult:
    """Load the project's documents and build the navigation index.

    Args:
        project_root: Root directory of the project.
        include_drafts: Whether to include draft documents.
        config: Configuration to use instead of reading tagshelf.yaml.

    Returns:
        IndexResult with the configuration, index and content errors.

    Raises:
        FileNotFoundError: If the content directory does not exist.
        ConfigError: If tagshelf.yaml is invalid.
    """
    config = config if config is not None else load_config(project_root)
    content_dir = project_root / str(config.get("content_dir", "content"))
    if not content_dir.is_dir():
        raise FileNotFoundError(f"Expected content directory at {content_dir}")

    loaded = ContentStore.from_config(content_dir, config).load(include_drafts=include_drafts)
    index = NavigationIndex.build(loaded.documents, reserved_urls=RESERVED_URLS)
    return IndexResult(
        config=config,
        index=index,
        errors=[*loaded.errors, *index.errors],
    )


def build_site(
    project_root: Path,
    include_drafts: bool = False,
    output_dir_override: Path | None = None,
) -> BuildResult:
    """Build the entire static site.

    Args:
        project_root: Root directory of the project.
        include_drafts: Whether to include draft documents (starting with _).
        output_dir_override: Optional path to write the build output instead of config output_dir.

    Returns:
        BuildResult containing the index, output directory and content errors.

    Raises:
        BuildError: If a template fails while rendering a document or listing.
    """
    loaded = load_index(project_root, include_drafts=include_drafts)
    config = loaded.config
    index = loaded.index
    content_dir = project_root / str(config.get("content_dir", "content"))
    output_dir = output_dir_override or (project_root / str(config.get("output_dir", "output")))
    ensure_clean_dir(output_dir)

    engine = TemplateEngine(config, layouts_dir=content_dir / "_layouts")
    engine.update_index(index)
    renderer = MarkdownRenderer()
    written: list[str] = []

    for document in [*index.posts, *index.pages]:
        html = _render(document.path, lambda: _render_document(engine, renderer, document))
        written.append(_write_page(output_dir, document.url, html))

    written.append(
        _write_page(output_dir, "/", _render("index", lambda: engine.render_listing("index")))
    )
    written.append(
        _write_page(output_dir, "/tags/", _render("tags", lambda: engine.render_listing("tags")))
    )
    for tag, posts in index.tags.items():
        html = _render(f"tags/{tag}", lambda: engine.render_listing("tag", tag=tag, tagged=posts))
        written.append(_write_page(output_dir, index.tag_url(tag), html))

    (output_dir / INDEX_EXPORT).write_text(
        json.dumps(index.to_dict(), indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
    )
    written.append(INDEX_EXPORT)
    written.extend(write_feeds(output_dir, index, config))

    assets_dir = project_root / str(config.get("assets_dir", "assets"))
    AssetPipeline(assets_dir, output_dir).run()

    for error in loaded.errors:
        logger.info("Left out of site: %s", error)
    logger.info("Wrote %d files into %s", len(written), output_dir)
    return BuildResult(
        index=index,
        output_dir=output_dir,
        config=config,
        errors=loaded.errors,
        written=written,
    )


def _render_document(engine: TemplateEngine, renderer: MarkdownRenderer, document: Document) -> str:
    return engine.render_document(document, renderer.render(document.body))


def _render(source: str, render) -> str:
    """Run a render callable, wrapping template failures in BuildError."""
    try:
        return render()
    except TemplateSyntaxError as exc:
        raise BuildError(
            source,
            f"Template syntax error in {exc.name or 'template'} on line {exc.lineno}: {exc.message}",
            exc,
        ) from exc
    except TemplateError as exc:
        raise BuildError(source, _format_error_message(exc), exc) from exc


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    error_type = type(exc).__name__
    if error_type == "UndefinedError":
        return f"Undefined variable: {exc}"
    if error_type == "TemplateNotFound":
        return f"Template not found: {exc}"
    return f"{error_type}: {exc}"


def _write_page(output_dir: Path, url: str, rendered: str) -> str:
    """Write a rendered page to ``<url>/index.html`` under the output directory.

    Returns:
        Output-relative path of the written file.
    """
    url_path = url.strip("/")
    target_dir = output_dir / url_path if url_path else output_dir
    target_dir.mkdir(parents=True, exist_ok=True)
    (target_dir / "index.html").write_text(rendered, encoding="utf-8")
    return f"{url_path}/index.html" if url_path else "index.html"

