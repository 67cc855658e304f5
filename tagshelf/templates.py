"""Template rendering engine for Tagshelf.

This module uses Jinja2 to render documents and listing pages. Templates in the
project's ``_layouts`` directory take precedence over the unstyled templates
bundled with the package, so a blog can replace any of them one at a time.

Key class:
- TemplateEngine: Handles template rendering and provides context to templates.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    select_autoescape,
)
from markupsafe import Markup

from .documents import Document
from .index import NavigationIndex
from .utils import join_root_url, tag_slug

__all__ = ["TemplateEngine", "tag_url"]


def tag_url(tag: str) -> str:
    """Return the site-relative URL of a tag's listing page."""
    return f"/tags/{tag_slug(tag)}/"


class TemplateEngine:
    """Template rendering engine using Jinja2.

    Attributes:
        config: Project configuration.
        env: Jinja2 environment.
        index: Navigation index exposed to templates.
    """

    def __init__(self, config: dict[str, Any], layouts_dir: Path | None = None):
        """Initialize the template engine.

        Args:
            config: Project configuration (title, url, ...).
            layouts_dir: Optional directory of templates overriding the bundled ones.
        """
        self.config = config
        loaders = []
        if layouts_dir is not None and layouts_dir.is_dir():
            loaders.append(FileSystemLoader(str(layouts_dir)))
        loaders.append(PackageLoader("tagshelf", "templates"))
        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            keep_trailing_newline=True,
        )
        self.index: NavigationIndex | None = None
        self._install_globals()

    def _install_globals(self) -> None:
        self.env.globals["site"] = self.config
        self.env.globals["url_for"] = self._url_for
        self.env.globals["tag_url"] = tag_url

    def update_index(self, index: NavigationIndex) -> None:
        """Expose the navigation index to templates.

        Args:
            index: The index built for this site.
        """
        self.index = index
        self.env.globals["index"] = index
        self.env.globals["posts"] = index.posts
        self.env.globals["tags"] = index.tags
        self.env.globals["pages"] = index.pages
        self.env.globals["tag_url"] = index.tag_url

    def _url_for(self, path: str) -> str:
        """Generate a URL for a path, applying the site URL if configured.

        Args:
            path: Path to generate URL for.

        Returns:
            Absolute URL when ``url`` is configured, otherwise a root-relative path.
        """
        if path.startswith(("http://", "https://", "//")):
            return path
        base = str(self.config.get("url") or "")
        if base:
            return join_root_url(base, path)
        return path if path.startswith("/") else f"/{path}"

    def render_document(self, document: Document, content: str) -> str:
        """Render a post or page with its layout.

        Args:
            document: Document to render.
            content: The document body already rendered to HTML.

        Returns:
            Rendered HTML string.
        """
        template = self.env.get_template(f"{document.layout}.html.jinja")
        return template.render(document=document, content=Markup(content))

    def render_listing(self, name: str, **context: Any) -> str:
        """Render a listing template (index, tags, tag).

        Args:
            name: Template name without the ``.html.jinja`` suffix.
            **context: Variables for the template.

        Returns:
            Rendered HTML string.
        """
        template = self.env.get_template(f"{name}.html.jinja")
        return template.render(**context)
