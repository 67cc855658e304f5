"""Feed generation for Tagshelf.

This module generates RSS 2.0 feeds from the navigation index: one feed for
the whole blog and one per tag. Feeds need an absolute site URL and are
skipped when ``url`` is not configured.

Feeds carry no wall-clock values (``lastBuildDate`` is the newest post's
date), so rebuilding unchanged content writes identical files.

Classes:
    FeedGenerator: Base class for feed generators.
    RSSGenerator: Generates an RSS feed for a sequence of posts.
    TagFeedGenerator: Generates one RSS feed per tag.

Functions:
    write_feeds: Write every feed for an index.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .utils import escape_html, first_paragraph, join_root_url

if TYPE_CHECKING:
    from .documents import Document
    from .index import NavigationIndex

RFC822 = "%a, %d %b %Y %H:%M:%S %z"


class FeedGenerator(ABC):
    """Abstract base class for feed generators."""

    @abstractmethod
    def write(self, output_dir: Path, index: NavigationIndex, config: dict[str, Any]) -> list[str]:
        """Generate and write feeds to the output directory.

        Args:
            output_dir: Directory to write feed files to.
            index: Navigation index to read posts from.
            config: Project configuration.

        Returns:
            Output-relative paths of the files written.
        """
        ...


class RSSGenerator(FeedGenerator):
    """Generates the RSS 2.0 feed for the chronological view.

    Requires ``url`` in config. Uses ``title`` and ``description`` for the
    channel and ``feed_limit`` to cap the number of items.
    """

    filename = "feed.xml"

    def generate(
        self,
        posts: Iterable[Document],
        config: dict[str, Any],
        title: str | None = None,
        link: str = "/",
    ) -> str | None:
        """Generate RSS feed content.

        Args:
            posts: Posts in chronological-view order.
            config: Project configuration containing 'url'.
            title: Channel title; defaults to the site title.
            link: Site-relative URL of the channel's HTML page.

        Returns:
            RSS XML content, or None if no base URL is configured.
        """
        base_url = str(config.get("url") or "").rstrip("/")
        if not base_url:
            return None

        limit = int(config.get("feed_limit") or 0)
        selected = list(posts)
        if limit > 0:
            selected = selected[:limit]

        channel_title = title or config.get("title") or "Feed"
        description = config.get("description") or channel_title
        rss = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<rss version="2.0"><channel>',
            f"<title>{escape_html(str(channel_title))}</title>",
            f"<link>{escape_html(join_root_url(base_url, link))}</link>",
            f"<description>{escape_html(str(description))}</description>",
        ]
        if selected:
            rss.append(f"<lastBuildDate>{selected[0].date.strftime(RFC822)}</lastBuildDate>")

        for post in selected:
            url = escape_html(join_root_url(base_url, post.url))
            summary = post.frontmatter.get("description") or first_paragraph(post.body) or post.title
            categories = "".join(
                f"<category>{escape_html(tag)}</category>" for tag in sorted(post.tags)
            )
            rss.append(
                f"<item><title>{escape_html(post.title)}</title><link>{url}</link>"
                f'<guid isPermaLink="true">{url}</guid>'
                f"<description>{escape_html(str(summary))}</description>"
                f"{categories}<pubDate>{post.date.strftime(RFC822)}</pubDate></item>"
            )
        rss.append("</channel></rss>")
        return "\n".join(rss) + "\n"

    def write(self, output_dir: Path, index: NavigationIndex, config: dict[str, Any]) -> list[str]:
        content = self.generate(index.posts, config)
        if content is None:
            return []
        (output_dir / self.filename).write_text(content, encoding="utf-8")
        return [self.filename]


class TagFeedGenerator(FeedGenerator):
    """Generates ``tags/<tag>/feed.xml`` for every tag in the index."""

    def __init__(self, rss: RSSGenerator | None = None):
        self.rss = rss or RSSGenerator()

    def write(self, output_dir: Path, index: NavigationIndex, config: dict[str, Any]) -> list[str]:
        written = []
        site_title = config.get("title") or "Feed"
        for tag, posts in index.tags.items():
            listing = index.tag_url(tag)
            content = self.rss.generate(posts, config, title=f"{site_title}: {tag}", link=listing)
            if content is None:
                return []
            target = output_dir / listing.strip("/")
            target.mkdir(parents=True, exist_ok=True)
            (target / "feed.xml").write_text(content, encoding="utf-8")
            written.append(f"{listing.strip('/')}/feed.xml")
        return written


def write_feeds(output_dir: Path, index: NavigationIndex, config: dict[str, Any]) -> list[str]:
    """Write the site feed and every tag feed.

    Returns:
        Output-relative paths of the files written.
    """
    written: list[str] = []
    for generator in (RSSGenerator(), TagFeedGenerator()):
        written.extend(generator.write(output_dir, index, config))
    return written
