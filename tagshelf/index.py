"""Navigation index for Tagshelf.

The navigation index is the derived, read-only view of the content store that
listing pages and feeds are built from:

- the chronological view: posts by date, newest first, ties broken by path;
- the tag view: each tag mapped to the posts carrying it, in the same order;
- the standalone pages, which never appear in either view.

Documents that fail validation are left out of every view and reported in
``NavigationIndex.errors``; the rest of the index still builds.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from .collections import PostCollection, TagCollection, chronological_key
from .documents import Document, Layout
from .errors import ContentError, DuplicatePath, MalformedDocument
from .utils import tag_slug

logger = logging.getLogger(__name__)

LAYOUTS = frozenset(layout.value for layout in Layout)


def validate_document(document: Document) -> None:
    """Check that a document can take part in the navigation index.

    Raises:
        MalformedDocument: If the layout is unknown, the title is empty,
            or a post has no date.
    """
    if document.layout not in LAYOUTS:
        raise MalformedDocument(
            document.path,
            f"unknown layout {document.layout!r} (expected one of: {', '.join(sorted(LAYOUTS))})",
        )
    if not document.title.strip():
        raise MalformedDocument(document.path, "missing required field 'title'")
    if document.is_post and document.date is None:
        raise MalformedDocument(document.path, "missing required field 'date'")


def _page_key(document: Document):
    order = document.frontmatter.get("order")
    if isinstance(order, bool) or not isinstance(order, (int, float)):
        return (1, 0, document.path)
    return (0, order, document.path)


@dataclass(frozen=True)
class NavigationIndex:
    """Derived views over a document set.

    Attributes:
        posts: Chronological view of valid posts.
        tags: Tag view; each bucket in chronological order.
        pages: Valid standalone pages, by front-matter ``order`` then path.
        tag_slugs: URL segment of each tag's listing, unique across tags.
        errors: Content errors for documents left out of the index.
    """

    posts: PostCollection
    tags: TagCollection
    pages: tuple[Document, ...] = ()
    tag_slugs: dict[str, str] = field(default_factory=dict)
    errors: tuple[ContentError, ...] = field(default=(), compare=False)

    @classmethod
    def build(
        cls, documents: Iterable[Document], reserved_urls: Iterable[str] = ()
    ) -> NavigationIndex:
        """Build the index in a single pass over the documents.

        Args:
            documents: The full document set.
            reserved_urls: URLs owned by generated pages. "/" is matched
                exactly, any other entry as a prefix.

        Returns:
            NavigationIndex with the chronological view, tag view and pages.
        """
        errors: list[ContentError] = []
        claimed_paths: set[str] = set()
        claimed_urls: dict[str, str] = {}
        reserved = tuple(reserved_urls)
        posts: list[Document] = []
        pages: list[Document] = []

        # Path order makes the first claimant of a duplicate deterministic.
        for document in sorted(documents, key=lambda d: d.path):
            try:
                validate_document(document)
                _claim(document, claimed_paths, claimed_urls, reserved)
            except ContentError as exc:
                logger.info("Excluding %s from index: %s", exc.source_path, exc.message)
                errors.append(exc)
                continue
            if document.is_post:
                posts.append(document)
            else:
                pages.append(document)

        posts.sort(key=chronological_key)
        buckets: dict[str, list[Document]] = {}
        for post in posts:
            for tag in post.tags:
                buckets.setdefault(tag, []).append(post)

        logger.debug(
            "Indexed %d posts, %d tags, %d pages (%d excluded)",
            len(posts),
            len(buckets),
            len(pages),
            len(errors),
        )
        return cls(
            posts=PostCollection(posts),
            tags=TagCollection(buckets),
            pages=tuple(sorted(pages, key=_page_key)),
            tag_slugs=_assign_tag_slugs(buckets),
            errors=tuple(errors),
        )

    def tag_url(self, tag: str) -> str:
        """Return the site-relative URL of a tag's listing page."""
        return f"/tags/{self.tag_slugs.get(tag) or tag_slug(tag)}/"

    def to_dict(self) -> dict:
        """Serialize the index for external site builders.

        The result contains no build-time values, so serializing an index
        built from unchanged content always gives the same output.
        """
        return {
            "posts": [
                {
                    "path": post.path,
                    "title": post.title,
                    "date": post.date.isoformat(),
                    "url": post.url,
                    "tags": sorted(post.tags),
                }
                for post in self.posts
            ],
            "tags": {tag: [post.path for post in posts] for tag, posts in self.tags.items()},
            "pages": [
                {"path": page.path, "title": page.title, "url": page.url}
                for page in self.pages
            ],
        }


def _assign_tag_slugs(tags: Iterable[str]) -> dict[str, str]:
    """Give each tag its own URL segment.

    Tags whose slugs coincide (``Web`` and ``web``, ``c++`` and ``c``) get a
    numeric suffix in sorted tag order, so no listing overwrites another.
    """
    slugs: dict[str, str] = {}
    taken: set[str] = set()
    for tag in sorted(tags):
        base = tag_slug(tag)
        slug = base
        suffix = 2
        while slug in taken:
            slug = f"{base}-{suffix}"
            suffix += 1
        if slug != base:
            logger.info("Tag %r shares the slug %r; listing it at /tags/%s/", tag, base, slug)
        taken.add(slug)
        slugs[tag] = slug
    return slugs


def _is_reserved(url: str, reserved: tuple[str, ...]) -> bool:
    return any(url == r or (r != "/" and url.startswith(r)) for r in reserved)


def _claim(
    document: Document, paths: set[str], urls: dict[str, str], reserved: tuple[str, ...] = ()
) -> None:
    if document.path in paths:
        raise DuplicatePath(document.path, "another document already uses this path")
    if document.url and _is_reserved(document.url, reserved):
        raise DuplicatePath(document.path, f"URL {document.url} is reserved for generated pages")
    if document.url and document.url in urls:
        existing = urls[document.url]
        raise DuplicatePath(
            document.path,
            f"URL {document.url} is already used by {existing}",
            existing=existing,
        )
    paths.add(document.path)
    if document.url:
        urls[document.url] = document.path


def build_index(documents: Iterable[Document]) -> NavigationIndex:
    """Build a NavigationIndex from a document set."""
    return NavigationIndex.build(documents)
