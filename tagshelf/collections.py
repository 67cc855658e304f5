from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence

from .documents import Document


def chronological_key(document: Document):
    """Sort key placing newer posts first and breaking date ties by path.

    Dates sort descending and paths ascending, so the key negates the
    timestamp instead of sorting in reverse.
    """
    return (-document.date.timestamp(), document.path)


class PostCollection(Sequence[Document]):
    """Ordered, restartable sequence of posts for templates and code.

    The collection keeps the order it was given; iterating it again starts
    from the beginning.
    """

    def __init__(self, posts: Iterable[Document]):
        self._posts = tuple(posts)

    def __iter__(self) -> Iterator[Document]:
        return iter(self._posts)

    def __len__(self) -> int:
        return len(self._posts)

    def __getitem__(self, item):
        if isinstance(item, slice):
            return PostCollection(self._posts[item])
        return self._posts[item]

    def __eq__(self, other) -> bool:
        if isinstance(other, PostCollection):
            return self._posts == other._posts
        return NotImplemented

    __hash__ = None

    def with_tag(self, tag: str) -> PostCollection:
        return PostCollection(p for p in self._posts if tag in p.tags)

    def latest(self, count: int = 5) -> PostCollection:
        return PostCollection(self._posts[:count])

    def by_year(self) -> list[tuple[int, PostCollection]]:
        """Group posts by publication year, keeping their order.

        Returns:
            (year, posts) pairs in the order the years first appear.
        """
        groups: dict[int, list[Document]] = {}
        for post in self._posts:
            groups.setdefault(post.date.year, []).append(post)
        return [(year, PostCollection(posts)) for year, posts in groups.items()]

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"PostCollection({len(self._posts)} posts)"


class TagCollection(Mapping[str, PostCollection]):
    """Mapping of tag name to PostCollection, iterated in sorted tag order."""

    def __init__(self, mapping: Mapping[str, Iterable[Document]]):
        self._mapping = {k: PostCollection(mapping[k]) for k in sorted(mapping)}

    def __getitem__(self, key: str) -> PostCollection:
        return self._mapping[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    def counts(self) -> list[tuple[str, int]]:
        return [(tag, len(posts)) for tag, posts in self._mapping.items()]

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"TagCollection({len(self._mapping)} tags)"
