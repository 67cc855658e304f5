from datetime import datetime, timedelta, timezone

from tagshelf.documents import Document
from tagshelf.feeds import RSSGenerator, TagFeedGenerator, write_feeds
from tagshelf.index import build_index

CONFIG = {"url": "https://blog.example.com/", "title": "Notes & Things", "feed_limit": 20}


def make_post(slug, day, tags=(), **frontmatter):
    return Document(
        path=f"posts/{slug}.md",
        layout="post",
        title=slug.replace("-", " ").title(),
        body=f"# {slug}\n\nAll about {slug}.\n",
        date=datetime(2024, 4, day, 9, 0, tzinfo=timezone(timedelta(hours=2))),
        tags=frozenset(tags),
        url=f"/posts/{slug}/",
        frontmatter=frontmatter,
    )


def make_index():
    return build_index(
        [
            make_post("token-swap", 4, ["blockchains"]),
            make_post("less", 5, ["meta"], description="Fewer things <better>"),
            make_post("no-comments", 8, ["meta"]),
        ]
    )


def test_rss_requires_site_url():
    assert RSSGenerator().generate(make_index().posts, {"url": ""}) is None


def test_rss_items_follow_chronological_view():
    feed = RSSGenerator().generate(make_index().posts, CONFIG)
    assert feed.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert "<title>Notes &amp; Things</title>" in feed
    assert "<link>https://blog.example.com/</link>" in feed
    assert feed.index("posts/no-comments/") < feed.index("posts/less/") < feed.index("posts/token-swap/")
    assert "<lastBuildDate>Mon, 08 Apr 2024 09:00:00 +0200</lastBuildDate>" in feed
    assert "<pubDate>Thu, 04 Apr 2024 09:00:00 +0200</pubDate>" in feed
    assert "<description>Fewer things &lt;better&gt;</description>" in feed
    assert "<description>All about token-swap.</description>" in feed
    assert "<category>meta</category>" in feed


def test_rss_respects_feed_limit():
    feed = RSSGenerator().generate(make_index().posts, {**CONFIG, "feed_limit": 1})
    assert feed.count("<item>") == 1
    assert "posts/no-comments/" in feed


def test_tag_feeds_and_write_feeds(tmp_path):
    index = make_index()
    written = TagFeedGenerator().write(tmp_path, index, CONFIG)
    assert written == ["tags/blockchains/feed.xml", "tags/meta/feed.xml"]
    meta = (tmp_path / "tags" / "meta" / "feed.xml").read_text(encoding="utf-8")
    assert meta.count("<item>") == 2
    assert "<title>Notes &amp; Things: meta</title>" in meta
    assert "<link>https://blog.example.com/tags/meta/</link>" in meta

    out = tmp_path / "site"
    out.mkdir()
    assert write_feeds(out, index, CONFIG)[0] == "feed.xml"
    assert write_feeds(out, index, {"url": ""}) == []
