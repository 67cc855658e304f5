from datetime import date, datetime, timedelta, timezone

import pytest

from tagshelf import utils


def test_slugify_and_titleize_strip_date_prefix():
    assert utils.slugify("2024-04-04-token-swap") == "token-swap"
    assert utils.slugify("Mixed_Case Slug") == "mixed-case-slug"
    assert utils.slugify("!!!") == "index"
    assert utils.titleize("2024-04-04-token-swap.md") == "Token Swap"
    assert utils.titleize("about.md") == "About"


def test_tag_slug():
    assert utils.tag_slug("Web Frontend") == "web-frontend"
    assert utils.tag_slug("aws") == "aws"
    assert utils.tag_slug("???") == "tag"


def test_parse_timestamp_with_offsets():
    jekyll = utils.parse_timestamp("2024-04-04 12:30:00 +0200")
    assert jekyll == datetime(2024, 4, 4, 12, 30, tzinfo=timezone(timedelta(hours=2)))
    assert jekyll.utcoffset() == timedelta(hours=2)

    iso = utils.parse_timestamp("2024-04-21T08:00:00Z")
    assert iso == datetime(2024, 4, 21, 8, 0, tzinfo=timezone.utc)

    colon = utils.parse_timestamp("2024-05-16T09:15:00.25-05:30")
    assert colon.utcoffset() == -timedelta(hours=5, minutes=30)
    assert colon.microsecond == 250000


def test_parse_timestamp_naive_values_are_utc():
    assert utils.parse_timestamp("2024-04-08") == datetime(2024, 4, 8, tzinfo=timezone.utc)
    assert utils.parse_timestamp(date(2024, 4, 8)) == datetime(2024, 4, 8, tzinfo=timezone.utc)
    naive = utils.parse_timestamp(datetime(2024, 4, 8, 10, 0))
    assert naive.tzinfo is timezone.utc

    aware = datetime(2024, 4, 8, 10, 0, tzinfo=timezone(timedelta(hours=1)))
    assert utils.parse_timestamp(aware) is aware


@pytest.mark.parametrize("value", ["yesterday", "2024-13-01", "2024-04-04 25:00", 12345, None])
def test_parse_timestamp_rejects_garbage(value):
    with pytest.raises(ValueError):
        utils.parse_timestamp(value)


def test_first_paragraph_skips_headings_and_strips_markup():
    text = (
        "# Title\n\n![cover](cover.png)\n\n"
        "Hello [world](https://example.com) and a <em>note</em>[^1].\n\n"
        "[^1]: The note."
    )
    assert utils.first_paragraph(text) == "Hello world and a note."
    assert utils.first_paragraph("") == ""
    assert utils.first_paragraph("word " * 100, limit=10) == "word word "


def test_ensure_clean_dir_and_urls(tmp_path):
    target = tmp_path / "build"
    (target / "nested").mkdir(parents=True)
    (target / "nested" / "old.txt").write_text("old", encoding="utf-8")
    utils.ensure_clean_dir(target)
    assert target.exists() and list(target.iterdir()) == []

    missing = tmp_path / "missing"
    utils.ensure_clean_dir(missing)
    assert missing.is_dir()

    assert utils.join_root_url("https://example.com/", "about/") == "https://example.com/about/"
    assert utils.join_root_url("", "/about/") == "/about/"
    assert utils.escape_html('<a href="x">&</a>') == "&lt;a href=&quot;x&quot;&gt;&amp;&lt;/a&gt;"


def test_is_markdown(tmp_path):
    assert utils.is_markdown(tmp_path / "post.md")
    assert utils.is_markdown(tmp_path / "post.MARKDOWN")
    assert not utils.is_markdown(tmp_path / "notes.txt")
