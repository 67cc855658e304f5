from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from tagshelf import cli as cli_module
from tagshelf.cli import cli


class FakePrompt:
    def __init__(self, answer):
        self.answer = answer

    def ask(self):
        return self.answer


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def blog(tmp_path, runner, monkeypatch):
    target = tmp_path / "blog"
    result = runner.invoke(cli, ["init", str(target)], env={"TAGSHELF_SKIP_GIT_INIT": "1"})
    assert result.exit_code == 0, result.output
    monkeypatch.chdir(target)
    return target


def fake_answers(monkeypatch, layout, *texts):
    answers = iter(texts)
    monkeypatch.setattr(cli_module.questionary, "select", lambda *a, **k: FakePrompt(layout))
    monkeypatch.setattr(cli_module.questionary, "text", lambda *a, **k: FakePrompt(next(answers)))


def test_init_scaffolds_project(blog):
    assert (blog / "tagshelf.yaml").exists()
    assert (blog / "content" / "about.md").exists()
    assert len(list((blog / "content" / "posts").glob("*-hello-world.md"))) == 1
    assert (blog / "assets").is_dir()
    assert (blog / ".gitignore").read_text(encoding="utf-8") == "output/\n"
    config = yaml.safe_load((blog / "tagshelf.yaml").read_text(encoding="utf-8"))
    assert config["title"] == "blog"


def test_init_refuses_non_empty_directory(tmp_path, runner):
    (tmp_path / "existing.txt").write_text("hi", encoding="utf-8")
    result = runner.invoke(cli, ["init", str(tmp_path)], env={"TAGSHELF_SKIP_GIT_INIT": "1"})
    assert result.exit_code != 0
    assert "non-empty directory" in result.output


def test_build_scaffolded_project(blog, runner):
    result = runner.invoke(cli, ["build"])
    assert result.exit_code == 0, result.output
    assert "Built 1 posts, 1 pages and 1 tags" in result.output
    assert (blog / "output" / "index.html").exists()
    assert (blog / "output" / "posts" / "hello-world" / "index.html").exists()
    assert (blog / "output" / "about" / "index.html").exists()
    assert (blog / "output" / "tags" / "meta" / "index.html").exists()
    assert (blog / "output" / "index.json").exists()
    # No site url configured, so no feed.
    assert not (blog / "output" / "feed.xml").exists()


def test_build_output_override(blog, runner, tmp_path):
    result = runner.invoke(cli, ["build", "--output", str(tmp_path / "public")])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "public" / "index.html").exists()
    assert not (blog / "output").exists()


def test_build_strict_fails_on_content_errors(blog, runner):
    (blog / "content" / "posts" / "broken.md").write_text(
        "---\ntitle: Broken\n---\nNo date.\n", encoding="utf-8"
    )
    result = runner.invoke(cli, ["build"])
    assert result.exit_code == 0
    assert "MalformedDocument: posts/broken.md" in result.output

    result = runner.invoke(cli, ["build", "--strict"])
    assert result.exit_code == 1


def test_build_reports_template_errors(blog, runner):
    layouts = blog / "content" / "_layouts"
    layouts.mkdir()
    (layouts / "page.html.jinja").write_text("{% if %}", encoding="utf-8")
    result = runner.invoke(cli, ["build"])
    assert result.exit_code == 1
    assert "Build failed:" in result.output
    assert "File: about.md" in result.output


def test_check(blog, runner):
    result = runner.invoke(cli, ["check"])
    assert result.exit_code == 0, result.output
    assert "1 posts, 1 pages, 1 tags; 0 problem(s)" in result.output
    assert not (blog / "output").exists()

    (blog / "content" / "posts" / "bad.md").write_text(
        "---\ntitle: [unclosed\n---\n", encoding="utf-8"
    )
    result = runner.invoke(cli, ["check"])
    assert result.exit_code == 1
    assert "posts/bad.md" in result.output
    assert "1 problem(s)" in result.output


def test_list_and_tags(blog, runner):
    (blog / "content" / "posts" / "2020-01-02-older.md").write_text(
        "---\ntitle: Older\ndate: 2020-01-02\ntags: [archive, meta]\n---\nOld.\n",
        encoding="utf-8",
    )
    result = runner.invoke(cli, ["list"])
    assert result.exit_code == 0, result.output
    lines = result.output.strip().splitlines()
    assert len(lines) == 2
    assert "Hello, world  [meta]" in lines[0]
    assert lines[1] == "2020-01-02  posts/2020-01-02-older.md  Older  [archive, meta]"

    result = runner.invoke(cli, ["list", "--tag", "archive"])
    assert result.output.strip().splitlines() == [
        "2020-01-02  posts/2020-01-02-older.md  Older  [archive, meta]"
    ]

    result = runner.invoke(cli, ["list", "--limit", "1"])
    assert len(result.output.strip().splitlines()) == 1

    result = runner.invoke(cli, ["list", "--tag", "nope"])
    assert result.exit_code != 0
    assert "Unknown tag: nope" in result.output

    result = runner.invoke(cli, ["tags"])
    assert result.output.strip().splitlines() == ["archive  1", "meta  2"]


def test_drafts_are_opt_in(blog, runner):
    (blog / "content" / "posts" / "_idea.md").write_text(
        "---\ntitle: Idea\ndate: 2021-05-05\n---\nLater.\n", encoding="utf-8"
    )
    assert "Idea" not in runner.invoke(cli, ["list"]).output
    assert "Idea" in runner.invoke(cli, ["list", "--drafts"]).output


def test_new_post(blog, runner, monkeypatch):
    fake_answers(monkeypatch, "post", "Second Thoughts", "meta, notes meta")
    result = runner.invoke(cli, ["new"])
    assert result.exit_code == 0, result.output

    created = list((blog / "content" / "posts").glob("*-second-thoughts.md"))
    assert len(created) == 1
    text = created[0].read_text(encoding="utf-8")
    frontmatter = yaml.safe_load(text.split("---")[1])
    assert frontmatter["layout"] == "post"
    assert frontmatter["title"] == "Second Thoughts"
    assert frontmatter["tags"] == ["meta", "notes"]

    listed = runner.invoke(cli, ["list", "--tag", "notes"])
    assert "Second Thoughts" in listed.output


def test_new_page_and_conflicts(blog, runner, monkeypatch):
    fake_answers(monkeypatch, "page", "Colophon")
    result = runner.invoke(cli, ["new"])
    assert result.exit_code == 0, result.output
    assert (blog / "content" / "colophon.md").exists()

    fake_answers(monkeypatch, "page", "Colophon")
    result = runner.invoke(cli, ["new"])
    assert result.exit_code != 0
    assert "File already exists" in result.output

    (blog / "content" / "posts" / "2019-03-03-old-news.md").write_text(
        "---\ntitle: Old news\ndate: 2019-03-03\n---\n", encoding="utf-8"
    )
    fake_answers(monkeypatch, "post", "Old News", "")
    result = runner.invoke(cli, ["new"])
    assert result.exit_code != 0
    assert "slug 'old-news'" in result.output


def test_new_cancelled(blog, runner, monkeypatch):
    fake_answers(monkeypatch, "page", None)
    result = runner.invoke(cli, ["new"])
    assert result.exit_code != 0
    assert list(Path(blog / "content").glob("*.md")) == [blog / "content" / "about.md"]


def test_new_outside_project(tmp_path, runner, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(cli, ["new"])
    assert result.exit_code != 0
    assert "No content/ directory found" in result.output
