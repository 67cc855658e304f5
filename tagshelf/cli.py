"""Command-line interface for Tagshelf.

This module defines the CLI commands using the Click framework.

Commands:
- init: Scaffold a new blog project.
- build: Build the site into the output directory.
- check: Validate the content without writing anything.
- list: Print the chronological view, optionally for one tag.
- tags: Print every tag with its post count.
- new: Create a new post or page interactively.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

import click
import questionary
import yaml

from . import __version__
from .config import CONFIG_FILE, load_config
from .errors import BuildError, ConfigError, ContentError
from .utils import slugify


@click.group()
@click.version_option(version=__version__, prog_name="tagshelf")
@click.option("-v", "--verbose", is_flag=True, help="Show log output from the build")
def cli(verbose: bool):
    """Tagshelf: index and build a Markdown blog."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@click.argument("name")
def init(name: str):
    """Scaffold a new blog project."""
    target = Path(name).resolve()
    if target.exists() and any(target.iterdir()):
        raise click.ClickException(
            f"Refusing to initialize into non-empty directory: {target}"
        )
    _scaffold(target)
    click.echo(f"New blog created at {target}")


@cli.command()
@click.option("--drafts", is_flag=True, help="Include draft content")
@click.option(
    "--output",
    "output",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory to build into (overrides tagshelf.yaml output_dir)",
)
@click.option("--strict", is_flag=True, help="Exit with an error if any document was left out")
def build(drafts: bool, output: Path | None, strict: bool):
    """Build the site into the output directory."""
    project_root = Path.cwd()
    from .build import build_site

    try:
        result = build_site(project_root, include_drafts=drafts, output_dir_override=output)
    except BuildError as exc:
        click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
        click.echo(click.style(f"  File: {exc.source_path}", fg="yellow"), err=True)
        click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)
        raise SystemExit(1) from None
    except (ConfigError, FileNotFoundError) as exc:
        raise click.ClickException(str(exc)) from exc

    _report_errors(result.errors)
    index = result.index
    click.echo(
        f"Built {len(index.posts)} posts, {len(index.pages)} pages and "
        f"{len(index.tags)} tags into {result.output_dir}"
    )
    if strict and result.errors:
        raise SystemExit(1)


@cli.command()
@click.option("--drafts", is_flag=True, help="Include draft content")
def check(drafts: bool):
    """Validate the content without writing anything."""
    loaded = _load(drafts)
    _report_errors(loaded.errors)
    index = loaded.index
    click.echo(
        f"{len(index.posts)} posts, {len(index.pages)} pages, {len(index.tags)} tags; "
        f"{len(loaded.errors)} problem(s)"
    )
    if loaded.errors:
        raise SystemExit(1)


@cli.command(name="list")
@click.option("--tag", help="Only list posts carrying this tag")
@click.option("--limit", type=int, default=0, help="Maximum number of posts to list")
@click.option("--drafts", is_flag=True, help="Include draft content")
def list_posts(tag: str | None, limit: int, drafts: bool):
    """Print posts, newest first."""
    index = _load(drafts).index
    if tag is not None:
        if tag not in index.tags:
            raise click.ClickException(f"Unknown tag: {tag}")
        posts = index.tags[tag]
    else:
        posts = index.posts
    if limit > 0:
        posts = posts.latest(limit)
    for post in posts:
        tags = ", ".join(sorted(post.tags))
        line = f"{post.date.strftime('%Y-%m-%d')}  {post.path}  {post.title}"
        click.echo(f"{line}  [{tags}]" if tags else line)


@cli.command()
@click.option("--drafts", is_flag=True, help="Include draft content")
def tags(drafts: bool):
    """Print every tag with its post count."""
    index = _load(drafts).index
    for tag, count in index.tags.counts():
        click.echo(f"{tag}  {count}")


@cli.command()
def new():
    """Create a new post or page interactively."""
    project_root = Path.cwd()
    try:
        config = load_config(project_root)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    content_dir = project_root / str(config.get("content_dir", "content"))
    if not content_dir.exists():
        raise click.ClickException(
            f"No {content_dir.name}/ directory found. Run this command from a Tagshelf project root."
        )

    layout = questionary.select(
        "Layout:",
        choices=["post", "page"],
        style=_questionary_style(),
    ).ask()
    if layout is None:
        raise click.Abort()

    title = questionary.text(
        "Title:",
        validate=lambda x: len(x.strip()) > 0 or "Title cannot be empty",
        style=_questionary_style(),
    ).ask()
    if title is None:
        raise click.Abort()
    title = title.strip()

    frontmatter: dict = {"layout": layout, "title": title}
    slug = slugify(title)
    if layout == "post":
        raw_tags = questionary.text(
            "Tags (comma or space separated):",
            style=_questionary_style(),
        ).ask()
        if raw_tags is None:
            raise click.Abort()
        now = datetime.now().astimezone()
        frontmatter["date"] = now.strftime("%Y-%m-%d %H:%M:%S %z")
        frontmatter["tags"] = _split_tags(raw_tags)
        target_dir = content_dir / "posts"
        filename = f"{now.strftime('%Y-%m-%d')}-{slug}.md"
    else:
        target_dir = content_dir
        filename = f"{slug}.md"

    target_path = target_dir / filename
    if target_path.exists():
        raise click.ClickException(
            f"File already exists: {target_path.relative_to(project_root)}"
        )
    conflicting = _find_slug_conflict(target_dir, slug)
    if conflicting is not None:
        raise click.ClickException(
            f"A file with slug '{slug}' already exists: {conflicting.name}"
        )

    target_dir.mkdir(parents=True, exist_ok=True)
    header = yaml.safe_dump(frontmatter, sort_keys=False, allow_unicode=True)
    target_path.write_text(f"---\n{header}---\n\n", encoding="utf-8")
    click.echo(f"Created {target_path.relative_to(project_root)}")


def _load(drafts: bool):
    """Load and index the project in the current directory for read-only commands."""
    from .build import load_index

    try:
        return load_index(Path.cwd(), include_drafts=drafts)
    except (ConfigError, FileNotFoundError) as exc:
        raise click.ClickException(str(exc)) from exc


def _report_errors(errors: Iterable[ContentError]) -> None:
    """Echo content problems to stderr, one per document."""
    for error in errors:
        kind = type(error).__name__
        click.echo(
            click.style(f"{kind}: ", fg="yellow", bold=True)
            + click.style(f"{error.source_path}: {error.message}", fg="yellow"),
            err=True,
        )


def _split_tags(raw: str) -> list[str]:
    seen: list[str] = []
    for tag in raw.replace(",", " ").split():
        if tag not in seen:
            seen.append(tag)
    return seen


def _find_slug_conflict(folder: Path, slug: str) -> Path | None:
    """Return an existing Markdown file in folder with the same slug, if any."""
    if not folder.exists():
        return None
    for f in sorted(folder.iterdir()):
        if f.is_file() and f.suffix in (".md", ".markdown") and slugify(f.stem) == slug:
            return f
    return None


def _questionary_style():
    """Return consistent questionary style."""
    return questionary.Style(
        [
            ("qmark", "fg:cyan bold"),
            ("question", "bold"),
            ("answer", "fg:cyan"),
            ("pointer", "fg:cyan bold"),
            ("highlighted", "fg:cyan bold"),
            ("selected", "fg:cyan"),
        ]
    )


def main():
    """Entry point for the CLI application."""
    cli()


SCAFFOLD_CONFIG = """\
title: {title}
description: ""
# Absolute site URL; feeds are only written when this is set.
url: ""
content_dir: content
output_dir: output
assets_dir: assets
"""

SCAFFOLD_ABOUT = """\
---
layout: page
title: About
order: 1
---

A few words about this blog.
"""

SCAFFOLD_POST = """\
---
layout: post
title: Hello, world
date: {date}
tags: [meta]
---

The first post.[^1]

[^1]: Every blog starts somewhere.
"""


def _scaffold(root: Path) -> None:
    """Create the directory structure and files for a new blog.

    Args:
        root: Root directory for the new project.
    """
    now = datetime.now().astimezone()
    (root / "content" / "posts").mkdir(parents=True, exist_ok=True)
    (root / "assets").mkdir(parents=True, exist_ok=True)
    (root / CONFIG_FILE).write_text(
        SCAFFOLD_CONFIG.format(title=yaml.safe_dump(root.name).splitlines()[0]),
        encoding="utf-8",
    )
    (root / "content" / "about.md").write_text(SCAFFOLD_ABOUT, encoding="utf-8")
    (root / "content" / "posts" / f"{now.strftime('%Y-%m-%d')}-hello-world.md").write_text(
        SCAFFOLD_POST.format(date=now.strftime("%Y-%m-%d %H:%M:%S %z")),
        encoding="utf-8",
    )
    (root / ".gitignore").write_text("output/\n", encoding="utf-8")
    _try_git_init(root)


def _try_git_init(root: Path) -> None:
    """Initialize a git repository if git is available."""
    if os.environ.get("TAGSHELF_SKIP_GIT_INIT") == "1":
        return
    git_bin = shutil.which("git")
    if not git_bin:
        return
    try:
        subprocess.run(
            [git_bin, "init"],
            cwd=root,
            check=True,
            capture_output=True,
        )
    except (OSError, subprocess.CalledProcessError):
        # Non-fatal: user can run git init manually
        pass
