"""Tagshelf: a content index and page writer for Markdown blogs.

Tagshelf reads a directory of Markdown posts and pages with YAML front matter,
derives a navigation index (a chronological view of posts and a per-tag view),
and writes a browsable static site from it.

The main entry point is the CLI module, which provides commands for scaffolding
a new blog, building it, and inspecting its index.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
