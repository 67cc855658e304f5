"""Project configuration for Tagshelf.

Configuration lives in ``tagshelf.yaml`` at the project root and is merged
over DEFAULT_CONFIG. Every key is optional.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

CONFIG_FILE = "tagshelf.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "content_dir": "content",
    "output_dir": "output",
    "assets_dir": "assets",
    "title": "",
    "description": "",
    "url": "",
    "default_layout": "post",
    "permalink": None,
    "feed_limit": 20,
}


def load_config(project_root: Path) -> dict[str, Any]:
    """Load site configuration from tagshelf.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.

    Raises:
        ConfigError: If the file is not valid YAML or not a mapping, or a
            value such as feed_limit or permalink is unusable.
    """
    config_path = project_root / CONFIG_FILE
    config = DEFAULT_CONFIG.copy()
    if not config_path.exists():
        return config
    try:
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid {CONFIG_FILE}: {exc}") from exc
    if not isinstance(loaded, dict):
        raise ConfigError(
            f"Invalid {CONFIG_FILE}: expected a mapping, got {type(loaded).__name__}"
        )
    config.update(loaded)
    try:
        config["feed_limit"] = int(config["feed_limit"])
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {CONFIG_FILE}: feed_limit must be an integer") from exc
    _check_permalink(config.get("permalink"))
    return config


def _check_permalink(pattern: Any) -> None:
    """Reject permalink patterns that cannot be filled for every post."""
    if pattern is None:
        return
    if not isinstance(pattern, str):
        raise ConfigError(f"Invalid {CONFIG_FILE}: permalink must be a string")
    if ".." in pattern.split("/"):
        raise ConfigError(f"Invalid {CONFIG_FILE}: permalink {pattern!r} leaves the output directory")
    try:
        pattern.format(year="2024", month="01", day="01", slug="slug", folder="posts")
    except (KeyError, IndexError, ValueError, AttributeError) as exc:
        raise ConfigError(
            f"Invalid {CONFIG_FILE}: permalink {pattern!r} cannot be filled ({exc!r}); "
            "expected {year}, {month}, {day}, {slug} or {folder}"
        ) from exc
