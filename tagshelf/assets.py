"""Static asset copying for Tagshelf.

Files under the project's assets directory are copied unchanged into
``<output>/assets``. Hidden files (names starting with a dot) are skipped.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


class AssetPipeline:
    """Copies static assets into the output directory.

    Attributes:
        assets_dir (Path): Directory containing source assets.
        output_dir (Path): Directory where the site is written.
    """

    def __init__(self, assets_dir: Path, output_dir: Path):
        self.assets_dir = assets_dir
        self.output_dir = output_dir

    def run(self) -> list[Path]:
        """Copy every asset file.

        Returns:
            Destination paths of the copied files, in sorted order.
        """
        if not self.assets_dir.is_dir():
            return []

        target = self.output_dir / "assets"
        copied: list[Path] = []
        for item in sorted(self.assets_dir.rglob("*")):
            if item.is_dir():
                continue
            rel = item.relative_to(self.assets_dir)
            if any(part.startswith(".") for part in rel.parts):
                continue
            dest = target / rel
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(item, dest)
            copied.append(dest)
        logger.debug("Copied %d assets into %s", len(copied), target)
        return copied
