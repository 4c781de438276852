"""JSON data file discovery."""

import logging
import os
from collections.abc import Iterator
from pathlib import Path

logger = logging.getLogger(__name__)


def find_json_files(root: Path, directory: str | Path) -> list[Path]:
    """List every .json file at any depth under ``root / directory``.

    A missing directory means nothing was submitted and yields an empty list.
    Order follows a sorted directory walk so repeated runs see the same order.
    """
    base = Path(root) / directory
    if not base.is_dir():
        logger.info(f"Directory {base} does not exist, skipping...")
        return []

    return list(_walk_json(base))


def _walk_json(base: Path) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(base):
        dirnames.sort()
        for name in sorted(filenames):
            if name.endswith(".json"):
                yield Path(dirpath) / name


def count_json_files(root: Path, directory: str | Path) -> int:
    return len(find_json_files(root, directory))
