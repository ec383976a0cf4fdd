"""Prepare the output directory before a benchmarked run."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from .errors import DestinationNotDirectoryError

logger = logging.getLogger(__name__)


def clean_directory(path: Union[str, Path]) -> int:
    """
    Ensure ``path`` exists and contains no files.

    Missing directories are created with their parents. Existing directories
    have every file beneath them deleted; subdirectories are left in place.

    Returns:
        Number of files removed

    Raises:
        DestinationNotDirectoryError: If ``path`` exists but is not a directory
    """
    target = Path(path)
    if target.exists() and not target.is_dir():
        raise DestinationNotDirectoryError(target)

    if not target.exists():
        target.mkdir(parents=True, exist_ok=True)
        logger.debug("Created output directory %s", target)
        return 0

    removed = 0
    for entry in list(target.rglob("*")):
        if entry.is_file() or entry.is_symlink():
            entry.unlink()
            removed += 1

    logger.debug("Removed %d file(s) from %s", removed, target)
    return removed


__all__ = ["clean_directory"]
