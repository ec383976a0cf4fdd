"""Locate image files beneath a source directory."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import FrozenSet, List, Union

from .errors import SourceNotFoundError

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS: FrozenSet[str] = frozenset({".png", ".jpg", ".jpeg"})


def is_image_file(path: Union[str, Path]) -> bool:
    """Return True if ``path`` is a regular file with a recognized suffix."""
    candidate = Path(path)
    return candidate.suffix.lower() in IMAGE_EXTENSIONS and candidate.is_file()


def find_images(root: Union[str, Path]) -> List[Path]:
    """
    Recursively collect image files under ``root``.

    Directory entries are walked in sorted order so repeated runs see the same
    sequence, but callers should not rely on any particular ordering.

    Args:
        root: Directory to scan

    Returns:
        Paths of every ``.png``, ``.jpg`` and ``.jpeg`` file (case-insensitive)

    Raises:
        SourceNotFoundError: If ``root`` does not exist or is not a directory
    """
    root_path = Path(root)
    if not root_path.is_dir():
        raise SourceNotFoundError(root_path)

    found: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(root_path):
        dirnames.sort()
        for name in sorted(filenames):
            candidate = Path(dirpath) / name
            if is_image_file(candidate):
                found.append(candidate)

    logger.debug("Found %d image(s) under %s", len(found), root_path)
    return found


__all__ = ["IMAGE_EXTENSIONS", "find_images", "is_image_file"]
