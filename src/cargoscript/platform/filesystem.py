"""Filesystem helpers reused across multiple layers."""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from cargoscript.platform.logging import logger


def ensure_directory(directory: Path) -> Path:
    """Ensure ``directory`` exists as a folder and return it."""

    if directory.exists():
        if not directory.is_dir():
            raise NotADirectoryError(f"Path exists but is not a directory: {directory}")
        return directory

    directory.mkdir(parents=True, exist_ok=True)
    return directory


def is_executable_file(path: Path) -> bool:
    """Return whether ``path`` is a regular file the current user may execute."""

    return path.is_file() and os.access(path, os.X_OK)


def remove_tree_best_effort(directory: Path) -> bool:
    """Delete ``directory`` recursively, logging instead of raising on failure.

    Returns:
        bool: ``True`` when the directory no longer exists afterwards.
    """

    if not directory.exists():
        return True
    try:
        shutil.rmtree(directory)
    except OSError as exc:
        logger.warning("Failed to remove %s: %s", directory, exc)
        return False
    return True


__all__ = ["ensure_directory", "is_executable_file", "remove_tree_best_effort"]
