"""Helpers for keeping a local copy of downloaded segment files."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

LOCK_FILE_NAME = ".lock"


def add_dir(root: str, child: str) -> str:
    """Join ``child`` onto ``root`` with exactly one separating slash added when missing."""
    if not root.endswith("/"):
        root += "/"
    return root + child


def list_local_files(root: str | Path) -> list[str]:
    """Return every file under ``root``, recursively, except lock files.

    A ``root`` that is itself a file is listed on its own; a path that does
    not exist yields an empty list.
    """
    base = Path(root)
    if base.is_file():
        candidates = [base]
    elif base.is_dir():
        candidates = sorted(path for path in base.rglob("*") if path.is_file())
    else:
        return []
    files = []
    for path in candidates:
        name = str(path)
        if not name.endswith(LOCK_FILE_NAME):
            logger.info("Inserting path: %s into vector: ", name)
            files.append(name)
    return files


def ensure_lock_file(path: str | Path) -> Path:
    """Create the lock file beside ``path`` unless it already exists.

    Returns the path of the lock file.
    """
    lock_file = Path(path).parent / LOCK_FILE_NAME
    if not lock_file.exists():
        logger.info("Creating lock file: %s", lock_file)
        lock_file.touch()
    return lock_file