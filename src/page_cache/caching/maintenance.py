"""
Cache Maintenance - Operator-Triggered Flush and Inspection.

Not part of the render hot path. Used by admin tooling to clear the
whole cache and report what was removed.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlushReport:
    """Counts of what a flush removed."""

    containers_removed: int = 0
    files_removed: int = 0

    def to_dict(self) -> dict:
        return {
            "containers_removed": self.containers_removed,
            "files_removed": self.files_removed,
        }


@dataclass(frozen=True)
class CacheSummary:
    """Current size of the cache."""

    containers: int = 0
    files: int = 0
    total_bytes: int = 0


def flush_cache(root: Union[str, Path]) -> FlushReport:
    """
    Delete all entries and empty containers below the cache root.

    The root directory itself is kept. Files that cannot be removed are
    logged and skipped; their containers are then left in place.

    Args:
        root: Cache root directory

    Returns:
        FlushReport with the number of containers and files removed
    """
    root = Path(root)
    if not root.is_dir():
        return FlushReport()

    containers = 0
    files = 0

    for dirpath, dirnames, filenames in os.walk(root, topdown=False):
        current = Path(dirpath)
        for name in filenames:
            try:
                (current / name).unlink()
                files += 1
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning(f"Flush could not remove {current / name}: {e}")

        if current == root:
            continue
        try:
            current.rmdir()
        except OSError as e:
            logger.warning(f"Flush could not remove directory {current}: {e}")
            continue
        if current.parent == root:
            containers += 1

    logger.info(f"Cache flushed: {containers} containers, {files} files removed")
    return FlushReport(containers_removed=containers, files_removed=files)


def summarize_cache(root: Union[str, Path]) -> CacheSummary:
    """
    Count containers, files and bytes below the cache root.

    Args:
        root: Cache root directory

    Returns:
        CacheSummary (all zeros if the root does not exist)
    """
    root = Path(root)
    if not root.is_dir():
        return CacheSummary()

    containers = 0
    files = 0
    total_bytes = 0
    for child in root.iterdir():
        if child.is_dir():
            containers += 1
            for path in child.rglob("*"):
                if path.is_file():
                    files += 1
                    total_bytes += path.stat().st_size
        elif child.is_file():
            files += 1
            total_bytes += child.stat().st_size

    return CacheSummary(containers=containers, files=files, total_bytes=total_bytes)
