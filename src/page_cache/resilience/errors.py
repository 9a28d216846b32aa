"""
Error Taxonomy.

Errors surfaced synchronously to the caller of a render. Storage I/O
failures on individual cache entries are not part of this taxonomy: they
are logged and absorbed where they occur.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class PageCacheError(Exception):
    """Base class for page cache errors."""
    pass


class PermissionDenied(PageCacheError):
    """Raised when the requesting identity may not view a unit."""

    def __init__(self, unit_id: int, message: Optional[str] = None) -> None:
        super().__init__(message or f"Unit {unit_id} is not viewable")
        self.unit_id = unit_id


class InvalidLocation(PageCacheError):
    """Raised when a resolved filename escapes its permitted root."""

    def __init__(self, path: Union[str, Path], root: Optional[Path] = None) -> None:
        if root is not None:
            message = f"Invalid location {path!s}: outside {root!s}"
        else:
            message = f"Invalid location {path!s}"
        super().__init__(message)
        self.path = str(path)
        self.root = root


class ConfigurationError(PageCacheError):
    """Raised when the cache directory cannot be created or written."""
    pass
