"""
Resilience Package - Error Taxonomy and Fault Tolerance.

This package provides:
    - Errors surfaced to render callers (PermissionDenied, InvalidLocation,
      ConfigurationError)
    - ErrorHandler: continue-on-error processing for invalidation cascades

Design Principles:
    - Fail fast for permission and configuration errors
    - Degrade to uncached behavior for storage I/O errors
    - Continue with the rest of a cascade when one removal fails
"""

from page_cache.resilience.error_handler import ErrorHandler, PartialResult
from page_cache.resilience.errors import (
    ConfigurationError,
    InvalidLocation,
    PageCacheError,
    PermissionDenied,
)

__all__ = [
    "ConfigurationError",
    "ErrorHandler",
    "InvalidLocation",
    "PageCacheError",
    "PartialResult",
    "PermissionDenied",
]
