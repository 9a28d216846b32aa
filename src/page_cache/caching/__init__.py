"""
Caching Layer.

Provides the render cache infrastructure:
    - CacheEligibilityEvaluator: whether a request may use the cache
    - CacheKeyBuilder: variant-aware cache locations
    - FileCacheStore / CacheFile: file-backed entries with time-based expiry
    - flush_cache / summarize_cache: operator maintenance
"""

from page_cache.caching.cache_store import (
    CacheEntryProtocol,
    CacheFile,
    CacheStats,
    CacheStoreProtocol,
    FileCacheStore,
)
from page_cache.caching.eligibility import CacheEligibilityEvaluator
from page_cache.caching.key_builder import CacheKeyBuilder, sanitize_segment
from page_cache.caching.maintenance import (
    CacheSummary,
    FlushReport,
    flush_cache,
    summarize_cache,
)

__all__ = [
    "CacheEligibilityEvaluator",
    "CacheEntryProtocol",
    "CacheFile",
    "CacheKeyBuilder",
    "CacheStats",
    "CacheStoreProtocol",
    "CacheSummary",
    "FileCacheStore",
    "FlushReport",
    "flush_cache",
    "sanitize_segment",
    "summarize_cache",
]
