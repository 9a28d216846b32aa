"""
Cache Store - File-Backed Cache Entries with Time-Based Expiry.

Every entry is a plain file whose mtime is its last write time. An entry
is fresh while ``now - mtime < cache_time_seconds``.

Design Notes:
    - No in-memory layer: every get/save is a storage round trip
    - Writes go to a temp file in the container, then os.replace()
      makes them visible atomically
    - Stale entries are not deleted on read; they are overwritten on the
      next save or removed by invalidation
    - Read/write I/O errors degrade to a cache miss / skipped write
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Protocol

from page_cache.caching.key_builder import CacheKeyBuilder
from page_cache.caching.maintenance import FlushReport, flush_cache
from page_cache.config.models import PageCacheConfig
from page_cache.domain.value_objects import CacheKey

logger = logging.getLogger(__name__)

TEMP_PREFIX = ".tmp-"


class CacheEntryProtocol(Protocol):
    """Protocol for a single cache entry."""

    def get(self) -> Optional[bytes]:
        """Get bytes if the entry exists and is fresh."""
        ...

    def save(self, data: bytes) -> bool:
        """Atomically replace the entry's content."""
        ...

    def exists(self) -> bool:
        """Check existence regardless of freshness."""
        ...

    def remove(self) -> bool:
        """Delete the entry."""
        ...


class CacheStoreProtocol(Protocol):
    """Protocol for cache store implementations."""

    def entry(self, key: CacheKey, cache_time_seconds: int) -> CacheEntryProtocol:
        ...

    def remove_container(self, primary_id: int) -> int:
        ...

    def expire_all(self) -> FlushReport:
        ...


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    expirations: int = 0
    writes: int = 0
    write_failures: int = 0
    read_failures: int = 0
    removals: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0


class CacheFile:
    """One cache entry on disk, bound to a key and a lifetime."""

    def __init__(
        self,
        store: FileCacheStore,
        key: CacheKey,
        path: Path,
        cache_time_seconds: int,
    ) -> None:
        self._store = store
        self.key = key
        self.path = path
        self.cache_time_seconds = cache_time_seconds

    def age(self) -> Optional[float]:
        """Seconds since last write, or None if the entry does not exist."""
        try:
            mtime = self.path.stat().st_mtime
        except FileNotFoundError:
            return None
        return self._store.clock() - mtime

    def is_fresh(self) -> bool:
        age = self.age()
        return age is not None and age < self.cache_time_seconds

    def get(self) -> Optional[bytes]:
        """
        Get cached bytes.

        Returns:
            Stored bytes, or None if missing, stale or unreadable
        """
        try:
            age = self.age()
            if age is None:
                self._store._record("misses", f"Cache MISS: {self.key}")
                return None
            if age >= self.cache_time_seconds:
                self._store._record("expirations", f"Cache EXPIRED: {self.key}")
                self._store._record("misses")
                return None
            data = self.path.read_bytes()
        except FileNotFoundError:
            # Removed between stat and read
            self._store._record("misses", f"Cache MISS: {self.key}")
            return None
        except OSError as e:
            logger.warning(f"Cache read failed for {self.key}: {e}")
            self._store._record("read_failures")
            self._store._record("misses")
            return None

        self._store._record("hits", f"Cache HIT: {self.key}")
        return data

    def save(self, data: bytes) -> bool:
        """
        Atomically replace the entry's content and reset its write time.

        Returns:
            True if written, False if the write failed (logged, not raised)

        Raises:
            ConfigurationError: If the container cannot be recreated
        """
        # Recreated with dir_permissions if removed since locate()
        self._store.key_builder.container_path(self.key.primary_id)
        tmp_name: Optional[str] = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=TEMP_PREFIX, dir=str(self.path.parent)
            )
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.chmod(tmp_name, self._store.config.cache.file_permissions)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            logger.warning(f"Cache write failed for {self.key}: {e}")
            self._store._record("write_failures")
            return False
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError as e:
                    logger.debug(f"Could not clean up temp file {tmp_name}: {e}")

        self._store._record(
            "writes", f"Cache SET: {self.key} ({len(data)} bytes, TTL={self.cache_time_seconds}s)"
        )
        return True

    def exists(self) -> bool:
        return self.path.is_file()

    def remove(self) -> bool:
        """
        Delete this entry.

        Returns:
            True if a file was removed, False if it was absent or could not be removed
        """
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"Cache remove failed for {self.key}: {e}")
            return False
        self._store._record("removals", f"Cache REMOVED: {self.key}")
        return True

    def __repr__(self) -> str:
        return f"CacheFile(key={self.key}, ttl={self.cache_time_seconds}s)"


class FileCacheStore:
    """
    Filesystem cache store rooted at ``cache.root``.

    Usage:
        store = FileCacheStore(config)
        entry = store.entry(key, cache_time_seconds=3600)
        data = entry.get()
        if data is None:
            data = render()
            entry.save(data)
    """

    def __init__(
        self,
        config: PageCacheConfig,
        key_builder: Optional[CacheKeyBuilder] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize cache store.

        Args:
            config: Page cache configuration
            key_builder: Key builder used for path resolution (created if None)
            clock: Time source returning epoch seconds
        """
        self.config = config
        self.key_builder = key_builder or CacheKeyBuilder(config)
        self.clock = clock
        self._lock = threading.Lock()
        self._stats = CacheStats()

    @property
    def root(self) -> Path:
        return self.key_builder.root

    def entry(self, key: CacheKey, cache_time_seconds: int) -> CacheFile:
        """Bind a key to its file and lifetime."""
        return CacheFile(self, key, self.key_builder.entry_path(key), cache_time_seconds)

    def remove_container(self, primary_id: int) -> int:
        """
        Remove every variant of one unit.

        Returns:
            Number of files removed (0 if the container was absent)

        Raises:
            OSError: If the container exists but cannot be removed
        """
        path = self.key_builder.container_path(primary_id, create=False)
        if not path.is_dir():
            return 0

        files = sum(1 for p in path.rglob("*") if p.is_file())
        shutil.rmtree(path)
        self._record("removals", f"Cache container REMOVED: {primary_id} ({files} files)")
        return files

    def expire_all(self) -> FlushReport:
        """Delete every entry under every container."""
        report = flush_cache(self.root)
        logger.info(
            f"Cache EXPIRED ALL: {report.containers_removed} containers, "
            f"{report.files_removed} files"
        )
        return report

    def get_stats(self) -> CacheStats:
        """Get a snapshot of cache statistics."""
        with self._lock:
            return CacheStats(**vars(self._stats))

    def _record(self, counter: str, message: Optional[str] = None) -> None:
        with self._lock:
            setattr(self._stats, counter, getattr(self._stats, counter) + 1)
        if message and self.config.cache.log_access:
            logger.debug(message)
