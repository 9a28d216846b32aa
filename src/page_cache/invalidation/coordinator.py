"""
Invalidation Coordinator - Purge Cache Entries on Content Changes.

Decides which containers a save/delete must purge and purges them.

Expiry Modes:
    NONE            saved: nothing; deleted: treated as THIS_PAGE_ONLY
    THIS_PAGE_ONLY  the unit's own container
    ENTIRE_CACHE    every container (expire_all)
    PARENT_CHAIN    every cacheable ancestor, root to parent
    EXPLICIT_LIST   every cacheable unit in cache_expire_targets

The unit's own container is always removed last, after the cascade.
Removals are independent and best-effort: a failure is logged and the
rest of the cascade continues. If the ancestor chain or target list cannot
be resolved, the cascade is skipped and the unit's own container is still
removed. Running the same change twice leaves the
same end state.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from page_cache.caching.cache_store import CacheStoreProtocol
from page_cache.domain.entities import (
    CacheExpireMode,
    ChangeKind,
    ContentChanged,
    ContentUnit,
)
from page_cache.interfaces.content_repository import ContentRepository
from page_cache.interfaces.metrics_collector import MetricsCollector
from page_cache.invalidation.events import ContentEventBus
from page_cache.resilience.error_handler import ErrorHandler

logger = logging.getLogger(__name__)


@dataclass
class InvalidationReport:
    """What one content change purged."""

    unit_id: int
    kind: ChangeKind
    mode: Optional[CacheExpireMode] = None
    expired_all: bool = False
    removed_ids: List[int] = field(default_factory=list)
    failed_ids: List[int] = field(default_factory=list)
    files_removed: int = 0
    lookup_failed: bool = False

    @property
    def skipped(self) -> bool:
        """True when the change required no action."""
        return self.mode is None


class InvalidationCoordinator:
    """Reacts to content changes by removing affected cache containers."""

    def __init__(
        self,
        repository: ContentRepository,
        store: CacheStoreProtocol,
        metrics_collector: Optional[MetricsCollector] = None,
        error_handler: Optional[ErrorHandler] = None,
    ) -> None:
        """
        Initialize coordinator.

        Args:
            repository: Resolves ancestor chains and explicit target ids
            store: Cache store to purge
            metrics_collector: Optional metrics collector
            error_handler: Continue-on-error batch runner (created if None)
        """
        self.repository = repository
        self.store = store
        self.metrics = metrics_collector
        self.error_handler = error_handler or ErrorHandler()

    def attach(self, bus: ContentEventBus) -> None:
        """Subscribe to save/delete notifications."""
        bus.subscribe(self.handle)

    def detach(self, bus: ContentEventBus) -> None:
        bus.unsubscribe(self.handle)

    def handle(self, event: ContentChanged) -> InvalidationReport:
        """Event bus callback."""
        return self.on_content_changed(event.unit, event.kind)

    def on_content_changed(
        self,
        unit: ContentUnit,
        kind: ChangeKind,
    ) -> InvalidationReport:
        """
        Purge cache entries affected by a save or delete.

        Args:
            unit: The saved or deleted unit
            kind: SAVED or DELETED

        Returns:
            InvalidationReport describing what was removed
        """
        report = InvalidationReport(unit_id=unit.id, kind=kind)
        template = unit.template

        # Nothing was ever cached for this template
        if not template.is_cache_enabled:
            return report

        mode = template.cache_expire_mode
        if mode == CacheExpireMode.NONE:
            if kind == ChangeKind.SAVED:
                return report
            mode = CacheExpireMode.THIS_PAGE_ONLY
        report.mode = mode

        start = time.perf_counter()

        if mode == CacheExpireMode.ENTIRE_CACHE:
            self._expire_all(report)
        elif mode in (CacheExpireMode.PARENT_CHAIN, CacheExpireMode.EXPLICIT_LIST):
            targets = self._resolve_targets(unit, mode, report)
            self._remove_cascade(targets, report)

        self._remove_containers([unit.id], report, "self removal")

        logger.info(
            f"Invalidated unit {unit.id} ({kind.value}, mode={mode.value}): "
            f"{len(report.removed_ids)} containers, {report.files_removed} files"
            + (", entire cache expired" if report.expired_all else "")
        )
        self._record_metrics(report, time.perf_counter() - start)
        return report

    def _expire_all(self, report: InvalidationReport) -> None:
        try:
            flush = self.store.expire_all()
        except OSError as e:
            logger.warning(f"Expiring entire cache failed: {e}")
            return
        report.expired_all = True
        report.files_removed += flush.files_removed

    def _resolve_targets(
        self,
        unit: ContentUnit,
        mode: CacheExpireMode,
        report: InvalidationReport,
    ) -> List[ContentUnit]:
        """Units the cascade must purge; empty if the repository lookup fails."""
        try:
            if mode == CacheExpireMode.PARENT_CHAIN:
                return self.repository.parents(unit)
            return self.repository.get_many(unit.template.cache_expire_targets)
        except Exception as e:
            logger.warning(
                f"Resolving {mode.value} targets for unit {unit.id} failed, "
                f"removing its own entries only: {e}"
            )
            report.lookup_failed = True
            return []

    def _remove_cascade(
        self,
        units: List[ContentUnit],
        report: InvalidationReport,
    ) -> None:
        cacheable = [u.id for u in units if u.template.is_cache_enabled]
        if cacheable:
            self._remove_containers(cacheable, report, "cascade removal")

    def _remove_containers(
        self,
        unit_ids: List[int],
        report: InvalidationReport,
        operation_name: str,
    ) -> None:
        result = self.error_handler.handle_partial_failure(
            unit_ids,
            lambda unit_id: (unit_id, self.store.remove_container(unit_id)),
            min_success_rate=0.0,
            operation_name=operation_name,
        )
        for unit_id, files in result.successful:
            if unit_id not in report.removed_ids:
                report.removed_ids.append(unit_id)
            report.files_removed += files
        report.failed_ids.extend(unit_id for unit_id, _ in result.failed)

    def _record_metrics(self, report: InvalidationReport, duration: float) -> None:
        if not self.metrics:
            return
        tags = {"mode": report.mode.value if report.mode else "skipped"}
        self.metrics.record_count("cache_invalidation", 1, tags=tags)
        self.metrics.record_count("cache_files_removed", report.files_removed, tags=tags)
        failures = len(report.failed_ids) + int(report.lookup_failed)
        if failures:
            self.metrics.record_count("cache_invalidation_failures", failures, tags=tags)
        self.metrics.record_timing("invalidation_duration_seconds", duration, tags=tags)
