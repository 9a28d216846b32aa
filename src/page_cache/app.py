"""
Page Cache Assembly.

Wires the store, key builder, eligibility rules, orchestrator and
invalidation coordinator around one configuration, and subscribes the
coordinator to a content event bus.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from page_cache.caching.cache_store import FileCacheStore
from page_cache.caching.eligibility import CacheEligibilityEvaluator
from page_cache.caching.key_builder import CacheKeyBuilder
from page_cache.caching.maintenance import CacheSummary, FlushReport, flush_cache, summarize_cache
from page_cache.config.models import PageCacheConfig
from page_cache.interfaces.content_repository import ContentRepository
from page_cache.interfaces.metrics_collector import MetricsCollector
from page_cache.interfaces.renderer import Renderer
from page_cache.invalidation.coordinator import InvalidationCoordinator
from page_cache.invalidation.events import ContentEventBus
from page_cache.pipeline.render_orchestrator import RenderOrchestrator

logger = logging.getLogger(__name__)


@dataclass
class PageCache:
    """All page cache components for one deployment."""

    config: PageCacheConfig
    store: FileCacheStore
    orchestrator: RenderOrchestrator
    coordinator: InvalidationCoordinator
    events: ContentEventBus

    @classmethod
    def from_config(
        cls,
        config: PageCacheConfig,
        renderer: Renderer,
        repository: ContentRepository,
        metrics_collector: Optional[MetricsCollector] = None,
        events: Optional[ContentEventBus] = None,
    ) -> PageCache:
        """
        Build and wire all components.

        Args:
            config: Page cache configuration
            renderer: Rendering collaborator
            repository: Content lookups for invalidation cascades
            metrics_collector: Optional metrics collector shared by all parts
            events: Existing event bus to subscribe to (created if None)
        """
        key_builder = CacheKeyBuilder(config)
        store = FileCacheStore(config, key_builder)
        orchestrator = RenderOrchestrator(
            config,
            renderer,
            evaluator=CacheEligibilityEvaluator(),
            key_builder=key_builder,
            store=store,
            metrics_collector=metrics_collector,
        )
        coordinator = InvalidationCoordinator(
            repository, store, metrics_collector=metrics_collector
        )
        bus = events or ContentEventBus()
        coordinator.attach(bus)
        logger.info(f"Page cache ready at {store.root}")
        return cls(
            config=config,
            store=store,
            orchestrator=orchestrator,
            coordinator=coordinator,
            events=bus,
        )

    def flush(self) -> FlushReport:
        """Operator-triggered clear of the whole cache."""
        return flush_cache(self.store.root)

    def summary(self) -> CacheSummary:
        return summarize_cache(self.store.root)
