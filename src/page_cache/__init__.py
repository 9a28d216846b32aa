"""
Page Cache - Variant-Aware Render Caching with Cascading Invalidation.

Caches the rendered output of content units ("pages") on disk, keyed by
unit id plus request variant (URL segments, pagination, locale, file
overrides), and purges those entries when content is saved or deleted.

Architecture:
    - Hexagonal Architecture (Ports & Adapters)
    - Dependency Injection for testability
    - Observer pattern for save/delete notifications
    - Configuration-driven behavior via YAML

Main Components:
    - domain: Core entities (ContentUnit, TemplateConfig, CacheKey, ...)
    - interfaces: Protocols for the repository, renderer and metrics
    - caching: Eligibility rules, key builder, file store, maintenance
    - invalidation: Event bus and invalidation coordinator
    - pipeline: Render orchestrator and request-scoped render context
    - adapters: In-memory repository and metrics collector
    - config: Configuration models and loaders

Example:
    >>> from page_cache import PageCache, load_config
    >>> cache = PageCache.from_config(load_config("config/page_cache.yaml"), renderer, repo)
    >>> html = cache.orchestrator.render(page, request=RequestContext(page_id=page.id))
    >>> cache.events.saved(page)

"""

import logging

from page_cache.app import PageCache
from page_cache.config.loader import load_config

__version__ = "0.1.0"

__all__ = ["PageCache", "configure_logging", "load_config"]


def configure_logging(
    level: int = logging.INFO,
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
) -> None:
    """
    Configure logging for the page cache.

    Call this at application startup to see log messages.
    By default, only WARNING and above are visible.

    Args:
        level: Logging level (default: INFO)
        format: Log message format

    Example:
        >>> import page_cache
        >>> page_cache.configure_logging(logging.DEBUG)
    """
    logging.basicConfig(
        level=level,
        format=format,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("page_cache").setLevel(level)
