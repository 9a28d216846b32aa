"""
Interfaces Layer - Abstract Protocols for Collaborators.

This package defines the typing.Protocol interfaces for everything the
page cache consumes but does not own:

Protocols:
    - ContentRepository: Unit lookups and the parent chain
    - Renderer: The templating engine
    - MetricsCollector: Cache and render metrics
"""

from page_cache.interfaces.content_repository import ContentRepository
from page_cache.interfaces.metrics_collector import MetricsCollector
from page_cache.interfaces.renderer import CallableRenderer, Renderer

__all__ = ["CallableRenderer", "ContentRepository", "MetricsCollector", "Renderer"]
