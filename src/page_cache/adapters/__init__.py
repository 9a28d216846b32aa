"""
Adapters Package - Infrastructure Implementations.

Concrete implementations of the protocols in the interfaces package,
following the Ports & Adapters pattern.

Repositories:
    - InMemoryContentRepository: dict-backed units for development/testing

Metrics:
    - InMemoryMetricsCollector: simple in-memory collection

Design Principles:
    - All adapters implement their respective protocols
    - Easily swappable via Dependency Injection
    - No cache logic in adapters
"""

from page_cache.adapters.memory_repository import InMemoryContentRepository
from page_cache.adapters.metrics_collector import InMemoryMetricsCollector

__all__ = ["InMemoryContentRepository", "InMemoryMetricsCollector"]
