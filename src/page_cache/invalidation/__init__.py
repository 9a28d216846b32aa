"""
Invalidation Package - Cache Purging on Content Changes.

    - ContentEventBus: observer registry for save/delete notifications
    - InvalidationCoordinator: cascades removals per template expiry mode
"""

from page_cache.invalidation.coordinator import (
    InvalidationCoordinator,
    InvalidationReport,
)
from page_cache.invalidation.events import ContentEventBus

__all__ = ["ContentEventBus", "InvalidationCoordinator", "InvalidationReport"]
