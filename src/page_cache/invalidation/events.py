"""
Content Event Bus - Save/Delete Notifications.

The content-management collaborator publishes ContentChanged events after
its own save or delete completes; the invalidation coordinator subscribes.

Usage:
    bus = ContentEventBus()
    coordinator.attach(bus)

    bus.saved(unit)      # after the unit was saved
    bus.deleted(unit)    # after the unit was deleted
"""

from __future__ import annotations

import logging
from threading import RLock
from typing import Callable, List

from page_cache.domain.entities import ChangeKind, ContentChanged, ContentUnit

logger = logging.getLogger(__name__)

ContentChangedHandler = Callable[[ContentChanged], object]


class ContentEventBus:
    """
    Thread-safe observer registry for content change events.

    Handlers run synchronously, in subscription order. A failing handler
    is logged and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        """Initialize with no subscribers."""
        self._handlers: List[ContentChangedHandler] = []
        self._lock = RLock()

    def subscribe(self, handler: ContentChangedHandler) -> None:
        """Register a handler; subscribing twice is a no-op."""
        with self._lock:
            if handler not in self._handlers:
                self._handlers.append(handler)

    def unsubscribe(self, handler: ContentChangedHandler) -> bool:
        """
        Remove a handler.

        Returns:
            True if the handler was subscribed
        """
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)
                return True
            return False

    def publish(self, event: ContentChanged) -> int:
        """
        Deliver an event to all subscribers.

        Returns:
            Number of handlers that completed without raising
        """
        with self._lock:
            handlers = list(self._handlers)

        delivered = 0
        for handler in handlers:
            try:
                handler(event)
                delivered += 1
            except Exception as e:
                logger.error(
                    f"Handler {handler!r} failed for {event.kind.value} "
                    f"of unit {event.unit.id}: {e}",
                    exc_info=True,
                )
        return delivered

    def saved(self, unit: ContentUnit) -> int:
        return self.publish(ContentChanged(unit=unit, kind=ChangeKind.SAVED))

    def deleted(self, unit: ContentUnit) -> int:
        return self.publish(ContentChanged(unit=unit, kind=ChangeKind.DELETED))

    def __len__(self) -> int:
        with self._lock:
            return len(self._handlers)
