"""
Unit Tests for ContentEventBus.

Tests for:
    - Subscribe/unsubscribe
    - Delivery order and isolation of failing handlers
    - Coordinator wiring via attach()
"""

from __future__ import annotations

from typing import List
from unittest.mock import Mock

from page_cache.caching.cache_store import FileCacheStore
from page_cache.domain.entities import ChangeKind, ContentChanged
from page_cache.invalidation.coordinator import InvalidationCoordinator
from page_cache.invalidation.events import ContentEventBus
from tests.fixtures import make_unit, seed_entry


class TestContentEventBus:
    """Observer registry behavior."""

    def test_publish_reaches_subscribers_in_order(self) -> None:
        bus = ContentEventBus()
        seen: List[str] = []
        bus.subscribe(lambda e: seen.append("first"))
        bus.subscribe(lambda e: seen.append("second"))

        delivered = bus.saved(make_unit(1))

        assert delivered == 2
        assert seen == ["first", "second"]

    def test_subscribe_twice_is_noop(self) -> None:
        bus = ContentEventBus()
        handler = Mock()
        bus.subscribe(handler)
        bus.subscribe(handler)

        bus.saved(make_unit(1))

        assert len(bus) == 1
        handler.assert_called_once()

    def test_unsubscribe(self) -> None:
        bus = ContentEventBus()
        handler = Mock()
        bus.subscribe(handler)

        assert bus.unsubscribe(handler) is True
        assert bus.unsubscribe(handler) is False

        bus.deleted(make_unit(1))
        handler.assert_not_called()

    def test_failing_handler_does_not_block_others(self) -> None:
        bus = ContentEventBus()
        after = Mock()
        bus.subscribe(Mock(side_effect=RuntimeError("boom")))
        bus.subscribe(after)

        delivered = bus.saved(make_unit(1))

        assert delivered == 1
        after.assert_called_once()

    def test_event_carries_kind(self) -> None:
        bus = ContentEventBus()
        handler = Mock()
        bus.subscribe(handler)
        unit = make_unit(9)

        bus.deleted(unit)

        event = handler.call_args.args[0]
        assert isinstance(event, ContentChanged)
        assert event.unit == unit
        assert event.kind == ChangeKind.DELETED


class TestCoordinatorWiring:
    """InvalidationCoordinator subscribed to a bus."""

    def test_attach_and_detach(self, repository, store: FileCacheStore) -> None:
        bus = ContentEventBus()
        coordinator = InvalidationCoordinator(repository, store)
        coordinator.attach(bus)
        seed_entry(store, 4)

        bus.saved(make_unit(4))

        assert not (store.root / "4").exists()

        coordinator.detach(bus)
        assert len(bus) == 0
