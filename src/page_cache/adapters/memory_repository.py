"""
In-Memory Content Repository.

A dict-backed content repository for development and testing.
"""

from __future__ import annotations

from threading import RLock
from typing import Dict, Iterable, List, Optional

from page_cache.domain.entities import ContentUnit


class InMemoryContentRepository:
    """Holds units in a dict and walks parent links to build ancestor chains."""

    # Guards against cyclic parent links
    MAX_DEPTH = 256

    def __init__(self, units: Optional[Iterable[ContentUnit]] = None) -> None:
        """
        Initialize repository.

        Args:
            units: Initial units
        """
        self._units: Dict[int, ContentUnit] = {}
        self._lock = RLock()
        for unit in units or []:
            self.add(unit)

    def add(self, unit: ContentUnit) -> None:
        """Add or replace a unit."""
        with self._lock:
            self._units[unit.id] = unit

    def remove(self, unit_id: int) -> Optional[ContentUnit]:
        with self._lock:
            return self._units.pop(unit_id, None)

    def get(self, unit_id: int) -> Optional[ContentUnit]:
        with self._lock:
            return self._units.get(unit_id)

    def get_many(self, unit_ids: Iterable[int]) -> List[ContentUnit]:
        """Resolve ids in order, skipping unknown ones."""
        with self._lock:
            return [self._units[i] for i in unit_ids if i in self._units]

    def parents(self, unit: ContentUnit) -> List[ContentUnit]:
        """
        Get ancestors of a unit, root first.

        Missing parents end the chain.

        Raises:
            ValueError: If the parent links form a cycle
        """
        chain: List[ContentUnit] = []
        seen = {unit.id}
        with self._lock:
            parent_id = unit.parent_id
            while parent_id is not None:
                if parent_id in seen or len(chain) >= self.MAX_DEPTH:
                    raise ValueError(f"Cyclic parent chain at unit {parent_id}")
                parent = self._units.get(parent_id)
                if parent is None:
                    break
                chain.append(parent)
                seen.add(parent_id)
                parent_id = parent.parent_id
        chain.reverse()
        return chain

    def children(self, unit: ContentUnit) -> List[ContentUnit]:
        """Get direct children of a unit, ordered by id."""
        with self._lock:
            return sorted(
                (u for u in self._units.values() if u.parent_id == unit.id),
                key=lambda u: u.id,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._units)

    def __contains__(self, unit_id: object) -> bool:
        with self._lock:
            return unit_id in self._units
