"""
Content Repository Protocol.

Defines the read-only view of the content-management collaborator that
invalidation needs: resolving unit ids and walking the parent chain.

Design Notes:
    - Uses typing.Protocol for structural subtyping
    - The cache never creates or deletes units
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from page_cache.domain.entities import ContentUnit


@runtime_checkable
class ContentRepository(Protocol):
    """Abstract interface for content lookups."""

    def get(self, unit_id: int) -> Optional[ContentUnit]:
        """
        Get a unit by id.

        Returns:
            The unit, or None if it does not exist
        """
        ...

    def get_many(self, unit_ids: Iterable[int]) -> List[ContentUnit]:
        """
        Resolve ids to units, preserving order.

        Unknown ids are skipped.
        """
        ...

    def parents(self, unit: ContentUnit) -> List[ContentUnit]:
        """
        Get the ancestor chain of a unit.

        Returns:
            Ancestors ordered root first, direct parent last
        """
        ...
