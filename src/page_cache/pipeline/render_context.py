"""
Render Context - Request-Scoped Active Unit Tracking.

Rendering one unit can render others (embedded content). The context
tracks which unit is active and restores the previous one when a nested
render finishes, on every exit path.

Design Notes:
    - One RenderContext per inbound request, never shared between workers
    - Held in a ContextVar, so threads and asyncio tasks each see their own
    - request_scope() sets it for the duration of a request and resets it
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, List, Optional, Tuple

from page_cache.domain.entities import ContentUnit
from page_cache.domain.value_objects import RequestContext

logger = logging.getLogger(__name__)

_render_context: ContextVar[Optional["RenderContext"]] = ContextVar(
    "render_context", default=None
)


class RenderContext:
    """Active unit plus the stack of units it interrupted."""

    def __init__(self, request: RequestContext) -> None:
        self.request = request
        self.active: Optional[ContentUnit] = None
        self._stack: List[ContentUnit] = []

    @property
    def stack(self) -> Tuple[ContentUnit, ...]:
        """Previously active units, outermost first."""
        return tuple(self._stack)

    @property
    def depth(self) -> int:
        """Number of renders currently in progress."""
        return len(self._stack) + (1 if self.active is not None else 0)

    @contextmanager
    def activate(self, unit: ContentUnit) -> Iterator[RenderContext]:
        """
        Make a unit the active one until the block exits.

        The previously active unit (if any) is pushed and restored
        afterwards, even when the block raises.
        """
        previous = self.active
        if previous is not None:
            self._stack.append(previous)
        self.active = unit
        try:
            yield self
        finally:
            if previous is not None:
                self._stack.pop()
            self.active = previous

    def __repr__(self) -> str:
        active = self.active.id if self.active is not None else None
        return f"RenderContext(request={self.request.request_id}, active={active}, depth={self.depth})"


def current_render_context() -> Optional[RenderContext]:
    """Get the render context of the current request, if any."""
    return _render_context.get()


@contextmanager
def request_scope(request: RequestContext) -> Iterator[RenderContext]:
    """
    Open a render context for one inbound request.

    Usage:
        with request_scope(RequestContext(page_id=page.id)) as ctx:
            html = orchestrator.render(page)
    """
    context = RenderContext(request)
    token = _render_context.set(context)
    try:
        yield context
    finally:
        _render_context.reset(token)
