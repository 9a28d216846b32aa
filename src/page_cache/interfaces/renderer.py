"""
Renderer Protocol.

The templating engine that turns a unit into output bytes. It is an
external collaborator; a renderer may call back into
RenderOrchestrator.render() for embedded units.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from page_cache.domain.entities import ContentUnit
    from page_cache.domain.value_objects import RenderOptions


@runtime_checkable
class Renderer(Protocol):
    """Abstract interface for the rendering collaborator."""

    def render(
        self,
        unit: ContentUnit,
        filename: Path,
        prepend_file: Optional[Path],
        append_file: Optional[Path],
        options: RenderOptions,
    ) -> bytes:
        """
        Render a unit.

        Args:
            unit: Unit to render
            filename: Resolved template file
            prepend_file: Resolved file rendered before the template, if any
            append_file: Resolved file rendered after the template, if any
            options: Full merged options, including passthrough keys

        Returns:
            Rendered output
        """
        ...


RenderFunction = Callable[
    ["ContentUnit", Path, Optional[Path], Optional[Path], "RenderOptions"], bytes
]


class CallableRenderer:
    """Adapts a plain function to the Renderer protocol."""

    def __init__(self, func: RenderFunction) -> None:
        self._func = func

    def render(
        self,
        unit: ContentUnit,
        filename: Path,
        prepend_file: Optional[Path],
        append_file: Optional[Path],
        options: RenderOptions,
    ) -> bytes:
        return self._func(unit, filename, prepend_file, append_file, options)
