"""
Test Fixtures - Shared Test Data and Builders.

This package contains reusable test helpers:
    - sample_config.yaml: Sample configuration for testing
    - make_template / make_unit: content unit builders
    - RecordingRenderer: renderer double that records its calls
    - seed_entry: write a raw cache file for a unit

Usage:
    from tests.fixtures import make_unit, RecordingRenderer
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from page_cache.caching.cache_store import FileCacheStore
from page_cache.domain.entities import CacheExpireMode, ContentUnit, TemplateConfig
from page_cache.domain.value_objects import RenderOptions

FIXTURES_DIR = Path(__file__).parent


class RecordingRenderer:
    """Renderer double that records calls and returns deterministic bytes."""

    def __init__(self, output: Optional[Callable[[ContentUnit], bytes]] = None) -> None:
        self.calls: List[Dict[str, Any]] = []
        self._output = output or (lambda unit: f"<html>{unit.name}</html>".encode())

    def render(
        self,
        unit: ContentUnit,
        filename: Path,
        prepend_file: Optional[Path],
        append_file: Optional[Path],
        options: RenderOptions,
    ) -> bytes:
        self.calls.append(
            {
                "unit_id": unit.id,
                "filename": filename,
                "prepend_file": prepend_file,
                "append_file": append_file,
                "options": options,
            }
        )
        return self._output(unit)

    @property
    def call_count(self) -> int:
        return len(self.calls)


def make_template(
    name: str = "basic-page",
    cache_time_seconds: int = 3600,
    cache_expire_mode: CacheExpireMode = CacheExpireMode.THIS_PAGE_ONLY,
    **kwargs: Any,
) -> TemplateConfig:
    """Build a template config with caching enabled by default."""
    return TemplateConfig(
        name=name,
        cache_time_seconds=cache_time_seconds,
        cache_expire_mode=cache_expire_mode,
        **kwargs,
    )


def make_unit(
    unit_id: int,
    template: Optional[TemplateConfig] = None,
    parent_id: Optional[int] = None,
    name: Optional[str] = None,
    **kwargs: Any,
) -> ContentUnit:
    """Build a content unit."""
    return ContentUnit(
        id=unit_id,
        name=name or f"unit-{unit_id}",
        template=template or make_template(),
        parent_id=parent_id,
        **kwargs,
    )


def seed_entry(
    store: FileCacheStore,
    unit_id: int,
    name: str = "index",
    data: bytes = b"cached",
) -> Path:
    """Write a raw cache file for a unit, bypassing the orchestrator."""
    container = store.key_builder.container_path(unit_id)
    path = container / f"{name}{store.config.cache.extension}"
    path.write_bytes(data)
    return path
