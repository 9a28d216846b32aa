"""
Render Orchestrator - Request-Facing Cached Render.

Coordinates a single render call:
    1. Check the identity may view the unit
    2. Merge options over defaults and resolve template files
    3. Activate the unit in the request's render context
    4. If caching is allowed: serve a fresh entry without rendering
    5. Otherwise render, and persist non-empty output when eligible
    6. Restore the previously active unit

Errors:
    PermissionDenied     unit not viewable (before any cache work)
    InvalidLocation      a template file escapes the templates path
    ConfigurationError   the cache directory cannot be created
Storage read/write failures degrade to an uncached render.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from page_cache.caching.cache_store import FileCacheStore
from page_cache.caching.eligibility import CacheEligibilityEvaluator
from page_cache.caching.key_builder import CacheKeyBuilder
from page_cache.config.models import PageCacheConfig
from page_cache.domain.entities import ContentUnit
from page_cache.domain.value_objects import RenderOptions, RequestContext
from page_cache.interfaces.metrics_collector import MetricsCollector
from page_cache.interfaces.renderer import Renderer
from page_cache.pipeline.render_context import (
    RenderContext,
    current_render_context,
    request_scope,
)
from page_cache.resilience.errors import InvalidLocation, PermissionDenied

logger = logging.getLogger(__name__)

OptionsArg = Union[None, str, Dict[str, Any], RenderOptions]

# Resolved (filename, prepend_file, append_file)
TemplateFiles = Tuple[Path, Optional[Path], Optional[Path]]


class RenderOrchestrator:
    """Main entry point: render a unit, using the cache where permitted."""

    def __init__(
        self,
        config: PageCacheConfig,
        renderer: Renderer,
        evaluator: Optional[CacheEligibilityEvaluator] = None,
        key_builder: Optional[CacheKeyBuilder] = None,
        store: Optional[FileCacheStore] = None,
        metrics_collector: Optional[MetricsCollector] = None,
    ) -> None:
        """
        Initialize orchestrator with all dependencies.

        Args:
            config: Page cache configuration
            renderer: Rendering collaborator
            evaluator: Cache eligibility rules (created if None)
            key_builder: Cache location builder (taken from store, or created)
            store: Cache store (created if None)
            metrics_collector: Optional metrics collector
        """
        self.config = config
        self.renderer = renderer
        self.evaluator = evaluator or CacheEligibilityEvaluator()
        if store is not None:
            self.key_builder = key_builder or store.key_builder
            self.store = store
        else:
            self.key_builder = key_builder or CacheKeyBuilder(config)
            self.store = FileCacheStore(config, self.key_builder)
        self.metrics = metrics_collector

    def render(
        self,
        unit: ContentUnit,
        options: OptionsArg = None,
        request: Optional[RequestContext] = None,
    ) -> bytes:
        """
        Render a unit, serving a cached copy when one is fresh.

        Nested calls (made by the renderer while another unit renders)
        share the current request's render context. A call made outside
        any request opens one from ``request``, or an anonymous request
        driven by ``unit``.

        Args:
            unit: Unit to render
            options: Options dict/RenderOptions, or a filename string
            request: Request context for a top-level call

        Returns:
            Rendered (or cached) output

        Raises:
            PermissionDenied: If the identity may not view the unit
            InvalidLocation: If a template file escapes the templates path
            ConfigurationError: If the cache directory cannot be created
        """
        context = current_render_context()
        if context is None or request is not None:
            with request_scope(request or RequestContext(page_id=unit.id)) as context:
                return self._render(unit, options, context)
        return self._render(unit, options, context)

    def _render(
        self,
        unit: ContentUnit,
        options: OptionsArg,
        context: RenderContext,
    ) -> bytes:
        request = context.request
        if not request.identity.can_view(unit):
            raise PermissionDenied(unit.id)

        merged = self.merge_options(options)
        filename, prepend_file, append_file = self.resolve_template_files(unit, merged)
        tags = {"template": unit.template.name}

        with context.activate(unit):
            entry = None
            if merged.allow_cache and self.evaluator.is_cacheable(unit, request):
                key = self.key_builder.locate(unit, merged, request)
                entry = self.store.entry(key, unit.template.cache_time_seconds)

                if not merged.force_build_cache:
                    cached = entry.get()
                    if cached is not None:
                        self._count("cache_hit", tags)
                        return cached
                self._count("cache_miss", tags)

            start = time.perf_counter()
            data = self.renderer.render(
                unit, filename, prepend_file, append_file, merged
            )
            if isinstance(data, str):
                data = data.encode("utf-8")
            duration = time.perf_counter() - start

            if self.metrics:
                self.metrics.record_timing("render_duration_seconds", duration, tags)
            logger.debug(
                f"Rendered unit {unit.id} in {duration:.3f}s "
                f"(depth={context.depth}, {len(data)} bytes)"
            )

            if data and entry is not None and entry.save(data):
                self._count("cache_write", tags)

            return data

    @staticmethod
    def merge_options(options: OptionsArg) -> RenderOptions:
        """
        Merge caller options over the defaults.

        A plain string is shorthand for ``{"filename": options}``.
        """
        if options is None:
            return RenderOptions()
        if isinstance(options, RenderOptions):
            return options
        if isinstance(options, str):
            return RenderOptions(filename=options)
        return RenderOptions.model_validate(options)

    def resolve_template_files(
        self,
        unit: ContentUnit,
        options: RenderOptions,
    ) -> TemplateFiles:
        """
        Resolve the template, prepend and append files for a render.

        System templates never get prepend/append files.

        Raises:
            InvalidLocation: If any file resolves outside the templates path
        """
        render_config = self.config.render
        root = Path(render_config.templates_path)

        filename = self._resolve_within(
            root, options.filename or unit.template.resolved_filename
        )
        if unit.template.is_system:
            return filename, None, None

        prepend_name = (
            options.prepend_file
            if options.prepend_file is not None
            else render_config.prepend_template_file
        )
        append_name = (
            options.append_file
            if options.append_file is not None
            else render_config.append_template_file
        )
        prepend_file = self._resolve_within(root, prepend_name) if prepend_name else None
        append_file = self._resolve_within(root, append_name) if append_name else None
        return filename, prepend_file, append_file

    @staticmethod
    def _resolve_within(root: Path, name: str) -> Path:
        if ".." in Path(name).parts:
            raise InvalidLocation(name, root)
        resolved_root = root.resolve()
        resolved = (root / name).resolve()
        if resolved == resolved_root or not resolved.is_relative_to(resolved_root):
            raise InvalidLocation(name, root)
        return resolved

    def _count(self, name: str, tags: Dict[str, str]) -> None:
        if self.metrics:
            self.metrics.record_count(name, 1, tags)
