"""
Unit Tests for RenderOrchestrator.

Test Aspects Covered:
    ✅ Business Logic: hit/miss, persistence, option merging
    ✅ Nesting: active unit tracking across embedded renders
    ✅ Error Handling: PermissionDenied, InvalidLocation,
       ConfigurationError, absorbed storage errors
    ✅ Metrics: hit/miss/write counters
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import Mock

import pytest

from page_cache.adapters.metrics_collector import InMemoryMetricsCollector
from page_cache.caching.cache_store import FileCacheStore
from page_cache.config.models import CacheStoreConfig, PageCacheConfig, RenderConfig
from page_cache.domain.entities import Identity, PageStatus
from page_cache.domain.value_objects import RenderOptions, RequestContext
from page_cache.interfaces.renderer import CallableRenderer
from page_cache.pipeline.render_context import current_render_context, request_scope
from page_cache.pipeline.render_orchestrator import RenderOrchestrator
from page_cache.resilience.errors import ConfigurationError, InvalidLocation, PermissionDenied
from tests.fixtures import RecordingRenderer, make_template, make_unit


def guest_request(unit_id: int, **kwargs) -> RequestContext:
    return RequestContext(page_id=unit_id, **kwargs)


class TestCacheHitMiss:
    """Serving from cache vs. rendering."""

    def test_miss_renders_and_persists(
        self, orchestrator: RenderOrchestrator, renderer: RecordingRenderer, store: FileCacheStore
    ) -> None:
        unit = make_unit(10, name="hello")

        output = orchestrator.render(unit, request=guest_request(10))

        assert output == b"<html>hello</html>"
        assert renderer.call_count == 1
        assert (store.root / "10" / "index.cache").read_bytes() == output

    def test_hit_skips_renderer(
        self, orchestrator: RenderOrchestrator, renderer: RecordingRenderer
    ) -> None:
        unit = make_unit(10)
        first = orchestrator.render(unit, request=guest_request(10))

        second = orchestrator.render(unit, request=guest_request(10))

        assert second == first
        assert renderer.call_count == 1

    def test_uncacheable_template_always_renders(
        self, orchestrator: RenderOrchestrator, renderer: RecordingRenderer, store: FileCacheStore
    ) -> None:
        unit = make_unit(10, make_template(cache_time_seconds=0))

        orchestrator.render(unit, request=guest_request(10))
        orchestrator.render(unit, request=guest_request(10))

        assert renderer.call_count == 2
        assert not (store.root / "10").exists()

    def test_allow_cache_false_renders_without_writing(
        self, orchestrator: RenderOrchestrator, renderer: RecordingRenderer, store: FileCacheStore
    ) -> None:
        unit = make_unit(10)

        orchestrator.render(unit, {"allow_cache": False}, request=guest_request(10))

        assert renderer.call_count == 1
        assert not (store.root / "10" / "index.cache").exists()

    def test_force_build_cache_rerenders_and_rewrites(
        self, config: PageCacheConfig, store: FileCacheStore
    ) -> None:
        outputs = iter([b"v1", b"v2"])
        renderer = RecordingRenderer(lambda unit: next(outputs))
        orchestrator = RenderOrchestrator(config, renderer, store=store)
        unit = make_unit(10)
        orchestrator.render(unit, request=guest_request(10))

        forced = orchestrator.render(unit, {"forceBuildCache": True}, request=guest_request(10))
        cached = orchestrator.render(unit, request=guest_request(10))

        assert forced == b"v2"
        assert cached == b"v2"
        assert renderer.call_count == 2

    def test_empty_output_is_not_cached(
        self, config: PageCacheConfig, store: FileCacheStore
    ) -> None:
        renderer = RecordingRenderer(lambda unit: b"")
        orchestrator = RenderOrchestrator(config, renderer, store=store)
        unit = make_unit(10)

        orchestrator.render(unit, request=guest_request(10))
        orchestrator.render(unit, request=guest_request(10))

        assert renderer.call_count == 2
        assert not (store.root / "10" / "index.cache").exists()

    def test_variants_cached_separately(
        self, orchestrator: RenderOrchestrator, renderer: RecordingRenderer, store: FileCacheStore
    ) -> None:
        unit = make_unit(10)

        orchestrator.render(unit, request=guest_request(10))
        orchestrator.render(unit, request=guest_request(10, page_num=2))
        orchestrator.render(unit, request=guest_request(10, page_num=2))

        assert renderer.call_count == 2
        assert sorted(p.name for p in (store.root / "10").iterdir()) == [
            "index.cache",
            "page2.cache",
        ]

    def test_blocked_query_param_bypasses_cache(
        self, orchestrator: RenderOrchestrator, renderer: RecordingRenderer
    ) -> None:
        unit = make_unit(10, make_template(no_cache_query_vars="nocache"))
        orchestrator.render(unit, request=guest_request(10))

        orchestrator.render(unit, request=guest_request(10, query={"nocache": "1"}))

        assert renderer.call_count == 2

    def test_str_output_is_encoded(self, config: PageCacheConfig, store: FileCacheStore) -> None:
        renderer = CallableRenderer(lambda unit, f, p, a, o: "héllo")
        orchestrator = RenderOrchestrator(config, renderer, store=store)

        assert orchestrator.render(make_unit(10)) == "héllo".encode("utf-8")


class TestMetrics:
    """Metrics recorded by render()."""

    def test_hit_miss_write_counters(
        self, orchestrator: RenderOrchestrator, metrics_collector: InMemoryMetricsCollector
    ) -> None:
        unit = make_unit(10)
        orchestrator.render(unit, request=guest_request(10))
        orchestrator.render(unit, request=guest_request(10))

        assert metrics_collector.total("cache_miss") == 1
        assert metrics_collector.total("cache_write") == 1
        assert metrics_collector.total("cache_hit") == 1
        assert metrics_collector.get_metrics()["render_duration_seconds"]["count"] == 1


class TestOptions:
    """Option merging and template file resolution."""

    def test_string_is_filename_shorthand(self) -> None:
        options = RenderOrchestrator.merge_options("alt.html")

        assert options.filename == "alt.html"
        assert options.allow_cache is True

    def test_dict_merged_over_defaults_with_passthrough(self) -> None:
        options = RenderOrchestrator.merge_options({"appendFile": "_main.html", "sidebar": False})

        assert options.append_file == "_main.html"
        assert options.force_build_cache is False
        assert options.extras == {"sidebar": False}

    def test_options_passed_through_to_renderer(
        self, orchestrator: RenderOrchestrator, renderer: RecordingRenderer
    ) -> None:
        orchestrator.render(make_unit(10), {"headline": "Hi"})

        passed = renderer.calls[0]["options"]
        assert isinstance(passed, RenderOptions)
        assert passed.extras == {"headline": "Hi"}

    def test_default_template_file(
        self, orchestrator: RenderOrchestrator, renderer: RecordingRenderer, templates_path: Path
    ) -> None:
        orchestrator.render(make_unit(10))

        call = renderer.calls[0]
        assert call["filename"] == (templates_path / "basic-page.html").resolve()
        assert call["prepend_file"] is None
        assert call["append_file"] is None

    def test_configured_prepend_append(
        self, cache_root: Path, templates_path: Path, renderer: RecordingRenderer
    ) -> None:
        config = PageCacheConfig(
            cache=CacheStoreConfig(root=cache_root),
            render=RenderConfig(
                templates_path=templates_path,
                prepend_template_file="_init.html",
                append_template_file="_main.html",
            ),
        )
        orchestrator = RenderOrchestrator(config, renderer)

        orchestrator.render(make_unit(10))

        call = renderer.calls[0]
        assert call["prepend_file"] == (templates_path / "_init.html").resolve()
        assert call["append_file"] == (templates_path / "_main.html").resolve()

    def test_system_template_gets_no_prepend_append(
        self, orchestrator: RenderOrchestrator, renderer: RecordingRenderer
    ) -> None:
        unit = make_unit(10, make_template(is_system=True))

        orchestrator.render(unit, {"prepend_file": "_init.html", "append_file": "_main.html"})

        call = renderer.calls[0]
        assert call["prepend_file"] is None
        assert call["append_file"] is None

    def test_custom_filename_gets_own_cache_entry(
        self, orchestrator: RenderOrchestrator, renderer: RecordingRenderer, store: FileCacheStore
    ) -> None:
        unit = make_unit(10)
        orchestrator.render(unit, request=guest_request(10))

        orchestrator.render(unit, "alt.html", request=guest_request(10))

        assert renderer.call_count == 2
        assert len(list((store.root / "10").iterdir())) == 2

    @pytest.mark.parametrize(
        "filename",
        ["../secret.html", "/etc/passwd", "sub/../../x.html", "."],
    )
    def test_filename_outside_templates_rejected(
        self, orchestrator: RenderOrchestrator, renderer: RecordingRenderer, filename: str
    ) -> None:
        with pytest.raises(InvalidLocation):
            orchestrator.render(make_unit(10), filename)

        assert renderer.call_count == 0

    def test_prepend_outside_templates_rejected(
        self, orchestrator: RenderOrchestrator
    ) -> None:
        with pytest.raises(InvalidLocation):
            orchestrator.render(make_unit(10), {"prependFile": "../../evil.html"})


class TestPermissions:
    """Viewability checks."""

    def test_unpublished_unit_denied_for_guest(
        self, orchestrator: RenderOrchestrator, renderer: RecordingRenderer, store: FileCacheStore
    ) -> None:
        unit = make_unit(10, status=frozenset({PageStatus.UNPUBLISHED}))

        with pytest.raises(PermissionDenied) as exc_info:
            orchestrator.render(unit, request=guest_request(10))

        assert exc_info.value.unit_id == 10
        assert renderer.call_count == 0
        assert not store.root.exists()

    def test_unpublished_unit_rendered_live_for_editor(
        self, orchestrator: RenderOrchestrator, renderer: RecordingRenderer
    ) -> None:
        unit = make_unit(10, status=frozenset({PageStatus.UNPUBLISHED}))
        editor = Identity(user_id=3, is_guest=False, editable_unit_ids=frozenset({10}))

        orchestrator.render(unit, request=guest_request(10, identity=editor))
        orchestrator.render(unit, request=guest_request(10, identity=editor))

        assert renderer.call_count == 2

    def test_hidden_unit_is_viewable(
        self, orchestrator: RenderOrchestrator, renderer: RecordingRenderer
    ) -> None:
        unit = make_unit(10, status=frozenset({PageStatus.PUBLISHED, PageStatus.HIDDEN}))

        orchestrator.render(unit)

        assert renderer.call_count == 1


class TestNesting:
    """Embedded renders through the renderer."""

    def test_nested_render_tracks_active_unit(
        self, config: PageCacheConfig, store: FileCacheStore
    ) -> None:
        outer = make_unit(1, name="outer")
        inner = make_unit(2, name="inner")
        seen = []

        def render(unit, filename, prepend, append, options):
            context = current_render_context()
            seen.append((unit.id, context.active.id, [u.id for u in context.stack]))
            if unit.id == 1:
                return b"[" + orchestrator.render(inner) + b"]"
            return b"inner"

        orchestrator = RenderOrchestrator(config, CallableRenderer(render), store=store)

        output = orchestrator.render(outer, request=guest_request(1, page_num=2))

        assert output == b"[inner]"
        assert seen == [(1, 1, []), (2, 2, [1])]
        # nested unit is not the request's page: primary-only key
        assert (store.root / "2" / "index.cache").exists()
        assert (store.root / "1" / "page2.cache").exists()

    def test_nested_error_restores_outer(
        self, config: PageCacheConfig, store: FileCacheStore
    ) -> None:
        outer = make_unit(1)
        broken = make_unit(2, status=frozenset({PageStatus.UNPUBLISHED}))
        after = []

        def render(unit, filename, prepend, append, options):
            with pytest.raises(PermissionDenied):
                orchestrator.render(broken)
            after.append(current_render_context().active.id)
            return b"ok"

        orchestrator = RenderOrchestrator(config, CallableRenderer(render), store=store)

        orchestrator.render(outer)

        assert after == [1]
        assert current_render_context() is None

    def test_render_inside_existing_scope_uses_it(
        self, orchestrator: RenderOrchestrator, store: FileCacheStore
    ) -> None:
        unit = make_unit(10)

        with request_scope(guest_request(10, url_segments=["feed"])):
            orchestrator.render(unit)

        assert (store.root / "10" / "feed+.cache").exists()


class TestDegradedStorage:
    """Storage problems during render."""

    def test_configuration_error_is_fatal(
        self, tmp_path: Path, templates_path: Path, renderer: RecordingRenderer
    ) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        config = PageCacheConfig(
            cache=CacheStoreConfig(root=blocker / "cache"),
            render=RenderConfig(templates_path=templates_path),
        )
        orchestrator = RenderOrchestrator(config, renderer)

        with pytest.raises(ConfigurationError):
            orchestrator.render(make_unit(10))

        assert renderer.call_count == 0

    def test_failed_save_still_returns_output(
        self, config: PageCacheConfig, renderer: RecordingRenderer
    ) -> None:
        entry = Mock()
        entry.get.return_value = None
        entry.save.return_value = False
        store = Mock(spec=FileCacheStore)
        store.key_builder = Mock()
        store.entry.return_value = entry
        orchestrator = RenderOrchestrator(config, renderer, store=store)

        output = orchestrator.render(make_unit(10, name="x"))

        assert output == b"<html>x</html>"
        entry.save.assert_called_once_with(output)
