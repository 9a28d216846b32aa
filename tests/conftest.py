"""
Pytest Configuration and Shared Fixtures.

This module contains fixtures available to all tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict

import pytest

from page_cache.adapters.memory_repository import InMemoryContentRepository
from page_cache.adapters.metrics_collector import InMemoryMetricsCollector
from page_cache.caching.cache_store import FileCacheStore
from page_cache.caching.key_builder import CacheKeyBuilder
from page_cache.config.models import CacheStoreConfig, PageCacheConfig, RenderConfig
from page_cache.domain.entities import CacheExpireMode, ContentUnit
from page_cache.pipeline.render_orchestrator import RenderOrchestrator
from tests.fixtures import RecordingRenderer, make_template, make_unit


@pytest.fixture
def sample_config_path() -> Path:
    """Path to sample configuration file."""
    return Path(__file__).parent / "fixtures" / "sample_config.yaml"


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    """Cache root directory (not created up front)."""
    return tmp_path / "cache" / "Page"


@pytest.fixture
def templates_path(tmp_path: Path) -> Path:
    """Templates directory with a few template files."""
    path = tmp_path / "templates"
    path.mkdir()
    for name in ("basic-page.html", "home.html", "post.html", "_init.html", "_main.html", "alt.html"):
        (path / name).write_text(name)
    return path


@pytest.fixture
def config(cache_root: Path, templates_path: Path) -> PageCacheConfig:
    """Page cache configuration rooted in tmp_path."""
    return PageCacheConfig(
        cache=CacheStoreConfig(root=cache_root, log_access=True),
        render=RenderConfig(templates_path=templates_path, default_locale="en"),
    )


@pytest.fixture
def key_builder(config: PageCacheConfig) -> CacheKeyBuilder:
    return CacheKeyBuilder(config)


@pytest.fixture
def store(config: PageCacheConfig, key_builder: CacheKeyBuilder) -> FileCacheStore:
    return FileCacheStore(config, key_builder)


@pytest.fixture
def metrics_collector() -> InMemoryMetricsCollector:
    """Create metrics collector for testing."""
    return InMemoryMetricsCollector()


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def orchestrator(
    config: PageCacheConfig,
    renderer: RecordingRenderer,
    store: FileCacheStore,
    metrics_collector: InMemoryMetricsCollector,
) -> RenderOrchestrator:
    return RenderOrchestrator(
        config,
        renderer,
        store=store,
        metrics_collector=metrics_collector,
    )


@pytest.fixture
def site_units() -> Dict[str, ContentUnit]:
    """
    Small site tree:

        home (1)
        ├── blog (2)
        │   └── post (3)      expires its parent chain
        └── about (4)
    """
    home = make_unit(1, make_template("home"), name="home")
    blog = make_unit(2, parent_id=1, name="blog")
    post = make_unit(
        3,
        make_template("post", cache_expire_mode=CacheExpireMode.PARENT_CHAIN),
        parent_id=2,
        name="post",
    )
    about = make_unit(4, parent_id=1, name="about")
    return {"home": home, "blog": blog, "post": post, "about": about}


@pytest.fixture
def repository(site_units: Dict[str, ContentUnit]) -> InMemoryContentRepository:
    return InMemoryContentRepository(site_units.values())
