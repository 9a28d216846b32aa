"""
Configuration Package - Models and Loaders.

This package handles all configuration aspects of the page cache:
    - Pydantic models for type-safe configuration
    - YAML loader with validation
    - Support for configuration profiles

Configuration Structure:
    - PageCacheConfig: Root configuration object
    - CacheStoreConfig: Cache root, permissions, file naming
    - RenderConfig: Templates path, prepend/append files, locale
    - templates: Template name -> TemplateConfig
"""

from page_cache.config.loader import ConfigLoader, load_config
from page_cache.config.models import CacheStoreConfig, PageCacheConfig, RenderConfig

__all__ = [
    "CacheStoreConfig",
    "ConfigLoader",
    "PageCacheConfig",
    "RenderConfig",
    "load_config",
]
