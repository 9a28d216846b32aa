"""
Domain Layer - Core Entities and Value Objects.

This package contains the core domain model for the page cache.
Everything here is plain data with no infrastructure dependencies
(except Pydantic for validation).

Entities:
    - ContentUnit: An addressable page with its template configuration
    - TemplateConfig: Cache time, expiry mode and no-cache parameters
    - Identity: The requesting user and their edit rights
    - ContentChanged: Save/delete notification

Value Objects:
    - CacheKey: Container id plus variant discriminator
    - RenderOptions: Options for a single render call
    - RequestContext: Request-scoped inputs (params, segments, locale)
"""

from page_cache.domain.entities import (
    CacheExpireMode,
    ChangeKind,
    ContentChanged,
    ContentUnit,
    Identity,
    PageStatus,
    TemplateConfig,
)
from page_cache.domain.value_objects import CacheKey, RenderOptions, RequestContext

__all__ = [
    "CacheExpireMode",
    "CacheKey",
    "ChangeKind",
    "ContentChanged",
    "ContentUnit",
    "Identity",
    "PageStatus",
    "RenderOptions",
    "RequestContext",
    "TemplateConfig",
]
