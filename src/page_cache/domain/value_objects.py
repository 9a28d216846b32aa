"""
Value Objects for Domain Layer.

Value objects describe a single render request and where its cached output
lives. They have no identity of their own.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from page_cache.domain.entities import Identity


# =============================================================================
# Type Aliases for improved readability
# =============================================================================

# Request parameters: name -> raw value
ParamsDict = Dict[str, str]


class CacheKey(BaseModel):
    """Location of a cache entry: container id plus variant discriminator."""

    primary_id: int = Field(..., ge=0)
    discriminator: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def is_variant(self) -> bool:
        return bool(self.discriminator)

    def __str__(self) -> str:
        if self.discriminator:
            return f"{self.primary_id}/{self.discriminator}"
        return str(self.primary_id)


class RenderOptions(BaseModel):
    """
    Options bundle for a single render call.

    Unknown keys are kept and passed through to the renderer untouched.
    Option names are accepted in snake_case or camelCase.
    """

    filename: Optional[str] = None
    prepend_file: Optional[str] = Field(default=None, alias="prependFile")
    append_file: Optional[str] = Field(default=None, alias="appendFile")
    allow_cache: bool = Field(default=True, alias="allowCache")
    force_build_cache: bool = Field(default=False, alias="forceBuildCache")

    model_config = {"extra": "allow", "populate_by_name": True}

    @property
    def has_custom_files(self) -> bool:
        """True when the caller overrides any template file."""
        return any((self.filename, self.prepend_file, self.append_file))

    @property
    def extras(self) -> Dict[str, object]:
        return dict(self.model_extra or {})


@dataclass
class RequestContext:
    """
    Request-scoped state supplied by the web/session collaborator.

    ``no_cache_unit_id`` is the session override: a collaborator may flag
    one unit as non-cacheable for the rest of the request.
    """

    page_id: Optional[int] = None
    identity: Identity = field(default_factory=Identity.guest)
    query: ParamsDict = field(default_factory=dict)
    post: ParamsDict = field(default_factory=dict)
    url_segments: List[str] = field(default_factory=list)
    page_num: int = 1
    locale: Optional[str] = None
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    no_cache_unit_id: Optional[int] = None

    def __post_init__(self) -> None:
        if self.page_num < 1:
            raise ValueError(f"page_num must be >= 1, got {self.page_num}")

    def disable_cache_for(self, unit_id: int) -> None:
        """Flag a unit as non-cacheable for this request only."""
        self.no_cache_unit_id = unit_id

    def clear_cache_override(self) -> None:
        self.no_cache_unit_id = None

    def is_top_level(self, unit_id: int) -> bool:
        """Check if the unit is the one driving this request."""
        return self.page_id is not None and self.page_id == unit_id
