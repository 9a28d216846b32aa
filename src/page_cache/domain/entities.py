"""
Core Domain Entities.

This module defines the fundamental entities of the page cache domain.
Content units and their templates are owned by the content-management
collaborator; the cache only reads them.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import FrozenSet, List, Optional

from pydantic import BaseModel, Field, field_validator


class PageStatus(str, Enum):
    """Status flags of a content unit."""

    PUBLISHED = "PUBLISHED"
    UNPUBLISHED = "UNPUBLISHED"
    HIDDEN = "HIDDEN"
    TRASH = "TRASH"


class CacheExpireMode(str, Enum):
    """What to purge when a unit using a template is saved or deleted."""

    NONE = "none"
    THIS_PAGE_ONLY = "page"
    ENTIRE_CACHE = "site"
    PARENT_CHAIN = "parents"
    EXPLICIT_LIST = "specific"


class ChangeKind(str, Enum):
    """Kind of content change notification."""

    SAVED = "SAVED"
    DELETED = "DELETED"


def _split_names(value: str) -> List[str]:
    return [name for name in value.split() if name]


class TemplateConfig(BaseModel):
    """Cache-related configuration bundle attached to a template."""

    name: str = Field(..., min_length=1, description="Template name")
    filename: Optional[str] = Field(
        default=None, description="Template file, relative to the templates path"
    )
    cache_time_seconds: int = Field(
        default=0, ge=0, description="Cache lifetime, 0 disables caching"
    )
    cache_expire_mode: CacheExpireMode = Field(default=CacheExpireMode.THIS_PAGE_ONLY)
    cache_expire_targets: List[int] = Field(
        default_factory=list, description="Unit ids purged in EXPLICIT_LIST mode"
    )
    use_cache_for_logged_in_users: bool = False
    no_cache_query_vars: str = Field(
        default="", description="Space-delimited GET names that disable caching"
    )
    no_cache_post_vars: str = Field(
        default="", description="Space-delimited POST names that disable caching"
    )
    is_system: bool = Field(
        default=False, description="System templates get no prepend/append files"
    )

    model_config = {"frozen": True}

    @field_validator("cache_expire_targets")
    @classmethod
    def _targets_non_negative(cls, value: List[int]) -> List[int]:
        if any(target < 0 for target in value):
            raise ValueError("cache_expire_targets must be unsigned ids")
        return value

    @property
    def is_cache_enabled(self) -> bool:
        return self.cache_time_seconds > 0

    @property
    def resolved_filename(self) -> str:
        """Template file name, defaulting to ``<name>.html``."""
        return self.filename or f"{self.name}.html"

    @property
    def no_cache_query_names(self) -> List[str]:
        return _split_names(self.no_cache_query_vars)

    @property
    def no_cache_post_names(self) -> List[str]:
        return _split_names(self.no_cache_post_vars)


class ContentUnit(BaseModel):
    """An addressable content unit ("page") whose output may be cached."""

    id: int = Field(..., ge=0, description="Stable unit id")
    name: str = Field(..., description="URL name of the unit")
    template: TemplateConfig
    status: FrozenSet[PageStatus] = Field(
        default_factory=lambda: frozenset({PageStatus.PUBLISHED})
    )
    parent_id: Optional[int] = Field(default=None, ge=0)

    model_config = {"frozen": True}

    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContentUnit):
            return NotImplemented
        return self.id == other.id

    @property
    def is_published(self) -> bool:
        return (
            PageStatus.UNPUBLISHED not in self.status
            and PageStatus.TRASH not in self.status
        )

    @property
    def is_hidden(self) -> bool:
        return PageStatus.HIDDEN in self.status


class Identity(BaseModel):
    """The requesting user, as resolved by the session collaborator."""

    user_id: int = Field(default=0, ge=0)
    is_guest: bool = True
    is_superuser: bool = False
    editable_unit_ids: FrozenSet[int] = Field(default_factory=frozenset)

    model_config = {"frozen": True}

    @classmethod
    def guest(cls) -> "Identity":
        return cls()

    def can_edit(self, unit: ContentUnit) -> bool:
        """Check edit rights on a unit."""
        if self.is_guest:
            return False
        return self.is_superuser or unit.id in self.editable_unit_ids

    def can_view(self, unit: ContentUnit) -> bool:
        """
        Check whether the unit may be shown to this identity.

        Hidden units are viewable; unpublished or trashed units are only
        viewable by identities that can edit them.
        """
        if unit.is_published:
            return True
        return self.can_edit(unit)


class ContentChanged(BaseModel):
    """Notification published after the content collaborator saved/deleted a unit."""

    unit: ContentUnit
    kind: ChangeKind
    occurred_at: datetime = Field(default_factory=datetime.now)

    model_config = {"frozen": True}
