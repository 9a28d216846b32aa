"""
Configuration Models - Pydantic Models for Type-Safe Config.

All configuration is validated at load time using Pydantic.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Union

from pydantic import BaseModel, Field, field_validator

from page_cache.domain.entities import TemplateConfig


def _parse_mode(value: Union[int, str]) -> int:
    """Accept permission bits as int or octal string ("0755", "0o755")."""
    if isinstance(value, str):
        text = value.strip().lower()
        if text.startswith("0o"):
            text = text[2:]
        return int(text, 8)
    return value


class CacheStoreConfig(BaseModel):
    """Configuration for on-disk cache storage."""

    root: Path = Field(default=Path("cache/Page"))
    dir_permissions: int = Field(default=0o755, ge=0, le=0o7777)
    file_permissions: int = Field(default=0o644, ge=0, le=0o7777)
    extension: str = Field(default=".cache")
    default_name: str = Field(default="index", min_length=1)
    max_filename_length: int = Field(default=200, ge=32, le=250)

    # Log cache hits/misses
    log_access: bool = False

    @field_validator("dir_permissions", "file_permissions", mode="before")
    @classmethod
    def _octal_permissions(cls, value: Union[int, str]) -> int:
        return _parse_mode(value)

    @field_validator("extension")
    @classmethod
    def _dotted_extension(cls, value: str) -> str:
        if value and not value.startswith("."):
            value = f".{value}"
        if "/" in value or "\\" in value:
            raise ValueError("extension must not contain path separators")
        return value


class RenderConfig(BaseModel):
    """Configuration for template file resolution and variant keys."""

    templates_path: Path = Field(default=Path("templates"))
    prepend_template_file: Optional[str] = None
    append_template_file: Optional[str] = None
    page_num_prefix: str = Field(default="page", min_length=1)
    default_locale: Optional[str] = None


class PageCacheConfig(BaseModel):
    """Root configuration object."""

    version: str = "1.0"
    cache: CacheStoreConfig = Field(default_factory=CacheStoreConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    templates: Dict[str, TemplateConfig] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}

    @field_validator("templates", mode="before")
    @classmethod
    def _inject_template_names(cls, value: object) -> object:
        # YAML maps template name -> settings; the name lives in the key
        if isinstance(value, dict):
            return {
                name: (
                    {"name": name, **settings}
                    if isinstance(settings, dict)
                    else settings
                )
                for name, settings in value.items()
            }
        return value

    def get_template(self, name: str) -> TemplateConfig:
        """
        Get a template configuration by name.

        Raises:
            KeyError: If no template with that name is configured
        """
        try:
            return self.templates[name]
        except KeyError:
            raise KeyError(f"Unknown template: {name}") from None
