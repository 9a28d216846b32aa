"""
Cache Key Builder - Variant-Aware Cache Locations.

Maps a unit plus the current request onto a CacheKey, and a CacheKey onto
a file below the cache root.

Storage Layout:
    <root>/<primary_id>/<discriminator><ext>
    <root>/<primary_id>/<default_name><ext>     (no discriminator)

Discriminator Format (in order, each part optional):
    "<segment>+"            per sanitized URL segment
    "~<options hash>+"      when filename/prepend/append are overridden
    "<prefix><n>"           when page_num > 1
    "_<locale>"             when the locale is not the default

    Example: "blog+2024+page3_de"

A segment or locale that sanitizing had to alter carries "=<hash>" of its
raw value, so "Blog" and "blog" (or "a b" and "a-b") stay distinct. The
"+", "~" and "=" markers cannot appear in sanitized text, so different
requests never produce the same discriminator.
"""

from __future__ import annotations

import hashlib
import logging
import os
import re
from pathlib import Path
from typing import Optional

from page_cache.config.models import PageCacheConfig
from page_cache.domain.entities import ContentUnit
from page_cache.domain.value_objects import CacheKey, RenderOptions, RequestContext
from page_cache.resilience.errors import ConfigurationError, InvalidLocation

logger = logging.getLogger(__name__)

SEGMENT_SEPARATOR = "+"
OPTIONS_HASH_MARKER = "~"
LOCALE_MARKER = "_"
RAW_HASH_MARKER = "="

_UNSAFE_CHARS = re.compile(r"[^a-z0-9._-]+")
_DOT_RUNS = re.compile(r"\.{2,}")


def _short_hash(value: str, length: int) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:length]


def sanitize_segment(value: str) -> str:
    """
    Reduce a path-derived value to a safe file name fragment.

    Lowercases, replaces anything outside ``[a-z0-9._-]`` with "-",
    collapses dot runs and strips leading dots so no traversal token
    ("..", "/", hidden files) survives. When that changed the value, a
    short hash of the raw value is appended after "=".

    Examples:
        "2024"  -> "2024"
        "Blog"  -> "blog=<8 hex>"
    """
    text = _UNSAFE_CHARS.sub("-", value.lower())
    text = _DOT_RUNS.sub(".", text).lstrip(".")
    if text != value:
        text += RAW_HASH_MARKER + _short_hash(value, 8)
    return text


def options_hash(options: RenderOptions) -> str:
    """Short stable hash of the caller's file overrides."""
    # NUL cannot occur in a file name
    raw = "\0".join(
        (options.prepend_file or "", options.append_file or "", options.filename or "")
    )
    return _short_hash(raw, 16)


class CacheKeyBuilder:
    """
    Derives cache locations for units.

    Only the unit driving the top-level request gets a discriminator.
    Nested renders of other units, and lookups made outside any request
    (invalidation), address the container by primary id only.
    """

    def __init__(self, config: PageCacheConfig) -> None:
        """
        Initialize key builder.

        Args:
            config: Page cache configuration
        """
        self.config = config
        self.root = Path(config.cache.root)

    def locate(
        self,
        unit: ContentUnit,
        options: Optional[RenderOptions] = None,
        request: Optional[RequestContext] = None,
    ) -> CacheKey:
        """
        Compute the cache key for a unit.

        Also ensures the unit's container directory exists.

        Args:
            unit: Unit being rendered or invalidated
            options: Render options of the current call
            request: Current request context (None outside a request)

        Returns:
            CacheKey for the unit

        Raises:
            ConfigurationError: If the container cannot be created
        """
        self.container_path(unit.id)

        if request is None or not request.is_top_level(unit.id):
            return CacheKey(primary_id=unit.id)

        discriminator = self.build_discriminator(options or RenderOptions(), request)
        return CacheKey(primary_id=unit.id, discriminator=discriminator or None)

    def build_discriminator(
        self,
        options: RenderOptions,
        request: RequestContext,
    ) -> str:
        """Build the variant discriminator for a top-level request."""
        parts = []

        for segment in request.url_segments:
            parts.append(sanitize_segment(segment) + SEGMENT_SEPARATOR)

        if options.has_custom_files:
            parts.append(OPTIONS_HASH_MARKER + options_hash(options) + SEGMENT_SEPARATOR)

        if request.page_num > 1:
            parts.append(f"{self.config.render.page_num_prefix}{request.page_num}")

        locale = request.locale
        if locale and locale != self.config.render.default_locale:
            parts.append(LOCALE_MARKER + sanitize_segment(locale))

        discriminator = "".join(parts)
        if len(discriminator) > self.config.cache.max_filename_length:
            discriminator = hashlib.sha256(discriminator.encode("utf-8")).hexdigest()
        return discriminator

    def container_path(self, primary_id: int, create: bool = True) -> Path:
        """
        Directory holding every variant of one unit.

        Raises:
            ConfigurationError: If the directory cannot be created
        """
        path = self.root / str(primary_id)
        if create and not path.is_dir():
            self._make_dir(path)
        return path

    def entry_path(self, key: CacheKey) -> Path:
        """
        File holding the cached bytes for one key.

        Raises:
            InvalidLocation: If the resolved file lies outside the container
        """
        container = self.root / str(key.primary_id)
        name = key.discriminator or self.config.cache.default_name
        path = container / f"{name}{self.config.cache.extension}"
        if path.resolve().parent != container.resolve():
            raise InvalidLocation(path, container)
        return path

    def _make_dir(self, path: Path) -> None:
        mode = self.config.cache.dir_permissions
        try:
            os.makedirs(path, mode=mode, exist_ok=True)
            # makedirs mode is filtered through the umask
            os.chmod(path, mode)
        except OSError as e:
            raise ConfigurationError(
                f"Unable to create cache directory {path}: {e}"
            ) from e
        logger.debug(f"Created cache directory {path}")
