"""
Cache Eligibility - Decide Whether a Request May Use the Cache.

Rules are evaluated in order and the first failing rule wins:
    1. The unit's template sets a cache time
    2. Logged-in identities need use_cache_for_logged_in_users and no
       edit rights on the unit
    3. No listed GET parameter is present
    4. No listed POST parameter is present
    5. The request has not flagged this unit as non-cacheable

A failing rule disables caching for the current request only; existing
entries are left alone.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional

from page_cache.domain.entities import ContentUnit
from page_cache.domain.value_objects import RequestContext

logger = logging.getLogger(__name__)

# Matches any parameter name
WILDCARD = "*"


class CacheEligibilityEvaluator:
    """Pure predicate over a unit's template config and the request."""

    def is_cacheable(self, unit: ContentUnit, request: RequestContext) -> bool:
        """
        Check if the unit's output may be served from / written to the cache.

        Args:
            unit: Unit being rendered
            request: Current request context

        Returns:
            True if caching is permitted for this request
        """
        reason = self.explain(unit, request)
        if reason is not None:
            logger.debug(f"Cache disabled for unit {unit.id}: {reason}")
            return False
        return True

    def explain(self, unit: ContentUnit, request: RequestContext) -> Optional[str]:
        """Return the reason caching is disallowed, or None if it is allowed."""
        template = unit.template

        if not template.is_cache_enabled:
            return "template has no cache time"

        identity = request.identity
        if not identity.is_guest:
            if not template.use_cache_for_logged_in_users:
                return "cache disabled for logged-in users"
            if identity.can_edit(unit):
                return "identity can edit unit"

        if request.query and self._has_blocked_param(
            request.query, template.no_cache_query_names
        ):
            return "blocked GET parameter present"

        if request.post and self._has_blocked_param(
            request.post, template.no_cache_post_names
        ):
            return "blocked POST parameter present"

        if request.no_cache_unit_id is not None and request.no_cache_unit_id == unit.id:
            return "request override"

        return None

    @staticmethod
    def _has_blocked_param(params: Mapping[str, str], names: List[str]) -> bool:
        if not names:
            return False
        if WILDCARD in names:
            return True
        return any(name in params for name in names)
