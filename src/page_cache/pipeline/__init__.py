"""
Pipeline Package - Render Orchestration.

    - RenderOrchestrator: cached render entry point
    - RenderContext: request-scoped active unit and recursion stack
    - request_scope / current_render_context: context lifecycle
"""

from page_cache.pipeline.render_context import (
    RenderContext,
    current_render_context,
    request_scope,
)
from page_cache.pipeline.render_orchestrator import RenderOrchestrator

__all__ = [
    "RenderContext",
    "RenderOrchestrator",
    "current_render_context",
    "request_scope",
]
