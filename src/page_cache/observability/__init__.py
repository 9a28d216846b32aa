"""
Observability Package - Structured Logging and Metrics.

    - ObservabilityManager: structlog-based event logging with request ids,
      usable as a MetricsCollector
"""

from page_cache.observability.observability_manager import ObservabilityManager

__all__ = ["ObservabilityManager"]
