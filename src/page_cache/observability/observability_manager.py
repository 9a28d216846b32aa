"""
Observability Manager - Structured Cache Event Logging and Metrics.

Provides:
    - Structured JSON logging via structlog
    - Request id propagation through structlog contextvars
    - Metrics recording (MetricsCollector protocol compatible)

Design Notes:
    - Can be passed anywhere a MetricsCollector is accepted, so the render
      orchestrator and invalidation coordinator emit structured events
    - Thread-safe event and metric storage
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

import structlog

from page_cache.domain.value_objects import RequestContext


class ObservabilityManager:
    """
    Unified observability: structured logging and metrics.

    Every recorded metric is also emitted as a structured log event, tagged
    with the request id bound via request_bound().
    """

    def __init__(
        self,
        service_name: str = "page_cache",
        use_json: bool = True,
        log_level: int = logging.INFO,
    ) -> None:
        """
        Initialize observability manager.

        Args:
            service_name: Service name for log entries
            use_json: Use JSON output (console renderer otherwise)
            log_level: Logging level
        """
        self.service_name = service_name
        self.use_json = use_json
        self.log_level = log_level
        self._metrics: Dict[str, List[Dict[str, Any]]] = {}
        self._events: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

        self._configure_structlog()
        self._logger = structlog.get_logger(service_name)

    def _configure_structlog(self) -> None:
        """Configure structlog for structured logging."""
        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
        ]

        if self.use_json:
            processors.append(structlog.processors.JSONRenderer())
        else:
            processors.append(structlog.dev.ConsoleRenderer())

        structlog.configure(
            processors=processors,
            wrapper_class=structlog.make_filtering_bound_logger(self.log_level),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(),
            cache_logger_on_first_use=True,
        )

    @contextmanager
    def request_bound(self, request: RequestContext) -> Iterator[None]:
        """
        Bind request id and page id to every event logged inside the block.

        Usage:
            with observability.request_bound(request):
                orchestrator.render(page, request=request)
        """
        with structlog.contextvars.bound_contextvars(
            request_id=request.request_id,
            page_id=request.page_id,
        ):
            yield

    def current_request_id(self) -> Optional[str]:
        return structlog.contextvars.get_contextvars().get("request_id")

    def log_event(
        self,
        event_type: str,
        data: Optional[Dict[str, Any]] = None,
        level: str = "info",
    ) -> None:
        """
        Log a structured event.

        Args:
            event_type: Type of event (e.g., "cache_hit", "cache_invalidation")
            data: Additional event data
            level: Log level (debug, info, warning, error)
        """
        event_data = {
            "event_type": event_type,
            "timestamp": datetime.now().isoformat(),
            "request_id": self.current_request_id(),
            **(data or {}),
        }

        with self._lock:
            self._events.append(event_data)

        log_method = getattr(self._logger, level.lower(), self._logger.info)
        log_method(event_type, **{k: v for k, v in event_data.items() if k != "event_type"})

    def record_metric(
        self,
        name: str,
        value: float,
        tags: Optional[Dict[str, str]] = None,
        metric_type: str = "gauge",
    ) -> None:
        """
        Record a metric value and emit it as a debug event.

        Args:
            name: Metric name
            value: Metric value
            tags: Additional tags/labels
            metric_type: Type (gauge, counter, histogram)
        """
        metric_entry = {
            "timestamp": datetime.now().isoformat(),
            "value": value,
            "tags": tags or {},
            "type": metric_type,
            "request_id": self.current_request_id(),
        }

        with self._lock:
            if name not in self._metrics:
                self._metrics[name] = []
            self._metrics[name].append(metric_entry)

        self.log_event(name, {"value": value, **(tags or {})}, level="debug")

    def get_metrics(self) -> Dict[str, List[Dict[str, Any]]]:
        """Get all recorded metrics."""
        with self._lock:
            return dict(self._metrics)

    def get_events(self) -> List[Dict[str, Any]]:
        """Get all recorded events."""
        with self._lock:
            return list(self._events)

    def clear(self) -> None:
        """Clear all recorded metrics and events."""
        with self._lock:
            self._metrics.clear()
            self._events.clear()

    # =========================================================================
    # MetricsCollector Protocol Compatibility
    # =========================================================================

    def record_timing(
        self,
        name: str,
        duration_seconds: float,
        tags: Optional[Dict] = None,
    ) -> None:
        """Record timing metric (MetricsCollector compatible)."""
        self.record_metric(name, duration_seconds, tags, metric_type="histogram")

    def record_count(
        self,
        name: str,
        value: int,
        tags: Optional[Dict] = None,
    ) -> None:
        """Record count metric (MetricsCollector compatible)."""
        self.record_metric(name, float(value), tags, metric_type="counter")

    def record_gauge(
        self,
        name: str,
        value: float,
        tags: Optional[Dict] = None,
    ) -> None:
        """Record gauge metric (MetricsCollector compatible)."""
        self.record_metric(name, value, tags, metric_type="gauge")
