"""
In-Memory Metrics Collector.

Keeps every recorded cache metric in memory with its tags, so tests and
admin tooling can ask for totals per template or per expiry mode.

Metric names emitted by the page cache:
    cache_hit / cache_miss / cache_write       tagged with template
    render_duration_seconds                    tagged with template
    cache_invalidation / cache_files_removed   tagged with mode
    cache_invalidation_failures                tagged with mode
    invalidation_duration_seconds              tagged with mode
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from threading import Lock
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class MetricSample:
    """One recorded value."""

    kind: str
    value: float
    tags: Dict[str, str] = field(default_factory=dict)
    recorded_at: datetime = field(default_factory=datetime.now)

    def matches(self, tags: Dict[str, str]) -> bool:
        return all(self.tags.get(k) == v for k, v in tags.items())


class InMemoryMetricsCollector:
    """Thread-safe in-memory metrics collector."""

    def __init__(self) -> None:
        self._samples: Dict[str, List[MetricSample]] = defaultdict(list)
        self._lock = Lock()

    def record_timing(
        self,
        name: str,
        duration_seconds: float,
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        self._append(name, MetricSample("timing", duration_seconds, dict(tags or {})))

    def record_count(
        self,
        name: str,
        value: int,
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        self._append(name, MetricSample("count", value, dict(tags or {})))

    def record_gauge(
        self,
        name: str,
        value: float,
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        self._append(name, MetricSample("gauge", value, dict(tags or {})))

    def get_metrics(self) -> Dict[str, Any]:
        """Get a summary (count, total, last) per metric name."""
        with self._lock:
            return {
                name: {
                    "count": len(samples),
                    "total": sum(s.value for s in samples),
                    "last": samples[-1].value,
                }
                for name, samples in self._samples.items()
                if samples
            }

    def total(self, name: str, **tags: str) -> float:
        """
        Sum of the values recorded under a name.

        Keyword arguments restrict the sum to samples carrying those tags,
        e.g. ``total("cache_hit", template="home")``.
        """
        with self._lock:
            return sum(s.value for s in self._samples.get(name, []) if s.matches(tags))

    def breakdown(self, name: str, tag: str) -> Dict[str, float]:
        """Totals of one metric grouped by a tag's value."""
        result: Dict[str, float] = defaultdict(float)
        with self._lock:
            for sample in self._samples.get(name, []):
                if tag in sample.tags:
                    result[sample.tags[tag]] += sample.value
        return dict(result)

    def hit_rate(self, **tags: str) -> float:
        """cache_hit / (cache_hit + cache_miss), 0.0 before any lookup."""
        hits = self.total("cache_hit", **tags)
        lookups = hits + self.total("cache_miss", **tags)
        return hits / lookups if lookups else 0.0

    def samples(self, name: str) -> List[MetricSample]:
        with self._lock:
            return list(self._samples.get(name, []))

    def clear(self) -> None:
        """Clear all metrics."""
        with self._lock:
            self._samples.clear()

    def _append(self, name: str, sample: MetricSample) -> None:
        with self._lock:
            self._samples[name].append(sample)
