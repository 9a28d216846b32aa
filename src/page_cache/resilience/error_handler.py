"""
Error Handler - Continue-on-Error Batch Processing.

Invalidation cascades are best-effort: one container that cannot be
removed must not prevent removal of the others. A leftover entry heals
itself through time-based expiry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class PartialResult(Generic[T]):
    """Result of a partial success operation."""
    successful: List[T] = field(default_factory=list)
    failed: List[tuple[Any, Exception]] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        """Calculate success rate (0.0 to 1.0)."""
        total = len(self.successful) + len(self.failed)
        if total == 0:
            return 1.0
        return len(self.successful) / total

    @property
    def has_failures(self) -> bool:
        """Check if any failures occurred."""
        return len(self.failed) > 0

    @property
    def all_failed(self) -> bool:
        """Check if all operations failed."""
        return len(self.successful) == 0 and len(self.failed) > 0


class ErrorHandler:
    """Runs batches of independent operations, allowing partial failures."""

    def handle_partial_failure(
        self,
        items: List[Any],
        processor: Callable[[Any], T],
        min_success_rate: float = 0.0,
        operation_name: str = "batch operation",
    ) -> PartialResult[T]:
        """
        Process items, allowing partial failures.

        Args:
            items: Items to process
            processor: Function to process each item
            min_success_rate: Minimum success rate to continue (0.0-1.0)
            operation_name: Name for logging

        Returns:
            PartialResult with successful and failed items

        Raises:
            RuntimeError: If success rate falls below minimum
        """
        result: PartialResult[T] = PartialResult()

        for item in items:
            try:
                processed = processor(item)
                result.successful.append(processed)
            except Exception as e:
                result.failed.append((item, e))
                logger.warning(f"{operation_name} failed for {item}: {e}")

        if result.success_rate < min_success_rate:
            raise RuntimeError(
                f"{operation_name} success rate {result.success_rate:.1%} "
                f"below minimum {min_success_rate:.1%}"
            )

        if result.has_failures:
            logger.warning(
                f"{operation_name} completed with {len(result.failed)} failures "
                f"({result.success_rate:.1%} success rate)"
            )

        return result
