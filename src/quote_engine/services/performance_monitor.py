# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Performance monitoring decorator for quote operations."""

import inspect
import time
from collections.abc import Callable
from functools import wraps
from threading import Lock
from typing import Any, ParamSpec, TypeVar

from beartype import beartype

from ..core.logging_utils import get_logger

P = ParamSpec("P")
T = TypeVar("T")

logger = get_logger(__name__)


@beartype
def performance_monitor(
    operation_name: str,
    max_duration_ms: int = 50,
    log_slow_operations: bool = True,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator to time an operation and record it in the tracker.

    Works for both coroutine functions and plain functions. Failures are
    recorded and re-raised unchanged.

    Args:
        operation_name: Name of the operation for monitoring
        max_duration_ms: Warning threshold in milliseconds
        log_slow_operations: Whether to log operations over the threshold
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        def _record(duration_ms: float, success: bool, error: str | None) -> None:
            performance_tracker.track_operation(operation_name, duration_ms, success)
            if not success:
                logger.warning(
                    "%s failed after %.2fms: %s", operation_name, duration_ms, error
                )
            elif log_slow_operations and duration_ms > max_duration_ms:
                logger.warning(
                    "Slow operation %s: %.2fms > %dms threshold",
                    operation_name,
                    duration_ms,
                    max_duration_ms,
                )

        @wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> Any:
            start_time = time.perf_counter()
            try:
                result = await func(*args, **kwargs)  # type: ignore[misc]
            except Exception as e:
                _record((time.perf_counter() - start_time) * 1000, False, str(e))
                raise
            _record((time.perf_counter() - start_time) * 1000, True, None)
            return result

        @wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _record((time.perf_counter() - start_time) * 1000, False, str(e))
                raise
            _record((time.perf_counter() - start_time) * 1000, True, None)
            return result

        if inspect.iscoroutinefunction(func):
            return async_wrapper  # type: ignore[return-value]
        return sync_wrapper

    return decorator


@beartype
class PerformanceTracker:
    """Class-based performance tracking for quote service operations."""

    def __init__(self) -> None:
        """Initialize performance tracker."""
        self._operation_stats: dict[str, dict[str, Any]] = {}
        self._lock = Lock()

    @beartype
    def track_operation(
        self, operation_name: str, duration_ms: float, success: bool
    ) -> None:
        """Track an operation's performance."""
        with self._lock:
            stats = self._operation_stats.setdefault(
                operation_name,
                {
                    "count": 0,
                    "total_duration_ms": 0.0,
                    "success_count": 0,
                    "failure_count": 0,
                    "avg_duration_ms": 0.0,
                    "max_duration_ms": 0.0,
                    "min_duration_ms": float("inf"),
                },
            )
            stats["count"] += 1
            stats["total_duration_ms"] += duration_ms

            if success:
                stats["success_count"] += 1
            else:
                stats["failure_count"] += 1

            stats["avg_duration_ms"] = stats["total_duration_ms"] / stats["count"]
            stats["max_duration_ms"] = max(stats["max_duration_ms"], duration_ms)
            stats["min_duration_ms"] = min(stats["min_duration_ms"], duration_ms)

    @beartype
    def get_operation_stats(self, operation_name: str) -> dict[str, Any] | None:
        """Get performance stats for an operation."""
        with self._lock:
            stats = self._operation_stats.get(operation_name)
            return dict(stats) if stats is not None else None

    @beartype
    def get_all_stats(self) -> dict[str, dict[str, Any]]:
        """Get all operation statistics."""
        with self._lock:
            return {name: dict(s) for name, s in self._operation_stats.items()}

    @beartype
    def reset_stats(self) -> None:
        """Reset all performance statistics."""
        with self._lock:
            self._operation_stats.clear()


# Global performance tracker instance
performance_tracker = PerformanceTracker()
