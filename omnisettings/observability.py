"""
Observability Module

Provides structured logging and timing metrics for settings resolution.

Key features:
- Structured logging with source/stage context
- Timing metrics for resolution steps
- Counters for keys contributed per source
"""

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Callable, Dict, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Structured Logging
# ============================================================================

@dataclass
class LogContext:
    """Context attached to log entries."""
    source: Optional[str] = None
    stage: Optional[str] = None
    operation: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "source": self.source,
            "stage": self.stage,
            "operation": self.operation,
            "timestamp": _utcnow().isoformat(),
        }
        d.update(self.extra)
        return {k: v for k, v in d.items() if v is not None}


class StructuredLogger:
    """
    Logger with structured context.

    Usage:
        log = StructuredLogger("omnisettings.resolver")
        log.info("Loaded bundle", source="config/application-settings.xml", keys=12)
    """

    def __init__(self, name: str, context: Optional[LogContext] = None):
        self._logger = logging.getLogger(name)
        self._context = context or LogContext()

    def _format_message(self, message: str, **kwargs) -> str:
        """Format message with context."""
        ctx = self._context.to_dict()

        parts = []
        if ctx.get("stage"):
            parts.append(f"[stage={ctx['stage']}]")
        if ctx.get("source"):
            parts.append(f"[{ctx['source']}]")

        prefix = " ".join(parts) + " " if parts else ""

        extras = {k: v for k, v in kwargs.items() if v is not None}
        extra_str = " | ".join(f"{k}={v}" for k, v in extras.items()) if extras else ""

        if extra_str:
            return f"{prefix}{message} | {extra_str}"
        return f"{prefix}{message}"

    def debug(self, message: str, **kwargs) -> None:
        self._logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs) -> None:
        self._logger.info(self._format_message(message, **kwargs))

    def error(self, message: str, **kwargs) -> None:
        self._logger.error(self._format_message(message, **kwargs))


def get_logger(name: str, **context) -> StructuredLogger:
    """Get a structured logger with optional context."""
    return StructuredLogger(name, LogContext(**context))


# ============================================================================
# Timing and Metrics
# ============================================================================

@dataclass
class TimingMetric:
    """A single timing measurement."""
    operation: str
    duration_ms: float
    source: Optional[str] = None
    success: bool = True
    metadata: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=_utcnow)


class MetricsCollector:
    """
    Collects and aggregates metrics.

    Thread-safe collector for timing and counter metrics.
    """

    _instance: Optional["MetricsCollector"] = None

    def __init__(self):
        self._timings: List[TimingMetric] = []
        self._counters: Dict[str, int] = {}
        self._lock = threading.Lock()
        self._max_timings = 1000  # Keep last N timings

    @classmethod
    def get_instance(cls) -> "MetricsCollector":
        """Get singleton instance."""
        if cls._instance is None:
            cls._instance = MetricsCollector()
        return cls._instance

    def record_timing(
        self,
        operation: str,
        duration_ms: float,
        source: Optional[str] = None,
        success: bool = True,
        **metadata,
    ) -> None:
        """Record a timing metric."""
        metric = TimingMetric(
            operation=operation,
            duration_ms=duration_ms,
            source=source,
            success=success,
            metadata=metadata,
        )

        with self._lock:
            self._timings.append(metric)
            if len(self._timings) > self._max_timings:
                self._timings = self._timings[-self._max_timings:]

    def increment_counter(self, name: str, value: int = 1) -> None:
        """Increment a counter."""
        with self._lock:
            self._counters[name] = self._counters.get(name, 0) + value

    def get_counter(self, name: str) -> int:
        """Get counter value."""
        return self._counters.get(name, 0)

    def get_timing_stats(
        self,
        operation: Optional[str] = None,
        last_n: int = 100,
    ) -> Dict[str, Any]:
        """Get timing statistics."""
        filtered = self._timings[-last_n:]
        if operation:
            filtered = [t for t in filtered if t.operation == operation]

        if not filtered:
            return {"count": 0, "avg_ms": 0, "min_ms": 0, "max_ms": 0}

        durations = [t.duration_ms for t in filtered]

        return {
            "count": len(durations),
            "avg_ms": sum(durations) / len(durations),
            "min_ms": min(durations),
            "max_ms": max(durations),
            "success_rate": sum(1 for t in filtered if t.success) / len(filtered),
        }

    def reset(self) -> None:
        """Reset all metrics."""
        with self._lock:
            self._timings.clear()
            self._counters.clear()


# Global metrics collector
metrics = MetricsCollector.get_instance()


# ============================================================================
# Decorators and Context Managers
# ============================================================================

@contextmanager
def timed_operation_sync(
    operation: str,
    source: Optional[str] = None,
    log: bool = True,
    **metadata,
):
    """
    Context manager for timing an operation.

    Usage:
        with timed_operation_sync("settings.resolve"):
            settings = resolver.resolve()
    """
    start_time = time.perf_counter()
    success = True

    try:
        yield
    except Exception:
        success = False
        raise
    finally:
        duration_ms = (time.perf_counter() - start_time) * 1000
        metrics.record_timing(
            operation=operation,
            duration_ms=duration_ms,
            source=source,
            success=success,
            **metadata,
        )

        if log:
            log_msg = f"Operation {operation} completed in {duration_ms:.2f}ms"
            if source:
                log_msg = f"[{source}] {log_msg}"
            if success:
                logger.debug(log_msg)
            else:
                logger.warning(f"{log_msg} (failed)")


def traced_sync(
    operation: Optional[str] = None,
    source: Optional[str] = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator for timing functions.

    Usage:
        @traced_sync(operation="settings.bootstrap")
        def load_bootstrap(root: Path) -> dict[str, str]:
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        op_name = operation or func.__name__

        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            with timed_operation_sync(op_name, source=source):
                return func(*args, **kwargs)

        return wrapper
    return decorator


def setup_logging(
    level: int | str = logging.INFO,
    format_string: Optional[str] = None,
) -> None:
    """
    Setup logging configuration for omnisettings.

    Call this at application startup.
    """
    fmt = format_string or "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

    logging.basicConfig(
        level=level,
        format=fmt,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
