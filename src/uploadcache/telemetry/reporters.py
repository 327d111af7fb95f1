# src/uploadcache/telemetry/reporters.py
"""Eviction reporters.

TracingEvictionReporter turns CacheEvicted events into OpenTelemetry
spans. Falls back to no-op mode when no tracer is configured.
"""

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import structlog

from uploadcache.contracts.events import CacheEvicted

if TYPE_CHECKING:
    from opentelemetry.trace import Tracer

logger = structlog.get_logger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def _to_ns(value: datetime) -> int:
    """Datetime to nanoseconds since the epoch (OpenTelemetry time unit)."""
    return (value - _EPOCH) // timedelta(microseconds=1) * 1_000


class TracingEvictionReporter:
    """Report evictions as spans whose start/end bracket delete + vacuum.

    Example:
        reporter = TracingEvictionReporter(tracer=trace.get_tracer("uploadcache"))
        cache = UploadCache(settings, reporter=reporter)
    """

    def __init__(self, tracer: "Tracer | None" = None) -> None:
        """Initialize with optional tracer.

        Args:
            tracer: OpenTelemetry tracer. If None, report() is a no-op.
        """
        self._tracer = tracer

    @property
    def enabled(self) -> bool:
        """Whether tracing is enabled."""
        return self._tracer is not None

    def report(self, event: CacheEvicted) -> None:
        if self._tracer is None:
            return
        span = self._tracer.start_span(
            event.name,
            start_time=_to_ns(event.started_at),
            attributes=event.attributes,
        )
        span.end(end_time=_to_ns(event.ended_at))


class LoggingEvictionReporter:
    """Report evictions as structured log events."""

    def report(self, event: CacheEvicted) -> None:
        logger.info(
            event.name,
            removed=event.removed,
            started_at=event.started_at.isoformat(),
            ended_at=event.ended_at.isoformat(),
            duration_ms=(event.ended_at - event.started_at).total_seconds() * 1000,
        )
