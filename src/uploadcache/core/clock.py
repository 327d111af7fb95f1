"""Clock abstraction for testable time-dependent logic.

Record timestamps and the age-based eviction window both depend on the
wall clock. Production code uses SystemClock (the default); tests inject
MockClock to pin "now" without sleeping or patching datetime.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Abstract wall clock.

    Implementations:
    - SystemClock: datetime.now(UTC) (production)
    - MockClock: returns a controllable time (testing)
    """

    def now(self) -> datetime:
        """Return the current time as a timezone-aware UTC datetime."""
        ...


class SystemClock:
    """Production clock backed by the system time."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class MockClock:
    """Controllable clock for deterministic testing.

    Example:
        clock = MockClock(start=datetime(2024, 1, 10, 12, 0, tzinfo=UTC))
        cache = UploadCache(settings, clock=clock)

        cache.save("a", UploadType.SPANS, b"...")  # dated 2024-01-10 12:00
        clock.advance(timedelta(days=8))
        cache.run_maintenance()  # "a" is now past a 7-day limit
    """

    def __init__(self, start: datetime | None = None) -> None:
        """Initialize mock clock.

        Args:
            start: Initial time (must be timezone-aware). Defaults to the
                current system time.
        """
        if start is None:
            start = datetime.now(UTC)
        if start.tzinfo is None:
            raise ValueError("MockClock start must be timezone-aware")
        self._current = start

    def now(self) -> datetime:
        return self._current

    def advance(self, delta: timedelta) -> None:
        """Advance time by delta.

        Raises:
            ValueError: If delta is negative (time must not go backwards)
        """
        if delta < timedelta(0):
            raise ValueError(f"Cannot advance by negative delta: {delta}")
        self._current = self._current + delta

    def set(self, value: datetime) -> None:
        """Jump to an absolute time."""
        if value.tzinfo is None:
            raise ValueError("MockClock time must be timezone-aware")
        self._current = value
