# src/ttlsweep/core/clock.py
"""Clock abstraction for testable expiry cutoffs.

Cutoffs are computed against wall-clock time because the metadata store
records creation timestamps in UTC. Production code uses SystemClock;
tests inject MockClock to place "now" exactly where a scenario needs it.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Abstract wall clock.

    Implementations:
    - SystemClock: datetime.now(UTC) (production)
    - MockClock: Returns controllable times (testing)
    """

    def now(self) -> datetime:
        """Return the current time as a timezone-aware UTC datetime."""
        ...


class SystemClock:
    """Production clock using the system's UTC time."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class MockClock:
    """Controllable clock for deterministic testing.

    Example:
        clock = MockClock(start=datetime(2024, 1, 1, tzinfo=UTC))
        sweeper = Sweeper(settings, blobs, records, clock=clock)

        clock.advance(3600)  # One hour later
        sweeper.run_once()
    """

    def __init__(self, start: datetime | None = None) -> None:
        """Initialize mock clock.

        Args:
            start: Initial time (default: current UTC time). Must be timezone-aware.

        Raises:
            ValueError: If start is naive.
        """
        if start is None:
            start = datetime.now(UTC)
        if start.tzinfo is None:
            raise ValueError(f"MockClock requires a timezone-aware datetime, got {start!r}")
        self._current = start

    def now(self) -> datetime:
        return self._current

    def advance(self, seconds: float) -> None:
        """Advance mock time by specified seconds.

        Raises:
            ValueError: If seconds is negative.
        """
        if seconds < 0:
            raise ValueError(f"Cannot advance time by negative amount: {seconds}")
        self._current += timedelta(seconds=seconds)

    def set(self, value: datetime) -> None:
        """Set mock time to an absolute value, which may be earlier than now."""
        if value.tzinfo is None:
            raise ValueError(f"MockClock requires a timezone-aware datetime, got {value!r}")
        self._current = value


DEFAULT_CLOCK: Clock = SystemClock()
