"""Clock implementations: system time and a manually advanced clock."""

from datetime import UTC, datetime, timedelta

from ..ports.clock import ClockPort


class SystemClock(ClockPort):
    """Default clock implementation using system time.

    This implementation uses Python's datetime module to provide
    the current time in UTC timezone.
    """

    def now(self) -> datetime:
        """Get the current UTC time.

        Returns:
            The current time as a timezone-aware datetime in UTC.
        """
        return datetime.now(UTC)


class ManualClock(ClockPort):
    """Clock that only moves when told to.

    Useful for tests and simulations that need whole billing days to pass
    instantly.
    """

    def __init__(self, start: datetime | None = None):
        """Initialize the clock.

        Args:
            start: Initial time (default: 2024-01-01T00:00:00Z)
        """
        start = start or datetime(2024, 1, 1, tzinfo=UTC)
        if start.tzinfo is None:
            raise ValueError("ManualClock requires a timezone-aware start time")
        self._current = start

    def now(self) -> datetime:
        """Get the current manual time."""
        return self._current

    def advance(
        self, *, days: float = 0, hours: float = 0, minutes: float = 0, seconds: float = 0
    ) -> datetime:
        """Move the clock forward and return the new time."""
        delta = timedelta(days=days, hours=hours, minutes=minutes, seconds=seconds)
        if delta < timedelta(0):
            raise ValueError("ManualClock cannot move backwards")
        self._current += delta
        return self._current

    def set(self, moment: datetime) -> None:
        """Jump to ``moment``, which must not be in the past."""
        if moment < self._current:
            raise ValueError("ManualClock cannot move backwards")
        self._current = moment
