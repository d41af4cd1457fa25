"""Clock port abstraction for time handling.

This module defines the clock abstraction to decouple ledger logic from
system time, making it easier to test and control time-dependent behavior
such as elapsed billing days and storage expiry.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class ClockPort(ABC):
    """Abstract clock interface for time operations.

    This port provides an abstraction over system time, allowing for:
    - Consistent timezone-aware datetime handling
    - Easy testing with manual clocks
    - Custom time sources (e.g., the close time of the host ledger)
    """

    @abstractmethod
    def now(self) -> datetime:
        """Get the current time as a timezone-aware datetime.

        Returns:
            A timezone-aware datetime representing the current time.

        Note:
            Implementations MUST return timezone-aware, non-decreasing
            datetimes. The ledger only uses whole-second resolution.
        """
        ...


def now_ms(clock: ClockPort) -> int:
    """Current time in milliseconds, normalized from whole seconds."""
    return int(clock.now().timestamp()) * 1000
