"""Metrics port - counts ledger activity and times store and value ledger calls."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any


class MetricsPort(ABC):
    """Abstract interface for ledger metrics.

    Counters are named after what they count, e.g. ``subscriptions.created``
    or ``value.burned`` (incremented by the burned amount). Timers are named
    ``ledger.<operation>``.
    """

    @abstractmethod
    def increment(self, name: str, value: int = 1) -> None:
        """Add ``value`` to the counter ``name``."""
        ...

    @abstractmethod
    def timer(self, name: str) -> AbstractContextManager[Any]:
        """Time the enclosed block and record the duration under ``name``."""
        ...
