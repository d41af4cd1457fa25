"""In-memory metrics for tests and single-process deployments."""

from __future__ import annotations

import time
from collections import defaultdict
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from ..ports.metrics import MetricsPort


@dataclass(frozen=True)
class LedgerActivity:
    """Lifecycle counters of a ledger at one point in time."""

    created: int = 0
    deposited: int = 0
    charged: int = 0
    suspended: int = 0
    reactivated: int = 0
    cancelled: int = 0
    burned: int = 0
    skipped: int = 0
    rejected: int = 0


class InMemoryMetrics(MetricsPort):
    """Counters and call durations kept in process memory."""

    def __init__(self) -> None:
        self._counters: dict[str, int] = defaultdict(int)
        self._durations: dict[str, list[float]] = defaultdict(list)

    def increment(self, name: str, value: int = 1) -> None:
        """Add ``value`` to a counter."""
        self._counters[name] += value

    @contextmanager
    def timer(self, name: str) -> Iterator[None]:
        """Record the duration of the block in milliseconds, even if it raises."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self._durations[name].append((time.perf_counter() - start) * 1000)

    def counter(self, name: str) -> int:
        """Current value of a counter (0 if never incremented)."""
        return self._counters.get(name, 0)

    def durations(self, name: str) -> list[float]:
        """Recorded durations of a timer, in milliseconds."""
        return list(self._durations.get(name, []))

    def activity(self) -> LedgerActivity:
        """Summarize the lifecycle counters.

        ``rejected`` sums the ``ledger.<operation>.error`` counters.
        """
        rejected = sum(
            value
            for name, value in self._counters.items()
            if name.startswith("ledger.") and name.endswith(".error")
        )
        return LedgerActivity(
            created=self.counter("subscriptions.created"),
            deposited=self.counter("subscriptions.deposited"),
            charged=self.counter("subscriptions.charged"),
            suspended=self.counter("subscriptions.suspended"),
            reactivated=self.counter("subscriptions.reactivated"),
            cancelled=self.counter("subscriptions.cancelled"),
            burned=self.counter("value.burned"),
            skipped=self.counter("charge.skipped"),
            rejected=rejected,
        )

    def clear(self) -> None:
        """Forget all counters and durations."""
        self._counters.clear()
        self._durations.clear()
