"""In-memory implementation of the SubscriptionStorePort.

Records whose ``live_until`` horizon has passed the ledger sequence derived
from the clock are eligible for eviction; ``evict_expired`` removes them,
mirroring the host's archival sweep.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..domain.exceptions import StoreError
from ..domain.models import LedgerState, Subscription
from ..ports.clock import ClockPort
from ..ports.subscription_store import SubscriptionStorePort

DEFAULT_MAX_TTL = 3_110_400
DEFAULT_LEDGER_INTERVAL_SECONDS = 5


def current_ledger(clock: ClockPort, ledger_interval_seconds: int) -> int:
    """Ledger sequence number derived from the clock."""
    return int(clock.now().timestamp()) // ledger_interval_seconds


@dataclass
class _StoredRecord:
    subscription: Subscription
    live_until: int


class InMemorySubscriptionStore(SubscriptionStorePort):
    """In-memory expiring store for testing and development."""

    def __init__(
        self,
        clock: ClockPort,
        max_ttl: int = DEFAULT_MAX_TTL,
        ledger_interval_seconds: int = DEFAULT_LEDGER_INTERVAL_SECONDS,
    ) -> None:
        """Initialize the in-memory storage.

        Args:
            clock: Clock used to derive the current ledger sequence
            max_ttl: Maximum retention horizon in ledgers
            ledger_interval_seconds: Seconds per ledger
        """
        if ledger_interval_seconds <= 0:
            raise ValueError("ledger_interval_seconds must be positive")
        self._clock = clock
        self._max_ttl = max_ttl
        self._ledger_interval = ledger_interval_seconds
        self._state: LedgerState | None = None
        self._records: dict[int, _StoredRecord] = {}

    def current_ledger(self) -> int:
        """Current ledger sequence."""
        return current_ledger(self._clock, self._ledger_interval)

    async def load_state(self) -> LedgerState | None:
        """Load the ledger state."""
        return self._state.model_copy() if self._state is not None else None

    async def save_state(self, state: LedgerState) -> None:
        """Persist the ledger state."""
        self._state = state.model_copy()

    async def get(self, subscription_id: int) -> Subscription | None:
        """Get a subscription by ID."""
        stored = self._records.get(subscription_id)
        return stored.subscription.model_copy() if stored else None

    async def set(self, subscription_id: int, subscription: Subscription) -> None:
        """Create or replace a subscription record, keeping its horizon."""
        stored = self._records.get(subscription_id)
        live_until = stored.live_until if stored else self.current_ledger()
        self._records[subscription_id] = _StoredRecord(subscription.model_copy(), live_until)

    async def remove(self, subscription_id: int) -> None:
        """Delete a subscription record."""
        self._records.pop(subscription_id, None)

    async def extend_ttl(self, subscription_id: int, ledgers: int) -> None:
        """Extend the record horizon to at least ``ledgers`` from now."""
        stored = self._records.get(subscription_id)
        if stored is None:
            raise StoreError(
                f"Cannot extend TTL of missing subscription {subscription_id}",
                key=str(subscription_id),
                operation="extend_ttl",
            )
        if ledgers > self._max_ttl:
            raise StoreError(
                f"TTL of {ledgers} ledgers exceeds maximum {self._max_ttl}",
                key=str(subscription_id),
                operation="extend_ttl",
            )
        stored.live_until = max(stored.live_until, self.current_ledger() + ledgers)

    def max_ttl(self) -> int:
        """Maximum retention horizon in ledgers."""
        return self._max_ttl

    def live_until(self, subscription_id: int) -> int | None:
        """Ledger until which a record is retained."""
        stored = self._records.get(subscription_id)
        return stored.live_until if stored else None

    def evict_expired(self) -> list[int]:
        """Remove records whose horizon has lapsed.

        Returns:
            IDs of the evicted records
        """
        ledger = self.current_ledger()
        expired = [sid for sid, stored in self._records.items() if stored.live_until < ledger]
        for subscription_id in expired:
            del self._records[subscription_id]
        return expired

    def clear(self) -> None:
        """Clear all stored data (useful for testing)."""
        self._state = None
        self._records.clear()
