"""Subscription store port - expiring key-value storage for ledger records."""

from abc import ABC, abstractmethod

from ..domain.models import LedgerState, Subscription
from ..domain.types import SubscriptionId


class SubscriptionStorePort(ABC):
    """Abstract interface for the expiring subscription store.

    Subscription records carry an independently extendable retention
    horizon, measured in ledgers. A record whose horizon has lapsed may be
    evicted and then reads as absent. The ledger state entry does not expire.
    """

    @abstractmethod
    async def load_state(self) -> LedgerState | None:
        """Load the process-wide ledger state, if it was ever saved."""
        ...

    @abstractmethod
    async def save_state(self, state: LedgerState) -> None:
        """Persist the process-wide ledger state."""
        ...

    @abstractmethod
    async def get(self, subscription_id: SubscriptionId) -> Subscription | None:
        """Get a subscription by ID.

        Returns:
            The record if present and not expired, None otherwise
        """
        ...

    @abstractmethod
    async def set(self, subscription_id: SubscriptionId, subscription: Subscription) -> None:
        """Create or replace a subscription record."""
        ...

    @abstractmethod
    async def remove(self, subscription_id: SubscriptionId) -> None:
        """Delete a subscription record. Missing records are ignored."""
        ...

    @abstractmethod
    async def extend_ttl(self, subscription_id: SubscriptionId, ledgers: int) -> None:
        """Ensure the record lives for at least ``ledgers`` more ledgers.

        The horizon is only ever extended, never shortened.

        Raises:
            StoreError: If the record does not exist
        """
        ...

    @abstractmethod
    def max_ttl(self) -> int:
        """Maximum retention horizon the store accepts, in ledgers."""
        ...
