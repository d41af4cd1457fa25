"""Shared dependencies and helpers for ledger application services.

The context bundles the ports every operation needs and implements the
checks and value movements that administration and lifecycle operations
have in common.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from ..domain.events import DEFAULT_NAMESPACE, DomainEvent
from ..domain.exceptions import LedgerError, NotInitializedError
from ..domain.models import LedgerLimits, LedgerState
from ..domain.services import FeeCalculator, RetentionPlanner
from ..ports.authorization import AuthorizationPort
from ..ports.clock import ClockPort, now_ms
from ..ports.event_publisher import EventPublisherPort
from ..ports.logger import LoggerPort
from ..ports.metrics import MetricsPort
from ..ports.subscription_store import SubscriptionStorePort
from ..ports.value_ledger import ValueLedgerPort


@dataclass
class LedgerContext:
    """Dependencies shared by the ledger application services."""

    clock: ClockPort
    authorization: AuthorizationPort
    value_ledger: ValueLedgerPort
    store: SubscriptionStorePort
    publisher: EventPublisherPort
    logger: LoggerPort
    metrics: MetricsPort
    account: str = "subscription-ledger"
    limits: LedgerLimits = field(default_factory=LedgerLimits)
    event_namespace: str = DEFAULT_NAMESPACE

    @property
    def retention_planner(self) -> RetentionPlanner:
        """Retention planner bound to the configured ledger rate."""
        return RetentionPlanner(self.limits.ledgers_per_day)

    def now_ms(self) -> int:
        """Current time in milliseconds."""
        return now_ms(self.clock)

    async def load_state(self) -> LedgerState:
        """Load the ledger state, defaulting to an unconfigured one."""
        state = await self.store.load_state()
        return state if state is not None else LedgerState()

    async def require_initialized(self) -> LedgerState:
        """Load the ledger state and fail if it was never configured."""
        state = await self.load_state()
        if not state.initialized:
            raise NotInitializedError()
        return state

    async def require_admin(self) -> LedgerState:
        """Require a configured ledger and the admin's authorization."""
        state = await self.require_initialized()
        assert state.admin is not None  # set together with initialized
        self.authorization.require(state.admin)
        return state

    def fee_calculator(self, state: LedgerState) -> FeeCalculator:
        """Fee calculator for the currently configured base fee."""
        return FeeCalculator(state.fee)

    async def collect(self, payer: str, amount: int, burn_amount: int) -> None:
        """Transfer ``amount`` from ``payer`` to the ledger account and burn part of it.

        If the burn fails after the transfer succeeded, the transfer is
        reversed before the error propagates.
        """
        await self.value_ledger.transfer(payer, self.account, amount)
        if burn_amount <= 0:
            return
        try:
            await self.value_ledger.burn(self.account, burn_amount)
        except LedgerError as e:
            self.logger.exception(
                "Burn failed after transfer, returning funds",
                exc_info=e,
                extra={"payer": payer, "amount": amount, "burn_amount": burn_amount},
            )
            await self.value_ledger.transfer(self.account, payer, amount)
            raise
        self.metrics.increment("value.burned", burn_amount)

    async def burn(self, amount: int) -> None:
        """Destroy ``amount`` held by the ledger account."""
        await self.value_ledger.burn(self.account, amount)
        self.metrics.increment("value.burned", amount)

    async def publish(self, events: Iterable[DomainEvent]) -> None:
        """Publish committed events in order.

        Publishing is best-effort: the state change is already persisted, so a
        publisher failure is logged and counted under ``events.dropped``
        and the remaining events are still attempted.
        """
        for event in events:
            try:
                await self.publisher.publish(event)
            except Exception as e:
                self.logger.exception(
                    "Event publish failed after commit",
                    exc_info=e,
                    extra={"event_type": event.event_type},
                )
                self.metrics.increment("events.dropped")
