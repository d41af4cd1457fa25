"""Subscription ledger facade.

Exposes administration and lifecycle operations behind a single lock so
each call runs to completion against the store before the next one starts.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

from ..domain.events import TriggeredEvent
from ..domain.exceptions import LedgerError
from ..domain.models import LedgerState, Subscription, SubscriptionInitParams
from .administration import AdministrationService
from .context import LedgerContext
from .lifecycle import ChargeResult, SubscriptionLifecycleService

T = TypeVar("T")


class SubscriptionLedger:
    """Public entry point of the subscription ledger.

    Example:
        >>> ledger = SubscriptionLedger(context)
        >>> await ledger.configure("admin", fee=100, token="token")
        >>> subscription_id, record = await ledger.create_subscription(params, 300)
    """

    def __init__(self, context: LedgerContext):
        """Initialize the ledger with its dependencies."""
        self._context = context
        self._administration = AdministrationService(context)
        self._lifecycle = SubscriptionLifecycleService(context)
        self._lock = asyncio.Lock()

    @property
    def context(self) -> LedgerContext:
        """Dependencies the ledger was built with."""
        return self._context

    async def _run(self, operation: str, func: Callable[..., Awaitable[T]], *args: Any) -> T:
        async with self._lock:
            try:
                return await func(*args)
            except LedgerError as e:
                self._context.metrics.increment(f"ledger.{operation}.error")
                self._context.logger.warning(
                    f"{operation} rejected: {e.message}",
                    extra={"operation": operation, "error_code": e.error_code, **e.details},
                )
                raise

    # Administration

    async def configure(self, admin: str, fee: int, token: str) -> LedgerState:
        """Initialize the ledger. Can be invoked only once."""
        return await self._run("configure", self._administration.configure, admin, fee, token)

    async def set_fee(self, fee: int) -> None:
        """Set the base fee. Admin only."""
        await self._run("set_fee", self._administration.set_fee, fee)

    async def trigger(self, timestamp: int, trigger_hash: bytes) -> TriggeredEvent:
        """Emit a trigger signal. Admin only."""
        return await self._run("trigger", self._administration.trigger, timestamp, trigger_hash)

    async def update_code(self, code_hash: bytes) -> None:
        """Record a code update. Admin only."""
        await self._run("update_code", self._administration.update_code, code_hash)

    async def charge(self, subscription_ids: Iterable[int]) -> ChargeResult:
        """Charge elapsed days to subscriptions. Admin only."""
        return await self._run("charge", self._lifecycle.charge, list(subscription_ids))

    async def admin(self) -> str | None:
        return await self._run("admin", self._administration.admin)

    async def fee(self) -> int:
        return await self._run("fee", self._administration.fee)

    async def token(self) -> str:
        return await self._run("token", self._administration.token)

    async def last_id(self) -> int:
        return await self._run("last_id", self._administration.last_id)

    def version(self) -> int:
        return self._administration.version()

    # Subscriptions

    async def create_subscription(
        self, params: SubscriptionInitParams, amount: int
    ) -> tuple[int, Subscription]:
        """Create a new subscription."""
        return await self._run(
            "create_subscription", self._lifecycle.create_subscription, params, amount
        )

    async def deposit(self, from_: str, subscription_id: int, amount: int) -> Subscription:
        """Deposit funds to a subscription."""
        return await self._run("deposit", self._lifecycle.deposit, from_, subscription_id, amount)

    async def cancel(self, subscription_id: int) -> int:
        """Cancel an active subscription, refunding its balance."""
        return await self._run("cancel", self._lifecycle.cancel, subscription_id)

    async def get_subscription(self, subscription_id: int) -> Subscription:
        """Get a subscription by ID."""
        return await self._run(
            "get_subscription", self._lifecycle.get_subscription, subscription_id
        )
