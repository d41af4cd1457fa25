"""Subscription lifecycle use cases.

Every operation follows the same ordering: validate all preconditions
(including the retention plan), move value, persist records, extend
retention, then publish events. Records are staged as local copies and
only written once every value ledger call has succeeded.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from ..domain.enums import SubscriptionStatus
from ..domain.events import (
    DomainEvent,
    SubscriptionCancelledEvent,
    SubscriptionChargedEvent,
    SubscriptionCreatedEvent,
    SubscriptionDepositedEvent,
    SubscriptionSuspendedEvent,
)
from ..domain.exceptions import (
    InvalidAmountError,
    InvalidSubscriptionStatusError,
    SubscriptionNotFoundError,
)
from ..domain.models import Subscription, SubscriptionInitParams
from .context import LedgerContext


@dataclass(frozen=True)
class ChargeResult:
    """Outcome of a batch charge."""

    timestamp: int
    charged: dict[int, int]
    suspended: list[int]
    skipped: list[int]

    @property
    def total(self) -> int:
        """Total amount deducted and burned."""
        return sum(self.charged.values())


class SubscriptionLifecycleService:
    """Application service owning the subscription state machine.

    ACTIVE subscriptions accrue a daily fee; a charge that leaves less than
    one fee on the balance suspends them. A deposit covering the fee
    reactivates a suspended subscription. Only ACTIVE subscriptions can be
    cancelled.
    """

    def __init__(self, context: LedgerContext):
        """Initialize the service with shared ledger dependencies."""
        self._ctx = context

    async def create_subscription(
        self, params: SubscriptionInitParams, amount: int
    ) -> tuple[int, Subscription]:
        """Create a new subscription funded with ``amount``.

        Twice the daily fee is burned as the activation fee; the rest
        becomes the subscription balance.

        Args:
            params: Subscription parameters; ``params.owner`` must authorize the call
            amount: Initial deposit

        Returns:
            Tuple of (subscription_id, subscription)

        Raises:
            NotInitializedError: If the ledger is not configured
            UnauthorizedError: If the owner did not authorize the call
            InvalidHeartbeatError, InvalidThresholdError, WebhookTooLongError:
                If the parameters violate the configured limits
            InvalidAmountError: If amount is below the activation fee or the
                resulting balance cannot be retained
        """
        ctx = self._ctx
        state = await ctx.require_initialized()
        ctx.authorization.require(params.owner)
        params.validate_against(ctx.limits)

        fees = ctx.fee_calculator(state)
        fee = fees.calculate(params.heartbeat, params.threshold)
        init_fee = fees.activation_fee(params.heartbeat, params.threshold)
        if amount < init_fee:
            raise InvalidAmountError(
                f"Amount {amount} is below the activation fee {init_fee}",
                amount=amount,
                required=init_fee,
            )

        balance = amount - init_fee
        ledgers = ctx.retention_planner.plan(fee, balance, ctx.store.max_ttl())

        subscription_id = state.last_subscription_id + 1
        subscription = Subscription.from_params(params, balance, ctx.now_ms())

        with ctx.metrics.timer("ledger.create_subscription"):
            await ctx.collect(params.owner, amount, init_fee)

            await ctx.store.set(subscription_id, subscription)
            state.last_subscription_id = subscription_id
            await ctx.store.save_state(state)
            await ctx.store.extend_ttl(subscription_id, ledgers)

        ctx.metrics.increment("subscriptions.created")
        ctx.logger.info(
            f"Subscription {subscription_id} created",
            extra={"subscription_id": subscription_id, "owner": params.owner, "amount": amount},
        )
        await ctx.publish(
            [
                SubscriptionCreatedEvent(
                    owner=subscription.owner,
                    subscription_id=subscription_id,
                    subscription=subscription.model_copy(),
                    namespace=ctx.event_namespace,
                )
            ]
        )
        return subscription_id, subscription

    async def deposit(self, from_: str, subscription_id: int, amount: int) -> Subscription:
        """Deposit funds to a subscription.

        A suspended subscription is reactivated when ``amount`` covers the
        daily fee, which is burned as the reactivation fee.

        Raises:
            NotInitializedError: If the ledger is not configured
            UnauthorizedError: If ``from_`` did not authorize the call
            InvalidAmountError: If amount is zero, does not cover the
                reactivation fee, or the resulting balance cannot be retained
            SubscriptionNotFoundError: If the subscription does not exist
        """
        ctx = self._ctx
        state = await ctx.require_initialized()
        ctx.authorization.require(from_)
        if amount <= 0:
            raise InvalidAmountError(f"Deposit amount must be positive, got {amount}", amount)
        subscription = await ctx.store.get(subscription_id)
        if subscription is None:
            raise SubscriptionNotFoundError(subscription_id)

        fee = ctx.fee_calculator(state).calculate(subscription.heartbeat, subscription.threshold)
        updated = subscription.model_copy()
        burn_amount = 0
        reactivated = False
        if updated.status == SubscriptionStatus.SUSPENDED:
            if amount < fee:
                raise InvalidAmountError(
                    f"Amount {amount} does not cover the reactivation fee {fee}",
                    amount=amount,
                    required=fee,
                )
            burn_amount = fee
            updated.status = SubscriptionStatus.ACTIVE
            reactivated = True

        updated.balance += amount - burn_amount
        updated.updated = ctx.now_ms()
        ledgers = ctx.retention_planner.plan(fee, updated.balance, ctx.store.max_ttl())

        with ctx.metrics.timer("ledger.deposit"):
            await ctx.collect(from_, amount, burn_amount)
            await ctx.store.set(subscription_id, updated)
            await ctx.store.extend_ttl(subscription_id, ledgers)

        ctx.metrics.increment("subscriptions.deposited")
        if reactivated:
            ctx.metrics.increment("subscriptions.reactivated")
        ctx.logger.info(
            f"Deposited {amount} to subscription {subscription_id}",
            extra={
                "subscription_id": subscription_id,
                "from": from_,
                "amount": amount,
                "reactivated": reactivated,
            },
        )
        await ctx.publish(
            [
                SubscriptionDepositedEvent(
                    owner=updated.owner,
                    subscription_id=subscription_id,
                    subscription=updated.model_copy(),
                    amount=amount,
                    namespace=ctx.event_namespace,
                )
            ]
        )
        return updated

    async def charge(self, subscription_ids: Iterable[int]) -> ChargeResult:
        """Charge elapsed days to a batch of subscriptions. Admin only.

        IDs that do not resolve to a record, and records charged less than
        one day ago, are skipped. Charges are capped at the balance; the
        total is burned from the ledger account in one call.
        """
        ctx = self._ctx
        state = await ctx.require_admin()
        now = ctx.now_ms()
        fees = ctx.fee_calculator(state)

        staged: dict[int, Subscription] = {}
        charged: dict[int, int] = {}
        suspended: list[int] = []
        skipped: list[int] = []
        events: list[DomainEvent] = []

        for subscription_id in subscription_ids:
            # Repeated IDs in one batch see the already staged record
            subscription = staged.get(subscription_id)
            if subscription is None:
                subscription = await ctx.store.get(subscription_id)
            if subscription is None:
                skipped.append(subscription_id)
                ctx.logger.debug(f"Skipping unknown subscription {subscription_id}")
                continue
            days = (now - subscription.updated) // ctx.limits.day_ms
            if days <= 0:
                skipped.append(subscription_id)
                continue

            fee = fees.calculate(subscription.heartbeat, subscription.threshold)
            amount = min(days * fee, subscription.balance)
            updated = subscription.model_copy()
            updated.balance -= amount
            updated.updated = now
            if updated.balance < fee:
                updated.status = SubscriptionStatus.SUSPENDED
                suspended.append(subscription_id)
                events.append(
                    SubscriptionSuspendedEvent(
                        owner=updated.owner,
                        subscription_id=subscription_id,
                        timestamp=now,
                        namespace=ctx.event_namespace,
                    )
                )
            events.append(
                SubscriptionChargedEvent(
                    owner=updated.owner,
                    subscription_id=subscription_id,
                    timestamp=now,
                    charge=amount,
                    namespace=ctx.event_namespace,
                )
            )
            staged[subscription_id] = updated
            charged[subscription_id] = charged.get(subscription_id, 0) + amount

        result = ChargeResult(timestamp=now, charged=charged, suspended=suspended, skipped=skipped)
        with ctx.metrics.timer("ledger.charge"):
            if result.total > 0:
                await ctx.burn(result.total)
            for subscription_id, subscription in staged.items():
                await ctx.store.set(subscription_id, subscription)

        ctx.metrics.increment("subscriptions.charged", len(charged))
        ctx.metrics.increment("subscriptions.suspended", len(suspended))
        ctx.metrics.increment("charge.skipped", len(skipped))
        ctx.logger.info(
            f"Charged {len(charged)} subscriptions for {result.total}",
            extra={"charged": len(charged), "suspended": len(suspended), "total": result.total},
        )
        await ctx.publish(events)
        return result

    async def cancel(self, subscription_id: int) -> int:
        """Cancel an active subscription and refund its balance to the owner.

        Returns:
            The refunded amount

        Raises:
            NotInitializedError: If the ledger is not configured
            SubscriptionNotFoundError: If the subscription does not exist
            UnauthorizedError: If the owner did not authorize the call
            InvalidSubscriptionStatusError: If the subscription is suspended
        """
        ctx = self._ctx
        await ctx.require_initialized()
        subscription = await ctx.store.get(subscription_id)
        if subscription is None:
            raise SubscriptionNotFoundError(subscription_id)
        ctx.authorization.require(subscription.owner)
        if subscription.status != SubscriptionStatus.ACTIVE:
            raise InvalidSubscriptionStatusError(subscription_id, subscription.status.value)

        with ctx.metrics.timer("ledger.cancel"):
            await ctx.value_ledger.transfer(ctx.account, subscription.owner, subscription.balance)
            await ctx.store.remove(subscription_id)

        ctx.metrics.increment("subscriptions.cancelled")
        ctx.logger.info(
            f"Subscription {subscription_id} cancelled",
            extra={"subscription_id": subscription_id, "refund": subscription.balance},
        )
        await ctx.publish(
            [
                SubscriptionCancelledEvent(
                    owner=subscription.owner,
                    subscription_id=subscription_id,
                    namespace=ctx.event_namespace,
                )
            ]
        )
        return subscription.balance

    async def get_subscription(self, subscription_id: int) -> Subscription:
        """Get a subscription by ID.

        Raises:
            NotInitializedError: If the ledger is not configured
            SubscriptionNotFoundError: If the subscription does not exist
        """
        await self._ctx.require_initialized()
        subscription = await self._ctx.store.get(subscription_id)
        if subscription is None:
            raise SubscriptionNotFoundError(subscription_id)
        return subscription
