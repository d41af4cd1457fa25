"""Tests for batch charging and cancellation."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from subscription_ledger.domain.enums import SubscriptionStatus
from subscription_ledger.domain.events import (
    SubscriptionCancelledEvent,
    SubscriptionChargedEvent,
    SubscriptionSuspendedEvent,
)
from subscription_ledger.domain.exceptions import (
    InsufficientFundsError,
    InvalidSubscriptionStatusError,
    NotInitializedError,
    SubscriptionNotFoundError,
    UnauthorizedError,
)

ACCOUNT = "subscription-ledger"
ADMIN = "GADMIN"
OWNER = "GOWNER"
FUNDS = 1_000_000
DAY_MS = 86_400_000


def _now_ms(env):
    return int(env.clock.now().timestamp()) * 1000


class TestCharge:
    """Test cases for the admin batch charge."""

    @pytest.mark.asyncio
    async def test_charge_is_capped_and_suspends(self, configured, make_params):
        """Test charging two days against a balance covering one."""
        env = configured
        subscription_id, _ = await env.ledger.create_subscription(make_params(), 300)
        env.clock.advance(days=2)

        result = await env.ledger.charge([subscription_id])

        subscription = await env.ledger.get_subscription(subscription_id)
        assert result.charged == {subscription_id: 100}
        assert result.suspended == [subscription_id]
        assert subscription.balance == 0
        assert subscription.status == SubscriptionStatus.SUSPENDED
        assert subscription.updated == _now_ms(env)
        assert await env.value_ledger.balance(ACCOUNT) == 0
        assert env.value_ledger.total_burned == 300

    @pytest.mark.asyncio
    async def test_charge_multiple_days(self, configured, make_params):
        """Test that whole elapsed days are charged."""
        env = configured
        subscription_id, _ = await env.ledger.create_subscription(make_params(), 1200)
        env.clock.advance(days=3, hours=1)

        result = await env.ledger.charge([subscription_id])

        subscription = await env.ledger.get_subscription(subscription_id)
        assert result.total == 300
        assert result.suspended == []
        assert subscription.balance == 700
        assert subscription.status == SubscriptionStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_partial_day_is_skipped(self, configured, make_params):
        """Test that less than one elapsed day is not charged."""
        env = configured
        subscription_id, created = await env.ledger.create_subscription(make_params(), 300)
        env.clock.advance(hours=23, minutes=59)

        result = await env.ledger.charge([subscription_id])

        assert result.charged == {}
        assert result.skipped == [subscription_id]
        assert await env.ledger.get_subscription(subscription_id) == created
        assert env.publisher.of_type(SubscriptionChargedEvent) == []

    @pytest.mark.asyncio
    async def test_charge_resets_the_billing_clock(self, configured, make_params):
        """Test that the remainder of a partial day is not carried over."""
        env = configured
        subscription_id, _ = await env.ledger.create_subscription(make_params(), 1200)
        env.clock.advance(days=1, hours=12)
        await env.ledger.charge([subscription_id])
        env.clock.advance(hours=13)

        result = await env.ledger.charge([subscription_id])

        assert result.skipped == [subscription_id]
        assert (await env.ledger.get_subscription(subscription_id)).balance == 900

    @pytest.mark.asyncio
    async def test_unknown_ids_are_skipped(self, configured, make_params):
        """Test that missing records do not fail the batch."""
        env = configured
        subscription_id, _ = await env.ledger.create_subscription(make_params(), 1200)
        env.clock.advance(days=1)

        result = await env.ledger.charge([42, subscription_id])

        assert result.skipped == [42]
        assert result.charged == {subscription_id: 100}
        assert env.metrics.counter("charge.skipped") == 1

    @pytest.mark.asyncio
    async def test_duplicate_ids_are_charged_once(self, configured, make_params):
        """Test that a repeated ID sees the already charged record."""
        env = configured
        subscription_id, _ = await env.ledger.create_subscription(make_params(), 1200)
        env.clock.advance(days=2)

        result = await env.ledger.charge([subscription_id, subscription_id])

        assert result.charged == {subscription_id: 200}
        assert result.skipped == [subscription_id]
        assert (await env.ledger.get_subscription(subscription_id)).balance == 800

    @pytest.mark.asyncio
    async def test_batch_burns_total(self, configured, make_params):
        """Test that the batch total is burned from the ledger account."""
        env = configured
        first, _ = await env.ledger.create_subscription(make_params(), 1200)
        second, _ = await env.ledger.create_subscription(make_params(), 700)
        burned_before = env.value_ledger.total_burned
        env.clock.advance(days=2)

        result = await env.ledger.charge([first, second])

        assert result.total == 400
        assert env.value_ledger.total_burned == burned_before + 400
        assert await env.value_ledger.balance(ACCOUNT) == 1000 + 500 - 400

    @pytest.mark.asyncio
    async def test_failed_burn_leaves_records_unchanged(self, configured, make_params):
        """Test that no record is persisted when the batch burn fails."""
        env = configured
        subscription_id, _ = await env.ledger.create_subscription(make_params(), 300)
        created_at = (await env.ledger.get_subscription(subscription_id)).updated
        env.clock.advance(days=2)

        failure = InsufficientFundsError(ACCOUNT, 0, 100)
        with patch.object(env.value_ledger, "burn", AsyncMock(side_effect=failure)):
            with pytest.raises(InsufficientFundsError):
                await env.ledger.charge([subscription_id])

        subscription = await env.ledger.get_subscription(subscription_id)
        assert subscription.balance == 100
        assert subscription.status == SubscriptionStatus.ACTIVE
        assert subscription.updated == created_at
        assert env.publisher.of_type(SubscriptionChargedEvent) == []
        assert env.metrics.counter("subscriptions.charged") == 0

        result = await env.ledger.charge([subscription_id])
        assert result.charged == {subscription_id: 100}
        assert result.suspended == [subscription_id]

    @pytest.mark.asyncio
    async def test_events_follow_batch_order(self, configured, make_params):
        """Test that suspension precedes the charge event of the same record."""
        env = configured
        first, _ = await env.ledger.create_subscription(make_params(), 300)
        second, _ = await env.ledger.create_subscription(make_params(), 1200)
        env.publisher.clear()
        env.clock.advance(days=1)

        await env.ledger.charge([first, second])

        assert [type(event) for event in env.publisher.events] == [
            SubscriptionSuspendedEvent,
            SubscriptionChargedEvent,
            SubscriptionChargedEvent,
        ]
        charged = env.publisher.of_type(SubscriptionChargedEvent)
        assert [event.payload for event in charged] == [
            (_now_ms(env), first, 100),
            (_now_ms(env), second, 100),
        ]

    @pytest.mark.asyncio
    async def test_suspended_subscription_is_reported_again(self, configured, make_params):
        """Test that a drained suspended record is charged zero and reported."""
        env = configured
        subscription_id, _ = await env.ledger.create_subscription(make_params(), 300)
        env.clock.advance(days=1)
        await env.ledger.charge([subscription_id])
        env.publisher.clear()
        burned_before = env.value_ledger.total_burned
        env.clock.advance(days=1)

        result = await env.ledger.charge([subscription_id])

        assert result.charged == {subscription_id: 0}
        assert result.suspended == [subscription_id]
        assert len(env.publisher.of_type(SubscriptionSuspendedEvent)) == 1
        assert env.value_ledger.total_burned == burned_before

    @pytest.mark.asyncio
    async def test_charge_requires_admin(self, configured, make_params):
        """Test that only the admin may charge."""
        env = configured
        subscription_id, _ = await env.ledger.create_subscription(make_params(), 300)
        env.clock.advance(days=1)
        env.authorization.revoke(ADMIN)

        with pytest.raises(UnauthorizedError):
            await env.ledger.charge([subscription_id])

        assert (await env.ledger.get_subscription(subscription_id)).balance == 100

    @pytest.mark.asyncio
    async def test_charge_follows_fee_changes(self, configured, make_params):
        """Test that the current fee applies to every charge."""
        env = configured
        subscription_id, _ = await env.ledger.create_subscription(make_params(), 1200)
        await env.ledger.set_fee(150)
        env.clock.advance(days=2)

        result = await env.ledger.charge([subscription_id])

        assert result.total == 300

    @pytest.mark.asyncio
    async def test_charge_does_not_require_live_retention(self, configured, make_params):
        """Test that a record past its horizon is still charged until evicted."""
        env = configured
        subscription_id, _ = await env.ledger.create_subscription(make_params(), 300)
        env.clock.advance(days=2)

        result = await env.ledger.charge([subscription_id])

        assert result.charged == {subscription_id: 100}
        assert env.store.evict_expired() == [subscription_id]


class TestCancel:
    """Test cases for cancel."""

    @pytest.mark.asyncio
    async def test_cancel_refunds_balance(self, configured, make_params):
        """Test that cancel refunds the balance and removes the record."""
        env = configured
        subscription_id, _ = await env.ledger.create_subscription(make_params(), 300)

        refund = await env.ledger.cancel(subscription_id)

        assert refund == 100
        assert await env.value_ledger.balance(OWNER) == FUNDS - 200
        assert await env.value_ledger.balance(ACCOUNT) == 0
        with pytest.raises(SubscriptionNotFoundError):
            await env.ledger.get_subscription(subscription_id)
        events = env.publisher.of_type(SubscriptionCancelledEvent)
        assert [event.payload for event in events] == [(subscription_id,)]

    @pytest.mark.asyncio
    async def test_cancel_with_empty_balance(self, configured, make_params):
        """Test cancelling a subscription with nothing to refund."""
        subscription_id, _ = await configured.ledger.create_subscription(make_params(), 200)
        assert await configured.ledger.cancel(subscription_id) == 0

    @pytest.mark.asyncio
    async def test_cancel_suspended_fails(self, configured, make_params):
        """Test that suspended subscriptions cannot be cancelled."""
        env = configured
        subscription_id, _ = await env.ledger.create_subscription(make_params(), 300)
        env.clock.advance(days=1)
        await env.ledger.charge([subscription_id])

        with pytest.raises(InvalidSubscriptionStatusError):
            await env.ledger.cancel(subscription_id)

        assert (await env.ledger.get_subscription(subscription_id)).is_active is False

    @pytest.mark.asyncio
    async def test_cancel_requires_owner(self, configured, make_params):
        """Test that only the owner may cancel."""
        env = configured
        subscription_id, _ = await env.ledger.create_subscription(make_params(), 300)
        env.authorization.revoke(OWNER)

        with pytest.raises(UnauthorizedError):
            await env.ledger.cancel(subscription_id)

        assert env.authorization.required[-1] == OWNER

    @pytest.mark.asyncio
    async def test_cancel_missing_subscription(self, configured):
        """Test cancelling an unknown ID."""
        with pytest.raises(SubscriptionNotFoundError):
            await configured.ledger.cancel(7)

    @pytest.mark.asyncio
    async def test_get_requires_initialization(self, env):
        """Test that get_subscription fails on an unconfigured ledger."""
        with pytest.raises(NotInitializedError):
            await env.ledger.get_subscription(1)


class TestSerializedExecution:
    """Test cases for concurrent calls on the facade."""

    @pytest.mark.asyncio
    async def test_concurrent_creates_get_distinct_ids(self, configured, make_params):
        """Test that concurrent operations never share an ID."""
        results = await asyncio.gather(
            *(configured.ledger.create_subscription(make_params(), 300) for _ in range(5))
        )

        assert sorted(subscription_id for subscription_id, _ in results) == [1, 2, 3, 4, 5]
        assert await configured.ledger.last_id() == 5

    @pytest.mark.asyncio
    async def test_metrics_count_lifecycle(self, configured, make_params):
        """Test lifecycle counters."""
        env = configured
        subscription_id, _ = await env.ledger.create_subscription(make_params(), 300)
        await env.ledger.deposit(OWNER, subscription_id, 100)
        await env.ledger.cancel(subscription_id)

        assert env.metrics.counter("subscriptions.created") == 1
        assert env.metrics.counter("subscriptions.deposited") == 1
        assert env.metrics.counter("subscriptions.cancelled") == 1
        assert env.metrics.counter("value.burned") == 200

    @pytest.mark.asyncio
    async def test_publish_failure_does_not_undo_commit(self, configured, make_params):
        """Test that a publisher failure after commit is logged and counted."""
        env = configured
        outage = AsyncMock(side_effect=RuntimeError("broker unavailable"))
        with patch.object(env.publisher, "publish", outage):
            subscription_id, _ = await env.ledger.create_subscription(make_params(), 300)
            env.clock.advance(days=2)
            result = await env.ledger.charge([subscription_id])

        assert result.charged == {subscription_id: 100}
        subscription = await env.ledger.get_subscription(subscription_id)
        assert subscription.status == SubscriptionStatus.SUSPENDED
        assert await configured.ledger.last_id() == 1
        # created, charged, suspended
        assert outage.await_count == 3
        assert env.metrics.counter("events.dropped") == 3
