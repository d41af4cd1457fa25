"""Tests for the in-memory subscription store."""

import pytest

from subscription_ledger.domain.exceptions import StoreError
from subscription_ledger.domain.models import LedgerState, Subscription
from subscription_ledger.infrastructure.in_memory_store import InMemorySubscriptionStore
from subscription_ledger.infrastructure.system_clock import ManualClock


@pytest.fixture
def store(clock):
    """Create a store with a small maximum horizon."""
    return InMemorySubscriptionStore(clock, max_ttl=1000, ledger_interval_seconds=5)


@pytest.fixture
def subscription():
    """Create a sample subscription record."""
    return Subscription(
        owner="GOWNER",
        base="BTC",
        quote="USD",
        threshold=100,
        heartbeat=60,
        balance=100,
        updated=0,
    )


class TestInMemorySubscriptionStore:
    """Test cases for InMemorySubscriptionStore."""

    def test_rejects_non_positive_interval(self, clock):
        """Test that the ledger interval must be positive."""
        with pytest.raises(ValueError):
            InMemorySubscriptionStore(clock, ledger_interval_seconds=0)

    def test_current_ledger_follows_clock(self, store, clock):
        """Test that one ledger closes every interval."""
        start = store.current_ledger()
        clock.advance(seconds=50)
        assert store.current_ledger() == start + 10

    @pytest.mark.asyncio
    async def test_state_round_trip(self, store):
        """Test saving and loading the ledger state."""
        assert await store.load_state() is None
        await store.save_state(LedgerState(initialized=True, admin="GADMIN", fee=5))

        state = await store.load_state()
        assert state.admin == "GADMIN"
        assert state.fee == 5

    @pytest.mark.asyncio
    async def test_state_is_copied(self, store):
        """Test that mutating a loaded state does not change the store."""
        await store.save_state(LedgerState(fee=5))
        state = await store.load_state()
        state.fee = 10
        assert (await store.load_state()).fee == 5

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        """Test reading an unknown ID."""
        assert await store.get(1) is None
        assert store.live_until(1) is None

    @pytest.mark.asyncio
    async def test_set_and_get(self, store, subscription):
        """Test writing and reading a record."""
        await store.set(1, subscription)
        assert await store.get(1) == subscription
        assert store.live_until(1) == store.current_ledger()

    @pytest.mark.asyncio
    async def test_records_are_copied(self, store, subscription):
        """Test that the store hands out copies."""
        await store.set(1, subscription)
        loaded = await store.get(1)
        loaded.balance = 0
        assert (await store.get(1)).balance == 100

    @pytest.mark.asyncio
    async def test_extend_ttl(self, store, subscription):
        """Test extending the horizon of a record."""
        await store.set(1, subscription)
        await store.extend_ttl(1, 100)
        assert store.live_until(1) == store.current_ledger() + 100

    @pytest.mark.asyncio
    async def test_extend_ttl_never_shortens(self, store, subscription):
        """Test that a shorter extension keeps the longer horizon."""
        await store.set(1, subscription)
        await store.extend_ttl(1, 500)
        await store.extend_ttl(1, 10)
        assert store.live_until(1) == store.current_ledger() + 500

    @pytest.mark.asyncio
    async def test_set_keeps_horizon(self, store, subscription):
        """Test that replacing a record keeps its horizon."""
        await store.set(1, subscription)
        await store.extend_ttl(1, 500)
        await store.set(1, subscription.model_copy(update={"balance": 5}))
        assert store.live_until(1) == store.current_ledger() + 500

    @pytest.mark.asyncio
    async def test_extend_ttl_missing_record(self, store):
        """Test extending an unknown record."""
        with pytest.raises(StoreError):
            await store.extend_ttl(1, 10)

    @pytest.mark.asyncio
    async def test_extend_ttl_above_maximum(self, store, subscription):
        """Test that the horizon is bounded by max_ttl."""
        await store.set(1, subscription)
        assert store.max_ttl() == 1000
        with pytest.raises(StoreError):
            await store.extend_ttl(1, 1001)

    @pytest.mark.asyncio
    async def test_remove(self, store, subscription):
        """Test deleting a record, twice."""
        await store.set(1, subscription)
        await store.remove(1)
        await store.remove(1)
        assert await store.get(1) is None

    @pytest.mark.asyncio
    async def test_evict_expired(self, store, clock, subscription):
        """Test that only lapsed records are evicted."""
        await store.set(1, subscription)
        await store.set(2, subscription)
        await store.extend_ttl(1, 10)
        await store.extend_ttl(2, 100)
        clock.advance(seconds=5 * 50)

        assert store.evict_expired() == [1]
        assert await store.get(1) is None
        assert await store.get(2) == subscription

    @pytest.mark.asyncio
    async def test_horizon_is_inclusive(self, store, clock, subscription):
        """Test that a record survives up to its last ledger."""
        await store.set(1, subscription)
        await store.extend_ttl(1, 10)
        clock.advance(seconds=5 * 10)
        assert store.evict_expired() == []

    @pytest.mark.asyncio
    async def test_state_never_expires(self, store, clock):
        """Test that the ledger state survives eviction sweeps."""
        await store.save_state(LedgerState(fee=5))
        clock.advance(days=3650)
        store.evict_expired()
        assert (await store.load_state()).fee == 5

    @pytest.mark.asyncio
    async def test_clear(self, store, subscription):
        """Test clearing the store."""
        await store.save_state(LedgerState())
        await store.set(1, subscription)
        store.clear()
        assert await store.load_state() is None
        assert await store.get(1) is None


def test_default_limits():
    """Test the default horizon configuration."""
    store = InMemorySubscriptionStore(ManualClock())
    assert store.max_ttl() == 3_110_400
