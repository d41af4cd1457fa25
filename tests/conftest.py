"""Pytest configuration and shared fixtures."""

import pytest
import pytest_asyncio

from subscription_ledger.domain.models import SubscriptionInitParams
from subscription_ledger.infrastructure.factories import InMemoryLedger, create_in_memory_ledger
from subscription_ledger.infrastructure.system_clock import ManualClock

ADMIN = "GADMIN"
OWNER = "GOWNER"
TOKEN = "CTOKEN"
BASE_FEE = 100


@pytest.fixture
def clock():
    """Create a manual clock starting at 2024-01-01T00:00:00Z."""
    return ManualClock()


@pytest.fixture
def env(clock) -> InMemoryLedger:
    """Create an unconfigured ledger wired to in-memory adapters."""
    return create_in_memory_ledger(clock=clock)


@pytest_asyncio.fixture
async def configured(env) -> InMemoryLedger:
    """Create a ledger configured with the default admin and fee.

    The owner is funded and both admin and owner authorize every call.
    """
    env.authorization.authorize(ADMIN, OWNER)
    await env.ledger.configure(ADMIN, BASE_FEE, TOKEN)
    env.value_ledger.mint(OWNER, 1_000_000)
    return env


@pytest.fixture
def make_params():
    """Factory for valid subscription parameters."""

    def _make(**overrides) -> SubscriptionInitParams:
        data = {
            "owner": OWNER,
            "base": "BTC",
            "quote": "USD",
            "threshold": 100,
            "heartbeat": 60,
            "webhook": b"https://example.com/hook",
        }
        data.update(overrides)
        return SubscriptionInitParams(**data)

    return _make
