"""Factories wiring ledger dependencies for in-memory and NATS deployments."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import nats
from nats.aio.client import Client as NATSClient

from ..application.context import LedgerContext
from ..application.ledger import SubscriptionLedger
from ..domain.models import LedgerLimits
from ..ports.authorization import AuthorizationPort
from ..ports.clock import ClockPort
from ..ports.value_ledger import ValueLedgerPort
from .config import LedgerSettings, NATSConnectionConfig
from .in_memory_authorization import InMemoryAuthorization
from .in_memory_event_publisher import InMemoryEventPublisher
from .in_memory_metrics import InMemoryMetrics
from .in_memory_store import (
    DEFAULT_LEDGER_INTERVAL_SECONDS,
    DEFAULT_MAX_TTL,
    InMemorySubscriptionStore,
)
from .in_memory_value_ledger import InMemoryValueLedger
from .nats_event_publisher import NATSEventPublisher
from .nats_subscription_store import NATSKVSubscriptionStore
from .simple_logger import SimpleLogger
from .system_clock import ManualClock, SystemClock


@dataclass
class InMemoryLedger:
    """A ledger wired to in-memory adapters, with handles on each of them."""

    ledger: SubscriptionLedger
    store: InMemorySubscriptionStore
    value_ledger: InMemoryValueLedger
    authorization: InMemoryAuthorization
    publisher: InMemoryEventPublisher
    clock: ManualClock
    metrics: InMemoryMetrics


def create_in_memory_ledger(
    clock: ManualClock | None = None,
    account: str = "subscription-ledger",
    limits: LedgerLimits | None = None,
    max_ttl: int = DEFAULT_MAX_TTL,
    ledger_interval_seconds: int = DEFAULT_LEDGER_INTERVAL_SECONDS,
) -> InMemoryLedger:
    """Create a ledger backed entirely by in-memory adapters.

    Intended for tests and local development; time only moves when the
    returned manual clock is advanced.
    """
    clock = clock or ManualClock()
    store = InMemorySubscriptionStore(clock, max_ttl, ledger_interval_seconds)
    value_ledger = InMemoryValueLedger()
    authorization = InMemoryAuthorization()
    publisher = InMemoryEventPublisher()
    metrics = InMemoryMetrics()
    context = LedgerContext(
        clock=clock,
        authorization=authorization,
        value_ledger=value_ledger,
        store=store,
        publisher=publisher,
        logger=SimpleLogger("subscription_ledger"),
        metrics=metrics,
        account=account,
        limits=limits or LedgerLimits(),
    )
    return InMemoryLedger(
        ledger=SubscriptionLedger(context),
        store=store,
        value_ledger=value_ledger,
        authorization=authorization,
        publisher=publisher,
        clock=clock,
        metrics=metrics,
    )


async def open_nats_connection(config: NATSConnectionConfig) -> NATSClient:
    """Connect to the configured NATS servers."""
    return await nats.connect(**config.to_connection_params())


async def create_nats_ledger(
    settings: LedgerSettings,
    nc: NATSClient,
    authorization: AuthorizationPort,
    value_ledger: ValueLedgerPort,
    clock: ClockPort | None = None,
) -> SubscriptionLedger:
    """Create a ledger persisting to JetStream KV and publishing over NATS.

    Args:
        settings: Ledger settings
        nc: Connected NATS client
        authorization: Authorization adapter of the host
        value_ledger: Value ledger adapter of the host
        clock: Optional clock. Defaults to the system clock.
    """
    clock = clock or SystemClock()
    metrics = InMemoryMetrics()
    logger = SimpleLogger("subscription_ledger", getattr(logging, settings.log_level))
    store = await NATSKVSubscriptionStore.connect(
        nc.jetstream(), clock, settings.kv_config(), metrics, logger
    )
    publisher = NATSEventPublisher(nc, settings.kv.use_msgpack, metrics, logger)
    context = LedgerContext(
        clock=clock,
        authorization=authorization,
        value_ledger=value_ledger,
        store=store,
        publisher=publisher,
        logger=logger,
        metrics=metrics,
        account=settings.account,
        limits=settings.limits,
        event_namespace=settings.event_namespace,
    )
    return SubscriptionLedger(context)
