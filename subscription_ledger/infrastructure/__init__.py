"""Infrastructure adapters for the subscription ledger."""

from .config import KVStoreConfig, LedgerSettings, LogContext, NATSConnectionConfig
from .configuration_adapter import EnvironmentConfigurationAdapter
from .factories import (
    InMemoryLedger,
    create_in_memory_ledger,
    create_nats_ledger,
    open_nats_connection,
)
from .in_memory_authorization import InMemoryAuthorization
from .in_memory_event_publisher import InMemoryEventPublisher
from .in_memory_metrics import InMemoryMetrics
from .in_memory_store import InMemorySubscriptionStore
from .in_memory_value_ledger import InMemoryValueLedger
from .nats_event_publisher import NATSEventPublisher
from .nats_subscription_store import NATSKVSubscriptionStore
from .simple_logger import SimpleLogger
from .system_clock import ManualClock, SystemClock

__all__ = [
    "EnvironmentConfigurationAdapter",
    "InMemoryAuthorization",
    "InMemoryEventPublisher",
    "InMemoryLedger",
    "InMemoryMetrics",
    "InMemorySubscriptionStore",
    "InMemoryValueLedger",
    "KVStoreConfig",
    "LedgerSettings",
    "LogContext",
    "ManualClock",
    "NATSConnectionConfig",
    "NATSEventPublisher",
    "NATSKVSubscriptionStore",
    "SimpleLogger",
    "SystemClock",
    "create_in_memory_ledger",
    "create_nats_ledger",
    "open_nats_connection",
]
