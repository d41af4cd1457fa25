"""Domain layer - Core business logic and entities."""

from .enums import SubscriptionStatus
from .events import (
    DomainEvent,
    SubscriptionCancelledEvent,
    SubscriptionChargedEvent,
    SubscriptionCreatedEvent,
    SubscriptionDepositedEvent,
    SubscriptionEvent,
    SubscriptionSuspendedEvent,
    TriggeredEvent,
)
from .exceptions import (
    AlreadyInitializedError,
    ConfigurationError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidHeartbeatError,
    InvalidSubscriptionStatusError,
    InvalidThresholdError,
    LedgerError,
    NotInitializedError,
    SerializationError,
    StoreError,
    SubscriptionNotFoundError,
    UnauthorizedError,
    ValidationError,
    WebhookTooLongError,
)
from .models import LedgerLimits, LedgerState, Subscription, SubscriptionInitParams
from .services import FeeCalculator, RetentionPlanner
from .types import Address, Amount, SubscriptionId

__all__ = [
    # Types
    "Address",
    # Exceptions
    "AlreadyInitializedError",
    "Amount",
    "ConfigurationError",
    # Events
    "DomainEvent",
    # Services
    "FeeCalculator",
    "InsufficientFundsError",
    "InvalidAmountError",
    "InvalidHeartbeatError",
    "InvalidSubscriptionStatusError",
    "InvalidThresholdError",
    "LedgerError",
    # Models
    "LedgerLimits",
    "LedgerState",
    "NotInitializedError",
    "RetentionPlanner",
    "SerializationError",
    "StoreError",
    "Subscription",
    "SubscriptionCancelledEvent",
    "SubscriptionChargedEvent",
    "SubscriptionCreatedEvent",
    "SubscriptionDepositedEvent",
    "SubscriptionEvent",
    "SubscriptionId",
    "SubscriptionInitParams",
    # Enums
    "SubscriptionStatus",
    "SubscriptionNotFoundError",
    "SubscriptionSuspendedEvent",
    "TriggeredEvent",
    "UnauthorizedError",
    "ValidationError",
    "WebhookTooLongError",
]
