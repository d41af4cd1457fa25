"""Domain events for subscription lifecycle and administrative signals."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from .models import Subscription

DEFAULT_NAMESPACE = "subscriptions"


class DomainEvent(BaseModel):
    """Base class for domain events.

    Domain events represent something that has happened in the ledger.
    They are immutable facts published only after the state change that
    produced them has been committed.
    """

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    name: ClassVar[str] = "event"

    event_id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        description="Unique event identifier",
    )
    occurred_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the event occurred",
    )
    aggregate_id: str = Field(
        ...,
        description="ID of the aggregate that emitted this event",
    )
    aggregate_type: str = Field(
        ...,
        description="Type of the aggregate",
    )
    event_type: str = Field(
        ...,
        description="Type of the event",
    )
    namespace: str = Field(
        default=DEFAULT_NAMESPACE,
        description="Topic namespace the event is published under",
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event metadata",
    )

    @property
    def topic(self) -> tuple[str, ...]:
        """Topic segments identifying the event stream."""
        return (self.namespace, self.name)

    @property
    def payload(self) -> tuple[Any, ...]:
        """Event data carried under the topic."""
        return ()


class SubscriptionEvent(DomainEvent):
    """Event scoped to a single subscription and its owner."""

    owner: str = Field(..., description="Owner of the subscription")
    subscription_id: int = Field(..., ge=1, description="Subscription identifier")

    def __init__(self, **data: Any) -> None:
        """Initialize with aggregate identity and event type."""
        data.setdefault("aggregate_id", str(data.get("subscription_id")))
        data["aggregate_type"] = "Subscription"
        data["event_type"] = f"subscription.{type(self).name}"
        super().__init__(**data)

    @property
    def topic(self) -> tuple[str, ...]:
        """Topic segments, including the owner."""
        return (self.namespace, self.name, self.owner)


class SubscriptionCreatedEvent(SubscriptionEvent):
    """Event emitted when a subscription is created."""

    name: ClassVar[str] = "created"

    subscription: Subscription = Field(..., description="Record as created")

    @property
    def payload(self) -> tuple[Any, ...]:
        return (self.subscription_id, self.subscription)


class SubscriptionDepositedEvent(SubscriptionEvent):
    """Event emitted when funds are deposited to a subscription."""

    name: ClassVar[str] = "deposited"

    subscription: Subscription = Field(..., description="Record after the deposit")
    amount: int = Field(..., gt=0, description="Deposited amount")

    @property
    def payload(self) -> tuple[Any, ...]:
        return (self.subscription_id, self.subscription, self.amount)


class SubscriptionChargedEvent(SubscriptionEvent):
    """Event emitted for every subscription processed by a charge."""

    name: ClassVar[str] = "charged"

    timestamp: int = Field(..., ge=0, description="Charge time in milliseconds")
    charge: int = Field(..., ge=0, description="Amount deducted from the balance")

    @property
    def payload(self) -> tuple[Any, ...]:
        return (self.timestamp, self.subscription_id, self.charge)


class SubscriptionSuspendedEvent(SubscriptionEvent):
    """Event emitted when a charge leaves less than one fee on the balance."""

    name: ClassVar[str] = "suspended"

    timestamp: int = Field(..., ge=0, description="Suspension time in milliseconds")

    @property
    def payload(self) -> tuple[Any, ...]:
        return (self.timestamp, self.subscription_id)


class SubscriptionCancelledEvent(SubscriptionEvent):
    """Event emitted when a subscription is cancelled and removed."""

    name: ClassVar[str] = "cancelled"

    @property
    def payload(self) -> tuple[Any, ...]:
        return (self.subscription_id,)


class TriggeredEvent(DomainEvent):
    """Administrative passthrough signal."""

    name: ClassVar[str] = "triggered"

    timestamp: int = Field(..., ge=0, description="Timestamp supplied by the admin")
    trigger_hash: str = Field(
        ..., pattern=r"^[0-9a-f]{64}$", description="Hex encoded 32-byte hash"
    )

    def __init__(self, **data: Any) -> None:
        """Initialize with proper event type."""
        data.setdefault("aggregate_id", "ledger")
        data["aggregate_type"] = "Ledger"
        data["event_type"] = "ledger.triggered"
        super().__init__(**data)

    @property
    def payload(self) -> tuple[Any, ...]:
        return (self.timestamp, self.trigger_hash)
