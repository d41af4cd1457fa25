"""Domain models using Pydantic for validation."""

from __future__ import annotations

import base64
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .enums import SubscriptionStatus
from .exceptions import InvalidHeartbeatError, InvalidThresholdError, WebhookTooLongError


def _decode_webhook(v: Any) -> Any:
    # JSON payloads carry the webhook as base64 text
    if isinstance(v, str):
        try:
            return base64.b64decode(v.encode("ascii"), validate=True)
        except ValueError as e:
            raise ValueError(f"Invalid base64 webhook payload: {e}") from e
    return v


class LedgerLimits(BaseModel):
    """Validation limits and time constants applied by the ledger.

    The ledger interval constant (``ledgers_per_day``) assumes a fixed
    ledger close time of five seconds.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    min_heartbeat: int = Field(default=5, ge=1, description="Minimum heartbeat in minutes")
    max_threshold: int = Field(default=10000, ge=1, description="Maximum threshold in basis points")
    max_webhook_size: int = Field(default=2048, ge=0, description="Maximum webhook size in bytes")
    day_ms: int = Field(default=86_400_000, gt=0, description="One billing day in milliseconds")
    ledgers_per_day: int = Field(
        default=17280, gt=0, description="Retention units (ledgers) per day"
    )


class SubscriptionInitParams(BaseModel):
    """Parameters supplied by the owner when creating a subscription."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    owner: str = Field(..., min_length=1, description="Identity creating the subscription")
    base: str = Field(..., description="Base asset or feed symbol")
    quote: str = Field(..., description="Quote asset or feed symbol")
    threshold: int = Field(..., ge=0, description="Deviation trigger in basis points")
    heartbeat: int = Field(..., ge=0, description="Maximum charge interval in minutes")
    webhook: bytes = Field(default=b"", description="Opaque webhook payload")

    @field_validator("webhook", mode="before")
    @classmethod
    def load_webhook(cls, v: Any) -> Any:
        """Accept base64 text for the webhook payload."""
        return _decode_webhook(v)

    def validate_against(self, limits: LedgerLimits) -> None:
        """Check the creation rules that hold for the lifetime of a record.

        Raises:
            InvalidHeartbeatError: If heartbeat is below the minimum
            InvalidThresholdError: If threshold is outside (0, max_threshold]
            WebhookTooLongError: If the webhook exceeds the maximum size
        """
        if self.heartbeat < limits.min_heartbeat:
            raise InvalidHeartbeatError(self.heartbeat, limits.min_heartbeat)
        if self.threshold == 0 or self.threshold > limits.max_threshold:
            raise InvalidThresholdError(self.threshold, limits.max_threshold)
        if len(self.webhook) > limits.max_webhook_size:
            raise WebhookTooLongError(len(self.webhook), limits.max_webhook_size)


class Subscription(BaseModel):
    """A funded, periodically billed subscription record."""

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        json_schema_extra={
            "example": {
                "owner": "GOWNER",
                "base": "BTC",
                "quote": "USD",
                "threshold": 100,
                "heartbeat": 60,
                "webhook": "aHR0cHM6Ly9leGFtcGxlLmNvbQ==",
                "balance": 900,
                "status": "ACTIVE",
                "updated": 1700000000000,
            }
        },
    )

    owner: str = Field(..., min_length=1)
    base: str
    quote: str
    threshold: int = Field(..., ge=0)
    heartbeat: int = Field(..., ge=0)
    webhook: bytes = Field(default=b"")
    balance: int = Field(..., ge=0, description="Funds available for future fees")
    status: SubscriptionStatus = Field(default=SubscriptionStatus.ACTIVE)
    updated: int = Field(..., ge=0, description="Last balance-affecting event, in milliseconds")

    @field_validator("webhook", mode="before")
    @classmethod
    def load_webhook(cls, v: Any) -> Any:
        """Accept base64 text as produced by the JSON serializer."""
        return _decode_webhook(v)

    @field_serializer("webhook", when_used="json")
    def dump_webhook(self, v: bytes) -> str:
        """Emit the webhook as base64 text in JSON mode."""
        return base64.b64encode(v).decode("ascii")

    @property
    def is_active(self) -> bool:
        """Check if fees currently accrue against this subscription."""
        return self.status == SubscriptionStatus.ACTIVE

    @classmethod
    def from_params(cls, params: SubscriptionInitParams, balance: int, now_ms: int) -> Subscription:
        """Build a freshly activated record from creation parameters."""
        return cls(
            owner=params.owner,
            base=params.base,
            quote=params.quote,
            threshold=params.threshold,
            heartbeat=params.heartbeat,
            webhook=params.webhook,
            balance=balance,
            status=SubscriptionStatus.ACTIVE,
            updated=now_ms,
        )


class LedgerState(BaseModel):
    """Process-wide ledger configuration and counters.

    ``initialized`` is the explicit singleton guard: it is set once by
    ``configure`` and never cleared.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    initialized: bool = Field(default=False)
    admin: str | None = Field(default=None, description="Administrator identity")
    fee: int = Field(default=0, ge=0, description="Base fee per billing day")
    token: str | None = Field(default=None, description="Value ledger reference")
    last_subscription_id: int = Field(default=0, ge=0)
    code_hash: str | None = Field(default=None, description="Hex hash of the last code update")
