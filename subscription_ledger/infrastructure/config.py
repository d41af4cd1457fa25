"""Configuration objects for the infrastructure layer."""

from __future__ import annotations

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.events import DEFAULT_NAMESPACE
from ..domain.models import LedgerLimits


class NATSConnectionConfig(BaseModel):
    """Strongly-typed configuration for NATS connections."""

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        strict=True,
        validate_assignment=True,
    )

    servers: list[str] = Field(
        default_factory=lambda: ["nats://localhost:4222"],
        min_length=1,
        description="List of NATS server URLs",
    )
    max_reconnect_attempts: int = Field(
        default=10,
        ge=0,
        description="Maximum reconnection attempts",
    )
    reconnect_time_wait: float = Field(
        default=2.0,
        gt=0,
        description="Time to wait between reconnection attempts in seconds",
    )

    @field_validator("servers")
    @classmethod
    def validate_servers(cls, v: list[str]) -> list[str]:
        """Validate server URLs format."""
        for server in v:
            if not server.startswith(("nats://", "tls://", "ws://", "wss://")):
                raise ValueError(
                    f"Invalid server URL: {server}. "
                    "Must start with nats://, tls://, ws://, or wss://"
                )
        return v

    def to_connection_params(self) -> dict[str, Any]:
        """Convert to parameters for NATS connection."""
        return {
            "servers": self.servers,
            "max_reconnect_attempts": self.max_reconnect_attempts,
            "reconnect_time_wait": self.reconnect_time_wait,
        }


class KVStoreConfig(BaseModel):
    """Configuration for the JetStream KV subscription store."""

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        strict=True,
        validate_assignment=True,
    )

    bucket: str = Field(
        default="subscriptions",
        min_length=1,
        description="KV store bucket name",
    )
    use_msgpack: bool = Field(
        default=True,
        description="Encode records with MessagePack instead of JSON",
    )
    max_ttl: int = Field(
        default=3_110_400,
        gt=0,
        description="Maximum retention horizon in ledgers",
    )
    ledger_interval_seconds: int = Field(
        default=5,
        gt=0,
        description="Seconds per ledger",
    )

    @field_validator("bucket")
    @classmethod
    def validate_bucket_name(cls, v: str) -> str:
        """Validate bucket name format."""
        # NATS KV bucket names allow alphanumerics, dashes and underscores
        if not re.match(r"^[a-zA-Z0-9_-]+$", v):
            raise ValueError(
                f"Invalid bucket name: {v}. "
                "Must contain only alphanumeric characters, dashes and underscores"
            )
        return v


class LedgerSettings(BaseModel):
    """Top-level settings of a ledger deployment."""

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    account: str = Field(
        default="subscription-ledger",
        min_length=1,
        description="Identity holding subscription funds",
    )
    max_ttl: int = Field(default=3_110_400, gt=0, description="Maximum retention in ledgers")
    ledger_interval_seconds: int = Field(default=5, gt=0, description="Seconds per ledger")
    event_namespace: str = Field(default=DEFAULT_NAMESPACE, min_length=1)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    nats: NATSConnectionConfig = Field(default_factory=NATSConnectionConfig)
    kv: KVStoreConfig = Field(default_factory=KVStoreConfig)
    limits: LedgerLimits = Field(default_factory=LedgerLimits)

    def kv_config(self) -> KVStoreConfig:
        """KV store configuration aligned with the ledger retention settings."""
        return self.kv.model_copy(
            update={
                "max_ttl": self.max_ttl,
                "ledger_interval_seconds": self.ledger_interval_seconds,
            }
        )


class LogContext(BaseModel):
    """Strongly-typed context for structured logging."""

    model_config = ConfigDict(
        extra="allow",
        str_strip_whitespace=True,
        strict=False,
        validate_assignment=True,
    )

    operation: str | None = Field(default=None, description="Current operation")
    component: str | None = Field(default=None, description="Component generating the log")
    subscription_id: int | None = Field(default=None, description="Subscription concerned")
    error_code: str | None = Field(default=None, description="Structured error code")
    error_type: str | None = Field(default=None, description="Type of error encountered")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging frameworks."""
        return {k: v for k, v in self.model_dump().items() if v is not None}

    def with_error(self, error: Exception) -> LogContext:
        """Create a new context with error information."""
        return LogContext(
            **{
                **self.model_dump(),
                "error_code": getattr(error, "error_code", error.__class__.__name__),
                "error_type": type(error).__module__ + "." + type(error).__name__,
            }
        )
