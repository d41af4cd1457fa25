"""NATS KV subscription store - JetStream implementation of SubscriptionStorePort."""

from __future__ import annotations

from typing import TypeVar

from nats.js import JetStreamContext, api
from nats.js.errors import (
    BucketNotFoundError,
    KeyDeletedError,
    KeyNotFoundError,
    NoKeysError,
)
from nats.js.kv import KeyValue

from ..domain.exceptions import SerializationError, StoreError
from ..domain.models import LedgerState, Subscription
from ..ports.clock import ClockPort
from ..ports.logger import LoggerPort
from ..ports.metrics import MetricsPort
from ..ports.subscription_store import SubscriptionStorePort
from .config import KVStoreConfig, LogContext
from .in_memory_metrics import InMemoryMetrics
from .in_memory_store import current_ledger
from .serialization import decode_envelope, encode_envelope
from .simple_logger import SimpleLogger

T = TypeVar("T", LedgerState, Subscription)

STATE_KEY = "state"
SUBSCRIPTION_KEY_PREFIX = "subscription_"


def subscription_key(subscription_id: int) -> str:
    """KV key of a subscription record."""
    return f"{SUBSCRIPTION_KEY_PREFIX}{subscription_id}"


class NATSKVSubscriptionStore(SubscriptionStorePort):
    """NATS JetStream KV implementation of the subscription store.

    Every record is stored in an envelope holding the serialized model and
    its ``live_until`` ledger horizon. JetStream has no notion of ledgers, so
    expiry is enforced by ``evict_expired`` rather than by stream limits.
    """

    def __init__(
        self,
        kv: KeyValue,
        clock: ClockPort,
        config: KVStoreConfig | None = None,
        metrics: MetricsPort | None = None,
        logger: LoggerPort | None = None,
    ):
        """Initialize the store over an opened KV bucket.

        Args:
            kv: JetStream key-value bucket
            clock: Clock used to derive the current ledger sequence
            config: Optional KV store configuration. If not provided, uses defaults.
            metrics: Optional metrics port. If not provided, uses in-memory metrics.
            logger: Optional logger port. If not provided, uses simple logger.
        """
        self._kv = kv
        self._clock = clock
        self._config = config or KVStoreConfig()
        self._metrics = metrics or InMemoryMetrics()
        self._logger = logger or SimpleLogger("subscription_ledger.nats_kv_store")

    @classmethod
    async def connect(
        cls,
        js: JetStreamContext,
        clock: ClockPort,
        config: KVStoreConfig | None = None,
        metrics: MetricsPort | None = None,
        logger: LoggerPort | None = None,
    ) -> NATSKVSubscriptionStore:
        """Open the configured bucket, creating it when it does not exist."""
        config = config or KVStoreConfig()
        log_ctx = LogContext(operation="connect_kv", component="NATSKVSubscriptionStore")
        try:
            try:
                kv = await js.key_value(config.bucket)
            except BucketNotFoundError:
                kv = await js.create_key_value(
                    config=api.KeyValueConfig(bucket=config.bucket, history=1)
                )
        except Exception as e:
            error_ctx = log_ctx.with_error(e)
            (logger or SimpleLogger("subscription_ledger.nats_kv_store")).exception(
                f"Failed to connect to KV bucket '{config.bucket}'", extra=error_ctx.to_dict()
            )
            raise StoreError(
                f"Failed to connect to KV bucket '{config.bucket}': {e}",
                operation="connect",
            ) from e
        store = cls(kv, clock, config, metrics, logger)
        store._logger.info(f"Connected to NATS KV bucket: {config.bucket}", extra=log_ctx.to_dict())
        return store

    def current_ledger(self) -> int:
        """Current ledger sequence."""
        return current_ledger(self._clock, self._config.ledger_interval_seconds)

    async def _read(self, key: str, model_class: type[T]) -> tuple[T, int | None] | None:
        try:
            entry = await self._kv.get(key)
        except (KeyNotFoundError, KeyDeletedError):
            self._metrics.increment("kv.get.miss")
            return None
        except Exception as e:
            self._metrics.increment("kv.get.error")
            raise StoreError(f"Failed to read '{key}': {e}", key=key, operation="get") from e
        if not entry.value:
            self._metrics.increment("kv.get.miss")
            return None
        self._metrics.increment("kv.get.success")
        return decode_envelope(entry.value, model_class, self._config.use_msgpack)

    async def _write(
        self, key: str, record: LedgerState | Subscription, live_until: int | None
    ) -> None:
        data = encode_envelope(record, live_until, self._config.use_msgpack)
        try:
            await self._kv.put(key, data)
        except Exception as e:
            self._metrics.increment("kv.put.error")
            self._logger.exception(
                f"Failed to write '{key}'",
                exc_info=e,
                extra=LogContext(operation="put", component="NATSKVSubscriptionStore").to_dict(),
            )
            raise StoreError(f"Failed to write '{key}': {e}", key=key, operation="put") from e
        self._metrics.increment("kv.put.success")

    async def load_state(self) -> LedgerState | None:
        """Load the ledger state."""
        with self._metrics.timer("kv.get.state"):
            found = await self._read(STATE_KEY, LedgerState)
        if found is None:
            return None
        return found[0]

    async def save_state(self, state: LedgerState) -> None:
        """Persist the ledger state. The state entry never expires."""
        with self._metrics.timer("kv.put.state"):
            await self._write(STATE_KEY, state, None)

    async def _get_envelope(self, subscription_id: int) -> tuple[Subscription, int] | None:
        found = await self._read(subscription_key(subscription_id), Subscription)
        if found is None:
            return None
        subscription, live_until = found
        return subscription, live_until if live_until is not None else self.current_ledger()

    async def get(self, subscription_id: int) -> Subscription | None:
        """Get a subscription by ID."""
        with self._metrics.timer("kv.get.subscription"):
            found = await self._get_envelope(subscription_id)
        return found[0] if found else None

    async def set(self, subscription_id: int, subscription: Subscription) -> None:
        """Create or replace a subscription record, keeping its horizon."""
        with self._metrics.timer("kv.put.subscription"):
            found = await self._get_envelope(subscription_id)
            live_until = found[1] if found else self.current_ledger()
            await self._write(subscription_key(subscription_id), subscription, live_until)

    async def remove(self, subscription_id: int) -> None:
        """Delete a subscription record."""
        key = subscription_key(subscription_id)
        try:
            await self._kv.delete(key)
        except KeyNotFoundError:
            return
        except Exception as e:
            self._metrics.increment("kv.delete.error")
            raise StoreError(f"Failed to delete '{key}': {e}", key=key, operation="delete") from e
        self._metrics.increment("kv.delete.success")

    async def extend_ttl(self, subscription_id: int, ledgers: int) -> None:
        """Extend the record horizon to at least ``ledgers`` from now."""
        key = subscription_key(subscription_id)
        if ledgers > self._config.max_ttl:
            raise StoreError(
                f"TTL of {ledgers} ledgers exceeds maximum {self._config.max_ttl}",
                key=key,
                operation="extend_ttl",
            )
        found = await self._get_envelope(subscription_id)
        if found is None:
            raise StoreError(
                f"Cannot extend TTL of missing subscription {subscription_id}",
                key=key,
                operation="extend_ttl",
            )
        subscription, live_until = found
        target = self.current_ledger() + ledgers
        if target > live_until:
            await self._write(key, subscription, target)

    def max_ttl(self) -> int:
        """Maximum retention horizon in ledgers."""
        return self._config.max_ttl

    async def live_until(self, subscription_id: int) -> int | None:
        """Ledger until which a record is retained."""
        found = await self._get_envelope(subscription_id)
        return found[1] if found else None

    async def evict_expired(self) -> list[int]:
        """Delete records whose horizon has lapsed.

        Returns:
            IDs of the evicted records
        """
        try:
            keys = await self._kv.keys()
        except NoKeysError:
            return []
        ledger = self.current_ledger()
        expired: list[int] = []
        for key in keys:
            if not key.startswith(SUBSCRIPTION_KEY_PREFIX):
                continue
            try:
                subscription_id = int(key[len(SUBSCRIPTION_KEY_PREFIX) :])
            except ValueError:
                self._logger.warning(f"Ignoring malformed key '{key}'")
                continue
            try:
                found = await self._get_envelope(subscription_id)
            except SerializationError as e:
                self._logger.exception(f"Unreadable record under '{key}'", exc_info=e)
                continue
            if found is not None and found[1] < ledger:
                await self.remove(subscription_id)
                expired.append(subscription_id)
        if expired:
            self._metrics.increment("kv.evicted", len(expired))
            self._logger.info(f"Evicted {len(expired)} expired subscriptions")
        return expired
