"""Configuration adapter implementation.

Concrete implementation of the ConfigurationPort interface.
Loads ledger settings from environment variables.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Literal, cast

from ..domain.exceptions import ConfigurationError
from ..domain.models import LedgerLimits
from ..ports.configuration import ConfigurationPort
from .config import KVStoreConfig, LedgerSettings, NATSConnectionConfig

ENV_PREFIX = "SUBSCRIPTION_LEDGER_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {name}: {value}")


class EnvironmentConfigurationAdapter(ConfigurationPort):
    """Adapter that loads ledger settings from environment variables."""

    def __init__(self, environ: Mapping[str, str] | None = None):
        """Initialize the adapter.

        Args:
            environ: Variables to read. Defaults to ``os.environ``.
        """
        self._environ = environ if environ is not None else os.environ

    def _get(self, name: str, default: str) -> str:
        return self._environ.get(f"{ENV_PREFIX}{name}", default)

    def load_settings(self) -> LedgerSettings:
        """Load ledger settings from environment variables.

        Returns:
            LedgerSettings: Validated settings

        Raises:
            ConfigurationError: If configuration is invalid
        """
        try:
            defaults = LedgerSettings()
            default_limits = defaults.limits

            log_level = self._get("LOG_LEVEL", defaults.log_level).upper()
            if log_level not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
                raise ValueError(f"Invalid log level: {log_level}")

            nats_url = self._get("NATS_URL", defaults.nats.servers[0])
            servers = [url.strip() for url in nats_url.split(",") if url.strip()]

            limits = LedgerLimits(
                min_heartbeat=int(
                    self._get("MIN_HEARTBEAT", str(default_limits.min_heartbeat))
                ),
                max_threshold=default_limits.max_threshold,
                max_webhook_size=int(
                    self._get("MAX_WEBHOOK_SIZE", str(default_limits.max_webhook_size))
                ),
            )

            return LedgerSettings(
                account=self._get("ACCOUNT", defaults.account),
                max_ttl=int(self._get("MAX_TTL", str(defaults.max_ttl))),
                ledger_interval_seconds=int(
                    self._get("LEDGER_INTERVAL_SECONDS", str(defaults.ledger_interval_seconds))
                ),
                event_namespace=self._get("EVENT_NAMESPACE", defaults.event_namespace),
                log_level=cast(
                    Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], log_level
                ),
                nats=NATSConnectionConfig(servers=servers),
                kv=KVStoreConfig(
                    bucket=self._get("BUCKET", defaults.kv.bucket),
                    use_msgpack=_parse_bool(
                        "USE_MSGPACK", self._get("USE_MSGPACK", str(defaults.kv.use_msgpack))
                    ),
                ),
                limits=limits,
            )

        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {str(e)}") from e
