"""Tests for the environment configuration adapter."""

import pytest

from subscription_ledger.domain.exceptions import ConfigurationError
from subscription_ledger.infrastructure.configuration_adapter import (
    EnvironmentConfigurationAdapter,
)


class TestEnvironmentConfigurationAdapter:
    """Test cases for EnvironmentConfigurationAdapter."""

    def test_defaults(self):
        """Test loading with no variables set."""
        settings = EnvironmentConfigurationAdapter({}).load_settings()

        assert settings.account == "subscription-ledger"
        assert settings.max_ttl == 3_110_400
        assert settings.ledger_interval_seconds == 5
        assert settings.nats.servers == ["nats://localhost:4222"]
        assert settings.kv.bucket == "subscriptions"
        assert settings.kv.use_msgpack is True

    def test_overrides(self):
        """Test loading every supported variable."""
        environ = {
            "SUBSCRIPTION_LEDGER_ACCOUNT": "GLEDGER",
            "SUBSCRIPTION_LEDGER_MAX_TTL": "1000",
            "SUBSCRIPTION_LEDGER_LEDGER_INTERVAL_SECONDS": "6",
            "SUBSCRIPTION_LEDGER_EVENT_NAMESPACE": "oracle",
            "SUBSCRIPTION_LEDGER_LOG_LEVEL": "debug",
            "SUBSCRIPTION_LEDGER_NATS_URL": "nats://a:4222, nats://b:4222",
            "SUBSCRIPTION_LEDGER_BUCKET": "subs",
            "SUBSCRIPTION_LEDGER_USE_MSGPACK": "false",
            "SUBSCRIPTION_LEDGER_MIN_HEARTBEAT": "10",
            "SUBSCRIPTION_LEDGER_MAX_WEBHOOK_SIZE": "512",
        }

        settings = EnvironmentConfigurationAdapter(environ).load_settings()

        assert settings.account == "GLEDGER"
        assert settings.max_ttl == 1000
        assert settings.ledger_interval_seconds == 6
        assert settings.event_namespace == "oracle"
        assert settings.log_level == "DEBUG"
        assert settings.nats.servers == ["nats://a:4222", "nats://b:4222"]
        assert settings.kv.bucket == "subs"
        assert settings.kv.use_msgpack is False
        assert settings.limits.min_heartbeat == 10
        assert settings.limits.max_webhook_size == 512

    def test_reads_process_environment(self, monkeypatch):
        """Test that os.environ is used by default."""
        monkeypatch.setenv("SUBSCRIPTION_LEDGER_ACCOUNT", "GENV")
        assert EnvironmentConfigurationAdapter().load_settings().account == "GENV"

    @pytest.mark.parametrize(
        "environ",
        [
            {"SUBSCRIPTION_LEDGER_LOG_LEVEL": "LOUD"},
            {"SUBSCRIPTION_LEDGER_MAX_TTL": "many"},
            {"SUBSCRIPTION_LEDGER_MAX_TTL": "0"},
            {"SUBSCRIPTION_LEDGER_USE_MSGPACK": "maybe"},
            {"SUBSCRIPTION_LEDGER_NATS_URL": "http://localhost"},
            {"SUBSCRIPTION_LEDGER_BUCKET": "bad.bucket"},
        ],
    )
    def test_invalid_values(self, environ):
        """Test that invalid values raise ConfigurationError."""
        with pytest.raises(ConfigurationError, match="Failed to load configuration"):
            EnvironmentConfigurationAdapter(environ).load_settings()
