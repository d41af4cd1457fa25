"""Configuration port interface.

Defines the protocol interface for loading ledger settings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..infrastructure.config import LedgerSettings


class ConfigurationPort(Protocol):
    """Protocol interface for configuration operations."""

    def load_settings(self) -> LedgerSettings:
        """Load ledger settings from external sources.

        Returns:
            LedgerSettings: Validated settings

        Raises:
            ConfigurationError: If configuration is invalid or missing
        """
        ...
