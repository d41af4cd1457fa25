"""Application layer - Use cases and the ledger facade."""

from .administration import AdministrationService
from .context import LedgerContext
from .ledger import SubscriptionLedger
from .lifecycle import ChargeResult, SubscriptionLifecycleService

__all__ = [
    "AdministrationService",
    "ChargeResult",
    "LedgerContext",
    "SubscriptionLedger",
    "SubscriptionLifecycleService",
]
