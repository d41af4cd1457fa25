"""Subscription ledger - recurring-billing subscriptions with expiring storage."""

from .application.ledger import SubscriptionLedger
from .version import __version__

__all__ = ["SubscriptionLedger", "__version__"]
