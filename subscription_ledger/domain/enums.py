"""Domain enums for type safety and consistency."""

from enum import Enum


class SubscriptionStatus(str, Enum):
    """Subscription lifecycle status.

    A subscription is created ACTIVE, becomes SUSPENDED when a charge leaves
    less than one fee on its balance, and is reactivated by a deposit.
    """

    ACTIVE = "ACTIVE"  # Fees accrue against the balance
    SUSPENDED = "SUSPENDED"  # Balance exhausted, waiting for a top-up
