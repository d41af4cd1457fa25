"""Type aliases used across the domain layer."""

from typing import TypeAlias

# Identity of a party able to authorize calls and hold value.
Address: TypeAlias = str

# Monotonically assigned subscription identifier.
SubscriptionId: TypeAlias = int

# Amount in the value ledger's smallest unit.
Amount: TypeAlias = int
