"""Domain services containing fee and retention business logic.

Following Domain-Driven Design principles, these services encapsulate
calculations that don't naturally belong to a single entity.
"""

from .exceptions import InvalidAmountError


class FeeCalculator:
    """Domain service mapping subscription parameters to a daily fee.

    The fee is currently flat: ``heartbeat`` and ``threshold`` are accepted
    so callers are already shaped for a parameterized formula, but they do
    not influence the result.
    """

    def __init__(self, base_fee: int):
        """Initialize with the configured base fee."""
        self._base_fee = base_fee

    @property
    def base_fee(self) -> int:
        """The configured base fee."""
        return self._base_fee

    def calculate(self, heartbeat: int, threshold: int) -> int:
        """Calculate the daily fee for a subscription.

        Args:
            heartbeat: Heartbeat interval in minutes
            threshold: Deviation threshold in basis points

        Returns:
            The fee charged per elapsed day
        """
        return self._base_fee

    def activation_fee(self, heartbeat: int, threshold: int) -> int:
        """One-time fee burned when a subscription is created."""
        return self.calculate(heartbeat, threshold) * 2


class RetentionPlanner:
    """Domain service computing how long a subscription record must be kept.

    A record is retained for as many days as its balance can pay for,
    expressed in ledgers of the backing store.
    """

    def __init__(self, ledgers_per_day: int = 17280):
        """Initialize with the number of store ledgers in one day."""
        self._ledgers_per_day = ledgers_per_day

    @property
    def ledgers_per_day(self) -> int:
        """Store ledgers per day."""
        return self._ledgers_per_day

    def days_covered(self, fee: int, balance: int) -> int:
        """Number of days ``balance`` pays for, rounded up."""
        if fee <= 0:
            raise InvalidAmountError(f"Fee must be positive to plan retention, got {fee}", fee)
        return (balance + fee - 1) // fee

    def plan(self, fee: int, balance: int, max_ttl: int) -> int:
        """Compute the retention horizon for a record.

        Args:
            fee: Daily fee of the subscription
            balance: Current subscription balance
            max_ttl: Maximum horizon the store accepts, in ledgers

        Returns:
            The horizon in ledgers

        Raises:
            InvalidAmountError: If fee is not positive or the horizon exceeds max_ttl
        """
        ledgers = self.days_covered(fee, balance) * self._ledgers_per_day
        if ledgers > max_ttl:
            raise InvalidAmountError(
                f"Balance {balance} needs {ledgers} ledgers of retention, maximum is {max_ttl}",
                amount=balance,
            )
        return ledgers
