"""Value ledger port - token-style ledger used to move and destroy value."""

from abc import ABC, abstractmethod

from ..domain.types import Address, Amount


class ValueLedgerPort(ABC):
    """Abstract interface for a fungible value ledger.

    Calls either succeed completely or raise; partial transfers are not a
    representable outcome.
    """

    @abstractmethod
    async def transfer(self, from_: Address, to: Address, amount: Amount) -> None:
        """Move ``amount`` from one identity to another.

        Args:
            from_: Identity funds are taken from
            to: Identity funds are credited to
            amount: Non-negative amount in the smallest unit

        Raises:
            InsufficientFundsError: If ``from_`` cannot cover the amount
        """
        ...

    @abstractmethod
    async def burn(self, holder: Address, amount: Amount) -> None:
        """Irreversibly destroy ``amount`` from ``holder``'s balance.

        Raises:
            InsufficientFundsError: If ``holder`` cannot cover the amount
        """
        ...

    @abstractmethod
    async def balance(self, holder: Address) -> Amount:
        """Get the balance held by an identity."""
        ...
