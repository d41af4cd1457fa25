"""In-memory implementation of the ValueLedgerPort."""

from collections import defaultdict

from ..domain.exceptions import InsufficientFundsError, ValidationError
from ..ports.value_ledger import ValueLedgerPort


class InMemoryValueLedger(ValueLedgerPort):
    """Integer balance ledger for testing and development."""

    def __init__(self) -> None:
        """Initialize empty balances."""
        self._balances: dict[str, int] = defaultdict(int)
        self._burned = 0

    def mint(self, holder: str, amount: int) -> None:
        """Create ``amount`` out of thin air for ``holder``."""
        self._check_amount(amount)
        self._balances[holder] += amount

    async def transfer(self, from_: str, to: str, amount: int) -> None:
        """Move value between identities."""
        self._check_amount(amount)
        self._check_funds(from_, amount)
        self._balances[from_] -= amount
        self._balances[to] += amount

    async def burn(self, holder: str, amount: int) -> None:
        """Destroy value held by ``holder``."""
        self._check_amount(amount)
        self._check_funds(holder, amount)
        self._balances[holder] -= amount
        self._burned += amount

    async def balance(self, holder: str) -> int:
        """Get the balance held by an identity."""
        return self._balances.get(holder, 0)

    @property
    def total_supply(self) -> int:
        """Sum of all balances."""
        return sum(self._balances.values())

    @property
    def total_burned(self) -> int:
        """Sum of all burned value."""
        return self._burned

    def _check_funds(self, holder: str, amount: int) -> None:
        balance = self._balances.get(holder, 0)
        if balance < amount:
            raise InsufficientFundsError(holder, balance, amount)

    @staticmethod
    def _check_amount(amount: int) -> None:
        if amount < 0:
            raise ValidationError(f"Amount must be non-negative, got {amount}")
