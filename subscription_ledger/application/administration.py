"""Administration use cases: one-time configuration and admin-gated actions."""

from __future__ import annotations

from ..domain.events import TriggeredEvent
from ..domain.exceptions import AlreadyInitializedError, ValidationError
from ..domain.models import LedgerState
from ..version import __version__
from .context import LedgerContext

HASH_SIZE = 32


def _hash_hex(value: bytes, field_name: str) -> str:
    if len(value) != HASH_SIZE:
        raise ValidationError(
            f"{field_name} must be {HASH_SIZE} bytes, got {len(value)}",
            details={"field": field_name, "size": len(value)},
        )
    return value.hex()


class AdministrationService:
    """Application service for ledger configuration.

    The ledger is configured exactly once by an admin-authorized call.
    Afterwards only the stored admin may change the fee or emit signals.
    """

    def __init__(self, context: LedgerContext):
        """Initialize the service with shared ledger dependencies."""
        self._ctx = context

    async def configure(self, admin: str, fee: int, token: str) -> LedgerState:
        """Initialize the ledger. Can be invoked only once.

        Args:
            admin: Administrator identity, must authorize the call
            fee: Base fee per billing day. Must be non-negative; zero is
                accepted and no upper bound is applied
            token: Reference of the value ledger used for payments

        Raises:
            UnauthorizedError: If the call is not authorized by ``admin``
            AlreadyInitializedError: If the ledger was configured before
            ValidationError: If ``fee`` is negative
        """
        self._ctx.authorization.require(admin)
        current = await self._ctx.load_state()
        if current.initialized:
            raise AlreadyInitializedError()
        if fee < 0:
            raise ValidationError(f"Fee must be non-negative, got {fee}", details={"fee": fee})

        state = LedgerState(
            initialized=True,
            admin=admin,
            fee=fee,
            token=token,
            last_subscription_id=0,
        )
        await self._ctx.store.save_state(state)
        self._ctx.logger.info(
            "Ledger configured", extra={"admin": admin, "fee": fee, "token": token}
        )
        return state

    async def set_fee(self, fee: int) -> None:
        """Set the base fee. Admin only.

        The only bound checked is that the fee is non-negative; a negative fee
        raises ``ValidationError``.
        """
        state = await self._ctx.require_admin()
        if fee < 0:
            raise ValidationError(f"Fee must be non-negative, got {fee}", details={"fee": fee})
        previous = state.fee
        state.fee = fee
        await self._ctx.store.save_state(state)
        self._ctx.logger.info("Base fee updated", extra={"previous_fee": previous, "fee": fee})

    async def trigger(self, timestamp: int, trigger_hash: bytes) -> TriggeredEvent:
        """Emit an administrative trigger signal. Admin only."""
        await self._ctx.require_admin()
        event = TriggeredEvent(
            timestamp=timestamp,
            trigger_hash=_hash_hex(trigger_hash, "trigger_hash"),
            namespace=self._ctx.event_namespace,
        )
        await self._ctx.publish([event])
        return event

    async def update_code(self, code_hash: bytes) -> None:
        """Record a code update hash. Admin only."""
        state = await self._ctx.require_admin()
        state.code_hash = _hash_hex(code_hash, "code_hash")
        await self._ctx.store.save_state(state)
        self._ctx.logger.info("Code hash updated", extra={"code_hash": state.code_hash})

    async def admin(self) -> str | None:
        """Administrator identity, or None before configuration."""
        return (await self._ctx.load_state()).admin

    async def fee(self) -> int:
        """Base fee."""
        return (await self._ctx.require_initialized()).fee

    async def token(self) -> str:
        """Value ledger reference."""
        state = await self._ctx.require_initialized()
        assert state.token is not None
        return state.token

    async def last_id(self) -> int:
        """Last assigned subscription ID."""
        return (await self._ctx.require_initialized()).last_subscription_id

    @staticmethod
    def version() -> int:
        """Major version of the ledger protocol."""
        return int(__version__.split(".")[0])
