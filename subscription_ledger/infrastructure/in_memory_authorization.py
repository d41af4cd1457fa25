"""In-memory implementation of the AuthorizationPort."""

from ..domain.exceptions import UnauthorizedError
from ..ports.authorization import AuthorizationPort


class InMemoryAuthorization(AuthorizationPort):
    """Authorization oracle backed by an explicit set of signers.

    Every identity passed to ``require`` is recorded, whether or not the
    check passed, so tests can assert which identities a call demanded.
    """

    def __init__(self, *signers: str, allow_all: bool = False) -> None:
        """Initialize with identities that authorize the current call.

        Args:
            signers: Identities treated as having signed the call
            allow_all: Treat every identity as authorized
        """
        self._signers: set[str] = set(signers)
        self.allow_all = allow_all
        self.required: list[str] = []

    def authorize(self, *identities: str) -> None:
        """Add identities to the signer set."""
        self._signers.update(identities)

    def revoke(self, *identities: str) -> None:
        """Remove identities from the signer set."""
        self._signers.difference_update(identities)

    def clear(self) -> None:
        """Remove all signers and recorded requirements."""
        self._signers.clear()
        self.required.clear()

    def require(self, identity: str) -> None:
        """Fail unless ``identity`` authorized the call."""
        self.required.append(identity)
        if not self.allow_all and identity not in self._signers:
            raise UnauthorizedError(identity)
