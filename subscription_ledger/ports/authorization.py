"""Authorization port - proves that the executing call is backed by an identity."""

from abc import ABC, abstractmethod

from ..domain.types import Address


class AuthorizationPort(ABC):
    """Abstract interface for caller authorization.

    The ledger never inspects signatures itself; it only asks whether the
    current call is authorized by a given identity.
    """

    @abstractmethod
    def require(self, identity: Address) -> None:
        """Require that the current call is authorized by ``identity``.

        Args:
            identity: The identity that must have authorized the call

        Raises:
            UnauthorizedError: If the call is not authorized by the identity
        """
        ...
