"""Logger port used by the ledger and its adapters."""

from abc import ABC, abstractmethod
from typing import Any


class LoggerPort(ABC):
    """Structured log sink.

    Keyword arguments carry structured context (subscription IDs, amounts,
    error codes) and are attached to the record rather than formatted into
    the message.
    """

    @abstractmethod
    def debug(self, message: str, **kwargs: Any) -> None:
        """Log routine detail such as skipped batch entries."""
        ...

    @abstractmethod
    def info(self, message: str, **kwargs: Any) -> None:
        """Log a committed state change."""
        ...

    @abstractmethod
    def warning(self, message: str, **kwargs: Any) -> None:
        """Log a rejected operation."""
        ...

    @abstractmethod
    def exception(self, message: str, exc_info: Exception | None = None, **kwargs: Any) -> None:
        """Log a failure together with its traceback.

        Args:
            message: What was being attempted
            exc_info: The failure; defaults to the exception being handled
        """
        ...
