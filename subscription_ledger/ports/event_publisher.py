"""Event publisher port - delivers committed domain events."""

from abc import ABC, abstractmethod

from ..domain.events import DomainEvent


class EventPublisherPort(ABC):
    """Abstract interface for publishing domain events."""

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        """Publish a single event."""
        ...
