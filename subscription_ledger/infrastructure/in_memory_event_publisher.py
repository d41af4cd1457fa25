"""In-memory implementation of the EventPublisherPort."""

from typing import TypeVar

from ..domain.events import DomainEvent
from ..ports.event_publisher import EventPublisherPort

E = TypeVar("E", bound=DomainEvent)


class InMemoryEventPublisher(EventPublisherPort):
    """Records published events in order (useful for testing)."""

    def __init__(self) -> None:
        """Initialize an empty event log."""
        self.events: list[DomainEvent] = []

    async def publish(self, event: DomainEvent) -> None:
        """Append the event to the log."""
        self.events.append(event)

    def of_type(self, event_type: type[E]) -> list[E]:
        """Get all recorded events of a given class."""
        return [event for event in self.events if isinstance(event, event_type)]

    def clear(self) -> None:
        """Forget all recorded events."""
        self.events.clear()
