"""NATS event publisher - publishes committed domain events on NATS subjects."""

from __future__ import annotations

from nats.aio.client import Client as NATSClient

from ..domain.events import DomainEvent
from ..ports.event_publisher import EventPublisherPort
from ..ports.logger import LoggerPort
from ..ports.metrics import MetricsPort
from .config import LogContext
from .in_memory_metrics import InMemoryMetrics
from .serialization import serialize_to_json, serialize_to_msgpack
from .simple_logger import SimpleLogger


def event_subject(event: DomainEvent) -> str:
    """Subject an event is published on: ``events.<namespace>.<name>``."""
    return f"events.{event.namespace}.{event.name}"


class NATSEventPublisher(EventPublisherPort):
    """Publishes domain events over a NATS connection."""

    def __init__(
        self,
        nc: NATSClient,
        use_msgpack: bool = False,
        metrics: MetricsPort | None = None,
        logger: LoggerPort | None = None,
    ):
        self._nc = nc
        self._use_msgpack = use_msgpack
        self._metrics = metrics or InMemoryMetrics()
        self._logger = logger or SimpleLogger("subscription_ledger.nats_event_publisher")

    async def publish(self, event: DomainEvent) -> None:
        """Publish a single event."""
        subject = event_subject(event)
        data = serialize_to_msgpack(event) if self._use_msgpack else serialize_to_json(event)
        try:
            await self._nc.publish(subject, data)
        except Exception as e:
            self._metrics.increment("events.publish.error")
            error_ctx = LogContext(
                operation="publish", component="NATSEventPublisher"
            ).with_error(e)
            self._logger.exception(
                f"Failed to publish {event.event_type}", exc_info=e, extra=error_ctx.to_dict()
            )
            raise
        self._metrics.increment("events.published")
        self._logger.debug(f"Published {event.event_type} on {subject}")
