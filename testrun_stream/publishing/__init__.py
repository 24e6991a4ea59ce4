"""Publishing of domain events to the message bus."""

from testrun_stream.publishing.bus import (
    EventBridgeBus,
    EventBus,
    create_eventbridge_bus,
)
from testrun_stream.publishing.publisher import (
    BatchPublisher,
    chunk_events,
    event_to_entry,
)

__all__ = [
    "BatchPublisher",
    "EventBridgeBus",
    "EventBus",
    "chunk_events",
    "create_eventbridge_bus",
    "event_to_entry",
]
