"""
Batched, concurrent publishing of domain events to the message bus.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Iterable, Optional, Sequence

from testrun_stream.config import MAX_BATCH_SIZE, PublisherConfig
from testrun_stream.errors import PartialPublishError
from testrun_stream.models import BusEntry, DomainEvent, event_ids
from testrun_stream.publishing.bus import EventBus
from testrun_stream.stream_types import MetricsRecorder

logger = logging.getLogger(__name__)


def event_to_entry(event: DomainEvent, config: PublisherConfig) -> BusEntry:
    """Build the bus entry for one event."""
    return BusEntry(
        bus_name=config.bus_name,
        source=config.source,
        detail_type=event.detail_type,
        resource_key=event.id,
        detail_json=json.dumps(event.to_dict()),
    )


def chunk_events(
    events: Sequence[DomainEvent], size: int = MAX_BATCH_SIZE
) -> list[list[DomainEvent]]:
    """Split events into consecutive batches of at most ``size``."""
    if size < 1:
        raise ValueError("Batch size must be positive")
    return [list(events[i : i + size]) for i in range(0, len(events), size)]


class BatchPublisher:
    """
    Publishes domain events to an EventBus in batches of MAX_BATCH_SIZE.

    Every batch is dispatched as its own task before any is awaited. Once all
    batches have resolved, failures are aggregated into a single
    PartialPublishError. Nothing is retried.
    """

    def __init__(
        self,
        bus: EventBus,
        config: PublisherConfig,
        metrics: Optional[MetricsRecorder] = None,
    ):
        self._bus = bus
        self._config = config
        self._metrics = metrics

    @property
    def config(self) -> PublisherConfig:
        return self._config

    async def _submit(self, index: int, batch: list[DomainEvent]) -> None:
        entries = [event_to_entry(event, self._config) for event in batch]
        await self._bus.submit_batch(entries)
        logger.info(
            "Published batch %s (%s events)",
            index,
            len(entries),
            extra={"batch_index": index, "testrun_ids": event_ids(batch)},
        )

    async def publish(self, events: Iterable[DomainEvent]) -> int:
        """
        Publish events and return how many were published.

        Raises:
            PartialPublishError: If any batch failed; holds every failing
                batch's exception in batch order
            asyncio.CancelledError: If the call (or a batch) was cancelled
        """
        events = list(events)
        batches = chunk_events(events)
        if not batches:
            return 0

        tasks = [
            asyncio.create_task(self._submit(index, batch))
            for index, batch in enumerate(batches)
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        errors: list[Exception] = []
        published = 0
        for index, (batch, result) in enumerate(zip(batches, results)):
            if isinstance(result, Exception):
                logger.error(
                    "Failed to publish batch %s",
                    index,
                    exc_info=result,
                    extra={
                        "batch_index": index,
                        "batch_size": len(batch),
                        "error_type": type(result).__name__,
                    },
                )
                errors.append(result)
            elif isinstance(result, BaseException):
                # CancelledError and other non-Exception signals propagate
                raise result
            else:
                published += len(batch)

        if self._metrics:
            self._metrics.count(
                "BusEventsPublished",
                published,
                {"source": self._config.source},
            )
            if errors:
                self._metrics.count(
                    "BusBatchesFailed",
                    len(errors),
                    {"source": self._config.source},
                )

        if errors:
            raise PartialPublishError(errors, total_batches=len(batches))
        return published

    async def publish_one(self, event: DomainEvent) -> int:
        """Publish a single event as a batch of one."""
        return await self.publish([event])


__all__ = ["BatchPublisher", "chunk_events", "event_to_entry"]
