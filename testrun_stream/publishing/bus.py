"""
Message bus interface and the EventBridge implementation.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional, Protocol, Sequence

import boto3
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    ReadTimeoutError,
)

from testrun_stream.config import MAX_BATCH_SIZE
from testrun_stream.errors import BusTimeoutError, BusTransportError
from testrun_stream.models import BusEntry

logger = logging.getLogger(__name__)


class EventBus(Protocol):  # pylint: disable=too-few-public-methods
    """A bus accepting batches of at most MAX_BATCH_SIZE entries."""

    async def submit_batch(self, entries: Sequence[BusEntry]) -> None:
        """Submit one batch; raise BusTransportError on failure."""


class EventBridgeBus:
    """
    EventBus backed by EventBridge ``PutEvents``.

    The boto3 call is blocking, so every submission runs on its own worker
    thread rather than the loop's shared default executor, whose size caps
    how many batches can be in flight. boto3 clients are thread-safe, so one
    client is shared by every concurrent batch.
    """

    def __init__(self, client: Any):
        self._client = client

    async def submit_batch(self, entries: Sequence[BusEntry]) -> None:
        """
        Submit a batch with a single PutEvents request.

        Raises:
            ValueError: If the batch exceeds MAX_BATCH_SIZE entries
            BusTimeoutError: If the transport timed out
            BusTransportError: If the request failed or any entry was rejected
        """
        if len(entries) > MAX_BATCH_SIZE:
            raise ValueError(
                f"Batch of {len(entries)} exceeds the PutEvents limit of "
                f"{MAX_BATCH_SIZE} entries"
            )
        if not entries:
            return

        request_entries = [entry.to_put_events_entry() for entry in entries]
        executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="put-events"
        )
        try:
            response = await asyncio.get_running_loop().run_in_executor(
                executor,
                functools.partial(
                    self._client.put_events, Entries=request_entries
                ),
            )
        except (ReadTimeoutError, ConnectTimeoutError) as exc:
            raise BusTimeoutError(f"PutEvents timed out: {exc}") from exc
        except ClientError as exc:
            error_code = exc.response.get("Error", {}).get("Code", "Unknown")
            raise BusTransportError(
                f"PutEvents failed with {error_code}: {exc}"
            ) from exc
        except BotoCoreError as exc:
            raise BusTransportError(f"PutEvents failed: {exc}") from exc
        finally:
            executor.shutdown(wait=False)

        failed_count = int(response.get("FailedEntryCount", 0) or 0)
        if failed_count:
            failed_entries = [
                {
                    "resource_key": entry.resource_key,
                    "error_code": result.get("ErrorCode"),
                    "error_message": result.get("ErrorMessage"),
                }
                for entry, result in zip(entries, response.get("Entries", []))
                if result.get("ErrorCode")
            ]
            logger.error(
                "EventBridge rejected entries",
                extra={
                    "failed_count": failed_count,
                    "batch_size": len(entries),
                    "failed_entries": failed_entries,
                },
            )
            raise BusTransportError(
                f"{failed_count} of {len(entries)} entries rejected",
                failed_entries,
            )


def create_eventbridge_bus(region_name: Optional[str] = None) -> EventBridgeBus:
    """Create an EventBridgeBus with a default boto3 client."""
    if region_name:
        return EventBridgeBus(boto3.client("events", region_name=region_name))
    return EventBridgeBus(boto3.client("events"))


__all__ = ["EventBridgeBus", "EventBus", "create_eventbridge_bus"]
