"""
DynamoDB stream Lambda for test-run change events.

Parses the stream batch, classifies each record into a Created, Updated or
Deleted event and publishes the events to EventBridge. A publish failure
fails the invocation so the stream redelivers the batch.
"""

import asyncio
from typing import Any, Mapping, Optional

from testrun_stream.classification import classify_records
from testrun_stream.config import StreamProcessorConfig
from testrun_stream.errors import StreamRecordError
from testrun_stream.models import ChangeNotification, LambdaResponse
from testrun_stream.parsing import parse_stream_record
from testrun_stream.publishing import BatchPublisher, create_eventbridge_bus
from testrun_stream.stream_types import (
    DynamoDBStreamEvent,
    LambdaContext,
    MetricsRecorder,
)
from testrun_stream.utils.logging import get_operation_logger

logger = get_operation_logger(__name__)


def _parse_records(
    records: list[Any],
    skip_malformed: bool,
    metrics: Optional[MetricsRecorder],
) -> list[ChangeNotification]:
    notifications: list[ChangeNotification] = []
    for record in records:
        try:
            notifications.append(parse_stream_record(record))
        except StreamRecordError as exc:
            if not skip_malformed:
                raise
            logger.warning(
                "Skipping unparseable stream record",
                error=str(exc),
                event_id=(
                    record.get("eventID") if isinstance(record, Mapping) else None
                ),
            )
            if metrics:
                metrics.count("StreamRecordParsingError", 1)
    return notifications


def process_stream_event(
    event: DynamoDBStreamEvent,
    publisher: BatchPublisher,
    skip_malformed: bool = False,
    metrics: Optional[MetricsRecorder] = None,
) -> LambdaResponse:
    """
    Process one stream event end to end.

    Raises:
        StreamRecordError: If a record is malformed and skipping is disabled
        ClassifyError: If a record fails to classify and skipping is disabled
        PartialPublishError: If any batch failed to publish
    """
    records = event.get("Records") if isinstance(event, Mapping) else None
    if not isinstance(records, list):
        logger.warning(
            "Received event without Records field",
            event_keys=list(event.keys()) if isinstance(event, Mapping) else [],
        )
        return LambdaResponse(
            status_code=400, processed_records=0, published_events=0
        )

    notifications = _parse_records(records, skip_malformed, metrics)
    events = classify_records(notifications, metrics, skip_malformed)

    event_breakdown: dict[str, int] = {}
    for domain_event in events:
        event_breakdown[domain_event.type_name] = (
            event_breakdown.get(domain_event.type_name, 0) + 1
        )
    logger.info(
        "Classified stream batch",
        total_records=len(records),
        events=len(events),
        event_breakdown=event_breakdown,
    )

    published = asyncio.run(publisher.publish(events)) if events else 0

    return LambdaResponse(
        status_code=200,
        processed_records=len(records),
        published_events=published,
        skipped_records=len(records) - len(events),
    )


def lambda_handler(
    event: DynamoDBStreamEvent, context: Optional[LambdaContext] = None
) -> dict[str, int]:
    """Lambda entry point for the DynamoDB stream trigger."""
    config = StreamProcessorConfig.from_env()
    publisher = BatchPublisher(create_eventbridge_bus(), config.publisher)

    with logger.operation_timer(
        "process_stream_event",
        request_id=getattr(context, "aws_request_id", None),
        bus_name=config.publisher.bus_name,
    ):
        response = process_stream_event(
            event, publisher, skip_malformed=config.skip_malformed_records
        )
    return response.to_dict()


__all__ = ["lambda_handler", "process_stream_event"]
