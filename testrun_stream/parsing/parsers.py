"""
Framing of DynamoDB stream records.

Turns the raw records handed to a stream Lambda into typed
``ChangeNotification`` objects. Images are converted to AttributeValues but
not decoded into TestRuns; that is the classifier's job.
"""

import logging
from typing import Any, Mapping, Optional, cast

from testrun_stream.attribute_value import AttributeValue, image_from_wire
from testrun_stream.errors import InvalidAttributeValueError, StreamRecordError
from testrun_stream.models import ChangeNotification
from testrun_stream.stream_types import (
    DynamoDBStreamEvent,
    DynamoDBStreamRecord,
)

logger = logging.getLogger(__name__)


def _parse_image(
    dynamodb: Mapping[str, Any], image_key: str, event_id: Optional[str]
) -> dict[str, AttributeValue]:
    image = dynamodb.get(image_key)
    if not image:
        return {}
    try:
        return image_from_wire(image)
    except InvalidAttributeValueError as exc:
        logger.warning(
            "Malformed attribute value in stream image",
            extra={
                "image_type": image_key,
                "event_id": event_id,
                "available_fields": (
                    list(image.keys()) if isinstance(image, Mapping) else None
                ),
            },
        )
        raise StreamRecordError(
            f"Malformed {image_key} in record {event_id}: {exc}"
        ) from exc


def parse_stream_record(record: DynamoDBStreamRecord) -> ChangeNotification:
    """
    Parse one DynamoDB stream record into a ChangeNotification.

    Raises:
        StreamRecordError: If the record lacks ``eventName`` or ``dynamodb``,
            or carries malformed attribute values
    """
    if not isinstance(record, Mapping):
        raise StreamRecordError(f"Stream record must be a map: {record!r}")

    event_id = cast(Optional[str], record.get("eventID"))
    event_name = record.get("eventName")
    if not event_name:
        raise StreamRecordError(f"Missing eventName in record {event_id}")

    dynamodb = record.get("dynamodb")
    if not isinstance(dynamodb, Mapping):
        raise StreamRecordError(f"Missing dynamodb in record {event_id}")

    return ChangeNotification(
        operation=str(event_name),
        before_image=_parse_image(dynamodb, "OldImage", event_id),
        after_image=_parse_image(dynamodb, "NewImage", event_id),
        source_region=cast(Optional[str], record.get("awsRegion")),
        sequence_id=cast(Optional[str], dynamodb.get("SequenceNumber")),
        event_id=event_id,
    )


def parse_stream_event(event: DynamoDBStreamEvent) -> list[ChangeNotification]:
    """
    Parse every record of a ``{"Records": [...]}`` stream event, in order.

    Raises:
        StreamRecordError: If ``Records`` is missing or a record is malformed
    """
    records = event.get("Records") if isinstance(event, Mapping) else None
    if not isinstance(records, list):
        raise StreamRecordError("Invalid event structure: missing Records")
    return [parse_stream_record(record) for record in records]


__all__ = ["parse_stream_event", "parse_stream_record"]
