"""
Classification of change notifications into domain events.
"""

import logging
from typing import Iterable, Optional

from testrun_stream.attribute_value import AttributeMap
from testrun_stream.errors import (
    ClassifyError,
    DecodeError,
    ImageDecodeError,
    UnknownOperationError,
)
from testrun_stream.models import (
    ChangeNotification,
    Created,
    Deleted,
    DomainEvent,
    OperationType,
    TestRun,
    Updated,
)
from testrun_stream.parsing.record_codec import decode_testrun
from testrun_stream.stream_types import MetricsRecorder

logger = logging.getLogger(__name__)


def _decode_image(image: AttributeMap, image_type: str) -> TestRun:
    try:
        return decode_testrun(image)
    except DecodeError as exc:
        raise ImageDecodeError(image_type, exc) from exc


def classify(notification: ChangeNotification) -> DomainEvent:
    """
    Classify a change notification into a Created, Updated or Deleted event.

    INSERT reads only the new image and REMOVE only the old one.

    Raises:
        UnknownOperationError: If the operation is not INSERT, MODIFY or REMOVE
        ImageDecodeError: If a required image does not decode into a TestRun
    """
    operation = notification.operation
    if operation == OperationType.INSERT.value:
        return Created(_decode_image(notification.after_image, "new"))
    if operation == OperationType.MODIFY.value:
        old = _decode_image(notification.before_image, "old")
        new = _decode_image(notification.after_image, "new")
        return Updated(old=old, new=new)
    if operation == OperationType.REMOVE.value:
        return Deleted(_decode_image(notification.before_image, "old"))
    raise UnknownOperationError(operation)


def classify_records(
    notifications: Iterable[ChangeNotification],
    metrics: Optional[MetricsRecorder] = None,
    skip_malformed: bool = False,
) -> list[DomainEvent]:
    """
    Classify notifications in order.

    When ``skip_malformed`` is false the first ClassifyError propagates.
    Otherwise the failing notification is logged, counted and skipped.
    """
    events: list[DomainEvent] = []

    for notification in notifications:
        try:
            event = classify(notification)
        except ClassifyError as exc:
            if not skip_malformed:
                raise
            logger.exception(
                "Skipping malformed change notification",
                extra={
                    "event_id": notification.event_id,
                    "sequence_id": notification.sequence_id,
                    "operation": notification.operation,
                    "error_type": type(exc).__name__,
                },
            )
            if metrics:
                metrics.count(
                    "MalformedStreamRecord",
                    1,
                    {"error_type": type(exc).__name__},
                )
            continue

        logger.debug(
            "Classified change notification",
            extra={
                "event_id": notification.event_id,
                "event_type": event.type_name,
                "testrun_id": event.id,
            },
        )
        events.append(event)

    if metrics:
        metrics.count("DomainEventsClassified", len(events))

    return events


__all__ = ["classify", "classify_records"]
