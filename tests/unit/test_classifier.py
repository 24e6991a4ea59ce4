"""Unit tests for change notification classification."""

from collections.abc import Mapping
from typing import Any, Iterator

import pytest

from testrun_stream.attribute_value import image_from_wire
from testrun_stream.classification.classifier import classify, classify_records
from testrun_stream.errors import (
    ImageDecodeError,
    MalformedPayloadError,
    MissingFieldError,
    UnknownOperationError,
)
from testrun_stream.models import ChangeNotification, Created, Deleted, Updated

from tests.helpers import MockMetrics, make_testrun, wire_item


class UntouchableImage(Mapping):
    """An image that fails the test if the classifier reads it."""

    def __getitem__(self, key: str) -> Any:
        raise AssertionError(f"image was read: {key}")

    def __iter__(self) -> Iterator[str]:
        raise AssertionError("image was iterated")

    def __len__(self) -> int:
        raise AssertionError("image length was read")

    def __contains__(self, key: object) -> bool:
        raise AssertionError(f"image was queried: {key}")


def _notification(operation: str, before=None, after=None, **kwargs) -> ChangeNotification:
    return ChangeNotification(
        operation=operation,
        before_image=before if before is not None else {},
        after_image=after if after is not None else {},
        **kwargs,
    )


@pytest.mark.unit
def test_insert_becomes_created() -> None:
    event = classify(
        _notification("INSERT", after=image_from_wire(wire_item()))
    )

    assert event == Created(make_testrun())


@pytest.mark.unit
def test_modify_becomes_updated_with_both_snapshots() -> None:
    event = classify(
        _notification(
            "MODIFY",
            before=image_from_wire(wire_item(status="queued")),
            after=image_from_wire(wire_item(status="finished")),
        )
    )

    assert isinstance(event, Updated)
    assert event.old.status == "queued"
    assert event.new.status == "finished"
    assert event.old.id == event.new.id == event.id


@pytest.mark.unit
def test_remove_becomes_deleted() -> None:
    event = classify(_notification("REMOVE", before=image_from_wire(wire_item())))

    assert event == Deleted(make_testrun())


@pytest.mark.unit
def test_insert_never_reads_old_image() -> None:
    event = classify(
        _notification(
            "INSERT",
            before=UntouchableImage(),
            after=image_from_wire(wire_item()),
        )
    )

    assert isinstance(event, Created)


@pytest.mark.unit
def test_remove_never_reads_new_image() -> None:
    event = classify(
        _notification(
            "REMOVE",
            before=image_from_wire(wire_item()),
            after=UntouchableImage(),
        )
    )

    assert isinstance(event, Deleted)


@pytest.mark.unit
@pytest.mark.parametrize(
    "operation,image_type",
    [("INSERT", "new"), ("REMOVE", "old"), ("MODIFY", "old")],
)
def test_empty_required_image_is_a_decode_error(operation: str, image_type: str) -> None:
    with pytest.raises(ImageDecodeError) as exc_info:
        classify(_notification(operation))

    assert exc_info.value.image == image_type
    assert isinstance(exc_info.value.cause, MissingFieldError)
    assert exc_info.value.__cause__ is exc_info.value.cause


@pytest.mark.unit
def test_modify_fails_fast_on_bad_new_image() -> None:
    bad = wire_item()
    bad["testResults"] = {"S": "not json"}

    with pytest.raises(ImageDecodeError) as exc_info:
        classify(
            _notification(
                "MODIFY",
                before=image_from_wire(wire_item()),
                after=image_from_wire(bad),
            )
        )

    assert exc_info.value.image == "new"
    assert isinstance(exc_info.value.cause, MalformedPayloadError)


@pytest.mark.unit
def test_unknown_operation() -> None:
    with pytest.raises(UnknownOperationError) as exc_info:
        classify(_notification("TRUNCATE", after=image_from_wire(wire_item())))

    assert exc_info.value.operation == "TRUNCATE"


# Test classify_records


def _batch() -> list[ChangeNotification]:
    return [
        _notification("INSERT", after=image_from_wire(wire_item("a")), event_id="1"),
        _notification("INSERT", event_id="2"),
        _notification("REMOVE", before=image_from_wire(wire_item("c")), event_id="3"),
    ]


@pytest.mark.unit
def test_classify_records_raises_first_error_by_default() -> None:
    with pytest.raises(ImageDecodeError):
        classify_records(_batch())


@pytest.mark.unit
def test_classify_records_skips_and_counts_malformed(
    mock_metrics: MockMetrics,
) -> None:
    events = classify_records(_batch(), mock_metrics, skip_malformed=True)

    assert [event.id for event in events] == ["a", "c"]
    assert mock_metrics.total("MalformedStreamRecord") == 1
    assert mock_metrics.total("DomainEventsClassified") == 2


@pytest.mark.unit
def test_classify_records_skips_deeply_nested_payload(
    mock_metrics: MockMetrics,
) -> None:
    nested = wire_item("b")
    nested["testResults"] = {"S": "[" * 200000}
    notifications = [
        _notification("INSERT", after=image_from_wire(nested), event_id="1"),
        _notification("INSERT", after=image_from_wire(wire_item("c")), event_id="2"),
    ]

    events = classify_records(notifications, mock_metrics, skip_malformed=True)

    assert [event.id for event in events] == ["c"]
    assert mock_metrics.total("MalformedStreamRecord") == 1


@pytest.mark.unit
def test_classify_records_logs_skipped_record(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("ERROR"):
        classify_records(_batch(), skip_malformed=True)

    assert "Skipping malformed change notification" in caplog.text
    record = next(r for r in caplog.records if r.levelname == "ERROR")
    assert record.event_id == "2"
    assert record.error_type == "ImageDecodeError"
