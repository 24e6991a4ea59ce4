"""
Data models for test-run change events.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence

from testrun_stream.attribute_value import AttributeMap

_TEST_CASE_FIELDS = (
    ("name", "name"),
    ("status", "status"),
    ("message", "message"),
    ("actual_output", "actualOutput"),
    ("expected_output", "expectedOutput"),
)


def _require_str(data: Mapping[str, Any], key: str) -> str:
    if key not in data:
        raise ValueError(f"missing field '{key}'")
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"field '{key}' must be a string")
    return value


@dataclass(frozen=True)
class TestCase:
    """Outcome of a single test within a test run."""

    __test__ = False  # not a pytest test class

    name: str
    status: str
    message: str
    actual_output: str
    expected_output: str

    def to_dict(self) -> dict[str, str]:
        return {
            json_key: getattr(self, attr) for attr, json_key in _TEST_CASE_FIELDS
        }

    @classmethod
    def from_dict(cls, data: Any) -> "TestCase":
        """
        Build a TestCase from its JSON object. Unknown keys are ignored.

        Raises:
            ValueError: If ``data`` is not an object or a field is missing or
                not a string
        """
        if not isinstance(data, Mapping):
            raise ValueError("test case must be an object")
        return cls(
            **{
                attr: _require_str(data, json_key)
                for attr, json_key in _TEST_CASE_FIELDS
            }
        )


def parse_attachments(data: Any) -> dict[str, str]:
    """Validate a filename to content mapping decoded from JSON."""
    if not isinstance(data, Mapping):
        raise ValueError("attachments must be an object")
    for name, content in data.items():
        if not isinstance(name, str) or not isinstance(content, str):
            raise ValueError(f"attachment '{name}' must map to a string")
    return dict(data)


def parse_test_results(data: Any) -> tuple[TestCase, ...]:
    """Validate an ordered list of test cases decoded from JSON."""
    if not isinstance(data, list):
        raise ValueError("test results must be an array")
    return tuple(TestCase.from_dict(item) for item in data)


@dataclass(frozen=True)
class TestRun:
    """
    A submitted test run and its results.

    Attributes:
        id: Stable, non-empty identifier (the table's partition key).
        language: Language of the submitted code.
        status: Processing status, e.g. ``queued``.
        attachments: Submitted files, filename to content.
        test_results: Ordered test outcomes.
    """

    __test__ = False  # not a pytest test class

    id: str
    language: str
    status: str
    attachments: Mapping[str, str] = field(default_factory=dict, hash=False)
    test_results: tuple[TestCase, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise ValueError("id must be a non-empty string")
        # Read-only copy; equality does not depend on the container passed in
        object.__setattr__(
            self, "attachments", MappingProxyType(dict(self.attachments))
        )
        object.__setattr__(self, "test_results", tuple(self.test_results))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "language": self.language,
            "status": self.status,
            "attachments": dict(self.attachments),
            "testResults": [test.to_dict() for test in self.test_results],
        }

    @classmethod
    def from_dict(cls, data: Any) -> "TestRun":
        """
        Build a TestRun from its JSON object.

        The legacy keys ``files`` and ``tests`` are accepted in place of
        ``attachments`` and ``testResults``.

        Raises:
            ValueError: If the object does not match the TestRun shape
        """
        if not isinstance(data, Mapping):
            raise ValueError("testrun must be an object")

        attachments_key = "attachments" if "attachments" in data else "files"
        results_key = "testResults" if "testResults" in data else "tests"
        if attachments_key not in data:
            raise ValueError("missing field 'attachments'")
        if results_key not in data:
            raise ValueError("missing field 'testResults'")

        return cls(
            id=_require_str(data, "id"),
            language=_require_str(data, "language"),
            status=_require_str(data, "status"),
            attachments=parse_attachments(data[attachments_key]),
            test_results=parse_test_results(data[results_key]),
        )


class OperationType(str, Enum):
    """DynamoDB stream event names."""

    INSERT = "INSERT"
    MODIFY = "MODIFY"
    REMOVE = "REMOVE"


@dataclass(frozen=True)
class ChangeNotification:
    """
    One change-data-capture record in typed form.

    ``operation`` keeps the raw stream event name so an unexpected value can
    still be reported by the classifier.
    """

    operation: str
    before_image: AttributeMap = field(default_factory=dict, hash=False)
    after_image: AttributeMap = field(default_factory=dict, hash=False)
    source_region: Optional[str] = None
    sequence_id: Optional[str] = None
    event_id: Optional[str] = None


# =============================================================================
# Domain events
# =============================================================================


@dataclass(frozen=True)
class Created:
    """A test run was inserted."""

    testrun: TestRun

    type_name = "Created"

    @property
    def id(self) -> str:
        return self.testrun.id

    @property
    def detail_type(self) -> str:
        return "TestRunCreated"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type_name, "testrun": self.testrun.to_dict()}


@dataclass(frozen=True)
class Updated:
    """A test run was modified. ``old.id`` and ``new.id`` are the same key."""

    old: TestRun
    new: TestRun

    type_name = "Updated"

    @property
    def id(self) -> str:
        return self.new.id

    @property
    def detail_type(self) -> str:
        return "TestRunUpdated"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type_name,
            "old": self.old.to_dict(),
            "new": self.new.to_dict(),
        }


@dataclass(frozen=True)
class Deleted:
    """A test run was removed."""

    testrun: TestRun

    type_name = "Deleted"

    @property
    def id(self) -> str:
        return self.testrun.id

    @property
    def detail_type(self) -> str:
        return "TestRunDeleted"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type_name, "testrun": self.testrun.to_dict()}


DomainEvent = Created | Updated | Deleted


def event_from_dict(data: Mapping[str, Any]) -> DomainEvent:
    """Rebuild a domain event from its ``to_dict`` form."""
    event_type = data.get("type")
    if event_type == Created.type_name:
        return Created(TestRun.from_dict(data.get("testrun")))
    if event_type == Updated.type_name:
        return Updated(
            old=TestRun.from_dict(data.get("old")),
            new=TestRun.from_dict(data.get("new")),
        )
    if event_type == Deleted.type_name:
        return Deleted(TestRun.from_dict(data.get("testrun")))
    raise ValueError(f"Unknown event type: {event_type!r}")


# =============================================================================
# Bus and Lambda structures
# =============================================================================


@dataclass(frozen=True)
class BusEntry:
    """One entry of a bus batch submission."""

    bus_name: str
    source: str
    detail_type: str
    resource_key: str
    detail_json: str

    def to_put_events_entry(self) -> dict[str, object]:
        """Convert to an EventBridge ``PutEvents`` request entry."""
        return {
            "EventBusName": self.bus_name,
            "Source": self.source,
            "DetailType": self.detail_type,
            "Resources": [self.resource_key],
            "Detail": self.detail_json,
        }


@dataclass(frozen=True)
class LambdaResponse:
    """Response structure for Lambda handlers."""

    status_code: int
    processed_records: int
    published_events: int
    skipped_records: int = 0

    def to_dict(self) -> dict[str, int]:
        """Convert to AWS Lambda-compatible dictionary."""
        return {
            "statusCode": self.status_code,
            "processed_records": self.processed_records,
            "published_events": self.published_events,
            "skipped_records": self.skipped_records,
        }


def event_ids(events: Sequence[DomainEvent]) -> list[str]:
    return [event.id for event in events]


__all__ = [
    "BusEntry",
    "ChangeNotification",
    "Created",
    "Deleted",
    "DomainEvent",
    "LambdaResponse",
    "OperationType",
    "TestCase",
    "TestRun",
    "Updated",
    "event_from_dict",
    "event_ids",
    "parse_attachments",
    "parse_test_results",
]
