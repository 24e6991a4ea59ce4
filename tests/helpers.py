"""Shared fakes and factories for the test suite."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Mapping, Optional, Sequence

from testrun_stream.errors import StoreError
from testrun_stream.models import BusEntry, TestCase, TestRun


class MockMetrics:
    """Mock metrics recorder for testing."""

    def __init__(self) -> None:
        self.counts: list[tuple[str, int, Optional[Mapping[str, str]]]] = []

    def count(
        self,
        name: str,
        value: int,
        dimensions: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.counts.append((name, value, dimensions))

    def names(self) -> list[str]:
        return [name for name, _, _ in self.counts]

    def total(self, name: str) -> int:
        return sum(value for n, value, _ in self.counts if n == name)


class RecordingBus:
    """
    In-memory EventBus that records every batch.

    ``failures`` maps the zero-based submission index to the exception that
    submission raises. Each submission yields to the event loop before
    completing so concurrent submissions overlap.
    """

    def __init__(
        self,
        failures: Optional[Mapping[int, BaseException]] = None,
        delay: float = 0.01,
    ) -> None:
        self.failures = dict(failures or {})
        self.delay = delay
        self.batches: list[list[BusEntry]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def submit_batch(self, entries: Sequence[BusEntry]) -> None:
        index = len(self.batches)
        self.batches.append(list(entries))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if index in self.failures:
                raise self.failures[index]
        finally:
            self.in_flight -= 1

    @property
    def batch_sizes(self) -> list[int]:
        return [len(batch) for batch in self.batches]

    @property
    def resource_keys(self) -> list[str]:
        return [entry.resource_key for batch in self.batches for entry in batch]


class InMemoryTestRunStore:
    """Dictionary-backed TestRunStore; ``fail`` makes every call raise."""

    __test__ = False  # not a pytest test class

    def __init__(self, fail: bool = False) -> None:
        self.items: dict[str, TestRun] = {}
        self.fail = fail

    def _check(self) -> None:
        if self.fail:
            raise StoreError("store unavailable")

    def get(self, testrun_id: str) -> Optional[TestRun]:
        self._check()
        return self.items.get(testrun_id)

    def put(self, testrun: TestRun) -> None:
        self._check()
        self.items[testrun.id] = testrun

    def delete(self, testrun_id: str) -> None:
        self._check()
        self.items.pop(testrun_id, None)


def make_testrun(testrun_id: str = "abc", **overrides: Any) -> TestRun:
    fields: dict[str, Any] = {
        "id": testrun_id,
        "language": "python",
        "status": "queued",
        "attachments": {"main.py": "print(1)"},
        "test_results": (),
    }
    fields.update(overrides)
    return TestRun(**fields)


def make_test_case(name: str = "test_add", status: str = "passed") -> TestCase:
    return TestCase(
        name=name,
        status=status,
        message="",
        actual_output="2",
        expected_output="2",
    )


def wire_item(
    testrun_id: str = "abc",
    status: str = "queued",
    attachments: Optional[Mapping[str, str]] = None,
    test_results: Optional[list[dict[str, str]]] = None,
) -> dict[str, dict[str, Any]]:
    """A canonical test-run item in DynamoDB wire format."""
    return {
        "id": {"S": testrun_id},
        "language": {"S": "python"},
        "status": {"S": status},
        "attachments": {
            "S": json.dumps(
                {"main.py": "print(1)"} if attachments is None else attachments
            )
        },
        "testResults": {"S": json.dumps(test_results or [])},
    }


def stream_record(
    event_name: str,
    new_image: Optional[Mapping[str, Any]] = None,
    old_image: Optional[Mapping[str, Any]] = None,
    event_id: str = "event-1",
    sequence_number: str = "111",
) -> dict[str, Any]:
    """A raw DynamoDB stream record as delivered to Lambda."""
    dynamodb: dict[str, Any] = {
        "Keys": {"id": {"S": "abc"}},
        "SequenceNumber": sequence_number,
        "SizeBytes": 128,
        "StreamViewType": "NEW_AND_OLD_IMAGES",
    }
    if new_image is not None:
        dynamodb["NewImage"] = dict(new_image)
    if old_image is not None:
        dynamodb["OldImage"] = dict(old_image)
    return {
        "eventID": event_id,
        "eventName": event_name,
        "eventVersion": "1.1",
        "eventSource": "aws:dynamodb",
        "awsRegion": "us-east-1",
        "dynamodb": dynamodb,
        "eventSourceARN": "arn:aws:dynamodb:us-east-1:123456789012:table/testruns/stream/2024",
    }
