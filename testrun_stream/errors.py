"""Custom exceptions for the test-run stream pipeline."""

from __future__ import annotations

from typing import Sequence


class TestRunStreamError(Exception):
    """Base exception for all testrun_stream errors."""

    __test__ = False  # not a pytest test class


# Wire format exceptions
class InvalidAttributeValueError(TestRunStreamError, ValueError):
    """Raised when a DynamoDB attribute value is not well formed."""


class StreamRecordError(TestRunStreamError):
    """Raised when a DynamoDB stream record cannot be framed."""


# Decode exceptions
class DecodeError(TestRunStreamError):
    """Base exception for attribute map to TestRun decoding."""

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        super().__init__(message or f"{type(self).__name__}: {field}")


class MissingFieldError(DecodeError):
    """Raised when a required attribute is absent."""

    def __init__(self, field: str):
        super().__init__(field, f"Missing {field}")


class TypeMismatchError(DecodeError):
    """Raised when an attribute does not hold the expected variant."""

    def __init__(self, field: str, expected: str = "S"):
        self.expected = expected
        super().__init__(field, f"{field} is not of type {expected}")


class MalformedPayloadError(DecodeError):
    """
    Raised when a JSON-encoded attribute cannot be parsed into its target
    structure, either because the JSON is invalid or because its shape does
    not match.
    """

    def __init__(self, field: str, reason: str = ""):
        self.reason = reason
        message = f"Couldn't parse {field} payload"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(field, message)


# Classification exceptions
class ClassifyError(TestRunStreamError):
    """Base exception for change notification classification."""


class UnknownOperationError(ClassifyError):
    """Raised for a stream event name other than INSERT, MODIFY or REMOVE."""

    def __init__(self, operation: object):
        self.operation = operation
        super().__init__(f"Unknown event type: {operation!r}")


class ImageDecodeError(ClassifyError):
    """Raised when the old or new image of a notification fails to decode."""

    def __init__(self, image: str, cause: DecodeError):
        self.image = image
        self.cause = cause
        super().__init__(f"Failed to decode {image} image: {cause}")


# Bus exceptions
class BusTransportError(TestRunStreamError):
    """Raised when the message bus rejects or fails a batch submission."""

    def __init__(
        self,
        message: str,
        failed_entries: Sequence[dict] | None = None,
    ):
        self.failed_entries = list(failed_entries or [])
        super().__init__(message)


class BusTimeoutError(BusTransportError):
    """Raised when a batch submission times out in the transport."""


class PublishError(TestRunStreamError):
    """Base exception for batch publishing."""


class PartialPublishError(PublishError):
    """
    Raised when one or more batch submissions of a publish call failed.

    ``errors`` holds every failing batch's exception in batch order. Batches
    that succeeded are not represented.
    """

    def __init__(self, errors: Sequence[BaseException], total_batches: int):
        if not errors:
            raise ValueError("PartialPublishError requires at least one error")
        self.errors = list(errors)
        self.total_batches = total_batches
        super().__init__(
            f"{len(self.errors)} of {total_batches} batches failed: "
            + "; ".join(str(error) for error in self.errors)
        )


# Store exceptions
class StoreError(TestRunStreamError):
    """Raised when the test-run store fails an operation."""
