"""
Conversion between DynamoDB attribute maps and TestRun records.

Scalar fields are stored as S attributes. Structured fields (attachments and
test results) are stored as S attributes holding a JSON document. Two older
item layouts are still read:
- ``files`` / ``tests`` in place of ``attachments`` / ``testResults``
- a single ``payload`` attribute holding the attachments, with no test results
"""

import json
from typing import Any, Callable, Dict, Optional, TypeVar

from testrun_stream.attribute_value import (
    AttributeMap,
    AttributeType,
    AttributeValue,
    image_from_wire,
    image_to_wire,
)
from testrun_stream.errors import (
    MalformedPayloadError,
    MissingFieldError,
    TypeMismatchError,
)
from testrun_stream.models import (
    TestRun,
    parse_attachments,
    parse_test_results,
)
from testrun_stream.stream_types import DynamoDBItem

T = TypeVar("T")

ATTACHMENTS_FIELDS = ("attachments", "files", "payload")
TEST_RESULTS_FIELDS = ("testResults", "tests")
LEGACY_PAYLOAD_FIELD = "payload"


def _require_string(attrs: AttributeMap, name: str) -> str:
    if name not in attrs:
        raise MissingFieldError(name)
    value = attrs[name].as_s()
    if value is None:
        raise TypeMismatchError(name, AttributeType.S.value)
    return value


def _first_present(attrs: AttributeMap, names: tuple[str, ...]) -> Optional[str]:
    for name in names:
        if name in attrs:
            return name
    return None


def _decode_json_field(
    attrs: AttributeMap, name: str, parse: Callable[[Any], T]
) -> T:
    raw = _require_string(attrs, name)
    try:
        return parse(json.loads(raw))
    except (ValueError, RecursionError) as exc:
        # json.JSONDecodeError is a ValueError subclass; nesting deeper than
        # the interpreter stack raises RecursionError
        reason = str(exc) or type(exc).__name__
        raise MalformedPayloadError(name, reason) from exc


def optional_number(attrs: AttributeMap, name: str) -> Optional[float]:
    """Read an optional N attribute; absent or unparseable yields None."""
    value = attrs.get(name)
    return value.as_n() if value is not None else None


def decode_testrun(attrs: AttributeMap) -> TestRun:
    """
    Decode an attribute map into a TestRun.

    Raises:
        MissingFieldError: If a required attribute is absent
        TypeMismatchError: If an attribute is not an S attribute
        MalformedPayloadError: If a JSON attribute does not parse into its
            target structure
    """
    testrun_id = _require_string(attrs, "id")
    if not testrun_id:
        raise MissingFieldError("id")
    language = _require_string(attrs, "language")
    status = _require_string(attrs, "status")

    attachments_field = _first_present(attrs, ATTACHMENTS_FIELDS)
    if attachments_field is None:
        raise MissingFieldError(ATTACHMENTS_FIELDS[0])
    attachments = _decode_json_field(
        attrs, attachments_field, parse_attachments
    )

    results_field = _first_present(attrs, TEST_RESULTS_FIELDS)
    if results_field is not None:
        test_results = _decode_json_field(
            attrs, results_field, parse_test_results
        )
    elif attachments_field == LEGACY_PAYLOAD_FIELD:
        test_results = ()
    else:
        raise MissingFieldError(TEST_RESULTS_FIELDS[0])

    return TestRun(
        id=testrun_id,
        language=language,
        status=status,
        attachments=attachments,
        test_results=test_results,
    )


def encode_testrun(testrun: TestRun) -> Dict[str, AttributeValue]:
    """Encode a TestRun in the canonical attribute layout."""
    data = testrun.to_dict()
    return {
        "id": AttributeValue.string(testrun.id),
        "language": AttributeValue.string(testrun.language),
        "status": AttributeValue.string(testrun.status),
        "attachments": AttributeValue.string(json.dumps(data["attachments"])),
        "testResults": AttributeValue.string(json.dumps(data["testResults"])),
    }


def item_to_testrun(item: DynamoDBItem) -> TestRun:
    """
    Decode a raw DynamoDB item (boto3 client shape) into a TestRun.

    Raises:
        InvalidAttributeValueError: If an attribute value is malformed
        DecodeError: See ``decode_testrun``
    """
    return decode_testrun(image_from_wire(item))


def testrun_to_item(testrun: TestRun) -> DynamoDBItem:
    """Encode a TestRun as a raw DynamoDB item."""
    return image_to_wire(encode_testrun(testrun))


__all__ = [
    "decode_testrun",
    "encode_testrun",
    "item_to_testrun",
    "optional_number",
    "testrun_to_item",
]
