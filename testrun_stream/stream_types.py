"""
Raw payload shapes seen at the Lambda boundaries.

Stream records and API Gateway events arrive as plain dicts; the TypedDicts
here name their keys for type checkers. Decoded values live in
``testrun_stream.models``.
"""

from typing import Any, Dict, Literal, Mapping, Optional, Protocol, TypedDict

# Test-run item in boto3 client shape, e.g. {"id": {"S": "abc"}, ...}
DynamoDBItem = Dict[str, Dict[str, Any]]


# Stream events


class TableKey(TypedDict):
    """Key of the test-run table; the only key attribute is ``id``."""

    id: Dict[Literal["S"], str]


class StreamRecordDynamoDB(TypedDict, total=False):
    """``dynamodb`` section of a stream record (NEW_AND_OLD_IMAGES view)."""

    Keys: TableKey
    NewImage: DynamoDBItem
    OldImage: DynamoDBItem
    SequenceNumber: str
    SizeBytes: int
    StreamViewType: str


class DynamoDBStreamRecord(TypedDict, total=False):
    eventID: str
    eventName: Literal["INSERT", "MODIFY", "REMOVE"]
    awsRegion: str
    dynamodb: StreamRecordDynamoDB
    eventSourceARN: str


class DynamoDBStreamEvent(TypedDict):
    Records: list[DynamoDBStreamRecord]


# HTTP


class APIGatewayProxyEvent(TypedDict, total=False):
    """Fields of an API Gateway proxy event read by the test-run handlers."""

    pathParameters: Optional[Dict[str, str]]
    body: Optional[str]
    isBase64Encoded: bool


class APIGatewayResponse(TypedDict):
    statusCode: int
    body: str
    headers: Dict[str, str]


# Collaborators


class LambdaContext(Protocol):  # pylint: disable=too-few-public-methods
    """The parts of the Lambda context object the handlers log."""

    function_name: str
    aws_request_id: str


class MetricsRecorder(Protocol):  # pylint: disable=too-few-public-methods
    """Counter sink, e.g. an EMF or CloudWatch client."""

    def count(
        self,
        name: str,
        value: int,
        dimensions: Optional[Mapping[str, str]] = None,
    ) -> object:
        """Record a count metric."""


__all__ = [
    "APIGatewayProxyEvent",
    "APIGatewayResponse",
    "DynamoDBItem",
    "DynamoDBStreamEvent",
    "DynamoDBStreamRecord",
    "LambdaContext",
    "MetricsRecorder",
    "StreamRecordDynamoDB",
    "TableKey",
]
