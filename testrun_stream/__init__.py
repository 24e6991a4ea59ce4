"""
Test-run change event pipeline.

This package turns DynamoDB stream records of the test-run table into typed
domain events and publishes them to EventBridge in bounded batches, so the
Lambdas stay minimal while sharing the decoding logic with the HTTP handlers.
"""

__version__ = "0.1.0"

from testrun_stream.attribute_value import (
    AttributeType,
    AttributeValue,
    image_from_wire,
    image_to_wire,
)
from testrun_stream.classification import classify, classify_records
from testrun_stream.config import (
    MAX_BATCH_SIZE,
    PublisherConfig,
    StoreConfig,
    StreamProcessorConfig,
)
from testrun_stream.errors import (
    BusTimeoutError,
    BusTransportError,
    ClassifyError,
    DecodeError,
    ImageDecodeError,
    InvalidAttributeValueError,
    MalformedPayloadError,
    MissingFieldError,
    PartialPublishError,
    PublishError,
    StoreError,
    StreamRecordError,
    TestRunStreamError,
    TypeMismatchError,
    UnknownOperationError,
)
from testrun_stream.models import (
    BusEntry,
    ChangeNotification,
    Created,
    Deleted,
    DomainEvent,
    LambdaResponse,
    OperationType,
    TestCase,
    TestRun,
    Updated,
    event_from_dict,
)
from testrun_stream.parsing import (
    decode_testrun,
    encode_testrun,
    item_to_testrun,
    parse_stream_event,
    parse_stream_record,
    testrun_to_item,
)
from testrun_stream.publishing import (
    BatchPublisher,
    EventBridgeBus,
    EventBus,
    chunk_events,
    create_eventbridge_bus,
    event_to_entry,
)

__all__ = [
    "__version__",
    "MAX_BATCH_SIZE",
    "AttributeType",
    "AttributeValue",
    "BatchPublisher",
    "BusEntry",
    "BusTimeoutError",
    "BusTransportError",
    "ChangeNotification",
    "ClassifyError",
    "Created",
    "DecodeError",
    "Deleted",
    "DomainEvent",
    "EventBridgeBus",
    "EventBus",
    "ImageDecodeError",
    "InvalidAttributeValueError",
    "LambdaResponse",
    "MalformedPayloadError",
    "MissingFieldError",
    "OperationType",
    "PartialPublishError",
    "PublishError",
    "PublisherConfig",
    "StoreConfig",
    "StoreError",
    "StreamProcessorConfig",
    "StreamRecordError",
    "TestCase",
    "TestRun",
    "TestRunStreamError",
    "TypeMismatchError",
    "UnknownOperationError",
    "Updated",
    "chunk_events",
    "classify",
    "classify_records",
    "create_eventbridge_bus",
    "decode_testrun",
    "encode_testrun",
    "event_from_dict",
    "event_to_entry",
    "image_from_wire",
    "image_to_wire",
    "item_to_testrun",
    "parse_stream_event",
    "parse_stream_record",
    "testrun_to_item",
]
