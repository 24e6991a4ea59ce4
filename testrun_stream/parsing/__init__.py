"""DynamoDB stream and item parsing utilities."""

from testrun_stream.parsing.parsers import (
    parse_stream_event,
    parse_stream_record,
)
from testrun_stream.parsing.record_codec import (
    decode_testrun,
    encode_testrun,
    item_to_testrun,
    optional_number,
    testrun_to_item,
)

__all__ = [
    "decode_testrun",
    "encode_testrun",
    "item_to_testrun",
    "optional_number",
    "parse_stream_event",
    "parse_stream_record",
    "testrun_to_item",
]
