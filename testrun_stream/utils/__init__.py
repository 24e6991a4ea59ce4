"""Logging and archive helpers."""

from testrun_stream.utils.logging import (
    OperationLogger,
    StructuredFormatter,
    get_logger,
    get_operation_logger,
)
from testrun_stream.utils.zip import decode_zip_archive

__all__ = [
    "OperationLogger",
    "StructuredFormatter",
    "decode_zip_archive",
    "get_logger",
    "get_operation_logger",
]
