"""Structured logging configuration for the Lambda entry points."""

import json
import logging
import os
import time
import uuid
from contextlib import contextmanager
from typing import Any, Iterator, Optional

# Attributes every LogRecord carries; anything else came in through ``extra``
_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured JSON logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_obj = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "component": "testrun_stream",
        }

        # Fields passed as extra= by library modules
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and key != "extra_fields":
                log_obj[key] = value

        # Fields passed as keyword arguments to OperationLogger
        if hasattr(record, "extra_fields"):
            log_obj.update(record.extra_fields)

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        # Add X-Ray trace ID if available
        trace_id = os.environ.get("_X_AMZN_TRACE_ID")
        if trace_id:
            log_obj["trace_id"] = trace_id

        return json.dumps(log_obj, default=str)


class OperationLogger:
    """Logger with a correlation id, keyword context and operation timing."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.correlation_id = str(uuid.uuid4())

    def info(self, message: str, **kwargs: Any) -> None:
        self._log_with_context(logging.INFO, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log_with_context(logging.ERROR, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log_with_context(logging.WARNING, message, **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log_with_context(logging.DEBUG, message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log an error with the active exception's traceback."""
        extra_fields = {"correlation_id": self.correlation_id, **kwargs}
        self.logger.exception(message, extra={"extra_fields": extra_fields})

    def _log_with_context(self, level: int, message: str, **kwargs: Any) -> None:
        extra_fields = {"correlation_id": self.correlation_id, **kwargs}
        self.logger.log(level, message, extra={"extra_fields": extra_fields})

    @contextmanager
    def operation_timer(self, operation_name: str, **context: Any) -> Iterator[str]:
        """Context manager logging start, completion or failure with duration."""
        start_time = time.time()
        operation_id = str(uuid.uuid4())
        op_context = {
            "operation_id": operation_id,
            "operation_name": operation_name,
            **context,
        }

        self.info(f"Starting operation: {operation_name}", **op_context)

        try:
            yield operation_id
        except BaseException as e:
            self.error(
                f"Operation failed: {operation_name}",
                duration_seconds=time.time() - start_time,
                error=str(e),
                error_type=type(e).__name__,
                **op_context,
            )
            raise

        self.info(
            f"Operation completed: {operation_name}",
            duration_seconds=time.time() - start_time,
            **op_context,
        )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a configured logger instance.

    Args:
        name: Logger name (defaults to this module's name)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name or __name__)

    # Only configure if not already configured
    if not logger.handlers:
        handler = logging.StreamHandler()

        if (
            os.environ.get("ENABLE_STRUCTURED_LOGGING", "true").lower() == "true"
        ):
            formatter: logging.Formatter = StructuredFormatter()
        else:
            formatter = logging.Formatter(
                "[%(levelname)s] %(asctime)s.%(msecs)03dZ %(name)s - "
                "%(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )

        handler.setFormatter(formatter)
        logger.addHandler(handler)

        level = os.environ.get("LOG_LEVEL", "INFO").upper()
        logger.setLevel(getattr(logging, level, logging.INFO))

    return logger


def get_operation_logger(name: Optional[str] = None) -> OperationLogger:
    """Get an OperationLogger wrapping ``get_logger(name)``."""
    return OperationLogger(get_logger(name))


__all__ = [
    "OperationLogger",
    "StructuredFormatter",
    "get_logger",
    "get_operation_logger",
]
