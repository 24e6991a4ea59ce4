"""Change notification classification."""

from testrun_stream.classification.classifier import (
    classify,
    classify_records,
)

__all__ = ["classify", "classify_records"]
