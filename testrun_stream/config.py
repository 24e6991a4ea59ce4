"""Environment-driven configuration for the stream and HTTP entry points."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional

logger = logging.getLogger(__name__)

# Hard per-request limit of the EventBridge PutEvents API
MAX_BATCH_SIZE = 10

DEFAULT_EVENT_SOURCE = "preprocess-test-runs"


def _environment(env: Optional[Dict[str, str]]) -> Dict[str, str]:
    return dict(os.environ) if env is None else env


def _require(env: Dict[str, str], name: str) -> str:
    value = env.get(name, "").strip()
    if not value:
        raise ValueError(f"{name} environment variable is required")
    return value


@dataclass(frozen=True)
class PublisherConfig:
    """Routing metadata attached to every published event.

    Attributes:
        bus_name: Name or ARN of the EventBridge bus
        source: Source tag of every entry
    """

    bus_name: str
    source: str = DEFAULT_EVENT_SOURCE

    @classmethod
    def from_env(cls, env: Optional[Dict[str, str]] = None) -> "PublisherConfig":
        """Create PublisherConfig from EVENT_BUS_NAME and EVENT_SOURCE.

        Raises:
            ValueError: If EVENT_BUS_NAME is not set
        """
        env = _environment(env)
        return cls(
            bus_name=_require(env, "EVENT_BUS_NAME"),
            source=env.get("EVENT_SOURCE", "").strip() or DEFAULT_EVENT_SOURCE,
        )


@dataclass(frozen=True)
class StreamProcessorConfig:
    """Configuration of the stream Lambda.

    Attributes:
        publisher: Bus routing configuration
        skip_malformed_records: Log and skip records that fail to classify
            instead of failing the invocation
    """

    publisher: PublisherConfig
    skip_malformed_records: bool = False

    @classmethod
    def from_env(
        cls, env: Optional[Dict[str, str]] = None
    ) -> "StreamProcessorConfig":
        env = _environment(env)
        raw_skip = env.get("SKIP_MALFORMED_RECORDS", "false").strip().lower()
        if raw_skip not in {"true", "false"}:
            logger.warning(
                "Invalid SKIP_MALFORMED_RECORDS value, using false",
                extra={"value": raw_skip},
            )
        return cls(
            publisher=PublisherConfig.from_env(env),
            skip_malformed_records=raw_skip == "true",
        )


@dataclass(frozen=True)
class StoreConfig:
    """Location of the test-run table."""

    table_name: str

    @classmethod
    def from_env(cls, env: Optional[Dict[str, str]] = None) -> "StoreConfig":
        """Create StoreConfig from TABLE_NAME.

        Raises:
            ValueError: If TABLE_NAME is not set
        """
        return cls(table_name=_require(_environment(env), "TABLE_NAME"))


__all__ = [
    "DEFAULT_EVENT_SOURCE",
    "MAX_BATCH_SIZE",
    "PublisherConfig",
    "StoreConfig",
    "StreamProcessorConfig",
]
