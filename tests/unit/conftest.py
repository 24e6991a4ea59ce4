"""Shared fixtures for testrun_stream unit tests."""

import pytest

from testrun_stream.config import PublisherConfig

from tests.helpers import InMemoryTestRunStore, MockMetrics, RecordingBus


@pytest.fixture
def mock_metrics() -> MockMetrics:
    """Provide a MockMetrics instance for testing."""
    return MockMetrics()


@pytest.fixture
def publisher_config() -> PublisherConfig:
    return PublisherConfig(bus_name="testruns-bus", source="preprocess-test-runs")


@pytest.fixture
def recording_bus() -> RecordingBus:
    return RecordingBus()


@pytest.fixture
def memory_store() -> InMemoryTestRunStore:
    return InMemoryTestRunStore()
