"""
Root-level pytest configuration.

Registers the markers used across the test suite and keeps AWS clients
created during tests away from real credentials and regions.
"""

import pytest


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without AWS mocks")
    config.addinivalue_line(
        "markers", "integration: tests against moto-mocked AWS services"
    )


@pytest.fixture(autouse=True)
def aws_test_environment(monkeypatch):
    """Point boto3 at fake credentials and a fixed region."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
