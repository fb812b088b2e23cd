"""
Pytest configuration and fixtures for testing.

Environment defaults are set before any ``portfolio`` module is imported
because settings are read at import time.
"""

import os

import pytest

os.environ.setdefault("DB_USER", "test-user")
os.environ.setdefault("DB_PASSWORD", "test-password")
os.environ.setdefault("LOG_FILE_PATH", "/tmp/portfolio-test-errors.log")

from tests.mocks.service_mocks import create_fake_services  # noqa: E402
from tests.mocks.websocket_mocks import create_mock_websocket  # noqa: E402


@pytest.fixture
def fake_services():
    """In-memory services for every message type."""
    return create_fake_services()


@pytest.fixture
def mock_websocket():
    return create_mock_websocket()


@pytest.fixture
def app(fake_services):
    """Application wired to in-memory services, without a database."""
    from portfolio import application

    return application(services=fake_services)
