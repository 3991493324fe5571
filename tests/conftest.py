"""Shared fixtures."""

import os
from collections.abc import Iterator
from datetime import UTC, datetime
from uuid import uuid4

import pytest


os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("LOG_REQUESTS", "false")

from fastapi.testclient import TestClient  # noqa: E402

from src.main import app  # noqa: E402


# Fixed clock used across tests
NOW = datetime(2025, 3, 12, 15, 30, tzinfo=UTC)


@pytest.fixture
def client() -> Iterator[TestClient]:
    """Test client with the lifespan run, so both engines are attached."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def user_id():
    return uuid4()


@pytest.fixture
def module_id():
    return uuid4()
