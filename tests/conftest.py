"""
Global pytest fixtures for the Shortlink Platform test suite.

Responsibilities:
    - Provide a fresh FastAPI TestClient via the app factory for integration tests
    - Provide an isolated in-memory Storage fixture for direct testing
    - Provide a LinkManager fixture wired to the Storage fixture

Why an app factory?
    Using `create_app()` ensures each test gets fresh in-memory state,
    eliminating cross-test flakiness.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from main import create_app
from shortlink_platform.manager.link_manager import LinkManager
from shortlink_platform.storage.storage import Storage


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def storage() -> Storage:
    """Fresh in-memory Storage backend."""
    return Storage()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def manager(storage: Storage, clock: FrozenClock) -> LinkManager:
    """LinkManager wired to the storage fixture and a frozen clock."""
    return LinkManager(storage=storage, clock=clock)


@pytest.fixture
def client(storage: Storage) -> TestClient:
    """
    Fresh TestClient with a new app instance sharing the `storage` fixture,
    so tests can assert on stored state directly.
    """
    return TestClient(create_app(storage=storage))
