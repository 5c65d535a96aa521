import os
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

# pastebin.main builds a module-level app on import; keep it off Redis
os.environ.update({"REDIS_URL": "memory://", "TEST_MODE": "0", "APP_DOMAIN": ""})

from pastebin.config import Settings  # noqa: E402
from pastebin.database import InMemoryPasteStore  # noqa: E402
from pastebin.main import create_app  # noqa: E402
from tests.helpers import FakeClock  # noqa: E402


@pytest.fixture(scope="function")
def settings() -> Settings:
    return Settings(REDIS_URL="memory://", TEST_MODE=False, APP_DOMAIN="")


@pytest.fixture(scope="function")
def store() -> InMemoryPasteStore:
    return InMemoryPasteStore()


@pytest.fixture(scope="function")
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(scope="function")
def client(settings: Settings, store: InMemoryPasteStore, clock: FakeClock) -> Generator[TestClient]:
    """Client whose notion of "now" is the FakeClock fixture."""
    app = create_app(settings=settings, store=store, clock=clock)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="function")
def system_clock_client(settings: Settings, store: InMemoryPasteStore) -> Generator[TestClient]:
    """Client wired the way production is: system clock, TEST_MODE off."""
    app = create_app(settings=settings, store=store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="function")
def test_mode_client(store: InMemoryPasteStore) -> Generator[TestClient]:
    """Client with TEST_MODE on, so x-test-now-ms drives the clock."""
    app = create_app(settings=Settings(REDIS_URL="memory://", TEST_MODE=True), store=store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="function")
def create_paste(client: TestClient):
    """Create a paste through the API and return its id."""

    def _create(content: str = "hello", **constraints) -> str:
        response = client.post("/api/pastes", json={"content": content, **constraints})
        assert response.status_code == 201, response.text
        return response.json()["id"]

    return _create
