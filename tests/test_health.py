"""Tests for the health endpoint."""

from fastapi.testclient import TestClient

from pastebin.config import Settings
from pastebin.database import InMemoryPasteStore
from pastebin.main import create_app


class UnhealthyStore(InMemoryPasteStore):
    def check_health(self) -> bool:
        return False


class ExplodingStore(InMemoryPasteStore):
    def check_health(self) -> bool:
        raise RuntimeError("probe blew up")


def test_healthy(client: TestClient):
    response = client.get("/api/healthz")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_unreachable_store(settings: Settings):
    with TestClient(create_app(settings=settings, store=UnhealthyStore())) as client:
        response = client.get("/api/healthz")
    assert response.status_code == 503
    assert response.json() == {"ok": False, "error": "Database unavailable"}


def test_probe_errors_do_not_escape(settings: Settings):
    with TestClient(create_app(settings=settings, store=ExplodingStore())) as client:
        response = client.get("/api/healthz")
    assert response.status_code == 503
    assert response.json()["ok"] is False
