from __future__ import annotations

from fastapi.testclient import TestClient

from kisanpath.db.session import StoreNotConfigured
from kisanpath.main import app


def test_liveness() -> None:
    assert TestClient(app).get("/healthz").json() == {"status": "ok"}


def test_database_health_endpoint_success(database) -> None:
    client = TestClient(app)
    response = client.get("/healthz/database")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["pool"]["checkouts"] >= 1


def test_database_health_endpoint_failure(monkeypatch) -> None:
    client = TestClient(app)

    def raise_not_configured():
        raise StoreNotConfigured("missing database url")

    monkeypatch.setattr("kisanpath.main.get_engine", raise_not_configured)
    response = client.get("/healthz/database")
    assert response.status_code == 503
    assert response.json()["detail"] == "missing database url"
