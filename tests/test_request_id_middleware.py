from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.core.app_factory import create_app
from app.core.config import LogSettings, Settings
from app.core.middleware import SECURITY_HEADERS


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())


def test_preserves_incoming_request_id_header(client: TestClient):
    incoming_id = "test-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": incoming_id})

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers.get("X-Request-ID") == incoming_id


def test_generates_request_id_when_missing(client: TestClient):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID")
    assert resp.headers.get("X-Request-Duration-ms") is not None


def test_security_headers_are_added(client: TestClient):
    resp = client.get("/health")

    for name, value in SECURITY_HEADERS.items():
        assert resp.headers[name] == value


def test_request_id_header_follows_app_config():
    config = Settings(log=LogSettings(request_id_header="X-Correlation-ID"))
    client = TestClient(create_app(config))

    resp = client.get("/health", headers={"X-Correlation-ID": "corr-42"})

    assert resp.headers.get("X-Correlation-ID") == "corr-42"
    assert "X-Request-ID" not in resp.headers
