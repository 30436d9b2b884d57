"""
Unit tests for middleware components.
"""

from __future__ import annotations

import pytest
import structlog
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from rental_reservations.middleware import RequestIDMiddleware


@pytest.fixture
def client() -> TestClient:
    """Test client for an app that echoes the request ID and the bound log context."""
    app = FastAPI()
    app.add_middleware(RequestIDMiddleware)

    @app.get("/echo")
    async def echo(request: Request) -> dict[str, str]:
        context = structlog.contextvars.get_contextvars()
        return {"state": request.state.request_id, "log_context": context.get("request_id", "")}

    return TestClient(app)


@pytest.mark.unit
def test_request_id_generated_when_absent(client: TestClient) -> None:
    response = client.get("/echo")

    assert response.status_code == 200
    assert len(response.headers["X-Request-ID"]) == 36  # UUID length
    assert response.json()["state"] == response.headers["X-Request-ID"]


@pytest.mark.unit
def test_request_id_reuses_caller_header(client: TestClient) -> None:
    response = client.get("/echo", headers={"X-Request-ID": "gateway-abc-123"})

    assert response.headers["X-Request-ID"] == "gateway-abc-123"
    assert response.json()["state"] == "gateway-abc-123"


@pytest.mark.unit
def test_request_id_bound_into_log_context(client: TestClient) -> None:
    response = client.get("/echo")

    assert response.json()["log_context"] == response.headers["X-Request-ID"]


@pytest.mark.unit
def test_request_ids_are_unique_per_request(client: TestClient) -> None:
    ids = {client.get("/echo").headers["X-Request-ID"] for _ in range(5)}

    assert len(ids) == 5
