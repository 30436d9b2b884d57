"""
Unit tests for metrics endpoint.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from rental_reservations.main import app
from rental_reservations.metrics import (
    audit_write_failures,
    calendar_days_marked,
    conflicts_detected,
    operation_duration,
    operations_total,
)


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client."""
    return TestClient(app)


@pytest.mark.unit
def test_metrics_endpoint_returns_prometheus_format(client: TestClient) -> None:
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "text/plain" in response.headers["content-type"]


@pytest.mark.unit
def test_metrics_endpoint_contains_reservation_metrics(client: TestClient) -> None:
    operations_total.labels(operation="create", outcome="success").inc()
    operation_duration.labels(operation="create").observe(0.02)
    conflicts_detected.labels(operation="create").inc()
    calendar_days_marked.labels(status="BOOKED").inc(3)
    audit_write_failures.labels(action="CREATE_RESERVATION").inc()

    body = client.get("/metrics").text

    assert "reservation_operations_total" in body
    assert "reservation_operation_duration_seconds_bucket" in body
    assert "reservation_conflicts_total" in body
    assert "reservation_calendar_days_marked_total" in body
    assert "reservation_audit_write_failures_total" in body


@pytest.mark.unit
def test_metrics_endpoint_needs_no_actor(client: TestClient) -> None:
    response = client.get("/metrics")

    assert response.status_code == 200
