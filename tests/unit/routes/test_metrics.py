"""
Unit tests for metrics endpoint.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from retreat_booking.main import app
from retreat_booking.metrics import (
    admission_duration,
    admissions_total,
    check_ins_total,
    conflicts_detected_total,
    ledger_write_failures_total,
    loyalty_points_awarded_total,
    payment_updates_total,
)


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client."""
    return TestClient(app)


@pytest.mark.unit
def test_metrics_endpoint_returns_prometheus_format(client: TestClient) -> None:
    """Test that /metrics endpoint returns Prometheus text format."""
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "text/plain" in response.headers["content-type"]


@pytest.mark.unit
def test_metrics_endpoint_contains_booking_metrics(client: TestClient) -> None:
    """Test that /metrics exposes the booking core counters and histograms."""
    admissions_total.labels(operation="create", outcome="admitted").inc()
    admission_duration.labels(operation="create").observe(0.01)
    payment_updates_total.labels(payment_status="PAID").inc()
    ledger_write_failures_total.inc()
    check_ins_total.labels(outcome="checked_in").inc()
    loyalty_points_awarded_total.labels(reason="stay").inc(53)
    conflicts_detected_total.labels(resource_kind="INSTRUCTOR").inc()

    content = client.get("/metrics").text

    assert "retreat_admissions_total" in content
    assert "retreat_admission_duration_seconds" in content
    assert "retreat_payment_updates_total" in content
    assert "retreat_ledger_write_failures_total" in content
    assert "retreat_check_ins_total" in content
    assert "retreat_loyalty_points_awarded_total" in content
    assert "retreat_conflicts_detected_total" in content


@pytest.mark.unit
def test_metrics_endpoint_includes_help_and_type_metadata(client: TestClient) -> None:
    """Test that metrics include Prometheus HELP and TYPE metadata."""
    content = client.get("/metrics").text

    assert "# HELP" in content
    assert "# TYPE" in content
