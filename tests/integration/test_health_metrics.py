"""Integration tests for /health, /healthz and /metrics endpoints."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from backend.app.api.deps import get_catalog
from backend.app.db.inmemory import InMemoryCatalog
from backend.app.main import app
from backend.app.utils.metrics import PrometheusBookingMetrics


@pytest.fixture
def client(catalog: InMemoryCatalog) -> Iterator[TestClient]:
    """Create test client."""
    app.dependency_overrides[get_catalog] = lambda: catalog
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealthEndpoint:
    def test_health_always_ok(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_healthz_reports_components(self, client: TestClient) -> None:
        response = client.get("/healthz")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["components"]["bookings"] == "ok"
        assert data["components"]["catalog"].startswith("ok")


class TestMetricsEndpoint:
    def test_metrics_exposes_booking_counters(self, client: TestClient) -> None:
        metrics = PrometheusBookingMetrics()
        metrics.inc_transition("accept", "success")
        metrics.inc_quote("guide")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "text/plain" in response.headers["content-type"]
        assert 'booking_transitions_total{operation="accept",outcome="success"}' in response.text
        assert 'booking_quotes_total{provider_kind="guide"}' in response.text
