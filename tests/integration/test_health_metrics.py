"""Integration tests for /health, /healthz and /metrics endpoints."""

from collections.abc import Iterator
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from flightdeck.main import app
from flightdeck.orchestration.registry import SessionRegistry, get_session_registry
from flightdeck.persistence.saver import BackgroundSaver
from flightdeck.persistence.state_store import ChecklistStateStore
from flightdeck.utils.metrics import PrometheusSessionMetrics


@pytest.fixture
def client(file_registry: SessionRegistry) -> Iterator[TestClient]:
    """Create test client."""
    app.dependency_overrides[get_session_registry] = lambda: file_registry
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealthEndpoint:
    """Test /health and /healthz endpoints."""

    def test_health_always_ok(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_healthz_returns_200_with_in_memory_store(self, client: TestClient) -> None:
        response = client.get("/healthz")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["components"]["state_store"] == "ok"
        assert data["components"]["saver"] == "idle"
        assert data["components"]["open_sessions"] == 0

    @patch("flightdeck.api.routes.health.check_state_store")
    def test_healthz_returns_503_when_store_fails(self, mock_check_store: MagicMock, client: TestClient) -> None:
        """Test /healthz returns 503 when the state store check fails."""
        mock_check_store.return_value = (False, "timeout")

        response = client.get("/healthz")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "degraded"
        assert data["components"]["state_store"] == "timeout"

    def test_healthz_reports_store_exception(self, file_registry: SessionRegistry) -> None:
        kv = MagicMock()
        kv.ping.side_effect = ConnectionError("refused")
        state_store = ChecklistStateStore(kv)
        with BackgroundSaver(state_store) as saver:
            registry = SessionRegistry(file_registry.loader, state_store, saver)
            app.dependency_overrides[get_session_registry] = lambda: registry
            try:
                response = TestClient(app).get("/healthz")
            finally:
                app.dependency_overrides.clear()

        assert response.status_code == 503
        assert response.json()["components"]["state_store"] == "error: ConnectionError"


class TestMetricsEndpoint:
    """Test /metrics endpoint."""

    def test_metrics_exposes_session_counters(self, file_registry: SessionRegistry) -> None:
        registry = SessionRegistry(
            file_registry.loader, file_registry.state_store, file_registry.saver, metrics=PrometheusSessionMetrics()
        )
        app.dependency_overrides[get_session_registry] = lambda: registry
        try:
            client = TestClient(app)
            session_id = client.post("/sessions", json={"checklist_id": "pattern_work"}).json()["session_id"]
            client.post(f"/sessions/{session_id}/actions/check")

            response = client.get("/metrics")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert 'checklist_actions_total{action="check",outcome="ok"}' in response.text
        assert "checklist_saves_total" in response.text
        assert "checklist_save_latency_ms" in response.text


def test_root(client: TestClient) -> None:
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["message"] == "Flightdeck Checklist API"
