"""Integration tests for session endpoints.

Uses the bundled ``pattern_work`` checklist:
    (0, 0) Downwind: Fuel selector* | Mixture | Carburettor heat
    (0, 1) Final:    Flaps | note | Landing clearance*
"""

import inspect
from collections.abc import Iterator
from typing import Any

import pytest
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from flightdeck.main import app
from flightdeck.orchestration.registry import SessionRegistry, get_session_registry


@pytest.fixture
def client(file_registry: SessionRegistry) -> Iterator[TestClient]:
    """Create test client backed by the bundled checklists."""
    app.dependency_overrides[get_session_registry] = lambda: file_registry
    yield TestClient(app)
    app.dependency_overrides.clear()


def open_session(client: TestClient, checklist_id: str = "pattern_work", resume: bool = False) -> dict[str, Any]:
    response = client.post("/sessions", json={"checklist_id": checklist_id, "resume": resume})
    assert response.status_code == 201
    return response.json()


class TestOpenSession:
    """Test POST /sessions and GET /sessions/{id}."""

    def test_open_returns_ready_view(self, client: TestClient) -> None:
        view = open_session(client)

        assert view["status"] == "ready"
        assert view["title"] == "Pattern Work"
        assert view["section_titles"] == ["Circuit"]
        assert view["list_titles"] == ["Downwind", "Final"]
        assert view["list_title"] == "Downwind"
        assert [item["challenge"] for item in view["items"]] == ["Fuel selector", "Mixture", "Carburettor heat"]
        assert view["completed_items"] == []
        assert view["has_multiple_lists"] is True
        assert view["has_multiple_sections"] is False

    def test_open_missing_checklist_returns_error_view(self, client: TestClient) -> None:
        view = open_session(client, "does_not_exist")

        assert view["status"] == "error"
        assert "does_not_exist" in view["error"]
        assert view["items"] == []

    def test_open_requires_checklist_id(self, client: TestClient) -> None:
        assert client.post("/sessions", json={"checklist_id": ""}).status_code == 422

    def test_get_session(self, client: TestClient) -> None:
        view = open_session(client)

        response = client.get(f"/sessions/{view['session_id']}")

        assert response.status_code == 200
        assert response.json() == view

    def test_unknown_session_returns_404(self, client: TestClient) -> None:
        assert client.get("/sessions/nope").status_code == 404
        assert client.post("/sessions/nope/actions/check").status_code == 404
        assert client.post("/sessions/nope/select", json={"item": 1}).status_code == 404
        assert client.delete("/sessions/nope").status_code == 404


class TestActions:
    """Test POST /sessions/{id}/actions/{action}."""

    def test_check_advances(self, client: TestClient) -> None:
        session_id = open_session(client)["session_id"]

        view = client.post(f"/sessions/{session_id}/actions/check").json()

        assert view["completed_items"] == [0]
        assert view["item_index"] == 1

    def test_skip_and_search_skipped(self, client: TestClient) -> None:
        session_id = open_session(client)["session_id"]

        assert client.post(f"/sessions/{session_id}/actions/skip").json()["item_index"] == 1
        assert client.post(f"/sessions/{session_id}/actions/search-skipped").json()["item_index"] == 0

    def test_mark_all_and_required_latch(self, client: TestClient) -> None:
        session_id = open_session(client)["session_id"]

        view = client.post(f"/sessions/{session_id}/actions/mark-all").json()
        assert view["completed_items"] == [0, 1, 2]
        assert view["all_required_complete"] is False

        view = client.post(f"/sessions/{session_id}/actions/search-required").json()
        assert (view["list_index"], view["item_index"]) == (1, 2)

        view = client.post(f"/sessions/{session_id}/actions/mark-all").json()
        assert view["completed_items"] == [0, 2]
        assert view["all_required_complete"] is True

    def test_emergency_and_jump(self, client: TestClient) -> None:
        session_id = open_session(client, "c172_normal")["session_id"]

        view = client.post(f"/sessions/{session_id}/actions/emergency").json()
        assert view["section_index"] == 2
        assert view["section_type"] == "emergency"

        view = client.post(f"/sessions/{session_id}/actions/jump").json()
        assert (view["section_index"], view["list_index"], view["item_index"]) == (0, 0, 0)

    def test_restart(self, client: TestClient, file_registry: SessionRegistry) -> None:
        session_id = open_session(client)["session_id"]
        client.post(f"/sessions/{session_id}/actions/check")

        view = client.post(f"/sessions/{session_id}/actions/restart").json()

        assert view["completed_items"] == []
        assert view["item_index"] == 0
        assert file_registry.state_store.has_saved("pattern_work") is False

    def test_unknown_action_returns_400(self, client: TestClient) -> None:
        session_id = open_session(client)["session_id"]

        response = client.post(f"/sessions/{session_id}/actions/explode")

        assert response.status_code == 400
        assert "check" in response.json()["detail"]

    def test_actions_on_error_session_are_noops(self, client: TestClient) -> None:
        session_id = open_session(client, "does_not_exist")["session_id"]

        response = client.post(f"/sessions/{session_id}/actions/check")

        assert response.status_code == 200
        assert response.json()["status"] == "error"


class TestSelectAndToggle:
    """Test POST /sessions/{id}/select and item toggles."""

    def test_select_list(self, client: TestClient) -> None:
        session_id = open_session(client)["session_id"]

        view = client.post(f"/sessions/{session_id}/select", json={"list": 1}).json()

        assert view["list_index"] == 1
        assert view["list_title"] == "Final"
        assert view["item_index"] == 0

    def test_select_list_and_item_together(self, client: TestClient) -> None:
        session_id = open_session(client)["session_id"]

        view = client.post(f"/sessions/{session_id}/select", json={"list": 1, "item": 2}).json()

        assert (view["list_index"], view["item_index"]) == (1, 2)

    def test_out_of_range_selection_is_ignored(self, client: TestClient) -> None:
        session_id = open_session(client)["session_id"]

        view = client.post(f"/sessions/{session_id}/select", json={"section": 5, "item": 9}).json()

        assert (view["section_index"], view["list_index"], view["item_index"]) == (0, 0, 0)

    def test_toggle_item(self, client: TestClient) -> None:
        session_id = open_session(client)["session_id"]
        client.post(f"/sessions/{session_id}/select", json={"list": 1})

        view = client.post(f"/sessions/{session_id}/items/2/toggle").json()
        assert view["completed_items"] == [2]

        view = client.post(f"/sessions/{session_id}/items/1/toggle").json()
        assert view["completed_items"] == [2]


class TestCloseAndResume:
    """Test DELETE /sessions/{id} and resuming."""

    def test_close_flushes_and_resume_restores(self, client: TestClient, file_registry: SessionRegistry) -> None:
        session_id = open_session(client)["session_id"]
        client.post(f"/sessions/{session_id}/actions/check")

        response = client.delete(f"/sessions/{session_id}")

        assert response.status_code == 204
        assert client.get(f"/sessions/{session_id}").status_code == 404
        assert file_registry.state_store.has_saved("pattern_work") is True

        catalog = client.get("/checklists").json()["checklists"]
        assert {c["checklist_id"]: c["resumable"] for c in catalog}["pattern_work"] is True

        view = open_session(client, resume=True)
        assert view["completed_items"] == [0]
        assert view["item_index"] == 1

    def test_open_without_resume_starts_fresh(self, client: TestClient) -> None:
        session_id = open_session(client)["session_id"]
        client.post(f"/sessions/{session_id}/actions/check")
        client.delete(f"/sessions/{session_id}")

        view = open_session(client)

        assert view["completed_items"] == []


class TestBlockingRoutes:
    """Routes that reach storage or a session lock run in the threadpool."""

    @pytest.mark.parametrize(
        "path",
        [
            "/sessions",
            "/sessions/{session_id}",
            "/sessions/{session_id}/actions/{action}",
            "/sessions/{session_id}/items/{item_index}/toggle",
            "/sessions/{session_id}/select",
            "/checklists",
            "/checklists/{checklist_id}",
            "/checklists/{checklist_id}/state",
            "/healthz",
        ],
    )
    def test_route_is_not_a_coroutine(self, path: str) -> None:
        endpoints = [route.endpoint for route in app.routes if isinstance(route, APIRoute) and route.path == path]

        assert endpoints
        assert not any(inspect.iscoroutinefunction(endpoint) for endpoint in endpoints)
