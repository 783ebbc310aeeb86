"""
API integration tests for the FastAPI application.

Tests the routers end to end using FastAPI TestClient against a
throwaway SQLite database.
"""

import pytest
from fastapi.testclient import TestClient

from mystira.api.dependencies import get_db
from mystira.db.manager import DatabaseManager
from mystira.main import app
from mystira.tests.conftest import make_scenario_document


@pytest.fixture
def client(tmp_path):
    database = DatabaseManager(str(tmp_path / "api-test.db"))
    app.dependency_overrides[get_db] = lambda: database
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def scenario_id(client):
    response = client.post("/scenarios/", json=make_scenario_document())
    assert response.status_code == 201
    return response.json()["id"]


def start_session(client, scenario_id, **overrides):
    body = {
        "scenario_id": scenario_id,
        "account_id": "acct-1",
        "profile_id": "prof-1",
        "player_names": ["Ada"],
        "target_age_group": "school",
    }
    body.update(overrides)
    return client.post("/sessions/", json=body)


class TestRootEndpoints:
    """Test basic root endpoints"""

    def test_root_endpoint(self, client):
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Mystira"
        assert "version" in data
        assert data["status"] == "running"

    def test_health_endpoint(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestScenariosAPI:
    """Test scenario endpoints"""

    def test_list_scenarios_empty(self, client):
        response = client.get("/scenarios/")
        assert response.status_code == 200
        assert response.json() == {"scenarios": []}

    def test_create_and_get(self, client, scenario_id):
        response = client.get(f"/scenarios/{scenario_id}")
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "The Lost Lantern"
        assert [s["id"] for s in data["scenes"]] == ["A", "B", "C"]

    def test_list_with_summary(self, client, scenario_id):
        response = client.get("/scenarios/", params={"age_group": "school"})
        assert response.status_code == 200
        scenarios = response.json()["scenarios"]
        assert len(scenarios) == 1
        assert scenarios[0]["id"] == scenario_id
        assert scenarios[0]["scene_count"] == 3

        response = client.get("/scenarios/", params={"age_group": "teens"})
        assert response.json()["scenarios"] == []

    def test_create_with_dangling_branch_is_rejected(self, client):
        document = make_scenario_document()
        document["scenes"][0]["branches"][0]["next_scene_id"] = "scene-99"

        response = client.post("/scenarios/", json=document)
        assert response.status_code == 400
        data = response.json()
        assert "scene-99" in data["detail"]
        assert data["error_type"] == "ScenarioValidationError"

    def test_create_with_malformed_document_is_rejected(self, client):
        response = client.post("/scenarios/", json={"title": "No scenes", "scenes": "many"})
        assert response.status_code == 400

    def test_validate_reports_issues_without_storing(self, client):
        document = make_scenario_document(description="")
        response = client.post("/scenarios/validate", json=document)
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is False
        assert any("description" in issue for issue in data["issues"])

        assert client.get("/scenarios/").json()["scenarios"] == []

    def test_update(self, client, scenario_id):
        response = client.put(
            f"/scenarios/{scenario_id}",
            json=make_scenario_document(title="The Found Lantern"),
        )
        assert response.status_code == 200
        assert response.json()["title"] == "The Found Lantern"
        assert response.json()["id"] == scenario_id

    def test_missing_scenario(self, client):
        assert client.get("/scenarios/nope").status_code == 404
        assert client.put("/scenarios/nope", json=make_scenario_document()).status_code == 404
        assert client.delete("/scenarios/nope").status_code == 404

    def test_delete(self, client, scenario_id):
        response = client.delete(f"/scenarios/{scenario_id}")
        assert response.status_code == 200
        assert response.json() == {"deleted": True, "id": scenario_id}
        assert client.get(f"/scenarios/{scenario_id}").status_code == 404


class TestSessionsAPI:
    """Test session endpoints"""

    def test_full_playthrough(self, client, scenario_id):
        response = start_session(client, scenario_id)
        assert response.status_code == 201
        session = response.json()
        assert session["status"] == "InProgress"
        assert session["current_scene_id"] == "A"

        response = client.post(
            "/sessions/choice",
            json={
                "session_id": session["id"],
                "scene_id": "A",
                "choice_text": "Tell the truth",
                "next_scene_id": "B",
            },
        )
        assert response.status_code == 200
        assert response.json()["compass_values"]["honesty"]["current_value"] == 1.0

        response = client.post(
            "/sessions/choice",
            json={
                "session_id": session["id"],
                "scene_id": "B",
                "choice_text": "Go home",
                "next_scene_id": "END",
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "Completed"
        assert data["end_time"] is not None
        assert {a["type"] for a in data["achievements"]} == {"FirstChoice", "SessionComplete"}

        stats = client.get(f"/sessions/{session['id']}/stats").json()
        assert stats["total_choices"] == 2
        assert stats["compass_values"]["honesty"] == 1.0

    def test_start_unknown_scenario(self, client):
        response = start_session(client, "missing")
        assert response.status_code == 404
        assert response.json()["error_type"] == "NotFoundError"

    def test_start_rejected_for_young_age_group(self, client):
        response = client.post(
            "/scenarios/", json=make_scenario_document(minimum_age=10, age_group="preteens")
        )
        response = start_session(client, response.json()["id"], target_age_group="school")
        assert response.status_code == 400
        assert "minimum age" in response.json()["detail"]

    def test_unknown_choice(self, client, scenario_id):
        session = start_session(client, scenario_id).json()
        response = client.post(
            "/sessions/choice",
            json={"session_id": session["id"], "scene_id": "A", "choice_text": "Dance"},
        )
        assert response.status_code == 404

    def test_pause_resume_and_state_errors(self, client, scenario_id):
        session_id = start_session(client, scenario_id).json()["id"]

        response = client.post(f"/sessions/{session_id}/pause")
        assert response.status_code == 200
        assert response.json()["status"] == "Paused"

        response = client.post(f"/sessions/{session_id}/pause")
        assert response.status_code == 400
        assert response.json()["error_type"] == "InvalidStateError"

        response = client.post(
            "/sessions/choice",
            json={
                "session_id": session_id,
                "scene_id": "A",
                "choice_text": "Tell the truth",
                "next_scene_id": "B",
            },
        )
        assert response.status_code == 400

        response = client.post(f"/sessions/{session_id}/resume")
        assert response.status_code == 200
        assert response.json()["status"] == "InProgress"

        response = client.post(f"/sessions/{session_id}/end")
        assert response.status_code == 200
        assert response.json()["status"] == "Completed"

    def test_progress_scene_and_character(self, client, scenario_id):
        session_id = start_session(client, scenario_id).json()["id"]

        response = client.post(f"/sessions/{session_id}/progress-scene", json={"scene_id": "B"})
        assert response.status_code == 200
        assert response.json()["current_scene_id"] == "B"

        response = client.post(
            f"/sessions/{session_id}/character", json={"character_id": "fox-knight"}
        )
        assert response.status_code == 200
        assert response.json()["selected_character_id"] == "fox-knight"

    def test_listings_and_count(self, client, scenario_id):
        first = start_session(client, scenario_id).json()
        second = start_session(client, scenario_id).json()
        start_session(client, scenario_id, account_id="acct-2", profile_id="prof-2")

        by_account = client.get("/sessions/account/acct-1").json()
        assert {s["id"] for s in by_account} == {first["id"], second["id"]}

        in_progress = client.get("/sessions/account/acct-1/in-progress").json()
        assert [s["id"] for s in in_progress] == [second["id"]]

        assert len(client.get("/sessions/profile/prof-2").json()) == 1
        assert client.get("/sessions/active/count").json() == {"count": 2}

    def test_achievements_endpoint(self, client, scenario_id):
        session_id = start_session(client, scenario_id).json()["id"]
        client.post(f"/sessions/{session_id}/end")

        response = client.get(f"/sessions/{session_id}/achievements")
        assert response.status_code == 200
        assert [a["id"] for a in response.json()] == [f"{session_id}_completion"]

    def test_missing_session(self, client):
        assert client.get("/sessions/nope").status_code == 404
        assert client.post("/sessions/nope/pause").status_code == 404
        assert client.post("/sessions/nope/resume").status_code == 404
        assert client.post("/sessions/nope/end").status_code == 404
        assert client.get("/sessions/nope/stats").status_code == 404
        assert client.get("/sessions/nope/achievements").status_code == 404
        assert client.delete("/sessions/nope").status_code == 404

    def test_delete_session(self, client, scenario_id):
        session_id = start_session(client, scenario_id).json()["id"]
        response = client.delete(f"/sessions/{session_id}")
        assert response.status_code == 200
        assert response.json() == {"deleted": True}
        assert client.get(f"/sessions/{session_id}").status_code == 404
