"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from sgpt_floor.engine import AuditTrail
from sgpt_floor.services import NarrationService
from sgpt_floor.web import create_app


@pytest.fixture
def app(trap_bar_floor, settings):
    return create_app(settings)


@pytest.fixture
def api(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def two_clients(trap_bar_floor):
    floor = trap_bar_floor
    return [
        floor.client("Alex", [(floor.trap_bar_deadlift, 3, 5, 90)]),
        floor.client("Sam", [(floor.trap_bar_deadlift, 3, 5, 90), (floor.trap_bar_carry, 2, 1, 60)]),
    ]


def _start(api, client_ids):
    response = api.post("/sessions", data={"client_ids": client_ids, "coach_name": "Robin"})
    assert response.status_code == 201
    return response.json()


class TestHealth:
    def test_health(self, api):
        response = api.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestSessionRoutes:
    """Tests for /sessions."""

    def test_start_and_board(self, api, two_clients):
        body = _start(api, two_clients)
        session_id = body["session"]["id"]

        assert body["session"]["coach_name"] == "Robin"
        assert [s["status"] for s in body["states"]] == ["ready", "ready"]

        board = api.get(f"/sessions/{session_id}").json()
        assert [c["client_name"] for c in board["clients"]] == ["Alex", "Sam"]

    def test_list_active(self, api, two_clients):
        session_id = _start(api, two_clients)["session"]["id"]

        sessions = api.get("/sessions").json()["sessions"]

        assert [s["id"] for s in sessions] == [session_id]

    def test_too_many_clients(self, api, trap_bar_floor):
        ids = [trap_bar_floor.client(f"C{i}", [(trap_bar_floor.glute_bridge, 1, 5, 30)]) for i in range(7)]

        response = api.post("/sessions", data={"client_ids": ids})

        assert response.status_code == 400

    def test_unknown_session(self, api):
        assert api.get("/sessions/404").status_code == 404

    def test_second_checkin_is_substituted(self, api, two_clients):
        states = _start(api, two_clients)["states"]
        alex, sam = states[0]["id"], states[1]["id"]

        first = api.post(f"/sessions/states/{alex}/checkin").json()
        second = api.post(f"/sessions/states/{sam}/checkin").json()

        assert first["outcome"] == "exercise_advanced"
        assert second["outcome"] == "substituted"
        assert second["from"] == "Trap Bar Deadlift"
        assert second["to"] == "Glute Bridge"
        assert second["reason"] == "Trap Bar occupied"

    def test_advance_flow(self, api, two_clients):
        states = _start(api, two_clients)["states"]
        alex = states[0]["id"]
        api.post(f"/sessions/states/{alex}/checkin")

        response = api.post(f"/sessions/states/{alex}/advance")

        assert response.status_code == 200
        assert response.json() == {
            "outcome": "set_advanced",
            "next_set": 2,
            "total_sets": 3,
            "rest_seconds": 90,
            "warnings": [],
        }

    def test_checkin_twice_conflicts(self, api, two_clients):
        alex = _start(api, two_clients)["states"][0]["id"]
        api.post(f"/sessions/states/{alex}/checkin")

        response = api.post(f"/sessions/states/{alex}/checkin")

        assert response.status_code == 409

    def test_unknown_state(self, api):
        assert api.post("/sessions/states/999/advance").status_code == 404

    def test_rpe(self, api, two_clients):
        alex = _start(api, two_clients)["states"][0]["id"]

        high = api.post(f"/sessions/states/{alex}/rpe", data={"rpe": 9})
        invalid = api.post(f"/sessions/states/{alex}/rpe", data={"rpe": 11})

        assert high.json()["extension_seconds"] == 30
        assert high.json()["alert_raised"] is True
        assert invalid.status_code == 400

    def test_pain_creates_action_alert(self, api, two_clients):
        body = _start(api, two_clients)
        session_id = body["session"]["id"]
        alex = body["states"][0]["id"]

        response = api.post(f"/sessions/states/{alex}/pain", data={"description": "Lower back twinge"})
        alerts = api.get("/alerts", params={"session_id": session_id, "requires_action": True}).json()

        assert response.json()["status"] == "escalated"
        assert [a["alert_type"] for a in alerts["alerts"]] == ["pain"]

    def test_end_session_blocks_events(self, api, two_clients):
        body = _start(api, two_clients)
        session_id = body["session"]["id"]
        alex = body["states"][0]["id"]

        ended = api.post(f"/sessions/{session_id}/end")
        blocked = api.post(f"/sessions/states/{alex}/checkin")

        assert ended.json()["status"] == "completed"
        assert blocked.status_code == 409


class TestEquipmentRoutes:
    """Tests for /equipment."""

    def test_catalog(self, api):
        names = [e["name"] for e in api.get("/equipment").json()["equipment"]]
        assert "Trap Bar" in names

    def test_board_and_check(self, api, two_clients):
        body = _start(api, two_clients)
        session_id = body["session"]["id"]
        api.post(f"/sessions/states/{body['states'][0]['id']}/checkin")

        board = api.get(f"/equipment/sessions/{session_id}").json()["equipment"]
        check = api.post(
            f"/equipment/sessions/{session_id}/check",
            data={"names": ["Trap Bar", "Kettlebell 24kg"]},
        ).json()

        trap_bar = next(e for e in board if e["name"] == "Trap Bar")
        assert trap_bar["in_use"] == 1
        assert trap_bar["is_available"] is False
        assert check == {"available": False, "conflicts": ["Trap Bar"]}

    def test_alternative(self, api, two_clients, trap_bar_floor):
        body = _start(api, two_clients)
        session_id = body["session"]["id"]
        api.post(f"/sessions/states/{body['states'][0]['id']}/checkin")

        response = api.get(
            f"/equipment/sessions/{session_id}/alternatives/{trap_bar_floor.trap_bar_carry.id}"
        )

        assert response.json() == {"exercise": "Trap Bar Carry", "alternative": None}

    def test_board_unknown_session(self, api):
        assert api.get("/equipment/sessions/77").status_code == 404


class TestDecisionRoutes:
    """Tests for /decisions and /alerts."""

    def test_substitution_is_logged(self, api, two_clients):
        body = _start(api, two_clients)
        session_id = body["session"]["id"]
        for state in body["states"]:
            api.post(f"/sessions/states/{state['id']}/checkin")

        decisions = api.get("/decisions", params={"session_id": session_id}).json()["decisions"]
        alerts = api.get("/alerts", params={"session_id": session_id}).json()["alerts"]

        assert [d["trigger_type"] for d in decisions] == ["equipment_conflict"]
        assert decisions[0]["decision"] == "Auto-substituted: Glute Bridge"
        assert alerts[0]["requires_action"] is False

    def test_narrate_unconfigured(self, api):
        response = api.post("/decisions/narrate", data={"scenario": "Rack taken"})
        assert response.status_code == 503

    def test_narrate(self, api, app, stub_openai):
        client, _ = stub_openai(reply="Use the landmine instead.")
        app.state.narrator = NarrationService(AuditTrail(app.state.store), client=client)

        response = api.post("/decisions/narrate", data={"scenario": "Rack taken"})
        decisions = api.get("/decisions").json()["decisions"]

        assert response.json() == {"decision": "Use the landmine instead.", "warnings": []}
        assert decisions[0]["trigger_type"] == "manual"
