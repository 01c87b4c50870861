"""Tests for session setup, pain reports and the client board."""

import asyncio

import pytest

from sgpt_floor.engine import SessionLocks
from sgpt_floor.errors import NotFoundError, SessionFullError
from sgpt_floor.models import (
    AlertType,
    Client,
    ClientStatus,
    Program,
    ProgramEntry,
    SessionStatus,
    TriggerType,
)
from sgpt_floor.services import SessionService


class TestStartSession:
    """Tests for SessionService.start_session."""

    def test_creates_ready_states(self, trap_bar_floor):
        floor = trap_bar_floor
        alex = floor.client("Alex", [(floor.trap_bar_deadlift, 3, 5, 90)])
        sam = floor.client("Sam", [(floor.glute_bridge, 3, 12, 60)])
        service = SessionService(floor.store)

        session, states = asyncio.run(service.start_session([alex, sam], coach_name="Robin"))

        assert session.status == SessionStatus.ACTIVE
        assert session.coach_name == "Robin"
        assert [s.client_id for s in states] == [alex, sam]
        for state in states:
            stored = floor.state(state.id)
            assert stored.status == ClientStatus.READY
            assert stored.current_exercise_index == 0
            assert stored.current_set == 1
            assert stored.equipment_in_use == []

    def test_uses_latest_program(self, trap_bar_floor):
        floor = trap_bar_floor
        alex = floor.client("Alex", [(floor.trap_bar_deadlift, 3, 5, 90)])
        newer = Program(
            client_id=alex,
            name="Deload",
            entries=[ProgramEntry(exercise_id=floor.glute_bridge.id, sets=2, reps=10)],
        )
        newer_id = asyncio.run(floor.store.programs.create(newer))

        _, states = floor.session(alex)

        assert states[0].program_id == newer_id

    def test_rejects_empty(self, store):
        with pytest.raises(ValueError):
            asyncio.run(SessionService(store).start_session([]))

    def test_rejects_duplicates(self, trap_bar_floor):
        floor = trap_bar_floor
        alex = floor.client("Alex", [(floor.glute_bridge, 3, 12, 60)])

        with pytest.raises(ValueError):
            asyncio.run(SessionService(floor.store).start_session([alex, alex]))

    def test_rejects_more_than_six(self, trap_bar_floor):
        floor = trap_bar_floor
        ids = [floor.client(f"Client {i}", [(floor.glute_bridge, 3, 12, 60)]) for i in range(7)]

        with pytest.raises(SessionFullError):
            asyncio.run(SessionService(floor.store).start_session(ids))

    def test_client_without_program(self, trap_bar_floor):
        floor = trap_bar_floor
        loner = asyncio.run(floor.store.clients.create(Client(name="Loner")))

        with pytest.raises(NotFoundError):
            asyncio.run(SessionService(floor.store).start_session([loner]))

    def test_unknown_client(self, store):
        with pytest.raises(NotFoundError):
            asyncio.run(SessionService(store).start_session([42]))


class TestReportPain:
    """Tests for SessionService.report_pain."""

    def test_pain_escalates(self, trap_bar_floor):
        floor = trap_bar_floor
        alex = floor.client("Alex", [(floor.glute_bridge, 3, 12, 60)])
        session_id, states = floor.session(alex)

        warnings = asyncio.run(
            SessionService(floor.store).report_pain(states[0].id, "Sharp pain in left knee")
        )

        assert warnings == []
        (alert,) = floor.alerts(session_id)
        assert alert.alert_type == AlertType.PAIN
        assert alert.requires_action
        assert "Alex" in alert.message
        (decision,) = floor.decisions(session_id)
        assert decision.trigger_type == TriggerType.PAIN
        assert decision.requires_approval and not decision.approved

    def test_blank_description(self, trap_bar_floor):
        floor = trap_bar_floor
        alex = floor.client("Alex", [(floor.glute_bridge, 3, 12, 60)])
        _, states = floor.session(alex)

        with pytest.raises(ValueError):
            asyncio.run(SessionService(floor.store).report_pain(states[0].id, "   "))


class TestEndSession:
    """Tests for SessionService.end_session."""

    def test_end_keeps_states(self, trap_bar_floor):
        floor = trap_bar_floor
        alex = floor.client("Alex", [(floor.glute_bridge, 3, 12, 60)])
        session_id, states = floor.session(alex)

        session = asyncio.run(SessionService(floor.store).end_session(session_id))

        assert session.status == SessionStatus.COMPLETED
        assert floor.state(states[0].id) is not None

    def test_end_releases_session_lock(self, trap_bar_floor):
        floor = trap_bar_floor
        alex = floor.client("Alex", [(floor.glute_bridge, 3, 12, 60)])
        session_id, _ = floor.session(alex)
        locks = SessionLocks()
        held = locks.for_session(session_id)
        other = locks.for_session(session_id + 1)

        asyncio.run(SessionService(floor.store, locks=locks).end_session(session_id))

        assert locks.for_session(session_id) is not held
        assert locks.for_session(session_id + 1) is other

    def test_end_unknown(self, store):
        with pytest.raises(NotFoundError):
            asyncio.run(SessionService(store).end_session(404))


class TestBoard:
    """Tests for the per-client board."""

    def test_board_shows_substituted_exercise(self, trap_bar_floor, engine):
        floor = trap_bar_floor
        alex = floor.client("Alex", [(floor.trap_bar_deadlift, 3, 5, 90)])
        sam = floor.client("Sam", [(floor.trap_bar_deadlift, 3, 5, 90)])
        session_id, states = floor.session(alex, sam)
        asyncio.run(engine.start(states[0].id))
        asyncio.run(engine.start(states[1].id))

        rows = asyncio.run(SessionService(floor.store).board(session_id))

        assert [r.client_name for r in rows] == ["Alex", "Sam"]
        assert rows[0].exercise_name == "Trap Bar Deadlift"
        assert rows[0].equipment_in_use == ["Trap Bar"]
        assert rows[1].exercise_name == "Glute Bridge"
        assert rows[1].to_dict()["status"] == "active"
        assert rows[1].total_sets == 3
