"""Pytest configuration and fixtures."""

import asyncio
import tempfile
from pathlib import Path
from types import SimpleNamespace

import pytest

from sgpt_floor.config import Settings
from sgpt_floor.db import Store, init_db
from sgpt_floor.engine import FloorEngine
from sgpt_floor.models import (
    Client,
    EquipmentItem,
    Exercise,
    MovementPattern,
    Program,
    ProgramEntry,
    SessionState,
)
from sgpt_floor.services import SessionService


class Floor:
    """Synchronous helpers for arranging a small training floor in tests."""

    def __init__(self, store: Store):
        self.store = store

    def run(self, coro):
        return asyncio.run(coro)

    def equipment(self, name: str, quantity: int = 1) -> None:
        self.run(self.store.equipment.upsert(EquipmentItem(name=name, quantity=quantity)))

    def exercise(
        self,
        name: str,
        pattern: MovementPattern,
        equipment: list[str] | None = None,
        substitutes: list[str] | None = None,
    ) -> Exercise:
        exercise = Exercise(
            name=name,
            movement_pattern=pattern,
            required_equipment=equipment or [],
            substitutes=substitutes or [],
        )
        exercise.id = self.run(self.store.exercises.add(exercise))
        return exercise

    def client(self, name: str, entries: list[tuple]) -> int:
        """Add a client with a program of (exercise, sets, reps, rest_seconds) entries."""
        client_id = self.run(self.store.clients.create(Client(name=name)))
        program = Program(
            client_id=client_id,
            name=f"{name} program",
            entries=[
                ProgramEntry(exercise_id=ex.id, sets=sets, reps=reps, rest_seconds=rest)
                for ex, sets, reps, rest in entries
            ],
        )
        self.run(self.store.programs.create(program))
        return client_id

    def session(self, *client_ids: int) -> tuple[int, list[SessionState]]:
        session, states = self.run(SessionService(self.store).start_session(list(client_ids)))
        return session.id, states

    def state(self, state_id: int) -> SessionState:
        return self.run(self.store.states.get(state_id))

    def put(self, state_id: int, **changes) -> SessionState:
        """Overwrite fields of a stored session state."""
        state = self.state(state_id)
        for key, value in changes.items():
            setattr(state, key, value)
        self.run(self.store.states.update(state))
        return state

    def decisions(self, session_id: int | None = None):
        return self.run(self.store.decisions.list_recent(limit=100, session_id=session_id))

    def alerts(self, session_id: int | None = None):
        return self.run(self.store.alerts.list_recent(limit=100, session_id=session_id))


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "sgpt_floor.db"


@pytest.fixture
def store(temp_db_path):
    """An initialized, empty store."""
    asyncio.run(init_db(temp_db_path))
    return Store(temp_db_path)


@pytest.fixture
def floor(store):
    return Floor(store)


@pytest.fixture
def settings(temp_db_path):
    return Settings(data_dir=temp_db_path.parent)


@pytest.fixture
def engine(store, settings):
    return FloorEngine(store, settings)


@pytest.fixture
def trap_bar_floor(floor):
    """One Trap Bar, a Trap Bar deadlift with a bodyweight hinge alternative,
    and a Trap Bar carry whose movement pattern has no other exercise."""
    floor.equipment("Trap Bar", 1)
    floor.equipment("Kettlebell 24kg", 2)
    floor.trap_bar_deadlift = floor.exercise(
        "Trap Bar Deadlift", MovementPattern.HINGE, ["Trap Bar"], ["Glute Bridge"]
    )
    floor.glute_bridge = floor.exercise("Glute Bridge", MovementPattern.HINGE)
    floor.trap_bar_carry = floor.exercise("Trap Bar Carry", MovementPattern.CARRY, ["Trap Bar"])
    floor.halo = floor.exercise("Kettlebell Halo", MovementPattern.CORE, ["Kettlebell 24kg"])
    return floor


class StubCompletions:
    """Stands in for ``client.chat.completions``: records requests, returns a canned reply."""

    def __init__(self, reply="Switch to DB Bench - rack is in use.", error=None):
        self.reply = reply
        self.error = error
        self.requests = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def stub_openai():
    """Factory for an OpenAI-shaped async client and its recorded completions."""

    def make(**kwargs):
        completions = StubCompletions(**kwargs)
        return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions

    return make
