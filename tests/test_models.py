"""Tests for data models."""

import pytest

from sgpt_floor.errors import MalformedRecordError
from sgpt_floor.models.equipment import DEFAULT_FACILITY, EquipmentItem, EquipmentUsage
from sgpt_floor.models.exercises import COMMON_EXERCISES, Exercise, MovementPattern
from sgpt_floor.models.program import Program, ProgramEntry
from sgpt_floor.models.session import ClientStatus, SessionState


class TestExercise:
    """Tests for Exercise model."""

    def test_exercise_to_dict(self):
        """Test exercise serialization."""
        exercise = Exercise(
            name="Trap Bar Deadlift",
            movement_pattern=MovementPattern.HINGE,
            required_equipment=["Trap Bar", "Lifting Platform"],
            substitutes=["Kettlebell Swing"],
        )
        data = exercise.to_dict()

        assert data["name"] == "Trap Bar Deadlift"
        assert data["movement_pattern"] == "hinge"
        assert data["required_equipment"] == ["Trap Bar", "Lifting Platform"]
        assert data["substitutes"] == ["Kettlebell Swing"]

    def test_exercise_from_dict(self):
        """Test exercise deserialization."""
        exercise = Exercise.from_dict(
            {"name": "Goblet Squat", "movement_pattern": "squat", "required_equipment": ["Kettlebell 20kg"]},
            id=7,
        )

        assert exercise.id == 7
        assert exercise.movement_pattern == MovementPattern.SQUAT
        assert exercise.substitutes == []

    def test_duplicate_equipment_collapses(self):
        """Required equipment is a set."""
        exercise = Exercise("Row", MovementPattern.PULL_HORIZONTAL, ["Flat Bench", "Flat Bench"])
        assert exercise.required_equipment == ["Flat Bench"]

    def test_bodyweight(self):
        assert Exercise("Push Up", MovementPattern.PUSH_HORIZONTAL).is_bodyweight
        assert not Exercise("Bench Press", MovementPattern.PUSH_HORIZONTAL, ["Flat Bench"]).is_bodyweight

    @pytest.mark.parametrize(
        "data",
        [
            {"movement_pattern": "hinge"},
            {"name": "Mystery", "movement_pattern": "cartwheel"},
            {"name": "Bad Kit", "movement_pattern": "hinge", "required_equipment": "Trap Bar"},
        ],
    )
    def test_malformed_exercise_rejected(self, data):
        with pytest.raises(MalformedRecordError):
            Exercise.from_dict(data)

    def test_common_exercises_reference_facility_equipment(self):
        """Every library exercise uses equipment the standard floor has."""
        facility = {item.name for item in DEFAULT_FACILITY}
        for exercise in COMMON_EXERCISES:
            assert set(exercise.required_equipment) <= facility, exercise.name

    def test_common_exercises_declare_known_substitutes(self):
        """Declared substitutes exist in the library and share the pattern."""
        by_name = {e.name: e for e in COMMON_EXERCISES}
        for exercise in COMMON_EXERCISES:
            for name in exercise.substitutes:
                assert name in by_name, f"{exercise.name} -> {name}"
                assert by_name[name].movement_pattern == exercise.movement_pattern


class TestEquipment:
    """Tests for equipment models."""

    def test_default_facility(self):
        quantities = {item.name: item.quantity for item in DEFAULT_FACILITY}
        assert quantities["Olympic Barbell"] == 2
        assert quantities["Trap Bar"] == 1
        assert quantities["Squat Rack"] == 1

    def test_negative_quantity_rejected(self):
        with pytest.raises(MalformedRecordError):
            EquipmentItem.from_dict({"name": "Trap Bar", "quantity": -1})

    def test_usage(self):
        usage = EquipmentUsage(name="Olympic Barbell", total=2, in_use=1)
        assert usage.available == 1
        assert usage.is_available

        full = EquipmentUsage(name="Trap Bar", total=1, in_use=1)
        assert full.available == 0
        assert not full.is_available


class TestProgram:
    """Tests for Program model."""

    def test_entry_at(self):
        program = Program(
            client_id=1,
            name="Strength A",
            entries=[ProgramEntry(exercise_id=1, sets=3, reps=5), ProgramEntry(exercise_id=2, sets=2, reps="8-10")],
        )

        assert len(program) == 2
        assert program.entry_at(1).reps == "8-10"
        assert program.entry_at(2) is None
        assert program.entry_at(-1) is None

    def test_program_round_trip(self):
        program = Program(client_id=3, name="A", entries=[ProgramEntry(exercise_id=4, sets=3, reps=5, rest_seconds=90)])
        restored = Program.from_dict(program.to_dict(), id=9)

        assert restored.id == 9
        assert restored.entries[0].rest_seconds == 90

    @pytest.mark.parametrize(
        "entry",
        [
            {"exercise_id": 1, "sets": 0, "reps": 5},
            {"exercise_id": "1", "sets": 3, "reps": 5},
            {"exercise_id": 1, "sets": 3, "reps": 5, "rest_seconds": -10},
        ],
    )
    def test_malformed_entry_rejected(self, entry):
        with pytest.raises(MalformedRecordError):
            ProgramEntry.from_dict(entry)


class TestSessionState:
    """Tests for SessionState model."""

    def test_defaults(self):
        state = SessionState(session_id=1, client_id=2, program_id=3)

        assert state.status == ClientStatus.READY
        assert state.current_exercise_index == 0
        assert state.current_set == 1
        assert state.equipment_in_use == []
        assert state.active_exercise_id is None

    def test_from_dict(self):
        state = SessionState.from_dict(
            {
                "session_id": 1,
                "client_id": 2,
                "program_id": 3,
                "status": "active",
                "equipment_in_use": ["Trap Bar"],
            },
            id=5,
        )

        assert state.id == 5
        assert state.status == ClientStatus.ACTIVE
        assert state.equipment_in_use == ["Trap Bar"]
        assert state.get_status_display() == "Working"

    @pytest.mark.parametrize(
        "changes",
        [
            {"status": "sleeping"},
            {"equipment_in_use": "Trap Bar"},
            {"equipment_in_use": [1, 2]},
        ],
    )
    def test_malformed_state_rejected(self, changes):
        data = {"session_id": 1, "client_id": 2, "program_id": 3, **changes}
        with pytest.raises(MalformedRecordError):
            SessionState.from_dict(data)
