"""Tests for the substitution resolver."""

import asyncio

import pytest

from sgpt_floor.engine import EquipmentLedger, SubstitutionResolver
from sgpt_floor.errors import NotFoundError
from sgpt_floor.models import ClientStatus, MovementPattern


@pytest.fixture
def hinge_floor(floor):
    """A hinge group with equipment and bodyweight alternatives, one session."""
    floor.equipment("Trap Bar", 1)
    floor.equipment("Olympic Barbell", 1)
    floor.equipment("Kettlebell 24kg", 1)
    floor.trap_bar_deadlift = floor.exercise(
        "Trap Bar Deadlift",
        MovementPattern.HINGE,
        ["Trap Bar"],
        ["Kettlebell Swing", "Romanian Deadlift"],
    )
    floor.rdl = floor.exercise("Romanian Deadlift", MovementPattern.HINGE, ["Olympic Barbell"])
    floor.swing = floor.exercise("Kettlebell Swing", MovementPattern.HINGE, ["Kettlebell 24kg"])
    floor.bridge = floor.exercise("Glute Bridge", MovementPattern.HINGE)
    floor.plank = floor.exercise("Plank", MovementPattern.CORE)

    alex = floor.client("Alex", [(floor.trap_bar_deadlift, 3, 5, 90)])
    sam = floor.client("Sam", [(floor.trap_bar_deadlift, 3, 5, 90)])
    floor.session_id, floor.states = floor.session(alex, sam)
    return floor


def _resolver(floor, **kwargs) -> SubstitutionResolver:
    return SubstitutionResolver(floor.store, EquipmentLedger(floor.store), **kwargs)


class TestFindAlternative:
    """Tests for SubstitutionResolver.find_alternative."""

    def test_first_available_by_id(self, hinge_floor):
        """Pattern scan runs in ascending ID order."""
        resolver = _resolver(hinge_floor)

        found = asyncio.run(
            resolver.find_alternative(hinge_floor.trap_bar_deadlift.id, hinge_floor.session_id)
        )

        assert found.name == "Romanian Deadlift"

    def test_skips_occupied_candidates(self, hinge_floor):
        hinge_floor.put(
            hinge_floor.states[0].id,
            status=ClientStatus.ACTIVE,
            equipment_in_use=["Olympic Barbell"],
        )
        resolver = _resolver(hinge_floor)

        found = asyncio.run(
            resolver.find_alternative(hinge_floor.trap_bar_deadlift.id, hinge_floor.session_id)
        )

        assert found.name == "Kettlebell Swing"

    def test_bodyweight_accepted_when_everything_is_taken(self, hinge_floor):
        hinge_floor.put(
            hinge_floor.states[0].id,
            status=ClientStatus.ACTIVE,
            equipment_in_use=["Olympic Barbell", "Kettlebell 24kg"],
        )
        resolver = _resolver(hinge_floor)

        found = asyncio.run(
            resolver.find_alternative(hinge_floor.trap_bar_deadlift.id, hinge_floor.session_id)
        )

        assert found.name == "Glute Bridge"
        assert found.required_equipment == []

    def test_never_returns_source_or_other_pattern(self, hinge_floor):
        resolver = _resolver(hinge_floor)

        candidates = asyncio.run(resolver.candidates(hinge_floor.trap_bar_deadlift))
        names = [c.name for c in candidates]

        assert "Trap Bar Deadlift" not in names
        assert "Plank" not in names
        assert names == ["Romanian Deadlift", "Kettlebell Swing", "Glute Bridge"]

    def test_none_when_group_empty(self, floor):
        floor.equipment("Trap Bar", 1)
        carry = floor.exercise("Trap Bar Carry", MovementPattern.CARRY, ["Trap Bar"])
        client = floor.client("Alex", [(carry, 2, 1, 60)])
        session_id, _ = floor.session(client)

        found = asyncio.run(_resolver(floor).find_alternative(carry.id, session_id))

        assert found is None

    def test_unknown_exercise(self, hinge_floor):
        with pytest.raises(NotFoundError):
            asyncio.run(_resolver(hinge_floor).find_alternative(9999, hinge_floor.session_id))

    def test_deterministic(self, hinge_floor):
        """Identical ledger state yields identical answers."""
        hinge_floor.put(
            hinge_floor.states[0].id,
            status=ClientStatus.ACTIVE,
            equipment_in_use=["Olympic Barbell"],
        )
        resolver = _resolver(hinge_floor)

        answers = {
            asyncio.run(
                resolver.find_alternative(hinge_floor.trap_bar_deadlift.id, hinge_floor.session_id)
            ).id
            for _ in range(5)
        }

        assert answers == {hinge_floor.swing.id}

    def test_exclude_own_state(self, hinge_floor):
        """A client's own holdings do not block their substitute."""
        hinge_floor.put(
            hinge_floor.states[0].id,
            status=ClientStatus.ACTIVE,
            equipment_in_use=["Olympic Barbell"],
        )
        resolver = _resolver(hinge_floor)

        found = asyncio.run(
            resolver.find_alternative(
                hinge_floor.trap_bar_deadlift.id,
                hinge_floor.session_id,
                exclude_state_id=hinge_floor.states[0].id,
            )
        )

        assert found.name == "Romanian Deadlift"


class TestDeclaredSubstitutes:
    """Declared substitutes are tried first only when enabled."""

    def test_declared_order_first(self, hinge_floor):
        resolver = _resolver(hinge_floor, prefer_declared_substitutes=True)

        candidates = asyncio.run(resolver.candidates(hinge_floor.trap_bar_deadlift))

        assert [c.name for c in candidates] == [
            "Kettlebell Swing",
            "Romanian Deadlift",
            "Glute Bridge",
        ]

    def test_declared_choice(self, hinge_floor):
        resolver = _resolver(hinge_floor, prefer_declared_substitutes=True)

        found = asyncio.run(
            resolver.find_alternative(hinge_floor.trap_bar_deadlift.id, hinge_floor.session_id)
        )

        assert found.name == "Kettlebell Swing"

    def test_missing_declared_substitute_is_skipped(self, floor, caplog):
        floor.equipment("Trap Bar", 1)
        source = floor.exercise(
            "Trap Bar Deadlift", MovementPattern.HINGE, ["Trap Bar"], ["Nordic Curl"]
        )
        floor.exercise("Glute Bridge", MovementPattern.HINGE)
        resolver = _resolver(floor, prefer_declared_substitutes=True)

        candidates = asyncio.run(resolver.candidates(source))

        assert [c.name for c in candidates] == ["Glute Bridge"]
        assert "Nordic Curl" in caplog.text
