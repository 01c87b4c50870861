"""Substitution resolver for equipment conflicts."""

import logging

from ..db.store import Store
from ..errors import NotFoundError
from ..models.exercises import Exercise
from .ledger import EquipmentLedger

logger = logging.getLogger(__name__)


class SubstitutionResolver:
    """Finds an available exercise equivalent to a blocked one.

    Candidates are the other exercises sharing the blocked exercise's
    movement pattern, in ascending ID order, so an identical ledger snapshot
    always yields the same answer. With ``prefer_declared_substitutes`` the
    exercise's declared substitute list is tried first, in declared order.
    """

    def __init__(
        self,
        store: Store,
        ledger: EquipmentLedger,
        prefer_declared_substitutes: bool = False,
    ):
        self.store = store
        self.ledger = ledger
        self.prefer_declared_substitutes = prefer_declared_substitutes

    async def candidates(self, source: Exercise) -> list[Exercise]:
        """Ordered candidate list for a source exercise."""
        ordered: list[Exercise] = []
        seen = {source.id}

        if self.prefer_declared_substitutes:
            for name in source.substitutes:
                declared = await self.store.exercises.get_by_name(name)
                if declared is None:
                    logger.warning(
                        "Declared substitute %r for %r is not in the library",
                        name,
                        source.name,
                    )
                    continue
                if declared.id not in seen:
                    ordered.append(declared)
                    seen.add(declared.id)

        group = await self.store.exercises.get_by_movement_pattern(source.movement_pattern)
        for exercise in sorted(group, key=lambda e: e.id):
            if exercise.id not in seen:
                ordered.append(exercise)
                seen.add(exercise.id)

        return ordered

    async def find_alternative(
        self,
        exercise_id: int,
        session_id: int,
        exclude_state_id: int | None = None,
    ) -> Exercise | None:
        """Return the first candidate whose equipment is free, or None.

        Bodyweight candidates are accepted without a ledger check.

        Raises:
            NotFoundError: If the source exercise does not exist
        """
        source = await self.store.exercises.get(exercise_id)
        if source is None:
            raise NotFoundError("exercise", exercise_id)

        for candidate in await self.candidates(source):
            if candidate.is_bodyweight:
                return candidate
            availability = await self.ledger.check_availability(
                session_id,
                candidate.required_equipment,
                exclude_state_id=exclude_state_id,
            )
            if availability.available:
                return candidate

        logger.info(
            "No available substitute for %r in session %s", source.name, session_id
        )
        return None
