"""Facility catalog and program loaders from JSON files.

Catalog file shape::

    {
      "equipment": [{"name": "Trap Bar", "quantity": 1}],
      "exercises": [
        {"name": "Trap Bar Deadlift", "movement_pattern": "hinge",
         "required_equipment": ["Trap Bar"], "substitutes": ["Kettlebell Swing"]}
      ]
    }

Program file shape (exercises referenced by name)::

    {"name": "Strength A", "entries": [
        {"exercise": "Trap Bar Deadlift", "sets": 3, "reps": 5, "rest_seconds": 120}
    ]}
"""

import json
import logging
from pathlib import Path

import aiosqlite

from ..db.store import Store
from ..errors import MalformedRecordError, NotFoundError
from ..models.equipment import EquipmentItem
from ..models.exercises import Exercise
from ..models.program import Program, ProgramEntry

logger = logging.getLogger(__name__)


def load_catalog(path: Path) -> tuple[list[EquipmentItem], list[Exercise]]:
    """Load equipment and exercises from a catalog JSON file.

    Invalid entries are skipped with a warning.
    """
    with open(path) as f:
        data = json.load(f)

    equipment = []
    for item_data in data.get("equipment", []):
        try:
            equipment.append(EquipmentItem.from_dict(item_data))
        except MalformedRecordError as e:
            logger.warning("Skipping invalid equipment entry: %s", e)

    exercises = []
    for ex_data in data.get("exercises", []):
        try:
            exercises.append(Exercise.from_dict(ex_data))
        except MalformedRecordError as e:
            logger.warning(
                "Skipping invalid exercise %s: %s", ex_data.get("name", "unknown"), e
            )

    return equipment, exercises


async def import_catalog(store: Store, path: Path) -> tuple[int, int]:
    """Upsert a catalog file into the store.

    Returns:
        Number of (equipment items, exercises) written
    """
    equipment, exercises = load_catalog(path)

    for item in equipment:
        await store.equipment.upsert(item)

    count = 0
    for exercise in exercises:
        try:
            await store.exercises.add(exercise)
            count += 1
        except aiosqlite.IntegrityError:
            logger.warning("Exercise %r already exists, skipping", exercise.name)

    return len(equipment), count


async def load_program_file(store: Store, path: Path, client_id: int) -> Program:
    """Build a program for a client from a program JSON file.

    Raises:
        NotFoundError: If the client or a referenced exercise is unknown
        MalformedRecordError: If an entry is malformed
    """
    if await store.clients.get(client_id) is None:
        raise NotFoundError("client", client_id)

    with open(path) as f:
        data = json.load(f)

    entries = []
    for raw in data.get("entries", []):
        name = raw.get("exercise") if isinstance(raw, dict) else None
        if not name:
            raise MalformedRecordError(f"Program entry is missing an exercise name: {raw!r}")
        exercise = await store.exercises.get_by_name(name)
        if exercise is None:
            raise NotFoundError("exercise", name)
        entries.append(
            ProgramEntry.from_dict(
                {
                    "exercise_id": exercise.id,
                    "sets": raw.get("sets"),
                    "reps": raw.get("reps"),
                    "rest_seconds": raw.get("rest_seconds", 60),
                }
            )
        )

    if not entries:
        raise MalformedRecordError(f"Program file {path} has no entries")

    return Program(
        client_id=client_id,
        name=data.get("name") or Path(path).stem,
        entries=entries,
    )
