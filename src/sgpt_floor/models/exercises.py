"""Exercise definitions and the default exercise library."""

from dataclasses import dataclass, field
from enum import Enum

from ..errors import MalformedRecordError


class MovementPattern(str, Enum):
    """Coarse movement categories used to find equivalent substitutes."""

    SQUAT = "squat"
    HINGE = "hinge"
    LUNGE = "lunge"
    PUSH_HORIZONTAL = "push_horizontal"
    PUSH_VERTICAL = "push_vertical"
    PULL_HORIZONTAL = "pull_horizontal"
    PULL_VERTICAL = "pull_vertical"
    CARRY = "carry"
    CORE = "core"
    ISOLATION = "isolation"


@dataclass
class Exercise:
    """An exercise and the facility equipment it occupies.

    ``required_equipment`` names equipment items (one unit each); an empty
    list means bodyweight. ``substitutes`` is the declared, priority-ordered
    list of alternative exercise names.
    """

    name: str
    movement_pattern: MovementPattern
    required_equipment: list[str] = field(default_factory=list)
    substitutes: list[str] = field(default_factory=list)
    id: int | None = None

    def __post_init__(self):
        # Equipment is a set; keep first-seen order for display
        self.required_equipment = list(dict.fromkeys(self.required_equipment))

    @property
    def is_bodyweight(self) -> bool:
        return not self.required_equipment

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "name": self.name,
            "movement_pattern": self.movement_pattern.value,
            "required_equipment": list(self.required_equipment),
            "substitutes": list(self.substitutes),
        }

    @classmethod
    def from_dict(cls, data: dict, id: int | None = None) -> "Exercise":
        """Create from dictionary, rejecting malformed shapes."""
        try:
            name = data["name"]
            pattern = MovementPattern(data["movement_pattern"])
            equipment = data.get("required_equipment") or []
            substitutes = data.get("substitutes") or []
        except (KeyError, ValueError) as e:
            raise MalformedRecordError(f"Invalid exercise record {data!r}: {e}") from e

        if not isinstance(name, str) or not name:
            raise MalformedRecordError(f"Exercise name must be a non-empty string: {data!r}")
        if not isinstance(equipment, list) or not all(isinstance(eq, str) for eq in equipment):
            raise MalformedRecordError(f"Exercise {name!r} has malformed required_equipment")
        if not isinstance(substitutes, list) or not all(isinstance(s, str) for s in substitutes):
            raise MalformedRecordError(f"Exercise {name!r} has malformed substitutes")

        return cls(
            id=id,
            name=name,
            movement_pattern=pattern,
            required_equipment=equipment,
            substitutes=substitutes,
        )


# Default library for the standard small-group floor.
# Equipment names must match DEFAULT_FACILITY in models/equipment.py.
COMMON_EXERCISES: list[Exercise] = [
    # Hinge
    Exercise(
        name="Trap Bar Deadlift",
        movement_pattern=MovementPattern.HINGE,
        required_equipment=["Trap Bar", "Lifting Platform"],
        substitutes=["Kettlebell Swing", "Romanian Deadlift"],
    ),
    Exercise(
        name="Romanian Deadlift",
        movement_pattern=MovementPattern.HINGE,
        required_equipment=["Olympic Barbell"],
        substitutes=["Kettlebell Swing"],
    ),
    Exercise(
        name="Kettlebell Swing",
        movement_pattern=MovementPattern.HINGE,
        required_equipment=["Kettlebell 24kg"],
    ),
    Exercise(
        name="Glute Bridge",
        movement_pattern=MovementPattern.HINGE,
    ),
    # Squat
    Exercise(
        name="Back Squat",
        movement_pattern=MovementPattern.SQUAT,
        required_equipment=["Olympic Barbell", "Squat Rack"],
        substitutes=["Goblet Squat"],
    ),
    Exercise(
        name="Goblet Squat",
        movement_pattern=MovementPattern.SQUAT,
        required_equipment=["Kettlebell 20kg"],
    ),
    Exercise(
        name="Landmine Squat",
        movement_pattern=MovementPattern.SQUAT,
        required_equipment=["Landmine", "Olympic Barbell"],
    ),
    Exercise(
        name="Bodyweight Squat",
        movement_pattern=MovementPattern.SQUAT,
    ),
    # Lunge
    Exercise(
        name="Bulgarian Split Squat",
        movement_pattern=MovementPattern.LUNGE,
        required_equipment=["Dumbbells 12.5kg", "Flat Bench"],
        substitutes=["Reverse Lunge"],
    ),
    Exercise(
        name="Walking Lunge",
        movement_pattern=MovementPattern.LUNGE,
        required_equipment=["Dumbbells 10kg"],
    ),
    Exercise(
        name="Reverse Lunge",
        movement_pattern=MovementPattern.LUNGE,
    ),
    # Horizontal push
    Exercise(
        name="Bench Press",
        movement_pattern=MovementPattern.PUSH_HORIZONTAL,
        required_equipment=["Olympic Barbell", "Flat Bench"],
        substitutes=["Dumbbell Bench Press", "Push Up"],
    ),
    Exercise(
        name="Dumbbell Bench Press",
        movement_pattern=MovementPattern.PUSH_HORIZONTAL,
        required_equipment=["Dumbbells 17.5kg", "Flat Bench"],
    ),
    Exercise(
        name="Push Up",
        movement_pattern=MovementPattern.PUSH_HORIZONTAL,
    ),
    # Vertical push
    Exercise(
        name="Landmine Press",
        movement_pattern=MovementPattern.PUSH_VERTICAL,
        required_equipment=["Landmine", "Olympic Barbell"],
        substitutes=["Dumbbell Shoulder Press"],
    ),
    Exercise(
        name="Dumbbell Shoulder Press",
        movement_pattern=MovementPattern.PUSH_VERTICAL,
        required_equipment=["Dumbbells 15kg"],
    ),
    Exercise(
        name="Pike Push Up",
        movement_pattern=MovementPattern.PUSH_VERTICAL,
    ),
    # Horizontal pull
    Exercise(
        name="Dumbbell Row",
        movement_pattern=MovementPattern.PULL_HORIZONTAL,
        required_equipment=["Dumbbells 17.5kg", "Flat Bench"],
        substitutes=["Seated Cable Row", "Inverted Row"],
    ),
    Exercise(
        name="Seated Cable Row",
        movement_pattern=MovementPattern.PULL_HORIZONTAL,
        required_equipment=["Cable Station"],
    ),
    Exercise(
        name="Inverted Row",
        movement_pattern=MovementPattern.PULL_HORIZONTAL,
        required_equipment=["Squat Rack", "Olympic Barbell"],
    ),
    # Vertical pull
    Exercise(
        name="Lat Pulldown",
        movement_pattern=MovementPattern.PULL_VERTICAL,
        required_equipment=["Cable Station"],
        substitutes=["Band Pulldown"],
    ),
    Exercise(
        name="Band Pulldown",
        movement_pattern=MovementPattern.PULL_VERTICAL,
        required_equipment=["Resistance Band"],
    ),
    # Carry
    Exercise(
        name="Farmer Carry",
        movement_pattern=MovementPattern.CARRY,
        required_equipment=["Kettlebell 24kg"],
        substitutes=["Suitcase Carry"],
    ),
    Exercise(
        name="Suitcase Carry",
        movement_pattern=MovementPattern.CARRY,
        required_equipment=["Kettlebell 16kg"],
    ),
    # Core
    Exercise(
        name="Pallof Press",
        movement_pattern=MovementPattern.CORE,
        required_equipment=["Cable Station"],
        substitutes=["Dead Bug"],
    ),
    Exercise(
        name="Dead Bug",
        movement_pattern=MovementPattern.CORE,
    ),
    Exercise(
        name="Plank",
        movement_pattern=MovementPattern.CORE,
    ),
]
