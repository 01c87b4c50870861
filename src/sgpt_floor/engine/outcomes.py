"""Transition outcomes returned by the session state machine."""

from dataclasses import dataclass, field

from ..models.exercises import Exercise


@dataclass
class SetAdvanced:
    """Current exercise not finished; client rests before the next set."""

    next_set: int
    total_sets: int
    rest_seconds: int
    warnings: list[str] = field(default_factory=list)

    kind = "set_advanced"

    def to_dict(self) -> dict:
        return {
            "outcome": self.kind,
            "next_set": self.next_set,
            "total_sets": self.total_sets,
            "rest_seconds": self.rest_seconds,
            "warnings": self.warnings,
        }


@dataclass
class ExerciseAdvanced:
    """Moved to the next exercise; its equipment was available."""

    exercise: Exercise
    sets: int
    reps: int | str
    warnings: list[str] = field(default_factory=list)

    kind = "exercise_advanced"

    def to_dict(self) -> dict:
        return {
            "outcome": self.kind,
            "exercise": self.exercise.name,
            "exercise_id": self.exercise.id,
            "sets": self.sets,
            "reps": self.reps,
            "warnings": self.warnings,
        }


@dataclass
class Substituted:
    """Moved to the next exercise through an automatic substitution."""

    from_exercise: Exercise
    to_exercise: Exercise
    reason: str
    sets: int
    reps: int | str
    warnings: list[str] = field(default_factory=list)

    kind = "substituted"

    def to_dict(self) -> dict:
        return {
            "outcome": self.kind,
            "from": self.from_exercise.name,
            "to": self.to_exercise.name,
            "to_exercise_id": self.to_exercise.id,
            "reason": self.reason,
            "sets": self.sets,
            "reps": self.reps,
            "warnings": self.warnings,
        }


@dataclass
class Waiting:
    """Blocked on equipment with no available substitute."""

    exercise: Exercise
    conflicts: list[str]
    warnings: list[str] = field(default_factory=list)

    kind = "waiting"

    def to_dict(self) -> dict:
        return {
            "outcome": self.kind,
            "exercise": self.exercise.name,
            "exercise_id": self.exercise.id,
            "conflicts": list(self.conflicts),
            "warnings": self.warnings,
        }


@dataclass
class ProgramComplete:
    """No more exercises in the client's program."""

    warnings: list[str] = field(default_factory=list)

    kind = "program_complete"

    def to_dict(self) -> dict:
        return {"outcome": self.kind, "warnings": self.warnings}


Outcome = SetAdvanced | ExerciseAdvanced | Substituted | Waiting | ProgramComplete


@dataclass
class ExertionResult:
    """Result of an exertion report."""

    new_rest_seconds: int
    extension_seconds: int
    alert_raised: bool = False
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "new_rest_seconds": self.new_rest_seconds,
            "extension_seconds": self.extension_seconds,
            "alert_raised": self.alert_raised,
            "warnings": self.warnings,
        }
