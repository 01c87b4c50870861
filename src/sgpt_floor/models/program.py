"""Client programs: ordered exercise prescriptions."""

from dataclasses import dataclass, field
from datetime import datetime

from ..errors import MalformedRecordError


@dataclass
class ProgramEntry:
    """One prescribed exercise within a program."""

    exercise_id: int
    sets: int
    reps: int | str  # int or a range such as "8-10"
    rest_seconds: int = 60

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "exercise_id": self.exercise_id,
            "sets": self.sets,
            "reps": self.reps,
            "rest_seconds": self.rest_seconds,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProgramEntry":
        """Create from dictionary, rejecting malformed prescriptions."""
        if not isinstance(data, dict):
            raise MalformedRecordError(f"Program entry must be an object: {data!r}")
        exercise_id = data.get("exercise_id")
        sets = data.get("sets")
        reps = data.get("reps")
        rest_seconds = data.get("rest_seconds", 60)

        if not isinstance(exercise_id, int) or isinstance(exercise_id, bool):
            raise MalformedRecordError(f"Program entry has invalid exercise_id: {data!r}")
        if not isinstance(sets, int) or isinstance(sets, bool) or sets < 1:
            raise MalformedRecordError(f"Program entry has invalid sets: {data!r}")
        if not isinstance(reps, (int, str)) or isinstance(reps, bool):
            raise MalformedRecordError(f"Program entry has invalid reps: {data!r}")
        if not isinstance(rest_seconds, int) or isinstance(rest_seconds, bool) or rest_seconds < 0:
            raise MalformedRecordError(f"Program entry has invalid rest_seconds: {data!r}")

        return cls(
            exercise_id=exercise_id,
            sets=sets,
            reps=reps,
            rest_seconds=rest_seconds,
        )


@dataclass
class Program:
    """An ordered sequence of program entries assigned to one client.

    Authored upstream; treated as immutable once a session starts.
    """

    client_id: int
    name: str
    entries: list[ProgramEntry] = field(default_factory=list)
    id: int | None = None
    created_at: datetime | None = None

    def __len__(self) -> int:
        return len(self.entries)

    def entry_at(self, index: int) -> ProgramEntry | None:
        """Get the entry at ``index``, or None when out of range."""
        if 0 <= index < len(self.entries):
            return self.entries[index]
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "client_id": self.client_id,
            "name": self.name,
            "entries": [e.to_dict() for e in self.entries],
        }

    @classmethod
    def from_dict(
        cls,
        data: dict,
        id: int | None = None,
        created_at: datetime | None = None,
    ) -> "Program":
        """Create from dictionary."""
        entries = data.get("entries")
        if not isinstance(entries, list):
            raise MalformedRecordError(f"Program entries must be a list: {data!r}")
        if "client_id" not in data or "name" not in data:
            raise MalformedRecordError(f"Program is missing client_id or name: {data!r}")
        return cls(
            id=id,
            client_id=data["client_id"],
            name=data["name"],
            entries=[ProgramEntry.from_dict(e) for e in entries],
            created_at=created_at,
        )
