"""Training session and per-client session state models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from ..errors import MalformedRecordError


class SessionStatus(str, Enum):
    """Session lifecycle status."""

    ACTIVE = "active"
    COMPLETED = "completed"


class ClientStatus(str, Enum):
    """Where a client is within their program."""

    READY = "ready"
    ACTIVE = "active"
    RESTING = "resting"
    WAITING = "waiting"
    COMPLETE = "complete"


@dataclass
class Session:
    """One timed small-group training occurrence."""

    started_at: datetime
    duration_minutes: int = 60
    coach_name: str = "Coach"
    status: SessionStatus = SessionStatus.ACTIVE
    id: int | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "started_at": self.started_at.isoformat(),
            "duration_minutes": self.duration_minutes,
            "coach_name": self.coach_name,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: dict, id: int | None = None) -> "Session":
        """Create from dictionary."""
        try:
            return cls(
                id=id,
                started_at=datetime.fromisoformat(data["started_at"]),
                duration_minutes=data.get("duration_minutes", 60),
                coach_name=data.get("coach_name", "Coach"),
                status=SessionStatus(data.get("status", "active")),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedRecordError(f"Invalid session record {data!r}: {e}") from e

    def get_status_display(self) -> str:
        """Get a human-readable status string."""
        status_map = {
            SessionStatus.ACTIVE: "In Progress",
            SessionStatus.COMPLETED: "Completed",
        }
        return status_map.get(self.status, self.status.value)


@dataclass
class SessionState:
    """Mutable progress record for one client within one session.

    Only the session state machine mutates these rows. ``current_set`` is
    1-based. ``active_exercise_id`` is the exercise actually being performed,
    which differs from the program entry after a substitution.
    ``pending_exercise_index`` is the program position a waiting client is
    blocked on.
    """

    session_id: int
    client_id: int
    program_id: int
    current_exercise_index: int = 0
    current_set: int = 1
    status: ClientStatus = ClientStatus.READY
    equipment_in_use: list[str] = field(default_factory=list)
    rest_remaining_seconds: int = 0
    last_rpe: int | None = None
    active_exercise_id: int | None = None
    pending_exercise_index: int | None = None
    id: int | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "session_id": self.session_id,
            "client_id": self.client_id,
            "program_id": self.program_id,
            "current_exercise_index": self.current_exercise_index,
            "current_set": self.current_set,
            "status": self.status.value,
            "equipment_in_use": list(self.equipment_in_use),
            "rest_remaining_seconds": self.rest_remaining_seconds,
            "last_rpe": self.last_rpe,
            "active_exercise_id": self.active_exercise_id,
            "pending_exercise_index": self.pending_exercise_index,
        }

    @classmethod
    def from_dict(
        cls, data: dict, id: int | None = None, updated_at: datetime | None = None
    ) -> "SessionState":
        """Create from dictionary, rejecting malformed shapes."""
        try:
            status = ClientStatus(data.get("status", "ready"))
            equipment = data.get("equipment_in_use") or []
            state = cls(
                id=id,
                session_id=int(data["session_id"]),
                client_id=int(data["client_id"]),
                program_id=int(data["program_id"]),
                current_exercise_index=int(data.get("current_exercise_index", 0)),
                current_set=int(data.get("current_set", 1)),
                status=status,
                equipment_in_use=equipment,
                rest_remaining_seconds=int(data.get("rest_remaining_seconds") or 0),
                last_rpe=data.get("last_rpe"),
                active_exercise_id=data.get("active_exercise_id"),
                pending_exercise_index=data.get("pending_exercise_index"),
                updated_at=updated_at,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedRecordError(f"Invalid session state record {data!r}: {e}") from e

        if not isinstance(equipment, list) or not all(isinstance(eq, str) for eq in equipment):
            raise MalformedRecordError(
                f"Session state {id} has malformed equipment_in_use {equipment!r}"
            )
        return state

    def get_status_display(self) -> str:
        """Get a human-readable status string."""
        status_map = {
            ClientStatus.READY: "Ready",
            ClientStatus.ACTIVE: "Working",
            ClientStatus.RESTING: "Resting",
            ClientStatus.WAITING: "Waiting for equipment",
            ClientStatus.COMPLETE: "Complete",
        }
        return status_map.get(self.status, self.status.value)
