"""Decision log and alert records (append-only)."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class TriggerType(str, Enum):
    """What prompted a coaching decision."""

    EQUIPMENT_CONFLICT = "equipment_conflict"
    MANUAL = "manual"
    HIGH_RPE = "high_rpe"
    PAIN = "pain"


class AlertType(str, Enum):
    """Operator-facing alert categories."""

    EQUIPMENT_CONFLICT = "equipment_conflict"
    HIGH_RPE = "high_rpe"
    PAIN = "pain"


@dataclass(frozen=True)
class DecisionRecord:
    """Audit entry for an automatic or manual coaching decision."""

    trigger_type: TriggerType
    scenario: str
    decision: str
    session_id: int | None = None
    client_id: int | None = None
    requires_approval: bool = False
    approved: bool = True
    id: int | None = None
    created_at: datetime | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "session_id": self.session_id,
            "client_id": self.client_id,
            "trigger_type": self.trigger_type.value,
            "scenario": self.scenario,
            "decision": self.decision,
            "requires_approval": self.requires_approval,
            "approved": self.approved,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class Alert:
    """Something the operator should see; may require their action."""

    alert_type: AlertType
    message: str
    session_id: int | None = None
    client_id: int | None = None
    requires_action: bool = False
    id: int | None = None
    created_at: datetime | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "session_id": self.session_id,
            "client_id": self.client_id,
            "alert_type": self.alert_type.value,
            "message": self.message,
            "requires_action": self.requires_action,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
