"""Data models for sgpt-floor."""

from .audit import Alert, AlertType, DecisionRecord, TriggerType
from .client import Client
from .equipment import Availability, EquipmentItem, EquipmentUsage
from .exercises import Exercise, MovementPattern
from .program import Program, ProgramEntry
from .session import ClientStatus, Session, SessionState, SessionStatus

__all__ = [
    "Alert",
    "AlertType",
    "Availability",
    "Client",
    "ClientStatus",
    "DecisionRecord",
    "EquipmentItem",
    "EquipmentUsage",
    "Exercise",
    "MovementPattern",
    "Program",
    "ProgramEntry",
    "Session",
    "SessionState",
    "SessionStatus",
    "TriggerType",
]
