"""Session coordination engine: equipment ledger, substitution and state machine."""

from .audit import AuditTrail
from .coordinator import FloorEngine
from .exertion import RestAdjuster
from .ledger import EquipmentLedger
from .locks import SessionLocks
from .outcomes import (
    ExertionResult,
    ExerciseAdvanced,
    Outcome,
    ProgramComplete,
    SetAdvanced,
    Substituted,
    Waiting,
)
from .state_machine import SessionStateMachine
from .substitution import SubstitutionResolver

__all__ = [
    "AuditTrail",
    "EquipmentLedger",
    "ExerciseAdvanced",
    "ExertionResult",
    "FloorEngine",
    "Outcome",
    "ProgramComplete",
    "RestAdjuster",
    "SessionLocks",
    "SessionStateMachine",
    "SetAdvanced",
    "Substituted",
    "SubstitutionResolver",
    "Waiting",
]
