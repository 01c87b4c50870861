"""Database layer for sgpt-floor."""

from .engine import init_db, seed_facility
from .repositories import (
    AlertRepository,
    ClientRepository,
    DecisionRepository,
    EquipmentRepository,
    ExerciseRepository,
    ProgramRepository,
    SessionRepository,
    SessionStateRepository,
)
from .store import Store

__all__ = [
    "AlertRepository",
    "ClientRepository",
    "DecisionRepository",
    "EquipmentRepository",
    "ExerciseRepository",
    "init_db",
    "ProgramRepository",
    "seed_facility",
    "SessionRepository",
    "SessionStateRepository",
    "Store",
]
