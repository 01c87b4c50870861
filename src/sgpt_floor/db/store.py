"""Store handle bundling every repository for one database."""

from pathlib import Path

from ..config import get_db_path
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


class Store:
    """Explicit data-store handle passed to the engine and services.

    Holds one repository per record type, all bound to the same database
    file, so tests and callers can point a whole engine at a scratch
    database.
    """

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()
        self.clients = ClientRepository(self.db_path)
        self.equipment = EquipmentRepository(self.db_path)
        self.exercises = ExerciseRepository(self.db_path)
        self.programs = ProgramRepository(self.db_path)
        self.sessions = SessionRepository(self.db_path)
        self.states = SessionStateRepository(self.db_path)
        self.decisions = DecisionRepository(self.db_path)
        self.alerts = AlertRepository(self.db_path)
