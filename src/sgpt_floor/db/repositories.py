"""Data access layer for sgpt-floor.

Every row is converted into a typed record at this boundary. Malformed rows
are quarantined: list reads skip them with a warning, single-row reads raise
``InvalidStateError`` so the caller never sees an undefined shape.
"""

import json
import logging
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, TypeVar

import aiosqlite

from ..config import get_db_path
from ..errors import InvalidStateError, MalformedRecordError
from ..models.audit import Alert, AlertType, DecisionRecord, TriggerType
from ..models.client import Client
from ..models.equipment import EquipmentItem
from ..models.exercises import Exercise, MovementPattern
from ..models.program import Program
from ..models.session import ClientStatus, Session, SessionState, SessionStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _parse_timestamp(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _load_json(row: aiosqlite.Row, column: str, default):
    raw = row[column]
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except ValueError as e:
        raise MalformedRecordError(f"Column {column} holds invalid JSON: {raw!r}") from e


def _convert_all(
    rows: Iterable[aiosqlite.Row], convert: Callable[[aiosqlite.Row], T], kind: str
) -> list[T]:
    """Convert rows, skipping malformed ones."""
    records = []
    for row in rows:
        try:
            records.append(convert(row))
        except MalformedRecordError as e:
            logger.warning("Quarantined malformed %s row %s: %s", kind, row["id"], e)
    return records


def _convert_one(row: aiosqlite.Row, convert: Callable[[aiosqlite.Row], T], kind: str) -> T:
    """Convert a single row; malformed data is surfaced as corruption."""
    try:
        return convert(row)
    except MalformedRecordError as e:
        logger.error("Malformed %s row %s: %s", kind, row["id"], e)
        raise InvalidStateError(f"{kind} {row['id']} is malformed: {e}") from e


class ClientRepository:
    """Repository for client profiles."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, client: Client) -> int:
        """Create a new client."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "INSERT INTO clients (name, injury_notes) VALUES (?, ?)",
                (client.name, json.dumps(client.injury_notes)),
            )
            await db.commit()
            return cursor.lastrowid

    async def get(self, client_id: int) -> Client | None:
        """Get a client by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM clients WHERE id = ?", (client_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return _convert_one(row, self._row_to_client, "client")

    async def list_all(self) -> list[Client]:
        """List all clients by name."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM clients ORDER BY name")
            rows = await cursor.fetchall()
            return _convert_all(rows, self._row_to_client, "client")

    def _row_to_client(self, row: aiosqlite.Row) -> Client:
        """Convert a database row to a Client."""
        return Client(
            id=row["id"],
            name=row["name"],
            injury_notes=_load_json(row, "injury_notes", []),
            created_at=_parse_timestamp(row["created_at"]),
        )


class EquipmentRepository:
    """Repository for facility equipment."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def upsert(self, item: EquipmentItem) -> int:
        """Create an equipment item or update its quantity."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO equipment (name, quantity) VALUES (?, ?)
                ON CONFLICT(name) DO UPDATE SET quantity = excluded.quantity
                """,
                (item.name, item.quantity),
            )
            await db.commit()
            cursor = await db.execute(
                "SELECT id FROM equipment WHERE name = ?", (item.name,)
            )
            row = await cursor.fetchone()
            return row[0]

    async def get_by_name(self, name: str) -> EquipmentItem | None:
        """Get an equipment item by name."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM equipment WHERE name = ?", (name,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return _convert_one(row, self._row_to_item, "equipment")

    async def list_all(self) -> list[EquipmentItem]:
        """List all equipment items by name."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM equipment ORDER BY name")
            rows = await cursor.fetchall()
            return _convert_all(rows, self._row_to_item, "equipment")

    async def quantities(self) -> dict[str, int]:
        """Map equipment name to facility quantity."""
        return {item.name: item.quantity for item in await self.list_all()}

    def _row_to_item(self, row: aiosqlite.Row) -> EquipmentItem:
        """Convert a database row to an EquipmentItem."""
        return EquipmentItem.from_dict(
            {"name": row["name"], "quantity": row["quantity"]}, id=row["id"]
        )


class ExerciseRepository:
    """Repository for the exercise library."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def add(self, exercise: Exercise) -> int:
        """Add a new exercise."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO exercises
                (name, movement_pattern, required_equipment, substitutes)
                VALUES (?, ?, ?, ?)
                """,
                (
                    exercise.name,
                    exercise.movement_pattern.value,
                    json.dumps(exercise.required_equipment),
                    json.dumps(exercise.substitutes),
                ),
            )
            await db.commit()
            return cursor.lastrowid

    async def get(self, exercise_id: int) -> Exercise | None:
        """Get an exercise by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM exercises WHERE id = ?", (exercise_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return _convert_one(row, self._row_to_exercise, "exercise")

    async def get_by_name(self, name: str) -> Exercise | None:
        """Get an exercise by name."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM exercises WHERE name = ?", (name,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return _convert_one(row, self._row_to_exercise, "exercise")

    async def get_by_movement_pattern(
        self, pattern: MovementPattern
    ) -> list[Exercise]:
        """Get exercises with a movement pattern, ordered by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM exercises WHERE movement_pattern = ? ORDER BY id",
                (pattern.value,),
            )
            rows = await cursor.fetchall()
            return _convert_all(rows, self._row_to_exercise, "exercise")

    async def list_all(self) -> list[Exercise]:
        """List all exercises."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM exercises ORDER BY name")
            rows = await cursor.fetchall()
            return _convert_all(rows, self._row_to_exercise, "exercise")

    def _row_to_exercise(self, row: aiosqlite.Row) -> Exercise:
        """Convert a database row to an Exercise."""
        return Exercise.from_dict(
            {
                "name": row["name"],
                "movement_pattern": row["movement_pattern"],
                "required_equipment": _load_json(row, "required_equipment", []),
                "substitutes": _load_json(row, "substitutes", []),
            },
            id=row["id"],
        )


class ProgramRepository:
    """Repository for client programs."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, program: Program) -> int:
        """Create a new program."""
        data = program.to_dict()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "INSERT INTO programs (client_id, name, entries) VALUES (?, ?, ?)",
                (data["client_id"], data["name"], json.dumps(data["entries"])),
            )
            await db.commit()
            return cursor.lastrowid

    async def get(self, program_id: int) -> Program | None:
        """Get a program by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM programs WHERE id = ?", (program_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return _convert_one(row, self._row_to_program, "program")

    async def get_latest_for_client(self, client_id: int) -> Program | None:
        """Get a client's most recently created program."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM programs WHERE client_id = ? ORDER BY id DESC",
                (client_id,),
            )
            rows = await cursor.fetchall()
            programs = _convert_all(rows, self._row_to_program, "program")
            return programs[0] if programs else None

    async def list_all(self) -> list[Program]:
        """List all programs, newest first."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM programs ORDER BY id DESC")
            rows = await cursor.fetchall()
            return _convert_all(rows, self._row_to_program, "program")

    def _row_to_program(self, row: aiosqlite.Row) -> Program:
        """Convert a database row to a Program."""
        return Program.from_dict(
            {
                "client_id": row["client_id"],
                "name": row["name"],
                "entries": _load_json(row, "entries", None),
            },
            id=row["id"],
            created_at=_parse_timestamp(row["created_at"]),
        )


class SessionRepository:
    """Repository for training sessions."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, session: Session) -> int:
        """Create a new session."""
        data = session.to_dict()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO sessions (started_at, duration_minutes, coach_name, status)
                VALUES (?, ?, ?, ?)
                """,
                (
                    data["started_at"],
                    data["duration_minutes"],
                    data["coach_name"],
                    data["status"],
                ),
            )
            await db.commit()
            return cursor.lastrowid

    async def get(self, session_id: int) -> Session | None:
        """Get a session by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM sessions WHERE id = ?", (session_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return _convert_one(row, self._row_to_session, "session")

    async def list_by_status(self, status: SessionStatus) -> list[Session]:
        """List sessions with a status, newest first."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM sessions WHERE status = ? ORDER BY id DESC",
                (status.value,),
            )
            rows = await cursor.fetchall()
            return _convert_all(rows, self._row_to_session, "session")

    async def set_status(self, session_id: int, status: SessionStatus) -> None:
        """Update a session's status."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "UPDATE sessions SET status = ? WHERE id = ?",
                (status.value, session_id),
            )
            await db.commit()

    def _row_to_session(self, row: aiosqlite.Row) -> Session:
        """Convert a database row to a Session."""
        return Session.from_dict(
            {
                "started_at": row["started_at"],
                "duration_minutes": row["duration_minutes"],
                "coach_name": row["coach_name"],
                "status": row["status"],
            },
            id=row["id"],
        )


class SessionStateRepository:
    """Repository for per-client session state."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create_many(self, states: list[SessionState]) -> list[int]:
        """Create several session states in one transaction."""
        ids = []
        async with aiosqlite.connect(self.db_path) as db:
            for state in states:
                data = state.to_dict()
                cursor = await db.execute(
                    """
                    INSERT INTO session_state
                    (session_id, client_id, program_id, current_exercise_index,
                     current_set, status, equipment_in_use, rest_remaining_seconds,
                     last_rpe, active_exercise_id, pending_exercise_index)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        data["session_id"],
                        data["client_id"],
                        data["program_id"],
                        data["current_exercise_index"],
                        data["current_set"],
                        data["status"],
                        json.dumps(data["equipment_in_use"]),
                        data["rest_remaining_seconds"],
                        data["last_rpe"],
                        data["active_exercise_id"],
                        data["pending_exercise_index"],
                    ),
                )
                ids.append(cursor.lastrowid)
            await db.commit()
        return ids

    async def create(self, state: SessionState) -> int:
        """Create a single session state."""
        ids = await self.create_many([state])
        return ids[0]

    async def get(self, state_id: int) -> SessionState | None:
        """Get a session state by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM session_state WHERE id = ?", (state_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return _convert_one(row, self._row_to_state, "session state")

    async def list_by_session(
        self,
        session_id: int,
        statuses: Iterable[ClientStatus] | None = None,
        strict: bool = False,
    ) -> list[SessionState]:
        """List session states for a session, optionally by status.

        With ``strict`` a malformed row raises ``InvalidStateError`` instead
        of being quarantined. Occupancy counts need every row.
        """
        query = "SELECT * FROM session_state WHERE session_id = ?"
        params: list = [session_id]
        if statuses is not None:
            values = [s.value for s in statuses]
            if not values:
                return []
            query += f" AND status IN ({', '.join('?' for _ in values)})"
            params.extend(values)
        query += " ORDER BY id"

        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(query, params)
            rows = await cursor.fetchall()
            if strict:
                return [_convert_one(row, self._row_to_state, "session state") for row in rows]
            return _convert_all(rows, self._row_to_state, "session state")

    async def get_for_client(self, session_id: int, client_id: int) -> SessionState | None:
        """Get a client's state within a session."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM session_state WHERE session_id = ? AND client_id = ?",
                (session_id, client_id),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return _convert_one(row, self._row_to_state, "session state")

    async def update(self, state: SessionState) -> None:
        """Write back every mutable field of a session state."""
        if state.id is None:
            raise ValueError("Session state must have an ID to update")

        async with aiosqlite.connect(self.db_path) as db:
            await self._write(db, state)
            await db.commit()

    async def claim(
        self, state: SessionState, holding_statuses: Iterable[ClientStatus]
    ) -> list[str]:
        """Write a state that takes equipment, if its units are still free.

        Occupancy is recounted inside a ``BEGIN IMMEDIATE`` transaction, so
        every connection to the database file (other processes included)
        takes its turn between the count and the write.

        Returns:
            Equipment names that are no longer free. The state is written
            only when this is empty.

        Raises:
            InvalidStateError: A holding row in the session is malformed
        """
        if state.id is None:
            raise ValueError("Session state must have an ID to update")

        async with aiosqlite.connect(self.db_path, isolation_level=None) as db:
            db.row_factory = aiosqlite.Row
            await db.execute("BEGIN IMMEDIATE")
            try:
                taken = await self._taken(db, state, holding_statuses)
                if not taken:
                    await self._write(db, state)
            except Exception:
                await db.execute("ROLLBACK")
                raise
            await db.execute("COMMIT")

        if taken:
            logger.info(
                "Session state %s lost %s to another writer", state.id, ", ".join(taken)
            )
        return taken

    async def _taken(
        self,
        db: aiosqlite.Connection,
        state: SessionState,
        holding_statuses: Iterable[ClientStatus],
    ) -> list[str]:
        """Names in ``state.equipment_in_use`` with no free unit left."""
        needed = list(dict.fromkeys(state.equipment_in_use))
        statuses = [s.value for s in holding_statuses]
        if not needed or not statuses:
            return []

        cursor = await db.execute(
            f"SELECT name, quantity FROM equipment WHERE name IN ({', '.join('?' for _ in needed)})",
            needed,
        )
        quantities = {row["name"]: row["quantity"] for row in await cursor.fetchall()}

        cursor = await db.execute(
            f"""
            SELECT * FROM session_state
            WHERE session_id = ? AND id != ? AND status IN ({', '.join('?' for _ in statuses)})
            """,
            [state.session_id, state.id, *statuses],
        )
        in_use: Counter = Counter()
        for row in await cursor.fetchall():
            held = _convert_one(row, self._row_to_state, "session state")
            in_use.update(held.equipment_in_use)

        return [
            name for name in needed if name in quantities and in_use[name] >= quantities[name]
        ]

    async def _write(self, db: aiosqlite.Connection, state: SessionState) -> None:
        data = state.to_dict()
        await db.execute(
            """
            UPDATE session_state SET
                current_exercise_index = ?, current_set = ?, status = ?,
                equipment_in_use = ?, rest_remaining_seconds = ?, last_rpe = ?,
                active_exercise_id = ?, pending_exercise_index = ?,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
            """,
            (
                data["current_exercise_index"],
                data["current_set"],
                data["status"],
                json.dumps(data["equipment_in_use"]),
                data["rest_remaining_seconds"],
                data["last_rpe"],
                data["active_exercise_id"],
                data["pending_exercise_index"],
                state.id,
            ),
        )

    def _row_to_state(self, row: aiosqlite.Row) -> SessionState:
        """Convert a database row to a SessionState."""
        data = {key: row[key] for key in row.keys()}
        data["equipment_in_use"] = _load_json(row, "equipment_in_use", [])
        return SessionState.from_dict(
            data, id=row["id"], updated_at=_parse_timestamp(row["updated_at"])
        )


class DecisionRepository:
    """Append-only repository for decision records."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def append(self, record: DecisionRecord) -> int:
        """Append a decision record."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO decisions
                (session_id, client_id, trigger_type, scenario, decision,
                 requires_approval, approved)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.session_id,
                    record.client_id,
                    record.trigger_type.value,
                    record.scenario,
                    record.decision,
                    int(record.requires_approval),
                    int(record.approved),
                ),
            )
            await db.commit()
            return cursor.lastrowid

    async def list_recent(
        self, limit: int = 20, session_id: int | None = None
    ) -> list[DecisionRecord]:
        """List decision records, newest first."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            if session_id is not None:
                cursor = await db.execute(
                    "SELECT * FROM decisions WHERE session_id = ? ORDER BY id DESC LIMIT ?",
                    (session_id, limit),
                )
            else:
                cursor = await db.execute(
                    "SELECT * FROM decisions ORDER BY id DESC LIMIT ?", (limit,)
                )
            rows = await cursor.fetchall()
            return _convert_all(rows, self._row_to_record, "decision")

    def _row_to_record(self, row: aiosqlite.Row) -> DecisionRecord:
        """Convert a database row to a DecisionRecord."""
        try:
            trigger = TriggerType(row["trigger_type"])
        except ValueError as e:
            raise MalformedRecordError(str(e)) from e
        return DecisionRecord(
            id=row["id"],
            session_id=row["session_id"],
            client_id=row["client_id"],
            trigger_type=trigger,
            scenario=row["scenario"],
            decision=row["decision"],
            requires_approval=bool(row["requires_approval"]),
            approved=bool(row["approved"]),
            created_at=_parse_timestamp(row["created_at"]),
        )


class AlertRepository:
    """Append-only repository for operator alerts."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def append(self, alert: Alert) -> int:
        """Append an alert."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO alerts
                (session_id, client_id, alert_type, message, requires_action)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    alert.session_id,
                    alert.client_id,
                    alert.alert_type.value,
                    alert.message,
                    int(alert.requires_action),
                ),
            )
            await db.commit()
            return cursor.lastrowid

    async def list_recent(
        self,
        limit: int = 20,
        session_id: int | None = None,
        requires_action: bool | None = None,
    ) -> list[Alert]:
        """List alerts, newest first."""
        query = "SELECT * FROM alerts WHERE 1 = 1"
        params: list = []
        if session_id is not None:
            query += " AND session_id = ?"
            params.append(session_id)
        if requires_action is not None:
            query += " AND requires_action = ?"
            params.append(int(requires_action))
        query += " ORDER BY id DESC LIMIT ?"
        params.append(limit)

        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(query, params)
            rows = await cursor.fetchall()
            return _convert_all(rows, self._row_to_alert, "alert")

    def _row_to_alert(self, row: aiosqlite.Row) -> Alert:
        """Convert a database row to an Alert."""
        try:
            alert_type = AlertType(row["alert_type"])
        except ValueError as e:
            raise MalformedRecordError(str(e)) from e
        return Alert(
            id=row["id"],
            session_id=row["session_id"],
            client_id=row["client_id"],
            alert_type=alert_type,
            message=row["message"],
            requires_action=bool(row["requires_action"]),
            created_at=_parse_timestamp(row["created_at"]),
        )
