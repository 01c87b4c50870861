"""Database engine setup and initialization."""

import json
import logging
from pathlib import Path

import aiosqlite

from ..config import get_db_path

logger = logging.getLogger(__name__)


async def _run_migrations(db: aiosqlite.Connection) -> None:
    """Run database migrations for schema updates."""
    cursor = await db.execute("PRAGMA table_info(session_state)")
    columns = await cursor.fetchall()
    state_columns = {col[1] for col in columns}

    # Columns added after the first release
    if "active_exercise_id" not in state_columns:
        await db.execute("ALTER TABLE session_state ADD COLUMN active_exercise_id INTEGER")
    if "pending_exercise_index" not in state_columns:
        await db.execute(
            "ALTER TABLE session_state ADD COLUMN pending_exercise_index INTEGER"
        )

    await db.commit()


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the database schema."""
    if db_path is None:
        db_path = get_db_path()

    async with aiosqlite.connect(db_path) as db:
        await db.execute("""
            CREATE TABLE IF NOT EXISTS clients (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                injury_notes TEXT DEFAULT '[]',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Facility equipment; quantity is fixed per session
        await db.execute("""
            CREATE TABLE IF NOT EXISTS equipment (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT UNIQUE NOT NULL,
                quantity INTEGER NOT NULL
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS exercises (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT UNIQUE NOT NULL,
                movement_pattern TEXT NOT NULL,
                required_equipment TEXT NOT NULL DEFAULT '[]',
                substitutes TEXT NOT NULL DEFAULT '[]'
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS programs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                client_id INTEGER NOT NULL,
                name TEXT NOT NULL,
                entries TEXT NOT NULL DEFAULT '[]',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (client_id) REFERENCES clients(id)
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS sessions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                started_at TIMESTAMP NOT NULL,
                duration_minutes INTEGER DEFAULT 60,
                coach_name TEXT DEFAULT 'Coach',
                status TEXT DEFAULT 'active'
            )
        """)

        # One row per client per session; retained after completion for audit
        await db.execute("""
            CREATE TABLE IF NOT EXISTS session_state (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                session_id INTEGER NOT NULL,
                client_id INTEGER NOT NULL,
                program_id INTEGER NOT NULL,
                current_exercise_index INTEGER DEFAULT 0,
                current_set INTEGER DEFAULT 1,
                status TEXT DEFAULT 'ready',
                equipment_in_use TEXT DEFAULT '[]',
                rest_remaining_seconds INTEGER DEFAULT 0,
                last_rpe INTEGER,
                active_exercise_id INTEGER,
                pending_exercise_index INTEGER,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                UNIQUE (session_id, client_id),
                FOREIGN KEY (session_id) REFERENCES sessions(id),
                FOREIGN KEY (client_id) REFERENCES clients(id),
                FOREIGN KEY (program_id) REFERENCES programs(id)
            )
        """)

        # Append-only audit tables
        await db.execute("""
            CREATE TABLE IF NOT EXISTS decisions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                session_id INTEGER,
                client_id INTEGER,
                trigger_type TEXT NOT NULL DEFAULT 'manual',
                scenario TEXT NOT NULL,
                decision TEXT NOT NULL,
                requires_approval INTEGER DEFAULT 0,
                approved INTEGER DEFAULT 1,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS alerts (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                session_id INTEGER,
                client_id INTEGER,
                alert_type TEXT NOT NULL,
                message TEXT NOT NULL,
                requires_action INTEGER DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Create indexes for common queries
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_programs_client
            ON programs(client_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_session_state_session
            ON session_state(session_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_exercises_pattern
            ON exercises(movement_pattern)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_decisions_session
            ON decisions(session_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_alerts_session
            ON alerts(session_id)
        """)

        await db.commit()

        # Run migrations for existing databases
        await _run_migrations(db)


async def seed_facility(db_path: Path | None = None) -> tuple[int, int]:
    """Seed the default facility equipment and exercise library.

    Returns:
        Number of (equipment items, exercises) inserted
    """
    from ..models.equipment import DEFAULT_FACILITY
    from ..models.exercises import COMMON_EXERCISES

    if db_path is None:
        db_path = get_db_path()

    equipment_added = 0
    exercises_added = 0
    async with aiosqlite.connect(db_path) as db:
        for item in DEFAULT_FACILITY:
            cursor = await db.execute(
                "INSERT OR IGNORE INTO equipment (name, quantity) VALUES (?, ?)",
                (item.name, item.quantity),
            )
            equipment_added += cursor.rowcount

        for exercise in COMMON_EXERCISES:
            cursor = await db.execute(
                """
                INSERT OR IGNORE INTO exercises
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
            exercises_added += cursor.rowcount

        await db.commit()

    logger.info(
        "Seeded %d equipment items and %d exercises into %s",
        equipment_added,
        exercises_added,
        db_path,
    )
    return equipment_added, exercises_added
