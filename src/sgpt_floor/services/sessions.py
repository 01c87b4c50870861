"""Session lifecycle service: setup, pain reports, overview and ending."""

import logging
from dataclasses import dataclass
from datetime import datetime

from ..db.store import Store
from ..engine.audit import AuditTrail
from ..engine.locks import SessionLocks
from ..errors import NotFoundError, SessionFullError
from ..models.audit import Alert, AlertType, DecisionRecord, TriggerType
from ..models.session import ClientStatus, Session, SessionState, SessionStatus

logger = logging.getLogger(__name__)


@dataclass
class ClientBoardRow:
    """One client's line on the live session board."""

    state_id: int
    client_id: int
    client_name: str
    status: ClientStatus
    exercise_name: str | None
    current_set: int
    total_sets: int | None
    exercise_position: int
    program_length: int
    rest_remaining_seconds: int
    last_rpe: int | None
    equipment_in_use: list[str]

    def to_dict(self) -> dict:
        return {
            "state_id": self.state_id,
            "client_id": self.client_id,
            "client_name": self.client_name,
            "status": self.status.value,
            "exercise": self.exercise_name,
            "current_set": self.current_set,
            "total_sets": self.total_sets,
            "exercise_position": self.exercise_position,
            "program_length": self.program_length,
            "rest_remaining_seconds": self.rest_remaining_seconds,
            "last_rpe": self.last_rpe,
            "equipment_in_use": list(self.equipment_in_use),
        }


class SessionService:
    """Operator-facing session actions around the engine.

    Args:
        store: Data-store handle
        audit: Audit trail used for pain reports
        max_clients: Upper bound on participants per session
        locks: The engine's session locks, released when a session ends
    """

    def __init__(
        self,
        store: Store,
        audit: AuditTrail | None = None,
        max_clients: int = 6,
        locks: SessionLocks | None = None,
    ):
        self.store = store
        self.audit = audit or AuditTrail(store)
        self.max_clients = max_clients
        self.locks = locks

    async def start_session(
        self,
        client_ids: list[int],
        coach_name: str = "Coach",
        duration_minutes: int = 60,
    ) -> tuple[Session, list[SessionState]]:
        """Create a session with one ready state per client.

        Each client is assigned their most recent program.

        Raises:
            ValueError: No clients, or a client listed twice
            SessionFullError: More clients than ``max_clients``
            NotFoundError: Unknown client, or a client without a program
        """
        if not client_ids:
            raise ValueError("Select at least one client")
        if len(set(client_ids)) != len(client_ids):
            raise ValueError("A client can only join a session once")
        if len(client_ids) > self.max_clients:
            raise SessionFullError(
                f"Maximum {self.max_clients} clients per session, got {len(client_ids)}"
            )

        programs = {}
        for client_id in client_ids:
            client = await self.store.clients.get(client_id)
            if client is None:
                raise NotFoundError("client", client_id)
            program = await self.store.programs.get_latest_for_client(client_id)
            if program is None:
                raise NotFoundError("program for client", client_id)
            programs[client_id] = program

        session = Session(
            started_at=datetime.now(),
            duration_minutes=duration_minutes,
            coach_name=coach_name,
        )
        session.id = await self.store.sessions.create(session)

        states = [
            SessionState(
                session_id=session.id,
                client_id=client_id,
                program_id=programs[client_id].id,
            )
            for client_id in client_ids
        ]
        ids = await self.store.states.create_many(states)
        for state, state_id in zip(states, ids):
            state.id = state_id

        logger.info(
            "Started session %s with %d clients (coach %s)",
            session.id,
            len(states),
            coach_name,
        )
        return session, states

    async def end_session(self, session_id: int) -> Session:
        """Mark a session completed. Session states are kept for audit."""
        session = await self.store.sessions.get(session_id)
        if session is None:
            raise NotFoundError("session", session_id)
        if session.status != SessionStatus.COMPLETED:
            await self.store.sessions.set_status(session_id, SessionStatus.COMPLETED)
            session.status = SessionStatus.COMPLETED
            logger.info("Ended session %s", session_id)
        if self.locks is not None:
            self.locks.discard(session_id)
        return session

    async def report_pain(self, state_id: int, description: str) -> list[str]:
        """Escalate a client's pain report to the coach.

        Returns:
            Warnings for audit writes that failed
        """
        description = description.strip()
        if not description:
            raise ValueError("Describe the pain before reporting it")

        state = await self.store.states.get(state_id)
        if state is None:
            raise NotFoundError("session state", state_id)

        client = await self.store.clients.get(state.client_id)
        label = client.name if client else f"Client {state.client_id}"

        warnings = [
            await self.audit.raise_alert(
                Alert(
                    session_id=state.session_id,
                    client_id=state.client_id,
                    alert_type=AlertType.PAIN,
                    message=f"{label}: {description}",
                    requires_action=True,
                )
            ),
            await self.audit.record(
                DecisionRecord(
                    session_id=state.session_id,
                    client_id=state.client_id,
                    trigger_type=TriggerType.PAIN,
                    scenario=description,
                    decision="Escalated to coach for assessment",
                    requires_approval=True,
                    approved=False,
                )
            ),
        ]
        return [w for w in warnings if w]

    async def board(self, session_id: int) -> list[ClientBoardRow]:
        """Per-client overview of a session."""
        if await self.store.sessions.get(session_id) is None:
            raise NotFoundError("session", session_id)

        rows = []
        for state in await self.store.states.list_by_session(session_id):
            client = await self.store.clients.get(state.client_id)
            program = await self.store.programs.get(state.program_id)

            entry = program.entry_at(state.current_exercise_index) if program else None
            exercise_id = state.active_exercise_id or (entry.exercise_id if entry else None)
            exercise = await self.store.exercises.get(exercise_id) if exercise_id else None

            rows.append(
                ClientBoardRow(
                    state_id=state.id,
                    client_id=state.client_id,
                    client_name=client.name if client else f"Client {state.client_id}",
                    status=state.status,
                    exercise_name=exercise.name if exercise else None,
                    current_set=state.current_set,
                    total_sets=entry.sets if entry else None,
                    exercise_position=state.current_exercise_index + 1,
                    program_length=len(program) if program else 0,
                    rest_remaining_seconds=state.rest_remaining_seconds,
                    last_rpe=state.last_rpe,
                    equipment_in_use=state.equipment_in_use,
                )
            )
        return rows
