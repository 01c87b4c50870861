"""Session state machine: advances one client through their program.

Transitions::

    ready -> active -> resting -> active -> ... -> complete
                  \\-> waiting (blocked on equipment, retried by the caller)

Each transition loads everything it needs, decides, then commits the client's
state with a single write. A write that takes equipment recounts occupancy in
the same transaction; if another writer got there first the client falls
through to a substitute or to waiting. Audit records and alerts are written
after that commit and can only add warnings to the outcome.
"""

import logging
from dataclasses import replace

from ..db.store import Store
from ..errors import InvalidStateError, NotFoundError
from ..models.audit import Alert, AlertType, DecisionRecord, TriggerType
from ..models.equipment import Availability
from ..models.exercises import Exercise
from ..models.program import Program
from ..models.session import ClientStatus, Session, SessionState, SessionStatus
from .audit import AuditTrail
from .ledger import EquipmentLedger
from .locks import SessionLocks
from .outcomes import (
    ExerciseAdvanced,
    Outcome,
    ProgramComplete,
    SetAdvanced,
    Substituted,
    Waiting,
)
from .substitution import SubstitutionResolver

logger = logging.getLogger(__name__)


class SessionStateMachine:
    """Applies "set completed" and "check in" events to session states."""

    def __init__(
        self,
        store: Store,
        ledger: EquipmentLedger,
        resolver: SubstitutionResolver,
        audit: AuditTrail,
        locks: SessionLocks | None = None,
    ):
        self.store = store
        self.ledger = ledger
        self.resolver = resolver
        self.audit = audit
        self.locks = locks or SessionLocks()

    async def advance(self, state_id: int) -> Outcome:
        """Handle a completed set for one client.

        Raises:
            NotFoundError: Missing session state, session, program, program
                entry or exercise. Nothing is written.
            InvalidStateError: Stored position is outside program bounds or
                the session has already ended. Nothing is written.
        """
        session_id = await self._session_id_for(state_id)
        async with self.locks.for_session(session_id):
            state = await self._load_state(state_id)
            session = await self._load_session(state)

            if state.status == ClientStatus.COMPLETE:
                return ProgramComplete()

            self._require_open(session)
            program = await self._load_program(state)
            self._check_bounds(state, program)

            if state.status == ClientStatus.WAITING and state.pending_exercise_index is not None:
                outcome = await self._start_exercise(state, program, state.pending_exercise_index)
            else:
                outcome = await self._complete_set(state, program)

        self._log_outcome(state, outcome)
        return outcome

    async def start(self, state_id: int) -> Outcome:
        """Check a ready client in and put them on their first exercise.

        The first exercise goes through the same availability, substitution
        and waiting path as any later exercise.

        Raises:
            InvalidStateError: If the client is not ``ready`` or ``waiting``
        """
        session_id = await self._session_id_for(state_id)
        async with self.locks.for_session(session_id):
            state = await self._load_state(state_id)
            self._require_open(await self._load_session(state))
            program = await self._load_program(state)
            self._check_bounds(state, program)

            if state.status == ClientStatus.READY:
                target = state.current_exercise_index
            elif state.status == ClientStatus.WAITING and state.pending_exercise_index is not None:
                target = state.pending_exercise_index
            else:
                raise InvalidStateError(
                    f"Session state {state_id} cannot start from status {state.status.value}"
                )

            if program.entry_at(target) is None:
                outcome = await self._finish_program(state)
            else:
                outcome = await self._start_exercise(state, program, target)

        self._log_outcome(state, outcome)
        return outcome

    async def _complete_set(self, state: SessionState, program: Program) -> Outcome:
        entry = program.entry_at(state.current_exercise_index)
        if entry is None:
            raise NotFoundError(
                "program entry", f"{state.program_id}[{state.current_exercise_index}]"
            )

        if state.current_set < entry.sets:
            state.current_set += 1
            state.status = ClientStatus.RESTING
            state.equipment_in_use = []
            state.rest_remaining_seconds = entry.rest_seconds
            state.last_rpe = None
            await self.store.states.update(state)
            return SetAdvanced(
                next_set=state.current_set,
                total_sets=entry.sets,
                rest_seconds=entry.rest_seconds,
            )

        next_index = state.current_exercise_index + 1
        if next_index >= len(program):
            return await self._finish_program(state)
        return await self._start_exercise(state, program, next_index)

    async def _finish_program(self, state: SessionState) -> ProgramComplete:
        state.status = ClientStatus.COMPLETE
        state.equipment_in_use = []
        state.pending_exercise_index = None
        state.rest_remaining_seconds = 0
        await self.store.states.update(state)
        return ProgramComplete()

    async def _start_exercise(
        self, state: SessionState, program: Program, target_index: int
    ) -> Outcome:
        """Move a client onto the exercise at ``target_index``."""
        entry = program.entry_at(target_index)
        if entry is None:
            raise NotFoundError("program entry", f"{state.program_id}[{target_index}]")

        exercise = await self.store.exercises.get(entry.exercise_id)
        if exercise is None:
            raise NotFoundError("exercise", entry.exercise_id)

        if exercise.required_equipment:
            availability = await self.ledger.check_availability(
                state.session_id, exercise.required_equipment, exclude_state_id=state.id
            )
        else:
            availability = Availability(available=True, conflicts=[])

        if availability.available:
            taken = await self._claim(state, target_index, exercise)
            if not taken:
                return ExerciseAdvanced(exercise=exercise, sets=entry.sets, reps=entry.reps)
            availability = Availability(available=False, conflicts=taken)

        alternative = await self.resolver.find_alternative(
            exercise.id, state.session_id, exclude_state_id=state.id
        )
        if alternative is not None and not await self._claim(state, target_index, alternative):
            reason = f"{', '.join(availability.conflicts)} occupied"
            outcome = Substituted(
                from_exercise=exercise,
                to_exercise=alternative,
                reason=reason,
                sets=entry.sets,
                reps=entry.reps,
            )
            await self._audit_substitution(state, outcome)
            return outcome

        state.status = ClientStatus.WAITING
        state.equipment_in_use = []
        state.rest_remaining_seconds = 0
        state.pending_exercise_index = target_index
        await self.store.states.update(state)

        outcome = Waiting(exercise=exercise, conflicts=availability.conflicts)
        await self._audit_wait(state, outcome)
        return outcome

    async def _claim(self, state: SessionState, index: int, exercise: Exercise) -> list[str]:
        """Commit the client onto ``exercise`` unless its equipment was taken.

        Returns the equipment names that were taken. ``state`` is only
        changed when the commit succeeds.
        """
        candidate = replace(state)
        self._occupy(candidate, index, exercise)
        if candidate.equipment_in_use:
            taken = await self.store.states.claim(candidate, self.ledger.holding_statuses)
        else:
            await self.store.states.update(candidate)
            taken = []

        if taken:
            logger.warning(
                "Session %s client %s: %s taken before %s could start",
                state.session_id,
                state.client_id,
                ", ".join(taken),
                exercise.name,
            )
        else:
            self._occupy(state, index, exercise)
        return taken

    def _occupy(self, state: SessionState, index: int, exercise: Exercise) -> None:
        state.current_exercise_index = index
        state.current_set = 1
        state.status = ClientStatus.ACTIVE
        state.equipment_in_use = list(exercise.required_equipment)
        state.rest_remaining_seconds = 0
        state.last_rpe = None
        state.active_exercise_id = exercise.id
        state.pending_exercise_index = None

    async def _audit_substitution(self, state: SessionState, outcome: Substituted) -> None:
        source = outcome.from_exercise.name
        target = outcome.to_exercise.name
        warnings = [
            await self.audit.record(
                DecisionRecord(
                    session_id=state.session_id,
                    client_id=state.client_id,
                    trigger_type=TriggerType.EQUIPMENT_CONFLICT,
                    scenario=f"{source} equipment occupied ({outcome.reason})",
                    decision=f"Auto-substituted: {target}",
                    requires_approval=False,
                    approved=True,
                )
            ),
            await self.audit.raise_alert(
                Alert(
                    session_id=state.session_id,
                    client_id=state.client_id,
                    alert_type=AlertType.EQUIPMENT_CONFLICT,
                    message=f"Auto-substituted {source} -> {target} (equipment conflict)",
                    requires_action=False,
                )
            ),
        ]
        outcome.warnings.extend(w for w in warnings if w)

    async def _audit_wait(self, state: SessionState, outcome: Waiting) -> None:
        name = outcome.exercise.name
        blocked = ", ".join(outcome.conflicts)
        warnings = [
            await self.audit.record(
                DecisionRecord(
                    session_id=state.session_id,
                    client_id=state.client_id,
                    trigger_type=TriggerType.EQUIPMENT_CONFLICT,
                    scenario=f"{name} equipment occupied ({blocked})",
                    decision="Hold client until equipment frees; no substitute available",
                    requires_approval=True,
                    approved=False,
                )
            ),
            await self.audit.raise_alert(
                Alert(
                    session_id=state.session_id,
                    client_id=state.client_id,
                    alert_type=AlertType.EQUIPMENT_CONFLICT,
                    message=f"{name} equipment occupied ({blocked}) - no alternatives available",
                    requires_action=True,
                )
            ),
        ]
        outcome.warnings.extend(w for w in warnings if w)

    async def _session_id_for(self, state_id: int) -> int:
        state = await self._load_state(state_id)
        return state.session_id

    async def _load_state(self, state_id: int) -> SessionState:
        state = await self.store.states.get(state_id)
        if state is None:
            raise NotFoundError("session state", state_id)
        return state

    async def _load_session(self, state: SessionState) -> Session:
        session = await self.store.sessions.get(state.session_id)
        if session is None:
            raise NotFoundError("session", state.session_id)
        return session

    def _require_open(self, session: Session) -> None:
        if session.status != SessionStatus.ACTIVE:
            raise InvalidStateError(f"Session {session.id} has already ended")

    async def _load_program(self, state: SessionState) -> Program:
        program = await self.store.programs.get(state.program_id)
        if program is None:
            raise NotFoundError("program", state.program_id)
        return program

    def _check_bounds(self, state: SessionState, program: Program) -> None:
        index = state.current_exercise_index
        if index < 0 or index > len(program):
            logger.error(
                "Session state %s has exercise index %s outside program %s (%d entries)",
                state.id,
                index,
                program.id,
                len(program),
            )
            raise InvalidStateError(
                f"Session state {state.id} exercise index {index} is outside "
                f"program bounds 0..{len(program)}"
            )

        entry = program.entry_at(index)
        if entry is not None and not 1 <= state.current_set <= entry.sets + 1:
            logger.error(
                "Session state %s has set %s outside 1..%d",
                state.id,
                state.current_set,
                entry.sets + 1,
            )
            raise InvalidStateError(
                f"Session state {state.id} set {state.current_set} is outside "
                f"1..{entry.sets + 1}"
            )

    def _log_outcome(self, state: SessionState, outcome: Outcome) -> None:
        logger.info(
            "Session %s client %s: %s (exercise %s, set %s, status %s)",
            state.session_id,
            state.client_id,
            outcome.kind,
            state.current_exercise_index,
            state.current_set,
            state.status.value,
        )
        for warning in outcome.warnings:
            logger.warning("Session %s client %s: %s", state.session_id, state.client_id, warning)
