"""Engine facade wiring the ledger, resolver, state machine and adjuster."""

from typing import Iterable

from ..config import Settings
from ..db.store import Store
from ..errors import NotFoundError
from ..models.equipment import Availability, EquipmentUsage
from ..models.exercises import Exercise
from .audit import AuditTrail
from .exertion import RestAdjuster
from .ledger import EquipmentLedger
from .locks import SessionLocks
from .outcomes import ExertionResult, Outcome
from .state_machine import SessionStateMachine
from .substitution import SubstitutionResolver


class FloorEngine:
    """The operations the core offers to outer surfaces.

    One engine should serve every request for a database so that all
    callers share the same per-session locks.
    """

    def __init__(self, store: Store, settings: Settings | None = None):
        self.store = store
        self.settings = settings or Settings()
        self.locks = SessionLocks()
        self.audit = AuditTrail(store)
        self.ledger = EquipmentLedger(
            store, resting_holds_equipment=self.settings.resting_holds_equipment
        )
        self.resolver = SubstitutionResolver(
            store,
            self.ledger,
            prefer_declared_substitutes=self.settings.prefer_declared_substitutes,
        )
        self.state_machine = SessionStateMachine(
            store, self.ledger, self.resolver, self.audit, self.locks
        )
        self.rest = RestAdjuster(
            store,
            self.audit,
            self.locks,
            high_threshold=self.settings.high_rpe_threshold,
            high_extension=self.settings.high_rpe_extension,
            moderate_extension=self.settings.moderate_rpe_extension,
        )

    async def advance(self, state_id: int) -> Outcome:
        """Apply a "set completed" event."""
        return await self.state_machine.advance(state_id)

    async def start(self, state_id: int) -> Outcome:
        """Check a client in onto their first exercise."""
        return await self.state_machine.start(state_id)

    async def submit_exertion(self, state_id: int, rpe: int) -> ExertionResult:
        """Record an RPE report."""
        return await self.rest.submit_exertion(state_id, rpe)

    async def check_availability(
        self, session_id: int, equipment: Iterable[str]
    ) -> Availability:
        """Check equipment availability within a session."""
        await self._require_session(session_id)
        return await self.ledger.check_availability(session_id, equipment)

    async def equipment_board(self, session_id: int) -> list[EquipmentUsage]:
        """Occupancy of every catalog item within a session."""
        await self._require_session(session_id)
        return await self.ledger.snapshot(session_id)

    async def find_alternative(self, exercise_id: int, session_id: int) -> Exercise | None:
        """Preview which substitute would be chosen right now."""
        await self._require_session(session_id)
        return await self.resolver.find_alternative(exercise_id, session_id)

    async def _require_session(self, session_id: int) -> None:
        if await self.store.sessions.get(session_id) is None:
            raise NotFoundError("session", session_id)
