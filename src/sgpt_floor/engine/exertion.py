"""Exertion-based rest adjustment."""

import logging

from ..db.store import Store
from ..errors import NotFoundError
from ..models.audit import Alert, AlertType, DecisionRecord, TriggerType
from .audit import AuditTrail
from .locks import SessionLocks
from .outcomes import ExertionResult

logger = logging.getLogger(__name__)

RPE_MIN = 0
RPE_MAX = 10


class RestAdjuster:
    """Extends a client's rest when they report high exertion.

    RPE at or above ``high_threshold`` adds ``high_extension`` seconds and
    alerts the coach; exactly one below it adds ``moderate_extension``;
    anything lower leaves rest unchanged. The RPE is always recorded.
    """

    def __init__(
        self,
        store: Store,
        audit: AuditTrail,
        locks: SessionLocks | None = None,
        high_threshold: int = 9,
        high_extension: int = 30,
        moderate_extension: int = 15,
    ):
        self.store = store
        self.audit = audit
        self.locks = locks or SessionLocks()
        self.high_threshold = high_threshold
        self.high_extension = high_extension
        self.moderate_extension = moderate_extension

    def extension_for(self, rpe: int) -> int:
        """Seconds of extra rest for an RPE score."""
        if rpe >= self.high_threshold:
            return self.high_extension
        if rpe == self.high_threshold - 1:
            return self.moderate_extension
        return 0

    async def submit_exertion(self, state_id: int, rpe: int) -> ExertionResult:
        """Record an RPE report and extend rest accordingly.

        Raises:
            ValueError: If ``rpe`` is not an integer in 0..10
            NotFoundError: If the session state does not exist
        """
        if not isinstance(rpe, int) or isinstance(rpe, bool) or not RPE_MIN <= rpe <= RPE_MAX:
            raise ValueError(f"RPE must be an integer between {RPE_MIN} and {RPE_MAX}, got {rpe!r}")

        state = await self.store.states.get(state_id)
        if state is None:
            raise NotFoundError("session state", state_id)

        async with self.locks.for_session(state.session_id):
            state = await self.store.states.get(state_id)
            if state is None:
                raise NotFoundError("session state", state_id)

            extension = self.extension_for(rpe)
            state.rest_remaining_seconds = max(state.rest_remaining_seconds, 0) + extension
            state.last_rpe = rpe
            await self.store.states.update(state)

        result = ExertionResult(
            new_rest_seconds=state.rest_remaining_seconds,
            extension_seconds=extension,
        )
        logger.info(
            "Session %s client %s reported RPE %d; rest now %ds (+%ds)",
            state.session_id,
            state.client_id,
            rpe,
            result.new_rest_seconds,
            extension,
        )

        if extension:
            warning = await self.audit.record(
                DecisionRecord(
                    session_id=state.session_id,
                    client_id=state.client_id,
                    trigger_type=TriggerType.HIGH_RPE,
                    scenario=f"Client reported RPE {rpe}",
                    decision=f"Rest extended by {extension}s to {result.new_rest_seconds}s",
                )
            )
            if warning:
                result.warnings.append(warning)

        if rpe >= self.high_threshold:
            label = await self._client_label(state.client_id)
            warning = await self.audit.raise_alert(
                Alert(
                    session_id=state.session_id,
                    client_id=state.client_id,
                    alert_type=AlertType.HIGH_RPE,
                    message=f"{label} reported RPE {rpe} - rest auto-extended",
                    requires_action=False,
                )
            )
            result.alert_raised = warning is None
            if warning:
                result.warnings.append(warning)

        return result

    async def _client_label(self, client_id: int) -> str:
        client = await self.store.clients.get(client_id)
        return client.name if client else f"Client {client_id}"
