"""Decision log and alert emitter."""

import logging

import aiosqlite

from ..db.store import Store
from ..errors import AuditWriteFailure
from ..models.audit import Alert, DecisionRecord

logger = logging.getLogger(__name__)


class AuditTrail:
    """Append-only sink for decision records and alerts.

    Writes happen after the state transition they describe has committed.
    A failed write is logged and returned as a warning string; it never
    rolls back or fails the transition.
    """

    def __init__(self, store: Store):
        self.store = store

    async def record(self, record: DecisionRecord) -> str | None:
        """Append a decision record. Returns a warning on failure."""
        try:
            await self.store.decisions.append(record)
        except (aiosqlite.Error, OSError) as e:
            return self._report(
                AuditWriteFailure(f"Decision record not saved ({record.trigger_type.value}): {e}")
            )
        logger.info(
            "Decision [%s] session=%s client=%s: %s",
            record.trigger_type.value,
            record.session_id,
            record.client_id,
            record.decision,
        )
        return None

    async def raise_alert(self, alert: Alert) -> str | None:
        """Append an alert for the operator. Returns a warning on failure."""
        try:
            await self.store.alerts.append(alert)
        except (aiosqlite.Error, OSError) as e:
            return self._report(
                AuditWriteFailure(f"Alert not saved ({alert.alert_type.value}): {e}")
            )
        log = logger.warning if alert.requires_action else logger.info
        log(
            "Alert [%s] session=%s client=%s: %s",
            alert.alert_type.value,
            alert.session_id,
            alert.client_id,
            alert.message,
        )
        return None

    def _report(self, failure: AuditWriteFailure) -> str:
        logger.warning("Audit write failed: %s", failure)
        return str(failure)
