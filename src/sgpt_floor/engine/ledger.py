"""Equipment ledger: the computed view of equipment occupancy."""

import logging
from collections import Counter
from typing import Iterable

from ..db.store import Store
from ..models.equipment import Availability, EquipmentUsage
from ..models.session import ClientStatus

logger = logging.getLogger(__name__)


class EquipmentLedger:
    """Computes equipment occupancy for a session from its session states.

    Occupancy is never cached: each call recomputes it from the stored
    states. A malformed holding row raises ``InvalidStateError`` rather than
    dropping out of the count. Commits that take equipment go through
    ``SessionStateRepository.claim``, which recounts at write time.

    Args:
        store: Data-store handle
        resting_holds_equipment: When True, clients in ``resting`` status
            count toward occupancy alongside ``active`` clients
    """

    def __init__(self, store: Store, resting_holds_equipment: bool = True):
        self.store = store
        self.resting_holds_equipment = resting_holds_equipment

    @property
    def holding_statuses(self) -> tuple[ClientStatus, ...]:
        """Client statuses whose equipment counts as occupied."""
        if self.resting_holds_equipment:
            return (ClientStatus.ACTIVE, ClientStatus.RESTING)
        return (ClientStatus.ACTIVE,)

    async def occupancy(
        self, session_id: int, exclude_state_id: int | None = None
    ) -> Counter:
        """Count units of each equipment name held in a session."""
        states = await self.store.states.list_by_session(
            session_id, statuses=self.holding_statuses, strict=True
        )
        counts: Counter = Counter()
        for state in states:
            if exclude_state_id is not None and state.id == exclude_state_id:
                continue
            counts.update(state.equipment_in_use)
        return counts

    async def check_availability(
        self,
        session_id: int,
        required_equipment: Iterable[str],
        exclude_state_id: int | None = None,
    ) -> Availability:
        """Check whether every requested item has a free unit.

        Returns the full conflict set so callers can report every blocking
        item. Names missing from the facility catalog are skipped with a
        warning instead of failing the check.

        Args:
            session_id: Session whose participants are scanned
            required_equipment: Equipment names needed (one unit each)
            exclude_state_id: A session state whose own holdings are ignored,
                used when that client releases them in the same transition
        """
        required = list(dict.fromkeys(required_equipment))
        if not required:
            return Availability(available=True, conflicts=[])

        quantities = await self.store.equipment.quantities()
        in_use = await self.occupancy(session_id, exclude_state_id=exclude_state_id)

        conflicts = []
        for name in required:
            if name not in quantities:
                logger.warning(
                    "Equipment %r is not in the facility catalog; skipping check "
                    "(session %s)",
                    name,
                    session_id,
                )
                continue
            if in_use[name] >= quantities[name]:
                conflicts.append(name)

        return Availability(available=not conflicts, conflicts=conflicts)

    async def snapshot(self, session_id: int) -> list[EquipmentUsage]:
        """Occupancy of every catalog item, for dashboards."""
        items = await self.store.equipment.list_all()
        in_use = await self.occupancy(session_id)

        known = {item.name for item in items}
        for name in in_use:
            if name not in known:
                logger.warning(
                    "Session %s holds %r which is not in the facility catalog",
                    session_id,
                    name,
                )

        return [
            EquipmentUsage(name=item.name, total=item.quantity, in_use=in_use[item.name])
            for item in items
        ]
