"""Time-initiated resolution of pending connections whose window elapsed."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from crosslane.core.utils import utcnow
from crosslane.domain.lanes import LANE_A
from crosslane.domain.results import SweepReport
from crosslane.repositories.sql_repository import SQLRepository

log = logging.getLogger("crosslane.sweeper")

MAX_BATCH = 500


class SweeperService:
    def __init__(self, repository: SQLRepository | None = None, clock: Callable = utcnow) -> None:
        self.repository = repository or SQLRepository()
        self._clock = clock

    def sweep_expired(self, limit: Optional[int] = None) -> SweepReport:
        """Resolve every expired pending row to LANE_A in one transaction.

        ``limit`` caps the batch (oldest expiry first); None sweeps everything.
        Rows already resolved are excluded by the update predicate itself.
        """
        if limit is not None:
            limit = max(1, min(MAX_BATCH, int(limit)))
        now = self._clock()
        with self.repository.transaction() as session:
            count = self.repository.resolve_expired(session, now=now, default_lane=LANE_A, limit=limit)
        log.info("cross-lane sweep: resolved=%d limit=%s", count, limit)
        return SweepReport(resolved=count, ran_at=now, limit=limit)
