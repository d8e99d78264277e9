"""Chooser-initiated resolution of a pending cross-lane connection."""
from __future__ import annotations

import logging
from typing import Callable

from crosslane.core.utils import utcnow
from crosslane.domain.lanes import Lane, ResolvedBy, canonical_pair, normalize_user_id
from crosslane.domain.results import CrossLaneError, ResolveResult
from crosslane.repositories.sql_repository import SQLRepository

log = logging.getLogger("crosslane.resolver")


class ResolverService:
    def __init__(self, repository: SQLRepository | None = None, clock: Callable = utcnow) -> None:
        self.repository = repository or SQLRepository()
        self._clock = clock

    def resolve(self, calling_user, other_user, chosen_lane) -> ResolveResult:
        caller = normalize_user_id(calling_user)
        if not caller:
            return ResolveResult.failure(CrossLaneError.NOT_AUTHENTICATED)
        other = normalize_user_id(other_user)
        if not other or other == caller:
            return ResolveResult.failure(CrossLaneError.INVALID_TARGET)
        lane = Lane.exact(chosen_lane)
        if lane is None:
            return ResolveResult.failure(CrossLaneError.INVALID_CHOICE_LANE)

        user_low, user_high = canonical_pair(caller, other)
        with self.repository.transaction() as session:
            row = self.repository.lock_connection(session, user_low, user_high)
            if row is None:
                return ResolveResult.failure(CrossLaneError.NOT_FOUND)
            # Re-read under the lock: a concurrent resolve or sweep may have committed first.
            if not row.is_pending:
                return ResolveResult(ok=True, chosen_lane=Lane(row.chosen_lane), already_resolved=True)
            if row.chooser_id != caller:
                return ResolveResult.failure(CrossLaneError.NOT_CHOOSER)
            now = self._clock()
            resolved = self.repository.resolve_pending(
                session, user_low, user_high, lane=lane, resolved_by=ResolvedBy.CHOOSER, now=now
            )
            if not resolved:
                # Without row locks (SQLite) a sweep can commit between the read and this write.
                stored = self.repository.stored_lane(session, user_low, user_high)
                log.info("cross-lane resolve lost race: pair=%s/%s stored=%s", user_low, user_high, stored)
                return ResolveResult(ok=True, chosen_lane=stored, already_resolved=True)

        log.info("cross-lane resolved by chooser: pair=%s/%s lane=%s", user_low, user_high, lane.value)
        return ResolveResult(ok=True, chosen_lane=lane)
