"""Creates pending cross-lane connections after a lane-scoped accept."""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError

from crosslane.core.config import get_settings
from crosslane.core.utils import utcnow
from crosslane.domain.lanes import Lane, canonical_pair, chooser_for, normalize_user_id
from crosslane.repositories.sql_repository import SQLRepository

log = logging.getLogger("crosslane.registrar")


class RegistrarService:
    """Hook called by swipe ingestion once an accept is durably recorded.

    Never raises: invalid input, conflicts and store failures all end in
    ``False`` so the swipe path is never blocked by this call.
    """

    def __init__(self, repository: SQLRepository | None = None, clock: Callable = utcnow) -> None:
        self.repository = repository or SQLRepository()
        self.settings = get_settings()
        self._clock = clock

    @property
    def decision_window(self) -> timedelta:
        return timedelta(hours=self.settings.decision_window_hours)

    def register_if_mutual(self, acting_user, candidate_user, lane) -> bool:
        """Return True when a pending row exists for the pair after the call."""
        acting = normalize_user_id(acting_user)
        candidate = normalize_user_id(candidate_user)
        lane_value = Lane.parse(lane)
        if not acting or not candidate or acting == candidate or lane_value is None:
            return False
        try:
            return self._register(acting, candidate, lane_value)
        except SQLAlchemyError:
            log.exception(
                "cross-lane registration failed: acting=%s candidate=%s lane=%s",
                acting,
                candidate,
                lane_value.value,
            )
            return False

    def _register(self, acting: str, candidate: str, lane: Lane) -> bool:
        user_low, user_high = canonical_pair(acting, candidate)
        with self.repository.transaction() as session:
            if not self.repository.has_accept(session, candidate, acting, lane.opposite):
                return False
            # same-lane mutual is an ordinary match, not a cross-lane one
            if self.repository.has_accept(session, candidate, acting, lane):
                return False
            chooser_id = chooser_for(acting, candidate, lane)
            now = self._clock()
            inserted = self.repository.insert_pending_if_absent(
                session,
                user_low=user_low,
                user_high=user_high,
                chooser_id=chooser_id,
                created_at=now,
                expires_at=now + self.decision_window,
            )
            if inserted:
                log.info("cross-lane pending created: pair=%s/%s chooser=%s", user_low, user_high, chooser_id)
                return True
            return self.repository.pending_exists(session, user_low, user_high)
