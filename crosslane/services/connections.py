"""Read-side helpers: pending details for either member, resolved connections."""
from __future__ import annotations

from crosslane.core.config import get_settings
from crosslane.core.utils import as_utc
from crosslane.domain.lanes import Lane, ResolvedBy, canonical_pair, normalize_user_id
from crosslane.domain.results import (
    CrossLaneError,
    DetailsResult,
    PendingDetails,
    ResolvedConnection,
)
from crosslane.repositories.sql_repository import SQLRepository
from crosslane.services.inbox import DEFAULT_LIMIT, clamp_limit


class ConnectionsService:
    def __init__(self, repository: SQLRepository | None = None) -> None:
        self.repository = repository or SQLRepository()
        self.settings = get_settings()

    def get_pending_details(self, calling_user, other_user) -> DetailsResult:
        caller = normalize_user_id(calling_user)
        if not caller:
            return DetailsResult.failure(CrossLaneError.NOT_AUTHENTICATED)
        other = normalize_user_id(other_user)
        if not other or other == caller:
            return DetailsResult.failure(CrossLaneError.INVALID_TARGET)
        row = self.repository.get_connection(*canonical_pair(caller, other))
        if row is None:
            return DetailsResult.failure(CrossLaneError.NOT_FOUND)
        if not row.is_pending:
            return DetailsResult.failure(CrossLaneError.NOT_PENDING, resolved_lane=Lane(row.chosen_lane))
        return DetailsResult(
            ok=True,
            details=PendingDetails(
                other_user=other,
                chooser_id=row.chooser_id,
                is_chooser=row.chooser_id == caller,
                created_at=as_utc(row.created_at),
                expires_at=as_utc(row.expires_at),
            ),
        )

    def list_resolved_for_user(self, user, limit=DEFAULT_LIMIT) -> list[ResolvedConnection]:
        """Resolved rows for either pair member; feeds the conversation listing."""
        user_id = normalize_user_id(user)
        if not user_id:
            return []
        size = clamp_limit(limit, DEFAULT_LIMIT, self.settings.inbox_max_limit)
        return [
            ResolvedConnection(
                other_user=row.other_member(user_id),
                chosen_lane=Lane(row.chosen_lane),
                resolved_at=as_utc(row.resolved_at),
                resolved_by=ResolvedBy(row.resolved_by),
            )
            for row in self.repository.list_resolved_for_user(user_id, size)
        ]
