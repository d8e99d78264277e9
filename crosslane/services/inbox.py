"""Pending decisions visible to the designated chooser."""
from __future__ import annotations

import logging

from crosslane.core.config import get_settings
from crosslane.core.utils import as_utc
from crosslane.domain.lanes import normalize_user_id
from crosslane.domain.results import PendingInboxItem
from crosslane.repositories.sql_repository import SQLRepository
from crosslane.services.profile_directory import ProfileDirectory, ProfileLookupError, SQLProfileDirectory

log = logging.getLogger("crosslane.inbox")

DEFAULT_LIMIT = 50


def clamp_limit(value, default: int, maximum: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return max(1, min(maximum, parsed))


class ChooserInboxService:
    def __init__(
        self,
        repository: SQLRepository | None = None,
        directory: ProfileDirectory | None = None,
    ) -> None:
        self.repository = repository or SQLRepository()
        self.directory = directory or SQLProfileDirectory(self.repository)
        self.settings = get_settings()

    def list_pending_for_chooser(self, calling_user, limit=DEFAULT_LIMIT) -> list[PendingInboxItem]:
        """Newest-first pending rows where the caller is the chooser.

        Enrichment happens after the query returns; a row whose profile lookup
        fails is dropped instead of failing the whole listing.
        """
        chooser = normalize_user_id(calling_user)
        if not chooser:
            return []
        size = clamp_limit(limit, DEFAULT_LIMIT, self.settings.inbox_max_limit)
        rows = self.repository.list_pending_for_chooser(chooser, size)

        items: list[PendingInboxItem] = []
        for row in rows:
            other = row.other_member(chooser)
            try:
                card = self.directory.lookup(other, chooser)
            except ProfileLookupError as exc:
                log.warning("skipping pending row for %s: %s", other, exc)
                continue
            except Exception:
                # Remote directories raise their own client errors; one bad lookup drops one row.
                log.exception("profile lookup failed for %s; skipping pending row", other)
                continue
            items.append(
                PendingInboxItem(
                    other_user=other,
                    pending_since=as_utc(row.created_at),
                    expires_at=as_utc(row.expires_at),
                    display_name=card.display_name,
                    dog_name=card.dog_name,
                    photo_ref=card.photo_ref,
                )
            )
        return items
