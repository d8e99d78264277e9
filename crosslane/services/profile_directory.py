"""Presentation lookups (display name, dog name, representative photo)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from crosslane.repositories.sql_repository import SQLRepository


class ProfileLookupError(Exception):
    """Raised when presentation data for a user cannot be produced."""


@dataclass(frozen=True)
class ProfileCard:
    display_name: str
    dog_name: str
    photo_ref: Optional[str]


class ProfileDirectory(Protocol):
    def lookup(self, user_id: str, viewer_id: str) -> ProfileCard:
        """Raise ProfileLookupError when the user cannot be presented."""
        ...


class SQLProfileDirectory:
    """Reads the profile read-model tables kept next to the connection store."""

    def __init__(self, repository: SQLRepository | None = None) -> None:
        self.repository = repository or SQLRepository()

    def lookup(self, user_id: str, viewer_id: str) -> ProfileCard:
        try:
            profile = self.repository.get_profile(user_id)
            if profile is None or profile.deleted_at is not None:
                raise ProfileLookupError(f"Profile {user_id} not available")
            photo = self.repository.get_representative_photo(user_id)
        except SQLAlchemyError as exc:
            raise ProfileLookupError(f"Profile {user_id} lookup failed: {exc}") from exc
        return ProfileCard(
            display_name=profile.display_name or "",
            dog_name=(photo.dog_name if photo else "") or "",
            photo_ref=photo.storage_path if photo else None,
        )
