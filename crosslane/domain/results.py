"""Tagged result values returned by the cross-lane services.

Failures are values, not exceptions: callers branch on ``ok`` and ``error``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from .lanes import Lane, ResolvedBy


class CrossLaneError(str, Enum):
    NOT_AUTHENTICATED = "not_authenticated"
    INVALID_TARGET = "invalid_target"
    INVALID_CHOICE_LANE = "invalid_choice_lane"
    NOT_FOUND = "not_found"
    NOT_CHOOSER = "not_chooser"
    NOT_PENDING = "not_pending"


@dataclass(frozen=True)
class ResolveResult:
    ok: bool
    chosen_lane: Optional[Lane] = None
    already_resolved: bool = False
    error: Optional[CrossLaneError] = None

    @classmethod
    def failure(cls, error: CrossLaneError) -> "ResolveResult":
        return cls(ok=False, error=error)

    def to_dict(self) -> dict:
        if not self.ok:
            return {"ok": False, "error": self.error.value}
        return {
            "ok": True,
            "chosen_lane": self.chosen_lane.value,
            "already_resolved": self.already_resolved,
        }


@dataclass(frozen=True)
class PendingInboxItem:
    other_user: str
    pending_since: datetime
    expires_at: datetime
    display_name: str
    dog_name: str
    photo_ref: Optional[str]

    def to_dict(self) -> dict:
        return {
            "other_user": self.other_user,
            "pending_since": self.pending_since.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "display_name": self.display_name,
            "dog_name": self.dog_name,
            "photo_ref": self.photo_ref,
        }


@dataclass(frozen=True)
class PendingDetails:
    other_user: str
    chooser_id: str
    is_chooser: bool
    created_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class DetailsResult:
    ok: bool
    details: Optional[PendingDetails] = None
    error: Optional[CrossLaneError] = None
    resolved_lane: Optional[Lane] = None

    @classmethod
    def failure(cls, error: CrossLaneError, resolved_lane: Optional[Lane] = None) -> "DetailsResult":
        return cls(ok=False, error=error, resolved_lane=resolved_lane)

    def to_dict(self) -> dict:
        if not self.ok:
            body = {"ok": False, "error": self.error.value}
            if self.resolved_lane is not None:
                body["chosen_lane"] = self.resolved_lane.value
            return body
        d = self.details
        return {
            "ok": True,
            "other_user": d.other_user,
            "chooser_id": d.chooser_id,
            "is_chooser": d.is_chooser,
            "created_at": d.created_at.isoformat(),
            "expires_at": d.expires_at.isoformat(),
        }


@dataclass(frozen=True)
class ResolvedConnection:
    other_user: str
    chosen_lane: Lane
    resolved_at: datetime
    resolved_by: ResolvedBy

    def to_dict(self) -> dict:
        return {
            "other_user": self.other_user,
            "chosen_lane": self.chosen_lane.value,
            "resolved_at": self.resolved_at.isoformat(),
            "resolved_by": self.resolved_by.value,
        }


@dataclass(frozen=True)
class SweepReport:
    resolved: int
    ran_at: datetime
    limit: Optional[int] = field(default=None)

    def to_dict(self) -> dict:
        return {"ok": True, "resolved": self.resolved, "ran_at": self.ran_at.isoformat(), "limit": self.limit}
