"""Domain helpers for lanes and canonical user pairs."""
from __future__ import annotations

from enum import Enum


class Lane(str, Enum):
    """The two mutually exclusive matching contexts."""

    PALS = "pals"
    MATCH = "match"

    @classmethod
    def parse(cls, value) -> "Lane | None":
        """Return the Lane for value, or None when it is not a valid lane."""
        if isinstance(value, cls):
            return value
        try:
            return cls((value or "").strip().lower())
        except (ValueError, AttributeError):
            return None

    @classmethod
    def exact(cls, value) -> "Lane | None":
        """Strict variant of parse: only the stored lane values, verbatim."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value in {lane.value for lane in cls}:
            return cls(value)
        return None

    @property
    def opposite(self) -> "Lane":
        return Lane.MATCH if self is Lane.PALS else Lane.PALS


# Chooser is whoever accepted in LANE_A; LANE_A is also the timeout default.
LANE_A = Lane.PALS
LANE_B = Lane.MATCH


class ResolvedBy(str, Enum):
    CHOOSER = "chooser"
    AUTO = "auto"


def normalize_user_id(value) -> str:
    return str(value or "").strip()


def canonical_pair(first: str, second: str) -> tuple[str, str]:
    """Return (user_low, user_high) regardless of argument order."""
    if first == second:
        raise ValueError("a pair needs two distinct users")
    return (first, second) if first < second else (second, first)


def chooser_for(acting_user: str, candidate_user: str, lane: Lane) -> str:
    """The pair member who accepted in LANE_A."""
    return acting_user if lane is LANE_A else candidate_user
