"""SQLAlchemy models for cross-lane connections and the rows they read."""
from __future__ import annotations

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    func,
)

from .session import Base


class CrossLaneConnection(Base):
    """One row per unordered pair with mutual acceptance across lanes."""

    __tablename__ = "cross_lane_connections"
    __table_args__ = (
        CheckConstraint("chooser_id IN (user_low, user_high)", name="cross_lane_chooser_member_check"),
        CheckConstraint("chosen_lane IS NULL OR chosen_lane IN ('pals', 'match')", name="cross_lane_lane_check"),
        CheckConstraint("resolved_by IS NULL OR resolved_by IN ('chooser', 'auto')", name="cross_lane_resolved_by_check"),
        CheckConstraint(
            "(chosen_lane IS NULL AND resolved_by IS NULL AND resolved_at IS NULL)"
            " OR (chosen_lane IS NOT NULL AND resolved_by IS NOT NULL AND resolved_at IS NOT NULL)",
            name="cross_lane_resolution_check",
        ),
        Index("cross_lane_chooser_created_idx", "chooser_id", "created_at"),
        Index("cross_lane_expires_idx", "expires_at"),
    )

    user_low = Column(String(64), primary_key=True)
    user_high = Column(String(64), primary_key=True)
    chooser_id = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    chosen_lane = Column(String(16), nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
    resolved_by = Column(String(16), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    @property
    def is_pending(self) -> bool:
        return self.resolved_at is None

    def other_member(self, user_id: str) -> str:
        return self.user_high if user_id == self.user_low else self.user_low


class Swipe(Base):
    """Lane-scoped decision written by swipe ingestion; read here for reverse accepts."""

    __tablename__ = "swipes"
    __table_args__ = (
        CheckConstraint("lane IN ('pals', 'match')", name="swipes_lane_check"),
        CheckConstraint("action IN ('accept', 'reject')", name="swipes_action_check"),
    )

    viewer_id = Column(String(64), primary_key=True)
    candidate_id = Column(String(64), primary_key=True)
    lane = Column(String(16), primary_key=True)
    action = Column(String(16), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class Profile(Base):
    __tablename__ = "profiles"

    user_id = Column(String(64), primary_key=True)
    display_name = Column(String(255), nullable=False, default="")
    deleted_at = Column(DateTime(timezone=True), nullable=True)


class DogPhoto(Base):
    __tablename__ = "dog_photos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    dog_slot = Column(Integer, nullable=False, default=1)
    dog_name = Column(String(255), nullable=False, default="")
    is_active = Column(Boolean, nullable=False, default=True)
    position = Column(Integer, nullable=False, default=0)
    storage_path = Column(Text, nullable=False)
