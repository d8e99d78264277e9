"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import or_, select, tuple_, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, aliased

from crosslane.core.utils import utcnow
from crosslane.db.models import CrossLaneConnection, DogPhoto, Profile, Swipe
from crosslane.db.session import get_session, transaction
from crosslane.domain.lanes import Lane, ResolvedBy

_PAIR_KEY = ["user_low", "user_high"]


class SQLRepository:
    """CRUD helpers wrapping the SQLAlchemy session."""

    def transaction(self):
        return transaction()

    # -------------------------- swipes --------------------------
    def record_swipe(
        self,
        viewer_id: str,
        candidate_id: str,
        lane: Lane,
        action: str = "accept",
        created_at: datetime | None = None,
    ) -> None:
        entity = Swipe(
            viewer_id=viewer_id,
            candidate_id=candidate_id,
            lane=Lane(lane).value,
            action=action,
            created_at=created_at or utcnow(),
        )
        with get_session() as session:
            session.merge(entity)
            session.commit()

    def has_accept(self, session: Session, viewer_id: str, candidate_id: str, lane: Lane) -> bool:
        stmt = (
            select(Swipe.viewer_id)
            .where(
                Swipe.viewer_id == viewer_id,
                Swipe.candidate_id == candidate_id,
                Swipe.lane == lane.value,
                Swipe.action == "accept",
            )
            .limit(1)
        )
        return session.execute(stmt).first() is not None

    # -------------------------- connections --------------------------
    def insert_pending_if_absent(
        self,
        session: Session,
        *,
        user_low: str,
        user_high: str,
        chooser_id: str,
        created_at: datetime,
        expires_at: datetime,
    ) -> bool:
        """Insert a pending row unless the pair already has one. Returns True when inserted."""
        values = {
            "user_low": user_low,
            "user_high": user_high,
            "chooser_id": chooser_id,
            "created_at": created_at,
            "expires_at": expires_at,
            "updated_at": created_at,
        }
        dialect = session.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = pg_insert(CrossLaneConnection).values(**values).on_conflict_do_nothing(index_elements=_PAIR_KEY)
        elif dialect == "sqlite":
            stmt = sqlite_insert(CrossLaneConnection).values(**values).on_conflict_do_nothing(index_elements=_PAIR_KEY)
        else:
            try:
                with session.begin_nested():
                    session.add(CrossLaneConnection(**values))
            except IntegrityError:
                return False
            return True
        result = session.execute(stmt)
        return bool(result.rowcount)

    def pending_exists(self, session: Session, user_low: str, user_high: str) -> bool:
        stmt = (
            select(CrossLaneConnection.user_low)
            .where(
                CrossLaneConnection.user_low == user_low,
                CrossLaneConnection.user_high == user_high,
                CrossLaneConnection.resolved_at.is_(None),
            )
            .limit(1)
        )
        return session.execute(stmt).first() is not None

    def lock_connection(self, session: Session, user_low: str, user_high: str) -> Optional[CrossLaneConnection]:
        """Fetch the pair's row holding an exclusive row lock until the transaction ends."""
        stmt = (
            select(CrossLaneConnection)
            .where(CrossLaneConnection.user_low == user_low, CrossLaneConnection.user_high == user_high)
            .with_for_update()
        )
        return session.execute(stmt).scalar_one_or_none()

    def resolve_pending(
        self,
        session: Session,
        user_low: str,
        user_high: str,
        *,
        lane: Lane,
        resolved_by: ResolvedBy,
        now: datetime,
    ) -> bool:
        """Resolve the pair only while it is still pending. Returns False when another writer got there first."""
        stmt = (
            update(CrossLaneConnection)
            .where(
                CrossLaneConnection.user_low == user_low,
                CrossLaneConnection.user_high == user_high,
                CrossLaneConnection.resolved_at.is_(None),
            )
            .values(chosen_lane=lane.value, resolved_at=now, resolved_by=resolved_by.value, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return bool(session.execute(stmt).rowcount)

    def stored_lane(self, session: Session, user_low: str, user_high: str) -> Optional[Lane]:
        """Committed chosen lane, read straight from the table rather than the identity map."""
        stmt = select(CrossLaneConnection.chosen_lane).where(
            CrossLaneConnection.user_low == user_low,
            CrossLaneConnection.user_high == user_high,
        )
        value = session.execute(stmt).scalar_one_or_none()
        return Lane(value) if value else None

    def get_connection(self, user_low: str, user_high: str) -> Optional[CrossLaneConnection]:
        with get_session() as session:
            return session.get(CrossLaneConnection, (user_low, user_high))

    def list_pending_for_chooser(self, chooser_id: str, limit: int) -> list[CrossLaneConnection]:
        with get_session() as session:
            stmt = (
                select(CrossLaneConnection)
                .where(
                    CrossLaneConnection.chooser_id == chooser_id,
                    CrossLaneConnection.resolved_at.is_(None),
                )
                .order_by(CrossLaneConnection.created_at.desc())
                .limit(limit)
            )
            return session.execute(stmt).scalars().all()

    def list_resolved_for_user(self, user_id: str, limit: int) -> list[CrossLaneConnection]:
        with get_session() as session:
            stmt = (
                select(CrossLaneConnection)
                .where(
                    or_(CrossLaneConnection.user_low == user_id, CrossLaneConnection.user_high == user_id),
                    CrossLaneConnection.resolved_at.is_not(None),
                )
                .order_by(CrossLaneConnection.resolved_at.desc())
                .limit(limit)
            )
            return session.execute(stmt).scalars().all()

    def resolve_expired(
        self,
        session: Session,
        *,
        now: datetime,
        default_lane: Lane,
        limit: int | None = None,
    ) -> int:
        """Set-based auto-resolution of every pending row whose window has elapsed."""
        stmt = update(CrossLaneConnection).where(
            CrossLaneConnection.resolved_at.is_(None),
            CrossLaneConnection.expires_at <= now,
        )
        if limit:
            inner = aliased(CrossLaneConnection)
            keys = (
                select(inner.user_low, inner.user_high)
                .where(inner.resolved_at.is_(None), inner.expires_at <= now)
                .order_by(inner.expires_at.asc())
                .limit(limit)
            )
            if session.get_bind().dialect.name == "postgresql":
                keys = keys.with_for_update(skip_locked=True)
            stmt = stmt.where(tuple_(CrossLaneConnection.user_low, CrossLaneConnection.user_high).in_(keys))
        stmt = stmt.values(
            chosen_lane=default_lane.value,
            resolved_at=now,
            resolved_by=ResolvedBy.AUTO.value,
            updated_at=now,
        ).execution_options(synchronize_session=False)
        result = session.execute(stmt)
        return int(result.rowcount or 0)

    # -------------------------- profiles --------------------------
    def get_profile(self, user_id: str) -> Optional[Profile]:
        with get_session() as session:
            return session.get(Profile, user_id)

    def upsert_profile(self, user_id: str, display_name: str) -> None:
        with get_session() as session:
            session.merge(Profile(user_id=user_id, display_name=display_name, deleted_at=None))
            session.commit()

    def get_representative_photo(self, user_id: str) -> Optional[DogPhoto]:
        """First photo of the user's lowest-slot active dog."""
        with get_session() as session:
            stmt = (
                select(DogPhoto)
                .where(DogPhoto.user_id == user_id, DogPhoto.is_active.is_(True))
                .order_by(DogPhoto.dog_slot.asc(), DogPhoto.position.asc(), DogPhoto.id.asc())
                .limit(1)
            )
            return session.execute(stmt).scalars().first()

    def add_dog_photo(
        self,
        user_id: str,
        storage_path: str,
        *,
        dog_name: str = "",
        dog_slot: int = 1,
        position: int = 0,
        is_active: bool = True,
    ) -> None:
        entity = DogPhoto(
            user_id=user_id,
            storage_path=storage_path,
            dog_name=dog_name,
            dog_slot=dog_slot,
            position=position,
            is_active=is_active,
        )
        with get_session() as session:
            session.add(entity)
            session.commit()
