"""Create the cross-lane schema: cross_lane_connections, swipes and the profile read model."""
from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from .session import Base, get_engine
from . import models  # noqa: F401  # registers CrossLaneConnection, Swipe, Profile, DogPhoto


def create_all() -> list[str]:
    """Create any missing tables and return the names of every table in the schema."""
    Base.metadata.create_all(bind=get_engine())
    return sorted(Base.metadata.tables)


if __name__ == "__main__":
    try:
        tables = create_all()
        print(f"Cross-lane schema ready: {', '.join(tables)}")
    except SQLAlchemyError as exc:
        raise SystemExit(f"Failed to create cross-lane schema: {exc}") from exc
