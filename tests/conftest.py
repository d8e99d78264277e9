"""
Shared fixtures: a temporary SQLite store and a controllable clock.
"""
from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Make the crosslane package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from crosslane.core import config as core_config
from crosslane.db import create_tables, models
from crosslane.db import session as db_session
from crosslane.domain.lanes import Lane
from crosslane.repositories.sql_repository import SQLRepository

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def _clear_caches() -> None:
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
def temp_db(tmp_path, monkeypatch):
    """Point the store at a throwaway SQLite file and rebuild the schema."""
    db_file = tmp_path / "crosslane.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    monkeypatch.delenv("INTERNAL_JOB_SECRET", raising=False)
    _clear_caches()

    engine = db_session.get_engine()
    models.Base.metadata.drop_all(bind=engine)
    create_tables.create_all()

    yield db_file

    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()
    _clear_caches()


@pytest.fixture()
def repo(temp_db) -> SQLRepository:
    return SQLRepository()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def accept(repo):
    """Record an accept swipe the way the ingestion collaborator would."""
    def _accept(viewer: str, candidate: str, lane: Lane, action: str = "accept") -> None:
        repo.record_swipe(viewer, candidate, lane, action, created_at=T0)
    return _accept
