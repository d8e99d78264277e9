from datetime import timedelta

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from crosslane.core.utils import as_utc
from crosslane.db.models import CrossLaneConnection
from crosslane.db.session import get_session
from crosslane.domain.lanes import Lane
from crosslane.repositories.sql_repository import SQLRepository
from crosslane.services.registrar import RegistrarService


def _row_count() -> int:
    with get_session() as session:
        return session.execute(select(func.count()).select_from(CrossLaneConnection)).scalar_one()


def test_scenario_a_creates_one_pending_row_with_pals_chooser(repo, accept, clock):
    registrar = RegistrarService(repo, clock=clock)
    accept("u1", "u2", Lane.PALS)
    assert registrar.register_if_mutual("u1", "u2", Lane.PALS) is False

    accept("u2", "u1", Lane.MATCH)
    assert registrar.register_if_mutual("u2", "u1", Lane.MATCH) is True

    row = repo.get_connection("u1", "u2")
    assert row is not None
    assert row.chooser_id == "u1"
    assert row.resolved_at is None
    assert row.chosen_lane is None
    assert row.resolved_by is None
    assert as_utc(row.created_at) == clock.now
    assert as_utc(row.expires_at) == clock.now + timedelta(hours=72)


def test_pair_key_is_canonical_whichever_side_registers(repo, accept, clock):
    registrar = RegistrarService(repo, clock=clock)
    accept("zed", "amy", Lane.MATCH)
    accept("amy", "zed", Lane.PALS)

    assert registrar.register_if_mutual("amy", "zed", "pals") is True
    assert registrar.register_if_mutual("zed", "amy", "match") is True

    assert _row_count() == 1
    row = repo.get_connection("amy", "zed")
    assert (row.user_low, row.user_high) == ("amy", "zed")
    assert row.chooser_id == "amy"


def test_repeated_registration_is_idempotent(repo, accept, clock):
    registrar = RegistrarService(repo, clock=clock)
    accept("u1", "u2", Lane.PALS)
    accept("u2", "u1", Lane.MATCH)

    assert registrar.register_if_mutual("u2", "u1", Lane.MATCH) is True
    first = repo.get_connection("u1", "u2")
    clock.advance(hours=1)
    assert registrar.register_if_mutual("u2", "u1", Lane.MATCH) is True

    assert _row_count() == 1
    again = repo.get_connection("u1", "u2")
    assert again.created_at == first.created_at


def test_pals_acceptor_is_chooser_even_when_acting_second(repo, accept, clock):
    registrar = RegistrarService(repo, clock=clock)
    accept("b", "a", Lane.MATCH)
    accept("a", "b", Lane.PALS)

    assert registrar.register_if_mutual("a", "b", Lane.PALS) is True
    row = repo.get_connection("a", "b")
    assert row.chooser_id == "a"
    assert row.chooser_id in {row.user_low, row.user_high}


def test_same_lane_mutual_does_not_create_pending(repo, accept, clock):
    registrar = RegistrarService(repo, clock=clock)
    accept("u1", "u2", Lane.PALS)
    accept("u1", "u2", Lane.MATCH)
    accept("u2", "u1", Lane.MATCH)

    assert registrar.register_if_mutual("u2", "u1", Lane.MATCH) is False
    assert _row_count() == 0


def test_reject_in_other_lane_is_not_an_acceptance(repo, accept, clock):
    registrar = RegistrarService(repo, clock=clock)
    accept("u1", "u2", Lane.PALS, action="reject")
    accept("u2", "u1", Lane.MATCH)

    assert registrar.register_if_mutual("u2", "u1", Lane.MATCH) is False
    assert _row_count() == 0


def test_invalid_input_is_a_silent_noop(repo, accept, clock):
    registrar = RegistrarService(repo, clock=clock)
    accept("u1", "u2", Lane.PALS)

    assert registrar.register_if_mutual("u1", "u1", Lane.PALS) is False
    assert registrar.register_if_mutual("", "u2", Lane.PALS) is False
    assert registrar.register_if_mutual("u2", None, Lane.MATCH) is False
    assert registrar.register_if_mutual("u2", "u1", "friends") is False
    assert _row_count() == 0


def test_registration_never_touches_resolved_row(repo, accept, clock):
    registrar = RegistrarService(repo, clock=clock)
    accept("u1", "u2", Lane.PALS)
    accept("u2", "u1", Lane.MATCH)
    registrar.register_if_mutual("u2", "u1", Lane.MATCH)

    with repo.transaction() as session:
        row = repo.lock_connection(session, "u1", "u2")
        row.chosen_lane = "match"
        row.resolved_by = "chooser"
        row.resolved_at = clock.now
        row.updated_at = clock.now

    assert registrar.register_if_mutual("u2", "u1", Lane.MATCH) is False
    row = repo.get_connection("u1", "u2")
    assert row.chosen_lane == "match"
    assert _row_count() == 1


def test_store_failure_is_logged_and_swallowed(repo, clock, monkeypatch, caplog):
    registrar = RegistrarService(repo, clock=clock)

    def boom(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    monkeypatch.setattr(repo, "has_accept", boom)
    with caplog.at_level("ERROR", logger="crosslane.registrar"):
        assert registrar.register_if_mutual("u2", "u1", Lane.MATCH) is False
    assert "cross-lane registration failed" in caplog.text


def test_both_sides_registering_at_once_converge_on_one_row(repo, accept, clock, monkeypatch):
    accept("u1", "u2", Lane.PALS)
    accept("u2", "u1", Lane.MATCH)
    first = RegistrarService(repo, clock=clock)
    second = RegistrarService(SQLRepository(), clock=clock)
    insert = repo.insert_pending_if_absent
    other_side = []

    def insert_after_other_side_commits(session, **values):
        other_side.append(second.register_if_mutual("u1", "u2", Lane.PALS))
        return insert(session, **values)

    monkeypatch.setattr(repo, "insert_pending_if_absent", insert_after_other_side_commits)

    assert first.register_if_mutual("u2", "u1", Lane.MATCH) is True
    assert other_side == [True]
    assert _row_count() == 1
    assert repo.get_connection("u1", "u2").chooser_id == "u1"
