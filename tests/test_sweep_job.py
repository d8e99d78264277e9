from datetime import datetime, timedelta, timezone

from crosslane.domain.lanes import Lane
from crosslane.jobs import sweep_expired
from crosslane.services.registrar import RegistrarService


def test_job_sweeps_expired_rows(repo, accept, capsys):
    long_ago = datetime.now(timezone.utc) - timedelta(hours=100)
    accept("u1", "u2", Lane.PALS)
    accept("u2", "u1", Lane.MATCH)
    RegistrarService(repo, clock=lambda: long_ago).register_if_mutual("u2", "u1", Lane.MATCH)

    assert sweep_expired.main(["--limit", "10"]) == 0
    assert "Resolved 1 expired" in capsys.readouterr().out
    assert repo.get_connection("u1", "u2").resolved_by == "auto"

    assert sweep_expired.main(["--all"]) == 0
    assert "Resolved 0 expired" in capsys.readouterr().out
