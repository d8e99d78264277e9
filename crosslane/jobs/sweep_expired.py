"""
Resolve expired cross-lane connections.

Meant for an external scheduler (cron, Kubernetes CronJob) every 15 minutes:

    python -m crosslane.jobs.sweep_expired --limit 200

Runs one sweep and exits; there is no internal loop.
"""
from __future__ import annotations

import argparse
import logging

from sqlalchemy.exc import SQLAlchemyError

from crosslane.core.config import get_settings
from crosslane.core.logconfig import configure_logging
from crosslane.services.inbox import clamp_limit
from crosslane.services.sweeper import MAX_BATCH, SweeperService

log = logging.getLogger("crosslane.jobs")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Auto-resolve expired cross-lane connections.")
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help=f"Max rows per run (1-{MAX_BATCH}); defaults to CROSS_LANE_SWEEP_LIMIT.",
    )
    parser.add_argument("--all", action="store_true", help="Sweep every expired row in a single update.")
    args = parser.parse_args(argv)

    configure_logging()
    limit = None if args.all else clamp_limit(args.limit, get_settings().sweep_limit, MAX_BATCH)
    try:
        report = SweeperService().sweep_expired(limit=limit)
    except SQLAlchemyError as exc:
        log.exception("cross-lane sweep failed")
        raise SystemExit(f"Sweep failed: {exc}") from exc
    print(f"Resolved {report.resolved} expired cross-lane connection(s).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
