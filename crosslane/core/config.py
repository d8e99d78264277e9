"""
Configuration helpers for the cross-lane service.

Routers, services and jobs read settings through get_settings() instead of
fetching os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    database_url: str
    decision_window_hours: int
    sweep_limit: int
    inbox_max_limit: int
    internal_job_secret: str
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            parsed = int(value)
        except (TypeError, ValueError):
            return default
        return parsed if parsed > 0 else default

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        database_url=os.getenv("DATABASE_URL", ""),
        decision_window_hours=_int(os.getenv("CROSS_LANE_DECISION_WINDOW_HOURS", "72"), 72),
        sweep_limit=_int(os.getenv("CROSS_LANE_SWEEP_LIMIT", "200"), 200),
        inbox_max_limit=_int(os.getenv("CROSS_LANE_INBOX_MAX_LIMIT", "100"), 100),
        internal_job_secret=os.getenv("INTERNAL_JOB_SECRET", ""),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
