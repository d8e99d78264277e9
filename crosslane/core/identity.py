"""Caller identity helpers.

Authentication happens upstream: the gateway verifies the session and forwards
the acting user's id in a header. This module only reads it.
"""
from __future__ import annotations

import hmac

from fastapi import Request

from .config import get_settings

USER_ID_HEADER = "X-User-Id"
INTERNAL_SECRET_HEADER = "X-Internal-Secret"


def current_user_id(request: Request) -> str | None:
    """Return the authenticated user id forwarded by the gateway, if any."""
    value = (request.headers.get(USER_ID_HEADER) or "").strip()
    return value or None


def internal_caller_allowed(request: Request) -> bool:
    secret = get_settings().internal_job_secret
    if not secret:
        return True
    provided = request.headers.get(INTERNAL_SECRET_HEADER) or ""
    return hmac.compare_digest(provided, secret)
