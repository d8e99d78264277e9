import logging

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware

from crosslane.core.config import get_settings
from crosslane.core.logconfig import configure_logging
from crosslane.routers import cross_lane as cross_lane_router
from crosslane.routers import internal as internal_router
from crosslane.repositories.sql_repository import SQLRepository
from crosslane.services.connections import ConnectionsService
from crosslane.services.inbox import ChooserInboxService
from crosslane.services.registrar import RegistrarService
from crosslane.services.resolver import ResolverService
from crosslane.services.sweeper import SweeperService

log = logging.getLogger("crosslane")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers for a JSON-only API."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Cache-Control", "no-store")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def create_app() -> FastAPI:
    """Factory compatible with uvicorn/gunicorn (``--factory``)."""
    configure_logging()
    settings = get_settings()

    app = FastAPI(title="Cross-Lane Resolution API")
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    repository = SQLRepository()
    app.state.registrar_service = RegistrarService(repository)
    app.state.inbox_service = ChooserInboxService(repository)
    app.state.resolver_service = ResolverService(repository)
    app.state.connections_service = ConnectionsService(repository)
    app.state.sweeper_service = SweeperService(repository)

    app.include_router(cross_lane_router.router)
    app.include_router(internal_router.router)

    log.info("cross-lane API configured (env=%s)", settings.app_env)
    return app
