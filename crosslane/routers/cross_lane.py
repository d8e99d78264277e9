from __future__ import annotations

from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse

from crosslane.core.identity import current_user_id
from crosslane.domain.results import CrossLaneError
from crosslane.services.connections import ConnectionsService
from crosslane.services.inbox import DEFAULT_LIMIT, ChooserInboxService
from crosslane.services.resolver import ResolverService

router = APIRouter(prefix="/cross-lane", tags=["cross-lane"])

ERROR_STATUS = {
    CrossLaneError.NOT_AUTHENTICATED: 401,
    CrossLaneError.INVALID_TARGET: 400,
    CrossLaneError.INVALID_CHOICE_LANE: 400,
    CrossLaneError.NOT_FOUND: 404,
    CrossLaneError.NOT_CHOOSER: 403,
    CrossLaneError.NOT_PENDING: 409,
}

ERROR_MESSAGES = {
    CrossLaneError.NOT_CHOOSER: "You can't decide this one.",
}


def _service(request: Request, name: str):
    svc = getattr(getattr(request.app, "state", None), name, None)
    if not svc:
        raise RuntimeError(f"{name} not configured")
    return svc


def _error_response(error: CrossLaneError, body: dict | None = None) -> JSONResponse:
    payload = dict(body or {"ok": False, "error": error.value})
    if error in ERROR_MESSAGES:
        payload["message"] = ERROR_MESSAGES[error]
    return JSONResponse(payload, status_code=ERROR_STATUS.get(error, 400))


def _not_authenticated() -> JSONResponse:
    return _error_response(CrossLaneError.NOT_AUTHENTICATED)


@router.get("/pending")
def list_pending(request: Request, limit: int = DEFAULT_LIMIT):
    me = current_user_id(request)
    if not me:
        return _not_authenticated()
    svc: ChooserInboxService = _service(request, "inbox_service")
    items = svc.list_pending_for_chooser(me, limit)
    return {"ok": True, "items": [item.to_dict() for item in items]}


@router.get("/pending/{other_id}")
def pending_details(other_id: str, request: Request):
    svc: ConnectionsService = _service(request, "connections_service")
    result = svc.get_pending_details(current_user_id(request), other_id)
    if not result.ok:
        return _error_response(result.error, result.to_dict())
    return result.to_dict()


@router.post("/resolve/{other_id}")
def resolve(other_id: str, request: Request, payload: dict | None = Body(default=None)):
    svc: ResolverService = _service(request, "resolver_service")
    result = svc.resolve(current_user_id(request), other_id, (payload or {}).get("lane"))
    if not result.ok:
        return _error_response(result.error, result.to_dict())
    return result.to_dict()


@router.get("/connections")
def resolved_connections(request: Request, limit: int = DEFAULT_LIMIT):
    me = current_user_id(request)
    if not me:
        return _not_authenticated()
    svc: ConnectionsService = _service(request, "connections_service")
    return {"ok": True, "items": [c.to_dict() for c in svc.list_resolved_for_user(me, limit)]}
