from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from crosslane.core.config import get_settings
from crosslane.core.identity import internal_caller_allowed
from crosslane.services.inbox import clamp_limit
from crosslane.services.registrar import RegistrarService
from crosslane.services.sweeper import MAX_BATCH, SweeperService

router = APIRouter(prefix="/internal", tags=["internal"])


@router.post("/cross-lane/sweep")
def sweep(request: Request, limit: int | None = None):
    if not internal_caller_allowed(request):
        return JSONResponse({"error": "Unauthorized"}, status_code=401)
    svc: SweeperService = getattr(request.app.state, "sweeper_service", None)
    if not svc:
        raise RuntimeError("sweeper_service not configured")
    size = clamp_limit(limit, get_settings().sweep_limit, MAX_BATCH)
    return svc.sweep_expired(limit=size).to_dict()


@router.post("/cross-lane/register")
def register_hook(request: Request, payload: dict):
    """Swipe-ingestion hook; always acknowledges so the swipe path never fails."""
    if not internal_caller_allowed(request):
        return JSONResponse({"error": "Unauthorized"}, status_code=401)
    svc: RegistrarService = getattr(request.app.state, "registrar_service", None)
    if not svc:
        raise RuntimeError("registrar_service not configured")
    pending = svc.register_if_mutual(payload.get("acting_user"), payload.get("candidate_user"), payload.get("lane"))
    return {"ok": True, "cross_lane_pending": pending}
