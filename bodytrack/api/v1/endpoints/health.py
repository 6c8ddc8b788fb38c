"""Health check endpoint for load balancers and monitoring."""

import os

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from bodytrack.api.deps import get_measurements_client
from bodytrack.core.config import get_settings
from bodytrack.services.measurements_client import MeasurementsClient
from bodytrack.services.session_store import SessionStore, get_session_store

router = APIRouter()


@router.get("")
def health(store: SessionStore = Depends(get_session_store)):
    """Simple liveness check. Optionally includes built_at if BACKEND_BUILT_AT env is set."""
    payload: dict = {"status": "ok", "open_sessions": len(store)}
    built_at = os.environ.get("BACKEND_BUILT_AT")
    if built_at:
        payload["built_at"] = built_at
    return payload


@router.get("/ready")
def readiness(client: MeasurementsClient = Depends(get_measurements_client)):
    """Readiness: app + remote measurements API reachable."""
    if client.check_health(get_settings().measurements_root_url):
        return {"status": "ok", "measurements_api": "reachable"}
    return JSONResponse(
        status_code=503,
        content={"status": "error", "measurements_api": "unreachable"},
    )
