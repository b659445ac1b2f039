"""
Status router - aggregate health of the gateway and every backend.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from pokegateway.state import AppState, get_app_state

router = APIRouter(tags=["status"])


@router.get(
    "/status",
    responses={
        200: {"description": "Every backend is healthy"},
        503: {"description": "At least one backend is unhealthy (`overall_status` is `degraded`)"}
    }
)
async def status(state: AppState = Depends(get_app_state)) -> JSONResponse:
    """Check `/health` on every backend concurrently and report the combined status."""
    report = await state.health.check_all()

    body = {
        "gateway": {
            "status": "healthy",
            "uptime_seconds": state.uptime_seconds,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        "microservices": report.services_dict(),
        "overall_status": report.overall_status,
        "check_duration_ms": report.check_duration_ms,
    }
    return JSONResponse(status_code=200 if report.is_healthy else 503, content=body)
