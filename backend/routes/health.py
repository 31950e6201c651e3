# Health check endpoints for system monitoring

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from datetime import datetime, timezone

from core.database import get_db_health


router = APIRouter(prefix="/health", tags=["health"])


class HealthStatus:
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@router.get("/live")
async def liveness_check():
    """
    Basic liveness check - returns 200 if the service is running
    """
    return {
        "status": "alive",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "haggle-api"
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """
    Readiness check - the database answers and the push channel is up
    """
    db_health = await get_db_health()
    push_channel = getattr(request.app.state, "push_channel", None)
    push_ready = push_channel is not None and not push_channel.is_shut_down

    healthy = db_health.get("status") == HealthStatus.HEALTHY and push_ready
    response_data = {
        "status": HealthStatus.HEALTHY if healthy else HealthStatus.UNHEALTHY,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "haggle-api",
        "checks": [
            {"name": "database", **db_health},
            {"name": "push_channel", "status": HealthStatus.HEALTHY if push_ready else HealthStatus.UNHEALTHY},
        ]
    }
    return JSONResponse(content=response_data, status_code=200 if healthy else 503)
