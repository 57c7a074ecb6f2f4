"""
Health Check Endpoints

Liveness and readiness checks for orchestration systems.
"""

from typing import Dict

from fastapi import APIRouter, Depends, Response

from dashboard_api.database import ConnectionManager
from dashboard_api.serving.api.dependencies import get_connection_manager

router = APIRouter()


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """
    Liveness check endpoint.

    Returns 200 if the application is running.
    """
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(
    response: Response,
    connections: ConnectionManager = Depends(get_connection_manager),
) -> Dict[str, str]:
    """
    Readiness check endpoint.

    Returns 503 while the analytical store is unreachable. Reports keep
    serving fallback data in that state, so this is the signal to alert on.
    """
    db_health = await connections.check_health()

    if db_health.get("status") != "healthy":
        response.status_code = 503
        return {"status": "not_ready", "reason": "database_unavailable"}

    return {"status": "ready", "source": str(db_health.get("source"))}
