"""
Diagnostics Endpoints

Connection check with a masked view of the database configuration.
"""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from dashboard_api.reports import DataService
from dashboard_api.serving.api.dependencies import get_data_service

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.get("/debug/db")
async def debug_database(
    request: Request,
    service: DataService = Depends(get_data_service),
):
    """
    Check the analytical store.

    The environment block only says which settings are present; no secret
    or full hostname is ever echoed back.
    """
    environment = request.app.state.settings.database.masked_environment()
    timestamp = datetime.now(timezone.utc).isoformat()

    if await service.test_database_connection():
        logger.info("Database debug check succeeded")
        return {
            "success": True,
            "message": "Database connection successful",
            "timestamp": timestamp,
            "environment": environment,
        }

    logger.warning("Database debug check failed")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Database connection failed",
            "timestamp": timestamp,
            "environment": environment,
        },
    )
