"""
FastAPI Application Factory

Creates and configures the dashboard analytics API. The connection
manager, query executor and data service are built once per application
and shared through app.state.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from dashboard_api.config import Settings, get_settings
from dashboard_api.config.logging import configure_logging
from dashboard_api.database import ConnectionManager, QueryExecutor
from dashboard_api.reports import DataService, InvalidReportRequest
from dashboard_api.serving.api.middleware import RequestLoggingMiddleware
from dashboard_api.serving.api.routes import (
    debug_router,
    health_router,
    metrics_router,
    reports_router,
)

logger = structlog.get_logger(__name__)


async def invalid_report_request_handler(request: Request, exc: InvalidReportRequest) -> JSONResponse:
    logger.warning("Rejected report request", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=400, content={"error": exc.message})


def create_api_app(
    settings: Optional[Settings] = None,
    connections: Optional[ConnectionManager] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Application settings (defaults to the environment)
        connections: Connection manager to use instead of building one

    Returns:
        Configured FastAPI app instance
    """
    settings = settings or get_settings()
    connections = connections or ConnectionManager(settings.database)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings=settings)
        logger.info("Starting dashboard analytics API", version=settings.version, env=settings.app_env)

        yield

        logger.info("Shutting down...")
        await connections.close()

    app = FastAPI(
        title="Dashboard Analytics API",
        description="Read-only reporting over the TimescaleDB analytical store",
        version=settings.version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.connections = connections
    app.state.data_service = DataService(QueryExecutor(connections), settings.reports)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(InvalidReportRequest, invalid_report_request_handler)

    app.include_router(health_router, prefix="/api", tags=["Health"])
    app.include_router(reports_router, prefix="/api", tags=["Reports"])
    app.include_router(debug_router, prefix="/api", tags=["Diagnostics"])
    if settings.monitoring.metrics_enabled:
        app.include_router(metrics_router, prefix="/api", tags=["Monitoring"])

    return app
