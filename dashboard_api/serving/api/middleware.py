"""
API Middleware

Request logging with timing, request ids and the HTTP duration histogram.
"""

import time
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from dashboard_api.serving.metrics import HTTP_REQUEST_DURATION

logger = structlog.get_logger(__name__)


def _route_label(request: Request, status_code: int) -> str:
    # Unmatched paths share one label to keep metric cardinality bounded
    if status_code == 404:
        return "unmatched"
    return request.url.path


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all requests with timing information"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        request_id = request.headers.get("X-Request-ID", str(time.time_ns()))

        logger.info(
            "Request started",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client=request.client.host if request.client else None,
        )

        response = await call_next(request)

        duration = time.perf_counter() - start_time
        HTTP_REQUEST_DURATION.labels(
            method=request.method,
            route=_route_label(request, response.status_code),
            status_code=str(response.status_code),
        ).observe(duration)

        logger.info(
            "Request completed",
            request_id=request_id,
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 2),
        )

        response.headers["X-Response-Time"] = f"{duration * 1000:.2f}ms"
        response.headers["X-Request-ID"] = request_id

        return response
