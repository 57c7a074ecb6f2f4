"""
API Routes Module
"""
from .debug import router as debug_router
from .health import router as health_router
from .metrics import router as metrics_router
from .reports import router as reports_router

__all__ = [
    "debug_router",
    "health_router",
    "metrics_router",
    "reports_router",
]
