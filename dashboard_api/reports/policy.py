"""
Report Fallback Policy

Every report is all-or-nothing: either the live computation succeeds, or
the whole payload is replaced by the report's fallback constant.
"""

import functools
from typing import Awaitable, Callable, TypeVar

import structlog
from pydantic import BaseModel

from dashboard_api.serving.metrics import FALLBACK_DATA_USAGE

logger = structlog.get_logger(__name__)

ReportT = TypeVar("ReportT", bound=BaseModel)


async def with_fallback(
    compute: Callable[[], Awaitable[ReportT]],
    fallback: ReportT,
    label: str,
) -> ReportT:
    """
    Run a live report computation, substituting the fallback on failure.

    Args:
        compute: Zero-argument coroutine function producing the report
        fallback: Payload served instead when compute raises
        label: Report name used in logs and metrics

    Returns:
        The live report, or a deep copy of the fallback
    """
    try:
        return await compute()
    except Exception as e:
        logger.error(
            "Report query failed, serving fallback data",
            report=label,
            error=str(e),
            error_type=type(e).__name__,
        )
        FALLBACK_DATA_USAGE.labels(report=label).inc()
        return fallback.model_copy(deep=True)


def falls_back_to(fallback: ReportT, label: str):
    """
    Decorator form of with_fallback for report coroutines.

    Example:
        @falls_back_to(KPI_FALLBACK, "kpi")
        async def get_kpi_data(self, date_range): ...
    """

    def decorator(func: Callable[..., Awaitable[ReportT]]) -> Callable[..., Awaitable[ReportT]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> ReportT:
            return await with_fallback(lambda: func(*args, **kwargs), fallback, label)

        return wrapper

    return decorator
