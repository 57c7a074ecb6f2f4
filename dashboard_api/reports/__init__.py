"""
Reports Module

Aggregations behind each dashboard report, with all-or-nothing fallback.
"""
from .calculations import DateRange
from .exceptions import InvalidReportRequest, ReportError, SkuNotFoundError
from .policy import falls_back_to, with_fallback
from .service import DataService

__all__ = [
    "DateRange",
    "DataService",
    "InvalidReportRequest",
    "ReportError",
    "SkuNotFoundError",
    "falls_back_to",
    "with_fallback",
]
