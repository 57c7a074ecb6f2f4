"""
API Dependencies

Request-scoped accessors for the services built once by the application
factory, and parsing of the shared from/to query parameters.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import Query, Request

from dashboard_api.database import ConnectionManager
from dashboard_api.reports import DataService, DateRange, InvalidReportRequest

RANGE_REQUIRED = "Date range parameters (from, to) are required"


def get_data_service(request: Request) -> DataService:
    return request.app.state.data_service


def get_connection_manager(request: Request) -> ConnectionManager:
    return request.app.state.connections


def _parse_timestamp(value: str, parameter: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        raise InvalidReportRequest(f"Invalid ISO 8601 timestamp for '{parameter}': {value}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _build_range(start: str, end: str) -> DateRange:
    date_range = DateRange(_parse_timestamp(start, "from"), _parse_timestamp(end, "to"))
    if date_range.start > date_range.end:
        raise InvalidReportRequest("'from' must not be later than 'to'")
    return date_range


def get_date_range(
    start: Optional[str] = Query(None, alias="from", description="Range start (ISO 8601)"),
    end: Optional[str] = Query(None, alias="to", description="Range end (ISO 8601)"),
) -> DateRange:
    """
    Required date range for a report.

    Raises:
        InvalidReportRequest: If either bound is missing or malformed
    """
    if not start or not end:
        raise InvalidReportRequest(RANGE_REQUIRED)
    return _build_range(start, end)


def get_optional_date_range(
    start: Optional[str] = Query(None, alias="from", description="Range start (ISO 8601)"),
    end: Optional[str] = Query(None, alias="to", description="Range end (ISO 8601)"),
) -> Optional[DateRange]:
    """Date range that may be omitted entirely, but not half-specified."""
    if not start and not end:
        return None
    if not start or not end:
        raise InvalidReportRequest(RANGE_REQUIRED)
    return _build_range(start, end)
