"""
Report Calculations

Date windows and numeric derivations shared by every report.
"""

import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Sequence

# Postgres EXTRACT(DOW ...) numbering: 0 = Sunday ... 6 = Saturday
WEEKDAY_NAMES: Sequence[str] = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
DAYS_IN_WEEK = 7


@dataclass(frozen=True)
class DateRange:
    """Inclusive [start, end] window a report is scoped to."""

    start: datetime
    end: datetime

    def previous(self, lag_days: int) -> "DateRange":
        """The comparison window: the same range shifted back by lag_days."""
        lag = timedelta(days=lag_days)
        return DateRange(self.start - lag, self.end - lag)

    def as_params(self) -> Dict[str, datetime]:
        return {"start": self.start, "end": self.end}


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with halves going up.

    The dashboard rounds 2.5 to 3 and -2.5 to -2; builtin round() would
    give 2 and -2.
    """
    return int(math.floor(value + 0.5))


def to_number(value: Any) -> float:
    """Coerce a driver value (Decimal, int, numeric string, None) to float."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def percent_change(current: float, previous: float) -> int:
    """Whole-percent change from previous to current; 0 when previous is 0."""
    if not previous:
        return 0
    return round_half_up((current - previous) / previous * 100)


def share_percent(part: float, total: float) -> int:
    """Whole-percent share of total; 0 when total is 0."""
    if not total:
        return 0
    return round_half_up(part / total * 100)


def group_by_weekday(
    rows: Iterable[Mapping[str, Any]],
    column: str = "day_of_week",
) -> Dict[int, List[Mapping[str, Any]]]:
    """Index rows by Postgres day-of-week, dropping values outside 0..6."""
    grouped: Dict[int, List[Mapping[str, Any]]] = defaultdict(list)
    for row in rows:
        value = row.get(column)
        if value is None:
            continue
        dow = int(to_number(value))
        if 0 <= dow < DAYS_IN_WEEK:
            grouped[dow].append(row)
    return grouped


def monday_first_index(dow: int) -> int:
    """Convert Sunday-first DOW (0..6) to a Monday-first index (Mon=0 .. Sun=6)."""
    return (dow + 6) % DAYS_IN_WEEK


def format_thousands(count: float) -> str:
    """Compact stage label, e.g. 6800 -> '6.8k'."""
    return f"{count / 1000:.1f}k"
