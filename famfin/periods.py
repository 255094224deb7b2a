# famfin/periods.py
"""
Helpers for calendar periods.

Definitions
- month period: (year, month) with month 1-12, e.g. (2025, 1) for Jan 2025
- bounds: half-open [first day of month, first day of next month)

Public API:
- add_months(date, n) -> date         # day clamped to the target month's end
- month_bounds(year, month) -> (date, date)
- validate_month(month) -> None
- days_ago(datetime, n) -> datetime
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

from dateutil.relativedelta import relativedelta

__all__ = [
    "add_months",
    "month_bounds",
    "validate_month",
    "days_ago",
]


def validate_month(month: int) -> None:
    if month < 1 or month > 12:
        raise ValueError("Month must be between 1 and 12")


def add_months(d: date, months: int) -> date:
    """
    Shift a date by whole months.
    Examples: 2025-01-15 +1 -> 2025-02-15, 2025-01-31 +1 -> 2025-02-28.
    """
    return d + relativedelta(months=months)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """Return [start, end) for the given month. Example: (2025, 12) -> (2025-12-01, 2026-01-01)."""
    validate_month(month)
    start = date(year, month, 1)
    return start, add_months(start, 1)


def days_ago(now: datetime, days: int) -> datetime:
    """Cutoff timestamp `days` before `now`."""
    return now - timedelta(days=days)
