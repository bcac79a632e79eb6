"""Calendar helpers shared by the schedulers and analytics."""

from __future__ import annotations

import calendar
from datetime import date, datetime

from src.data.models import WEEKEND_DAYS


def is_weekend(day: date) -> bool:
    return day.weekday() in WEEKEND_DAYS


def add_months(day: date, months: int) -> date:
    """Shift by calendar months, clamping the day (Mar 31 - 1 month = Feb 28/29)."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def parse_date(value: str | date) -> date:
    """Accept a date, an ISO date (YYYY-MM-DD) or an ISO datetime string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if "T" in value:
        return datetime.fromisoformat(value).date()
    return date.fromisoformat(value)
