"""Day classifier — which day types are active on a date.

Resolution order:
1. An explicit marking for the exact date.
2. A yearly-repeating marking for the same month/day (holidays, birthdays).
3. Auto-detection: "weekend" on Saturday/Sunday, otherwise "regular".

With smart scheduling disabled, markings are ignored and only step 3 runs:
Saturdays and Sundays still classify as "weekend" rather than collapsing
every date to "regular", so weekend-only habits keep working.
The result is never empty; its first element is the primary type shown in
badges.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import logging
from datetime import date

from src.core.dates import is_weekend
from src.core.day_types import BUILT_IN_DAY_TYPES
from src.data.models import MarkedDate, SmartScheduleConfig

logger = logging.getLogger(__name__)

_BUILT_IN_RANK = {day_type: i for i, day_type in enumerate(BUILT_IN_DAY_TYPES)}


def format_date_key(day: date) -> str:
    """Key used for marked_dates: YYYY-MM-DD."""
    return day.isoformat()


def _ordered(day_types: frozenset[str]) -> list[str]:
    """Built-ins in canonical order first, then custom keys alphabetically."""
    return sorted(
        day_types,
        key=lambda dt: (0, _BUILT_IN_RANK[dt], "") if dt in _BUILT_IN_RANK else (1, 0, dt),
    )


def auto_detect_day_type(day: date) -> str:
    return "weekend" if is_weekend(day) else "regular"


def get_marked_date(day: date, config: SmartScheduleConfig) -> MarkedDate | None:
    """The exact-date marking, if any (yearly repeats not considered)."""
    return config.marked_dates.get(format_date_key(day))


def _yearly_match(day: date, config: SmartScheduleConfig) -> MarkedDate | None:
    month_day = (day.month, day.day)
    for marked in config.marked_dates.values():
        if marked.repeats_yearly and (marked.date.month, marked.date.day) == month_day:
            return marked
    return None


def get_day_types(day: date, config: SmartScheduleConfig) -> list[str]:
    """Active day types for a date. Never empty; first element is primary."""
    if config.enabled:
        marked = get_marked_date(day, config) or _yearly_match(day, config)
        if marked is not None and marked.day_types:
            return _ordered(marked.day_types)
    return [auto_detect_day_type(day)]


def get_primary_day_type(day: date, config: SmartScheduleConfig) -> str:
    return get_day_types(day, config)[0]


def is_date_marked(day: date, config: SmartScheduleConfig) -> bool:
    return format_date_key(day) in config.marked_dates


def get_marked_dates_for_month(
    year: int, month: int, config: SmartScheduleConfig,
) -> list[MarkedDate]:
    """Markings to show on a month calendar (month is 1-12).

    Includes exact dates in that month and yearly-repeating markings from any
    year whose month matches.
    """
    result = [
        m for m in config.marked_dates.values()
        if m.date.month == month and (m.date.year == year or m.repeats_yearly)
    ]
    result.sort(key=lambda m: (m.date.day, m.date.year))
    return result
