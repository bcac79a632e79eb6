"""
LifeOS Smart Scheduler — Habit Resolver.

Decides which habits are due on a date, what time/cue applies on the day's
type, and derives streaks and system health from the completion log.

A habit is due when all of these hold:
- status is "active"
- its frequency rule matches the date
- its affinity matches at least one of the date's day types

No I/O: this module only transforms data.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from datetime import date, timedelta
from typing import Iterable

from src.core.dates import is_weekend
from src.data.models import Habit, HabitCompletion, HabitCue

logger = logging.getLogger(__name__)

_ONE_DAY = timedelta(days=1)
_HEALTH_WINDOW_DAYS = 7
_WEEKLY_CHECK_DAY = 0  # weekly habits are expected on Mondays when scoring health


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


# ---------------------------------------------------------------------------
# Due today
# ---------------------------------------------------------------------------


def habit_matches_frequency(habit: Habit, day: date) -> bool:
    """Frequency rule only; ignores status and day types."""
    if habit.frequency == "daily":
        return True
    if habit.frequency == "weekdays":
        return not is_weekend(day)
    if habit.frequency == "weekends":
        return is_weekend(day)
    if habit.frequency == "weekly":
        return True  # shown every day; which day of the week is the user's call
    if habit.frequency == "custom":
        return day.weekday() in habit.custom_days
    return False


def is_habit_due_today(habit: Habit, day: date, day_types: Iterable[str]) -> bool:
    """True when the habit is active, its frequency matches, and its affinity
    overlaps the day's active types."""
    if habit.status != "active":
        return False
    if not habit_matches_frequency(habit, day):
        return False
    return habit.affinity.matches(day_types)


def get_habits_due_today(habits: list[Habit], day: date | None = None) -> list[Habit]:
    """Simple mode: active habits whose frequency matches, day types ignored."""
    day = day or date.today()
    return [h for h in habits if h.status == "active" and habit_matches_frequency(h, day)]


def get_habits_due_today_with_day_type(
    habits: list[Habit],
    day_types: str | Iterable[str],
    day: date | None = None,
) -> list[Habit]:
    """Smart mode: frequency and day-type affinity must both match.

    Accepts a single day type or several (multi-type days).
    """
    day = day or date.today()
    active = {day_types} if isinstance(day_types, str) else set(day_types)
    return [h for h in habits if is_habit_due_today(h, day, active)]


# ---------------------------------------------------------------------------
# Per-day-type schedule
# ---------------------------------------------------------------------------


def get_effective_time_of_day(habit: Habit, day_type: str) -> str | None:
    override = habit.day_type_overrides.get(day_type)
    if override is not None and override.time_of_day:
        return override.time_of_day
    return habit.time_of_day


def get_effective_cue(habit: Habit, day_type: str) -> HabitCue:
    """The habit's cue with any day-type value override applied.

    Returns a new HabitCue when overridden; the stored habit is untouched.
    """
    override = habit.day_type_overrides.get(day_type)
    if override is None or not override.cue_value:
        return habit.cue
    return replace(habit.cue, value=override.cue_value)


# ---------------------------------------------------------------------------
# Streaks
# ---------------------------------------------------------------------------


def previous_expected_day(
    current: date, frequency: str, custom_days: frozenset[int] = frozenset(),
) -> date:
    """The occurrence before `current` under the frequency rule."""
    if frequency == "weekly":
        return current - timedelta(days=7)

    prev = current - _ONE_DAY
    if frequency == "weekdays":
        while is_weekend(prev):
            prev -= _ONE_DAY
    elif frequency == "weekends":
        while not is_weekend(prev):
            prev -= _ONE_DAY
    elif frequency == "custom" and custom_days:
        while prev.weekday() not in custom_days:
            prev -= _ONE_DAY
    return prev


def _unique_dates(completions: Iterable[HabitCompletion]) -> list[date]:
    return sorted({c.date for c in completions}, reverse=True)


def calculate_streak(
    completions: Iterable[HabitCompletion],
    frequency: str,
    today: date | None = None,
    custom_days: frozenset[int] = frozenset(),
) -> int:
    """Current streak from the completion log.

    The streak is live only if the latest completion is today or yesterday.
    From there, walk back one expected occurrence at a time and stop at the
    first one that was missed. Several completions on one date count once.
    """
    dates = _unique_dates(completions)
    if not dates:
        return 0

    today = today or date.today()
    if dates[0] not in (today, today - _ONE_DAY):
        return 0

    streak = 1
    current = dates[0]
    for completed in dates[1:]:
        if completed != previous_expected_day(current, frequency, custom_days):
            break
        streak += 1
        current = completed
    return streak


def calculate_longest_streak(
    completions: Iterable[HabitCompletion],
    frequency: str,
    custom_days: frozenset[int] = frozenset(),
) -> int:
    """Longest run of consecutive expected occurrences anywhere in the log."""
    dates = _unique_dates(completions)
    if not dates:
        return 0

    longest = run = 1
    for newer, older in zip(dates, dates[1:]):
        if older == previous_expected_day(newer, frequency, custom_days):
            run += 1
        else:
            run = 1
        longest = max(longest, run)
    return longest


def refresh_streak_counters(
    habit: Habit,
    completions: Iterable[HabitCompletion],
    today: date | None = None,
) -> Habit:
    """Return a copy of the habit with counters recomputed from its log."""
    own = [c for c in completions if c.habit_id == habit.id]
    return replace(
        habit,
        streak=calculate_streak(own, habit.frequency, today, habit.custom_days),
        longest_streak=calculate_longest_streak(own, habit.frequency, habit.custom_days),
        total_completions=len(own),
    )


# ---------------------------------------------------------------------------
# System health
# ---------------------------------------------------------------------------


def _expected_on(habit: Habit, day: date) -> bool:
    if habit.frequency == "weekly":
        return day.weekday() == _WEEKLY_CHECK_DAY
    return habit_matches_frequency(habit, day)


def calculate_system_health(
    habits: Iterable[Habit],
    completions: Iterable[HabitCompletion],
    today: date | None = None,
) -> int:
    """Adherence over the last 7 days (today included) as 0-100.

    Counts, for every active habit, the days it was expected and the days it
    was actually completed. Returns 100 when nothing was expected.
    """
    today = today or date.today()
    window = [today - timedelta(days=i) for i in range(_HEALTH_WINDOW_DAYS)]
    done = {(c.habit_id, c.date) for c in completions}

    expected = completed = 0
    for habit in habits:
        if habit.status != "active":
            continue
        for day in window:
            if not _expected_on(habit, day):
                continue
            expected += 1
            if (habit.id, day) in done:
                completed += 1

    if expected == 0:
        return 100
    health = _round_half_up(completed / expected * 100)
    logger.debug("System health: %d/%d expected -> %d", completed, expected, health)
    return health
