"""
LifeOS Smart Scheduler — Routine Resolver.

Which routines run on a date, in what order, and on what schedule; plus
streaks and dashboard stats derived from the log of routine runs.

Two modes:
- smart (config.enabled): frequency + day-type affinity + the day type's
  enabled/disabled routine lists
- simple (config disabled): frequency only, day types ignored

Both return routines ordered morning → afternoon → evening → night → anytime.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Iterable

from src.core.dates import add_months, is_weekend
from src.core.day_classifier import get_day_types
from src.core.day_types import get_day_type_config
from src.core.habit_resolver import previous_expected_day
from src.data.models import (
    TIMES_OF_DAY,
    DayTypeConfig,
    Routine,
    RoutineCompletion,
    RoutineSchedule,
    RoutineStep,
    RoutineTemplate,
    SmartScheduleConfig,
    affinity_from,
)

logger = logging.getLogger(__name__)

_TIME_RANK = {tod: i for i, tod in enumerate(TIMES_OF_DAY)}
_DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


# ---------------------------------------------------------------------------
# Frequency
# ---------------------------------------------------------------------------


def routine_matches_frequency(routine: Routine, day: date) -> bool:
    schedule = routine.schedule
    weekday = day.weekday()

    if schedule.frequency == "daily":
        return True
    if schedule.frequency == "weekdays":
        return not is_weekend(day)
    if schedule.frequency == "weekends":
        return is_weekend(day)
    if schedule.frequency == "weekly":
        if schedule.days_of_week:
            return weekday in schedule.days_of_week
        return True
    if schedule.frequency in ("biweekly", "custom"):
        return weekday in schedule.days_of_week
    if schedule.frequency == "monthly":
        return schedule.day_of_month == day.day
    return False


# ---------------------------------------------------------------------------
# Due today
# ---------------------------------------------------------------------------


def sort_routines_by_time_of_day(
    routines: Iterable[Routine], day_type: str | None = None,
) -> list[Routine]:
    """Stable sort by time-of-day rank.

    With a day_type, each routine's overridden time of day is used.
    """
    def rank(routine: Routine) -> int:
        schedule = routine.schedule
        if day_type is not None:
            schedule = get_effective_schedule(routine, day_type)
        return _TIME_RANK.get(schedule.time_of_day, len(_TIME_RANK))

    return sorted(routines, key=rank)


def get_routines_due_today(routines: Iterable[Routine], day: date | None = None) -> list[Routine]:
    """Simple mode: active routines whose frequency matches, day types ignored."""
    day = day or date.today()
    due = [r for r in routines if r.status == "active" and routine_matches_frequency(r, day)]
    return sort_routines_by_time_of_day(due)


def get_routines_due_today_with_day_type(
    routines: Iterable[Routine],
    day_types: str | Iterable[str],
    day: date | None = None,
) -> list[Routine]:
    """Smart mode: active, frequency matches, and affinity overlaps the day's types."""
    day = day or date.today()
    active = {day_types} if isinstance(day_types, str) else set(day_types)
    due = [
        r for r in routines
        if r.status == "active"
        and routine_matches_frequency(r, day)
        and r.affinity.matches(active)
    ]
    return sort_routines_by_time_of_day(due)


def filter_routines_for_day_type(
    routines: Iterable[Routine], day_type_config: DayTypeConfig,
) -> list[Routine]:
    """Apply a day type's disabled list, then its enabled list if it has one."""
    result = []
    for routine in routines:
        if routine.id in day_type_config.disabled_routines:
            continue
        if day_type_config.enabled_routines and routine.id not in day_type_config.enabled_routines:
            continue
        result.append(routine)
    return result


def routines_for_day(
    routines: Iterable[Routine], day: date, config: SmartScheduleConfig,
) -> list[Routine]:
    """Routines to show for a date, honoring the smart-scheduling switch."""
    if not config.enabled:
        return get_routines_due_today(routines, day)

    day_types = get_day_types(day, config)
    due = get_routines_due_today_with_day_type(routines, day_types, day)
    for day_type in day_types:
        due = filter_routines_for_day_type(due, get_day_type_config(day_type, config))
    return sort_routines_by_time_of_day(due, day_types[0])


# ---------------------------------------------------------------------------
# Schedule details
# ---------------------------------------------------------------------------


def get_effective_schedule(routine: Routine, day_type: str) -> RoutineSchedule:
    """The routine's schedule with the day type's override applied (a copy)."""
    override = routine.day_type_overrides.get(day_type)
    if override is None:
        return routine.schedule
    return replace(
        routine.schedule,
        time_of_day=override.time_of_day or routine.schedule.time_of_day,
        specific_time=override.specific_time or routine.schedule.specific_time,
    )


def get_routine_duration(routine: Routine) -> int:
    """Total estimated minutes across all steps."""
    return sum(step.estimate_minutes or 0 for step in routine.steps)


def get_routine_loops(routine: Routine) -> list[str]:
    """Loops touched by the routine, in step order, without repeats."""
    loops: list[str] = []
    for step in sorted(routine.steps, key=lambda s: s.order):
        if step.loop not in loops:
            loops.append(step.loop)
    return loops


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def describe_schedule(schedule: RoutineSchedule) -> str:
    """Human-readable schedule, e.g. "Mon, Wed, Fri • Morning"."""
    days = ", ".join(_DAY_NAMES[d] for d in sorted(schedule.days_of_week))
    freq = schedule.frequency

    if freq in ("daily", "weekdays", "weekends"):
        label = freq.capitalize()
    elif freq == "weekly":
        label = days or "Weekly"
    elif freq == "biweekly":
        label = "Every 2 weeks"
    elif freq == "monthly":
        label = f"Monthly on the {_ordinal(schedule.day_of_month)}" if schedule.day_of_month else "Monthly"
    else:
        label = days or "Custom"

    when = schedule.specific_time or schedule.time_of_day.capitalize()
    return f"{label} • {when}"


def create_routine_from_template(
    template: RoutineTemplate, routine_id: str | None = None,
) -> Routine:
    """Instantiate a template; every step gets a fresh id."""
    steps = [
        RoutineStep(
            id=f"step_{uuid.uuid4().hex[:12]}",
            title=s.title,
            loop=s.loop,
            order=i,
            estimate_minutes=s.estimate_minutes,
            optional=s.optional,
        )
        for i, s in enumerate(template.steps)
    ]
    return Routine(
        id=routine_id or f"routine_{uuid.uuid4().hex[:12]}",
        title=template.title,
        steps=steps,
        schedule=template.schedule,
        affinity=affinity_from(template.day_types),
        description=template.description,
        tags=list(template.tags),
    )


# ---------------------------------------------------------------------------
# Completions, streaks, stats
# ---------------------------------------------------------------------------


@dataclass
class RoutineStats:
    total_routines: int = 0
    active_routines: int = 0
    due_today: int = 0
    completed_today: int = 0
    longest_current_streak: int = 0
    top_streak_routine_id: str | None = None
    loop_coverage: list[str] = field(default_factory=list)
    total_estimated_minutes: int = 0   # across routines due today


def create_routine_completion(
    routine: Routine,
    completed_steps: Iterable[str],
    skipped_steps: Iterable[str] = (),
    day: date | None = None,
    notes: str | None = None,
    completion_id: str | None = None,
) -> RoutineCompletion:
    """Record a run through the routine.

    Optional steps may be left out; any skipped step makes the run partial.
    """
    completed = tuple(completed_steps)
    skipped = tuple(skipped_steps)
    known = {step.id for step in routine.steps}
    unknown = [s for s in completed + skipped if s not in known]
    if unknown:
        raise ValueError(f"Routine {routine.id} has no steps {unknown}")

    accounted = set(completed) | set(skipped)
    required_done = all(s.id in accounted for s in routine.steps if not s.optional)
    now = datetime.now()
    return RoutineCompletion(
        id=completion_id or f"rcompletion_{uuid.uuid4().hex[:12]}",
        routine_id=routine.id,
        date=day or now.date(),
        completed_at=now,
        completed_steps=completed,
        skipped_steps=skipped,
        fully_completed=required_done and not skipped,
        notes=notes,
    )


def _previous_scheduled_day(current: date, schedule: RoutineSchedule) -> date:
    """Earliest date a run may fall on without breaking the chain before `current`."""
    freq = schedule.frequency
    if freq in ("daily", "weekdays", "weekends"):
        return previous_expected_day(current, freq)
    if freq in ("weekly", "custom") and schedule.days_of_week:
        return previous_expected_day(current, "custom", schedule.days_of_week)
    if freq == "biweekly":
        return current - timedelta(days=14)
    if freq == "monthly":
        return add_months(current, -1)
    return current - timedelta(days=7)


def _runs_by_date(completions: Iterable[RoutineCompletion]) -> dict[date, bool]:
    """Date -> whether any run that day was full."""
    runs: dict[date, bool] = {}
    for c in completions:
        runs[c.date] = runs.get(c.date, False) or c.fully_completed
    return runs


def calculate_routine_streak(
    completions: Iterable[RoutineCompletion],
    schedule: RoutineSchedule,
    today: date | None = None,
) -> int:
    """Current streak of full runs.

    The chain holds while no scheduled occurrence is missed between runs;
    partial runs hold it without counting. It is live if the latest run is
    on or after the last occurrence before today.
    """
    runs = _runs_by_date(completions)
    if not runs:
        return 0

    today = today or date.today()
    dates = sorted(runs, reverse=True)
    if dates[0] < _previous_scheduled_day(today, schedule):
        return 0

    streak = int(runs[dates[0]])
    current = dates[0]
    for older in dates[1:]:
        if older < _previous_scheduled_day(current, schedule):
            break
        streak += int(runs[older])
        current = older
    return streak


def calculate_routine_longest_streak(
    completions: Iterable[RoutineCompletion], schedule: RoutineSchedule,
) -> int:
    runs = _runs_by_date(completions)
    if not runs:
        return 0

    dates = sorted(runs, reverse=True)
    longest = run = int(runs[dates[0]])
    for newer, older in zip(dates, dates[1:]):
        if older < _previous_scheduled_day(newer, schedule):
            run = 0
        run += int(runs[older])
        longest = max(longest, run)
    return longest


def calculate_routine_stats(
    routines: Iterable[Routine],
    completions: Iterable[RoutineCompletion],
    today: date | None = None,
) -> RoutineStats:
    """Dashboard numbers for the routine list (day types ignored)."""
    today = today or date.today()
    routines = list(routines)
    completions = list(completions)
    active = [r for r in routines if r.status == "active"]
    due = get_routines_due_today(active, today)

    streaks = [
        (r, calculate_routine_streak([c for c in completions if c.routine_id == r.id], r.schedule, today))
        for r in active
    ]
    top_routine, top_streak = max(streaks, key=lambda item: item[1], default=(None, 0))

    coverage: list[str] = []
    for routine in active:
        for loop in get_routine_loops(routine):
            if loop not in coverage:
                coverage.append(loop)

    return RoutineStats(
        total_routines=len(routines),
        active_routines=len(active),
        due_today=len(due),
        completed_today=len({c.routine_id for c in completions if c.date == today and c.fully_completed}),
        longest_current_streak=top_streak,
        top_streak_routine_id=top_routine.id if top_streak > 0 else None,
        loop_coverage=coverage,
        total_estimated_minutes=sum(get_routine_duration(r) for r in due),
    )
