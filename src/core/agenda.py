"""
LifeOS Smart Scheduler — Daily Agenda.

Puts the pieces together for one date: the day's types, the habits due
with their effective time and cue, and the routines in time-of-day order.
format_agenda() renders the plain-text "today" view printed by main.py.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from src.core.day_classifier import get_day_types
from src.core.day_types import get_day_type_display_info
from src.core.habit_resolver import (
    get_effective_cue,
    get_effective_time_of_day,
    get_habits_due_today,
    get_habits_due_today_with_day_type,
)
from src.core.routine_resolver import (
    describe_schedule,
    get_effective_schedule,
    get_routine_duration,
    routines_for_day,
)
from src.data.models import TIMES_OF_DAY, Habit, HabitCue, Routine, RoutineSchedule, SmartScheduleConfig

logger = logging.getLogger(__name__)

_TIME_RANK = {tod: i for i, tod in enumerate(TIMES_OF_DAY)}


@dataclass
class AgendaHabit:
    habit: Habit
    time_of_day: str | None
    cue: HabitCue


@dataclass
class AgendaRoutine:
    routine: Routine
    schedule: RoutineSchedule
    duration_minutes: int


@dataclass
class DailyAgenda:
    date: date
    day_types: list[str]
    label: str
    icon: str
    habits: list[AgendaHabit] = field(default_factory=list)
    routines: list[AgendaRoutine] = field(default_factory=list)


def build_daily_agenda(
    day: date,
    config: SmartScheduleConfig,
    habits: list[Habit],
    routines: list[Routine],
) -> DailyAgenda:
    """Everything due on `day`, resolved against its primary day type."""
    day_types = get_day_types(day, config)
    primary = day_types[0]
    display = get_day_type_display_info(primary, config)

    if config.enabled:
        due_habits = get_habits_due_today_with_day_type(habits, day_types, day)
    else:
        due_habits = get_habits_due_today(habits, day)

    agenda_habits = [
        AgendaHabit(
            habit=h,
            time_of_day=get_effective_time_of_day(h, primary),
            cue=get_effective_cue(h, primary),
        )
        for h in due_habits
    ]
    agenda_habits.sort(key=lambda a: _TIME_RANK.get(a.time_of_day or "anytime", len(_TIME_RANK)))

    agenda_routines = [
        AgendaRoutine(
            routine=r,
            schedule=get_effective_schedule(r, primary),
            duration_minutes=get_routine_duration(r),
        )
        for r in routines_for_day(routines, day, config)
    ]

    logger.info(
        "Agenda for %s (%s): %d habits, %d routines",
        day.isoformat(), ", ".join(day_types), len(agenda_habits), len(agenda_routines),
    )
    return DailyAgenda(
        date=day,
        day_types=day_types,
        label=display["label"],
        icon=display["icon"],
        habits=agenda_habits,
        routines=agenda_routines,
    )


def format_agenda(agenda: DailyAgenda) -> str:
    header = f"{agenda.icon} {agenda.date.strftime('%A %d %B %Y')} — {agenda.label}"
    extra = len(agenda.day_types) - 1
    if extra > 0:
        header += f" (+{extra})"

    lines = [header, ""]

    if agenda.routines:
        lines.append("Routines:")
        for item in agenda.routines:
            lines.append(
                f"  - {item.routine.title} ({describe_schedule(item.schedule)}, "
                f"{item.duration_minutes} min)"
            )
    else:
        lines.append("Routines: None")

    lines.append("")

    if agenda.habits:
        lines.append("Habits:")
        for item in agenda.habits:
            when = item.time_of_day or "anytime"
            lines.append(f"  - [{when}] {item.habit.title}: {item.cue.value}")
    else:
        lines.append("Habits: None")

    return "\n".join(lines)
