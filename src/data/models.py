"""
LifeOS Smart Scheduler — Data Models.

Plain records shared by every core module. Facts (completions, waste entries)
and the schedule snapshot are frozen: changing them means building a new
instance with dataclasses.replace(), never editing the stored one.

Day numbers follow Python's date.weekday(): Monday = 0 ... Sunday = 6.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Mapping, Union

WEEKEND_DAYS = frozenset({5, 6})

HABIT_FREQUENCIES = ("daily", "weekdays", "weekends", "weekly", "custom")
ROUTINE_FREQUENCIES = (
    "daily", "weekdays", "weekends", "weekly", "biweekly", "monthly", "custom",
)
TIMES_OF_DAY = ("morning", "afternoon", "evening", "night", "anytime")
STATUSES = ("active", "paused", "archived")
CUE_TYPES = ("time", "location", "preceding_action", "emotional_state")

RECIPE_DIFFICULTIES = ("easy", "medium", "advanced", "project")
EXPERIENCE_LEVELS = ("beginner", "comfortable", "experienced", "advanced")

WASTE_REASONS = (
    "expired",          # went bad before use
    "forgot",           # forgot about it
    "cooked_too_much",  # made more than needed
    "didnt_like",       # tried it, didn't like it
    "spoiled_early",    # went bad faster than expected
    "recipe_changed",   # meal plan changed
    "other",
)


def _check_days(days: frozenset[int], what: str) -> None:
    bad = [d for d in days if not 0 <= d <= 6]
    if bad:
        raise ValueError(f"{what} must be weekday numbers 0-6, got {sorted(bad)}")


# ---------------------------------------------------------------------------
# Day types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DayTypeConfig:
    """Display and behavior settings for one day type."""

    day_type: str
    label: str
    color: str
    icon: str = "📅"
    disabled_routines: frozenset[str] = frozenset()  # routine ids skipped on this day type
    enabled_routines: frozenset[str] = frozenset()   # if non-empty, only these run
    loop_capacity_multipliers: Mapping[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class MarkedDate:
    """A calendar date the user tagged with one or more day types."""

    date: date
    day_types: frozenset[str]
    label: str | None = None
    repeats_yearly: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "day_types", frozenset(self.day_types))
        if not self.day_types:
            raise ValueError(
                f"MarkedDate {self.date.isoformat()} needs at least one day type; "
                "unmark the date instead"
            )


@dataclass(frozen=True)
class SmartScheduleConfig:
    """Per-user smart scheduling snapshot.

    marked_dates is keyed by ISO date string. day_type_configs holds user
    edits of built-in day type configs; custom_day_types holds user-created
    ones.
    """

    enabled: bool = True
    marked_dates: Mapping[str, MarkedDate] = field(default_factory=dict)
    custom_day_types: tuple[DayTypeConfig, ...] = ()
    day_type_configs: Mapping[str, DayTypeConfig] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Affinity: which day types a habit or routine opts into
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AllDayTypes:
    """Applies on every day type. The default when nothing was chosen."""

    def matches(self, active_day_types: Iterable[str]) -> bool:
        return True


@dataclass(frozen=True)
class Restricted:
    """Applies only when at least one of its day types is active."""

    day_types: frozenset[str]

    def __post_init__(self) -> None:
        object.__setattr__(self, "day_types", frozenset(self.day_types))
        if not self.day_types:
            raise ValueError("Restricted affinity needs at least one day type")

    def matches(self, active_day_types: Iterable[str]) -> bool:
        return not self.day_types.isdisjoint(active_day_types)


Affinity = Union[AllDayTypes, Restricted]

ALL_DAY_TYPES = AllDayTypes()


def affinity_from(day_types: Iterable[str] | None) -> Affinity:
    """Build an affinity from a stored list; None or empty means all day types."""
    if not day_types:
        return ALL_DAY_TYPES
    return Restricted(frozenset(day_types))


def affinity_to_list(affinity: Affinity) -> list[str]:
    """Inverse of affinity_from, for storage. AllDayTypes -> []."""
    if isinstance(affinity, Restricted):
        return sorted(affinity.day_types)
    return []


# ---------------------------------------------------------------------------
# Habits
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HabitCue:
    """What triggers the habit, e.g. ("time", "7:00 AM") or ("location", "Kitchen")."""

    type: str
    value: str


@dataclass(frozen=True)
class HabitDayTypeOverride:
    """Per-day-type tweaks to when/how a habit happens."""

    time_of_day: str | None = None
    cue_value: str | None = None


@dataclass
class Habit:
    """An atomic behavior the user is building (or breaking).

    streak / longest_streak / total_completions are caches of values derived
    from the completion log; see habit_resolver.refresh_streak_counters().
    """

    id: str
    title: str
    loop: str                         # life area, e.g. "Health"
    cue: HabitCue
    response: str                     # the actual (2-minute) behavior
    frequency: str = "daily"
    custom_days: frozenset[int] = frozenset()
    time_of_day: str | None = None
    affinity: Affinity = ALL_DAY_TYPES
    day_type_overrides: dict[str, HabitDayTypeOverride] = field(default_factory=dict)
    type: str = "build"               # "build" | "break"
    craving: str | None = None
    reward: str | None = None
    streak: int = 0
    longest_streak: int = 0
    total_completions: int = 0
    status: str = "active"

    def __post_init__(self) -> None:
        self.custom_days = frozenset(self.custom_days)
        if self.frequency not in HABIT_FREQUENCIES:
            raise ValueError(f"Unknown habit frequency: {self.frequency!r}")
        if self.frequency == "custom" and not self.custom_days:
            raise ValueError(f"Habit {self.id!r} has custom frequency but no custom_days")
        _check_days(self.custom_days, "custom_days")
        if self.status not in STATUSES:
            raise ValueError(f"Unknown habit status: {self.status!r}")


@dataclass(frozen=True)
class HabitCompletion:
    """An append-only record that a habit was done on a date."""

    id: str
    habit_id: str
    date: date
    completed_at: datetime
    difficulty: int | None = None     # 1 (trivial) .. 5 (very hard)
    notes: str | None = None

    def __post_init__(self) -> None:
        if self.difficulty is not None and not 1 <= self.difficulty <= 5:
            raise ValueError(f"difficulty must be 1-5, got {self.difficulty}")


# ---------------------------------------------------------------------------
# Routines
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RoutineStep:
    id: str
    title: str
    loop: str
    order: int = 0
    estimate_minutes: int | None = None
    optional: bool = False            # may be left undone and still count as fully completed


@dataclass(frozen=True)
class RoutineSchedule:
    frequency: str = "daily"
    time_of_day: str = "anytime"
    days_of_week: frozenset[int] = frozenset()  # weekly / biweekly / custom
    day_of_month: int | None = None             # monthly, 1-31
    specific_time: str | None = None            # "HH:MM"

    def __post_init__(self) -> None:
        object.__setattr__(self, "days_of_week", frozenset(self.days_of_week))
        if self.frequency not in ROUTINE_FREQUENCIES:
            raise ValueError(f"Unknown routine frequency: {self.frequency!r}")
        if self.time_of_day not in TIMES_OF_DAY:
            raise ValueError(f"Unknown time of day: {self.time_of_day!r}")
        _check_days(self.days_of_week, "days_of_week")


@dataclass(frozen=True)
class ScheduleOverride:
    """Per-day-type replacement of a routine's time of day / specific time."""

    time_of_day: str | None = None
    specific_time: str | None = None


@dataclass
class Routine:
    """A multi-step sequence done together, e.g. a morning routine."""

    id: str
    title: str
    steps: list[RoutineStep]
    schedule: RoutineSchedule
    affinity: Affinity = ALL_DAY_TYPES
    day_type_overrides: dict[str, ScheduleOverride] = field(default_factory=dict)
    status: str = "active"
    description: str | None = None
    tags: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.status not in STATUSES:
            raise ValueError(f"Unknown routine status: {self.status!r}")


@dataclass(frozen=True)
class RoutineCompletion:
    """One run through a routine on a date.

    fully_completed is true when every required step was done and nothing
    was skipped. A partial run keeps the streak alive without extending it.
    """

    id: str
    routine_id: str
    date: date
    completed_at: datetime
    completed_steps: tuple[str, ...] = ()
    skipped_steps: tuple[str, ...] = ()
    fully_completed: bool = False
    notes: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "completed_steps", tuple(self.completed_steps))
        object.__setattr__(self, "skipped_steps", tuple(self.skipped_steps))
        overlap = set(self.completed_steps) & set(self.skipped_steps)
        if overlap:
            raise ValueError(f"Steps both completed and skipped: {sorted(overlap)}")


@dataclass(frozen=True)
class TemplateStep:
    title: str
    loop: str
    estimate_minutes: int | None = None
    optional: bool = False


@dataclass(frozen=True)
class RoutineTemplate:
    """A preset routine; steps get ids when a Routine is created from it."""

    id: str
    title: str
    description: str
    schedule: RoutineSchedule
    steps: tuple[TemplateStep, ...]
    icon: str = ""
    tags: tuple[str, ...] = ()
    day_types: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Meals
# ---------------------------------------------------------------------------


@dataclass
class Recipe:
    """A recipe as the suggestion scorer sees it.

    total_time is usually prep_time + cook_time but is taken as given;
    when omitted it defaults to that sum.
    """

    id: str
    title: str
    prep_time: int = 0
    cook_time: int = 0
    total_time: int | None = None
    difficulty: str = "medium"
    course: frozenset[str] = frozenset({"dinner"})
    tags: tuple[str, ...] = ()
    times_made: int = 0
    last_made: date | None = None
    rating: int | None = None         # 1-5
    is_favorite: bool = False
    cuisine: str | None = None

    def __post_init__(self) -> None:
        self.course = frozenset(self.course)
        self.tags = tuple(self.tags)
        if self.total_time is None:
            self.total_time = self.prep_time + self.cook_time
        if self.difficulty not in RECIPE_DIFFICULTIES:
            raise ValueError(f"Unknown recipe difficulty: {self.difficulty!r}")
        if self.rating is not None and not 1 <= self.rating <= 5:
            raise ValueError(f"rating must be 1-5, got {self.rating}")


@dataclass(frozen=True)
class KitchenProfile:
    """The cook's self-assessed skill. Unknown levels are tolerated."""

    experience_level: str = "comfortable"


# ---------------------------------------------------------------------------
# Food waste
# ---------------------------------------------------------------------------


def normalize_ingredient_name(name: str) -> str:
    """'Green Peppers!' -> 'green peppers' (aggregation key for waste stats)."""
    cleaned = re.sub(r"[^a-z0-9]", " ", name.lower())
    return re.sub(r"\s+", " ", cleaned).strip()


@dataclass(frozen=True)
class WasteEntry:
    """One wasted ingredient.

    normalized_name is computed from ingredient_name on every access, so a
    replace(entry, ingredient_name=...) can never leave it stale.
    """

    id: str
    ingredient_name: str
    quantity: float
    unit: str                         # "whole", "cups", "lbs", ...
    reason: str
    date: date
    estimated_cost: float | None = None
    notes: str | None = None
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        if self.reason not in WASTE_REASONS:
            raise ValueError(f"Unknown waste reason: {self.reason!r}")

    @property
    def normalized_name(self) -> str:
        return normalize_ingredient_name(self.ingredient_name)
