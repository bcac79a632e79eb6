"""Shared test fixtures and configuration.

Sets up environment variables before src.config is imported, and provides
temp-file backed stores plus a few ready-made habits and routines.
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("TIMEZONE", "UTC")
os.environ.setdefault("SMART_SCHEDULING_ENABLED", "true")
os.environ.setdefault("LOG_LEVEL", "INFO")

import pytest
from datetime import date


# Fixed dates used across the suite (2026-03-02 is a Monday)
MONDAY = date(2026, 3, 2)
SATURDAY = date(2026, 3, 7)
SUNDAY = date(2026, 3, 8)


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_lifeos.db")


@pytest.fixture
def schedule_db(tmp_db_path):
    from src.data.db import ScheduleDB
    return ScheduleDB(db_path=tmp_db_path)


@pytest.fixture
def habit_db(tmp_db_path):
    from src.data.db import HabitDB
    return HabitDB(db_path=tmp_db_path)


@pytest.fixture
def routine_db(tmp_db_path):
    from src.data.db import RoutineDB
    return RoutineDB(db_path=tmp_db_path)


@pytest.fixture
def waste_db(tmp_db_path):
    from src.data.db import WasteDB
    return WasteDB(db_path=tmp_db_path)


def make_habit(habit_id="h1", **kwargs):
    from src.data.models import Habit, HabitCue

    fields = {
        "id": habit_id,
        "title": kwargs.pop("title", f"Habit {habit_id}"),
        "loop": "Health",
        "cue": HabitCue(type="time", value="7:00 AM"),
        "response": "Do the thing",
    }
    fields.update(kwargs)
    return Habit(**fields)


def make_routine(routine_id="r1", frequency="daily", time_of_day="anytime", **kwargs):
    from src.data.models import Routine, RoutineSchedule, RoutineStep

    schedule = kwargs.pop("schedule", None) or RoutineSchedule(
        frequency=frequency,
        time_of_day=time_of_day,
        days_of_week=frozenset(kwargs.pop("days_of_week", ())),
        day_of_month=kwargs.pop("day_of_month", None),
        specific_time=kwargs.pop("specific_time", None),
    )
    steps = kwargs.pop("steps", None)
    if steps is None:
        steps = [
            RoutineStep(id=f"{routine_id}_s1", title="First", loop="Health", order=0, estimate_minutes=10),
            RoutineStep(id=f"{routine_id}_s2", title="Second", loop="Maintenance", order=1, estimate_minutes=5),
        ]
    return Routine(
        id=routine_id,
        title=kwargs.pop("title", f"Routine {routine_id}"),
        steps=steps,
        schedule=schedule,
        **kwargs,
    )
