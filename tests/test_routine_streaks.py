"""Tests for src.core.routine_resolver — run log, streaks and stats."""

import pytest
from datetime import date, datetime, timedelta

from src.core.routine_resolver import (
    calculate_routine_longest_streak,
    calculate_routine_stats,
    calculate_routine_streak,
    create_routine_completion,
)
from src.data.models import RoutineCompletion, RoutineSchedule, RoutineStep

from conftest import MONDAY, make_routine


def _run(day, routine_id="r1", full=True):
    return RoutineCompletion(
        id=f"rc_{routine_id}_{day.isoformat()}_{full}",
        routine_id=routine_id,
        date=day,
        completed_at=datetime.combine(day, datetime.min.time()),
        fully_completed=full,
    )


def _back(*offsets, full=True, routine_id="r1"):
    return [_run(MONDAY - timedelta(days=o), routine_id, full) for o in offsets]


# ---------------------------------------------------------------------------
# Completion records
# ---------------------------------------------------------------------------


class TestCreateCompletion:
    def test_all_steps_done_is_full(self):
        routine = make_routine()
        completion = create_routine_completion(routine, ["r1_s1", "r1_s2"], day=MONDAY)
        assert completion.fully_completed is True
        assert completion.routine_id == "r1"
        assert completion.date == MONDAY

    def test_optional_step_may_be_left_undone(self):
        routine = make_routine(steps=[
            RoutineStep(id="a", title="Water", loop="Health", order=0),
            RoutineStep(id="b", title="Meditate", loop="Health", order=1, optional=True),
        ])
        assert create_routine_completion(routine, ["a"]).fully_completed is True

    def test_missing_required_step_is_partial(self):
        routine = make_routine()
        assert create_routine_completion(routine, ["r1_s1"]).fully_completed is False

    def test_any_skip_is_partial(self):
        routine = make_routine()
        completion = create_routine_completion(routine, ["r1_s1"], ["r1_s2"])
        assert completion.fully_completed is False
        assert completion.skipped_steps == ("r1_s2",)

    def test_unknown_step_rejected(self):
        with pytest.raises(ValueError):
            create_routine_completion(make_routine(), ["nope"])

    def test_step_both_done_and_skipped_rejected(self):
        with pytest.raises(ValueError):
            create_routine_completion(make_routine(), ["r1_s1", "r1_s2"], ["r1_s2"])


# ---------------------------------------------------------------------------
# Streaks
# ---------------------------------------------------------------------------


class TestRoutineStreak:
    def test_empty_log(self):
        assert calculate_routine_streak([], RoutineSchedule(), today=MONDAY) == 0

    def test_daily_consecutive(self):
        assert calculate_routine_streak(_back(0, 1, 2), RoutineSchedule(), today=MONDAY) == 3

    def test_partial_run_holds_without_counting(self):
        log = _back(0, 2) + _back(1, full=False)
        assert calculate_routine_streak(log, RoutineSchedule(), today=MONDAY) == 2

    def test_gap_breaks(self):
        assert calculate_routine_streak(_back(0, 1, 3), RoutineSchedule(), today=MONDAY) == 2

    def test_stale_streak_is_zero(self):
        assert calculate_routine_streak(_back(2, 3), RoutineSchedule(), today=MONDAY) == 0

    def test_weekdays_bridge_weekend(self):
        # Friday and Thursday, checked on Monday before today's run
        schedule = RoutineSchedule(frequency="weekdays")
        assert calculate_routine_streak(_back(3, 4), schedule, today=MONDAY) == 2

    def test_weekly_on_listed_day(self):
        schedule = RoutineSchedule(frequency="weekly", days_of_week=frozenset({6}))
        assert calculate_routine_streak(_back(1, 8), schedule, today=MONDAY) == 2

    def test_weekly_without_days_allows_a_week(self):
        schedule = RoutineSchedule(frequency="weekly")
        assert calculate_routine_streak(_back(0, 5), schedule, today=MONDAY) == 2
        assert calculate_routine_streak(_back(0, 9), schedule, today=MONDAY) == 1

    def test_monthly(self):
        schedule = RoutineSchedule(frequency="monthly", day_of_month=2)
        log = [_run(date(2026, m, 2)) for m in (1, 2, 3)]
        assert calculate_routine_streak(log, schedule, today=MONDAY) == 3

    def test_longest(self):
        log = _back(0, 1, 5, 6, 7)
        assert calculate_routine_longest_streak(log, RoutineSchedule()) == 3
        assert calculate_routine_longest_streak([], RoutineSchedule()) == 0


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


class TestRoutineStats:
    def test_empty(self):
        stats = calculate_routine_stats([], [], today=MONDAY)
        assert stats.total_routines == 0
        assert stats.top_streak_routine_id is None
        assert stats.loop_coverage == []

    def test_dashboard_numbers(self):
        routines = [
            make_routine("a"),
            make_routine("b", frequency="weekends", steps=[
                RoutineStep(id="b1", title="Hike", loop="Fun", order=0, estimate_minutes=90),
            ]),
            make_routine("c", status="paused"),
        ]
        log = _back(0, 1, routine_id="a") + _back(0, full=False, routine_id="b")

        stats = calculate_routine_stats(routines, log, today=MONDAY)

        assert stats.total_routines == 3
        assert stats.active_routines == 2
        assert stats.due_today == 1
        assert stats.completed_today == 1
        assert stats.longest_current_streak == 2
        assert stats.top_streak_routine_id == "a"
        assert stats.loop_coverage == ["Health", "Maintenance", "Fun"]
        assert stats.total_estimated_minutes == 15
