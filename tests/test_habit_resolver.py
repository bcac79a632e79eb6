"""Tests for src.core.habit_resolver — due-today, streaks, system health."""

from datetime import date, datetime, timedelta

from src.core.habit_resolver import (
    calculate_longest_streak,
    calculate_streak,
    calculate_system_health,
    get_effective_cue,
    get_effective_time_of_day,
    get_habits_due_today,
    get_habits_due_today_with_day_type,
    habit_matches_frequency,
    is_habit_due_today,
    refresh_streak_counters,
)
from src.data.models import HabitCompletion, HabitDayTypeOverride, affinity_from

from conftest import MONDAY, SATURDAY, SUNDAY, make_habit


def _completion(day, habit_id="h1", n=0):
    return HabitCompletion(
        id=f"c_{habit_id}_{day.isoformat()}_{n}",
        habit_id=habit_id,
        date=day,
        completed_at=datetime.combine(day, datetime.min.time()),
    )


def _days_back(start, *offsets):
    return [start - timedelta(days=o) for o in offsets]


# ---------------------------------------------------------------------------
# Frequency and due today
# ---------------------------------------------------------------------------


class TestFrequency:
    def test_daily(self):
        habit = make_habit()
        assert habit_matches_frequency(habit, MONDAY)
        assert habit_matches_frequency(habit, SUNDAY)

    def test_weekdays(self):
        habit = make_habit(frequency="weekdays")
        assert habit_matches_frequency(habit, MONDAY)
        assert not habit_matches_frequency(habit, SATURDAY)

    def test_weekends(self):
        habit = make_habit(frequency="weekends")
        assert not habit_matches_frequency(habit, MONDAY)
        assert habit_matches_frequency(habit, SATURDAY)
        assert habit_matches_frequency(habit, SUNDAY)

    def test_weekly_matches_every_day(self):
        habit = make_habit(frequency="weekly")
        assert all(habit_matches_frequency(habit, MONDAY + timedelta(days=i)) for i in range(7))

    def test_custom(self):
        habit = make_habit(frequency="custom", custom_days={0, 2})
        assert habit_matches_frequency(habit, MONDAY)
        assert not habit_matches_frequency(habit, MONDAY + timedelta(days=1))
        assert habit_matches_frequency(habit, MONDAY + timedelta(days=2))


class TestDueToday:
    def test_travel_affinity_needs_travel_day(self):
        habit = make_habit(affinity=affinity_from(["travel"]))
        assert not is_habit_due_today(habit, MONDAY, ["regular"])
        assert is_habit_due_today(habit, MONDAY, ["regular", "travel"])

    def test_no_affinity_applies_always(self):
        habit = make_habit()
        assert is_habit_due_today(habit, MONDAY, ["holiday"])

    def test_paused_never_due(self):
        habit = make_habit(status="paused")
        assert not is_habit_due_today(habit, MONDAY, ["regular"])
        assert get_habits_due_today([habit], MONDAY) == []

    def test_simple_mode_ignores_day_types(self):
        habits = [
            make_habit("a", affinity=affinity_from(["travel"])),
            make_habit("b", frequency="weekends"),
        ]
        assert [h.id for h in get_habits_due_today(habits, MONDAY)] == ["a"]

    def test_smart_mode_accepts_single_type(self):
        habits = [
            make_habit("a", affinity=affinity_from(["custody"])),
            make_habit("b", affinity=affinity_from(["non_custody"])),
            make_habit("c"),
        ]
        due = get_habits_due_today_with_day_type(habits, "custody", MONDAY)
        assert [h.id for h in due] == ["a", "c"]

    def test_smart_mode_keeps_input_order(self):
        habits = [make_habit("z"), make_habit("a"), make_habit("m")]
        due = get_habits_due_today_with_day_type(habits, ["regular"], MONDAY)
        assert [h.id for h in due] == ["z", "a", "m"]


class TestOverrides:
    def test_time_of_day_override(self):
        habit = make_habit(
            time_of_day="morning",
            day_type_overrides={"weekend": HabitDayTypeOverride(time_of_day="afternoon")},
        )
        assert get_effective_time_of_day(habit, "weekend") == "afternoon"
        assert get_effective_time_of_day(habit, "regular") == "morning"

    def test_cue_override_returns_copy(self):
        habit = make_habit(
            day_type_overrides={"weekend": HabitDayTypeOverride(cue_value="9:00 AM")},
        )
        cue = get_effective_cue(habit, "weekend")
        assert cue.value == "9:00 AM"
        assert cue.type == "time"
        assert habit.cue.value == "7:00 AM"

    def test_no_override_returns_base_cue(self):
        habit = make_habit()
        assert get_effective_cue(habit, "travel") is habit.cue


# ---------------------------------------------------------------------------
# Streaks
# ---------------------------------------------------------------------------


class TestStreak:
    def test_empty_log(self):
        assert calculate_streak([], "daily", today=MONDAY) == 0

    def test_daily_consecutive(self):
        log = [_completion(d) for d in _days_back(MONDAY, 0, 1, 2)]
        assert calculate_streak(log, "daily", today=MONDAY) == 3

    def test_yesterday_keeps_streak_alive(self):
        log = [_completion(d) for d in _days_back(MONDAY, 1, 2)]
        assert calculate_streak(log, "daily", today=MONDAY) == 2

    def test_stale_streak_is_zero(self):
        log = [_completion(d) for d in _days_back(MONDAY, 2, 3)]
        assert calculate_streak(log, "daily", today=MONDAY) == 0

    def test_gap_stops_counting(self):
        log = [_completion(d) for d in _days_back(MONDAY, 0, 1, 3, 4, 5)]
        assert calculate_streak(log, "daily", today=MONDAY) == 2

    def test_duplicates_count_once(self):
        log = [_completion(MONDAY, n=0), _completion(MONDAY, n=1), _completion(MONDAY - timedelta(days=1))]
        assert calculate_streak(log, "daily", today=MONDAY) == 2

    def test_unordered_log(self):
        log = [_completion(d) for d in _days_back(MONDAY, 2, 0, 1)]
        assert calculate_streak(log, "daily", today=MONDAY) == 3

    def test_weekdays_skip_weekend(self):
        # Monday, previous Friday, Thursday
        log = [_completion(d) for d in _days_back(MONDAY, 0, 3, 4)]
        assert calculate_streak(log, "weekdays", today=MONDAY) == 3

    def test_weekly(self):
        log = [_completion(d) for d in _days_back(MONDAY, 0, 7, 14)]
        assert calculate_streak(log, "weekly", today=MONDAY) == 3

    def test_weekends_skip_weekdays(self):
        # Sunday, Saturday, previous Sunday, previous Saturday
        log = [_completion(d) for d in _days_back(SUNDAY, 0, 1, 7, 8)]
        assert calculate_streak(log, "weekends", today=SUNDAY) == 4

        broken = [_completion(d) for d in _days_back(SUNDAY, 0, 1, 8)]
        assert calculate_streak(broken, "weekends", today=SUNDAY) == 2

    def test_custom_days(self):
        # Mon/Wed habit: Monday, previous Wednesday, previous Monday
        log = [_completion(d) for d in _days_back(MONDAY, 0, 5, 7)]
        assert calculate_streak(log, "custom", today=MONDAY, custom_days=frozenset({0, 2})) == 3

    def test_adding_missing_day_never_shortens(self):
        base = [_completion(d) for d in _days_back(MONDAY, 0, 1, 3)]
        before = calculate_streak(base, "daily", today=MONDAY)
        after = calculate_streak(base + [_completion(MONDAY - timedelta(days=2))], "daily", today=MONDAY)
        assert after >= before
        assert after == 4


class TestLongestStreak:
    def test_empty(self):
        assert calculate_longest_streak([], "daily") == 0

    def test_finds_longest_run(self):
        log = [_completion(d) for d in _days_back(MONDAY, 1, 2, 10, 11, 12, 13)]
        assert calculate_longest_streak(log, "daily") == 4

    def test_refresh_counters(self):
        habit = make_habit()
        log = [_completion(d) for d in _days_back(MONDAY, 0, 1, 5)]
        log.append(_completion(MONDAY, habit_id="other"))
        refreshed = refresh_streak_counters(habit, log, today=MONDAY)
        assert refreshed.streak == 2
        assert refreshed.longest_streak == 2
        assert refreshed.total_completions == 3
        assert habit.streak == 0


# ---------------------------------------------------------------------------
# System health
# ---------------------------------------------------------------------------


class TestSystemHealth:
    def test_no_habits_is_healthy(self):
        assert calculate_system_health([], [], today=SUNDAY) == 100

    def test_all_done(self):
        habit = make_habit()
        log = [_completion(d) for d in _days_back(SUNDAY, *range(7))]
        assert calculate_system_health([habit], log, today=SUNDAY) == 100

    def test_partial(self):
        habit = make_habit()
        log = [_completion(d) for d in _days_back(SUNDAY, 0, 1, 2, 3, 4)]
        # 5 of 7
        assert calculate_system_health([habit], log, today=SUNDAY) == 71

    def test_weekly_expected_on_monday_rounds_half_up(self):
        daily = make_habit()
        weekly = make_habit("w", frequency="weekly")
        log = [_completion(d) for d in _days_back(SUNDAY, 0, 1, 2, 3, 4)]
        # 5 of 8 = 62.5
        assert calculate_system_health([daily, weekly], log, today=SUNDAY) == 63

    def test_paused_habits_ignored(self):
        paused = make_habit(status="paused")
        assert calculate_system_health([paused], [], today=SUNDAY) == 100

    def test_weekends_habit_half_done(self):
        habit = make_habit(frequency="weekends")
        log = [_completion(SATURDAY)]
        assert calculate_system_health([habit], log, today=SUNDAY) == 50
