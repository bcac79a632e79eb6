"""Tests for src.core.routine_resolver — due-today, ordering, templates."""

from dataclasses import replace
from datetime import date, timedelta

from src.core.day_types import DEFAULT_DAY_TYPE_CONFIGS, mark_date, update_day_type_config
from src.core.routine_resolver import (
    create_routine_from_template,
    describe_schedule,
    filter_routines_for_day_type,
    get_effective_schedule,
    get_routine_duration,
    get_routine_loops,
    get_routines_due_today,
    get_routines_due_today_with_day_type,
    routine_matches_frequency,
    routines_for_day,
    sort_routines_by_time_of_day,
)
from src.data.models import (
    RoutineSchedule,
    RoutineStep,
    Restricted,
    ScheduleOverride,
    SmartScheduleConfig,
    affinity_from,
)
from src.data.seed import ROUTINE_TEMPLATES

from conftest import MONDAY, SATURDAY, make_routine


class TestFrequency:
    def test_weekdays_and_weekends(self):
        assert routine_matches_frequency(make_routine(frequency="weekdays"), MONDAY)
        assert not routine_matches_frequency(make_routine(frequency="weekdays"), SATURDAY)
        assert routine_matches_frequency(make_routine(frequency="weekends"), SATURDAY)

    def test_weekly_with_days(self):
        routine = make_routine(frequency="weekly", days_of_week={6})
        assert not routine_matches_frequency(routine, MONDAY)
        assert routine_matches_frequency(routine, SATURDAY + timedelta(days=1))

    def test_weekly_without_days_matches_any(self):
        assert routine_matches_frequency(make_routine(frequency="weekly"), MONDAY)

    def test_custom_and_biweekly_use_days(self):
        assert routine_matches_frequency(make_routine(frequency="custom", days_of_week={0}), MONDAY)
        assert not routine_matches_frequency(make_routine(frequency="biweekly", days_of_week={1}), MONDAY)

    def test_monthly(self):
        routine = make_routine(frequency="monthly", day_of_month=2)
        assert routine_matches_frequency(routine, MONDAY)
        assert not routine_matches_frequency(routine, MONDAY + timedelta(days=1))


class TestOrdering:
    def test_sorted_by_time_of_day(self):
        routines = [
            make_routine("a", time_of_day="anytime"),
            make_routine("n", time_of_day="night"),
            make_routine("m", time_of_day="morning"),
            make_routine("e", time_of_day="evening"),
            make_routine("f", time_of_day="afternoon"),
        ]
        assert [r.id for r in sort_routines_by_time_of_day(routines)] == ["m", "f", "e", "n", "a"]

    def test_stable_within_same_slot(self):
        routines = [make_routine(x, time_of_day="morning") for x in ("c", "a", "b")]
        assert [r.id for r in sort_routines_by_time_of_day(routines)] == ["c", "a", "b"]

    def test_day_type_override_changes_order(self):
        late = make_routine(
            "late", time_of_day="morning",
            day_type_overrides={"weekend": ScheduleOverride(time_of_day="evening")},
        )
        early = make_routine("early", time_of_day="afternoon")
        assert [r.id for r in sort_routines_by_time_of_day([late, early], "weekend")] == ["early", "late"]


class TestDueToday:
    def test_simple_mode(self):
        routines = [
            make_routine("a", time_of_day="night"),
            make_routine("b", frequency="weekends"),
            make_routine("c", time_of_day="morning", status="paused"),
            make_routine("d", time_of_day="morning"),
        ]
        assert [r.id for r in get_routines_due_today(routines, MONDAY)] == ["d", "a"]

    def test_smart_mode_affinity(self):
        routines = [
            make_routine("kids", affinity=affinity_from(["custody"])),
            make_routine("solo", affinity=affinity_from(["non_custody"])),
            make_routine("any"),
        ]
        due = get_routines_due_today_with_day_type(routines, ["custody"], MONDAY)
        assert [r.id for r in due] == ["kids", "any"]

    def test_filter_disabled(self):
        cfg = replace(DEFAULT_DAY_TYPE_CONFIGS["travel"], disabled_routines=frozenset({"b"}))
        routines = [make_routine("a"), make_routine("b")]
        assert [r.id for r in filter_routines_for_day_type(routines, cfg)] == ["a"]

    def test_filter_enabled_list(self):
        cfg = replace(DEFAULT_DAY_TYPE_CONFIGS["travel"], enabled_routines=frozenset({"b"}))
        routines = [make_routine("a"), make_routine("b")]
        assert [r.id for r in filter_routines_for_day_type(routines, cfg)] == ["b"]

    def test_routines_for_day_smart(self):
        config = mark_date(SmartScheduleConfig(), MONDAY, "travel")
        config = update_day_type_config(
            config, replace(DEFAULT_DAY_TYPE_CONFIGS["travel"], disabled_routines=frozenset({"gym"})),
        )
        routines = [
            make_routine("gym", time_of_day="morning"),
            make_routine("pack", time_of_day="evening", affinity=affinity_from(["travel"])),
            make_routine("kids", affinity=affinity_from(["custody"])),
        ]
        assert [r.id for r in routines_for_day(routines, MONDAY, config)] == ["pack"]

    def test_routines_for_day_disabled_config(self):
        config = mark_date(SmartScheduleConfig(enabled=False), MONDAY, "travel")
        routines = [make_routine("kids", affinity=affinity_from(["custody"]))]
        assert [r.id for r in routines_for_day(routines, MONDAY, config)] == ["kids"]


class TestScheduleDetails:
    def test_effective_schedule_override(self):
        routine = make_routine(
            time_of_day="morning", specific_time="06:00",
            day_type_overrides={"weekend": ScheduleOverride(specific_time="08:00")},
        )
        schedule = get_effective_schedule(routine, "weekend")
        assert schedule.specific_time == "08:00"
        assert schedule.time_of_day == "morning"
        assert routine.schedule.specific_time == "06:00"

    def test_duration_and_loops(self):
        steps = [
            RoutineStep(id="1", title="A", loop="Health", order=0, estimate_minutes=10),
            RoutineStep(id="2", title="B", loop="Work", order=1),
            RoutineStep(id="3", title="C", loop="Health", order=2, estimate_minutes=5),
        ]
        routine = make_routine(steps=steps)
        assert get_routine_duration(routine) == 15
        assert get_routine_loops(routine) == ["Health", "Work"]

    def test_describe_schedule(self):
        assert describe_schedule(RoutineSchedule(specific_time="06:00")) == "Daily • 06:00"
        assert describe_schedule(
            RoutineSchedule(frequency="weekly", time_of_day="morning", days_of_week=frozenset({2, 0}))
        ) == "Mon, Wed • Morning"
        assert describe_schedule(
            RoutineSchedule(frequency="monthly", day_of_month=22)
        ) == "Monthly on the 22nd • Anytime"
        assert describe_schedule(
            RoutineSchedule(frequency="monthly", day_of_month=11)
        ) == "Monthly on the 11th • Anytime"


class TestTemplates:
    def test_create_from_template(self):
        template = ROUTINE_TEMPLATES[0]
        routine = create_routine_from_template(template)

        assert routine.title == template.title
        assert len(routine.steps) == len(template.steps)
        assert [s.order for s in routine.steps] == list(range(len(template.steps)))
        assert len({s.id for s in routine.steps}) == len(routine.steps)
        assert routine.affinity == Restricted(frozenset({"non_custody", "regular"}))

    def test_template_without_day_types_applies_always(self):
        template = next(t for t in ROUTINE_TEMPLATES if not t.day_types)
        routine = create_routine_from_template(template, routine_id="fixed")
        assert routine.id == "fixed"
        assert routine.affinity.matches(["holiday"])
