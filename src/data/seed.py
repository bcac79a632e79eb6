"""
LifeOS Smart Scheduler — Default seed data.

Preset routine templates loaded into an empty RoutineDB on first run.
main.py passes DefaultSeedData() to RoutineDB.seed_if_empty().
"""

from __future__ import annotations

from src.data.models import RoutineSchedule, RoutineTemplate, TemplateStep

ROUTINE_TEMPLATES: tuple[RoutineTemplate, ...] = (
    RoutineTemplate(
        id="morning_me",
        title="Morning - Me",
        description="Solo day morning routine starting at 6:00 AM",
        schedule=RoutineSchedule(frequency="daily", time_of_day="morning", specific_time="06:00"),
        icon="🌅",
        tags=("morning", "daily", "solo"),
        day_types=("non_custody", "regular"),
        steps=(
            TemplateStep("Hydrate (16oz minimum)", "Health", 5),
            TemplateStep("Brush/floss", "Health", 5),
            TemplateStep("Make bed, open blinds", "Maintenance", 2),
            TemplateStep("Workout (strength or cardio)", "Health", 45),
            TemplateStep("Meditate", "Health", 10, optional=True),
            TemplateStep("Shower and dress", "Maintenance", 10),
            TemplateStep("Review daily plan", "Work", 5, optional=True),
        ),
    ),
    RoutineTemplate(
        id="morning_kids",
        title="Morning - Kids",
        description="Custody day morning: get everyone out the door",
        schedule=RoutineSchedule(frequency="daily", time_of_day="morning", specific_time="06:30"),
        icon="👨‍👧",
        tags=("morning", "daily", "family"),
        day_types=("custody",),
        steps=(
            TemplateStep("Wake kids", "Family", 5),
            TemplateStep("Breakfast together", "Family", 20),
            TemplateStep("Pack lunches", "Maintenance", 10),
            TemplateStep("School drop-off", "Family", 20),
        ),
    ),
    RoutineTemplate(
        id="afterwork_me",
        title="After Work - Me",
        description="Transition from work to home",
        schedule=RoutineSchedule(frequency="weekdays", time_of_day="afternoon"),
        icon="🏠",
        tags=("afternoon", "solo", "workday"),
        steps=(
            TemplateStep("Gear management", "Maintenance", 3),
            TemplateStep("Laundry", "Maintenance", 3),
            TemplateStep("Stretch", "Health", 5),
            TemplateStep("Message check", "Work", 5),
            TemplateStep("Evening planning", "Work", 5),
        ),
    ),
    RoutineTemplate(
        id="bedtime_me",
        title="Bedtime - Me",
        description="Wind down for sleep",
        schedule=RoutineSchedule(frequency="daily", time_of_day="night", specific_time="21:30"),
        icon="🌙",
        tags=("evening", "daily", "sleep"),
        steps=(
            TemplateStep("Phone charging", "Maintenance", 2),
            TemplateStep("Tidy space", "Maintenance", 10),
            TemplateStep("Prep tomorrow's clothes", "Maintenance", 5),
            TemplateStep("Journaling", "Health", 10, optional=True),
        ),
    ),
    RoutineTemplate(
        id="weekly_reset",
        title="Weekly Reset",
        description="Plan the week and restock the kitchen",
        schedule=RoutineSchedule(frequency="weekly", time_of_day="afternoon", days_of_week=frozenset({6})),
        icon="🧺",
        tags=("weekly", "planning"),
        steps=(
            TemplateStep("Review last week", "Meaning", 15),
            TemplateStep("Plan meals", "Health", 20),
            TemplateStep("Grocery list", "Maintenance", 10),
            TemplateStep("Check fridge for food about to go off", "Maintenance", 5),
        ),
    ),
)


class DefaultSeedData:
    """The built-in presets."""

    def routine_templates(self) -> list[RoutineTemplate]:
        return list(ROUTINE_TEMPLATES)
