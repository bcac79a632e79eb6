"""
LifeOS Smart Scheduler — Entry Point.

`python main.py [--date YYYY-MM-DD]` prints the agenda for a day (today in the
configured timezone by default), seeding routine templates on first run.
"""

import argparse
import logging
import sys
from datetime import date, datetime
from zoneinfo import ZoneInfo

from src.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from src.core.agenda import build_daily_agenda, format_agenda
from src.core.dates import parse_date
from src.core.waste_analytics import calculate_waste_stats, waste_insights
from src.data.db import HabitDB, RoutineDB, ScheduleDB, WasteDB
from src.data.seed import DefaultSeedData

logger = logging.getLogger(__name__)


def _today() -> date:
    return datetime.now(ZoneInfo(settings.TIMEZONE)).date()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Print the smart schedule for a day.")
    parser.add_argument("--date", help="day to show, YYYY-MM-DD (default: today)")
    args = parser.parse_args(argv)

    try:
        day = parse_date(args.date) if args.date else _today()
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    schedule_db = ScheduleDB(default_enabled=settings.SMART_SCHEDULING_ENABLED)
    habit_db = HabitDB()
    routine_db = RoutineDB()
    waste_db = WasteDB()

    routine_db.seed_if_empty(DefaultSeedData())

    agenda = build_daily_agenda(
        day,
        schedule_db.load(),
        habit_db.list_habits(status="active"),
        routine_db.list_routines(status="active"),
    )
    print(format_agenda(agenda))

    stats = calculate_waste_stats(
        waste_db.list_entries(), months=settings.WASTE_STATS_MONTHS, today=day,
    )
    insights = waste_insights(stats)
    if insights:
        print("\nKitchen:")
        for line in insights:
            print(f"  - {line}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
