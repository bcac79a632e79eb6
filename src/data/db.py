"""
LifeOS Smart Scheduler — SQLite storage.

The persistence boundary around the pure core: the schedule config, habits
and their completion log, routines and their run log, and the food waste log survive restarts
here. Nested structures (day type sets, overrides, steps) are JSON columns.

Every edit action persists immediately, so callers never hold unsaved state.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from dataclasses import asdict, replace
from datetime import date, datetime
from pathlib import Path
from typing import Any

from src.core import day_types as day_type_ops
from src.core.habit_resolver import refresh_streak_counters
from src.core.routine_resolver import create_routine_completion, create_routine_from_template
from src.data.models import (
    DayTypeConfig,
    Habit,
    HabitCompletion,
    HabitCue,
    HabitDayTypeOverride,
    MarkedDate,
    Routine,
    RoutineCompletion,
    RoutineSchedule,
    RoutineStep,
    ScheduleOverride,
    SmartScheduleConfig,
    WasteEntry,
    affinity_from,
    affinity_to_list,
    normalize_ingredient_name,
)
from src.ports.seed_port import SeedDataProvider

logger = logging.getLogger(__name__)


def _dump(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, sort_keys=True)


def _load(text: str | None, default: Any) -> Any:
    if not text:
        return default
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed JSON column: %r", text[:80])
        return default


class _SQLiteDB:
    """Connection handling shared by the stores below."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from src.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        raise NotImplementedError

    @staticmethod
    def _existing_columns(conn: sqlite3.Connection, table: str) -> set[str]:
        return {row[1] for row in conn.execute(f"PRAGMA table_info({table})").fetchall()}


# ---------------------------------------------------------------------------
# Smart schedule config
# ---------------------------------------------------------------------------


class ScheduleDB(_SQLiteDB):
    """Marked dates, custom day types and the smart-scheduling switch."""

    def __init__(self, db_path: str | None = None, default_enabled: bool = True) -> None:
        self._default_enabled = default_enabled
        super().__init__(db_path)

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS schedule_settings (
                    id      INTEGER PRIMARY KEY CHECK (id = 1),
                    enabled INTEGER NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS marked_dates (
                    date           TEXT PRIMARY KEY,
                    day_types      TEXT NOT NULL,
                    label          TEXT,
                    repeats_yearly INTEGER NOT NULL DEFAULT 0
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS day_type_configs (
                    position                  INTEGER PRIMARY KEY AUTOINCREMENT,
                    day_type                  TEXT    NOT NULL UNIQUE,
                    label                     TEXT    NOT NULL,
                    color                     TEXT    NOT NULL,
                    icon                      TEXT    NOT NULL,
                    disabled_routines         TEXT    NOT NULL DEFAULT '[]',
                    enabled_routines          TEXT    NOT NULL DEFAULT '[]',
                    loop_capacity_multipliers TEXT    NOT NULL DEFAULT '{}',
                    is_custom                 INTEGER NOT NULL DEFAULT 1
                )
            """)
            if "repeats_yearly" not in self._existing_columns(conn, "marked_dates"):
                conn.execute(
                    "ALTER TABLE marked_dates ADD COLUMN repeats_yearly INTEGER NOT NULL DEFAULT 0"
                )
        logger.debug("Schedule tables initialized at %s", self._db_path)

    @staticmethod
    def _row_to_marked(row: sqlite3.Row) -> MarkedDate | None:
        day_types = frozenset(_load(row["day_types"], []))
        if not day_types:
            # Stored empty set: same as unmarked
            return None
        return MarkedDate(
            date=date.fromisoformat(row["date"]),
            day_types=day_types,
            label=row["label"],
            repeats_yearly=bool(row["repeats_yearly"]),
        )

    @staticmethod
    def _row_to_day_type_config(row: sqlite3.Row) -> DayTypeConfig:
        return DayTypeConfig(
            day_type=row["day_type"],
            label=row["label"],
            color=row["color"],
            icon=row["icon"],
            disabled_routines=frozenset(_load(row["disabled_routines"], [])),
            enabled_routines=frozenset(_load(row["enabled_routines"], [])),
            loop_capacity_multipliers=_load(row["loop_capacity_multipliers"], {}),
        )

    def load(self) -> SmartScheduleConfig:
        """Read the whole config snapshot."""
        with self._connect() as conn:
            settings_row = conn.execute(
                "SELECT enabled FROM schedule_settings WHERE id = 1"
            ).fetchone()
            marked_rows = conn.execute("SELECT * FROM marked_dates ORDER BY date").fetchall()
            config_rows = conn.execute(
                "SELECT * FROM day_type_configs ORDER BY position"
            ).fetchall()

        enabled = self._default_enabled if settings_row is None else bool(settings_row["enabled"])

        marked_dates: dict[str, MarkedDate] = {}
        for row in marked_rows:
            marked = self._row_to_marked(row)
            if marked is not None:
                marked_dates[row["date"]] = marked

        custom: list[DayTypeConfig] = []
        overrides: dict[str, DayTypeConfig] = {}
        for row in config_rows:
            cfg = self._row_to_day_type_config(row)
            if row["is_custom"]:
                custom.append(cfg)
            else:
                overrides[cfg.day_type] = cfg

        return SmartScheduleConfig(
            enabled=enabled,
            marked_dates=marked_dates,
            custom_day_types=tuple(custom),
            day_type_configs=overrides,
        )

    def save(self, config: SmartScheduleConfig) -> None:
        """Replace the stored snapshot with `config`."""
        with self._connect() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO schedule_settings (id, enabled) VALUES (1, ?)",
                (int(config.enabled),),
            )
            conn.execute("DELETE FROM marked_dates")
            conn.executemany(
                "INSERT INTO marked_dates (date, day_types, label, repeats_yearly) "
                "VALUES (?, ?, ?, ?)",
                [
                    (key, _dump(sorted(m.day_types)), m.label, int(m.repeats_yearly))
                    for key, m in config.marked_dates.items()
                    if m.day_types
                ],
            )
            conn.execute("DELETE FROM day_type_configs")
            rows = [(cfg, 0) for cfg in config.day_type_configs.values()]
            rows += [(cfg, 1) for cfg in config.custom_day_types]
            conn.executemany(
                """
                INSERT INTO day_type_configs
                    (day_type, label, color, icon, disabled_routines,
                     enabled_routines, loop_capacity_multipliers, is_custom)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        cfg.day_type, cfg.label, cfg.color, cfg.icon,
                        _dump(sorted(cfg.disabled_routines)),
                        _dump(sorted(cfg.enabled_routines)),
                        _dump(dict(cfg.loop_capacity_multipliers)),
                        is_custom,
                    )
                    for cfg, is_custom in rows
                ],
            )
        logger.debug(
            "Schedule saved: %d marked dates, %d custom day types",
            len(config.marked_dates), len(config.custom_day_types),
        )

    # Edit actions: load, apply, persist, return the new snapshot

    def mark_date(
        self, day: date, day_type: str, label: str | None = None, repeats_yearly: bool = False,
    ) -> SmartScheduleConfig:
        config = day_type_ops.mark_date(self.load(), day, day_type, label, repeats_yearly)
        self.save(config)
        logger.info("Date %s marked as %r", day.isoformat(), day_type)
        return config

    def mark_dates(self, marked: list[MarkedDate]) -> SmartScheduleConfig:
        config = day_type_ops.mark_dates(self.load(), marked)
        self.save(config)
        logger.info("Marked %d dates", len(marked))
        return config

    def unmark_date(self, day: date, day_type: str | None = None) -> SmartScheduleConfig:
        config = day_type_ops.unmark_date(self.load(), day, day_type)
        self.save(config)
        logger.info("Date %s unmarked (%s)", day.isoformat(), day_type or "all types")
        return config

    def add_custom_day_type(
        self, day_type: str, label: str, icon: str = "📅", color: str = "#9CA3AF",
    ) -> SmartScheduleConfig:
        config = day_type_ops.add_custom_day_type(self.load(), day_type, label, icon, color)
        self.save(config)
        return config

    def remove_custom_day_type(self, day_type: str) -> SmartScheduleConfig:
        config = day_type_ops.remove_custom_day_type(self.load(), day_type)
        self.save(config)
        logger.info("Custom day type %r removed", day_type)
        return config

    def update_day_type_config(self, day_type_config: DayTypeConfig) -> SmartScheduleConfig:
        config = day_type_ops.update_day_type_config(self.load(), day_type_config)
        self.save(config)
        return config

    def set_enabled(self, enabled: bool) -> SmartScheduleConfig:
        config = day_type_ops.set_enabled(self.load(), enabled)
        self.save(config)
        logger.info("Smart scheduling %s", "enabled" if enabled else "disabled")
        return config


# ---------------------------------------------------------------------------
# Habits and completions
# ---------------------------------------------------------------------------


class HabitDB(_SQLiteDB):
    """Habits plus their append-only completion log."""

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS habits (
                    id                 TEXT    PRIMARY KEY,
                    title              TEXT    NOT NULL,
                    loop               TEXT    NOT NULL,
                    cue_type           TEXT    NOT NULL,
                    cue_value          TEXT    NOT NULL,
                    response           TEXT    NOT NULL,
                    frequency          TEXT    NOT NULL DEFAULT 'daily',
                    custom_days        TEXT    NOT NULL DEFAULT '[]',
                    time_of_day        TEXT,
                    day_types          TEXT    NOT NULL DEFAULT '[]',
                    day_type_overrides TEXT    NOT NULL DEFAULT '{}',
                    type               TEXT    NOT NULL DEFAULT 'build',
                    craving            TEXT,
                    reward             TEXT,
                    streak             INTEGER NOT NULL DEFAULT 0,
                    longest_streak     INTEGER NOT NULL DEFAULT 0,
                    total_completions  INTEGER NOT NULL DEFAULT 0,
                    status             TEXT    NOT NULL DEFAULT 'active'
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS habit_completions (
                    id           TEXT    PRIMARY KEY,
                    habit_id     TEXT    NOT NULL,
                    date         TEXT    NOT NULL,
                    completed_at TEXT    NOT NULL,
                    difficulty   INTEGER,
                    notes        TEXT
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_completions_habit "
                "ON habit_completions (habit_id, date)"
            )
            existing_cols = self._existing_columns(conn, "habits")
            if "day_types" not in existing_cols:
                conn.execute("ALTER TABLE habits ADD COLUMN day_types TEXT NOT NULL DEFAULT '[]'")
            if "day_type_overrides" not in existing_cols:
                conn.execute(
                    "ALTER TABLE habits ADD COLUMN day_type_overrides TEXT NOT NULL DEFAULT '{}'"
                )
        logger.debug("Habit tables initialized at %s", self._db_path)

    @staticmethod
    def _row_to_habit(row: sqlite3.Row) -> Habit:
        overrides = {
            day_type: HabitDayTypeOverride(
                time_of_day=o.get("time_of_day"), cue_value=o.get("cue_value"),
            )
            for day_type, o in _load(row["day_type_overrides"], {}).items()
        }
        return Habit(
            id=row["id"],
            title=row["title"],
            loop=row["loop"],
            cue=HabitCue(type=row["cue_type"], value=row["cue_value"]),
            response=row["response"],
            frequency=row["frequency"],
            custom_days=frozenset(_load(row["custom_days"], [])),
            time_of_day=row["time_of_day"],
            affinity=affinity_from(_load(row["day_types"], [])),
            day_type_overrides=overrides,
            type=row["type"],
            craving=row["craving"],
            reward=row["reward"],
            streak=row["streak"],
            longest_streak=row["longest_streak"],
            total_completions=row["total_completions"],
            status=row["status"],
        )

    @staticmethod
    def _habit_params(habit: Habit) -> dict[str, Any]:
        return {
            "id": habit.id,
            "title": habit.title,
            "loop": habit.loop,
            "cue_type": habit.cue.type,
            "cue_value": habit.cue.value,
            "response": habit.response,
            "frequency": habit.frequency,
            "custom_days": _dump(sorted(habit.custom_days)),
            "time_of_day": habit.time_of_day,
            "day_types": _dump(affinity_to_list(habit.affinity)),
            "day_type_overrides": _dump({
                day_type: {k: v for k, v in asdict(o).items() if v is not None}
                for day_type, o in habit.day_type_overrides.items()
            }),
            "type": habit.type,
            "craving": habit.craving,
            "reward": habit.reward,
            "streak": habit.streak,
            "longest_streak": habit.longest_streak,
            "total_completions": habit.total_completions,
            "status": habit.status,
        }

    @staticmethod
    def _row_to_completion(row: sqlite3.Row) -> HabitCompletion:
        return HabitCompletion(
            id=row["id"],
            habit_id=row["habit_id"],
            date=date.fromisoformat(row["date"]),
            completed_at=datetime.fromisoformat(row["completed_at"]),
            difficulty=row["difficulty"],
            notes=row["notes"],
        )

    def add_habit(self, habit: Habit) -> Habit:
        params = self._habit_params(habit)
        columns = ", ".join(params)
        placeholders = ", ".join(f":{name}" for name in params)
        with self._connect() as conn:
            conn.execute(f"INSERT INTO habits ({columns}) VALUES ({placeholders})", params)
        logger.info("Habit added: %s '%s' (%s)", habit.id, habit.title, habit.frequency)
        return habit

    def update_habit(self, habit: Habit) -> Habit:
        params = self._habit_params(habit)
        assignments = ", ".join(f"{name} = :{name}" for name in params if name != "id")
        with self._connect() as conn:
            cursor = conn.execute(f"UPDATE habits SET {assignments} WHERE id = :id", params)
        if cursor.rowcount == 0:
            raise ValueError(f"Habit {habit.id} not found")
        logger.info("Habit %s updated", habit.id)
        return habit

    def get_habit(self, habit_id: str) -> Habit | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM habits WHERE id = ?", (habit_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_habit(row)

    def list_habits(self, status: str | None = None) -> list[Habit]:
        """All habits in insertion order, optionally filtered by status."""
        query = "SELECT * FROM habits"
        params: list = []
        if status is not None:
            query += " WHERE status = ?"
            params.append(status)
        query += " ORDER BY rowid"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_habit(r) for r in rows]

    def set_status(self, habit_id: str, status: str) -> Habit:
        habit = self.get_habit(habit_id)
        if habit is None:
            raise ValueError(f"Habit {habit_id} not found")
        return self.update_habit(replace(habit, status=status))

    def list_completions(self, habit_id: str | None = None) -> list[HabitCompletion]:
        """Completion log, newest first."""
        query = "SELECT * FROM habit_completions"
        params: list = []
        if habit_id is not None:
            query += " WHERE habit_id = ?"
            params.append(habit_id)
        query += " ORDER BY date DESC, completed_at DESC"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_completion(r) for r in rows]

    def log_completion(
        self,
        habit_id: str,
        day: date | None = None,
        difficulty: int | None = None,
        notes: str | None = None,
    ) -> HabitCompletion:
        """Append a completion and refresh the habit's cached streak counters."""
        habit = self.get_habit(habit_id)
        if habit is None:
            raise ValueError(f"Habit {habit_id} not found")

        now = datetime.now()
        completion = HabitCompletion(
            id=f"completion_{uuid.uuid4().hex[:12]}",
            habit_id=habit_id,
            date=day or now.date(),
            completed_at=now,
            difficulty=difficulty,
            notes=notes,
        )
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO habit_completions (id, habit_id, date, completed_at, difficulty, notes) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    completion.id, habit_id, completion.date.isoformat(),
                    completion.completed_at.isoformat(), difficulty, notes,
                ),
            )
        refreshed = self._refresh_counters(habit)
        logger.info(
            "Habit %s completed on %s (streak %d)",
            habit_id, completion.date.isoformat(), refreshed.streak,
        )
        return completion

    def delete_completion(self, completion_id: str) -> bool:
        """Remove a completion (the only permitted edit to the log)."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT habit_id FROM habit_completions WHERE id = ?", (completion_id,),
            ).fetchone()
            if row is None:
                return False
            conn.execute("DELETE FROM habit_completions WHERE id = ?", (completion_id,))

        habit = self.get_habit(row["habit_id"])
        if habit is not None:
            self._refresh_counters(habit)
        logger.info("Completion %s deleted", completion_id)
        return True

    def _refresh_counters(self, habit: Habit) -> Habit:
        refreshed = refresh_streak_counters(habit, self.list_completions(habit.id))
        return self.update_habit(refreshed)


# ---------------------------------------------------------------------------
# Routines
# ---------------------------------------------------------------------------


class RoutineDB(_SQLiteDB):
    """Multi-step routines plus the log of their runs."""

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS routines (
                    id                 TEXT PRIMARY KEY,
                    title              TEXT NOT NULL,
                    description        TEXT,
                    steps              TEXT NOT NULL DEFAULT '[]',
                    schedule           TEXT NOT NULL,
                    day_types          TEXT NOT NULL DEFAULT '[]',
                    day_type_overrides TEXT NOT NULL DEFAULT '{}',
                    status             TEXT NOT NULL DEFAULT 'active',
                    tags               TEXT NOT NULL DEFAULT '[]'
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS routine_completions (
                    id              TEXT    PRIMARY KEY,
                    routine_id      TEXT    NOT NULL,
                    date            TEXT    NOT NULL,
                    completed_at    TEXT    NOT NULL,
                    completed_steps TEXT    NOT NULL DEFAULT '[]',
                    skipped_steps   TEXT    NOT NULL DEFAULT '[]',
                    fully_completed INTEGER NOT NULL DEFAULT 0,
                    notes           TEXT
                )
            """)
        logger.debug("Routines table initialized at %s", self._db_path)

    @staticmethod
    def _row_to_routine(row: sqlite3.Row) -> Routine:
        schedule = _load(row["schedule"], {})
        schedule["days_of_week"] = frozenset(schedule.get("days_of_week", []))
        return Routine(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            steps=[RoutineStep(**s) for s in _load(row["steps"], [])],
            schedule=RoutineSchedule(**schedule),
            affinity=affinity_from(_load(row["day_types"], [])),
            day_type_overrides={
                day_type: ScheduleOverride(**o)
                for day_type, o in _load(row["day_type_overrides"], {}).items()
            },
            status=row["status"],
            tags=_load(row["tags"], []),
        )

    @staticmethod
    def _routine_params(routine: Routine) -> tuple:
        schedule = asdict(routine.schedule)
        schedule["days_of_week"] = sorted(routine.schedule.days_of_week)
        return (
            routine.title,
            routine.description,
            _dump([asdict(s) for s in routine.steps]),
            _dump(schedule),
            _dump(affinity_to_list(routine.affinity)),
            _dump({dt: asdict(o) for dt, o in routine.day_type_overrides.items()}),
            routine.status,
            _dump(list(routine.tags)),
            routine.id,
        )

    def add_routine(self, routine: Routine) -> Routine:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO routines
                    (title, description, steps, schedule, day_types,
                     day_type_overrides, status, tags, id)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                self._routine_params(routine),
            )
        logger.info("Routine added: %s '%s' (%d steps)", routine.id, routine.title, len(routine.steps))
        return routine

    def update_routine(self, routine: Routine) -> Routine:
        with self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE routines SET
                    title = ?, description = ?, steps = ?, schedule = ?, day_types = ?,
                    day_type_overrides = ?, status = ?, tags = ?
                WHERE id = ?
                """,
                self._routine_params(routine),
            )
        if cursor.rowcount == 0:
            raise ValueError(f"Routine {routine.id} not found")
        logger.info("Routine %s updated", routine.id)
        return routine

    def get_routine(self, routine_id: str) -> Routine | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM routines WHERE id = ?", (routine_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_routine(row)

    def list_routines(self, status: str | None = None) -> list[Routine]:
        query = "SELECT * FROM routines"
        params: list = []
        if status is not None:
            query += " WHERE status = ?"
            params.append(status)
        query += " ORDER BY rowid"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_routine(r) for r in rows]

    def set_status(self, routine_id: str, status: str) -> Routine:
        routine = self.get_routine(routine_id)
        if routine is None:
            raise ValueError(f"Routine {routine_id} not found")
        return self.update_routine(replace(routine, status=status))

    def seed_if_empty(self, provider: SeedDataProvider) -> int:
        """Create routines from the provider's templates on first run.

        Returns how many routines were added (0 if the table had any rows).
        """
        with self._connect() as conn:
            count = conn.execute("SELECT COUNT(*) FROM routines").fetchone()[0]
        if count:
            return 0

        templates = provider.routine_templates()
        for template in templates:
            self.add_routine(create_routine_from_template(template, routine_id=template.id))
        logger.info("Seeded %d routine templates", len(templates))
        return len(templates)

    @staticmethod
    def _row_to_completion(row: sqlite3.Row) -> RoutineCompletion:
        return RoutineCompletion(
            id=row["id"],
            routine_id=row["routine_id"],
            date=date.fromisoformat(row["date"]),
            completed_at=datetime.fromisoformat(row["completed_at"]),
            completed_steps=tuple(_load(row["completed_steps"], [])),
            skipped_steps=tuple(_load(row["skipped_steps"], [])),
            fully_completed=bool(row["fully_completed"]),
            notes=row["notes"],
        )

    def log_completion(
        self,
        routine_id: str,
        completed_steps: list[str],
        skipped_steps: list[str] | None = None,
        day: date | None = None,
        notes: str | None = None,
    ) -> RoutineCompletion:
        """Append a run of the routine to the log."""
        routine = self.get_routine(routine_id)
        if routine is None:
            raise ValueError(f"Routine {routine_id} not found")

        completion = create_routine_completion(
            routine, completed_steps, skipped_steps or (), day=day, notes=notes,
        )
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO routine_completions
                    (id, routine_id, date, completed_at, completed_steps,
                     skipped_steps, fully_completed, notes)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    completion.id, routine_id, completion.date.isoformat(),
                    completion.completed_at.isoformat(),
                    _dump(list(completion.completed_steps)),
                    _dump(list(completion.skipped_steps)),
                    int(completion.fully_completed), notes,
                ),
            )
        logger.info(
            "Routine %s run on %s (%s)", routine_id, completion.date.isoformat(),
            "full" if completion.fully_completed else "partial",
        )
        return completion

    def list_completions(
        self, routine_id: str | None = None, day: date | None = None,
    ) -> list[RoutineCompletion]:
        """Run log, newest first, optionally for one routine and/or one date."""
        query = "SELECT * FROM routine_completions"
        clauses: list[str] = []
        params: list = []
        if routine_id is not None:
            clauses.append("routine_id = ?")
            params.append(routine_id)
        if day is not None:
            clauses.append("date = ?")
            params.append(day.isoformat())
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY date DESC, completed_at DESC"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_completion(r) for r in rows]

    def delete_completion(self, completion_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM routine_completions WHERE id = ?", (completion_id,))
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Routine completion %s deleted", completion_id)
        return deleted


# ---------------------------------------------------------------------------
# Food waste log
# ---------------------------------------------------------------------------


class WasteDB(_SQLiteDB):
    """Wasted-ingredient log."""

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS waste_log (
                    id              TEXT PRIMARY KEY,
                    ingredient_name TEXT NOT NULL,
                    normalized_name TEXT NOT NULL,
                    quantity        REAL NOT NULL,
                    unit            TEXT NOT NULL,
                    reason          TEXT NOT NULL,
                    date            TEXT NOT NULL,
                    estimated_cost  REAL,
                    notes           TEXT,
                    created_at      TEXT NOT NULL
                )
            """)
        logger.debug("Waste log table initialized at %s", self._db_path)

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> WasteEntry:
        # normalized_name column is for queries only; the model derives its own
        return WasteEntry(
            id=row["id"],
            ingredient_name=row["ingredient_name"],
            quantity=row["quantity"],
            unit=row["unit"],
            reason=row["reason"],
            date=date.fromisoformat(row["date"]),
            estimated_cost=row["estimated_cost"],
            notes=row["notes"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def add_entry(self, entry: WasteEntry) -> WasteEntry:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO waste_log
                    (id, ingredient_name, normalized_name, quantity, unit, reason,
                     date, estimated_cost, notes, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.id, entry.ingredient_name, entry.normalized_name,
                    entry.quantity, entry.unit, entry.reason, entry.date.isoformat(),
                    entry.estimated_cost, entry.notes, entry.created_at.isoformat(),
                ),
            )
        logger.info("Waste logged: %s %s %s (%s)", entry.quantity, entry.unit,
                    entry.ingredient_name, entry.reason)
        return entry

    def update_entry(self, entry: WasteEntry) -> WasteEntry:
        """Overwrite an entry; normalized_name is recomputed from ingredient_name."""
        with self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE waste_log SET
                    ingredient_name = ?, normalized_name = ?, quantity = ?, unit = ?,
                    reason = ?, date = ?, estimated_cost = ?, notes = ?
                WHERE id = ?
                """,
                (
                    entry.ingredient_name, normalize_ingredient_name(entry.ingredient_name),
                    entry.quantity, entry.unit, entry.reason, entry.date.isoformat(),
                    entry.estimated_cost, entry.notes, entry.id,
                ),
            )
        if cursor.rowcount == 0:
            raise ValueError(f"Waste entry {entry.id} not found")
        logger.info("Waste entry %s updated", entry.id)
        return entry

    def get_entry(self, entry_id: str) -> WasteEntry | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM waste_log WHERE id = ?", (entry_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_entry(row)

    def list_entries(self, since: date | None = None) -> list[WasteEntry]:
        """Entries newest first, optionally only those on/after `since`."""
        query = "SELECT * FROM waste_log"
        params: list = []
        if since is not None:
            query += " WHERE date >= ?"
            params.append(since.isoformat())
        query += " ORDER BY date DESC, created_at DESC"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_entry(r) for r in rows]

    def delete_entry(self, entry_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM waste_log WHERE id = ?", (entry_id,))
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Waste entry %s deleted", entry_id)
        return deleted
