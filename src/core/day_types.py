"""
LifeOS Smart Scheduler — Day Types.

Built-in day type defaults, lookups, and the edit actions on a
SmartScheduleConfig snapshot. Every edit returns a new snapshot; the caller
persists it (see src.data.db.ScheduleDB).

No I/O: this module only transforms data.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, timedelta
from typing import Iterable

from src.core.dates import add_months
from src.data.models import DayTypeConfig, MarkedDate, SmartScheduleConfig

logger = logging.getLogger(__name__)

_FALLBACK_ICON = "📅"
_FALLBACK_COLOR = "#9CA3AF"

LOOPS = ("Health", "Wealth", "Family", "Work", "Fun", "Maintenance", "Meaning")


def _multipliers(**values: float) -> dict[str, float]:
    return {loop: values.get(loop.lower(), 1.0) for loop in LOOPS}


DEFAULT_DAY_TYPE_CONFIGS: dict[str, DayTypeConfig] = {
    "regular": DayTypeConfig(
        day_type="regular", label="Workday", color="#4A90A4", icon="💼",
        loop_capacity_multipliers=_multipliers(),
    ),
    "weekend": DayTypeConfig(
        day_type="weekend", label="Weekend", color="#7C3AED", icon="🌴",
        loop_capacity_multipliers=_multipliers(
            wealth=0.5, family=1.3, work=0.3, fun=1.5, maintenance=1.2, meaning=1.2,
        ),
    ),
    "custody": DayTypeConfig(
        day_type="custody", label="Kids' Day", color="#EC4899", icon="👨‍👧",
        loop_capacity_multipliers=_multipliers(
            wealth=0.5, family=2.0, work=0.5, fun=1.5, maintenance=0.7,
        ),
    ),
    "non_custody": DayTypeConfig(
        day_type="non_custody", label="Solo Day", color="#10B981", icon="🧘",
        loop_capacity_multipliers=_multipliers(
            health=1.2, family=0.5, work=1.2, maintenance=1.2, meaning=1.3,
        ),
    ),
    "holiday": DayTypeConfig(
        day_type="holiday", label="Holiday", color="#F59E0B", icon="🎉",
        loop_capacity_multipliers=_multipliers(
            wealth=0.0, family=1.5, work=0.0, fun=2.0, maintenance=0.5,
        ),
    ),
    "travel": DayTypeConfig(
        day_type="travel", label="Travel Day", color="#6366F1", icon="✈️",
        loop_capacity_multipliers=_multipliers(
            health=0.5, wealth=0.3, family=0.5, work=0.3, maintenance=0.3, meaning=0.5,
        ),
    ),
}

# Canonical order; also the display priority when a day carries several types.
BUILT_IN_DAY_TYPES: tuple[str, ...] = tuple(DEFAULT_DAY_TYPE_CONFIGS)

CUSTODY_PATTERNS = ("every_other_weekend", "weekly", "biweekly")


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def is_built_in_day_type(day_type: str) -> bool:
    return day_type in DEFAULT_DAY_TYPE_CONFIGS


def is_custom_day_type(day_type: str, config: SmartScheduleConfig) -> bool:
    return any(c.day_type == day_type for c in config.custom_day_types)


def get_day_type_config(day_type: str, config: SmartScheduleConfig) -> DayTypeConfig:
    """Resolve the config for a day type.

    User edit of a built-in, then a custom type, then the built-in default.
    A key nobody defined (e.g. a custom type deleted while still referenced
    by a habit) gets a neutral placeholder rather than an error.
    """
    if day_type in config.day_type_configs:
        return config.day_type_configs[day_type]
    for custom in config.custom_day_types:
        if custom.day_type == day_type:
            return custom
    if day_type in DEFAULT_DAY_TYPE_CONFIGS:
        return DEFAULT_DAY_TYPE_CONFIGS[day_type]
    logger.debug("No config for day type %r, using placeholder", day_type)
    return DayTypeConfig(day_type=day_type, label=day_type, color=_FALLBACK_COLOR)


def get_day_type_display_info(day_type: str, config: SmartScheduleConfig) -> dict:
    """Label / color / icon for rendering a day type badge."""
    cfg = get_day_type_config(day_type, config)
    return {"label": cfg.label, "color": cfg.color, "icon": cfg.icon or _FALLBACK_ICON}


def list_day_types(config: SmartScheduleConfig) -> list[DayTypeConfig]:
    """All selectable day types: built-ins first, then custom ones."""
    return [get_day_type_config(dt, config) for dt in BUILT_IN_DAY_TYPES] + list(
        config.custom_day_types
    )


def get_adjusted_capacity(base_capacity: int, loop: str, day_type_config: DayTypeConfig) -> int:
    """Scale a loop's daily capacity by the day type's multiplier (default 1.0)."""
    multiplier = day_type_config.loop_capacity_multipliers.get(loop, 1.0)
    return round(base_capacity * multiplier)


def combined_capacity_multipliers(
    day_types: Iterable[str], config: SmartScheduleConfig,
) -> dict[str, float]:
    """Per-loop multiplier for a day carrying several types (product of each)."""
    combined = {loop: 1.0 for loop in LOOPS}
    for day_type in day_types:
        cfg = get_day_type_config(day_type, config)
        for loop, value in cfg.loop_capacity_multipliers.items():
            combined[loop] = combined.get(loop, 1.0) * value
    return combined


# ---------------------------------------------------------------------------
# Snapshot edits
# ---------------------------------------------------------------------------


def mark_date(
    config: SmartScheduleConfig,
    day: date,
    day_type: str,
    label: str | None = None,
    repeats_yearly: bool = False,
) -> SmartScheduleConfig:
    """Add a day type to a date (keeping any types already on it)."""
    key = day.isoformat()
    existing = config.marked_dates.get(key)
    if existing is None:
        marked = MarkedDate(date=day, day_types=frozenset({day_type}),
                            label=label, repeats_yearly=repeats_yearly)
    else:
        marked = replace(
            existing,
            day_types=existing.day_types | {day_type},
            label=label if label is not None else existing.label,
            repeats_yearly=existing.repeats_yearly or repeats_yearly,
        )
    marked_dates = dict(config.marked_dates)
    marked_dates[key] = marked
    logger.debug("Marked %s as %s", key, sorted(marked.day_types))
    return replace(config, marked_dates=marked_dates)


def unmark_date(
    config: SmartScheduleConfig, day: date, day_type: str | None = None,
) -> SmartScheduleConfig:
    """Remove one day type from a date, or all of them when day_type is None.

    A date left with no types is dropped from the map entirely.
    """
    key = day.isoformat()
    existing = config.marked_dates.get(key)
    if existing is None:
        return config

    marked_dates = dict(config.marked_dates)
    remaining = frozenset() if day_type is None else existing.day_types - {day_type}
    if remaining:
        marked_dates[key] = replace(existing, day_types=remaining)
    else:
        del marked_dates[key]
    return replace(config, marked_dates=marked_dates)


def mark_dates(
    config: SmartScheduleConfig, marked: Iterable[MarkedDate],
) -> SmartScheduleConfig:
    """Apply several markings at once (e.g. a generated custody pattern)."""
    for m in marked:
        for day_type in sorted(m.day_types):
            config = mark_date(config, m.date, day_type, m.label, m.repeats_yearly)
    return config


def add_custom_day_type(
    config: SmartScheduleConfig,
    day_type: str,
    label: str,
    icon: str = _FALLBACK_ICON,
    color: str = _FALLBACK_COLOR,
) -> SmartScheduleConfig:
    """Register a user-defined day type under a user-chosen key."""
    key = day_type.strip()
    if not key:
        raise ValueError("Custom day type key must not be empty")
    if is_built_in_day_type(key):
        raise ValueError(f"{key!r} is a built-in day type")
    if is_custom_day_type(key, config):
        raise ValueError(f"Custom day type {key!r} already exists")

    custom = DayTypeConfig(
        day_type=key, label=label, color=color, icon=icon,
        loop_capacity_multipliers={loop: 1.0 for loop in LOOPS},
    )
    logger.info("Custom day type added: %r (%s)", key, label)
    return replace(config, custom_day_types=config.custom_day_types + (custom,))


def remove_custom_day_type(config: SmartScheduleConfig, day_type: str) -> SmartScheduleConfig:
    """Delete a custom day type and strip it from every marked date."""
    if is_built_in_day_type(day_type):
        raise ValueError(f"Built-in day type {day_type!r} cannot be removed")

    custom = tuple(c for c in config.custom_day_types if c.day_type != day_type)
    marked_dates: dict[str, MarkedDate] = {}
    for key, marked in config.marked_dates.items():
        remaining = marked.day_types - {day_type}
        if remaining:
            marked_dates[key] = replace(marked, day_types=remaining)
    return replace(config, custom_day_types=custom, marked_dates=marked_dates)


def update_day_type_config(
    config: SmartScheduleConfig, day_type_config: DayTypeConfig,
) -> SmartScheduleConfig:
    """Store a user edit of a day type config (built-in or custom)."""
    key = day_type_config.day_type
    if is_custom_day_type(key, config):
        custom = tuple(
            day_type_config if c.day_type == key else c for c in config.custom_day_types
        )
        return replace(config, custom_day_types=custom)
    if not is_built_in_day_type(key):
        raise ValueError(f"Unknown day type {key!r}")
    configs = dict(config.day_type_configs)
    configs[key] = day_type_config
    return replace(config, day_type_configs=configs)


def set_enabled(config: SmartScheduleConfig, enabled: bool) -> SmartScheduleConfig:
    return replace(config, enabled=enabled)


# ---------------------------------------------------------------------------
# Bulk patterns
# ---------------------------------------------------------------------------


def generate_custody_pattern(
    start: date,
    pattern: str,
    day_type: str,
    months: int = 6,
) -> list[MarkedDate]:
    """Generate recurring markings from start up to start + months.

    every_other_weekend: Saturday and Sunday, every 14 days, starting from
    the first Saturday on or after start. weekly / biweekly: start itself,
    then every 7 / 14 days.
    """
    if pattern not in CUSTODY_PATTERNS:
        raise ValueError(f"Unknown custody pattern: {pattern!r}")

    end = add_months(start, months)
    marked: list[MarkedDate] = []
    types = frozenset({day_type})

    if pattern == "every_other_weekend":
        current = start + timedelta(days=(5 - start.weekday()) % 7)
        while current < end:
            marked.append(MarkedDate(date=current, day_types=types))
            marked.append(MarkedDate(date=current + timedelta(days=1), day_types=types))
            current += timedelta(days=14)
    else:
        step = timedelta(days=7 if pattern == "weekly" else 14)
        current = start
        while current < end:
            marked.append(MarkedDate(date=current, day_types=types))
            current += step

    logger.info(
        "Generated %d %r markings (%s) from %s", len(marked), day_type, pattern, start,
    )
    return marked
