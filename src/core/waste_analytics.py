"""
LifeOS Smart Scheduler — Food Waste Analytics.

Rolling-window statistics over the waste log, plus a rough dollar estimate
for a wasted ingredient from a static price table.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import logging
import uuid
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable

from src.core.dates import add_months
from src.data.models import WASTE_REASONS, WasteEntry

logger = logging.getLogger(__name__)

TOP_WASTED_LIMIT = 5

# Typical US grocery price in dollars per purchase unit (one item, one pound,
# one bunch...). Order matters only when two keys of equal length match.
INGREDIENT_PRICES: dict[str, float] = {
    # produce
    "bell pepper": 1.50,
    "green pepper": 1.25,
    "jalapeno": 0.25,
    "onion": 0.90,
    "garlic": 0.60,
    "tomato": 0.80,
    "potato": 0.70,
    "carrot": 0.25,
    "celery": 2.00,
    "lettuce": 2.50,
    "spinach": 3.50,
    "kale": 2.50,
    "broccoli": 2.25,
    "cucumber": 0.90,
    "zucchini": 1.10,
    "mushroom": 3.00,
    "avocado": 1.50,
    "cilantro": 1.00,
    "parsley": 1.00,
    "basil": 2.50,
    "lemon": 0.70,
    "lime": 0.40,
    "apple": 1.00,
    "banana": 0.30,
    "berries": 4.00,
    "strawberries": 4.00,
    # dairy & eggs
    "milk": 3.80,
    "heavy cream": 4.50,
    "yogurt": 1.25,
    "butter": 5.00,
    "cheese": 5.50,
    "sour cream": 2.50,
    "eggs": 4.00,
    # protein
    "chicken breast": 4.50,
    "chicken": 3.50,
    "ground beef": 5.50,
    "beef": 7.00,
    "pork": 4.00,
    "salmon": 11.00,
    "shrimp": 10.00,
    "tofu": 2.50,
    # bakery & pantry
    "bread": 3.50,
    "tortillas": 3.00,
    "rice": 1.50,
    "pasta": 1.75,
    "beans": 1.25,
    "leftovers": 5.00,
}

# Multiplier applied to the table price for each unit; unknown units count as 1.
UNIT_MULTIPLIERS: dict[str, float] = {
    "whole": 1.0,
    "pieces": 1.0,
    "piece": 1.0,
    "lbs": 1.0,
    "lb": 1.0,
    "oz": 1 / 16,
    "cups": 0.5,
    "cup": 0.5,
    "bunch": 1.0,
    "bag": 1.5,
    "container": 1.0,
}


@dataclass(frozen=True)
class IngredientWasteCount:
    name: str
    count: int
    last_wasted: date


@dataclass
class WasteStats:
    total_entries: int = 0
    total_estimated_cost: float = 0.0
    top_wasted_ingredients: list[IngredientWasteCount] = field(default_factory=list)
    waste_by_reason: dict[str, int] = field(
        default_factory=lambda: {reason: 0 for reason in WASTE_REASONS}
    )


def _recent(log: Iterable[WasteEntry], months: int, today: date | None) -> list[WasteEntry]:
    cutoff = add_months(today or date.today(), -months)
    return [entry for entry in log if entry.date >= cutoff]


def calculate_waste_stats(
    log: Iterable[WasteEntry], months: int = 3, today: date | None = None,
) -> WasteStats:
    """Aggregate the last `months` calendar months of the waste log."""
    recent = _recent(log, months, today)

    counts: dict[str, int] = {}
    last_wasted: dict[str, date] = {}
    for entry in recent:
        name = entry.normalized_name
        counts[name] = counts.get(name, 0) + 1
        if name not in last_wasted or entry.date > last_wasted[name]:
            last_wasted[name] = entry.date

    # Stable sort: equal counts keep first-seen order
    top = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:TOP_WASTED_LIMIT]

    by_reason = {reason: 0 for reason in WASTE_REASONS}
    for entry in recent:
        by_reason[entry.reason] += 1

    total_cost = sum(entry.estimated_cost or 0.0 for entry in recent)

    return WasteStats(
        total_entries=len(recent),
        total_estimated_cost=round(total_cost, 2),
        top_wasted_ingredients=[
            IngredientWasteCount(name=name, count=count, last_wasted=last_wasted[name])
            for name, count in top
        ],
        waste_by_reason=by_reason,
    )


def get_frequently_wasted_ingredients(
    log: Iterable[WasteEntry],
    threshold: int = 2,
    months: int = 3,
    today: date | None = None,
) -> list[str]:
    """Normalized names wasted at least `threshold` times in the window."""
    counts = Counter(entry.normalized_name for entry in _recent(log, months, today))
    return [name for name, count in counts.items() if count >= threshold]


def _lookup_price(name: str) -> tuple[str, float] | None:
    """Exact key, else the longest key contained in the name or containing it."""
    if name in INGREDIENT_PRICES:
        return name, INGREDIENT_PRICES[name]

    matches = [key for key in INGREDIENT_PRICES if key in name or name in key]
    if not matches:
        return None
    best = max(matches, key=len)  # first of the longest wins on ties
    return best, INGREDIENT_PRICES[best]


def estimate_ingredient_cost(name: str, quantity: float, unit: str) -> float | None:
    """Rough dollar value of a wasted ingredient.

    Returns None when the ingredient isn't in the price table. None means "no
    estimate", which is not the same as a $0 estimate.
    """
    key = name.strip().lower()
    if not key:
        return None

    found = _lookup_price(key)
    if found is None:
        logger.debug("No price estimate for %r", name)
        return None

    matched, unit_price = found
    multiplier = UNIT_MULTIPLIERS.get(unit.strip().lower(), 1.0)
    cost = round(unit_price * quantity * multiplier, 2)
    logger.debug("Estimated %r (as %r): %s %s -> $%.2f", name, matched, quantity, unit, cost)
    return cost


def create_waste_entry(
    ingredient_name: str,
    quantity: float,
    unit: str,
    reason: str,
    day: date | None = None,
    estimated_cost: float | None = None,
    notes: str | None = None,
    entry_id: str | None = None,
) -> WasteEntry:
    """Build a new log entry, estimating its cost when none was given."""
    if estimated_cost is None:
        estimated_cost = estimate_ingredient_cost(ingredient_name, quantity, unit)
    return WasteEntry(
        id=entry_id or f"waste_{uuid.uuid4().hex[:12]}",
        ingredient_name=ingredient_name.strip(),
        quantity=quantity,
        unit=unit,
        reason=reason,
        date=day or date.today(),
        estimated_cost=estimated_cost,
        notes=notes,
        created_at=datetime.now(),
    )


_REASON_TIPS = {
    "expired": "Check dates when unpacking groceries and move older items to the front.",
    "forgot": "Keep a 'use first' shelf in the fridge.",
    "cooked_too_much": "Scale recipes down or plan a leftovers night.",
    "didnt_like": "Try a small portion of new ingredients before buying in bulk.",
    "spoiled_early": "Review how those items are stored.",
    "recipe_changed": "Lock the meal plan before shopping.",
}


def waste_insights(stats: WasteStats) -> list[str]:
    """Short plain-text tips derived from the stats."""
    insights: list[str] = []
    if stats.total_entries == 0:
        return insights

    for item in stats.top_wasted_ingredients:
        if item.count >= 2:
            insights.append(f"{item.name} wasted {item.count} times — buy smaller quantities?")

    reason, count = max(stats.waste_by_reason.items(), key=lambda kv: kv[1])
    tip = _REASON_TIPS.get(reason)
    if count > 0 and tip:
        insights.append(f"Most common reason: {reason.replace('_', ' ')} ({count}). {tip}")

    if stats.total_estimated_cost > 0:
        insights.append(f"Estimated value wasted: ${stats.total_estimated_cost:.2f}")
    return insights
