"""
LifeOS Smart Scheduler — "What should I cook?" recipe scorer.

Every recipe starts at 50 points; independent signals add or subtract from
that. Recipes scoring above 30 are ranked highest first and the top 6 are
suggested. Ties keep their input order.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from src.data.models import KitchenProfile, Recipe

logger = logging.getLogger(__name__)

BASE_SCORE = 50
MIN_SCORE = 30            # strictly above this to be suggested
MAX_SUGGESTIONS = 6

TIME_LIMITS: dict[str, int | None] = {
    "quick": 30,
    "medium": 60,
    "leisurely": None,
    "any": None,
}
MOODS = ("comfort", "healthy", "adventurous", "easy", "any")

COMFORT_TAGS = frozenset({"comfort", "hearty", "cozy", "classic", "soup", "stew", "pasta"})
HEALTHY_TAGS = frozenset({"healthy", "light", "salad", "vegetable", "lean", "low-carb"})

ALLOWED_DIFFICULTIES: dict[str, frozenset[str]] = {
    "beginner": frozenset({"easy"}),
    "comfortable": frozenset({"easy", "medium"}),
    "experienced": frozenset({"easy", "medium", "advanced"}),
    "advanced": frozenset({"easy", "medium", "advanced", "project"}),
}


@dataclass(frozen=True)
class SuggestionFilters:
    """The user's answers to "how much time / what mood / which meal"."""

    time: str = "any"
    mood: str = "any"
    course: str = "dinner"
    use_leftovers: bool = False   # recorded with the request; not scored

    def __post_init__(self) -> None:
        if self.time not in TIME_LIMITS:
            raise ValueError(f"Unknown time constraint: {self.time!r}")
        if self.mood not in MOODS:
            raise ValueError(f"Unknown mood: {self.mood!r}")

    @property
    def max_minutes(self) -> int | None:
        return TIME_LIMITS[self.time]


@dataclass
class ScoreBreakdown:
    """Why a recipe scored what it did: (signal, delta) pairs on top of the base."""

    recipe: Recipe
    adjustments: list[tuple[str, int]] = field(default_factory=list)

    def add(self, signal: str, delta: int) -> None:
        self.adjustments.append((signal, delta))

    @property
    def total(self) -> int:
        return BASE_SCORE + sum(delta for _, delta in self.adjustments)


def _score_mood(recipe: Recipe, mood: str, breakdown: ScoreBreakdown) -> None:
    tags = {t.lower() for t in recipe.tags}

    if mood == "comfort":
        if tags & COMFORT_TAGS:
            breakdown.add("mood:comfort", 25)
    elif mood == "healthy":
        if tags & HEALTHY_TAGS:
            breakdown.add("mood:healthy", 25)
    elif mood == "adventurous":
        if recipe.times_made == 0:
            breakdown.add("mood:adventurous:never_made", 30)
        elif recipe.times_made < 3:
            breakdown.add("mood:adventurous:rarely_made", 15)
        if recipe.difficulty in ("advanced", "project"):
            breakdown.add("mood:adventurous:challenging", 15)
    elif mood == "easy":
        if recipe.difficulty == "easy":
            breakdown.add("mood:easy", 30)
        elif recipe.difficulty == "medium":
            breakdown.add("mood:easy", 10)


def score_recipe(
    recipe: Recipe,
    filters: SuggestionFilters,
    kitchen_profile: KitchenProfile | None = None,
    today: date | None = None,
) -> ScoreBreakdown:
    """Score one recipe against the filters and the cook's skill level."""
    today = today or date.today()
    breakdown = ScoreBreakdown(recipe=recipe)

    # Time fit
    max_minutes = filters.max_minutes
    if max_minutes is not None:
        if recipe.total_time <= max_minutes:
            breakdown.add("time:fits", 20)
        else:
            breakdown.add("time:too_long", -30)

    _score_mood(recipe, filters.mood, breakdown)

    if filters.course in recipe.course:
        breakdown.add("course", 15)

    if recipe.is_favorite:
        breakdown.add("favorite", 10)

    # Variety: recently cooked recipes sink a little
    if recipe.last_made is not None:
        days_since = (today - recipe.last_made).days
        if days_since < 7:
            breakdown.add("recency:this_week", -15)
        elif days_since < 14:
            breakdown.add("recency:last_week", -5)

    # Skill gate; an unknown level is not penalized
    if kitchen_profile is not None:
        allowed = ALLOWED_DIFFICULTIES.get(kitchen_profile.experience_level)
        if allowed is not None and recipe.difficulty not in allowed:
            breakdown.add("skill:above_level", -20)

    if recipe.rating is not None and recipe.rating >= 4:
        breakdown.add("rating", (recipe.rating - 3) * 10)

    return breakdown


def score_and_rank(
    recipes: list[Recipe],
    filters: SuggestionFilters,
    kitchen_profile: KitchenProfile | None = None,
    today: date | None = None,
    limit: int = MAX_SUGGESTIONS,
) -> list[Recipe]:
    """Top suggestions: score > 30, highest first, ties in input order."""
    return [b.recipe for b in rank_with_scores(recipes, filters, kitchen_profile, today, limit)]


def rank_with_scores(
    recipes: list[Recipe],
    filters: SuggestionFilters,
    kitchen_profile: KitchenProfile | None = None,
    today: date | None = None,
    limit: int = MAX_SUGGESTIONS,
) -> list[ScoreBreakdown]:
    """Same ranking as score_and_rank, keeping each recipe's breakdown."""
    today = today or date.today()
    scored = [score_recipe(r, filters, kitchen_profile, today) for r in recipes]
    eligible = [b for b in scored if b.total > MIN_SCORE]
    # sorted() is stable, so equal scores keep input order
    eligible = sorted(eligible, key=lambda b: b.total, reverse=True)

    logger.debug(
        "Scored %d recipes (time=%s mood=%s course=%s): %d above threshold",
        len(recipes), filters.time, filters.mood, filters.course, len(eligible),
    )
    return eligible[:limit]
