"""Seed data port — where first-run defaults come from.

Stores depend on this protocol and receive a provider at startup, never on
a specific data module.
"""

from __future__ import annotations

from typing import Protocol

from src.data.models import RoutineTemplate


class SeedDataProvider(Protocol):
    """Supplies the preset content loaded into an empty store."""

    def routine_templates(self) -> list[RoutineTemplate]: ...
