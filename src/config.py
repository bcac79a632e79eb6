"""
LifeOS Smart Scheduler — Centralized configuration.

Loads all settings from .env and validates them.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

# Load .env from project root (two levels up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # SQLite
    DATABASE_PATH: str = "data/lifeos.db"

    # Used to decide what "today" is
    TIMEZONE: str = "UTC"

    # Smart scheduling: when off, habits/routines follow frequency only
    SMART_SCHEDULING_ENABLED: bool = True

    # Food waste stats window (calendar months)
    WASTE_STATS_MONTHS: int = 3

    LOG_LEVEL: str = "INFO"

    @field_validator("SMART_SCHEDULING_ENABLED", mode="before")
    @classmethod
    def parse_bool(cls, v: str | bool) -> bool:
        if isinstance(v, bool):
            return v
        value = str(v).strip().lower()
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
        raise ValueError(f"expected a boolean, got {v!r}")

    @field_validator("WASTE_STATS_MONTHS", mode="before")
    @classmethod
    def parse_months(cls, v: str | int) -> int:
        months = int(v)
        if months < 1:
            raise ValueError("must be at least 1")
        return months

    @field_validator("TIMEZONE")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone {v!r}") from exc
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def check_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {v!r}")
        return level


def _load_settings() -> Settings:
    """Load settings from environment, exiting with a message when invalid."""
    try:
        return Settings(
            DATABASE_PATH=os.getenv("DATABASE_PATH", "data/lifeos.db"),
            TIMEZONE=os.getenv("TIMEZONE", "UTC"),
            SMART_SCHEDULING_ENABLED=os.getenv("SMART_SCHEDULING_ENABLED", "true"),
            WASTE_STATS_MONTHS=os.getenv("WASTE_STATS_MONTHS", "3"),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        )
    except ValidationError as exc:
        print(f"ERROR: invalid configuration in .env:\n{exc}", file=sys.stderr)
        sys.exit(1)


# Singleton — imported by all other modules as:
#   from src.config import settings
settings = _load_settings()
