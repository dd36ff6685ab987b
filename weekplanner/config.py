"""
Week Planner — Centralized configuration.

Loads all settings from .env and validates them.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from weekplanner/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)

_STORAGE_BACKENDS = ("sqlite", "memory")


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Storage backend: "sqlite" | "memory"
    STORAGE_BACKEND: str = "sqlite"

    # SQLite (only used when STORAGE_BACKEND=sqlite)
    DATABASE_PATH: str = "data/planner.db"

    # Key prefix shared by the tasks / events / frequent-tasks blobs
    STORAGE_NAMESPACE: str = "week-planner"

    # Empty → host local time
    TIMEZONE: str = ""

    # Single-user placeholder stamped on every record
    DEFAULT_USER_ID: str = "local-user"

    # Used when an event form leaves the end time blank
    DEFAULT_EVENT_DURATION_MINUTES: int = 30

    LOG_LEVEL: str = "INFO"

    @field_validator("STORAGE_BACKEND", mode="before")
    @classmethod
    def parse_backend(cls, v: str) -> str:
        backend = str(v).strip().lower() or "sqlite"
        if backend not in _STORAGE_BACKENDS:
            raise ValueError(f"STORAGE_BACKEND must be one of {_STORAGE_BACKENDS}, got {v!r}")
        return backend

    @field_validator("DEFAULT_EVENT_DURATION_MINUTES", mode="before")
    @classmethod
    def parse_duration(cls, v: str | int) -> int:
        minutes = int(v)
        if minutes < 15 or minutes % 15:
            raise ValueError(
                f"DEFAULT_EVENT_DURATION_MINUTES must be a positive multiple of 15, got {minutes}"
            )
        return minutes

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def parse_log_level(cls, v: str) -> str:
        return str(v).strip().upper() or "INFO"


def _load_settings() -> Settings:
    """Load settings from environment, validating the timezone name."""
    timezone = os.getenv("TIMEZONE", "").strip()

    if timezone:
        try:
            ZoneInfo(timezone)
        except (ZoneInfoNotFoundError, ValueError):
            print(f"ERROR: TIMEZONE {timezone!r} is not a known IANA zone", file=sys.stderr)
            sys.exit(1)

    return Settings(
        STORAGE_BACKEND=os.getenv("STORAGE_BACKEND", "sqlite"),
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/planner.db"),
        STORAGE_NAMESPACE=os.getenv("STORAGE_NAMESPACE", "week-planner"),
        TIMEZONE=timezone,
        DEFAULT_USER_ID=os.getenv("DEFAULT_USER_ID", "local-user"),
        DEFAULT_EVENT_DURATION_MINUTES=os.getenv("DEFAULT_EVENT_DURATION_MINUTES", "30"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )


# Singleton — imported by all other modules as:
#   from weekplanner.config import settings
settings = _load_settings()
