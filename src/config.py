"""
Novara Scheduler — Centralized configuration.

Loads all settings from .env and validates required keys.
The matching core never imports this module; only the bot, the booking
adapters and the entry point read from it.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Telegram
    TELEGRAM_BOT_TOKEN: str

    # Booking backend: "local" | "caldav"
    CALENDAR_PROVIDER: str = "local"

    # CalDAV (only needed when CALENDAR_PROVIDER=caldav)
    CALDAV_URL: str = ""
    CALDAV_USERNAME: str = ""
    CALDAV_PASSWORD: str = ""
    CALDAV_CALENDAR_NAME: str = ""

    # Planning
    PLAN_DEBOUNCE_SECONDS: float = 0.4
    PLAN_HORIZON_WEEKS: int = 2

    # Export
    ICS_FILENAME: str = "novara-invites.ics"

    LOG_LEVEL: str = "INFO"

    @field_validator("PLAN_HORIZON_WEEKS", mode="before")
    @classmethod
    def parse_weeks(cls, v: str | int) -> int:
        weeks = int(v)
        if weeks < 1:
            raise ValueError("PLAN_HORIZON_WEEKS must be at least 1")
        return weeks

    @field_validator("PLAN_DEBOUNCE_SECONDS", mode="before")
    @classmethod
    def parse_debounce(cls, v: str | float) -> float:
        return max(0.0, float(v))

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return str(v).strip().upper() or "INFO"


def _load_settings() -> Settings:
    """Load settings from environment, validating required keys."""
    token = os.getenv("TELEGRAM_BOT_TOKEN", "")

    if not token or token.startswith("your-"):
        print("ERROR: TELEGRAM_BOT_TOKEN is missing or not set in .env", file=sys.stderr)
        sys.exit(1)

    return Settings(
        TELEGRAM_BOT_TOKEN=token,
        CALENDAR_PROVIDER=os.getenv("CALENDAR_PROVIDER", "local"),
        CALDAV_URL=os.getenv("CALDAV_URL", ""),
        CALDAV_USERNAME=os.getenv("CALDAV_USERNAME", ""),
        CALDAV_PASSWORD=os.getenv("CALDAV_PASSWORD", ""),
        CALDAV_CALENDAR_NAME=os.getenv("CALDAV_CALENDAR_NAME", ""),
        PLAN_DEBOUNCE_SECONDS=os.getenv("PLAN_DEBOUNCE_SECONDS", "0.4"),
        PLAN_HORIZON_WEEKS=os.getenv("PLAN_HORIZON_WEEKS", "2"),
        ICS_FILENAME=os.getenv("ICS_FILENAME", "novara-invites.ics"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )


# Singleton — imported by the bot and adapters as:
#   from src.config import settings
settings = _load_settings()
