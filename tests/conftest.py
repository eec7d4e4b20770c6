"""Shared test fixtures and configuration.

Sets up fake environment variables so src.config doesn't sys.exit(),
and provides common fixtures like a small group with weekly availability.
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "fake-token-for-tests")
os.environ.setdefault("CALENDAR_PROVIDER", "local")
os.environ.setdefault("PLAN_DEBOUNCE_SECONDS", "0")

import pytest
from datetime import date


# Wednesday; the planning horizon starts on Monday 2026-10-12
TODAY = date(2026, 10, 14)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_member():
    """Factory for members with predictable IDs and emails."""
    from src.data.models import Member

    def _make(member_id, name=None, **kwargs):
        name = name or member_id.capitalize()
        return Member(id=member_id, name=name, email=f"{member_id}@example.com", **kwargs)

    return _make


@pytest.fixture
def make_window():
    """Factory for availability windows with generated IDs."""
    from src.data.models import AvailabilityWindow

    counter = {"n": 0}

    def _make(member_id, day, start, end, **kwargs):
        counter["n"] += 1
        return AvailabilityWindow(
            id=f"w{counter['n']}", member_id=member_id, day=day,
            start=start, end=end, **kwargs,
        )

    return _make


@pytest.fixture
def controller():
    """A fresh PlanningController with the default two-week horizon."""
    from src.core.controller import PlanningController
    return PlanningController()
