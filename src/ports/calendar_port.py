"""Calendar port — abstract interface for booking planned events.

Core modules depend on this protocol, never on a specific provider.
"""

from __future__ import annotations

from typing import Protocol

from src.data.models import Member, PlannedEvent


class CalendarError(Exception):
    """Raised when any calendar provider operation fails."""


class CalendarPort(Protocol):
    """Abstract calendar interface used by the booking step.

    `add_event` returns a dict with keys id, summary, start_time, end_time,
    description and htmlLink.
    """

    async def add_event(
        self, event: PlannedEvent, attendees: list[Member]
    ) -> dict: ...
