"""Local calendar adapter — implements CalendarPort in memory.

Used when no external calendar is configured: bookings are kept for the
lifetime of the process and each gets a fresh random ID.
"""

from __future__ import annotations

import logging
import uuid

from src.data.models import Member, PlannedEvent

logger = logging.getLogger(__name__)


class LocalCalendarAdapter:
    """In-memory implementation of CalendarPort."""

    def __init__(self) -> None:
        self._events: dict[str, dict] = {}

    @property
    def events(self) -> list[dict]:
        return list(self._events.values())

    async def add_event(self, event: PlannedEvent, attendees: list[Member]) -> dict:
        event_id = uuid.uuid4().hex
        record = {
            "id": event_id,
            "summary": event.title,
            "start_time": event.start.isoformat(),
            "end_time": event.end.isoformat(),
            "description": event.notes,
            "location": event.location or "",
            "attendees": [m.email for m in attendees],
            "htmlLink": "",
        }
        self._events[event_id] = record
        logger.info("Local event booked: '%s' at %s", event.title, record["start_time"])
        return record
