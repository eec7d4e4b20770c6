"""CalDAV calendar adapter — implements CalendarPort for CalDAV servers.

Supports iCloud, Nextcloud, Fastmail, and any CalDAV-compliant server.
Uses the caldav library (sync) wrapped with asyncio.to_thread for async
compatibility. Events are uploaded with the same deterministic UID as the
.ics export, so booking a plan twice updates the existing event.
"""

from __future__ import annotations

import asyncio
import json
import logging

import caldav
from icalendar import Calendar as iCalendar

from src.config import settings
from src.core.ics_export import PRODID, build_vevent, event_uid
from src.data.models import Member, PlannedEvent
from src.ports.calendar_port import CalendarError

logger = logging.getLogger(__name__)


def _build_calendar_payload(event: PlannedEvent, attendees: list[Member]) -> str:
    """Wrap a single planned event in a VCALENDAR for upload."""
    cal = iCalendar()
    cal.add("prodid", PRODID)
    cal.add("version", "2.0")
    cal.add_component(build_vevent(event, attendees))
    return cal.to_ical().decode("utf-8")


class CalDAVCalendarAdapter:
    """CalDAV implementation of CalendarPort."""

    def __init__(self, cred_json: str | None = None) -> None:
        self._cred_json = cred_json
        creds = json.loads(cred_json) if cred_json else {}
        self._url = creds.get("url", settings.CALDAV_URL)
        self._username = creds.get("username", settings.CALDAV_USERNAME)
        self._password = creds.get("password", settings.CALDAV_PASSWORD)
        self._calendar_name = creds.get("calendar_name", settings.CALDAV_CALENDAR_NAME)

    def _get_calendar(self) -> caldav.Calendar:
        """Connect to the CalDAV server and return the configured calendar."""
        client = caldav.DAVClient(
            url=self._url,
            username=self._username,
            password=self._password,
        )
        principal = client.principal()
        calendars = principal.calendars()

        if not calendars:
            raise CalendarError("No calendars found on the CalDAV server.")

        if self._calendar_name:
            for cal in calendars:
                if cal.name == self._calendar_name:
                    return cal
            raise CalendarError(
                f"Calendar '{self._calendar_name}' not found. "
                f"Available: {[c.name for c in calendars]}"
            )

        return calendars[0]

    async def add_event(self, event: PlannedEvent, attendees: list[Member]) -> dict:
        uid = event_uid(event)
        payload = _build_calendar_payload(event, attendees)

        try:
            cal = await asyncio.to_thread(self._get_calendar)
            await asyncio.to_thread(cal.save_event, payload)
            logger.info(
                "CalDAV event created: '%s' at %s",
                event.title,
                event.start.isoformat(),
            )
            return {
                "id": uid,
                "summary": event.title,
                "start_time": event.start.isoformat(),
                "end_time": event.end.isoformat(),
                "description": event.notes,
                "htmlLink": "",
            }
        except CalendarError:
            raise
        except Exception as exc:
            logger.error("CalDAV error (add_event): %s", exc)
            raise CalendarError(f"Failed to create event: {exc}") from exc
