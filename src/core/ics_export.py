"""
Novara Scheduler — Calendar file export.

Turns planned events into an iCalendar (.ics) document that any calendar app
can import. UIDs are derived from (goal id, start time) so re-exporting the
same plan updates events instead of duplicating them. Line folding at 75
octets and text escaping are handled by the icalendar library.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from icalendar import Calendar as iCalendar
from icalendar import Event as iEvent
from icalendar import vCalAddress

from src.data.models import Member, PlannedEvent

logger = logging.getLogger(__name__)

PRODID = "-//Novara Scheduler//Novara Auto-Scheduler//EN"
UID_DOMAIN = "novara-scheduler.app"


@dataclass
class IcsValidation:
    valid: bool
    errors: list[str] = field(default_factory=list)


def event_uid(event: PlannedEvent) -> str:
    """Deterministic UID for a planned event."""
    return f"{event.goal_id}-{event.start.strftime('%Y%m%dT%H%M%S')}@{UID_DOMAIN}"


def attendees_for(member_ids: list[str], members: list[Member]) -> list[Member]:
    """Members for the given IDs, in ID order; unknown IDs are skipped."""
    by_id = {m.id: m for m in members}
    return [by_id[mid] for mid in member_ids if mid in by_id]


def build_vevent(
    event: PlannedEvent,
    members: list[Member],
    stamp: datetime | None = None,
) -> iEvent:
    """Build the VEVENT component for one planned event."""
    if stamp is None:
        stamp = datetime.now(timezone.utc)

    vevent = iEvent()
    vevent.add("uid", event_uid(event))
    vevent.add("dtstamp", stamp)
    vevent.add("dtstart", event.start)
    vevent.add("dtend", event.end)
    vevent.add("summary", event.title)
    if event.notes:
        vevent.add("description", event.notes)
    if event.location:
        vevent.add("location", event.location)

    for member in attendees_for(event.member_ids, members):
        attendee = vCalAddress(f"mailto:{member.email}")
        attendee.params["CN"] = member.name
        attendee.params["RSVP"] = "TRUE"
        vevent.add("attendee", attendee)

    vevent.add("status", "CONFIRMED")
    vevent.add("transp", "OPAQUE")
    return vevent


def generate_ics(
    events: list[PlannedEvent],
    members: list[Member],
    stamp: datetime | None = None,
) -> str:
    """Render events as a complete VCALENDAR document (CRLF line endings)."""
    cal = iCalendar()
    cal.add("prodid", PRODID)
    cal.add("version", "2.0")
    cal.add("method", "PUBLISH")
    cal.add("calscale", "GREGORIAN")

    for event in events:
        cal.add_component(build_vevent(event, members, stamp=stamp))

    logger.debug("Exported %d event(s) to iCalendar", len(events))
    return cal.to_ical().decode("utf-8")


def validate_ics(content: str) -> IcsValidation:
    """Basic structural checks on an exported document."""
    errors: list[str] = []
    if "BEGIN:VCALENDAR" not in content:
        errors.append("Missing VCALENDAR begin tag")
    if "END:VCALENDAR" not in content:
        errors.append("Missing VCALENDAR end tag")
    if "VERSION:2.0" not in content:
        errors.append("Missing or invalid VERSION")
    if content.count("BEGIN:VEVENT") != content.count("END:VEVENT"):
        errors.append("Mismatched VEVENT begin/end tags")
    return IcsValidation(valid=not errors, errors=errors)
