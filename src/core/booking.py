"""
Novara Scheduler — Booking.

Confirms a set of planned events by writing them to the configured calendar
backend. A plan that fails to book is logged and left out of the response;
the rest still go through.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.core.ics_export import attendees_for
from src.data.models import ApplyRequest, ApplyResponse, BookingRef, Member
from src.ports.calendar_port import CalendarError

if TYPE_CHECKING:
    from src.ports.calendar_port import CalendarPort

logger = logging.getLogger(__name__)


async def apply_plans(
    request: ApplyRequest,
    calendar: CalendarPort,
    members: list[Member],
) -> ApplyResponse:
    """Book every plan in the request.

    Returns:
        ApplyResponse whose `created` lists (goal_id, event_id) for each
        booked plan. `updated` is always empty: every booking is new.
    """
    created: list[BookingRef] = []
    for event in request.plans:
        try:
            result = await calendar.add_event(event, attendees_for(event.member_ids, members))
        except CalendarError as exc:
            logger.error("Failed to book goal %s at %s: %s", event.goal_id, event.start, exc)
            continue
        created.append(BookingRef(goal_id=event.goal_id, event_id=result["id"]))

    logger.info("Booked %d of %d planned event(s)", len(created), len(request.plans))
    return ApplyResponse(created=created, updated=[])
