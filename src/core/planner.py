"""
Novara Scheduler — Goal Placement Planner.

Places one event per goal inside a Monday-anchored horizon. Goals are handled
in declaration order (priority is not consulted). Each goal looks at a strided
set of candidate dates, `horizon[index * 2]`, `horizon[index * 2 + 7]`, ...,
which staggers goals across weekdays and gives each at most two tries over a
two-week horizon. The earliest common slot on the first workable date wins.

The planner is pure: identical requests and the same `today` always produce
identical event lists. Goals with no resolvable participants, or with no
common slot on any candidate date, silently produce no event.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta

from src.core.content import event_content
from src.core.slot_resolver import find_common_slots
from src.core.time_grid import time_to_minutes, week_dates, weekday_index
from src.data.models import (
    AvailabilityWindow,
    Goal,
    Member,
    PlannedEvent,
    PlanRequest,
    PlanResponse,
    Vibe,
)

logger = logging.getLogger(__name__)

HORIZON_WEEKS = 2

# Candidate-day policy: goal i scans horizon[i * 2], horizon[i * 2 + 7], ...
GOAL_OFFSET_STEP = 2
CANDIDATE_STRIDE = 7


def candidate_dates(horizon: list[date], goal_index: int) -> list[date]:
    """The dates a goal at `goal_index` may be placed on, in scan order."""
    return horizon[goal_index * GOAL_OFFSET_STEP::CANDIDATE_STRIDE]


def _place_goal(
    goal: Goal,
    goal_index: int,
    availability: list[AvailabilityWindow],
    vibe: Vibe,
    horizon: list[date],
) -> PlannedEvent | None:
    """Find the first viable slot for one goal, or None."""
    for target in candidate_dates(horizon, goal_index):
        slots = find_common_slots(
            weekday_index(target),
            goal.participants,
            availability,
            goal.duration_mins,
        )
        if not slots:
            continue

        start = datetime.combine(target, datetime.min.time()) + timedelta(
            minutes=time_to_minutes(slots[0])
        )
        end = start + timedelta(minutes=goal.duration_mins)
        content = event_content(vibe, goal.type)
        return PlannedEvent(
            goal_id=goal.id,
            start=start,
            end=end,
            member_ids=list(goal.participants),
            title=content.title,
            notes=content.notes,
            location=goal.location_hint,
        )
    return None


def plan_goals(
    members: list[Member],
    availability: list[AvailabilityWindow],
    goals: list[Goal],
    vibe: Vibe,
    horizon: list[date],
) -> list[PlannedEvent]:
    """Place every goal in order; returns only the goals that found a slot."""
    member_ids = {m.id for m in members}
    plans: list[PlannedEvent] = []

    for index, goal in enumerate(goals):
        if not any(pid in member_ids for pid in goal.participants):
            logger.debug("Goal %s skipped: no known participants", goal.id)
            continue

        event = _place_goal(goal, index, availability, vibe, horizon)
        if event is None:
            logger.debug("Goal %s (%s) found no common slot", goal.id, goal.type.value)
            continue
        plans.append(event)

    return plans


def plan(
    request: PlanRequest,
    today: date | None = None,
    horizon_weeks: int = HORIZON_WEEKS,
) -> PlanResponse:
    """Run one planning pass over a request snapshot.

    Args:
        request: Members, availability, goals and vibe to plan with.
        today: Anchor for the horizon (defaults to the current date); the
            horizon starts on the Monday of this date's week.
        horizon_weeks: Number of weeks to consider.
    """
    horizon = week_dates(horizon_weeks, today=today)
    plans = plan_goals(
        request.members,
        request.availability,
        request.goals,
        request.vibe,
        horizon,
    )
    logger.info(
        "Planning pass from %s: %d goal(s) in, %d event(s) placed",
        horizon[0].isoformat() if horizon else "-",
        len(request.goals),
        len(plans),
    )
    return PlanResponse(plans=plans)
