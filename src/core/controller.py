"""
Novara Scheduler — Planning controller.

Owns the application state for one group and is the only place it changes.
Every command replaces collections wholesale instead of editing them in
place, so a `PlanRequest` snapshot handed to the planner can never change
underneath it.

Planning passes are numbered. `begin_pass()` hands out the next generation
with a snapshot; `land()` applies a finished pass only if no newer pass has
already landed, so a slow, stale pass can never overwrite fresher plans.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from src.core import availability as merge
from src.core.availability import DaySnapshot
from src.core.planner import HORIZON_WEEKS, plan
from src.data.models import (
    AvailabilityWindow,
    Goal,
    GoalType,
    Member,
    PlannedEvent,
    PlanRequest,
    PlanResponse,
    Vibe,
)
from src.data.sample_data import GOAL_PRESETS, build_sample_data, generate_id

logger = logging.getLogger(__name__)

MAX_MEMBERS = 6


@dataclass
class AppState:
    """Everything the group has entered, plus the latest landed plans."""

    members: list[Member] = field(default_factory=list)
    availability: list[AvailabilityWindow] = field(default_factory=list)
    goals: list[Goal] = field(default_factory=list)
    vibe: Vibe = Vibe.COZY
    plans: list[PlannedEvent] = field(default_factory=list)
    error: str | None = None


@dataclass(frozen=True)
class PlanTicket:
    generation: int
    request: PlanRequest


class PlanningController:
    """Command handlers over an AppState, with last-write-wins planning."""

    def __init__(
        self,
        state: AppState | None = None,
        horizon_weeks: int = HORIZON_WEEKS,
        max_members: int = MAX_MEMBERS,
    ) -> None:
        self._state = state or AppState()
        self.horizon_weeks = horizon_weeks
        self.max_members = max_members
        self._issued = 0
        self._applied = 0

    # -- read access --------------------------------------------------------

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def generation(self) -> int:
        """Number of the most recently issued planning pass."""
        return self._issued

    @property
    def applied_generation(self) -> int:
        """Number of the pass whose plans are currently in state."""
        return self._applied

    def get_member(self, member_id: str) -> Member | None:
        return next((m for m in self._state.members if m.id == member_id), None)

    def get_goal(self, goal_id: str) -> Goal | None:
        return next((g for g in self._state.goals if g.id == goal_id), None)

    def _require_member(self, member_id: str) -> Member:
        member = self.get_member(member_id)
        if member is None:
            raise ValueError(f"Member {member_id} not found")
        return member

    def _require_goal(self, goal_id: str) -> Goal:
        goal = self.get_goal(goal_id)
        if goal is None:
            raise ValueError(f"Goal {goal_id} not found")
        return goal

    # -- members --------------------------------------------------------------

    def add_member(
        self,
        name: str,
        email: str,
        tz: str = "UTC",
        home: str | None = None,
        office: str | None = None,
    ) -> Member:
        if len(self._state.members) >= self.max_members:
            raise ValueError(f"A group can have at most {self.max_members} members")
        member = Member(
            id=generate_id(), name=name, email=email, tz=tz, home=home, office=office,
        )
        self._state.members = [*self._state.members, member]
        logger.info("Member added: %s '%s'", member.id, member.name)
        return member

    def update_member(self, member_id: str, **updates: object) -> Member:
        current = self._require_member(member_id)
        updated = Member.model_validate({**current.model_dump(), **updates, "id": member_id})
        self._state.members = [
            updated if m.id == member_id else m for m in self._state.members
        ]
        return updated

    def remove_member(self, member_id: str) -> bool:
        """Delete a member, their windows, and their seat in every goal."""
        if self.get_member(member_id) is None:
            return False
        self._state.members = [m for m in self._state.members if m.id != member_id]
        self._state.availability = [
            w for w in self._state.availability if w.member_id != member_id
        ]
        self._state.goals = [
            g.model_copy(update={"participants": [p for p in g.participants if p != member_id]})
            for g in self._state.goals
        ]
        logger.info("Member %s removed", member_id)
        return True

    # -- availability ---------------------------------------------------------

    def set_availability(self, windows: list[AvailabilityWindow]) -> None:
        self._state.availability = list(windows)

    def toggle_slot(self, member_id: str, day: int, slot: str, make_available: bool) -> None:
        self._require_member(member_id)
        self._state.availability = merge.toggle_slot(
            self._state.availability, member_id, day, slot, make_available,
        )

    def copy_day(self, member_id: str, day: int) -> DaySnapshot:
        self._require_member(member_id)
        return merge.copy_day(self._state.availability, member_id, day)

    def paste_day(self, member_id: str, snapshot: DaySnapshot, target_day: int) -> None:
        self._require_member(member_id)
        self._state.availability = merge.paste_day(
            self._state.availability, member_id, snapshot, target_day,
        )

    # -- goals ----------------------------------------------------------------

    def add_goal(
        self,
        goal_type: GoalType | str,
        participants: list[str],
        duration_mins: int | None = None,
        rrule: str | None = None,
        location_hint: str | None = None,
        priority: int = 3,
    ) -> Goal:
        """Create a goal, filling unset fields from the type's preset."""
        goal_type = GoalType(goal_type)
        preset = GOAL_PRESETS[goal_type]
        for pid in participants:
            self._require_member(pid)
        goal = Goal(
            id=generate_id(),
            type=goal_type,
            participants=list(participants),
            duration_mins=duration_mins if duration_mins is not None else preset.duration_mins,
            rrule=rrule or preset.rrule,
            location_hint=location_hint if location_hint is not None else preset.location_hint,
            priority=priority,
        )
        self._state.goals = [*self._state.goals, goal]
        logger.info("Goal added: %s (%s) for %s", goal.id, goal_type.value, goal.participants)
        return goal

    def update_goal(self, goal_id: str, **updates: object) -> Goal:
        current = self._require_goal(goal_id)
        updated = Goal.model_validate({**current.model_dump(), **updates, "id": goal_id})
        self._state.goals = [updated if g.id == goal_id else g for g in self._state.goals]
        return updated

    def toggle_participant(self, goal_id: str, member_id: str) -> Goal:
        goal = self._require_goal(goal_id)
        if member_id in goal.participants:
            participants = [p for p in goal.participants if p != member_id]
        else:
            self._require_member(member_id)
            participants = [*goal.participants, member_id]
        return self.update_goal(goal_id, participants=participants)

    def remove_goal(self, goal_id: str) -> bool:
        """Delete a goal and any planned events placed for it."""
        if self.get_goal(goal_id) is None:
            return False
        self._state.goals = [g for g in self._state.goals if g.id != goal_id]
        self._state.plans = [p for p in self._state.plans if p.goal_id != goal_id]
        logger.info("Goal %s removed", goal_id)
        return True

    # -- misc -----------------------------------------------------------------

    def set_vibe(self, vibe: Vibe | str) -> Vibe:
        self._state.vibe = Vibe(vibe)
        return self._state.vibe

    def load_sample(self) -> None:
        members, windows, goals = build_sample_data()
        self._state.members = members
        self._state.availability = windows
        self._state.goals = goals
        self._state.vibe = Vibe.COZY
        logger.info(
            "Sample data loaded: %d members, %d windows, %d goals",
            len(members), len(windows), len(goals),
        )

    def reset(self) -> None:
        """Clear all state. Passes still in flight will not land."""
        self._state = AppState()
        self._applied = self._issued

    # -- planning -------------------------------------------------------------

    def snapshot(self) -> PlanRequest:
        return PlanRequest(
            members=list(self._state.members),
            availability=list(self._state.availability),
            goals=list(self._state.goals),
            vibe=self._state.vibe,
        )

    def begin_pass(self) -> PlanTicket:
        self._issued += 1
        return PlanTicket(generation=self._issued, request=self.snapshot())

    def land(self, ticket: PlanTicket, response: PlanResponse) -> bool:
        """Apply a finished pass unless a newer one has already landed."""
        if ticket.generation <= self._applied:
            logger.debug(
                "Dropping stale planning pass %d (applied: %d)",
                ticket.generation, self._applied,
            )
            return False
        self._applied = ticket.generation
        self._state.plans = list(response.plans)
        self._state.error = None
        return True

    def fail(self, ticket: PlanTicket, error: str) -> None:
        """Record a failed pass, unless it has already been superseded."""
        if ticket.generation <= self._applied:
            return
        self._state.error = error

    def replan(self, today: date | None = None) -> PlanResponse:
        """Run one synchronous planning pass and land it."""
        ticket = self.begin_pass()
        response = plan(ticket.request, today=today, horizon_weeks=self.horizon_weeks)
        self.land(ticket, response)
        return response
