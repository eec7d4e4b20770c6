"""
Novara Scheduler — Data Models.

Members, their weekly availability windows, goals awaiting placement and the
events the planner produces. Field names are snake_case in Python and
camelCase on the wire (memberId, durationMins, ...), so JSON produced by the
web client validates directly into these models.

All models are frozen: the planner only ever sees immutable snapshots, and
state changes go through the controller's command handlers.
"""

from __future__ import annotations

import re
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from src.core.time_grid import SLOT_MINUTES, time_to_minutes

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email.strip()))


class Vibe(str, Enum):
    """Tone selector for generated event titles and notes."""

    COZY = "cozy"
    HYPE = "hype"
    PROFESSIONAL = "professional"


class GoalType(str, Enum):
    DATE_NIGHT = "date_night"
    ONE_ON_ONE = "one_on_one"
    TWO_FRIENDS = "two_friends"
    RUN_WALK = "run_walk"


class LocationPref(str, Enum):
    HOME = "home"
    OFFICE = "office"
    EITHER = "either"


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Member(_WireModel):
    """A person in the group."""

    id: str
    name: str
    email: str
    tz: str = "UTC"                # IANA name, stored verbatim (never converted)
    home: str | None = None
    office: str | None = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Member name must not be blank")
        return v

    @field_validator("email")
    @classmethod
    def email_shape(cls, v: str) -> str:
        v = v.strip()
        if not is_valid_email(v):
            raise ValueError(f"Invalid email address: {v!r}")
        return v


class AvailabilityWindow(_WireModel):
    """A half-open [start, end) range a member is free on one weekday."""

    id: str
    member_id: str
    day: int = Field(ge=0, le=6)   # 0 = Sunday
    start: str                     # HH:MM on the 30-minute grid
    end: str                       # HH:MM on the 30-minute grid
    location_pref: LocationPref | None = None

    @field_validator("start")
    @classmethod
    def start_on_grid(cls, v: str) -> str:
        if time_to_minutes(v) % SLOT_MINUTES != 0:
            raise ValueError(f"{v} is not aligned to the {SLOT_MINUTES}-minute grid")
        return v

    @field_validator("end")
    @classmethod
    def end_on_grid(cls, v: str) -> str:
        if time_to_minutes(v, end_of_day=True) % SLOT_MINUTES != 0:
            raise ValueError(f"{v} is not aligned to the {SLOT_MINUTES}-minute grid")
        return v

    @model_validator(mode="after")
    def start_before_end(self) -> AvailabilityWindow:
        if self.start_minutes >= self.end_minutes:
            raise ValueError(f"Window start {self.start} must be before end {self.end}")
        return self

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end, end_of_day=True)


class Goal(_WireModel):
    """A recurring-event template awaiting placement.

    `rrule` is kept verbatim for display; the planner places a single
    occurrence per pass. `priority` is stored but does not influence
    placement order.
    """

    id: str
    type: GoalType
    participants: list[str] = Field(default_factory=list)
    duration_mins: int = Field(gt=0)
    rrule: str = "FREQ=WEEKLY;INTERVAL=1"
    location_hint: str | None = None
    priority: int = Field(default=3, ge=1, le=5)

    @field_validator("participants")
    @classmethod
    def dedupe_participants(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))


class PlannedEvent(_WireModel):
    """One concrete placed occurrence of a goal.

    Identity for selection purposes is (goal_id, start); events are rebuilt
    from scratch on every planning pass.
    """

    goal_id: str
    start: datetime
    end: datetime
    member_ids: list[str]
    title: str
    notes: str
    location: str | None = None

    @property
    def key(self) -> tuple[str, datetime]:
        return (self.goal_id, self.start)


# ---------------------------------------------------------------------------
# Planning / booking contracts
# ---------------------------------------------------------------------------


class PlanRequest(_WireModel):
    members: list[Member] = Field(default_factory=list)
    availability: list[AvailabilityWindow] = Field(default_factory=list)
    goals: list[Goal] = Field(default_factory=list)
    vibe: Vibe = Vibe.COZY


class PlanResponse(_WireModel):
    plans: list[PlannedEvent] = Field(default_factory=list)


class ApplyRequest(_WireModel):
    plans: list[PlannedEvent] = Field(default_factory=list)


class BookingRef(_WireModel):
    goal_id: str
    event_id: str


class ApplyResponse(_WireModel):
    created: list[BookingRef] = Field(default_factory=list)
    updated: list[BookingRef] = Field(default_factory=list)
