"""
Novara Scheduler — Goal presets and demo data.

Presets fill in sensible defaults when a goal is created from its type alone.
The sample data set (six friends, typical work-week availability and the four
preset goals) lets a new group try planning immediately.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Callable

from src.data.models import AvailabilityWindow, Goal, GoalType, LocationPref, Member


@dataclass(frozen=True)
class GoalPreset:
    name: str
    duration_mins: int
    rrule: str
    location_hint: str
    description: str


GOAL_PRESETS: dict[GoalType, GoalPreset] = {
    GoalType.DATE_NIGHT: GoalPreset(
        name="Weekly Date Night",
        duration_mins=90,
        rrule="FREQ=WEEKLY;BYDAY=FR,SA",
        location_hint="Restaurant or home",
        description="90 minutes, evenings on weekends",
    ),
    GoalType.ONE_ON_ONE: GoalPreset(
        name="One-on-One Check-in",
        duration_mins=45,
        rrule="FREQ=WEEKLY;INTERVAL=1",
        location_hint="Coffee shop or quiet space",
        description="45 minutes, weekly",
    ),
    GoalType.TWO_FRIENDS: GoalPreset(
        name="Friends Hangout",
        duration_mins=90,
        rrule="FREQ=WEEKLY;INTERVAL=2",
        location_hint="Park, cafe, or home",
        description="90 minutes, biweekly",
    ),
    GoalType.RUN_WALK: GoalPreset(
        name="Morning Run/Walk",
        duration_mins=45,
        rrule="FREQ=WEEKLY;BYDAY=MO,WE,FR;BYHOUR=7,8,9",
        location_hint="Local park or neighborhood",
        description="45 minutes, mornings 3x/week",
    ),
}

GOAL_TYPE_NAMES: dict[GoalType, str] = {
    GoalType.DATE_NIGHT: "Date Night",
    GoalType.ONE_ON_ONE: "One-on-One",
    GoalType.TWO_FRIENDS: "Friends Time",
    GoalType.RUN_WALK: "Exercise",
}

PRIORITY_LABELS: dict[int, str] = {
    1: "Low",
    2: "Low-Medium",
    3: "Medium",
    4: "Medium-High",
    5: "High",
}


def priority_label(priority: int) -> str:
    return PRIORITY_LABELS.get(priority, "Medium")


def generate_id() -> str:
    """Short random ID that is easy to type in chat commands."""
    return uuid.uuid4().hex[:8]


_SAMPLE_MEMBERS = [
    ("Alex Chen", "alex@example.com", "America/Los_Angeles",
     "123 Main St, San Francisco, CA", "456 Tech Ave, San Francisco, CA"),
    ("Jordan Rivera", "jordan@example.com", "America/Los_Angeles",
     "789 Oak Dr, San Francisco, CA", "456 Tech Ave, San Francisco, CA"),
    ("Sam Wilson", "sam@example.com", "America/Los_Angeles",
     "321 Pine St, Oakland, CA", None),
    ("Taylor Kim", "taylor@example.com", "America/Los_Angeles",
     "654 Elm Ave, Berkeley, CA", None),
    ("Morgan Lee", "morgan@example.com", "America/Los_Angeles",
     "987 Cedar Ln, San Francisco, CA", None),
    ("Casey Brown", "casey@example.com", "America/Los_Angeles",
     "147 Birch St, Palo Alto, CA", None),
]


def build_sample_data(
    id_factory: Callable[[], str] = generate_id,
) -> tuple[list[Member], list[AvailabilityWindow], list[Goal]]:
    """Build the demo group: members, their weekly windows and four goals."""
    members = [
        Member(id=id_factory(), name=name, email=email, tz=tz, home=home, office=office)
        for name, email, tz, home, office in _SAMPLE_MEMBERS
    ]

    def window(member: Member, day: int, start: str, end: str, pref: LocationPref) -> AvailabilityWindow:
        return AvailabilityWindow(
            id=id_factory(), member_id=member.id, day=day,
            start=start, end=end, location_pref=pref,
        )

    availability: list[AvailabilityWindow] = []
    for index, member in enumerate(members):
        for day in range(1, 6):  # Monday-Friday
            availability.append(window(member, day, "07:00", "09:00", LocationPref.EITHER))
            if index % 3 == 0:
                availability.append(window(member, day, "12:00", "13:30", LocationPref.OFFICE))
            evening_pref = LocationPref.HOME if index % 2 == 0 else LocationPref.EITHER
            availability.append(window(member, day, "18:00", "22:00", evening_pref))
        for day in (6, 0):  # Saturday, Sunday
            availability.append(window(member, day, "08:00", "12:00", LocationPref.EITHER))
            availability.append(window(member, day, "14:00", "21:00", LocationPref.EITHER))

    alex, jordan, sam, taylor, morgan, casey = members
    goals = [
        Goal(
            id=id_factory(), type=GoalType.DATE_NIGHT,
            participants=[alex.id, jordan.id], duration_mins=90,
            rrule="FREQ=WEEKLY;BYDAY=FR,SA",
            location_hint="Nice restaurant or cozy home dinner", priority=4,
        ),
        Goal(
            id=id_factory(), type=GoalType.ONE_ON_ONE,
            participants=[alex.id, sam.id], duration_mins=45,
            rrule="FREQ=WEEKLY;INTERVAL=1",
            location_hint="Coffee shop or quiet cafe", priority=3,
        ),
        Goal(
            id=id_factory(), type=GoalType.TWO_FRIENDS,
            participants=[taylor.id, morgan.id, casey.id], duration_mins=90,
            rrule="FREQ=WEEKLY;INTERVAL=2",
            location_hint="Park, brewery, or someone's place", priority=2,
        ),
        Goal(
            id=id_factory(), type=GoalType.RUN_WALK,
            participants=[alex.id, jordan.id, sam.id], duration_mins=45,
            rrule="FREQ=WEEKLY;BYDAY=MO,WE,FR;BYHOUR=7,8",
            location_hint="Golden Gate Park or neighborhood loop", priority=3,
        ),
    ]
    return members, availability, goals
