"""
Novara Scheduler — Time-Grid Utilities.

Pure helpers shared by the availability editor, the slot resolver and the
planner: clock-string <-> minute conversion, fixed-interval slot grids and
Monday-anchored planning horizons. All times are naive local minutes of day.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Iterable

from icalendar import vRecur

if TYPE_CHECKING:
    from src.data.models import AvailabilityWindow

SLOT_MINUTES = 30
OPERATING_START = "07:00"
OPERATING_END = "22:00"

# Sunday-first, matching the 0-6 day numbers stored on availability windows
WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

# Day numbers in the order the weekly grid is edited (Mon..Sun)
EDITING_DAY_ORDER = [1, 2, 3, 4, 5, 6, 0]

_RRULE_DAYS = {
    "MO": "Monday", "TU": "Tuesday", "WE": "Wednesday", "TH": "Thursday",
    "FR": "Friday", "SA": "Saturday", "SU": "Sunday",
}

_RRULE_UNITS = {
    "DAILY": "day",
    "WEEKLY": "week",
    "MONTHLY": "month",
    "YEARLY": "year",
}


class InvalidFormat(ValueError):
    """Raised when a clock string is not of the form HH:MM."""


def time_to_minutes(clock: str, end_of_day: bool = False) -> int:
    """Convert an "HH:MM" clock string to minutes since midnight.

    Args:
        clock: Clock time, hours 0-23 and minutes 0-59.
        end_of_day: Also accept "24:00" (1440), for exclusive range ends.

    Raises:
        InvalidFormat: if the value is not exactly two colon-separated
            non-negative integers, or is out of range.
    """
    if not isinstance(clock, str):
        raise InvalidFormat(f"Expected an HH:MM string, got {clock!r}")
    parts = clock.split(":")
    if len(parts) != 2 or not all(p.isascii() and p.isdigit() for p in parts):
        raise InvalidFormat(f"Invalid clock time {clock!r}, expected HH:MM")
    hours, minutes = int(parts[0]), int(parts[1])
    if end_of_day and hours == 24 and minutes == 0:
        return 1440
    if hours > 23 or minutes > 59:
        raise InvalidFormat(f"Clock time {clock!r} is out of range")
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    """Convert minutes since midnight to a zero-padded "HH:MM" string.

    Callers keep values in 0-1440; nothing wraps here.
    """
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def generate_slots(start: str, end: str, interval_mins: int = SLOT_MINUTES) -> list[str]:
    """Return slots start, start+interval, ... strictly before end."""
    if interval_mins <= 0:
        raise ValueError("interval_mins must be positive")
    end_min = time_to_minutes(end, end_of_day=True)
    return [
        minutes_to_time(m)
        for m in range(time_to_minutes(start), end_min, interval_mins)
    ]


def weekly_time_slots() -> list[str]:
    """The 30-minute operating grid used for editing and matching (07:00-22:00)."""
    return generate_slots(OPERATING_START, OPERATING_END, SLOT_MINUTES)


def week_dates(num_weeks: int = 2, today: date | None = None) -> list[date]:
    """Return num_weeks * 7 consecutive dates starting on this week's Monday."""
    if today is None:
        today = date.today()
    monday = today - timedelta(days=today.weekday())
    return [monday + timedelta(days=offset) for offset in range(num_weeks * 7)]


def weekday_index(d: date) -> int:
    """Day number used by availability windows: Sunday=0 .. Saturday=6."""
    return d.isoweekday() % 7


def is_slot_available(
    day: int,
    slot: str,
    availability: Iterable[AvailabilityWindow],
    member_id: str,
) -> bool:
    """Check whether a member has a window on `day` covering the slot start."""
    slot_min = time_to_minutes(slot)
    return any(
        w.start_minutes <= slot_min < w.end_minutes
        for w in availability
        if w.member_id == member_id and w.day == day
    )


def format_datetime(dt: datetime) -> str:
    """Human display, e.g. 'Oct 12, 2026 at 6:00 PM'."""
    clock = dt.strftime("%I:%M %p").lstrip("0")
    return f"{dt.strftime('%b')} {dt.day}, {dt.year} at {clock}"


def _join_words(words: list[str]) -> str:
    if len(words) <= 1:
        return "".join(words)
    return ", ".join(words[:-1]) + " and " + words[-1]


def humanize_rrule(rrule: str) -> str:
    """Render a stored RRULE string as readable text.

    The rule is only described, never expanded. Anything that cannot be
    parsed is returned verbatim.
    """
    try:
        recur = vRecur.from_ical(rrule)
    except ValueError:
        return rrule

    freq = recur.get("FREQ")
    if not freq:
        return rrule
    unit = _RRULE_UNITS.get(str(freq[0]).upper())
    if unit is None:
        return rrule

    try:
        interval = int(recur.get("INTERVAL", [1])[0])
    except (TypeError, ValueError):
        return rrule
    text = f"every {unit}" if interval == 1 else f"every {interval} {unit}s"

    days = [
        _RRULE_DAYS.get(str(d).upper()[-2:], str(d))
        for d in recur.get("BYDAY", [])
    ]
    if days:
        text += " on " + _join_words(days)

    hours = [str(h) for h in recur.get("BYHOUR", [])]
    if hours:
        text += " at " + _join_words(hours)

    count = recur.get("COUNT")
    if count:
        text += f" for {count[0]} times"
    return text
