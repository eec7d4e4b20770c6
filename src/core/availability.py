"""
Novara Scheduler — Availability Merge Engine.

Keeps every (member, day) pair stored as a canonical set of windows: maximal,
non-overlapping and never touching. Windows are always rebuilt from the set of
30-minute slots they cover, so two adjacent clicks on the grid extend one
window instead of producing two.

Functions here are pure: they take the full availability list and return a
new one, leaving the input untouched.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Iterable

from src.core.time_grid import SLOT_MINUTES, minutes_to_time, time_to_minutes
from src.data.models import AvailabilityWindow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DaySnapshot:
    """Clipboard contents for copy/paste: the flattened slots of one day."""

    day: int
    slots: tuple[str, ...]


def _new_window_id() -> str:
    return uuid.uuid4().hex


def day_slots(
    availability: Iterable[AvailabilityWindow], member_id: str, day: int,
) -> list[str]:
    """Expand a member's windows on `day` into individual slot start times."""
    slots: list[str] = []
    for window in availability:
        if window.member_id != member_id or window.day != day:
            continue
        for minutes in range(window.start_minutes, window.end_minutes, SLOT_MINUTES):
            slots.append(minutes_to_time(minutes))
    return slots


def group_slots(slots: Iterable[str]) -> list[tuple[str, str]]:
    """Coalesce slot start times into maximal contiguous (start, end) windows.

    A new window opens whenever the next slot does not begin exactly where
    the current window ends; otherwise the window grows by one slot.
    """
    minutes = sorted({time_to_minutes(s) for s in slots})
    if not minutes:
        return []

    windows: list[tuple[str, str]] = []
    current_start = minutes[0]
    current_end = minutes[0] + SLOT_MINUTES
    for slot_start in minutes[1:]:
        if slot_start == current_end:
            current_end = slot_start + SLOT_MINUTES
        else:
            windows.append((minutes_to_time(current_start), minutes_to_time(current_end)))
            current_start = slot_start
            current_end = slot_start + SLOT_MINUTES
    windows.append((minutes_to_time(current_start), minutes_to_time(current_end)))
    return windows


def _replace_day(
    availability: Iterable[AvailabilityWindow],
    member_id: str,
    day: int,
    slots: Iterable[str],
) -> list[AvailabilityWindow]:
    """Drop the member's windows on `day` and append the regrouped slots."""
    kept = [
        w for w in availability
        if not (w.member_id == member_id and w.day == day)
    ]
    for start, end in group_slots(slots):
        kept.append(
            AvailabilityWindow(
                id=_new_window_id(),
                member_id=member_id,
                day=day,
                start=start,
                end=end,
            )
        )
    return kept


def toggle_slot(
    availability: list[AvailabilityWindow],
    member_id: str,
    day: int,
    slot: str,
    make_available: bool,
) -> list[AvailabilityWindow]:
    """Add or remove one slot for a member/day and re-coalesce that day.

    Removing a slot inside a window splits it in two; removing the last
    slot of a day leaves no windows for that day.

    Raises:
        ValueError: if `slot` is not on the 30-minute grid.
    """
    slot_min = time_to_minutes(slot)
    if slot_min % SLOT_MINUTES != 0:
        raise ValueError(f"Slot {slot} is not aligned to the {SLOT_MINUTES}-minute grid")
    slot = minutes_to_time(slot_min)

    slots = set(day_slots(availability, member_id, day))
    if make_available:
        slots.add(slot)
    else:
        slots.discard(slot)

    logger.debug(
        "Toggled %s %s on day %d for member %s",
        slot, "on" if make_available else "off", day, member_id,
    )
    return _replace_day(availability, member_id, day, slots)


def copy_day(
    availability: Iterable[AvailabilityWindow], member_id: str, day: int,
) -> DaySnapshot:
    """Snapshot a day's pattern as its flattened slot list."""
    return DaySnapshot(day=day, slots=tuple(day_slots(availability, member_id, day)))


def paste_day(
    availability: list[AvailabilityWindow],
    member_id: str,
    snapshot: DaySnapshot,
    target_day: int,
) -> list[AvailabilityWindow]:
    """Overwrite `target_day` with the snapshot's slots, re-coalesced.

    An empty snapshot clears the target day.
    """
    logger.debug(
        "Pasting %d slot(s) from day %d onto day %d for member %s",
        len(snapshot.slots), snapshot.day, target_day, member_id,
    )
    return _replace_day(availability, member_id, target_day, snapshot.slots)


def member_day_windows(
    availability: Iterable[AvailabilityWindow], member_id: str, day: int,
) -> list[AvailabilityWindow]:
    """A member's windows on one day, earliest first."""
    return sorted(
        (w for w in availability if w.member_id == member_id and w.day == day),
        key=lambda w: w.start_minutes,
    )
