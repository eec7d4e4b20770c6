"""
Novara Scheduler — Common-Slot Resolver.

Finds every start time on a weekday at which all participants are free for
the whole duration. Candidates come from the fixed 07:00-22:00 operating grid
in 30-minute steps, independent of the windows themselves.
"""

from __future__ import annotations

import logging
from typing import Iterable

from src.core.time_grid import (
    OPERATING_END,
    OPERATING_START,
    SLOT_MINUTES,
    generate_slots,
    time_to_minutes,
)
from src.data.models import AvailabilityWindow

logger = logging.getLogger(__name__)


def participant_ranges(
    day: int,
    participant_ids: list[str],
    availability: Iterable[AvailabilityWindow],
) -> list[list[tuple[int, int]]]:
    """Per participant (in order), their [start, end) minute ranges on `day`."""
    by_member: dict[str, list[tuple[int, int]]] = {pid: [] for pid in participant_ids}
    for window in availability:
        if window.day != day or window.member_id not in by_member:
            continue
        by_member[window.member_id].append((window.start_minutes, window.end_minutes))
    return [by_member[pid] for pid in participant_ids]


def _contained(start: int, end: int, ranges: list[tuple[int, int]]) -> bool:
    """Check whether [start, end) fits inside a single one of the ranges."""
    for rs, re_ in ranges:
        if start >= rs and end <= re_:
            return True
    return False


def find_common_slots(
    day: int,
    participant_ids: list[str],
    availability: Iterable[AvailabilityWindow],
    duration_mins: int,
    day_start: str = OPERATING_START,
    day_end: str = OPERATING_END,
) -> list[str]:
    """Return every "HH:MM" start where all participants are free, ascending.

    A candidate counts for a participant only when one of that participant's
    own windows contains the full [slot, slot + duration) range; two windows
    that merely add up to the duration do not.

    If any participant has no window at all on `day`, the day is vetoed and
    the result is empty.

    Args:
        day: Weekday number, Sunday=0 .. Saturday=6.
        participant_ids: Member IDs that must all attend.
        availability: Every stored availability window (all members, all days).
        duration_mins: Required length of the meeting.
        day_start: First candidate slot (inclusive).
        day_end: Candidate grid end (exclusive).
    """
    ranges = participant_ranges(day, participant_ids, availability)
    if any(not r for r in ranges):
        return []

    common: list[str] = []
    for slot in generate_slots(day_start, day_end, SLOT_MINUTES):
        slot_start = time_to_minutes(slot)
        slot_end = slot_start + duration_mins
        if all(_contained(slot_start, slot_end, r) for r in ranges):
            common.append(slot)
    return common
