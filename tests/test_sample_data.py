"""Tests for src.data.sample_data — presets and the demo group."""

from itertools import count

from src.core.availability import group_slots, day_slots
from src.data.models import GoalType, LocationPref
from src.data.sample_data import (
    GOAL_PRESETS,
    GOAL_TYPE_NAMES,
    build_sample_data,
    generate_id,
    priority_label,
)


def test_presets_cover_every_goal_type():
    assert set(GOAL_PRESETS) == set(GoalType)
    assert set(GOAL_TYPE_NAMES) == set(GoalType)
    assert GOAL_PRESETS[GoalType.DATE_NIGHT].duration_mins == 90
    assert GOAL_PRESETS[GoalType.RUN_WALK].duration_mins == 45


def test_priority_labels():
    assert priority_label(1) == "Low"
    assert priority_label(5) == "High"
    assert priority_label(42) == "Medium"


def test_generate_id_is_short_and_unique():
    ids = {generate_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(len(i) == 8 for i in ids)


def test_sample_group_shape():
    members, windows, goals = build_sample_data()
    assert len(members) == 6
    assert len({m.id for m in members}) == 6
    assert all(m.tz == "America/Los_Angeles" for m in members)
    assert [g.type for g in goals] == [
        GoalType.DATE_NIGHT, GoalType.ONE_ON_ONE, GoalType.TWO_FRIENDS, GoalType.RUN_WALK,
    ]
    member_ids = {m.id for m in members}
    assert all(set(g.participants) <= member_ids for g in goals)


def test_sample_windows_are_canonical():
    members, windows, _ = build_sample_data()
    for member in members:
        for day in range(7):
            stored = sorted(
                (w.start, w.end) for w in windows if w.member_id == member.id and w.day == day
            )
            assert stored == group_slots(day_slots(windows, member.id, day))


def test_sample_weekday_pattern():
    ids = (f"id{n}" for n in count())
    members, windows, _ = build_sample_data(id_factory=lambda: next(ids))
    alex, jordan = members[0], members[1]

    alex_monday = sorted((w.start, w.end) for w in windows if w.member_id == alex.id and w.day == 1)
    assert alex_monday == [("07:00", "09:00"), ("12:00", "13:30"), ("18:00", "22:00")]

    jordan_monday = [w for w in windows if w.member_id == jordan.id and w.day == 1]
    assert len(jordan_monday) == 2
    assert any(w.location_pref is LocationPref.EITHER and w.start == "18:00" for w in jordan_monday)

    saturday = sorted((w.start, w.end) for w in windows if w.member_id == alex.id and w.day == 6)
    assert saturday == [("08:00", "12:00"), ("14:00", "21:00")]
