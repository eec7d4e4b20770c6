"""Tests for src.core.content — titles and notes by vibe."""

from src.core.content import FALLBACK_CONTENT, VIBE_CONTENT, event_content
from src.data.models import GoalType, Vibe


def test_every_combination_has_content():
    for vibe in Vibe:
        for goal_type in GoalType:
            content = event_content(vibe, goal_type)
            assert content is not FALLBACK_CONTENT
            assert content.title and content.notes
    assert len(VIBE_CONTENT) == len(Vibe) * len(GoalType)


def test_known_titles():
    assert event_content(Vibe.COZY, GoalType.ONE_ON_ONE).title == "☕ Catch-up Time"
    assert event_content(Vibe.HYPE, GoalType.RUN_WALK).title == "🏃 Power Run"
    assert event_content(Vibe.PROFESSIONAL, GoalType.TWO_FRIENDS).title == "Group Session"


def test_plain_strings_accepted():
    assert event_content("cozy", "date_night").title == "🥰 Date Night"


def test_unknown_combination_falls_back():
    assert event_content("grumpy", GoalType.DATE_NIGHT) == FALLBACK_CONTENT
    assert event_content(Vibe.COZY, "brunch") == FALLBACK_CONTENT
    assert FALLBACK_CONTENT.title == "Scheduled Event"
