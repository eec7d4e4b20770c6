"""
Novara Scheduler — Event content by vibe.

Titles and notes for planned events, keyed by (vibe, goal type). Unknown
combinations fall back to a neutral title.
"""

from __future__ import annotations

from typing import NamedTuple

from src.data.models import GoalType, Vibe


class EventContent(NamedTuple):
    title: str
    notes: str


FALLBACK_CONTENT = EventContent(
    title="Scheduled Event",
    notes="Time blocked for this important activity.",
)

VIBE_CONTENT: dict[tuple[Vibe, GoalType], EventContent] = {
    (Vibe.COZY, GoalType.DATE_NIGHT): EventContent(
        "🥰 Date Night",
        "Time to reconnect and enjoy each other's company. "
        "Maybe try that new restaurant or have a cozy night in!",
    ),
    (Vibe.COZY, GoalType.ONE_ON_ONE): EventContent(
        "☕ Catch-up Time",
        "One-on-one time to chat, share updates, and strengthen your bond.",
    ),
    (Vibe.COZY, GoalType.TWO_FRIENDS): EventContent(
        "👫 Friend Hangout",
        "Quality time with friends - maybe grab coffee, go for a walk, or just chill together.",
    ),
    (Vibe.COZY, GoalType.RUN_WALK): EventContent(
        "🚶 Morning Walk",
        "A peaceful walk to start the day right and get some fresh air together.",
    ),
    (Vibe.HYPE, GoalType.DATE_NIGHT): EventContent(
        "🔥 Epic Date Night",
        "Let's make this night unforgettable! "
        "Time to explore, adventure, and create amazing memories!",
    ),
    (Vibe.HYPE, GoalType.ONE_ON_ONE): EventContent(
        "⚡ Power Session",
        "High-energy one-on-one time to sync up, brainstorm, and tackle big ideas together!",
    ),
    (Vibe.HYPE, GoalType.TWO_FRIENDS): EventContent(
        "🎉 Squad Time",
        "Time to get the crew together and make some noise! Adventure awaits!",
    ),
    (Vibe.HYPE, GoalType.RUN_WALK): EventContent(
        "🏃 Power Run",
        "Time to crush those fitness goals! Let's get our heart rates up and conquer the day!",
    ),
    (Vibe.PROFESSIONAL, GoalType.DATE_NIGHT): EventContent(
        "Scheduled Quality Time",
        "Dedicated time for relationship maintenance and meaningful conversation.",
    ),
    (Vibe.PROFESSIONAL, GoalType.ONE_ON_ONE): EventContent(
        "Individual Meeting",
        "Focused one-on-one session for alignment, feedback, and personal development.",
    ),
    (Vibe.PROFESSIONAL, GoalType.TWO_FRIENDS): EventContent(
        "Group Session",
        "Structured social interaction to maintain and strengthen professional relationships.",
    ),
    (Vibe.PROFESSIONAL, GoalType.RUN_WALK): EventContent(
        "Wellness Activity",
        "Scheduled physical activity to promote health and team building.",
    ),
}


def event_content(vibe: Vibe | str, goal_type: GoalType | str) -> EventContent:
    """Look up the title/notes for a vibe and goal type, or the fallback."""
    try:
        key = (Vibe(vibe), GoalType(goal_type))
    except ValueError:
        return FALLBACK_CONTENT
    return VIBE_CONTENT.get(key, FALLBACK_CONTENT)
