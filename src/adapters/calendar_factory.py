"""Calendar adapter factory — creates the right booking adapter from config."""

from __future__ import annotations

from src.config import settings
from src.ports.calendar_port import CalendarPort


def create_calendar_adapter(cred_json: str | None = None) -> CalendarPort:
    """Return the calendar adapter matching the CALENDAR_PROVIDER setting.

    Args:
        cred_json: Per-group credentials, passed to adapters that need them.
    """
    provider = settings.CALENDAR_PROVIDER.lower()

    if provider == "local":
        from src.adapters.local_calendar import LocalCalendarAdapter

        return LocalCalendarAdapter()

    if provider == "caldav":
        from src.adapters.caldav_calendar import CalDAVCalendarAdapter

        return CalDAVCalendarAdapter(cred_json=cred_json)

    raise ValueError(f"Unknown CALENDAR_PROVIDER: {provider!r}")
