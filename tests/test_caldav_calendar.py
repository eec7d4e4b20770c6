"""Tests for the CalDAV calendar adapter.

All CalDAV client calls are mocked.
"""

import pytest
from unittest.mock import MagicMock, patch
from datetime import datetime

from src.adapters.caldav_calendar import (
    CalDAVCalendarAdapter,
    _build_calendar_payload,
)
from src.ports.calendar_port import CalendarError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_PATCH_SETTINGS = "src.adapters.caldav_calendar.settings"


def _patch_get_cal(**kwargs):
    return patch.object(CalDAVCalendarAdapter, "_get_calendar", **kwargs)


@pytest.fixture
def members(make_member):
    return [make_member("alex", "Alex Chen"), make_member("sam", "Sam Wilson")]


@pytest.fixture
def event():
    from src.data.models import PlannedEvent

    return PlannedEvent(
        goal_id="g1",
        start=datetime(2026, 10, 12, 18, 0),
        end=datetime(2026, 10, 12, 19, 30),
        member_ids=["alex", "sam"],
        title="🥰 Date Night",
        notes="Time to reconnect",
        location="Blue Bottle Coffee, 315 Linden St",
    )


# ---------------------------------------------------------------------------
# Tests for _build_calendar_payload
# ---------------------------------------------------------------------------


class TestBuildCalendarPayload:
    def test_wraps_single_vevent(self, event, members):
        result = _build_calendar_payload(event, members)
        assert result.startswith("BEGIN:VCALENDAR")
        assert result.count("BEGIN:VEVENT") == 1
        assert "END:VEVENT" in result
        assert "VERSION:2.0" in result

    def test_uses_deterministic_uid(self, event, members):
        result = _build_calendar_payload(event, members)
        assert "UID:g1-20261012T180000@novara-scheduler.app" in result.replace("\r\n ", "")

    def test_includes_attendees_and_location(self, event, members):
        result = _build_calendar_payload(event, members).replace("\r\n ", "")
        assert "mailto:alex@example.com" in result
        assert "mailto:sam@example.com" in result
        assert "LOCATION:Blue Bottle Coffee\\, 315 Linden St" in result

    def test_without_attendees(self, event):
        assert "ATTENDEE" not in _build_calendar_payload(event, [])


# ---------------------------------------------------------------------------
# Tests for CalDAVCalendarAdapter
# ---------------------------------------------------------------------------


class TestCalDAVCredentials:
    def test_defaults_from_settings(self):
        with patch(_PATCH_SETTINGS) as mock_settings:
            mock_settings.CALDAV_URL = "https://dav.example.com"
            mock_settings.CALDAV_USERNAME = "alex"
            mock_settings.CALDAV_PASSWORD = "secret"
            mock_settings.CALDAV_CALENDAR_NAME = "Family"
            adapter = CalDAVCalendarAdapter()
        assert adapter._url == "https://dav.example.com"
        assert adapter._username == "alex"
        assert adapter._calendar_name == "Family"
        assert adapter._cred_json is None

    def test_cred_json_overrides(self):
        adapter = CalDAVCalendarAdapter(
            cred_json='{"url": "https://other", "username": "sam", "password": "pw"}'
        )
        assert adapter._url == "https://other"
        assert adapter._username == "sam"
        assert adapter._password == "pw"


class TestCalDAVGetCalendar:
    def _principal(self, *names):
        calendars = []
        for name in names:
            cal = MagicMock()
            cal.name = name
            calendars.append(cal)
        principal = MagicMock()
        principal.calendars.return_value = calendars
        return principal, calendars

    def test_picks_named_calendar(self):
        principal, calendars = self._principal("Work", "Family")
        with patch("src.adapters.caldav_calendar.caldav.DAVClient") as mock_client:
            mock_client.return_value.principal.return_value = principal
            adapter = CalDAVCalendarAdapter(cred_json='{"calendar_name": "Family"}')
            assert adapter._get_calendar() is calendars[1]

    def test_defaults_to_first_calendar(self):
        principal, calendars = self._principal("Work", "Family")
        with patch("src.adapters.caldav_calendar.caldav.DAVClient") as mock_client:
            mock_client.return_value.principal.return_value = principal
            adapter = CalDAVCalendarAdapter(cred_json='{"calendar_name": ""}')
            assert adapter._get_calendar() is calendars[0]

    def test_missing_named_calendar(self):
        principal, _ = self._principal("Work")
        with patch("src.adapters.caldav_calendar.caldav.DAVClient") as mock_client:
            mock_client.return_value.principal.return_value = principal
            adapter = CalDAVCalendarAdapter(cred_json='{"calendar_name": "Family"}')
            with pytest.raises(CalendarError, match="not found"):
                adapter._get_calendar()

    def test_no_calendars(self):
        principal, _ = self._principal()
        with patch("src.adapters.caldav_calendar.caldav.DAVClient") as mock_client:
            mock_client.return_value.principal.return_value = principal
            adapter = CalDAVCalendarAdapter(cred_json='{"calendar_name": ""}')
            with pytest.raises(CalendarError, match="No calendars"):
                adapter._get_calendar()


class TestCalDAVAddEvent:
    @pytest.mark.asyncio
    async def test_add_event_success(self, event, members):
        mock_cal = MagicMock()
        mock_cal.save_event = MagicMock()

        with _patch_get_cal(return_value=mock_cal):
            adapter = CalDAVCalendarAdapter()
            result = await adapter.add_event(event, members)

        assert result["id"] == "g1-20261012T180000@novara-scheduler.app"
        assert result["summary"] == "🥰 Date Night"
        assert result["start_time"] == "2026-10-12T18:00:00"
        mock_cal.save_event.assert_called_once()
        payload = mock_cal.save_event.call_args[0][0]
        assert "BEGIN:VEVENT" in payload

    @pytest.mark.asyncio
    async def test_add_event_failure(self, event, members):
        mock_cal = MagicMock()
        mock_cal.save_event = MagicMock(side_effect=Exception("server down"))

        with _patch_get_cal(return_value=mock_cal):
            adapter = CalDAVCalendarAdapter()
            with pytest.raises(CalendarError, match="server down"):
                await adapter.add_event(event, members)

    @pytest.mark.asyncio
    async def test_calendar_lookup_error_passes_through(self, event, members):
        with _patch_get_cal(side_effect=CalendarError("No calendars found on the CalDAV server.")):
            adapter = CalDAVCalendarAdapter()
            with pytest.raises(CalendarError, match="No calendars"):
                await adapter.add_event(event, members)
