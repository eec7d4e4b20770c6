"""Tests for the calendar adapter factory."""

import pytest
from unittest.mock import patch

from src.adapters.calendar_factory import create_calendar_adapter


class TestCreateCalendarAdapter:
    @patch("src.adapters.calendar_factory.settings")
    def test_returns_local_adapter(self, mock_settings):
        mock_settings.CALENDAR_PROVIDER = "local"
        adapter = create_calendar_adapter()
        from src.adapters.local_calendar import LocalCalendarAdapter
        assert isinstance(adapter, LocalCalendarAdapter)

    @patch("src.adapters.calendar_factory.settings")
    def test_returns_caldav_adapter(self, mock_settings):
        mock_settings.CALENDAR_PROVIDER = "caldav"
        adapter = create_calendar_adapter()
        from src.adapters.caldav_calendar import CalDAVCalendarAdapter
        assert isinstance(adapter, CalDAVCalendarAdapter)

    @patch("src.adapters.calendar_factory.settings")
    def test_case_insensitive(self, mock_settings):
        mock_settings.CALENDAR_PROVIDER = "CalDAV"
        adapter = create_calendar_adapter()
        from src.adapters.caldav_calendar import CalDAVCalendarAdapter
        assert isinstance(adapter, CalDAVCalendarAdapter)

    @patch("src.adapters.calendar_factory.settings")
    def test_unknown_provider_raises(self, mock_settings):
        mock_settings.CALENDAR_PROVIDER = "nonexistent"
        with pytest.raises(ValueError, match="Unknown CALENDAR_PROVIDER"):
            create_calendar_adapter()


class TestCalendarAdapterCredentialPassthrough:
    @patch("src.adapters.calendar_factory.settings")
    def test_caldav_receives_cred_json(self, mock_settings):
        mock_settings.CALENDAR_PROVIDER = "caldav"
        adapter = create_calendar_adapter(cred_json='{"url": "x"}')
        assert adapter._cred_json == '{"url": "x"}'
        assert adapter._url == "x"
