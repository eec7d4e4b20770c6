"""Tests for src.core.time_grid — clock parsing, slot grids and horizons."""

import pytest
from datetime import date, datetime

from src.core.time_grid import (
    EDITING_DAY_ORDER,
    InvalidFormat,
    format_datetime,
    generate_slots,
    humanize_rrule,
    is_slot_available,
    minutes_to_time,
    time_to_minutes,
    week_dates,
    weekday_index,
    weekly_time_slots,
)


# ---------------------------------------------------------------------------
# Tests for time_to_minutes / minutes_to_time
# ---------------------------------------------------------------------------


class TestClockConversion:
    def test_basic_values(self):
        assert time_to_minutes("00:00") == 0
        assert time_to_minutes("07:30") == 450
        assert time_to_minutes("23:59") == 1439

    def test_single_digit_hour_is_accepted(self):
        assert time_to_minutes("7:05") == 425

    def test_round_trip_on_grid(self):
        for slot in weekly_time_slots():
            assert minutes_to_time(time_to_minutes(slot)) == slot

    def test_zero_padding(self):
        assert minutes_to_time(0) == "00:00"
        assert minutes_to_time(65) == "01:05"

    @pytest.mark.parametrize("bad", ["", "0700", "7:00:00", "ab:cd", "-1:30", "12:+5", " 7:00"])
    def test_invalid_format(self, bad):
        with pytest.raises(InvalidFormat):
            time_to_minutes(bad)

    def test_invalid_format_is_value_error(self):
        with pytest.raises(ValueError):
            time_to_minutes("noon")

    def test_non_string_rejected(self):
        with pytest.raises(InvalidFormat):
            time_to_minutes(700)

    @pytest.mark.parametrize("bad", ["07:60", "24:00", "25:00", "99:99", "12:100"])
    def test_out_of_range_rejected(self, bad):
        with pytest.raises(InvalidFormat, match="out of range"):
            time_to_minutes(bad)

    def test_end_of_day_allows_midnight_only(self):
        assert time_to_minutes("24:00", end_of_day=True) == 1440
        assert time_to_minutes("23:59", end_of_day=True) == 1439
        with pytest.raises(InvalidFormat):
            time_to_minutes("24:30", end_of_day=True)


# ---------------------------------------------------------------------------
# Tests for generate_slots / weekly_time_slots
# ---------------------------------------------------------------------------


class TestGenerateSlots:
    def test_end_is_exclusive(self):
        assert generate_slots("09:00", "10:30") == ["09:00", "09:30", "10:00"]

    def test_custom_interval(self):
        assert generate_slots("09:00", "10:00", 15) == ["09:00", "09:15", "09:30", "09:45"]

    def test_empty_when_start_not_before_end(self):
        assert generate_slots("10:00", "10:00") == []
        assert generate_slots("11:00", "10:00") == []

    def test_non_positive_interval_raises(self):
        with pytest.raises(ValueError):
            generate_slots("09:00", "10:00", 0)

    def test_end_may_be_midnight(self):
        assert generate_slots("23:00", "24:00") == ["23:00", "23:30"]

    def test_out_of_range_start_rejected(self):
        with pytest.raises(InvalidFormat):
            generate_slots("07:60", "09:00")

    def test_operating_grid(self):
        slots = weekly_time_slots()
        assert len(slots) == 30
        assert slots[0] == "07:00"
        assert slots[-1] == "21:30"


# ---------------------------------------------------------------------------
# Tests for week_dates / weekday_index
# ---------------------------------------------------------------------------


class TestWeekDates:
    def test_starts_on_monday(self, today):
        dates = week_dates(2, today=today)
        assert dates[0] == date(2026, 10, 12)
        assert dates[0].weekday() == 0

    def test_length_and_consecutive(self, today):
        dates = week_dates(3, today=today)
        assert len(dates) == 21
        assert all((b - a).days == 1 for a, b in zip(dates, dates[1:]))

    def test_sunday_belongs_to_previous_monday(self):
        dates = week_dates(1, today=date(2026, 10, 18))
        assert dates[0] == date(2026, 10, 12)
        assert dates[-1] == date(2026, 10, 18)

    def test_weekday_index_is_sunday_first(self):
        assert weekday_index(date(2026, 10, 11)) == 0  # Sunday
        assert weekday_index(date(2026, 10, 12)) == 1  # Monday
        assert weekday_index(date(2026, 10, 17)) == 6  # Saturday

    def test_editing_order_starts_monday(self):
        assert EDITING_DAY_ORDER == [1, 2, 3, 4, 5, 6, 0]


# ---------------------------------------------------------------------------
# Tests for is_slot_available
# ---------------------------------------------------------------------------


class TestIsSlotAvailable:
    def test_inside_and_boundaries(self, make_window):
        windows = [make_window("alex", 1, "09:00", "10:00")]
        assert is_slot_available(1, "09:00", windows, "alex")
        assert is_slot_available(1, "09:30", windows, "alex")
        assert not is_slot_available(1, "10:00", windows, "alex")
        assert not is_slot_available(1, "08:30", windows, "alex")

    def test_other_member_or_day(self, make_window):
        windows = [make_window("alex", 1, "09:00", "10:00")]
        assert not is_slot_available(2, "09:00", windows, "alex")
        assert not is_slot_available(1, "09:00", windows, "sam")


# ---------------------------------------------------------------------------
# Tests for format_datetime / humanize_rrule
# ---------------------------------------------------------------------------


class TestFormatting:
    def test_format_datetime_evening(self):
        assert format_datetime(datetime(2026, 10, 12, 18, 0)) == "Oct 12, 2026 at 6:00 PM"

    def test_format_datetime_morning(self):
        assert format_datetime(datetime(2026, 10, 14, 7, 30)) == "Oct 14, 2026 at 7:30 AM"

    def test_weekly_default(self):
        assert humanize_rrule("FREQ=WEEKLY;INTERVAL=1") == "every week"

    def test_interval(self):
        assert humanize_rrule("FREQ=WEEKLY;INTERVAL=2") == "every 2 weeks"

    def test_by_day(self):
        assert humanize_rrule("FREQ=WEEKLY;BYDAY=FR,SA") == "every week on Friday and Saturday"

    def test_by_day_and_hour(self):
        text = humanize_rrule("FREQ=WEEKLY;BYDAY=MO,WE,FR;BYHOUR=7,8")
        assert text == "every week on Monday, Wednesday and Friday at 7 and 8"

    def test_count(self):
        assert humanize_rrule("FREQ=DAILY;COUNT=5") == "every day for 5 times"

    def test_unparseable_returned_verbatim(self):
        assert humanize_rrule("whenever works") == "whenever works"
