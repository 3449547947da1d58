"""Tests for the working-hours evaluator — inclusive bounds, midnight wrap and message rendering."""

from datetime import datetime, time

import pytest
from ordering.working_hours.policy import (
    WorkingHoursWindow,
    evaluate,
    format_hhmm,
    parse_time_of_day,
)

_MESSAGES = {
    "tr": "Çalışma saatlerimiz {start} - {end}.",
    "en": "We are open {start} - {end}.",
}


def _window(start="09:00:00", end="22:00:00", enabled=True, messages=_MESSAGES):
    return WorkingHoursWindow.from_settings(start=start, end=end, enabled=enabled, messages=messages)


class TestParsing:
    def test_hh_mm_ss(self):
        assert parse_time_of_day("09:30:15") == time(9, 30, 15)

    def test_hh_mm(self):
        assert parse_time_of_day("22:00") == time(22, 0)

    def test_time_passthrough_drops_microseconds(self):
        assert parse_time_of_day(time(8, 0, 0, 500)) == time(8, 0)

    @pytest.mark.parametrize("value", ["9", "25:00", "aa:bb", "1:2:3:4"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_time_of_day(value)

    def test_format_strips_seconds(self):
        assert format_hhmm(time(9, 0, 59)) == "09:00"


class TestEvaluate:
    def test_before_opening(self):
        status = evaluate(_window(), datetime(2024, 1, 1, 8, 59, 59), "en")
        assert status.within_hours is False
        assert "09:00" in status.message
        assert status.message == "We are open 09:00 - 22:00."

    @pytest.mark.parametrize("moment", [time(9, 0, 0), time(22, 0, 0), time(15, 30)])
    def test_inclusive_bounds(self, moment):
        status = evaluate(_window(), moment, "en")
        assert status.within_hours is True
        assert status.message == ""

    def test_after_closing(self):
        assert evaluate(_window(), time(22, 0, 1), "en").within_hours is False

    def test_sub_second_precision_ignored(self):
        assert evaluate(_window(), time(22, 0, 0, 999999), "en").within_hours is True

    @pytest.mark.parametrize("moment", [time(0, 0), time(3, 0), time(12, 0), time(23, 59, 59)])
    def test_disabled_always_open(self, moment):
        status = evaluate(_window(enabled=False), moment, "en")
        assert status.within_hours is True
        assert status.enabled is False

    def test_display_bounds(self):
        status = evaluate(_window(), time(12, 0))
        assert status.start == "09:00"
        assert status.end == "22:00"


class TestMidnightWrap:
    @pytest.mark.parametrize("moment", [time(22, 0), time(23, 30), time(0, 0), time(2, 0)])
    def test_open_across_midnight(self, moment):
        assert evaluate(_window(start="22:00:00", end="02:00:00"), moment).within_hours is True

    @pytest.mark.parametrize("moment", [time(2, 0, 1), time(12, 0), time(21, 59, 59)])
    def test_closed_during_day(self, moment):
        assert evaluate(_window(start="22:00:00", end="02:00:00"), moment).within_hours is False

    def test_spans_midnight(self):
        assert _window(start="22:00", end="02:00").spans_midnight
        assert not _window().spans_midnight


class TestMessages:
    def test_requested_language(self):
        assert evaluate(_window(), time(8, 0), "tr").message == "Çalışma saatlerimiz 09:00 - 22:00."

    def test_unknown_language_falls_back_to_default(self):
        assert evaluate(_window(), time(8, 0), "de").message == "Çalışma saatlerimiz 09:00 - 22:00."

    def test_missing_language_falls_back_to_default(self):
        assert evaluate(_window(), time(8, 0)).message == "Çalışma saatlerimiz 09:00 - 22:00."

    def test_no_templates_renders_empty(self):
        assert evaluate(_window(messages={}), time(8, 0), "en").message == ""
