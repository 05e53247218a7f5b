"""
Unit tests for recurrence matching.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from clinic_schedules.core.exceptions import ValidationError
from clinic_schedules.services.recurrence import (
    find_matching_schedule,
    matches_date,
    to_calendar_date,
    weekday_index,
)
from tests.fixtures.domain_fixtures import make_schedule


class TestWeekdayIndex:
    def test_sunday_is_zero_and_saturday_six(self):
        assert weekday_index(date(2025, 1, 5)) == 0  # Sunday
        assert weekday_index(date(2025, 1, 6)) == 1  # Monday
        assert weekday_index(date(2025, 1, 11)) == 6  # Saturday


class TestMatchesDate:
    def test_mon_wed_fri_from_2025_01_06(self, schedule):
        assert matches_date(schedule, date(2025, 1, 8)) is True  # Wednesday
        assert matches_date(schedule, date(2025, 1, 7)) is False  # Tuesday
        assert matches_date(schedule, date(2025, 1, 5)) is False  # before valid_from

    def test_valid_from_itself_matches(self, schedule):
        assert matches_date(schedule, date(2025, 1, 6)) is True

    def test_inactive_schedule_never_matches(self):
        inactive = make_schedule(is_active=False)

        assert matches_date(inactive, date(2025, 1, 8)) is False

    def test_definition_holds_over_several_weeks(self, schedule):
        start = date(2024, 12, 23)
        for offset in range(42):
            current = start + timedelta(days=offset)
            expected = current >= schedule.valid_from and weekday_index(current) in {
                1,
                3,
                5,
            }
            assert matches_date(schedule, current) is expected, current

    def test_time_of_day_is_ignored(self, schedule):
        assert matches_date(schedule, datetime(2025, 1, 6, 23, 59)) is True
        assert matches_date(schedule, "2025-01-08T07:15:00") is True

    def test_aware_datetime_converted_to_app_timezone(self, schedule):
        # 2025-01-08 01:00 at UTC+05:00 is 2025-01-07 20:00 UTC (Tuesday)
        moment = datetime(2025, 1, 8, 1, 0, tzinfo=timezone(timedelta(hours=5)))

        assert matches_date(schedule, moment) is False


class TestFindMatchingSchedule:
    def test_first_match_wins_for_overlapping_schedules(self):
        first = make_schedule(id="a", room_or_unit="Room A")
        second = make_schedule(id="b", room_or_unit="Room B")

        assert find_matching_schedule([first, second], date(2025, 1, 8)) is first
        assert find_matching_schedule([second, first], date(2025, 1, 8)) is second

    def test_accepts_mapping_in_insertion_order(self):
        first = make_schedule(id="a")
        second = make_schedule(id="b")

        result = find_matching_schedule({"a": first, "b": second}, "2025-01-08")

        assert result is first

    def test_skips_non_matching_schedules(self):
        tuesdays = make_schedule(id="tue", days=(2,))
        wednesdays = make_schedule(id="wed", days=(3,))

        assert find_matching_schedule([tuesdays, wednesdays], date(2025, 1, 8)) is (
            wednesdays
        )

    def test_returns_none_when_nothing_matches(self, schedule):
        assert find_matching_schedule([schedule], date(2025, 1, 7)) is None
        assert find_matching_schedule([], date(2025, 1, 8)) is None


class TestToCalendarDate:
    def test_parses_iso_date_string(self):
        assert to_calendar_date(" 2025-01-08 ") == date(2025, 1, 8)

    @pytest.mark.parametrize("value", ["08/01/2025", "tomorrow", 20250108, None])
    def test_rejects_unparseable_values(self, value):
        with pytest.raises(ValidationError):
            to_calendar_date(value)
