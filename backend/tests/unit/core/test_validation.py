from datetime import date

import pytest

from clinic_schedules.core.exceptions import ValidationError
from clinic_schedules.core.validation import ScheduleFormValidator, ValidationResult

TODAY = date(2025, 1, 6)


def _valid_data(**overrides):
    data = {
        "clinic_id": "clinic-1",
        "room_or_unit": "Room 101",
        "valid_from": "2025-01-06",
        "days_of_week": [5, 1, 3, 1],
        "start_time": "9:00 am",
        "end_time": "10:00 AM",
        "slot_duration": 20,
    }
    data.update(overrides)
    return data


class TestScheduleFormValidator:
    def test_valid_form_is_cleaned(self):
        result = ScheduleFormValidator(today=TODAY).validate(_valid_data())

        assert result.is_valid
        assert result.cleaned_data == {
            "clinic_id": "clinic-1",
            "room_or_unit": "Room 101",
            "valid_from": date(2025, 1, 6),
            "days_of_week": [1, 3, 5],
            "start_time": "09:00 AM",
            "end_time": "10:00 AM",
            "slot_duration": 20,
        }

    @pytest.mark.parametrize("duration", [15, 20, 30, 45, 60])
    def test_allowed_durations(self, duration):
        result = ScheduleFormValidator(today=TODAY).validate(
            _valid_data(slot_duration=duration)
        )

        assert result.is_valid

    @pytest.mark.parametrize("duration", [10, 25, 90, "abc", True])
    def test_other_durations_rejected(self, duration):
        result = ScheduleFormValidator(today=TODAY).validate(
            _valid_data(slot_duration=duration)
        )

        assert not result.is_valid
        assert result.fields == ["slot_duration"]

    @pytest.mark.parametrize("duration", [20.5, 20.9, "20.5"])
    def test_fractional_duration_not_truncated(self, duration):
        result = ScheduleFormValidator(today=TODAY).validate(
            _valid_data(slot_duration=duration)
        )

        assert not result.is_valid
        assert result.errors == ["slot_duration: Value must be an integer"]
        assert "slot_duration" not in result.cleaned_data

    def test_whole_float_duration_accepted(self):
        result = ScheduleFormValidator(today=TODAY).validate(
            _valid_data(slot_duration=30.0)
        )

        assert result.cleaned_data["slot_duration"] == 30

    @pytest.mark.parametrize(
        "valid_from", ["2025-1-6", "2025-01-6", "20250106", "2025-02-30", "06/01/2025"]
    )
    def test_valid_from_must_be_strict_iso_date(self, valid_from):
        result = ScheduleFormValidator(today=TODAY).validate(
            _valid_data(valid_from=valid_from)
        )

        assert result.errors == ["valid_from: Invalid date. Use format YYYY-MM-DD"]

    def test_past_valid_from_rejected(self):
        result = ScheduleFormValidator(today=TODAY).validate(
            _valid_data(valid_from="2025-01-05")
        )

        assert result.errors == ["valid_from: Valid from date cannot be in the past"]

    def test_date_object_accepted(self):
        result = ScheduleFormValidator(today=TODAY).validate(
            _valid_data(valid_from=date(2025, 3, 1))
        )

        assert result.cleaned_data["valid_from"] == date(2025, 3, 1)

    @pytest.mark.parametrize("days", [None, [], "1,3", [True], [-1], ["1"]])
    def test_bad_days_rejected(self, days):
        result = ScheduleFormValidator(today=TODAY).validate(
            _valid_data(days_of_week=days)
        )

        assert result.fields == ["days_of_week"]

    def test_missing_fields_all_reported(self):
        result = ScheduleFormValidator(today=TODAY).validate({})

        assert set(result.fields) == {
            "clinic_id",
            "room_or_unit",
            "valid_from",
            "days_of_week",
            "start_time",
            "end_time",
            "slot_duration",
        }


class TestValidationResult:
    def test_raise_if_invalid_noop_when_valid(self):
        ValidationResult().raise_if_invalid()

    def test_single_field_error_carries_field(self):
        result = ValidationResult()
        result.add_error("is required", "clinic_id")

        with pytest.raises(ValidationError) as exc_info:
            result.raise_if_invalid()

        assert exc_info.value.field == "clinic_id"
        assert exc_info.value.errors == ["clinic_id: is required"]

    def test_validation_error_is_a_value_error(self):
        result = ValidationResult()
        result.add_error("bad")

        with pytest.raises(ValueError):
            result.raise_if_invalid()
