"""
Validation utilities for schedule form input.

Validators collect every problem in a ``ValidationResult`` so the form can
show them all at once, then ``raise_if_invalid`` turns the result into a
single ``ValidationError``. Nothing here performs I/O.
"""

import logging
import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from clinic_schedules.core.exceptions import InvalidTimeFormat, ValidationError
from clinic_schedules.domain.entities import ALLOWED_SLOT_DURATIONS
from clinic_schedules.domain.time_labels import canonical_time_label

logger = logging.getLogger(__name__)

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class ValidationResult:
    """Container for validation results."""

    def __init__(self):
        self.errors: List[str] = []
        self.fields: List[str] = []
        self.is_valid: bool = True
        self.cleaned_data: Dict[str, Any] = {}

    def add_error(self, message: str, field: Optional[str] = None):
        """Add validation error."""
        error_msg = f"{field}: {message}" if field else message
        self.errors.append(error_msg)
        if field and field not in self.fields:
            self.fields.append(field)
        self.is_valid = False
        logger.debug(f"Validation error: {error_msg}")

    def raise_if_invalid(self) -> None:
        """Raise a ValidationError carrying every collected message."""
        if self.is_valid:
            return
        field = self.fields[0] if len(self.fields) == 1 else None
        raise ValidationError(self.errors[0], field=field, errors=list(self.errors))


class BaseValidator:
    """Base validator with common validation methods."""

    def validate(
        self, data: Dict[str, Any]
    ) -> ValidationResult:  # pragma: no cover - interface definition
        raise NotImplementedError("Subclasses must implement validate")

    @staticmethod
    def validate_required_field(
        value: Any, field_name: str, result: ValidationResult
    ) -> bool:
        """Validate that a required field is present and not empty."""
        if (
            value is None
            or value == ""
            or (isinstance(value, str) and value.strip() == "")
        ):
            result.add_error("is required", field_name)
            return False
        return True

    @staticmethod
    def validate_date(
        value: Any, field_name: str, result: ValidationResult
    ) -> Optional[date]:
        """Validate and convert a YYYY-MM-DD date field."""
        if value is None or value == "":
            return None

        if isinstance(value, datetime):
            return value.date()

        if isinstance(value, date):
            return value

        if isinstance(value, str):
            text = value.strip()
            if ISO_DATE_PATTERN.match(text):
                try:
                    return datetime.strptime(text, "%Y-%m-%d").date()
                except ValueError:
                    pass
            result.add_error("Invalid date. Use format YYYY-MM-DD", field_name)
            return None

        result.add_error("Invalid date format", field_name)
        return None

    @staticmethod
    def validate_integer(
        value: Any,
        field_name: str,
        result: ValidationResult,
        min_value: Optional[int] = None,
        max_value: Optional[int] = None,
        allowed_values: Optional[tuple] = None,
    ) -> Optional[int]:
        """Validate and convert integer field."""
        if value is None or value == "":
            return None

        if isinstance(value, bool):
            result.add_error("Value must be an integer", field_name)
            return None

        # int() would truncate 20.5 to 20
        if isinstance(value, float) and not value.is_integer():
            result.add_error("Value must be an integer", field_name)
            return None

        try:
            int_value = int(value)
        except (ValueError, TypeError):
            result.add_error("Value must be an integer", field_name)
            return None

        if min_value is not None and int_value < min_value:
            result.add_error(f"Value must be at least {min_value}", field_name)
            return None

        if max_value is not None and int_value > max_value:
            result.add_error(f"Value must be at most {max_value}", field_name)
            return None

        if allowed_values is not None and int_value not in allowed_values:
            result.add_error(
                f"Value must be one of: {', '.join(str(v) for v in allowed_values)}",
                field_name,
            )
            return None

        return int_value

    @staticmethod
    def validate_string(
        value: Any,
        field_name: str,
        result: ValidationResult,
        max_length: Optional[int] = None,
    ) -> Optional[str]:
        """Validate string field."""
        if value is None:
            return None

        if not isinstance(value, str):
            value = str(value)

        value = value.strip()

        if max_length is not None and len(value) > max_length:
            result.add_error(f"Must be at most {max_length} characters", field_name)
            return None

        return value if value else None

    @staticmethod
    def validate_time_label(
        value: Any, field_name: str, result: ValidationResult
    ) -> Optional[str]:
        """Validate a 12-hour time label and return its canonical form."""
        if value is None or value == "":
            return None

        try:
            return canonical_time_label(value)
        except InvalidTimeFormat:
            result.add_error("Invalid time. Use format hh:mm AM/PM", field_name)
            return None


class ScheduleFormValidator(BaseValidator):
    """Validator for the schedule form (create and update)."""

    ALLOWED_SLOT_DURATIONS = ALLOWED_SLOT_DURATIONS
    MAX_ROOM_LENGTH = 100

    def __init__(self, today: date):
        self.today = today

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        """Validate schedule form data."""
        result = ValidationResult()

        # Required fields
        self.validate_required_field(data.get("clinic_id"), "clinic_id", result)
        self.validate_required_field(data.get("room_or_unit"), "room_or_unit", result)
        self.validate_required_field(data.get("valid_from"), "valid_from", result)
        self.validate_required_field(data.get("start_time"), "start_time", result)
        self.validate_required_field(data.get("end_time"), "end_time", result)
        self.validate_required_field(data.get("slot_duration"), "slot_duration", result)

        clinic_id = self.validate_string(data.get("clinic_id"), "clinic_id", result)
        if clinic_id:
            result.cleaned_data["clinic_id"] = clinic_id

        room_or_unit = self.validate_string(
            data.get("room_or_unit"),
            "room_or_unit",
            result,
            max_length=self.MAX_ROOM_LENGTH,
        )
        if room_or_unit:
            result.cleaned_data["room_or_unit"] = room_or_unit

        valid_from = self.validate_date(data.get("valid_from"), "valid_from", result)
        if valid_from is not None:
            if valid_from < self.today:
                result.add_error("Valid from date cannot be in the past", "valid_from")
            else:
                result.cleaned_data["valid_from"] = valid_from

        days = self.validate_days_of_week(data.get("days_of_week"), result)
        if days:
            result.cleaned_data["days_of_week"] = days

        start_time = self.validate_time_label(
            data.get("start_time"), "start_time", result
        )
        if start_time:
            result.cleaned_data["start_time"] = start_time

        end_time = self.validate_time_label(data.get("end_time"), "end_time", result)
        if end_time:
            result.cleaned_data["end_time"] = end_time

        slot_duration = self.validate_integer(
            data.get("slot_duration"),
            "slot_duration",
            result,
            allowed_values=self.ALLOWED_SLOT_DURATIONS,
        )
        if slot_duration is not None:
            result.cleaned_data["slot_duration"] = slot_duration

        return result

    @staticmethod
    def validate_days_of_week(
        value: Any, result: ValidationResult
    ) -> Optional[List[int]]:
        """Validate the selected weekdays (0=Sunday .. 6=Saturday)."""
        if not value:
            result.add_error(
                "At least one day of the week must be selected", "days_of_week"
            )
            return None

        if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
            result.add_error("Must be a list of weekday numbers", "days_of_week")
            return None

        days = set()
        for day in value:
            if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6:
                result.add_error(f"Invalid day of week: {day!r}", "days_of_week")
                return None
            days.add(day)

        return sorted(days)
