"""
Unit tests for slot generation and time label handling.
"""

import pytest

from clinic_schedules.core.exceptions import (
    InvalidRange,
    InvalidTimeFormat,
    ValidationError,
)
from clinic_schedules.domain.entities import SlotTemplateEntry
from clinic_schedules.services.time_slots import (
    format_time_label,
    generate_time_slots,
    parse_time_label,
    sort_time_labels,
)


@pytest.mark.services
class TestGenerateTimeSlots:
    def test_twenty_minute_slots_in_one_hour(self):
        slots = generate_time_slots("09:00 AM", "10:00 AM", 20)

        assert list(slots) == ["09:00 AM", "09:20 AM", "09:40 AM"]
        assert all(
            entry == SlotTemplateEntry(default_status="available", duration_minutes=20)
            for entry in slots.values()
        )

    def test_slots_cross_noon_in_chronological_order(self):
        slots = generate_time_slots("09:00 AM", "03:00 PM", 60)

        assert list(slots) == [
            "09:00 AM",
            "10:00 AM",
            "11:00 AM",
            "12:00 PM",
            "01:00 PM",
            "02:00 PM",
        ]

    def test_labels_parse_to_strictly_increasing_minutes(self):
        labels = list(generate_time_slots("08:00 AM", "06:00 PM", 45))
        minutes = [parse_time_label(label) for label in labels]

        assert minutes == sorted(minutes)
        assert len(set(minutes)) == len(minutes)

    def test_last_slot_only_needs_to_start_before_end(self):
        slots = generate_time_slots("09:00 AM", "10:00 AM", 45)

        assert list(slots) == ["09:00 AM", "09:45 AM"]

    def test_single_slot_when_duration_covers_range(self):
        slots = generate_time_slots("09:00 AM", "09:30 AM", 30)

        assert list(slots) == ["09:00 AM"]

    def test_lowercase_and_unpadded_input_accepted(self):
        slots = generate_time_slots("9:00 am", "10:00 am", 30)

        assert list(slots) == ["09:00 AM", "09:30 AM"]

    @pytest.mark.parametrize(
        "start,end", [("10:00 AM", "09:00 AM"), ("09:00 AM", "09:00 AM")]
    )
    def test_end_not_after_start_raises_invalid_range(self, start, end):
        with pytest.raises(InvalidRange):
            generate_time_slots(start, end, 30)

    @pytest.mark.parametrize("label", ["9am", "09:00", "13:00 PM", "09:60 AM", ""])
    def test_malformed_label_raises_invalid_time_format(self, label):
        with pytest.raises(InvalidTimeFormat):
            generate_time_slots(label, "10:00 AM", 30)

    @pytest.mark.parametrize("duration", [0, -15, True, "30"])
    def test_non_positive_or_non_integer_duration_rejected(self, duration):
        with pytest.raises(ValidationError):
            generate_time_slots("09:00 AM", "10:00 AM", duration)


class TestTimeLabels:
    @pytest.mark.parametrize(
        "label,minutes",
        [
            ("12:00 AM", 0),
            ("12:30 AM", 30),
            ("01:00 AM", 60),
            ("12:00 PM", 720),
            ("01:15 PM", 795),
            ("11:59 PM", 1439),
        ],
    )
    def test_parse_handles_twelve_oclock_edges(self, label, minutes):
        assert parse_time_label(label) == minutes
        assert format_time_label(minutes) == label

    def test_sort_is_chronological_not_lexical(self):
        labels = ["02:00 PM", "10:00 AM", "09:00 AM", "12:00 PM"]

        assert sort_time_labels(labels) == [
            "09:00 AM",
            "10:00 AM",
            "12:00 PM",
            "02:00 PM",
        ]
        assert sorted(labels) != sort_time_labels(labels)
