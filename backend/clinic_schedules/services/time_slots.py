"""
Slot Generation Service

Turns a start time, an end time and a slot duration into the ordered slot
template stored on a schedule.
"""

from typing import Dict

from clinic_schedules.core.exceptions import InvalidRange, ValidationError
from clinic_schedules.domain.entities import SlotTemplateEntry
from clinic_schedules.domain.time_labels import (
    format_time_label,
    parse_time_label,
    sort_time_labels,
)

__all__ = [
    "generate_time_slots",
    "parse_time_label",
    "format_time_label",
    "sort_time_labels",
]


def generate_time_slots(
    start_time: str, end_time: str, duration_minutes: int
) -> Dict[str, SlotTemplateEntry]:
    """
    Generate the slot template for a schedule.

    Args:
        start_time: first slot start, e.g. "09:00 AM"
        end_time: end of the block, e.g. "05:00 PM"
        duration_minutes: slot length and step between slot starts

    Returns:
        dict: {"09:00 AM": SlotTemplateEntry("available", 20), ...}
        in chronological order.

    Algorithm:
        1. Parse both labels to minutes since midnight
        2. Reject start >= end
        3. Emit a slot at every step while the slot start is < end

    The last slot only needs to *start* before ``end_time``; its end may run
    past ``end_time`` when the block is not a multiple of the duration.

    Raises:
        InvalidTimeFormat: a label does not match hh:mm AM/PM
        InvalidRange: end time is not after start time
        ValidationError: duration is not a positive integer
    """
    start = parse_time_label(start_time)
    end = parse_time_label(end_time)

    if start >= end:
        raise InvalidRange("End time must be after start time", field="end_time")

    if (
        isinstance(duration_minutes, bool)
        or not isinstance(duration_minutes, int)
        or duration_minutes <= 0
    ):
        raise ValidationError("Slot duration must be positive", field="slot_duration")

    slots: Dict[str, SlotTemplateEntry] = {}
    current = start
    while current < end:
        slots[format_time_label(current)] = SlotTemplateEntry(
            default_status="available", duration_minutes=duration_minutes
        )
        current += duration_minutes

    return slots
