"""
Canonical 12-hour time labels ("09:00 AM").

Slot-template keys and booking times are stored as labels. They are only
ever ordered or compared after parsing to minutes since midnight; plain
string comparison puts "02:00 PM" before "10:00 AM".
"""

import re
from typing import Iterable, List

from clinic_schedules.core.exceptions import InvalidTimeFormat

TIME_LABEL_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*(AM|PM)\s*$", re.IGNORECASE)

MINUTES_PER_DAY = 24 * 60


def parse_time_label(label: str) -> int:
    """Convert a 12-hour label to minutes since midnight.

    12 AM is hour 0, 12 PM is hour 12, any other PM hour gets +12.

    Raises:
        InvalidTimeFormat: if the label does not match ``h(h):mm AM|PM``
            or the hour/minute values are out of range.
    """
    if not isinstance(label, str):
        raise InvalidTimeFormat(f"Invalid time format: {label!r}", field="time")

    match = TIME_LABEL_PATTERN.match(label)
    if not match:
        raise InvalidTimeFormat(
            f"Invalid time format: {label!r}. Use hh:mm AM/PM", field="time"
        )

    hour = int(match.group(1))
    minute = int(match.group(2))
    period = match.group(3).upper()

    if not 1 <= hour <= 12 or minute > 59:
        raise InvalidTimeFormat(f"Invalid time value: {label!r}", field="time")

    if period == "AM" and hour == 12:
        hour = 0
    elif period == "PM" and hour != 12:
        hour += 12

    return hour * 60 + minute


def format_time_label(minutes: int) -> str:
    """Format minutes since midnight as a canonical ``hh:mm AM`` label."""
    minutes %= MINUTES_PER_DAY
    hour, minute = divmod(minutes, 60)
    period = "AM" if hour < 12 else "PM"
    display_hour = hour % 12 or 12
    return f"{display_hour:02d}:{minute:02d} {period}"


def canonical_time_label(label: str) -> str:
    """Normalize spellings like ``9:00 am`` to ``09:00 AM``."""
    return format_time_label(parse_time_label(label))


def sort_time_labels(labels: Iterable[str]) -> List[str]:
    """Sort labels chronologically."""
    return sorted(labels, key=parse_time_label)
