"""
Recurrence matching.

Decides whether a schedule's weekly pattern applies to a calendar date.
All comparisons are date-only, in the application timezone.
"""

from datetime import date, datetime
from typing import Iterable, Mapping, Optional, Union

from clinic_schedules.core import config
from clinic_schedules.core.exceptions import ValidationError
from clinic_schedules.domain.entities import ScheduleRecord

DateLike = Union[date, datetime, str]


def to_calendar_date(value: DateLike) -> date:
    """
    Truncate a date-like value to a calendar date.

    Args:
        value: ``date``, ``datetime`` (aware values are converted to the
            application timezone first) or an ISO string
            (``2025-01-06`` or ``2025-01-06T10:30:00``)

    Returns:
        date: the calendar date, time-of-day discarded
    """
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(
                f"Invalid date: {value!r}. Use YYYY-MM-DD", field="date"
            ) from None

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(config.APP_TZ)
        return value.date()

    if isinstance(value, date):
        return value

    raise ValidationError(f"Invalid date: {value!r}", field="date")


def weekday_index(target: date) -> int:
    """Day of week with 0 = Sunday .. 6 = Saturday."""
    return (target.weekday() + 1) % 7


def matches_date(schedule: ScheduleRecord, target: DateLike) -> bool:
    """True iff the schedule is active, effective on ``target`` and recurs on its weekday."""
    if not schedule.is_active:
        return False

    target = to_calendar_date(target)
    if target < schedule.valid_from:
        return False

    return weekday_index(target) in schedule.recurrence.day_of_week


def find_matching_schedule(
    schedules: Union[Iterable[ScheduleRecord], Mapping[str, ScheduleRecord]],
    target: DateLike,
) -> Optional[ScheduleRecord]:
    """
    First schedule (in iteration order) that applies to ``target``.

    Overlapping schedules are not merged; the first match wins.
    """
    if isinstance(schedules, Mapping):
        schedules = schedules.values()

    target = to_calendar_date(target)
    for schedule in schedules:
        if matches_date(schedule, target):
            return schedule
    return None
