"""
Availability Service

Projects a specialist's schedules onto calendar dates, considering:
- Recurrence (first matching schedule wins for a date)
- Slot templates
- Confirmed/completed bookings from both booking feeds
"""

import logging
from datetime import date, timedelta
from typing import Callable, Iterable, List, Mapping, Optional, Set, Tuple, Union

from clinic_schedules.core import config
from clinic_schedules.core.exceptions import ValidationError
from clinic_schedules.domain.entities import (
    BookingRecord,
    DaySlot,
    ScheduleDay,
    ScheduleRecord,
    iter_bookings,
)
from clinic_schedules.domain.interfaces import IBookingSource, IScheduleReader
from clinic_schedules.services.recurrence import (
    DateLike,
    find_matching_schedule,
    to_calendar_date,
    weekday_index,
)

logger = logging.getLogger(__name__)

# Pending requests do not make a slot look booked on the calendar
DISPLAY_BOOKED_STATUSES = frozenset({"confirmed", "completed"})

CALENDAR_GRID_CELLS = 42
DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def month_grid_dates(year: int, month: int) -> List[date]:
    """
    Dates of a Sunday-first 6x7 month grid.

    The grid starts on the Sunday on/before the first of the month and
    always has 42 cells, so it spills into the neighbouring months.
    """
    try:
        first_day = date(year, month, 1)
    except (TypeError, ValueError):
        raise ValidationError(
            f"Invalid month: {year}-{month}", field="month"
        ) from None

    start = first_day - timedelta(days=weekday_index(first_day))
    return [start + timedelta(days=offset) for offset in range(CALENDAR_GRID_CELLS)]


def window_dates(start: DateLike, days: int) -> List[date]:
    """``days`` consecutive dates starting at ``start``."""
    if isinstance(days, bool) or not isinstance(days, int) or days < 1:
        raise ValidationError("days must be a positive integer", field="days")
    start = to_calendar_date(start)
    return [start + timedelta(days=offset) for offset in range(days)]


def _booked_slots(
    bookings: Iterable[BookingRecord], specialist_id: str
) -> Set[Tuple[date, str]]:
    return {
        (booking.appointment_date, booking.appointment_time)
        for booking in bookings
        if booking.specialist_id == specialist_id
        and booking.status in DISPLAY_BOOKED_STATUSES
    }


def project_availability(
    schedules: Union[Iterable[ScheduleRecord], Mapping[str, ScheduleRecord]],
    bookings: Iterable[BookingRecord],
    dates: Iterable[DateLike],
    specialist_id: str,
    today: Optional[date] = None,
) -> List[ScheduleDay]:
    """
    Per-date slot availability for one specialist.

    Args:
        schedules: the specialist's schedules, in match-priority order
        bookings: union of both booking feeds
        dates: the calendar range to project
        specialist_id: owner of the schedules
        today: reference date for is_today / is_past flags

    Returns:
        list[ScheduleDay]: one entry per input date, in input order.
        Slots follow the template's chronological order; ``is_booked`` is
        set when a confirmed or completed booking holds the same date and
        time.
    """
    if isinstance(schedules, Mapping):
        schedules = list(schedules.values())
    else:
        schedules = list(schedules)
    today = today or config.today()
    booked = _booked_slots(bookings, specialist_id)

    days = []
    for value in dates:
        current = to_calendar_date(value)
        schedule = find_matching_schedule(schedules, current)

        slots = []
        if schedule is not None:
            slots = [
                DaySlot(
                    time=label,
                    duration_minutes=entry.duration_minutes,
                    default_status=entry.default_status,
                    is_booked=(current, label) in booked,
                )
                for label, entry in schedule.slot_template.items()
            ]

        days.append(
            ScheduleDay(
                date=current,
                has_schedule=schedule is not None,
                slots=slots,
                schedule_id=schedule.id if schedule is not None else None,
                day_name=DAY_NAMES[weekday_index(current)],
                day_number=current.day,
                is_today=current == today,
                is_past=current < today,
            )
        )

    return days


def available_dates(days: Iterable[ScheduleDay]) -> List[date]:
    """Dates that have a schedule and at least one unbooked slot."""
    return [day.date for day in days if day.has_schedule and day.has_open_slot]


class AvailabilityService:
    """Read-only façade that loads schedules and bookings and projects them.

    Results are a snapshot; callers re-fetch after writes.
    """

    def __init__(
        self,
        schedule_repo: IScheduleReader,
        booking_source: IBookingSource,
        clock: Optional[Callable[[], date]] = None,
    ):
        self.schedule_repo = schedule_repo
        self.booking_source = booking_source
        self.clock = clock or config.today

    def _project(self, specialist_id: str, dates: List[date]) -> List[ScheduleDay]:
        schedules = self.schedule_repo.get_schedules(specialist_id)
        bookings = iter_bookings(
            self.booking_source.get_referrals(specialist_id),
            self.booking_source.get_appointments(specialist_id),
        )
        logger.debug(
            "Projecting availability",
            extra={
                "context": {
                    "specialist_id": specialist_id,
                    "schedules": len(schedules),
                    "bookings": len(bookings),
                    "start": dates[0].isoformat() if dates else None,
                    "days": len(dates),
                }
            },
        )
        return project_availability(
            schedules, bookings, dates, specialist_id, today=self.clock()
        )

    def get_month_calendar(
        self, specialist_id: str, year: int, month: int
    ) -> List[ScheduleDay]:
        """42-cell Sunday-first grid for the given month."""
        return self._project(specialist_id, month_grid_dates(year, month))

    def get_window(
        self,
        specialist_id: str,
        start: Optional[DateLike] = None,
        days: Optional[int] = None,
    ) -> List[ScheduleDay]:
        """Forward-looking window, by default the next 30 days from today."""
        start = start if start is not None else self.clock()
        days = days if days is not None else config.DEFAULT_AVAILABILITY_WINDOW_DAYS
        return self._project(specialist_id, window_dates(start, days))

    def get_available_dates(
        self,
        specialist_id: str,
        start: Optional[DateLike] = None,
        days: Optional[int] = None,
    ) -> List[date]:
        """Dates in the window with at least one open slot."""
        return available_dates(self.get_window(specialist_id, start, days))
