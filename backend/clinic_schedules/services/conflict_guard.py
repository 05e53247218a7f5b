"""
Schedule Lock Service

Decides whether a schedule may be edited or deleted given the bookings
that already depend on its pattern. Two tiers:

- Edit: any pending, confirmed or completed booking on or after the
  (proposed) valid_from date blocks. An unreachable feed is skipped.
- Delete: only confirmed or completed bookings from today onwards block.
  An unreachable feed is an error.

A booking depends on a schedule when its weekday is one of the
schedule's recurrence days and its time is one of the template's slots.
"""

import logging
from datetime import date
from typing import Callable, Iterable, List, Optional, Tuple

from clinic_schedules.core import config
from clinic_schedules.core.exceptions import PersistenceError
from clinic_schedules.domain.entities import (
    BookingRecord,
    GuardDecision,
    LockReason,
    ScheduleRecord,
)
from clinic_schedules.domain.interfaces import IBookingSource
from clinic_schedules.services.recurrence import DateLike, to_calendar_date, weekday_index

logger = logging.getLogger(__name__)

MODIFY_BLOCKING_STATUSES = frozenset({"pending", "confirmed", "completed"})
DELETE_BLOCKING_STATUSES = frozenset({"confirmed", "completed"})


def find_blocking_booking(
    schedule: ScheduleRecord,
    bookings: Iterable[BookingRecord],
    statuses: frozenset,
    since: date,
) -> Optional[BookingRecord]:
    """
    First booking that holds a slot of ``schedule`` on or after ``since``.

    Args:
        schedule: the schedule being checked
        bookings: bookings from one feed
        statuses: booking statuses that count as a commitment
        since: earliest booking date that counts (date-only)

    Returns:
        The first matching booking, or None.
    """
    for booking in bookings:
        if booking.status not in statuses:
            continue
        if booking.appointment_date < since:
            continue
        if weekday_index(booking.appointment_date) not in schedule.recurrence.day_of_week:
            continue
        if not schedule.has_time_slot(booking.appointment_time):
            continue
        return booking
    return None


class ConflictGuard:
    """Edit/delete gate for schedules, consulting both booking feeds."""

    def __init__(
        self,
        booking_source: IBookingSource,
        clock: Optional[Callable[[], date]] = None,
    ):
        self.booking_source = booking_source
        self.clock = clock or config.today

    def _feeds(
        self,
    ) -> List[Tuple[str, LockReason, Callable[[str], List[BookingRecord]]]]:
        # Referrals first: a referral block is reported even if appointments also block
        return [
            ("referrals", LockReason.BLOCKED_BY_REFERRAL, self.booking_source.get_referrals),
            (
                "appointments",
                LockReason.BLOCKED_BY_APPOINTMENT,
                self.booking_source.get_appointments,
            ),
        ]

    def can_modify(
        self, schedule: ScheduleRecord, proposed_valid_from: Optional[DateLike] = None
    ) -> GuardDecision:
        """
        Check whether ``schedule`` may be edited.

        Args:
            schedule: current stored schedule (its days and slots are checked)
            proposed_valid_from: the new effective date; defaults to the
                schedule's own valid_from

        Returns:
            GuardDecision: allowed, or blocked with the feed that blocked it
        """
        since = (
            to_calendar_date(proposed_valid_from)
            if proposed_valid_from is not None
            else schedule.valid_from
        )

        for feed_name, reason, fetch in self._feeds():
            try:
                bookings = fetch(schedule.specialist_id)
            except PersistenceError as e:
                # Fail-open: an outage must not lock specialists out of edits
                logger.warning(
                    f"Booking feed '{feed_name}' unavailable during edit check, "
                    "treating it as empty",
                    extra={
                        "context": {
                            "schedule_id": schedule.id,
                            "specialist_id": schedule.specialist_id,
                            "feed": feed_name,
                            "error": str(e),
                        }
                    },
                )
                continue

            blocking = find_blocking_booking(
                schedule, bookings, MODIFY_BLOCKING_STATUSES, since
            )
            if blocking is not None:
                return self._blocked("modify", schedule, blocking, reason)

        return GuardDecision.allow()

    def can_delete(self, schedule: ScheduleRecord) -> GuardDecision:
        """
        Check whether ``schedule`` may be deleted.

        Past bookings never block deletion, and neither do pending ones.

        Raises:
            PersistenceError: a booking feed could not be read
        """
        since = self.clock()

        for _feed_name, reason, fetch in self._feeds():
            bookings = fetch(schedule.specialist_id)
            blocking = find_blocking_booking(
                schedule, bookings, DELETE_BLOCKING_STATUSES, since
            )
            if blocking is not None:
                return self._blocked("delete", schedule, blocking, reason)

        return GuardDecision.allow()

    def _blocked(
        self,
        operation: str,
        schedule: ScheduleRecord,
        booking: BookingRecord,
        reason: LockReason,
    ) -> GuardDecision:
        logger.info(
            f"Schedule {operation} blocked by {booking.feed}",
            extra={
                "context": {
                    "schedule_id": schedule.id,
                    "specialist_id": schedule.specialist_id,
                    "booking_id": booking.id,
                    "appointment_date": booking.appointment_date.isoformat(),
                    "appointment_time": booking.appointment_time,
                    "status": booking.status,
                    "reason": reason.value,
                }
            },
        )
        return GuardDecision.block(booking, reason)
