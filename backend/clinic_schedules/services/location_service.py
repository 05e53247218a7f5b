"""
Practice location lookups used when a referral or appointment is booked.

Resolves which clinic and room a booking takes place in from the
specialist's schedules, and which clinic is the specialist's current
primary practice.
"""

import logging
from datetime import date
from typing import Callable, Optional

from clinic_schedules.core import config
from clinic_schedules.domain.entities import Clinic, RoomAssignment
from clinic_schedules.domain.interfaces import IScheduleRepository
from clinic_schedules.domain.time_labels import canonical_time_label
from clinic_schedules.services.recurrence import (
    DateLike,
    find_matching_schedule,
    matches_date,
    to_calendar_date,
)

logger = logging.getLogger(__name__)


class PracticeLocationService:
    """Resolve rooms and clinics from a specialist's schedules."""

    def __init__(
        self,
        schedule_repo: IScheduleRepository,
        clock: Optional[Callable[[], date]] = None,
    ):
        self.schedule_repo = schedule_repo
        self.clock = clock or config.today

    def find_room_for_booking(
        self, specialist_id: str, appointment_date: DateLike, appointment_time: str
    ) -> Optional[RoomAssignment]:
        """
        Room of the first schedule that covers the booking's date and time.

        Returns None when no active schedule recurs on that date with a slot
        at that time.
        """
        target = to_calendar_date(appointment_date)
        label = canonical_time_label(appointment_time)
        schedules = self.schedule_repo.get_schedules(specialist_id)

        candidates = [
            schedule
            for schedule in schedules.values()
            if schedule.has_time_slot(label) and matches_date(schedule, target)
        ]
        schedule = find_matching_schedule(candidates, target)
        if schedule is None:
            logger.debug(
                "No schedule covers booking slot",
                extra={
                    "context": {
                        "specialist_id": specialist_id,
                        "date": target.isoformat(),
                        "time": label,
                    }
                },
            )
            return None

        return RoomAssignment(
            schedule_id=schedule.id,
            clinic_id=schedule.practice_location.clinic_id,
            room_or_unit=schedule.practice_location.room_or_unit,
        )

    def get_primary_clinic(self, specialist_id: str) -> Optional[Clinic]:
        """
        Clinic of the most recently effective active schedule.

        Only schedules already in effect (valid_from on or before today)
        count. Ties keep the first schedule in repository order.
        """
        today = self.clock()
        current = None
        for schedule in self.schedule_repo.get_schedules(specialist_id).values():
            if not schedule.is_active or schedule.valid_from > today:
                continue
            if current is None or schedule.valid_from > current.valid_from:
                current = schedule

        if current is None:
            return None

        clinic_id = current.practice_location.clinic_id
        clinic = self.schedule_repo.get_clinic_by_id(clinic_id)
        if clinic is None:
            logger.warning(
                f"Schedule {current.id} references unknown clinic {clinic_id}",
                extra={"context": {"specialist_id": specialist_id}},
            )
        return clinic
