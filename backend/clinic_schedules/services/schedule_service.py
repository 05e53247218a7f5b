"""
Schedule service for the specialist's schedule form.

This service:
- Validates form input before touching any collaborator
- Generates the slot template from start/end/duration
- Asks ConflictGuard before every update or delete
- Works with domain entities, not database models
"""

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Union

from clinic_schedules.core import config
from clinic_schedules.core.exceptions import NotFound, ScheduleLocked
from clinic_schedules.core.validation import ScheduleFormValidator
from clinic_schedules.domain.entities import (
    Clinic,
    GuardDecision,
    LockReason,
    PracticeLocation,
    Recurrence,
    ScheduleRecord,
)
from clinic_schedules.domain.interfaces import IBookingSource, IScheduleRepository
from clinic_schedules.schemas.dtos import ScheduleFormData
from clinic_schedules.services.conflict_guard import ConflictGuard
from clinic_schedules.services.recurrence import DateLike
from clinic_schedules.services.time_slots import generate_time_slots

logger = logging.getLogger(__name__)

FormInput = Union[ScheduleFormData, Dict[str, Any]]

LOCK_MESSAGES = {
    LockReason.BLOCKED_BY_REFERRAL: "it has active referrals",
    LockReason.BLOCKED_BY_APPOINTMENT: "it has active appointments",
}


class ScheduleService:
    """Application service for creating, editing and deleting schedules."""

    def __init__(
        self,
        schedule_repo: IScheduleRepository,
        booking_source: IBookingSource,
        conflict_guard: Optional[ConflictGuard] = None,
        clock: Optional[Callable[[], date]] = None,
        now: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.schedule_repo = schedule_repo
        self.booking_source = booking_source
        self.clock = clock or config.today
        self.now = now or config.now
        self.conflict_guard = conflict_guard or ConflictGuard(
            booking_source, clock=self.clock
        )

    # ------------------------------------------------------------------
    # Form handling
    # ------------------------------------------------------------------

    def _validate_form(self, form: FormInput) -> Dict[str, Any]:
        """Return cleaned form data or raise ValidationError / InvalidRange."""
        if not isinstance(form, ScheduleFormData):
            form = ScheduleFormData.from_dict(form)

        result = ScheduleFormValidator(today=self.clock()).validate(form.to_dict())
        result.raise_if_invalid()

        data = result.cleaned_data
        data["slot_template"] = generate_time_slots(
            data["start_time"], data["end_time"], data["slot_duration"]
        )
        return data

    @staticmethod
    def _location(data: Dict[str, Any]) -> PracticeLocation:
        return PracticeLocation(
            clinic_id=data["clinic_id"], room_or_unit=data["room_or_unit"]
        )

    @staticmethod
    def _recurrence(data: Dict[str, Any]) -> Recurrence:
        return Recurrence(day_of_week=frozenset(data["days_of_week"]))

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def add_schedule(self, specialist_id: str, form: FormInput) -> str:
        """Create a schedule from the form and return its new id.

        Raises:
            ValidationError: malformed or missing form field
            InvalidRange: end time is not after start time
            PersistenceError: the repository write failed
        """
        data = self._validate_form(form)
        timestamp = self.now()

        record = ScheduleRecord(
            specialist_id=specialist_id,
            practice_location=self._location(data),
            recurrence=self._recurrence(data),
            slot_template=data["slot_template"],
            valid_from=data["valid_from"],
            is_active=True,
            created_at=timestamp,
            last_updated=timestamp,
        )
        schedule_id = self.schedule_repo.add_schedule(specialist_id, record)

        logger.info(
            "Schedule created",
            extra={
                "context": {
                    "schedule_id": schedule_id,
                    "specialist_id": specialist_id,
                    "clinic_id": record.practice_location.clinic_id,
                    "days_of_week": record.recurrence.sorted_days,
                    "slots": len(record.slot_template),
                    "valid_from": record.valid_from.isoformat(),
                }
            },
        )
        return schedule_id

    def update_schedule(
        self, specialist_id: str, schedule_id: str, form: FormInput
    ) -> ScheduleRecord:
        """Replace the pattern of an existing schedule.

        The guard is checked against the *current* slots and days with the
        proposed valid_from, so bookings made under the old pattern lock it.

        Raises:
            ValidationError / InvalidRange: bad form input
            NotFound: unknown schedule id for this specialist
            ScheduleLocked: a dependent booking exists
            PersistenceError: a collaborator failed
        """
        data = self._validate_form(form)
        existing = self.get_schedule(specialist_id, schedule_id)

        decision = self.conflict_guard.can_modify(existing, data["valid_from"])
        if not decision:
            raise self._locked("modify", schedule_id, decision)

        updated = replace(
            existing,
            practice_location=self._location(data),
            recurrence=self._recurrence(data),
            slot_template=data["slot_template"],
            valid_from=data["valid_from"],
            last_updated=self.now(),
        )
        changes = {
            "practice_location": updated.practice_location,
            "recurrence": updated.recurrence,
            "slot_template": updated.slot_template,
            "valid_from": updated.valid_from,
            "last_updated": updated.last_updated,
        }
        self.schedule_repo.update_schedule(specialist_id, schedule_id, changes)

        logger.info(
            "Schedule updated",
            extra={
                "context": {
                    "schedule_id": schedule_id,
                    "specialist_id": specialist_id,
                    "days_of_week": updated.recurrence.sorted_days,
                    "slots": len(updated.slot_template),
                    "valid_from": updated.valid_from.isoformat(),
                }
            },
        )
        return updated

    def delete_schedule(self, specialist_id: str, schedule_id: str) -> None:
        """Delete a schedule unless a confirmed booking still depends on it.

        Raises:
            NotFound: unknown schedule id for this specialist
            ScheduleLocked: a confirmed/completed booking from today onwards exists
            PersistenceError: a collaborator failed
        """
        existing = self.get_schedule(specialist_id, schedule_id)

        decision = self.conflict_guard.can_delete(existing)
        if not decision:
            raise self._locked("delete", schedule_id, decision)

        self.schedule_repo.delete_schedule(specialist_id, schedule_id)
        logger.info(
            "Schedule deleted",
            extra={
                "context": {"schedule_id": schedule_id, "specialist_id": specialist_id}
            },
        )

    def _locked(
        self, operation: str, schedule_id: str, decision: GuardDecision
    ) -> ScheduleLocked:
        verb = "edit" if operation == "modify" else "delete"
        detail = LOCK_MESSAGES.get(decision.reason, "it has active bookings")
        logger.warning(
            f"Schedule {operation} refused",
            extra={
                "context": {
                    "schedule_id": schedule_id,
                    "reason": decision.reason.value,
                }
            },
        )
        return ScheduleLocked(
            f"Cannot {verb} schedule: {detail}",
            reason=decision.reason,
            operation=operation,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_schedules(self, specialist_id: str) -> List[ScheduleRecord]:
        """All schedules of a specialist, in repository order."""
        return list(self.schedule_repo.get_schedules(specialist_id).values())

    def get_schedule(self, specialist_id: str, schedule_id: str) -> ScheduleRecord:
        schedule = self.schedule_repo.get_schedules(specialist_id).get(schedule_id)
        if schedule is None:
            raise NotFound(
                f"Schedule {schedule_id} not found for specialist {specialist_id}"
            )
        return schedule

    def check_can_modify(
        self,
        specialist_id: str,
        schedule_id: str,
        valid_from: Optional[DateLike] = None,
    ) -> GuardDecision:
        """Lock status shown before the form is opened for editing."""
        schedule = self.get_schedule(specialist_id, schedule_id)
        return self.conflict_guard.can_modify(schedule, valid_from)

    def check_can_delete(self, specialist_id: str, schedule_id: str) -> GuardDecision:
        schedule = self.get_schedule(specialist_id, schedule_id)
        return self.conflict_guard.can_delete(schedule)

    def list_clinics(self) -> List[Clinic]:
        """Clinics offered by the form's clinic picker."""
        return self.schedule_repo.get_all_clinics()
