"""Schedule repository implementation.

Maps ``specialist_schedules`` and ``clinics`` rows to domain entities.
Rows that fail entity validation are logged and skipped on read, so one
corrupt schedule cannot take a specialist's whole calendar down.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from clinic_schedules.core.exceptions import (
    NotFound,
    PersistenceError,
    SchedulingError,
    ValidationError,
)
from clinic_schedules.db.base import ClinicModel, ScheduleModel, new_id
from clinic_schedules.domain.entities import (
    Clinic,
    PracticeLocation,
    Recurrence,
    ScheduleRecord,
    SlotTemplateEntry,
)
from clinic_schedules.domain.interfaces import IScheduleRepository

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(
    {
        "practice_location",
        "recurrence",
        "slot_template",
        "valid_from",
        "is_active",
        "schedule_type",
        "last_updated",
    }
)


def _template_to_json(template: Dict[str, SlotTemplateEntry]) -> Dict[str, Any]:
    return {label: entry.to_dict() for label, entry in template.items()}


class ScheduleRepository(IScheduleRepository):
    """Repository for schedule and clinic persistence operations."""

    def __init__(self, db_session) -> None:
        self.db = db_session

    def _fail(self, action: str, error: SQLAlchemyError) -> PersistenceError:
        self.db.rollback()
        logger.error(
            f"Database error while trying to {action}: {error}",
            extra={"context": {"action": action}},
        )
        return PersistenceError(f"Could not {action}")

    def _reject_integrity(
        self, action: str, clinic_id: Optional[str], error: IntegrityError
    ) -> SchedulingError:
        """Report a foreign key failure on an unknown clinic as invalid input."""
        self.db.rollback()
        if clinic_id is not None and self.get_clinic_by_id(clinic_id) is None:
            logger.warning(
                f"Rejected {action}: unknown clinic {clinic_id}",
                extra={"context": {"action": action, "clinic_id": clinic_id}},
            )
            return ValidationError(f"Unknown clinic: {clinic_id}", field="clinic_id")
        return self._fail(action, error)

    # ------------------------------------------------------------------
    # Schedules
    # ------------------------------------------------------------------

    def get_schedules(self, specialist_id: str) -> Dict[str, ScheduleRecord]:
        try:
            rows = (
                self.db.query(ScheduleModel)
                .filter_by(specialist_id=specialist_id)
                .order_by(ScheduleModel.pk)
                .all()
            )
        except SQLAlchemyError as e:
            raise self._fail("load schedules", e) from e

        schedules = {}
        for row in rows:
            schedule = self._to_domain(row)
            if schedule is not None:
                schedules[schedule.id] = schedule
        return schedules

    def add_schedule(self, specialist_id: str, record: ScheduleRecord) -> str:
        schedule_id = record.id or new_id()
        db_schedule = ScheduleModel(
            id=schedule_id,
            specialist_id=specialist_id,
            clinic_id=record.practice_location.clinic_id,
            room_or_unit=record.practice_location.room_or_unit,
            recurrence_type=record.recurrence.type,
            days_of_week=record.recurrence.sorted_days,
            slot_template=_template_to_json(record.slot_template),
            valid_from=record.valid_from,
            is_active=record.is_active,
            schedule_type=record.schedule_type,
            created_at=record.created_at,
            last_updated=record.last_updated,
        )
        try:
            self.db.add(db_schedule)
            self.db.commit()
        except IntegrityError as e:
            raise self._reject_integrity(
                "create schedule", record.practice_location.clinic_id, e
            ) from e
        except SQLAlchemyError as e:
            raise self._fail("create schedule", e) from e
        return schedule_id

    def update_schedule(
        self, specialist_id: str, schedule_id: str, changes: Dict[str, Any]
    ) -> None:
        unknown = sorted(set(changes) - UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(
                f"Unknown schedule field: {unknown[0]}", field=unknown[0]
            )

        try:
            db_schedule = self._get_row(specialist_id, schedule_id)
            if db_schedule is None:
                raise NotFound(
                    f"Schedule {schedule_id} not found for specialist {specialist_id}"
                )

            for key, value in changes.items():
                self._apply_change(db_schedule, key, value)

            self.db.commit()
        except IntegrityError as e:
            location = changes.get("practice_location")
            raise self._reject_integrity(
                "update schedule", location.clinic_id if location else None, e
            ) from e
        except SQLAlchemyError as e:
            raise self._fail("update schedule", e) from e

    @staticmethod
    def _apply_change(db_schedule: ScheduleModel, key: str, value: Any) -> None:
        if key == "practice_location":
            db_schedule.clinic_id = value.clinic_id
            db_schedule.room_or_unit = value.room_or_unit
        elif key == "recurrence":
            db_schedule.recurrence_type = value.type
            db_schedule.days_of_week = value.sorted_days
        elif key == "slot_template":
            db_schedule.slot_template = _template_to_json(value)
        else:
            setattr(db_schedule, key, value)

    def delete_schedule(self, specialist_id: str, schedule_id: str) -> None:
        try:
            db_schedule = self._get_row(specialist_id, schedule_id)
            if db_schedule is None:
                raise NotFound(
                    f"Schedule {schedule_id} not found for specialist {specialist_id}"
                )
            self.db.delete(db_schedule)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("delete schedule", e) from e

    def _get_row(self, specialist_id: str, schedule_id: str) -> Optional[ScheduleModel]:
        return (
            self.db.query(ScheduleModel)
            .filter_by(specialist_id=specialist_id, id=schedule_id)
            .first()
        )

    def _to_domain(self, db_schedule: ScheduleModel) -> Optional[ScheduleRecord]:
        """Convert DB model to domain entity, or None for a malformed row."""
        try:
            return ScheduleRecord(
                id=db_schedule.id,
                specialist_id=db_schedule.specialist_id,
                practice_location=PracticeLocation(
                    clinic_id=db_schedule.clinic_id,
                    room_or_unit=db_schedule.room_or_unit,
                ),
                recurrence=Recurrence(
                    day_of_week=frozenset(db_schedule.days_of_week or ()),
                    type=db_schedule.recurrence_type,
                ),
                slot_template=dict(db_schedule.slot_template or {}),
                valid_from=db_schedule.valid_from,
                is_active=db_schedule.is_active,
                schedule_type=db_schedule.schedule_type,
                created_at=db_schedule.created_at,
                last_updated=db_schedule.last_updated,
            )
        except (ValueError, TypeError) as e:
            logger.error(
                f"Skipping malformed schedule row: {e}",
                extra={
                    "context": {
                        "schedule_id": db_schedule.id,
                        "specialist_id": db_schedule.specialist_id,
                    }
                },
            )
            return None

    # ------------------------------------------------------------------
    # Clinics
    # ------------------------------------------------------------------

    def get_all_clinics(self) -> List[Clinic]:
        try:
            rows = self.db.query(ClinicModel).order_by(ClinicModel.name).all()
        except SQLAlchemyError as e:
            raise self._fail("load clinics", e) from e
        return [self._clinic_to_domain(row) for row in rows]

    def get_clinic_by_id(self, clinic_id: str) -> Optional[Clinic]:
        try:
            row = self.db.query(ClinicModel).filter_by(id=clinic_id).first()
        except SQLAlchemyError as e:
            raise self._fail("load clinic", e) from e
        return self._clinic_to_domain(row) if row else None

    @staticmethod
    def _clinic_to_domain(db_clinic: ClinicModel) -> Clinic:
        return Clinic(
            id=db_clinic.id,
            name=db_clinic.name,
            address=db_clinic.address,
            phone=db_clinic.phone,
        )
