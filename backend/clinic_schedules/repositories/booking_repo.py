"""Booking feed implementation over the ``referrals`` and ``appointments`` tables.

Both feeds are read-only here. A failing query is reported as
``BookingFeedUnavailable`` naming the feed, so callers can decide whether
to fail open or closed.
"""

import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError

from clinic_schedules.core.exceptions import BookingFeedUnavailable, ValidationError
from clinic_schedules.db.base import AppointmentModel, ReferralModel
from clinic_schedules.domain.entities import Appointment, Referral
from clinic_schedules.domain.interfaces import IBookingSource

logger = logging.getLogger(__name__)


class BookingRepository(IBookingSource):
    """Reads both booking feeds of a specialist."""

    def __init__(self, db_session) -> None:
        self.db = db_session

    def get_referrals(self, specialist_id: str) -> List[Referral]:
        try:
            rows = (
                self.db.query(ReferralModel)
                .filter_by(assigned_specialist_id=specialist_id)
                .order_by(ReferralModel.appointment_date)
                .all()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Referrals feed query failed: {e}")
            raise BookingFeedUnavailable("referrals") from e

        referrals = []
        for row in rows:
            try:
                referrals.append(
                    Referral(
                        id=row.id,
                        specialist_id=row.assigned_specialist_id,
                        appointment_date=row.appointment_date,
                        appointment_time=row.appointment_time,
                        status=row.status,
                        referring_specialist_id=row.referring_specialist_id,
                    )
                )
            except ValidationError as e:
                self._skip("referral", row.id, e)
        return referrals

    def get_appointments(self, specialist_id: str) -> List[Appointment]:
        try:
            rows = (
                self.db.query(AppointmentModel)
                .filter_by(doctor_id=specialist_id)
                .order_by(AppointmentModel.appointment_date)
                .all()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Appointments feed query failed: {e}")
            raise BookingFeedUnavailable("appointments") from e

        appointments = []
        for row in rows:
            try:
                appointments.append(
                    Appointment(
                        id=row.id,
                        specialist_id=row.doctor_id,
                        appointment_date=row.appointment_date,
                        appointment_time=row.appointment_time,
                        status=row.status,
                        patient_id=row.patient_id,
                    )
                )
            except ValidationError as e:
                self._skip("appointment", row.id, e)
        return appointments

    @staticmethod
    def _skip(feed: str, row_id: str, error: ValidationError) -> None:
        logger.error(
            f"Skipping malformed {feed} row: {error}",
            extra={"context": {"feed": feed, "row_id": row_id}},
        )
