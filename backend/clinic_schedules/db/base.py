from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from .session import Base


def new_id() -> str:
    """Opaque identifier assigned on creation."""
    return uuid.uuid4().hex


class ClinicModel(Base):
    """Clinic a specialist practises in."""

    __tablename__ = "clinics"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    def __repr__(self):
        return f"<ClinicModel(id='{self.id}', name='{self.name}')>"


class ScheduleModel(Base):
    """Recurring schedule of a specialist.

    ``days_of_week`` is a JSON list of weekday numbers (0=Sunday) and
    ``slot_template`` a JSON object keyed by "hh:mm AM/PM" labels.
    """

    __tablename__ = "specialist_schedules"

    # Surrogate key keeps insertion order, which decides first-match-wins
    pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(
        String(64), unique=True, nullable=False, index=True, default=new_id
    )
    specialist_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    clinic_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("clinics.id"), nullable=False
    )
    room_or_unit: Mapped[str] = mapped_column(String(100), nullable=False)
    recurrence_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="weekly"
    )
    days_of_week: Mapped[list[Any]] = mapped_column(JSON, nullable=False)
    slot_template: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    valid_from: Mapped[date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    schedule_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="Weekly"
    )
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    last_updated: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self):
        return (
            f"<ScheduleModel(id='{self.id}', specialist_id='{self.specialist_id}', "
            f"valid_from={self.valid_from})>"
        )


class ReferralModel(Base):
    """Booking created through the referral flow."""

    __tablename__ = "referrals"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    assigned_specialist_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True
    )
    referring_specialist_id: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True
    )
    appointment_date: Mapped[date] = mapped_column(Date, nullable=False)
    appointment_time: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class AppointmentModel(Base):
    """Booking made directly by a patient."""

    __tablename__ = "appointments"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    doctor_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    patient_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    appointment_date: Mapped[date] = mapped_column(Date, nullable=False)
    appointment_time: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
