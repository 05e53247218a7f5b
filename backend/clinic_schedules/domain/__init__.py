"""
Domain package - Pure business logic layer.

This package contains:
- entities.py: Domain entities that validate themselves
- interfaces.py: Repository and booking-feed contracts
- time_labels.py: Canonical 12-hour time label parsing
"""

from .entities import (
    Appointment,
    BookingRecord,
    Clinic,
    DaySlot,
    GuardDecision,
    LockReason,
    PracticeLocation,
    Recurrence,
    Referral,
    RoomAssignment,
    ScheduleDay,
    ScheduleRecord,
    SlotTemplateEntry,
)
from .interfaces import (
    IBookingSource,
    IClinicReader,
    IScheduleReader,
    IScheduleRepository,
    IScheduleWriter,
)

__all__ = [
    # Domain entities
    "ScheduleRecord",
    "PracticeLocation",
    "Recurrence",
    "SlotTemplateEntry",
    "BookingRecord",
    "Referral",
    "Appointment",
    "Clinic",
    "DaySlot",
    "ScheduleDay",
    "LockReason",
    "GuardDecision",
    "RoomAssignment",
    # Collaborator interfaces
    "IScheduleRepository",
    "IScheduleReader",
    "IScheduleWriter",
    "IClinicReader",
    "IBookingSource",
]
