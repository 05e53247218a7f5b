"""
Data Transfer Objects (DTOs) for the schedule API.

Requests arrive from the schedule form with camelCase keys; snake_case keys
are accepted too so scripts and tests can post plain Python dicts.
Responses are always camelCase.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from clinic_schedules.domain.entities import (
    BookingRecord,
    Clinic,
    DaySlot,
    GuardDecision,
    RoomAssignment,
    ScheduleDay,
    ScheduleRecord,
)


def _pick(data: Dict[str, Any], snake: str, camel: str) -> Any:
    if snake in data:
        return data[snake]
    return data.get(camel)


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class ScheduleFormData:
    """DTO for the schedule create/update form."""

    clinic_id: Optional[str] = None
    room_or_unit: Optional[str] = None
    valid_from: Any = None
    days_of_week: List[int] = field(default_factory=list)
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    slot_duration: Any = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ScheduleFormData":
        """Build from a JSON body (camelCase or snake_case keys)."""
        data = data or {}
        days = _pick(data, "days_of_week", "daysOfWeek")
        return cls(
            clinic_id=_pick(data, "clinic_id", "clinicId"),
            room_or_unit=_pick(data, "room_or_unit", "roomOrUnit"),
            valid_from=_pick(data, "valid_from", "validFrom"),
            days_of_week=list(days) if isinstance(days, (list, tuple, set)) else days,
            start_time=_pick(data, "start_time", "startTime"),
            end_time=_pick(data, "end_time", "endTime"),
            slot_duration=_pick(data, "slot_duration", "slotDuration"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Plain mapping handed to the form validator."""
        return {
            "clinic_id": self.clinic_id,
            "room_or_unit": self.room_or_unit,
            "valid_from": self.valid_from,
            "days_of_week": self.days_of_week,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "slot_duration": self.slot_duration,
        }


@dataclass
class ScheduleResponse:
    """DTO for schedule API responses."""

    id: Optional[str]
    specialist_id: str
    clinic_id: str
    room_or_unit: str
    days_of_week: List[int]
    slot_template: Dict[str, Dict[str, Any]]
    valid_from: str
    is_active: bool
    schedule_type: str
    created_at: Optional[str] = None
    last_updated: Optional[str] = None

    @classmethod
    def from_domain(cls, schedule: ScheduleRecord) -> "ScheduleResponse":
        """Create response from domain entity."""
        return cls(
            id=schedule.id,
            specialist_id=schedule.specialist_id,
            clinic_id=schedule.practice_location.clinic_id,
            room_or_unit=schedule.practice_location.room_or_unit,
            days_of_week=schedule.recurrence.sorted_days,
            slot_template={
                label: entry.to_dict() for label, entry in schedule.slot_template.items()
            },
            valid_from=schedule.valid_from.isoformat(),
            is_active=schedule.is_active,
            schedule_type=schedule.schedule_type,
            created_at=_iso(schedule.created_at),
            last_updated=_iso(schedule.last_updated),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "specialistId": self.specialist_id,
            "practiceLocation": {
                "clinicId": self.clinic_id,
                "roomOrUnit": self.room_or_unit,
            },
            "recurrence": {"type": "weekly", "dayOfWeek": self.days_of_week},
            "slotTemplate": self.slot_template,
            "validFrom": self.valid_from,
            "isActive": self.is_active,
            "scheduleType": self.schedule_type,
            "createdAt": self.created_at,
            "lastUpdated": self.last_updated,
        }


def slot_to_dict(slot: DaySlot) -> Dict[str, Any]:
    return {
        "time": slot.time,
        "durationMinutes": slot.duration_minutes,
        "defaultStatus": slot.default_status,
        "isBooked": slot.is_booked,
    }


def schedule_day_to_dict(day: ScheduleDay) -> Dict[str, Any]:
    """Serialize one projected calendar date."""
    return {
        "date": day.date.isoformat(),
        "dayName": day.day_name,
        "dayNumber": day.day_number,
        "isToday": day.is_today,
        "isPast": day.is_past,
        "hasSchedule": day.has_schedule,
        "scheduleId": day.schedule_id,
        "slots": [slot_to_dict(slot) for slot in day.slots],
    }


def booking_to_dict(booking: Optional[BookingRecord]) -> Optional[Dict[str, Any]]:
    if booking is None:
        return None
    return {
        "id": booking.id,
        "feed": booking.feed,
        "appointmentDate": booking.appointment_date.isoformat(),
        "appointmentTime": booking.appointment_time,
        "status": booking.status,
    }


def decision_to_dict(decision: GuardDecision) -> Dict[str, Any]:
    return {
        "allowed": decision.allowed,
        "reason": decision.reason.value,
        "blockingBooking": booking_to_dict(decision.blocking_booking),
    }


def clinic_to_dict(clinic: Clinic) -> Dict[str, Any]:
    return {
        "id": clinic.id,
        "name": clinic.name,
        "address": clinic.address,
        "phone": clinic.phone,
    }


def room_to_dict(assignment: Optional[RoomAssignment]) -> Optional[Dict[str, Any]]:
    if assignment is None:
        return None
    return {
        "scheduleId": assignment.schedule_id,
        "clinicId": assignment.clinic_id,
        "roomOrUnit": assignment.room_or_unit,
    }
