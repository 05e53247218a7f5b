"""Request/response DTOs for the HTTP layer."""

from .dtos import (
    ScheduleFormData,
    ScheduleResponse,
    clinic_to_dict,
    decision_to_dict,
    room_to_dict,
    schedule_day_to_dict,
)

__all__ = [
    "ScheduleFormData",
    "ScheduleResponse",
    "clinic_to_dict",
    "decision_to_dict",
    "room_to_dict",
    "schedule_day_to_dict",
]
