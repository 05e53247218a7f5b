# Services package initialization
# This file makes the services directory a Python package
# and allows importing service modules

from . import (
    availability_service,
    conflict_guard,
    location_service,
    recurrence,
    schedule_service,
    time_slots,
)

__all__ = [
    "availability_service",
    "conflict_guard",
    "location_service",
    "recurrence",
    "schedule_service",
    "time_slots",
]
