"""SQLAlchemy implementations of the domain repository interfaces."""

from .booking_repo import BookingRepository
from .schedule_repo import ScheduleRepository

__all__ = ["BookingRepository", "ScheduleRepository"]
