"""
Abstract interfaces for the collaborators of the scheduling core.

These interfaces define contracts without implementation details,
enabling dependency injection and easier testing.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .entities import Appointment, Clinic, Referral, ScheduleRecord


class IScheduleReader(ABC):
    """Interface for schedule read operations."""

    @abstractmethod
    def get_schedules(self, specialist_id: str) -> Dict[str, ScheduleRecord]:
        """Get all schedules of a specialist keyed by schedule id."""
        pass


class IScheduleWriter(ABC):
    """Interface for schedule write operations."""

    @abstractmethod
    def add_schedule(self, specialist_id: str, record: ScheduleRecord) -> str:
        """Persist a new schedule and return its id."""
        pass

    @abstractmethod
    def update_schedule(
        self, specialist_id: str, schedule_id: str, changes: Dict[str, Any]
    ) -> None:
        """Apply a partial update to an existing schedule."""
        pass

    @abstractmethod
    def delete_schedule(self, specialist_id: str, schedule_id: str) -> None:
        """Remove a schedule."""
        pass


class IClinicReader(ABC):
    """Interface for clinic lookups."""

    @abstractmethod
    def get_all_clinics(self) -> List[Clinic]:
        """Get all clinics."""
        pass

    @abstractmethod
    def get_clinic_by_id(self, clinic_id: str) -> Optional[Clinic]:
        """Get clinic by ID."""
        pass


class IScheduleRepository(IScheduleReader, IScheduleWriter, IClinicReader):
    """Complete schedule repository interface."""

    pass


class IBookingSource(ABC):
    """The two independent booking feeds consulted by the scheduling core."""

    @abstractmethod
    def get_referrals(self, specialist_id: str) -> List[Referral]:
        """Get bookings from the referrals feed."""
        pass

    @abstractmethod
    def get_appointments(self, specialist_id: str) -> List[Appointment]:
        """Get bookings from the direct appointments feed."""
        pass
