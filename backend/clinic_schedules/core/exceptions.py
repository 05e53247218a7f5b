"""
Custom exceptions for the scheduling application.
Centralized error taxonomy shared by services, repositories and controllers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:  # pragma: no cover
    from clinic_schedules.domain.entities import LockReason


class SchedulingError(Exception):
    """Base class for every error raised by the scheduling core."""

    pass


class ValidationError(SchedulingError, ValueError):
    """Malformed or missing input, raised before any I/O happens.

    Carries the offending field (when there is a single one) and the full
    list of messages so a form can show every problem at once.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        errors: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.field = field
        self.errors = errors or [message]


class InvalidTimeFormat(ValidationError):
    """A time label does not look like ``hh:mm AM`` / ``hh:mm PM``."""

    pass


class InvalidRange(ValidationError):
    """End time is not after start time."""

    pass


class ScheduleLocked(SchedulingError):
    """ConflictGuard refused a modification or deletion.

    ``reason`` tells the caller which booking feed caused the block.
    """

    def __init__(self, message: str, reason: "LockReason", operation: str):
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.operation = operation


class NotFound(SchedulingError):
    """Unknown schedule id for the given specialist."""

    pass


class PersistenceError(SchedulingError):
    """Underlying I/O failure reported by a collaborator."""

    pass


class BookingFeedUnavailable(PersistenceError):
    """One of the booking feeds (referrals / appointments) could not be read."""

    def __init__(self, feed: str, message: Optional[str] = None):
        super().__init__(message or f"Booking feed '{feed}' is unavailable")
        self.feed = feed
