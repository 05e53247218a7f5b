"""
Domain entities - Pure business logic, no framework dependencies.

Entities validate themselves on construction, so a malformed record is
rejected where it enters the system (form input or a stored row), not at
the point where it is used.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, Iterable, List, Optional, Union

from clinic_schedules.core.exceptions import ValidationError
from clinic_schedules.domain.time_labels import canonical_time_label, parse_time_label

SLOT_STATUSES = ("available", "booked", "unavailable")
BOOKING_STATUSES = ("pending", "confirmed", "completed", "cancelled")
ALLOWED_SLOT_DURATIONS = (15, 20, 30, 45, 60)
RECURRENCE_WEEKLY = "weekly"


def coerce_date(value: Union[date, str, None], field_name: str) -> date:
    """Accept a ``date`` or an ISO ``YYYY-MM-DD`` string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise ValidationError(
        f"{field_name} must be a date in YYYY-MM-DD format", field=field_name
    )


@dataclass
class PracticeLocation:
    """Clinic and room/unit a schedule is bound to."""

    clinic_id: str = ""
    room_or_unit: str = ""

    def __post_init__(self):
        if not self.clinic_id:
            raise ValidationError("Clinic is required", field="clinic_id")
        if not self.room_or_unit or not self.room_or_unit.strip():
            raise ValidationError("Room/Unit is required", field="room_or_unit")
        self.room_or_unit = self.room_or_unit.strip()


@dataclass
class Recurrence:
    """Weekly recurrence: the weekdays (0=Sunday .. 6=Saturday) a schedule applies to."""

    day_of_week: FrozenSet[int] = frozenset()
    type: str = RECURRENCE_WEEKLY

    def __post_init__(self):
        days = set()
        for day in self.day_of_week or ():
            if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6:
                raise ValidationError(
                    f"Invalid day of week: {day!r}. Expected 0-6", field="days_of_week"
                )
            days.add(day)
        if not days:
            raise ValidationError(
                "At least one day of the week must be selected", field="days_of_week"
            )
        if self.type != RECURRENCE_WEEKLY:
            raise ValidationError(
                f"Unsupported recurrence type: {self.type!r}", field="recurrence"
            )
        self.day_of_week = frozenset(days)

    @property
    def sorted_days(self) -> List[int]:
        return sorted(self.day_of_week)


@dataclass
class SlotTemplateEntry:
    """Per-slot defaults stored in a schedule's template."""

    default_status: str = "available"
    duration_minutes: int = 30

    def __post_init__(self):
        if self.default_status not in SLOT_STATUSES:
            raise ValidationError(
                f"Invalid slot status: {self.default_status!r}", field="slot_template"
            )
        if (
            isinstance(self.duration_minutes, bool)
            or not isinstance(self.duration_minutes, int)
            or self.duration_minutes <= 0
        ):
            raise ValidationError("Duration must be positive", field="slot_template")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SlotTemplateEntry":
        """Build from a stored mapping (camelCase or snake_case keys)."""
        return cls(
            default_status=data.get(
                "default_status", data.get("defaultStatus", "available")
            ),
            duration_minutes=data.get("duration_minutes", data.get("durationMinutes")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "defaultStatus": self.default_status,
            "durationMinutes": self.duration_minutes,
        }


def normalize_slot_template(
    template: Dict[str, Union[SlotTemplateEntry, Dict[str, Any]]],
) -> Dict[str, SlotTemplateEntry]:
    """Validate template keys and return the template in chronological order.

    Raises:
        ValidationError: on an empty template, a malformed label or a
            duplicate time after canonicalization.
    """
    if not template:
        raise ValidationError("Slot template cannot be empty", field="slot_template")

    entries = {}
    for label, entry in template.items():
        key = canonical_time_label(label)
        if key in entries:
            raise ValidationError(
                f"Duplicate slot time: {label!r}", field="slot_template"
            )
        if isinstance(entry, dict):
            entry = SlotTemplateEntry.from_dict(entry)
        elif not isinstance(entry, SlotTemplateEntry):
            raise ValidationError(
                f"Invalid slot definition for {label!r}", field="slot_template"
            )
        entries[key] = entry

    return {key: entries[key] for key in sorted(entries, key=parse_time_label)}


@dataclass
class ScheduleRecord:
    """A specialist's recurring block of bookable time."""

    id: Optional[str] = None
    specialist_id: str = ""
    practice_location: Optional[PracticeLocation] = None
    recurrence: Optional[Recurrence] = None
    slot_template: Dict[str, SlotTemplateEntry] = field(default_factory=dict)
    valid_from: Optional[date] = None
    is_active: bool = True
    schedule_type: str = "Weekly"
    created_at: Optional[datetime] = None
    last_updated: Optional[datetime] = None

    def __post_init__(self):
        """Validate domain rules."""
        if not self.specialist_id:
            raise ValidationError("Specialist is required", field="specialist_id")
        if not isinstance(self.practice_location, PracticeLocation):
            raise ValidationError(
                "Practice location is required", field="practice_location"
            )
        if not isinstance(self.recurrence, Recurrence):
            raise ValidationError("Recurrence is required", field="recurrence")
        self.slot_template = normalize_slot_template(self.slot_template)
        self.valid_from = coerce_date(self.valid_from, "valid_from")

    @property
    def time_labels(self) -> List[str]:
        """Slot times in chronological order."""
        return list(self.slot_template)

    def has_time_slot(self, label: str) -> bool:
        return label in self.slot_template


@dataclass
class BookingRecord:
    """A read-only external commitment against a specialist's time."""

    FEED: ClassVar[str] = "booking"

    id: Optional[str] = None
    specialist_id: str = ""
    appointment_date: Optional[date] = None
    appointment_time: str = ""
    status: str = "pending"

    def __post_init__(self):
        """Validate business rules."""
        if not self.specialist_id:
            raise ValidationError("Specialist is required", field="specialist_id")
        if self.status not in BOOKING_STATUSES:
            raise ValidationError(
                f"Invalid booking status: {self.status!r}", field="status"
            )
        self.appointment_date = coerce_date(self.appointment_date, "appointment_date")
        self.appointment_time = canonical_time_label(self.appointment_time)

    @property
    def feed(self) -> str:
        return self.FEED


@dataclass
class Referral(BookingRecord):
    """Booking that arrives through the referrals feed."""

    FEED: ClassVar[str] = "referral"

    referring_specialist_id: Optional[str] = None


@dataclass
class Appointment(BookingRecord):
    """Booking that arrives through the direct appointments feed."""

    FEED: ClassVar[str] = "appointment"

    patient_id: Optional[str] = None


@dataclass
class Clinic:
    """Domain entity representing a clinic."""

    id: str = ""
    name: str = ""
    address: Optional[str] = None
    phone: Optional[str] = None

    def __post_init__(self):
        if not self.id:
            raise ValidationError("Clinic id is required", field="id")
        if not self.name:
            raise ValidationError("Clinic name is required", field="name")


@dataclass
class DaySlot:
    """A template slot instantiated for one calendar date."""

    time: str
    duration_minutes: int
    default_status: str
    is_booked: bool = False


@dataclass
class ScheduleDay:
    """Availability of one calendar date."""

    date: date
    has_schedule: bool
    slots: List[DaySlot] = field(default_factory=list)
    schedule_id: Optional[str] = None
    day_name: str = ""
    day_number: int = 0
    is_today: bool = False
    is_past: bool = False

    @property
    def has_open_slot(self) -> bool:
        return any(not slot.is_booked for slot in self.slots)

    @property
    def has_booked_slot(self) -> bool:
        return any(slot.is_booked for slot in self.slots)


class LockReason(str, Enum):
    """Why ConflictGuard allowed or refused an operation."""

    NO_CONFLICT = "no_conflict"
    BLOCKED_BY_REFERRAL = "blocked_by_referral"
    BLOCKED_BY_APPOINTMENT = "blocked_by_appointment"


@dataclass(frozen=True)
class GuardDecision:
    """Outcome of a ConflictGuard check. Truthy when the operation may proceed."""

    allowed: bool
    reason: LockReason = LockReason.NO_CONFLICT
    blocking_booking: Optional[BookingRecord] = None

    def __bool__(self) -> bool:
        return self.allowed

    @classmethod
    def allow(cls) -> "GuardDecision":
        return cls(allowed=True)

    @classmethod
    def block(cls, booking: BookingRecord, reason: LockReason) -> "GuardDecision":
        return cls(allowed=False, reason=reason, blocking_booking=booking)


@dataclass(frozen=True)
class RoomAssignment:
    """Where a booking takes place, resolved from the matching schedule."""

    schedule_id: str
    clinic_id: str
    room_or_unit: str


def iter_bookings(*feeds: Iterable[BookingRecord]) -> List[BookingRecord]:
    """Union several booking feeds for decision purposes."""
    bookings: List[BookingRecord] = []
    for feed in feeds:
        bookings.extend(feed or [])
    return bookings
