"""
Schedule controller for handling HTTP requests.

This controller:
- Handles HTTP concerns only (parsing, status codes, JSON envelopes)
- Builds repositories and services per request around one DB session
- Maps the scheduling error taxonomy to HTTP status codes
"""

import logging

from flask import Blueprint, request

from clinic_schedules.core.api_utils import api_response, int_arg, str_arg
from clinic_schedules.core.exceptions import (
    NotFound,
    PersistenceError,
    ScheduleLocked,
    ValidationError,
)
from clinic_schedules.db.session import SessionLocal
from clinic_schedules.repositories.booking_repo import BookingRepository
from clinic_schedules.repositories.schedule_repo import ScheduleRepository
from clinic_schedules.schemas.dtos import (
    ScheduleFormData,
    ScheduleResponse,
    clinic_to_dict,
    decision_to_dict,
    room_to_dict,
    schedule_day_to_dict,
)
from clinic_schedules.services.availability_service import AvailabilityService
from clinic_schedules.services.location_service import PracticeLocationService
from clinic_schedules.services.schedule_service import ScheduleService

logger = logging.getLogger(__name__)

clinic_bp = Blueprint("clinics", __name__, url_prefix="/clinics")
schedule_bp = Blueprint("schedules", __name__, url_prefix="/specialists")


# ===========================
# Error handlers
# ===========================


def handle_validation_error(error: ValidationError):
    return api_response(
        False,
        error.message,
        {"field": error.field, "errors": error.errors},
        400,
    )


def handle_schedule_locked(error: ScheduleLocked):
    return api_response(
        False,
        error.message,
        {"reason": error.reason.value, "operation": error.operation},
        409,
    )


def handle_not_found(error: NotFound):
    return api_response(False, str(error), None, 404)


def handle_persistence_error(error: PersistenceError):
    logger.error(f"Persistence failure while serving {request.path}: {error}")
    return api_response(False, "Storage is temporarily unavailable", None, 503)


for _bp in (clinic_bp, schedule_bp):
    _bp.register_error_handler(ValidationError, handle_validation_error)
    _bp.register_error_handler(ScheduleLocked, handle_schedule_locked)
    _bp.register_error_handler(NotFound, handle_not_found)
    _bp.register_error_handler(PersistenceError, handle_persistence_error)


def _schedule_service(db) -> ScheduleService:
    return ScheduleService(ScheduleRepository(db), BookingRepository(db))


# ===========================
# Clinics
# ===========================


@clinic_bp.route("/", methods=["GET"], strict_slashes=False)
def list_clinics():
    """Clinics for the schedule form's clinic picker."""
    db = SessionLocal()
    try:
        clinics = _schedule_service(db).list_clinics()
        return api_response(
            True, "Clinics loaded", [clinic_to_dict(clinic) for clinic in clinics]
        )
    finally:
        db.close()


# ===========================
# Schedules
# ===========================


@schedule_bp.route("/<specialist_id>/schedules", methods=["GET"])
def list_schedules(specialist_id):
    db = SessionLocal()
    try:
        schedules = _schedule_service(db).list_schedules(specialist_id)
        return api_response(
            True,
            "Schedules loaded",
            [ScheduleResponse.from_domain(s).to_dict() for s in schedules],
        )
    finally:
        db.close()


@schedule_bp.route("/<specialist_id>/schedules", methods=["POST"])
def create_schedule(specialist_id):
    """Create a schedule from the form (JSON body)."""
    db = SessionLocal()
    try:
        form = ScheduleFormData.from_dict(request.get_json(silent=True))
        schedule_id = _schedule_service(db).add_schedule(specialist_id, form)
        return api_response(True, "Schedule created", {"id": schedule_id}, 201)
    finally:
        db.close()


@schedule_bp.route("/<specialist_id>/schedules/<schedule_id>", methods=["PUT"])
def update_schedule(specialist_id, schedule_id):
    """Replace a schedule's pattern unless bookings depend on it."""
    db = SessionLocal()
    try:
        form = ScheduleFormData.from_dict(request.get_json(silent=True))
        updated = _schedule_service(db).update_schedule(
            specialist_id, schedule_id, form
        )
        return api_response(
            True, "Schedule updated", ScheduleResponse.from_domain(updated).to_dict()
        )
    finally:
        db.close()


@schedule_bp.route("/<specialist_id>/schedules/<schedule_id>", methods=["DELETE"])
def delete_schedule(specialist_id, schedule_id):
    db = SessionLocal()
    try:
        _schedule_service(db).delete_schedule(specialist_id, schedule_id)
        return api_response(True, "Schedule deleted")
    finally:
        db.close()


@schedule_bp.route(
    "/<specialist_id>/schedules/<schedule_id>/lock-status", methods=["GET"]
)
def lock_status(specialist_id, schedule_id):
    """Whether the schedule can currently be edited and deleted.

    ``valid_from`` checks the edit lock against a proposed effective date.
    """
    db = SessionLocal()
    try:
        service = _schedule_service(db)
        valid_from = str_arg("valid_from")
        modify = service.check_can_modify(specialist_id, schedule_id, valid_from)
        delete = service.check_can_delete(specialist_id, schedule_id)
        return api_response(
            True,
            "Lock status loaded",
            {"modify": decision_to_dict(modify), "delete": decision_to_dict(delete)},
        )
    finally:
        db.close()


# ===========================
# Availability
# ===========================


@schedule_bp.route("/<specialist_id>/calendar", methods=["GET"])
def month_calendar(specialist_id):
    """42-cell month grid for the calendar view."""
    year = int_arg("year", required=True)
    month = int_arg("month", required=True)
    db = SessionLocal()
    try:
        service = AvailabilityService(ScheduleRepository(db), BookingRepository(db))
        days = service.get_month_calendar(specialist_id, year, month)
        return api_response(
            True, "Calendar loaded", [schedule_day_to_dict(day) for day in days]
        )
    finally:
        db.close()


@schedule_bp.route("/<specialist_id>/availability", methods=["GET"])
def availability_window(specialist_id):
    start = str_arg("start")
    days = int_arg("days")
    db = SessionLocal()
    try:
        service = AvailabilityService(ScheduleRepository(db), BookingRepository(db))
        window = service.get_window(specialist_id, start, days)
        return api_response(
            True, "Availability loaded", [schedule_day_to_dict(day) for day in window]
        )
    finally:
        db.close()


@schedule_bp.route("/<specialist_id>/available-dates", methods=["GET"])
def available_dates(specialist_id):
    """Dates with at least one open slot, for the booking date picker."""
    start = str_arg("start")
    days = int_arg("days")
    db = SessionLocal()
    try:
        service = AvailabilityService(ScheduleRepository(db), BookingRepository(db))
        dates = service.get_available_dates(specialist_id, start, days)
        return api_response(
            True, "Available dates loaded", [d.isoformat() for d in dates]
        )
    finally:
        db.close()


@schedule_bp.route("/<specialist_id>/room", methods=["GET"])
def room_for_booking(specialist_id):
    """Room a booking at ``date`` / ``time`` would take place in."""
    appointment_date = str_arg("date", required=True)
    appointment_time = str_arg("time", required=True)
    db = SessionLocal()
    try:
        service = PracticeLocationService(ScheduleRepository(db))
        assignment = service.find_room_for_booking(
            specialist_id, appointment_date, appointment_time
        )
        if assignment is None:
            return api_response(False, "No schedule covers this slot", None, 404)
        return api_response(True, "Room resolved", room_to_dict(assignment))
    finally:
        db.close()
