from datetime import date

import pytest

from clinic_schedules.domain.entities import RoomAssignment
from clinic_schedules.services.location_service import PracticeLocationService
from tests.factories.repository_factories import ScheduleRepositoryFactory
from tests.fixtures.domain_fixtures import (
    SPECIALIST_ID,
    make_clinic,
    make_schedule,
)

WEDNESDAY = date(2025, 1, 8)


def _service(schedules, clock, clinics=None):
    repo = ScheduleRepositoryFactory.create_mock_full(
        schedules=schedules, clinics=clinics or []
    )
    return PracticeLocationService(repo, clock=clock)


@pytest.mark.services
class TestFindRoomForBooking:
    def test_room_of_matching_schedule(self, schedule, clock):
        service = _service([schedule], clock)

        room = service.find_room_for_booking(SPECIALIST_ID, WEDNESDAY, "9:20 am")

        assert room == RoomAssignment(
            schedule_id="sched-1", clinic_id="clinic-1", room_or_unit="Room 101"
        )

    def test_schedule_without_the_time_slot_is_skipped(self, clock):
        morning = make_schedule(id="morning", room_or_unit="Room A")
        afternoon = make_schedule(
            id="afternoon",
            room_or_unit="Room B",
            start_time="02:00 PM",
            end_time="04:00 PM",
            duration=30,
        )
        service = _service([morning, afternoon], clock)

        room = service.find_room_for_booking(SPECIALIST_ID, "2025-01-08", "02:30 PM")

        assert room.schedule_id == "afternoon"
        assert room.room_or_unit == "Room B"

    def test_inactive_or_non_recurring_date_returns_none(self, clock):
        inactive = make_schedule(is_active=False)
        service = _service([inactive], clock)

        assert service.find_room_for_booking(SPECIALIST_ID, WEDNESDAY, "09:00 AM") is None
        assert (
            _service([make_schedule()], clock).find_room_for_booking(
                SPECIALIST_ID, date(2025, 1, 7), "09:00 AM"
            )
            is None
        )


@pytest.mark.services
class TestGetPrimaryClinic:
    def test_latest_effective_schedule_wins(self, clock):
        older = make_schedule(id="old", valid_from=date(2024, 6, 1), clinic_id="c-old")
        newer = make_schedule(id="new", valid_from=date(2025, 1, 1), clinic_id="c-new")
        future = make_schedule(
            id="future", valid_from=date(2025, 3, 1), clinic_id="c-future"
        )
        service = _service(
            [older, newer, future],
            clock,
            clinics=[
                make_clinic("c-old", "Old"),
                make_clinic("c-new", "New"),
                make_clinic("c-future", "Future"),
            ],
        )

        clinic = service.get_primary_clinic(SPECIALIST_ID)

        assert clinic.id == "c-new"

    def test_inactive_schedules_ignored(self, clock):
        inactive = make_schedule(valid_from=date(2025, 1, 1), is_active=False)
        service = _service([inactive], clock, clinics=[make_clinic()])

        assert service.get_primary_clinic(SPECIALIST_ID) is None

    def test_unknown_clinic_returns_none(self, clock):
        service = _service([make_schedule(valid_from=date(2025, 1, 1))], clock)

        assert service.get_primary_clinic(SPECIALIST_ID) is None
