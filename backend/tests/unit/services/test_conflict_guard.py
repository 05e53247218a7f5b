"""
Unit tests for ConflictGuard, the edit/delete lock on schedules.

TODAY (see conftest) is Monday 2025-01-06; the default schedule runs
Mon/Wed/Fri 09:00-10:00 in 20 minute slots from that date.
"""

import logging
from datetime import date

import pytest

from clinic_schedules.core.exceptions import BookingFeedUnavailable
from clinic_schedules.domain.entities import LockReason
from clinic_schedules.services.conflict_guard import (
    MODIFY_BLOCKING_STATUSES,
    ConflictGuard,
    find_blocking_booking,
)
from tests.factories.repository_factories import BookingSourceFactory
from tests.fixtures.domain_fixtures import (
    make_appointment,
    make_referral,
    make_schedule,
)

TODAY = date(2025, 1, 6)
WEDNESDAY = date(2025, 1, 8)


def _guard(clock, referrals=None, appointments=None):
    return ConflictGuard(
        BookingSourceFactory.create_mock(referrals, appointments), clock=clock
    )


@pytest.mark.services
class TestNoBookings:
    def test_modify_and_delete_allowed(self, schedule, clock):
        guard = _guard(clock)

        modify = guard.can_modify(schedule)
        delete = guard.can_delete(schedule)

        assert modify.allowed and delete.allowed
        assert modify.reason is LockReason.NO_CONFLICT
        assert delete.blocking_booking is None
        assert bool(modify) is True


@pytest.mark.services
class TestTwoTierLock:
    def test_confirmed_booking_today_blocks_both(self, schedule, clock):
        guard = _guard(clock, referrals=[make_referral(TODAY, "09:00 AM")])

        assert not guard.can_modify(schedule)
        assert not guard.can_delete(schedule)

    def test_confirmed_booking_yesterday_blocks_modify_not_delete(self, clock):
        schedule = make_schedule(days=(0, 1), valid_from=date(2025, 1, 1))
        yesterday = date(2025, 1, 5)
        guard = _guard(clock, appointments=[make_appointment(yesterday, "09:20 AM")])

        modify = guard.can_modify(schedule)
        delete = guard.can_delete(schedule)

        assert modify.allowed is False
        assert modify.reason is LockReason.BLOCKED_BY_APPOINTMENT
        assert delete.allowed is True

    def test_pending_booking_blocks_modify_never_delete(self, schedule, clock):
        guard = _guard(
            clock, referrals=[make_referral(WEDNESDAY, "09:40 AM", status="pending")]
        )

        assert guard.can_modify(schedule).allowed is False
        assert guard.can_delete(schedule).allowed is True

    def test_completed_booking_blocks_delete(self, schedule, clock):
        guard = _guard(
            clock,
            appointments=[make_appointment(WEDNESDAY, "09:00 AM", status="completed")],
        )

        decision = guard.can_delete(schedule)

        assert decision.allowed is False
        assert decision.reason is LockReason.BLOCKED_BY_APPOINTMENT

    def test_cancelled_booking_never_blocks(self, schedule, clock):
        guard = _guard(
            clock, referrals=[make_referral(WEDNESDAY, "09:00 AM", status="cancelled")]
        )

        assert guard.can_modify(schedule).allowed is True
        assert guard.can_delete(schedule).allowed is True


@pytest.mark.services
class TestPatternMatching:
    def test_booking_on_other_weekday_does_not_block(self, schedule, clock):
        tuesday = date(2025, 1, 7)
        guard = _guard(clock, referrals=[make_referral(tuesday, "09:00 AM")])

        assert guard.can_modify(schedule).allowed is True
        assert guard.can_delete(schedule).allowed is True

    def test_booking_outside_template_times_does_not_block(self, schedule, clock):
        guard = _guard(clock, referrals=[make_referral(WEDNESDAY, "11:00 AM")])

        assert guard.can_modify(schedule).allowed is True
        assert guard.can_delete(schedule).allowed is True

    def test_booking_before_proposed_valid_from_does_not_block_modify(
        self, schedule, clock
    ):
        guard = _guard(clock, referrals=[make_referral(WEDNESDAY, "09:00 AM")])

        assert guard.can_modify(schedule, "2025-01-13").allowed is True
        assert guard.can_modify(schedule, date(2025, 1, 8)).allowed is False

    def test_booking_time_spelling_is_canonicalised(self, schedule, clock):
        guard = _guard(clock, referrals=[make_referral(WEDNESDAY, "9:20 am")])

        assert guard.can_modify(schedule).allowed is False


@pytest.mark.services
class TestFeedPriority:
    def test_referral_reported_first_and_appointments_not_consulted(
        self, schedule, clock
    ):
        source = BookingSourceFactory.create_mock(
            referrals=[make_referral(WEDNESDAY, "09:00 AM")],
            appointments=[make_appointment(WEDNESDAY, "09:20 AM")],
        )
        guard = ConflictGuard(source, clock=clock)

        decision = guard.can_delete(schedule)

        assert decision.reason is LockReason.BLOCKED_BY_REFERRAL
        assert decision.blocking_booking.id == "ref-1"
        source.get_appointments.assert_not_called()

    def test_appointment_block_reported_when_referrals_clear(self, schedule, clock):
        guard = _guard(clock, appointments=[make_appointment(WEDNESDAY, "09:20 AM")])

        decision = guard.can_modify(schedule)

        assert decision.reason is LockReason.BLOCKED_BY_APPOINTMENT
        assert decision.blocking_booking.feed == "appointment"


@pytest.mark.services
class TestFeedFailures:
    def test_modify_fails_open_when_a_feed_is_down(self, schedule, clock, caplog):
        source = BookingSourceFactory.create_failing(referrals_down=True)
        guard = ConflictGuard(source, clock=clock)

        with caplog.at_level(logging.WARNING):
            decision = guard.can_modify(schedule)

        assert decision.allowed is True
        assert "unavailable during edit check" in caplog.text
        source.get_appointments.assert_called_once_with(schedule.specialist_id)

    def test_modify_still_blocked_by_the_reachable_feed(self, schedule, clock):
        source = BookingSourceFactory.create_failing(
            appointments_down=True,
            referrals=[make_referral(WEDNESDAY, "09:00 AM", status="pending")],
        )
        guard = ConflictGuard(source, clock=clock)

        assert guard.can_modify(schedule).reason is LockReason.BLOCKED_BY_REFERRAL

    def test_delete_propagates_feed_failure(self, schedule, clock):
        source = BookingSourceFactory.create_failing(appointments_down=True)
        guard = ConflictGuard(source, clock=clock)

        with pytest.raises(BookingFeedUnavailable) as exc_info:
            guard.can_delete(schedule)

        assert exc_info.value.feed == "appointments"


class TestFindBlockingBooking:
    def test_returns_first_matching_booking(self, schedule):
        bookings = [
            make_referral(date(2025, 1, 7), "09:00 AM", id="tuesday"),
            make_referral(WEDNESDAY, "09:00 AM", id="first"),
            make_referral(WEDNESDAY, "09:20 AM", id="second"),
        ]

        found = find_blocking_booking(
            schedule, bookings, MODIFY_BLOCKING_STATUSES, TODAY
        )

        assert found.id == "first"

    def test_none_when_nothing_matches(self, schedule):
        assert (
            find_blocking_booking(schedule, [], MODIFY_BLOCKING_STATUSES, TODAY)
            is None
        )
