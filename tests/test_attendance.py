"""
Tests for the attendance toggle.

Covers booking, cancellation and refunds, the 30-minute lock, capacity
and waitlist handling, capacity edits, staff check-in, and the
insufficient-credit rule for self and staff.
"""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from attendease.attendance import check_cancellable, check_in, fill_from_waitlist, toggle_attendance
from attendease.errors import CancellationLockedError
from attendease.logic_models import Role
from attendease.utils import to_local_naive

from .factories import SESSION_START, make_session

EARLY = SESSION_START - timedelta(hours=5)


def credits(state, user_id):
    return state.find_user(user_id).credits


def records(state, session_id, trainee_id):
    return [a for a in state.attendance if a.class_id == session_id and a.trainee_id == trainee_id]


class TestBooking:

    def test_self_booking_spends_one_credit(self, state):
        result = toggle_attendance(state, "s1", "alice", Role.TRAINEE, EARLY)

        assert result.success
        assert result.outcome == "BOOKED"
        assert credits(state, "alice") == 0
        [rec] = records(state, "s1", "alice")
        assert rec.status == "BOOKED"
        assert rec.method == "APP"

    @pytest.mark.parametrize("role", [Role.ADMIN, Role.TRAINER])
    def test_staff_booking_is_manual(self, state, role):
        result = toggle_attendance(state, "s1", "bob", role, EARLY)

        assert result.success
        assert records(state, "s1", "bob")[0].method == "MANUAL"
        assert credits(state, "bob") == 4

    @pytest.mark.parametrize("role", [Role.TRAINEE, Role.ADMIN, Role.TRAINER])
    def test_zero_credits_blocks_booking_for_everyone(self, state, role):
        result = toggle_attendance(state, "s1", "dave", role, EARLY)

        assert not result.success
        assert result.error == "InsufficientCreditsError"
        assert records(state, "s1", "dave") == []
        assert credits(state, "dave") == 0

    def test_staff_target_is_invalid_user(self, state):
        result = toggle_attendance(state, "s1", "u2", Role.ADMIN, EARLY)

        assert not result.success
        assert result.error == "InvalidUserError"
        assert state.attendance == []

    def test_unknown_trainee_is_invalid_user(self, state):
        result = toggle_attendance(state, "s1", "ghost", Role.ADMIN, EARLY)
        assert result.error == "InvalidUserError"

    def test_unknown_session(self, state):
        result = toggle_attendance(state, "nope", "alice", Role.TRAINEE, EARLY)

        assert not result.success
        assert result.error == "UserNotFoundError"
        assert credits(state, "alice") == 1


class TestCancellation:

    def test_cancel_refunds_and_removes_record(self, state):
        toggle_attendance(state, "s1", "bob", Role.TRAINEE, EARLY)
        result = toggle_attendance(state, "s1", "bob", Role.TRAINEE, EARLY)

        assert result.success
        assert result.outcome == "CANCELLED"
        assert "refunded" in result.message
        assert records(state, "s1", "bob") == []
        assert credits(state, "bob") == 5

    def test_book_cancel_cycles_conserve_credits(self, state):
        for _ in range(4):
            toggle_attendance(state, "s1", "bob", Role.TRAINEE, EARLY)
            assert len(records(state, "s1", "bob")) == 1
            toggle_attendance(state, "s1", "bob", Role.ADMIN, EARLY)
            assert records(state, "s1", "bob") == []
        assert credits(state, "bob") == 5

    def test_cancel_31_minutes_before_succeeds(self, state):
        toggle_attendance(state, "s1", "bob", Role.TRAINEE, EARLY)
        result = toggle_attendance(state, "s1", "bob", Role.TRAINEE, SESSION_START - timedelta(minutes=31))
        assert result.success

    def test_cancel_29_minutes_before_is_locked(self, state):
        toggle_attendance(state, "s1", "bob", Role.TRAINEE, EARLY)
        result = toggle_attendance(state, "s1", "bob", Role.TRAINEE, SESSION_START - timedelta(minutes=29))

        assert not result.success
        assert result.error == "CancellationLockedError"
        assert "starts in 29 minutes" in result.message
        assert len(records(state, "s1", "bob")) == 1
        assert credits(state, "bob") == 4

    def test_cancel_after_start_reports_started(self, state):
        toggle_attendance(state, "s1", "bob", Role.TRAINEE, EARLY)
        result = toggle_attendance(state, "s1", "bob", Role.ADMIN, SESSION_START + timedelta(minutes=1))

        assert result.error == "CancellationLockedError"
        assert "already started" in result.message
        assert credits(state, "bob") == 4

    def test_staff_cannot_bypass_lock(self, state):
        toggle_attendance(state, "s1", "bob", Role.TRAINER, EARLY)
        result = toggle_attendance(state, "s1", "bob", Role.TRAINER, SESSION_START - timedelta(minutes=10))
        assert result.error == "CancellationLockedError"

    def test_exactly_at_deadline_is_locked(self, state):
        session = make_session()
        with pytest.raises(CancellationLockedError):
            check_cancellable(session, SESSION_START - timedelta(minutes=30))

    def test_partial_minutes_are_floored(self, state):
        session = make_session()
        with pytest.raises(CancellationLockedError) as exc:
            check_cancellable(session, SESSION_START - timedelta(minutes=12, seconds=50))
        assert "starts in 12 minutes" in exc.value.message

    def test_aware_now_is_converted_to_studio_time(self, state, monkeypatch):
        monkeypatch.setattr("attendease.utils.TZ_NAME", "Africa/Johannesburg")
        toggle_attendance(state, "s1", "bob", Role.TRAINEE, EARLY)

        # 15:50 UTC is 17:50 in the studio, ten minutes before the start
        aware = (SESSION_START - timedelta(hours=2, minutes=10)).replace(tzinfo=ZoneInfo("UTC"))
        result = toggle_attendance(state, "s1", "bob", Role.TRAINEE, aware)
        assert result.error == "CancellationLockedError"

    def test_unset_zone_uses_host_local_time(self, monkeypatch):
        monkeypatch.setattr("attendease.utils.TZ_NAME", "")
        aware = datetime(2030, 1, 15, 16, 0, tzinfo=ZoneInfo("UTC"))
        assert to_local_naive(aware) == aware.astimezone().replace(tzinfo=None)


class TestCapacity:

    def test_booking_fills_then_waitlists(self, state):
        state.classes = [make_session(cap=2)]
        toggle_attendance(state, "s1", "alice", Role.TRAINEE, EARLY)
        toggle_attendance(state, "s1", "bob", Role.TRAINEE, EARLY)

        result = toggle_attendance(state, "s1", "carol", Role.TRAINEE, EARLY)

        assert result.success
        assert result.outcome == "WAITLISTED"
        assert records(state, "s1", "carol")[0].status == "WAITLISTED"
        assert credits(state, "carol") == 4

    def test_last_seat_is_booked(self, state):
        state.classes = [make_session(cap=2)]
        toggle_attendance(state, "s1", "alice", Role.TRAINEE, EARLY)
        result = toggle_attendance(state, "s1", "bob", Role.TRAINEE, EARLY)
        assert result.outcome == "BOOKED"

    def test_cancel_promotes_earliest_waitlisted(self, state):
        state.classes = [make_session(cap=1)]
        toggle_attendance(state, "s1", "bob", Role.TRAINEE, EARLY)
        toggle_attendance(state, "s1", "carol", Role.TRAINEE, EARLY + timedelta(minutes=1))
        toggle_attendance(state, "s1", "alice", Role.TRAINEE, EARLY + timedelta(minutes=2))

        result = toggle_attendance(state, "s1", "bob", Role.TRAINEE, EARLY + timedelta(minutes=3))

        assert result.success
        assert result.data["promotedTraineeId"] == "carol"
        assert records(state, "s1", "carol")[0].status == "BOOKED"
        assert records(state, "s1", "alice")[0].status == "WAITLISTED"
        # promotion does not touch wallets
        assert credits(state, "carol") == 4
        assert credits(state, "alice") == 0

    def test_leaving_waitlist_refunds_without_promotion(self, state):
        state.classes = [make_session(cap=1)]
        toggle_attendance(state, "s1", "bob", Role.TRAINEE, EARLY)
        toggle_attendance(state, "s1", "carol", Role.TRAINEE, EARLY + timedelta(minutes=1))

        result = toggle_attendance(state, "s1", "carol", Role.TRAINEE, EARLY + timedelta(minutes=2))

        assert result.success
        assert "promotedTraineeId" not in result.data
        assert credits(state, "carol") == 5
        assert records(state, "s1", "bob")[0].status == "BOOKED"

    def test_attended_records_hold_a_seat(self, state):
        state.classes = [make_session(cap=1)]
        check_in(state, "s1", "bob", Role.ADMIN, EARLY)
        result = toggle_attendance(state, "s1", "carol", Role.ADMIN, EARLY)
        assert result.outcome == "WAITLISTED"

    def test_unlimited_capacity_never_waitlists(self, state):
        for trainee in ("alice", "bob", "carol"):
            assert toggle_attendance(state, "s1", trainee, Role.TRAINEE, EARLY).outcome == "BOOKED"


class TestCapacityEdit:

    def waitlist_behind_bob(self, state, cap=1):
        state.classes = [make_session(cap=cap)]
        toggle_attendance(state, "s1", "bob", Role.TRAINEE, EARLY)
        toggle_attendance(state, "s1", "carol", Role.TRAINEE, EARLY + timedelta(minutes=1))
        toggle_attendance(state, "s1", "alice", Role.TRAINEE, EARLY + timedelta(minutes=2))

    def test_raised_capacity_promotes_in_join_order(self, state):
        self.waitlist_behind_bob(state)
        state.classes[0].max_capacity = 2

        promoted = fill_from_waitlist(state, state.classes[0])

        assert [a.trainee_id for a in promoted] == ["carol"]
        assert records(state, "s1", "alice")[0].status == "WAITLISTED"

    def test_new_booker_never_jumps_the_waitlist(self, state):
        self.waitlist_behind_bob(state)
        state.classes[0].max_capacity = 3
        fill_from_waitlist(state, state.classes[0])
        state.find_user("dave").credits = 1

        result = toggle_attendance(state, "s1", "dave", Role.TRAINEE, EARLY + timedelta(minutes=3))

        assert result.outcome == "WAITLISTED"
        assert [records(state, "s1", t)[0].status for t in ("carol", "alice")] == ["BOOKED", "BOOKED"]

    def test_unlimited_capacity_promotes_everyone(self, state):
        self.waitlist_behind_bob(state)
        state.classes[0].max_capacity = None

        promoted = fill_from_waitlist(state, state.classes[0])

        assert [a.trainee_id for a in promoted] == ["carol", "alice"]
        assert not [a for a in state.attendance if a.status == "WAITLISTED"]
        # no wallet moves on promotion
        assert credits(state, "carol") == 4
        assert credits(state, "alice") == 0

    def test_lowered_capacity_keeps_existing_bookings(self, state):
        state.classes = [make_session(cap=2)]
        toggle_attendance(state, "s1", "bob", Role.TRAINEE, EARLY)
        toggle_attendance(state, "s1", "carol", Role.TRAINEE, EARLY)
        state.classes[0].max_capacity = 1

        assert fill_from_waitlist(state, state.classes[0]) == []
        assert [a.status for a in state.attendance] == ["BOOKED", "BOOKED"]


class TestCheckIn:

    def test_walk_in_is_attended_and_charged(self, state):
        result = check_in(state, "s1", "bob", Role.TRAINER, EARLY)

        assert result.success
        assert result.outcome == "ATTENDED"
        [rec] = records(state, "s1", "bob")
        assert (rec.status, rec.method) == ("ATTENDED", "MANUAL")
        assert credits(state, "bob") == 4

    def test_booked_trainee_is_not_charged_again(self, state):
        toggle_attendance(state, "s1", "bob", Role.TRAINEE, EARLY)

        result = check_in(state, "s1", "bob", Role.ADMIN, EARLY)

        assert result.success
        assert records(state, "s1", "bob")[0].status == "ATTENDED"
        assert credits(state, "bob") == 4

    def test_walk_in_ignores_capacity(self, state):
        state.classes = [make_session(cap=1)]
        toggle_attendance(state, "s1", "bob", Role.TRAINEE, EARLY)

        result = check_in(state, "s1", "carol", Role.TRAINER, EARLY)

        assert result.outcome == "ATTENDED"

    def test_trainees_cannot_check_in(self, state):
        result = check_in(state, "s1", "bob", Role.TRAINEE, EARLY)

        assert result.error == "InvalidUserError"
        assert state.attendance == []

    def test_walk_in_needs_a_credit(self, state):
        result = check_in(state, "s1", "dave", Role.ADMIN, EARLY)
        assert result.error == "InsufficientCreditsError"

    def test_unmarking_refunds(self, state):
        check_in(state, "s1", "bob", Role.TRAINER, EARLY)

        result = toggle_attendance(state, "s1", "bob", Role.TRAINER, EARLY)

        assert result.outcome == "CANCELLED"
        assert credits(state, "bob") == 5


def test_staff_cancel_and_rebook_scenario(state):
    state.classes = [make_session(cap=1)]

    booked = toggle_attendance(state, "s1", "alice", Role.TRAINEE, EARLY)
    assert booked.outcome == "BOOKED"
    assert credits(state, "alice") == 0

    cancelled = toggle_attendance(state, "s1", "alice", Role.ADMIN, SESSION_START - timedelta(minutes=40))
    assert cancelled.success
    assert credits(state, "alice") == 1
    assert records(state, "s1", "alice") == []

    rebooked = toggle_attendance(state, "s1", "alice", Role.TRAINEE, SESSION_START - timedelta(minutes=39))
    assert rebooked.outcome == "BOOKED"
    assert credits(state, "alice") == 0


def test_no_double_booking(state):
    for i in range(5):
        toggle_attendance(state, "s1", "bob", Role.TRAINEE, EARLY + timedelta(seconds=i))
        assert len(records(state, "s1", "bob")) <= 1
