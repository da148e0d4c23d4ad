# attendease/attendance.py
"""
attendance.py
────────────────────────────────────────────
Booking / cancellation / credit settlement.

One toggle per (session, trainee):
 • no record  → BOOKED (or WAITLISTED when full), 1 credit spent
 • has record → removed and 1 credit refunded, unless inside the
                30-minute cancellation lock
 • a freed seat goes to the earliest waitlisted trainee, and so does
   every seat a capacity edit opens up
 • staff check-in marks a trainee ATTENDED

The engine works on the AppState it is handed and returns a Result.
Failures never raise out of toggle_attendance.
────────────────────────────────────────────
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import List, Optional

from .errors import (
    AttendanceError,
    CancellationLockedError,
    InsufficientCreditsError,
    InvalidUserError,
    Result,
)
from .logic_models import (
    AppState,
    AttendanceRecord,
    ClassSession,
    ATTENDED,
    BOOKED,
    WAITLISTED,
    Role,
    epoch_ms,
    is_staff,
    new_id,
)
from .sessions import SessionRegistry, start_of
from .settings import CANCEL_LOCK_MINUTES, CREDITS_PER_BOOKING
from .utils import to_local_naive
from .wallet import WalletLedger

log = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
# Lock window
# ─────────────────────────────────────────────────────────────
def minutes_until_start(session: ClassSession, now: datetime) -> float:
    return (start_of(session) - to_local_naive(now)).total_seconds() / 60


def check_cancellable(session: ClassSession, now: datetime) -> None:
    """Raise CancellationLockedError once now reaches start - CANCEL_LOCK_MINUTES."""
    remaining = minutes_until_start(session, now)
    if remaining > CANCEL_LOCK_MINUTES:
        return
    if remaining <= 0:
        raise CancellationLockedError(
            "Cancellation Failed: This session has already started or finished."
        )
    raise CancellationLockedError(
        f"Cancellation Failed: This class starts in {math.floor(remaining)} minutes. "
        f"{CANCEL_LOCK_MINUTES}m notice required."
    )


def seats_taken(state: AppState, session_id: str) -> int:
    return sum(1 for a in state.records_for(session_id) if a.holds_seat)


def is_full(state: AppState, session: ClassSession) -> bool:
    if session.max_capacity is None:
        return False
    return seats_taken(state, session.id) >= session.max_capacity


# ─────────────────────────────────────────────────────────────
# Cancel path
# ─────────────────────────────────────────────────────────────
def fill_from_waitlist(state: AppState, session: ClassSession) -> List[AttendanceRecord]:
    """
    Promote WAITLISTED records to BOOKED, earliest first, while seats are free.
    Unlimited sessions promote everyone. Promotion never touches a wallet.
    """
    waiting = sorted(
        (a for a in state.records_for(session.id) if a.status == WAITLISTED),
        key=lambda a: a.timestamp,
    )
    promoted = []
    for record in waiting:
        if is_full(state, session):
            break
        record.status = BOOKED
        promoted.append(record)
        log.info(f"[attendance] promoted {record.trainee_id} from waitlist in {session.id}")
    return promoted


def _cancel(state: AppState, session: ClassSession, record: AttendanceRecord, now: datetime) -> Result:
    check_cancellable(session, now)

    state.attendance = [a for a in state.attendance if a is not record]
    WalletLedger(state).credit(record.trainee_id, CREDITS_PER_BOOKING)
    log.info(f"[attendance] {record.trainee_id} removed from {session.id} ({record.status})")

    promoted = fill_from_waitlist(state, session) if record.holds_seat else []
    extra = {"promotedTraineeId": promoted[0].trainee_id} if promoted else {}
    return Result.ok("Attendance removed. Credit refunded.", outcome="CANCELLED", **extra)


# ─────────────────────────────────────────────────────────────
# Book path
# ─────────────────────────────────────────────────────────────
def _chargeable_wallet(state: AppState, trainee_id: str) -> WalletLedger:
    trainee = state.find_user(trainee_id)
    if not trainee or not trainee.is_trainee:
        raise InvalidUserError("Invalid user.")

    wallet = WalletLedger(state)
    if wallet.balance(trainee_id) < CREDITS_PER_BOOKING:
        raise InsufficientCreditsError("Insufficient credits. Please purchase more.")
    return wallet


def _book(state: AppState, session: ClassSession, trainee_id: str, acting_role: Role, now: datetime) -> Result:
    wallet = _chargeable_wallet(state, trainee_id)

    status = WAITLISTED if is_full(state, session) else BOOKED
    record = AttendanceRecord(
        id=new_id(),
        class_id=session.id,
        trainee_id=trainee_id,
        timestamp=epoch_ms(now),
        method="MANUAL" if is_staff(acting_role) else "APP",
        status=status,
    )
    state.attendance.append(record)
    wallet.debit(trainee_id, CREDITS_PER_BOOKING)
    log.info(f"[attendance] {trainee_id} → {session.id} {status} via {record.method}")

    if status == WAITLISTED:
        return Result.ok("Joined waitlist, 1 credit deducted.", outcome=WAITLISTED, recordId=record.id)
    return Result.ok("Checked in, 1 credit deducted.", outcome=BOOKED, recordId=record.id)


# ─────────────────────────────────────────────────────────────
# Public entrypoint
# ─────────────────────────────────────────────────────────────
def toggle_attendance(
    state: AppState,
    session_id: str,
    trainee_id: str,
    acting_role,
    now: Optional[datetime] = None,
) -> Result:
    """
    Book the trainee into the session, or cancel their existing record.
    Mutates `state` only on success.
    """
    now = now or datetime.now().astimezone()
    role = Role(acting_role)
    try:
        session = SessionRegistry(state).get(session_id)
        existing = state.find_record(session_id, trainee_id)
        if existing:
            return _cancel(state, session, existing, now)
        return _book(state, session, trainee_id, role, now)
    except AttendanceError as e:
        log.info(f"[attendance] {trainee_id}@{session_id} rejected: {e.tag} {e.message}")
        return Result.fail(e)


def check_in(
    state: AppState,
    session_id: str,
    trainee_id: str,
    acting_role,
    now: Optional[datetime] = None,
) -> Result:
    """
    Staff manual check-in: the trainee ends up ATTENDED.
    An existing BOOKED or WAITLISTED record is upgraded without a new charge.
    A walk-in with no record is charged 1 credit and capacity does not apply.
    Unmarking goes through toggle_attendance.
    """
    now = now or datetime.now().astimezone()
    role = Role(acting_role)
    try:
        if not is_staff(role):
            raise InvalidUserError("Only staff can mark attendance.")
        session = SessionRegistry(state).get(session_id)
        existing = state.find_record(session_id, trainee_id)
        if existing:
            existing.status = ATTENDED
            log.info(f"[attendance] {trainee_id} checked in to {session.id} (existing {existing.id})")
            return Result.ok("Attendance marked manually.", outcome=ATTENDED, recordId=existing.id)

        wallet = _chargeable_wallet(state, trainee_id)
        record = AttendanceRecord(
            id=new_id(),
            class_id=session.id,
            trainee_id=trainee_id,
            timestamp=epoch_ms(now),
            method="MANUAL",
            status=ATTENDED,
        )
        state.attendance.append(record)
        wallet.debit(trainee_id, CREDITS_PER_BOOKING)
        log.info(f"[attendance] {trainee_id} walked in to {session.id}")
        return Result.ok("Attendance marked manually.", outcome=ATTENDED, recordId=record.id)
    except AttendanceError as e:
        log.info(f"[attendance] check-in {trainee_id}@{session_id} rejected: {e.tag} {e.message}")
        return Result.fail(e)
