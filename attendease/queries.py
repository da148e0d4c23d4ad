# attendease/queries.py
"""
Read-only views over an AppState for the schedule, history and admin screens.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from .attendance import minutes_until_start, seats_taken
from .logic_models import AppState, ClassSession, WAITLISTED
from .sessions import SessionRegistry, start_of
from .settings import CANCEL_LOCK_MINUTES
from .utils import to_local_naive


def can_cancel(session: ClassSession, now: Optional[datetime] = None) -> bool:
    return minutes_until_start(session, to_local_naive(now)) > CANCEL_LOCK_MINUTES


# 🟢 Schedule

def upcoming_sessions(state: AppState, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """Sessions that have not started yet, soonest first, with seat counts."""
    local_now = to_local_naive(now)
    upcoming = [c for c in state.classes if start_of(c) >= local_now]
    upcoming.sort(key=start_of)
    out = []
    for c in upcoming:
        taken = seats_taken(state, c.id)
        out.append({
            **c.to_dict(),
            "booked": taken,
            "available": None if c.max_capacity is None else max(0, c.max_capacity - taken),
            "cancellable": can_cancel(c, local_now),
        })
    return out


# 🔵 Attendance & participation

def roster(state: AppState, session_id: str) -> Dict[str, Any]:
    """Seat holders in booking order, then the waitlist in queue order."""
    session = SessionRegistry(state).get(session_id)
    records = sorted(state.records_for(session_id), key=lambda a: a.timestamp)

    def _row(a):
        user = state.find_user(a.trainee_id)
        return {**a.to_dict(), "name": user.name if user else "Unknown"}

    return {
        "session": session.to_dict(),
        "booked": [_row(a) for a in records if a.holds_seat],
        "waitlist": [_row(a) for a in records if a.status == WAITLISTED],
    }


def trainee_history(state: AppState, trainee_id: str) -> List[Dict[str, Any]]:
    """A trainee's attendance records, newest first, joined with their session."""
    rows = []
    for a in sorted(
        (a for a in state.attendance if a.trainee_id == trainee_id),
        key=lambda a: a.timestamp,
        reverse=True,
    ):
        session = state.find_class(a.class_id)
        rows.append({**a.to_dict(), "session": session.to_dict() if session else None})
    return rows


def bookings_per_session(state: AppState) -> List[Dict[str, Any]]:
    """Record counts per session for the admin chart."""
    return [
        {"id": c.id, "name": c.name, "bookings": len(state.records_for(c.id))}
        for c in state.classes
    ]


# 🟣 Payments

def trainee_payments(state: AppState, trainee_id: str) -> List[Dict[str, Any]]:
    return [
        p.to_dict()
        for p in sorted(state.payments, key=lambda p: p.timestamp, reverse=True)
        if p.trainee_id == trainee_id
    ]
