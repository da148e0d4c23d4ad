# attendease/sessions.py
from __future__ import annotations

import logging
import re
from datetime import date, datetime, time
from typing import Optional

from .errors import DuplicateSessionError, UserNotFoundError
from .logic_models import AppState, ClassSession, Role

log = logging.getLogger(__name__)

# ──────────────────────────────────────────────────────────────────────────────
# Utilities
# ──────────────────────────────────────────────────────────────────────────────

def parse_time_hhmm(s: str) -> time:
    """
    Accepts '09:00', '9:00', '9am', '9:30pm', '09h00', '10h' and returns time(HH:MM).
    """
    t = (s or "").strip().lower()
    # 08h30 / 8h
    m = re.fullmatch(r"(\d{1,2})h(\d{2})?", t)
    if m:
        return time(int(m.group(1)), int(m.group(2) or 0))
    # 9am / 9:30pm
    m = re.fullmatch(r"(\d{1,2})(?::(\d{2}))?\s*(am|pm)", t)
    if m:
        hh = int(m.group(1))
        mm = int(m.group(2) or 0)
        ap = m.group(3)
        if ap == "pm" and hh != 12:
            hh += 12
        if ap == "am" and hh == 12:
            hh = 0
        return time(hh, mm)
    # 09:00 / 09:00:00
    m = re.fullmatch(r"(\d{1,2}):(\d{2})(?::\d{2})?", t)
    if m:
        return time(int(m.group(1)), int(m.group(2)))
    raise ValueError(f"Unrecognised time: {s}")


def parse_date(s: str) -> date:
    try:
        return date.fromisoformat((s or "").strip())
    except ValueError:
        raise ValueError(f"Unrecognised date: {s}")


def start_of(session: ClassSession) -> datetime:
    """Session start as a naive local wall-clock datetime."""
    return datetime.combine(parse_date(session.date), parse_time_hhmm(session.time))


def _session_key(session: ClassSession):
    return (
        session.name.strip().lower(),
        session.date.strip(),
        parse_time_hhmm(session.time).strftime("%H:%M"),
    )

# ──────────────────────────────────────────────────────────────────────────────
# Registry
# ──────────────────────────────────────────────────────────────────────────────

class SessionRegistry:
    """Owns class sessions and their (name, date, time) uniqueness."""

    def __init__(self, state: AppState):
        self.state = state

    def get(self, session_id: str) -> ClassSession:
        found = self.state.find_class(session_id)
        if not found:
            raise UserNotFoundError("Class session not found.")
        return found

    def _normalise(self, session: ClassSession) -> None:
        session.name = session.name.strip()
        session.date = parse_date(session.date).isoformat()
        session.time = parse_time_hhmm(session.time).strftime("%H:%M")
        if session.max_capacity is not None and session.max_capacity < 1:
            raise ValueError("maxCapacity must be at least 1")

    def _check_unique(self, session: ClassSession, exclude_id: Optional[str] = None) -> None:
        key = _session_key(session)
        for other in self.state.classes:
            if other.id == exclude_id:
                continue
            if _session_key(other) == key:
                raise DuplicateSessionError(
                    "A session with this name, date, and time already exists."
                )

    def create(self, session: ClassSession) -> ClassSession:
        self._normalise(session)
        self._check_unique(session)
        self.state.classes.insert(0, session)
        log.info(f"[sessions] created {session.id} '{session.name}' {session.date} {session.time}")
        return session

    def update(self, session: ClassSession) -> ClassSession:
        idx = next((i for i, c in enumerate(self.state.classes) if c.id == session.id), None)
        if idx is None:
            raise UserNotFoundError("Class session not found.")
        self._normalise(session)
        self._check_unique(session, exclude_id=session.id)
        self.state.classes[idx] = session
        log.info(f"[sessions] updated {session.id}")
        return session

    def delete(self, session_id: str) -> int:
        """
        Remove the session and every attendance record for it.
        Spent credits are not refunded. Returns the number of records dropped.
        """
        self.get(session_id)
        self.state.classes = [c for c in self.state.classes if c.id != session_id]
        before = len(self.state.attendance)
        self.state.attendance = [a for a in self.state.attendance if a.class_id != session_id]
        dropped = before - len(self.state.attendance)
        log.info(f"[sessions] deleted {session_id}, dropped {dropped} attendance record(s)")
        return dropped


def can_manage(session: ClassSession, acting_role, acting_user_id: Optional[str]) -> bool:
    """Admins manage every session; a trainer only the sessions they own."""
    role = Role(acting_role)
    if role == Role.ADMIN:
        return True
    return role == Role.TRAINER and bool(acting_user_id) and session.trainer_id == acting_user_id
