# attendease/errors.py
"""
errors.py
────────────────────────────────────────────
Error taxonomy for the booking core.

Core modules raise these; the attendance engine and the routers turn
them into a tagged Result so nothing crosses the boundary as an exception.
────────────────────────────────────────────
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


class AttendanceError(Exception):
    """Base class for recoverable booking/catalog errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def tag(self) -> str:
        return type(self).__name__


class DuplicateSessionError(AttendanceError):
    """Session name/date/time collides with another session."""


class CancellationLockedError(AttendanceError):
    """Cancel attempted inside the lock window (or after the start)."""


class InsufficientCreditsError(AttendanceError):
    """Booking attempted with a balance below one credit."""


class InvalidUserError(AttendanceError):
    """Target identity missing or not a trainee."""


class UserNotFoundError(AttendanceError):
    """Referenced user/session id does not exist."""


class StorageUnavailableError(Exception):
    """Persistence backend could not be reached (file, SQL or remote)."""


# HTTP status per error tag (used by the routers)
ERROR_STATUS = {
    "DuplicateSessionError": 409,
    "CancellationLockedError": 423,
    "InsufficientCreditsError": 402,
    "InvalidUserError": 400,
    "UserNotFoundError": 404,
}


@dataclass
class Result:
    success: bool
    message: str
    error: Optional[str] = None
    outcome: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str, outcome: Optional[str] = None, **data) -> "Result":
        return cls(success=True, message=message, outcome=outcome, data=data)

    @classmethod
    def fail(cls, exc: AttendanceError) -> "Result":
        return cls(success=False, message=exc.message, error=exc.tag)

    @property
    def http_status(self) -> int:
        if self.success:
            return 200
        return ERROR_STATUS.get(self.error or "", 400)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"success": self.success, "message": self.message}
        if self.error:
            out["error"] = self.error
        if self.outcome:
            out["outcome"] = self.outcome
        out.update(self.data)
        return out
