# attendease/utils.py
from __future__ import annotations
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from .config import TZ_NAME


def studio_tz() -> Optional[ZoneInfo]:
    """Configured studio zone, or None for the host's local zone."""
    return ZoneInfo(TZ_NAME) if TZ_NAME else None


def to_local_naive(now: Optional[datetime] = None) -> datetime:
    """
    Studio wall-clock time without tzinfo.
    Aware datetimes are converted to the studio zone first; naive ones are taken as local already.
    """
    tz = studio_tz()
    if now is None:
        return datetime.now(tz).replace(tzinfo=None)
    if now.tzinfo is not None:
        # astimezone(None) lands in the host's local zone
        return now.astimezone(tz).replace(tzinfo=None)
    return now


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()
