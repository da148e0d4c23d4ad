# attendease/users.py
"""
Identity lookups and admin user edits.
Passwords are stored and compared in plaintext, as the app always has.
"""

from __future__ import annotations

import logging
from typing import Optional

from .errors import UserNotFoundError
from .logic_models import AppState, Role, User
from .utils import normalize_email

log = logging.getLogger(__name__)


def find_user_by_email_password(state: AppState, email: str, password: str) -> Optional[User]:
    wanted = normalize_email(email)
    for u in state.users:
        if normalize_email(u.email) == wanted and u.password == password:
            return u
    return None


def find_user_by_email_phone(state: AppState, email: str, phone: str) -> Optional[User]:
    wanted = normalize_email(email)
    for u in state.users:
        if normalize_email(u.email) == wanted and (u.phone_number or "") == (phone or ""):
            return u
    return None


def reset_password(state: AppState, email: str, phone: str, new_password: str) -> bool:
    user = find_user_by_email_phone(state, email, phone)
    if not user:
        return False
    user.password = new_password
    log.info(f"[users] password reset for {user.id}")
    return True


def _prepare(user: User) -> User:
    if user.role == Role.TRAINEE:
        user.credits = user.credits or 0
        if user.credits < 0:
            raise ValueError("Credits cannot be negative.")
    else:
        user.credits = None
    return user


def _check_email_free(state: AppState, email: str, exclude_id: Optional[str] = None) -> None:
    wanted = normalize_email(email)
    if any(u.id != exclude_id and normalize_email(u.email) == wanted for u in state.users):
        raise ValueError(f"Email already registered: {email}")


def add_user(state: AppState, user: User) -> User:
    _check_email_free(state, user.email)
    state.users.append(_prepare(user))
    log.info(f"[users] added {user.id} ({user.role.value})")
    return user


def update_user(state: AppState, user: User) -> User:
    """Replace by id. Admin credit edits go through here; negatives are rejected."""
    idx = next((i for i, u in enumerate(state.users) if u.id == user.id), None)
    if idx is None:
        raise UserNotFoundError("User not found.")
    _check_email_free(state, user.email, exclude_id=user.id)
    state.users[idx] = _prepare(user)
    log.info(f"[users] updated {user.id}")
    return user
