# attendease/studio.py
"""
studio.py
────────────────────────────────────────────
StudioService: the live AppState plus its store.

Every write runs under one lock as read-copy-modify-replace:
 1. deep-copy the current state
 2. run the core operation on the copy
 3. on success swap the copy in and save the whole document

A failed operation leaves the live state untouched. A failed save keeps
the new state in memory and raises the sync_pending flag until
retry_sync() gets the document written.
────────────────────────────────────────────
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from . import catalog, users
from .attendance import check_in, fill_from_waitlist, toggle_attendance
from .errors import AttendanceError, DuplicateSessionError, Result, StorageUnavailableError
from .logic_models import ATTENDED, BOOKED, WAITLISTED, AppState, ClassSession, CreditPackage, User
from .purchases import PurchaseProcessor, purchase
from .sessions import SessionRegistry
from .utils import normalize_email

log = logging.getLogger(__name__)


def validate_document(state: AppState) -> None:
    """
    Check an incoming document before it replaces the live state.
    Sessions are normalised in place. Raises ValueError on the first problem.
    """
    registry = SessionRegistry(state)
    for session in state.classes:
        registry._normalise(session)
    for session in state.classes:
        try:
            registry._check_unique(session, exclude_id=session.id)
        except DuplicateSessionError as e:
            raise ValueError(e.message) from e
    if len({c.id for c in state.classes}) != len(state.classes):
        raise ValueError("Duplicate class session id.")

    emails = set()
    for user in state.users:
        email = normalize_email(user.email)
        if email and email in emails:
            raise ValueError(f"Email already registered: {user.email}")
        emails.add(email)
        if user.is_trainee and user.credits < 0:
            raise ValueError(f"Credits cannot be negative for {user.id}.")

    pairs = set()
    for record in state.attendance:
        if not state.find_class(record.class_id):
            raise ValueError(f"Attendance {record.id} points at unknown session {record.class_id}.")
        if record.status not in (BOOKED, ATTENDED, WAITLISTED):
            raise ValueError(f"Attendance {record.id} has unknown status {record.status}.")
        pair = (record.class_id, record.trainee_id)
        if pair in pairs:
            raise ValueError(f"More than one record for {record.trainee_id} in {record.class_id}.")
        pairs.add(pair)


class StudioService:
    def __init__(self, store, state: Optional[AppState] = None, processor: Optional[PurchaseProcessor] = None):
        self.store = store
        self.state = state if state is not None else store.load()
        self.processor = processor or PurchaseProcessor()
        self.sync_pending = False
        self._lock = threading.RLock()

    # ── Internals ────────────────────────────────────────────
    def _commit(self, result: Result) -> None:
        try:
            self.store.save(self.state)
            self.sync_pending = False
        except StorageUnavailableError as e:
            self.sync_pending = True
            result.data["syncPending"] = True
            log.error(f"[studio] save failed, kept in memory: {e}")

    def _mutate(self, fn: Callable[[AppState], Result]) -> Result:
        with self._lock:
            work = self.state.copy()
            try:
                result = fn(work)
            except AttendanceError as e:
                return Result.fail(e)
            if not result.success:
                return result
            self.state = work
            self._commit(result)
            return result

    def snapshot(self) -> AppState:
        with self._lock:
            return self.state.copy()

    def retry_sync(self) -> bool:
        """Write the current document again. True once storage has it."""
        with self._lock:
            try:
                self.store.save(self.state)
            except StorageUnavailableError as e:
                log.warning(f"[studio] sync retry failed: {e}")
                self.sync_pending = True
                return False
            self.sync_pending = False
            return True

    def reload(self) -> None:
        with self._lock:
            self.state = self.store.load()
            self.sync_pending = False

    # ── Attendance ───────────────────────────────────────────
    def toggle_attendance(self, session_id: str, trainee_id: str, acting_role, now: Optional[datetime] = None) -> Result:
        return self._mutate(lambda st: toggle_attendance(st, session_id, trainee_id, acting_role, now))

    def check_in(self, session_id: str, trainee_id: str, acting_role, now: Optional[datetime] = None) -> Result:
        return self._mutate(lambda st: check_in(st, session_id, trainee_id, acting_role, now))

    # ── Sessions ─────────────────────────────────────────────
    def create_session(self, session: ClassSession) -> Result:
        def _do(st: AppState) -> Result:
            created = SessionRegistry(st).create(session)
            return Result.ok("Session created.", session=created.to_dict())
        return self._mutate(_do)

    def update_session(self, session: ClassSession) -> Result:
        def _do(st: AppState) -> Result:
            updated = SessionRegistry(st).update(session)
            promoted = fill_from_waitlist(st, updated)
            return Result.ok(
                "Session updated.",
                session=updated.to_dict(),
                promotedTraineeIds=[a.trainee_id for a in promoted],
            )
        return self._mutate(_do)

    def delete_session(self, session_id: str) -> Result:
        def _do(st: AppState) -> Result:
            dropped = SessionRegistry(st).delete(session_id)
            return Result.ok("Session deleted.", droppedRecords=dropped)
        return self._mutate(_do)

    # ── Purchases ────────────────────────────────────────────
    def purchase(self, trainee_id: str, package_id: str, now: Optional[datetime] = None) -> Result:
        def _do(st: AppState) -> Result:
            pkg = catalog.get_package(st, package_id)
            payment = purchase(st, trainee_id, pkg, now)
            return Result.ok(
                "Credits have been added to your wallet.",
                outcome="PURCHASED",
                payment=payment.to_dict(),
                credits=st.find_user(trainee_id).credits,
            )
        return self._mutate(_do)

    def purchase_async(
        self,
        trainee_id: str,
        package_id: str,
        on_done: Optional[Callable[[Future], None]] = None,
    ) -> Future:
        """Settle after the simulated gateway delay; the Future resolves to the Result."""
        return self.processor.purchase_async(lambda: self.purchase(trainee_id, package_id), on_done)

    # ── Users ────────────────────────────────────────────────
    def login(self, email: str, password: str) -> Optional[User]:
        with self._lock:
            return users.find_user_by_email_password(self.state, email, password)

    def reset_password(self, email: str, phone: str, new_password: str) -> Result:
        def _do(st: AppState) -> Result:
            if not users.reset_password(st, email, phone, new_password):
                return Result(success=False, message="No account matches that email and phone.", error="UserNotFoundError")
            return Result.ok("Password updated.")
        return self._mutate(_do)

    def add_user(self, user: User) -> Result:
        def _do(st: AppState) -> Result:
            return Result.ok("User added.", user=users.add_user(st, user).to_dict())
        return self._mutate(_do)

    def update_user(self, user: User) -> Result:
        def _do(st: AppState) -> Result:
            return Result.ok("User updated.", user=users.update_user(st, user).to_dict())
        return self._mutate(_do)

    # ── Packages ─────────────────────────────────────────────
    def add_package(self, pkg: CreditPackage) -> Result:
        return self._mutate(lambda st: Result.ok("Package added.", package=catalog.add_package(st, pkg).to_dict()))

    def update_package(self, pkg: CreditPackage) -> Result:
        return self._mutate(lambda st: Result.ok("Package updated.", package=catalog.update_package(st, pkg).to_dict()))

    def delete_package(self, package_id: str) -> Result:
        def _do(st: AppState) -> Result:
            catalog.delete_package(st, package_id)
            return Result.ok("Package deleted.")
        return self._mutate(_do)

    # ── Whole document ───────────────────────────────────────
    def replace_document(self, document: Dict[str, Any]) -> Result:
        """Swap in a whole document. Raises ValueError when it breaks an invariant."""
        new_state = AppState.from_dict(document)
        validate_document(new_state)
        with self._lock:
            self.state = new_state
            result = Result.ok("Document replaced.")
            self._commit(result)
            return result
