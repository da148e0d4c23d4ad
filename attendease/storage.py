# attendease/storage.py
"""
storage.py
────────────────────────────────────────────
Whole-document persistence for the AppState.

The JSON document (users / classes / attendance / payments / packages)
is the unit of durability; every save writes all of it.

 • file   → JsonFileStore        (DATA_FILE)
 • sql    → SqlSnapshotStore     (DATABASE_URL, table app_snapshots)
 • remote → RemoteSnapshotStore  (REMOTE_DATA_URL, GET / PUT)

All backends raise StorageUnavailableError when they cannot read or write.
────────────────────────────────────────────
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from typing import Any, Dict, Optional

import requests
from sqlalchemy.exc import SQLAlchemyError

from .config import (
    DATA_FILE,
    REMOTE_DATA_URL,
    REMOTE_TIMEOUT,
    STORAGE_BACKEND,
    STORAGE_MAX_RETRIES,
)
from .errors import StorageUnavailableError
from .logic_models import AppState, CreditPackage
from .settings import DEFAULT_PACKAGES

log = logging.getLogger(__name__)


def initial_state() -> AppState:
    """Empty studio with the default credit packages."""
    return AppState(packages=[CreditPackage.from_dict(p) for p in DEFAULT_PACKAGES])


# ─────────────────────────────────────────────────────────────
# File
# ─────────────────────────────────────────────────────────────
class JsonFileStore:
    def __init__(self, path: str = DATA_FILE):
        self.path = path

    def load(self) -> AppState:
        if not os.path.exists(self.path):
            state = initial_state()
            self.save(state)
            log.info(f"[storage] initialised {self.path}")
            return state
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return AppState.from_dict(json.load(f))
        except (OSError, ValueError) as e:
            log.error(f"[storage] read failed {self.path}: {e}")
            raise StorageUnavailableError(f"DB Read Error: {e}") from e

    def save(self, state: AppState) -> None:
        folder = os.path.dirname(os.path.abspath(self.path))
        try:
            fd, tmp = tempfile.mkstemp(dir=folder, prefix=".db-", suffix=".json")
        except OSError as e:
            log.error(f"[storage] write failed {self.path}: {e}")
            raise StorageUnavailableError(f"DB Write Error: {e}") from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(state.to_dict(), f, indent=2)
            os.replace(tmp, self.path)
        except (OSError, TypeError, ValueError) as e:
            log.error(f"[storage] write failed {self.path}: {e}")
            try:
                os.unlink(tmp)
            except FileNotFoundError:
                pass
            raise StorageUnavailableError(f"DB Write Error: {e}") from e


# ─────────────────────────────────────────────────────────────
# SQL (SQLAlchemy)
# ─────────────────────────────────────────────────────────────
class SqlSnapshotStore:
    def __init__(self, url: Optional[str] = None, name: str = "default"):
        from .db import init_db

        self.name = name
        try:
            init_db(url)
        except SQLAlchemyError as e:
            raise StorageUnavailableError(f"Database unreachable: {e}") from e

    def load(self) -> AppState:
        from .db import get_session
        from .models import AppSnapshot

        try:
            with get_session() as s:
                row = s.query(AppSnapshot).filter_by(name=self.name).first()
                document = row.document if row else None
        except SQLAlchemyError as e:
            log.error(f"[storage] SQL load failed: {e}")
            raise StorageUnavailableError(f"Database unreachable: {e}") from e
        if document is None:
            return initial_state()
        return AppState.from_dict(json.loads(document))

    def save(self, state: AppState) -> None:
        from .db import get_session
        from .models import AppSnapshot

        document = json.dumps(state.to_dict())
        try:
            with get_session() as s:
                row = s.query(AppSnapshot).filter_by(name=self.name).first()
                if row:
                    row.document = document
                else:
                    s.add(AppSnapshot(name=self.name, document=document))
        except SQLAlchemyError as e:
            log.error(f"[storage] SQL save failed: {e}")
            raise StorageUnavailableError(f"Database unreachable: {e}") from e


# ─────────────────────────────────────────────────────────────
# Remote (HTTP)
# ─────────────────────────────────────────────────────────────
class RemoteSnapshotStore:
    """GET loads the document, PUT replaces it. 5xx and network errors are retried."""

    def __init__(
        self,
        url: str = REMOTE_DATA_URL,
        timeout: float = REMOTE_TIMEOUT,
        max_retries: int = STORAGE_MAX_RETRIES,
        backoff: float = 1.0,
    ):
        if not url:
            raise StorageUnavailableError("Missing REMOTE_DATA_URL")
        self.url = url
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff = backoff

    def _request(self, method: str, payload: Optional[Dict[str, Any]] = None) -> requests.Response:
        retries = 0
        while True:
            try:
                resp = requests.request(method, self.url, json=payload, timeout=self.timeout)
                if resp.status_code < 500:
                    return resp
                log.warning(f"[storage] remote {method} → {resp.status_code}")
            except requests.exceptions.RequestException as e:
                log.warning(f"[storage] remote {method} network error: {e}")

            if retries >= self.max_retries:
                break
            retries += 1
            wait_time = self.backoff * 2 ** retries
            log.warning(f"[storage] retrying in {wait_time}s ({retries}/{self.max_retries})")
            time.sleep(wait_time)

        raise StorageUnavailableError("Storage unreachable after retries.")

    def load(self) -> AppState:
        resp = self._request("GET")
        if resp.status_code == 404:
            return initial_state()
        if not resp.ok:
            raise StorageUnavailableError(f"Remote load failed: HTTP {resp.status_code}")
        try:
            return AppState.from_dict(resp.json())
        except ValueError as e:
            raise StorageUnavailableError(f"Remote document unreadable: {e}") from e

    def save(self, state: AppState) -> None:
        resp = self._request("PUT", state.to_dict())
        if not resp.ok:
            raise StorageUnavailableError(f"Remote save failed: HTTP {resp.status_code}")


def make_store(backend: str = STORAGE_BACKEND):
    if backend == "file":
        return JsonFileStore()
    if backend == "sql":
        return SqlSnapshotStore()
    if backend == "remote":
        return RemoteSnapshotStore()
    raise ValueError(f"Unknown STORAGE_BACKEND: {backend}")
