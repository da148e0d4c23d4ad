# attendease/db.py
import logging
from contextlib import contextmanager
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base

from .config import DATABASE_URL

log = logging.getLogger(__name__)

Base = declarative_base()

_engine = None
SessionLocal = None


# ── Database config ──────────────────────────────
def init_db(url: Optional[str] = None):
    """Create the engine/session factory once and make sure tables exist."""
    global _engine, SessionLocal
    if _engine is not None and url is None:
        return _engine

    from . import models  # noqa: F401  (registers tables on Base)

    _engine = create_engine(url or DATABASE_URL, pool_pre_ping=True, future=True)
    SessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=_engine,
        future=True,
    )
    Base.metadata.create_all(bind=_engine)
    with _engine.connect() as c:
        c.execute(text("SELECT 1"))
    log.info("[DB] ready")
    return _engine


# ── Context managers ─────────────────────────────
@contextmanager
def get_session():
    """Provide a transactional scope around a series of operations."""
    if SessionLocal is None:
        init_db()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
