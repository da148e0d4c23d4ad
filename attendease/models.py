# attendease/models.py
from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from .db import Base


class AppSnapshot(Base):
    """One row per named document; the whole AppState lives in `document` as JSON."""
    __tablename__ = "app_snapshots"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(64), unique=True, nullable=False, default="default")
    document = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
