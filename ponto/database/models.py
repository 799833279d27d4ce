"""SQLAlchemy database models for ponto."""

from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, JSON

from ponto.database.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentDB(Base):
    """One document of the remote document store.

    `collection_id` is the full document key (see ponto.storage.keys).
    """

    __tablename__ = "documents"

    collection_id = Column(String, primary_key=True)
    data = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, nullable=False, default=_utcnow)
    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)
