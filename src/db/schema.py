"""Database tables / schema"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBDocument(Base):
    """One row per top-level document, e.g. key 'games/abc'. Deeper paths live inside the JSON value."""

    __tablename__ = "documents"
    key: Mapped[str] = mapped_column(primary_key=True)
    collection: Mapped[str] = mapped_column(index=True)
    value: Mapped[Any] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)


class DBLocalItem(Base):
    """Durable key/value pairs that only this client uses (e.g. the last joined game)."""

    __tablename__ = "local_storage"
    key: Mapped[str] = mapped_column(primary_key=True)
    value: Mapped[str]
