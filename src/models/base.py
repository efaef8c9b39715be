"""SQLAlchemy declarative base with common mixins."""
from datetime import UTC, datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from uuid6 import uuid7


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def _utcnow() -> datetime:
    return datetime.now(UTC)


class UUIDv7Mixin:
    """
    Mixin that adds a store-assigned UUIDv7 string primary key.

    UUIDv7 is time-ordered, so ids generated later sort after earlier ones.
    This makes the id a stable tie-breaker for created_at ordering.
    """

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid7()),
    )


class TimestampMixin:
    """
    Mixin that adds a created_at column.

    All timestamps are timezone-aware. The application-side default keeps
    sub-second precision on backends whose CURRENT_TIMESTAMP is second-granular.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,  # Index for "newest first" loads
    )
