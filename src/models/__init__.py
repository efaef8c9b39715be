"""SQLAlchemy models."""
from models.base import Base, TimestampMixin, UUIDv7Mixin
from models.bookmark import DEFAULT_COLLECTION, BookmarkDocument

__all__ = [
    "DEFAULT_COLLECTION",
    "Base",
    "BookmarkDocument",
    "TimestampMixin",
    "UUIDv7Mixin",
]
