"""Bookmark document model for the remote document store."""
from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin, UUIDv7Mixin

DEFAULT_COLLECTION = "General"


class BookmarkDocument(Base, UUIDv7Mixin, TimestampMixin):
    """
    Remote copy of a bookmark.

    The document store is an advisory mirror of the session's in-memory
    bookmarks: it is read once at startup and written best-effort afterwards.
    Column names match the in-memory Bookmark fields one to one so partial
    updates can be applied without translation.
    """

    __tablename__ = "bookmarks"

    # id provided by UUIDv7Mixin, created_at by TimestampMixin
    title: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image: Mapped[str] = mapped_column(Text, nullable=False, default="")
    url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    domain: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    collection: Mapped[str] = mapped_column(
        String(100), nullable=False, default=DEFAULT_COLLECTION, index=True,
    )
    is_favorite: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Video classification (absent for ordinary links)
    is_video: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    video_provider: Mapped[str | None] = mapped_column(String(20), nullable=True)
    video_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
