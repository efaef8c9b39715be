"""
Best-effort mirror of the session's bookmarks to the remote document store.

The mirror is read once at startup. After that every write is dispatched as a
background task whose outcome is only logged: local state is the source of
truth for the running session and is never rolled back.
"""
import asyncio
import logging
from collections.abc import Coroutine, Mapping
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from uuid6 import uuid7

from models.bookmark import DEFAULT_COLLECTION, BookmarkDocument
from services.blob_storage import BlobStorage, ImageUpload
from services.exceptions import RemoteLoadError
from services.local_store import Bookmark
from services.video import VideoProvider

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # Some backends (SQLite) hand back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _as_provider(value: str | None) -> VideoProvider | None:
    if not value:
        return None
    try:
        return VideoProvider(value)
    except ValueError:
        return VideoProvider.OTHER


def document_to_bookmark(document: BookmarkDocument) -> Bookmark:
    """Convert a stored document into an in-memory bookmark."""
    return Bookmark(
        id=document.id,
        title=document.title,
        description=document.description,
        image=document.image,
        domain=document.domain,
        url=document.url,
        category=document.category,
        collection=(document.collection or "").strip() or DEFAULT_COLLECTION,
        is_favorite=document.is_favorite,
        is_archived=document.is_archived,
        created_at=_as_utc(document.created_at),
        is_video=document.is_video,
        video_provider=_as_provider(document.video_provider),
        video_id=document.video_id,
    )


def _column_values(values: Mapping[str, Any]) -> dict[str, Any]:
    return {
        key: str(value) if isinstance(value, VideoProvider) else value
        for key, value in values.items()
    }


class RemoteMirror:
    """Document store and blob storage collaborators for one session."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        blob_storage: BlobStorage,
    ) -> None:
        self._session_factory = session_factory
        self.blob_storage = blob_storage
        self._background_tasks: set[asyncio.Task[None]] = set()

    @staticmethod
    def new_document_id() -> str:
        """Allocate a store key for a bookmark about to be written."""
        return str(uuid7())

    @property
    def pending_writes(self) -> int:
        """Number of dispatched writes that have not finished yet."""
        return len(self._background_tasks)

    async def load_bookmarks(self) -> list[Bookmark]:
        """
        Read every bookmark document, newest first.

        Raises:
            RemoteLoadError: If the document store cannot be read.
        """
        query = select(BookmarkDocument).order_by(
            BookmarkDocument.created_at.desc(),
            BookmarkDocument.id.desc(),
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                documents = result.scalars().all()
        except (SQLAlchemyError, OSError) as e:
            # Refused connections surface as raw OSError from the driver
            raise RemoteLoadError(f"Failed to load bookmarks: {e}") from e
        logger.info("Loaded %d bookmarks from the document store", len(documents))
        return [document_to_bookmark(document) for document in documents]

    async def upload_image(self, image: ImageUpload) -> str:
        """Upload an image to blob storage and return its public URL."""
        return await self.blob_storage.upload_image(image)

    async def write_bookmark(self, bookmark: Bookmark) -> None:
        """Insert the document for a new bookmark. created_at is assigned by the store."""
        document = BookmarkDocument(
            id=bookmark.id,
            **_column_values({
                "title": bookmark.title,
                "description": bookmark.description,
                "image": bookmark.image,
                "url": bookmark.url,
                "domain": bookmark.domain,
                "category": bookmark.category,
                "collection": bookmark.collection,
                "is_favorite": bookmark.is_favorite,
                "is_archived": bookmark.is_archived,
                "is_video": bookmark.is_video,
                "video_provider": bookmark.video_provider,
                "video_id": bookmark.video_id,
            }),
        )
        async with self._session_factory() as session:
            session.add(document)
            await session.commit()

    async def update_bookmark(self, bookmark_id: str, changes: Mapping[str, Any]) -> None:
        """Apply changed fields to the matching document (no-op if it is missing)."""
        async with self._session_factory() as session:
            await session.execute(
                update(BookmarkDocument)
                .where(BookmarkDocument.id == bookmark_id)
                .values(**_column_values(changes)),
            )
            await session.commit()

    async def delete_bookmark(self, bookmark_id: str) -> None:
        """Delete the matching document (no-op if it is missing)."""
        async with self._session_factory() as session:
            await session.execute(
                delete(BookmarkDocument).where(BookmarkDocument.id == bookmark_id),
            )
            await session.commit()

    async def ping(self) -> bool:
        """Check that the document store answers."""
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError):
            logger.exception("Document store health check failed")
            return False
        return True

    def dispatch(self, operation: Coroutine[Any, Any, None], description: str) -> asyncio.Task[None]:
        """
        Run a remote write in the background (fire-and-forget - don't await).

        The caller's local mutation has already been applied; failures are
        logged and dropped.
        """
        task = asyncio.create_task(self._run_best_effort(operation, description))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for every dispatched write to finish (used at shutdown and in tests)."""
        while self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)

    async def _run_best_effort(
        self,
        operation: Coroutine[Any, Any, None],
        description: str,
    ) -> None:
        try:
            await operation
        except Exception as e:
            # Log but don't fail - remote writes are best-effort
            logger.warning("Remote %s failed: %s", description, e)
