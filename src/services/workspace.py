"""
Session workspace: canonical in-memory state plus optional remote mirroring.

Every mutation is two-phase. The local store is changed synchronously and the
result returned to the caller; when a remote mirror is attached, the same
change is then dispatched to it in the background and never awaited here.
"""
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import asdict, replace
from typing import Any

from models.bookmark import DEFAULT_COLLECTION
from services.blob_storage import ImageUpload
from services.exceptions import RemoteLoadError
from services.local_store import (
    DEFAULT_CATEGORIES,
    Bookmark,
    BookmarkDraft,
    BookmarkStore,
    NameSet,
    PasswordEntry,
    PasswordStore,
    TimestampIdGenerator,
)
from services.remote_mirror import RemoteMirror
from services.view_state import Tab, ViewState

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Could not load your bookmarks. Showing an empty library for this session."


def _changed_fields(before: Bookmark, after: Bookmark) -> dict[str, Any]:
    old = asdict(before)
    return {key: value for key, value in asdict(after).items() if old[key] != value}


class Workspace:
    """Bookmarks, passwords, categories, collections and view state for one session."""

    def __init__(
        self,
        mirror: RemoteMirror | None = None,
        categories: Iterable[str] = DEFAULT_CATEGORIES,
    ) -> None:
        id_factory = TimestampIdGenerator()
        self.bookmarks = BookmarkStore(id_factory=id_factory)
        self.passwords = PasswordStore(id_factory=id_factory)
        self.categories = NameSet(categories)
        self.collections = NameSet(protected=(DEFAULT_COLLECTION,))
        self.view = ViewState()
        self.mirror = mirror
        self.load_error: str | None = None
        self._loaded = False

    # -------------------------------------------------------------------------
    # Startup
    # -------------------------------------------------------------------------

    async def load_remote(self) -> None:
        """
        Populate the bookmark store from the remote mirror, once.

        A failed load is not retried: it records a user-visible banner message
        and leaves the store empty.
        """
        if self.mirror is None or self._loaded:
            return
        self._loaded = True
        try:
            bookmarks = await self.mirror.load_bookmarks()
        except RemoteLoadError:
            logger.exception("Initial bookmark load failed")
            self.load_error = LOAD_ERROR_MESSAGE
            return

        self.bookmarks.replace_all(bookmarks)
        for bookmark in bookmarks:
            # Stored documents may carry blank names
            if bookmark.category.strip():
                self.categories.add(bookmark.category)
            if bookmark.collection.strip():
                self.collections.add(bookmark.collection)

    # -------------------------------------------------------------------------
    # Bookmarks
    # -------------------------------------------------------------------------

    async def add_bookmark(
        self,
        draft: BookmarkDraft,
        image: ImageUpload | None = None,
    ) -> Bookmark:
        """
        Add a bookmark from a preview or an uploaded image.

        An attached image is uploaded before anything else; without a mirror it
        is embedded as a data URI instead. The view returns to home.

        Raises:
            ImageUploadError: If the upload fails. Nothing is added.
        """
        if image is not None:
            if self.mirror is not None:
                image_ref = await self.mirror.upload_image(image)
            else:
                image_ref = image.to_data_uri()
            draft = replace(draft, image=image_ref)

        if draft.category:
            self.categories.add(draft.category)
        if draft.collection:
            self.collections.add(draft.collection)

        bookmark_id = self.mirror.new_document_id() if self.mirror is not None else None
        bookmark = self.bookmarks.add(draft, bookmark_id=bookmark_id)
        self.view.show(Tab.HOME)

        if self.mirror is not None:
            self.mirror.dispatch(
                self.mirror.write_bookmark(bookmark),
                f"write of bookmark {bookmark.id}",
            )
        return bookmark

    def update_bookmark(self, bookmark_id: str, changes: Mapping[str, Any]) -> Bookmark | None:
        """Apply a partial update; None (no-op) when the bookmark does not exist."""
        before = self.bookmarks.get(bookmark_id)
        updated = self.bookmarks.update(bookmark_id, changes)
        if before is None or updated is None:
            return None
        self.collections.add(updated.collection)

        diff = _changed_fields(before, updated)
        if self.mirror is not None and diff:
            self.mirror.dispatch(
                self.mirror.update_bookmark(bookmark_id, diff),
                f"update of bookmark {bookmark_id}",
            )
        return updated

    def delete_bookmark(self, bookmark_id: str) -> bool:
        """Delete a bookmark; False (no-op) when it does not exist."""
        deleted = self.bookmarks.delete(bookmark_id)
        if not deleted:
            return False
        self.view.forget(bookmark_id)
        if self.mirror is not None:
            self.mirror.dispatch(
                self.mirror.delete_bookmark(bookmark_id),
                f"delete of bookmark {bookmark_id}",
            )
        return True

    def reorder_bookmarks(self, bookmark_ids: Sequence[str]) -> tuple[Bookmark, ...]:
        """Replace the bookmark order (local only; the mirror keeps creation order)."""
        return self.bookmarks.reorder(bookmark_ids)

    def move_bookmark(self, bookmark_id: str, before_id: str) -> bool:
        """Drag-and-drop move (local only)."""
        return self.bookmarks.move(bookmark_id, before_id)

    def assign_collection(self, bookmark_ids: Iterable[str], name: str) -> list[Bookmark]:
        """
        Move bookmarks into a collection, creating it if needed.

        Unknown ids are skipped. Ends selection mode.
        """
        self.collections.add(name)
        name = name.strip()
        moved = []
        for bookmark_id in bookmark_ids:
            updated = self.update_bookmark(bookmark_id, {"collection": name})
            if updated is not None:
                moved.append(updated)
        self.view.clear_selection()
        return moved

    # -------------------------------------------------------------------------
    # Categories and collections
    # -------------------------------------------------------------------------

    def add_category(self, name: str) -> bool:
        """Add a category; False when it already exists."""
        return self.categories.add(name)

    def add_collection(self, name: str) -> bool:
        """Add a collection; False when it already exists."""
        return self.collections.add(name)

    def delete_collection(self, name: str) -> bool:
        """
        Delete a collection, moving its bookmarks to the default collection.

        Refuses (returns False, nothing changes) for the default collection and
        for names that are not collections.
        """
        if name == DEFAULT_COLLECTION or name not in self.collections:
            return False
        for bookmark in self.bookmarks.in_collection(name):
            self.update_bookmark(bookmark.id, {"collection": DEFAULT_COLLECTION})
        self.collections.remove(name)
        if self.view.selected_collection == name:
            self.view.close_collection()
        return True

    # -------------------------------------------------------------------------
    # Passwords (local only)
    # -------------------------------------------------------------------------

    def add_password(self, title: str, password: str) -> PasswordEntry:
        """Add a password note."""
        return self.passwords.add(title, password)

    def update_password(self, password_id: str, changes: Mapping[str, Any]) -> PasswordEntry | None:
        """Edit a password note; None when it does not exist."""
        return self.passwords.update(password_id, changes)

    def delete_password(self, password_id: str) -> bool:
        """Delete a password note; False when it does not exist."""
        return self.passwords.delete(password_id)

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def home_bookmarks(self) -> list[Bookmark]:
        """Everything that is not archived."""
        return [bookmark for bookmark in self.bookmarks if not bookmark.is_archived]

    def favorite_bookmarks(self) -> list[Bookmark]:
        """Favorites that are not archived."""
        return [
            bookmark for bookmark in self.bookmarks
            if bookmark.is_favorite and not bookmark.is_archived
        ]

    def archived_bookmarks(self) -> list[Bookmark]:
        """Only archived bookmarks."""
        return [bookmark for bookmark in self.bookmarks if bookmark.is_archived]

    def collection_bookmarks(self, name: str) -> list[Bookmark]:
        """Non-archived bookmarks in one collection."""
        return [
            bookmark for bookmark in self.bookmarks
            if bookmark.collection == name and not bookmark.is_archived
        ]

    def collection_summaries(self) -> list[tuple[str, int]]:
        """Each collection with the number of bookmarks its view shows."""
        return [(name, len(self.collection_bookmarks(name))) for name in self.collections]

    def visible_bookmarks(self) -> list[Bookmark]:
        """The bookmarks the current view renders."""
        if self.view.tab == Tab.HOME:
            return self.home_bookmarks()
        if self.view.tab == Tab.FAVORITES:
            return self.favorite_bookmarks()
        if self.view.tab == Tab.COLLECTIONS and self.view.selected_collection is not None:
            return self.collection_bookmarks(self.view.selected_collection)
        return []
