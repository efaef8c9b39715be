"""
Tests for the remote mirror and mirrored workspace behavior.

Tests cover:
- RemoteMirror: load ordering, document writes/updates/deletes, health ping
- Workspace with a mirror: startup load, best-effort writes, upload failures
"""
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, Mock, patch

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from models.bookmark import DEFAULT_COLLECTION, BookmarkDocument
from services.blob_storage import BlobStorage, ImageUpload
from services.exceptions import ImageUploadError, RemoteLoadError
from services.local_store import BookmarkDraft
from services.remote_mirror import RemoteMirror, document_to_bookmark
from services.video import VideoProvider
from services.workspace import LOAD_ERROR_MESSAGE, Workspace


def make_draft(title: str = 'Example', **overrides: object) -> BookmarkDraft:
    """Build a bookmark draft with sensible defaults."""
    fields = {
        'title': title,
        'description': 'An example page',
        'image': '',
        'url': 'https://example.com/page',
        'category': 'Twitter',
    }
    fields.update(overrides)
    return BookmarkDraft(**fields)


async def seed_documents(
    session_factory: async_sessionmaker[AsyncSession],
    *documents: BookmarkDocument,
) -> None:
    """Insert documents directly into the store."""
    async with session_factory() as session:
        session.add_all(documents)
        await session.commit()


async def fetch_documents(
    session_factory: async_sessionmaker[AsyncSession],
) -> dict[str, BookmarkDocument]:
    """All stored documents keyed by id."""
    async with session_factory() as session:
        result = await session.execute(select(BookmarkDocument))
        return {document.id: document for document in result.scalars().all()}


@pytest.fixture
def failing_writes(mirror: RemoteMirror) -> Iterator[None]:
    """Make every remote write fail."""
    error = OperationalError('INSERT', {}, Exception('store unavailable'))
    with (
        patch.object(mirror, 'write_bookmark', AsyncMock(side_effect=error)),
        patch.object(mirror, 'update_bookmark', AsyncMock(side_effect=error)),
        patch.object(mirror, 'delete_bookmark', AsyncMock(side_effect=error)),
    ):
        yield


class TestDocumentConversion:
    """Tests for document_to_bookmark."""

    def test__document_to_bookmark__naive_datetime_is_utc(self) -> None:
        """Naive timestamps from the store are read as UTC."""
        document = BookmarkDocument(
            id='doc-1', title='T', description='', image='', url='', domain='',
            category='YouTube', collection='', is_favorite=False, is_archived=False,
            is_video=False, video_provider=None, video_id=None,
            created_at=datetime(2024, 1, 1, 12, 0),
        )
        bookmark = document_to_bookmark(document)
        assert bookmark.created_at == datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
        assert bookmark.collection == DEFAULT_COLLECTION

    def test__document_to_bookmark__unknown_provider(self) -> None:
        """Unrecognized providers are read as 'other'."""
        document = BookmarkDocument(
            id='doc-1', title='T', description='', image='', url='https://v.test/1',
            domain='v.test', category='YouTube', collection='General',
            is_favorite=False, is_archived=False, is_video=True,
            video_provider='facebook', video_id=None,
            created_at=datetime(2024, 1, 1, tzinfo=UTC),
        )
        assert document_to_bookmark(document).video_provider == VideoProvider.OTHER


class TestRemoteMirror:
    """Tests for RemoteMirror against a real database."""

    async def test__load_bookmarks__newest_first(
        self,
        mirror: RemoteMirror,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        """Documents load ordered by creation time, newest first."""
        base = datetime(2024, 1, 1, tzinfo=UTC)
        await seed_documents(
            session_factory,
            BookmarkDocument(title='old', category='YouTube', created_at=base),
            BookmarkDocument(
                title='new', category='YouTube', created_at=base + timedelta(days=2),
            ),
            BookmarkDocument(
                title='mid', category='YouTube', created_at=base + timedelta(days=1),
            ),
        )

        bookmarks = await mirror.load_bookmarks()

        assert [bm.title for bm in bookmarks] == ['new', 'mid', 'old']
        assert all(bm.created_at.tzinfo is not None for bm in bookmarks)

    async def test__load_bookmarks__failure_raises(self, mirror: RemoteMirror) -> None:
        """Store errors surface as RemoteLoadError."""
        broken = RemoteMirror(
            Mock(side_effect=OperationalError('SELECT', {}, Exception('down'))),
            mirror.blob_storage,
        )
        with pytest.raises(RemoteLoadError):
            await broken.load_bookmarks()

    async def test__write_update_delete(
        self,
        mirror: RemoteMirror,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        """Documents follow writes, partial updates and deletes."""
        workspace = Workspace(mirror=mirror)
        bookmark = await workspace.add_bookmark(
            make_draft(url='https://www.youtube.com/watch?v=dQw4w9WgXcQ'),
        )
        await mirror.drain()

        document = (await fetch_documents(session_factory))[bookmark.id]
        assert document.title == 'Example'
        assert document.domain == 'www.youtube.com'
        assert document.video_provider == 'youtube'
        assert document.video_id == 'dQw4w9WgXcQ'
        assert document.collection == DEFAULT_COLLECTION

        workspace.update_bookmark(bookmark.id, {'is_favorite': True, 'collection': 'Music'})
        await mirror.drain()
        document = (await fetch_documents(session_factory))[bookmark.id]
        assert document.is_favorite is True
        assert document.collection == 'Music'
        assert document.title == 'Example'

        workspace.delete_bookmark(bookmark.id)
        await mirror.drain()
        assert bookmark.id not in await fetch_documents(session_factory)

    async def test__ping(self, mirror: RemoteMirror) -> None:
        """A reachable store answers the health check."""
        assert await mirror.ping() is True

    async def test__dispatch__failure_is_logged(
        self,
        mirror: RemoteMirror,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Failed background writes are logged, never raised."""
        async def fail() -> None:
            raise RuntimeError('boom')

        mirror.dispatch(fail(), 'write of bookmark x')
        assert mirror.pending_writes == 1
        await mirror.drain()

        assert mirror.pending_writes == 0
        assert 'Remote write of bookmark x failed: boom' in caplog.text


class TestMirroredWorkspace:
    """Tests for a workspace mirrored to the document store."""

    async def test__load_remote__populates_store_and_names(
        self,
        mirror: RemoteMirror,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        """Loaded bookmarks bring their categories and collections with them."""
        await seed_documents(
            session_factory,
            BookmarkDocument(title='a', category='Podcasts', collection='Audio'),
        )
        workspace = Workspace(mirror=mirror)

        await workspace.load_remote()

        assert [bm.title for bm in workspace.home_bookmarks()] == ['a']
        assert 'Podcasts' in workspace.categories
        assert 'Audio' in workspace.collections
        assert workspace.load_error is None

    async def test__load_remote__blank_names_skipped(
        self,
        mirror: RemoteMirror,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        """Whitespace-only categories and collections do not abort the load."""
        await seed_documents(
            session_factory,
            BookmarkDocument(title='blank', category='   ', collection='   '),
        )
        workspace = Workspace(mirror=mirror)

        await workspace.load_remote()

        assert workspace.load_error is None
        assert [bm.title for bm in workspace.home_bookmarks()] == ['blank']
        assert workspace.home_bookmarks()[0].collection == DEFAULT_COLLECTION
        assert '   ' not in workspace.categories
        assert list(workspace.collections) == [DEFAULT_COLLECTION]

    async def test__load_remote__connection_refused_sets_banner(
        self, blob_storage: BlobStorage,
    ) -> None:
        """Driver-level connection errors are treated as a failed load."""
        refused = RemoteMirror(
            Mock(side_effect=ConnectionRefusedError(111, 'Connect call failed')),
            blob_storage,
        )
        workspace = Workspace(mirror=refused)

        await workspace.load_remote()

        assert workspace.load_error == LOAD_ERROR_MESSAGE
        assert len(workspace.bookmarks) == 0

    async def test__load_remote__runs_once(
        self,
        mirror: RemoteMirror,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        """A second load does not replace the session's state."""
        workspace = Workspace(mirror=mirror)
        await workspace.load_remote()
        await seed_documents(session_factory, BookmarkDocument(title='late', category='YouTube'))

        await workspace.load_remote()

        assert len(workspace.bookmarks) == 0

    async def test__load_remote__failure_sets_banner(self, blob_storage: BlobStorage) -> None:
        """A failed startup load leaves an empty library and a banner message."""
        broken = RemoteMirror(
            Mock(side_effect=OperationalError('SELECT', {}, Exception('down'))),
            blob_storage,
        )
        workspace = Workspace(mirror=broken)

        await workspace.load_remote()

        assert workspace.load_error == LOAD_ERROR_MESSAGE
        assert len(workspace.bookmarks) == 0

    async def test__add_bookmark__uses_store_key(self, mirrored_workspace: Workspace) -> None:
        """Mirrored sessions key bookmarks by the store-assigned UUID."""
        bookmark = await mirrored_workspace.add_bookmark(make_draft())
        assert len(bookmark.id) == 36
        assert bookmark.id.count('-') == 4

    async def test__add_bookmark__uploads_image_first(
        self,
        mirrored_workspace: Workspace,
        mirror: RemoteMirror,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        """Uploaded images are stored as blobs and referenced by URL."""
        image = ImageUpload(filename='cat.png', content=b'png', content_type='image/png')

        bookmark = await mirrored_workspace.add_bookmark(make_draft(url=''), image=image)
        await mirror.drain()

        assert bookmark.image == 'http://test/storage/images/1700000000000_cat.png'
        document = (await fetch_documents(session_factory))[bookmark.id]
        assert document.image == bookmark.image

    async def test__add_bookmark__upload_failure_adds_nothing(
        self,
        mirrored_workspace: Workspace,
        mirror: RemoteMirror,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        """When the upload fails the add is aborted locally and remotely."""
        image = ImageUpload(filename='cat.png', content=b'png')
        with (
            patch.object(
                mirror.blob_storage,
                'upload_image',
                AsyncMock(side_effect=ImageUploadError('cat.png', 'disk full')),
            ),
            pytest.raises(ImageUploadError),
        ):
            await mirrored_workspace.add_bookmark(make_draft(category='NewCat'), image=image)

        await mirror.drain()
        assert len(mirrored_workspace.bookmarks) == 0
        assert 'NewCat' not in mirrored_workspace.categories
        assert await fetch_documents(session_factory) == {}

    @pytest.mark.usefixtures('failing_writes')
    async def test__failed_writes__keep_local_state(
        self,
        mirrored_workspace: Workspace,
        mirror: RemoteMirror,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Remote write failures never roll back or block local mutations."""
        a = await mirrored_workspace.add_bookmark(make_draft('A'))
        b = await mirrored_workspace.add_bookmark(make_draft('B'))
        mirrored_workspace.update_bookmark(a.id, {'is_favorite': True})
        mirrored_workspace.delete_bookmark(b.id)
        await mirror.drain()

        assert [bm.title for bm in mirrored_workspace.home_bookmarks()] == ['A']
        assert mirrored_workspace.bookmarks.get(a.id).is_favorite is True
        assert 'store unavailable' in caplog.text

    async def test__delete_collection__mirrors_reassignment(
        self,
        mirrored_workspace: Workspace,
        mirror: RemoteMirror,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        """Reassigned bookmarks are updated in the store too."""
        bookmark = await mirrored_workspace.add_bookmark(make_draft(collection='Work'))
        await mirror.drain()

        mirrored_workspace.delete_collection('Work')
        await mirror.drain()

        document = (await fetch_documents(session_factory))[bookmark.id]
        assert document.collection == DEFAULT_COLLECTION

    async def test__reload__sees_previous_session(
        self,
        mirror: RemoteMirror,
        mirrored_workspace: Workspace,
    ) -> None:
        """A new session loads what the previous one wrote, newest first."""
        for title in ('A', 'B', 'C'):
            await mirrored_workspace.add_bookmark(make_draft(title))
            await mirror.drain()

        next_session = Workspace(mirror=mirror)
        await next_session.load_remote()

        assert [bm.title for bm in next_session.home_bookmarks()] == ['C', 'B', 'A']
