"""Pytest fixtures for testing."""
import os
from collections.abc import AsyncGenerator
from pathlib import Path

# Tests run local-only unless a fixture attaches a mirror explicitly.
# This must be set before any app imports that trigger Settings validation.
os.environ["DATABASE_URL"] = ""
os.environ["PREVIEW_API_URL"] = "https://preview.test/"
os.environ["PREVIEW_API_KEY"] = "test-key"

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from db.session import create_session_factory, create_tables  # noqa: E402
from services.blob_storage import BlobStorage  # noqa: E402
from services.remote_mirror import RemoteMirror  # noqa: E402
from services.workspace import Workspace  # noqa: E402

BLOB_BASE_URL = "http://test/storage"


@pytest.fixture
async def async_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """Create an async engine backed by a throwaway SQLite file."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'mirror.db'}", echo=False)
    await create_tables(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return create_session_factory(async_engine)


@pytest.fixture
def blob_storage(tmp_path: Path) -> BlobStorage:
    """Blob storage rooted in a temporary directory with a fixed clock."""
    return BlobStorage(tmp_path / "blobs", BLOB_BASE_URL, clock_ms=lambda: 1700000000000)


@pytest.fixture
async def mirror(
    session_factory: async_sessionmaker[AsyncSession],
    blob_storage: BlobStorage,
) -> AsyncGenerator[RemoteMirror]:
    """Remote mirror over the test database; pending writes are drained on teardown."""
    remote = RemoteMirror(session_factory, blob_storage)

    yield remote

    await remote.drain()


@pytest.fixture
def workspace() -> Workspace:
    """Local-only workspace."""
    return Workspace()


@pytest.fixture
async def mirrored_workspace(mirror: RemoteMirror) -> Workspace:
    """Workspace mirrored to the test database, already loaded."""
    ws = Workspace(mirror=mirror)
    await ws.load_remote()
    return ws


@pytest.fixture
async def client(workspace: Workspace) -> AsyncGenerator[AsyncClient]:
    """Create a test client bound to the workspace fixture."""
    from api.dependencies import get_workspace
    from api.main import app

    app.dependency_overrides[get_workspace] = lambda: workspace

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()
