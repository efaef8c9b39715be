"""Tests for the health check endpoint."""
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from api.dependencies import get_workspace
from api.main import app
from services.remote_mirror import RemoteMirror
from services.workspace import Workspace


@pytest.fixture
async def mirrored_client(mirrored_workspace: Workspace) -> AsyncGenerator[AsyncClient]:
    """Test client bound to a workspace with a mirror attached."""
    app.dependency_overrides[get_workspace] = lambda: mirrored_workspace

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


async def test_health_endpoint_returns_200(client: AsyncClient) -> None:
    """Test that the health endpoint returns 200 OK."""
    response = await client.get("/health")
    assert response.status_code == 200


async def test_health_local_only(client: AsyncClient) -> None:
    """Test that sessions without a mirror report the database as disabled."""
    data = (await client.get("/health")).json()
    assert data == {"status": "healthy", "database": "disabled"}


async def test_health_with_mirror(mirrored_client: AsyncClient) -> None:
    """Test that a reachable document store is healthy."""
    data = (await mirrored_client.get("/health")).json()
    assert data == {"status": "healthy", "database": "healthy"}


async def test_health_store_down(
    mirrored_client: AsyncClient,
    mirror: RemoteMirror,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Test that an unreachable document store degrades health."""
    async def ping() -> bool:
        return False

    monkeypatch.setattr(mirror, "ping", ping)

    data = (await mirrored_client.get("/health")).json()
    assert data == {"status": "degraded", "database": "unhealthy"}


async def test_security_headers(client: AsyncClient) -> None:
    """Test that responses carry the security headers."""
    response = await client.get("/health")
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "DENY"
