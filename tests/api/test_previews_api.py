"""Tests for the link preview endpoint."""
import httpx
import pytest
import respx
from httpx import AsyncClient, Response

from core.config import get_settings


@pytest.fixture
def mock_preview_api() -> respx.MockRouter:
    """Mock the external preview API; requests to the app itself pass through."""
    with respx.mock(assert_all_called=False, assert_all_mocked=False) as respx_mock:
        respx_mock.route(host="test").pass_through()
        yield respx_mock


async def test_get_preview(client: AsyncClient, mock_preview_api: respx.MockRouter) -> None:
    """Test fetching a preview from the API."""
    route = mock_preview_api.get(url__startswith=get_settings().preview_api_url).mock(
        return_value=Response(200, json={
            "title": "Example Domain",
            "description": "Illustrative examples.",
            "image": "https://example.com/og.png",
        }),
    )

    response = await client.get("/previews/", params={"url": "example.com"})
    assert response.status_code == 200
    assert response.json() == {
        "title": "Example Domain",
        "description": "Illustrative examples.",
        "image": "https://example.com/og.png",
        "url": "https://example.com",
        "domain": "example.com",
        "is_video": False,
        "video_provider": None,
        "video_id": None,
    }
    assert route.calls[0].request.url.params["key"] == get_settings().preview_api_key


async def test_get_preview_fallback(
    client: AsyncClient, mock_preview_api: respx.MockRouter,
) -> None:
    """Test that preview API failures still return a placeholder preview."""
    mock_preview_api.get(url__startswith=get_settings().preview_api_url).mock(
        side_effect=httpx.ConnectError("refused"),
    )

    response = await client.get("/previews/", params={"url": "youtu.be/dQw4w9WgXcQ"})
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "youtu.be"
    assert data["description"] == "Memory bookmark for quick reference"
    assert data["is_video"] is True
    assert data["video_provider"] == "youtube"


async def test_get_preview_requires_url(client: AsyncClient) -> None:
    """Test that the url parameter is required."""
    response = await client.get("/previews/")
    assert response.status_code == 422

    response = await client.get("/previews/", params={"url": ""})
    assert response.status_code == 422
