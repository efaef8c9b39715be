"""Link preview endpoint."""
from fastapi import APIRouter, Depends, Query

from api.dependencies import get_settings
from core.config import Settings
from schemas.bookmark import LinkPreviewResponse
from services import preview_service

router = APIRouter(prefix="/previews", tags=["previews"])


@router.get("/", response_model=LinkPreviewResponse)
async def get_preview(
    url: str = Query(min_length=1, description="URL to preview (https:// is added if missing)"),
    settings: Settings = Depends(get_settings),
) -> LinkPreviewResponse:
    """
    Fetch title, description and image for a URL before saving it.

    Always succeeds: when the preview service is unavailable the response is
    a placeholder built from the URL's host name.
    """
    preview = await preview_service.fetch_preview(
        url,
        api_url=settings.preview_api_url,
        api_key=settings.preview_api_key,
        timeout=settings.preview_timeout,
    )
    return LinkPreviewResponse.model_validate(preview)
