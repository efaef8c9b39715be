"""Health check endpoints."""
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.dependencies import get_workspace
from services.workspace import Workspace

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy", "degraded"]
    database: Literal["healthy", "unhealthy", "disabled"]


@router.get("/health", response_model=HealthResponse)
async def health_check(
    workspace: Workspace = Depends(get_workspace),
) -> HealthResponse:
    """Check application and document store health."""
    if workspace.mirror is None:
        return HealthResponse(status="healthy", database="disabled")

    db_status = "healthy" if await workspace.mirror.ping() else "unhealthy"
    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        database=db_status,
    )
