"""Category endpoints."""
from fastapi import APIRouter, Depends, Response

from api.dependencies import get_workspace
from schemas.collection import NameCreate, NameListResponse
from services.workspace import Workspace

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("/", response_model=NameListResponse)
async def list_categories(
    workspace: Workspace = Depends(get_workspace),
) -> NameListResponse:
    """List categories in the order they were added."""
    return NameListResponse(names=list(workspace.categories))


@router.post("/", response_model=NameListResponse, status_code=201)
async def create_category(
    data: NameCreate,
    response: Response,
    workspace: Workspace = Depends(get_workspace),
) -> NameListResponse:
    """Add a category. Adding an existing name changes nothing (200)."""
    if not workspace.add_category(data.name):
        response.status_code = 200
    return NameListResponse(names=list(workspace.categories))
