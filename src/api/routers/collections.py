"""Collection endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Response

from api.dependencies import get_workspace
from models.bookmark import DEFAULT_COLLECTION
from schemas.bookmark import BookmarkListResponse, BookmarkResponse
from schemas.collection import CollectionListResponse, CollectionSummary, NameCreate
from services.workspace import Workspace

router = APIRouter(prefix="/collections", tags=["collections"])


def _collection_index(workspace: Workspace) -> CollectionListResponse:
    return CollectionListResponse(
        items=[
            CollectionSummary(name=name, count=count, is_default=name == DEFAULT_COLLECTION)
            for name, count in workspace.collection_summaries()
        ],
    )


@router.get("/", response_model=CollectionListResponse)
async def list_collections(
    workspace: Workspace = Depends(get_workspace),
) -> CollectionListResponse:
    """List collections with the number of non-archived bookmarks in each."""
    return _collection_index(workspace)


@router.post("/", response_model=CollectionListResponse, status_code=201)
async def create_collection(
    data: NameCreate,
    response: Response,
    workspace: Workspace = Depends(get_workspace),
) -> CollectionListResponse:
    """Add a collection. Adding an existing name changes nothing (200)."""
    if not workspace.add_collection(data.name):
        response.status_code = 200
    return _collection_index(workspace)


@router.get("/{name:path}/bookmarks", response_model=BookmarkListResponse)
async def list_collection_bookmarks(
    name: str,
    workspace: Workspace = Depends(get_workspace),
) -> BookmarkListResponse:
    """List the non-archived bookmarks of one collection."""
    if name not in workspace.collections:
        raise HTTPException(status_code=404, detail="Collection not found")
    items = [BookmarkResponse.model_validate(b) for b in workspace.collection_bookmarks(name)]
    return BookmarkListResponse(items=items, total=len(items))


@router.delete("/{name:path}", status_code=204)
async def delete_collection(
    name: str,
    workspace: Workspace = Depends(get_workspace),
) -> None:
    """Delete a collection; its bookmarks move to the default collection."""
    if name == DEFAULT_COLLECTION:
        raise HTTPException(
            status_code=409,
            detail=f"The '{DEFAULT_COLLECTION}' collection cannot be deleted",
        )
    if not workspace.delete_collection(name):
        raise HTTPException(status_code=404, detail="Collection not found")
