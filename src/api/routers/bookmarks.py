"""Bookmark CRUD endpoints."""
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from api.dependencies import get_workspace
from models.bookmark import DEFAULT_COLLECTION
from schemas.bookmark import (
    BookmarkCreate,
    BookmarkListResponse,
    BookmarkMove,
    BookmarkOrder,
    BookmarkResponse,
    BookmarkUpdate,
    BookmarkView,
    CollectionAssignment,
    validate_name,
    validate_title_length,
)
from services.blob_storage import ImageUpload
from services.exceptions import ImageUploadError, InvalidReorderError
from services.local_store import Bookmark, BookmarkDraft
from services.workspace import Workspace

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


def _list_response(bookmarks: list[Bookmark] | tuple[Bookmark, ...]) -> BookmarkListResponse:
    items = [BookmarkResponse.model_validate(b) for b in bookmarks]
    return BookmarkListResponse(items=items, total=len(items))


@router.get("/", response_model=BookmarkListResponse)
async def list_bookmarks(
    view: BookmarkView = Query(default="home", description="Which bookmarks to list"),
    collection: str | None = Query(default=None, description="Only this collection (overrides view)"),  # noqa: E501
    workspace: Workspace = Depends(get_workspace),
) -> BookmarkListResponse:
    """
    List bookmarks in display order.

    - **view**: 'home' (not archived), 'favorites' (favorite, not archived) or 'archived'
    - **collection**: non-archived bookmarks of one collection
    """
    if collection is not None:
        return _list_response(workspace.collection_bookmarks(collection))
    if view == "favorites":
        return _list_response(workspace.favorite_bookmarks())
    if view == "archived":
        return _list_response(workspace.archived_bookmarks())
    return _list_response(workspace.home_bookmarks())


@router.post("/", response_model=BookmarkResponse, status_code=201)
async def create_bookmark(
    data: BookmarkCreate,
    workspace: Workspace = Depends(get_workspace),
) -> BookmarkResponse:
    """
    Save a previewed link as a bookmark.

    Saves exactly what is provided. Callers who want metadata should use
    GET /previews first.
    """
    bookmark = await workspace.add_bookmark(BookmarkDraft(**data.model_dump()))
    return BookmarkResponse.model_validate(bookmark)


@router.post("/upload", response_model=BookmarkResponse, status_code=201)
async def upload_bookmark(
    file: UploadFile = File(..., description="Image to save"),
    category: str = Form(...),
    title: str = Form(default=""),
    description: str = Form(default=""),
    collection: str = Form(default=DEFAULT_COLLECTION),
    workspace: Workspace = Depends(get_workspace),
) -> BookmarkResponse:
    """
    Save an uploaded image as a bookmark.

    The image is stored first; if that fails nothing is saved and the
    response is 502.
    """
    if file.content_type and not file.content_type.startswith("image/"):
        raise HTTPException(status_code=422, detail="Only image files can be uploaded")
    content = await file.read()
    if not content:
        raise HTTPException(status_code=422, detail="Uploaded file is empty")

    filename = file.filename or "image"
    try:
        draft = BookmarkDraft(
            title=validate_title_length(title.strip() or filename),
            description=description,
            image="",
            url="",
            category=validate_name(category),
            collection=validate_name(collection),
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    image = ImageUpload(
        filename=filename,
        content=content,
        content_type=file.content_type or "application/octet-stream",
    )
    try:
        bookmark = await workspace.add_bookmark(draft, image=image)
    except ImageUploadError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return BookmarkResponse.model_validate(bookmark)


@router.put("/order", response_model=BookmarkListResponse)
async def reorder_bookmarks(
    data: BookmarkOrder,
    workspace: Workspace = Depends(get_workspace),
) -> BookmarkListResponse:
    """Replace the bookmark order. `ids` must list every bookmark exactly once."""
    try:
        bookmarks = workspace.reorder_bookmarks(data.ids)
    except InvalidReorderError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _list_response(bookmarks)


@router.post("/assign-collection", response_model=BookmarkListResponse)
async def assign_collection(
    data: CollectionAssignment,
    workspace: Workspace = Depends(get_workspace),
) -> BookmarkListResponse:
    """Move the selected bookmarks into a collection, creating it if needed."""
    moved = workspace.assign_collection(data.bookmark_ids, data.collection)
    return _list_response(moved)


@router.get("/{bookmark_id}", response_model=BookmarkResponse)
async def get_bookmark(
    bookmark_id: str,
    workspace: Workspace = Depends(get_workspace),
) -> BookmarkResponse:
    """Get a single bookmark by ID."""
    bookmark = workspace.bookmarks.get(bookmark_id)
    if bookmark is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return BookmarkResponse.model_validate(bookmark)


@router.patch("/{bookmark_id}", response_model=BookmarkResponse)
async def update_bookmark(
    bookmark_id: str,
    data: BookmarkUpdate,
    workspace: Workspace = Depends(get_workspace),
) -> BookmarkResponse:
    """Update the supplied fields of a bookmark."""
    changes = data.changes()
    if changes:
        bookmark = workspace.update_bookmark(bookmark_id, changes)
    else:
        bookmark = workspace.bookmarks.get(bookmark_id)
    if bookmark is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return BookmarkResponse.model_validate(bookmark)


@router.delete("/{bookmark_id}", status_code=204)
async def delete_bookmark(
    bookmark_id: str,
    workspace: Workspace = Depends(get_workspace),
) -> None:
    """Delete a bookmark."""
    if not workspace.delete_bookmark(bookmark_id):
        raise HTTPException(status_code=404, detail="Bookmark not found")


@router.post("/{bookmark_id}/move", status_code=204)
async def move_bookmark(
    bookmark_id: str,
    data: BookmarkMove,
    workspace: Workspace = Depends(get_workspace),
) -> None:
    """Move a bookmark to the position of `before_id` (drag-and-drop)."""
    if bookmark_id == data.before_id:
        return
    if not workspace.move_bookmark(bookmark_id, data.before_id):
        raise HTTPException(status_code=404, detail="Bookmark not found")
