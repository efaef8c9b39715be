"""View state endpoints: tab navigation and its local sub-states."""
from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_workspace
from schemas.bookmark import BookmarkListResponse, BookmarkResponse
from schemas.view import CollectionSelection, TabUpdate, ViewResponse
from services.workspace import Workspace

router = APIRouter(prefix="/view", tags=["view"])


def _view_response(workspace: Workspace) -> ViewResponse:
    view = workspace.view
    return ViewResponse(
        tab=view.tab,
        menu_open=view.menu_open,
        selected_collection=view.selected_collection,
        selection_mode=view.selection_mode,
        selection=view.selection,
        load_error=workspace.load_error,
    )


@router.get("/", response_model=ViewResponse)
async def get_view(workspace: Workspace = Depends(get_workspace)) -> ViewResponse:
    """Current view state, including the startup load banner if loading failed."""
    return _view_response(workspace)


@router.put("/tab", response_model=ViewResponse)
async def switch_tab(
    data: TabUpdate,
    workspace: Workspace = Depends(get_workspace),
) -> ViewResponse:
    """Switch the active tab."""
    workspace.view.show(data.tab)
    return _view_response(workspace)


@router.post("/menu", response_model=ViewResponse)
async def toggle_menu(workspace: Workspace = Depends(get_workspace)) -> ViewResponse:
    """Open or close the menu."""
    workspace.view.toggle_menu()
    return _view_response(workspace)


@router.put("/collection", response_model=ViewResponse)
async def select_collection(
    data: CollectionSelection,
    workspace: Workspace = Depends(get_workspace),
) -> ViewResponse:
    """Open a collection inside the collections tab, or go back to the index with null."""
    if data.name is None:
        workspace.view.close_collection()
    elif data.name not in workspace.collections:
        raise HTTPException(status_code=404, detail="Collection not found")
    else:
        workspace.view.open_collection(data.name)
    return _view_response(workspace)


@router.post("/selection/{bookmark_id}", response_model=ViewResponse)
async def toggle_selection(
    bookmark_id: str,
    workspace: Workspace = Depends(get_workspace),
) -> ViewResponse:
    """Select or deselect a bookmark (the first pick enters selection mode)."""
    if workspace.bookmarks.get(bookmark_id) is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    workspace.view.toggle_selection(bookmark_id)
    return _view_response(workspace)


@router.delete("/selection", response_model=ViewResponse)
async def clear_selection(workspace: Workspace = Depends(get_workspace)) -> ViewResponse:
    """Leave selection mode."""
    workspace.view.clear_selection()
    return _view_response(workspace)


@router.get("/bookmarks", response_model=BookmarkListResponse)
async def visible_bookmarks(
    workspace: Workspace = Depends(get_workspace),
) -> BookmarkListResponse:
    """The bookmarks the current view shows."""
    items = [BookmarkResponse.model_validate(b) for b in workspace.visible_bookmarks()]
    return BookmarkListResponse(items=items, total=len(items))
