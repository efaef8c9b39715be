"""Pydantic schemas for view state endpoints."""
from pydantic import BaseModel

from services.view_state import Tab


class ViewResponse(BaseModel):
    """Current view state plus the startup banner, if any."""

    tab: Tab
    menu_open: bool
    selected_collection: str | None
    selection_mode: bool
    selection: list[str]
    load_error: str | None = None


class TabUpdate(BaseModel):
    """Tab to switch to."""

    tab: Tab


class CollectionSelection(BaseModel):
    """Collection to open inside the collections tab; null goes back to the index."""

    name: str | None = None
