"""Tab navigation state for the session's UI."""
from dataclasses import dataclass, field
from enum import StrEnum


class Tab(StrEnum):
    """Top-level views. Transitions are flat: any tab can follow any other."""

    HOME = "home"
    ADD = "add"
    FAVORITES = "favorites"
    COLLECTIONS = "collections"
    SECURITY = "security"


@dataclass
class ViewState:
    """
    What the UI is currently showing.

    `tab` is the top-level state machine. The collection drill-down, the menu
    flag and the selection set are local sub-states that reset whenever the
    tab changes; there is no history stack.
    """

    tab: Tab = Tab.HOME
    menu_open: bool = False
    selected_collection: str | None = None
    selection_mode: bool = False
    selection: list[str] = field(default_factory=list)

    def show(self, tab: Tab | str) -> None:
        """Switch to a tab, closing the menu and resetting sub-states."""
        self.tab = Tab(tab)
        self.menu_open = False
        self.selected_collection = None
        self.clear_selection()

    def toggle_menu(self) -> bool:
        """Open or close the menu; returns the new state."""
        self.menu_open = not self.menu_open
        return self.menu_open

    def open_collection(self, name: str) -> None:
        """Drill into a collection, switching to the collections tab if needed."""
        if self.tab != Tab.COLLECTIONS:
            self.show(Tab.COLLECTIONS)
        self.selected_collection = name

    def close_collection(self) -> None:
        """Back from a collection to the collection index."""
        self.selected_collection = None

    def toggle_selection(self, bookmark_id: str) -> None:
        """
        Select or deselect a bookmark.

        The first pick enters selection mode; later picks toggle membership.
        """
        if not self.selection_mode:
            self.selection_mode = True
            self.selection = [bookmark_id]
        elif bookmark_id in self.selection:
            self.selection = [selected for selected in self.selection if selected != bookmark_id]
        else:
            self.selection = [*self.selection, bookmark_id]

    def clear_selection(self) -> None:
        """Leave selection mode."""
        self.selection_mode = False
        self.selection = []

    def forget(self, bookmark_id: str) -> None:
        """Drop a deleted bookmark from the selection."""
        if bookmark_id in self.selection:
            self.selection = [selected for selected in self.selection if selected != bookmark_id]
