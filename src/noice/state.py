"""Navigation state: where we are, what is shown and what is selected."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from noice.listing import (
    Entry,
    Listing,
    check_directory,
    compile_filter,
    make_path,
    parent_path,
    populate,
)

MATCH_EVERYTHING = "."


@dataclass
class NavigationState:
    """Everything the browser knows about the directory being shown.

    Every transition that changes the directory, the filter or the sort order
    goes through :meth:`_repopulate`, which builds the new listing first and
    only then commits the new values.  A failing transition raises a
    :class:`~noice.errors.ListingError` and leaves the state untouched.
    """

    current_path: str
    default_filter: str = "^[^.]"
    filter_pattern: str = ""
    sort_by_time: bool = False
    selected_index: int = 0
    pending_restore_path: Optional[str] = None
    left_selection: Optional[str] = None
    listing: Listing = field(default=None)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        self.current_path = _normalize(self.current_path)
        if not self.filter_pattern:
            self.filter_pattern = self.default_filter
        if self.listing is None:
            self.listing = Listing.empty(self.current_path)

    @property
    def total_size(self) -> int:
        return self.listing.total_size

    @property
    def is_default_filter(self) -> bool:
        return self.filter_pattern == self.default_filter

    def selected_entry(self) -> Optional[Entry]:
        """Return the highlighted entry, or None for an empty listing."""
        if not self.listing.entries:
            return None
        return self.listing[self.selected_index]

    def selected_path(self) -> Optional[str]:
        entry = self.selected_entry()
        if entry is None:
            return None
        return make_path(self.current_path, entry.name)

    def path_of(self, name: str) -> str:
        return make_path(self.current_path, name)

    # -- selection -------------------------------------------------------

    def move_selection(self, delta: int) -> None:
        """Move the selection by ``delta`` steps, clamped to the listing."""
        if not self.listing.entries:
            self.selected_index = 0
            return
        last = len(self.listing) - 1
        self.selected_index = max(0, min(self.selected_index + delta, last))

    def select_first(self) -> None:
        self.selected_index = 0

    def select_last(self) -> None:
        self.selected_index = max(len(self.listing) - 1, 0)

    # -- transitions -----------------------------------------------------

    def refresh(self) -> None:
        """Re-read the current directory, keeping the highlighted entry."""
        self._repopulate(restore=self.selected_path())

    def enter_directory(self, name: str) -> None:
        """Descend into the child directory ``name``."""
        target = self.path_of(name)
        check_directory(target)
        remembered = self.left_selection
        if remembered is None or parent_path(remembered) != target:
            remembered = None
        self._repopulate(path=target, filter_pattern=self.default_filter, restore=remembered)

    def go_up(self) -> bool:
        """Move to the parent directory and highlight the one we came from.

        Returns False when there is nowhere to go.
        """
        path = self.current_path
        if path == "/" or "/" not in path:
            return False
        parent = parent_path(path)
        check_directory(parent)
        leaving_selection = self.selected_path()
        self._repopulate(path=parent, filter_pattern=self.default_filter, restore=path)
        self.left_selection = leaving_selection
        return True

    def apply_filter(self, pattern: Optional[str]) -> None:
        """Replace the filter; an empty pattern restores the default one."""
        candidate = pattern if pattern else self.default_filter
        compile_filter(candidate)
        self._repopulate(filter_pattern=candidate, restore=self.selected_path())

    def change_directory(self, target: str) -> bool:
        """Change to ``target``, relative to the current path unless absolute.

        Returns False when ``target`` is empty.
        """
        if not target:
            return False
        new_path = _normalize(make_path(self.current_path, target))
        check_directory(new_path)
        self._repopulate(path=new_path, filter_pattern=self.default_filter, restore=None)
        return True

    def go_home(self, home: Optional[str]) -> bool:
        """Jump to ``home``; the directory we left stays highlighted if visible."""
        if not home:
            return False
        new_path = _normalize(make_path(self.current_path, home))
        check_directory(new_path)
        self._repopulate(
            path=new_path, filter_pattern=self.default_filter, restore=self.current_path
        )
        return True

    def toggle_sort(self) -> None:
        self._repopulate(sort_by_time=not self.sort_by_time, restore=self.selected_path())

    def toggle_dotfiles(self) -> None:
        if self.is_default_filter:
            candidate = MATCH_EVERYTHING
        else:
            candidate = self.default_filter
        self._repopulate(filter_pattern=candidate, restore=None)

    def _repopulate(
        self,
        *,
        path: Optional[str] = None,
        filter_pattern: Optional[str] = None,
        sort_by_time: Optional[bool] = None,
        restore: Optional[str] = None,
    ) -> None:
        new_path = self.current_path if path is None else path
        new_filter = self.filter_pattern if filter_pattern is None else filter_pattern
        new_sort = self.sort_by_time if sort_by_time is None else sort_by_time
        self.pending_restore_path = restore
        try:
            listing = populate(new_path, new_filter, sort_by_time=new_sort)
            self.current_path = new_path
            self.filter_pattern = new_filter
            self.sort_by_time = new_sort
            self.listing = listing
            self.selected_index = listing.index_of_path(self.pending_restore_path)
        finally:
            self.pending_restore_path = None

    def load(self) -> None:
        """Populate the initial listing."""
        self._repopulate(restore=None)


def _normalize(path: str) -> str:
    """Collapse ``.``/``..`` and duplicate or trailing slashes."""
    normalized = os.path.normpath(path)
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


__all__ = ["NavigationState", "MATCH_EVERYTHING"]
