"""UI-state transitions for a two-panel favorites session.

The module-level functions are pure: they take a ``UIState`` and mutate it
in place, never touching disk. ``FavdirSession`` binds them to a
``TreeStore`` and persists the state after every transition, the way an
interactive front end drives the store.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable

from . import paths
from .constants import (
    DIR_SORT_MODES,
    ITEM_TYPE_DIR,
    ITEM_TYPE_PARENT,
    LEFT_SORT_MODES,
    PANEL_DIR,
    PANEL_LEFT,
    PANEL_RIGHT,
    PARENT_ENTRY_NAME,
    RIGHT_SORT_MODES,
    SELECTION_DIR_LINK,
    SELECTION_GROUP,
    SORT_ALPHA,
    SORT_CUSTOM,
)
from .fs import DirectoryListing
from .model import Item, UIState
from .results import OperationResult
from .sorting import collect_paths, sort_directory_entries, sort_mixed_children
from .store import KIND_GROUP, KIND_ITEM, TreeStore, find_group
from .tree_view import TreeNode, build_tree, find_node

logger = logging.getLogger(__name__)

_SORT_MODES = {
    PANEL_LEFT: LEFT_SORT_MODES,
    PANEL_RIGHT: RIGHT_SORT_MODES,
    PANEL_DIR: DIR_SORT_MODES,
}
_SORT_FIELDS = {
    PANEL_LEFT: ("left_sort_mode", "left_sort_asc"),
    PANEL_RIGHT: ("right_sort_mode", "right_sort_asc"),
    PANEL_DIR: ("dir_sort_mode", "dir_sort_asc"),
}


def _same_dir(a: str, b: str) -> bool:
    return os.path.normpath(os.path.abspath(a)) == os.path.normpath(os.path.abspath(b))


def select_node(ui_state: UIState, node: TreeNode) -> None:
    """Make ``node`` the left-panel selection and leave any browse mode."""
    ui_state.reset_browse()
    ui_state.dir_link_current_path = None
    if node.is_dir_link:
        ui_state.last_selected_type = SELECTION_DIR_LINK
        ui_state.last_selected_dir_link = node.dir_path
        ui_state.last_selected_group = None
    else:
        ui_state.last_selected_type = SELECTION_GROUP
        ui_state.last_selected_group = node.full_path
        ui_state.last_selected_dir_link = None


def is_directory_view(ui_state: UIState) -> bool:
    """Whether the items panel shows a live directory instead of group items."""
    if ui_state.is_browsing_directory and ui_state.browse_base_path:
        return True
    return ui_state.last_selected_type == SELECTION_DIR_LINK and bool(ui_state.last_selected_dir_link)


def directory_view(ui_state: UIState) -> tuple[str, str] | None:
    """Return ``(base_path, current_path)`` of the active directory view."""
    if ui_state.is_browsing_directory and ui_state.browse_base_path:
        base = ui_state.browse_base_path
        return base, ui_state.browse_current_path or base
    if ui_state.last_selected_type == SELECTION_DIR_LINK and ui_state.last_selected_dir_link:
        base = ui_state.last_selected_dir_link
        return base, ui_state.dir_link_current_path or base
    return None


def browse_into(ui_state: UIState, entry: DirectoryListing | Item) -> OperationResult:
    """Descend into a directory entry shown in the items panel.

    Opening a directory item from a group view starts browse mode with that
    directory as the base; inside a directory view it navigates deeper.
    """
    if entry.type not in (ITEM_TYPE_DIR, ITEM_TYPE_PARENT):
        return OperationResult.failure("Not a directory")

    if ui_state.is_browsing_directory:
        ui_state.browse_current_path = entry.path
    elif is_directory_view(ui_state):
        ui_state.dir_link_current_path = entry.path
    else:
        ui_state.is_browsing_directory = True
        ui_state.browse_base_path = entry.path
        ui_state.browse_current_path = entry.path
    ui_state.right_cursor.row = 1
    ui_state.right_cursor.col = 0
    return OperationResult.success(entry.path)


def go_up(ui_state: UIState) -> OperationResult:
    """Climb one directory level, never above the view's base.

    At the base, browse mode is exited; a dir_link view reports that it is
    already at the top.
    """
    view = directory_view(ui_state)
    if view is None:
        return OperationResult.failure("Not viewing a directory")
    base, current = view

    if _same_dir(base, current):
        if ui_state.is_browsing_directory:
            ui_state.reset_browse()
            return OperationResult.success("Exited directory browse")
        return OperationResult.failure("Already at top level")

    parent = os.path.dirname(os.path.normpath(current))
    if ui_state.is_browsing_directory:
        ui_state.browse_current_path = parent
    else:
        ui_state.dir_link_current_path = parent
    return OperationResult.success(parent)


def resolve_sort_panel(ui_state: UIState, panel: str) -> str:
    """Map the items panel to the directory sort settings while browsing."""
    if panel == PANEL_RIGHT and is_directory_view(ui_state):
        return PANEL_DIR
    return panel


def cycle_sort_mode(ui_state: UIState, panel: str) -> str:
    """Advance ``panel`` to its next sort mode and return it."""
    panel = resolve_sort_panel(ui_state, panel)
    modes = _SORT_MODES[panel]
    mode_field, _asc_field = _SORT_FIELDS[panel]
    current = getattr(ui_state, mode_field)
    idx = modes.index(current) if current in modes else -1
    next_mode = modes[(idx + 1) % len(modes)]
    setattr(ui_state, mode_field, next_mode)
    return next_mode


def toggle_sort_direction(ui_state: UIState, panel: str) -> bool:
    """Flip ``panel``'s direction; returns ``True`` for ascending."""
    panel = resolve_sort_panel(ui_state, panel)
    _mode_field, asc_field = _SORT_FIELDS[panel]
    ascending = not getattr(ui_state, asc_field)
    setattr(ui_state, asc_field, ascending)
    return ascending


def list_view_directory(
    ui_state: UIState,
    fs: object,
    stat_lookup: Callable[[str], object] | None = None,
) -> tuple[list[DirectoryListing], str | None]:
    """List the active directory view as ``(entries, error_message)``.

    A ``..`` entry is added inside subfolders and always in browse mode,
    where it doubles as the exit. Entries are sorted by the directory sort
    settings with ``..`` first.
    """
    view = directory_view(ui_state)
    if view is None:
        return [], None
    base, current = view
    if not fs.is_directory(current):
        return [], f"Directory not found: {current}"

    listing, error = fs.list_directory(current)
    if error is not None:
        return [], "Failed to read directory"

    entries: list[DirectoryListing] = []
    if ui_state.is_browsing_directory or not _same_dir(base, current):
        entries.append(
            DirectoryListing(
                name=PARENT_ENTRY_NAME,
                path=os.path.dirname(os.path.normpath(current)),
                type=ITEM_TYPE_PARENT,
            )
        )
    entries.extend(listing)
    return (
        sort_directory_entries(entries, ui_state.dir_sort_mode, ui_state.dir_sort_asc, stat_lookup),
        None,
    )


def current_directory_entries(
    ui_state: UIState,
    fs: object,
    cache: object | None = None,
) -> tuple[list[DirectoryListing], str | None]:
    """Directory view listing sorted against ``cache`` when given."""
    return list_view_directory(ui_state, fs, cache.get_sync if cache is not None else None)


class FavdirSession:
    """Interactive session over a ``TreeStore``; every transition persists."""

    def __init__(self, store: TreeStore) -> None:
        self.store = store

    @property
    def ui_state(self) -> UIState:
        return self.store.load_ui_state()

    def _apply(self, transition: Callable[[UIState], object]) -> object:
        ui_state = self.store.load_ui_state()
        outcome = transition(ui_state)
        if not self.store.save_ui_state(ui_state):
            logger.error("Failed to save UI state")
        return outcome

    def tree(self) -> list[TreeNode]:
        return build_tree(self.store.load_data(), self.store.load_ui_state())

    def select(self, full_path: str) -> OperationResult:
        """Select the group or dir_link row at ``full_path``."""
        node, _row = find_node(self.tree(), full_path)
        if node is None:
            return OperationResult.failure("Node not visible")
        self._apply(lambda state: select_node(state, node))
        return OperationResult.success(node)

    def focus(self, panel: str) -> None:
        if panel not in (PANEL_LEFT, PANEL_RIGHT):
            raise ValueError(f"unknown panel: {panel!r}")

        def apply(state: UIState) -> None:
            state.focused_panel = panel

        self._apply(apply)

    def set_cursor(self, panel: str, row: int, col: int = 0) -> None:
        def apply(state: UIState) -> None:
            cursor = state.left_cursor if panel == PANEL_LEFT else state.right_cursor
            cursor.row = max(1, row)
            cursor.col = max(0, col)

        self._apply(apply)

    def toggle(self, full_path: str) -> bool:
        return self.store.toggle_expanded(full_path)

    def browse_into(self, entry: DirectoryListing | Item) -> OperationResult:
        return self._apply(lambda state: browse_into(state, entry))

    def go_up(self) -> OperationResult:
        return self._apply(go_up)

    def cycle_sort_mode(self, panel: str) -> str:
        """Cycle a panel's sort mode; switching groups to ``alpha`` persists it."""
        mode = self._apply(lambda state: cycle_sort_mode(state, panel))
        if panel == PANEL_LEFT and mode == SORT_ALPHA:
            self.store.sort_groups("", SORT_ALPHA)
        logger.info(f"Sort mode for {panel} panel: {mode}")
        return mode

    def toggle_sort_direction(self, panel: str) -> bool:
        return self._apply(lambda state: toggle_sort_direction(state, panel))

    def items(self) -> list[Item]:
        """Items of the selected group in the right panel's display order."""
        ui_state = self.store.load_ui_state()
        if not ui_state.last_selected_group:
            return []
        return self.store.sorted_items(
            ui_state.last_selected_group,
            ui_state.right_sort_mode,
            ui_state.right_sort_asc,
        )

    def directory_entries(self) -> tuple[list[DirectoryListing], str | None]:
        return current_directory_entries(self.store.load_ui_state(), self.store.fs, self.store.stat_cache)

    def prefetch_directory(
        self,
        on_complete: Callable[[], None],
        on_progress: Callable[[int, int], None] | None = None,
    ) -> None:
        """Warm the stat cache for the active directory view."""
        ui_state = self.store.load_ui_state()
        entries, _error = list_view_directory(ui_state, self.store.fs, lambda _path: None)
        targets = [entry for entry in entries if entry.type != ITEM_TYPE_PARENT]
        self.store.stat_cache.prefetch_async(collect_paths(targets), on_complete, on_progress)

    def move_group(self, full_path: str, up: bool) -> OperationResult:
        """Move a group or dir_link one row up or down among its siblings."""
        ui_state = self.store.load_ui_state()
        if ui_state.left_sort_mode != SORT_CUSTOM:
            return OperationResult.failure("Reorder only works in custom sort mode")

        parent_path = paths.get_parent(full_path)
        data = self.store.load_data()
        if parent_path:
            parent, _ = find_group(data, parent_path)
            if parent is None:
                return OperationResult.failure("Parent group not found")
            sequence = sort_mixed_children(parent, True)
        else:
            sequence = sorted(data.groups, key=lambda group: group.order)
        name = paths.get_name(full_path)
        index = next((idx for idx, entry in enumerate(sequence, start=1) if entry.name == name), 0)
        if index == 0:
            return OperationResult.failure("Group not found")

        step_up = up if ui_state.left_sort_asc else not up
        reorder = self.store.reorder_up if step_up else self.store.reorder_down
        new_index = reorder(KIND_GROUP, parent_path, index)
        if new_index == index:
            return OperationResult.failure("Cannot move further")
        return OperationResult.success(new_index)

    def move_item(self, group_path: str, item_path: str, up: bool) -> OperationResult:
        """Move an item one row up or down in custom order."""
        ui_state = self.store.load_ui_state()
        if ui_state.right_sort_mode != SORT_CUSTOM:
            return OperationResult.failure("Reorder only works in custom sort mode")
        ordered = self.store.sorted_items(group_path, SORT_CUSTOM, True)
        index = next((idx for idx, item in enumerate(ordered, start=1) if item.path == item_path), 0)
        if index == 0:
            return OperationResult.failure("Item not found in group")

        step_up = up if ui_state.right_sort_asc else not up
        reorder = self.store.reorder_up if step_up else self.store.reorder_down
        new_index = reorder(KIND_ITEM, group_path, index)
        if new_index == index:
            return OperationResult.failure("Cannot move further")
        return OperationResult.success(new_index)


__all__ = [
    "FavdirSession",
    "select_node",
    "is_directory_view",
    "directory_view",
    "browse_into",
    "go_up",
    "resolve_sort_panel",
    "cycle_sort_mode",
    "toggle_sort_direction",
    "list_view_directory",
    "current_directory_entries",
]
