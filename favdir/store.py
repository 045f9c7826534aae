"""Path-addressed CRUD over the favorites group tree.

Every mutating ``TreeStore`` method follows the same shape: load both
documents, validate, mutate in memory, then persist wholesale. Validation
runs before any splice, so a failed call leaves the stored tree untouched
and writes nothing. Results are ``OperationResult`` values; validation
problems are never raised.

Whenever a group path changes (rename, move, removal) the UI state is
rewritten through ``UIState.rewrite_group_path`` so expansion and
selection keep pointing at the same nodes.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable

from . import paths
from .config import FavdirConfig
from .constants import (
    ITEM_TYPE_DIR,
    ITEM_TYPE_FILE,
    SORT_ALPHA,
    SORT_CUSTOM,
)
from .fs import LocalFileSystem, normalize_path
from .model import Data, DirLink, Group, Item, UIState
from .persistence import create_storage
from .results import OperationResult
from .scheduler import TickQueue
from .sorting import (
    group_options,
    item_options,
    next_child_order,
    next_order,
    prefetch_stats,
    renumber_order,
    sort_in_place,
    sort_list,
    sort_mixed_children,
)
from .stat_cache import StatCache

logger = logging.getLogger(__name__)

KIND_GROUP = "group"
KIND_ITEM = "item"


def find_group(data: Data, group_path: str | None) -> tuple[Group | None, list[Group] | None]:
    """Resolve ``group_path`` to ``(group, sibling_list)``.

    Each segment must exactly match a group name at its depth; dir_links are
    never matched. Any missing segment yields ``(None, None)``.
    """
    segments = paths.split(group_path)
    if not segments:
        return None, None

    current_list = data.groups
    group: Group | None = None
    sibling_list: list[Group] | None = None
    for segment in segments:
        group = next((candidate for candidate in current_list if candidate.name == segment), None)
        if group is None:
            return None, None
        sibling_list = current_list
        current_list = group.children
    return group, sibling_list


def find_dir_link(data: Data, link_path: str | None) -> tuple[DirLink | None, Group | None]:
    """Resolve ``Parent.Path.LinkName`` to ``(dir_link, parent_group)``."""
    if paths.get_depth(link_path) < 2:
        return None, None
    parent, _siblings = find_group(data, paths.get_parent(link_path))
    if parent is None:
        return None, None
    link = parent.find_dir_link(paths.get_name(link_path))
    if link is None:
        return None, None
    return link, parent


def group_paths(data: Data) -> list[str]:
    """Pre-order list of every group path (dir_links excluded)."""
    out: list[str] = []

    def collect(groups: list[Group], prefix: str) -> None:
        for group in groups:
            path = paths.build_moved_path(group.name, prefix)
            out.append(path)
            if group.children:
                collect(group.children, path)

    collect(data.groups, "")
    return out


def _level_names(data: Data, parent: Group | None) -> set[str]:
    """Names occupied directly under ``parent`` (root when ``None``)."""
    if parent is None:
        return {group.name for group in data.groups}
    return parent.child_names()


def _name_error(
    name: str | None,
    empty_message: str,
    dot_message: str = "Name cannot contain '.'",
) -> str | None:
    if not name:
        return empty_message
    if paths.PATH_SEPARATOR in name:
        return dot_message
    return None


def _index_of(items: list, target: object) -> int:
    for idx, candidate in enumerate(items):
        if candidate is target:
            return idx
    return -1


class TreeStore:
    """Favorites tree plus UI state, persisted after each mutation.

    A store owns its own ``StatCache`` and ``TickQueue``; two stores never
    share metadata.
    """

    def __init__(
        self,
        config: FavdirConfig | None = None,
        *,
        storage: object | None = None,
        fs: object | None = None,
        ticks: TickQueue | None = None,
        initial_data: Data | None = None,
        initial_ui_state: UIState | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.config = config or FavdirConfig()
        self.ticks = ticks or TickQueue()
        self.fs = fs or LocalFileSystem(self.ticks)
        self.storage = storage or create_storage(self.config, initial_data, initial_ui_state)
        if clock is None:
            self.stat_cache = StatCache(self.fs, self.ticks, ttl=self.config.stat_ttl)
        else:
            self.stat_cache = StatCache(self.fs, self.ticks, ttl=self.config.stat_ttl, clock=clock)

    @property
    def is_sandbox(self) -> bool:
        return self.config.sandbox

    # Documents

    def load_data(self) -> Data:
        return self.storage.load_data()

    def save_data(self, data: Data) -> bool:
        return self.storage.save_data(data)

    def load_ui_state(self) -> UIState:
        return self.storage.load_ui_state()

    def save_ui_state(self, state: UIState) -> bool:
        return self.storage.save_ui_state(state)

    def get_data(self) -> Data:
        return self.load_data()

    def get_group_list(self) -> list[str]:
        return group_paths(self.load_data())

    def _commit(self, data: Data, ui_state: UIState | None = None, value: object = None) -> OperationResult:
        if not self.save_data(data):
            return OperationResult.failure("Failed to save data")
        if ui_state is not None and not self.save_ui_state(ui_state):
            logger.error("Tree saved but UI state could not be written")
        return OperationResult.success(value)

    def _is_protected(self, group: Group) -> bool:
        return group.name in self.config.protected_groups

    # Groups

    def add_group(self, parent_path: str | None, name: str) -> OperationResult:
        error = _name_error(name, "Group name cannot be empty", "Group name cannot contain '.'")
        if error is not None:
            return OperationResult.failure(error)

        data = self.load_data()
        parent: Group | None = None
        if parent_path:
            parent, _siblings = find_group(data, parent_path)
            if parent is None:
                return OperationResult.failure("Parent group not found")
            target_list = parent.children
            order = next_child_order(parent)
        else:
            target_list = data.groups
            order = next_order(data.groups)

        if name in _level_names(data, parent):
            return OperationResult.failure("Group already exists")

        target_list.append(Group(name=name, order=order))
        path = paths.build_moved_path(name, parent_path)
        logger.info(f"Added group {path}")
        return self._commit(data, value=path)

    def remove_group(self, group_path: str) -> OperationResult:
        data = self.load_data()
        group, parent_list = find_group(data, group_path)
        if group is None or parent_list is None:
            return OperationResult.failure("Group not found")
        if self._is_protected(group):
            return OperationResult.failure("Cannot delete protected group")

        del parent_list[_index_of(parent_list, group)]

        ui_state = self.load_ui_state()
        ui_state.expanded_groups.discard_subtree(group_path)
        if ui_state.last_selected_group and paths.is_same_or_descendant(group_path, ui_state.last_selected_group):
            ui_state.last_selected_group = None
        logger.info(f"Removed group {group_path}")
        return self._commit(data, ui_state)

    def rename_group(self, group_path: str, new_name: str) -> OperationResult:
        error = _name_error(new_name, "Name cannot be empty")
        if error is not None:
            return OperationResult.failure(error)

        data = self.load_data()
        group, _siblings = find_group(data, group_path)
        if group is None:
            return OperationResult.failure("Group not found")

        parent, _ = find_group(data, paths.get_parent(group_path))
        if new_name != group.name and new_name in _level_names(data, parent):
            return OperationResult.failure("A group with this name already exists")

        new_path = paths.rename_last_segment(group_path, new_name)
        group.name = new_name

        ui_state = self.load_ui_state()
        ui_state.rewrite_group_path(group_path, new_path)
        logger.info(f"Renamed group {group_path} to {new_path}")
        return self._commit(data, ui_state, value=new_path)

    def move_group(self, group_path: str, new_parent_path: str | None) -> OperationResult:
        """Move a group under ``new_parent_path`` (root when empty).

        The group takes the next free order in the destination, ``max + 1``
        over child groups and dir_links, which is ``len + 1`` when contiguous.
        """
        if not group_path:
            return OperationResult.failure("No group specified")
        new_parent_path = new_parent_path or ""

        data = self.load_data()
        group, source_list = find_group(data, group_path)
        if group is None or source_list is None:
            return OperationResult.failure("Group not found")
        if self._is_protected(group):
            return OperationResult.failure("Cannot move protected group")

        new_parent: Group | None = None
        if new_parent_path:
            new_parent, _ = find_group(data, new_parent_path)
            if new_parent is None:
                return OperationResult.failure("Target parent not found")
            target_list = new_parent.children
        else:
            target_list = data.groups

        if paths.is_same_or_descendant(group_path, new_parent_path) and new_parent_path:
            return OperationResult.failure("Cannot move group into itself or its children")
        if group.name in _level_names(data, new_parent):
            return OperationResult.failure("A group with this name already exists at target location")

        del source_list[_index_of(source_list, group)]
        group.order = next_child_order(new_parent) if new_parent is not None else next_order(target_list)
        target_list.append(group)

        new_path = paths.build_moved_path(group.name, new_parent_path)
        ui_state = self.load_ui_state()
        ui_state.rewrite_group_path(group_path, new_path)
        logger.info(f"Moved group {group_path} to {new_path}")
        return self._commit(data, ui_state, value=new_path)

    # Directory links

    def add_dir_link(self, parent_path: str | None, name: str, dir_path: str) -> OperationResult:
        error = _name_error(name, "Name cannot be empty")
        if error is not None:
            return OperationResult.failure(error)
        if not parent_path:
            return OperationResult.failure("Directory links must be added to a group, not root level")
        if not dir_path:
            return OperationResult.failure("Directory path cannot be empty")
        abs_path = normalize_path(dir_path)
        if not self.fs.is_directory(abs_path):
            return OperationResult.failure(f"Directory does not exist: {abs_path}")

        data = self.load_data()
        parent, _ = find_group(data, parent_path)
        if parent is None:
            return OperationResult.failure("Parent group not found")
        if parent.find_dir_link(name) is not None:
            return OperationResult.failure("A directory link with this name already exists")
        if parent.find_child(name) is not None:
            return OperationResult.failure("A group with this name already exists")

        parent.dir_links.append(DirLink(name=name, path=abs_path, order=next_child_order(parent)))
        link_path = paths.build_moved_path(name, parent_path)
        logger.info(f"Added directory link {link_path} -> {abs_path}")
        return self._commit(data, value=link_path)

    def remove_dir_link(self, parent_path: str | None, name: str) -> OperationResult:
        if not parent_path:
            return OperationResult.failure("Parent path is required")

        data = self.load_data()
        parent, _ = find_group(data, parent_path)
        if parent is None:
            return OperationResult.failure("Parent group not found")
        link = parent.find_dir_link(name)
        if link is None:
            return OperationResult.failure("Directory link not found")

        del parent.dir_links[_index_of(parent.dir_links, link)]
        logger.info(f"Removed directory link {paths.build_moved_path(name, parent_path)}")
        return self._commit(data)

    # Items

    def add_item(self, group_path: str, item_path: str) -> OperationResult:
        abs_path = normalize_path(item_path)
        if self.fs.is_directory(abs_path):
            item_type = ITEM_TYPE_DIR
        elif self.fs.exists(abs_path):
            item_type = ITEM_TYPE_FILE
        else:
            return OperationResult.failure(f"Path does not exist: {abs_path}")

        data = self.load_data()
        group, _ = find_group(data, group_path)
        if group is None:
            return OperationResult.failure("Group not found")
        existing, _idx = group.find_item(abs_path)
        if existing is not None:
            return OperationResult.failure("Item already exists in this group")

        item = Item(path=abs_path, type=item_type, order=next_order(group.items))
        group.items.append(item)
        logger.info(f"Added {item.name} to {group_path}")
        return self._commit(data, value=item)

    def add_current_dir(self, group_path: str, cwd: str | None = None) -> OperationResult:
        """Add the working directory (or ``cwd``) as an item of ``group_path``."""
        return self.add_item(group_path, cwd or os.getcwd())

    def remove_item(self, group_path: str, item_index: int) -> OperationResult:
        """Remove the item at 1-based ``item_index`` of the persisted list."""
        data = self.load_data()
        group, _ = find_group(data, group_path)
        if group is None:
            return OperationResult.failure("Group not found")
        if item_index < 1 or item_index > len(group.items):
            return OperationResult.failure("Invalid item index")

        removed = group.items.pop(item_index - 1)
        renumber_order(group.items)
        logger.info(f"Removed {removed.name} from {group_path}")
        return self._commit(data, value=removed)

    def remove_item_by_path(self, group_path: str, item_path: str) -> OperationResult:
        """Remove an item identified by its path instead of a position."""
        data = self.load_data()
        group, _ = find_group(data, group_path)
        if group is None:
            return OperationResult.failure("Group not found")
        _item, idx = group.find_item(normalize_path(item_path))
        if idx < 0:
            return OperationResult.failure("Item not found in group")
        return self.remove_item(group_path, idx + 1)

    def move_item(self, from_group: str, item_index: int, to_group: str) -> OperationResult:
        """Move the item at 1-based ``item_index`` of ``from_group`` to ``to_group``.

        A duplicate path in the destination puts the item back at its original
        position and fails.
        """
        data = self.load_data()
        source, _ = find_group(data, from_group)
        target, _ = find_group(data, to_group)
        if source is None:
            return OperationResult.failure("Source group not found")
        if target is None:
            return OperationResult.failure("Target group not found")
        if item_index < 1 or item_index > len(source.items):
            return OperationResult.failure("Invalid item index")

        item = source.items.pop(item_index - 1)
        duplicate, _idx = target.find_item(item.path)
        if duplicate is not None:
            source.items.insert(item_index - 1, item)
            return OperationResult.failure("Item already exists in target group")

        item.order = next_order(target.items)
        target.items.append(item)
        renumber_order(source.items)
        logger.info(f"Moved {item.name} from {from_group} to {to_group}")
        return self._commit(data, value=item)

    def move_item_by_path(self, from_group: str, item_path: str, to_group: str) -> OperationResult:
        data = self.load_data()
        source, _ = find_group(data, from_group)
        if source is None:
            return OperationResult.failure("Source group not found")
        _item, idx = source.find_item(normalize_path(item_path))
        if idx < 0:
            return OperationResult.failure("Item not found in group")
        return self.move_item(from_group, idx + 1, to_group)

    # Expansion

    @staticmethod
    def is_expanded(ui_state: UIState, group_path: str) -> bool:
        return group_path in ui_state.expanded_groups

    def toggle_expanded(self, group_path: str) -> bool:
        """Flip expansion of ``group_path``, persist, and return the new state."""
        ui_state = self.load_ui_state()
        if group_path in ui_state.expanded_groups:
            ui_state.expanded_groups.discard(group_path)
            expanded = False
        else:
            ui_state.expanded_groups.add(group_path)
            expanded = True
        self.save_ui_state(ui_state)
        return expanded

    # Sorting and reordering

    def sort_groups(self, parent_path: str | None, mode: str) -> OperationResult:
        """Persistently sort one sibling level; ``alpha`` freezes into order.

        Below the root, dir_links keep their slots in the shared order space
        and the sorted groups fill the slots groups held before.
        """
        data = self.load_data()
        if not parent_path:
            sort_in_place(data.groups, group_options(mode, True))
            if mode == SORT_ALPHA:
                renumber_order(data.groups)
            return self._commit(data)

        parent, _ = find_group(data, parent_path)
        if parent is None:
            return OperationResult.failure("Parent group not found")
        slots = sort_mixed_children(parent, True)
        sort_in_place(parent.children, group_options(mode, True))
        if mode == SORT_ALPHA:
            ordered_groups = iter(parent.children)
            merged = [next(ordered_groups) if isinstance(entry, Group) else entry for entry in slots]
            renumber_order(merged)
            parent.dir_links.sort(key=lambda link: link.order)
        return self._commit(data)

    def sort_items(self, group_path: str, mode: str) -> OperationResult:
        """Persistently sort a group's items and renumber their order."""
        data = self.load_data()
        group, _ = find_group(data, group_path)
        if group is None:
            return OperationResult.failure("Group not found")
        sort_in_place(group.items, item_options(mode, True, self.stat_cache.get_sync))
        renumber_order(group.items)
        return self._commit(data)

    def freeze_groups_order(self) -> OperationResult:
        """Persist the current left-panel sort as custom order at every level.

        Child groups and dir_links are renumbered together in one sequence.
        """
        data = self.load_data()
        ui_state = self.load_ui_state()
        options = group_options(ui_state.left_sort_mode or SORT_CUSTOM, ui_state.left_sort_asc)

        def freeze(group: Group) -> None:
            siblings = sort_list(sort_mixed_children(group, True), options)
            renumber_order(siblings)
            group.children.sort(key=lambda child: child.order)
            group.dir_links.sort(key=lambda link: link.order)
            for child in group.children:
                freeze(child)

        sort_in_place(data.groups, options)
        renumber_order(data.groups)
        for group in data.groups:
            freeze(group)
        return self._commit(data)

    def _reorder(self, kind: str, path: str | None, index: int, delta: int) -> int:
        data = self.load_data()
        if kind == KIND_ITEM:
            group, _ = find_group(data, path)
            if group is None:
                return index
            sequence: list = sorted(group.items, key=lambda item: item.order)
        elif path:
            parent, _ = find_group(data, path)
            if parent is None:
                return index
            sequence = sort_mixed_children(parent, True)
        else:
            sequence = sorted(data.groups, key=lambda group: group.order)

        new_index = index + delta
        if index < 1 or index > len(sequence) or new_index < 1 or new_index > len(sequence):
            return index

        sequence[index - 1], sequence[new_index - 1] = sequence[new_index - 1], sequence[index - 1]
        renumber_order(sequence)
        if kind == KIND_ITEM:
            group.items.sort(key=lambda item: item.order)
        elif path:
            parent.children.sort(key=lambda child: child.order)
            parent.dir_links.sort(key=lambda link: link.order)
        else:
            data.groups.sort(key=lambda group: group.order)

        if not self._commit(data):
            return index
        return new_index

    def reorder_up(self, kind: str, path: str | None, index: int) -> int:
        """Swap the entry at 1-based ``index`` with the one above it.

        ``kind`` is ``group`` (``path`` is the parent path; dir_links share the
        sequence) or ``item`` (``path`` is the group path). Returns the new
        index, or ``index`` when nothing moved.
        """
        return self._reorder(kind, path, index, -1)

    def reorder_down(self, kind: str, path: str | None, index: int) -> int:
        return self._reorder(kind, path, index, 1)

    # Display snapshots

    def sorted_items(self, group_path: str, mode: str | None = None, ascending: bool | None = None) -> list[Item]:
        """Return a display-sorted copy of a group's items.

        Defaults to the right-panel sort mode and direction. Metadata modes
        read through the stat cache, blocking on misses.
        """
        group, _ = find_group(self.load_data(), group_path)
        if group is None:
            return []
        if mode is None or ascending is None:
            ui_state = self.load_ui_state()
            mode = mode or ui_state.right_sort_mode
            ascending = ui_state.right_sort_asc if ascending is None else ascending
        return sort_list(group.items, item_options(mode, ascending, self.stat_cache.get_sync))

    def prefetch_item_stats(
        self,
        group_path: str,
        on_complete: Callable[[], None],
        on_progress: Callable[[int, int], None] | None = None,
    ) -> None:
        """Warm the stat cache for every item of ``group_path``."""
        group, _ = find_group(self.load_data(), group_path)
        prefetch_stats(self.stat_cache, group.items if group is not None else [], on_complete, on_progress)


__all__ = [
    "KIND_GROUP",
    "KIND_ITEM",
    "TreeStore",
    "find_group",
    "find_dir_link",
    "group_paths",
]
