"""Domain datatypes for the favorites tree and its UI state document.

``Data`` holds the recursive group forest persisted in the main data file.
``UIState`` is the second, independent document tracking expansion,
selection, browsing cursors, and per-panel sort settings.

Both types round-trip through plain JSON-compatible dicts. Decoding is
lenient: malformed fields fall back to defaults instead of raising.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from . import paths
from .constants import (
    DEFAULT_DIR_SORT_MODE,
    DEFAULT_LEFT_SORT_MODE,
    DEFAULT_RIGHT_SORT_MODE,
    DIR_SORT_MODES,
    ITEM_TYPE_DIR,
    ITEM_TYPE_FILE,
    LEFT_SORT_MODES,
    PANEL_LEFT,
    PANEL_RIGHT,
    RIGHT_SORT_MODES,
    SELECTION_DIR_LINK,
    SELECTION_GROUP,
)


def _coerce_int(value: object, default: int = 0) -> int:
    """Return ``value`` when it is a real int (not bool), else ``default``."""
    if isinstance(value, bool) or not isinstance(value, int):
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return default
    return value


def _coerce_str(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _coerce_bool(value: object, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def _coerce_list(value: object) -> list:
    return value if isinstance(value, list) else []


@dataclass
class Item:
    """One favorite file or directory inside a group."""

    path: str
    type: str = ITEM_TYPE_FILE
    order: int = 0

    @property
    def name(self) -> str:
        """Basename used for display and name sorting."""
        return os.path.basename(self.path.rstrip(os.sep)) or self.path

    def to_dict(self) -> dict[str, object]:
        return {"path": self.path, "type": self.type, "order": self.order}

    @classmethod
    def from_dict(cls, raw: object) -> Item | None:
        if not isinstance(raw, dict):
            return None
        path = _coerce_str(raw.get("path"))
        if not path:
            return None
        item_type = raw.get("type")
        if item_type not in (ITEM_TYPE_FILE, ITEM_TYPE_DIR):
            item_type = ITEM_TYPE_FILE
        return cls(path=path, type=item_type, order=_coerce_int(raw.get("order")))


@dataclass
class DirLink:
    """A named live-browsing root nested under a group."""

    name: str
    path: str
    order: int = 0

    def to_dict(self) -> dict[str, object]:
        return {"name": self.name, "path": self.path, "order": self.order}

    @classmethod
    def from_dict(cls, raw: object) -> DirLink | None:
        if not isinstance(raw, dict):
            return None
        name = _coerce_str(raw.get("name"))
        path = _coerce_str(raw.get("path"))
        if not name or not path:
            return None
        return cls(name=name, path=path, order=_coerce_int(raw.get("order")))


@dataclass
class Group:
    """A named node in the favorites forest."""

    name: str
    order: int = 0
    items: list[Item] = field(default_factory=list)
    children: list[Group] = field(default_factory=list)
    dir_links: list[DirLink] = field(default_factory=list)

    def has_children(self) -> bool:
        """Return whether the group has any child group or dir_link."""
        return bool(self.children) or bool(self.dir_links)

    def child_names(self) -> set[str]:
        """Names occupied at the level below this group (groups and dir_links)."""
        names = {child.name for child in self.children}
        names.update(link.name for link in self.dir_links)
        return names

    def find_child(self, name: str) -> Group | None:
        for child in self.children:
            if child.name == name:
                return child
        return None

    def find_dir_link(self, name: str) -> DirLink | None:
        for link in self.dir_links:
            if link.name == name:
                return link
        return None

    def find_item(self, item_path: str) -> tuple[Item | None, int]:
        """Return ``(item, zero_based_index)`` for an exact path match."""
        for idx, item in enumerate(self.items):
            if item.path == item_path:
                return item, idx
        return None, -1

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "order": self.order,
            "items": [item.to_dict() for item in self.items],
            "children": [child.to_dict() for child in self.children],
            "dir_links": [link.to_dict() for link in self.dir_links],
        }

    @classmethod
    def from_dict(cls, raw: object) -> Group | None:
        if not isinstance(raw, dict):
            return None
        name = _coerce_str(raw.get("name"))
        if not name:
            return None
        items = [item for item in map(Item.from_dict, _coerce_list(raw.get("items"))) if item is not None]
        children = [child for child in map(Group.from_dict, _coerce_list(raw.get("children"))) if child is not None]
        dir_links = [link for link in map(DirLink.from_dict, _coerce_list(raw.get("dir_links"))) if link is not None]
        return cls(
            name=name,
            order=_coerce_int(raw.get("order")),
            items=items,
            children=children,
            dir_links=dir_links,
        )


@dataclass
class Data:
    """Root aggregate of the main data document."""

    groups: list[Group] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {"groups": [group.to_dict() for group in self.groups]}

    @classmethod
    def from_dict(cls, raw: object) -> Data:
        """Decode a data document.

        Raises ``ValueError`` when ``raw`` is not an object with a ``groups``
        list; individual malformed groups are dropped.
        """
        if not isinstance(raw, dict) or not isinstance(raw.get("groups"), list):
            raise ValueError("data document must be an object with a 'groups' list")
        groups = [group for group in map(Group.from_dict, raw["groups"]) if group is not None]
        return cls(groups=groups)

    @classmethod
    def seeded(cls, group_names: Iterable[str]) -> Data:
        """Return a fresh document with one empty group per name, ordered 1..N."""
        groups = [Group(name=name, order=idx) for idx, name in enumerate(group_names, start=1) if name]
        return cls(groups=groups)


class PathSet:
    """Insertion-ordered set of group paths with path-rewrite helpers."""

    def __init__(self, values: Iterable[str] = ()) -> None:
        self._values: dict[str, None] = {}
        for value in values:
            if isinstance(value, str) and value:
                self._values[value] = None

    def __contains__(self, value: object) -> bool:
        return value in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PathSet):
            return list(self._values) == list(other._values)
        if isinstance(other, (list, tuple)):
            return list(self._values) == list(other)
        if isinstance(other, (set, frozenset)):
            return set(self._values) == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"PathSet({list(self._values)!r})"

    def add(self, value: str) -> None:
        self._values[value] = None

    def discard(self, value: str) -> None:
        self._values.pop(value, None)

    def discard_subtree(self, root: str) -> None:
        """Drop ``root`` and every path nested under it."""
        self._values = {
            value: None for value in self._values if not paths.is_same_or_descendant(root, value)
        }

    def rewrite(self, old_path: str, new_path: str) -> None:
        """Rewrite entries after ``old_path`` was renamed or moved to ``new_path``."""
        self._values = dict.fromkeys(paths.rewrite_paths_after_rename(self._values, old_path, new_path))

    def to_list(self) -> list[str]:
        return list(self._values)


@dataclass
class CursorPosition:
    row: int = 1
    col: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"row": self.row, "col": self.col}

    @classmethod
    def from_dict(cls, raw: object) -> CursorPosition:
        if not isinstance(raw, dict):
            return cls()
        return cls(row=max(1, _coerce_int(raw.get("row"), 1)), col=max(0, _coerce_int(raw.get("col"), 0)))


def _coerce_choice(value: object, choices: Iterable[str], default: str) -> str:
    return value if isinstance(value, str) and value in tuple(choices) else default


@dataclass
class UIState:
    """View state persisted separately from the favorites tree."""

    expanded_groups: PathSet = field(default_factory=PathSet)
    last_selected_group: str | None = None
    last_selected_type: str = SELECTION_GROUP
    last_selected_dir_link: str | None = None
    dir_link_current_path: str | None = None
    is_browsing_directory: bool = False
    browse_base_path: str | None = None
    browse_current_path: str | None = None
    focused_panel: str = PANEL_LEFT
    left_cursor: CursorPosition = field(default_factory=CursorPosition)
    right_cursor: CursorPosition = field(default_factory=CursorPosition)
    left_sort_mode: str = DEFAULT_LEFT_SORT_MODE
    right_sort_mode: str = DEFAULT_RIGHT_SORT_MODE
    dir_sort_mode: str = DEFAULT_DIR_SORT_MODE
    left_sort_asc: bool = True
    right_sort_asc: bool = True
    dir_sort_asc: bool = True

    def rewrite_group_path(self, old_path: str, new_path: str) -> None:
        """Apply a rename/move of ``old_path`` to every path-valued field."""
        self.expanded_groups.rewrite(old_path, new_path)
        if self.last_selected_group is not None:
            self.last_selected_group = paths.rewrite_path(self.last_selected_group, old_path, new_path)

    def reset_browse(self) -> None:
        self.is_browsing_directory = False
        self.browse_base_path = None
        self.browse_current_path = None

    def to_dict(self) -> dict[str, object]:
        return {
            "expanded_groups": self.expanded_groups.to_list(),
            "last_selected_group": self.last_selected_group,
            "last_selected_type": self.last_selected_type,
            "last_selected_dir_link": self.last_selected_dir_link,
            "dir_link_current_path": self.dir_link_current_path,
            "is_browsing_directory": self.is_browsing_directory,
            "browse_base_path": self.browse_base_path,
            "browse_current_path": self.browse_current_path,
            "focused_panel": self.focused_panel,
            "left_cursor": self.left_cursor.to_dict(),
            "right_cursor": self.right_cursor.to_dict(),
            "left_sort_mode": self.left_sort_mode,
            "right_sort_mode": self.right_sort_mode,
            "dir_sort_mode": self.dir_sort_mode,
            "left_sort_asc": self.left_sort_asc,
            "right_sort_asc": self.right_sort_asc,
            "dir_sort_asc": self.dir_sort_asc,
        }

    @classmethod
    def from_dict(cls, raw: object) -> UIState:
        """Decode a UI state document, merging missing/invalid keys with defaults.

        Raises ``ValueError`` when ``raw`` is not a JSON object.
        """
        if not isinstance(raw, dict):
            raise ValueError("ui state document must be an object")
        defaults = cls()
        return cls(
            expanded_groups=PathSet(_coerce_list(raw.get("expanded_groups"))),
            last_selected_group=_coerce_str(raw.get("last_selected_group")),
            last_selected_type=_coerce_choice(
                raw.get("last_selected_type"),
                (SELECTION_GROUP, SELECTION_DIR_LINK),
                defaults.last_selected_type,
            ),
            last_selected_dir_link=_coerce_str(raw.get("last_selected_dir_link")),
            dir_link_current_path=_coerce_str(raw.get("dir_link_current_path")),
            is_browsing_directory=_coerce_bool(raw.get("is_browsing_directory"), False),
            browse_base_path=_coerce_str(raw.get("browse_base_path")),
            browse_current_path=_coerce_str(raw.get("browse_current_path")),
            focused_panel=_coerce_choice(raw.get("focused_panel"), (PANEL_LEFT, PANEL_RIGHT), PANEL_LEFT),
            left_cursor=CursorPosition.from_dict(raw.get("left_cursor")),
            right_cursor=CursorPosition.from_dict(raw.get("right_cursor")),
            left_sort_mode=_coerce_choice(raw.get("left_sort_mode"), LEFT_SORT_MODES, defaults.left_sort_mode),
            right_sort_mode=_coerce_choice(raw.get("right_sort_mode"), RIGHT_SORT_MODES, defaults.right_sort_mode),
            dir_sort_mode=_coerce_choice(raw.get("dir_sort_mode"), DIR_SORT_MODES, defaults.dir_sort_mode),
            left_sort_asc=_coerce_bool(raw.get("left_sort_asc"), True),
            right_sort_asc=_coerce_bool(raw.get("right_sort_asc"), True),
            dir_sort_asc=_coerce_bool(raw.get("dir_sort_asc"), True),
        )


__all__ = [
    "Item",
    "DirLink",
    "Group",
    "Data",
    "PathSet",
    "CursorPosition",
    "UIState",
]
