"""Flatten the favorites forest into display rows for the groups panel."""

from __future__ import annotations

from dataclasses import dataclass

from . import paths
from .constants import SORT_CUSTOM
from .model import Data, DirLink, Group, UIState
from .sorting import group_options, sort_list, sort_mixed_children


@dataclass(frozen=True)
class TreeNode:
    """One rendered row; rebuilt from scratch on every projection."""

    name: str
    full_path: str
    level: int
    is_expanded: bool = False
    has_children: bool = False
    is_leaf: bool = True
    is_dir_link: bool = False
    dir_path: str | None = None
    group: Group | None = None
    dir_link: DirLink | None = None


def _group_node(group: Group, full_path: str, level: int, expanded: bool) -> TreeNode:
    has_children = group.has_children()
    return TreeNode(
        name=group.name,
        full_path=full_path,
        level=level,
        is_expanded=expanded,
        has_children=has_children,
        is_leaf=not has_children,
        group=group,
    )


def _dir_link_node(link: DirLink, full_path: str, level: int) -> TreeNode:
    return TreeNode(
        name=link.name,
        full_path=full_path,
        level=level,
        is_dir_link=True,
        dir_path=link.path,
        dir_link=link,
    )


def build_tree(data: Data, ui_state: UIState) -> list[TreeNode]:
    """Return visible rows in display order.

    Expanded groups are recursed into; dir_links are always leaves.
    """
    ascending = ui_state.left_sort_asc
    nodes: list[TreeNode] = []

    def visit(entries: list[Group | DirLink], prefix: str, level: int) -> None:
        for entry in entries:
            full_path = paths.build_moved_path(entry.name, prefix)
            if isinstance(entry, DirLink):
                nodes.append(_dir_link_node(entry, full_path, level))
                continue
            expanded = full_path in ui_state.expanded_groups
            nodes.append(_group_node(entry, full_path, level, expanded))
            if expanded and entry.has_children():
                visit(sort_mixed_children(entry, ascending), full_path, level + 1)

    visit(sort_list(data.groups, group_options(SORT_CUSTOM, ascending)), "", 0)
    return nodes


def find_node(nodes: list[TreeNode], full_path: str | None) -> tuple[TreeNode | None, int]:
    """Return ``(node, zero_based_row)`` for ``full_path`` or ``(None, -1)``."""
    if full_path:
        for idx, node in enumerate(nodes):
            if node.full_path == full_path:
                return node, idx
    return None, -1


__all__ = ["TreeNode", "build_tree", "find_node"]
