"""Dot-delimited group path helpers.

A group path such as ``Work.Projects.Active`` names a node by walking group
names from the root forest downwards. Everything here is pure string work;
no tree or filesystem access happens in this module.
"""

from __future__ import annotations

from collections.abc import Iterable

from .constants import PATH_SEPARATOR


def split(path: str | None) -> list[str]:
    """Split ``path`` into segments; empty or ``None`` yields ``[]``."""
    if not path:
        return []
    return path.split(PATH_SEPARATOR)


def join(*segments: str | None) -> str:
    """Join non-empty segments with the path separator."""
    return PATH_SEPARATOR.join(segment for segment in segments if segment)


def get_parent(path: str | None) -> str:
    """Return the parent path, or ``""`` for root-level and empty paths."""
    parts = split(path)
    if len(parts) <= 1:
        return ""
    return PATH_SEPARATOR.join(parts[:-1])


def get_name(path: str | None) -> str:
    """Return the last segment of ``path`` (``""`` when empty)."""
    parts = split(path)
    return parts[-1] if parts else ""


def get_depth(path: str | None) -> int:
    """Return the number of segments in ``path``."""
    return len(split(path))


def is_descendant(parent: str | None, child: str | None) -> bool:
    """Return whether ``child`` is strictly nested under ``parent``.

    Every non-empty path is a descendant of the root (empty parent path).
    """
    if not parent:
        return bool(child)
    if not child:
        return False
    return child.startswith(parent + PATH_SEPARATOR)


def is_same_or_descendant(parent: str, child: str) -> bool:
    """Return whether ``child`` equals ``parent`` or is nested under it."""
    return child == parent or is_descendant(parent, child)


def are_siblings(a: str | None, b: str | None) -> bool:
    """Return whether ``a`` and ``b`` share the same parent path."""
    return get_parent(a) == get_parent(b)


def rename_last_segment(path: str | None, new_name: str) -> str:
    """Replace the final segment of ``path`` with ``new_name``."""
    parts = split(path)
    if not parts:
        return new_name or ""
    parts[-1] = new_name
    return PATH_SEPARATOR.join(parts)


def build_moved_path(name: str, new_parent_path: str | None) -> str:
    """Return the path ``name`` would have under ``new_parent_path``."""
    if not new_parent_path:
        return name
    return new_parent_path + PATH_SEPARATOR + name


def rewrite_path(path: str, old_path: str, new_path: str) -> str:
    """Rewrite one path after ``old_path`` became ``new_path``.

    Exact matches are replaced wholesale, descendants keep their suffix and
    unrelated paths are returned unchanged.
    """
    if path == old_path:
        return new_path
    if is_descendant(old_path, path):
        return new_path + path[len(old_path):]
    return path


def rewrite_paths_after_rename(paths: Iterable[str] | None, old_path: str, new_path: str) -> list[str]:
    """Rewrite every path in ``paths`` for a rename or move of ``old_path``.

    Order is preserved. Applying the same rewrite twice is a no-op unless
    ``new_path`` itself lies under ``old_path``.
    """
    if paths is None:
        return []
    return [rewrite_path(path, old_path, new_path) for path in paths]


__all__ = [
    "split",
    "join",
    "get_parent",
    "get_name",
    "get_depth",
    "is_descendant",
    "is_same_or_descendant",
    "are_siblings",
    "rename_last_segment",
    "build_moved_path",
    "rewrite_path",
    "rewrite_paths_after_rename",
]
