"""Comparator factory shared by groups, favorite items, and directory entries.

One comparison algorithm is parameterized by a sort mode, a direction, and
four accessors (path, type, order, name) so each collection kind only
supplies its own field mapping.

Mode baselines (``ascending=True``):

- ``custom``: by ``order``, ties keep their input order
- ``name``/``alpha``: case-insensitive by display name
- ``created``/``modified``: newest first, unknown timestamps count as 0
- ``size``: largest first, directories and unknown sizes count as 0
- ``type``: directories before files, then by name

Descending output is the exact reverse of the ascending output.
"""

from __future__ import annotations

import functools
import os
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from .constants import (
    ITEM_TYPE_DIR,
    ITEM_TYPE_FILE,
    ITEM_TYPE_GROUP,
    ITEM_TYPE_PARENT,
    SORT_ALPHA,
    SORT_CREATED,
    SORT_CUSTOM,
    SORT_MODIFIED,
    SORT_NAME,
    SORT_SIZE,
    SORT_TYPE,
    STAT_SORT_MODES,
)
from .fs import FileStat, stat_path
from .model import DirLink, Group

Comparator = Callable[[Any, Any], int]


def default_get_path(entry: Any) -> str:
    return getattr(entry, "path", None) or ""


def default_get_type(entry: Any) -> str:
    return getattr(entry, "type", None) or ITEM_TYPE_FILE


def default_get_order(entry: Any) -> int:
    return getattr(entry, "order", None) or 0


def default_get_name(entry: Any) -> str:
    """Explicit ``name`` when present, otherwise the basename of ``path``."""
    name = getattr(entry, "name", None)
    if name:
        return name
    path = getattr(entry, "path", None)
    if path:
        return os.path.basename(path.rstrip(os.sep))
    return ""


@dataclass(frozen=True)
class SortOptions:
    """Sort mode, direction, accessors, and the metadata source for stat modes.

    ``stat_lookup`` defaults to a blocking stat; pass a ``StatCache.get_sync``
    bound method to sort against cached metadata.
    """

    mode: str = SORT_CUSTOM
    ascending: bool = True
    get_path: Callable[[Any], str] = default_get_path
    get_type: Callable[[Any], str] = default_get_type
    get_order: Callable[[Any], int] = default_get_order
    get_name: Callable[[Any], str] = default_get_name
    stat_lookup: Callable[[str], FileStat | None] | None = None


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def _stat_for(options: SortOptions, path: str) -> FileStat | None:
    if not path:
        return None
    lookup = options.stat_lookup or stat_path
    return lookup(path)


def _created_time(options: SortOptions, entry: Any) -> float:
    stat = _stat_for(options, options.get_path(entry))
    return stat.birthtime if stat is not None else 0


def _modified_time(options: SortOptions, entry: Any) -> float:
    stat = _stat_for(options, options.get_path(entry))
    return stat.mtime if stat is not None else 0


def _size(options: SortOptions, entry: Any) -> int:
    if options.get_type(entry) == ITEM_TYPE_DIR:
        return 0
    stat = _stat_for(options, options.get_path(entry))
    return stat.size if stat is not None else 0


def base_comparator(options: SortOptions) -> Comparator:
    """Return the three-way comparison for ``options.mode`` ignoring direction."""
    mode = options.mode
    get_name = options.get_name
    get_order = options.get_order
    get_type = options.get_type

    def by_name(a: Any, b: Any) -> int:
        return _cmp(get_name(a).lower(), get_name(b).lower())

    if mode in (SORT_NAME, SORT_ALPHA):
        return by_name
    if mode == SORT_CREATED:
        return lambda a, b: _cmp(_created_time(options, b), _created_time(options, a))
    if mode == SORT_MODIFIED:
        return lambda a, b: _cmp(_modified_time(options, b), _modified_time(options, a))
    if mode == SORT_SIZE:
        return lambda a, b: _cmp(_size(options, b), _size(options, a))
    if mode == SORT_TYPE:

        def by_type(a: Any, b: Any) -> int:
            a_is_dir = get_type(a) == ITEM_TYPE_DIR
            b_is_dir = get_type(b) == ITEM_TYPE_DIR
            if a_is_dir != b_is_dir:
                return -1 if a_is_dir else 1
            return by_name(a, b)

        return by_type
    return lambda a, b: _cmp(get_order(a), get_order(b))


def create_comparator(options: SortOptions) -> Comparator:
    """Return a three-way comparator honoring ``options.ascending``."""
    base = base_comparator(options)
    if options.ascending:
        return base
    return lambda a, b: -base(a, b)


def sort_list(items: Iterable[Any], options: SortOptions) -> list[Any]:
    """Return a stably sorted copy; descending is the reversed ascending order."""
    ordered = sorted(items, key=functools.cmp_to_key(base_comparator(options)))
    if not options.ascending:
        ordered.reverse()
    return ordered


def sort_in_place(items: list[Any], options: SortOptions) -> None:
    items[:] = sort_list(items, options)


def renumber_order(items: Sequence[Any]) -> None:
    """Assign ``order = 1..N`` following the current iteration order."""
    for idx, item in enumerate(items, start=1):
        item.order = idx


def sort_and_renumber(items: list[Any], options: SortOptions) -> None:
    sort_in_place(items, options)
    renumber_order(items)


def item_options(
    mode: str,
    ascending: bool = True,
    stat_lookup: Callable[[str], FileStat | None] | None = None,
) -> SortOptions:
    """Options for favorite items; ``alpha`` is treated as ``name``."""
    return SortOptions(
        mode=SORT_NAME if mode == SORT_ALPHA else mode,
        ascending=ascending,
        get_path=lambda item: item.path or "",
        get_type=lambda item: item.type or ITEM_TYPE_FILE,
        get_order=lambda item: item.order or 0,
        get_name=lambda item: item.name,
        stat_lookup=stat_lookup,
    )


def group_options(mode: str, ascending: bool = True) -> SortOptions:
    """Options for groups, which have no filesystem path."""
    return SortOptions(
        mode=mode,
        ascending=ascending,
        get_path=lambda _group: "",
        get_type=lambda _group: ITEM_TYPE_GROUP,
        get_order=lambda group: group.order or 0,
        get_name=lambda group: group.name or "",
    )


def directory_options(
    mode: str,
    ascending: bool = True,
    stat_lookup: Callable[[str], FileStat | None] | None = None,
) -> SortOptions:
    return SortOptions(
        mode=mode,
        ascending=ascending,
        get_path=lambda entry: entry.path or "",
        get_type=lambda entry: entry.type or ITEM_TYPE_FILE,
        get_order=lambda entry: getattr(entry, "order", 0) or 0,
        get_name=lambda entry: entry.name or "",
        stat_lookup=stat_lookup,
    )


def item_comparator(mode: str, ascending: bool = True, stat_lookup=None) -> Comparator:
    return create_comparator(item_options(mode, ascending, stat_lookup))


def group_comparator(mode: str, ascending: bool = True) -> Comparator:
    return create_comparator(group_options(mode, ascending))


def _is_parent_entry(entry: Any) -> bool:
    return getattr(entry, "type", None) == ITEM_TYPE_PARENT


def directory_comparator(mode: str, ascending: bool = True, stat_lookup=None) -> Comparator:
    """Comparator for raw directory entries with ``..`` always first."""
    base = create_comparator(directory_options(mode, ascending, stat_lookup))

    def compare(a: Any, b: Any) -> int:
        a_parent = _is_parent_entry(a)
        b_parent = _is_parent_entry(b)
        if a_parent or b_parent:
            return (b_parent - a_parent) if a_parent != b_parent else 0
        return base(a, b)

    return compare


def sort_directory_entries(
    entries: Iterable[Any],
    mode: str,
    ascending: bool = True,
    stat_lookup: Callable[[str], FileStat | None] | None = None,
) -> list[Any]:
    """Sort directory entries, keeping the synthetic parent entry on top."""
    parents: list[Any] = []
    rest: list[Any] = []
    for entry in entries:
        (parents if _is_parent_entry(entry) else rest).append(entry)
    return parents + sort_list(rest, directory_options(mode, ascending, stat_lookup))


def mixed_children_comparator(ascending: bool = True) -> Comparator:
    """Order-only comparator for groups and dir_links sharing one order space."""
    if ascending:
        return lambda a, b: _cmp(a.order or 0, b.order or 0)
    return lambda a, b: _cmp(b.order or 0, a.order or 0)


def sort_mixed_children(group: Group, ascending: bool = True) -> list[Group | DirLink]:
    """Merge ``group.children`` and ``group.dir_links`` by their shared order."""
    merged: list[Group | DirLink] = [*group.children, *group.dir_links]
    ordered = sorted(merged, key=functools.cmp_to_key(mixed_children_comparator(True)))
    if not ascending:
        ordered.reverse()
    return ordered


def next_order(items: Iterable[Any]) -> int:
    """Return ``max(order) + 1`` over ``items`` (``1`` when empty)."""
    return max((getattr(item, "order", 0) or 0 for item in items), default=0) + 1


def next_child_order(group: Group) -> int:
    """Next order in the order space shared by children and dir_links."""
    return next_order([*group.children, *group.dir_links])


def mode_requires_stat(mode: str) -> bool:
    return mode in STAT_SORT_MODES


def collect_paths(items: Iterable[Any], get_path: Callable[[Any], str] | None = None) -> list[str]:
    """Return the non-empty filesystem paths of ``items`` for prefetching."""
    accessor = get_path or default_get_path
    out: list[str] = []
    for item in items:
        path = accessor(item)
        if path:
            out.append(path)
    return out


def prefetch_stats(
    cache: Any,
    items: Iterable[Any],
    on_complete: Callable[[], None],
    on_progress: Callable[[int, int], None] | None = None,
    get_path: Callable[[Any], str] | None = None,
) -> None:
    """Warm ``cache`` for every item path before a metadata sort."""
    cache.prefetch_async(collect_paths(items, get_path), on_complete, on_progress)


__all__ = [
    "SortOptions",
    "base_comparator",
    "create_comparator",
    "sort_list",
    "sort_in_place",
    "renumber_order",
    "sort_and_renumber",
    "item_options",
    "group_options",
    "directory_options",
    "item_comparator",
    "group_comparator",
    "directory_comparator",
    "sort_directory_entries",
    "mixed_children_comparator",
    "sort_mixed_children",
    "next_order",
    "next_child_order",
    "mode_requires_stat",
    "collect_paths",
    "prefetch_stats",
]
