"""Command-line front door for favdir.

Parses global options, builds the store from settings plus overrides, and
dispatches one subcommand. Failed operations exit with status 1 and the
operation's message on stderr.
"""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Sequence
from pathlib import Path

from .config import load_config
from .constants import DEFAULT_DIR_SORT_MODE, DIR_SORT_MODES, ITEM_TYPE_DIR, RIGHT_SORT_MODES
from .fs import normalize_path
from .logging_setup import configure_logging
from .results import OperationResult
from .sorting import sort_directory_entries
from .store import TreeStore, find_group
from .tree_view import TreeNode, build_tree


def _positive_int(value: str) -> int:
    """argparse type for 1-based indexes."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _check(result: OperationResult) -> object:
    if not result:
        raise SystemExit(result.error)
    return result.value


def format_node(node: TreeNode) -> str:
    """Render one tree row as indented text."""
    indent = "  " * node.level
    if node.is_dir_link:
        return f"{indent}@ {node.name} -> {node.dir_path}"
    if node.has_children:
        marker = "v" if node.is_expanded else ">"
    else:
        marker = "-"
    return f"{indent}{marker} {node.name}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="favdir", description="Manage grouped favorite files and directories.")
    parser.add_argument("--data-file", default=None, help="Path to the favorites data file.")
    parser.add_argument("--ui-state-file", default=None, help="Path to the UI state file.")
    parser.add_argument("--settings", default=None, help="Path to settings.json (default: user config dir).")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("groups", help="List every group path.")
    sub.add_parser("tree", help="Show the expanded group tree.")

    p = sub.add_parser("add-group", help="Add a group ('' for root).")
    p.add_argument("parent")
    p.add_argument("name")

    p = sub.add_parser("remove-group", help="Remove a group and its subtree.")
    p.add_argument("path")

    p = sub.add_parser("rename-group", help="Rename a group in place.")
    p.add_argument("path")
    p.add_argument("name")

    p = sub.add_parser("move-group", help="Move a group under a new parent ('' for root).")
    p.add_argument("path")
    p.add_argument("new_parent")

    p = sub.add_parser("add-item", help="Add a file or directory to a group.")
    p.add_argument("group")
    p.add_argument("path", nargs="?", default=None, help="Defaults to the current directory.")

    p = sub.add_parser("remove-item", help="Remove the item at a 1-based index.")
    p.add_argument("group")
    p.add_argument("index", type=_positive_int)

    p = sub.add_parser("move-item", help="Move an item to another group.")
    p.add_argument("from_group")
    p.add_argument("index", type=_positive_int)
    p.add_argument("to_group")

    p = sub.add_parser("add-link", help="Add a directory link under a group.")
    p.add_argument("group")
    p.add_argument("name")
    p.add_argument("directory")

    p = sub.add_parser("remove-link", help="Remove a directory link.")
    p.add_argument("group")
    p.add_argument("name")

    p = sub.add_parser("toggle", help="Expand or collapse a group.")
    p.add_argument("path")

    p = sub.add_parser("items", help="List a group's items.")
    p.add_argument("group")
    p.add_argument("--sort", choices=RIGHT_SORT_MODES, default=None)
    p.add_argument("--desc", action="store_true", help="Reverse the sort direction.")

    p = sub.add_parser("ls", help="List a directory the way directory links are browsed.")
    p.add_argument("path")
    p.add_argument("--sort", choices=DIR_SORT_MODES, default=DEFAULT_DIR_SORT_MODE)
    p.add_argument("--desc", action="store_true", help="Reverse the sort direction.")
    return parser


def _print_items(store: TreeStore, args: argparse.Namespace) -> None:
    group, _ = find_group(store.load_data(), args.group)
    if group is None:
        raise SystemExit("Group not found")
    ascending = not args.desc if args.sort is not None or args.desc else None
    for item in store.sorted_items(args.group, args.sort, ascending):
        _found, idx = group.find_item(item.path)
        suffix = os.sep if item.type == ITEM_TYPE_DIR else ""
        print(f"{idx + 1}. {item.path}{suffix}")


def _print_listing(store: TreeStore, args: argparse.Namespace) -> None:
    path = normalize_path(args.path)
    if not store.fs.is_directory(path):
        raise SystemExit(f"Directory not found: {path}")
    entries, error = store.fs.list_directory(path)
    if error is not None:
        raise SystemExit("Failed to read directory")
    for entry in sort_directory_entries(entries, args.sort, not args.desc, store.stat_cache.get_sync):
        print(entry.name + (os.sep if entry.type == ITEM_TYPE_DIR else ""))


def run(args: argparse.Namespace, store: TreeStore) -> None:
    """Execute one parsed subcommand against ``store``."""
    command = args.command
    if command == "groups":
        for path in store.get_group_list():
            print(path)
    elif command == "tree":
        for node in build_tree(store.load_data(), store.load_ui_state()):
            print(format_node(node))
    elif command == "add-group":
        print(_check(store.add_group(args.parent, args.name)))
    elif command == "remove-group":
        _check(store.remove_group(args.path))
    elif command == "rename-group":
        print(_check(store.rename_group(args.path, args.name)))
    elif command == "move-group":
        print(_check(store.move_group(args.path, args.new_parent)))
    elif command == "add-item":
        if args.path is None:
            item = _check(store.add_current_dir(args.group))
        else:
            item = _check(store.add_item(args.group, args.path))
        print(item.path)
    elif command == "remove-item":
        _check(store.remove_item(args.group, args.index))
    elif command == "move-item":
        _check(store.move_item(args.from_group, args.index, args.to_group))
    elif command == "add-link":
        print(_check(store.add_dir_link(args.group, args.name, args.directory)))
    elif command == "remove-link":
        _check(store.remove_dir_link(args.group, args.name))
    elif command == "toggle":
        print("expanded" if store.toggle_expanded(args.path) else "collapsed")
    elif command == "items":
        _print_items(store, args)
    elif command == "ls":
        _print_listing(store, args)
    else:
        raise SystemExit(f"Unknown command: {command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Parse CLI arguments and run one favdir command.

    ``argv`` is primarily for tests; when omitted ``sys.argv`` is used.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(debug=args.debug, log_file=Path(args.log_file) if args.log_file else None)
    config = load_config(
        Path(args.settings) if args.settings else None,
        data_file=Path(args.data_file).expanduser() if args.data_file else None,
        ui_state_file=Path(args.ui_state_file).expanduser() if args.ui_state_file else None,
        debug=True if args.debug else None,
    )
    run(args, TreeStore(config))
    sys.stdout.flush()


if __name__ == "__main__":
    main()
