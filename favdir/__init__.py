"""Public package surface for favdir.

Exports the store, session, and configuration entry points plus ``main``
for programmatic CLI invocation.
"""

from __future__ import annotations

from .config import FavdirConfig, load_config
from .model import Data, DirLink, Group, Item, UIState
from .results import OperationResult
from .session import FavdirSession
from .store import TreeStore
from .tree_view import TreeNode, build_tree


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "Data",
    "DirLink",
    "FavdirConfig",
    "FavdirSession",
    "Group",
    "Item",
    "OperationResult",
    "TreeNode",
    "TreeStore",
    "UIState",
    "build_tree",
    "load_config",
    "main",
]
