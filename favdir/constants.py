"""Shared enum-like constants for item kinds, sort modes, and panels."""

from __future__ import annotations

ITEM_TYPE_GROUP = "group"
ITEM_TYPE_DIR_LINK = "dir_link"
ITEM_TYPE_FILE = "file"
ITEM_TYPE_DIR = "dir"
ITEM_TYPE_PARENT = "parent"

SORT_CUSTOM = "custom"
SORT_ALPHA = "alpha"
SORT_NAME = "name"
SORT_TYPE = "type"
SORT_CREATED = "created"
SORT_MODIFIED = "modified"
SORT_SIZE = "size"

ALL_SORT_MODES = (
    SORT_CUSTOM,
    SORT_ALPHA,
    SORT_NAME,
    SORT_TYPE,
    SORT_CREATED,
    SORT_MODIFIED,
    SORT_SIZE,
)

# Groups panel.
LEFT_SORT_MODES = (SORT_CUSTOM, SORT_ALPHA)

# Items panel.
RIGHT_SORT_MODES = (
    SORT_CUSTOM,
    SORT_NAME,
    SORT_CREATED,
    SORT_MODIFIED,
    SORT_SIZE,
    SORT_TYPE,
)

# Directory browsing has no custom order.
DIR_SORT_MODES = (
    SORT_NAME,
    SORT_CREATED,
    SORT_MODIFIED,
    SORT_SIZE,
    SORT_TYPE,
)

STAT_SORT_MODES = frozenset({SORT_CREATED, SORT_MODIFIED, SORT_SIZE})

PANEL_LEFT = "left"
PANEL_RIGHT = "right"
PANEL_DIR = "dir"

SELECTION_GROUP = "group"
SELECTION_DIR_LINK = "dir_link"

DEFAULT_LEFT_SORT_MODE = SORT_CUSTOM
DEFAULT_RIGHT_SORT_MODE = SORT_CUSTOM
DEFAULT_DIR_SORT_MODE = SORT_TYPE
DEFAULT_STAT_TTL_SECONDS = 30.0

PATH_SEPARATOR = "."
PARENT_ENTRY_NAME = ".."
