"""Runtime configuration and default file locations.

Data files live under the platform user-data directory; an optional
``settings.json`` under the user-config directory overrides defaults.
All loading is defensive: malformed or missing settings fall back safely.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir, user_data_dir

from .constants import DEFAULT_STAT_TTL_SECONDS

logger = logging.getLogger(__name__)

APP_NAME = "favdir"
DATA_FILENAME = "favdirs.json"
UI_STATE_FILENAME = "favdirs_ui_state.json"
SETTINGS_FILENAME = "settings.json"
DEFAULT_DATA_DIR = Path(user_data_dir(APP_NAME, appauthor=False))
DEFAULT_SETTINGS_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / SETTINGS_FILENAME


@dataclass(frozen=True)
class FavdirConfig:
    """Store configuration.

    ``protected_groups`` holds group *names*; a protected group cannot be
    removed or moved at any depth. ``sandbox`` keeps both documents in
    memory only.
    """

    data_file: Path = DEFAULT_DATA_DIR / DATA_FILENAME
    ui_state_file: Path = DEFAULT_DATA_DIR / UI_STATE_FILENAME
    default_groups: tuple[str, ...] = ()
    protected_groups: frozenset[str] = field(default_factory=frozenset)
    stat_ttl: float = DEFAULT_STAT_TTL_SECONDS
    confirm_deletions: bool = True
    debug: bool = False
    sandbox: bool = False

    def as_sandbox(self) -> FavdirConfig:
        """Return a copy that never touches the configured files."""
        return dataclasses.replace(self, sandbox=True)


def _string_tuple(value: object) -> tuple[str, ...] | None:
    if not isinstance(value, list):
        return None
    return tuple(entry for entry in value if isinstance(entry, str) and entry)


def _positive_float(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if value > 0 else None


def _path_value(value: object) -> Path | None:
    if not isinstance(value, str) or not value.strip():
        return None
    return Path(value).expanduser()


def load_settings(path: Path | None = None) -> dict[str, object]:
    """Load the raw settings object, ``{}`` when missing or malformed."""
    settings_path = path or DEFAULT_SETTINGS_PATH
    if not settings_path.exists():
        return {}
    try:
        data = json.loads(settings_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning(f"Failed to read settings {settings_path}: {exc}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring settings {settings_path}: top level is not an object")
        return {}
    return data


def load_config(path: Path | None = None, **overrides: object) -> FavdirConfig:
    """Build a ``FavdirConfig`` from settings plus explicit keyword overrides.

    Settings values of the wrong type are ignored key by key.
    """
    raw = load_settings(path)
    changes: dict[str, object] = {}

    data_file = _path_value(raw.get("data_file"))
    if data_file is not None:
        changes["data_file"] = data_file
    ui_state_file = _path_value(raw.get("ui_state_file"))
    if ui_state_file is not None:
        changes["ui_state_file"] = ui_state_file
    default_groups = _string_tuple(raw.get("default_groups"))
    if default_groups is not None:
        changes["default_groups"] = default_groups
    protected = _string_tuple(raw.get("protected_groups"))
    if protected is not None:
        changes["protected_groups"] = frozenset(protected)
    stat_ttl = _positive_float(raw.get("stat_ttl"))
    if stat_ttl is not None:
        changes["stat_ttl"] = stat_ttl
    for key in ("confirm_deletions", "debug"):
        value = raw.get(key)
        if isinstance(value, bool):
            changes[key] = value

    changes.update({key: value for key, value in overrides.items() if value is not None})
    return FavdirConfig(**changes)


__all__ = [
    "APP_NAME",
    "DATA_FILENAME",
    "UI_STATE_FILENAME",
    "DEFAULT_DATA_DIR",
    "DEFAULT_SETTINGS_PATH",
    "FavdirConfig",
    "load_settings",
    "load_config",
]
