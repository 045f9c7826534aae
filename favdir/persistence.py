"""Load/save for the two persisted documents: tree data and UI state.

Loads never raise. A missing, empty, unreadable, or malformed file yields
a default document (the data document is seeded from the configured
default groups). Saves report ``False`` on failure and write atomically
through a temporary sibling file.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from .config import FavdirConfig
from .model import Data, UIState

logger = logging.getLogger(__name__)


def _read_json(path: Path) -> object | None:
    """Return decoded JSON, or ``None`` when the file is missing or empty.

    Raises ``OSError``/``ValueError`` for unreadable or malformed files.
    """
    if not path.exists():
        return None
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return None
    return json.loads(text)


def write_json_atomic(path: Path, payload: object) -> bool:
    """Serialize ``payload`` and replace ``path`` in one step."""
    try:
        text = json.dumps(payload, indent=2) + "\n"
    except (TypeError, ValueError) as exc:
        logger.error(f"Failed to encode {path}: {exc}")
        return False

    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            tmp_name = handle.name
            handle.write(text)
        os.replace(tmp_name, path)
    except OSError as exc:
        logger.error(f"Failed to write {path}: {exc}")
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
        return False
    return True


class JsonStorage:
    """File-backed persistence for ``Data`` and ``UIState``."""

    def __init__(self, config: FavdirConfig) -> None:
        self.config = config

    def default_data(self) -> Data:
        return Data.seeded(self.config.default_groups)

    def load_data(self) -> Data:
        path = Path(self.config.data_file)
        try:
            raw = _read_json(path)
        except (OSError, ValueError) as exc:
            logger.warning(f"Failed to parse data file {path}, using defaults: {exc}")
            return self.default_data()
        if raw is None:
            return self.default_data()
        try:
            data = Data.from_dict(raw)
        except ValueError as exc:
            logger.warning(f"Failed to parse data file {path}, using defaults: {exc}")
            return self.default_data()
        logger.debug(f"Loaded data with {len(data.groups)} groups")
        return data

    def save_data(self, data: Data) -> bool:
        ok = write_json_atomic(Path(self.config.data_file), data.to_dict())
        if ok:
            logger.debug(f"Saved data to {self.config.data_file}")
        return ok

    def load_ui_state(self) -> UIState:
        path = Path(self.config.ui_state_file)
        try:
            raw = _read_json(path)
            if raw is None:
                return UIState()
            return UIState.from_dict(raw)
        except (OSError, ValueError) as exc:
            logger.warning(f"Failed to parse UI state file {path}, using defaults: {exc}")
            return UIState()

    def save_ui_state(self, state: UIState) -> bool:
        return write_json_atomic(Path(self.config.ui_state_file), state.to_dict())


class MemoryStorage:
    """In-memory persistence for sandbox sessions.

    Documents are kept in their serialized form so every load hands out a
    fresh object graph, exactly like reading the JSON file again.
    """

    def __init__(
        self,
        config: FavdirConfig,
        initial_data: Data | None = None,
        initial_ui_state: UIState | None = None,
    ) -> None:
        self.config = config
        self._data: dict[str, object] | None = initial_data.to_dict() if initial_data is not None else None
        self._ui_state: dict[str, object] | None = (
            initial_ui_state.to_dict() if initial_ui_state is not None else None
        )

    def load_data(self) -> Data:
        if self._data is None:
            return Data.seeded(self.config.default_groups)
        return Data.from_dict(self._data)

    def save_data(self, data: Data) -> bool:
        self._data = data.to_dict()
        return True

    def load_ui_state(self) -> UIState:
        if self._ui_state is None:
            return UIState()
        return UIState.from_dict(self._ui_state)

    def save_ui_state(self, state: UIState) -> bool:
        self._ui_state = state.to_dict()
        return True


def create_storage(
    config: FavdirConfig,
    initial_data: Data | None = None,
    initial_ui_state: UIState | None = None,
) -> JsonStorage | MemoryStorage:
    """Return memory storage for sandbox configs, JSON files otherwise."""
    if config.sandbox:
        return MemoryStorage(config, initial_data, initial_ui_state)
    return JsonStorage(config)


__all__ = [
    "JsonStorage",
    "MemoryStorage",
    "create_storage",
    "write_json_atomic",
]
