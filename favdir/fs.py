"""Filesystem accessor used by the store, the stat cache, and browsing.

``LocalFileSystem`` is the production implementation. Tests substitute any
object with the same methods. Stat failures are reported as ``None``.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable
from dataclasses import dataclass
from queue import Empty, Queue

from .constants import ITEM_TYPE_DIR, ITEM_TYPE_FILE
from .scheduler import TickQueue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileStat:
    """Subset of ``os.stat_result`` used for metadata sorts."""

    size: int
    mtime: float
    birthtime: float
    is_dir: bool = False

    @classmethod
    def from_os_stat(cls, st: os.stat_result, is_dir: bool) -> FileStat:
        birthtime = getattr(st, "st_birthtime", None)
        if birthtime is None:
            birthtime = st.st_ctime
        return cls(size=int(st.st_size), mtime=float(st.st_mtime), birthtime=float(birthtime), is_dir=is_dir)


@dataclass(frozen=True)
class DirectoryListing:
    """One raw directory entry: ``type`` is ``dir``, ``file``, or ``parent``."""

    name: str
    path: str
    type: str


def normalize_path(path: str) -> str:
    """Expand ``~`` and return an absolute, normalized path string."""
    return os.path.normpath(os.path.abspath(os.path.expanduser(path)))


def stat_path(path: str) -> FileStat | None:
    """Blocking stat returning ``None`` on any OS error."""
    try:
        st = os.stat(path)
    except (OSError, ValueError) as exc:
        logger.debug(f"stat failed for {path}: {exc}")
        return None
    return FileStat.from_os_stat(st, is_dir=os.path.isdir(path))


StatCallback = Callable[["FileStat | None"], None]


class LocalFileSystem:
    """Real filesystem access with a background worker for async stats.

    Async stat results are posted to ``ticks`` so callbacks run on the host
    thread when it drains the queue.
    """

    def __init__(self, ticks: TickQueue) -> None:
        self._ticks = ticks
        self._lock = threading.Lock()
        self._requests: Queue[tuple[str, StatCallback]] = Queue()
        self._running = False

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def is_directory(self, path: str) -> bool:
        return os.path.isdir(path)

    def is_file(self, path: str) -> bool:
        return os.path.isfile(path)

    def list_directory(self, path: str) -> tuple[list[DirectoryListing], Exception | None]:
        """List ``path`` as ``(entries, scan_error)``; entries are unsorted."""
        entries: list[DirectoryListing] = []
        try:
            with os.scandir(path) as it:
                for child in it:
                    try:
                        is_dir = child.is_dir()
                    except OSError:
                        is_dir = False
                    entries.append(
                        DirectoryListing(
                            name=child.name,
                            path=os.path.join(path, child.name),
                            type=ITEM_TYPE_DIR if is_dir else ITEM_TYPE_FILE,
                        )
                    )
        except OSError as exc:
            logger.debug(f"Failed to read directory {path}: {exc}")
            return [], exc
        return entries, None

    def stat_sync(self, path: str) -> FileStat | None:
        return stat_path(path)

    def stat_async(self, path: str, callback: StatCallback) -> None:
        """Stat ``path`` off-thread and deliver the result on the next tick."""
        self._requests.put((path, callback))
        with self._lock:
            if self._running:
                return
            self._running = True
        worker = threading.Thread(target=self._worker, name="favdir-stat-worker", daemon=True)
        worker.start()

    def _worker(self) -> None:
        while True:
            try:
                path, callback = self._requests.get_nowait()
            except Empty:
                with self._lock:
                    if self._requests.empty():
                        self._running = False
                        return
                continue
            self._ticks.schedule(callback, stat_path(path))


__all__ = [
    "FileStat",
    "DirectoryListing",
    "LocalFileSystem",
    "normalize_path",
    "stat_path",
]
