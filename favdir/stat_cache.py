"""TTL cache of filesystem metadata with single-flight async fetches.

Metadata sorts (created / modified / size) would otherwise issue one
blocking stat per comparison. The cache lets callers prefetch every path in
the background, then sort against resident values.

All callbacks are delivered through the shared ``TickQueue``; nothing is
invoked inline from ``fetch_async`` or ``prefetch_async``. A failed stat is
cached as ``None`` like any other result.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .constants import DEFAULT_STAT_TTL_SECONDS
from .fs import FileStat
from .scheduler import TickQueue

logger = logging.getLogger(__name__)

StatCallback = Callable[[FileStat | None], None]


@dataclass
class _CacheEntry:
    stat: FileStat | None
    timestamp: float
    pending: bool = False


class StatCache:
    """Per-store metadata cache keyed by absolute path."""

    def __init__(
        self,
        fs: object,
        ticks: TickQueue,
        ttl: float = DEFAULT_STAT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fs = fs
        self._ticks = ticks
        self._clock = clock
        self.ttl = float(ttl)
        self._entries: dict[str, _CacheEntry] = {}
        self._waiters: dict[str, list[StatCallback]] = {}

    def _is_fresh(self, entry: _CacheEntry) -> bool:
        return (self._clock() - entry.timestamp) < self.ttl

    def has(self, path: str) -> bool:
        """Return whether a settled, unexpired entry exists for ``path``."""
        entry = self._entries.get(path)
        return entry is not None and not entry.pending and self._is_fresh(entry)

    def is_pending(self, path: str) -> bool:
        return path in self._waiters

    def get(self, path: str) -> FileStat | None:
        """Return the cached stat without fetching; ``None`` on miss or expiry."""
        if not self.has(path):
            return None
        return self._entries[path].stat

    def set(self, path: str, stat: FileStat | None) -> None:
        self._entries[path] = _CacheEntry(stat=stat, timestamp=self._clock())

    def set_ttl(self, seconds: float) -> None:
        self.ttl = float(seconds)

    def fetch_async(self, path: str, callback: StatCallback) -> None:
        """Deliver the stat for ``path`` to ``callback`` on a later tick.

        Concurrent requests for the same path share one underlying stat and
        their callbacks run in registration order.
        """
        waiters = self._waiters.get(path)
        if waiters is not None:
            waiters.append(callback)
            return

        if self.has(path):
            self._ticks.schedule(callback, self._entries[path].stat)
            return

        self._entries[path] = _CacheEntry(stat=None, timestamp=self._clock(), pending=True)
        self._waiters[path] = [callback]
        self._fs.stat_async(path, lambda stat: self._on_fetched(path, stat))

    def _on_fetched(self, path: str, stat: FileStat | None) -> None:
        self._entries[path] = _CacheEntry(stat=stat, timestamp=self._clock())
        callbacks = self._waiters.pop(path, [])
        if stat is None:
            logger.debug(f"No metadata for {path}")
        for callback in callbacks:
            try:
                callback(stat)
            except Exception:
                logger.exception(f"Stat callback for {path} failed")

    def prefetch_async(
        self,
        paths: Iterable[str],
        on_complete: Callable[[], None],
        on_progress: Callable[[int, int], None] | None = None,
    ) -> None:
        """Fetch every path not already cached, then call ``on_complete`` once.

        ``on_progress(completed, total)`` runs after each path settles; cache
        hits settle immediately. An empty ``paths`` still completes on the
        next tick.
        """
        targets = list(paths)
        total = len(targets)
        if total == 0:
            self._ticks.schedule(on_complete)
            return

        completed = 0
        reported = False

        def settle() -> None:
            nonlocal completed, reported
            completed += 1
            if on_progress is not None:
                self._ticks.schedule(on_progress, completed, total)
            if completed >= total and not reported:
                reported = True
                self._ticks.schedule(on_complete)

        for path in targets:
            if self.has(path):
                settle()
            else:
                self.fetch_async(path, lambda _stat: settle())

    def get_sync(self, path: str) -> FileStat | None:
        """Return cached metadata or block on a stat and cache the outcome."""
        if self.has(path):
            return self._entries[path].stat
        stat = self._fs.stat_sync(path)
        if not self.is_pending(path):
            self.set(path, stat)
        return stat

    def invalidate(self, pattern: str | None = None) -> int:
        """Drop settled entries (all, or those whose path matches ``pattern``).

        ``pattern`` is a regular expression searched within each path; an
        invalid one is logged and drops nothing.
        In-flight fetches are not cancelled. Returns the number dropped.
        """
        if pattern is None:
            doomed = [path for path, entry in self._entries.items() if not entry.pending]
        else:
            try:
                regex = re.compile(pattern)
            except re.error as exc:
                logger.warning(f"Ignoring invalid invalidate pattern {pattern!r}: {exc}")
                return 0
            doomed = [
                path for path, entry in self._entries.items() if not entry.pending and regex.search(path)
            ]
        for path in doomed:
            del self._entries[path]
        logger.debug(f"Invalidated {len(doomed)} stat cache entries")
        return len(doomed)

    def clear(self) -> None:
        self.invalidate()

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["StatCache"]
