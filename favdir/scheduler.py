"""Next-tick callback queue shared by asynchronous filesystem work.

Callers never receive results inline: every callback, including ones for
already-cached values, is posted here and runs when the host loop drains
the queue. Background threads may post; only the draining thread runs
callbacks.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable

logger = logging.getLogger(__name__)


class TickQueue:
    """FIFO of deferred callbacks drained one tick at a time."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._callbacks: deque[Callable[[], None]] = deque()
        self._wakeup = threading.Condition(self._lock)

    def schedule(self, callback: Callable[..., None], *args: object) -> None:
        """Queue ``callback(*args)`` for the next tick."""
        with self._lock:
            if args:
                self._callbacks.append(lambda: callback(*args))
            else:
                self._callbacks.append(callback)
            self._wakeup.notify_all()

    def has_pending(self) -> bool:
        with self._lock:
            return bool(self._callbacks)

    def run_pending(self) -> int:
        """Run the callbacks queued before this call; return how many ran.

        Callbacks scheduled while draining wait for the following tick. A
        callback that raises is logged and the rest of the batch still runs.
        """
        with self._lock:
            batch = list(self._callbacks)
            self._callbacks.clear()
        for callback in batch:
            try:
                callback()
            except Exception:
                logger.exception("Deferred callback failed")
        return len(batch)

    def run_until_idle(self, max_ticks: int = 1000) -> int:
        """Drain ticks until nothing is queued; return total callbacks run."""
        total = 0
        for _ in range(max_ticks):
            ran = self.run_pending()
            if ran == 0:
                break
            total += ran
        else:
            logger.warning(f"Tick queue still busy after {max_ticks} ticks")
        return total

    def wait_for_work(self, timeout: float | None = None) -> bool:
        """Block until a callback is queued or ``timeout`` elapses."""
        with self._lock:
            if self._callbacks:
                return True
            self._wakeup.wait(timeout=timeout)
            return bool(self._callbacks)


__all__ = ["TickQueue"]
