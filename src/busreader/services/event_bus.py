"""Bounded queue carrying readings and timer ticks to the announcement engine."""

from __future__ import annotations

import logging
import queue
import threading
from typing import Optional

from .events import StopEvent

logger = logging.getLogger("services.event_bus")

# Log the first drop and every Nth one after it.
DROP_LOG_EVERY = 100


class EventBus:
    """Many producers, one consumer. Publishing never blocks; a full queue drops the event."""

    def __init__(self, maxsize: int = 256) -> None:
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=maxsize)
        self._dropped = 0
        self._dropped_lock = threading.Lock()

    @property
    def dropped(self) -> int:
        with self._dropped_lock:
            return self._dropped

    def publish(self, event: object) -> bool:
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            with self._dropped_lock:
                self._dropped += 1
                dropped = self._dropped
            if dropped == 1 or dropped % DROP_LOG_EVERY == 0:
                logger.warning("Event bus full; dropped %s (%d dropped so far)", type(event).__name__, dropped)
            return False
        return True

    def get(self, timeout: Optional[float] = None) -> object:
        return self._queue.get(timeout=timeout)

    def get_nowait(self) -> object:
        return self._queue.get_nowait()

    def stop(self, reason: str | None = None) -> None:
        """Queue a ``StopEvent``, waiting up to a second for room."""
        try:
            self._queue.put(StopEvent(reason=reason), timeout=1.0)
        except queue.Full:
            logger.error("Event bus full; stop event could not be queued.")
