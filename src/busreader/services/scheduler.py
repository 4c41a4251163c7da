"""Interval timers publishing numbered ticks on the bus."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict

from .event_bus import EventBus
from .events import TimerEvent, TimerId

logger = logging.getLogger("services.scheduler")


@dataclass
class _IntervalTask:
    timer_id: TimerId
    thread: threading.Thread
    stop_event: threading.Event

    def cancel(self) -> None:
        self.stop_event.set()
        if self.thread is not threading.current_thread():
            self.thread.join(timeout=1.0)


class CommandScheduler:
    """Runs one thread per recurring timer; each tick becomes a ``TimerEvent``.

    Tick ``n`` is due ``n * interval_s`` after the timer started, so a slow
    publish delays one tick without shifting the ones after it.
    """

    def __init__(self, bus: EventBus, clock: Callable[[], float] = time.monotonic) -> None:
        self._bus = bus
        self._clock = clock
        self._tasks: Dict[TimerId, _IntervalTask] = {}
        self._lock = threading.Lock()

    def start_interval(self, timer_id: TimerId, interval_s: float) -> None:
        if interval_s <= 0:
            raise ValueError(f"Timer interval must be positive, got {interval_s}")
        self.cancel(timer_id)
        stop_event = threading.Event()
        task = _IntervalTask(
            timer_id=timer_id,
            stop_event=stop_event,
            thread=threading.Thread(
                target=self._tick_loop,
                args=(timer_id, interval_s, stop_event),
                name=f"Timer-{timer_id.value}",
                daemon=True,
            ),
        )
        with self._lock:
            self._tasks[timer_id] = task
        task.thread.start()

    def is_running(self, timer_id: TimerId) -> bool:
        with self._lock:
            task = self._tasks.get(timer_id)
        return task is not None and task.thread.is_alive()

    def cancel(self, timer_id: TimerId) -> None:
        with self._lock:
            task = self._tasks.pop(timer_id, None)
        if task:
            task.cancel()

    def shutdown(self) -> None:
        with self._lock:
            timer_ids = list(self._tasks)
        for timer_id in timer_ids:
            self.cancel(timer_id)

    def _tick_loop(self, timer_id: TimerId, interval_s: float, stop_event: threading.Event) -> None:
        logger.info("Timer %s started (every %.3fs)", timer_id.value, interval_s)
        started = self._clock()
        tick = 0
        while True:
            tick += 1
            delay = started + tick * interval_s - self._clock()
            if stop_event.wait(max(0.0, delay)):
                break
            if delay < -interval_s:
                logger.warning("Timer %s is running %.2fs behind schedule", timer_id.value, -delay)
            self._bus.publish(TimerEvent(timer_id=timer_id, tick=tick))
        logger.info("Timer %s stopped after %d tick(s).", timer_id.value, tick - 1)
