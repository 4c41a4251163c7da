"""Single-consumer loop that feeds readings to the consensus engine and voices results."""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from busreader.config.models import SpeechConfig
from busreader.services import (
    AnnouncementSink,
    CandidateEvent,
    CommandScheduler,
    EventBus,
    StopEvent,
    TimerEvent,
    TimerId,
)

from .voting import ConsensusEngine

logger = logging.getLogger("consensus.engine")


@dataclass(frozen=True)
class Announcement:
    number: str
    utterance: str
    announced_at: float


class AnnouncementEngine:
    """Coordinates event consumption, the evaluation timer and the announcement sink.

    Every mutation of the consensus state happens on the engine's own thread,
    in the order events were published.
    """

    def __init__(
        self,
        consensus: ConsensusEngine,
        sink: AnnouncementSink,
        bus: EventBus,
        scheduler: CommandScheduler,
        speech: Optional[SpeechConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        on_announcement: Optional[Callable[[Announcement], None]] = None,
    ) -> None:
        self.consensus = consensus
        self.sink = sink
        self.bus = bus
        self.scheduler = scheduler
        self._speech = speech or SpeechConfig()
        self._clock = clock
        self._on_announcement = on_announcement
        self._loop_thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self.announcements: List[Announcement] = []

    def start(self) -> None:
        interval_s = self.consensus.config.evaluation_interval_s
        self._stop_event.clear()
        self._loop_thread = threading.Thread(target=self._event_loop, name="AnnouncementEventLoop", daemon=True)
        self._loop_thread.start()
        self.scheduler.start_interval(TimerId.CONSENSUS_EVALUATION, interval_s)
        logger.info("Announcement engine started (evaluating every %.1fs).", interval_s)

    def stop(self) -> None:
        self.scheduler.cancel(TimerId.CONSENSUS_EVALUATION)
        self._stop_event.set()
        self.bus.stop("engine shutdown")
        if self._loop_thread:
            self._loop_thread.join(timeout=2.0)
        self._loop_thread = None
        self.consensus.shutdown()
        try:
            self.sink.close()
        except Exception:
            logger.exception("Announcement sink failed to close.")
        logger.info("Announcement engine stopped.")

    def evaluate_now(self) -> Optional[Announcement]:
        """Run one evaluation and voice the winner, if any."""
        now = self._clock()
        number = self.consensus.evaluate(now)
        if number is None:
            return None

        announcement = Announcement(number=number, utterance=self._speech.utterance(number), announced_at=now)
        self.announcements.append(announcement)
        logger.info("Announcing route %s", number)
        try:
            self.sink.speak(announcement.utterance)
        except Exception:
            logger.exception("Announcement sink failed for %r.", announcement.utterance)
        if self._on_announcement is not None:
            self._on_announcement(announcement)
        return announcement

    def _event_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                event = self.bus.get(timeout=0.5)
            except queue.Empty:
                continue

            if isinstance(event, StopEvent):
                logger.info("Announcement engine received stop event: %s", event.reason)
                break

            self._dispatch_event(event)

    def _dispatch_event(self, event: object) -> None:
        try:
            if isinstance(event, CandidateEvent):
                logger.debug("Reading %r from frame %s", event.candidate, event.frame_id)
                self.consensus.ingest(event.candidate)
            elif isinstance(event, TimerEvent) and event.timer_id == TimerId.CONSENSUS_EVALUATION:
                logger.debug("Evaluation tick %d", event.tick)
                self.evaluate_now()
            else:
                logger.debug("Unhandled event type: %s", type(event).__name__)
        except Exception:
            logger.exception("Error while dispatching event: %s", event)
