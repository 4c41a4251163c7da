"""Majority vote with debounce over the most recent route-number readings."""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Iterable, Optional, Tuple

from busreader.config.models import ConsensusConfig

from .machine import ConsensusStateMachine

logger = logging.getLogger("consensus.voting")


@dataclass(frozen=True)
class AnnouncementState:
    """What was last announced and when; ``None`` until the first announcement."""

    last_announced: Optional[str] = None
    last_announced_at: Optional[float] = None


def tally(history: Iterable[str]) -> Dict[str, int]:
    """Count readings; keys keep first-seen order, which drives tie-breaking."""
    counts: Dict[str, int] = {}
    for value in history:
        counts[value] = counts.get(value, 0) + 1
    return counts


def select_winner(history: Iterable[str], min_repeats: int) -> Optional[str]:
    """Pick the reading worth announcing, or ``None``.

    The most frequent value wins when it is non-empty. When "nothing seen"
    dominates, the most frequent non-empty value still wins if it occurred at
    least ``min_repeats`` times. Ties go to the value seen first.
    """
    counts = tally(history)
    if not counts:
        return None
    majority, _ = max(counts.items(), key=lambda item: item[1])
    if majority:
        return majority
    repeated = [(value, count) for value, count in counts.items() if value and count >= min_repeats]
    if not repeated:
        return None
    value, _ = max(repeated, key=lambda item: item[1])
    return value


class ConsensusEngine:
    """Owns the reading history and the announcement state for one session.

    ``ingest`` and ``evaluate`` are serialized by an internal lock, so the
    engine can be driven from a single consumer thread or called directly.
    """

    def __init__(
        self,
        config: Optional[ConsensusConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config or ConsensusConfig()
        self._clock = clock
        self._history: Deque[str] = deque(maxlen=self._config.history_size)
        self._announcement = AnnouncementState()
        self._machine = ConsensusStateMachine()
        self._lock = threading.Lock()

    @property
    def config(self) -> ConsensusConfig:
        return self._config

    @property
    def history(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(self._history)

    @property
    def announcement_state(self) -> AnnouncementState:
        with self._lock:
            return self._announcement

    @property
    def state_name(self) -> str:
        with self._lock:
            return self._machine.state_name

    @property
    def is_stopped(self) -> bool:
        with self._lock:
            return self._is_stopped()

    def ingest(self, candidate: str) -> None:
        """Append one cycle's reading; empty strings count as "nothing seen"."""
        with self._lock:
            if self._is_stopped():
                logger.debug("Ignoring reading %r after shutdown.", candidate)
                return
            self._history.append(candidate)
            self._machine.record()

    def evaluate(self, now: Optional[float] = None) -> Optional[str]:
        """Return the route number to announce now, or ``None``."""
        with self._lock:
            if self._is_stopped():
                return None
            if now is None:
                now = self._clock()
            self._machine.begin_evaluation()
            if not self._history:
                return None
            try:
                return self._decide(now)
            finally:
                self._machine.finish_evaluation()

    def shutdown(self) -> None:
        with self._lock:
            if not self._is_stopped():
                self._machine.shutdown()

    def _decide(self, now: float) -> Optional[str]:
        logger.debug("Evaluating history: %s", list(self._history))
        winner = select_winner(self._history, self._config.min_repeats)
        if winner is None:
            return None

        previous = self._announcement
        changed = winner != previous.last_announced
        cooled_down = (
            previous.last_announced_at is None
            or now - previous.last_announced_at >= self._config.cooldown_s
        )
        if not (changed or cooled_down):
            logger.debug("Suppressing repeat of %r (cooldown %.1fs).", winner, self._config.cooldown_s)
            return None

        self._announcement = AnnouncementState(last_announced=winner, last_announced_at=now)
        return winner

    def _is_stopped(self) -> bool:
        return self._machine.state_name == "stopped"
