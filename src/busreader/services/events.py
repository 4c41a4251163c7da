"""Events exchanged between the frame loop, the scheduler and the announcement engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Optional


class EventType(Enum):
    CANDIDATE = auto()
    TIMER = auto()
    STOP = auto()


class TimerId(Enum):
    """Recurring timers owned by the application."""

    CONSENSUS_EVALUATION = "consensus_evaluation"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CandidateEvent:
    """One frame's stitched reading, empty when nothing qualified."""

    candidate: str
    frame_id: Optional[int] = None
    created_at: datetime = field(default_factory=_utc_now)
    type: EventType = field(init=False, default=EventType.CANDIDATE)


@dataclass(frozen=True)
class TimerEvent:
    """Tick ``tick`` (counted from 1) of a recurring timer."""

    timer_id: TimerId
    tick: int = 0
    created_at: datetime = field(default_factory=_utc_now)
    type: EventType = field(init=False, default=EventType.TIMER)


@dataclass(frozen=True)
class StopEvent:
    reason: str | None = None
    created_at: datetime = field(default_factory=_utc_now)
    type: EventType = field(init=False, default=EventType.STOP)
