"""Temporal consensus over per-frame route-number readings."""

from .engine import Announcement, AnnouncementEngine
from .machine import ConsensusStateMachine
from .voting import AnnouncementState, ConsensusEngine, select_winner, tally

__all__ = [
    "Announcement",
    "AnnouncementEngine",
    "AnnouncementState",
    "ConsensusEngine",
    "ConsensusStateMachine",
    "select_winner",
    "tally",
]
