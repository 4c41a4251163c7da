"""Service-layer components shared by the host application.

``frame_source`` depends on OpenCV and is imported directly where needed.
"""

from .announcer import (
    AnnouncementSink,
    CommandAnnouncementSink,
    LoggingAnnouncementSink,
    create_sink,
)
from .event_bus import EventBus
from .events import CandidateEvent, EventType, StopEvent, TimerEvent, TimerId
from .scheduler import CommandScheduler

__all__ = [
    "AnnouncementSink",
    "CandidateEvent",
    "CommandAnnouncementSink",
    "CommandScheduler",
    "EventBus",
    "EventType",
    "LoggingAnnouncementSink",
    "StopEvent",
    "TimerEvent",
    "TimerId",
    "create_sink",
]
