"""Frame container used across the pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from .image import ImageBuffer


class Orientation(str, Enum):
    """Device orientation hint delivered alongside each frame."""

    PORTRAIT = "portrait"
    PORTRAIT_UPSIDE_DOWN = "portrait_upside_down"
    LANDSCAPE_LEFT = "landscape_left"
    LANDSCAPE_RIGHT = "landscape_right"
    UNKNOWN = "unknown"

    @property
    def is_portrait(self) -> bool:
        return self in (Orientation.PORTRAIT, Orientation.PORTRAIT_UPSIDE_DOWN)


@dataclass(frozen=True)
class FrameData:
    """Encapsulates a frame along with metadata."""

    buffer: ImageBuffer
    timestamp: datetime
    frame_id: int
    orientation: Orientation = Orientation.LANDSCAPE_LEFT
    source: Optional[str] = None
