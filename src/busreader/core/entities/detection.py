"""Detection entities shared by both detectors and the stitcher.

Every ``NormalizedBox`` in this project uses a lower-left origin: ``y`` grows
upward and ``(x, y)`` is the bottom-left corner of the box. Detector adapters
whose native output uses a top-left origin convert at their boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


def _clamp_unit(value: float) -> float:
    return min(1.0, max(0.0, float(value)))


@dataclass(frozen=True)
class NormalizedBox:
    """Axis-aligned box in ``[0, 1]`` frame coordinates, origin lower-left."""

    x: float
    y: float
    width: float
    height: float

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    def is_degenerate(self) -> bool:
        return self.width <= 0.0 or self.height <= 0.0

    def clamped(self) -> "NormalizedBox":
        """Clip the box into the unit square; detector noise can overshoot slightly."""
        x = _clamp_unit(self.x)
        y = _clamp_unit(self.y)
        width = min(max(0.0, float(self.width)), 1.0 - x)
        height = min(max(0.0, float(self.height)), 1.0 - y)
        # Origin clipping shrinks the box on that side instead of shifting it.
        if self.x < 0.0:
            width = min(max(0.0, self.x + self.width), 1.0)
        if self.y < 0.0:
            height = min(max(0.0, self.y + self.height), 1.0)
        return NormalizedBox(x=x, y=y, width=width, height=height)

    def remap_into(self, region: "NormalizedBox") -> "NormalizedBox":
        """Express a box given in ``region``-local coordinates in the region's parent space."""
        return NormalizedBox(
            x=region.x + self.x * region.width,
            y=region.y + self.y * region.height,
            width=self.width * region.width,
            height=self.height * region.height,
        )


@dataclass(frozen=True)
class PixelRect:
    """Rectangle in viewport pixels, origin upper-left."""

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def empty(cls) -> "PixelRect":
        return cls(0.0, 0.0, 0.0, 0.0)

    @property
    def is_empty(self) -> bool:
        return self.width <= 0.0 or self.height <= 0.0

    def as_int_corners(self) -> Tuple[int, int, int, int]:
        """Return ``(x1, y1, x2, y2)`` rounded for drawing."""
        return (
            int(round(self.x)),
            int(round(self.y)),
            int(round(self.x + self.width)),
            int(round(self.y + self.height)),
        )


@dataclass(frozen=True)
class Detection:
    """A single labelled observation returned by a detector."""

    box: NormalizedBox
    label: str
    confidence: float

    def center(self) -> Tuple[float, float]:
        return self.box.center()

    def with_box(self, box: NormalizedBox) -> "Detection":
        return Detection(box=box, label=self.label, confidence=self.confidence)
