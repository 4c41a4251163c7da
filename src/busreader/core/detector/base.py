"""Detector capability shared by the vehicle and digit models."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Sequence

from busreader.core.entities import Detection, ImageBuffer


@dataclass
class DetectionResult:
    """Detections produced by one inference call."""

    detections: Sequence[Detection] = field(default_factory=list)
    inference_time_ms: float = 0.0


class DetectorBase(abc.ABC):
    """Base class for every object detector plugged into the pipeline.

    Implementations report boxes as :class:`NormalizedBox` relative to the
    image they were given, with a lower-left origin.
    """

    def warmup(self) -> None:
        """Load weights and allocate resources ahead of the first frame."""

    @abc.abstractmethod
    def detect(self, image: ImageBuffer) -> DetectionResult:
        """Run inference on ``image``."""
