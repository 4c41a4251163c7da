"""Per-frame detection fusion: find the bus, crop it, read its route number."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from busreader.config.models import PipelineConfig
from busreader.core.detector import DetectorBase
from busreader.core.entities import Detection, FrameData, ImageBuffer, NormalizedBox, PixelRect
from busreader.core.geometry import SourceAspect, Viewport, map_box
from busreader.core.imaging import CropError, crop
from busreader.core.stitching import order_fragments

logger = logging.getLogger("pipeline")


@dataclass(frozen=True)
class TargetReading:
    """One tracked vehicle in a frame and what was read off it."""

    detection: Detection
    display_rect: PixelRect
    fragments: Sequence[Detection] = field(default_factory=tuple)
    fragment_rects: Sequence[PixelRect] = field(default_factory=tuple)

    @property
    def text(self) -> str:
        return "".join(fragment.label for fragment in self.fragments)


@dataclass(frozen=True)
class FrameReading:
    """Outcome of one primary-detection cycle."""

    frame_id: int
    targets: Sequence[TargetReading]
    candidate: str


class RecognitionPipeline:
    """Runs the vehicle detector, then the digit detector on each vehicle crop.

    Both detectors are injected. Detector failures and unusable crops are
    absorbed here and surface as "nothing read" for that cycle.
    """

    def __init__(
        self,
        primary: DetectorBase,
        secondary: DetectorBase,
        config: Optional[PipelineConfig] = None,
    ) -> None:
        self._primary = primary
        self._secondary = secondary
        self._config = config or PipelineConfig()

    def process(self, frame: FrameData, viewport: Optional[Viewport] = None) -> FrameReading:
        buffer = frame.buffer
        viewport = viewport or self._default_viewport(buffer)
        source = SourceAspect.from_size(buffer.width, buffer.height)

        targets = self._select_targets(self._run_detector(self._primary, buffer, "primary"))
        readings: List[TargetReading] = []
        for detection in targets:
            display_rect = map_box(detection.box, viewport, source, frame.orientation)
            if display_rect.is_empty:
                continue
            fragments = order_fragments(
                self._read_region(buffer, detection.box),
                detection.box,
                self._config.fragment_min_confidence,
            )
            fragment_rects = tuple(
                map_box(fragment.box, viewport, source, frame.orientation) for fragment in fragments
            )
            readings.append(
                TargetReading(
                    detection=detection,
                    display_rect=display_rect,
                    fragments=tuple(fragments),
                    fragment_rects=fragment_rects,
                )
            )

        # The most confident vehicle that yielded any symbols supplies the reading.
        candidate = next((reading.text for reading in readings if reading.text), "")
        if candidate:
            logger.debug("Frame %d read %r from %d vehicle(s)", frame.frame_id, candidate, len(readings))
        return FrameReading(frame_id=frame.frame_id, targets=tuple(readings), candidate=candidate)

    def _select_targets(self, detections: Sequence[Detection]) -> List[Detection]:
        targets = [
            detection
            for detection in detections
            if detection.label == self._config.target_label
            and detection.confidence > self._config.target_min_confidence
        ]
        return sorted(targets, key=lambda detection: detection.confidence, reverse=True)

    def _read_region(self, buffer: ImageBuffer, box: NormalizedBox) -> Sequence[Detection]:
        try:
            region = crop(buffer, box)
        except CropError as exc:
            logger.debug("Skipping digit detection: %s", exc)
            return []
        return self._run_detector(self._secondary, region, "secondary")

    def _default_viewport(self, buffer: ImageBuffer) -> Viewport:
        if self._config.viewport is not None:
            width, height = self._config.viewport
            return Viewport(width=float(width), height=float(height))
        return Viewport(width=float(buffer.width), height=float(buffer.height))

    @staticmethod
    def _run_detector(detector: DetectorBase, image: ImageBuffer, role: str) -> Sequence[Detection]:
        try:
            return list(detector.detect(image).detections)
        except Exception:
            logger.exception("%s detector failed; treating as no detections.", role.capitalize())
            return []
