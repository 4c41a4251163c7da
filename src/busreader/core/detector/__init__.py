"""Detector abstractions.

The Ultralytics-backed ``YoloDetector`` lives in ``yolo_detector`` and is
imported explicitly by the host so the core stays importable without it.
"""

from .base import DetectionResult, DetectorBase

__all__ = ["DetectionResult", "DetectorBase"]
