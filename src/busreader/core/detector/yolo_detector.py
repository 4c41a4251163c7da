"""YOLO detector built on the Ultralytics package."""

from __future__ import annotations

import logging
from dataclasses import replace
from time import perf_counter
from typing import List

try:
    from ultralytics import YOLO
except ImportError as exc:  # pragma: no cover - handled at runtime
    raise ImportError(
        "Ultralytics package is required for YoloDetector. Install with `pip install ultralytics`."
    ) from exc

from busreader.config.models import DetectorConfig
from busreader.core.entities import Detection, ImageBuffer, NormalizedBox, PixelFormat

from .base import DetectionResult, DetectorBase

logger = logging.getLogger("core.detector.yolo")

# Ultralytics expects BGR numpy images, like cv2.imread produces.
_TO_BGR = {
    PixelFormat.BGR8: None,
    PixelFormat.RGB8: (2, 1, 0),
    PixelFormat.BGRA8: (0, 1, 2),
    PixelFormat.RGBA8: (2, 1, 0),
}


class YoloDetector(DetectorBase):
    """Detector using an Ultralytics YOLO model."""

    def __init__(self, config: DetectorConfig, name: str = "yolo") -> None:
        self._config = config
        self._name = name
        self._model: YOLO | None = None
        self._names: List[str] | None = None

    def warmup(self) -> None:
        if self._model is not None:
            return
        logger.info("Loading %s weights from %s", self._name, self._config.weights_path)
        self._model = YOLO(str(self._config.weights_path))
        names_dict = getattr(self._model, "names", None)
        if isinstance(names_dict, dict):
            self._names = [names_dict[key] for key in sorted(names_dict.keys())]
        if self._config.half and self._config.device == "cpu":
            logger.warning("Half precision requested on CPU for %s; forcing full precision.", self._name)
            self._config = replace(self._config, half=False)

    def detect(self, image: ImageBuffer) -> DetectionResult:
        self.warmup()
        assert self._model is not None

        predict_kwargs = dict(
            source=self._to_bgr(image),
            conf=self._config.confidence_threshold,
            iou=self._config.iou_threshold,
            device=self._config.device,
            max_det=self._config.max_det,
            half=self._config.half,
            verbose=False,
        )
        if self._config.image_size:
            predict_kwargs["imgsz"] = self._config.image_size

        start = perf_counter()
        results = self._model.predict(**predict_kwargs)
        inference_time_ms = (perf_counter() - start) * 1000.0
        detections = self._parse_results(results[0])
        logger.debug(
            "%s inference produced %d detections (%.1f ms)", self._name, len(detections), inference_time_ms
        )
        return DetectionResult(detections=detections, inference_time_ms=inference_time_ms)

    @staticmethod
    def _to_bgr(image: ImageBuffer):
        array = image.to_array()
        if image.pixel_format is PixelFormat.GRAY8:
            return array[:, :, None].repeat(3, axis=2)
        order = _TO_BGR[image.pixel_format]
        if order is None:
            return array
        return array[:, :, list(order)].copy()

    def _parse_results(self, result) -> List[Detection]:
        """Convert top-left ``xyxyn`` boxes into lower-left normalized detections."""
        detections: List[Detection] = []
        boxes = getattr(result, "boxes", None)
        if boxes is None or boxes.xyxyn is None:
            return detections

        xyxyn = boxes.xyxyn.cpu().numpy()
        confidences = boxes.conf.cpu().numpy()
        classes = boxes.cls.cpu().numpy().astype(int)
        names_map = getattr(result, "names", None) or self._names

        for (x1, y1, x2, y2), conf, cls_id in zip(xyxyn.tolist(), confidences, classes):
            box = NormalizedBox(x=x1, y=1.0 - y2, width=x2 - x1, height=y2 - y1).clamped()
            label = _label_for(names_map, int(cls_id))
            detections.append(Detection(box=box, label=label, confidence=float(conf)))
        return detections


def _label_for(names_map, cls_id: int) -> str:
    if isinstance(names_map, dict):
        return str(names_map.get(cls_id, f"class_{cls_id}"))
    if names_map and cls_id < len(names_map):
        return str(names_map[cls_id])
    return f"class_{cls_id}"
