"""Application entrypoint: read bus route numbers from a camera and announce them."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional

import cv2
import numpy as np

from busreader.config import Config, load_config
from busreader.consensus import Announcement, AnnouncementEngine, ConsensusEngine
from busreader.core.detector.yolo_detector import YoloDetector
from busreader.infra import configure_logging, install_exception_hook
from busreader.pipeline import FrameReading, RecognitionPipeline
from busreader.services import CandidateEvent, CommandScheduler, EventBus, create_sink
from busreader.services.frame_source import FrameSource, open_frame_source

logger = logging.getLogger("app.main")

TARGET_COLOR = (0, 200, 255)
FRAGMENT_COLOR = (0, 255, 0)
BANNER_COLOR = (255, 255, 255)
FPS_WINDOW_S = 5.0


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Detect buses and announce their route numbers.")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("config/app.yaml"),
        help="Path to the YAML/JSON configuration file.",
    )
    parser.add_argument(
        "--window",
        type=str,
        default="Bus Reader",
        help="OpenCV window title.",
    )
    parser.add_argument(
        "--no-window",
        action="store_true",
        help="Run headless without an OpenCV window.",
    )
    return parser.parse_args(argv)


def _put_label(image: np.ndarray, text: str, origin: tuple[int, int], color, scale: float = 0.5, thickness: int = 1) -> None:
    cv2.putText(image, text, origin, cv2.FONT_HERSHEY_SIMPLEX, scale, color, thickness, cv2.LINE_AA)


def draw_overlay(image: np.ndarray, reading: FrameReading, banner: Optional[str]) -> np.ndarray:
    """Draw tracked buses, their digit boxes and the last announced route."""
    for target in reading.targets:
        x1, y1, x2, y2 = target.display_rect.as_int_corners()
        cv2.rectangle(image, (x1, y1), (x2, y2), TARGET_COLOR, 2)
        _put_label(image, f"{target.detection.label} {target.detection.confidence * 100:.1f}", (x1, max(0, y1 - 10)), TARGET_COLOR)
        for fragment, rect in zip(target.fragments, target.fragment_rects):
            fx1, fy1, fx2, fy2 = rect.as_int_corners()
            cv2.rectangle(image, (fx1, fy1), (fx2, fy2), FRAGMENT_COLOR, 1)
            _put_label(image, fragment.label, (fx1, max(0, fy1 - 4)), FRAGMENT_COLOR)
    if banner:
        _put_label(image, banner, (20, image.shape[0] - 30), BANNER_COLOR, scale=1.2, thickness=3)
    return image


class _FpsMeter:
    def __init__(self, window_s: float = FPS_WINDOW_S) -> None:
        self._window_s = window_s
        self._frames = 0
        self._started = time.monotonic()

    def tick(self) -> None:
        self._frames += 1
        elapsed = time.monotonic() - self._started
        if elapsed >= self._window_s:
            logger.info("Approx FPS (%.0fs window): %.2f", self._window_s, self._frames / elapsed)
            self._frames = 0
            self._started = time.monotonic()


def build_pipeline(config: Config) -> RecognitionPipeline:
    vehicle_detector = YoloDetector(config.detector, name="vehicle")
    digit_detector = YoloDetector(config.digits, name="digits")
    vehicle_detector.warmup()
    digit_detector.warmup()
    logger.info("Detector warmup completed.")
    return RecognitionPipeline(vehicle_detector, digit_detector, config.pipeline)


def build_engine(config: Config, event_bus: EventBus, latest: dict[str, Announcement]) -> AnnouncementEngine:
    def _remember(announcement: Announcement) -> None:
        latest["announcement"] = announcement

    return AnnouncementEngine(
        consensus=ConsensusEngine(config.consensus),
        sink=create_sink(config.speech),
        bus=event_bus,
        scheduler=CommandScheduler(event_bus),
        speech=config.speech,
        on_announcement=_remember,
    )


def _open_window(window_name: str) -> bool:
    try:
        cv2.namedWindow(window_name, cv2.WINDOW_NORMAL)
    except cv2.error as exc:
        logger.warning("OpenCV GUI unavailable (%s). Falling back to headless mode.", exc)
        return False
    return True


def run_capture_loop(
    frame_source: FrameSource,
    pipeline: RecognitionPipeline,
    event_bus: EventBus,
    latest: dict[str, Announcement],
    window_name: Optional[str],
) -> None:
    """Feed every captured frame through the pipeline until the user or the source ends it."""
    fps = _FpsMeter()
    while not frame_source.finished:
        frame = frame_source.read(timeout_s=1.0)
        if frame is None:
            logger.warning("No frame from %s within 1s.", frame_source.label)
            if window_name:
                cv2.waitKey(1)
            continue

        reading = pipeline.process(frame)
        event_bus.publish(CandidateEvent(candidate=reading.candidate, frame_id=frame.frame_id))
        fps.tick()

        if window_name:
            announcement = latest.get("announcement")
            banner = f"Bus #: {announcement.number}" if announcement else None
            cv2.imshow(window_name, draw_overlay(frame.buffer.to_array(), reading, banner))
            if cv2.waitKey(1) & 0xFF in (27, ord("q")):
                logger.info("Exit requested by user input.")
                return
    logger.info("Frame source %s finished.", frame_source.label)


def bootstrap(config: Config, window_name: str, no_window: bool) -> None:
    install_exception_hook()

    frame_source = open_frame_source(config.camera)
    pipeline = build_pipeline(config)
    event_bus = EventBus()
    latest: dict[str, Announcement] = {}
    engine = build_engine(config, event_bus, latest)

    display_window = None if no_window or not _open_window(window_name) else window_name

    frame_source.start()
    engine.start()
    try:
        run_capture_loop(frame_source, pipeline, event_bus, latest, display_window)
    except KeyboardInterrupt:
        logger.info("Interrupted by user (Ctrl+C).")
    finally:
        engine.stop()
        frame_source.stop()
        if display_window:
            cv2.destroyAllWindows()
        logger.info("Shutdown complete.")


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    try:
        config = load_config(args.config)
    except (OSError, ValueError, TypeError) as exc:
        print(f"Unable to load configuration: {exc}", file=sys.stderr)
        sys.exit(1)

    configure_logging(config.logging)
    logger.info("Configuration loaded from %s", args.config)
    bootstrap(config, window_name=args.window, no_window=args.no_window)


if __name__ == "__main__":
    main()
