"""Configuration dataclasses for the bus route reader."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional, Sequence, Union

from busreader.core.entities import Orientation


def _check_ratio(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be within [0, 1], got {value}")


@dataclass(frozen=True)
class CameraConfig:
    """Capture device, resolution and the orientation hint attached to frames."""

    device_index: Union[int, str] = 0
    resolution: Sequence[int] = (1280, 720)
    fps: int = 30
    orientation: str = Orientation.LANDSCAPE_LEFT.value
    reconnect_delay_ms: int = 2000
    loop_video: bool = True

    def __post_init__(self) -> None:
        try:
            Orientation(self.orientation)
        except ValueError as exc:
            raise ValueError(f"Unknown camera orientation: {self.orientation!r}") from exc

    def resolved_orientation(self) -> Orientation:
        return Orientation(self.orientation)


@dataclass(frozen=True)
class DetectorConfig:
    """Ultralytics YOLO model settings; used for both the vehicle and digit models."""

    weights_path: Path = Path("weights/yolo11n.pt")
    confidence_threshold: float = 0.2
    iou_threshold: float = 0.45
    device: Literal["cpu", "cuda", "mps"] = "cpu"
    image_size: Optional[int] = None
    max_det: int = 50
    half: bool = False

    def __post_init__(self) -> None:
        _check_ratio("confidence_threshold", self.confidence_threshold)
        _check_ratio("iou_threshold", self.iou_threshold)

    def resolved_weights(self) -> Path:
        path = self.weights_path if isinstance(self.weights_path, Path) else Path(self.weights_path)
        return path.expanduser().resolve()


def _default_digit_detector() -> DetectorConfig:
    return DetectorConfig(weights_path=Path("weights/route_digits.pt"), confidence_threshold=0.25)


@dataclass(frozen=True)
class PipelineConfig:
    """Per-frame fusion policy: which label to track and the confidence gates."""

    target_label: str = "bus"
    target_min_confidence: float = 0.2
    fragment_min_confidence: float = 0.5
    viewport: Optional[Sequence[int]] = None

    def __post_init__(self) -> None:
        _check_ratio("target_min_confidence", self.target_min_confidence)
        _check_ratio("fragment_min_confidence", self.fragment_min_confidence)
        if self.viewport is not None and len(self.viewport) != 2:
            raise ValueError("viewport must be a [width, height] pair")


@dataclass(frozen=True)
class ConsensusConfig:
    """Majority-vote window and announcement debounce."""

    history_size: int = 10
    evaluation_interval_s: float = 5.0
    min_repeats: int = 3
    cooldown_s: float = 15.0

    def __post_init__(self) -> None:
        if self.history_size <= 0:
            raise ValueError("history_size must be positive")
        if self.evaluation_interval_s <= 0:
            raise ValueError("evaluation_interval_s must be positive")
        if self.min_repeats <= 0:
            raise ValueError("min_repeats must be positive")
        if self.cooldown_s < 0:
            raise ValueError("cooldown_s must not be negative")


@dataclass(frozen=True)
class SpeechConfig:
    """How announcements are voiced."""

    backend: Literal["log", "command"] = "log"
    template: str = "Bus {number}"
    command: str = "espeak-ng"
    voice: str = "en-US"
    rate_wpm: int = 160

    def __post_init__(self) -> None:
        if self.backend not in ("log", "command"):
            raise ValueError(f"Unknown speech backend: {self.backend!r}")
        if "{number}" not in self.template:
            raise ValueError("speech template must contain '{number}'")

    def utterance(self, number: str) -> str:
        return self.template.format(number=number)


@dataclass(frozen=True)
class LoggingConfig:
    """Log level, file destination and rotation."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    filepath: Path = Path("logs/busreader.log")
    max_bytes: int = 5 * 1024 * 1024
    backup_count: int = 5
    console: bool = True
    quiet_loggers: Sequence[str] = ("ultralytics",)

    def resolved_path(self) -> Path:
        path = self.filepath if isinstance(self.filepath, Path) else Path(self.filepath)
        return path.expanduser().resolve()


@dataclass(frozen=True)
class Config:
    """Root configuration object."""

    camera: CameraConfig = field(default_factory=CameraConfig)
    detector: DetectorConfig = field(default_factory=DetectorConfig)
    digits: DetectorConfig = field(default_factory=_default_digit_detector)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    consensus: ConsensusConfig = field(default_factory=ConsensusConfig)
    speech: SpeechConfig = field(default_factory=SpeechConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
