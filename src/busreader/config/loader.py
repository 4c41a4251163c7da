"""Configuration loader utilities."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import yaml

from .models import (
    CameraConfig,
    Config,
    ConsensusConfig,
    DetectorConfig,
    LoggingConfig,
    PipelineConfig,
    SpeechConfig,
    _default_digit_detector,
)


def _normalize_path(path: Path | str) -> Path:
    return path if isinstance(path, Path) else Path(path)


def _load_raw_config(config_path: Path) -> Dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found at {config_path}")

    suffix = config_path.suffix.lower()
    with config_path.open("r", encoding="utf-8") as stream:
        if suffix in {".yaml", ".yml"}:
            return yaml.safe_load(stream) or {}
        if suffix == ".json":
            return json.load(stream)
        raise ValueError(f"Unsupported config format: {suffix}")


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{name}' must be a mapping")
    return dict(value)


def _load_detector(raw: Dict[str, Any], base_dir: Path, defaults: DetectorConfig) -> DetectorConfig:
    if not raw:
        return defaults
    weights_path = raw.get("weights_path")
    if weights_path:
        # Weights are resolved against the config file, not the working directory.
        raw["weights_path"] = (base_dir / weights_path).resolve()
    merged = {
        "weights_path": defaults.weights_path,
        "confidence_threshold": defaults.confidence_threshold,
    }
    merged.update(raw)
    return DetectorConfig(**merged)


def load_config(config_path: Path | str) -> Config:
    """Load configuration file and construct Config dataclass."""

    config_path = _normalize_path(config_path)
    raw = _load_raw_config(config_path)
    base_dir = config_path.parent

    camera = CameraConfig(**_section(raw, "camera"))
    detector = _load_detector(_section(raw, "detector"), base_dir, DetectorConfig())
    digits = _load_detector(_section(raw, "digits"), base_dir, _default_digit_detector())

    pipeline = PipelineConfig(**_section(raw, "pipeline"))
    consensus = ConsensusConfig(**_section(raw, "consensus"))
    speech = SpeechConfig(**_section(raw, "speech"))

    logging_raw = _section(raw, "logging")
    log_path = logging_raw.get("filepath")
    if log_path:
        logging_raw["filepath"] = (base_dir / log_path).resolve()
    logging = LoggingConfig(**logging_raw)

    return Config(
        camera=camera,
        detector=detector,
        digits=digits,
        pipeline=pipeline,
        consensus=consensus,
        speech=speech,
        logging=logging,
    )
