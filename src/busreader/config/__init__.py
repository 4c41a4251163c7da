"""Configuration package for the bus route reader."""

from .loader import load_config
from .models import (
    CameraConfig,
    Config,
    ConsensusConfig,
    DetectorConfig,
    LoggingConfig,
    PipelineConfig,
    SpeechConfig,
)

__all__ = [
    "CameraConfig",
    "Config",
    "ConsensusConfig",
    "DetectorConfig",
    "LoggingConfig",
    "PipelineConfig",
    "SpeechConfig",
    "load_config",
]
