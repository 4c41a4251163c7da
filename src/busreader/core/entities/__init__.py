"""Entity definitions for domain objects."""

from .detection import Detection, NormalizedBox, PixelRect
from .frame import FrameData, Orientation
from .image import ImageBuffer, PixelFormat

__all__ = [
    "Detection",
    "FrameData",
    "ImageBuffer",
    "NormalizedBox",
    "Orientation",
    "PixelFormat",
    "PixelRect",
]
