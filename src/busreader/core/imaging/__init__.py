"""Image buffer operations."""

from .cropper import BufferLayoutError, CropError, InvalidBoundsError, crop, pixel_bounds

__all__ = ["BufferLayoutError", "CropError", "InvalidBoundsError", "crop", "pixel_bounds"]
