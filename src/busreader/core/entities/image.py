"""Strided pixel buffer used between the frame source, the cropper and detectors."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np


class PixelFormat(str, Enum):
    """Packed 8-bit pixel layouts understood by the pipeline."""

    BGR8 = "bgr8"
    RGB8 = "rgb8"
    BGRA8 = "bgra8"
    RGBA8 = "rgba8"
    GRAY8 = "gray8"

    @property
    def bytes_per_pixel(self) -> int:
        return _BYTES_PER_PIXEL[self]


_BYTES_PER_PIXEL = {
    PixelFormat.BGR8: 3,
    PixelFormat.RGB8: 3,
    PixelFormat.BGRA8: 4,
    PixelFormat.RGBA8: 4,
    PixelFormat.GRAY8: 1,
}


@dataclass(frozen=True)
class ImageBuffer:
    """Rectangular pixel surface stored as flat bytes with an explicit row stride.

    ``stride`` is the number of bytes between the starts of two consecutive
    rows and may be larger than ``width * bytes_per_pixel`` when rows are
    padded. Row 0 is the top row of the image.
    """

    data: np.ndarray
    width: int
    height: int
    pixel_format: PixelFormat
    stride: int

    @property
    def bytes_per_pixel(self) -> int:
        return self.pixel_format.bytes_per_pixel

    @property
    def row_bytes(self) -> int:
        return self.width * self.bytes_per_pixel

    def required_size(self) -> int:
        """Smallest ``data`` length able to hold ``height`` rows at this stride."""
        if self.width <= 0 or self.height <= 0:
            return 0
        return (self.height - 1) * self.stride + self.row_bytes

    def is_consistent(self) -> bool:
        return (
            self.width > 0
            and self.height > 0
            and self.stride >= self.row_bytes
            and self.data.ndim == 1
            and self.data.dtype == np.uint8
            and self.data.size >= self.required_size()
        )

    @classmethod
    def from_array(cls, array: np.ndarray, pixel_format: PixelFormat = PixelFormat.BGR8) -> "ImageBuffer":
        """Copy an ``HxW`` or ``HxWxC`` uint8 array into a tightly packed buffer."""
        if array.ndim == 2:
            array = array[:, :, np.newaxis]
        if array.ndim != 3 or array.shape[2] != pixel_format.bytes_per_pixel:
            raise ValueError(
                f"Array shape {array.shape} does not match pixel format {pixel_format.value}"
            )
        height, width = array.shape[:2]
        packed = np.ascontiguousarray(array, dtype=np.uint8).reshape(-1).copy()
        return cls(
            data=packed,
            width=width,
            height=height,
            pixel_format=pixel_format,
            stride=width * pixel_format.bytes_per_pixel,
        )

    def to_array(self) -> np.ndarray:
        """Return a new ``HxWxC`` array with row padding removed."""
        bpp = self.bytes_per_pixel
        out = np.empty((self.height, self.width, bpp), dtype=np.uint8)
        for row in range(self.height):
            start = row * self.stride
            out[row] = self.data[start:start + self.row_bytes].reshape(self.width, bpp)
        if bpp == 1:
            return out[:, :, 0]
        return out
