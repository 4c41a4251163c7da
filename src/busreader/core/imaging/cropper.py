"""Crop a normalized region out of a strided image buffer."""

from __future__ import annotations

import logging
import math
from typing import Tuple

import numpy as np

from busreader.core.entities import ImageBuffer, NormalizedBox

logger = logging.getLogger("core.imaging.cropper")

DEFAULT_ROW_ALIGNMENT = 16


class CropError(Exception):
    """Base class for crop failures; callers skip secondary detection on it."""


class InvalidBoundsError(CropError):
    """Requested region falls outside the source buffer or has no area."""

    def __init__(self, bounds: Tuple[int, int, int, int], size: Tuple[int, int]) -> None:
        self.bounds = bounds
        self.size = size
        x, y, w, h = bounds
        super().__init__(f"Invalid crop bounds x={x} y={y} w={w} h={h} for buffer {size[0]}x{size[1]}")


class BufferLayoutError(CropError):
    """Source buffer's stride or data length cannot hold its declared pixels."""


def pixel_bounds(box: NormalizedBox, width: int, height: int) -> Tuple[int, int, int, int]:
    """Convert a lower-left-origin box into ``(col, row, cols, rows)`` with row 0 at the top."""
    crop_x = math.floor(box.x * width)
    crop_y = math.floor((1.0 - box.y - box.height) * height)
    crop_w = math.floor(box.width * width)
    crop_h = math.floor(box.height * height)
    return crop_x, crop_y, crop_w, crop_h


def _aligned_stride(row_bytes: int, alignment: int) -> int:
    if alignment <= 1:
        return row_bytes
    return ((row_bytes + alignment - 1) // alignment) * alignment


def crop(buffer: ImageBuffer, box: NormalizedBox, row_alignment: int = DEFAULT_ROW_ALIGNMENT) -> ImageBuffer:
    """Return a newly allocated buffer holding ``box`` of ``buffer``.

    Raises :class:`InvalidBoundsError` when the region has a negative origin,
    no area, or extends past the buffer, and :class:`BufferLayoutError` when
    the source buffer is internally inconsistent.
    """
    if not buffer.is_consistent():
        raise BufferLayoutError(
            f"Buffer {buffer.width}x{buffer.height} stride={buffer.stride} "
            f"holds {buffer.data.size} bytes, needs {buffer.required_size()}"
        )

    crop_x, crop_y, crop_w, crop_h = pixel_bounds(box, buffer.width, buffer.height)
    if (
        crop_x < 0
        or crop_y < 0
        or crop_w <= 0
        or crop_h <= 0
        or crop_x + crop_w > buffer.width
        or crop_y + crop_h > buffer.height
    ):
        raise InvalidBoundsError((crop_x, crop_y, crop_w, crop_h), (buffer.width, buffer.height))

    bpp = buffer.bytes_per_pixel
    row_bytes = crop_w * bpp
    dst_stride = _aligned_stride(row_bytes, row_alignment)
    dst = np.zeros((crop_h - 1) * dst_stride + row_bytes, dtype=np.uint8)

    src_offset = crop_y * buffer.stride + crop_x * bpp
    for row in range(crop_h):
        src_start = src_offset + row * buffer.stride
        dst_start = row * dst_stride
        dst[dst_start:dst_start + row_bytes] = buffer.data[src_start:src_start + row_bytes]

    logger.debug("Cropped %dx%d region at (%d, %d)", crop_w, crop_h, crop_x, crop_y)
    return ImageBuffer(
        data=dst,
        width=crop_w,
        height=crop_h,
        pixel_format=buffer.pixel_format,
        stride=dst_stride,
    )
