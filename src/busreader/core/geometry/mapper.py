"""Mapping between detector-normalized boxes and viewport pixel rectangles."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from busreader.core.entities import NormalizedBox, Orientation, PixelRect


@dataclass(frozen=True)
class Viewport:
    """Size of the presentation surface in pixels."""

    width: float
    height: float


@dataclass(frozen=True)
class SourceAspect:
    """Long and short side of the captured frames in pixels."""

    long: float
    short: float

    @classmethod
    def from_size(cls, width: float, height: float) -> "SourceAspect":
        return cls(long=max(width, height), short=min(width, height))


def _mirror(box: NormalizedBox) -> NormalizedBox:
    return NormalizedBox(
        x=1.0 - box.x - box.width,
        y=1.0 - box.y - box.height,
        width=box.width,
        height=box.height,
    )


def _portrait_ratio(viewport: Viewport, source: SourceAspect) -> float:
    return (viewport.height / viewport.width) / (source.long / source.short)


def _landscape_transform(viewport: Viewport, source: SourceAspect) -> Tuple[float, float, float]:
    """Return ``(scale, offset_x, offset_y)`` for aspect-fill of the viewport."""
    frame_aspect = source.long / source.short
    view_aspect = viewport.width / viewport.height
    if frame_aspect > view_aspect:
        scale = viewport.height / source.short
        return scale, (source.long * scale - viewport.width) / 2.0, 0.0
    scale = viewport.width / source.long
    return scale, 0.0, (source.short * scale - viewport.height) / 2.0


def map_box(
    box: NormalizedBox,
    viewport: Viewport,
    source: SourceAspect,
    orientation: Orientation,
) -> PixelRect:
    """Convert a lower-left-origin normalized box into an upper-left-origin pixel rect.

    Portrait orientations correct for the aspect mismatch between the capture
    preset and the viewport; every other orientation uses uniform scaling with
    centering offsets. Degenerate boxes map to ``PixelRect.empty()``.
    """
    box = box.clamped()
    if box.is_degenerate():
        return PixelRect.empty()

    if orientation is Orientation.PORTRAIT_UPSIDE_DOWN:
        box = _mirror(box)

    if orientation.is_portrait:
        return _map_portrait(box, viewport, source)
    return _map_landscape(box, viewport, source)


def _map_portrait(box: NormalizedBox, viewport: Viewport, source: SourceAspect) -> PixelRect:
    ratio = _portrait_ratio(viewport, source)
    x, y, w, h = box.x, box.y, box.width, box.height
    if ratio >= 1.0:
        x = x + (1.0 - ratio) * (0.5 - x)
        y = 1.0 - y - h
        w = w * ratio
    else:
        offset = (ratio - 1.0) * (0.5 - (y + h))
        y = 1.0 - offset - (y + h)
        h = h / ((viewport.height / viewport.width) / (source.short / source.long))
    return PixelRect(
        x=x * viewport.width,
        y=y * viewport.height,
        width=w * viewport.width,
        height=h * viewport.height,
    )


def _map_landscape(box: NormalizedBox, viewport: Viewport, source: SourceAspect) -> PixelRect:
    scale, offset_x, offset_y = _landscape_transform(viewport, source)
    width = box.width * source.long * scale
    height = box.height * source.short * scale
    return PixelRect(
        x=box.x * source.long * scale - offset_x,
        y=viewport.height - (box.y * source.short * scale - offset_y + height),
        width=width,
        height=height,
    )


def unmap_rect(
    rect: PixelRect,
    viewport: Viewport,
    source: SourceAspect,
    orientation: Orientation,
) -> NormalizedBox:
    """Inverse of :func:`map_box` for rects produced from in-range boxes."""
    if rect.is_empty:
        return NormalizedBox(0.0, 0.0, 0.0, 0.0)

    if orientation.is_portrait:
        box = _unmap_portrait(rect, viewport, source)
    else:
        box = _unmap_landscape(rect, viewport, source)

    if orientation is Orientation.PORTRAIT_UPSIDE_DOWN:
        box = _mirror(box)
    return box


def _unmap_portrait(rect: PixelRect, viewport: Viewport, source: SourceAspect) -> NormalizedBox:
    ratio = _portrait_ratio(viewport, source)
    x = rect.x / viewport.width
    y = rect.y / viewport.height
    w = rect.width / viewport.width
    h = rect.height / viewport.height
    if ratio >= 1.0:
        w = w / ratio
        x = (x - (1.0 - ratio) * 0.5) / ratio
        y = 1.0 - y - h
    else:
        h = h * ((viewport.height / viewport.width) / (source.short / source.long))
        # y' = 1 - (ratio - 1) / 2 + (ratio - 2) * (y + h)
        top = (y - 1.0 + (ratio - 1.0) / 2.0) / (ratio - 2.0)
        y = top - h
    return NormalizedBox(x=x, y=y, width=w, height=h)


def _unmap_landscape(rect: PixelRect, viewport: Viewport, source: SourceAspect) -> NormalizedBox:
    scale, offset_x, offset_y = _landscape_transform(viewport, source)
    sx = source.long * scale
    sy = source.short * scale
    return NormalizedBox(
        x=(rect.x + offset_x) / sx,
        y=(viewport.height - rect.y - rect.height + offset_y) / sy,
        width=rect.width / sx,
        height=rect.height / sy,
    )
