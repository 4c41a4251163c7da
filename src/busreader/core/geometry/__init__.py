"""Coordinate mapping helpers."""

from .mapper import SourceAspect, Viewport, map_box, unmap_rect

__all__ = ["SourceAspect", "Viewport", "map_box", "unmap_rect"]
