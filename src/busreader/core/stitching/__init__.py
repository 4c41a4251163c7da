"""Fragment stitching."""

from .stitcher import DEFAULT_MIN_CONFIDENCE, order_fragments, stitch

__all__ = ["DEFAULT_MIN_CONFIDENCE", "order_fragments", "stitch"]
