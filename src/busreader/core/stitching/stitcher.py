"""Join per-symbol detections from a cropped region into one reading."""

from __future__ import annotations

from typing import Iterable, List

from busreader.core.entities import Detection, NormalizedBox

DEFAULT_MIN_CONFIDENCE = 0.5


def order_fragments(
    fragments: Iterable[Detection],
    region_box: NormalizedBox,
    min_confidence: float = DEFAULT_MIN_CONFIDENCE,
) -> List[Detection]:
    """Filter, remap into ``region_box``'s parent space and sort left to right.

    Fragments whose horizontal centers are equal keep the detector's output
    order, since ``sorted`` is stable.
    """
    remapped = [
        fragment.with_box(fragment.box.remap_into(region_box))
        for fragment in fragments
        if fragment.confidence >= min_confidence
    ]
    return sorted(remapped, key=lambda fragment: fragment.center()[0])


def stitch(
    fragments: Iterable[Detection],
    region_box: NormalizedBox,
    min_confidence: float = DEFAULT_MIN_CONFIDENCE,
) -> str:
    """Concatenate fragment labels in reading order; ``""`` when none qualify."""
    return "".join(fragment.label for fragment in order_fragments(fragments, region_box, min_confidence))
