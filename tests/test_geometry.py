"""Tests for normalized box to viewport pixel mapping."""

from __future__ import annotations

import pytest

from busreader.core.entities import NormalizedBox, Orientation, PixelRect
from busreader.core.geometry import SourceAspect, Viewport, map_box, unmap_rect


def _assert_box_close(actual: NormalizedBox, expected: NormalizedBox) -> None:
    assert actual.x == pytest.approx(expected.x, abs=1e-9)
    assert actual.y == pytest.approx(expected.y, abs=1e-9)
    assert actual.width == pytest.approx(expected.width, abs=1e-9)
    assert actual.height == pytest.approx(expected.height, abs=1e-9)


def test_landscape_native_viewport_scales_and_flips_y() -> None:
    box = NormalizedBox(0.1, 0.2, 0.3, 0.4)
    rect = map_box(box, Viewport(1280, 720), SourceAspect(1280, 720), Orientation.LANDSCAPE_LEFT)
    assert rect.x == pytest.approx(128.0)
    assert rect.y == pytest.approx(288.0)
    assert rect.width == pytest.approx(384.0)
    assert rect.height == pytest.approx(288.0)


def test_landscape_native_viewport_inverse_recovers_box() -> None:
    box = NormalizedBox(0.3, 0.4, 0.2, 0.1)
    viewport = Viewport(1920, 1080)
    source = SourceAspect.from_size(1920, 1080)
    rect = map_box(box, viewport, source, Orientation.LANDSCAPE_LEFT)
    _assert_box_close(unmap_rect(rect, viewport, source, Orientation.LANDSCAPE_LEFT), box)


def test_landscape_wider_frame_is_centered_horizontally() -> None:
    # 16:9 frame filling a 4:3 view crops the sides equally.
    viewport = Viewport(800, 600)
    source = SourceAspect(1600, 900)
    full = map_box(NormalizedBox(0.0, 0.0, 1.0, 1.0), viewport, source, Orientation.LANDSCAPE_LEFT)
    assert full.height == pytest.approx(600.0)
    assert full.x == pytest.approx(-(full.width - 800.0) / 2.0)
    assert full.y == pytest.approx(0.0)


@pytest.mark.parametrize(
    "viewport, source",
    [
        (Viewport(375, 812), SourceAspect(1920, 1080)),  # phone, ratio >= 1
        (Viewport(768, 1024), SourceAspect(1920, 1080)),  # tablet, ratio < 1
    ],
)
def test_portrait_inverse_recovers_box(viewport: Viewport, source: SourceAspect) -> None:
    box = NormalizedBox(0.3, 0.4, 0.2, 0.1)
    for orientation in (Orientation.PORTRAIT, Orientation.PORTRAIT_UPSIDE_DOWN):
        rect = map_box(box, viewport, source, orientation)
        _assert_box_close(unmap_rect(rect, viewport, source, orientation), box)


def test_portrait_with_matching_aspect_only_flips_vertically() -> None:
    rect = map_box(
        NormalizedBox(0.25, 0.5, 0.25, 0.25),
        Viewport(9, 16),
        SourceAspect(16, 9),
        Orientation.PORTRAIT,
    )
    assert rect.x == pytest.approx(2.25)
    assert rect.y == pytest.approx(4.0)
    assert rect.width == pytest.approx(2.25)
    assert rect.height == pytest.approx(4.0)


def test_upside_down_mirrors_both_axes_before_mapping() -> None:
    viewport = Viewport(375, 812)
    source = SourceAspect(1920, 1080)
    box = NormalizedBox(0.1, 0.2, 0.3, 0.4)
    mirrored = NormalizedBox(0.6, 0.4, 0.3, 0.4)
    upside_down = map_box(box, viewport, source, Orientation.PORTRAIT_UPSIDE_DOWN)
    upright = map_box(mirrored, viewport, source, Orientation.PORTRAIT)
    assert upside_down.x == pytest.approx(upright.x)
    assert upside_down.y == pytest.approx(upright.y)
    assert upside_down.width == pytest.approx(upright.width)
    assert upside_down.height == pytest.approx(upright.height)


def test_landscape_orientations_are_not_mirrored() -> None:
    viewport = Viewport(1280, 720)
    source = SourceAspect(1280, 720)
    box = NormalizedBox(0.1, 0.2, 0.3, 0.4)
    left = map_box(box, viewport, source, Orientation.LANDSCAPE_LEFT)
    right = map_box(box, viewport, source, Orientation.LANDSCAPE_RIGHT)
    assert left == right


def test_degenerate_box_maps_to_empty_rect() -> None:
    rect = map_box(NormalizedBox(0.5, 0.5, 0.0, 0.2), Viewport(100, 100), SourceAspect(100, 100), Orientation.PORTRAIT)
    assert rect == PixelRect.empty()
    assert rect.is_empty


def test_box_is_clamped_before_mapping() -> None:
    rect = map_box(
        NormalizedBox(0.9, -0.1, 0.3, 0.5),
        Viewport(100, 100),
        SourceAspect(100, 100),
        Orientation.LANDSCAPE_LEFT,
    )
    assert rect.x == pytest.approx(90.0)
    assert rect.width == pytest.approx(10.0)
    assert rect.height == pytest.approx(40.0)
    assert rect.y == pytest.approx(60.0)
