"""Tests for frame reconstruction and overlay compositing on raw buffers."""

import pytest

from gifcaption.canvas import DeltaFrame, Disposal, apply_delta, composite_overlay, new_canvas
from helpers import RGBA_BLUE, RGBA_CLEAR, RGBA_GREEN, RGBA_RED, pixel, rgba_image

W = H = 4


def frame(left, top, width, height, color, disposal=Disposal.KEEP):
    return DeltaFrame(left, top, width, height, disposal, rgba_image(width, height, color))


def red_canvas():
    return bytearray(rgba_image(W, H, RGBA_RED))


@pytest.mark.parametrize("code, expected", [
    (0, Disposal.KEEP),
    (1, Disposal.KEEP),
    (2, Disposal.BACKGROUND),
    (3, Disposal.PREVIOUS),
    (5, Disposal.KEEP),
])
def test_disposal_from_code(code, expected):
    assert Disposal.from_code(code) is expected


def test_draws_region_and_returns_snapshot():
    live, previous = new_canvas(W, H), new_canvas(W, H)
    snap = apply_delta(live, previous, frame(1, 1, 2, 2, RGBA_BLUE), W, H)
    assert pixel(snap, W, 1, 1) == RGBA_BLUE
    assert pixel(snap, W, 2, 2) == RGBA_BLUE
    assert pixel(snap, W, 0, 0) == RGBA_CLEAR
    assert pixel(snap, W, 3, 3) == RGBA_CLEAR
    # keep: the next frame inherits exactly what was shown
    assert bytes(live) == snap


def test_transparent_source_pixels_are_skipped():
    live, previous = red_canvas(), new_canvas(W, H)
    pixels = bytes(RGBA_CLEAR) + bytes(RGBA_GREEN)
    snap = apply_delta(live, previous, DeltaFrame(0, 0, 2, 1, Disposal.KEEP, pixels), W, H)
    assert pixel(snap, W, 0, 0) == RGBA_RED
    assert pixel(snap, W, 1, 0) == RGBA_GREEN


def test_pixels_outside_canvas_are_discarded():
    live, previous = new_canvas(W, H), new_canvas(W, H)
    snap = apply_delta(live, previous, frame(3, 3, 3, 3, RGBA_GREEN), W, H)
    assert len(snap) == W * H * 4
    assert pixel(snap, W, 3, 3) == RGBA_GREEN
    assert pixel(snap, W, 2, 3) == RGBA_CLEAR


def test_frame_entirely_off_canvas_draws_nothing():
    live, previous = red_canvas(), new_canvas(W, H)
    snap = apply_delta(live, previous, frame(10, 10, 2, 2, RGBA_GREEN), W, H)
    assert snap == rgba_image(W, H, RGBA_RED)


def test_background_disposal_clears_after_snapshot():
    live, previous = red_canvas(), new_canvas(W, H)
    snap = apply_delta(live, previous, frame(0, 0, 2, 2, RGBA_BLUE, Disposal.BACKGROUND), W, H)
    assert pixel(snap, W, 0, 0) == RGBA_BLUE
    assert pixel(snap, W, 3, 3) == RGBA_RED
    assert live == bytearray(W * H * 4)


def test_previous_disposal_rolls_back_after_snapshot():
    live, previous = red_canvas(), new_canvas(W, H)
    before = bytes(live)
    snap = apply_delta(live, previous, frame(0, 0, 2, 2, RGBA_BLUE, Disposal.PREVIOUS), W, H)
    assert pixel(snap, W, 1, 1) == RGBA_BLUE
    assert bytes(live) == before


def test_interleaved_disposals():
    live, previous = new_canvas(W, H), new_canvas(W, H)
    apply_delta(live, previous, frame(0, 0, W, H, RGBA_RED), W, H)
    apply_delta(live, previous, frame(0, 0, 1, 1, RGBA_GREEN), W, H)
    after_keep = bytes(live)
    apply_delta(live, previous, frame(1, 1, 2, 2, RGBA_BLUE, Disposal.PREVIOUS), W, H)
    assert bytes(live) == after_keep
    apply_delta(live, previous, frame(2, 2, 1, 1, RGBA_BLUE, Disposal.BACKGROUND), W, H)
    assert live == bytearray(W * H * 4)
    snap = apply_delta(live, previous, frame(0, 0, 1, 1, RGBA_RED, Disposal.PREVIOUS), W, H)
    assert pixel(snap, W, 0, 0) == RGBA_RED
    assert pixel(snap, W, 1, 1) == RGBA_CLEAR
    assert live == bytearray(W * H * 4)


def test_overlay_replaces_only_where_alpha_nonzero():
    snapshot = rgba_image(W, H, RGBA_RED)
    overlay = bytearray(W * H * 4)
    overlay[0:4] = bytes((10, 20, 30, 1))
    overlay[4:8] = bytes((40, 50, 60, 0))
    out = composite_overlay(snapshot, bytes(overlay))
    assert pixel(out, W, 0, 0) == (10, 20, 30, 1)
    assert pixel(out, W, 1, 0) == RGBA_RED
    assert out[8:] == snapshot[8:]


def test_overlay_does_not_mutate_snapshot():
    snapshot = rgba_image(W, H, RGBA_RED)
    overlay = rgba_image(W, H, RGBA_GREEN)
    out = composite_overlay(snapshot, overlay)
    assert out == overlay
    assert snapshot == rgba_image(W, H, RGBA_RED)


def test_overlay_length_mismatch_raises():
    with pytest.raises(ValueError):
        composite_overlay(rgba_image(W, H, RGBA_RED), bytes(8))
