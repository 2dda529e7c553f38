import numpy as np
import pytest
import skia

from export import surface_pixels
from models import CanvasGeometry
from ring_compositor import (
    AnnulusFill,
    Clear,
    ClipDisc,
    DiscMask,
    ImageBlit,
    ReleaseClip,
    composite_ring,
    cover_fit_rect,
    paint_ops,
)

RING = "#2547A9"
RING_RGB = np.array([0x25, 0x47, 0xA9])


def composite(bitmap, overlay, opacity=0.94):
    geometry = CanvasGeometry.for_bitmap(bitmap)
    surface = skia.Surface(geometry.pixel_size, geometry.pixel_size)
    paint_ops(surface.getCanvas(), composite_ring(bitmap, geometry, RING, opacity, overlay))
    return geometry, surface_pixels(surface)


def test_outside_mode_op_order(make_bitmap):
    bm = make_bitmap(80, 60)
    g = CanvasGeometry.for_bitmap(bm)
    ops = composite_ring(bm, g, RING, 0.5, overlay_mode=False)
    assert [type(op) for op in ops] == [Clear, ClipDisc, ImageBlit, ReleaseClip, AnnulusFill]
    assert ops[1].radius == pytest.approx(g.inner_radius)
    blit = ops[2]
    # shorter side (60) spans the inner diameter
    assert blit.bottom - blit.top == pytest.approx(2 * g.inner_radius)
    assert (blit.left + blit.right) / 2 == pytest.approx(g.center)
    ring = ops[4]
    assert ring.outer_radius == pytest.approx(g.outer_radius)
    assert ring.inner_radius == pytest.approx(g.inner_radius)
    assert skia.ColorGetA(ring.color) == 128


def test_overlay_mode_op_order(make_bitmap):
    bm = make_bitmap(80, 60)
    g = CanvasGeometry.for_bitmap(bm)
    ops = composite_ring(bm, g, RING, 1.0, overlay_mode=True)
    assert [type(op) for op in ops] == [Clear, ImageBlit, AnnulusFill, DiscMask]
    blit = ops[1]
    assert blit.right - blit.left >= g.canvas_size - 1e-9
    assert blit.bottom - blit.top == pytest.approx(g.canvas_size)
    assert ops[3].radius == pytest.approx(g.outer_radius)


def test_cover_fit_rect_is_centred():
    assert cover_fit_rect(40, 20, 2.0, 50, 50) == (10, 30, 90, 70)


@pytest.mark.parametrize("overlay", [False, True])
def test_photo_shows_inside_the_inner_disc(make_bitmap, overlay):
    g, px = composite(make_bitmap(80, 60), overlay)
    c = int(g.center)
    for dx in (0, 20, -30):
        assert tuple(px[c, c + dx]) == (255, 0, 0, 255)


def test_outside_mode_ring_is_translucent_ring_colour(make_bitmap):
    g, px = composite(make_bitmap(80, 60), overlay=False)
    c = int(g.center)
    r = int((g.inner_radius + g.outer_radius) / 2)
    sample = px[c, c + r].astype(int)
    assert abs(sample[3] - round(0.94 * 255)) <= 1
    assert np.all(np.abs(sample[:3] - RING_RGB) <= 2)


def test_overlay_mode_ring_blends_over_photo(make_bitmap):
    g, px = composite(make_bitmap(80, 60), overlay=True)
    c = int(g.center)
    r = int((g.inner_radius + g.outer_radius) / 2)
    sample = px[c, c + r].astype(int)
    a = round(0.94 * 255) / 255
    expected = RING_RGB * a + np.array([255, 0, 0]) * (1 - a)
    assert sample[3] == 255
    assert np.all(np.abs(sample[:3] - expected) <= 3)


@pytest.mark.parametrize("overlay", [False, True])
def test_nothing_survives_outside_the_outer_circle(make_bitmap, overlay):
    g, px = composite(make_bitmap(80, 60), overlay)
    n = g.pixel_size
    for y, x in [(0, 0), (0, n - 1), (n - 1, 0), (n - 1, n - 1), (2, 2), (n - 8, n - 8)]:
        assert px[y, x, 3] == 0


def test_zero_opacity_ring_leaves_no_trace(make_bitmap):
    g, px = composite(make_bitmap(80, 60), overlay=False, opacity=0.0)
    c = int(g.center)
    r = int((g.inner_radius + g.outer_radius) / 2)
    assert px[c, c + r, 3] == 0


def test_inputs_are_untouched(make_bitmap):
    bm = make_bitmap(80, 60)
    before = bm.image.toarray().copy()
    composite(bm, overlay=True)
    np.testing.assert_array_equal(bm.image.toarray(), before)


def test_scaled_photo_is_smoothed_not_blocky():
    from PIL import Image

    from models import SourceBitmap

    # one-pixel checkerboard, scaled by 4/3 into the inner disc
    board = (np.indices((300, 400)).sum(axis=0) % 2 * 255).astype(np.uint8)
    bm = SourceBitmap.from_pil(Image.fromarray(board, "L").convert("RGB"))
    g, px = composite(bm, overlay=False)
    c = int(g.center)
    patch = px[c - 5:c + 5, c - 5:c + 5, 0]
    assert len(np.unique(patch)) > 2
