"""Tests for the drawing surface, the compositor and the image hand-off."""

import time

import numpy as np
import pytest
from PIL import Image

from overlay_geometry import Color, Rect, TextAlign
from overlay_render import (
    DrawingSurface,
    OverlayConfig,
    compose_overlay,
    render_box_by_thickness,
    render_overlay,
    save_overlay,
    to_rgba8,
)

RED = Color(1.0, 0.0, 0.0)


# -----------------------------
# Surface primitives
# -----------------------------
def test_draw_line_is_inclusive_and_opaque():
    surface = DrawingSurface(20, 10)
    surface.draw_line(2, 3, 7, 3, RED)

    assert np.array_equal(surface.pixels[3, 2:8], np.tile([1.0, 0.0, 0.0, 1.0], (6, 1)))
    assert not surface.pixels[3, 8].any()
    assert not surface.pixels[4, 2].any()


def test_draw_line_truncates_float_endpoints():
    surface = DrawingSurface(10, 10)
    surface.draw_line(2.9, 1.7, 2.9, 4.2, RED)

    column = surface.pixels[:, 2, 3]
    assert list(np.nonzero(column)[0]) == [1, 2, 3, 4]


def test_draw_line_keeps_float_channels():
    surface = DrawingSurface(8, 8)
    color = Color(0.3, 0.6, 0.9)
    surface.draw_line(0, 0, 7, 0, color)
    surface.draw_line(0, 0, 7, 0, color)

    assert surface.pixels[0, 4].tolist() == pytest.approx([0.3, 0.6, 0.9, 1.0])


def test_draw_rect_accepts_inverted_and_offcanvas_boxes():
    surface = DrawingSurface(10, 10)
    surface.draw_rect(6, 6, 3, 3, RED)
    surface.draw_rect(-5, -5, 20, 20, RED)

    assert surface.pixels[3, 3, 3] == 1.0
    assert surface.pixels[6, 4, 3] == 1.0
    assert surface.pixels[4, 4, 3] == 0.0


def test_consecutive_draws_do_not_bleed():
    surface = DrawingSurface(20, 20)
    blue = Color(0.0, 0.0, 1.0)
    surface.draw_line(0, 5, 19, 5, RED)
    # the diagonal's bounding box covers the whole red row
    surface.draw_line(0, 0, 19, 19, blue)

    assert surface.pixels[5, 3].tolist() == [1.0, 0.0, 0.0, 1.0]
    assert surface.pixels[5, 12].tolist() == [1.0, 0.0, 0.0, 1.0]
    assert surface.pixels[5, 5].tolist() == [0.0, 0.0, 1.0, 1.0]
    assert surface.pixels[7, 7].tolist() == [0.0, 0.0, 1.0, 1.0]
    assert not surface.pixels[0, 1:].any()


def test_offcanvas_line_leaves_buffer_untouched():
    surface = DrawingSurface(10, 10)
    surface.draw_line(-20, -3, -1, -3, RED)
    surface.draw_line(2, 2, 2, 2, RED)

    assert list(zip(*np.nonzero(surface.pixels[..., 3]))) == [(2, 2)]


def test_render_large_canvas_in_reasonable_time():
    config = OverlayConfig(size=(6000, 4000), scale=1.0,
                           centerpoint=True, symmetrygrid=True, label=True)
    started = time.perf_counter()
    pixels = render_overlay(config)
    elapsed = time.perf_counter() - started

    assert pixels.shape == (4000, 6000, 4)
    # a full-canvas pass per primitive took minutes at this size
    assert elapsed < 60.0


def test_render_box_by_thickness_straddles_the_boundary(recorder):
    render_box_by_thickness(recorder, Rect(10, 20, 10, 20), RED, 2)

    assert [call[1] for call in recorder.calls] == [
        (10, 10, 19, 19),
        (10, 10, 19, 19),
        (11, 11, 18, 18),
        (9, 9, 20, 20),
    ]


# -----------------------------
# Compositor
# -----------------------------
def test_compose_order_with_everything_enabled(recorder):
    config = OverlayConfig(size=(1000, 1000), scale=1.0,
                           centerpoint=True, symmetrygrid=True, label=True)
    frame = compose_overlay(config, recorder)

    assert frame == Rect(0, 1000, 166, 833)
    assert recorder.kinds == ["rect"] * 8 + ["line"] * (2 + 144) + ["text"] * 2
    assert recorder.calls[0][1] == (0, 0, 999, 999)
    assert recorder.calls[4][1] == (0, 166, 999, 832)

    texts = [call[1][2] for call in recorder.calls if call[0] == "text"]
    assert texts == ["size: 1000, 1000 aspect ratio: 1.5", "size: 1000, 667 scale: 1"]
    aligns = [call[1][3] for call in recorder.calls if call[0] == "text"]
    assert aligns == [TextAlign.BASELINE, TextAlign.TOP]


def test_compose_borders_only(recorder):
    compose_overlay(OverlayConfig(), recorder)
    assert recorder.kinds == ["rect"] * 8


def test_compose_uses_configured_color(recorder):
    compose_overlay(OverlayConfig(color=(0.2, 0.4, 0.6), centerpoint=True), recorder)
    assert {call[2] for call in recorder.calls} == {Color(0.2, 0.4, 0.6)}


def test_render_default_overlay_pixels():
    pixels = render_overlay(OverlayConfig())

    assert pixels.shape == (1024, 1024, 4)
    assert pixels.dtype == np.float32
    # canvas border: outermost and one pixel in, interior untouched
    assert pixels[0, 0].tolist() == [1.0, 1.0, 1.0, 1.0]
    assert pixels[1, 1].tolist() == [1.0, 1.0, 1.0, 1.0]
    assert not pixels[2, 2].any()
    # frame Rect(256, 768, 340, 682): nominal outline and one pixel outside
    assert pixels[340, 256, 3] == 1.0
    assert pixels[339, 255, 3] == 1.0
    assert pixels[338, 254, 3] == 0.0
    assert not pixels[511, 512].any()


def test_render_centerpoint_pixels():
    pixels = render_overlay(OverlayConfig(centerpoint=True))
    assert pixels[511, 512, 3] == 1.0
    assert pixels[511, 500, 3] == 1.0


def test_render_labels_draws_text():
    region = (slice(285, 296), slice(5, 95))
    plain = render_overlay(OverlayConfig(size=(400, 300)))
    labelled = render_overlay(OverlayConfig(size=(400, 300), label=True))

    assert not plain[region].any()
    assert labelled[region][..., 3].max() > 0.0


# -----------------------------
# Encoding
# -----------------------------
def test_to_rgba8_clips_and_rounds():
    values = np.array([-0.5, 0.5, 1.5, 1.0], dtype=np.float32)
    assert to_rgba8(values).tolist() == [0, 128, 255, 255]


def test_save_png(tmp_path):
    pixels = render_overlay(OverlayConfig(size=(64, 48), symmetrygrid=True))
    path = save_overlay(pixels, str(tmp_path / "overlay.png"))

    with Image.open(path) as image:
        assert image.mode == "RGBA"
        assert image.size == (64, 48)
        assert image.getpixel((0, 0)) == (255, 255, 255, 255)


def test_save_npy_keeps_floats(tmp_path):
    pixels = render_overlay(OverlayConfig(size=(32, 32), color=(0.3, 0.3, 0.3)))
    path = save_overlay(pixels, str(tmp_path / "overlay.npy"))
    assert np.array_equal(np.load(path), pixels)


def test_save_unknown_extension(tmp_path):
    pixels = render_overlay(OverlayConfig(size=(16, 16)))
    with pytest.raises(ValueError):
        save_overlay(pixels, str(tmp_path / "overlay.unknownext"))
