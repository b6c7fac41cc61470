#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Overlay rendering — float RGBA buffer, Pillow rasterization, compositing order
=============================================================================

The geometry in overlay_geometry is turned into pixels here:

- DrawingSurface owns one (H, W, 4) float32 buffer. Each draw call rasterizes
  into a shared 8-bit coverage mask with Pillow's ImageDraw and composites the
  opaque color through the covered pixels, so channels keep full float precision.
- compose_overlay() issues the draw calls in a fixed order:
    canvas border -> aspect frame -> centerpoint -> symmetry grid -> labels
- save_overlay() hands the finished buffer to Pillow (or numpy for .npy).

Dependencies: numpy, pillow
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from overlay_geometry import (
    Color,
    FitPolicy,
    Rect,
    Segment,
    TextAlign,
    build_centerpoint,
    build_symmetry_grid,
    fitted_frame,
    format_labels,
)

logger = logging.getLogger(__name__)

BORDER_THICKNESS = 2


@dataclass(frozen=True)
class OverlayConfig:
    aspect_ratio: float = 1.5
    scale: float = 0.5
    color: Tuple[float, float, float] = (1.0, 1.0, 1.0)
    size: Tuple[int, int] = (1024, 1024)
    centerpoint: bool = False
    symmetrygrid: bool = False
    label: bool = False
    fit_policy: FitPolicy = FitPolicy.HEIGHT_ONLY
    font: Optional[str] = None
    font_size: int = 12

    @property
    def rgb(self) -> Color:
        return Color(*self.color)


def load_font(path: Optional[str], size: int):
    """TrueType font at `path`, or Pillow's bundled default at `size` pixels."""
    if path:
        return ImageFont.truetype(path, size)
    return ImageFont.load_default(size=size)


# -----------------------------
# Drawing surface
# -----------------------------
class DrawingSurface:
    """
    Mutable RGBA float buffer with line, box and text primitives.

    Float endpoints are truncated toward zero; endpoints are inclusive.
    Anything falling outside the buffer is clipped.

    Every primitive rasterizes into one shared "L" coverage mask. Only the
    covered pixels inside the primitive's clipped bounding box are composited,
    and that box is cleared again afterwards, so a call costs the size of the
    primitive rather than the size of the canvas.
    """

    def __init__(self, width: int, height: int, font=None):
        self.width = width
        self.height = height
        self.font = font
        self.pixels = np.zeros((height, width, 4), dtype=np.float32)
        self._coverage = Image.new("L", (width, height), 0)
        self._draw = ImageDraw.Draw(self._coverage)

    def _clip(self, x0: float, y0: float, x1: float, y1: float) -> Optional[Tuple[int, int, int, int]]:
        """Inclusive bounds -> half-open box inside the canvas, or None when fully outside."""
        left = max(0, int(math.floor(min(x0, x1))))
        top = max(0, int(math.floor(min(y0, y1))))
        right = min(self.width, int(math.ceil(max(x0, x1))) + 1)
        bottom = min(self.height, int(math.ceil(max(y0, y1))) + 1)
        if left >= right or top >= bottom:
            return None
        return (left, top, right, bottom)

    def _composite(self, box: Optional[Tuple[int, int, int, int]], color: Color) -> None:
        if box is None:
            return
        left, top, right, bottom = box
        region = np.asarray(self._coverage.crop(box))
        ys, xs = np.nonzero(region)
        if ys.size == 0:
            return
        alpha = region[ys, xs].astype(np.float32)[:, None] / 255.0
        ys += top
        xs += left
        rgba = np.asarray(color.rgba, dtype=np.float32)
        self.pixels[ys, xs] = self.pixels[ys, xs] * (1.0 - alpha) + rgba * alpha
        self._coverage.paste(0, box)

    def draw_line(self, x0: float, y0: float, x1: float, y1: float, color: Color) -> None:
        start, end = (int(x0), int(y0)), (int(x1), int(y1))
        self._draw.line([start, end], fill=255, width=1)
        self._composite(self._clip(*start, *end), color)

    def draw_rect(self, x0: int, y0: int, x1: int, y1: int, color: Color) -> None:
        """Outline with inclusive corners; drawn as four lines so inverted boxes are fine."""
        corners = [(x0, y0), (x1, y0), (x1, y1), (x0, y1)]
        for i in range(4):
            self.draw_line(*corners[i], *corners[(i + 1) % 4], color)

    def draw_text(self, x: float, y: float, text: str, color: Color, align: TextAlign) -> None:
        if self.font is None:
            self.font = load_font(None, 12)
        self._draw.text((x, y), text, fill=255, font=self.font, anchor=align.value)
        bbox = self._draw.textbbox((x, y), text, font=self.font, anchor=align.value)
        # One pixel of slack for anti-aliased glyph edges.
        self._composite(self._clip(bbox[0] - 1, bbox[1] - 1, bbox[2] + 1, bbox[3] + 1), color)


def draw_segment(surface, segment: Segment) -> None:
    surface.draw_line(segment.start.x, segment.start.y,
                      segment.end.x, segment.end.y, segment.color)


def render_box_by_thickness(surface, rect: Rect, color: Color, thickness: int) -> None:
    """
    Box outline `thickness` pixels thick, straddling the rect boundary.

    Pass t draws one outline t pixels inside and one t pixels outside the
    nominal outline (xbegin..xend-1, ybegin..yend-1).
    """
    for t in range(thickness):
        surface.draw_rect(rect.xbegin + t, rect.ybegin + t,
                          rect.xend - t - 1, rect.yend - t - 1, color)
        surface.draw_rect(rect.xbegin - t, rect.ybegin - t,
                          rect.xend + t - 1, rect.yend + t - 1, color)


# -----------------------------
# Compositor
# -----------------------------
def compose_overlay(config: OverlayConfig, surface) -> Rect:
    """
    Draw the overlay described by `config` onto `surface`.

    `surface` needs draw_rect, draw_line and draw_text (see DrawingSurface).
    All geometry is computed before the first draw call. Returns the frame.
    """
    color = config.rgb
    width, height = config.size
    canvas = Rect.from_size(width, height)

    frame = fitted_frame(canvas, config.aspect_ratio, config.scale, config.fit_policy)
    centerpoint = build_centerpoint(frame, color) if config.centerpoint else None
    grid = build_symmetry_grid(frame, color) if config.symmetrygrid else None
    labels = (format_labels(config.size, frame, config.aspect_ratio, config.scale)
              if config.label else None)
    logger.info("Aspect frame: %dx%d at (%d, %d)",
                frame.width, frame.height, frame.xbegin, frame.ybegin)

    render_box_by_thickness(surface, canvas, color, BORDER_THICKNESS)
    render_box_by_thickness(surface, frame, color, BORDER_THICKNESS)

    if centerpoint is not None:
        logger.info("Drawing centerpoint")
        for segment in centerpoint:
            draw_segment(surface, segment)

    if grid is not None:
        segments = list(grid)
        logger.info("Drawing symmetry grid (%d segments)", len(segments))
        for segment in segments:
            draw_segment(surface, segment)

    if labels is not None:
        logger.info("Drawing labels")
        for label in labels:
            surface.draw_text(label.anchor.x, label.anchor.y, label.text, color, label.align)

    return frame


def render_overlay(config: OverlayConfig) -> np.ndarray:
    """Compose `config` on a fresh DrawingSurface and return its float RGBA buffer."""
    width, height = config.size
    font = load_font(config.font, config.font_size) if config.label else None
    surface = DrawingSurface(width, height, font=font)
    compose_overlay(config, surface)
    return surface.pixels


# -----------------------------
# Encoding
# -----------------------------
def to_rgba8(pixels: np.ndarray) -> np.ndarray:
    return np.round(np.clip(pixels, 0.0, 1.0) * 255.0).astype(np.uint8)


def save_overlay(pixels: np.ndarray, path: str) -> str:
    """
    Write the buffer to `path`; the format follows the extension.

    .npy keeps the float32 channels; anything else goes through Pillow as
    8-bit RGBA. Pillow's OSError/ValueError propagate to the caller.
    """
    if os.path.splitext(path)[1].lower() == ".npy":
        np.save(path, pixels)
    else:
        Image.fromarray(to_rgba8(pixels)).save(path)
    return path
