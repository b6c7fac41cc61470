#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Overlay geometry — aspect frames, dynamic symmetry grid, centerpoint, labels
===========================================================================

Pure coordinate transforms behind the overlay tool. Nothing in here touches a
pixel buffer: every function takes value types and returns new value types.

Pipeline:
  canvas Rect
    -> fit_aspect()   (centered sub-rectangle at the target aspect ratio)
    -> scale_by()     (grow/shrink about the center)
    -> frame          (every later construction is derived from this rect)
    -> build_symmetry_grid() / build_centerpoint() / format_labels()

Coordinate conventions:
  - Rect bounds are integers, half-open on the end (xend, yend are excluded).
  - Points are floats; the drawing surface decides how to snap them to pixels.
  - "round" means half away from zero; integer halving truncates toward zero.
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass
from typing import Iterator, List, Tuple

logger = logging.getLogger(__name__)

CROSS_FRACTION = 0.05
DASH_INTERVAL = 5
LABEL_INSET = 0.01


# -----------------------------
# Value types
# -----------------------------
@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Color:
    """RGB channels in [0, 1]. Drawing always uses an opaque alpha."""

    r: float
    g: float
    b: float

    @property
    def rgba(self) -> Tuple[float, float, float, float]:
        return (self.r, self.g, self.b, 1.0)


@dataclass(frozen=True)
class Segment:
    start: Point
    end: Point
    color: Color

    @property
    def length(self) -> float:
        return math.hypot(self.end.x - self.start.x, self.end.y - self.start.y)


@dataclass(frozen=True)
class Rect:
    """Integer region of interest; xend/yend are one past the last pixel."""

    xbegin: int
    xend: int
    ybegin: int
    yend: int

    @classmethod
    def from_size(cls, width: int, height: int) -> "Rect":
        return cls(0, width, 0, height)

    @property
    def width(self) -> int:
        return self.xend - self.xbegin

    @property
    def height(self) -> int:
        return self.yend - self.ybegin

    @property
    def center(self) -> Tuple[int, int]:
        return ((self.xbegin + self.xend) // 2, (self.ybegin + self.yend) // 2)


class FitPolicy(enum.Enum):
    """How fit_aspect() reaches the target ratio.

    HEIGHT_ONLY always re-derives the height from the existing width, even when
    the source is already wider than the target. CONTAIN narrows the width in
    that case instead, so the result never extends past the source.
    """

    HEIGHT_ONLY = "height"
    CONTAIN = "contain"


class TextAlign(enum.Enum):
    # Values are Pillow text anchors: left-baseline and left-top.
    BASELINE = "ls"
    TOP = "la"


@dataclass(frozen=True)
class Label:
    text: str
    anchor: Point
    align: TextAlign


# -----------------------------
# Integer helpers
# -----------------------------
def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3)."""
    magnitude = int(math.floor(abs(value) + 0.5))
    return magnitude if value >= 0 else -magnitude


def half_toward_zero(value: int) -> int:
    return value // 2 if value >= 0 else -((-value) // 2)


# -----------------------------
# Aspect fit and scale
# -----------------------------
def fit_aspect(source: Rect, aspect_ratio: float,
               policy: FitPolicy = FitPolicy.HEIGHT_ONLY) -> Rect:
    """
    Derive a centered sub-rectangle of `source` with width/height == aspect_ratio.

    Parameters
    ----------
    source : Rect
        Region to fit into; must have a positive height.
    aspect_ratio : float
        Target width / height, > 0.
    policy : FitPolicy
        HEIGHT_ONLY keeps the width and recomputes the height in every case.
        CONTAIN narrows the width instead when the source is wider than the target.

    Returns
    -------
    Rect
        `source` itself when it already has the target ratio, otherwise a new Rect.
        The size delta is split around the original midpoint, not anchored at
        xbegin/ybegin.
    """
    ratio = source.width / source.height
    if math.isclose(ratio, aspect_ratio, rel_tol=1e-6):
        return source

    if policy is FitPolicy.CONTAIN and ratio > aspect_ratio:
        awidth = round_half_away(source.height * aspect_ratio)
        wdiff = awidth - source.width
        cx = source.xbegin + source.width // 2
        xbegin = cx - source.width // 2 - half_toward_zero(wdiff)
        fitted = Rect(xbegin, xbegin + awidth, source.ybegin, source.yend)
    else:
        aheight = round_half_away(source.width / aspect_ratio)
        hdiff = aheight - source.height
        cy = source.ybegin + source.height // 2
        ybegin = cy - source.height // 2 - half_toward_zero(hdiff)
        fitted = Rect(source.xbegin, source.xend, ybegin, ybegin + aheight)

    logger.debug("fit %s to aspect ratio %s (%s): %s",
                 source, aspect_ratio, policy.value, fitted)
    return fitted


def scale_by(rect: Rect, sx: float, sy: float) -> Rect:
    """
    Grow or shrink `rect` about its center by independent x/y factors.

    The new size is rounded and the offset is half the size delta truncated
    toward zero, so the center can drift by up to one pixel.
    """
    swidth = round_half_away(rect.width * sx)
    sheight = round_half_away(rect.height * sy)
    dx = half_toward_zero(swidth - rect.width)
    dy = half_toward_zero(sheight - rect.height)

    xbegin = rect.xbegin - dx
    ybegin = rect.ybegin - dy
    scaled = Rect(xbegin, xbegin + swidth, ybegin, ybegin + sheight)
    logger.debug("scale %s by (%s, %s): %s", rect, sx, sy, scaled)
    return scaled


def fitted_frame(canvas: Rect, aspect_ratio: float, scale: float,
                 policy: FitPolicy = FitPolicy.HEIGHT_ONLY) -> Rect:
    """The aspect frame every overlay construction is derived from."""
    return scale_by(fit_aspect(canvas, aspect_ratio, policy), scale, scale)


# -----------------------------
# Dash pattern
# -----------------------------
def expand_dashes(a: Point, b: Point, interval: float, color: Color) -> List[Segment]:
    """
    Split the segment a->b into `round(length / interval)` equal steps and keep
    the even-numbered ones (0, 2, 4, ...). Odd steps are the gaps.

    Step boundaries sit on whole-pixel offsets from `a`: the pixel delta
    (truncated b minus truncated a) times the step fraction, rounded.
    A segment shorter than half an interval yields no dashes.
    """
    dx = int(b.x) - int(a.x)
    dy = int(b.y) - int(a.y)
    dots = round_half_away(math.hypot(dx, dy) / interval)

    def at(t: float) -> Point:
        return Point(a.x + round_half_away(dx * t), a.y + round_half_away(dy * t))

    dashes = []
    for i in range(0, dots, 2):
        dashes.append(Segment(at(i / dots), at((i + 1) / dots), color))
    return dashes


# -----------------------------
# Dynamic symmetry grid
# -----------------------------
@dataclass(frozen=True)
class Reciprocal:
    """
    Constants of the reciprocal construction on a frame.

    length : horizontal offset from a vertical edge where the reciprocal meets
             the opposite horizontal edge (also where the dashed centers sit).
    cross  : offsets of the rabatment lines from the frame edges.
    """

    angle: float
    length: float
    cross: Point


def reciprocal_for(frame: Rect) -> Reciprocal:
    dx = frame.width - 1
    dy = frame.height - 1
    # atan2(dx, dy) == atan(dx / dy) for dy > 0 and stays finite at dy == 0.
    angle = math.pi / 2.0 - math.atan2(dx, dy)
    length = dy * math.tan(angle)
    hypo = dy * math.cos(angle)
    return Reciprocal(angle, length, Point(hypo * math.sin(angle), hypo * math.cos(angle)))


@dataclass(frozen=True)
class GridSpec:
    baroque: Segment
    diagonal: Segment
    reciprocals: Tuple[Segment, ...]
    rabatments: Tuple[Segment, ...]
    centers: Tuple[Segment, ...]
    center_dashes: Tuple[Segment, ...]

    def __iter__(self) -> Iterator[Segment]:
        """Drawable segments in drawing order; the undashed centers are not drawn."""
        yield self.baroque
        yield self.diagonal
        yield from self.reciprocals
        yield from self.rabatments
        yield from self.center_dashes


def build_symmetry_grid(frame: Rect, color: Color,
                        dash_interval: float = DASH_INTERVAL) -> GridSpec:
    """
    Construct the dynamic symmetry grid on `frame`.

    Returns the baroque diagonal, the main diagonal, four reciprocal diagonals
    anchored on the vertical edges, four rabatment lines and the two dashed
    center verticals. Degenerate frames give degenerate segments; clipping is
    left to the drawing surface.
    """
    xb, xe, yb, ye = frame.xbegin, frame.xend, frame.ybegin, frame.yend

    baroque = Segment(Point(xb, ye - 1), Point(xe - 1, yb), color)
    diagonal = Segment(Point(xb, yb), Point(xe - 1, ye - 1), color)

    rec = reciprocal_for(frame)
    logger.debug("reciprocal on %s: angle=%s length=%s cross=%s",
                 frame, rec.angle, rec.length, rec.cross)

    reciprocals = (
        Segment(Point(xb, yb), Point(xb + rec.length, ye), color),
        Segment(Point(xb, ye), Point(xb + rec.length, yb), color),
        Segment(Point(xe, yb), Point(xe - rec.length, ye), color),
        Segment(Point(xe, ye), Point(xe - rec.length, yb), color),
    )

    cross = rec.cross
    rabatments = (
        Segment(Point(xb + cross.x, yb), Point(xb + cross.x, ye), color),
        Segment(Point(xe - cross.x, yb), Point(xe - cross.x, ye), color),
        Segment(Point(xb, ye - cross.y), Point(xe, ye - cross.y), color),
        Segment(Point(xb, yb + cross.y), Point(xe, yb + cross.y), color),
    )

    centers = (
        Segment(Point(xb + rec.length, yb), Point(xb + rec.length, ye), color),
        Segment(Point(xe - rec.length, yb), Point(xe - rec.length, ye), color),
    )
    center_dashes: List[Segment] = []
    for center in centers:
        center_dashes.extend(expand_dashes(center.start, center.end, dash_interval, color))

    return GridSpec(baroque, diagonal, reciprocals, rabatments, centers, tuple(center_dashes))


# -----------------------------
# Centerpoint
# -----------------------------
def build_centerpoint(frame: Rect, color: Color) -> Tuple[Segment, Segment]:
    """Horizontal and vertical arms of a cross, 5% of the frame's longer side."""
    cx, cy = frame.center
    cross = round_half_away(CROSS_FRACTION * max(frame.width, frame.height))

    xbegin = cx - cross // 2
    horizontal = Segment(Point(xbegin, cy), Point(xbegin + cross - 1, cy), color)

    ybegin = cy - cross // 2
    vertical = Segment(Point(cx, ybegin), Point(cx, ybegin + cross - 1), color)
    return horizontal, vertical


# -----------------------------
# Labels
# -----------------------------
def format_number(value: float) -> str:
    # Shortest general form, 6 significant digits: 1.5 -> "1.5", 1.0 -> "1".
    return format(value, "g")


def format_labels(canvas_size: Tuple[int, int], frame: Rect,
                  aspect_ratio: float, scale: float) -> Tuple[Label, Label]:
    """
    Captions for the canvas and the frame.

    The canvas caption sits 1% (of the canvas width) in from the bottom-left
    corner on its baseline. The frame caption hangs 1% (of the frame width)
    past the frame's yend edge, top aligned.
    """
    width, height = canvas_size
    canvas = Rect.from_size(width, height)

    canvas_label = Label(
        f"size: {width}, {height} aspect ratio: {format_number(aspect_ratio)}",
        Point(canvas.xbegin + canvas.width * LABEL_INSET,
              canvas.yend - canvas.width * LABEL_INSET),
        TextAlign.BASELINE,
    )
    frame_label = Label(
        f"size: {frame.width}, {frame.height} scale: {format_number(scale)}",
        Point(frame.xbegin + frame.width * LABEL_INSET,
              frame.yend + frame.width * LABEL_INSET),
        TextAlign.TOP,
    )
    return canvas_label, frame_label
