#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
overlaytool — a utility for creating overlay images
===================================================

Renders a composition overlay for photography / film framing:
- a 2 px border around the whole canvas,
- a 2 px border around a centered frame of the requested aspect ratio,
  scaled about its center,
- optionally a centerpoint cross, the dynamic symmetry grid (baroque diagonal,
  diagonal, reciprocals, rabatments, dashed centers) and size captions.

Output is RGBA on a transparent background, so it can be laid over footage.

Quick start
-----------
  python overlaytool.py --aspectratio 2.39 --size 2390,1000 --scale 1 \
      --symmetrygrid --centerpoint --label --outputfile overlay_2.39.png

Exit status: 0 on success, 2 on bad arguments, 1 when the file cannot be written.
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
from typing import List, Optional, Tuple

from overlay_geometry import FitPolicy
from overlay_render import OverlayConfig, render_overlay, save_overlay

logger = logging.getLogger(__name__)


# -----------------------------
# Argument types
# -----------------------------
def positive_float(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"could not parse number from string: {text}")
    if not (math.isfinite(value) and value > 0):
        raise argparse.ArgumentTypeError(f"must be a finite number greater than 0: {text}")
    return value


def color_triplet(text: str) -> Tuple[float, float, float]:
    parts = [p.strip() for p in text.split(",")]
    try:
        values = tuple(float(p) for p in parts)
    except ValueError:
        raise argparse.ArgumentTypeError(f"could not parse color from string: {text}")
    if len(values) != 3:
        raise argparse.ArgumentTypeError(f"color needs three values R,G,B: {text}")
    if not all(0.0 <= v <= 1.0 for v in values):
        raise argparse.ArgumentTypeError(f"color channels must be within 0..1: {text}")
    return values


def size_pair(text: str) -> Tuple[int, int]:
    parts = [p.strip() for p in text.split(",")]
    try:
        values = tuple(int(p) for p in parts)
    except ValueError:
        raise argparse.ArgumentTypeError(f"could not parse size from string: {text}")
    if len(values) != 2:
        raise argparse.ArgumentTypeError(f"size needs two values W,H: {text}")
    if any(v <= 0 for v in values):
        raise argparse.ArgumentTypeError(f"size must be positive: {text}")
    return values


# -----------------------------
# CLI and main
# -----------------------------
def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="overlaytool",
        description="overlaytool -- a utility for creating overlay images",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    general = p.add_argument_group("General flags")
    general.add_argument("-v", dest="verbose", action="store_true", help="Verbose status messages")
    general.add_argument("-d", dest="debug", action="store_true", help="Debug status messages")

    inputs = p.add_argument_group("Input flags")
    inputs.add_argument("--centerpoint", action="store_true", help="Use centerpoint for overlay")
    inputs.add_argument("--symmetrygrid", action="store_true", help="Use symmetry grid for overlay")
    inputs.add_argument("--label", action="store_true", help="Use label for overlay")
    inputs.add_argument("--aspectratio", type=positive_float, default=1.5, help="Set aspect ratio")
    inputs.add_argument("--scale", type=positive_float, default=0.5, help="Set scale")
    inputs.add_argument("--color", type=color_triplet, default=(1.0, 1.0, 1.0),
                        help="Set color as R,G,B in 0..1")
    inputs.add_argument("--size", type=size_pair, default=(1024, 1024), help="Set size as W,H")
    inputs.add_argument("--fit", choices=[policy.value for policy in FitPolicy],
                        default=FitPolicy.HEIGHT_ONLY.value,
                        help="height: always derive the frame height from the canvas width; "
                             "contain: narrow the width when the canvas is wider than the aspect ratio")
    inputs.add_argument("--font", type=str, default=None,
                        help="TrueType font for labels (Pillow's default font if omitted)")

    outputs = p.add_argument_group("Output flags")
    outputs.add_argument("--outputfile", type=str, required=True, help="Set output file")
    return p.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> OverlayConfig:
    return OverlayConfig(
        aspect_ratio=args.aspectratio,
        scale=args.scale,
        color=args.color,
        size=args.size,
        centerpoint=args.centerpoint,
        symmetrygrid=args.symmetrygrid,
        label=args.label,
        fit_policy=FitPolicy(args.fit),
        font=args.font,
    )


def setup_logging(verbose: bool, debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose, args.debug)

    config = config_from_args(args)
    logger.info("Writing overlay file: %s", args.outputfile)
    logger.debug("Config: %s", config)

    try:
        pixels = render_overlay(config)
        save_overlay(pixels, args.outputfile)
    except (OSError, ValueError) as exc:
        logger.error("failed to create overlay file %s: %s", args.outputfile, exc)
        return 1

    print("Saved:", args.outputfile)
    return 0


if __name__ == "__main__":
    sys.exit(main())
