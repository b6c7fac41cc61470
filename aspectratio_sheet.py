#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Aspect ratio sheet — one overlay per common photo / film aspect ratio
=====================================================================

For each ratio the canvas is `ratio * height` pixels wide (truncated) and
`height` tall, so the aspect frame fills the canvas (scale 1) and the grid is
drawn edge to edge. Centerpoint and symmetry grid are always on.

Default ratios:
  1.33  (4:3)        1.5   (3:2 stills)     1.77 (16:9)
  1.85  (flat)       2.35  (scope)          2.39 (modern scope)

Quick start
-----------
  python aspectratio_sheet.py --out overlays --height 1000

Writes overlays/overlaytool_1.33.png ... overlays/overlaytool_2.39.png
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Dict, List, Optional, Sequence, Tuple

from overlay_geometry import format_number
from overlay_render import OverlayConfig, render_overlay, save_overlay
from overlaytool import color_triplet, positive_float, setup_logging

logger = logging.getLogger(__name__)

COMMON_RATIOS = (1.33, 1.5, 1.77, 1.85, 2.35, 2.39)


def sheet_configs(ratios: Sequence[float], height: int,
                  color: Tuple[float, float, float] = (1.0, 1.0, 1.0),
                  label: bool = False) -> Dict[str, OverlayConfig]:
    """Overlay config per ratio, keyed by the ratio's short text form ("1.33")."""
    configs = {}
    for ratio in ratios:
        width = int(ratio * height)
        configs[format_number(ratio)] = OverlayConfig(
            aspect_ratio=ratio,
            scale=1.0,
            color=color,
            size=(width, height),
            centerpoint=True,
            symmetrygrid=True,
            label=label,
        )
    return configs


def generate_sheet(out_dir: str, ratios: Sequence[float], height: int,
                   color: Tuple[float, float, float] = (1.0, 1.0, 1.0),
                   label: bool = False) -> List[str]:
    """Render and save every overlay of the sheet; returns the written paths."""
    os.makedirs(out_dir, exist_ok=True)
    paths = []
    for tag, config in sheet_configs(ratios, height, color, label).items():
        path = os.path.join(out_dir, f"overlaytool_{tag}.png")
        logger.info("Writing %s (%dx%d)", path, *config.size)
        save_overlay(render_overlay(config), path)
        paths.append(path)
    return paths


# -----------------------------
# CLI and main
# -----------------------------
def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Write one overlay image per common photo/film aspect ratio.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    p.add_argument("--out", type=str, default="overlays", help="Output folder")
    p.add_argument("--ratios", type=positive_float, nargs="+", default=list(COMMON_RATIOS),
                   help="Aspect ratios to render")
    p.add_argument("--height", type=int, default=1000, help="Canvas height (pixels)")
    p.add_argument("--color", type=color_triplet, default=(1.0, 1.0, 1.0), help="Overlay color R,G,B")
    p.add_argument("--label", action="store_true", help="Add size captions")
    p.add_argument("-v", dest="verbose", action="store_true", help="Verbose status messages")
    args = p.parse_args(argv)
    if args.height <= 0:
        p.error("--height must be positive")
    return args


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose, False)

    try:
        paths = generate_sheet(args.out, args.ratios, args.height, args.color, args.label)
    except OSError as exc:
        logger.error("failed to write overlay sheet: %s", exc)
        return 1

    print("Saved files:")
    for path in paths:
        print(f"  {os.path.basename(path)}")
    print(f"\nOutput folder: {os.path.abspath(args.out)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
