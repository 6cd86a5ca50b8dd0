"""
Dotted outline rendering for tracepage.

Each polyline is stroked as one path with the dash pattern [0, gap] and
round caps. A zero-length dash with a round cap is a filled dot, so the
stroke becomes dots of diameter stroke_width every gap pixels of arc
length. The pattern restarts at every path and runs straight through its
vertices.
"""

import cv2
import numpy as np

from tracepage.models import DashStyle
from tracepage.preprocess.rasterize import flatten_onto_white
from tracepage.tracer import get_tracer, trace


# cv2 fixed-point bits for sub-pixel dot centers
_SHIFT = 4

_NAMED_COLORS = {
    "black": (0, 0, 0),
    "white": (255, 255, 255),
    "gray": (128, 128, 128),
}


@trace(label="render_dashed")
def render_dashed(polylines, width, height, config, debug_writer=None):
    """
    Stroke polylines onto a fresh white page.

    Returns (page, style): page is an opaque (height, width, 3) RGB array,
    style the DashStyle that was derived from the width. A zero-area page
    is returned untouched.
    """
    tracer = get_tracer()

    style = DashStyle.for_width(width, config.dash)
    canvas = np.full((max(height, 0), max(width, 0), 4), 255, dtype=np.uint8)

    if width <= 0 or height <= 0:
        tracer.event("Zero-area canvas, nothing drawn", level="WARN")
        return flatten_onto_white(canvas), style

    color = parse_color(style.color) + (255,)
    radius = int(round(style.stroke_width / 2.0 * (1 << _SHIFT)))
    total_dots = 0

    for polyline in polylines:
        if polyline.is_degenerate:
            continue

        for x, y in dot_positions(polyline.points, style.gap_length):
            center = (int(round(x * (1 << _SHIFT))), int(round(y * (1 << _SHIFT))))
            cv2.circle(canvas, center, radius, color, -1, lineType=cv2.LINE_AA, shift=_SHIFT)
            total_dots += 1

    # White goes behind the strokes; any partial alpha is filled from below
    page = flatten_onto_white(canvas)

    tracer.event(
        f"Rendered {len(polylines)} polylines as {total_dots} dots "
        f"(stroke_width={style.stroke_width}, gap={style.gap_length})"
    )

    if debug_writer:
        debug_writer.save_image(page, "render", "01_page.png")
        debug_writer.save_json(
            {
                "polylines": len(polylines),
                "dots": total_dots,
                "style": style.model_dump(),
            },
            "render",
            "render_metrics.json",
        )

    return page, style


def dot_positions(points, gap):
    """
    Dot centers along a polyline.

    Dots sit at arc distances 0, gap, 2*gap, ... up to the path length,
    measured continuously across vertices. Returns an (N, 2) float array.
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if len(pts) == 0:
        return np.empty((0, 2))

    # Zero-length segments would break the interpolation
    keep = np.concatenate([[True], np.any(np.diff(pts, axis=0) != 0, axis=1)])
    pts = pts[keep]

    if len(pts) == 1:
        return pts.copy()

    segment_lengths = np.linalg.norm(np.diff(pts, axis=0), axis=1)
    cumulative = np.concatenate([[0.0], np.cumsum(segment_lengths)])
    total_length = cumulative[-1]

    positions = np.arange(0.0, total_length + 1e-9, gap)
    xs = np.interp(positions, cumulative, pts[:, 0])
    ys = np.interp(positions, cumulative, pts[:, 1])
    return np.stack([xs, ys], axis=1)


def parse_color(color):
    """Named color or '#rrggbb' to an (r, g, b) tuple."""
    if color in _NAMED_COLORS:
        return _NAMED_COLORS[color]

    if isinstance(color, str) and color.startswith("#") and len(color) == 7:
        return tuple(int(color[i:i + 2], 16) for i in (1, 3, 5))

    raise ValueError(f"Unsupported stroke color: {color!r}")
