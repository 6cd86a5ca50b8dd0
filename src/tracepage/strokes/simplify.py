"""
Polyline simplification using the Ramer-Douglas-Peucker algorithm.

The tolerance is a fraction of each contour's own perimeter, so small
details keep their shape and long strokes are smoothed harder.
"""

import numpy as np

from tracepage.models import Polyline
from tracepage.tracer import get_tracer, trace


@trace(label="simplify_contours")
def simplify_contours(contours, config, debug_writer=None, base_img=None):
    """
    Simplify every contour into a polyline.

    Args:
        contours: list of Contour in extraction order
        config: pipeline configuration (simplify.epsilon_factor)

    Returns:
        list of Polyline with at least two points each
    """
    tracer = get_tracer()

    factor = config.simplify.epsilon_factor
    polylines = []
    total_points_before = 0
    total_points_after = 0
    dropped = 0

    for contour in contours:
        total_points_before += len(contour.points)

        epsilon = factor * contour.perimeter
        polyline = Polyline(
            contour_index=contour.index,
            points=simplify_points(contour.points, epsilon),
        )

        if polyline.is_degenerate:
            dropped += 1
            continue

        total_points_after += len(polyline.points)
        polylines.append(polyline)

    reduction = 1 - (total_points_after / total_points_before) if total_points_before > 0 else 0
    tracer.event(
        f"Simplified: {total_points_before} -> {total_points_after} points "
        f"({reduction:.1%} reduction), dropped={dropped}"
    )

    if debug_writer and base_img is not None:
        debug_writer.save_overlay(
            base_img, "simplify", "01_polylines_overlay.png",
            polylines=[p.points for p in polylines], thickness=3,
        )
        debug_writer.save_json(
            {
                "polylines": len(polylines),
                "dropped": dropped,
                "points_before": total_points_before,
                "points_after": total_points_after,
                "epsilon_factor": factor,
            },
            "simplify",
            "simplify_metrics.json",
        )

    return polylines


def simplify_points(points, epsilon):
    """
    Ramer-Douglas-Peucker on an open polyline.

    Recursively keeps the point farthest from the segment joining the ends
    of the current span while that distance exceeds epsilon. Runs on an
    explicit stack so long contours cannot hit the recursion limit.

    Args:
        points: list of [x, y] points (ints or floats)
        epsilon: maximum perpendicular distance threshold

    Returns:
        simplified list of [x, y] points, endpoints kept
    """
    if len(points) <= 2:
        return [list(p) for p in points]

    arr = np.asarray(points, dtype=np.float64)
    keep = np.zeros(len(arr), dtype=bool)
    keep[0] = keep[-1] = True

    stack = [(0, len(arr) - 1)]
    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue

        distances = _perpendicular_distances(arr[first + 1:last], arr[first], arr[last])
        idx = int(np.argmax(distances))

        if distances[idx] > epsilon:
            split = first + 1 + idx
            keep[split] = True
            stack.append((first, split))
            stack.append((split, last))

    return [list(points[i]) for i in np.flatnonzero(keep)]


def _perpendicular_distances(points, start, end):
    """
    Distances from each point to the segment from start to end.
    """
    dx, dy = end - start
    line_len = np.hypot(dx, dy)

    px = points[:, 0] - start[0]
    py = points[:, 1] - start[1]

    if line_len == 0:
        # Closed traces start and end on the same pixel
        return np.hypot(px, py)

    ux, uy = dx / line_len, dy / line_len
    projections = np.clip(px * ux + py * uy, 0, line_len)

    return np.hypot(px - projections * ux, py - projections * uy)
