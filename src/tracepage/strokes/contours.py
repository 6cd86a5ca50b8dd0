"""
Contour extraction from the skeleton for tracepage.

Traces every skeleton component with full boundary hierarchy and simple
chain compression, then drops traces too short to be anything but noise.
"""

import cv2

from tracepage.models import Contour
from tracepage.tracer import get_tracer, trace


@trace(label="extract_contours")
def extract_contours(skeleton, config, debug_writer=None):
    """
    Trace the skeleton into contours.

    Returns (kept, found): the contours whose open arc length reaches
    config.contours.min_arc_length, in extraction order, and the raw number
    of traced boundaries. Parent indices point into the kept list; a parent
    that was filtered out becomes None.
    """
    tracer = get_tracer()

    with tracer.span("find_contours", module="contours"):
        raw_contours, hierarchy = cv2.findContours(
            skeleton, cv2.RETR_TREE, cv2.CHAIN_APPROX_SIMPLE
        )

    found = len(raw_contours)
    parents = [int(h[3]) for h in hierarchy[0]] if found else []

    min_length = config.contours.min_arc_length
    lengths = [cv2.arcLength(raw, False) for raw in raw_contours]
    survivors = [i for i in range(found) if lengths[i] >= min_length]
    new_index = {old: new for new, old in enumerate(survivors)}

    kept = []
    for i in survivors:
        raw = raw_contours[i]
        kept.append(Contour(
            index=new_index[i],
            points=raw.reshape(-1, 2).tolist(),
            parent=new_index.get(parents[i]),
            is_hole=_depth(parents, i) % 2 == 1,
            arc_length=lengths[i],
            perimeter=cv2.arcLength(raw, True),
        ))

    tracer.event(f"Contours: found={found}, kept={len(kept)}, min_arc_length={min_length}")

    if debug_writer:
        debug_writer.save_overlay(
            skeleton, "contours", "01_contours_overlay.png",
            polylines=[c.points + c.points[:1] for c in kept],
        )
        debug_writer.save_json(
            {
                "found": found,
                "kept": len(kept),
                "holes": sum(1 for c in kept if c.is_hole),
                "min_arc_length": min_length,
            },
            "contours",
            "contours_metrics.json",
        )

    return kept, found


def _depth(parents, i):
    """Nesting depth of contour i in the raw hierarchy (0 = outermost)."""
    depth = 0
    while parents[i] >= 0:
        i = parents[i]
        depth += 1
    return depth
