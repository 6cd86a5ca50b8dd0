"""
Skeleton-by-erosion for tracepage.

Peels the ink mask one cross-shaped erosion at a time. At each level the
pixels that an opening cannot restore are the centerline pixels for that
thickness; their union over all levels is the skeleton.
"""

from typing import NamedTuple

import cv2
import numpy as np

from tracepage.tracer import get_tracer, trace


class SkeletonResult(NamedTuple):
    skeleton: np.ndarray
    iterations: int


@trace(label="skeletonize")
def skeletonize(mask, config, debug_writer=None):
    """
    Thin a binary mask to a 1-pixel-wide skeleton.

    Returns SkeletonResult(skeleton, iterations). The loop runs once per
    erosion level, so an empty mask takes zero iterations and the count is
    bounded by erosion_depth(mask).
    """
    tracer = get_tracer()

    k = config.skeleton.kernel
    element = cv2.getStructuringElement(cv2.MORPH_CROSS, (k, k))

    working = mask
    skeleton = np.zeros_like(mask)
    iterations = 0

    while cv2.countNonZero(working) > 0:
        # Outside the image counts as background, so every pass shrinks the mask
        eroded = cv2.erode(working, element, borderType=cv2.BORDER_CONSTANT, borderValue=0)
        opened = cv2.dilate(eroded, element)
        boundary = cv2.subtract(working, opened)
        skeleton = cv2.bitwise_or(skeleton, boundary)
        working = eroded
        iterations += 1

    skeleton_pixels = cv2.countNonZero(skeleton)
    tracer.event(f"Skeleton: iterations={iterations}, pixels={skeleton_pixels}")

    if debug_writer:
        debug_writer.save_image(skeleton, "skeleton", "01_skeleton.png")
        debug_writer.save_json(
            {"iterations": iterations, "skeleton_pixels": skeleton_pixels},
            "skeleton",
            "skeleton_metrics.json",
        )

    return SkeletonResult(skeleton, iterations)


def erosion_depth(mask):
    """
    Largest city-block distance from an ink pixel to the background.

    Pixels outside the image count as background. This is the number of
    cross erosions needed to empty the mask.
    """
    if cv2.countNonZero(mask) == 0:
        return 0

    padded = cv2.copyMakeBorder(mask, 1, 1, 1, 1, cv2.BORDER_CONSTANT, value=0)
    dist = cv2.distanceTransform(padded, cv2.DIST_L1, 3)
    return int(round(float(dist.max())))
