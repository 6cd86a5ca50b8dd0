"""
Binarization for tracepage.

Turns the white-backed working image into an ink mask. Photographed and
scanned pages have uneven lighting, so the threshold is local (mean of a
window) rather than global.
"""

import cv2
import numpy as np

from tracepage.tracer import get_tracer, trace


@trace(label="binarize")
def binarize(rgb_img, config, debug_writer=None):
    """
    Convert an RGB image to an ink mask.

    Returns a new uint8 array with 255 for ink and 0 for background.
    The input is never modified.
    """
    tracer = get_tracer()
    cfg = config.binarization

    with tracer.span("grayscale", module="binarize"):
        gray = to_grayscale(rgb_img)

    with tracer.span("blur", module="binarize"):
        k = cfg.blur_kernel
        blurred = cv2.GaussianBlur(gray, (k, k), 0, borderType=cv2.BORDER_DEFAULT) if k > 1 else gray

    with tracer.span("threshold", module="binarize"):
        binary = cv2.adaptiveThreshold(
            blurred,
            255,
            cv2.ADAPTIVE_THRESH_MEAN_C,
            cv2.THRESH_BINARY_INV,
            cfg.adaptive_block_size,
            cfg.adaptive_c,
        )

    with tracer.span("morphology", module="binarize"):
        # Thicken by ~1px so broken pen strokes stay connected in the skeleton
        dilate_kernel = cv2.getStructuringElement(
            cv2.MORPH_RECT, (cfg.dilate_kernel, cfg.dilate_kernel)
        )
        dilated = cv2.dilate(binary, dilate_kernel, iterations=cfg.dilate_iterations)

        close_kernel = cv2.getStructuringElement(
            cv2.MORPH_RECT, (cfg.close_kernel, cfg.close_kernel)
        )
        cleaned = cv2.morphologyEx(dilated, cv2.MORPH_CLOSE, close_kernel)

    ink_ratio = get_ink_ratio(cleaned)
    tracer.event(f"Binary result: ink_ratio={ink_ratio:.3f}")

    if debug_writer:
        debug_writer.save_image(gray, "binarize", "01_gray.png")
        debug_writer.save_image(binary, "binarize", "02_threshold.png")
        debug_writer.save_image(cleaned, "binarize", "03_mask.png")
        debug_writer.save_json(
            {
                "blur_kernel": cfg.blur_kernel,
                "adaptive_block_size": cfg.adaptive_block_size,
                "adaptive_c": cfg.adaptive_c,
                "dilate_kernel": cfg.dilate_kernel,
                "close_kernel": cfg.close_kernel,
                "ink_ratio": round(ink_ratio, 4),
            },
            "binarize",
            "binarize_metrics.json",
        )

    return cleaned


def to_grayscale(img):
    """Luma-weighted grayscale; single-channel input is copied as is."""
    if img.ndim == 2:
        return img.copy()
    if img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_RGBA2GRAY)
    return cv2.cvtColor(img, cv2.COLOR_RGB2GRAY)


def get_ink_ratio(mask):
    """Fraction of mask pixels that are ink."""
    if mask.size == 0:
        return 0.0
    return float(np.count_nonzero(mask)) / mask.size
