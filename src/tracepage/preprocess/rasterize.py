"""
Rasterization for tracepage.

Puts the decoded source on an opaque white surface and upscales it so the
shorter edge reaches the working resolution. Thin strokes need that
resolution to survive skeletonization without single-pixel aliasing.
"""

import cv2
import numpy as np

from tracepage.tracer import get_tracer, trace


SUPPORTED_CHANNELS = (1, 2, 3, 4)


def compute_scale(src_w, src_h, target_min_dim=2000):
    """Uniform upscale factor; never below 1."""
    return max(1.0, target_min_dim / min(src_w, src_h))


def compute_output_size(src_w, src_h, target_min_dim=2000):
    """Working (width, height) for a source of the given size."""
    scale = compute_scale(src_w, src_h, target_min_dim)
    return round(src_w * scale), round(src_h * scale)


def flatten_onto_white(img):
    """
    Composite an image over opaque white.

    Accepts (H, W) or (H, W, 1) gray, (H, W, 2) gray+alpha, (H, W, 3) RGB or
    (H, W, 4) RGBA and returns a new (H, W, 3) RGB array. Fully transparent
    pixels come out white.

    Raises ValueError for any other channel count.
    """
    channels = 1 if img.ndim == 2 else img.shape[2]
    if channels not in SUPPORTED_CHANNELS:
        raise ValueError(f"Unsupported channel count {channels}")

    if channels == 1:
        gray = img if img.ndim == 2 else np.ascontiguousarray(img[:, :, 0])
        return cv2.cvtColor(gray, cv2.COLOR_GRAY2RGB)

    if channels == 3:
        return img.copy()

    if channels == 2:
        rgb = np.repeat(img[:, :, 0:1], 3, axis=2).astype(np.float32)
    else:
        rgb = img[:, :, :3].astype(np.float32)
    alpha = img[:, :, -1:].astype(np.float32) / 255.0
    flat = rgb * alpha + 255.0 * (1.0 - alpha)
    return np.clip(np.round(flat), 0, 255).astype(np.uint8)


@trace(label="rasterize")
def rasterize(img, config, debug_writer=None):
    """
    Produce the white-backed working image.

    Returns (rgb, scale). Raises ValueError for an image with no pixels.
    """
    tracer = get_tracer()

    src_h, src_w = img.shape[:2]
    if src_w == 0 or src_h == 0:
        raise ValueError(f"Cannot rasterize an empty image ({src_w}x{src_h})")

    target = config.raster.target_min_dim
    scale = compute_scale(src_w, src_h, target)
    width, height = compute_output_size(src_w, src_h, target)

    flat = flatten_onto_white(img)

    if (width, height) == (src_w, src_h):
        working = flat
    else:
        working = cv2.resize(flat, (width, height), interpolation=cv2.INTER_LINEAR)

    tracer.event(f"Rasterized {src_w}x{src_h} -> {width}x{height} (scale={scale:.3f})")

    if debug_writer:
        debug_writer.save_image(working, "rasterize", "01_working.png")
        debug_writer.save_json(
            {
                "source_width": src_w,
                "source_height": src_h,
                "width": width,
                "height": height,
                "scale": round(scale, 4),
            },
            "rasterize",
            "rasterize_metrics.json",
        )

    return working, scale
