"""
Image loading for tracepage.

Decoding is the caller-facing edge of the pipeline: anything that cannot
be read here raises ImageDecodeError before a stage runs. Alpha is kept so
the rasterizer can put transparent areas on white.
"""

import os

import cv2
import numpy as np

from tracepage.exceptions import ImageDecodeError
from tracepage.models import ImageMeta
from tracepage.tracer import get_tracer, trace


SUPPORTED_EXTENSIONS = [".png", ".jpg", ".jpeg", ".tiff", ".tif", ".bmp", ".webp"]


@trace(label="load_image")
def load_image(path):
    """
    Load an image from disk.

    Returns a tuple of (image, meta) where image is a uint8 array that is
    (H, W) grayscale, (H, W, 3) RGB or (H, W, 4) RGBA.

    Raises FileNotFoundError if path does not exist.
    Raises ImageDecodeError if the file cannot be decoded.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Image not found: {path}")

    raw = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    if raw is None:
        raise ImageDecodeError(path, "unsupported or corrupt file")

    img = _to_rgb_order(raw, path)
    meta = _image_meta(img, os.path.abspath(path))

    get_tracer().event(f"Loaded image: {meta.width}x{meta.height}, channels={meta.channels}")

    return img, meta


@trace(label="decode_image")
def decode_image(data, source="<bytes>"):
    """
    Decode an encoded image held in memory.

    Same return value and errors as load_image.
    """
    buf = np.frombuffer(data, dtype=np.uint8)
    raw = cv2.imdecode(buf, cv2.IMREAD_UNCHANGED) if buf.size else None
    if raw is None:
        raise ImageDecodeError(source, "unsupported or corrupt data")

    img = _to_rgb_order(raw, source)
    return img, _image_meta(img, source)


def _to_rgb_order(raw, source):
    """Convert OpenCV's BGR(A) channel order to RGB(A), reduced to 8 bits."""
    if raw.dtype == np.uint16:
        raw = (raw // 257).astype(np.uint8)
    elif raw.dtype != np.uint8:
        raise ImageDecodeError(source, f"unsupported pixel type {raw.dtype}")

    if raw.ndim == 2:
        img = raw
    elif raw.shape[2] == 1:
        img = raw[:, :, 0]
    elif raw.shape[2] == 3:
        img = cv2.cvtColor(raw, cv2.COLOR_BGR2RGB)
    elif raw.shape[2] == 4:
        img = cv2.cvtColor(raw, cv2.COLOR_BGRA2RGBA)
    else:
        raise ImageDecodeError(source, f"unsupported channel count {raw.shape[2]}")

    if img.shape[0] == 0 or img.shape[1] == 0:
        raise ImageDecodeError(source, "image has no pixels")

    return img


def _image_meta(img, source_path):
    height, width = img.shape[:2]
    channels = 1 if img.ndim == 2 else img.shape[2]
    return ImageMeta(width=width, height=height, channels=channels, source_path=source_path)


def validate_image_inputs(paths):
    """
    Check that all input paths exist and decode as images.

    Returns a list of error messages (empty if all valid).
    """
    errors = []

    for path in paths:
        if not os.path.exists(path):
            errors.append(f"File not found: {path}")
            continue

        ext = os.path.splitext(path)[1].lower()
        if ext not in SUPPORTED_EXTENSIONS:
            errors.append(f"Unsupported image format: {path}")
            continue

        if cv2.imread(path, cv2.IMREAD_UNCHANGED) is None:
            errors.append(f"Cannot read image: {path}")

    return errors
