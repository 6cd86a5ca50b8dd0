"""
Artifact saving utilities for tracepage.

Encodes the finished page, writes JSON summaries and manages the per-stage
debug image directories.
"""

import json
import os

import cv2
import numpy as np

from tracepage.tracer import get_tracer


def ensure_dir(path):
    """Create directory if it does not exist."""
    if path:
        os.makedirs(path, exist_ok=True)


def get_debug_dir(out_dir, page_id, stage_name):
    """
    Get the debug directory path for a stage.

    Creates the directory if it does not exist.
    """
    debug_dir = os.path.join(out_dir, "debug", page_id, stage_name)
    ensure_dir(debug_dir)
    return debug_dir


def _to_bgr(img):
    if img.ndim == 3 and img.shape[2] == 3:
        return cv2.cvtColor(img, cv2.COLOR_RGB2BGR)
    if img.ndim == 3 and img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_RGBA2BGRA)
    return img


def encode_png(img):
    """
    Encode an RGB, RGBA or single-channel image as PNG bytes.

    Raises ValueError if the image is empty or OpenCV refuses it.
    """
    if img.size == 0:
        raise ValueError("Cannot encode an image with zero area")

    ok, buf = cv2.imencode(".png", _to_bgr(img))
    if not ok:
        raise ValueError("PNG encoding failed")
    return buf.tobytes()


def write_png(img, path):
    """
    Encode then write a PNG.

    The file is only touched once encoding has succeeded.
    """
    data = encode_png(img)
    ensure_dir(os.path.dirname(path))
    with open(path, "wb") as f:
        f.write(data)
    get_tracer().event(f"Wrote page: {path} ({len(data)} bytes)")


def save_image(img, path, max_edge=None):
    """
    Save a debug image to disk.

    Optionally downscales so the longer edge is at most max_edge.
    """
    if max_edge and max(img.shape[:2]) > max_edge:
        scale = max_edge / max(img.shape[:2])
        new_size = (max(1, int(img.shape[1] * scale)), max(1, int(img.shape[0] * scale)))
        img = cv2.resize(img, new_size, interpolation=cv2.INTER_AREA)

    ensure_dir(os.path.dirname(path))
    cv2.imwrite(path, _to_bgr(img))
    get_tracer().event(f"Saved image: {path}", level="DEBUG")


def save_json(data, path, indent=2):
    """
    Save a dictionary or pydantic model to JSON.
    """
    ensure_dir(os.path.dirname(path))

    if hasattr(data, "model_dump"):
        data = data.model_dump()

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, default=str)

    get_tracer().event(f"Saved JSON: {path}")


def draw_overlay(base_img, polylines=None, polyline_color=(0, 200, 0), thickness=1):
    """
    Draw polylines on a copy of an image.

    base_img may be single-channel; the result is always RGB.
    polylines: list of [[x, y], ...]
    """
    if base_img.ndim == 2:
        overlay = cv2.cvtColor(base_img, cv2.COLOR_GRAY2RGB)
    else:
        overlay = base_img[:, :, :3].copy()

    if polylines:
        for polyline in polylines:
            if len(polyline) < 2:
                continue
            pts = np.round(np.asarray(polyline)).astype(np.int32)
            cv2.polylines(overlay, [pts], isClosed=False, color=polyline_color, thickness=thickness)

    return overlay


class DebugArtifactWriter:
    """
    Writes debug artifacts for a single page.

    Every stage gets its own directory under debug/<page_id>/.
    """

    def __init__(self, out_dir, page_id, enabled=True, max_edge=1600):
        self.out_dir = out_dir
        self.page_id = page_id
        self.enabled = enabled
        self.max_edge = max_edge

    def get_stage_dir(self, stage_name):
        return get_debug_dir(self.out_dir, self.page_id, stage_name)

    def save_image(self, img, stage_name, filename):
        if not self.enabled:
            return
        path = os.path.join(self.get_stage_dir(stage_name), filename)
        save_image(img, path, max_edge=self.max_edge)

    def save_json(self, data, stage_name, filename):
        if not self.enabled:
            return
        path = os.path.join(self.get_stage_dir(stage_name), filename)
        save_json(data, path)

    def save_overlay(self, base_img, stage_name, filename, **kwargs):
        """Draw and save an overlay image."""
        if not self.enabled:
            return
        self.save_image(draw_overlay(base_img, **kwargs), stage_name, filename)
