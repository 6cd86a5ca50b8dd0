"""
Pydantic data models for the tracing-page pipeline.

Bitmaps travel between stages as plain numpy arrays; the vector data
(contours, polylines), the stroke style and the run summary are
validated models.
"""

import hashlib
from typing import List, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field


class ImageMeta(BaseModel):
    """Metadata for a decoded source image."""
    width: int = Field(..., ge=0)
    height: int = Field(..., ge=0)
    channels: int = 3
    source_path: str = ""

    model_config = ConfigDict(extra="forbid")


class Contour(BaseModel):
    """
    A traced boundary of a connected skeleton component.

    parent is the index of the enclosing contour in the same list, or None
    for top-level boundaries. It records extraction order only.
    """
    index: int
    points: List[List[int]] = Field(default_factory=list)  # [x, y]
    parent: Optional[int] = None
    is_hole: bool = False
    arc_length: float = 0.0  # open path
    perimeter: float = 0.0  # closed path

    model_config = ConfigDict(extra="forbid")


class Polyline(BaseModel):
    """A simplified contour, stroked as one path."""
    contour_index: int
    points: List[List[float]] = Field(default_factory=list)  # [x, y]

    model_config = ConfigDict(extra="forbid")

    @property
    def is_degenerate(self):
        """A single point (or nothing) cannot be stroked."""
        return len(self.points) <= 1


class DashStyle(BaseModel):
    """Stroke style for the dotted outline. Immutable."""
    stroke_width: int = Field(..., gt=0)
    dash_length: float = 0.0
    gap_length: float = Field(..., gt=0)
    line_cap: str = "round"
    line_join: str = "round"
    color: str = "black"

    model_config = ConfigDict(extra="forbid", frozen=True)

    @classmethod
    def for_width(cls, width, dash_config):
        """
        Derive the style from the output canvas width.

        stroke_width = max(min_stroke_width, round(width * width_factor))
        gap = stroke_width * gap_ratio
        """
        stroke_width = max(dash_config.min_stroke_width, round(width * dash_config.width_factor))
        return cls(
            stroke_width=stroke_width,
            gap_length=stroke_width * dash_config.gap_ratio,
            color=dash_config.color,
        )

    @property
    def pattern(self):
        """Dash pattern as [on, off] lengths."""
        return [self.dash_length, self.gap_length]


class PageSummary(BaseModel):
    """What one pipeline run produced."""
    page_id: str
    source: ImageMeta
    width: int
    height: int
    scale: float
    ink_ratio: float = 0.0
    skeleton_iterations: int = 0
    skeleton_pixels: int = 0
    contours_found: int = 0
    contours_kept: int = 0
    polylines_rendered: int = 0
    dash: Optional[DashStyle] = None

    model_config = ConfigDict(extra="forbid")


def generate_page_id(image, source_path=""):
    """
    Deterministic page ID from the source pixels and path.

    Hashes the shape plus a strided sample of the pixels so large inputs
    stay cheap.
    """
    h = hashlib.sha256()
    h.update(source_path.encode())
    h.update(str(image.shape).encode())
    h.update(np.ascontiguousarray(image[::7, ::7]).tobytes())
    return f"page_{h.hexdigest()[:12]}"

