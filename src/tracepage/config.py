"""
Configuration management for the tracing-page pipeline.

Every stage reads its constants from a dataclass here. Defaults reproduce
the standard tracing page; a YAML file can override any known key.
"""

import os
from dataclasses import asdict, dataclass, field, fields

import yaml


@dataclass
class RasterConfig:
    """Configuration for the upscaling rasterizer."""
    target_min_dim: int = 2000  # shorter output edge, never downscaled


@dataclass
class BinarizationConfig:
    """Configuration for grayscale + adaptive threshold + morphology."""
    blur_kernel: int = 3
    adaptive_block_size: int = 21
    adaptive_c: int = 5
    dilate_kernel: int = 3
    dilate_iterations: int = 1
    close_kernel: int = 3


@dataclass
class SkeletonConfig:
    """Configuration for skeleton-by-erosion."""
    kernel: int = 3  # cross-shaped structuring element


@dataclass
class ContourConfig:
    """Configuration for contour extraction."""
    min_arc_length: float = 20.0  # open-path length in px


@dataclass
class SimplifyConfig:
    """Configuration for polyline simplification."""
    epsilon_factor: float = 0.003  # fraction of each contour's perimeter


@dataclass
class DashConfig:
    """Configuration for the dotted stroke style."""
    width_factor: float = 0.003
    min_stroke_width: int = 4
    gap_ratio: float = 2.5
    color: str = "black"


@dataclass
class TracingConfig:
    """Configuration for runtime tracing."""
    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False


@dataclass
class DebugConfig:
    """Configuration for debug artifact generation."""
    enabled: bool = False
    max_edge_scale: int = 1600


@dataclass
class PipelineConfig:
    """Complete pipeline configuration."""
    raster: RasterConfig = field(default_factory=RasterConfig)
    binarization: BinarizationConfig = field(default_factory=BinarizationConfig)
    skeleton: SkeletonConfig = field(default_factory=SkeletonConfig)
    contours: ContourConfig = field(default_factory=ContourConfig)
    simplify: SimplifyConfig = field(default_factory=SimplifyConfig)
    dash: DashConfig = field(default_factory=DashConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)
    debug: DebugConfig = field(default_factory=DebugConfig)


def load_config(config_path=None):
    """
    Load configuration from a YAML file.

    Missing files, sections and keys fall back to defaults; unknown keys
    are ignored.
    """
    config = PipelineConfig()

    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

        config = _merge_config(config, yaml_data)

    return config


def _merge_config(config, yaml_data):
    """Merge YAML sections into the matching config dataclasses."""
    for section in fields(config):
        values = yaml_data.get(section.name)
        if not isinstance(values, dict):
            continue

        target = getattr(config, section.name)
        for key, value in values.items():
            if hasattr(target, key):
                setattr(target, key, value)

    return config


def save_default_config(path):
    """Save the default configuration to YAML for reference."""
    yaml_data = asdict(PipelineConfig())

    # runtime-only settings
    yaml_data["tracing"].pop("file_path")

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(yaml_data, f, default_flow_style=False, sort_keys=False)
