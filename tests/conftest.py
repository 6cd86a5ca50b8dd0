"""Pytest fixtures for tracepage tests."""

import os
import tempfile

import cv2
import numpy as np
import pytest


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def white_image():
    """A blank white page."""
    return np.full((120, 200, 3), 255, dtype=np.uint8)


@pytest.fixture
def simple_rectangle_image():
    """Create a simple white image with a black rectangle outline."""
    img = np.full((200, 300, 3), 255, dtype=np.uint8)
    cv2.rectangle(img, (50, 50), (250, 150), (0, 0, 0), 3)
    return img


@pytest.fixture
def scenario_line_image():
    """500x300 page with a 2px wide, 100px long horizontal line."""
    img = np.full((300, 500, 3), 255, dtype=np.uint8)
    img[149:151, 200:300] = 0
    return img


@pytest.fixture
def bar_mask():
    """Binary mask with a filled 21px tall, 200px wide bar (midline row 30)."""
    mask = np.zeros((60, 240), dtype=np.uint8)
    mask[20:41, 20:220] = 255
    return mask


@pytest.fixture
def default_config():
    """Create default pipeline configuration."""
    from tracepage.config import PipelineConfig
    return PipelineConfig()


@pytest.fixture
def small_config():
    """Default configuration with a small working resolution for fast runs."""
    from tracepage.config import PipelineConfig
    config = PipelineConfig()
    config.raster.target_min_dim = 400
    return config


@pytest.fixture
def synthetic_input_file(temp_dir, simple_rectangle_image):
    """Write the rectangle image to disk for file-based tests."""
    path = os.path.join(temp_dir, "test_input.png")
    cv2.imwrite(path, cv2.cvtColor(simple_rectangle_image, cv2.COLOR_RGB2BGR))
    return path
