"""Pytest configuration and fixtures."""

import numpy as np
import pytest
from PIL import Image

from primvec.config import PrimitiveConfig
from primvec.raster import Raster
from primvec.svg_export import SvgDocument


@pytest.fixture
def document():
    """SVG export document."""
    return SvgDocument()


@pytest.fixture
def rng():
    """Seeded random generator."""
    return np.random.default_rng(1234)


@pytest.fixture
def small_config():
    """Small, fast configuration on a 32x32 canvas."""
    return PrimitiveConfig(
        steps=3, shapes=8, mutations=5, width=32, height=32, workers=2, seed=7
    )


@pytest.fixture
def square_target():
    """32x32 white image with a black square in the middle."""
    pixels = np.full((32, 32, 3), 255.0)
    pixels[8:24, 8:24] = 0.0
    return Raster(pixels)


@pytest.fixture
def square_image_path(tmp_path):
    """PNG file of a red disk-ish square on white."""
    data = np.full((40, 60, 3), 255, dtype=np.uint8)
    data[10:30, 20:45] = (200, 30, 30)
    path = tmp_path / "input.png"
    Image.fromarray(data).save(path)
    return path
