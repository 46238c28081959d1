"""
Pytest configuration and fixtures for Image Processing Studio tests
"""

import numpy as np
import pytest

from config import ProcessingSettings, Settings
from core.pixel_buffer import PixelBuffer
from services.processing_service import ProcessingService


@pytest.fixture
def gray_image():
    """4x4 solid mid-gray image"""
    return PixelBuffer.filled(4, 4, (128, 128, 128, 255))


@pytest.fixture
def checkerboard():
    """2x2 black/white checkerboard"""
    gray = np.array([[0, 255], [255, 0]], dtype=np.float64)
    return PixelBuffer.from_array(gray)


@pytest.fixture
def gradient_image():
    """16x16 horizontal gray ramp from 0 to 255"""
    ramp = np.tile(np.linspace(0, 255, 16), (16, 1))
    return PixelBuffer.from_array(ramp)


@pytest.fixture
def bimodal_image():
    """16x16 image split into a 30-valued left half and a 220-valued right half"""
    gray = np.full((16, 16), 30.0)
    gray[:, 8:] = 220.0
    return PixelBuffer.from_array(gray)


@pytest.fixture
def square_image():
    """32x32 black image with a white 12x12 square in the middle"""
    gray = np.zeros((32, 32))
    gray[10:22, 10:22] = 255.0
    return PixelBuffer.from_array(gray)


@pytest.fixture
def random_image():
    """Seeded 16x12 random RGB image with alpha 255"""
    rng = np.random.default_rng(1234)
    rgb = rng.integers(0, 256, size=(12, 16, 3)).astype(np.float64)
    return PixelBuffer.from_array(rgb)


@pytest.fixture
def settings():
    """Settings with a fixed seed and a small image size limit"""
    return Settings(
        environment="test",
        processing=ProcessingSettings(random_seed=7, max_image_pixels=10_000),
    )


@pytest.fixture
def service(settings):
    """Create ProcessingService instance for testing"""
    return ProcessingService(settings=settings)
