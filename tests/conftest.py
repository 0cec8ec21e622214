"""
Shared fixtures: synthetic images for the extractor and engine tests
"""
import numpy as np
import pytest
from PIL import Image

from pixelcheck.config.settings import EngineConfig, Settings
from pixelcheck.core.classification_engine import ClassificationEngine
from pixelcheck.core.pixel_buffer import PixelBuffer


def _from_gray(gray: np.ndarray, alpha: int = 255) -> PixelBuffer:
    gray = np.clip(gray, 0, 255).astype(np.uint8)
    rgba = np.empty(gray.shape + (4,), dtype=np.uint8)
    rgba[:, :, 0] = rgba[:, :, 1] = rgba[:, :, 2] = gray
    rgba[:, :, 3] = alpha
    return PixelBuffer.from_array(rgba)


@pytest.fixture
def solid_image():
    """Factory for single-color images"""
    def make(width=100, height=100, color=(200, 100, 50, 255)):
        return PixelBuffer.from_pil(Image.new("RGBA", (width, height), color=color))
    return make


@pytest.fixture
def gray_image():
    """Factory for opaque grayscale images from an (h, w) array"""
    return _from_gray


@pytest.fixture
def noise_image():
    """Seeded gaussian noise around mid gray"""
    def make(width=120, height=120, sigma=15.0, seed=7):
        rng = np.random.default_rng(seed)
        return _from_gray(128 + rng.normal(0, sigma, size=(height, width)))
    return make


@pytest.fixture
def random_rgb_image():
    """Seeded uniform random RGB pixels"""
    def make(width=120, height=120, seed=11):
        rng = np.random.default_rng(seed)
        rgba = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
        rgba[:, :, 3] = 255
        return PixelBuffer.from_array(rgba)
    return make


@pytest.fixture
def sequential_settings():
    return Settings(engine=EngineConfig(parallel_extraction=False))


@pytest.fixture
def engine():
    with ClassificationEngine() as eng:
        yield eng


@pytest.fixture
def sequential_engine(sequential_settings):
    with ClassificationEngine(sequential_settings) as eng:
        yield eng
