"""Shared pytest fixtures and configuration."""

from collections.abc import Callable, Iterator

import numpy as np
import pytest
from PIL import Image

from roicrop.config import Settings
from roicrop.core import CropEngine, SelectionStore
from roicrop.geometry import Extent
from roicrop.imaging import DisplaySurface, ImageSlot, SourceImage
from roicrop.utils.logging import clear_correlation_context, configure_logging


def make_gradient(width: int, height: int) -> Image.Image:
    """RGBA image whose pixels encode their own coordinates.

    R = x mod 256, G = y mod 256, B = (x // 256 + 16 * (y // 256)) mod 256.
    Every pixel of a region up to 256x256 is distinct, so a crop that
    lands on the wrong window shows up in a single pixel comparison.
    """
    xs = np.arange(width, dtype=np.int64)[np.newaxis, :]
    ys = np.arange(height, dtype=np.int64)[:, np.newaxis]
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[..., 0] = xs % 256
    pixels[..., 1] = ys % 256
    pixels[..., 2] = (xs // 256 + 16 * (ys // 256)) % 256
    pixels[..., 3] = 255
    return Image.fromarray(pixels)


@pytest.fixture(autouse=True)
def reset_logging_context() -> Iterator[None]:
    """Reset correlation context between tests."""
    clear_correlation_context()
    yield
    clear_correlation_context()


@pytest.fixture
def test_settings() -> Settings:
    """Create a Settings instance with test-safe defaults."""
    return Settings(
        _env_file=None,
        LOG_LEVEL="DEBUG",
        LOG_FORMAT="console",
        DISPLAY_WIDTH=800,
        MIN_REGION_SIZE=5.0,
    )


@pytest.fixture
def configure_test_logging() -> Iterator[None]:
    """Configure logging for tests with console output."""
    configure_logging(level="DEBUG", log_format="console")
    yield


@pytest.fixture
def source_image() -> SourceImage:
    """1600x2000 gradient source, shown at 800x1000 (scale 2x2)."""
    return SourceImage.from_image(make_gradient(1600, 2000))


@pytest.fixture
def slot(source_image: SourceImage) -> ImageSlot:
    return ImageSlot(source_image)


@pytest.fixture
def surface() -> DisplaySurface:
    return DisplaySurface(Extent(width=800, height=1000))


@pytest.fixture
def crop_engine(slot: ImageSlot, surface: DisplaySurface) -> CropEngine:
    return CropEngine(slot, surface)


@pytest.fixture
def store(crop_engine: CropEngine) -> SelectionStore:
    return SelectionStore(crop_engine)


@pytest.fixture
def gradient() -> Callable[[int, int], Image.Image]:
    """Factory for coordinate-encoding RGBA images."""
    return make_gradient
