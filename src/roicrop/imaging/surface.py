"""Display surface measurement.

The rendering surface scales the source bitmap to fit and reports the
rendered size. ``DisplaySurface`` keeps the latest measurement; until the
surface has measured the image it reports ``None``.
"""

from __future__ import annotations

from PIL import Image

from roicrop.geometry import Extent, fit_to_width
from roicrop.imaging.source import SourceImage


class DisplaySurface:
    """Latest rendered size of the image on the rendering surface."""

    __slots__ = ("_extent",)

    def __init__(self, extent: Extent | None = None) -> None:
        self._extent = extent

    def displayed_extent(self) -> Extent | None:
        """Return the measured display size, or None if not measured."""
        return self._extent

    def measure(self, extent: Extent) -> None:
        """Record a new measurement (e.g. after a layout change)."""
        self._extent = extent

    def reset(self) -> None:
        self._extent = None

    @classmethod
    def fit_to_width(cls, source: SourceImage, display_width: float) -> DisplaySurface:
        """Create a surface that renders ``source`` at a fixed width.

        Args:
            source: The loaded source image.
            display_width: Rendered width; height follows the aspect ratio.

        Returns:
            A measured DisplaySurface.
        """
        return cls(fit_to_width(source.extent, display_width))


def render_display_copy(source: SourceImage, extent: Extent) -> Image.Image:
    """Produce the scaled-down copy the surface would show.

    Args:
        source: Full-resolution source image.
        extent: Displayed extent; rounded to whole pixels.

    Returns:
        RGBA image of the displayed size.

    Raises:
        ValueError: If the extent rounds to zero in either dimension.
    """
    size = (round(extent.width), round(extent.height))
    if size[0] <= 0 or size[1] <= 0:
        raise ValueError(f"display extent too small to render: {extent}")
    return source.image.resize(size, resample=Image.Resampling.LANCZOS)
