"""Protocols for the collaborators the crop engine reads from.

These protocols allow for dependency injection and testing with mock
implementations of the image loader and the rendering surface.
"""

from typing import Protocol

from roicrop.geometry import Extent
from roicrop.imaging.source import SourceImage


class ImageSourceProtocol(Protocol):
    """Anything that can hand out the decoded source bitmap."""

    def current(self) -> SourceImage | None:
        """Return the source image, or None if it is not loaded yet."""
        ...


class SurfaceProtocol(Protocol):
    """Anything that can report the rendered size of the image."""

    def displayed_extent(self) -> Extent | None:
        """Return the displayed extent, or None if not measured yet."""
        ...
