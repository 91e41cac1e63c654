"""Image source and display surface layer for roicrop.

This package loads source bitmaps with Pillow and keeps track of the size
the rendering surface displays them at. Both report "not available yet"
as None so the selection core can degrade gracefully.

Key Components:
    - load_source_image: Decode a file into a SourceImage
    - ImageSlot: Holder for the currently loaded SourceImage
    - DisplaySurface: Holder for the measured display extent
    - ImageSourceProtocol / SurfaceProtocol: Protocols for injection

Example:
    from roicrop.imaging import DisplaySurface, ImageSlot, load_source_image

    source = load_source_image("photo.jpg")
    slot = ImageSlot(source)
    surface = DisplaySurface.fit_to_width(source, 800)
"""

from roicrop.imaging.exceptions import ImageOpenError, ImagingError
from roicrop.imaging.source import (
    SUPPORTED_EXTENSIONS,
    ImageSlot,
    SourceImage,
    load_source_image,
)
from roicrop.imaging.surface import DisplaySurface, render_display_copy
from roicrop.imaging.types import ImageSourceProtocol, SurfaceProtocol

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "DisplaySurface",
    "ImageOpenError",
    "ImageSlot",
    "ImageSourceProtocol",
    "ImagingError",
    "SourceImage",
    "SurfaceProtocol",
    "load_source_image",
    "render_display_copy",
]
