"""Source bitmap loading and holding.

The selection core consumes an already-decoded bitmap. ``load_source_image``
decodes a file with Pillow; ``ImageSlot`` holds the result and reports
``None`` until something has been loaded, which the crop engine treats as
"not available yet".
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from roicrop.geometry import Extent
from roicrop.imaging.exceptions import ImageOpenError

# Supported raster file extensions (case-insensitive)
SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".png",
        ".jpg",
        ".jpeg",
        ".bmp",
        ".gif",
        ".tif",
        ".tiff",
        ".webp",
    }
)


@dataclass(frozen=True)
class SourceImage:
    """A decoded, full-resolution source bitmap.

    Attributes:
        image: Pillow image in RGBA mode, so that regions hanging off the
            bitmap edge sample as transparent.
        path: Where the image was loaded from, if it came from disk.
    """

    image: Image.Image
    path: Path | None = None

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def extent(self) -> Extent:
        """Intrinsic size as an Extent."""
        return Extent(width=self.image.width, height=self.image.height)

    @classmethod
    def from_image(cls, image: Image.Image, path: Path | None = None) -> SourceImage:
        """Wrap an in-memory Pillow image, converting it to RGBA."""
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return cls(image=image, path=path)


def load_source_image(path: str | Path) -> SourceImage:
    """Decode an image file into a SourceImage.

    Args:
        path: Path to a raster image.

    Returns:
        The decoded image, fully loaded into memory.

    Raises:
        ImageOpenError: If the file doesn't exist, has an unsupported
            extension, or cannot be decoded.
    """
    resolved = Path(path).resolve()
    if not resolved.exists():
        raise ImageOpenError("File not found", path=resolved)

    suffix = resolved.suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise ImageOpenError(
            f"Unsupported file extension '{suffix}'. "
            f"Supported: {', '.join(sorted(SUPPORTED_EXTENSIONS))}",
            path=resolved,
        )

    try:
        with Image.open(resolved) as opened:
            opened.load()
            return SourceImage.from_image(opened, path=resolved)
    except (UnidentifiedImageError, OSError) as e:
        raise ImageOpenError(f"Failed to decode image: {e}", path=resolved) from e


class ImageSlot:
    """Holds the source image once it is available.

    An external loader fills the slot; the crop engine reads it on every
    extraction, so swapping images takes effect immediately.
    """

    __slots__ = ("_source",)

    def __init__(self, source: SourceImage | None = None) -> None:
        self._source = source

    def current(self) -> SourceImage | None:
        """Return the loaded image, or None if nothing is loaded yet."""
        return self._source

    def load(self, source: SourceImage) -> None:
        self._source = source

    def clear(self) -> None:
        self._source = None

    @property
    def is_loaded(self) -> bool:
        return self._source is not None
