"""Source-resolution crop extraction for roicrop.

This module turns a display-space rectangle into an encoded snapshot of
the matching area of the original bitmap:

    1. Read the source image and the displayed extent from their holders.
    2. Map the rectangle to source space (independent x/y scale).
    3. Allocate a buffer of |source width| x |source height| pixels,
       truncated to whole pixels once float noise is snapped away.
    4. Sample the source window into the whole buffer, 1:1, no rescaling.
    5. Encode as a self-contained data URI.

Boundary Behavior:
    Rectangles reaching past the bitmap edge are not clamped. Pixels
    outside the source come out fully transparent, the same way a canvas
    draw of an out-of-range source window leaves them untouched.

Unavailability:
    Every step that cannot run (no image, no measurement, zero-size or
    oversized buffer) makes ``extract_crop`` return None. It never raises
    for these conditions.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from io import BytesIO

from PIL import Image

from roicrop.geometry import Rect, snap_to_pixel, to_source_space
from roicrop.imaging.types import ImageSourceProtocol, SurfaceProtocol
from roicrop.utils.logging import get_logger

logger = get_logger(__name__)

# Maximum pixel dimension for safety (prevents OOM on huge region requests)
# 10000 x 10000 RGBA = 400MB.
_DEFAULT_MAX_DIMENSION = 10000

_DEFAULT_FORMAT = "PNG"

# Formats without an alpha channel need the buffer flattened first
_OPAQUE_FORMATS = frozenset({"JPEG", "BMP"})


@dataclass(frozen=True)
class CropArtifact:
    """Encoded snapshot of a region, sampled at source resolution.

    Attributes:
        image: RGBA Pillow image of the crop buffer.
        data_uri: Self-contained ``data:<mime>;base64,...`` encoding of it.
        source_rect: The mapped source-space rectangle, sign preserved.
    """

    image: Image.Image
    data_uri: str
    source_rect: Rect

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    @property
    def window(self) -> Rect:
        """Normalized source window the buffer was sampled from."""
        return self.source_rect.normalized()

    def to_bytes(self) -> bytes:
        """Decode the data URI back into the encoded file bytes."""
        _, payload = self.data_uri.split(",", 1)
        return base64.b64decode(payload)


class CropEngine:
    """Extracts crop artifacts for display-space rectangles.

    The engine holds references to its collaborators, not their values, so
    loading a new image or re-measuring the surface takes effect on the
    next extraction.

    Example:
        >>> from roicrop.imaging import DisplaySurface, ImageSlot, load_source_image
        >>> slot = ImageSlot(load_source_image("photo.png"))
        >>> surface = DisplaySurface.fit_to_width(slot.current(), 800)
        >>> engine = CropEngine(slot, surface)
        >>> artifact = engine.extract_crop(Rect(x=10, y=10, width=100, height=80))
        >>> artifact.data_uri[:22]
        'data:image/png;base64,'
    """

    __slots__ = ("_format", "_image_source", "_max_dimension", "_surface")

    def __init__(
        self,
        image_source: ImageSourceProtocol,
        surface: SurfaceProtocol,
        *,
        image_format: str = _DEFAULT_FORMAT,
        max_dimension: int | None = None,
    ) -> None:
        """Initialize the crop engine.

        Args:
            image_source: Provider of the decoded source bitmap.
            surface: Provider of the displayed extent.
            image_format: Pillow format name used to encode artifacts.
            max_dimension: Largest allowed buffer side in pixels. Defaults
                to 10000; 0 (or negative) disables the check.

        Raises:
            ValueError: If image_format has no registered MIME type.
        """
        fmt = image_format.upper()
        if fmt not in Image.MIME:
            # MIME is populated lazily by plugin registration
            Image.init()
        if fmt not in Image.MIME:
            raise ValueError(f"Unsupported image format: {image_format}")
        self._image_source = image_source
        self._surface = surface
        self._format = fmt
        self._max_dimension = (
            _DEFAULT_MAX_DIMENSION if max_dimension is None else max_dimension
        )

    def extract_crop(self, display_rect: Rect) -> CropArtifact | None:
        """Sample the source bitmap under a display-space rectangle.

        Args:
            display_rect: Rectangle in display coordinates; negative extents
                are allowed.

        Returns:
            CropArtifact, or None if the image or the display measurement is
            unavailable or the buffer would be degenerate.
        """
        source = self._image_source.current()
        if source is None:
            logger.debug("Crop unavailable: image not loaded")
            return None

        source_rect = to_source_space(
            display_rect, self._surface.displayed_extent(), source.extent
        )
        if source_rect is None:
            logger.debug("Crop unavailable: display not measured")
            return None

        buffer_size = _buffer_size(source_rect)
        if buffer_size[0] == 0 or buffer_size[1] == 0:
            logger.debug("Crop degenerate", buffer_size=buffer_size)
            return None
        if self._max_dimension > 0 and max(buffer_size) > self._max_dimension:
            logger.warning(
                "Crop exceeds maximum dimension",
                buffer_size=buffer_size,
                max_dimension=self._max_dimension,
            )
            return None

        cropped = self._sample(source.image, source_rect.normalized(), buffer_size)
        return CropArtifact(
            image=cropped,
            data_uri=self._encode_data_uri(cropped),
            source_rect=source_rect,
        )

    def _sample(
        self,
        image: Image.Image,
        window: Rect,
        buffer_size: tuple[int, int],
    ) -> Image.Image:
        """Copy the source window into a buffer of ``buffer_size``.

        EXTENT maps the whole output onto the window, so a window whose
        magnitude equals the buffer is copied pixel for pixel.

        Args:
            image: RGBA source bitmap.
            window: Normalized source-space window.
            buffer_size: (width, height) of the output buffer.

        Returns:
            RGBA image of ``buffer_size``.
        """
        return image.transform(
            buffer_size,
            Image.Transform.EXTENT,
            data=(window.left, window.top, window.right, window.bottom),
            resample=Image.Resampling.NEAREST,
            fillcolor=(0, 0, 0, 0),
        )

    def _encode_data_uri(self, image: Image.Image) -> str:
        """Encode an image as a base64 data URI in the configured format."""
        if self._format in _OPAQUE_FORMATS and image.mode != "RGB":
            image = image.convert("RGB")
        buffer = BytesIO()
        image.save(buffer, format=self._format)
        payload = base64.b64encode(buffer.getvalue()).decode("ascii")
        return f"data:{Image.MIME[self._format]};base64,{payload}"


def _buffer_size(source_rect: Rect) -> tuple[int, int]:
    """Whole-pixel buffer size for a mapped rectangle.

    A magnitude of 1000.9999999 is a full 1001 pixels, not 1000.
    """
    return (
        int(snap_to_pixel(source_rect.abs_width)),
        int(snap_to_pixel(source_rect.abs_height)),
    )
