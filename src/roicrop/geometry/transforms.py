"""Coordinate transformation between display space and source space.

The rendering surface shows the source bitmap scaled to fit; every
rectangle a user draws is therefore expressed in display units. Cropping
must happen on the original bitmap, so each display-space rectangle is
mapped through independent horizontal and vertical scale factors:

    scale_x = source_width / displayed_width
    scale_y = source_height / displayed_height

Coordinate Systems:
    - Display: post-scale-to-fit coordinates on the rendering surface
    - Source: pixel coordinates of the full-resolution bitmap

Exactness:
    Displayed extents are usually fractional (fit-to-width heights almost
    never land on an integer). Scale factors are kept as exact fractions
    and mapped values within ``PIXEL_SNAP_EPSILON`` of a whole pixel are
    snapped to it, so the full display rectangle maps onto exactly the
    full source bitmap.

Unavailability:
    Until the image is decoded and the surface has measured the rendered
    image, there is no scale to apply. The mapping functions return None in
    that case instead of raising, and callers retry on the next event.
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction

from roicrop.geometry.primitives import Extent, Rect

__all__ = [
    "PIXEL_SNAP_EPSILON",
    "ScaleFactors",
    "compute_scale",
    "fit_to_width",
    "snap_to_pixel",
    "to_source_space",
]

# Distance from a whole pixel below which a mapped value is float noise
PIXEL_SNAP_EPSILON = 1e-6


@dataclass(frozen=True)
class ScaleFactors:
    """Exact display-to-source multipliers.

    Attributes:
        x: Source pixels per horizontal display unit.
        y: Source pixels per vertical display unit.
    """

    x: Fraction
    y: Fraction

    def apply(self, rect: Rect) -> Rect:
        """Scale a rectangle, snapping near-integer results to whole pixels."""
        return Rect(
            x=_scaled(rect.x, self.x),
            y=_scaled(rect.y, self.y),
            width=_scaled(rect.width, self.x),
            height=_scaled(rect.height, self.y),
        )


def compute_scale(
    displayed_extent: Extent | None,
    source_extent: Extent | None,
) -> ScaleFactors | None:
    """Compute display-to-source scale factors.

    The factors are not forced to be equal; a surface that stretches the
    image yields different horizontal and vertical scales.

    Args:
        displayed_extent: Rendered size of the image on the surface, or None
            if the surface has not measured it yet.
        source_extent: Intrinsic size of the source bitmap, or None if the
            image is not loaded.

    Returns:
        ScaleFactors, or None if either extent is missing or empty.
    """
    if displayed_extent is None or source_extent is None:
        return None
    if displayed_extent.is_empty or source_extent.is_empty:
        return None
    return ScaleFactors(
        x=Fraction(source_extent.width) / Fraction(displayed_extent.width),
        y=Fraction(source_extent.height) / Fraction(displayed_extent.height),
    )


def to_source_space(
    display_rect: Rect,
    displayed_extent: Extent | None,
    source_extent: Extent | None,
) -> Rect | None:
    """Map a display-space rectangle to source-space pixel coordinates.

    Negative extents keep their sign; normalizing magnitude is left to the
    crop engine.

    Args:
        display_rect: Rectangle in display coordinates.
        displayed_extent: Rendered size of the image on the surface.
        source_extent: Intrinsic size of the source bitmap.

    Returns:
        Rectangle in source coordinates, or None when unavailable.

    Example:
        >>> to_source_space(
        ...     Rect(x=100, y=100, width=200, height=150),
        ...     Extent(width=800, height=1000),
        ...     Extent(width=1600, height=2000),
        ... ).to_tuple()
        (200.0, 200.0, 400.0, 300.0)
    """
    scale = compute_scale(displayed_extent, source_extent)
    if scale is None:
        return None
    return scale.apply(display_rect)


def fit_to_width(source_extent: Extent, display_width: float) -> Extent:
    """Compute the displayed extent of an image scaled to a fixed width.

    The height follows the source aspect ratio.

    Args:
        source_extent: Intrinsic size of the source bitmap.
        display_width: Width the surface renders the image at.

    Returns:
        Displayed extent.

    Raises:
        ValueError: If display_width is not positive or the source is empty.
    """
    if display_width <= 0:
        raise ValueError(f"display_width must be positive, got {display_width}")
    if source_extent.is_empty:
        raise ValueError(f"source_extent must be non-empty, got {source_extent}")
    height = source_extent.height / source_extent.width * display_width
    return Extent(width=display_width, height=height)


def snap_to_pixel(value: float) -> float:
    """Round ``value`` to the nearest whole pixel if it is float noise away."""
    nearest = round(value)
    if abs(value - nearest) <= PIXEL_SNAP_EPSILON:
        return float(nearest)
    return value


def _scaled(value: float, factor: Fraction) -> float:
    return snap_to_pixel(float(Fraction(value) * factor))
