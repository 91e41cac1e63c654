"""Geometry primitives for roicrop.

This module provides immutable Pydantic models for representing points,
extents, and rectangles. The same models are used in display space
(coordinates on the rendering surface) and in source space (pixel
coordinates of the original bitmap); which space a value lives in is
decided by the code that produced it.

All coordinates follow the convention where (0, 0) is the top-left corner,
x increases rightward and y increases downward.
"""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, Field


class Point(BaseModel, frozen=True):
    """A 2D position, e.g. a pointer location in display coordinates.

    Coordinates are unconstrained floats: a pointer dragged past the
    image edge may report negative values.

    Attributes:
        x: Horizontal position.
        y: Vertical position.
    """

    x: float = Field(..., description="X coordinate")
    y: float = Field(..., description="Y coordinate")

    def to_tuple(self) -> tuple[float, float]:
        """Convert to (x, y) tuple."""
        return (self.x, self.y)

    @classmethod
    def from_tuple(cls, coord: tuple[float, float]) -> Self:
        """Create Point from (x, y) tuple."""
        return cls(x=coord[0], y=coord[1])


class Extent(BaseModel, frozen=True):
    """Width and height of an image, either as displayed or intrinsic.

    Zero is allowed so that an unmeasured surface can be represented;
    consumers must check ``is_empty`` before dividing by it.

    Attributes:
        width: Horizontal extent.
        height: Vertical extent.
    """

    width: float = Field(..., ge=0, description="Width")
    height: float = Field(..., ge=0, description="Height")

    @property
    def is_empty(self) -> bool:
        """True when either dimension is zero."""
        return self.width == 0 or self.height == 0

    def to_tuple(self) -> tuple[float, float]:
        """Convert to (width, height) tuple."""
        return (self.width, self.height)

    @classmethod
    def from_tuple(cls, size: tuple[float, float]) -> Self:
        """Create Extent from (width, height) tuple."""
        return cls(width=size[0], height=size[1])


class Rect(BaseModel, frozen=True):
    """An axis-aligned rectangle defined by an origin and signed extents.

    Unlike a normalized bounding box, ``width`` and ``height`` may be
    negative: a rectangle drawn by dragging up-left from its anchor keeps
    the anchor as (x, y) and records the drag direction in the sign of its
    extents. Use ``normalized()`` or the edge properties for geometric
    tests.

    Attributes:
        x: X coordinate of the anchor corner.
        y: Y coordinate of the anchor corner.
        width: Signed horizontal extent.
        height: Signed vertical extent.
    """

    x: float = Field(..., description="Anchor X coordinate")
    y: float = Field(..., description="Anchor Y coordinate")
    width: float = Field(..., description="Signed width")
    height: float = Field(..., description="Signed height")

    @property
    def abs_width(self) -> float:
        """Width magnitude, independent of drag direction."""
        return abs(self.width)

    @property
    def abs_height(self) -> float:
        """Height magnitude, independent of drag direction."""
        return abs(self.height)

    @property
    def left(self) -> float:
        return min(self.x, self.x + self.width)

    @property
    def top(self) -> float:
        return min(self.y, self.y + self.height)

    @property
    def right(self) -> float:
        return max(self.x, self.x + self.width)

    @property
    def bottom(self) -> float:
        return max(self.y, self.y + self.height)

    @property
    def area(self) -> float:
        """Unsigned area."""
        return self.abs_width * self.abs_height

    @property
    def is_normalized(self) -> bool:
        """True when neither extent is negative."""
        return self.width >= 0 and self.height >= 0

    def normalized(self) -> Rect:
        """Return the same rectangle with a top-left origin and extents >= 0."""
        if self.is_normalized:
            return self
        return Rect(
            x=self.left,
            y=self.top,
            width=self.abs_width,
            height=self.abs_height,
        )

    def exceeds(self, min_size: float) -> bool:
        """Check whether both extents are strictly larger than ``min_size``.

        Args:
            min_size: Threshold applied to the absolute width and height.

        Returns:
            True if |width| > min_size and |height| > min_size.
        """
        return self.abs_width > min_size and self.abs_height > min_size

    def to_tuple(self) -> tuple[float, float, float, float]:
        """Convert to (x, y, width, height) tuple."""
        return (self.x, self.y, self.width, self.height)

    @classmethod
    def from_tuple(cls, bbox: tuple[float, float, float, float]) -> Self:
        """Create Rect from (x, y, width, height) tuple."""
        return cls(x=bbox[0], y=bbox[1], width=bbox[2], height=bbox[3])

    @classmethod
    def from_corners(cls, anchor: Point, corner: Point) -> Self:
        """Create a free two-corner rectangle.

        The anchor becomes the origin; the extents are the signed distance
        to the opposite corner, so they are negative when ``corner`` lies
        left of or above ``anchor``.

        Args:
            anchor: Corner where the drag started.
            corner: Corner where the pointer currently is.

        Returns:
            Rect spanning the two corners.
        """
        return cls(
            x=anchor.x,
            y=anchor.y,
            width=corner.x - anchor.x,
            height=corner.y - anchor.y,
        )
