"""Geometry validation utilities for roicrop.

Size checks applied to rectangles before they are committed: the creation
threshold for new regions and the bound-box guard that stops an interactive
resize from collapsing a region below the minimum size.
"""

from __future__ import annotations

from roicrop.geometry.primitives import Rect

DEFAULT_MIN_SIZE = 5.0


class GeometryValidator:
    """Validator for region sizes against a minimum threshold.

    The validator is stateless apart from its threshold and operates purely
    on the inputs provided to each method.

    Attributes:
        min_size: Threshold in display units.
    """

    __slots__ = ("min_size",)

    def __init__(self, min_size: float = DEFAULT_MIN_SIZE) -> None:
        """Initialize the validator.

        Args:
            min_size: Threshold in display units (must be >= 0).

        Raises:
            ValueError: If min_size is negative.
        """
        if min_size < 0:
            raise ValueError(f"min_size must be >= 0, got {min_size}")
        self.min_size = min_size

    def is_large_enough(self, rect: Rect) -> bool:
        """Check whether a rectangle may become a region.

        Both normalized extents must be strictly greater than the threshold,
        so a 5x100 box is rejected with the default threshold.

        Args:
            rect: Candidate rectangle, possibly with negative extents.

        Returns:
            True if the rectangle passes the creation threshold.
        """
        return rect.exceeds(self.min_size)

    def constrain_resize(self, old_box: Rect, new_box: Rect) -> Rect:
        """Bound-box guard for interactive resizing.

        A resize that would make either side smaller than the threshold is
        refused by keeping the previous box.

        Args:
            old_box: Box before the proposed resize step.
            new_box: Box the resize step proposes.

        Returns:
            ``new_box`` if acceptable, otherwise ``old_box``.

        Example:
            >>> validator = GeometryValidator()
            >>> old = Rect(x=0, y=0, width=50, height=50)
            >>> validator.constrain_resize(old, Rect(x=0, y=0, width=4, height=50)) == old
            True
        """
        if new_box.abs_width < self.min_size or new_box.abs_height < self.min_size:
            return old_box
        return new_box
