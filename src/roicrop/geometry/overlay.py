"""Dimmed selection mask generation for roicrop.

The rendering surface darkens everything outside the current selections
so the regions of interest stand out. This module computes the holes of
that mask (every region rectangle plus the in-progress draft) and renders
it as a transparent RGBA layer with Pillow. Drawing region outlines for a
static preview is also provided, mirroring what the interactive surface
shows: a purple stroke, widened and blue while a region is highlighted.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from PIL import Image, ImageDraw

from roicrop.geometry.primitives import Rect

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MaskStyle:
    """Configuration for mask and outline styling.

    Attributes:
        dim_color: RGB color of the dimmed area.
        opacity: Alpha of the dimmed area in [0, 1].
        outline_color: RGBA stroke of a region outline.
        outline_width: Stroke width of a region outline.
        highlight_color: RGBA stroke of the highlighted region.
        highlight_width: Stroke width of the highlighted region.
        fill_color: RGBA fill drawn inside each region.
    """

    dim_color: tuple[int, int, int] = (0, 0, 0)
    opacity: float = 0.5
    outline_color: tuple[int, int, int, int] = (128, 0, 128, 255)  # Purple
    outline_width: int = 2
    highlight_color: tuple[int, int, int, int] = (0, 0, 255, 255)
    highlight_width: int = 3
    fill_color: tuple[int, int, int, int] = (128, 0, 128, 51)

    @property
    def dim_rgba(self) -> tuple[int, int, int, int]:
        """Dim color with the opacity applied as an 8-bit alpha."""
        alpha = round(self.opacity * 255)
        return (*self.dim_color, alpha)


def mask_holes(rects: Iterable[Rect], draft: Rect | None = None) -> list[Rect]:
    """Collect the rectangles cut out of the mask.

    Args:
        rects: Current region rectangles, in collection order.
        draft: In-progress draft rectangle, if any.

    Returns:
        Normalized rectangles, draft last.
    """
    holes = [rect.normalized() for rect in rects]
    if draft is not None:
        holes.append(draft.normalized())
    return holes


class MaskCompositor:
    """Renders the "outside selections" dimmed overlay.

    The mask is shown only when at least one region or a draft exists; with
    nothing selected the image is displayed undimmed.
    """

    def __init__(self, style: MaskStyle | None = None) -> None:
        """Initialize the compositor with optional custom styling.

        Args:
            style: Visual styling configuration. Uses defaults if not provided.

        Raises:
            ValueError: If the style opacity is outside [0, 1].
        """
        self.style = style or MaskStyle()
        if not 0.0 <= self.style.opacity <= 1.0:
            raise ValueError(f"opacity must be in [0, 1], got {self.style.opacity}")

    @staticmethod
    def is_enabled(holes: Sequence[Rect]) -> bool:
        """Return True when the mask should be drawn."""
        return len(holes) > 0

    def generate(
        self,
        display_size: tuple[int, int],
        holes: Sequence[Rect],
    ) -> Image.Image:
        """Generate the mask layer.

        Args:
            display_size: (width, height) of the displayed image in pixels.
            holes: Normalized display-space rectangles to leave undimmed.

        Returns:
            RGBA image: dimmed everywhere except inside the holes. Fully
            transparent if there are no holes.

        Raises:
            ValueError: If display_size contains non-positive values.
        """
        if display_size[0] <= 0 or display_size[1] <= 0:
            raise ValueError(f"display_size must be positive, got {display_size}")

        if not self.is_enabled(holes):
            return Image.new("RGBA", display_size, (0, 0, 0, 0))

        mask = Image.new("RGBA", display_size, self.style.dim_rgba)
        draw = ImageDraw.Draw(mask)
        for hole in holes:
            box = _pixel_box(hole)
            if box is None:
                continue
            # ImageDraw writes RGBA values directly, so this punches a hole
            draw.rectangle(box, fill=(0, 0, 0, 0))
        return mask

    def draw_outlines(
        self,
        display_size: tuple[int, int],
        rects: Sequence[Rect],
        highlighted_index: int | None = None,
    ) -> Image.Image:
        """Draw region outlines on a transparent layer.

        Args:
            display_size: (width, height) of the displayed image in pixels.
            rects: Region rectangles to outline.
            highlighted_index: Index into ``rects`` drawn with the highlight
                stroke, or None.

        Returns:
            RGBA image with filled, stroked rectangles.
        """
        layer = Image.new("RGBA", display_size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        for index, rect in enumerate(rects):
            box = _pixel_box(rect)
            if box is None:
                continue
            highlighted = index == highlighted_index
            draw.rectangle(
                box,
                fill=self.style.fill_color,
                outline=(
                    self.style.highlight_color
                    if highlighted
                    else self.style.outline_color
                ),
                width=(
                    self.style.highlight_width
                    if highlighted
                    else self.style.outline_width
                ),
            )
        return layer

    def composite(
        self,
        display_image: Image.Image,
        rects: Sequence[Rect],
        draft: Rect | None = None,
        highlighted_index: int | None = None,
    ) -> Image.Image:
        """Composite the mask and outlines onto the displayed image.

        Args:
            display_image: The scaled display copy of the source bitmap.
            rects: Current region rectangles in display coordinates.
            draft: In-progress draft rectangle, if any.
            highlighted_index: Index of the highlighted region, if any.

        Returns:
            RGB preview of what the rendering surface shows.
        """
        holes = mask_holes(rects, draft)
        base = (
            display_image
            if display_image.mode == "RGBA"
            else display_image.convert("RGBA")
        )
        composited = Image.alpha_composite(
            base, self.generate(base.size, holes)
        )
        outlined = [*rects, draft] if draft is not None else list(rects)
        composited = Image.alpha_composite(
            composited,
            self.draw_outlines(base.size, outlined, highlighted_index),
        )
        logger.debug("Composited mask with %d holes", len(holes))
        return composited.convert("RGB")


def _pixel_box(rect: Rect) -> tuple[int, int, int, int] | None:
    """Inclusive pixel corners covering ``rect``, or None if it covers none.

    ImageDraw.rectangle fills both corner pixels, so a rect of width w
    spans columns left .. left + w - 1.
    """
    box = rect.normalized()
    x0, y0 = round(box.left), round(box.top)
    x1, y1 = round(box.right) - 1, round(box.bottom) - 1
    if x1 < x0 or y1 < y0:
        return None
    return (x0, y0, x1, y1)
