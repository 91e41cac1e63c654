"""Unit tests for the dimmed selection mask.

Tests MaskStyle, mask_holes and MaskCompositor including:
- Mask image creation and format
- Holes at region and draft rectangles
- Disabled mask when nothing is selected
- Compositing onto the display image
"""

from __future__ import annotations

import pytest
from PIL import Image

from roicrop.geometry import MaskCompositor, MaskStyle, Rect, mask_holes


class TestMaskStyle:
    def test_default_style(self) -> None:
        style = MaskStyle()
        assert style.opacity == 0.5
        assert style.dim_rgba == (0, 0, 0, 128)
        assert style.outline_color == (128, 0, 128, 255)
        assert style.outline_width == 2
        assert style.highlight_width == 3

    def test_style_is_frozen(self) -> None:
        style = MaskStyle()
        with pytest.raises(AttributeError):
            style.opacity = 1.0  # type: ignore[misc]


class TestMaskHoles:
    def test_draft_is_appended_last(self) -> None:
        regions = [Rect(x=0, y=0, width=10, height=10)]
        draft = Rect(x=50, y=50, width=-20, height=-20)
        holes = mask_holes(regions, draft)
        assert len(holes) == 2
        assert holes[-1].to_tuple() == (30, 30, 20, 20)

    def test_no_regions_no_draft(self) -> None:
        assert mask_holes([]) == []


class TestMaskCompositor:
    @pytest.fixture
    def compositor(self) -> MaskCompositor:
        return MaskCompositor()

    def test_rejects_invalid_opacity(self) -> None:
        with pytest.raises(ValueError, match="opacity"):
            MaskCompositor(MaskStyle(opacity=1.5))

    def test_is_enabled(self) -> None:
        assert not MaskCompositor.is_enabled([])
        assert MaskCompositor.is_enabled([Rect(x=0, y=0, width=1, height=1)])

    def test_generate_without_holes_is_transparent(
        self, compositor: MaskCompositor
    ) -> None:
        mask = compositor.generate((100, 80), [])
        assert mask.mode == "RGBA"
        assert mask.size == (100, 80)
        assert mask.getextrema()[3] == (0, 0)

    def test_generate_dims_outside_holes(self, compositor: MaskCompositor) -> None:
        mask = compositor.generate(
            (100, 100),
            [Rect(x=10, y=10, width=20, height=20)],
        )
        assert mask.getpixel((20, 20)) == (0, 0, 0, 0)
        assert mask.getpixel((60, 60)) == (0, 0, 0, 128)

    def test_hole_covers_exactly_its_width(self, compositor: MaskCompositor) -> None:
        mask = compositor.generate((100, 100), [Rect(x=10, y=10, width=20, height=20)])
        assert mask.getpixel((10, 10))[3] == 0
        assert mask.getpixel((29, 29))[3] == 0
        assert mask.getpixel((30, 29))[3] == 128
        assert mask.getpixel((29, 30))[3] == 128
        assert mask.getpixel((9, 10))[3] == 128

    def test_sub_pixel_hole_is_skipped(self, compositor: MaskCompositor) -> None:
        mask = compositor.generate((50, 50), [Rect(x=10, y=10, width=0.3, height=5)])
        assert mask.getpixel((10, 12))[3] == 128

    def test_outline_stays_inside_rect(self, compositor: MaskCompositor) -> None:
        layer = compositor.draw_outlines((100, 100), [Rect(x=10, y=10, width=30, height=30)])
        assert layer.getpixel((39, 20)) == (128, 0, 128, 255)
        assert layer.getpixel((40, 20)) == (0, 0, 0, 0)
        assert layer.getpixel((20, 40)) == (0, 0, 0, 0)

    def test_generate_handles_negative_extents(
        self, compositor: MaskCompositor
    ) -> None:
        hole = Rect(x=60, y=60, width=-30, height=-30).normalized()
        mask = compositor.generate((100, 100), [hole])
        assert mask.getpixel((45, 45))[3] == 0
        assert mask.getpixel((80, 80))[3] == 128

    def test_generate_skips_zero_area_holes(self, compositor: MaskCompositor) -> None:
        mask = compositor.generate((50, 50), [Rect(x=10, y=10, width=0, height=0)])
        assert mask.getpixel((10, 10))[3] == 128

    def test_generate_rejects_empty_size(self, compositor: MaskCompositor) -> None:
        with pytest.raises(ValueError, match="display_size must be positive"):
            compositor.generate((0, 10), [])

    def test_custom_opacity(self) -> None:
        mask = MaskCompositor(MaskStyle(opacity=1.0)).generate(
            (10, 10), [Rect(x=0, y=0, width=2, height=2)]
        )
        assert mask.getpixel((8, 8)) == (0, 0, 0, 255)

    def test_draw_outlines_highlight(self, compositor: MaskCompositor) -> None:
        layer = compositor.draw_outlines(
            (100, 100),
            [Rect(x=10, y=10, width=30, height=30), Rect(x=50, y=50, width=30, height=30)],
            highlighted_index=1,
        )
        assert layer.getpixel((10, 20)) == (128, 0, 128, 255)
        assert layer.getpixel((50, 60)) == (0, 0, 255, 255)

    def test_composite_returns_rgb_of_display_size(
        self, compositor: MaskCompositor
    ) -> None:
        display = Image.new("RGB", (120, 90), (255, 255, 255))
        preview = compositor.composite(display, [Rect(x=20, y=20, width=40, height=40)])
        assert preview.mode == "RGB"
        assert preview.size == (120, 90)

    def test_composite_dims_only_outside(self, compositor: MaskCompositor) -> None:
        display = Image.new("RGB", (100, 100), (255, 255, 255))
        preview = compositor.composite(
            display,
            [Rect(x=20, y=20, width=40, height=40)],
            draft=Rect(x=90, y=90, width=-5, height=-5),
        )
        inside = preview.getpixel((40, 40))
        outside = preview.getpixel((5, 5))
        draft_inside = preview.getpixel((87, 87))
        assert outside[0] == outside[1] == outside[2]
        assert 126 <= outside[0] <= 128
        assert inside[1] > outside[1]
        assert draft_inside[1] > outside[1]
