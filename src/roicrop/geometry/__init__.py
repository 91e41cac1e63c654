"""Geometry module for roicrop.

This package provides coordinate primitives, display/source space
transforms, size validation, and the dimmed selection mask.

Key Components:
    - Primitives: Point, Extent, Rect models (Rect allows signed extents)
    - Transforms: display space <-> source space mapping
    - Validators: creation threshold and resize guard
    - Overlay: dimmed mask with holes at each selection

Example:
    from roicrop.geometry import Extent, Rect, to_source_space

    display = Extent(width=800, height=1000)
    source = Extent(width=1600, height=2000)
    rect = Rect(x=100, y=100, width=200, height=150)
    to_source_space(rect, display, source)  # Rect(x=200, y=200, ...)
"""

from roicrop.geometry.overlay import MaskCompositor, MaskStyle, mask_holes
from roicrop.geometry.primitives import Extent, Point, Rect
from roicrop.geometry.transforms import (
    PIXEL_SNAP_EPSILON,
    ScaleFactors,
    compute_scale,
    fit_to_width,
    snap_to_pixel,
    to_source_space,
)
from roicrop.geometry.validators import DEFAULT_MIN_SIZE, GeometryValidator

__all__ = [
    "DEFAULT_MIN_SIZE",
    "PIXEL_SNAP_EPSILON",
    "Extent",
    "GeometryValidator",
    "MaskCompositor",
    "MaskStyle",
    "Point",
    "Rect",
    "ScaleFactors",
    "compute_scale",
    "fit_to_width",
    "mask_holes",
    "snap_to_pixel",
    "to_source_space",
]
