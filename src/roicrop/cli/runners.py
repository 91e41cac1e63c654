"""CLI runners for batch cropping and event replay.

This module provides the execution logic for the CLI commands, bridging
the CLI interface to the selection core. The CLI plays the part of the
rendering surface: it measures the image by fitting it to a fixed display
width, feeds rectangles or recorded pointer events into the core, and
writes the resulting crops to disk.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from pathlib import Path

from roicrop.config import Settings, settings
from roicrop.core import (
    CropSession,
    InteractionState,
    PointerRelease,
    Region,
    parse_events,
)
from roicrop.geometry import MaskCompositor, MaskStyle, Rect
from roicrop.imaging import load_source_image, render_display_copy
from roicrop.utils.logging import get_logger, set_correlation_context

_FORMAT_SUFFIXES = {"JPEG": ".jpg", "PNG": ".png", "WEBP": ".webp", "BMP": ".bmp"}


@dataclass(frozen=True)
class SavedCrop:
    """A region whose crop was written to disk."""

    ordinal: int
    region_id: str
    display_rect: tuple[float, float, float, float]
    source_window: tuple[float, float, float, float]
    path: Path

    def to_dict(self) -> dict[str, object]:
        return {
            "ordinal": self.ordinal,
            "id": self.region_id,
            "display_rect": list(self.display_rect),
            "source_window": list(self.source_window),
            "path": str(self.path),
        }


@dataclass
class CropRunResult:
    """Result of a crop or replay run."""

    saved: list[SavedCrop] = field(default_factory=list)
    rejected: int = 0
    mask_preview: Path | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "regions": [crop.to_dict() for crop in self.saved],
            "rejected": self.rejected,
            "mask_preview": None if self.mask_preview is None else str(self.mask_preview),
        }


def parse_region(value: str) -> Rect:
    """Parse an ``x,y,width,height`` option value.

    Raises:
        ValueError: If the value does not contain four numbers.
    """
    parts = [part.strip() for part in value.split(",")]
    if len(parts) != 4:
        raise ValueError(f"Expected x,y,width,height, got {value!r}")
    try:
        x, y, width, height = (float(part) for part in parts)
    except ValueError as e:
        raise ValueError(f"Region values must be numbers, got {value!r}") from e
    return Rect(x=x, y=y, width=width, height=height)


def run_crop(
    *,
    image_path: Path,
    regions: list[Rect],
    out_dir: Path,
    config: Settings | None = None,
    mask_preview: Path | None = None,
) -> CropRunResult:
    """Create a region for every rectangle and write the crops.

    Rectangles are in display space of the fit-to-width surface.
    Rectangles below the size threshold, or whose crop is unavailable or
    exceeds MAX_CROP_DIMENSION, are counted as rejected.
    """
    logger = get_logger(__name__)
    session = _open_session(image_path, config)

    rejected = 0
    for rect in regions:
        if session.store.create_if_large_enough(rect) is None:
            rejected += 1
    logger.info("Regions created", created=len(session.store), rejected=rejected)

    result = CropRunResult(rejected=rejected)
    result.saved = _write_crops(session, out_dir, config or settings)
    if mask_preview is not None:
        result.mask_preview = _write_mask_preview(session, mask_preview, config)
    return result


def run_replay(
    *,
    image_path: Path,
    events_path: Path,
    out_dir: Path,
    config: Settings | None = None,
    mask_preview: Path | None = None,
) -> CropRunResult:
    """Feed a recorded JSON event list through the state machine.

    Raises:
        pydantic.ValidationError: If the events file is malformed.
    """
    logger = get_logger(__name__)
    events = parse_events(events_path.read_bytes())
    session = _open_session(image_path, config)

    rejected = 0
    for index, event in enumerate(events):
        set_correlation_context(event_index=index)
        was_drawing = session.machine.state is InteractionState.DRAWING
        transition = session.dispatch(event)
        ended_draw = was_drawing and isinstance(event, PointerRelease)
        if ended_draw and transition.created is None:
            rejected += 1
    logger.info(
        "Replay finished",
        events=len(events),
        regions=len(session.store),
        state=session.machine.state.value,
    )

    result = CropRunResult(rejected=rejected)
    result.saved = _write_crops(session, out_dir, config or settings)
    if mask_preview is not None:
        result.mask_preview = _write_mask_preview(session, mask_preview, config)
    return result


def _open_session(image_path: Path, config: Settings | None) -> CropSession:
    set_correlation_context(session_id=uuid.uuid4().hex[:12])
    source = load_source_image(image_path)
    session = CropSession.create(source, config=config)
    extent = session.surface.displayed_extent()
    get_logger(__name__).info(
        "Image loaded",
        path=str(image_path),
        source_size=(source.width, source.height),
        display_size=None if extent is None else extent.to_tuple(),
    )
    return session


def _write_crops(session: CropSession, out_dir: Path, config: Settings) -> list[SavedCrop]:
    out_dir.mkdir(parents=True, exist_ok=True)
    suffix = _FORMAT_SUFFIXES.get(config.CROP_FORMAT.upper(), ".png")
    saved: list[SavedCrop] = []
    for preview, region in zip(session.store.previews(), session.store, strict=True):
        path = out_dir / f"selection-{preview.ordinal}{suffix}"
        path.write_bytes(region.artifact.to_bytes())
        saved.append(_saved_crop(preview.ordinal, region, path))
    return saved


def _saved_crop(ordinal: int, region: Region, path: Path) -> SavedCrop:
    return SavedCrop(
        ordinal=ordinal,
        region_id=region.id,
        display_rect=region.rect.to_tuple(),
        source_window=region.artifact.window.to_tuple(),
        path=path,
    )


def _write_mask_preview(
    session: CropSession, path: Path, config: Settings | None
) -> Path:
    config = config or settings
    source = session.slot.current()
    extent = session.surface.displayed_extent()
    if source is None or extent is None:
        raise RuntimeError("Cannot render mask preview without a measured image")

    compositor = MaskCompositor(MaskStyle(opacity=config.require_opacity()))
    regions = session.store.regions
    highlighted = session.store.highlighted_id
    highlighted_index = next(
        (index for index, region in enumerate(regions) if region.id == highlighted),
        None,
    )
    preview = compositor.composite(
        render_display_copy(source, extent),
        [region.rect for region in regions],
        draft=session.store.draft,
        highlighted_index=highlighted_index,
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    preview.save(path)
    return path
