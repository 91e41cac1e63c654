"""Authoritative selection state for roicrop.

The SelectionStore owns:

- the ordered collection of persisted regions (insertion order is the
  1-based ordinal shown in the preview list),
- the single id-less draft rectangle shown while a region is being drawn,
- the selected and hovered region ids.

Invariants:
    - Ids come from an injected generator and are never reused, even when
      the crop for a candidate region fails and nothing is stored.
    - A region is stored only if both normalized extents exceed the
      minimum size and its crop could be extracted.
    - A region's geometry and crop artifact change together or not at all.
    - Selecting a region clears the hover; hovering is ignored while a
      region is selected.
"""

from __future__ import annotations

import itertools
import uuid
from collections.abc import Hashable, Iterator
from dataclasses import dataclass, replace
from typing import Protocol

from roicrop.core.crop_engine import CropArtifact
from roicrop.core.registry import HandleRegistry, ManipulationBinder, NullBinder
from roicrop.geometry import GeometryValidator, Rect
from roicrop.utils.logging import bound_region, get_logger

logger = get_logger(__name__)


class CropExtractor(Protocol):
    """Anything that can turn a display rectangle into a crop artifact."""

    def extract_crop(self, display_rect: Rect) -> CropArtifact | None: ...


class IdGenerator(Protocol):
    """Source of unique region ids."""

    def next_id(self) -> str: ...


class SequentialIdGenerator:
    """Monotonic ids: ``selection-0``, ``selection-1``, ..."""

    __slots__ = ("_counter", "_prefix")

    def __init__(self, prefix: str = "selection-", start: int = 0) -> None:
        self._prefix = prefix
        self._counter = itertools.count(start)

    def next_id(self) -> str:
        return f"{self._prefix}{next(self._counter)}"


class UuidIdGenerator:
    """Random UUID4 ids, for stores whose ids may be shared across sessions."""

    def next_id(self) -> str:
        return str(uuid.uuid4())


@dataclass(frozen=True)
class Region:
    """A persisted region of interest.

    Attributes:
        id: Stable unique identifier.
        rect: Display-space geometry as drawn (extents may be negative).
        artifact: Crop sampled from the source at ``rect``.
    """

    id: str
    rect: Rect
    artifact: CropArtifact

    @property
    def x(self) -> float:
        return self.rect.x

    @property
    def y(self) -> float:
        return self.rect.y

    @property
    def width(self) -> float:
        return self.rect.width

    @property
    def height(self) -> float:
        return self.rect.height

    @property
    def data_uri(self) -> str:
        return self.artifact.data_uri


@dataclass(frozen=True)
class Preview:
    """One entry of the crop preview list.

    Attributes:
        ordinal: 1-based position in insertion order.
        region_id: Id of the region the preview belongs to.
        data_uri: Encoded crop.
    """

    ordinal: int
    region_id: str
    data_uri: str


class SelectionStore:
    """Ordered region collection plus draft, selection and hover state.

    Only the interaction state machine mutates the store; the rendering
    surface reads it. All failure paths are silent no-ops that leave the
    state unchanged.

    Example:
        >>> store = SelectionStore(engine)
        >>> region = store.create_if_large_enough(Rect(x=10, y=10, width=50, height=40))
        >>> store.select(region.id)
        >>> store.selected_id == region.id
        True
    """

    def __init__(
        self,
        crop_engine: CropExtractor,
        *,
        id_generator: IdGenerator | None = None,
        validator: GeometryValidator | None = None,
        registry: HandleRegistry | None = None,
        binder: ManipulationBinder | None = None,
    ) -> None:
        """Initialize an empty store.

        Args:
            crop_engine: Extracts the crop for each committed geometry.
            id_generator: Id source. Defaults to SequentialIdGenerator.
            validator: Minimum-size policy. Defaults to a 5-unit threshold.
            registry: Region id -> rendering handle map owned by the surface.
            binder: Transform widget re-bound on every selection change.
        """
        self._crop_engine = crop_engine
        self._ids = id_generator or SequentialIdGenerator()
        self._validator = validator or GeometryValidator()
        self._registry = registry or HandleRegistry()
        self._binder = binder or NullBinder()
        self._regions: list[Region] = []
        self._draft: Rect | None = None
        self._selected_id: str | None = None
        self._hovered_id: str | None = None

    # ------------------------------------------------------------------
    # Read API

    @property
    def regions(self) -> tuple[Region, ...]:
        """Persisted regions in insertion order."""
        return tuple(self._regions)

    @property
    def draft(self) -> Rect | None:
        return self._draft

    @property
    def selected_id(self) -> str | None:
        return self._selected_id

    @property
    def hovered_id(self) -> str | None:
        return self._hovered_id

    @property
    def highlighted_id(self) -> str | None:
        """Region drawn with the hover stroke: hovered and nothing selected."""
        if self._selected_id is not None:
            return None
        return self._hovered_id

    @property
    def registry(self) -> HandleRegistry:
        return self._registry

    @property
    def validator(self) -> GeometryValidator:
        return self._validator

    def get(self, region_id: str) -> Region | None:
        """Return the region with ``region_id``, or None."""
        index = self._index_of(region_id)
        return None if index is None else self._regions[index]

    def ordinal(self, region_id: str) -> int | None:
        """Return the 1-based insertion ordinal of a region, or None."""
        index = self._index_of(region_id)
        return None if index is None else index + 1

    def previews(self) -> list[Preview]:
        """Crop previews for the sidebar, numbered by insertion order."""
        return [
            Preview(ordinal=index + 1, region_id=region.id, data_uri=region.data_uri)
            for index, region in enumerate(self._regions)
        ]

    def mask_rects(self) -> list[Rect]:
        """Rectangles the dimmed mask must leave uncovered, draft last."""
        rects = [region.rect for region in self._regions]
        if self._draft is not None:
            rects.append(self._draft)
        return rects

    def __len__(self) -> int:
        return len(self._regions)

    def __iter__(self) -> Iterator[Region]:
        return iter(tuple(self._regions))

    def __contains__(self, region_id: object) -> bool:
        return any(region.id == region_id for region in self._regions)

    # ------------------------------------------------------------------
    # Regions

    def create_if_large_enough(self, rect: Rect) -> Region | None:
        """Create and append a region if the rectangle passes the threshold.

        Args:
            rect: Display-space rectangle as drawn (extents may be negative).

        Returns:
            The new Region, or None if the rectangle is too small or its
            crop could not be extracted.
        """
        if not self._validator.is_large_enough(rect):
            logger.debug("Region rejected below threshold", rect=rect.to_tuple())
            return None

        region_id = self._ids.next_id()
        with bound_region(region_id):
            artifact = self._crop_engine.extract_crop(rect)
            if artifact is None:
                logger.debug("Region dropped: crop unavailable")
                return None

            region = Region(id=region_id, rect=rect, artifact=artifact)
            self._regions.append(region)
            logger.debug(
                "Region created", rect=rect.to_tuple(), crop_size=artifact.size
            )
        return region

    def update_geometry(self, region_id: str, new_rect: Rect) -> Region | None:
        """Replace a region's geometry and crop together.

        Args:
            region_id: Region to update.
            new_rect: New display-space geometry.

        Returns:
            The updated Region, or None if the id is unknown or the crop
            could not be extracted (the region is then left untouched).
        """
        with bound_region(region_id):
            index = self._index_of(region_id)
            if index is None:
                logger.debug("Update skipped: unknown region")
                return None

            artifact = self._crop_engine.extract_crop(new_rect)
            if artifact is None:
                logger.debug("Update skipped: crop unavailable")
                return None

            updated = replace(self._regions[index], rect=new_rect, artifact=artifact)
            self._regions[index] = updated
            logger.debug("Region updated", rect=new_rect.to_tuple())
        return updated

    def remove(self, region_id: str) -> bool:
        """Delete a region and any selection, hover or handle pointing at it.

        Returns:
            True if a region was removed.
        """
        index = self._index_of(region_id)
        if index is None:
            return False

        with bound_region(region_id):
            del self._regions[index]
            if self._hovered_id == region_id:
                self._hovered_id = None
            if self._selected_id == region_id:
                self.select(None)
            self._registry.unregister(region_id)
            logger.debug("Region removed")
        return True

    # ------------------------------------------------------------------
    # Draft

    def set_draft(self, rect: Rect) -> None:
        """Replace the draft rectangle; there is never more than one."""
        self._draft = rect

    def clear_draft(self) -> None:
        self._draft = None

    # ------------------------------------------------------------------
    # Selection and hover

    def select(self, region_id: str | None) -> None:
        """Select a region, or clear the selection with None.

        A non-none selection clears the hover. Unknown ids are ignored.
        The manipulation handle is re-bound whenever the selection changes.
        """
        if region_id is not None and region_id not in self:
            logger.debug("Select skipped: unknown region", region_id=region_id)
            return

        if region_id is not None:
            self._hovered_id = None

        if region_id == self._selected_id:
            return
        self._selected_id = region_id
        self.rebind_handle()

    def set_hovered(self, region_id: str | None) -> None:
        """Set or clear the hovered region; ignored while one is selected."""
        if self._selected_id is not None:
            return
        if region_id is not None and region_id not in self:
            return
        self._hovered_id = region_id

    # ------------------------------------------------------------------
    # Rendering handles

    def register_handle(self, region_id: str, handle: Hashable) -> None:
        """Record the surface object for a region.

        If the region is already selected the transform widget is attached
        to the new handle straight away.
        """
        self._registry.register(region_id, handle)
        if region_id == self._selected_id:
            self.rebind_handle()

    def rebind_handle(self) -> None:
        """Attach the transform widget to the selected region, or detach it."""
        handle = self._registry.lookup(self._selected_id)
        if handle is None:
            self._binder.unbind()
        else:
            self._binder.bind(handle)

    def _index_of(self, region_id: str) -> int | None:
        for index, region in enumerate(self._regions):
            if region.id == region_id:
                return index
        return None
