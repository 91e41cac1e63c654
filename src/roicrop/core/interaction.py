"""Pointer-driven interaction state machine for roicrop.

Consumes the events a rendering surface emits and turns them into store
mutations:

    press on surface -> DRAWING (anchor recorded, selection cleared)
    move while DRAWING -> draft rectangle updated
    release while DRAWING -> region created if large enough, back to IDLE
    press on shape/handle -> ignored (the shape's own handlers act)
    shape click -> select
    shape transform end (drag or resize) -> geometry committed
    hover enter/leave -> hover updated while nothing is selected
    confirm -> selection cleared

Events are processed strictly in delivery order and each handler runs to
completion, so the machine is deterministic for a given event sequence.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter

from roicrop.core.store import Region, SelectionStore
from roicrop.geometry import Point, Rect
from roicrop.utils.logging import bound_region, get_logger

logger = get_logger(__name__)


class InteractionState(str, Enum):
    """Top-level machine state. Selection is tracked separately.

    Dragging and resizing a selected region have no states of their own.
    The surface moves or scales its shape while the pointer is down and
    reports the result once, as a ShapeTransformEnd, when the manipulation
    ends. The machine stays in IDLE throughout and commits the geometry
    and crop on that event.
    """

    IDLE = "idle"
    DRAWING = "drawing"


class PressTarget(str, Enum):
    """What the pointer landed on when pressed."""

    SURFACE = "surface"  # Empty image area
    SHAPE = "shape"  # An existing region
    HANDLE = "handle"  # A transform handle


# =============================================================================
# Geometry reported by the surface
# =============================================================================


class ShapeGeometry(BaseModel, frozen=True):
    """Geometry of a manipulated shape as reported by the rendering surface.

    A resize leaves the shape's base extents alone and changes its scale;
    ``baked()`` folds the scale into the extents so geometry is always
    stored as plain x, y, width, height.
    """

    x: float
    y: float
    width: float
    height: float
    scale_x: float = 1.0
    scale_y: float = 1.0

    def baked(self) -> ShapeGeometry:
        """Return the same geometry with the scale folded into the extents."""
        return ShapeGeometry(
            x=self.x,
            y=self.y,
            width=self.width * self.scale_x,
            height=self.height * self.scale_y,
        )

    def to_rect(self) -> Rect:
        """Rectangle of the baked geometry."""
        baked = self.baked()
        return Rect(x=baked.x, y=baked.y, width=baked.width, height=baked.height)

    @classmethod
    def from_rect(cls, rect: Rect) -> ShapeGeometry:
        return cls(x=rect.x, y=rect.y, width=rect.width, height=rect.height)


# =============================================================================
# Events
# =============================================================================


class PointerPress(BaseModel, frozen=True):
    """Pointer pressed somewhere on the surface."""

    kind: Literal["press"] = "press"
    position: Point
    target: PressTarget = PressTarget.SURFACE


class PointerMove(BaseModel, frozen=True):
    """Pointer moved."""

    kind: Literal["move"] = "move"
    position: Point


class PointerRelease(BaseModel, frozen=True):
    """Pointer released. The position, if known, is the final corner."""

    kind: Literal["release"] = "release"
    position: Point | None = None


class ShapeClick(BaseModel, frozen=True):
    """A region's shape was clicked."""

    kind: Literal["click"] = "click"
    region_id: str


class ShapeTransformEnd(BaseModel, frozen=True):
    """A drag or resize of a region finished."""

    kind: Literal["transform_end"] = "transform_end"
    region_id: str
    geometry: ShapeGeometry


class ShapeHoverEnter(BaseModel, frozen=True):
    kind: Literal["hover_enter"] = "hover_enter"
    region_id: str


class ShapeHoverLeave(BaseModel, frozen=True):
    kind: Literal["hover_leave"] = "hover_leave"
    region_id: str


class ConfirmSelection(BaseModel, frozen=True):
    """The save button beside the selected region was pressed."""

    kind: Literal["confirm"] = "confirm"
    region_id: str | None = None


InteractionEvent = Annotated[
    PointerPress
    | PointerMove
    | PointerRelease
    | ShapeClick
    | ShapeTransformEnd
    | ShapeHoverEnter
    | ShapeHoverLeave
    | ConfirmSelection,
    Field(discriminator="kind"),
]

_EVENT_LIST_ADAPTER: TypeAdapter[list[InteractionEvent]] = TypeAdapter(
    list[InteractionEvent]
)


def parse_events(data: str | bytes) -> list[InteractionEvent]:
    """Parse a JSON array of events.

    Raises:
        pydantic.ValidationError: If the payload is not a valid event list.
    """
    return _EVENT_LIST_ADAPTER.validate_json(data)


# =============================================================================
# Machine
# =============================================================================


@dataclass(frozen=True)
class Transition:
    """Outcome of handling one event.

    Attributes:
        state: Machine state after the event.
        created: Region created by this event, if any.
        updated: Region updated by this event, if any.
        geometry: Baked geometry the surface should apply to the
            manipulated shape (scale back to 1), for transform events.
    """

    state: InteractionState
    created: Region | None = None
    updated: Region | None = None
    geometry: ShapeGeometry | None = None


class InteractionStateMachine:
    """Drives region creation, selection, hover, drag and resize.

    The machine never touches the rendering surface; everything it knows
    arrives in event payloads and everything it decides lands in the store.
    """

    def __init__(self, store: SelectionStore) -> None:
        self._store = store
        self._state = InteractionState.IDLE
        self._anchor: Point | None = None

    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def creation_anchor(self) -> Point | None:
        return self._anchor

    @property
    def store(self) -> SelectionStore:
        return self._store

    def handle(self, event: InteractionEvent) -> Transition:
        """Process a single event and report what changed."""
        if isinstance(event, PointerPress):
            return self._on_press(event)
        if isinstance(event, PointerMove):
            return self._on_move(event)
        if isinstance(event, PointerRelease):
            return self._on_release(event)
        if isinstance(event, ShapeClick):
            self._store.select(event.region_id)
        elif isinstance(event, ShapeTransformEnd):
            return self._on_transform_end(event)
        elif isinstance(event, ShapeHoverEnter):
            self._store.set_hovered(event.region_id)
        elif isinstance(event, ShapeHoverLeave):
            self._store.set_hovered(None)
        elif isinstance(event, ConfirmSelection):
            self._store.select(None)
        return Transition(state=self._state)

    def constrain_resize(self, old_box: Rect, new_box: Rect) -> Rect:
        """Bound-box guard the surface applies on every resize step."""
        return self._store.validator.constrain_resize(old_box, new_box)

    def _on_press(self, event: PointerPress) -> Transition:
        if event.target is not PressTarget.SURFACE:
            # Leave in-progress manipulation of an existing region alone
            return Transition(state=self._state)

        self._anchor = event.position
        self._store.clear_draft()
        self._store.select(None)
        self._state = InteractionState.DRAWING
        return Transition(state=self._state)

    def _on_move(self, event: PointerMove) -> Transition:
        if self._state is InteractionState.DRAWING and self._anchor is not None:
            self._store.set_draft(Rect.from_corners(self._anchor, event.position))
        return Transition(state=self._state)

    def _on_release(self, event: PointerRelease) -> Transition:
        if self._state is not InteractionState.DRAWING:
            return Transition(state=self._state)

        if event.position is not None and self._anchor is not None:
            self._store.set_draft(Rect.from_corners(self._anchor, event.position))

        draft = self._store.draft
        created: Region | None = None
        if draft is not None and self._store.validator.is_large_enough(draft):
            created = self._store.create_if_large_enough(draft)
        else:
            logger.debug(
                "Draft too small or undefined",
                draft=None if draft is None else draft.to_tuple(),
            )

        self._store.clear_draft()
        self._anchor = None
        self._state = InteractionState.IDLE
        return Transition(state=self._state, created=created)

    def _on_transform_end(self, event: ShapeTransformEnd) -> Transition:
        baked = event.geometry.baked()
        with bound_region(event.region_id):
            updated = self._store.update_geometry(event.region_id, baked.to_rect())
            logger.debug("Transform committed", committed=updated is not None)
        return Transition(state=self._state, updated=updated, geometry=baked)
