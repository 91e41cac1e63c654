"""Core selection engine for roicrop.

Public API:
    - CropEngine: Samples source-resolution crops for display rectangles.
    - CropArtifact: Encoded crop with its source window.
    - SelectionStore: Ordered regions, draft, selection and hover state.
    - Region / Preview: Stored region and preview list entry.
    - InteractionStateMachine: Turns pointer events into store mutations.
    - HandleRegistry / ManipulationBinder: Rendering-surface handle wiring.
    - CropSession: Everything above wired around one image.
"""

from roicrop.core.crop_engine import CropArtifact, CropEngine
from roicrop.core.interaction import (
    ConfirmSelection,
    InteractionEvent,
    InteractionState,
    InteractionStateMachine,
    PointerMove,
    PointerPress,
    PointerRelease,
    PressTarget,
    ShapeClick,
    ShapeGeometry,
    ShapeHoverEnter,
    ShapeHoverLeave,
    ShapeTransformEnd,
    Transition,
    parse_events,
)
from roicrop.core.registry import HandleRegistry, ManipulationBinder, NullBinder
from roicrop.core.session import CropSession
from roicrop.core.store import (
    IdGenerator,
    Preview,
    Region,
    SelectionStore,
    SequentialIdGenerator,
    UuidIdGenerator,
)

__all__ = [
    "ConfirmSelection",
    "CropArtifact",
    "CropEngine",
    "CropSession",
    "HandleRegistry",
    "IdGenerator",
    "InteractionEvent",
    "InteractionState",
    "InteractionStateMachine",
    "ManipulationBinder",
    "NullBinder",
    "PointerMove",
    "PointerPress",
    "PointerRelease",
    "PressTarget",
    "Preview",
    "Region",
    "SelectionStore",
    "SequentialIdGenerator",
    "ShapeClick",
    "ShapeGeometry",
    "ShapeHoverEnter",
    "ShapeHoverLeave",
    "ShapeTransformEnd",
    "Transition",
    "UuidIdGenerator",
    "parse_events",
]
