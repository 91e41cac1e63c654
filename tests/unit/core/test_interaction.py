"""Unit tests for the interaction state machine and event payloads."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from roicrop.core import (
    ConfirmSelection,
    InteractionState,
    InteractionStateMachine,
    PointerMove,
    PointerPress,
    PointerRelease,
    PressTarget,
    SelectionStore,
    ShapeClick,
    ShapeGeometry,
    ShapeHoverEnter,
    ShapeHoverLeave,
    ShapeTransformEnd,
    Transition,
    parse_events,
)
from roicrop.geometry import Point, Rect


def press(x: float, y: float, target: PressTarget = PressTarget.SURFACE) -> PointerPress:
    return PointerPress(position=Point(x=x, y=y), target=target)


def move(x: float, y: float) -> PointerMove:
    return PointerMove(position=Point(x=x, y=y))


def draw(
    machine: InteractionStateMachine,
    start: tuple[float, float],
    end: tuple[float, float],
) -> Transition:
    machine.handle(press(*start))
    machine.handle(move(*end))
    return machine.handle(PointerRelease())


@pytest.fixture
def machine(store: SelectionStore) -> InteractionStateMachine:
    return InteractionStateMachine(store)


class TestShapeGeometry:
    def test_baked_folds_scale(self) -> None:
        geometry = ShapeGeometry(x=1, y=2, width=10, height=20, scale_x=2, scale_y=0.5)
        baked = geometry.baked()
        assert (baked.width, baked.height) == (20, 10)
        assert (baked.scale_x, baked.scale_y) == (1, 1)
        assert geometry.scale_x == 2

    def test_round_trip_rect(self) -> None:
        rect = Rect(x=5, y=6, width=-7, height=8)
        assert ShapeGeometry.from_rect(rect).to_rect() == rect


class TestDrawing:
    def test_press_on_surface_starts_drawing(
        self, machine: InteractionStateMachine
    ) -> None:
        transition = machine.handle(press(10, 20))
        assert transition.state is InteractionState.DRAWING
        assert machine.creation_anchor == Point(x=10, y=20)
        assert machine.store.draft is None

    def test_move_updates_draft(self, machine: InteractionStateMachine) -> None:
        machine.handle(press(100, 100))
        machine.handle(move(300, 250))
        assert machine.store.draft == Rect(x=100, y=100, width=200, height=150)

        machine.handle(move(50, 60))
        assert machine.store.draft == Rect(x=100, y=100, width=-50, height=-40)

    def test_move_while_idle_is_ignored(self, machine: InteractionStateMachine) -> None:
        machine.handle(move(50, 60))
        assert machine.store.draft is None
        assert machine.state is InteractionState.IDLE

    def test_scenario_create_region(self, machine: InteractionStateMachine) -> None:
        transition = draw(machine, (100, 100), (300, 250))

        region = transition.created
        assert region is not None
        assert region.rect.to_tuple() == (100, 100, 200, 150)
        assert region.artifact.source_rect.to_tuple() == (200, 200, 400, 300)
        assert transition.state is InteractionState.IDLE
        assert machine.store.draft is None
        assert machine.creation_anchor is None

    def test_scenario_tiny_drag_creates_nothing(
        self, machine: InteractionStateMachine
    ) -> None:
        transition = draw(machine, (100, 100), (103, 102))

        assert transition.created is None
        assert len(machine.store) == 0
        assert machine.store.draft is None
        assert machine.state is InteractionState.IDLE

    def test_release_without_move_creates_nothing(
        self, machine: InteractionStateMachine
    ) -> None:
        machine.handle(press(100, 100))
        transition = machine.handle(PointerRelease())
        assert transition.created is None
        assert len(machine.store) == 0

    def test_release_position_is_final_corner(
        self, machine: InteractionStateMachine
    ) -> None:
        machine.handle(press(100, 100))
        machine.handle(move(102, 102))
        transition = machine.handle(PointerRelease(position=Point(x=160, y=140)))

        assert transition.created is not None
        assert transition.created.rect.to_tuple() == (100, 100, 60, 40)

    def test_drag_up_left_creates_region(self, machine: InteractionStateMachine) -> None:
        transition = draw(machine, (300, 250), (100, 100))
        assert transition.created is not None
        assert transition.created.rect.to_tuple() == (300, 250, -200, -150)
        assert transition.created.artifact.size == (400, 300)

    def test_release_while_idle_is_ignored(
        self, machine: InteractionStateMachine
    ) -> None:
        transition = machine.handle(PointerRelease(position=Point(x=10, y=10)))
        assert transition.created is None
        assert transition.state is InteractionState.IDLE

    def test_press_on_surface_clears_selection(
        self, machine: InteractionStateMachine
    ) -> None:
        region = draw(machine, (10, 10), (60, 60)).created
        assert region is not None
        machine.handle(ShapeClick(region_id=region.id))

        machine.handle(press(400, 400))

        assert machine.store.selected_id is None

    @pytest.mark.parametrize("target", [PressTarget.SHAPE, PressTarget.HANDLE])
    def test_press_on_shape_or_handle_is_ignored(
        self, machine: InteractionStateMachine, target: PressTarget
    ) -> None:
        region = draw(machine, (10, 10), (60, 60)).created
        assert region is not None
        machine.handle(ShapeClick(region_id=region.id))

        transition = machine.handle(press(20, 20, target))

        assert transition.state is InteractionState.IDLE
        assert machine.creation_anchor is None
        assert machine.store.selected_id == region.id

    def test_ids_increase_across_creations(
        self, machine: InteractionStateMachine
    ) -> None:
        first = draw(machine, (10, 10), (60, 60)).created
        second = draw(machine, (100, 100), (160, 160)).created
        assert first is not None and second is not None
        assert (first.id, second.id) == ("selection-0", "selection-1")

    def test_unavailable_crop_drops_region(self) -> None:
        engine = MagicMock()
        engine.extract_crop.return_value = None
        machine = InteractionStateMachine(SelectionStore(engine))

        transition = draw(machine, (10, 10), (60, 60))

        assert transition.created is None
        assert len(machine.store) == 0
        assert machine.state is InteractionState.IDLE


class TestTransform:
    def test_scenario_drag_preserves_size(
        self, machine: InteractionStateMachine
    ) -> None:
        region = draw(machine, (100, 100), (300, 250)).created
        assert region is not None

        transition = machine.handle(
            ShapeTransformEnd(
                region_id=region.id,
                geometry=ShapeGeometry(x=150, y=120, width=200, height=150),
            )
        )

        updated = transition.updated
        assert updated is not None
        assert updated.rect.to_tuple() == (150, 120, 200, 150)
        assert updated.artifact.data_uri != region.artifact.data_uri
        assert updated.artifact.source_rect.to_tuple() == (300, 240, 400, 300)
        # No separate dragging state: the commit happens while idle
        assert transition.state is InteractionState.IDLE

    def test_scenario_resize_bakes_scale(
        self, machine: InteractionStateMachine
    ) -> None:
        region = draw(machine, (100, 100), (300, 250)).created
        assert region is not None

        first = machine.handle(
            ShapeTransformEnd(
                region_id=region.id,
                geometry=ShapeGeometry(
                    x=100, y=100, width=200, height=150, scale_x=2.0
                ),
            )
        )
        assert first.updated is not None
        assert first.updated.width == 400
        assert first.updated.height == 150
        assert first.geometry is not None
        assert (first.geometry.scale_x, first.geometry.scale_y) == (1, 1)

        # The surface applies the baked geometry, so the next resize scales
        # from width 400 rather than compounding on the old scale.
        second = machine.handle(
            ShapeTransformEnd(
                region_id=region.id,
                geometry=first.geometry.model_copy(update={"scale_x": 1.5}),
            )
        )
        assert second.updated is not None
        assert second.updated.width == 600

    def test_transform_unknown_region(self, machine: InteractionStateMachine) -> None:
        transition = machine.handle(
            ShapeTransformEnd(
                region_id="ghost",
                geometry=ShapeGeometry(x=0, y=0, width=10, height=10),
            )
        )
        assert transition.updated is None

    def test_constrain_resize_uses_store_validator(
        self, machine: InteractionStateMachine
    ) -> None:
        old = Rect(x=0, y=0, width=50, height=50)
        assert machine.constrain_resize(old, Rect(x=0, y=0, width=3, height=50)) is old
        new = Rect(x=0, y=0, width=30, height=30)
        assert machine.constrain_resize(old, new) is new


class TestSelectionEvents:
    def test_click_selects(self, machine: InteractionStateMachine) -> None:
        region = draw(machine, (10, 10), (60, 60)).created
        assert region is not None
        machine.handle(ShapeClick(region_id=region.id))
        assert machine.store.selected_id == region.id

    def test_hover_enter_and_leave(self, machine: InteractionStateMachine) -> None:
        region = draw(machine, (10, 10), (60, 60)).created
        assert region is not None

        machine.handle(ShapeHoverEnter(region_id=region.id))
        assert machine.store.hovered_id == region.id
        machine.handle(ShapeHoverLeave(region_id=region.id))
        assert machine.store.hovered_id is None

    def test_hover_ignored_while_selected(
        self, machine: InteractionStateMachine
    ) -> None:
        a = draw(machine, (10, 10), (60, 60)).created
        b = draw(machine, (100, 100), (160, 160)).created
        assert a is not None and b is not None
        machine.handle(ShapeClick(region_id=a.id))

        machine.handle(ShapeHoverEnter(region_id=b.id))

        assert machine.store.hovered_id is None

    def test_confirm_deselects(self, machine: InteractionStateMachine) -> None:
        region = draw(machine, (10, 10), (60, 60)).created
        assert region is not None
        machine.handle(ShapeClick(region_id=region.id))

        machine.handle(ConfirmSelection(region_id=region.id))

        assert machine.store.selected_id is None
        assert region.id in machine.store


class TestParseEvents:
    def test_parses_mixed_events(self) -> None:
        payload = json.dumps(
            [
                {"kind": "press", "position": {"x": 1, "y": 2}},
                {"kind": "move", "position": {"x": 10, "y": 20}},
                {"kind": "release"},
                {"kind": "click", "region_id": "selection-0"},
                {
                    "kind": "transform_end",
                    "region_id": "selection-0",
                    "geometry": {"x": 0, "y": 0, "width": 5, "height": 5, "scale_x": 2},
                },
                {"kind": "hover_enter", "region_id": "selection-0"},
                {"kind": "hover_leave", "region_id": "selection-0"},
                {"kind": "confirm"},
            ]
        )

        events = parse_events(payload)

        assert [type(event).__name__ for event in events] == [
            "PointerPress",
            "PointerMove",
            "PointerRelease",
            "ShapeClick",
            "ShapeTransformEnd",
            "ShapeHoverEnter",
            "ShapeHoverLeave",
            "ConfirmSelection",
        ]
        assert events[0].target is PressTarget.SURFACE  # type: ignore[union-attr]

    def test_press_target_from_json(self) -> None:
        (event,) = parse_events(
            '[{"kind": "press", "position": {"x": 0, "y": 0}, "target": "handle"}]'
        )
        assert isinstance(event, PointerPress)
        assert event.target is PressTarget.HANDLE

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            parse_events('[{"kind": "teleport"}]')

    def test_missing_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            parse_events('[{"kind": "click"}]')
