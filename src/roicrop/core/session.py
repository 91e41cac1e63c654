"""Wiring of the selection core around one source image.

A CropSession bundles the image slot, display surface, crop engine,
selection store and interaction machine that together serve a single
rendering surface.
"""

from __future__ import annotations

from dataclasses import dataclass

from roicrop.config import Settings, settings
from roicrop.core.crop_engine import CropEngine
from roicrop.core.interaction import InteractionEvent, InteractionStateMachine, Transition
from roicrop.core.registry import HandleRegistry, ManipulationBinder
from roicrop.core.store import IdGenerator, SelectionStore
from roicrop.geometry import GeometryValidator
from roicrop.imaging import DisplaySurface, ImageSlot, SourceImage


@dataclass
class CropSession:
    """All collaborators of one interactive cropping surface."""

    slot: ImageSlot
    surface: DisplaySurface
    engine: CropEngine
    store: SelectionStore
    machine: InteractionStateMachine

    def dispatch(self, event: InteractionEvent) -> Transition:
        return self.machine.handle(event)

    @classmethod
    def create(
        cls,
        source: SourceImage | None = None,
        *,
        config: Settings | None = None,
        id_generator: IdGenerator | None = None,
        binder: ManipulationBinder | None = None,
    ) -> CropSession:
        """Build a session, measuring the surface by fit-to-width if possible.

        Args:
            source: Decoded image, or None to start in the "not loaded" state.
            config: Settings to read thresholds and limits from.
            id_generator: Region id source for the store.
            binder: Transform widget of the rendering surface.

        Returns:
            A wired CropSession.

        Raises:
            ConfigError: If DISPLAY_WIDTH or MIN_REGION_SIZE is not positive.
        """
        config = config or settings
        display_width = config.require_positive("DISPLAY_WIDTH")
        min_size = config.require_positive("MIN_REGION_SIZE")

        slot = ImageSlot(source)
        surface = (
            DisplaySurface.fit_to_width(source, display_width)
            if source is not None
            else DisplaySurface()
        )
        engine = CropEngine(
            slot,
            surface,
            image_format=config.CROP_FORMAT,
            max_dimension=config.MAX_CROP_DIMENSION,
        )
        store = SelectionStore(
            engine,
            id_generator=id_generator,
            validator=GeometryValidator(min_size),
            registry=HandleRegistry(),
            binder=binder,
        )
        return cls(
            slot=slot,
            surface=surface,
            engine=engine,
            store=store,
            machine=InteractionStateMachine(store),
        )
