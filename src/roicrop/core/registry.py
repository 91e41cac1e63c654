"""Region id -> rendering handle registry.

The rendering surface owns the on-screen objects that represent regions.
It registers an opaque handle for each region id; the selection store
never inspects a handle, it only passes the selected region's handle to
the manipulation binder (the resize/move widget) when the selection
changes.
"""

from __future__ import annotations

from collections.abc import Hashable
from typing import Protocol


class ManipulationBinder(Protocol):
    """The transform widget the rendering surface attaches to a region."""

    def bind(self, handle: Hashable) -> None:
        """Attach the widget to the object behind ``handle``."""
        ...

    def unbind(self) -> None:
        """Detach the widget from whatever it is attached to."""
        ...


class NullBinder:
    """Binder used when no rendering surface is attached."""

    def bind(self, handle: Hashable) -> None:
        del handle

    def unbind(self) -> None:
        pass


class HandleRegistry:
    """Maps region ids to rendering-surface handles."""

    __slots__ = ("_handles",)

    def __init__(self) -> None:
        self._handles: dict[str, Hashable] = {}

    def register(self, region_id: str, handle: Hashable) -> None:
        """Associate ``handle`` with ``region_id``, replacing any previous one."""
        self._handles[region_id] = handle

    def unregister(self, region_id: str) -> Hashable | None:
        """Forget the handle for ``region_id``.

        Returns:
            The removed handle, or None if there was none.
        """
        return self._handles.pop(region_id, None)

    def lookup(self, region_id: str | None) -> Hashable | None:
        """Return the handle for ``region_id``, or None."""
        if region_id is None:
            return None
        return self._handles.get(region_id)

    def __contains__(self, region_id: object) -> bool:
        return region_id in self._handles

    def __len__(self) -> int:
        return len(self._handles)
