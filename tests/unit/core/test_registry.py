"""Tests for the handle registry."""

from __future__ import annotations

from roicrop.core import HandleRegistry, NullBinder


def test_register_and_lookup() -> None:
    registry = HandleRegistry()
    registry.register("selection-0", "rect-a")
    assert registry.lookup("selection-0") == "rect-a"
    assert "selection-0" in registry
    assert len(registry) == 1


def test_register_replaces_handle() -> None:
    registry = HandleRegistry()
    registry.register("selection-0", "rect-a")
    registry.register("selection-0", "rect-b")
    assert registry.lookup("selection-0") == "rect-b"
    assert len(registry) == 1


def test_lookup_missing_and_none() -> None:
    registry = HandleRegistry()
    assert registry.lookup("selection-9") is None
    assert registry.lookup(None) is None


def test_unregister_returns_handle() -> None:
    registry = HandleRegistry()
    registry.register("selection-0", 7)
    assert registry.unregister("selection-0") == 7
    assert registry.unregister("selection-0") is None
    assert "selection-0" not in registry


def test_null_binder_accepts_calls() -> None:
    binder = NullBinder()
    binder.bind("anything")
    binder.unbind()
