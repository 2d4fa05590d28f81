# tests/unit/test_settings.py

import pytest
from pyrsistent import pmap

from grid_map_view.renderer.transparency import (
    colors_have_transparency,
    settings_have_transparency,
)
from grid_map_view.settings import (
    DisplaySettings,
    SettingsStore,
    resolve_settings,
    settings_node,
)


def test_defaults() -> None:
    settings = resolve_settings()
    assert settings.visible is False
    assert settings.frame_locked is False
    assert settings.min_color == "rgba(255, 255, 255, 1)"
    assert settings.max_color == "rgba(0, 0, 0, 1)"
    assert settings.unknown_color == "rgba(128, 128, 128, 1)"
    assert settings.invalid_color == "rgba(255, 0, 255, 1)"
    assert settings.layer is None


def test_resolve_returns_fresh_values() -> None:
    a = resolve_settings({"visible": True})
    b = resolve_settings()
    assert a is not b
    assert a.visible is True
    assert b.visible is False


def test_resolve_ignores_unknown_and_none() -> None:
    settings = resolve_settings({"max_color": None, "bogus": 1, "frame_locked": True})
    assert settings.max_color == DisplaySettings().max_color
    assert settings.frame_locked is True


def test_resolve_passes_settings_through() -> None:
    settings = DisplaySettings(visible=True)
    assert resolve_settings(settings) is settings


def test_store_snapshots_are_immutable() -> None:
    store = SettingsStore({"/a": {"visible": True}})
    before = store.get("/a")
    store.set("/a", "min_color", "red")
    assert "min_color" not in before
    assert store.get("/a") == pmap({"visible": True, "min_color": "red"})
    assert store.get("/b") == pmap()
    assert store.effective("/a").min_color == "red"


def test_store_replace_and_remove() -> None:
    store = SettingsStore()
    store.set("/a", "visible", True)
    store.replace("/a", {"frame_locked": True})
    assert store.get("/a") == pmap({"frame_locked": True})
    store.remove("/a")
    assert "/a" not in store.topics


def test_settings_node_uses_effective_values() -> None:
    node = settings_node("/Grid", {"min_color": "red", "visible": True}, ["a", "", "b"])
    assert node["path"] == ("topics", "/Grid")
    assert node["node"]["order"] == "/grid"
    assert node["node"]["visible"] is True
    fields = node["node"]["fields"]
    assert fields["min_color"]["value"] == "red"
    assert fields["max_color"]["value"] == DisplaySettings().max_color
    assert fields["frame_locked"]["input"] == "boolean"
    assert list(fields["layer"]["options"]) == ["a", "b"]


def test_default_colors_are_opaque() -> None:
    assert settings_have_transparency(DisplaySettings()) is False


@pytest.mark.parametrize(
    "field", ["min_color", "max_color", "unknown_color", "invalid_color"]
)
def test_any_translucent_color_needs_transparency(field: str) -> None:
    translucent = resolve_settings({field: "rgba(10, 20, 30, 0.5)"})
    assert settings_have_transparency(translucent) is True
    restored = resolve_settings({field: "rgba(10, 20, 30, 1)"})
    assert settings_have_transparency(restored) is False


def test_colors_have_transparency() -> None:
    assert colors_have_transparency([(0, 0, 0, 1), (1, 1, 1, 0.999)]) is True
    assert colors_have_transparency([]) is False
