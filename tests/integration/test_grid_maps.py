# tests/integration/test_grid_maps.py

import gc
import weakref

import numpy as np
import pytest

from grid_map_view.components import Time
from grid_map_view.extension import GridMaps
from grid_map_view.renderer.ramp import RampColors, ramp_color
from grid_map_view.settings import DisplaySettings, resolve_settings
from grid_map_view.surface import ImageSurface
from grid_map_view.types import DiagnosticCode
from tests.test_utils import (
    make_bad_message,
    make_grid_maps,
    make_message,
    make_values,
)


def test_first_message_creates_raster() -> None:
    grid_maps, surface = make_grid_maps()
    assert grid_maps.on_message("/map", make_message(3, 2), Time(5, 0)) is True

    raster, width, height = grid_maps.get_raster("/map")
    assert (width, height) == (3, 2)
    assert raster.size == 3 * 2 * 4
    assert surface.uploads[-1][:3] == ("/map", 3, 2)
    assert surface.transparent_calls == [("/map", False)]
    state = grid_maps.cache.get("/map")
    assert state is not None
    assert state.receive_time == 5_000_000_000


def test_raster_follows_ramp() -> None:
    grid_maps, _ = make_grid_maps()
    values = np.array([[-1, 0], [50, 100], [101, -2]], dtype=np.float32)
    grid_maps.on_message("/map", make_message(2, 3, values))

    raster, _, _ = grid_maps.get_raster("/map")
    colors = RampColors.from_settings(DisplaySettings())
    packed = values.flatten(order="F")
    expected = np.array([ramp_color(int(v), colors) for v in packed], dtype=np.uint8)
    np.testing.assert_array_equal(raster.reshape(-1, 4), expected)
    pixels = raster.reshape(-1, 4)
    assert tuple(pixels[0]) == colors.unknown
    assert tuple(pixels[1]) == (127, 127, 127, 255)  # 50 between white and black
    assert tuple(pixels[4]) == (0, 0, 0, 0)  # 100 is hidden


def test_transform_and_frame() -> None:
    grid_maps, surface = make_grid_maps()
    grid_maps.on_message("/map", make_message(4, 2, resolution=0.5, frame_id="/odom"))

    transform = grid_maps.get_transform("/map")
    assert transform is not None
    assert transform.scale == (2.0, 1.0, 1.0)
    assert transform.frame_id == "odom"
    assert surface.transforms["/map"] == transform


def test_invalid_first_message_leaves_topic_absent() -> None:
    grid_maps, surface = make_grid_maps()
    assert grid_maps.on_message("/map", make_bad_message(2, 2, [{"size": 4}])) is False

    assert grid_maps.get_raster("/map") is None
    assert grid_maps.get_transform("/map") is None
    assert surface.uploads == []
    assert grid_maps.diagnostics.has("/map", DiagnosticCode.INVALID_GRID_MAP)


def test_invalid_message_keeps_last_good_raster() -> None:
    grid_maps, surface = make_grid_maps()
    grid_maps.on_message("/map", make_message(2, 2))
    raster, _, _ = grid_maps.get_raster("/map")
    before = raster.tobytes()
    uploads = len(surface.uploads)

    bad = make_bad_message(2, 2, [{"size": 3}, {"size": 3}])
    bad["data"][0]["data"] = [-1.0] * 4
    assert grid_maps.on_message("/map", bad) is False

    after, _, _ = grid_maps.get_raster("/map")
    assert after is raster
    assert after.tobytes() == before
    assert len(surface.uploads) == uploads
    errors = grid_maps.diagnostics.get("/map")
    assert "width 2 * height 2" in errors[DiagnosticCode.INVALID_GRID_MAP]


def test_repeated_errors_are_deduplicated() -> None:
    grid_maps, _ = make_grid_maps()
    grid_maps.on_message("/map", make_bad_message(2, 2, [{"size": 1}]))
    grid_maps.on_message("/map", make_bad_message(2, 2, [{"size": 1}, {"size": 9}]))

    errors = grid_maps.diagnostics.get("/map")
    assert list(errors.keys()) == [DiagnosticCode.INVALID_GRID_MAP]
    assert "size 10" in errors[DiagnosticCode.INVALID_GRID_MAP]


def test_next_valid_message_recovers() -> None:
    grid_maps, _ = make_grid_maps()
    grid_maps.on_message("/map", make_bad_message(2, 2, [{"size": 1}]))
    assert grid_maps.on_message("/map", make_message(2, 2)) is True
    assert grid_maps.get_raster("/map") is not None


def test_same_size_reuses_buffer() -> None:
    grid_maps, _ = make_grid_maps()
    grid_maps.on_message("/map", make_message(4, 4))
    first, _, _ = grid_maps.get_raster("/map")
    grid_maps.on_message("/map", make_message(4, 4, make_values(4, 4, fill=-1)))
    second, _, _ = grid_maps.get_raster("/map")

    assert second is first
    unknown = RampColors.from_settings(DisplaySettings()).unknown
    assert all(tuple(px) == unknown for px in second.reshape(-1, 4))


def test_resize_allocates_new_buffer_and_releases_old() -> None:
    grid_maps, _ = make_grid_maps()
    grid_maps.on_message("/map", make_message(4, 4, make_values(4, 4, fill=-1)))
    old, _, _ = grid_maps.get_raster("/map")
    old_ref = weakref.ref(old)
    del old

    grid_maps.on_message("/map", make_message(8, 8, make_values(8, 8, fill=0)))
    raster, width, height = grid_maps.get_raster("/map")
    assert (width, height) == (8, 8)
    assert raster.size == 8 * 8 * 4
    # every cell repainted with the min colour, nothing left from the old grid
    assert np.all(raster == 255)

    gc.collect()
    assert old_ref() is None


def test_settings_update_is_idempotent() -> None:
    grid_maps, surface = make_grid_maps()
    grid_maps.on_message("/map", make_message(3, 3))
    raster, _, _ = grid_maps.get_raster("/map")
    settings = {"min_color": "rgba(255, 0, 0, 1)", "max_color": "rgba(0, 0, 255, 1)"}

    grid_maps.on_settings_changed("/map", settings)
    first = raster.tobytes()
    grid_maps.on_settings_changed("/map", settings)
    second, _, _ = grid_maps.get_raster("/map")

    assert second is raster
    assert second.tobytes() == first
    assert tuple(second.reshape(-1, 4)[0]) == (255, 0, 0, 255)
    assert surface.uploads[-1][3] == surface.uploads[-2][3]


def test_settings_update_does_not_decode_again() -> None:
    grid_maps, _ = make_grid_maps()
    grid_maps.on_message("/map", make_message(2, 2))
    grid = grid_maps.cache.get("/map").grid
    grid_maps.on_settings_changed("/map", DisplaySettings(visible=True))
    state = grid_maps.cache.get("/map")
    assert state.grid is grid
    assert state.settings.visible is True


def test_transparency_flips_only_on_change() -> None:
    grid_maps, surface = make_grid_maps()
    grid_maps.on_message("/map", make_message(2, 2))
    assert surface.transparent_calls == [("/map", False)]

    grid_maps.on_settings_changed("/map", {"unknown_color": "rgba(128, 128, 128, 0.5)"})
    assert surface.transparent_calls[-1] == ("/map", True)
    grid_maps.on_settings_changed("/map", {"unknown_color": "rgba(0, 128, 128, 0.5)"})
    assert len(surface.transparent_calls) == 2

    grid_maps.on_settings_changed("/map", {"unknown_color": "rgba(128, 128, 128, 1)"})
    assert surface.transparent_calls[-1] == ("/map", False)
    assert len(surface.transparent_calls) == 3


def test_initial_settings_come_from_store() -> None:
    grid_maps, surface = make_grid_maps(
        {"/map": {"max_color": "rgba(0, 0, 0, 0.2)", "visible": True}}
    )
    grid_maps.on_message("/map", make_message(2, 2))
    assert surface.transparent_calls == [("/map", True)]
    assert grid_maps.cache.get("/map").settings.visible is True


def test_settings_before_first_message_are_kept() -> None:
    grid_maps, _ = make_grid_maps()
    grid_maps.on_settings_changed("/map", {"min_color": "rgba(0, 255, 0, 1)"})
    assert grid_maps.get_raster("/map") is None

    grid_maps.on_message("/map", make_message(1, 2, make_values(1, 2, fill=0)))
    raster, _, _ = grid_maps.get_raster("/map")
    assert tuple(raster[:4]) == (0, 255, 0, 255)


def test_settings_action_updates_one_field() -> None:
    grid_maps, _ = make_grid_maps()
    grid_maps.on_message("/map", make_message(2, 2, make_values(2, 2, fill=0)))

    grid_maps.handle_settings_action(
        "update", ("topics", "/map", "min_color"), "rgba(0, 0, 255, 1)"
    )
    raster, _, _ = grid_maps.get_raster("/map")
    assert tuple(raster[:4]) == (0, 0, 255, 255)
    assert grid_maps.settings.get("/map")["min_color"] == "rgba(0, 0, 255, 1)"


def test_settings_action_ignores_other_actions_and_paths() -> None:
    grid_maps, _ = make_grid_maps()
    grid_maps.handle_settings_action("perform-node-action", ("topics", "/map", "x"), 1)
    grid_maps.handle_settings_action("update", ("topics", "/map"), 1)
    grid_maps.handle_settings_action("update", ("other", "/map", "visible"), True)
    assert len(grid_maps.settings.topics) == 0


def test_layer_selector() -> None:
    grid_maps, _ = make_grid_maps()
    message = make_message(2, 1, make_values(2, 1, fill=0))
    other = make_message(2, 1, make_values(2, 1, fill=-1), label="occupancy")
    message["layers"].append("occupancy")
    message["data"].append(other["data"][0])
    grid_maps.on_message("/map", message)

    raster, _, _ = grid_maps.get_raster("/map")
    assert tuple(raster[:4]) == (255, 255, 255, 255)

    grid_maps.on_settings_changed("/map", {"layer": "occupancy"})
    unknown = RampColors.from_settings(resolve_settings()).unknown
    assert tuple(raster[:4]) == unknown


def test_failure_is_contained_to_topic() -> None:
    grid_maps, _ = make_grid_maps()
    grid_maps.on_message("/a", make_message(2, 2))
    grid_maps.on_message("/b", make_message(3, 3))
    grid_maps.on_settings_changed("/b", {"visible": True})
    b_raster, _, _ = grid_maps.get_raster("/b")
    b_bytes = b_raster.tobytes()
    b_settings = grid_maps.cache.get("/b").settings

    assert grid_maps.on_message("/a", make_bad_message(2, 2, [{"size": 1}])) is False

    after, _, _ = grid_maps.get_raster("/b")
    assert after.tobytes() == b_bytes
    assert grid_maps.cache.get("/b").settings == b_settings
    assert grid_maps.diagnostics.get("/b") == {}


def test_allocation_failure_keeps_previous_raster(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    grid_maps, _ = make_grid_maps()
    grid_maps.on_message("/map", make_message(2, 2))
    raster, _, _ = grid_maps.get_raster("/map")

    def fail(width: int, height: int) -> np.ndarray:
        raise MemoryError

    monkeypatch.setattr("grid_map_view.cache.allocate_raster", fail)
    assert grid_maps.on_message("/map", make_message(8, 8)) is False

    after, width, height = grid_maps.get_raster("/map")
    assert after is raster
    assert (width, height) == (2, 2)
    assert grid_maps.diagnostics.has("/map", DiagnosticCode.RASTER_ALLOCATION_FAILED)


def test_overflowing_extent_is_contained() -> None:
    grid_maps, _ = make_grid_maps()
    message = {"info": {"resolution": 1e-300, "length_x": 1e300, "length_y": 1.0}, "data": []}
    assert grid_maps.on_message("/map", message) is True

    raster, _, height = grid_maps.get_raster("/map")
    assert height == 0
    assert raster.size == 0


def test_huge_grid_records_allocation_failure() -> None:
    grid_maps, _ = make_grid_maps()
    huge = {"info": {"resolution": 1e-6, "length_x": 1e7, "length_y": 1e7}, "data": []}
    assert grid_maps.on_message("/new", huge) is False
    assert grid_maps.get_raster("/new") is None
    assert grid_maps.diagnostics.has("/new", DiagnosticCode.RASTER_ALLOCATION_FAILED)

    grid_maps.on_message("/map", make_message(2, 2))
    raster, _, _ = grid_maps.get_raster("/map")
    before = raster.tobytes()
    assert grid_maps.on_message("/map", huge) is False
    after, width, height = grid_maps.get_raster("/map")
    assert after is raster
    assert after.tobytes() == before
    assert (width, height) == (2, 2)
    assert grid_maps.diagnostics.has("/map", DiagnosticCode.RASTER_ALLOCATION_FAILED)


def test_dispose_releases_topic() -> None:
    grid_maps, surface = make_grid_maps()
    grid_maps.on_message("/map", make_message(2, 2))
    grid_maps.on_message("/map", make_bad_message(2, 2, [{"size": 1}]))

    grid_maps.dispose("/map")
    assert grid_maps.get_raster("/map") is None
    assert surface.released == ["/map"]
    assert grid_maps.diagnostics.get("/map") == {}

    grid_maps.dispose("/map")
    assert surface.released == ["/map"]


def test_dispose_all() -> None:
    grid_maps, surface = make_grid_maps()
    grid_maps.on_message("/a", make_message(2, 2))
    grid_maps.on_message("/b", make_message(2, 2))
    grid_maps.dispose_all()
    assert len(grid_maps.cache) == 0
    assert sorted(surface.released) == ["/a", "/b"]


def test_details_and_settings_nodes() -> None:
    grid_maps, _ = make_grid_maps()
    grid_maps.on_message("/b", make_message(2, 2))
    assert grid_maps.details("/b")["layers"][0]["label"] == "elevation"
    assert grid_maps.details("/missing") == {}

    nodes = grid_maps.settings_nodes(["/b", "/A"])
    assert [node["node"]["label"] for node in nodes] == ["/A", "/b"]
    assert list(nodes[1]["node"]["fields"]["layer"]["options"]) == ["elevation"]


def test_image_surface_mirrors_raster() -> None:
    surface = ImageSurface()
    grid_maps = GridMaps(surface=surface)
    grid_maps.on_message("/map", make_message(3, 2))
    raster, width, height = grid_maps.get_raster("/map")

    image = surface.images["/map"]
    assert image.mode == "RGBA"
    assert image.size == (width, height)
    assert image.tobytes() == raster.tobytes()
    assert surface.materials["/map"].depth_write is True

    grid_maps.on_settings_changed("/map", {"min_color": "rgba(255, 255, 255, 0.5)"})
    material = surface.materials["/map"]
    assert material.transparent is True
    assert material.depth_write is False
    assert material.version == 2

    grid_maps.dispose("/map")
    assert "/map" not in surface.images
