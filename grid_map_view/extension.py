"""Grid map orchestration.

:class:`GridMaps` is the per-topic entry point for grid map messages and
display setting changes. One message runs the whole pipeline:

1. decode (:func:`grid_map_view.decode.normalize_grid_map`);
2. validate layer shapes; a failure records an ``INVALID_GRID_MAP``
   diagnostic and abandons the update, leaving the last good raster as is;
3. create or fetch the topic's :class:`grid_map_view.cache.RenderState`,
   reallocating the raster only if the grid dimensions changed;
4. recolour every cell of the active layer;
5. recompute the display transform and notify the surface.

Settings changes re-enter at step 4 with the stored grid. The blend state of
the surface is touched only when the transparency decision flips.

Topics never share state; an error on one topic has no effect on another.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from pyrsistent import PMap, pmap

from grid_map_view.cache import RasterCache, RenderState
from grid_map_view.components import DisplayTransform, Grid, Time, to_nanosec
from grid_map_view.decode import normalize_grid_map
from grid_map_view.diagnostics import DiagnosticsSink, TopicDiagnostics
from grid_map_view.errors import GridMapShapeError
from grid_map_view.renderer.ramp import RampColors, cell_values, colorize
from grid_map_view.renderer.transparency import settings_have_transparency
from grid_map_view.settings import (
    SETTINGS_ROOT,
    DisplaySettings,
    SettingsStore,
    resolve_settings,
    settings_node,
    settings_overrides,
)
from grid_map_view.surface import NullSurface, RenderSurface
from grid_map_view.types import DiagnosticCode, Nanoseconds, Topic, UInt8Array
from grid_map_view.utils.shape import validate_layer_shapes

logger = logging.getLogger(__name__)

SettingsPath = Sequence[str]


def normalize_frame_id(frame_id: str) -> str:
    return frame_id[1:] if frame_id.startswith("/") else frame_id


def display_transform(grid: Grid) -> DisplayTransform:
    resolution = grid.info.resolution
    return DisplayTransform(
        scale=(resolution * grid.width, resolution * grid.height, 1.0),
        pose=grid.info.pose,
        frame_id=normalize_frame_id(grid.header.frame_id),
    )


def _receive_nanosec(receive_time: Time | Nanoseconds | None) -> Nanoseconds:
    if receive_time is None:
        return 0
    if isinstance(receive_time, Time):
        return to_nanosec(receive_time)
    return int(receive_time)


class GridMaps:
    """Grid map scene extension.

    Args:
        surface: Receives raster uploads, transforms and blend state.
        settings: Per-topic setting overrides; shared with the settings editor.
        diagnostics: Sink for topic-scoped errors.
    """

    def __init__(
        self,
        surface: Optional[RenderSurface] = None,
        settings: Optional[SettingsStore] = None,
        diagnostics: Optional[DiagnosticsSink] = None,
    ) -> None:
        self.surface: RenderSurface = surface if surface is not None else NullSurface()
        self.settings = settings if settings is not None else SettingsStore()
        self.diagnostics: DiagnosticsSink = (
            diagnostics if diagnostics is not None else TopicDiagnostics()
        )
        self.cache = RasterCache()

    # -------- Inbound events --------

    def on_message(
        self,
        topic: Topic,
        message: Any,
        receive_time: Time | Nanoseconds | None = None,
    ) -> bool:
        """Process one grid map message for ``topic``.

        Returns:
            bool: True if the topic's raster was updated, False if the update
            was abandoned (a diagnostic explains why).
        """
        grid = normalize_grid_map(message)
        width, height = grid.width, grid.height
        try:
            validate_layer_shapes(width, height, grid.layers)
        except GridMapShapeError as exc:
            logger.warning("Invalid grid map on %s: %s", topic, exc)
            self.diagnostics.add(topic, DiagnosticCode.INVALID_GRID_MAP, str(exc))
            return False

        state = self.cache.get(topic)
        try:
            if state is None:
                settings = self.settings.effective(topic)
                transparent = settings_have_transparency(settings)
                state = self.cache.create(topic, grid, settings, transparent)
                self.surface.set_transparent(topic, transparent)
            else:
                self.cache.ensure_size(state, width, height)
        except MemoryError:
            logger.error(
                "Could not allocate a %dx%d raster for %s", width, height, topic
            )
            self.diagnostics.add(
                topic,
                DiagnosticCode.RASTER_ALLOCATION_FAILED,
                f"Could not allocate a {width}x{height} raster",
            )
            return False

        state.grid = grid
        state.receive_time = _receive_nanosec(receive_time)
        state.message_time = to_nanosec(grid.header.stamp)
        self._recolor(state)
        state.transform = display_transform(grid)
        self.surface.set_transform(topic, state.transform)
        return True

    def on_settings_changed(
        self, topic: Topic, new_settings: Mapping[str, Any] | DisplaySettings
    ) -> None:
        """Replace the display settings of ``topic`` and recolour its raster.

        ``new_settings`` is either the full effective settings or a sparse
        override mapping; either way it replaces the stored overrides.
        """
        if isinstance(new_settings, DisplaySettings):
            overrides: Mapping[str, Any] = settings_overrides(new_settings)
        else:
            overrides = new_settings
        self.settings.replace(topic, overrides)
        self._apply_settings(topic)

    def handle_settings_action(
        self, action: str, path: SettingsPath, value: Any
    ) -> None:
        """Apply an editor action addressed as ``("topics", topic, field)``.

        Only ``"update"`` actions with a three element path are handled.
        """
        if action != "update" or len(path) != 3 or path[0] != SETTINGS_ROOT:
            return
        topic, name = path[1], path[2]
        self.settings.set(topic, name, value)
        self._apply_settings(topic)

    def dispose(self, topic: Topic) -> None:
        """Release everything held for ``topic``."""
        if self.cache.dispose(topic):
            self.surface.release(topic)
        self.diagnostics.remove_topic(topic)

    def dispose_all(self) -> None:
        for topic in list(self.cache):
            self.dispose(topic)

    # -------- Queries --------

    def get_raster(self, topic: Topic) -> Optional[Tuple[UInt8Array, int, int]]:
        state = self.cache.get(topic)
        if state is None:
            return None
        return state.raster, state.width, state.height

    def get_transform(self, topic: Topic) -> Optional[DisplayTransform]:
        state = self.cache.get(topic)
        return state.transform if state is not None else None

    def details(self, topic: Topic) -> PMap[str, Any]:
        state = self.cache.get(topic)
        return state.grid.description if state is not None else pmap()

    def settings_nodes(self, topics: Iterable[Topic]) -> List[PMap[str, Any]]:
        """Settings editor entries for ``topics``, ordered by lower-cased name."""
        nodes: List[PMap[str, Any]] = []
        for topic in topics:
            state = self.cache.get(topic)
            labels = [layer.label for layer in state.grid.layers] if state else []
            nodes.append(settings_node(topic, self.settings.get(topic), labels))
        return sorted(nodes, key=lambda node: node["node"]["order"])

    # -------- Internal helpers --------

    def _apply_settings(self, topic: Topic) -> None:
        state = self.cache.get(topic)
        if state is None:
            return
        prev_transparent = state.transparent
        state.settings = resolve_settings(self.settings.get(topic))
        state.transparent = settings_have_transparency(state.settings)
        if state.transparent != prev_transparent:
            self.surface.set_transparent(topic, state.transparent)
        self._recolor(state)

    def _recolor(self, state: RenderState) -> None:
        layer = state.grid.layer(state.settings.layer)
        values = cell_values(layer, state.width * state.height)
        colorize(values, RampColors.from_settings(state.settings), state.raster)
        logger.debug(
            "Recoloured %s (%dx%d, layer %r)",
            state.topic,
            state.width,
            state.height,
            layer.label if layer is not None else None,
        )
        self.surface.upload(state.topic, state.raster, state.width, state.height)
