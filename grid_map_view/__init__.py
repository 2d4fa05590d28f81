"""grid_map_view
=================

Turns stamped, pose-anchored grid map messages into colour rasters that a
rendering surface can upload as a texture.

Pipeline (per topic):

1. :func:`grid_map_view.decode.normalize_grid_map` converts a loosely typed
   message into a strict :class:`grid_map_view.components.Grid`.
2. :func:`grid_map_view.utils.shape.validate_layer_shapes` checks every layer
   against the grid's declared size.
3. :class:`grid_map_view.cache.RasterCache` reuses or reallocates the topic's
   raster buffer.
4. :func:`grid_map_view.renderer.ramp.colorize` fills the raster.

:class:`grid_map_view.extension.GridMaps` wires these steps together and is the
entry point for message and settings events.
"""

from grid_map_view.extension import GridMaps
from grid_map_view.settings import DisplaySettings, SettingsStore, resolve_settings
from grid_map_view.surface import ImageSurface, NullSurface, RenderSurface

__all__ = [
    "GridMaps",
    "DisplaySettings",
    "SettingsStore",
    "resolve_settings",
    "ImageSurface",
    "NullSurface",
    "RenderSurface",
]
