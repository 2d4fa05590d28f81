"""Rendering subpackage.

Turns the active layer of a :class:`grid_map_view.components.Grid` into RGBA
bytes:

* :mod:`grid_map_view.renderer.ramp` maps cell values through the four-colour
  ramp (min/max gradient plus unknown and invalid sentinels).
* :mod:`grid_map_view.renderer.transparency` decides whether the configured
  colours need alpha blending.

Both are pure functions over NumPy arrays; buffer ownership lives in
:mod:`grid_map_view.cache`.
"""
