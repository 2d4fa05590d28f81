"""Four-colour ramp.

Policy, in priority order:

* ``-1`` (unknown) -> unknown colour.
* ``0..100`` -> linear blend from min to max colour by ``value / 100``;
  ``100`` itself is fully transparent black so saturated cells are hidden.
* anything else -> invalid colour.

Colours are linear-space bytes (see
:func:`grid_map_view.utils.color.srgb_to_linear_uint8`); interpolated channels
are truncated, not rounded.
"""

from dataclasses import dataclass

import numpy as np

from grid_map_view.components import Layer
from grid_map_view.settings import DisplaySettings
from grid_map_view.types import ByteColor, IntArray, UInt8Array
from grid_map_view.utils.color import srgb_to_linear_uint8

UNKNOWN_VALUE = -1
MIN_VALUE = 0
MAX_VALUE = 100
HIDDEN_COLOR: ByteColor = (0, 0, 0, 0)


@dataclass(frozen=True)
class RampColors:
    """Linear-space byte colours for one recolour pass."""

    min: ByteColor
    max: ByteColor
    unknown: ByteColor
    invalid: ByteColor

    @classmethod
    def from_settings(cls, settings: DisplaySettings) -> "RampColors":
        min_color, max_color, unknown_color, invalid_color = settings.colors()
        return cls(
            min=srgb_to_linear_uint8(min_color),
            max=srgb_to_linear_uint8(max_color),
            unknown=srgb_to_linear_uint8(unknown_color),
            invalid=srgb_to_linear_uint8(invalid_color),
        )


def ramp_color(value: int, colors: RampColors) -> ByteColor:
    """Colour of a single cell value."""
    if value == UNKNOWN_VALUE:
        return colors.unknown
    if MIN_VALUE <= value <= MAX_VALUE:
        t = value / MAX_VALUE
        if t == 1:
            return HIDDEN_COLOR
        r, g, b, a = (
            int(lo + (hi - lo) * t) for lo, hi in zip(colors.min, colors.max)
        )
        return (r, g, b, a)
    return colors.invalid


def cell_values(layer: Layer | None, size: int) -> IntArray:
    """Integer cell values of ``layer`` for a grid of ``size`` cells.

    Reading starts at the layout's ``data_offset``. Missing cells read as 0,
    non-finite values become 0 and finite values are truncated toward zero.
    """
    values = np.zeros(size, dtype=np.int64)
    if layer is None or size == 0:
        return values
    offset = max(0, layer.layout.data_offset)
    data = layer.data[offset : offset + size].astype(np.float64)
    finite = np.isfinite(data)
    # clip before the cast so huge values stay out of [-1, 100] without overflow
    data = np.clip(np.where(finite, np.trunc(data), 0.0), -(2**31), 2**31 - 1)
    values[: data.size] = data.astype(np.int64)
    return values


def colorize(values: IntArray, colors: RampColors, out: UInt8Array) -> None:
    """Write the RGBA colour of every value into ``out`` (flat, ``len(values) * 4``)."""
    if out.size != values.size * 4:
        raise ValueError(
            f"Raster holds {out.size} bytes, expected {values.size * 4}"
        )
    pixels = out.reshape(-1, 4)
    unknown = values == UNKNOWN_VALUE
    in_range = (values >= MIN_VALUE) & (values <= MAX_VALUE)
    hidden = values == MAX_VALUE
    blended = in_range & ~hidden

    pixels[~in_range & ~unknown] = colors.invalid
    pixels[unknown] = colors.unknown
    pixels[hidden] = HIDDEN_COLOR

    lo = np.asarray(colors.min, dtype=np.float64)
    hi = np.asarray(colors.max, dtype=np.float64)
    t = values[blended].astype(np.float64)[:, None] / MAX_VALUE
    pixels[blended] = (lo + (hi - lo) * t).astype(np.uint8)

