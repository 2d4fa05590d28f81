"""Colour parsing and colour-space helpers.

Settings store colours as CSS strings; the renderer needs linear-space bytes.
Alpha is never gamma-encoded, so only R/G/B go through the sRGB transfer
function.
"""

import logging
import re
from functools import lru_cache
from typing import Tuple

from PIL import ImageColor

from grid_map_view.types import ByteColor, ColorRGBA

logger = logging.getLogger(__name__)

FALLBACK_COLOR: ColorRGBA = (0.0, 0.0, 0.0, 1.0)

_CSS_RGBA = re.compile(
    r"^\s*rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+)\s*)?\)\s*$",
    re.IGNORECASE,
)


def _clamp01(value: float) -> float:
    return min(1.0, max(0.0, value))


@lru_cache(maxsize=256)
def parse_color(value: str) -> ColorRGBA:
    """
    Parse a CSS colour string into floats in [0,1].

    ``rgb()``/``rgba()`` take 0-255 channels and a 0-1 alpha. Anything else
    (hex with optional alpha, named colours) is handed to Pillow. Unparseable
    input logs a warning and yields opaque black.
    """
    match = _CSS_RGBA.match(value)
    if match is not None:
        r, g, b, a = match.groups()
        return (
            _clamp01(float(r) / 255.0),
            _clamp01(float(g) / 255.0),
            _clamp01(float(b) / 255.0),
            _clamp01(float(a)) if a is not None else 1.0,
        )
    try:
        channels: Tuple[int, ...] = ImageColor.getrgb(value)
    except ValueError:
        logger.warning("Unparseable colour %r, using %r", value, FALLBACK_COLOR)
        return FALLBACK_COLOR
    if len(channels) == 3:
        channels = (*channels, 255)
    r8, g8, b8, a8 = channels
    return (r8 / 255.0, g8 / 255.0, b8 / 255.0, a8 / 255.0)


def to_rgba(color: str | ColorRGBA) -> ColorRGBA:
    if isinstance(color, str):
        return parse_color(color)
    r, g, b, a = color
    return (_clamp01(r), _clamp01(g), _clamp01(b), _clamp01(a))


def rgba_to_css_string(color: ColorRGBA) -> str:
    r, g, b, a = color
    return (
        f"rgba({round(r * 255)}, {round(g * 255)}, {round(b * 255)}, "
        f"{round(a, 3):g})"
    )


def srgb_to_linear(c: float) -> float:
    """sRGB electro-optical transfer function for a single channel in [0,1]."""
    if c <= 0.04045:
        return c / 12.92
    return ((c + 0.055) / 1.055) ** 2.4


def srgb_to_linear_uint8(color: ColorRGBA) -> ByteColor:
    """Convert an sRGB colour to linear-space bytes, truncating each channel."""
    r, g, b, a = color
    return (
        int(srgb_to_linear(r) * 255),
        int(srgb_to_linear(g) * 255),
        int(srgb_to_linear(b) * 255),
        int(a * 255),
    )
