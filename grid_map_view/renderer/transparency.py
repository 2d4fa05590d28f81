from typing import Iterable

from grid_map_view.settings import DisplaySettings
from grid_map_view.types import ColorRGBA


def colors_have_transparency(colors: Iterable[ColorRGBA]) -> bool:
    return any(a < 1.0 for _, _, _, a in colors)


def settings_have_transparency(settings: DisplaySettings) -> bool:
    """True if any of the four configured colours is not fully opaque.

    Evaluated on the sRGB values as configured; the alpha channel is the same
    before and after linearisation anyway.
    """
    return colors_have_transparency(settings.colors())
