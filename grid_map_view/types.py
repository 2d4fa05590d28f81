"""Common type aliases and enumerations.

``Topic`` keys partition every per-source structure (render state, settings
overrides, diagnostics). Colours travel as ``ColorRGBA`` tuples of floats in
``[0, 1]`` until they are converted to linear bytes for a recolour pass.
"""

from enum import StrEnum
from typing import Tuple

import numpy as np
import numpy.typing as npt

Topic = str
Nanoseconds = int

ColorRGBA = Tuple[float, float, float, float]
ByteColor = Tuple[int, int, int, int]
Scale = Tuple[float, float, float]

FloatArray = npt.NDArray[np.float32]
IntArray = npt.NDArray[np.int64]
UInt8Array = npt.NDArray[np.uint8]


class DiagnosticCode(StrEnum):
    """Fixed codes under which topic diagnostics are reported."""

    INVALID_GRID_MAP = "INVALID_GRID_MAP"
    RASTER_ALLOCATION_FAILED = "RASTER_ALLOCATION_FAILED"
