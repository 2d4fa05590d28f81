"""Synthetic grid map messages for demos and tests.

Messages are built as plain dictionaries, the same loosely typed shape the
decoder receives from a subscription. Cell arrays are given as
``(height, width)`` NumPy arrays (rows along X, columns along Y) and packed
column-major on the way out.
"""

from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import numpy.typing as npt

UNKNOWN = -1.0
INVALID = 255.0


def declared_dims(width: int, height: int) -> List[Dict[str, Any]]:
    """Layout dimensions accepted for a ``width`` x ``height`` grid.

    The validator compares the *summed* dimension sizes with the cell count,
    so ``row_index`` carries the row count and ``column_index`` the rest.
    """
    size = width * height
    return [
        {"label": "column_index", "size": max(0, size - height), "stride": size},
        {"label": "row_index", "size": height, "stride": height},
    ]


def layer_message(values: npt.NDArray[Any]) -> Dict[str, Any]:
    height, width = values.shape
    return {
        "layout": {
            "dim": declared_dims(width, height),
            "data_offset": 0,
        },
        "data": np.asarray(values, dtype=np.float32).flatten(order="F").tolist(),
    }


def grid_map_message(
    layers: Dict[str, npt.NDArray[Any]],
    resolution: float = 0.1,
    frame_id: str = "map",
    stamp: Tuple[int, int] = (0, 0),
    position: Tuple[float, float, float] = (0.0, 0.0, 0.0),
) -> Dict[str, Any]:
    """Build a grid map message from named ``(height, width)`` arrays.

    All arrays must share one shape; ``length_x``/``length_y`` are derived
    from it and ``resolution``.
    """
    shapes = {values.shape for values in layers.values()}
    if len(shapes) > 1:
        raise ValueError(f"Layers have different shapes: {sorted(shapes)}")
    height, width = shapes.pop() if shapes else (0, 0)
    x, y, z = position
    return {
        "header": {
            "stamp": {"sec": stamp[0], "nanosec": stamp[1]},
            "frame_id": frame_id,
        },
        "info": {
            "resolution": resolution,
            "length_x": height * resolution,
            "length_y": width * resolution,
            "pose": {
                "position": {"x": x, "y": y, "z": z},
                "orientation": {"x": 0.0, "y": 0.0, "z": 0.0, "w": 1.0},
            },
        },
        "layers": list(layers.keys()),
        "data": [layer_message(values) for values in layers.values()],
    }


def radial_ramp(
    width: int,
    height: int,
    unknown_fraction: float = 0.0,
    invalid_fraction: float = 0.0,
    seed: Optional[int] = None,
) -> npt.NDArray[np.float32]:
    """Values 0..100 growing with distance from the centre, plus sentinel noise."""
    rows, cols = np.mgrid[0:height, 0:width].astype(np.float32)
    cy, cx = (height - 1) / 2.0, (width - 1) / 2.0
    distance = np.hypot(rows - cy, cols - cx)
    peak = float(distance.max()) or 1.0
    values = np.floor(distance / peak * 100.0).astype(np.float32)

    rng = np.random.default_rng(seed)
    noise = rng.random(values.shape)
    values[noise < unknown_fraction] = UNKNOWN
    values[(noise >= unknown_fraction) & (noise < unknown_fraction + invalid_fraction)] = INVALID
    return values
