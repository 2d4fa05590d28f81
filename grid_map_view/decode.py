"""Boundary decoding of loosely typed grid map messages.

Incoming messages may be plain mappings (deserialized JSON / CDR dicts) or
attribute objects (generated message classes), and any field may be absent.
Everything is normalised here, once; the rest of the package only sees the
strict :class:`grid_map_view.components.Grid`.

Absent or malformed fields become defaults, never errors:

* ``info.resolution`` / ``length_x`` / ``length_y`` -> ``0``
* ``info.pose`` -> identity pose
* ``header.stamp`` -> zero time, ``header.frame_id`` -> ``""``
* ``layers`` names -> ``""``; ``data`` -> no layers
"""

import logging
import math
from typing import Any, Iterable, List, Mapping, Tuple

import numpy as np

from grid_map_view.components import (
    Grid,
    GridInfo,
    Header,
    Layer,
    MultiArrayDimension,
    MultiArrayLayout,
    Pose,
    Quaternion,
    Time,
    Vector3,
)
from grid_map_view.types import FloatArray

logger = logging.getLogger(__name__)


def _get(obj: Any, name: str, default: Any = None) -> Any:
    if obj is None:
        return default
    if isinstance(obj, Mapping):
        value = obj.get(name, default)
    else:
        value = getattr(obj, name, default)
    return default if value is None else value


def _float(value: Any, default: float = 0.0) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def _sequence(value: Any) -> Tuple[Any, ...]:
    if value is None or isinstance(value, (str, bytes, Mapping)):
        return ()
    try:
        return tuple(value)
    except TypeError:
        return ()


def normalize_time(time: Any) -> Time:
    """Accepts ROS 2 (``sec``/``nanosec``) and ROS 1 (``sec``/``nsec``) stamps."""
    sec = _int(_get(time, "sec", 0))
    nanosec = _int(_get(time, "nanosec", _get(time, "nsec", 0)))
    return Time(sec=sec, nanosec=nanosec)


def normalize_header(header: Any) -> Header:
    frame_id = _get(header, "frame_id", "")
    return Header(
        stamp=normalize_time(_get(header, "stamp")),
        frame_id=frame_id if isinstance(frame_id, str) else str(frame_id),
    )


def normalize_pose(pose: Any) -> Pose:
    position = _get(pose, "position")
    orientation = _get(pose, "orientation")
    return Pose(
        position=Vector3(
            x=_float(_get(position, "x", 0.0)),
            y=_float(_get(position, "y", 0.0)),
            z=_float(_get(position, "z", 0.0)),
        ),
        orientation=Quaternion(
            x=_float(_get(orientation, "x", 0.0)),
            y=_float(_get(orientation, "y", 0.0)),
            z=_float(_get(orientation, "z", 0.0)),
            w=_float(_get(orientation, "w", 1.0), 1.0),
        ),
    )


def normalize_layout(layout: Any) -> MultiArrayLayout:
    dims = tuple(
        MultiArrayDimension(
            label=str(_get(dim, "label", "")),
            size=_int(_get(dim, "size", 0)),
            stride=_int(_get(dim, "stride", 0)),
        )
        for dim in _sequence(_get(layout, "dim"))
    )
    return MultiArrayLayout(dim=dims, data_offset=_int(_get(layout, "data_offset", 0)))


def normalize_float32_array(data: Any) -> FloatArray:
    """Coerce cell data to a read-only float32 array.

    Data that cannot be interpreted as numbers is dropped with a warning.
    """
    if data is None:
        return np.zeros(0, dtype=np.float32)
    try:
        array = np.array(data, dtype=np.float32).reshape(-1)
    except (TypeError, ValueError) as exc:
        logger.warning("Dropping non-numeric layer data: %s", exc)
        return np.zeros(0, dtype=np.float32)
    array.setflags(write=False)
    return array


def normalize_layers(labels: Iterable[Any], arrays: Iterable[Any]) -> Tuple[Layer, ...]:
    names: List[Any] = list(labels)
    layers: List[Layer] = []
    for index, array in enumerate(arrays):
        label = names[index] if index < len(names) else ""
        layers.append(
            Layer(
                label=label if isinstance(label, str) else str(label),
                layout=normalize_layout(_get(array, "layout")),
                data=normalize_float32_array(_get(array, "data")),
            )
        )
    return tuple(layers)


def normalize_grid_map(message: Any) -> Grid:
    """Decode a raw grid map message into a :class:`Grid`.

    Args:
        message: Mapping or attribute object shaped like a grid map message.
            An already decoded ``Grid`` is returned unchanged.

    Returns:
        Grid: Fully populated grid; absent fields take their defaults.
    """
    if isinstance(message, Grid):
        return message
    info = _get(message, "info")
    return Grid(
        header=normalize_header(_get(message, "header")),
        info=GridInfo(
            resolution=_float(_get(info, "resolution", 0.0)),
            length_x=_float(_get(info, "length_x", 0.0)),
            length_y=_float(_get(info, "length_y", 0.0)),
            pose=normalize_pose(_get(info, "pose")),
        ),
        layers=normalize_layers(
            _sequence(_get(message, "layers")), _sequence(_get(message, "data"))
        ),
    )
