"""grid_map_view.components
==========================

Immutable value objects describing a decoded grid map message. They carry no
behavior beyond small derived properties; decoding lives in
:mod:`grid_map_view.decode` and validation in :mod:`grid_map_view.utils.shape`.

    from grid_map_view.components import Grid, Layer, Pose
"""

from .header import Header, Time, to_nanosec
from .pose import Pose, Quaternion, Vector3
from .layer import Layer, MultiArrayDimension, MultiArrayLayout
from .grid_map import Grid, GridInfo, cell_count
from .transform import DisplayTransform

__all__ = [
    "Header",
    "Time",
    "to_nanosec",
    "Pose",
    "Quaternion",
    "Vector3",
    "Layer",
    "MultiArrayDimension",
    "MultiArrayLayout",
    "Grid",
    "GridInfo",
    "cell_count",
    "DisplayTransform",
]
