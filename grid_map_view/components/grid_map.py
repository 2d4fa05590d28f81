"""Grid map value objects.

A :class:`Grid` is created fresh for every received message and never mutated
afterwards; the newest valid one per topic is the "active" grid.

Axis roles are swapped relative to the usual image convention: the physical X
extent (``length_x``) maps to the number of rows (``height``) and the physical
Y extent (``length_y``) maps to the number of columns (``width``).
"""

import math
from dataclasses import dataclass, field
from typing import Any, Tuple

from pyrsistent import PMap, freeze

from grid_map_view.components.header import Header, to_nanosec
from grid_map_view.components.layer import Layer
from grid_map_view.components.pose import Pose


def cell_count(length: float, resolution: float) -> int:
    """Number of cells covering ``length`` at ``resolution``.

    Lengths are expected to be whole multiples of the resolution; the quotient
    is rounded to absorb floating point noise. A non-positive resolution or
    length yields zero cells, as does a quotient that overflows to infinity.
    """
    if resolution <= 0.0 or length <= 0.0:
        return 0
    cells = length / resolution
    if not math.isfinite(cells):
        return 0
    return int(round(cells))


@dataclass(frozen=True)
class GridInfo:
    """Physical description of the grid.

    Attributes:
        resolution: Cell edge length in meters.
        length_x: Extent along X in meters (rows).
        length_y: Extent along Y in meters (columns).
        pose: Pose of the grid in ``Header.frame_id``.
    """

    resolution: float = 0.0
    length_x: float = 0.0
    length_y: float = 0.0
    pose: Pose = field(default_factory=Pose)

    @property
    def width(self) -> int:
        return cell_count(self.length_y, self.resolution)

    @property
    def height(self) -> int:
        return cell_count(self.length_x, self.resolution)

    @property
    def size(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class Grid:
    """Strictly typed grid map message.

    Attributes:
        header: Stamp and source frame.
        info: Resolution, extents and pose.
        layers: Ordered layers, possibly empty.
    """

    header: Header = field(default_factory=Header)
    info: GridInfo = field(default_factory=GridInfo)
    layers: Tuple[Layer, ...] = ()

    @property
    def width(self) -> int:
        return self.info.width

    @property
    def height(self) -> int:
        return self.info.height

    def layer(self, label: str | None = None) -> Layer | None:
        """Return the layer named ``label``, falling back to the first layer.

        Returns ``None`` only when the grid carries no layers at all.
        """
        if not self.layers:
            return None
        if label:
            for layer in self.layers:
                if layer.label == label:
                    return layer
        return self.layers[0]

    @property
    def description(self) -> PMap[str, Any]:
        """Persistent, JSON-friendly summary used by inspectors.

        Cell values are summarised (count, min, max) rather than dumped.
        """
        pose = self.info.pose
        layers = []
        for layer in self.layers:
            summary: dict[str, Any] = {
                "label": layer.label,
                "shape": list(layer.shape),
                "data_offset": layer.layout.data_offset,
                "count": int(layer.data.size),
            }
            if layer.data.size:
                summary["min"] = float(layer.data.min())
                summary["max"] = float(layer.data.max())
            layers.append(summary)
        return freeze(
            {
                "header": {
                    "stamp": to_nanosec(self.header.stamp),
                    "frame_id": self.header.frame_id,
                },
                "info": {
                    "resolution": self.info.resolution,
                    "length_x": self.info.length_x,
                    "length_y": self.info.length_y,
                    "width": self.width,
                    "height": self.height,
                    "pose": {
                        "position": [pose.position.x, pose.position.y, pose.position.z],
                        "orientation": [
                            pose.orientation.x,
                            pose.orientation.y,
                            pose.orientation.z,
                            pose.orientation.w,
                        ],
                    },
                },
                "layers": layers,
            }
        )
