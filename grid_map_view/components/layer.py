"""Grid layer component.

A layer is one labelled channel of a grid map (e.g. ``"elevation"``). Its cell
values are packed column-major with the X axis as the row dimension and the
(inverted) Y axis as the column dimension. ``layout`` declares the
multi-dimensional shape exactly as it arrived on the wire; it is checked
against the grid size by :mod:`grid_map_view.utils.shape`.
"""

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

from grid_map_view.types import FloatArray


@dataclass(frozen=True)
class MultiArrayDimension:
    """One declared dimension of a layer.

    Attributes:
        label: Dimension name (``"column_index"`` / ``"row_index"``).
        size: Number of elements along this dimension.
        stride: Element stride as declared by the sender.
    """

    label: str = ""
    size: int = 0
    stride: int = 0


@dataclass(frozen=True)
class MultiArrayLayout:
    dim: Tuple[MultiArrayDimension, ...] = ()
    data_offset: int = 0


def _empty_data() -> FloatArray:
    return np.zeros(0, dtype=np.float32)


@dataclass(frozen=True, eq=False)
class Layer:
    """Labelled cell data of a grid.

    Attributes:
        label: Semantic layer name; empty when the sender did not name it.
        layout: Declared shape of ``data``.
        data: Flat, read-only cell values.
    """

    label: str = ""
    layout: MultiArrayLayout = field(default_factory=MultiArrayLayout)
    data: FloatArray = field(default_factory=_empty_data)

    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(d.size for d in self.layout.dim)
