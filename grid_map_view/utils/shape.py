from typing import Sequence

from grid_map_view.components import Layer
from grid_map_view.errors import InsufficientDimensions, SizeMismatch


def validate_layer_shapes(width: int, height: int, layers: Sequence[Layer]) -> None:
    """Check every layer's declared shape against ``width * height``.

    Layers are checked in order and the first failure is raised; later layers
    are not inspected. The declared dimension sizes are summed (not
    multiplied) and compared with the grid size, matching how senders fill
    the layout for this message type.

    Args:
        width (int): Grid column count.
        height (int): Grid row count.
        layers (Sequence[Layer]): Layers of the grid, in message order.

    Raises:
        InsufficientDimensions: A layer declares fewer than two dimensions.
        SizeMismatch: A layer's summed dimension sizes differ from the grid size.
    """
    expected = width * height
    for index, layer in enumerate(layers):
        dims = layer.layout.dim
        if len(dims) < 2:
            raise InsufficientDimensions(index, len(dims))
        actual = sum(d.size for d in dims)
        if actual != expected:
            raise SizeMismatch(index, expected, actual, width, height)
