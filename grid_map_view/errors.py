"""Errors raised while validating grid map layers.

All of them derive from :class:`ValueError` so callers that only care about
"bad input" can catch that. :class:`grid_map_view.extension.GridMaps` catches
:class:`GridMapShapeError` at the topic boundary and turns it into a
diagnostic.
"""


class GridMapShapeError(ValueError):
    """A layer's declared shape is inconsistent with the grid size."""

    def __init__(self, message: str, layer_index: int) -> None:
        super().__init__(message)
        self.layer_index = layer_index


class InsufficientDimensions(GridMapShapeError):
    def __init__(self, layer_index: int, dimensions: int) -> None:
        super().__init__(
            f"GridMap layer {layer_index} has the wrong number of dimensions "
            f"({dimensions}, expected at least 2)",
            layer_index,
        )
        self.dimensions = dimensions


class SizeMismatch(GridMapShapeError):
    def __init__(
        self, layer_index: int, expected: int, actual: int, width: int, height: int
    ) -> None:
        super().__init__(
            f"GridMap layer {layer_index} size {actual} is not equal to "
            f"width {width} * height {height}",
            layer_index,
        )
        self.expected = expected
        self.actual = actual
