from dataclasses import dataclass, field

from grid_map_view.components.pose import Pose
from grid_map_view.types import Scale


@dataclass(frozen=True)
class DisplayTransform:
    """Placement of the unit raster quad.

    Attributes:
        scale: ``(resolution * width, resolution * height, 1)``.
        pose: Grid pose in ``frame_id``.
        frame_id: Normalised source frame.
    """

    scale: Scale = (0.0, 0.0, 1.0)
    pose: Pose = field(default_factory=Pose)
    frame_id: str = ""
