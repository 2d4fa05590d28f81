"""Message header component.

``Header`` carries the capture stamp and the reference frame the grid pose is
expressed in. Both default to "empty" values when absent from a message.
"""

from dataclasses import dataclass, field

from grid_map_view.types import Nanoseconds


@dataclass(frozen=True)
class Time:
    """Timestamp split into whole seconds and nanoseconds.

    Attributes:
        sec: Whole seconds.
        nanosec: Nanosecond remainder.
    """

    sec: int = 0
    nanosec: int = 0


def to_nanosec(time: Time) -> Nanoseconds:
    return time.sec * 1_000_000_000 + time.nanosec


@dataclass(frozen=True)
class Header:
    """Stamp and source frame of a message.

    Attributes:
        stamp: Capture time.
        frame_id: Name of the frame the grid pose is expressed in.
    """

    stamp: Time = field(default_factory=Time)
    frame_id: str = ""
