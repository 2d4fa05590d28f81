"""Per-topic render state.

Each topic owns exactly one :class:`RenderState` holding its active grid,
effective settings and RGBA raster. :class:`RasterCache` is the only place a
raster buffer is allocated or dropped:

* a new buffer is allocated only when ``(width, height)`` changes;
* the old buffer is released after the replacement exists, so a failed
  allocation leaves the previous raster in place;
* :meth:`RasterCache.dispose` drops the whole state of a topic.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional

import numpy as np

from grid_map_view.components import DisplayTransform, Grid
from grid_map_view.settings import DisplaySettings
from grid_map_view.types import Nanoseconds, Topic, UInt8Array

logger = logging.getLogger(__name__)


def allocate_raster(width: int, height: int) -> UInt8Array:
    """Zeroed RGBA buffer for a ``width`` x ``height`` raster.

    Raises:
        MemoryError: The buffer cannot be allocated, including sizes NumPy
            rejects outright.
    """
    try:
        return np.zeros(width * height * 4, dtype=np.uint8)
    except (ValueError, OverflowError) as exc:
        raise MemoryError(f"Cannot allocate a {width}x{height} raster: {exc}") from exc


@dataclass
class RenderState:
    """Mutable rendering context of one topic.

    Attributes:
        topic: Owning topic.
        grid: Active (last valid) grid.
        settings: Effective display settings.
        raster: RGBA bytes, ``width * height * 4`` long.
        width: Raster column count.
        height: Raster row count.
        transparent: Cached transparency decision for ``settings``.
        transform: Placement derived from ``grid`` on the last update.
        receive_time: Receive time of ``grid``.
        message_time: Header stamp of ``grid``.
    """

    topic: Topic
    grid: Grid
    settings: DisplaySettings
    raster: UInt8Array
    width: int
    height: int
    transparent: bool = False
    transform: DisplayTransform = field(default_factory=DisplayTransform)
    receive_time: Nanoseconds = 0
    message_time: Nanoseconds = 0


class RasterCache:
    def __init__(self) -> None:
        self._states: Dict[Topic, RenderState] = {}

    def __contains__(self, topic: object) -> bool:
        return topic in self._states

    def __iter__(self) -> Iterator[Topic]:
        return iter(self._states)

    def __len__(self) -> int:
        return len(self._states)

    def get(self, topic: Topic) -> Optional[RenderState]:
        return self._states.get(topic)

    def create(
        self, topic: Topic, grid: Grid, settings: DisplaySettings, transparent: bool
    ) -> RenderState:
        """Allocate the render state of a topic seen for the first time.

        Raises:
            ValueError: The topic already has a render state.
            MemoryError: The raster could not be allocated; nothing is stored.
        """
        if topic in self._states:
            raise ValueError(f"Render state for {topic!r} already exists")
        width, height = grid.width, grid.height
        state = RenderState(
            topic=topic,
            grid=grid,
            settings=settings,
            raster=allocate_raster(width, height),
            width=width,
            height=height,
            transparent=transparent,
        )
        self._states[topic] = state
        logger.debug("Created raster %dx%d for %s", width, height, topic)
        return state

    def ensure_size(self, state: RenderState, width: int, height: int) -> bool:
        """Reallocate ``state.raster`` if the grid dimensions changed.

        Returns:
            bool: True if a new buffer was allocated.

        Raises:
            MemoryError: The new buffer could not be allocated; ``state`` is
                left untouched.
        """
        if state.width == width and state.height == height:
            return False
        raster = allocate_raster(width, height)
        logger.debug(
            "Resizing raster of %s from %dx%d to %dx%d",
            state.topic,
            state.width,
            state.height,
            width,
            height,
        )
        state.raster = raster
        state.width = width
        state.height = height
        return True

    def dispose(self, topic: Topic) -> bool:
        state = self._states.pop(topic, None)
        if state is None:
            return False
        logger.debug("Disposed raster of %s", topic)
        return True

    def clear(self) -> None:
        self._states.clear()
