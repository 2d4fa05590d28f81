"""Rendering surface contract.

The core never draws. After every successful update it hands the topic's
raster to a :class:`RenderSurface` for upload, pushes the derived transform,
and flips the material's blend state only when the transparency decision
changes.

:class:`ImageSurface` keeps a Pillow image per topic, which is what the
Streamlit viewer displays; :class:`NullSurface` discards everything.
"""

from dataclasses import dataclass
from typing import Dict, Protocol

from PIL import Image

from grid_map_view.components import DisplayTransform
from grid_map_view.types import Topic, UInt8Array

# Fully transparent (alpha=0) texels are skipped even when blending is off
ALPHA_TEST = 1e-4


class RenderSurface(Protocol):
    def upload(self, topic: Topic, raster: UInt8Array, width: int, height: int) -> None: ...

    def set_transparent(self, topic: Topic, transparent: bool) -> None: ...

    def set_transform(self, topic: Topic, transform: DisplayTransform) -> None: ...

    def release(self, topic: Topic) -> None: ...


class NullSurface:
    def upload(self, topic: Topic, raster: UInt8Array, width: int, height: int) -> None:
        pass

    def set_transparent(self, topic: Topic, transparent: bool) -> None:
        pass

    def set_transform(self, topic: Topic, transform: DisplayTransform) -> None:
        pass

    def release(self, topic: Topic) -> None:
        pass


@dataclass
class Material:
    """Blend state of one topic's quad.

    ``version`` increments whenever the state is changed, mirroring a
    "needs update" flag on a GPU material.
    """

    transparent: bool = False
    depth_write: bool = True
    alpha_test: float = ALPHA_TEST
    version: int = 0


class ImageSurface:
    """Pillow-backed surface holding the latest RGBA image per topic."""

    def __init__(self) -> None:
        self.images: Dict[Topic, Image.Image] = {}
        self.materials: Dict[Topic, Material] = {}
        self.transforms: Dict[Topic, DisplayTransform] = {}
        self.uploads: Dict[Topic, int] = {}

    def upload(self, topic: Topic, raster: UInt8Array, width: int, height: int) -> None:
        if width == 0 or height == 0:
            image = Image.new("RGBA", (width, height))
        else:
            image = Image.frombytes("RGBA", (width, height), raster.tobytes())
        self.images[topic] = image
        self.uploads[topic] = self.uploads.get(topic, 0) + 1

    def set_transparent(self, topic: Topic, transparent: bool) -> None:
        material = self.materials.setdefault(topic, Material())
        material.transparent = transparent
        material.depth_write = not transparent
        material.version += 1

    def set_transform(self, topic: Topic, transform: DisplayTransform) -> None:
        self.transforms[topic] = transform

    def release(self, topic: Topic) -> None:
        self.images.pop(topic, None)
        self.materials.pop(topic, None)
        self.transforms.pop(topic, None)
        self.uploads.pop(topic, None)
