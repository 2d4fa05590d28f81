"""Per-topic display settings.

``DisplaySettings`` holds the effective values used for a recolour pass. User
edits are kept separately as sparse per-topic overrides in a
:class:`SettingsStore`; :func:`resolve_settings` merges an override mapping
over the defaults and returns a fresh value every call.

Colours are CSS strings (see :mod:`grid_map_view.utils.color`) so they can be
saved verbatim from a settings editor.
"""

import dataclasses
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from pyrsistent import PMap, freeze, pmap

from grid_map_view.types import ColorRGBA, Topic
from grid_map_view.utils.color import rgba_to_css_string, to_rgba

DEFAULT_MIN_COLOR: ColorRGBA = (1.0, 1.0, 1.0, 1.0)  # white
DEFAULT_MAX_COLOR: ColorRGBA = (0.0, 0.0, 0.0, 1.0)  # black
DEFAULT_UNKNOWN_COLOR: ColorRGBA = (0.5, 0.5, 0.5, 1.0)  # gray
DEFAULT_INVALID_COLOR: ColorRGBA = (1.0, 0.0, 1.0, 1.0)  # magenta

SETTINGS_ROOT = "topics"


@dataclass(frozen=True)
class DisplaySettings:
    """Effective display configuration of one topic.

    Attributes:
        visible: Whether the topic is drawn at all.
        frame_locked: Keep the grid attached to its frame instead of the
            fixed frame at receive time.
        min_color: Colour for value 0.
        max_color: Colour approached by value 100.
        unknown_color: Colour for the unknown sentinel (-1).
        invalid_color: Colour for values outside [-1, 100].
        layer: Label of the layer to render; ``None`` renders the first layer.
    """

    visible: bool = False
    frame_locked: bool = False
    min_color: str = rgba_to_css_string(DEFAULT_MIN_COLOR)
    max_color: str = rgba_to_css_string(DEFAULT_MAX_COLOR)
    unknown_color: str = rgba_to_css_string(DEFAULT_UNKNOWN_COLOR)
    invalid_color: str = rgba_to_css_string(DEFAULT_INVALID_COLOR)
    layer: Optional[str] = None

    def colors(self) -> Tuple[ColorRGBA, ColorRGBA, ColorRGBA, ColorRGBA]:
        """Parsed ``(min, max, unknown, invalid)`` colours in sRGB space."""
        return (
            to_rgba(self.min_color),
            to_rgba(self.max_color),
            to_rgba(self.unknown_color),
            to_rgba(self.invalid_color),
        )


SETTING_FIELDS: Tuple[str, ...] = tuple(
    f.name for f in dataclasses.fields(DisplaySettings)
)


def resolve_settings(
    override: Mapping[str, Any] | DisplaySettings | None = None,
) -> DisplaySettings:
    """Merge ``override`` over the defaults.

    Keys that are not settings fields are ignored; ``None`` values keep the
    default. A ``DisplaySettings`` instance is returned as is.
    """
    if isinstance(override, DisplaySettings):
        return override
    if not override:
        return DisplaySettings()
    values = {
        name: override[name]
        for name in SETTING_FIELDS
        if name in override and override[name] is not None
    }
    return DisplaySettings(**values)


def settings_overrides(settings: DisplaySettings) -> PMap[str, Any]:
    return pmap(dataclasses.asdict(settings))


class SettingsStore:
    """Sparse per-topic setting overrides.

    The store swaps an immutable ``PMap[Topic, PMap[str, Any]]`` on every
    write, so snapshots returned by :meth:`get` never change underneath a
    caller.
    """

    def __init__(self, topics: Mapping[Topic, Mapping[str, Any]] | None = None) -> None:
        self._topics: PMap[Topic, PMap[str, Any]] = freeze(dict(topics or {}))

    def get(self, topic: Topic) -> PMap[str, Any]:
        return self._topics.get(topic, pmap())

    def set(self, topic: Topic, path: str, value: Any) -> None:
        self._topics = self._topics.set(topic, self.get(topic).set(path, value))

    def replace(self, topic: Topic, overrides: Mapping[str, Any]) -> None:
        self._topics = self._topics.set(topic, pmap(overrides))

    def remove(self, topic: Topic) -> None:
        self._topics = self._topics.discard(topic)

    def effective(self, topic: Topic) -> DisplaySettings:
        return resolve_settings(self.get(topic))

    @property
    def topics(self) -> PMap[Topic, PMap[str, Any]]:
        return self._topics


def settings_node(
    topic: Topic, overrides: Mapping[str, Any], layer_labels: Iterable[str] = ()
) -> PMap[str, Any]:
    """Describe one topic's settings for a settings editor.

    Each field carries its label, input kind and effective value. The layer
    selector lists ``layer_labels`` when the topic's active grid is known.
    """
    settings = resolve_settings(overrides)
    layer_options: List[str] = [label for label in layer_labels if label]
    fields = {
        "min_color": {"label": "Min Color", "input": "rgba", "value": settings.min_color},
        "max_color": {"label": "Max Color", "input": "rgba", "value": settings.max_color},
        "unknown_color": {
            "label": "Unknown Color",
            "input": "rgba",
            "value": settings.unknown_color,
        },
        "invalid_color": {
            "label": "Invalid Color",
            "input": "rgba",
            "value": settings.invalid_color,
        },
        "frame_locked": {
            "label": "Frame Lock",
            "input": "boolean",
            "value": settings.frame_locked,
        },
        "layer": {
            "label": "Layer",
            "input": "select",
            "options": layer_options,
            "value": settings.layer,
        },
    }
    return freeze(
        {
            "path": (SETTINGS_ROOT, topic),
            "node": {
                "label": topic,
                "icon": "Cells",
                "fields": fields,
                "visible": settings.visible,
                "order": topic.lower(),
            },
        }
    )
