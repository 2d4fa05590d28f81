"""Topic-scoped diagnostics.

A diagnostic is keyed by ``(topic, code)``: adding the same code again
replaces the message instead of accumulating entries. The sink keeps the last
reported problem visible until it is removed or the topic is disposed.
"""

from typing import Protocol

from pyrsistent import PMap, pmap

from grid_map_view.types import DiagnosticCode, Topic


class DiagnosticsSink(Protocol):
    def add(self, topic: Topic, code: DiagnosticCode, message: str) -> None: ...

    def get(self, topic: Topic) -> PMap[DiagnosticCode, str]: ...

    def remove_topic(self, topic: Topic) -> None: ...


class TopicDiagnostics:
    """In-memory :class:`DiagnosticsSink` backed by persistent maps."""

    def __init__(self) -> None:
        self._errors: PMap[Topic, PMap[DiagnosticCode, str]] = pmap()

    def add(self, topic: Topic, code: DiagnosticCode, message: str) -> None:
        codes = self._errors.get(topic, pmap())
        self._errors = self._errors.set(topic, codes.set(code, message))

    def remove(self, topic: Topic, code: DiagnosticCode) -> None:
        codes = self._errors.get(topic)
        if codes is None or code not in codes:
            return
        codes = codes.remove(code)
        self._errors = (
            self._errors.set(topic, codes) if codes else self._errors.remove(topic)
        )

    def remove_topic(self, topic: Topic) -> None:
        self._errors = self._errors.discard(topic)

    def get(self, topic: Topic) -> PMap[DiagnosticCode, str]:
        return self._errors.get(topic, pmap())

    def has(self, topic: Topic, code: DiagnosticCode) -> bool:
        return code in self.get(topic)

    @property
    def errors(self) -> PMap[Topic, PMap[DiagnosticCode, str]]:
        return self._errors
