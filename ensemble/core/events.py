from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

PROPERTY_CHANGE = "propertychange"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True, eq=False)
class Event:
    """One emission, optionally derived from an earlier one.

    When a Player inside an Ensemble emits, the Ensemble re-emits a new Event whose
    `source` is the child's Event, so following `source` always ends at the
    innermost emission (`origin`).
    """

    emitter: Any
    type: str
    args: tuple[Any, ...] = ()
    source: Event | None = None
    timestamp: datetime = field(default_factory=_utcnow)

    def chain(self) -> Iterator[Event]:
        """Yield this event, then its source, and so on back to the origin."""

        event: Event | None = self
        while event is not None:
            yield event
            event = event.source

    @property
    def depth(self) -> int:
        return sum(1 for _ in self.chain())

    @property
    def origin(self) -> Event:
        event = self
        while event.source is not None:
            event = event.source
        return event

    @property
    def propagation_path(self) -> list[Any]:
        """Emitters from the origin to this event."""

        path = [e.emitter for e in self.chain()]
        path.reverse()
        return path

    def was_emitted_by(self, emitter: Any) -> bool:
        return any(e.emitter is emitter for e in self.chain())


@dataclass(frozen=True, slots=True, eq=False)
class PropertyChangeEvent(Event):
    type: str = PROPERTY_CHANGE

    @staticmethod
    def of(emitter: Any, property_name: str, old_value: Any, new_value: Any) -> PropertyChangeEvent:
        return PropertyChangeEvent(emitter=emitter, args=(property_name, old_value, new_value))

    @property
    def property_name(self) -> str:
        return self.args[0]

    @property
    def old_value(self) -> Any:
        return self.args[1]

    @property
    def new_value(self) -> Any:
        return self.args[2]
