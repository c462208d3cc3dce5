from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from functools import partial
from typing import Any

from ensemble.config import CueOptions
from ensemble.core.events import Event
from ensemble.core.player import Player
from ensemble.infra.emitters import EmitterAdapter, adapter_for, attach

logger = logging.getLogger(__name__)

SubtypeMapper = Callable[..., Sequence[str]]


def same_type(event_type: str, *args: Any) -> list[str]:
    return [event_type]


class Secondo(Player):
    """A Player that stands in for a non-Player event source (the `primo`)."""

    def __init__(self, primo: Any):
        super().__init__()
        self.primo = primo


class EmitterSecondo(Secondo):
    """Re-emit events of an external emitter inside the Ensemble tree.

    Each raw firing becomes an Event emitted by the primo; `subtype_mapper(type, *args)`
    turns it into one or more semantic event types, each emitted by this Secondo
    with the raw Event as its `source`:

        secondo = EmitterSecondo(socket, ["message"], lambda t, msg: [msg["channel"]])
        secondo.on("chat", handle_chat)
        secondo.play()
    """

    def __init__(
        self,
        emitter: Any,
        events: Sequence[str],
        subtype_mapper: SubtypeMapper | None = None,
        options: CueOptions | None = None,
    ):
        super().__init__(emitter)
        if isinstance(events, str):
            raise TypeError("events must be a sequence of event names, not a string")

        self.events = list(events)
        self.subtype_mapper = subtype_mapper or same_type
        self.cue_options = options or CueOptions()
        self.adapter: EmitterAdapter = adapter_for(emitter)
        self.attached = False
        # Pre-bound so detach receives the very handler that was attached.
        self._handlers = [partial(self.propagate, event) for event in self.events]

    def play(self) -> EmitterSecondo:
        if not self.attached:
            for event, handler in zip(self.events, self._handlers):
                attach(self.adapter, self.primo, event, handler, self.cue_options)
            self.mutate("attached", True)
        super().play()
        return self

    def pause(self) -> EmitterSecondo:
        if self.attached:
            for event, handler in zip(self.events, self._handlers):
                self.adapter.detach(self.primo, event, handler, self.cue_options)
            self.mutate("attached", False)
        super().pause()
        return self

    def propagate(self, source_type: str, *args: Any) -> EmitterSecondo:
        raw = Event(emitter=self.primo, type=source_type, args=args)
        subtypes = self.subtype_mapper(source_type, *args)
        logger.debug("secondo %r mapped %r -> %r", self.name, source_type, subtypes)
        for subtype in subtypes:
            self._propagate(Event(emitter=self, type=subtype, source=raw))
        return self
