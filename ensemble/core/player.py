from __future__ import annotations

import weakref
from collections import defaultdict
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ensemble.core.events import Event, PropertyChangeEvent
from ensemble.fsm import PlayerFSM, PlayerState

if TYPE_CHECKING:
    from ensemble.core.ensemble import Ensemble

Listener = Callable[[Event], Any]


class Player:
    """Base class for every participant in an Ensemble.

    A Player is a live actor that is started and stopped with `play()` and `pause()`.
    It owns its listener registry: `on`/`off` register callables per event type and
    `emit` notifies them synchronously, then bubbles the event to the owning Ensemble.

    Subclasses override `play()`/`pause()` to do real work and must call through to
    these base implementations so the lifecycle transition (and its
    `propertychange` event) still happens.
    """

    def __init__(self) -> None:
        self.playing: bool = False
        self.name: str | None = None
        self._ensemble_ref: weakref.ref[Ensemble] | None = None
        self._listeners: dict[str, list[Listener]] = defaultdict(list)
        self._fsm = PlayerFSM(self)

    def __repr__(self) -> str:
        state = "playing" if self.playing else "paused"
        return f"<{type(self).__name__} name={self.name!r} {state}>"

    # ---- membership ----

    @property
    def ensemble(self) -> Ensemble | None:
        # The Ensemble owns its players; the back-reference must not keep it alive.
        return self._ensemble_ref() if self._ensemble_ref is not None else None

    @ensemble.setter
    def ensemble(self, value: Ensemble | None) -> None:
        self._ensemble_ref = weakref.ref(value) if value is not None else None

    # ---- lifecycle ----

    # The FSM decides; `playing` may have been changed directly through `mutate`.
    def play(self) -> Player:
        if self._fsm.lifecycle is PlayerState.paused:
            self._fsm.play()
        self._fsm.sync_state_to_player()
        return self

    def pause(self) -> Player:
        if self._fsm.lifecycle is PlayerState.playing:
            self._fsm.pause()
        self._fsm.sync_state_to_player()
        return self

    def mutate(self, name: str, value: Any) -> Player:
        """Assign a public attribute and emit a `propertychange` event if it changed.

        This is the only sanctioned way to change state that listeners observe.
        """

        old_value = getattr(self, name, None)
        if old_value is value or old_value == value:
            return self

        setattr(self, name, value)
        self._propagate(PropertyChangeEvent.of(self, name, old_value, value))
        return self

    # ---- listeners ----

    def on(self, type: str, listener: Listener) -> Player:
        self._listeners[type].append(listener)
        return self

    def off(self, type: str, listener: Listener) -> bool:
        registered = self._listeners.get(type)
        if not registered:
            return False
        try:
            registered.remove(listener)
        except ValueError:
            return False
        if not registered:
            self._listeners.pop(type, None)
        return True

    def listeners(self, type: str) -> list[Listener]:
        return list(self._listeners.get(type, ()))

    def listener_count(self, type: str) -> int:
        return len(self._listeners.get(type, ()))

    # ---- emission ----

    def emit(self, type: str, *args: Any) -> Player:
        """Emit `type` from this Player and bubble it up through the Ensembles.

        Each ancestor receives a fresh Event, with no args of its own, whose
        `source` is the event of the level below.
        """

        self._propagate(Event(emitter=self, type=type, args=args))
        return self

    def _propagate(self, event: Event) -> None:
        # Snapshot: listeners added while dispatching wait for the next emission.
        for listener in list(self._listeners.get(event.type, ())):
            listener(event)

        ensemble = self.ensemble
        if ensemble is not None:
            ensemble._propagate(Event(emitter=ensemble, type=event.type, source=event))
