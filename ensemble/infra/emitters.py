from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from ensemble.config import CueOptions
from ensemble.errors import UnsupportedEmitterError

Handler = Callable[..., Any]


def _has(emitter: object, *names: str) -> bool:
    return all(callable(getattr(emitter, n, None)) for n in names)


class EmitterAdapter(ABC):
    """Attach/detach a handler on one family of external emitters."""

    @abstractmethod
    def supports(self, emitter: object) -> bool:
        raise NotImplementedError

    @abstractmethod
    def attach(self, emitter: Any, event: str, handler: Handler, options: CueOptions) -> None:
        raise NotImplementedError

    @abstractmethod
    def detach(self, emitter: Any, event: str, handler: Handler, options: CueOptions) -> None:
        raise NotImplementedError

    def can_prepend(self, emitter: object) -> bool:
        return False

    def prepend(self, emitter: Any, event: str, handler: Handler) -> None:
        raise NotImplementedError


class EventTargetAdapter(EmitterAdapter):
    """`add_event_listener(event, handler, **options)` / `remove_event_listener(...)`."""

    def supports(self, emitter: object) -> bool:
        return _has(emitter, "add_event_listener", "remove_event_listener")

    def attach(self, emitter: Any, event: str, handler: Handler, options: CueOptions) -> None:
        emitter.add_event_listener(event, handler, capture=options.capture, passive=options.passive)

    def detach(self, emitter: Any, event: str, handler: Handler, options: CueOptions) -> None:
        emitter.remove_event_listener(event, handler, capture=options.capture)


class OnOffAdapter(EmitterAdapter):
    """`on(event, handler)` / `off(event, handler)`; Players have this shape."""

    def supports(self, emitter: object) -> bool:
        return _has(emitter, "on", "off")

    def attach(self, emitter: Any, event: str, handler: Handler, options: CueOptions) -> None:
        emitter.on(event, handler)

    def detach(self, emitter: Any, event: str, handler: Handler, options: CueOptions) -> None:
        emitter.off(event, handler)

    def can_prepend(self, emitter: object) -> bool:
        return _has(emitter, "prepend_listener")

    def prepend(self, emitter: Any, event: str, handler: Handler) -> None:
        emitter.prepend_listener(event, handler)


class AddListenerAdapter(OnOffAdapter):
    """`add_listener(event, handler)` / `remove_listener(event, handler)`."""

    def supports(self, emitter: object) -> bool:
        return _has(emitter, "add_listener", "remove_listener")

    def attach(self, emitter: Any, event: str, handler: Handler, options: CueOptions) -> None:
        emitter.add_listener(event, handler)

    def detach(self, emitter: Any, event: str, handler: Handler, options: CueOptions) -> None:
        emitter.remove_listener(event, handler)


# Probe order matters: the first adapter that supports an emitter wins.
ADAPTERS: tuple[EmitterAdapter, ...] = (
    EventTargetAdapter(),
    OnOffAdapter(),
    AddListenerAdapter(),
)


def adapter_for(emitter: object) -> EmitterAdapter:
    for adapter in ADAPTERS:
        if adapter.supports(emitter):
            return adapter
    raise UnsupportedEmitterError(emitter)


def attach(
    adapter: EmitterAdapter,
    emitter: Any,
    event: str,
    handler: Handler,
    options: CueOptions,
) -> None:
    """Attach through `adapter`, prepending when asked and the emitter allows it."""

    if options.prepend and adapter.can_prepend(emitter):
        adapter.prepend(emitter, event, handler)
    else:
        adapter.attach(emitter, event, handler, options)
