from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Generator
from typing import Any

import pytest


class NodeStyleEmitter:
    """Bare `on`/`off` emitter, with `prepend_listener` like Node's EventEmitter."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Callable[..., Any]]] = defaultdict(list)

    def on(self, event: str, handler: Callable[..., Any]) -> None:
        self._handlers[event].append(handler)

    def off(self, event: str, handler: Callable[..., Any]) -> None:
        self._handlers[event].remove(handler)

    def prepend_listener(self, event: str, handler: Callable[..., Any]) -> None:
        self._handlers[event].insert(0, handler)

    def emit(self, event: str, *args: Any) -> None:
        for handler in list(self._handlers[event]):
            handler(*args)

    def listener_count(self, event: str) -> int:
        return len(self._handlers[event])


class EventTarget:
    """`add_event_listener`/`remove_event_listener` emitter that records options."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Callable[..., Any]]] = defaultdict(list)
        self.added_with: list[dict[str, Any]] = []

    def add_event_listener(self, event: str, handler: Callable[..., Any], **options: Any) -> None:
        self.added_with.append(options)
        self._handlers[event].append(handler)

    def remove_event_listener(self, event: str, handler: Callable[..., Any], **options: Any) -> None:
        self._handlers[event].remove(handler)

    def dispatch(self, event: str, *args: Any) -> None:
        for handler in list(self._handlers[event]):
            handler(*args)

    def listener_count(self, event: str) -> int:
        return len(self._handlers[event])


class ListenerEmitter:
    """`add_listener`/`remove_listener` only."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Callable[..., Any]]] = defaultdict(list)

    def add_listener(self, event: str, handler: Callable[..., Any]) -> None:
        self._handlers[event].append(handler)

    def remove_listener(self, event: str, handler: Callable[..., Any]) -> None:
        self._handlers[event].remove(handler)

    def emit(self, event: str, *args: Any) -> None:
        for handler in list(self._handlers[event]):
            handler(*args)

    def listener_count(self, event: str) -> int:
        return len(self._handlers[event])


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    """Settings are cached process-wide; every test starts from the environment."""

    from ensemble.config import reset_settings_for_tests

    reset_settings_for_tests()
    yield
    reset_settings_for_tests()


@pytest.fixture()
def node_emitter() -> NodeStyleEmitter:
    return NodeStyleEmitter()


@pytest.fixture()
def event_target() -> EventTarget:
    return EventTarget()


@pytest.fixture()
def listener_emitter() -> ListenerEmitter:
    return ListenerEmitter()
