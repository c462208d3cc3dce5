from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable
from functools import partial
from typing import Any

from ensemble.config import CueOptions, get_settings
from ensemble.core.player import Player
from ensemble.errors import CueTimeoutError
from ensemble.infra.emitters import EmitterAdapter, adapter_for, attach

logger = logging.getLogger(__name__)

Predicate = Callable[[Any], Any]


def is_defined(result: Any) -> bool:
    return result is not None


class Cue(Player):
    """The engagement between an external emitter and a listener.

    `play()` attaches the listener to `emitter` for `event` and `pause()` detaches it.
    While attached, the listener is called as `listener(cue, *args)`, so it can
    reach the Cue itself and, through `cue.ensemble`, its siblings.

    `promise()` is a separate one-shot wait: it attaches its own handler and calls
    the raw listener as `listener(*args)`, without the Cue, to turn each firing
    into a result. The two calling conventions differ by that leading argument:

        play():    listener(cue, *args)
        promise(): listener(*args)

    A listener written only for `play()` (one that requires `cue`) makes the
    promise reject with the TypeError of the bad call. A listener meant for both
    should accept `*args` and read the payload from the end.

        result = await cue.promise(2000)
    """

    def __init__(
        self,
        emitter: Any,
        event: str,
        listener: Callable[..., Any],
        options: CueOptions | None = None,
        **option_fields: Any,
    ):
        super().__init__()

        if not isinstance(event, str) or not event:
            raise TypeError("event must be a non-empty string")
        if not callable(listener):
            raise TypeError("listener must be callable")
        if options is not None and option_fields:
            raise TypeError("Pass either options or option keywords, not both")

        self.emitter = emitter
        self.event = event
        self.options = options or CueOptions(**option_fields)
        self.adapter: EmitterAdapter = adapter_for(emitter)
        self.attached = False
        self._raw_listener = listener
        self._bound_listener = partial(listener, self)

    @property
    def listener(self) -> Callable[..., Any]:
        return self._raw_listener

    @property
    def bound_listener(self) -> Callable[..., Any]:
        return self._bound_listener

    def play(self) -> Cue:
        if not self.attached:
            attach(self.adapter, self.emitter, self.event, self._bound_listener, self.options)
            self.mutate("attached", True)
            logger.debug("cue %r attached to %r", self.event, self.emitter)
        super().play()
        return self

    def pause(self) -> Cue:
        if self.attached:
            self.adapter.detach(self.emitter, self.event, self._bound_listener, self.options)
            self.mutate("attached", False)
            logger.debug("cue %r detached from %r", self.event, self.emitter)
        super().pause()
        return self

    def promise(self, timeout_ms: float | None = None, predicate: Predicate = is_defined) -> asyncio.Future[Any]:
        """Wait for one firing whose transformed result satisfies `predicate`.

        - `timeout_ms=None` uses the configured default; `0` waits forever.
        - If the listener or predicate raises, the future fails with that error.
        - On timeout the future fails with CueTimeoutError.

        The transient handler is detached on every exit path, including
        cancellation of the returned future. Must be called with a running loop.
        """

        if timeout_ms is None:
            timeout_ms = get_settings().cue_timeout_ms
        if isinstance(timeout_ms, bool) or not isinstance(timeout_ms, (int, float)) or math.isnan(timeout_ms):
            raise TypeError("timeout_ms must be a number")

        loop = asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()
        timer: asyncio.TimerHandle | None = None
        settled = False

        def settle() -> None:
            nonlocal settled
            if settled:
                return
            settled = True
            self.adapter.detach(self.emitter, self.event, handler, self.options)
            if timer is not None:
                timer.cancel()

        def handler(*args: Any) -> None:
            if settled:
                return
            try:
                result = self._raw_listener(*args)
                if not predicate(result):
                    return
            except Exception as e:
                settle()
                if not future.done():
                    future.set_exception(e)
                return
            settle()
            if not future.done():
                future.set_result(result)

        def on_timeout() -> None:
            if settled:
                return
            settle()
            if not future.done():
                future.set_exception(CueTimeoutError(self.event))

        def on_done(f: asyncio.Future[Any]) -> None:
            if f.cancelled():
                settle()

        attach(self.adapter, self.emitter, self.event, handler, self.options)
        if timeout_ms > 0:
            timer = loop.call_later(timeout_ms / 1000, on_timeout)
        future.add_done_callback(on_done)
        return future

    async def wait(self, timeout_ms: float | None = None, predicate: Predicate = is_defined) -> Any:
        return await self.promise(timeout_ms, predicate)
