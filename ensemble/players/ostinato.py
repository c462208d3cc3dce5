from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from ensemble.config import OstinatoConfig
from ensemble.core.player import Player

logger = logging.getLogger(__name__)


def backoff_delays(base_delay_ms: float, factor: float, max_delay_ms: float | None = None) -> Iterator[float]:
    """Yield the waits between iterations: base, base*factor, ... capped at max_delay_ms."""

    delay = base_delay_ms if max_delay_ms is None else min(base_delay_ms, max_delay_ms)
    while True:
        yield delay
        delay = delay * factor
        if max_delay_ms is not None:
            delay = min(delay, max_delay_ms)


@dataclass(slots=True)
class StopToken:
    stopped: bool = False

    def stop(self) -> None:
        self.stopped = True


class Ostinato(Player):
    """A Player that repeats a refrain, sleeping a growing delay between calls.

    With `factor=1` it is a fixed-interval repeater; with `factor>1` it backs off,
    which suits polling that should slow down over time. `max_delay_ms` caps the
    delay and `times` bounds the number of calls.

    Stopping is cooperative: `pause()` marks the current run's token and the run
    ends when its pending delay elapses. A refrain call already in progress is
    never interrupted.

    Emits `"finished"` when `times` is exhausted and `"error"` if the refrain raises;
    in both cases the Ostinato goes back to paused. `iterations` counts the refrain
    calls of the current run and `error` keeps what the last run raised; the
    exception is not re-raised, so `task` always completes normally.
    """

    def __init__(
        self,
        refrain: Callable[[], Any],
        times: int | None = None,
        base_delay_ms: float = 100.0,
        factor: float = 2.0,
        max_delay_ms: float | None = None,
        *,
        config: OstinatoConfig | None = None,
    ):
        super().__init__()

        if not callable(refrain):
            raise TypeError("Ostinato requires a callable refrain")

        self.refrain = refrain
        self.config = config or OstinatoConfig(
            times=times,
            base_delay_ms=base_delay_ms,
            factor=factor,
            max_delay_ms=max_delay_ms,
        )
        self.iterations = 0
        self.error: Exception | None = None
        self.task: asyncio.Task[None] | None = None
        self._token: StopToken | None = None

    def play(self) -> Ostinato:
        """(Re)start the repetition; requires a running event loop."""

        loop = asyncio.get_running_loop()
        if self._token is not None:
            self._token.stop()
        token = StopToken()
        self._token = token
        self.iterations = 0
        self.error = None
        self.task = loop.create_task(self._run(token))
        logger.debug("ostinato %r started", self.name)
        super().play()
        return self

    def pause(self) -> Ostinato:
        if self._token is not None:
            self._token.stop()
            logger.debug("ostinato %r stop requested", self.name)
        super().pause()
        return self

    async def _run(self, token: StopToken) -> None:
        cfg = self.config
        remaining = cfg.times
        delays = backoff_delays(cfg.base_delay_ms, cfg.factor, cfg.max_delay_ms)
        done = 0

        while not token.stopped and (remaining is None or remaining > 0):
            try:
                result = self.refrain()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.exception("ostinato %r refrain failed", self.name)
                if token is self._token:
                    self.error = e
                self._finish(token)
                self.emit("error", e)
                return

            done += 1
            if token is self._token:
                self.iterations = done
            if remaining is not None:
                remaining -= 1
                if remaining == 0:
                    break

            await asyncio.sleep(next(delays) / 1000)

        if not token.stopped:
            logger.debug("ostinato %r finished after %d iterations", self.name, done)
            self._finish(token)
            self.emit("finished", done)

    def _finish(self, token: StopToken) -> None:
        token.stop()
        # A newer run may own the Ostinato by now; only the current one pauses it.
        if token is self._token:
            self._token = None
            Player.pause(self)
