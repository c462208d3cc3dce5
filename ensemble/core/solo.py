from __future__ import annotations

from collections.abc import Callable
from typing import Any, cast

from ensemble.config import CueOptions
from ensemble.core.ensemble import Ensemble
from ensemble.players.cue import Cue
from ensemble.players.ostinato import Ostinato


class Solo(Ensemble):
    """A self-contained unit of reactive logic.

    Holds two internal Ensembles, `cues` (listeners on external emitters) and
    `ostinatos` (repeating tasks). Playing or pausing the Solo toggles all of them;
    the external emitters themselves are never touched.
    """

    def __init__(self) -> None:
        super().__init__()
        self.add("cues", Ensemble()).add("ostinatos", Ensemble())

    @property
    def cues(self) -> Ensemble:
        return cast(Ensemble, self.get("cues"))

    @property
    def ostinatos(self) -> Ensemble:
        return cast(Ensemble, self.get("ostinatos"))

    def cue(
        self,
        name: str,
        emitter: Any,
        event: str,
        listener: Callable[..., Any],
        options: CueOptions | None = None,
    ) -> Solo:
        self.cues.add(name, Cue(emitter, event, listener, options))
        return self

    def ostinato(
        self,
        name: str,
        refrain: Callable[[], Any],
        times: int | None = None,
        base_delay_ms: float = 1000.0,
        factor: float = 1.0,
        max_delay_ms: float | None = None,
    ) -> Solo:
        self.ostinatos.add(name, Ostinato(refrain, times, base_delay_ms, factor, max_delay_ms))
        return self
