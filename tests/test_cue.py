from __future__ import annotations

import asyncio
from typing import Any

import pytest

from ensemble.core.ensemble import Ensemble
from ensemble.core.events import Event
from ensemble.core.player import Player
from ensemble.errors import CueTimeoutError, UnsupportedEmitterError
from ensemble.players.cue import Cue


def _first_arg(ev: Event) -> Any:
    return ev.args[0] if ev.args else None


def test_construction_validates_event_and_listener() -> None:
    source = Player()

    with pytest.raises(TypeError):
        Cue(source, "", _first_arg)
    with pytest.raises(TypeError):
        Cue(source, 42, _first_arg)  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        Cue(source, "tick", "not callable")  # type: ignore[arg-type]


def test_unknown_emitter_shape_is_rejected_up_front() -> None:
    with pytest.raises(UnsupportedEmitterError):
        Cue(object(), "tick", _first_arg)


def test_play_attaches_once_and_binds_the_cue() -> None:
    source = Player()
    seen: list[tuple[Cue, tuple[Any, ...]]] = []
    cue = Cue(source, "tick", lambda c, ev: seen.append((c, ev.args)))

    cue.play()
    cue.play()
    assert cue.attached is True
    assert cue.playing is True
    assert source.listener_count("tick") == 1

    source.emit("tick", 1)
    assert seen == [(cue, (1,))]

    cue.pause()
    cue.pause()
    assert cue.attached is False
    assert cue.playing is False
    assert source.listener_count("tick") == 0

    source.emit("tick", 2)
    assert seen == [(cue, (1,))]


def test_listener_can_reach_siblings_through_its_ensemble() -> None:
    source = Player()
    cues = Ensemble()
    hits: list[str] = []

    def on_start(cue: Cue, ev: Event) -> None:
        assert cue.ensemble is cues
        sibling = cue.ensemble.get("stop")
        assert sibling is not None
        sibling.play()
        hits.append(cue.name or "")

    cues.add("start", Cue(source, "start", on_start))
    cues.add("stop", Cue(source, "stop", lambda cue, ev: hits.append("stop")))
    start = cues.get("start")
    assert start is not None
    start.play()

    source.emit("start")
    source.emit("stop")
    assert hits == ["start", "stop"]


def test_prepend_option_uses_prepend_listener(node_emitter: Any) -> None:
    order: list[str] = []
    node_emitter.on("tick", lambda: order.append("existing"))

    Cue(node_emitter, "tick", lambda cue: order.append("cue"), prepend=True).play()
    node_emitter.emit("tick")

    assert order == ["cue", "existing"]


def test_event_target_receives_options(event_target: Any) -> None:
    cue = Cue(event_target, "click", lambda cue, *args: None, capture=True)
    cue.play()

    assert event_target.added_with == [{"capture": True, "passive": False}]
    cue.pause()
    assert event_target.listener_count("click") == 0


@pytest.mark.asyncio
async def test_promise_resolves_and_leaves_no_listener() -> None:
    source = Player()
    cue = Cue(source, "tick", _first_arg)

    pending = cue.promise(500)
    assert source.listener_count("tick") == 1

    source.emit("tick", "foo")

    assert await pending == "foo"
    assert source.listener_count("tick") == 0


@pytest.mark.asyncio
async def test_promise_waits_for_predicate(node_emitter: Any) -> None:
    cue = Cue(node_emitter, "value", lambda v: v)
    pending = cue.promise(500, lambda r: r > 2)

    node_emitter.emit("value", 1)
    node_emitter.emit("value", 2)
    assert not pending.done()
    assert node_emitter.listener_count("value") == 1

    node_emitter.emit("value", 3)
    assert await pending == 3
    assert node_emitter.listener_count("value") == 0


@pytest.mark.asyncio
async def test_promise_times_out_with_event_name(node_emitter: Any) -> None:
    cue = Cue(node_emitter, "tick", lambda *args: None)
    pending = cue.promise(50)

    await asyncio.sleep(0.01)
    node_emitter.emit("tick", "bar")

    with pytest.raises(CueTimeoutError, match="Timeout") as e:
        await pending
    assert e.value.event == "tick"
    assert "tick" in str(e.value)
    assert node_emitter.listener_count("tick") == 0


@pytest.mark.asyncio
async def test_promise_rejects_with_listener_error(node_emitter: Any) -> None:
    def explode(*args: Any) -> Any:
        raise ValueError("bad payload")

    pending = Cue(node_emitter, "tick", explode).promise(500)
    node_emitter.emit("tick", 1)

    with pytest.raises(ValueError, match="bad payload"):
        await pending
    assert node_emitter.listener_count("tick") == 0


@pytest.mark.asyncio
async def test_zero_timeout_waits_indefinitely(listener_emitter: Any) -> None:
    pending = Cue(listener_emitter, "tick", lambda v: v).promise(0)

    await asyncio.sleep(0.05)
    assert not pending.done()

    listener_emitter.emit("tick", "late")
    assert await pending == "late"
    assert listener_emitter.listener_count("tick") == 0


@pytest.mark.asyncio
async def test_cancelling_the_promise_detaches(node_emitter: Any) -> None:
    pending = Cue(node_emitter, "tick", lambda v: v).promise(1000)
    pending.cancel()
    await asyncio.sleep(0)

    assert node_emitter.listener_count("tick") == 0


@pytest.mark.asyncio
async def test_promise_is_independent_of_play_state() -> None:
    def latest(*args: Any) -> Any:
        # (cue, event) when attached by play(), (event,) inside promise().
        return args[-1].args[0]

    source = Player()
    cue = Cue(source, "tick", latest)
    cue.play()

    pending = cue.promise(500)
    assert source.listener_count("tick") == 2

    source.emit("tick", "x")
    assert await pending == "x"
    assert cue.attached is True
    assert source.listener_count("tick") == 1


@pytest.mark.asyncio
async def test_promise_calls_listener_without_the_cue(node_emitter: Any) -> None:
    seen: list[tuple[Any, ...]] = []

    def on_tick(cue: Cue, value: Any) -> Any:
        seen.append((cue, value))
        return value

    cue = Cue(node_emitter, "tick", on_tick)
    cue.play()
    node_emitter.emit("tick", 1)
    assert seen == [(cue, 1)]
    cue.pause()

    pending = cue.promise(500)
    node_emitter.emit("tick", 2)

    with pytest.raises(TypeError):
        await pending
    assert seen == [(cue, 1)]
    assert node_emitter.listener_count("tick") == 0


@pytest.mark.asyncio
async def test_default_timeout_comes_from_settings(monkeypatch: pytest.MonkeyPatch, node_emitter: Any) -> None:
    monkeypatch.setenv("ENSEMBLE_CUE_TIMEOUT_MS", "20")

    with pytest.raises(CueTimeoutError):
        await Cue(node_emitter, "never", lambda v: v).wait()


def test_promise_rejects_non_numeric_timeout(node_emitter: Any) -> None:
    cue = Cue(node_emitter, "tick", lambda v: v)
    with pytest.raises(TypeError):
        cue.promise("soon")  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        cue.promise(float("nan"))
