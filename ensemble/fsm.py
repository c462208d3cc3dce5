from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from statemachine import State, StateMachine

if TYPE_CHECKING:
    from ensemble.core.player import Player


class PlayerState(StrEnum):
    paused = "paused"
    playing = "playing"


class PlayerFSM(StateMachine):
    """FSM wrapper around a Player's lifecycle.

    - states: paused (initial) <-> playing; there is no terminal state.
    - the Player decides when to transition; the FSM only guards the move and
      writes the outcome back with `sync_state_to_player`.
    """

    paused = State(PlayerState.paused.value, value=PlayerState.paused.value, initial=True)
    playing = State(PlayerState.playing.value, value=PlayerState.playing.value)

    play = paused.to(playing)
    pause = playing.to(paused)

    def __init__(self, player: Player):
        self.player = player
        start = PlayerState.playing if player.playing else PlayerState.paused
        super().__init__(start_value=start.value)

    @property
    def lifecycle(self) -> PlayerState:
        return PlayerState(str(self.current_state.value))

    def sync_state_to_player(self) -> None:
        self.player.mutate("playing", self.lifecycle is PlayerState.playing)
