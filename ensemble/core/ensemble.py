from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from functools import cmp_to_key
from typing import Any

from ensemble.core.player import Player
from ensemble.errors import DuplicateNameError, MembershipError

logger = logging.getLogger(__name__)

Entry = tuple[str, Player]


class Ensemble(Player):
    """A Player that owns a named, ordered collection of Players.

    Insertion order matters: `rotate` moves an entry to the end and iteration
    (`for p in ensemble`) follows the current order.
    """

    def __init__(self) -> None:
        super().__init__()
        self.players: dict[str, Player] = {}

    def __iter__(self) -> Iterator[Player]:
        return iter(list(self.players.values()))

    def __len__(self) -> int:
        return len(self.players)

    def __contains__(self, name: object) -> bool:
        return name in self.players

    # Ensembles with no players are still real members of a tree.
    def __bool__(self) -> bool:
        return True

    def add(self, name: str, player: Player) -> Ensemble:
        """Add `player` under `name` and point its back-references at this Ensemble.

        Raises DuplicateNameError if the name is taken and MembershipError if the
        player already belongs to an Ensemble.
        """

        if not isinstance(player, Player):
            raise TypeError(f"Ensemble members must be Players, got {type(player).__name__}")
        if name in self.players:
            raise DuplicateNameError(name)
        if player.ensemble is not None:
            raise MembershipError(f'Player "{player.name}" already belongs to another Ensemble')

        self.players[name] = player
        player.mutate("name", name)
        player.mutate("ensemble", self)
        logger.debug("added %r to %r", player, self)
        return self

    def get(self, name: str, creating: bool = False) -> Player | None:
        """Return the Player at `name`.

        With `creating=True` a missing entry becomes a new, empty Ensemble that
        follows this Ensemble's play state, which allows
        `root.get("a", True).get("b", True).add("c", player)`.
        """

        got = self.players.get(name)
        if got is None and creating:
            got = Ensemble()
            if self.playing:
                got.play()
            self.add(name, got)
        return got

    def has(self, name: str) -> bool:
        return name in self.players

    def remove(self, name: str) -> bool:
        """Detach and drop the Player at `name`. It is not paused."""

        player = self.players.pop(name, None)
        if player is None:
            return False
        self._detach(player)
        logger.debug("removed %r from %r", name, self)
        return True

    def rotate(self, name: str | None = None) -> Player | None:
        """Move the named (or first) Player to the end of the order, round-robin style."""

        if name is None:
            name = next(iter(self.players), None)
            if name is None:
                return None

        got = self.players.get(name)
        if got is not None:
            self.remove(name)
            self.add(name, got)
        return got

    def sort(
        self,
        entry_comparator: Callable[[Entry, Entry], int] | None = None,
        limit: int | None = None,
        *,
        key: Callable[[Entry], Any] | None = None,
        reverse: bool = False,
    ) -> list[Entry]:
        """Reorder the Players by comparing `(name, player)` entries.

        Either a cmp-style `entry_comparator` or a `key` function may be given.
        With `limit`, only the first `limit` entries are kept; the rest are detached
        (as by `remove`) and returned in sorted order.
        """

        if entry_comparator is not None and key is not None:
            raise TypeError("Pass either entry_comparator or key, not both")
        if limit is not None and limit < 0:
            raise ValueError("limit must be >= 0")

        sort_key = cmp_to_key(entry_comparator) if entry_comparator is not None else key
        entries = sorted(self.players.items(), key=sort_key, reverse=reverse)

        trimmed: list[Entry] = []
        if limit is not None:
            entries, trimmed = entries[:limit], entries[limit:]

        self.players = dict(entries)
        for _name, player in trimmed:
            self._detach(player)
        return trimmed

    def descendants(self, include_ensembles: bool = False) -> list[Player]:
        """All Players under this Ensemble, depth-first in iteration order.

        Nested Ensembles are always recursed into and listed only when
        `include_ensembles` is true.
        """

        got: list[Player] = []
        for player in self.players.values():
            if isinstance(player, Ensemble):
                if include_ensembles:
                    got.append(player)
                got.extend(player.descendants(include_ensembles))
            else:
                got.append(player)
        return got

    def play(self) -> Ensemble:
        """Start every member that is not already playing, then this Ensemble."""

        if self.playing:
            return self
        for player in list(self.players.values()):
            if not player.playing:
                player.play()
        super().play()
        return self

    def pause(self) -> Ensemble:
        if not self.playing:
            return self
        for player in list(self.players.values()):
            if player.playing:
                player.pause()
        super().pause()
        return self

    @staticmethod
    def _detach(player: Player) -> None:
        player.mutate("ensemble", None)
        player.mutate("name", None)
