"""Compose asynchronous players into named trees that start, stop and talk together."""

from ensemble.config import CueOptions, OstinatoConfig, Settings, configure_logging, load_settings
from ensemble.core.ensemble import Ensemble
from ensemble.core.events import Event, PropertyChangeEvent
from ensemble.core.player import Player
from ensemble.core.solo import Solo
from ensemble.errors import (
    CueTimeoutError,
    DuplicateNameError,
    EnsembleError,
    MembershipError,
    UnsupportedEmitterError,
)
from ensemble.players.cue import Cue
from ensemble.players.ostinato import Ostinato
from ensemble.players.secondo import EmitterSecondo, Secondo

__all__ = [
    "Cue",
    "CueOptions",
    "CueTimeoutError",
    "DuplicateNameError",
    "EmitterSecondo",
    "Ensemble",
    "EnsembleError",
    "Event",
    "MembershipError",
    "Ostinato",
    "OstinatoConfig",
    "Player",
    "PropertyChangeEvent",
    "Secondo",
    "Settings",
    "Solo",
    "UnsupportedEmitterError",
    "configure_logging",
    "load_settings",
]
