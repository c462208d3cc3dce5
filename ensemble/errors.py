from __future__ import annotations


class EnsembleError(Exception):
    """Marker base for every error raised by this package."""


class DuplicateNameError(EnsembleError, ValueError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f'A Player with the name "{name}" is already in this Ensemble.')


class MembershipError(EnsembleError, ValueError):
    pass


class UnsupportedEmitterError(EnsembleError, TypeError):
    def __init__(self, emitter: object):
        self.emitter = emitter
        super().__init__(f"Unsupported emitter interface: {type(emitter).__name__}")


class CueTimeoutError(EnsembleError, TimeoutError):
    """Raised through `Cue.promise` when no qualifying event arrives in time.

    The pending listener is already detached when this surfaces.
    """

    def __init__(self, event: str):
        self.event = event
        super().__init__(f"Timeout waiting for event '{event}'")
