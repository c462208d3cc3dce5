from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CUE_TIMEOUT_MS = 1000.0
DEFAULT_LOG_LEVEL = "WARNING"


class CueOptions(BaseModel):
    """Per-cue attach options.

    `capture` and `passive` are only forwarded to event-target style emitters;
    `prepend` is honored by emitters that expose `prepend_listener`.
    """

    model_config = ConfigDict(frozen=True)

    prepend: bool = False
    capture: bool = False
    passive: bool = False


class OstinatoConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    # None means "repeat until paused".
    times: int | None = Field(default=None, ge=0)
    base_delay_ms: float = Field(default=100.0, ge=0)
    # Below 1 the delay would shrink between iterations.
    factor: float = Field(default=2.0, ge=1)
    max_delay_ms: float | None = Field(default=None, ge=0)


@dataclass(frozen=True, slots=True)
class Settings:
    cue_timeout_ms: float = DEFAULT_CUE_TIMEOUT_MS
    log_level: str = DEFAULT_LOG_LEVEL


def settings_from_env() -> Settings:
    raw_timeout = os.environ.get("ENSEMBLE_CUE_TIMEOUT_MS")
    try:
        timeout = float(raw_timeout) if raw_timeout else DEFAULT_CUE_TIMEOUT_MS
    except ValueError as e:
        raise ValueError(f"ENSEMBLE_CUE_TIMEOUT_MS must be a number, got {raw_timeout!r}") from e

    return Settings(
        cue_timeout_ms=timeout,
        log_level=os.environ.get("ENSEMBLE_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
    )


_SETTINGS: Settings | None = None


def load_settings(*, env_file: Path | None = None) -> Settings:
    """Read settings from the environment and cache them.

    If `env_file` exists it is loaded first with python-dotenv; variables that are
    already set in the process environment win.
    """

    global _SETTINGS
    if env_file is not None and env_file.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_file, override=False)
    _SETTINGS = settings_from_env()
    return _SETTINGS


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = settings_from_env()
    return _SETTINGS


def reset_settings_for_tests() -> None:
    global _SETTINGS
    _SETTINGS = None


def configure_logging(settings: Settings | None = None) -> None:
    """Configure root logging for applications embedding the package.

    The library itself never calls this on import.
    """

    s = settings or get_settings()
    logging.basicConfig(level=getattr(logging, s.log_level, logging.WARNING))
