"""Runtime settings gathered from constants and ``PAIRS_*`` environment variables."""
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping

from pairs.constants import (
    CLOCK_INTERVAL,
    COMPLETION_NOTICE_DELAY,
    DEFAULT_DIFFICULTY,
    FLIP_BACK_DELAY,
    MATCH_CHECK_DELAY,
    SNAPSHOT_EVERY_TICKS,
)
from pairs.errors import ConfigurationError
from pairs.utils.board_shape import parse_board_shape


@dataclass(frozen=True, slots=True)
class GameSettings:
    difficulty: str = DEFAULT_DIFFICULTY
    match_check_delay: float = MATCH_CHECK_DELAY
    flip_back_delay: float = FLIP_BACK_DELAY
    completion_notice_delay: float = COMPLETION_NOTICE_DELAY
    clock_interval: float = CLOCK_INTERVAL
    snapshot_every_ticks: int = SNAPSHOT_EVERY_TICKS
    data_dir: Path = field(default_factory=lambda: Path.cwd() / "data")

    @property
    def board_shape(self) -> tuple[int, int]:
        return parse_board_shape(self.difficulty)

    def with_overrides(self, **changes) -> "GameSettings":
        changed = replace(self, **{key: value for key, value in changes.items() if value is not None})
        changed.validate()
        return changed

    def validate(self) -> None:
        parse_board_shape(self.difficulty)
        for name in ("match_check_delay", "flip_back_delay", "completion_notice_delay"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must not be negative")
        if self.clock_interval <= 0:
            raise ConfigurationError("clock_interval must be positive")
        if self.snapshot_every_ticks < 1:
            raise ConfigurationError("snapshot_every_ticks must be at least 1")


_ENV_FIELDS = {
    "PAIRS_DIFFICULTY": ("difficulty", str),
    "PAIRS_MATCH_CHECK_DELAY": ("match_check_delay", float),
    "PAIRS_FLIP_BACK_DELAY": ("flip_back_delay", float),
    "PAIRS_COMPLETION_NOTICE_DELAY": ("completion_notice_delay", float),
    "PAIRS_CLOCK_INTERVAL": ("clock_interval", float),
    "PAIRS_SNAPSHOT_EVERY_TICKS": ("snapshot_every_ticks", int),
    "PAIRS_DATA_DIR": ("data_dir", Path),
}


def load_settings(environ: Mapping[str, str] | None = None) -> GameSettings:
    environ = os.environ if environ is None else environ
    values = {}
    for env_name, (attr, convert) in _ENV_FIELDS.items():
        raw = environ.get(env_name)
        if raw is None or raw == "":
            continue
        try:
            values[attr] = convert(raw)
        except ValueError:
            raise ConfigurationError(f"{env_name}={raw!r} is not a valid {convert.__name__}") from None
    settings = GameSettings(**values)
    settings.validate()
    return settings
