"""Game configuration, overridable from MACAU_* environment variables."""

import os
from dataclasses import dataclass, fields, replace
from typing import Mapping, Optional

from macau.engine.errors import ValidationError
from macau.engine.macau_call import MACAU_CALL_CHANCE, STOP_MACAU_CHANCE, STOP_MACAU_PENALTY

ENV_PREFIX = "MACAU_"


@dataclass(frozen=True)
class GameConfig:
    """Fixed parameters of a game."""

    initial_hand_size: int = 6
    min_players: int = 2
    max_players: int = 10
    macau_call_chance: float = MACAU_CALL_CHANCE
    stop_macau_chance: float = STOP_MACAU_CHANCE
    stop_macau_penalty: int = STOP_MACAU_PENALTY
    pop_cup_draw: int = 5
    cpu_delay: float = 0.5  # seconds between CPU steps
    require_initial_discard: bool = True

    def __post_init__(self) -> None:
        if self.initial_hand_size <= 0:
            raise ValidationError("Initial hand size must be positive")
        if not 2 <= self.min_players <= self.max_players:
            raise ValidationError(
                f"Invalid player bounds: {self.min_players}..{self.max_players}"
            )
        for name in ("macau_call_chance", "stop_macau_chance"):
            if not 0.0 <= getattr(self, name) <= 1.0:
                raise ValidationError(f"{name} must be between 0 and 1")
        if self.cpu_delay < 0:
            raise ValidationError("cpu_delay cannot be negative")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GameConfig":
        """Read MACAU_INITIAL_HAND_SIZE, MACAU_CPU_DELAY, ... over the defaults."""
        env = os.environ if environ is None else environ
        overrides = {}
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw == "":
                continue
            try:
                overrides[f.name] = _coerce(raw, type(getattr(cls(), f.name)))
            except ValueError:
                raise ValidationError(f"Bad value for {ENV_PREFIX}{f.name.upper()}: {raw!r}") from None
        return replace(cls(), **overrides)


def _coerce(raw: str, kind: type):
    if kind is bool:
        lowered = raw.strip().lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("0", "false", "no", "off"):
            return False
        raise ValueError(raw)
    return kind(raw)
