"""The "last card" call and its contest.

A play that leaves a player holding one card opens a window in which that
player should call Macau and in which anyone else may call Stop Macau on
them if they have not.
"""

import random
from dataclasses import dataclass, field
from typing import List

from macau.engine.player import Player

MACAU_CALL_CHANCE = 0.8
STOP_MACAU_CHANCE = 0.7
STOP_MACAU_PENALTY = 3


@dataclass
class MacauWindow:
    """Players currently exposed to a Stop Macau call, oldest first."""

    targets: List[Player] = field(default_factory=list)

    @property
    def is_open(self) -> bool:
        return bool(self.targets)

    def open(self, player: Player) -> None:
        if player not in self.targets:
            self.targets.append(player)

    def close(self, player: Player) -> None:
        if player in self.targets:
            self.targets.remove(player)

    def is_contestable(self, target: Player) -> bool:
        return (
            target in self.targets
            and target.hand_size == 1
            and not target.has_declared_macau
        )

    def contestable(self) -> List[Player]:
        return [t for t in self.targets if self.is_contestable(t)]

    def prune(self) -> None:
        """Drop targets whose hand changed or who have called since the window opened."""
        self.targets = self.contestable()


def can_call_macau(player: Player) -> bool:
    return player.hand_size == 1 and not player.has_declared_macau


def cpu_contests(caller: Player, rng: random.Random, chance: float = STOP_MACAU_CHANCE) -> bool:
    """Whether a CPU notices a missing Macau call this time."""
    if caller.is_human:
        return False
    return rng.random() < chance


def stop_macau_message(caller: Player, target: Player) -> str:
    return f"{caller.name} caught {target.name} not calling Macau!"
