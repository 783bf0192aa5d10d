"""Tournament - run many CPU-only games and aggregate results."""

import random
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Optional

from macau.engine import GameConfig
from macau.orchestration.game_runner import GameRunner
from macau.orchestration.stats import GameStats


@dataclass
class TournamentResult:
    games: int
    wins: Dict[str, int]
    draws: int = 0  # games that ended without a winner
    total_turns: int = 0
    stats: GameStats = field(default_factory=GameStats)

    @property
    def average_turns(self) -> float:
        return self.total_turns / self.games if self.games else 0.0


def run_tournament(
    player_count: int = 4,
    num_games: int = 100,
    seed: Optional[int] = None,
    config: Optional[GameConfig] = None,
) -> TournamentResult:
    """Play num_games simulated games and count wins per seat name."""
    wins: Dict[str, int] = defaultdict(int)
    result = TournamentResult(games=num_games, wins=wins)

    rng = random.Random(seed)
    for _ in range(num_games):
        runner = GameRunner(player_count, seed=rng.randint(0, 2**31 - 1), config=config)
        game = runner.run()
        if game.winner:
            wins[game.winner] += 1
        else:
            result.draws += 1
        result.total_turns += game.num_turns
        result.stats.merge(game.stats)

    result.wins = dict(wins)
    return result
