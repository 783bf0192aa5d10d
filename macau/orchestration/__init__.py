"""Game orchestration."""

from macau.orchestration.game_runner import GameResult, GameRunner
from macau.orchestration.stats import GameStats, StatsCollector
from macau.orchestration.tournament import TournamentResult, run_tournament

__all__ = [
    "GameResult",
    "GameRunner",
    "GameStats",
    "StatsCollector",
    "TournamentResult",
    "run_tournament",
]
