"""Single game runner."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional

from macau.engine import (
    DrawCard,
    EndTurn,
    GameConfig,
    GameState,
    ImmediateScheduler,
    MacauError,
    TurnEngine,
    apply_action,
)
from macau.engine.scheduler import VirtualClock
from macau.orchestration.stats import GameStats, StatsCollector

if TYPE_CHECKING:
    from macau.agent.protocol import AgentProtocol

logger = logging.getLogger(__name__)


@dataclass
class GameResult:
    """Result of a completed game."""

    winner: Optional[str]
    num_turns: int
    player_names: tuple[str, ...]
    final_hand_sizes: Dict[str, int] = field(default_factory=dict)
    stats: GameStats = field(default_factory=GameStats)
    history: List[str] = field(default_factory=list)


class GameRunner:
    """Runs a single Macau game to completion.

    With no human agent every seat is a CPU. Otherwise seat 0 is human and
    its decisions come from the agent.
    """

    def __init__(
        self,
        player_count: int = 4,
        human_agent: Optional["AgentProtocol"] = None,
        seed: Optional[int] = None,
        config: Optional[GameConfig] = None,
        scheduler=None,
        max_actions: int = 1000,
    ):
        self._player_count = player_count
        self._agent = human_agent
        self._seed = seed
        self._config = config or GameConfig()
        self._scheduler = scheduler if scheduler is not None else ImmediateScheduler()
        self._max_actions = max_actions
        self.engine: Optional[TurnEngine] = None

    def run(self) -> GameResult:
        """Run the game and return the result."""
        engine = TurnEngine(
            config=self._config,
            rng=random.Random(self._seed),
            scheduler=self._scheduler,
        )
        self.engine = engine
        collector = StatsCollector(engine.events)
        try:
            engine.start_new_game(self._player_count, is_simulation=self._agent is None)
            self._drain()
            actions = 0
            while engine.state is GameState.PLAYER_TURN and actions < self._max_actions:
                player = engine.current_player
                if not player.is_human:
                    logger.warning("CPU turn stalled for %s; stopping", player.name)
                    break
                self._human_step(engine, player)
                actions += 1
                self._drain()
        finally:
            collector.close()

        winner = engine.winner
        return GameResult(
            winner=winner.name if winner else None,
            num_turns=engine.turn_count,
            player_names=tuple(p.name for p in engine.players),
            final_hand_sizes={p.name: p.hand_size for p in engine.players},
            stats=collector.stats,
            history=engine.history,
        )

    def _drain(self) -> None:
        if isinstance(self._scheduler, VirtualClock):
            self._scheduler.run_until_idle()

    def _human_step(self, engine: TurnEngine, player) -> None:
        legal = engine.legal_actions(player)
        action = self._agent.get_action(engine.view(player), legal, player.name)
        if action is None:
            defaults = [a for a in legal if isinstance(a, (DrawCard, EndTurn))] or legal or [EndTurn()]
            action = defaults[0]
        try:
            apply_action(engine, player, action)
        except MacauError as exc:
            logger.info("Rejected %s from %s: %s", action, player.name, exc)
