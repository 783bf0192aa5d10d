"""Per-game statistics gathered from engine notifications."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict

from macau.engine.events import (
    CardDrawn,
    CardPlayed,
    Event,
    EventBus,
    MacauCalled,
    SequentialPlayChanged,
    StopMacauCalled,
    Subscription,
    TurnSkipped,
)
from macau.engine.rules import Effect, classify_effect


@dataclass
class GameStats:
    """Counters for one game."""

    cards_played: Counter = field(default_factory=Counter)  # player name -> cards
    cards_drawn: Counter = field(default_factory=Counter)
    special_effects: Counter = field(default_factory=Counter)  # effect value -> plays
    macau_calls: Counter = field(default_factory=Counter)
    stop_macau_calls: int = 0
    turns_skipped: int = 0
    sequential_chains: int = 0

    def merge(self, other: "GameStats") -> None:
        self.cards_played.update(other.cards_played)
        self.cards_drawn.update(other.cards_drawn)
        self.special_effects.update(other.special_effects)
        self.macau_calls.update(other.macau_calls)
        self.stop_macau_calls += other.stop_macau_calls
        self.turns_skipped += other.turns_skipped
        self.sequential_chains += other.sequential_chains

    def as_dict(self) -> Dict[str, object]:
        return {
            "cards_played": dict(self.cards_played),
            "cards_drawn": dict(self.cards_drawn),
            "special_effects": dict(self.special_effects),
            "macau_calls": dict(self.macau_calls),
            "stop_macau_calls": self.stop_macau_calls,
            "turns_skipped": self.turns_skipped,
            "sequential_chains": self.sequential_chains,
        }


class StatsCollector:
    """Subscribes to an engine's events for the lifetime of one game."""

    def __init__(self, bus: EventBus):
        self.stats = GameStats()
        self._subscription: Subscription = bus.subscribe(self._on_event)

    def _on_event(self, event: Event) -> None:
        stats = self.stats
        if isinstance(event, CardPlayed):
            stats.cards_played[event.player.name] += 1
            effect = classify_effect(event.card)
            if effect is not Effect.NONE:
                stats.special_effects[effect.value] += 1
        elif isinstance(event, CardDrawn):
            stats.cards_drawn[event.player.name] += 1
        elif isinstance(event, MacauCalled):
            stats.macau_calls[event.player_name] += 1
        elif isinstance(event, StopMacauCalled):
            stats.stop_macau_calls += 1
        elif isinstance(event, TurnSkipped):
            stats.turns_skipped += 1
        elif isinstance(event, SequentialPlayChanged) and event.active:
            stats.sequential_chains += 1

    def close(self) -> None:
        self._subscription.close()
