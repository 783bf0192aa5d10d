"""Game engine for Macau."""

from macau.engine.actions import (
    Action,
    CallMacau,
    DeclareSuit,
    DrawCard,
    EndTurn,
    PlayCard,
    StopMacau,
    apply_action,
)
from macau.engine.card import Card, Rank, Suit
from macau.engine.config import GameConfig
from macau.engine.deck import Deck, new_shuffled_deck
from macau.engine.errors import (
    EmptyDeckError,
    IllegalPlayError,
    InvariantViolation,
    MacauError,
    ResourceExhaustion,
    ValidationError,
)
from macau.engine.events import EventBus, EventRecorder, Subscription
from macau.engine.game_state import GameState, PlayerView, TurnContext
from macau.engine.player import Player
from macau.engine.policy import get_best_play
from macau.engine.rules import Effect, can_play, classify_effect
from macau.engine.scheduler import ImmediateScheduler, PacedScheduler, VirtualClock
from macau.engine.turn_engine import TurnEngine

__all__ = [
    "Action",
    "CallMacau",
    "Card",
    "DeclareSuit",
    "Deck",
    "DrawCard",
    "Effect",
    "EmptyDeckError",
    "EndTurn",
    "EventBus",
    "EventRecorder",
    "GameConfig",
    "GameState",
    "IllegalPlayError",
    "ImmediateScheduler",
    "InvariantViolation",
    "MacauError",
    "PacedScheduler",
    "PlayCard",
    "Player",
    "PlayerView",
    "Rank",
    "ResourceExhaustion",
    "StopMacau",
    "Suit",
    "TurnContext",
    "TurnEngine",
    "ValidationError",
    "VirtualClock",
    "apply_action",
    "can_play",
    "classify_effect",
    "get_best_play",
    "new_shuffled_deck",
]
