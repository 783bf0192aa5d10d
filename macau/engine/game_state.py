"""Game state for Macau."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional

from macau.engine.card import Card, Suit

if TYPE_CHECKING:
    from macau.engine.player import Player


class GameState(str, Enum):
    """Lifecycle of a game."""

    WAITING_TO_START = "waiting_to_start"
    PLAYER_TURN = "player_turn"
    GAME_OVER = "game_over"


ALLOWED_TRANSITIONS = {
    GameState.WAITING_TO_START: {GameState.PLAYER_TURN},
    GameState.PLAYER_TURN: {GameState.PLAYER_TURN, GameState.GAME_OVER},
    GameState.GAME_OVER: {GameState.WAITING_TO_START},
}


@dataclass
class TurnContext:
    """Authoritative, mutable state owned by the turn engine."""

    state: GameState = GameState.WAITING_TO_START
    players: List["Player"] = field(default_factory=list)
    current_player_index: int = 0
    turn_count: int = 1
    discard_pile: List[Card] = field(default_factory=list)  # top is last
    pending_draw_amount: int = 0
    sequential_play_active: bool = False
    declared_suit: Optional[Suit] = None
    macau_window_open: bool = False
    winner: Optional["Player"] = None
    history: List[str] = field(default_factory=list)

    @property
    def top_discard(self) -> Optional[Card]:
        return self.discard_pile[-1] if self.discard_pile else None

    @property
    def current_player(self) -> Optional["Player"]:
        if not self.players:
            return None
        return self.players[self.current_player_index]


@dataclass
class PlayerView:
    """Game state visible to a single player.

    Contains only that player's hand and public info.
    """

    player_name: str
    my_hand: List[Card]
    top_discard: Optional[Card]
    current_player: str
    declared_suit: Optional[Suit]
    pending_draw_amount: int
    sequential_play_active: bool
    awaiting_suit_declaration: bool
    deck_count: int
    turn_count: int
    num_cards_per_player: Dict[str, int]
    history: List[str]  # recent game events

    @classmethod
    def from_context(
        cls,
        context: TurnContext,
        player: "Player",
        deck_count: int,
        awaiting_suit_declaration: bool = False,
    ) -> "PlayerView":
        """Create a view of the context for one player, hiding other hands."""
        current = context.current_player
        return cls(
            player_name=player.name,
            my_hand=player.hand,
            top_discard=context.top_discard,
            current_player=current.name if current else "",
            declared_suit=context.declared_suit,
            pending_draw_amount=context.pending_draw_amount,
            sequential_play_active=context.sequential_play_active,
            awaiting_suit_declaration=awaiting_suit_declaration,
            deck_count=deck_count,
            turn_count=context.turn_count,
            num_cards_per_player={p.name: p.hand_size for p in context.players},
            history=list(context.history[-10:]),
        )
