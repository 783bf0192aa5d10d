"""Macau rules: play legality and special effects.

Everything here is a pure function of its arguments.
"""

from enum import Enum
from typing import Optional

from macau.engine.card import Card, Rank, Suit
from macau.engine.errors import ValidationError


class Effect(str, Enum):
    """Special effect triggered by playing a card."""

    NONE = "none"
    DRAW_TWO = "draw_two"
    DRAW_THREE = "draw_three"
    POP_CUP = "pop_cup"
    SKIP_TURN = "skip_turn"
    CHANGE_SUIT = "change_suit"
    SEQUENTIAL = "sequential"


POP_CUP_CARD = Card(rank=Rank.KING, suit=Suit.HEARTS)
POP_CUP_COUNTER = Card(rank=Rank.QUEEN, suit=Suit.HEARTS)

_RANK_EFFECTS = {
    Rank.TWO: Effect.DRAW_TWO,
    Rank.THREE: Effect.DRAW_THREE,
    Rank.ACE: Effect.SKIP_TURN,
    Rank.JACK: Effect.CHANGE_SUIT,
    Rank.NINE: Effect.SEQUENTIAL,
}

_DRAW_AMOUNTS = {
    Effect.DRAW_TWO: 2,
    Effect.DRAW_THREE: 3,
    Effect.POP_CUP: 5,
}

# Weakest first; NONE is not a special effect.
_SEVERITY = {
    Effect.NONE: 0,
    Effect.SEQUENTIAL: 1,
    Effect.CHANGE_SUIT: 2,
    Effect.SKIP_TURN: 3,
    Effect.DRAW_TWO: 4,
    Effect.DRAW_THREE: 5,
    Effect.POP_CUP: 6,
}

_DRAW_RANKS = (Rank.TWO, Rank.THREE)


def _require_card(card: object, what: str = "card") -> Card:
    if card is None:
        raise ValidationError(f"{what} cannot be None")
    if not isinstance(card, Card):
        raise ValidationError(f"{what} must be a Card, got {type(card).__name__}")
    return card


def _matches(card: Card, top_card: Card) -> bool:
    return card.suit == top_card.suit or card.rank == top_card.rank


def classify_effect(card: Card) -> Effect:
    """Map a card to its special effect. Only the King of hearts is a Pop Cup."""
    card = _require_card(card)
    if card == POP_CUP_CARD:
        return Effect.POP_CUP
    return _RANK_EFFECTS.get(card.rank, Effect.NONE)


def _require_effect(effect: object) -> Effect:
    if effect is None:
        raise ValidationError("effect cannot be None")
    try:
        return Effect(effect)
    except ValueError:
        raise ValidationError(f"Unknown effect: {effect!r}") from None


def draw_amount(effect: Effect) -> int:
    """Cards forced on the next player by an uncountered effect."""
    return _DRAW_AMOUNTS.get(_require_effect(effect), 0)


def effect_severity(effect: Effect) -> int:
    return _SEVERITY[_require_effect(effect)]


def requires_suit_declaration(card: Card) -> bool:
    return _require_card(card).rank == Rank.JACK


def allows_extra_turn(card: Card, player_count: int) -> bool:
    """An Ace in heads-up play gives the player another turn instead of a skip."""
    return _require_card(card).rank == Rank.ACE and player_count == 2


def is_draw_counter(card: Card, top_card: Card) -> bool:
    """Whether card answers the forced draw started by top_card.

    2s and 3s are countered by a 2 or 3 of the same suit. The Pop Cup is
    countered only by the Queen of hearts.
    """
    card = _require_card(card)
    top_card = _require_card(top_card, "top card")
    if top_card.rank in _DRAW_RANKS:
        return card.rank in _DRAW_RANKS and card.suit == top_card.suit
    if top_card == POP_CUP_CARD:
        return card == POP_CUP_COUNTER
    return False


def is_pop_cup_counter(card: Card, top_card: Optional[Card]) -> bool:
    return top_card is not None and top_card == POP_CUP_CARD and card == POP_CUP_COUNTER


def can_play(
    card: Card,
    top_card: Optional[Card],
    sequential_play_active: bool = False,
    declared_suit: Optional[Suit] = None,
    pending_draw_amount: int = 0,
) -> bool:
    """Check if a card can be played on the discard pile. First match wins."""
    card = _require_card(card)
    if top_card is None:
        return True
    top_card = _require_card(top_card, "top card")
    if declared_suit is not None:
        return card.suit == Suit.parse(declared_suit)
    if sequential_play_active:
        return _matches(card, top_card)
    if pending_draw_amount > 0:
        return is_draw_counter(card, top_card)
    return _matches(card, top_card)
