"""CPU card choice.

The policy only ranks cards that the rules already allow; it never decides
legality itself.
"""

from typing import List, Optional, Sequence

from macau.engine.card import Card, Suit
from macau.engine.rules import Effect, can_play, classify_effect, effect_severity

SMALL_HAND = 3

_LARGE_HAND_BONUS = {
    Effect.DRAW_TWO: 3,
    Effect.DRAW_THREE: 3,
    Effect.POP_CUP: 4,
    Effect.SKIP_TURN: 2,
}
SEQUENTIAL_BONUS = 5
PLAIN_CARD_BONUS = 2
HOLD_BETTER_PENALTY = 1


def legal_cards(
    hand: Sequence[Card],
    top_discard: Optional[Card],
    declared_suit: Optional[Suit] = None,
    sequential_play_active: bool = False,
    pending_draw_amount: int = 0,
) -> List[Card]:
    return [
        card
        for card in hand
        if can_play(card, top_discard, sequential_play_active, declared_suit, pending_draw_amount)
    ]


def _extends_chain(card: Card, hand: Sequence[Card]) -> bool:
    return any(other != card and (other.suit == card.suit or other.rank == card.rank) for other in hand)


def _holds_better_special(card: Card, hand: Sequence[Card]) -> bool:
    effect = classify_effect(card)
    if effect is Effect.NONE:
        return False
    severity = effect_severity(effect)
    return any(
        other != card and effect_severity(classify_effect(other)) > severity
        for other in hand
    )


def score_play(card: Card, hand: Sequence[Card]) -> int:
    """Heuristic value of playing card from hand."""
    effect = classify_effect(card)
    score = 0
    if len(hand) > SMALL_HAND:
        # Offload specials while the hand is large.
        score += _LARGE_HAND_BONUS.get(effect, 0)
        if effect is Effect.SEQUENTIAL and _extends_chain(card, hand):
            score += SEQUENTIAL_BONUS
    elif effect is Effect.NONE:
        score += PLAIN_CARD_BONUS
    if len(hand) > 1 and _holds_better_special(card, hand):
        score -= HOLD_BETTER_PENALTY
    return score


def get_best_play(
    hand: Sequence[Card],
    top_discard: Optional[Card],
    declared_suit: Optional[Suit] = None,
    sequential_play_active: bool = False,
    pending_draw_amount: int = 0,
) -> Optional[Card]:
    """Pick the card a CPU plays, or None when nothing is legal."""
    best: Optional[Card] = None
    best_score = 0
    for card in legal_cards(hand, top_discard, declared_suit, sequential_play_active, pending_draw_amount):
        score = score_play(card, hand)
        if best is None or score > best_score:
            best, best_score = card, score
    return best
