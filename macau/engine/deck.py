"""Deck creation and shuffling."""

import random
from typing import Iterable, List, Optional

from macau.engine.card import Card, Rank, Suit
from macau.engine.errors import EmptyDeckError

DECK_SIZE = len(Suit) * len(Rank)


def standard_cards() -> List[Card]:
    """All 52 cards, suit by suit, in rank order."""
    return [Card(rank=rank, suit=suit) for suit in Suit for rank in Rank]


class Deck:
    """Draw pile. The top of the deck is the end of the list."""

    def __init__(self, cards: Iterable[Card]):
        self._cards: List[Card] = list(cards)

    @classmethod
    def from_cards(cls, cards: Iterable[Card]) -> "Deck":
        """Build a deck whose first card is drawn first."""
        return cls(reversed(list(cards)))

    def draw(self) -> Card:
        if not self._cards:
            raise EmptyDeckError("Cannot draw from empty deck")
        return self._cards.pop()

    def remaining_count(self) -> int:
        return len(self._cards)

    def is_empty(self) -> bool:
        return not self._cards

    def peek_all(self) -> List[Card]:
        """Remaining cards, next draw first."""
        return list(reversed(self._cards))

    def __len__(self) -> int:
        return len(self._cards)


def new_shuffled_deck(rng: Optional[random.Random] = None) -> Deck:
    """Create the 52-card deck shuffled with a uniform permutation.

    random.shuffle is a Fisher-Yates shuffle.
    """
    cards = standard_cards()
    (rng or random.Random()).shuffle(cards)
    return Deck(cards)
