"""Players and their hands."""

import random
import re
from collections import Counter
from typing import List, Optional

from macau.engine.card import Card, Suit
from macau.engine.errors import ValidationError

MAX_NAME_LENGTH = 20
_NAME_RE = re.compile(r"^[\w ]+$")


class Player:
    """A seat at the table.

    The hand is only changed through add_card/remove_card so that the Macau
    bookkeeping stays in step with the hand size.
    """

    def __init__(self, name: str, is_human: bool = False):
        if not name or not name.strip():
            raise ValidationError("Player name cannot be empty")
        if len(name) > MAX_NAME_LENGTH:
            raise ValidationError(f"Player name too long: {name!r}")
        if not _NAME_RE.match(name):
            raise ValidationError(f"Player name contains invalid characters: {name!r}")
        self.name = name
        self.is_human = is_human
        self._hand: List[Card] = []
        self.has_declared_macau = False
        self._macau_chance_used = False

    @property
    def hand(self) -> List[Card]:
        """Copy of the cards held, in the order received."""
        return list(self._hand)

    @property
    def hand_size(self) -> int:
        return len(self._hand)

    def has_card(self, card: Card) -> bool:
        return card in self._hand

    def add_card(self, card: Card) -> None:
        if card is None:
            raise ValidationError("Cannot add None to a hand")
        if not isinstance(card, Card):
            raise ValidationError(f"Cannot add {card!r} to a hand")
        self._hand.append(card)
        if len(self._hand) > 1:
            self.has_declared_macau = False
            self._macau_chance_used = False

    def remove_card(self, card: Card) -> None:
        if card is None:
            raise ValidationError("Cannot remove None from a hand")
        if card not in self._hand:
            raise ValidationError(f"{self.name} does not hold {card}")
        self._hand.remove(card)

    def most_common_suit(self) -> Optional[Suit]:
        """Suit held most often; ties go to the suit received first."""
        if not self._hand:
            return None
        return Counter(card.suit for card in self._hand).most_common(1)[0][0]

    def check_macau(self, rng: random.Random, chance: float) -> bool:
        """CPU memory roll: whether this player remembers to call Macau now.

        Rolled at most once per one-card state; the roll resets when the
        hand grows again.
        """
        if self.is_human or self.hand_size != 1 or self.has_declared_macau:
            return False
        if self._macau_chance_used:
            return False
        self._macau_chance_used = True
        return rng.random() < chance

    def __repr__(self) -> str:
        kind = "human" if self.is_human else "cpu"
        return f"Player({self.name!r}, {kind}, cards={self.hand_size})"
