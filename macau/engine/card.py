"""Card, Rank and Suit types for Macau."""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from macau.engine.errors import ValidationError


class Suit(str, Enum):
    """Card suits."""

    HEARTS = "♥"
    DIAMONDS = "♦"
    CLUBS = "♣"
    SPADES = "♠"

    @classmethod
    def parse(cls, raw: Union["Suit", str]) -> "Suit":
        """Accept a Suit, its symbol, or a letter/name such as "H" or "hearts"."""
        if isinstance(raw, Suit):
            return raw
        if not isinstance(raw, str) or not raw.strip():
            raise ValidationError(f"Invalid suit: {raw!r}")
        text = raw.strip()
        try:
            return cls(text)
        except ValueError:
            pass
        key = text.upper()
        for suit in cls:
            if key == suit.name or key == suit.name[0]:
                return suit
        raise ValidationError(f"Invalid suit: {raw!r}")


class Rank(str, Enum):
    """Card ranks, in deck order."""

    ACE = "A"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"


RANK_VALUES = {
    Rank.ACE: 14,
    Rank.TWO: 2,
    Rank.THREE: 3,
    Rank.FOUR: 4,
    Rank.FIVE: 5,
    Rank.SIX: 6,
    Rank.SEVEN: 7,
    Rank.EIGHT: 8,
    Rank.NINE: 9,
    Rank.TEN: 10,
    Rank.JACK: 11,
    Rank.QUEEN: 12,
    Rank.KING: 13,
}


@dataclass(frozen=True)
class Card:
    """A playing card.

    Rank and suit may be given as enum members or their string values
    ("10", "♥"). Anything else raises ValidationError.
    """

    rank: Rank
    suit: Suit

    def __post_init__(self) -> None:
        try:
            rank = Rank(self.rank)
        except ValueError:
            raise ValidationError(f"Invalid card rank: {self.rank!r}") from None
        try:
            suit = Suit(self.suit)
        except ValueError:
            raise ValidationError(f"Invalid card suit: {self.suit!r}") from None
        object.__setattr__(self, "rank", rank)
        object.__setattr__(self, "suit", suit)

    @property
    def value(self) -> int:
        """Display/scoring value; never used for legality."""
        return RANK_VALUES[self.rank]

    @classmethod
    def parse(cls, text: str) -> "Card":
        """Parse "10♥", "QS" or "a h" style text."""
        if not isinstance(text, str):
            raise ValidationError(f"Cannot parse card from {text!r}")
        compact = "".join(text.split())
        if len(compact) < 2:
            raise ValidationError(f"Cannot parse card from {text!r}")
        return cls(rank=compact[:-1].upper(), suit=Suit.parse(compact[-1]))

    def __str__(self) -> str:
        return f"{self.rank.value}{self.suit.value}"
