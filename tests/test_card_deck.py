"""Unit tests for cards and the deck."""

import random

import pytest

from macau.engine import Card, Deck, EmptyDeckError, Rank, Suit, ValidationError, new_shuffled_deck
from macau.engine.deck import DECK_SIZE, standard_cards


def test_card_parse_symbols_and_letters() -> None:
    assert Card.parse("10♥") == Card(Rank.TEN, Suit.HEARTS)
    assert Card.parse("QS") == Card(Rank.QUEEN, Suit.SPADES)
    assert Card.parse("a h") == Card(Rank.ACE, Suit.HEARTS)
    assert str(Card.parse("jd")) == "J♦"


def test_card_accepts_string_values() -> None:
    card = Card("K", "♣")
    assert card.rank is Rank.KING
    assert card.suit is Suit.CLUBS
    assert card.value == 13


def test_card_rejects_bad_rank_and_suit() -> None:
    with pytest.raises(ValidationError):
        Card("1", "♥")
    with pytest.raises(ValidationError):
        Card("5", "X")
    with pytest.raises(ValidationError):
        Card.parse("Z")


def test_suit_parse() -> None:
    assert Suit.parse("♠") is Suit.SPADES
    assert Suit.parse("clubs") is Suit.CLUBS
    assert Suit.parse("D") is Suit.DIAMONDS
    with pytest.raises(ValidationError):
        Suit.parse("purple")
    with pytest.raises(ValidationError):
        Suit.parse("")


def test_standard_cards_unique() -> None:
    cards = standard_cards()
    assert len(cards) == DECK_SIZE == 52
    assert len(set(cards)) == 52


def test_new_shuffled_deck_reproducible() -> None:
    d1 = new_shuffled_deck(random.Random(123))
    d2 = new_shuffled_deck(random.Random(123))
    assert [str(c) for c in d1.peek_all()] == [str(c) for c in d2.peek_all()]
    assert sorted(map(str, d1.peek_all())) == sorted(map(str, standard_cards()))


def test_deck_from_cards_draws_in_order() -> None:
    deck = Deck.from_cards([Card.parse("2♥"), Card.parse("3♥")])
    assert deck.remaining_count() == 2
    assert deck.draw() == Card.parse("2♥")
    assert deck.draw() == Card.parse("3♥")
    assert deck.is_empty()


def test_draw_from_empty_deck() -> None:
    deck = Deck([])
    with pytest.raises(EmptyDeckError):
        deck.draw()
