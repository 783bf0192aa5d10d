"""Unit tests for the CPU card choice."""

from macau.engine import Card, get_best_play
from macau.engine.policy import legal_cards, score_play

C = Card.parse


def hand(*texts):
    return [C(t) for t in texts]


def test_nothing_legal() -> None:
    assert get_best_play(hand("7♣", "8♠"), C("5♥")) is None


def test_large_hand_offloads_draw_card() -> None:
    cards = hand("7♥", "2♥", "8♣", "4♠")
    assert get_best_play(cards, C("5♥")) == C("2♥")


def test_small_hand_prefers_plain_card() -> None:
    cards = hand("7♥", "2♥")
    assert get_best_play(cards, C("5♥")) == C("7♥")


def test_holding_stronger_special_lowers_score() -> None:
    cards = hand("2♥", "K♥", "8♣", "4♠")
    assert score_play(C("2♥"), cards) == 2
    assert score_play(C("K♥"), cards) == 4


def test_sequential_bonus_when_chain_continues() -> None:
    assert score_play(C("9♥"), hand("9♥", "4♥", "8♣", "4♠")) == 5
    assert score_play(C("9♥"), hand("9♥", "5♦", "8♣", "4♠")) == 0


def test_ties_keep_hand_order() -> None:
    assert get_best_play(hand("8♥", "7♥", "4♠", "4♣"), C("5♥")) == C("8♥")


def test_only_legal_cards_are_considered() -> None:
    cards = hand("7♥", "3♥", "K♥", "4♣")
    assert legal_cards(cards, C("2♥"), pending_draw_amount=2) == [C("3♥")]
    assert get_best_play(cards, C("2♥"), pending_draw_amount=2) == C("3♥")
