"""Unit tests for players, hands and the Macau call."""

import random

import pytest

from macau.engine import Card, Player, Suit, ValidationError
from macau.engine.macau_call import (
    MacauWindow,
    can_call_macau,
    cpu_contests,
    stop_macau_message,
)

C = Card.parse


def cpu_with(*texts) -> Player:
    player = Player("CPU 1")
    for t in texts:
        player.add_card(C(t))
    return player


@pytest.mark.parametrize("name", ["", "   ", "x" * 21, "bad!name"])
def test_invalid_player_names(name) -> None:
    with pytest.raises(ValidationError):
        Player(name)


def test_hand_changes() -> None:
    player = cpu_with("5♥", "7♣")
    assert player.hand_size == 2
    player.remove_card(C("5♥"))
    assert player.hand == [C("7♣")]
    with pytest.raises(ValidationError):
        player.remove_card(C("5♥"))
    with pytest.raises(ValidationError):
        player.add_card(None)
    with pytest.raises(ValidationError):
        player.add_card("7♣")


def test_hand_property_is_a_copy() -> None:
    player = cpu_with("5♥")
    player.hand.append(C("6♥"))
    assert player.hand_size == 1


def test_most_common_suit_ties_go_to_first_seen() -> None:
    assert cpu_with("5♠", "7♥", "8♥", "9♠").most_common_suit() is Suit.SPADES
    assert cpu_with("5♠", "7♥", "8♥").most_common_suit() is Suit.HEARTS
    assert Player("CPU 2").most_common_suit() is None


def test_check_macau_rolls_once_per_last_card() -> None:
    rng = random.Random(0)
    player = cpu_with("5♥", "7♣")
    assert not player.check_macau(rng, 1.0)

    player.remove_card(C("7♣"))
    assert player.check_macau(rng, 1.0)
    assert not player.check_macau(rng, 1.0)

    # Growing the hand resets the roll.
    player.add_card(C("8♣"))
    player.remove_card(C("8♣"))
    assert player.check_macau(rng, 1.0)


def test_check_macau_never_for_humans() -> None:
    human = Player("Player", is_human=True)
    human.add_card(C("5♥"))
    assert not human.check_macau(random.Random(0), 1.0)


def test_check_macau_rate() -> None:
    rng = random.Random(1234)
    trials = 10_000
    calls = 0
    for _ in range(trials):
        if cpu_with("5♥").check_macau(rng, 0.8):
            calls += 1
    assert abs(calls / trials - 0.8) < 0.02


def test_macau_window() -> None:
    target = cpu_with("5♥")
    other = cpu_with("6♥", "7♥")
    window = MacauWindow()
    assert not window.is_open
    window.open(target)
    assert window.is_open
    assert window.is_contestable(target)
    assert not window.is_contestable(other)

    target.has_declared_macau = True
    assert not window.is_contestable(target)
    window.close(target)
    assert window.targets == []


def test_macau_window_tracks_several_players() -> None:
    first = cpu_with("5♥")
    second = Player("CPU 2")
    second.add_card(C("6♠"))
    window = MacauWindow()
    window.open(first)
    window.open(second)
    window.open(first)
    assert window.contestable() == [first, second]

    first.add_card(C("7♣"))
    window.prune()
    assert window.targets == [second]
    window.close(second)
    assert not window.is_open


def test_can_call_macau() -> None:
    assert can_call_macau(cpu_with("5♥"))
    assert not can_call_macau(cpu_with("5♥", "6♥"))
    called = cpu_with("5♥")
    called.has_declared_macau = True
    assert not can_call_macau(called)


def test_cpu_contests() -> None:
    rng = random.Random(0)
    assert cpu_contests(Player("CPU 3"), rng, 1.0)
    assert not cpu_contests(Player("CPU 3"), rng, 0.0)
    assert not cpu_contests(Player("Player", is_human=True), rng, 1.0)


def test_stop_macau_message() -> None:
    msg = stop_macau_message(Player("CPU 1"), Player("Player", is_human=True))
    assert msg == "CPU 1 caught Player not calling Macau!"
