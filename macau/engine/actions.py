"""Player commands as values, for agents and runners."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from macau.engine.card import Card, Suit

if TYPE_CHECKING:
    from macau.engine.player import Player
    from macau.engine.turn_engine import TurnEngine


@dataclass(frozen=True)
class PlayCard:
    """Action: play a card from hand."""

    card: Card


@dataclass(frozen=True)
class DrawCard:
    """Action: draw (the pending penalty, or one card)."""


@dataclass(frozen=True)
class DeclareSuit:
    """Action: name the suit after playing a Jack."""

    suit: Suit


@dataclass(frozen=True)
class CallMacau:
    """Action: announce the last card."""


@dataclass(frozen=True)
class StopMacau:
    """Action: catch another player who did not announce their last card."""

    target_name: str


@dataclass(frozen=True)
class EndTurn:
    """Action: pass the turn on."""


Action = Union[PlayCard, DrawCard, DeclareSuit, CallMacau, StopMacau, EndTurn]


def describe_action(action: Action) -> str:
    if isinstance(action, PlayCard):
        return f"PLAY {action.card}"
    if isinstance(action, DrawCard):
        return "DRAW"
    if isinstance(action, DeclareSuit):
        return f"DECLARE {action.suit.value}"
    if isinstance(action, CallMacau):
        return "CALL MACAU"
    if isinstance(action, StopMacau):
        return f"STOP MACAU on {action.target_name}"
    return "END TURN"


def apply_action(engine: "TurnEngine", player: "Player", action: Action) -> None:
    """Dispatch an action to the matching engine command."""
    if isinstance(action, PlayCard):
        engine.play_card(action.card, player)
    elif isinstance(action, DrawCard):
        engine.draw_card(player)
    elif isinstance(action, DeclareSuit):
        engine.declare_suit(action.suit)
    elif isinstance(action, CallMacau):
        engine.call_macau(player)
    elif isinstance(action, StopMacau):
        engine.call_stop_macau(player, engine.find_player(action.target_name))
    elif isinstance(action, EndTurn):
        engine.next_turn()
    else:
        raise ValueError(f"Unknown action: {action!r}")
