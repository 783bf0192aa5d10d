"""Notifications emitted by the turn engine, and the channel that carries them.

Subscribers are plain callables. Each subscription is an explicit handle that
the collaborator closes when it goes away.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Tuple, Type

from macau.engine.card import Card, Suit
from macau.engine.game_state import GameState

if TYPE_CHECKING:
    from macau.engine.player import Player

logger = logging.getLogger(__name__)


class Event:
    """Base class for engine notifications."""


@dataclass(frozen=True)
class GameStateChanged(Event):
    state: GameState

    def __str__(self) -> str:
        return f"game state -> {self.state.value}"


@dataclass(frozen=True)
class PlayerChanged(Event):
    player: "Player"

    def __str__(self) -> str:
        return f"{self.player.name}'s turn"


@dataclass(frozen=True)
class CardPlayed(Event):
    card: Card
    player: "Player"

    def __str__(self) -> str:
        return f"{self.player.name} played {self.card}"


@dataclass(frozen=True)
class CardDrawn(Event):
    card: Card
    player: "Player"

    def __str__(self) -> str:
        return f"{self.player.name} drew a card"


@dataclass(frozen=True)
class SuitDeclared(Event):
    suit: Optional[Suit]

    def __str__(self) -> str:
        if self.suit is None:
            return "declared suit expired"
        return f"suit declared: {self.suit.value}"


@dataclass(frozen=True)
class SuitDeclarationRequested(Event):
    player: "Player"

    def __str__(self) -> str:
        return f"{self.player.name} must declare a suit"


@dataclass(frozen=True)
class DrawEffectChanged(Event):
    amount: int

    def __str__(self) -> str:
        return f"pending draw: {self.amount}"


@dataclass(frozen=True)
class TurnSkipped(Event):
    def __str__(self) -> str:
        return "turn skipped"


@dataclass(frozen=True)
class SequentialPlayChanged(Event):
    active: bool

    def __str__(self) -> str:
        return "sequential play started" if self.active else "sequential play ended"


@dataclass(frozen=True)
class MacauCalled(Event):
    player_name: str

    def __str__(self) -> str:
        return f"{self.player_name} called Macau!"


@dataclass(frozen=True)
class StopMacauCalled(Event):
    message: str

    def __str__(self) -> str:
        return self.message


Handler = Callable[[Event], None]


class Subscription:
    """Handle returned by EventBus.subscribe. Close it to stop receiving events."""

    def __init__(self, bus: "EventBus", handler: Handler, event_types: Tuple[Type[Event], ...]):
        self._bus = bus
        self.handler = handler
        self.event_types = event_types
        self.active = True

    def wants(self, event: Event) -> bool:
        return not self.event_types or isinstance(event, self.event_types)

    def close(self) -> None:
        if self.active:
            self.active = False
            self._bus._remove(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class EventBus:
    """Synchronous, ordered publish/subscribe channel."""

    def __init__(self) -> None:
        self._subscriptions: List[Subscription] = []

    def subscribe(self, handler: Handler, *event_types: Type[Event]) -> Subscription:
        """Register handler for the given event types (all events if none)."""
        subscription = Subscription(self, handler, tuple(event_types))
        self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def publish(self, event: Event) -> None:
        for subscription in list(self._subscriptions):
            if not subscription.active or not subscription.wants(event):
                continue
            try:
                subscription.handler(event)
            except Exception:
                # A broken collaborator must not leave the engine half-updated.
                logger.exception("Subscriber %r failed on %s", subscription.handler, type(event).__name__)


class EventRecorder:
    """Collects events in order; handy for statistics and tests."""

    def __init__(self, bus: EventBus, *event_types: Type[Event]):
        self.events: List[Event] = []
        self.subscription = bus.subscribe(self.events.append, *event_types)

    def of_type(self, event_type: Type[Event]) -> List[Event]:
        return [e for e in self.events if isinstance(e, event_type)]

    def counts(self) -> Dict[str, int]:
        totals: Dict[str, int] = {}
        for event in self.events:
            name = type(event).__name__
            totals[name] = totals.get(name, 0) + 1
        return totals

    def close(self) -> None:
        self.subscription.close()
