"""Macau turn engine: commands, effect resolution and the CPU turn procedure."""

from __future__ import annotations

import logging
import random
from functools import partial
from typing import Generator, List, Optional, Sequence

from macau.engine.actions import (
    Action,
    CallMacau,
    DeclareSuit,
    DrawCard,
    EndTurn,
    PlayCard,
    StopMacau,
)
from macau.engine.card import Card, Suit
from macau.engine.config import GameConfig
from macau.engine.deck import DECK_SIZE, Deck, new_shuffled_deck, standard_cards
from macau.engine.errors import (
    EmptyDeckError,
    IllegalPlayError,
    InvariantViolation,
    MacauError,
    ValidationError,
)
from macau.engine.events import (
    CardDrawn,
    CardPlayed,
    DrawEffectChanged,
    Event,
    EventBus,
    GameStateChanged,
    MacauCalled,
    PlayerChanged,
    SequentialPlayChanged,
    StopMacauCalled,
    SuitDeclarationRequested,
    SuitDeclared,
    TurnSkipped,
)
from macau.engine.game_state import ALLOWED_TRANSITIONS, GameState, PlayerView, TurnContext
from macau.engine.macau_call import MacauWindow, can_call_macau, cpu_contests, stop_macau_message
from macau.engine.player import Player
from macau.engine.policy import get_best_play
from macau.engine.rules import (
    Effect,
    allows_extra_turn,
    can_play,
    classify_effect,
    draw_amount,
    is_pop_cup_counter,
)
from macau.engine.scheduler import ImmediateScheduler, Scheduler

logger = logging.getLogger(__name__)

CpuSteps = Generator[float, None, None]


class TurnEngine:
    """Owns the game state and processes one command at a time.

    Collaborators send commands (start_new_game, play_card, draw_card,
    declare_suit, call_macau, call_stop_macau, next_turn) and subscribe to
    ``events`` for notifications. CPU seats are played by a step procedure
    handed to the injected scheduler.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
        scheduler: Optional[Scheduler] = None,
        events: Optional[EventBus] = None,
    ):
        self.config = config or GameConfig()
        self.rng = rng or random.Random()
        self.scheduler = scheduler if scheduler is not None else ImmediateScheduler()
        self.events = events or EventBus()
        self.context = TurnContext()
        self.deck = Deck([])
        self._game_id = 0
        self._macau_window = MacauWindow()
        self._awaiting_suit_from: Optional[Player] = None
        self._declared_by: Optional[Player] = None
        self._top_owner: Optional[Player] = None
        self._turn_step = 1
        self._played_this_turn = False
        self._drew_this_turn = False

    # -- read-only state -------------------------------------------------

    @property
    def state(self) -> GameState:
        return self.context.state

    @property
    def players(self) -> List[Player]:
        return list(self.context.players)

    @property
    def current_player(self) -> Optional[Player]:
        return self.context.current_player

    @property
    def current_player_index(self) -> int:
        return self.context.current_player_index

    @property
    def turn_count(self) -> int:
        return self.context.turn_count

    @property
    def top_discard(self) -> Optional[Card]:
        return self.context.top_discard

    @property
    def pending_draw_amount(self) -> int:
        return self.context.pending_draw_amount

    @property
    def sequential_play_active(self) -> bool:
        return self.context.sequential_play_active

    @property
    def declared_suit(self) -> Optional[Suit]:
        return self.context.declared_suit

    @property
    def winner(self) -> Optional[Player]:
        return self.context.winner

    @property
    def awaiting_suit_declaration(self) -> bool:
        return self._awaiting_suit_from is not None

    @property
    def macau_window_open(self) -> bool:
        return self.context.macau_window_open

    @property
    def history(self) -> List[str]:
        return list(self.context.history)

    def card_total(self) -> int:
        """Cards accounted for across deck, hands and discard pile."""
        return (
            self.deck.remaining_count()
            + sum(p.hand_size for p in self.context.players)
            + len(self.context.discard_pile)
        )

    def is_legal(self, card: Card) -> bool:
        """Whether card may be played on the discard pile under the current flags."""
        ctx = self.context
        return can_play(
            card,
            ctx.top_discard,
            ctx.sequential_play_active,
            ctx.declared_suit,
            ctx.pending_draw_amount,
        )

    def has_legal_play(self, player: Player) -> bool:
        return any(self.is_legal(card) for card in player.hand)

    def view(self, player: Player) -> PlayerView:
        return PlayerView.from_context(
            self.context,
            player,
            deck_count=self.deck.remaining_count(),
            awaiting_suit_declaration=self._awaiting_suit_from is player,
        )

    def legal_actions(self, player: Player) -> List[Action]:
        """Commands the given player may issue right now."""
        ctx = self.context
        if ctx.state is not GameState.PLAYER_TURN:
            return []
        actions: List[Action] = []
        if player is ctx.current_player:
            if self._awaiting_suit_from is player:
                return [DeclareSuit(suit=suit) for suit in Suit]
            if not self._played_this_turn or ctx.sequential_play_active:
                actions.extend(PlayCard(card=card) for card in player.hand if self.is_legal(card))
            can_draw = not self._played_this_turn and not self._drew_this_turn and not self.deck.is_empty()
            if can_draw:
                actions.append(DrawCard())
            if self._played_this_turn or self._drew_this_turn or not (can_draw or actions):
                actions.append(EndTurn())
        if can_call_macau(player):
            actions.append(CallMacau())
        actions.extend(
            StopMacau(target_name=target.name)
            for target in self._macau_window.contestable()
            if target is not player
        )
        return actions

    def find_player(self, name: str) -> Player:
        for player in self.context.players:
            if player.name == name:
                return player
        raise ValidationError(f"No player named {name!r}")

    # -- game setup ------------------------------------------------------

    def start_new_game(self, player_count: int, is_simulation: bool = False) -> None:
        """Shuffle, deal and hand the turn to seat 0.

        Seat 0 is the human unless is_simulation is set, in which case every
        seat is a CPU.
        """
        self._validate_player_count(player_count)
        players = []
        for i in range(player_count):
            if i == 0 and not is_simulation:
                players.append(Player("Player", is_human=True))
            else:
                players.append(Player(f"CPU {i + 1 if is_simulation else i}", is_human=False))
        logger.info("Starting new game with %d players (simulation=%s)", player_count, is_simulation)
        self._begin(players, new_shuffled_deck(self.rng), deal=True)

    def load_position(
        self,
        hands: Sequence[Sequence[Card]],
        top_discard: Optional[Card] = None,
        deck_top: Sequence[Card] = (),
        humans: Optional[Sequence[bool]] = None,
        current_player_index: int = 0,
        discard_pile: Sequence[Card] = (),
    ) -> None:
        """Start a game from a fixed layout.

        deck_top cards are drawn first, in order; every card not placed
        anywhere goes below them in shuffled order. discard_pile holds the
        cards already buried under top_discard. Seats are human unless
        ``humans`` says otherwise.
        """
        self._validate_player_count(len(hands))
        seats = list(humans) if humans is not None else [True] * len(hands)
        if len(seats) != len(hands):
            raise ValidationError("humans must have one entry per hand")
        if not 0 <= current_player_index < len(hands):
            raise ValidationError(f"Invalid current player index: {current_player_index}")
        if discard_pile and top_discard is None:
            raise ValidationError("A discard pile needs a top card")
        discard = list(discard_pile) + ([top_discard] if top_discard is not None else [])
        placed = [card for hand in hands for card in hand] + list(deck_top) + discard
        for card in placed:
            if not isinstance(card, Card):
                raise ValidationError(f"Not a card: {card!r}")
        if len(set(placed)) != len(placed):
            raise ValidationError("A card appears more than once in the layout")
        used = set(placed)
        rest = [card for card in standard_cards() if card not in used]
        self.rng.shuffle(rest)

        players = []
        for i, (hand, is_human) in enumerate(zip(hands, seats)):
            player = Player(f"Player {i + 1}" if is_human else f"CPU {i}", is_human=is_human)
            for card in hand:
                player.add_card(card)
            players.append(player)
        self._begin(
            players,
            Deck.from_cards(list(deck_top) + rest),
            deal=False,
            discard=discard,
            current_player_index=current_player_index,
        )

    def _validate_player_count(self, player_count: int) -> None:
        if not isinstance(player_count, int) or isinstance(player_count, bool):
            raise ValidationError(f"Player count must be an integer, got {player_count!r}")
        if not self.config.min_players <= player_count <= self.config.max_players:
            raise ValidationError(
                f"Player count must be between {self.config.min_players} and "
                f"{self.config.max_players}, got {player_count}"
            )

    def _abandon_running_game(self) -> None:
        if self.context.state is GameState.PLAYER_TURN:
            logger.info("Abandoning game %d in progress", self._game_id)
            self._set_state(GameState.GAME_OVER)
        if self.context.state is GameState.GAME_OVER:
            self._set_state(GameState.WAITING_TO_START)

    def _begin(
        self,
        players: List[Player],
        deck: Deck,
        deal: bool,
        discard: Sequence[Card] = (),
        current_player_index: int = 0,
    ) -> None:
        self._abandon_running_game()
        # Bumping the id invalidates any CPU step still queued in the scheduler.
        self._game_id += 1
        self.context = TurnContext(
            state=self.context.state,
            players=players,
            current_player_index=current_player_index,
        )
        self.deck = deck
        self._macau_window = MacauWindow()
        self._awaiting_suit_from = None
        self._declared_by = None
        self._top_owner = None
        self._turn_step = 1
        self._played_this_turn = False
        self._drew_this_turn = False

        if deal:
            self._deal()
        else:
            self.context.discard_pile.extend(discard)

        self._set_state(GameState.PLAYER_TURN)
        self._emit(PlayerChanged(self.context.current_player))
        self._check_invariants()
        if not self.context.current_player.is_human:
            self._start_cpu_turn()

    def _deal(self) -> None:
        players = self.context.players
        for _ in range(self.config.initial_hand_size):
            for player in players:
                if self.deck.is_empty():
                    break
                player.add_card(self.deck.draw())
        if self.deck.is_empty():
            logger.warning("Deck ran out while dealing %d players", len(players))
        if self.config.require_initial_discard and not self.deck.is_empty():
            self.context.discard_pile.append(self.deck.draw())

    # -- commands --------------------------------------------------------

    def play_card(self, card: Card, player: Player) -> None:
        """Play card from player's hand, applying its effect."""
        self._validate_play(card, player)
        ctx = self.context
        countering_pop_cup = ctx.pending_draw_amount > 0 and is_pop_cup_counter(card, ctx.top_discard)
        effect = classify_effect(card)
        logger.debug("Turn %d: %s plays %s (%s)", ctx.turn_count, player.name, card, effect.value)

        player.remove_card(card)
        self._played_this_turn = True
        if ctx.sequential_play_active and effect is not Effect.SEQUENTIAL:
            self._set_sequential(False)
        if countering_pop_cup:
            self._reverse_pop_cup(player)
        else:
            self._apply_effect(effect, card, player)

        ctx.discard_pile.append(card)
        self._top_owner = player
        self._emit(CardPlayed(card, player))

        if player.hand_size == 1:
            self._macau_window.open(player)
            self._sync_macau_window()
        self._check_win(player)
        self._check_invariants()

    def draw_card(self, player: Player) -> List[Card]:
        """Draw for player: the whole pending penalty, or a single card.

        The turn passes automatically when the player is left without a
        legal play.
        """
        self._validate_draw(player)
        ctx = self.context
        if ctx.sequential_play_active:
            self._set_sequential(False)
        self._drew_this_turn = True

        if ctx.pending_draw_amount > 0:
            amount = ctx.pending_draw_amount
            drawn = self._draw_into(player, amount)
            if len(drawn) < amount:
                logger.warning(
                    "Deck exhausted: %s drew %d of %d penalty cards", player.name, len(drawn), amount
                )
            ctx.pending_draw_amount = 0
            self._emit(DrawEffectChanged(0))
            self._check_invariants()
            if not self.has_legal_play(player):
                self.next_turn()
            return drawn

        drawn = self._draw_into(player, 1)
        self._check_invariants()
        if not self.is_legal(drawn[0]):
            self.next_turn()
        return drawn

    def declare_suit(self, suit) -> None:
        """Answer a pending Jack with the suit everyone must now follow."""
        if self._awaiting_suit_from is None:
            raise ValidationError("No suit declaration is pending")
        suit = Suit.parse(suit)
        player = self._awaiting_suit_from
        self._awaiting_suit_from = None
        self._declare(suit, player)

    def next_turn(self) -> None:
        """Hand the turn to the next seat, honouring skips and extra turns."""
        ctx = self.context
        if ctx.state is not GameState.PLAYER_TURN:
            raise ValidationError(f"Cannot change turns in state {ctx.state.value}")
        if self._awaiting_suit_from is not None:
            raise ValidationError(f"{self._awaiting_suit_from.name} must declare a suit first")
        if self.check_game_end():
            return

        step, self._turn_step = self._turn_step, 1
        ctx.current_player_index = (ctx.current_player_index + step) % len(ctx.players)
        ctx.turn_count += 1
        self._played_this_turn = False
        self._drew_this_turn = False
        player = ctx.current_player

        if step != 0:
            # Back to an exposed player after the others had their chance.
            self._close_macau_window(player)
        if ctx.declared_suit is not None and self._declared_by is player:
            # A full trick has passed since the declaration.
            ctx.declared_suit = None
            self._declared_by = None
            self._emit(SuitDeclared(None))

        self._set_state(GameState.PLAYER_TURN)
        self._emit(PlayerChanged(player))
        if not player.is_human:
            self._start_cpu_turn()

    def call_macau(self, player: Player) -> bool:
        """Announce the last card. Returns False (and does nothing) when not applicable."""
        if self.context.state is not GameState.PLAYER_TURN or player is None:
            return False
        if not can_call_macau(player):
            return False
        player.has_declared_macau = True
        self._close_macau_window(player)
        self._emit(MacauCalled(player.name))
        return True

    def call_stop_macau(self, caller: Player, target: Player) -> bool:
        """Penalize target for not calling Macau. Returns False when not applicable."""
        if self.context.state is not GameState.PLAYER_TURN:
            return False
        if caller is None or target is None or caller is target:
            return False
        if not self._macau_window.is_contestable(target):
            return False
        self._close_macau_window(target)
        self._emit(StopMacauCalled(stop_macau_message(caller, target)))
        self._draw_into(target, self.config.stop_macau_penalty)
        self._check_invariants()
        return True

    def check_game_end(self) -> bool:
        """End the game on an empty hand or a deadlock. Returns True if it is over."""
        ctx = self.context
        if ctx.state is GameState.GAME_OVER:
            return True
        if ctx.state is not GameState.PLAYER_TURN:
            return False
        for player in ctx.players:
            if player.hand_size == 0:
                self._finish(player, "emptied their hand")
                return True
        if self.deck.is_empty() and not any(self.has_legal_play(p) for p in ctx.players):
            # min() keeps the first of equal hands, i.e. seat order.
            winner = min(ctx.players, key=lambda p: p.hand_size)
            self._finish(winner, f"holds the fewest cards ({winner.hand_size}) after a deadlock")
            return True
        return False

    # -- validation ------------------------------------------------------

    def _validate_play(self, card: Card, player: Player) -> None:
        ctx = self.context
        if card is None or not isinstance(card, Card):
            raise IllegalPlayError(f"Cannot play {card!r}")
        if player is None:
            raise IllegalPlayError("Player cannot be None")
        if ctx.state is not GameState.PLAYER_TURN:
            raise IllegalPlayError(f"Cannot play a card in state {ctx.state.value}")
        if player is not ctx.current_player:
            raise IllegalPlayError(f"It is not {player.name}'s turn")
        if self._awaiting_suit_from is not None:
            raise IllegalPlayError(f"{self._awaiting_suit_from.name} must declare a suit first")
        if self._played_this_turn and not ctx.sequential_play_active:
            raise IllegalPlayError(f"{player.name} already played this turn")
        if not player.has_card(card):
            raise IllegalPlayError(f"{player.name} does not hold {card}")
        if not self.is_legal(card):
            raise IllegalPlayError(f"{card} cannot be played on {ctx.top_discard}")

    def _validate_draw(self, player: Player) -> None:
        ctx = self.context
        if player is None:
            raise ValidationError("Player cannot be None")
        if ctx.state is not GameState.PLAYER_TURN:
            raise ValidationError(f"Cannot draw in state {ctx.state.value}")
        if player is not ctx.current_player:
            raise ValidationError(f"It is not {player.name}'s turn")
        if self._awaiting_suit_from is not None:
            raise ValidationError(f"{self._awaiting_suit_from.name} must declare a suit first")
        if self._played_this_turn:
            raise ValidationError(f"{player.name} already played this turn")
        if self._drew_this_turn:
            raise ValidationError(f"{player.name} already drew this turn")
        if self.deck.is_empty():
            raise EmptyDeckError("Cannot draw from empty deck")

    # -- effects ---------------------------------------------------------

    def _apply_effect(self, effect: Effect, card: Card, player: Player) -> None:
        ctx = self.context
        if effect in (Effect.DRAW_TWO, Effect.DRAW_THREE):
            ctx.pending_draw_amount += draw_amount(effect)
            self._emit(DrawEffectChanged(ctx.pending_draw_amount))
        elif effect is Effect.POP_CUP:
            ctx.pending_draw_amount = self.config.pop_cup_draw
            self._emit(DrawEffectChanged(ctx.pending_draw_amount))
        elif effect is Effect.SKIP_TURN:
            # Heads-up: the turn comes straight back. Otherwise jump a seat.
            self._turn_step = 0 if allows_extra_turn(card, len(ctx.players)) else 2
            self._emit(TurnSkipped())
        elif effect is Effect.CHANGE_SUIT:
            if player.is_human and player.hand_size > 0:
                self._awaiting_suit_from = player
                self._emit(SuitDeclarationRequested(player))
            else:
                self._declare(player.most_common_suit() or card.suit, player)
        elif effect is Effect.SEQUENTIAL:
            if not ctx.sequential_play_active:
                self._set_sequential(True)

    def _reverse_pop_cup(self, player: Player) -> None:
        """Queen of hearts on a live Pop Cup: the King's owner draws instead."""
        ctx = self.context
        victim = self._top_owner
        ctx.pending_draw_amount = 0
        self._emit(DrawEffectChanged(0))
        if victim is not None and victim is not player:
            logger.debug("%s reverses the Pop Cup onto %s", player.name, victim.name)
            self._draw_into(victim, self.config.pop_cup_draw)

    def _declare(self, suit: Suit, player: Player) -> None:
        self.context.declared_suit = suit
        self._declared_by = player
        self._emit(SuitDeclared(suit))

    def _set_sequential(self, active: bool) -> None:
        self.context.sequential_play_active = active
        self._emit(SequentialPlayChanged(active))

    def _draw_into(self, player: Player, count: int) -> List[Card]:
        drawn = []
        for _ in range(count):
            if self.deck.is_empty():
                break
            card = self.deck.draw()
            player.add_card(card)
            drawn.append(card)
            self._emit(CardDrawn(card, player))
        self._macau_window.prune()
        self._sync_macau_window()
        return drawn

    def _close_macau_window(self, player: Player) -> None:
        self._macau_window.close(player)
        self._sync_macau_window()

    def _sync_macau_window(self) -> None:
        self.context.macau_window_open = self._macau_window.is_open

    def _check_win(self, player: Player) -> None:
        if player.hand_size == 0:
            self._awaiting_suit_from = None
            self._finish(player, "emptied their hand")

    def _finish(self, winner: Player, reason: str) -> None:
        self.context.winner = winner
        logger.info(
            "Game over after %d turns: %s wins (%s)", self.context.turn_count, winner.name, reason
        )
        self._set_state(GameState.GAME_OVER)

    # -- state bookkeeping -----------------------------------------------

    def _set_state(self, new_state: GameState) -> None:
        old_state = self.context.state
        if new_state not in ALLOWED_TRANSITIONS[old_state]:
            raise InvariantViolation(f"Illegal transition {old_state.value} -> {new_state.value}")
        self.context.state = new_state
        if new_state is not old_state:
            self._emit(GameStateChanged(new_state))

    def _emit(self, event: Event) -> None:
        self.context.history.append(str(event))
        logger.debug("event: %s", event)
        self.events.publish(event)

    def _check_invariants(self) -> None:
        ctx = self.context
        problems = []
        if ctx.players and self.card_total() != DECK_SIZE:
            problems.append(f"{self.card_total()} cards accounted for instead of {DECK_SIZE}")
        if ctx.players and not 0 <= ctx.current_player_index < len(ctx.players):
            problems.append(f"current player index {ctx.current_player_index} out of range")
        if ctx.pending_draw_amount < 0:
            problems.append(f"negative pending draw {ctx.pending_draw_amount}")
        if problems:
            self._recover("; ".join(problems))

    def _recover(self, reason: str) -> None:
        """Drop transient turn flags back to a safe baseline and keep playing."""
        logger.error("Invariant violation: %s. Resetting turn flags.", reason)
        ctx = self.context
        ctx.pending_draw_amount = 0
        was_sequential = ctx.sequential_play_active
        ctx.sequential_play_active = False
        if ctx.players:
            ctx.current_player_index %= len(ctx.players)
        self._awaiting_suit_from = None
        self._turn_step = 1
        self._emit(DrawEffectChanged(0))
        if was_sequential:
            self._emit(SequentialPlayChanged(False))

    # -- CPU turns -------------------------------------------------------

    def _start_cpu_turn(self) -> None:
        player = self.context.current_player
        steps = self._cpu_turn_steps(player, self.context.turn_count)
        self.scheduler.call_later(0.0, partial(self._resume_cpu, steps, self._game_id))

    def _resume_cpu(self, steps: CpuSteps, game_id: int) -> None:
        if game_id != self._game_id or self.context.state is not GameState.PLAYER_TURN:
            steps.close()
            logger.debug("Dropped CPU step from game %d", game_id)
            return
        try:
            delay = next(steps)
        except StopIteration:
            return
        except MacauError as exc:
            steps.close()
            self._recover(f"CPU step failed: {exc}")
            if self.context.state is GameState.PLAYER_TURN:
                self.next_turn()
            return
        self.scheduler.call_later(delay, partial(self._resume_cpu, steps, game_id))

    def _owns_turn(self, player: Player, turn: int) -> bool:
        ctx = self.context
        return (
            ctx.state is GameState.PLAYER_TURN
            and ctx.current_player is player
            and ctx.turn_count == turn
        )

    def _cpu_check_macau(self, player: Player, contest: bool = True) -> None:
        """Roll for the CPU's own Macau call and, if contest is set, one
        Stop Macau roll per exposed opponent.

        The turn procedure contests only at the start of the turn, so each
        exposed player faces at most one roll per CPU turn.
        """
        if player.check_macau(self.rng, self.config.macau_call_chance):
            self.call_macau(player)
        if not contest:
            return
        for target in self._macau_window.contestable():
            if target is player:
                continue
            if cpu_contests(player, self.rng, self.config.stop_macau_chance):
                self.call_stop_macau(player, target)

    def _cpu_turn_steps(self, player: Player, turn: int) -> CpuSteps:
        """One CPU turn. Each yield hands a pacing delay back to the scheduler."""
        delay = self.config.cpu_delay
        yield delay
        if not self._owns_turn(player, turn):
            return
        ctx = self.context
        logger.debug(
            "%s's turn %d: hand=[%s] top=%s declared=%s pending=%d sequential=%s",
            player.name,
            turn,
            " ".join(str(c) for c in player.hand),
            ctx.top_discard,
            ctx.declared_suit.value if ctx.declared_suit else None,
            ctx.pending_draw_amount,
            ctx.sequential_play_active,
        )
        self._cpu_check_macau(player)

        while True:
            card = None
            if not self._played_this_turn or ctx.sequential_play_active:
                card = get_best_play(
                    player.hand,
                    ctx.top_discard,
                    ctx.declared_suit,
                    ctx.sequential_play_active,
                    ctx.pending_draw_amount,
                )
            if card is not None:
                self.play_card(card, player)
                self._cpu_check_macau(player, contest=False)
                yield delay
                if not self._owns_turn(player, turn):
                    return
                if ctx.sequential_play_active:
                    continue
                break
            if self._played_this_turn or self._drew_this_turn or self.deck.is_empty():
                break
            self.draw_card(player)
            yield delay
            if not self._owns_turn(player, turn):
                return

        if self.check_game_end():
            return
        yield delay
        if not self._owns_turn(player, turn):
            return
        self.next_turn()
