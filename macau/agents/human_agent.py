"""Human agent - reads actions from terminal."""

from typing import Callable, Optional

from macau.engine import Action, PlayerView
from macau.engine.actions import describe_action


class HumanAgent:
    """Agent that prompts the human for input via terminal."""

    def __init__(
        self,
        name: str = "human",
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ):
        self._name = name
        self._input = input_fn
        self._print = output_fn

    @property
    def name(self) -> str:
        return self._name

    def get_action(
        self,
        player_view: PlayerView,
        legal_actions: list[Action],
        player_name: str,
    ) -> Optional[Action]:
        if not legal_actions:
            return None

        self._print("\n--- Your turn ---")
        for line in player_view.history[-5:]:
            self._print(f"  > {line}")
        self._print("Your hand: " + " ".join(str(c) for c in player_view.my_hand))
        self._print(f"Top discard: {player_view.top_discard or 'none'}")
        if player_view.declared_suit:
            self._print(f"Declared suit: {player_view.declared_suit.value}")
        if player_view.pending_draw_amount:
            self._print(f"Pending draw: {player_view.pending_draw_amount}")
        if player_view.sequential_play_active:
            self._print("Sequential play active")
        others = ", ".join(
            f"{name}: {count}"
            for name, count in player_view.num_cards_per_player.items()
            if name != player_name
        )
        self._print(f"Others: {others}   Deck: {player_view.deck_count}")
        self._print("\nLegal actions:")
        for i, a in enumerate(legal_actions):
            self._print(f"  {i}: {describe_action(a)}")

        while True:
            try:
                raw = self._input("Enter number: ").strip()
                idx = int(raw)
                if 0 <= idx < len(legal_actions):
                    return legal_actions[idx]
            except ValueError:
                pass
            except EOFError:
                return None
            self._print("Invalid. Try again.")
