"""Agent that plays a human seat with the CPU heuristic (autoplay, tests)."""

from collections import Counter
from typing import Optional

from macau.engine import Action, PlayerView
from macau.engine.actions import CallMacau, DeclareSuit, DrawCard, EndTurn, PlayCard
from macau.engine.policy import score_play


class PolicyAgent:
    def __init__(self, name: str = "autoplay", call_macau: bool = True):
        self._name = name
        self._call_macau = call_macau

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

        declares = [a for a in legal_actions if isinstance(a, DeclareSuit)]
        if declares:
            suits = Counter(card.suit for card in player_view.my_hand)
            best = suits.most_common(1)[0][0] if suits else declares[0].suit
            return next((a for a in declares if a.suit == best), declares[0])

        if self._call_macau:
            for a in legal_actions:
                if isinstance(a, CallMacau):
                    return a

        playable = [a.card for a in legal_actions if isinstance(a, PlayCard)]
        if playable:
            card = max(playable, key=lambda c: score_play(c, player_view.my_hand))
            return PlayCard(card=card)

        for kind in (DrawCard, EndTurn):
            for a in legal_actions:
                if isinstance(a, kind):
                    return a
        return None
