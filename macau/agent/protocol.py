"""Contract for whatever drives a human seat: the terminal, a script or a bot."""

from typing import Optional, Protocol

from macau.engine import Action, PlayerView


class AgentProtocol(Protocol):
    """Picks the next command for a human seat.

    The runner asks only while the seat is the current player, so
    ``legal_actions`` always holds something the engine will accept.
    """

    @property
    def name(self) -> str:
        ...

    def get_action(
        self,
        player_view: PlayerView,
        legal_actions: list[Action],
        player_name: str,
    ) -> Optional[Action]:
        """Choose the seat's next command.

        After a Jack, ``legal_actions`` holds only the four DeclareSuit
        choices and ``player_view.awaiting_suit_declaration`` is set.
        Returning None means "no preference": the runner draws if it can,
        otherwise ends the turn, and while a suit is owed it declares the
        first suit offered.
        """
        ...
