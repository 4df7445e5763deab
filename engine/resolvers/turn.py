"""End-of-turn resolver for the Catan rules engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.phases import PreRoll

from ..events import Event, TurnEnded
from ..phase_machine import PhaseMachine
from .trading import TradingResolver

if TYPE_CHECKING:
    from core.game_state import GameState


class TurnResolver:
    """Hands the turn to the next seat.

    Ending a turn:
    1. Cancels any pending trade offer
    2. Makes this turn's development card purchases playable
    3. Resets the per-turn dice and card-play state
    4. Moves to the next seat's PreRoll
    """

    def __init__(self, state: GameState):
        self.state = state
        self.phase_machine = PhaseMachine(state)

    def next_player(self) -> int:
        return (self.state.current_player + 1) % self.state.num_players()

    def end_turn(self, player_id: int) -> list[Event]:
        events = TradingResolver(self.state).clear()
        self.state.get_player(player_id).promote_bought_cards()

        next_player = self.next_player()
        self.state.current_player = next_player
        self.state.turn_number += 1
        self.state.dice_roll = None
        self.state.dev_card_played_this_turn = False
        self.phase_machine.transition_to(PreRoll())

        events.append(TurnEnded(player=player_id, next_player=next_player))
        return events
