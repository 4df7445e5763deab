"""Development card resolver for the Catan rules engine.

At most one development card may be played per turn, and a card bought
this turn cannot be played until the next one. Victory point cards are
never played; they count towards the holder's score while held.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.constants import DevelopmentCard, Resource, ROAD_BUILDING_ROADS
from core.phases import RoadBuildingInProgress, RobberMoveRequired

from ..errors import ActionError, ErrorKind
from ..events import (
    Event,
    KnightPlayed,
    MonopolyPlayed,
    RoadBuildingPlayed,
    YearOfPlentyPlayed,
)
from ..phase_machine import PhaseMachine
from .awards import AwardsResolver

if TYPE_CHECKING:
    from core.game_state import GameState


class DevCardResolver:
    """Validates and resolves development card plays."""

    def __init__(self, state: GameState):
        self.state = state
        self.phase_machine = PhaseMachine(state)
        self.awards = AwardsResolver(state)

    def validate_play(self, player_id: int, card: DevelopmentCard) -> None:
        """Check the once-per-turn limit and that the card is playable.

        Raises:
            ActionError: INVALID_PHASE if a card was already played this
                turn, NO_SUCH_CARD if the card is not held from a previous turn.
        """
        if self.state.dev_card_played_this_turn:
            raise ActionError(
                ErrorKind.INVALID_PHASE, "Only one development card may be played per turn"
            )
        if not self.state.get_player(player_id).has_playable(card):
            raise ActionError(ErrorKind.NO_SUCH_CARD, f"No playable {card.value} card")

    def _consume(self, player_id: int, card: DevelopmentCard) -> None:
        self.state.get_player(player_id).play_dev_card(card)
        self.state.dev_card_played_this_turn = True

    def playable_cards(self, player_id: int) -> list[DevelopmentCard]:
        if self.state.dev_card_played_this_turn:
            return []
        player = self.state.get_player(player_id)
        return [
            card for card in DevelopmentCard
            if card != DevelopmentCard.VICTORY_POINT and player.has_playable(card)
        ]

    # -------------------------------------------------------------------------
    # Knight
    # -------------------------------------------------------------------------

    def play_knight(self, player_id: int) -> list[Event]:
        self.validate_play(player_id, DevelopmentCard.KNIGHT)
        self._consume(player_id, DevelopmentCard.KNIGHT)
        self.state.get_player(player_id).knights_played += 1

        events: list[Event] = [KnightPlayed(player=player_id)]
        events.extend(self.awards.update_largest_army())
        events.extend(self.awards.check_winner(player_id))
        if not self.state.is_game_over():
            self.phase_machine.transition_to(RobberMoveRequired())
        return events

    # -------------------------------------------------------------------------
    # Road Building
    # -------------------------------------------------------------------------

    def validate_road_building(self, player_id: int) -> None:
        self.validate_play(player_id, DevelopmentCard.ROAD_BUILDING)
        if self.state.get_player(player_id).roads_remaining <= 0:
            raise ActionError(ErrorKind.NO_PIECES_REMAINING, "No roads remaining")
        if not self.state.board.valid_road_spots(player_id):
            raise ActionError(ErrorKind.INVALID_LOCATION, "No legal road placement")

    def play_road_building(self, player_id: int) -> list[Event]:
        self.validate_road_building(player_id)
        self._consume(player_id, DevelopmentCard.ROAD_BUILDING)
        roads = min(ROAD_BUILDING_ROADS, self.state.get_player(player_id).roads_remaining)
        self.phase_machine.transition_to(RoadBuildingInProgress(roads_remaining=roads))
        return [RoadBuildingPlayed(player=player_id)]

    def can_play_road_building(self, player_id: int) -> bool:
        try:
            self.validate_road_building(player_id)
        except ActionError:
            return False
        return True

    # -------------------------------------------------------------------------
    # Year of Plenty and Monopoly
    # -------------------------------------------------------------------------

    def play_year_of_plenty(self, player_id: int, first: Resource, second: Resource) -> list[Event]:
        """Take two resources from the bank; the bank never runs out."""
        self.validate_play(player_id, DevelopmentCard.YEAR_OF_PLENTY)
        self._consume(player_id, DevelopmentCard.YEAR_OF_PLENTY)
        hand = self.state.get_player(player_id).resources
        hand.add(first)
        hand.add(second)
        return [YearOfPlentyPlayed(player=player_id, first=first, second=second)]

    def play_monopoly(self, player_id: int, resource: Resource) -> list[Event]:
        self.validate_play(player_id, DevelopmentCard.MONOPOLY)
        self._consume(player_id, DevelopmentCard.MONOPOLY)
        taken = 0
        for other in self.state.players:
            if other.player_id == player_id:
                continue
            taken += other.resources.get(resource)
            other.resources.set(resource, 0)
        self.state.get_player(player_id).resources.add(resource, taken)
        return [MonopolyPlayed(player=player_id, resource=resource, amount=taken)]
