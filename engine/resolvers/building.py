"""Building resolver for the Catan rules engine.

Handles the purchases made during MainPhase:
- Roads (free while a Road Building card is being resolved)
- Settlements, which must connect to the player's road network
- Cities, upgraded from the player's own settlements
- Development cards, drawn from the end of the deck

Every purchase re-evaluates Longest Road where the board changed and then
checks whether the builder has won.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from core.constants import DevelopmentCard
from core.hex import VertexCoord, EdgeCoord
from core.phases import MainPhase, RoadBuildingInProgress
from core.player import CITY, DEVELOPMENT_CARD, ROAD, SETTLEMENT

from ..errors import ActionError, ErrorKind
from ..events import CityBuilt, DevelopmentCardPurchased, Event, RoadBuilt, SettlementBuilt
from ..phase_machine import PhaseMachine
from .awards import AwardsResolver

if TYPE_CHECKING:
    from core.game_state import GameState
    from core.player import Player


@dataclass
class PurchaseOption:
    """What a player can currently afford and place.

    Attributes:
        roads: Legal road edges (empty if unaffordable).
        settlements: Legal settlement vertices (empty if unaffordable).
        cities: Legal city vertices (empty if unaffordable).
        dev_card: Whether a development card can be bought.
    """

    roads: list[EdgeCoord]
    settlements: list[VertexCoord]
    cities: list[VertexCoord]
    dev_card: bool


class BuildingResolver:
    """Validates and executes builds and development card purchases."""

    def __init__(self, state: GameState):
        self.state = state
        self.phase_machine = PhaseMachine(state)
        self.awards = AwardsResolver(state)

    def _player(self, player_id: int) -> Player:
        return self.state.get_player(player_id)

    def is_free_road(self) -> bool:
        return isinstance(self.state.phase, RoadBuildingInProgress)

    # -------------------------------------------------------------------------
    # Roads
    # -------------------------------------------------------------------------

    def validate_road(self, player_id: int, edge: EdgeCoord) -> None:
        if not self.state.board.is_valid_road_spot(edge, player_id):
            raise ActionError(ErrorKind.INVALID_LOCATION, f"Cannot build a road at {edge}")
        player = self._player(player_id)
        if player.roads_remaining <= 0:
            raise ActionError(ErrorKind.NO_PIECES_REMAINING, "No roads remaining")
        if not self.is_free_road() and not player.resources.can_afford(ROAD):
            raise ActionError(ErrorKind.CANNOT_AFFORD, "A road costs 1 brick and 1 lumber")

    def build_road(self, player_id: int, edge: EdgeCoord) -> list[Event]:
        self.validate_road(player_id, edge)
        player = self._player(player_id)
        free = self.is_free_road()
        if not free:
            player.resources.subtract(ROAD)
        player.roads_remaining -= 1
        self.state.board.place_road(edge, player_id)

        events: list[Event] = [RoadBuilt(player=player_id, edge=edge)]
        events.extend(self.awards.update_longest_road())
        events.extend(self.awards.check_winner(player_id))
        if free and not self.state.is_game_over():
            self._advance_road_building(player_id)
        return events

    def _advance_road_building(self, player_id: int) -> None:
        remaining = self.state.phase.roads_remaining - 1
        player = self._player(player_id)
        if remaining <= 0 or player.roads_remaining <= 0 or not self.state.board.valid_road_spots(player_id):
            self.phase_machine.transition_to(MainPhase())
        else:
            self.phase_machine.transition_to(RoadBuildingInProgress(roads_remaining=remaining))

    # -------------------------------------------------------------------------
    # Settlements and cities
    # -------------------------------------------------------------------------

    def validate_settlement(self, player_id: int, vertex: VertexCoord) -> None:
        if not self.state.board.is_valid_settlement_spot(vertex, player_id, is_setup=False):
            raise ActionError(ErrorKind.INVALID_LOCATION, f"Cannot build a settlement at {vertex}")
        player = self._player(player_id)
        if player.settlements_remaining <= 0:
            raise ActionError(ErrorKind.NO_PIECES_REMAINING, "No settlements remaining")
        if not player.resources.can_afford(SETTLEMENT):
            raise ActionError(
                ErrorKind.CANNOT_AFFORD, "A settlement costs 1 brick, 1 lumber, 1 grain and 1 wool"
            )

    def build_settlement(self, player_id: int, vertex: VertexCoord) -> list[Event]:
        self.validate_settlement(player_id, vertex)
        player = self._player(player_id)
        player.resources.subtract(SETTLEMENT)
        player.settlements_remaining -= 1
        self.state.board.place_settlement(vertex, player_id)

        events: list[Event] = [SettlementBuilt(player=player_id, vertex=vertex)]
        events.extend(self.awards.update_longest_road())
        events.extend(self.awards.check_winner(player_id))
        return events

    def validate_city(self, player_id: int, vertex: VertexCoord) -> None:
        if not self.state.board.is_valid_city_spot(vertex, player_id):
            raise ActionError(ErrorKind.INVALID_LOCATION, f"No settlement of yours at {vertex}")
        player = self._player(player_id)
        if player.cities_remaining <= 0:
            raise ActionError(ErrorKind.NO_PIECES_REMAINING, "No cities remaining")
        if not player.resources.can_afford(CITY):
            raise ActionError(ErrorKind.CANNOT_AFFORD, "A city costs 3 ore and 2 grain")

    def build_city(self, player_id: int, vertex: VertexCoord) -> list[Event]:
        self.validate_city(player_id, vertex)
        player = self._player(player_id)
        player.resources.subtract(CITY)
        player.cities_remaining -= 1
        # The replaced settlement returns to the stock
        player.settlements_remaining += 1
        self.state.board.upgrade_to_city(vertex, player_id)

        events: list[Event] = [CityBuilt(player=player_id, vertex=vertex)]
        events.extend(self.awards.check_winner(player_id))
        return events

    # -------------------------------------------------------------------------
    # Development cards
    # -------------------------------------------------------------------------

    def validate_buy_dev_card(self, player_id: int) -> None:
        if not self.state.dev_card_deck:
            raise ActionError(ErrorKind.EMPTY_DECK)
        if not self._player(player_id).resources.can_afford(DEVELOPMENT_CARD):
            raise ActionError(
                ErrorKind.CANNOT_AFFORD, "A development card costs 1 ore, 1 grain and 1 wool"
            )

    def buy_dev_card(self, player_id: int) -> list[Event]:
        self.validate_buy_dev_card(player_id)
        player = self._player(player_id)
        player.resources.subtract(DEVELOPMENT_CARD)
        card: DevelopmentCard = self.state.dev_card_deck.pop()
        player.buy_dev_card(card)

        events: list[Event] = [DevelopmentCardPurchased(player=player_id, card=card)]
        events.extend(self.awards.check_winner(player_id))
        return events

    # -------------------------------------------------------------------------
    # Enumeration
    # -------------------------------------------------------------------------

    def get_purchase_options(self, player_id: int) -> PurchaseOption:
        board = self.state.board
        player = self._player(player_id)
        hand = player.resources
        roads: list[EdgeCoord] = []
        if player.roads_remaining > 0 and (self.is_free_road() or hand.can_afford(ROAD)):
            roads = board.valid_road_spots(player_id)
        settlements: list[VertexCoord] = []
        if player.settlements_remaining > 0 and hand.can_afford(SETTLEMENT):
            settlements = board.valid_settlement_spots(player_id)
        cities: list[VertexCoord] = []
        if player.cities_remaining > 0 and hand.can_afford(CITY):
            cities = board.valid_city_spots(player_id)
        dev_card = bool(self.state.dev_card_deck) and hand.can_afford(DEVELOPMENT_CARD)
        return PurchaseOption(roads=roads, settlements=settlements, cities=cities, dev_card=dev_card)
