"""Action space mapping for the Catan RL environment.

Provides bidirectional mapping between flat action indices (for neural networks)
and structured Action objects (for the game engine).
"""

from __future__ import annotations

import itertools

from core.board import Board
from core.constants import Resource
from core.game_state import GameState
from core.hex import HexCoord, VertexCoord, EdgeCoord
from core.player import ResourceHand
from engine.actions import (
    Action,
    ActionType,
    PlaceInitialSettlement,
    PlaceInitialRoad,
    RollDice,
    EndTurn,
    BuildRoad,
    BuildSettlement,
    BuildCity,
    BuyDevelopmentCard,
    PlayKnight,
    PlayRoadBuilding,
    PlayYearOfPlenty,
    PlayMonopoly,
    MoveRobber,
    StealFrom,
    DiscardCards,
    MaritimeTrade,
    AcceptTrade,
    RejectTrade,
    CancelTrade,
)
from engine.resolvers.robber import RobberResolver
from .config import ActionSpaceConfig, DEFAULT_ACTION_CONFIG

# Actions without parameters, keyed by their category in the action space
_SIMPLE_ACTIONS: dict[str, Action] = {
    "roll_dice": RollDice(),
    "end_turn": EndTurn(),
    "buy_development_card": BuyDevelopmentCard(),
    "play_knight": PlayKnight(),
    "play_road_building": PlayRoadBuilding(),
    "accept_trade": AcceptTrade(),
    "reject_trade": RejectTrade(),
    "cancel_trade": CancelTrade(),
}

_RESOURCE_ORDER = list(Resource)


def canonical_discard(hand: ResourceHand, amount: int) -> ResourceHand:
    """Pick `amount` cards to discard, always from the largest pile.

    Ties go to the resource that comes first in canonical order.
    """
    remaining = hand.copy()
    discard = ResourceHand()
    for _ in range(amount):
        resource = max(_RESOURCE_ORDER, key=lambda r: (remaining.get(r), -_RESOURCE_ORDER.index(r)))
        remaining.remove(resource)
        discard.add(resource)
    return discard


class ActionMapping:
    """Bidirectional mapping between flat action indices and Action objects.

    This class handles the conversion between:
    - Flat integer indices (0 to total_actions-1) used by neural networks
    - Structured Action objects used by the game engine

    Vertex, edge and hex slots follow the sorted coordinates of the board's
    land, so every board with the same land shape shares one mapping. All
    discards share a single slot that expands to canonical_discard().
    """

    def __init__(self, board: Board, config: ActionSpaceConfig = DEFAULT_ACTION_CONFIG):
        """Initialize action mapping with board topology.

        Args:
            board: The game board (needed for vertex/edge/hex topology).
            config: Action space configuration.

        Raises:
            ValueError: If the board is larger than the configured space.
        """
        self.config = config

        self._vertices: list[VertexCoord] = sorted(board.land_vertices())
        self._edges: list[EdgeCoord] = sorted(board.land_edges())
        self._hexes: list[HexCoord] = sorted(t.coord for t in board.land_tiles())
        if (
            len(self._vertices) > config.MAX_VERTICES
            or len(self._edges) > config.MAX_EDGES
            or len(self._hexes) > config.MAX_HEXES
        ):
            raise ValueError(
                f"Board with {len(self._hexes)} land hexes does not fit the action space "
                f"({config.MAX_HEXES} hexes, {config.MAX_VERTICES} vertices, {config.MAX_EDGES} edges)"
            )

        self._vertex_idx = {v: i for i, v in enumerate(self._vertices)}
        self._edge_idx = {e: i for i, e in enumerate(self._edges)}
        self._hex_idx = {h: i for i, h in enumerate(self._hexes)}

        self._year_of_plenty = list(itertools.combinations_with_replacement(Resource, 2))
        self._maritime = list(itertools.permutations(Resource, 2))

    def index_to_action(self, action_idx: int, state: GameState, player_id: int) -> Action:
        """Convert flat action index to structured Action object.

        Args:
            action_idx: Flat action index (0 to total_actions-1).
            state: Current game state (needed for trade rates and discards).
            player_id: The player who would take the action.

        Raises:
            ValueError: If action_idx is out of range or is an unused padding slot.
        """
        category, offset = self.config.category_of(action_idx)

        if category in _SIMPLE_ACTIONS:
            return _SIMPLE_ACTIONS[category]

        if category in ("setup_settlement", "build_settlement", "build_city"):
            vertex = self._lookup(self._vertices, offset, action_idx)
            if category == "setup_settlement":
                return PlaceInitialSettlement(vertex)
            if category == "build_settlement":
                return BuildSettlement(vertex)
            return BuildCity(vertex)

        if category in ("setup_road", "build_road"):
            edge = self._lookup(self._edges, offset, action_idx)
            if category == "setup_road":
                return PlaceInitialRoad(edge)
            return BuildRoad(edge)

        if category == "move_robber":
            return MoveRobber(self._lookup(self._hexes, offset, action_idx))

        if category == "steal_from":
            return StealFrom(offset)

        if category == "play_year_of_plenty":
            first, second = self._year_of_plenty[offset]
            return PlayYearOfPlenty(first, second)

        if category == "play_monopoly":
            return PlayMonopoly(_RESOURCE_ORDER[offset])

        if category == "maritime_trade":
            give, receive = self._maritime[offset]
            rate = state.board.trade_rate(player_id, give)
            return MaritimeTrade(give, rate, receive)

        if category == "discard_cards":
            hand = state.get_player(player_id).resources
            amount = RobberResolver(state).discard_amount(player_id)
            return DiscardCards(canonical_discard(hand, amount))

        raise ValueError(f"Unhandled action index: {action_idx}")

    @staticmethod
    def _lookup(items: list, offset: int, action_idx: int):
        if offset >= len(items):
            raise ValueError(f"Action index {action_idx} is a padding slot on this board")
        return items[offset]

    def action_to_index(self, action: Action) -> int:
        """Convert structured Action object to flat action index.

        Raises:
            ValueError: If action cannot be mapped to an index.
        """
        action_type = action.action_type
        category = action_type.value

        if category in _SIMPLE_ACTIONS:
            return self.config.start(category)

        try:
            if action_type == ActionType.PLACE_INITIAL_SETTLEMENT:
                return self.config.start("setup_settlement") + self._vertex_idx[action.vertex]
            if action_type == ActionType.PLACE_INITIAL_ROAD:
                return self.config.start("setup_road") + self._edge_idx[action.edge]
            if action_type in (ActionType.BUILD_SETTLEMENT, ActionType.BUILD_CITY):
                return self.config.start(category) + self._vertex_idx[action.vertex]
            if action_type == ActionType.BUILD_ROAD:
                return self.config.start(category) + self._edge_idx[action.edge]
            if action_type == ActionType.MOVE_ROBBER:
                return self.config.start(category) + self._hex_idx[action.hex]
        except KeyError:
            raise ValueError(f"Action {action} is not on this board")

        if action_type == ActionType.STEAL_FROM:
            if not 0 <= action.victim < self.config.MAX_PLAYERS:
                raise ValueError(f"Invalid steal victim: {action.victim}")
            return self.config.start(category) + action.victim

        if action_type == ActionType.PLAY_YEAR_OF_PLENTY:
            pair = tuple(sorted((action.first, action.second), key=_RESOURCE_ORDER.index))
            return self.config.start(category) + self._year_of_plenty.index(pair)

        if action_type == ActionType.PLAY_MONOPOLY:
            return self.config.start(category) + _RESOURCE_ORDER.index(action.resource)

        if action_type == ActionType.MARITIME_TRADE:
            if action.give == action.receive:
                raise ValueError(f"Invalid maritime trade: {action}")
            return self.config.start(category) + self._maritime.index((action.give, action.receive))

        if action_type == ActionType.DISCARD_CARDS:
            return self.config.start(category)

        raise ValueError(f"Unknown action type: {action_type}")

    def get_action_range(self, action_type: ActionType) -> tuple[int, int]:
        """Get the (start_idx, end_idx) index range for an action type.

        Setup placements map to their own setup categories.
        """
        if action_type == ActionType.PLACE_INITIAL_SETTLEMENT:
            category = "setup_settlement"
        elif action_type == ActionType.PLACE_INITIAL_ROAD:
            category = "setup_road"
        else:
            category = action_type.value
        return (self.config.start(category), self.config.end(category))

    @property
    def total_actions(self) -> int:
        """Total number of actions in the space."""
        return self.config.total_actions
