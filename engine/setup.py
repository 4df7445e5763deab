"""Initial game setup logic for the Catan rules engine.

Handles game creation and the snake-draft setup phase:
1. Each player places a settlement and a road touching it, in seat order
2. The same is repeated in reverse seat order
3. The second settlement immediately produces one resource per adjacent
   resource tile

After the last placement the game enters PreRoll with seat 0 to act.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

from core.constants import (
    DevelopmentCard,
    PlayerColor,
    SetupPlacement,
    DEV_CARD_COUNTS,
    MIN_PLAYERS,
    MAX_PLAYERS,
)
from core.board import Board
from core.game_state import GameState
from core.hex import VertexCoord, EdgeCoord
from core.phases import Setup
from core.player import Player, ResourceHand

from .errors import ActionError, ErrorKind
from .events import Event, SettlementBuilt, RoadBuilt, ResourcesDistributed
from .phase_machine import PhaseMachine


@dataclass
class SetupValidationResult:
    """Result of validating a setup placement.

    Attributes:
        valid: Whether the placement is legal.
        reason: Description of why the placement is illegal (if it is).
    """

    valid: bool
    reason: Optional[str] = None


def build_dev_card_deck(rng: random.Random) -> list[DevelopmentCard]:
    """The 25-card development deck, shuffled."""
    deck = [card for card, count in DEV_CARD_COUNTS.items() for _ in range(count)]
    rng.shuffle(deck)
    return deck


def initialize_game(
    player_names: list[str],
    rng: Optional[random.Random] = None,
    board: Optional[Board] = None,
) -> GameState:
    """Create a fresh game ready for the first setup placement.

    Args:
        player_names: One name per seat (2-4 players).
        rng: Random source for board, deck, dice and steals.
        board: Optional prebuilt board; a randomised standard board otherwise.

    Raises:
        ValueError: If the number of players is out of range.
    """
    if not MIN_PLAYERS <= len(player_names) <= MAX_PLAYERS:
        raise ValueError(
            f"Number of players must be between {MIN_PLAYERS} and {MAX_PLAYERS}, "
            f"got {len(player_names)}"
        )
    # Local import: data.generator imports the engine package
    from data.generator import standard_board

    rng = rng if rng is not None else random.Random()
    board = board.clone() if board is not None else standard_board(rng)
    colors = list(PlayerColor)
    players = [
        Player(player_id=i, name=name, color=colors[i])
        for i, name in enumerate(player_names)
    ]
    return GameState(
        board=board,
        players=players,
        current_player=0,
        phase=Setup(round=1, placing=SetupPlacement.SETTLEMENT),
        dev_card_deck=build_dev_card_deck(rng),
        rng=rng,
    )


class SetupManager:
    """Validates and executes setup placements.

    Progress is derived from the board: every completed settlement+road
    pair leaves exactly one road on the board.
    """

    def __init__(self, state: GameState):
        self.state = state
        self.phase_machine = PhaseMachine(state)

    def placements_done(self) -> int:
        return len(self.state.board.roads)

    def is_setup_complete(self) -> bool:
        return PhaseMachine.setup_position(
            self.placements_done(), self.state.num_players()
        ) is None

    # -------------------------------------------------------------------------
    # Settlement placement
    # -------------------------------------------------------------------------

    def get_valid_settlement_spots(self, player_id: int) -> list[VertexCoord]:
        return self.state.board.valid_settlement_spots(player_id, is_setup=True)

    def validate_settlement(self, player_id: int, vertex: VertexCoord) -> SetupValidationResult:
        board = self.state.board
        if not board.is_land_vertex(vertex):
            return SetupValidationResult(False, f"{vertex} is not on land")
        if board.get_building(vertex) is not None:
            return SetupValidationResult(False, f"{vertex} is already occupied")
        if not board.satisfies_distance_rule(vertex):
            return SetupValidationResult(False, f"{vertex} is adjacent to a building")
        if self.state.get_player(player_id).settlements_remaining <= 0:
            return SetupValidationResult(False, "No settlements remaining")
        return SetupValidationResult(True)

    def place_settlement(self, player_id: int, vertex: VertexCoord) -> list[Event]:
        phase = self.state.phase
        if not isinstance(phase, Setup) or phase.placing != SetupPlacement.SETTLEMENT:
            raise ActionError(ErrorKind.INVALID_PHASE, "A setup road must be placed first")
        result = self.validate_settlement(player_id, vertex)
        if not result.valid:
            raise ActionError(ErrorKind.INVALID_LOCATION, result.reason)

        player = self.state.get_player(player_id)
        self.state.board.place_settlement(vertex, player_id)
        player.settlements_remaining -= 1
        self.state.setup_settlement = vertex
        events: list[Event] = [SettlementBuilt(player=player_id, vertex=vertex)]

        if phase.round == 2:
            grant = self.starting_resources(vertex)
            if not grant.is_empty():
                player.resources.add_hand(grant)
                events.append(ResourcesDistributed(distribution={player_id: grant}))

        self.phase_machine.transition_to(Setup(round=phase.round, placing=SetupPlacement.ROAD))
        return events

    def starting_resources(self, vertex: VertexCoord) -> ResourceHand:
        """One resource per resource tile touching the vertex."""
        grant = ResourceHand()
        for tile in self.state.board.tiles_at_vertex(vertex):
            if tile.resource is not None:
                grant.add(tile.resource)
        return grant

    # -------------------------------------------------------------------------
    # Road placement
    # -------------------------------------------------------------------------

    def get_valid_road_spots(self, player_id: int) -> list[EdgeCoord]:
        vertex = self.state.setup_settlement
        if vertex is None:
            return []
        return sorted(
            edge for edge in vertex.touching_edges()
            if self.validate_road(player_id, edge).valid
        )

    def validate_road(self, player_id: int, edge: EdgeCoord) -> SetupValidationResult:
        board = self.state.board
        vertex = self.state.setup_settlement
        if vertex is None:
            return SetupValidationResult(False, "No settlement awaiting a road")
        if edge not in vertex.touching_edges():
            return SetupValidationResult(False, f"{edge} does not touch {vertex}")
        if not board.is_land_edge(edge):
            return SetupValidationResult(False, f"{edge} is not on land")
        if board.get_road(edge) is not None:
            return SetupValidationResult(False, f"{edge} already has a road")
        return SetupValidationResult(True)

    def place_road(self, player_id: int, edge: EdgeCoord) -> list[Event]:
        phase = self.state.phase
        if not isinstance(phase, Setup) or phase.placing != SetupPlacement.ROAD:
            raise ActionError(ErrorKind.INVALID_PHASE, "A setup settlement must be placed first")
        result = self.validate_road(player_id, edge)
        if not result.valid:
            raise ActionError(ErrorKind.INVALID_LOCATION, result.reason)

        self.state.board.place_road(edge, player_id)
        self.state.get_player(player_id).roads_remaining -= 1
        self.state.setup_settlement = None

        next_phase, next_seat = self.phase_machine.next_setup_phase(self.placements_done())
        self.phase_machine.transition_to(next_phase)
        self.state.current_player = next_seat
        if self.is_setup_complete():
            self.state.turn_number = 1
        return [RoadBuilt(player=player_id, edge=edge)]
