"""Game state for the Catan rules engine.

GameState is the single source of truth for a match. It owns the board
and the players, and provides cloning, serialization, hashing and an
invariant check used heavily by the tests.
"""

from __future__ import annotations

import copy
import hashlib
import json
import random
from dataclasses import dataclass, field
from typing import Optional, Any

from .constants import (
    PhaseKind,
    DevelopmentCard,
    MAX_SETTLEMENTS,
    MAX_CITIES,
    MAX_ROADS,
    LONGEST_ROAD_VP,
    LARGEST_ARMY_VP,
)
from .board import Board
from .hex import VertexCoord
from .phases import Phase, Setup, Finished
from .player import Player
from .trade import PendingTrade


@dataclass
class GameState:
    """The complete game state.

    Attributes:
        board: The game board.
        players: All players in seat order.
        current_player: Seat whose turn it is.
        phase: Current phase variant.
        turn_number: Turn counter; 0 during setup, 1 on the first regular turn.
        dice_roll: The two dice rolled this turn, or None before the roll.
        dev_card_deck: Development card draw pile (drawn from the end).
        pending_trade: The outstanding player-to-player offer, if any.
        dev_card_played_this_turn: Whether a development card was played this turn.
        setup_settlement: Settlement waiting for its setup road.
        rng: Random source for dice and steals; excluded from snapshots.
    """

    board: Board
    players: list[Player]
    current_player: int = 0
    phase: Phase = field(default_factory=Setup)
    turn_number: int = 0
    dice_roll: Optional[tuple[int, int]] = None
    dev_card_deck: list[DevelopmentCard] = field(default_factory=list)
    pending_trade: Optional[PendingTrade] = None
    dev_card_played_this_turn: bool = False
    setup_settlement: Optional[VertexCoord] = None
    rng: random.Random = field(default_factory=random.Random, compare=False, repr=False)

    # -------------------------------------------------------------------------
    # Player access methods
    # -------------------------------------------------------------------------

    def get_player(self, player_id: int) -> Player:
        """Get a player by ID.

        Raises:
            ValueError: If player_id is invalid.
        """
        if not 0 <= player_id < len(self.players):
            raise ValueError(f"Invalid player ID: {player_id}")
        return self.players[player_id]

    def get_current_player(self) -> Player:
        return self.players[self.current_player]

    def num_players(self) -> int:
        return len(self.players)

    def is_game_over(self) -> bool:
        return self.phase.kind == PhaseKind.FINISHED

    def winner(self) -> Optional[int]:
        if isinstance(self.phase, Finished):
            return self.phase.winner
        return None

    # -------------------------------------------------------------------------
    # Scoring
    # -------------------------------------------------------------------------

    def public_victory_points(self, player_id: int) -> int:
        """Victory points visible to every player (buildings and awards)."""
        player = self.get_player(player_id)
        settlements, cities = self.board.count_buildings(player_id)
        points = settlements + 2 * cities
        if player.has_longest_road:
            points += LONGEST_ROAD_VP
        if player.has_largest_army:
            points += LARGEST_ARMY_VP
        return points

    def victory_points(self, player_id: int) -> int:
        """Total victory points, including hidden victory point cards.

        Building points are counted from the board, not derived from the
        piece counters.
        """
        return self.public_victory_points(player_id) + self.get_player(player_id).victory_point_cards

    # -------------------------------------------------------------------------
    # Cloning and serialization
    # -------------------------------------------------------------------------

    def clone(self) -> GameState:
        """Create a deep copy of the game state, random source included."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the game state to plain data (no cycles, no live objects)."""
        return {
            "phase": self.phase.to_dict(),
            "current_player": self.current_player,
            "turn_number": self.turn_number,
            "dice_roll": list(self.dice_roll) if self.dice_roll else None,
            "dev_card_deck": [card.value for card in self.dev_card_deck],
            "pending_trade": self.pending_trade.to_dict() if self.pending_trade else None,
            "dev_card_played_this_turn": self.dev_card_played_this_turn,
            "setup_settlement": (
                self.setup_settlement.to_dict() if self.setup_settlement else None
            ),
            "players": [p.to_dict() for p in self.players],
            "board": self.board.to_dict(),
        }

    def state_hash(self) -> str:
        """Compute a hash of the game state.

        Two states with the same hash are identical for gameplay purposes.
        """
        state_json = json.dumps(self.to_dict(), sort_keys=True)
        return hashlib.sha256(state_json.encode()).hexdigest()

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self) -> list[str]:
        """Check game state invariants.

        Returns:
            List of error messages (empty if the state is consistent).
        """
        errors = []

        robber_tiles = [t.coord for t in self.board.tiles.values() if t.has_robber]
        if len(robber_tiles) != 1:
            errors.append(f"Expected exactly one robber, found {len(robber_tiles)}")
        elif robber_tiles[0] != self.board.robber_location:
            errors.append(
                f"Robber flag at {robber_tiles[0]} but location is {self.board.robber_location}"
            )
        if not self.board.is_land_hex(self.board.robber_location):
            errors.append(f"Robber is not on land: {self.board.robber_location}")

        for player in self.players:
            pid = player.player_id
            settlements, cities = self.board.count_buildings(pid)
            if player.settlements_remaining != MAX_SETTLEMENTS - settlements:
                errors.append(
                    f"Player {pid} settlement stock {player.settlements_remaining} "
                    f"does not match {settlements} settlements on the board"
                )
            if player.cities_remaining != MAX_CITIES - cities:
                errors.append(
                    f"Player {pid} city stock {player.cities_remaining} "
                    f"does not match {cities} cities on the board"
                )
            if player.roads_remaining != MAX_ROADS - self.board.count_roads(pid):
                errors.append(f"Player {pid} road stock does not match the board")
            for resource, count in player.resources.to_dict().items():
                if count < 0:
                    errors.append(f"Player {pid} has negative {resource}: {count}")

        if sum(p.has_longest_road for p in self.players) > 1:
            errors.append("More than one player holds Longest Road")
        if sum(p.has_largest_army for p in self.players) > 1:
            errors.append("More than one player holds Largest Army")

        for vertex in self.board.buildings:
            if not self.board.is_land_vertex(vertex):
                errors.append(f"Building off land at {vertex}")
            if not self.board.satisfies_distance_rule(vertex):
                errors.append(f"Distance rule violated at {vertex}")

        if not 0 <= self.current_player < len(self.players):
            errors.append(f"Invalid current player: {self.current_player}")

        return errors

    # -------------------------------------------------------------------------
    # String representation
    # -------------------------------------------------------------------------

    def __str__(self) -> str:
        lines = [
            f"=== Catan - Turn {self.turn_number} ===",
            f"Phase: {self.phase}",
            f"Current Player: {self.current_player}",
            f"Dice: {self.dice_roll}",
            f"Development cards left: {len(self.dev_card_deck)}",
            "",
            "Players:",
        ]
        for p in self.players:
            lines.append(
                f"  {p} | VP: {self.victory_points(p.player_id)} | "
                f"knights: {p.knights_played} | "
                f"pieces S/C/R: {p.settlements_remaining}/{p.cities_remaining}/{p.roads_remaining}"
            )
        lines.append("")
        lines.append(str(self.board))
        return "\n".join(lines)
