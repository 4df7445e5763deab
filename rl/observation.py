"""Observation encoding for the Catan RL environment.

Encodes a GameState into a flat numpy array suitable for neural network
input. Uses self-relative player encoding where the observing player is
always seat 0, and hides what that player could not see at the table:
opponents' hands and development cards appear only as totals.
"""

from __future__ import annotations

import numpy as np
from typing import Optional

from core.board import Board
from core.constants import (
    BuildingKind,
    DevelopmentCard,
    PhaseKind,
    Resource,
    TileType,
    MAX_CITIES,
    MAX_ROADS,
    MAX_SETTLEMENTS,
    ROAD_BUILDING_ROADS,
    VICTORY_POINTS_TO_WIN,
)
from core.game_state import GameState
from core.hex import HexCoord, VertexCoord, EdgeCoord
from core.phases import DiscardRequired, RoadBuildingInProgress, Setup
from .config import ObservationConfig, DEFAULT_OBS_CONFIG

# Tile types in one-hot order (ocean never appears among land hexes)
_LAND_TYPES = [t for t in TileType if t != TileType.OCEAN]
_PLAYABLE_CARDS = [c for c in DevelopmentCard if c != DevelopmentCard.VICTORY_POINT]
_PHASES = list(PhaseKind)
_RESOURCES = list(Resource)


class ObservationEncoder:
    """Encodes GameState into flat observation tensor.

    The observation is structured as follows:
    1. Hex features [MAX_HEXES x HEX_FEATURE_DIM]
    2. Vertex features [MAX_VERTICES x VERTEX_FEATURE_DIM]
    3. Edge features [MAX_EDGES x EDGE_FEATURE_DIM]
    4. Player features [MAX_PLAYERS x PLAYER_FEATURE_DIM]
    5. Own private features [SELF_FEATURE_DIM]
    6. Global state [GLOBAL_FEATURE_DIM]

    All features are normalized to the [0, 1] range.
    Players are reordered so the observing player is always index 0.
    """

    def __init__(self, config: ObservationConfig = DEFAULT_OBS_CONFIG):
        self.config = config

        # Index mappings, rebuilt whenever the land shape changes
        self._land_key: Optional[tuple[HexCoord, ...]] = None
        self._hex_to_idx: dict[HexCoord, int] = {}
        self._vertex_to_idx: dict[VertexCoord, int] = {}
        self._edge_to_idx: dict[EdgeCoord, int] = {}

    def _initialize_mappings(self, board: Board) -> None:
        """Map hexes, vertices and edges to slots in sorted coordinate order."""
        land = tuple(sorted(t.coord for t in board.land_tiles()))
        if land == self._land_key:
            return
        self._hex_to_idx = {coord: idx for idx, coord in enumerate(land)}
        self._vertex_to_idx = {v: idx for idx, v in enumerate(sorted(board.land_vertices()))}
        self._edge_to_idx = {e: idx for idx, e in enumerate(sorted(board.land_edges()))}
        self._land_key = land

    @property
    def observation_dim(self) -> int:
        """Total dimension of the flat observation tensor."""
        return self.config.total_observation_dim

    def encode(self, state: GameState, player_id: Optional[int] = None) -> np.ndarray:
        """Encode the game state from one player's point of view.

        Args:
            state: The GameState to encode.
            player_id: The observing player. If None, uses the current player.

        Returns:
            Flat numpy array of shape (total_observation_dim,) with dtype float32.
        """
        self._initialize_mappings(state.board)

        if player_id is None:
            player_id = state.current_player

        obs = np.zeros(self.config.total_observation_dim, dtype=np.float32)

        offset = 0
        offset = self._encode_hexes(state, obs, offset)
        offset = self._encode_vertices(state, player_id, obs, offset)
        offset = self._encode_edges(state, player_id, obs, offset)
        offset = self._encode_players(state, player_id, obs, offset)
        offset = self._encode_self(state, player_id, obs, offset)
        offset = self._encode_global(state, player_id, obs, offset)

        return np.clip(obs, 0.0, 1.0)

    def _relative_seat(self, state: GameState, player_id: int, owner: int) -> int:
        return (owner - player_id) % state.num_players()

    def _encode_hexes(self, state: GameState, obs: np.ndarray, offset: int) -> int:
        """Encode land hex features.

        Hex features (9 per hex):
        - tile type one-hot (6): five resources and desert
        - number token (1): number / 12
        - pips (1): production weight / 5
        - robber (1): binary
        """
        feature_dim = self.config.HEX_FEATURE_DIM
        for coord, idx in self._hex_to_idx.items():
            if idx >= self.config.MAX_HEXES:
                continue
            tile = state.board.tiles[coord]
            base = offset + idx * feature_dim
            obs[base + _LAND_TYPES.index(tile.tile_type)] = 1.0
            if tile.number is not None:
                obs[base + 6] = tile.number / 12.0
                obs[base + 7] = (6 - abs(7 - tile.number)) / 5.0
            obs[base + 8] = 1.0 if coord == state.board.robber_location else 0.0
        return offset + self.config.hex_features_size

    def _encode_vertices(
        self, state: GameState, player_id: int, obs: np.ndarray, offset: int
    ) -> int:
        """Encode vertex features.

        Vertex features:
        - settlement, city flags for each relative seat (2 x MAX_PLAYERS)
        - generic 3:1 harbor (1)
        - 2:1 harbor resource one-hot (5)
        """
        feature_dim = self.config.VERTEX_FEATURE_DIM
        max_players = self.config.MAX_PLAYERS

        for vertex, building in state.board.buildings.items():
            idx = self._vertex_to_idx.get(vertex)
            if idx is None or idx >= self.config.MAX_VERTICES:
                continue
            seat = self._relative_seat(state, player_id, building.owner)
            kind_offset = 0 if building.kind == BuildingKind.SETTLEMENT else 1
            obs[offset + idx * feature_dim + seat * 2 + kind_offset] = 1.0

        for harbor in state.board.harbors:
            for vertex in harbor.edge.endpoints():
                idx = self._vertex_to_idx.get(vertex)
                if idx is None or idx >= self.config.MAX_VERTICES:
                    continue
                base = offset + idx * feature_dim + 2 * max_players
                if harbor.resource is None:
                    obs[base] = 1.0
                else:
                    obs[base + 1 + _RESOURCES.index(harbor.resource)] = 1.0

        return offset + self.config.vertex_features_size

    def _encode_edges(
        self, state: GameState, player_id: int, obs: np.ndarray, offset: int
    ) -> int:
        """Encode road ownership per edge, one flag per relative seat."""
        feature_dim = self.config.EDGE_FEATURE_DIM
        for edge, owner in state.board.roads.items():
            idx = self._edge_to_idx.get(edge)
            if idx is None or idx >= self.config.MAX_EDGES:
                continue
            seat = self._relative_seat(state, player_id, owner)
            obs[offset + idx * feature_dim + seat] = 1.0
        return offset + self.config.edge_features_size

    def _encode_players(
        self, state: GameState, player_id: int, obs: np.ndarray, offset: int
    ) -> int:
        """Encode public player features in relative seat order.

        Player features (10 per player):
        - present (1)
        - public victory points (1)
        - resource card total (1)
        - development card total (1)
        - knights played (1)
        - roads, settlements, cities remaining (3)
        - longest road holder, largest army holder (2)
        """
        feature_dim = self.config.PLAYER_FEATURE_DIM
        for player in state.players:
            seat = self._relative_seat(state, player_id, player.player_id)
            base = offset + seat * feature_dim
            obs[base + 0] = 1.0
            obs[base + 1] = state.public_victory_points(player.player_id) / VICTORY_POINTS_TO_WIN
            obs[base + 2] = player.resources.total() / self.config.MAX_HAND
            obs[base + 3] = player.dev_card_count / self.config.MAX_DEV_CARDS
            obs[base + 4] = player.knights_played / self.config.MAX_KNIGHTS
            obs[base + 5] = player.roads_remaining / MAX_ROADS
            obs[base + 6] = player.settlements_remaining / MAX_SETTLEMENTS
            obs[base + 7] = player.cities_remaining / MAX_CITIES
            obs[base + 8] = 1.0 if player.has_longest_road else 0.0
            obs[base + 9] = 1.0 if player.has_largest_army else 0.0
        return offset + self.config.player_features_size

    def _encode_self(
        self, state: GameState, player_id: int, obs: np.ndarray, offset: int
    ) -> int:
        """Encode the observing player's own hand and development cards."""
        player = state.get_player(player_id)
        i = offset
        for resource in _RESOURCES:
            obs[i] = player.resources.get(resource) / self.config.MAX_HAND
            i += 1
        for card in _PLAYABLE_CARDS:
            obs[i] = player.dev_cards.count(card) / self.config.MAX_KNIGHTS
            i += 1
        obs[i] = len(player.dev_cards_bought_this_turn) / self.config.MAX_DEV_CARDS
        return offset + self.config.self_features_size

    def _encode_global(
        self, state: GameState, player_id: int, obs: np.ndarray, offset: int
    ) -> int:
        """Encode global game state.

        Global features:
        - phase one-hot (8)
        - setup round two (1)
        - is my turn (1)
        - dice total (1)
        - development cards left (1)
        - turn number (1)
        - must discard (1), discard amount (1)
        - free roads left (1)
        - trade pending (1), I proposed it (1)
        - offered and requested resources of the pending trade (5 + 5)
        """
        phase = state.phase
        i = offset
        obs[i + _PHASES.index(phase.kind)] = 1.0
        i += len(_PHASES)

        obs[i] = 1.0 if isinstance(phase, Setup) and phase.round == 2 else 0.0
        i += 1
        obs[i] = 1.0 if state.current_player == player_id else 0.0
        i += 1
        obs[i] = sum(state.dice_roll) / 12.0 if state.dice_roll else 0.0
        i += 1
        obs[i] = len(state.dev_card_deck) / self.config.MAX_DEV_CARDS
        i += 1
        obs[i] = min(state.turn_number, self.config.MAX_TURNS) / self.config.MAX_TURNS
        i += 1

        must_discard = isinstance(phase, DiscardRequired) and player_id in phase.players_remaining
        obs[i] = 1.0 if must_discard else 0.0
        i += 1
        if must_discard:
            obs[i] = (state.get_player(player_id).resources.total() // 2) / self.config.MAX_HAND
        i += 1

        if isinstance(phase, RoadBuildingInProgress):
            obs[i] = phase.roads_remaining / ROAD_BUILDING_ROADS
        i += 1

        trade = state.pending_trade
        if trade is not None:
            obs[i] = 1.0
            obs[i + 1] = 1.0 if trade.offer.from_player == player_id else 0.0
            for j, resource in enumerate(_RESOURCES):
                obs[i + 2 + j] = trade.offer.offering.get(resource) / self.config.MAX_HAND
                obs[i + 2 + len(_RESOURCES) + j] = trade.offer.requesting.get(resource) / self.config.MAX_HAND
        i += 2 + 2 * len(_RESOURCES)

        return offset + self.config.global_features_size
