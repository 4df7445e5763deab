"""Core data models for the Catan rules engine."""

from .constants import (
    Resource,
    TileType,
    BuildingKind,
    DevelopmentCard,
    PlayerColor,
    PhaseKind,
    SetupPlacement,
    MIN_PLAYERS,
    MAX_PLAYERS,
    MAX_SETTLEMENTS,
    MAX_CITIES,
    MAX_ROADS,
    VICTORY_POINTS_TO_WIN,
    MIN_LONGEST_ROAD,
    MIN_LARGEST_ARMY,
    DEV_CARD_COUNTS,
)

from .hex import (
    EdgeDirection,
    VertexDirection,
    HexCoord,
    VertexCoord,
    EdgeCoord,
)

from .board import Tile, Building, Harbor, Board

from .player import ResourceHand, Player

from .trade import TradeOffer, PendingTrade

from .phases import (
    Phase,
    Setup,
    PreRoll,
    DiscardRequired,
    RobberMoveRequired,
    RobberSteal,
    MainPhase,
    RoadBuildingInProgress,
    Finished,
)

from .game_state import GameState

__all__ = [
    # Constants
    "Resource",
    "TileType",
    "BuildingKind",
    "DevelopmentCard",
    "PlayerColor",
    "PhaseKind",
    "SetupPlacement",
    "MIN_PLAYERS",
    "MAX_PLAYERS",
    "MAX_SETTLEMENTS",
    "MAX_CITIES",
    "MAX_ROADS",
    "VICTORY_POINTS_TO_WIN",
    "MIN_LONGEST_ROAD",
    "MIN_LARGEST_ARMY",
    "DEV_CARD_COUNTS",
    # Coordinates
    "EdgeDirection",
    "VertexDirection",
    "HexCoord",
    "VertexCoord",
    "EdgeCoord",
    # Board
    "Tile",
    "Building",
    "Harbor",
    "Board",
    # Player
    "ResourceHand",
    "Player",
    # Trade
    "TradeOffer",
    "PendingTrade",
    # Phases
    "Phase",
    "Setup",
    "PreRoll",
    "DiscardRequired",
    "RobberMoveRequired",
    "RobberSteal",
    "MainPhase",
    "RoadBuildingInProgress",
    "Finished",
    # Game State
    "GameState",
]
