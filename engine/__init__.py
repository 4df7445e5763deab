"""Game engine for the Catan rules engine.

This module provides the game logic including:
- Action and event vocabulary shared with front ends and bots
- Phase state machine for game flow control
- Snake-draft setup and the per-area action resolvers
- valid_actions/apply_action and the GameEngine facade
"""

from .actions import (
    Action,
    ActionType,
    ACTION_CLASSES,
    action_from_dict,
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
    ProposeTrade,
    AcceptTrade,
    RejectTrade,
    CounterTrade,
    CancelTrade,
)

from .events import (
    Event,
    EventType,
)

from .errors import (
    ErrorKind,
    ActionError,
    ActionResult,
)

from .phase_machine import (
    PhaseMachine,
    PhaseTransitionResult,
    PHASE_TRANSITIONS,
    PHASE_ACTIONS,
)

from .setup import (
    SetupManager,
    SetupValidationResult,
    initialize_game,
    build_dev_card_deck,
)

from .game_engine import (
    GameEngine,
    new_game,
    valid_actions,
    apply_action,
    total_victory_points,
    is_finished,
    winner,
    acting_player,
    replay,
)

from .logging_config import configure_logging, get_logger

__all__ = [
    # Actions
    "Action",
    "ActionType",
    "ACTION_CLASSES",
    "action_from_dict",
    "PlaceInitialSettlement",
    "PlaceInitialRoad",
    "RollDice",
    "EndTurn",
    "BuildRoad",
    "BuildSettlement",
    "BuildCity",
    "BuyDevelopmentCard",
    "PlayKnight",
    "PlayRoadBuilding",
    "PlayYearOfPlenty",
    "PlayMonopoly",
    "MoveRobber",
    "StealFrom",
    "DiscardCards",
    "MaritimeTrade",
    "ProposeTrade",
    "AcceptTrade",
    "RejectTrade",
    "CounterTrade",
    "CancelTrade",
    # Events
    "Event",
    "EventType",
    # Errors
    "ErrorKind",
    "ActionError",
    "ActionResult",
    # Phase machine
    "PhaseMachine",
    "PhaseTransitionResult",
    "PHASE_TRANSITIONS",
    "PHASE_ACTIONS",
    # Setup
    "SetupManager",
    "SetupValidationResult",
    "initialize_game",
    "build_dev_card_deck",
    # Game engine
    "GameEngine",
    "new_game",
    "valid_actions",
    "apply_action",
    "total_victory_points",
    "is_finished",
    "winner",
    "acting_player",
    "replay",
    # Logging
    "configure_logging",
    "get_logger",
]
