"""Main game engine for the Catan rules engine.

The engine exposes the rules as two total functions over game states:
- valid_actions(state, player_id): every legal action for a player
- apply_action(state, player_id, action): validate, mutate, return events

Every rule check happens before any mutation, so a rejected action leaves
the state unchanged and the caller may retry. The GameEngine class wraps
these functions for callers that want a single stateful object with an
action history, and replay() rebuilds a game from its seed and history.
"""

from __future__ import annotations

import itertools
import random
from typing import Any, Callable, Optional

from core.board import Board
from core.constants import DevelopmentCard, Resource, SetupPlacement, MIN_PLAYERS, MAX_PLAYERS
from core.game_state import GameState
from core.phases import (
    Setup,
    PreRoll,
    DiscardRequired,
    RobberMoveRequired,
    RobberSteal,
    MainPhase,
    RoadBuildingInProgress,
)
from core.player import Player

from .actions import (
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
from .errors import ActionError, ActionResult, ErrorKind
from .events import Event, GameWon
from .logging_config import get_logger
from .phase_machine import PhaseMachine
from .resolvers import (
    BuildingResolver,
    DevCardResolver,
    DiceResolver,
    RobberResolver,
    TradingResolver,
    TurnResolver,
)
from .setup import SetupManager, initialize_game

logger = get_logger(__name__)

# Actions answered by players other than the current one
_TRADE_RESPONSES = {
    ActionType.ACCEPT_TRADE,
    ActionType.REJECT_TRADE,
    ActionType.COUNTER_TRADE,
    ActionType.CANCEL_TRADE,
}


# =============================================================================
# Game creation and queries
# =============================================================================


def new_game(
    player_count: int,
    names: list[str],
    rng: Optional[random.Random] = None,
    board: Optional[Board] = None,
) -> GameState:
    """Create a game in its first setup placement.

    Args:
        player_count: Number of players (2-4).
        names: One display name per player.
        rng: Random source for the board, deck, dice and steals.
        board: Optional prebuilt board (copied); random standard board otherwise.

    Raises:
        ValueError: If the count is out of range or does not match `names`.
    """
    if not MIN_PLAYERS <= player_count <= MAX_PLAYERS:
        raise ValueError(f"player_count must be between {MIN_PLAYERS} and {MAX_PLAYERS}, got {player_count}")
    if len(names) != player_count:
        raise ValueError(f"Expected {player_count} names, got {len(names)}")
    return initialize_game(list(names), rng=rng, board=board)


def total_victory_points(state: GameState, player_id: int) -> int:
    return state.victory_points(player_id)


def is_finished(state: GameState) -> bool:
    return state.is_game_over()


def winner(state: GameState) -> Optional[int]:
    return state.winner()


def acting_player(state: GameState) -> Optional[int]:
    """The player the game is waiting on, or None once finished.

    During DiscardRequired this is the first player still to discard;
    otherwise it is the current player.
    """
    if state.is_game_over():
        return None
    if isinstance(state.phase, DiscardRequired):
        return state.phase.players_remaining[0]
    return state.current_player


# =============================================================================
# Valid actions
# =============================================================================


def valid_actions(state: GameState, player_id: int) -> list[Action]:
    """List every action `player_id` may legally take right now.

    Never mutates the state. ProposeTrade and CounterTrade take free-form
    offers and are never listed.
    """
    if state.is_game_over() or not 0 <= player_id < state.num_players():
        return []

    phase = state.phase
    is_current = player_id == state.current_player

    if isinstance(phase, Setup):
        if not is_current:
            return []
        setup = SetupManager(state)
        if phase.placing == SetupPlacement.SETTLEMENT:
            return [PlaceInitialSettlement(v) for v in setup.get_valid_settlement_spots(player_id)]
        return [PlaceInitialRoad(e) for e in setup.get_valid_road_spots(player_id)]

    if isinstance(phase, DiscardRequired):
        if player_id not in phase.players_remaining:
            return []
        return [DiscardCards(cards) for cards in RobberResolver(state).get_valid_discards(player_id)]

    if isinstance(phase, MainPhase):
        actions = _valid_trade_responses(state, player_id)
        if is_current:
            actions = _valid_main_actions(state, player_id) + actions
        return actions

    if not is_current:
        return []

    if isinstance(phase, PreRoll):
        actions: list[Action] = [RollDice()]
        if DevelopmentCard.KNIGHT in DevCardResolver(state).playable_cards(player_id):
            actions.append(PlayKnight())
        return actions

    if isinstance(phase, RobberMoveRequired):
        return [MoveRobber(h) for h in RobberResolver(state).get_valid_moves()]

    if isinstance(phase, RobberSteal):
        return [StealFrom(v) for v in RobberResolver(state).get_valid_victims()]

    if isinstance(phase, RoadBuildingInProgress):
        return [BuildRoad(e) for e in BuildingResolver(state).get_purchase_options(player_id).roads]

    return []


def _valid_main_actions(state: GameState, player_id: int) -> list[Action]:
    actions: list[Action] = [EndTurn()]

    options = BuildingResolver(state).get_purchase_options(player_id)
    actions.extend(BuildRoad(e) for e in options.roads)
    actions.extend(BuildSettlement(v) for v in options.settlements)
    actions.extend(BuildCity(v) for v in options.cities)
    if options.dev_card:
        actions.append(BuyDevelopmentCard())

    dev_cards = DevCardResolver(state)
    playable = dev_cards.playable_cards(player_id)
    if DevelopmentCard.KNIGHT in playable:
        actions.append(PlayKnight())
    if DevelopmentCard.ROAD_BUILDING in playable and dev_cards.can_play_road_building(player_id):
        actions.append(PlayRoadBuilding())
    if DevelopmentCard.YEAR_OF_PLENTY in playable:
        for first, second in itertools.combinations_with_replacement(Resource, 2):
            actions.append(PlayYearOfPlenty(first, second))
    if DevelopmentCard.MONOPOLY in playable:
        actions.extend(PlayMonopoly(r) for r in Resource)

    for give, count, receive in TradingResolver(state).get_valid_maritime_trades(player_id):
        actions.append(MaritimeTrade(give, count, receive))
    return actions


def _valid_trade_responses(state: GameState, player_id: int) -> list[Action]:
    trading = TradingResolver(state)
    actions: list[Action] = []
    if trading.can_accept(player_id):
        actions.append(AcceptTrade())
    if trading.can_reject(player_id):
        actions.append(RejectTrade())
    if trading.can_cancel(player_id):
        actions.append(CancelTrade())
    return actions


# =============================================================================
# Applying actions
# =============================================================================


def _check_actor(state: GameState, player_id: int, action: Action) -> None:
    """Check that `player_id` is someone allowed to act right now."""
    phase = state.phase
    if isinstance(phase, DiscardRequired):
        if player_id not in phase.players_remaining:
            raise ActionError(ErrorKind.NOT_YOUR_TURN, f"Waiting for {list(phase.players_remaining)} to discard")
        return
    if action.action_type in _TRADE_RESPONSES and state.pending_trade is not None:
        offer = state.pending_trade.offer
        if action.action_type == ActionType.CANCEL_TRADE:
            allowed = player_id in (offer.from_player, offer.to_player)
        else:
            allowed = offer.can_respond(player_id)
        if not allowed:
            raise ActionError(ErrorKind.NOT_YOUR_TURN, "Not a party to the pending trade")
        return
    if player_id != state.current_player:
        raise ActionError(ErrorKind.NOT_YOUR_TURN, f"It is player {state.current_player}'s turn")


_Handler = Callable[[GameState, int, Any, random.Random], list[Event]]

_HANDLERS: dict[ActionType, _Handler] = {
    ActionType.PLACE_INITIAL_SETTLEMENT: lambda s, p, a, rng: SetupManager(s).place_settlement(p, a.vertex),
    ActionType.PLACE_INITIAL_ROAD: lambda s, p, a, rng: SetupManager(s).place_road(p, a.edge),
    ActionType.ROLL_DICE: lambda s, p, a, rng: DiceResolver(s).resolve(p, rng),
    ActionType.END_TURN: lambda s, p, a, rng: TurnResolver(s).end_turn(p),
    ActionType.BUILD_ROAD: lambda s, p, a, rng: BuildingResolver(s).build_road(p, a.edge),
    ActionType.BUILD_SETTLEMENT: lambda s, p, a, rng: BuildingResolver(s).build_settlement(p, a.vertex),
    ActionType.BUILD_CITY: lambda s, p, a, rng: BuildingResolver(s).build_city(p, a.vertex),
    ActionType.BUY_DEVELOPMENT_CARD: lambda s, p, a, rng: BuildingResolver(s).buy_dev_card(p),
    ActionType.PLAY_KNIGHT: lambda s, p, a, rng: DevCardResolver(s).play_knight(p),
    ActionType.PLAY_ROAD_BUILDING: lambda s, p, a, rng: DevCardResolver(s).play_road_building(p),
    ActionType.PLAY_YEAR_OF_PLENTY: (
        lambda s, p, a, rng: DevCardResolver(s).play_year_of_plenty(p, a.first, a.second)
    ),
    ActionType.PLAY_MONOPOLY: lambda s, p, a, rng: DevCardResolver(s).play_monopoly(p, a.resource),
    ActionType.MOVE_ROBBER: lambda s, p, a, rng: RobberResolver(s).move(p, a.hex, rng),
    ActionType.STEAL_FROM: lambda s, p, a, rng: RobberResolver(s).steal_from(p, a.victim, rng),
    ActionType.DISCARD_CARDS: lambda s, p, a, rng: RobberResolver(s).discard(p, a.cards),
    ActionType.MARITIME_TRADE: (
        lambda s, p, a, rng: TradingResolver(s).maritime_trade(p, a.give, a.give_count, a.receive)
    ),
    ActionType.PROPOSE_TRADE: lambda s, p, a, rng: TradingResolver(s).propose(p, a.offer),
    ActionType.ACCEPT_TRADE: lambda s, p, a, rng: TradingResolver(s).accept(p),
    ActionType.REJECT_TRADE: lambda s, p, a, rng: TradingResolver(s).reject(p),
    ActionType.COUNTER_TRADE: lambda s, p, a, rng: TradingResolver(s).counter(p, a.offer),
    ActionType.CANCEL_TRADE: lambda s, p, a, rng: TradingResolver(s).cancel(p),
}


def apply_action(
    state: GameState,
    player_id: int,
    action: Action,
    rng: Optional[random.Random] = None,
) -> ActionResult:
    """Validate and apply an action.

    Checks run in order: game over, acting player, phase, then the
    action's own rules. A rejected action leaves the state unchanged.

    Args:
        state: The game to mutate.
        player_id: The player taking the action.
        action: The action.
        rng: Random source for dice and steals; defaults to state.rng.

    Raises:
        ValueError: If `player_id` is not a seat in this game.
    """
    rng = rng if rng is not None else state.rng
    try:
        if state.is_game_over():
            raise ActionError(ErrorKind.GAME_OVER)
        state.get_player(player_id)
        _check_actor(state, player_id, action)
        if not PhaseMachine(state).allows(action.action_type):
            raise ActionError(
                ErrorKind.INVALID_PHASE,
                f"{action.action_type.value} is not allowed during {state.phase}",
            )
        events = _HANDLERS[action.action_type](state, player_id, action, rng)
    except ActionError as e:
        logger.info(
            "action_rejected",
            player=player_id,
            action=action.action_type.value,
            error=e.kind.value,
            reason=e.message,
        )
        return ActionResult.rejected(e)

    logger.debug(
        "action_applied",
        player=player_id,
        action=action.action_type.value,
        events=len(events),
        phase=str(state.phase),
    )
    for event in events:
        if isinstance(event, GameWon):
            logger.info("game_won", player=event.player, victory_points=event.victory_points)
    return ActionResult.ok(events)


# =============================================================================
# Stateful facade
# =============================================================================


class GameEngine:
    """Stateful wrapper around new_game/valid_actions/apply_action.

    Usage:
        engine = GameEngine()
        engine.reset(["Alice", "Bob"], seed=7)

        while not engine.is_game_over():
            actions = engine.get_valid_actions()
            action = select_action(actions)  # Player or agent selects
            result = engine.step(action)
    """

    def __init__(self):
        self._state: Optional[GameState] = None
        self._names: list[str] = []
        self._seed: Optional[int] = None
        self.history: list[tuple[int, Action]] = []
        self.event_log: list[Event] = []

    @property
    def state(self) -> GameState:
        """Get the current game state.

        Raises:
            RuntimeError: If the game has not been initialized.
        """
        if self._state is None:
            raise RuntimeError("Game not initialized. Call reset() first.")
        return self._state

    def is_game_over(self) -> bool:
        return self._state is not None and self._state.is_game_over()

    # -------------------------------------------------------------------------
    # Game Initialization
    # -------------------------------------------------------------------------

    def reset(
        self,
        names: list[str],
        seed: Optional[int] = None,
        board: Optional[Board] = None,
    ) -> GameState:
        """Start a new game.

        Args:
            names: One name per player (2-4).
            seed: Seed for the game's random source; the same seed, board
                and actions always reproduce the same game.
            board: Optional custom board. If None, a random standard board.
        """
        self._names = list(names)
        self._seed = seed
        self.history = []
        self.event_log = []
        self._state = new_game(len(names), names, rng=random.Random(seed), board=board)
        return self._state

    # -------------------------------------------------------------------------
    # Action Execution
    # -------------------------------------------------------------------------

    def acting_player(self) -> Optional[int]:
        return acting_player(self.state)

    def step(self, action: Action, player_id: Optional[int] = None) -> ActionResult:
        """Apply an action for `player_id` (default: the acting player)."""
        if player_id is None:
            player_id = self.acting_player()
            if player_id is None:
                return ActionResult.rejected(ActionError(ErrorKind.GAME_OVER))
        result = apply_action(self.state, player_id, action)
        if result.success:
            self.history.append((player_id, action))
            self.event_log.extend(result.events)
        return result

    def get_valid_actions(self, player_id: Optional[int] = None) -> list[Action]:
        if player_id is None:
            player_id = self.acting_player()
            if player_id is None:
                return []
        return valid_actions(self.state, player_id)

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    def winner(self) -> Optional[int]:
        return winner(self.state)

    def victory_points(self, player_id: int) -> int:
        return total_victory_points(self.state, player_id)

    def get_current_player(self) -> Player:
        return self.state.get_current_player()

    def clone(self) -> GameEngine:
        """Create a deep copy of the engine for simulation."""
        new_engine = GameEngine()
        new_engine._state = self.state.clone()
        new_engine._names = list(self._names)
        new_engine._seed = self._seed
        new_engine.history = list(self.history)
        new_engine.event_log = list(self.event_log)
        return new_engine

    def get_game_summary(self) -> dict[str, Any]:
        """Get a summary of the current game state."""
        return {
            "phase": self.state.phase.to_dict(),
            "turn": self.state.turn_number,
            "current_player": self.state.current_player,
            "dev_cards_left": len(self.state.dev_card_deck),
            "players": [
                {
                    "id": p.player_id,
                    "name": p.name,
                    "victory_points": self.state.public_victory_points(p.player_id),
                    "cards": p.resources.total(),
                    "knights": p.knights_played,
                }
                for p in self.state.players
            ],
            "game_over": self.is_game_over(),
            "winner": self.winner(),
        }

    def __str__(self) -> str:
        if self._state is None:
            return "GameEngine(not initialized)"
        return f"GameEngine(phase={self.state.phase}, turn={self.state.turn_number})"


def replay(
    names: list[str],
    seed: Optional[int],
    history: list[tuple[int, Action]],
    board: Optional[Board] = None,
) -> GameEngine:
    """Rebuild a game from its seed and accepted-action history.

    Raises:
        ValueError: If an action in the history is rejected, which means the
            history does not belong to this seed and board.
    """
    engine = GameEngine()
    engine.reset(names, seed=seed, board=board)
    for index, (player_id, action) in enumerate(history):
        result = engine.step(action, player_id)
        if not result.success:
            raise ValueError(
                f"History diverged at step {index}: {action} by player {player_id} "
                f"rejected ({result.error.value}: {result.message})"
            )
    return engine
