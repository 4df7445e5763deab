"""Tests for the engine's public functions and the GameEngine facade.

Tests cover:
1. The seven branch driven through apply_action
2. Player trades between seats
3. Winning and the finished game
4. Rejections leave the state untouched
5. Random seeded games keep every invariant
6. History replay and the GameEngine facade
7. Action and event serialization
"""

import logging
import random

import pytest
import structlog

from core.board import Board
from core.constants import DevelopmentCard, Resource
from core.game_state import GameState
from core.hex import EdgeCoord, HexCoord, VertexCoord, VertexDirection
from core.phases import DiscardRequired, Finished, MainPhase, PreRoll, RobberMoveRequired
from core.player import ResourceHand
from data.loader import load_beginner_board
from engine import logging_config
from engine.actions import (
    AcceptTrade,
    ActionType,
    BuildRoad,
    BuildSettlement,
    CancelTrade,
    DiscardCards,
    EndTurn,
    MaritimeTrade,
    PlayYearOfPlenty,
    ProposeTrade,
    RejectTrade,
    RollDice,
    action_from_dict,
)
from engine.errors import ErrorKind
from engine.events import (
    DevelopmentCardPurchased,
    GameWon,
    LongestRoadChanged,
    ResourceStolen,
    TradeCompleted,
    TradeProposed,
)
from engine.game_engine import (
    GameEngine,
    acting_player,
    apply_action,
    is_finished,
    new_game,
    replay,
    total_victory_points,
    valid_actions,
    winner,
)
from engine.resolvers import AwardsResolver, make_offer


ORE_CORNER = VertexCoord(HexCoord(1, 0), VertexDirection.NORTH)
TOP_LEFT_CORNER = VertexCoord(HexCoord(-1, -1), VertexDirection.NORTH)
BOTTOM_LEFT_CORNER = VertexCoord(HexCoord(-2, 2), VertexDirection.SOUTH)
NAMES = ["Alice", "Bob"]


# =============================================================================
# Fixtures and helpers
# =============================================================================


class FixedDice(random.Random):
    """Random source whose dice come from a preset list."""

    rolls: list[int]

    def randint(self, a: int, b: int) -> int:
        return self.rolls.pop(0)


def fixed_dice(*rolls: int) -> FixedDice:
    rng = FixedDice(0)
    rng.rolls = list(rolls)
    return rng


def main_state(num_players: int = 2) -> GameState:
    """A game on the beginner board in turn 1's main phase, nothing built."""
    names = ["Alice", "Bob", "Carol", "Dave"][:num_players]
    state = new_game(num_players, names, rng=random.Random(0), board=load_beginner_board())
    state.phase = MainPhase()
    state.turn_number = 1
    state.dice_roll = (2, 3)
    return state


@pytest.fixture
def state() -> GameState:
    return main_state()


def put_settlement(state: GameState, player_id: int, vertex: VertexCoord) -> None:
    state.board.place_settlement(vertex, player_id)
    state.get_player(player_id).settlements_remaining -= 1


def put_road(state: GameState, player_id: int, edge: EdgeCoord) -> None:
    state.board.place_road(edge, player_id)
    state.get_player(player_id).roads_remaining -= 1


def set_hand(state: GameState, player_id: int, **counts: int) -> None:
    state.get_player(player_id).resources = ResourceHand(**counts)


def road_path(
    board: Board, start: VertexCoord, length: int, blocked: frozenset = frozenset()
) -> tuple[list[EdgeCoord], list[VertexCoord]]:
    """A simple land path of `length` edges starting at `start`, avoiding `blocked`."""

    def extend(edges: list[EdgeCoord], vertices: list[VertexCoord]):
        if len(edges) == length:
            return edges, vertices
        current = vertices[-1]
        for edge in current.touching_edges():
            nxt = edge.other_endpoint(current)
            if board.is_land_edge(edge) and nxt not in vertices and nxt not in blocked:
                found = extend(edges + [edge], vertices + [nxt])
                if found is not None:
                    return found
        return None

    found = extend([], [start])
    if found is None:
        raise AssertionError(f"No {length}-edge path from {start}")
    return found


def play_random(engine: GameEngine, seed: int, max_steps: int) -> int:
    """Drive the acting player with random legal actions; returns steps taken."""
    chooser = random.Random(seed)
    for step in range(max_steps):
        if engine.is_game_over():
            return step
        actions = engine.get_valid_actions()
        assert actions, f"No valid actions in {engine.state.phase}"
        result = engine.step(chooser.choice(actions))
        assert result.success, result.message
        assert engine.state.validate() == []
    return max_steps


# =============================================================================
# Seven Roll Tests
# =============================================================================


class TestSevenThroughEngine:
    """Test the discard and robber sequence through apply_action."""

    @pytest.fixture
    def rolled_seven(self, state: GameState) -> GameState:
        state.phase = PreRoll()
        state.dice_roll = None
        set_hand(state, 0, brick=9)
        result = apply_action(state, 0, RollDice(), rng=fixed_dice(3, 4))
        assert result.success
        return state

    def test_seven_requires_discard(self, rolled_seven: GameState):
        """A nine-card hand must give up four before the robber moves."""
        assert rolled_seven.phase == DiscardRequired(players_remaining=(0,))
        assert acting_player(rolled_seven) == 0
        assert valid_actions(rolled_seven, 0) == [DiscardCards(ResourceHand(brick=4))]
        assert valid_actions(rolled_seven, 1) == []

    def test_end_turn_blocked_during_discard(self, rolled_seven: GameState):
        result = apply_action(rolled_seven, 0, EndTurn())
        assert result.error == ErrorKind.INVALID_PHASE

    def test_other_player_cannot_discard(self, rolled_seven: GameState):
        result = apply_action(rolled_seven, 1, DiscardCards(ResourceHand(brick=4)))
        assert result.error == ErrorKind.NOT_YOUR_TURN

    def test_discard_leads_to_robber(self, rolled_seven: GameState):
        """After the last discard the roller moves the robber."""
        result = apply_action(rolled_seven, 0, DiscardCards(ResourceHand(brick=4)))
        assert result.success
        assert rolled_seven.get_player(0).resources == ResourceHand(brick=5)
        assert rolled_seven.phase == RobberMoveRequired()
        moves = valid_actions(rolled_seven, 0)
        assert len(moves) == 18
        assert all(m.hex != rolled_seven.board.robber_location for m in moves)


# =============================================================================
# Player Trade Tests
# =============================================================================


class TestTradeThroughEngine:
    """Test offers answered by another seat."""

    @pytest.fixture
    def offered(self, state: GameState) -> GameState:
        set_hand(state, 0, brick=2)
        set_hand(state, 1, ore=1)
        offer = make_offer(0, {"brick": 1}, {"ore": 1})
        result = apply_action(state, 0, ProposeTrade(offer))
        assert result.success
        assert isinstance(result.events[0], TradeProposed)
        return state

    def test_responses_listed(self, offered: GameState):
        """The other seat may accept or reject; the proposer may cancel."""
        assert valid_actions(offered, 1) == [AcceptTrade(), RejectTrade()]
        assert valid_actions(offered, 0)[-1] == CancelTrade()
        assert ProposeTrade not in {type(a) for a in valid_actions(offered, 0)}

    def test_accept_swaps_cards(self, offered: GameState):
        """Accepting moves the cards both ways and conserves the total."""
        result = apply_action(offered, 1, AcceptTrade())
        assert result.success
        assert isinstance(result.events[0], TradeCompleted)
        assert offered.get_player(0).resources == ResourceHand(brick=1, ore=1)
        assert offered.get_player(1).resources == ResourceHand(brick=1)
        assert offered.pending_trade is None

    def test_accept_unlisted_when_unaffordable(self, offered: GameState):
        set_hand(offered, 1, wool=1)
        assert valid_actions(offered, 1) == [RejectTrade()]
        result = apply_action(offered, 1, AcceptTrade())
        assert result.error == ErrorKind.CANNOT_AFFORD

    def test_responder_cannot_propose(self, offered: GameState):
        """Only the current player may make a fresh offer."""
        offer = make_offer(1, {"ore": 1}, {"brick": 1})
        result = apply_action(offered, 1, ProposeTrade(offer))
        assert result.error == ErrorKind.NOT_YOUR_TURN

    def test_reject_cancels_in_two_player_game(self, offered: GameState):
        apply_action(offered, 1, RejectTrade())
        assert offered.pending_trade is None

    def test_end_turn_drops_offer(self, offered: GameState):
        result = apply_action(offered, 0, EndTurn())
        assert result.success
        assert offered.pending_trade is None
        assert offered.current_player == 1

    def test_pending_offer_is_a_snapshot(self, state: GameState):
        """Editing the caller's offer or the event after proposing leaves the pending trade alone."""
        set_hand(state, 0, brick=2)
        offer = make_offer(0, {"brick": 1}, {"ore": 1})
        action = ProposeTrade(offer)
        result = apply_action(state, 0, action)
        assert result.success

        offer.requesting.set(Resource.ORE, 0)
        action.offer.requesting.set(Resource.ORE, 0)
        result.events[0].offer.offering.set(Resource.BRICK, 5)
        pending = state.pending_trade.offer
        assert pending.requesting == ResourceHand(ore=1)
        assert pending.offering == ResourceHand(brick=1)


# =============================================================================
# Victory Tests
# =============================================================================


class TestVictory:
    """Test reaching ten points and the finished game."""

    @pytest.fixture
    def nine_points(self, state: GameState) -> tuple[GameState, VertexCoord]:
        """Seat 0 on nine points with a settlement spot on its road."""
        put_settlement(state, 0, ORE_CORNER)
        put_settlement(state, 0, TOP_LEFT_CORNER)
        put_settlement(state, 0, BOTTOM_LEFT_CORNER)
        edges, vertices = road_path(state.board, ORE_CORNER, 5)
        for edge in edges:
            put_road(state, 0, edge)
        AwardsResolver(state).update_longest_road()

        player = state.get_player(0)
        player.knights_played = 3
        player.has_largest_army = True
        player.dev_cards = [DevelopmentCard.VICTORY_POINT, DevelopmentCard.VICTORY_POINT]
        assert state.victory_points(0) == 9
        assert state.public_victory_points(0) == 7
        return state, vertices[2]

    def test_tenth_point_wins(self, nine_points):
        """The settlement that reaches ten points ends the game."""
        state, spot = nine_points
        set_hand(state, 0, brick=1, lumber=1, grain=1, wool=1)
        result = apply_action(state, 0, BuildSettlement(spot))

        assert result.success
        assert result.events[-1] == GameWon(player=0, victory_points=10)
        assert state.phase == Finished(winner=0)
        assert is_finished(state)
        assert winner(state) == 0
        assert total_victory_points(state, 0) == 10

    def test_finished_game_rejects_everything(self, nine_points):
        state, spot = nine_points
        set_hand(state, 0, brick=1, lumber=1, grain=1, wool=1)
        apply_action(state, 0, BuildSettlement(spot))

        result = apply_action(state, 0, EndTurn())
        assert result.error == ErrorKind.GAME_OVER
        result = apply_action(state, 1, RollDice())
        assert result.error == ErrorKind.GAME_OVER
        assert valid_actions(state, 0) == []
        assert acting_player(state) is None

    def test_nine_points_is_not_a_win(self, nine_points):
        state, _ = nine_points
        assert apply_action(state, 0, EndTurn()).success
        assert not is_finished(state)


class TestWinOnAnotherSeatsAction:
    """Test a seat reaching ten points during an opponent's action."""

    SPLIT = VertexCoord(HexCoord(0, 0), VertexDirection.NORTH)

    @pytest.fixture
    def road_split(self) -> tuple[GameState, EdgeCoord]:
        """Seat 0 holds Longest Road on six roads through SPLIT; seat 2 sits on eight points."""
        state = main_state(3)
        guard = frozenset([self.SPLIT, *self.SPLIT.adjacent_vertices()])

        put_settlement(state, 2, BOTTOM_LEFT_CORNER)
        state.board.upgrade_to_city(BOTTOM_LEFT_CORNER, 2)
        state.get_player(2).settlements_remaining += 1
        state.get_player(2).cities_remaining -= 1
        far_edges, far_vertices = road_path(state.board, BOTTOM_LEFT_CORNER, 5, blocked=guard)
        for edge in far_edges:
            put_road(state, 2, edge)
        third = state.get_player(2)
        third.knights_played = 3
        third.has_largest_army = True
        third.dev_cards = [DevelopmentCard.VICTORY_POINT] * 4

        taken = frozenset(far_vertices)
        arm_a, a_vertices = road_path(state.board, self.SPLIT, 3, blocked=taken)
        arm_b, _ = road_path(state.board, self.SPLIT, 3, blocked=taken | frozenset(a_vertices[1:]))
        for edge in arm_a + arm_b:
            put_road(state, 0, edge)
        AwardsResolver(state).update_longest_road()

        spur = next(e for e in self.SPLIT.touching_edges() if e not in arm_a + arm_b)
        put_road(state, 1, spur)
        set_hand(state, 1, brick=1, lumber=1, grain=1, wool=1)
        state.current_player = 1

        assert state.board.longest_road(0) == 6
        assert state.get_player(0).has_longest_road
        assert state.victory_points(2) == 8
        return state, spur

    def test_split_hands_award_and_win_to_third_seat(self, road_split):
        """Seat 1's settlement cuts seat 0's road; seat 2 takes the award and wins."""
        state, _ = road_split
        result = apply_action(state, 1, BuildSettlement(self.SPLIT))

        assert result.success
        assert LongestRoadChanged(previous=0, holder=2, length=5) in result.events
        assert result.events[-1] == GameWon(player=2, victory_points=10)
        assert state.phase == Finished(winner=2)
        assert winner(state) == 2
        assert acting_player(state) is None

    def test_acting_player_checked_first(self, road_split):
        """When two seats pass ten on one action the acting seat wins."""
        state, _ = road_split
        state.get_player(1).dev_cards = [DevelopmentCard.VICTORY_POINT] * 9
        result = apply_action(state, 1, BuildSettlement(self.SPLIT))

        assert result.events[-1] == GameWon(player=1, victory_points=10)
        assert winner(state) == 1


# =============================================================================
# Rejection Tests
# =============================================================================


class TestRejections:
    """Test that rejected actions are data, not exceptions."""

    def test_rejected_action_leaves_state_unchanged(self, state: GameState):
        before = state.state_hash()
        result = apply_action(state, 0, BuildRoad(ORE_CORNER.touching_edges()[0]))
        assert not result.success
        assert result.events == []
        assert state.state_hash() == before

    def test_cannot_afford(self, state: GameState):
        result = apply_action(state, 0, MaritimeTrade(Resource.BRICK, 4, Resource.ORE))
        assert result.error == ErrorKind.CANNOT_AFFORD

    def test_wrong_turn(self, state: GameState):
        result = apply_action(state, 1, EndTurn())
        assert result.error == ErrorKind.NOT_YOUR_TURN

    def test_roll_in_main_phase(self, state: GameState):
        result = apply_action(state, 0, RollDice())
        assert result.error == ErrorKind.INVALID_PHASE

    def test_missing_card(self, state: GameState):
        result = apply_action(state, 0, PlayYearOfPlenty(Resource.ORE, Resource.ORE))
        assert result.error == ErrorKind.NO_SUCH_CARD

    def test_unknown_player_raises(self, state: GameState):
        """A seat that does not exist is a programming error."""
        with pytest.raises(ValueError):
            apply_action(state, 7, EndTurn())

    def test_unknown_player_has_no_actions(self, state: GameState):
        assert valid_actions(state, 7) == []


# =============================================================================
# Random Game Tests
# =============================================================================


class TestRandomGames:
    """Drive whole games with random legal actions."""

    @pytest.mark.parametrize("seed", [1, 2])
    def test_invariants_hold(self, seed: int):
        """Every accepted action keeps the state consistent."""
        engine = GameEngine()
        engine.reset(["A", "B", "C"], seed=seed)
        play_random(engine, seed, max_steps=600)
        assert engine.state.turn_number >= 1
        assert len(engine.history) > 0

    def test_finished_game_has_a_winner_on_ten(self):
        engine = GameEngine()
        engine.reset(NAMES, seed=4)
        play_random(engine, 4, max_steps=2000)
        if engine.is_game_over():
            assert engine.victory_points(engine.winner()) >= 10
            assert engine.get_valid_actions() == []


# =============================================================================
# GameEngine Tests
# =============================================================================


class TestGameEngine:
    """Test the stateful facade."""

    def test_state_before_reset(self):
        engine = GameEngine()
        with pytest.raises(RuntimeError):
            _ = engine.state
        assert str(engine) == "GameEngine(not initialized)"

    def test_reset_starts_setup(self):
        engine = GameEngine()
        state = engine.reset(NAMES, seed=3)
        assert engine.state is state
        assert engine.acting_player() == 0
        assert len(engine.get_valid_actions()) == 54

    def test_step_records_history(self):
        """Accepted actions enter the history and the event log."""
        engine = GameEngine()
        engine.reset(NAMES, seed=3)
        action = engine.get_valid_actions()[0]
        result = engine.step(action)
        assert result.success
        assert engine.history == [(0, action)]
        assert engine.event_log == result.events

    def test_rejected_step_not_recorded(self):
        engine = GameEngine()
        engine.reset(NAMES, seed=3)
        result = engine.step(EndTurn())
        assert not result.success
        assert engine.history == []

    def test_clone_is_independent(self):
        engine = GameEngine()
        engine.reset(NAMES, seed=3)
        copy = engine.clone()
        copy.step(copy.get_valid_actions()[0])
        assert engine.history == []
        assert engine.state.state_hash() != copy.state.state_hash()

    def test_game_summary(self):
        engine = GameEngine()
        engine.reset(NAMES, seed=3)
        summary = engine.get_game_summary()
        assert summary["turn"] == 0
        assert summary["game_over"] is False
        assert [p["name"] for p in summary["players"]] == NAMES


class TestReplay:
    """Test rebuilding games from seed and history."""

    def test_replay_reproduces_state(self):
        """The same seed and actions give the same state."""
        engine = GameEngine()
        engine.reset(NAMES, seed=9)
        play_random(engine, 9, max_steps=250)

        copy = replay(NAMES, 9, engine.history)
        assert copy.state.state_hash() == engine.state.state_hash()
        assert copy.event_log == engine.event_log

    def test_replay_detects_divergence(self):
        """A history that does not fit the game is reported at the failing step."""
        engine = GameEngine()
        engine.reset(NAMES, seed=9)
        play_random(engine, 9, max_steps=10)
        (_, first), second = engine.history[0], engine.history[1]
        # Seat 1 cannot settle on the corner seat 0 already holds
        tampered = [engine.history[0], second, (1, first)]
        with pytest.raises(ValueError, match="diverged at step 2"):
            replay(NAMES, 9, tampered)


# =============================================================================
# Serialization Tests
# =============================================================================


class TestWireFormat:
    """Test action and event serialization."""

    def test_action_round_trip(self, state: GameState):
        """Every listed action survives to_dict/action_from_dict."""
        set_hand(state, 0, brick=4, lumber=4, grain=2, wool=2, ore=4)
        for action in valid_actions(state, 0):
            assert action_from_dict(action.to_dict()) == action

    def test_offer_round_trip(self):
        action = ProposeTrade(make_offer(0, {"brick": 1}, {"ore": 2}, to_player=1))
        assert action_from_dict(action.to_dict()) == action

    def test_actions_holding_cards_are_hashable(self):
        discards = {DiscardCards(ResourceHand(brick=1)), DiscardCards(ResourceHand(brick=1))}
        offers = {
            ProposeTrade(make_offer(0, {"brick": 1}, {"ore": 1})),
            ProposeTrade(make_offer(0, {"brick": 1}, {"ore": 1})),
            ProposeTrade(make_offer(0, {"brick": 1}, {"ore": 2})),
        }
        assert len(discards) == 1
        assert len(offers) == 2

    def test_action_keeps_its_own_cards(self):
        cards = ResourceHand(wool=2)
        action = DiscardCards(cards)
        cards.set(Resource.WOOL, 0)
        assert action.cards == ResourceHand(wool=2)

    def test_unknown_action_type(self):
        with pytest.raises(ValueError):
            action_from_dict({"type": "fly"})

    def test_missing_field(self):
        with pytest.raises(ValueError, match="missing field"):
            action_from_dict({"type": ActionType.BUILD_ROAD.value})

    def test_purchase_hidden_from_opponents(self):
        event = DevelopmentCardPurchased(player=0, card=DevelopmentCard.MONOPOLY)
        assert event.visible_to(0).card == DevelopmentCard.MONOPOLY
        assert event.visible_to(1).card is None

    def test_steal_hidden_from_third_parties(self):
        event = ResourceStolen(thief=0, victim=1, resource=Resource.ORE)
        assert event.visible_to(1).resource == Resource.ORE
        assert event.visible_to(2).resource is None

    def test_event_to_dict(self):
        data = GameWon(player=1, victory_points=10).to_dict()
        assert data == {"type": "game_won", "player": 1, "victory_points": 10}


class TestLogging:
    """Test the structlog configuration."""

    @pytest.mark.parametrize("environment", ["testing", "production", "development"])
    def test_configure_returns_logger(self, environment: str):
        logger = logging_config.configure_logging(environment)
        assert hasattr(logger, "info")
        assert hasattr(logging_config.get_logger("engine"), "debug")

    def test_first_logger_configures_from_environment(self, monkeypatch):
        """Without an application setup the first logger applies ENVIRONMENT."""
        monkeypatch.setenv("ENVIRONMENT", "testing")
        structlog.reset_defaults()
        assert not structlog.is_configured()

        logging_config.get_logger("engine")
        assert structlog.is_configured()
        assert structlog.get_config()["wrapper_class"] is structlog.make_filtering_bound_logger(logging.WARNING)

    def test_application_configuration_is_kept(self):
        structlog.reset_defaults()
        processors = [structlog.processors.KeyValueRenderer()]
        structlog.configure(processors=processors)

        logging_config.get_logger("engine")
        assert structlog.get_config()["processors"] == processors
