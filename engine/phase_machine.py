"""Phase state machine for the Catan rules engine.

Two tables drive the turn structure:
- PHASE_TRANSITIONS: which phase kinds may follow each phase kind
- PHASE_ACTIONS: which action types each phase kind permits

The phase machine enforces both tables and provides the setup snake-draft
ordering. It never decides game outcomes itself; resolvers compute the
next phase and ask the machine to apply it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from core.constants import PhaseKind, SetupPlacement
from core.phases import Phase, Setup, PreRoll, MainPhase

from .actions import ActionType

if TYPE_CHECKING:
    from core.game_state import GameState


# Valid phase transitions
PHASE_TRANSITIONS: dict[PhaseKind, list[PhaseKind]] = {
    # Snake draft, then the first turn
    PhaseKind.SETUP: [PhaseKind.SETUP, PhaseKind.PRE_ROLL],
    # Turn start: roll, or a knight before rolling
    PhaseKind.PRE_ROLL: [
        PhaseKind.MAIN,
        PhaseKind.DISCARD_REQUIRED,
        PhaseKind.ROBBER_MOVE_REQUIRED,
        PhaseKind.FINISHED,
    ],
    # Robber interlude
    PhaseKind.DISCARD_REQUIRED: [PhaseKind.DISCARD_REQUIRED, PhaseKind.ROBBER_MOVE_REQUIRED],
    PhaseKind.ROBBER_MOVE_REQUIRED: [
        PhaseKind.ROBBER_STEAL,
        PhaseKind.MAIN,
        PhaseKind.PRE_ROLL,
    ],
    PhaseKind.ROBBER_STEAL: [PhaseKind.MAIN, PhaseKind.PRE_ROLL],
    # Open play
    PhaseKind.MAIN: [
        PhaseKind.PRE_ROLL,
        PhaseKind.ROAD_BUILDING,
        PhaseKind.ROBBER_MOVE_REQUIRED,
        PhaseKind.FINISHED,
    ],
    PhaseKind.ROAD_BUILDING: [PhaseKind.ROAD_BUILDING, PhaseKind.MAIN, PhaseKind.FINISHED],
    # Terminal
    PhaseKind.FINISHED: [],
}

_TRADE_ACTIONS = {
    ActionType.MARITIME_TRADE,
    ActionType.PROPOSE_TRADE,
    ActionType.ACCEPT_TRADE,
    ActionType.REJECT_TRADE,
    ActionType.COUNTER_TRADE,
    ActionType.CANCEL_TRADE,
}

# Action types permitted in each phase
PHASE_ACTIONS: dict[PhaseKind, set[ActionType]] = {
    PhaseKind.SETUP: {ActionType.PLACE_INITIAL_SETTLEMENT, ActionType.PLACE_INITIAL_ROAD},
    PhaseKind.PRE_ROLL: {ActionType.ROLL_DICE, ActionType.PLAY_KNIGHT},
    PhaseKind.DISCARD_REQUIRED: {ActionType.DISCARD_CARDS},
    PhaseKind.ROBBER_MOVE_REQUIRED: {ActionType.MOVE_ROBBER},
    PhaseKind.ROBBER_STEAL: {ActionType.STEAL_FROM},
    PhaseKind.MAIN: {
        ActionType.END_TURN,
        ActionType.BUILD_ROAD,
        ActionType.BUILD_SETTLEMENT,
        ActionType.BUILD_CITY,
        ActionType.BUY_DEVELOPMENT_CARD,
        ActionType.PLAY_KNIGHT,
        ActionType.PLAY_ROAD_BUILDING,
        ActionType.PLAY_YEAR_OF_PLENTY,
        ActionType.PLAY_MONOPOLY,
    }
    | _TRADE_ACTIONS,
    PhaseKind.ROAD_BUILDING: {ActionType.BUILD_ROAD},
    PhaseKind.FINISHED: set(),
}


@dataclass
class PhaseTransitionResult:
    """Result of a phase transition attempt.

    Attributes:
        success: Whether the transition was successful.
        new_phase: The new phase if successful, None otherwise.
        reason: Description of why the transition failed (if it did).
    """

    success: bool
    new_phase: Optional[Phase]
    reason: Optional[str] = None


class PhaseMachine:
    """Enforces the phase tables for a game state.

    Phases:
        Setup(round, placing): snake-draft settlement then road
        PreRoll: roll the dice or play a knight
        DiscardRequired: players over the hand limit discard half
        RobberMoveRequired / RobberSteal: relocate the robber and steal
        MainPhase: build, buy, play cards, trade, end turn
        RoadBuildingInProgress: free roads from a Road Building card
        Finished: terminal
    """

    def __init__(self, state: GameState):
        self.state = state

    @property
    def phase(self) -> Phase:
        return self.state.phase

    def get_valid_transitions(self) -> list[PhaseKind]:
        return PHASE_TRANSITIONS.get(self.phase.kind, [])

    def can_transition_to(self, target: Phase) -> bool:
        return target.kind in self.get_valid_transitions()

    def try_transition(self, target: Phase) -> PhaseTransitionResult:
        """Move the state to `target` if the transition table allows it."""
        if not self.can_transition_to(target):
            valid = self.get_valid_transitions()
            return PhaseTransitionResult(
                success=False,
                new_phase=None,
                reason=f"Cannot transition from {self.phase.kind.value} to {target.kind.value}. "
                f"Valid transitions: {[k.value for k in valid]}",
            )
        self.state.phase = target
        return PhaseTransitionResult(success=True, new_phase=target)

    def transition_to(self, target: Phase) -> None:
        """Move the state to `target`.

        Raises:
            RuntimeError: If the transition is not in the table; this is an
                engine bug, not a player error.
        """
        result = self.try_transition(target)
        if not result.success:
            raise RuntimeError(result.reason)

    def allows(self, action_type: ActionType) -> bool:
        """Check if the current phase permits an action type."""
        return action_type in PHASE_ACTIONS.get(self.phase.kind, set())

    # -------------------------------------------------------------------------
    # Turn helpers
    # -------------------------------------------------------------------------

    def after_robber(self) -> Phase:
        """Phase to return to once the robber is resolved.

        A knight played before rolling returns to PreRoll so the player
        still rolls this turn.
        """
        return MainPhase() if self.state.dice_roll is not None else PreRoll()

    # -------------------------------------------------------------------------
    # Setup phase helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def setup_order(num_players: int) -> list[int]:
        """Seat order for setup placements: forward, then reversed.

        With 2 players this is [0, 1, 1, 0].
        """
        forward = list(range(num_players))
        return forward + forward[::-1]

    @staticmethod
    def setup_position(placements_done: int, num_players: int) -> Optional[tuple[int, int]]:
        """Return (round, seat) for the next setup placement.

        Args:
            placements_done: Completed settlement+road placements.
            num_players: Number of players.

        Returns:
            (round, seat), or None once every player has placed twice.
        """
        order = PhaseMachine.setup_order(num_players)
        if placements_done >= len(order):
            return None
        setup_round = 1 if placements_done < num_players else 2
        return setup_round, order[placements_done]

    def next_setup_phase(self, placements_done: int) -> tuple[Phase, int]:
        """Phase and seat after a completed settlement+road placement."""
        position = self.setup_position(placements_done, self.state.num_players())
        if position is None:
            return PreRoll(), 0
        setup_round, seat = position
        return Setup(round=setup_round, placing=SetupPlacement.SETTLEMENT), seat

    def __str__(self) -> str:
        return f"PhaseMachine(phase={self.phase})"

    def __repr__(self) -> str:
        return f"PhaseMachine(phase={self.phase!r})"
