"""Award and victory resolver for the Catan rules engine.

Longest Road and Largest Army are re-evaluated from the current board and
knight counts after every action that can change them; the win check runs
after every action that can change anyone's victory points.

Award rules:
- Longest Road: at least 5 segments; a sole leader takes it, a tie at the
  top keeps the current holder if they are among the tied players and
  otherwise leaves the award unheld.
- Largest Army: at least 3 knights; only a strict leader takes it, the
  current holder keeps it under a tie.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from core.constants import MIN_LARGEST_ARMY, MIN_LONGEST_ROAD, VICTORY_POINTS_TO_WIN
from core.phases import Finished

from ..events import Event, GameWon, LargestArmyChanged, LongestRoadChanged
from ..phase_machine import PhaseMachine

if TYPE_CHECKING:
    from core.game_state import GameState


@dataclass
class AwardStanding:
    """Snapshot of one award.

    Attributes:
        holder: Player holding the award, or None.
        value: Road length or knight count of the leading player.
        contenders: Players tied at `value`.
    """

    holder: Optional[int]
    value: int
    contenders: list[int]


class AwardsResolver:
    """Re-evaluates awards and checks for a winner."""

    def __init__(self, state: GameState):
        self.state = state

    def longest_road_holder(self) -> Optional[int]:
        for player in self.state.players:
            if player.has_longest_road:
                return player.player_id
        return None

    def largest_army_holder(self) -> Optional[int]:
        for player in self.state.players:
            if player.has_largest_army:
                return player.player_id
        return None

    def road_lengths(self) -> dict[int, int]:
        return {p.player_id: self.state.board.longest_road(p.player_id) for p in self.state.players}

    def longest_road_standing(self) -> AwardStanding:
        lengths = self.road_lengths()
        best = max(lengths.values(), default=0)
        contenders = [pid for pid, length in lengths.items() if length == best]
        return AwardStanding(self.longest_road_holder(), best, contenders)

    # -------------------------------------------------------------------------
    # Longest Road
    # -------------------------------------------------------------------------

    def update_longest_road(self) -> list[Event]:
        """Recompute Longest Road from the board.

        Also called after settlement builds: a settlement on an opponent's
        road splits it.
        """
        standing = self.longest_road_standing()
        current = standing.holder

        if standing.value < MIN_LONGEST_ROAD:
            new_holder = None
        elif len(standing.contenders) == 1:
            new_holder = standing.contenders[0]
        elif current in standing.contenders:
            new_holder = current
        else:
            new_holder = None

        if new_holder == current:
            return []
        for player in self.state.players:
            player.has_longest_road = player.player_id == new_holder
        return [LongestRoadChanged(previous=current, holder=new_holder, length=standing.value)]

    # -------------------------------------------------------------------------
    # Largest Army
    # -------------------------------------------------------------------------

    def update_largest_army(self) -> list[Event]:
        current = self.largest_army_holder()
        most = max(p.knights_played for p in self.state.players)
        if most < MIN_LARGEST_ARMY:
            return []
        leaders = [p.player_id for p in self.state.players if p.knights_played == most]
        if current in leaders or len(leaders) > 1:
            return []

        new_holder = leaders[0]
        for player in self.state.players:
            player.has_largest_army = player.player_id == new_holder
        return [LargestArmyChanged(previous=current, holder=new_holder, knights=most)]

    # -------------------------------------------------------------------------
    # Victory
    # -------------------------------------------------------------------------

    def check_winner(self, player_id: int) -> list[Event]:
        """End the game if any player has reached the target.

        The acting player is checked first, then the other seats in turn
        order. A settlement can split the Longest Road holder's path and
        hand the award to a third player, who then wins on that action.

        Returns:
            [GameWon] if the game ended, otherwise an empty list.
        """
        if self.state.is_game_over():
            return []
        count = self.state.num_players()
        for offset in range(count):
            candidate = (player_id + offset) % count
            points = self.state.victory_points(candidate)
            if points >= VICTORY_POINTS_TO_WIN:
                PhaseMachine(self.state).transition_to(Finished(winner=candidate))
                return [GameWon(player=candidate, victory_points=points)]
        return []
