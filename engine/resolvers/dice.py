"""Dice resolver for the Catan rules engine.

Rolling two dice either produces resources for every player or, on a 7,
starts the robber interlude:
- Players holding more than 7 cards must discard half (DiscardRequired)
- Otherwise the roller moves the robber straight away (RobberMoveRequired)
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from core.constants import DISCARD_THRESHOLD, ROBBER_ROLL
from core.phases import DiscardRequired, MainPhase, RobberMoveRequired
from core.player import ResourceHand

from ..events import DiceRolled, Event, ResourcesDistributed
from ..phase_machine import PhaseMachine

if TYPE_CHECKING:
    from core.game_state import GameState


@dataclass
class DiceResult:
    """Result of a dice roll.

    Attributes:
        die1: First die.
        die2: Second die.
        distribution: Resources produced per player (empty on a 7).
        discarding: Players that must discard (only on a 7).
    """

    die1: int
    die2: int
    distribution: dict[int, ResourceHand] = field(default_factory=dict)
    discarding: list[int] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.die1 + self.die2


class DiceResolver:
    """Rolls the dice and applies production or the robber branch."""

    def __init__(self, state: GameState):
        self.state = state
        self.phase_machine = PhaseMachine(state)

    def players_over_limit(self) -> list[int]:
        """Players with more than 7 cards, in seat order."""
        return [
            p.player_id for p in self.state.players
            if p.resources.total() > DISCARD_THRESHOLD
        ]

    def production(self, total: int) -> dict[int, ResourceHand]:
        distribution = {}
        for player_id, resources in sorted(self.state.board.resources_for_roll(total).items()):
            distribution[player_id] = ResourceHand.from_dict(resources)
        return distribution

    def roll(self, rng: random.Random) -> DiceResult:
        """Draw two independent dice from `rng` and apply the outcome."""
        die1 = rng.randint(1, 6)
        die2 = rng.randint(1, 6)
        return self.apply_roll(die1, die2)

    def apply_roll(self, die1: int, die2: int) -> DiceResult:
        """Apply a known roll (used by roll() and by tests)."""
        result = DiceResult(die1=die1, die2=die2)
        self.state.dice_roll = (die1, die2)

        if result.total == ROBBER_ROLL:
            result.discarding = self.players_over_limit()
            if result.discarding:
                self.phase_machine.transition_to(
                    DiscardRequired(players_remaining=tuple(result.discarding))
                )
            else:
                self.phase_machine.transition_to(RobberMoveRequired())
            return result

        result.distribution = self.production(result.total)
        for player_id, hand in result.distribution.items():
            self.state.get_player(player_id).resources.add_hand(hand)
        self.phase_machine.transition_to(MainPhase())
        return result

    def resolve(self, player_id: int, rng: random.Random) -> list[Event]:
        result = self.roll(rng)
        events: list[Event] = [DiceRolled(player=player_id, die1=result.die1, die2=result.die2)]
        if result.distribution:
            events.append(ResourcesDistributed(distribution=result.distribution))
        return events
