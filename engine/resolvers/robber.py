"""Robber resolver for the Catan rules engine.

Covers the three steps of the robber interlude:
1. Discard: every player over the hand limit discards exactly half
   (rounded down) of their cards
2. Move: the current player moves the robber to another land tile
3. Steal: one random card is taken from a player with a building on
   that tile (automatic when there is a single candidate)

After the steal the turn continues in MainPhase, or back in PreRoll when
the robber was triggered by a knight played before rolling.
"""

from __future__ import annotations

import itertools
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from core.constants import Resource
from core.hex import HexCoord
from core.phases import DiscardRequired, RobberMoveRequired, RobberSteal
from core.player import ResourceHand

from ..errors import ActionError, ErrorKind
from ..events import CardsDiscarded, Event, ResourceStolen, RobberMoved
from ..phase_machine import PhaseMachine

if TYPE_CHECKING:
    from core.game_state import GameState


@dataclass
class StealResult:
    """Result of a steal.

    Attributes:
        thief: The player stealing.
        victim: The player stolen from.
        resource: The card taken, or None if the victim had none.
    """

    thief: int
    victim: int
    resource: Optional[Resource] = None


class RobberResolver:
    """Resolves discards, robber moves and steals."""

    def __init__(self, state: GameState):
        self.state = state
        self.phase_machine = PhaseMachine(state)

    # -------------------------------------------------------------------------
    # Discard
    # -------------------------------------------------------------------------

    def discard_amount(self, player_id: int) -> int:
        return self.state.get_player(player_id).resources.total() // 2

    def validate_discard(self, player_id: int, cards: ResourceHand) -> None:
        phase = self.state.phase
        if not isinstance(phase, DiscardRequired):
            raise ActionError(ErrorKind.INVALID_PHASE)
        if player_id not in phase.players_remaining:
            raise ActionError(ErrorKind.NOT_YOUR_TURN, f"Player {player_id} does not need to discard")
        if any(cards.get(r) < 0 for r in Resource):
            raise ActionError(ErrorKind.INVALID_DISCARD, "Discard counts cannot be negative")
        required = self.discard_amount(player_id)
        if cards.total() != required:
            raise ActionError(
                ErrorKind.INVALID_DISCARD,
                f"Must discard exactly {required} cards, got {cards.total()}",
            )
        if not self.state.get_player(player_id).resources.can_afford(cards):
            raise ActionError(ErrorKind.INVALID_DISCARD, "Cannot discard cards not held")

    def discard(self, player_id: int, cards: ResourceHand) -> list[Event]:
        self.validate_discard(player_id, cards)
        self.state.get_player(player_id).resources.subtract(cards)

        remaining = tuple(p for p in self.state.phase.players_remaining if p != player_id)
        if remaining:
            self.phase_machine.transition_to(DiscardRequired(players_remaining=remaining))
        else:
            self.phase_machine.transition_to(RobberMoveRequired())
        return [CardsDiscarded(player=player_id, cards=cards.copy())]

    def get_valid_discards(self, player_id: int) -> list[ResourceHand]:
        """Every distinct sub-hand of exactly the required size."""
        hand = self.state.get_player(player_id).resources
        required = self.discard_amount(player_id)
        ranges = [range(min(hand.get(r), required) + 1) for r in Resource]
        discards = []
        for counts in itertools.product(*ranges):
            if sum(counts) == required:
                discards.append(ResourceHand(*counts))
        return discards

    # -------------------------------------------------------------------------
    # Move
    # -------------------------------------------------------------------------

    def validate_move(self, target: HexCoord) -> None:
        if not isinstance(self.state.phase, RobberMoveRequired):
            raise ActionError(ErrorKind.INVALID_PHASE)
        if not self.state.board.is_land_hex(target):
            raise ActionError(ErrorKind.INVALID_LOCATION, f"{target} is not a land tile")
        if target == self.state.board.robber_location:
            raise ActionError(ErrorKind.INVALID_LOCATION, "The robber must move to a different tile")

    def get_valid_moves(self) -> list[HexCoord]:
        return sorted(
            tile.coord for tile in self.state.board.land_tiles()
            if tile.coord != self.state.board.robber_location
        )

    def victims_at(self, target: HexCoord, thief: int) -> list[int]:
        """Opponents with a building on `target` and at least one card."""
        return sorted(
            pid for pid in self.state.board.players_adjacent_to_hex(target)
            if pid != thief and self.state.get_player(pid).resources.total() > 0
        )

    def move(self, player_id: int, target: HexCoord, rng: random.Random) -> list[Event]:
        self.validate_move(target)
        self.state.board.move_robber(target)
        events: list[Event] = [RobberMoved(player=player_id, hex=target)]

        victims = self.victims_at(target, player_id)
        if len(victims) > 1:
            self.phase_machine.transition_to(RobberSteal(target_hex=target, victims=tuple(victims)))
            return events
        if victims:
            events.append(self._steal_event(self.steal(player_id, victims[0], rng)))
        self.phase_machine.transition_to(self.phase_machine.after_robber())
        return events

    # -------------------------------------------------------------------------
    # Steal
    # -------------------------------------------------------------------------

    def validate_steal(self, victim: int) -> None:
        phase = self.state.phase
        if not isinstance(phase, RobberSteal):
            raise ActionError(ErrorKind.INVALID_PHASE)
        if victim not in phase.victims:
            raise ActionError(ErrorKind.INVALID_LOCATION, f"Player {victim} is not next to the robber")

    def steal(self, thief: int, victim: int, rng: random.Random) -> StealResult:
        """Move one card chosen uniformly among the victim's cards."""
        resource = self.state.get_player(victim).resources.steal_random(rng)
        if resource is not None:
            self.state.get_player(thief).resources.add(resource)
        return StealResult(thief=thief, victim=victim, resource=resource)

    def steal_from(self, player_id: int, victim: int, rng: random.Random) -> list[Event]:
        self.validate_steal(victim)
        result = self.steal(player_id, victim, rng)
        self.phase_machine.transition_to(self.phase_machine.after_robber())
        return [self._steal_event(result)]

    def get_valid_victims(self) -> list[int]:
        phase = self.state.phase
        return list(phase.victims) if isinstance(phase, RobberSteal) else []

    @staticmethod
    def _steal_event(result: StealResult) -> ResourceStolen:
        return ResourceStolen(thief=result.thief, victim=result.victim, resource=result.resource)
