"""Game phase variants.

The phase is a tagged union: each variant is a frozen dataclass carrying
the data that phase needs, and a `kind` tag used by the transition table
in engine.phase_machine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from .constants import PhaseKind, SetupPlacement
from .hex import HexCoord


@dataclass(frozen=True)
class Phase:
    """Base class of all phase variants."""

    kind: ClassVar[PhaseKind]

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value}

    def __str__(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class Setup(Phase):
    """Initial snake-draft placement."""

    kind: ClassVar[PhaseKind] = PhaseKind.SETUP

    round: int = 1
    placing: SetupPlacement = SetupPlacement.SETTLEMENT

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "round": self.round, "placing": self.placing.value}

    def __str__(self) -> str:
        return f"setup(round {self.round}, {self.placing.value})"


@dataclass(frozen=True)
class PreRoll(Phase):
    kind: ClassVar[PhaseKind] = PhaseKind.PRE_ROLL


@dataclass(frozen=True)
class DiscardRequired(Phase):
    """A 7 was rolled and these players must still discard half their hand."""

    kind: ClassVar[PhaseKind] = PhaseKind.DISCARD_REQUIRED

    players_remaining: tuple[int, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "players_remaining": list(self.players_remaining)}


@dataclass(frozen=True)
class RobberMoveRequired(Phase):
    kind: ClassVar[PhaseKind] = PhaseKind.ROBBER_MOVE_REQUIRED


@dataclass(frozen=True)
class RobberSteal(Phase):
    """The robber moved next to several players; the mover picks a victim."""

    kind: ClassVar[PhaseKind] = PhaseKind.ROBBER_STEAL

    target_hex: HexCoord = HexCoord(0, 0)
    victims: tuple[int, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "target_hex": self.target_hex.to_dict(),
            "victims": list(self.victims),
        }


@dataclass(frozen=True)
class MainPhase(Phase):
    kind: ClassVar[PhaseKind] = PhaseKind.MAIN


@dataclass(frozen=True)
class RoadBuildingInProgress(Phase):
    """A Road Building card is being resolved; roads are free."""

    kind: ClassVar[PhaseKind] = PhaseKind.ROAD_BUILDING

    roads_remaining: int = 2

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "roads_remaining": self.roads_remaining}


@dataclass(frozen=True)
class Finished(Phase):
    kind: ClassVar[PhaseKind] = PhaseKind.FINISHED

    winner: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "winner": self.winner}

    def __str__(self) -> str:
        return f"finished(winner {self.winner})"
