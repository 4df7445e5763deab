"""Player-to-player trade offers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .player import ResourceHand


@dataclass
class TradeOffer:
    """An offer from one player to another player or to the whole table.

    Attributes:
        from_player: The proposing player.
        to_player: The target player, or None for an open offer.
        offering: Resources the proposer gives.
        requesting: Resources the proposer wants in return.
    """

    from_player: int
    to_player: Optional[int]
    offering: ResourceHand
    requesting: ResourceHand

    def is_open(self) -> bool:
        return self.to_player is None

    def can_respond(self, player_id: int) -> bool:
        """Check if a player is allowed to accept, reject or counter."""
        if player_id == self.from_player:
            return False
        return self.to_player is None or self.to_player == player_id

    def copy(self) -> TradeOffer:
        return TradeOffer(self.from_player, self.to_player, self.offering.copy(), self.requesting.copy())

    def key(self) -> tuple:
        return (self.from_player, self.to_player, self.offering.as_tuple(), self.requesting.as_tuple())

    def to_dict(self) -> dict[str, Any]:
        return {
            "from_player": self.from_player,
            "to_player": self.to_player,
            "offering": self.offering.to_dict(),
            "requesting": self.requesting.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TradeOffer:
        to_player = data.get("to_player")
        return cls(
            from_player=int(data["from_player"]),
            to_player=int(to_player) if to_player is not None else None,
            offering=ResourceHand.from_dict(data["offering"]),
            requesting=ResourceHand.from_dict(data["requesting"]),
        )


@dataclass
class PendingTrade:
    """The single outstanding offer and the rejections received so far."""

    offer: TradeOffer
    rejected_by: set[int] = field(default_factory=set)

    def to_dict(self) -> dict[str, Any]:
        return {"offer": self.offer.to_dict(), "rejected_by": sorted(self.rejected_by)}
