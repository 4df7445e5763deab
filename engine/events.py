"""Event vocabulary for the Catan rules engine.

Every accepted action produces an ordered list of events describing its
effects. The event stream is the replayable log consumed by front ends,
bots and servers.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar, Optional

from core.constants import DevelopmentCard, Resource
from core.hex import HexCoord, VertexCoord, EdgeCoord
from core.player import ResourceHand
from core.trade import TradeOffer


class EventType(Enum):
    """Types of events emitted by the engine."""

    DICE_ROLLED = "dice_rolled"
    RESOURCES_DISTRIBUTED = "resources_distributed"
    SETTLEMENT_BUILT = "settlement_built"
    CITY_BUILT = "city_built"
    ROAD_BUILT = "road_built"
    DEVELOPMENT_CARD_PURCHASED = "development_card_purchased"
    KNIGHT_PLAYED = "knight_played"
    ROAD_BUILDING_PLAYED = "road_building_played"
    YEAR_OF_PLENTY_PLAYED = "year_of_plenty_played"
    MONOPOLY_PLAYED = "monopoly_played"
    ROBBER_MOVED = "robber_moved"
    RESOURCE_STOLEN = "resource_stolen"
    CARDS_DISCARDED = "cards_discarded"
    TRADE_PROPOSED = "trade_proposed"
    TRADE_REJECTED = "trade_rejected"
    TRADE_COMPLETED = "trade_completed"
    TRADE_CANCELLED = "trade_cancelled"
    MARITIME_TRADE_COMPLETED = "maritime_trade_completed"
    LONGEST_ROAD_CHANGED = "longest_road_changed"
    LARGEST_ARMY_CHANGED = "largest_army_changed"
    TURN_ENDED = "turn_ended"
    GAME_WON = "game_won"


@dataclass(frozen=True)
class Event:
    """Base class of all events."""

    event_type: ClassVar[EventType]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.event_type.value}
        for f in fields(self):
            data[f.name] = _encode(getattr(self, f.name))
        return data

    def visible_to(self, player_id: int) -> Event:
        """The event as seen by `player_id` (private details redacted)."""
        return self


@dataclass(frozen=True)
class DiceRolled(Event):
    event_type: ClassVar[EventType] = EventType.DICE_ROLLED
    player: int
    die1: int
    die2: int

    @property
    def total(self) -> int:
        return self.die1 + self.die2


@dataclass(frozen=True)
class ResourcesDistributed(Event):
    """Production, or the second setup settlement's starting resources."""

    event_type: ClassVar[EventType] = EventType.RESOURCES_DISTRIBUTED
    distribution: dict[int, ResourceHand]


@dataclass(frozen=True)
class SettlementBuilt(Event):
    event_type: ClassVar[EventType] = EventType.SETTLEMENT_BUILT
    player: int
    vertex: VertexCoord


@dataclass(frozen=True)
class CityBuilt(Event):
    event_type: ClassVar[EventType] = EventType.CITY_BUILT
    player: int
    vertex: VertexCoord


@dataclass(frozen=True)
class RoadBuilt(Event):
    event_type: ClassVar[EventType] = EventType.ROAD_BUILT
    player: int
    edge: EdgeCoord


@dataclass(frozen=True)
class DevelopmentCardPurchased(Event):
    event_type: ClassVar[EventType] = EventType.DEVELOPMENT_CARD_PURCHASED
    player: int
    card: Optional[DevelopmentCard] = None

    def visible_to(self, player_id: int) -> Event:
        if player_id == self.player:
            return self
        return dataclasses.replace(self, card=None)


@dataclass(frozen=True)
class KnightPlayed(Event):
    event_type: ClassVar[EventType] = EventType.KNIGHT_PLAYED
    player: int


@dataclass(frozen=True)
class RoadBuildingPlayed(Event):
    event_type: ClassVar[EventType] = EventType.ROAD_BUILDING_PLAYED
    player: int


@dataclass(frozen=True)
class YearOfPlentyPlayed(Event):
    event_type: ClassVar[EventType] = EventType.YEAR_OF_PLENTY_PLAYED
    player: int
    first: Resource
    second: Resource


@dataclass(frozen=True)
class MonopolyPlayed(Event):
    event_type: ClassVar[EventType] = EventType.MONOPOLY_PLAYED
    player: int
    resource: Resource
    amount: int


@dataclass(frozen=True)
class RobberMoved(Event):
    event_type: ClassVar[EventType] = EventType.ROBBER_MOVED
    player: int
    hex: HexCoord


@dataclass(frozen=True)
class ResourceStolen(Event):
    """A card moved from victim to thief; None when the victim had nothing."""

    event_type: ClassVar[EventType] = EventType.RESOURCE_STOLEN
    thief: int
    victim: int
    resource: Optional[Resource] = None

    def visible_to(self, player_id: int) -> Event:
        if player_id in (self.thief, self.victim):
            return self
        return dataclasses.replace(self, resource=None)


@dataclass(frozen=True)
class CardsDiscarded(Event):
    event_type: ClassVar[EventType] = EventType.CARDS_DISCARDED
    player: int
    cards: ResourceHand


@dataclass(frozen=True)
class TradeProposed(Event):
    event_type: ClassVar[EventType] = EventType.TRADE_PROPOSED
    offer: TradeOffer


@dataclass(frozen=True)
class TradeRejected(Event):
    event_type: ClassVar[EventType] = EventType.TRADE_REJECTED
    player: int


@dataclass(frozen=True)
class TradeCompleted(Event):
    event_type: ClassVar[EventType] = EventType.TRADE_COMPLETED
    from_player: int
    to_player: int
    gave: ResourceHand
    received: ResourceHand


@dataclass(frozen=True)
class TradeCancelled(Event):
    event_type: ClassVar[EventType] = EventType.TRADE_CANCELLED


@dataclass(frozen=True)
class MaritimeTradeCompleted(Event):
    event_type: ClassVar[EventType] = EventType.MARITIME_TRADE_COMPLETED
    player: int
    gave: Resource
    gave_count: int
    received: Resource


@dataclass(frozen=True)
class LongestRoadChanged(Event):
    event_type: ClassVar[EventType] = EventType.LONGEST_ROAD_CHANGED
    previous: Optional[int]
    holder: Optional[int]
    length: int


@dataclass(frozen=True)
class LargestArmyChanged(Event):
    event_type: ClassVar[EventType] = EventType.LARGEST_ARMY_CHANGED
    previous: Optional[int]
    holder: Optional[int]
    knights: int


@dataclass(frozen=True)
class TurnEnded(Event):
    event_type: ClassVar[EventType] = EventType.TURN_ENDED
    player: int
    next_player: int


@dataclass(frozen=True)
class GameWon(Event):
    event_type: ClassVar[EventType] = EventType.GAME_WON
    player: int
    victory_points: int


def _encode(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): _encode(v) for k, v in value.items()}
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value
