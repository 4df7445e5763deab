"""Action vocabulary for the Catan rules engine.

Actions are the closed set of player intents. Each action type is a
frozen dataclass tagged with an ActionType; to_dict()/action_from_dict()
convert them to and from plain data so front ends, bots and servers can
exchange them without touching engine internals.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar

from core.constants import Resource
from core.hex import HexCoord, VertexCoord, EdgeCoord
from core.player import ResourceHand
from core.trade import TradeOffer


class ActionType(Enum):
    """Types of actions a player can take."""

    # Setup
    PLACE_INITIAL_SETTLEMENT = "place_initial_settlement"
    PLACE_INITIAL_ROAD = "place_initial_road"

    # Turn flow
    ROLL_DICE = "roll_dice"
    END_TURN = "end_turn"

    # Building
    BUILD_ROAD = "build_road"
    BUILD_SETTLEMENT = "build_settlement"
    BUILD_CITY = "build_city"

    # Development cards
    BUY_DEVELOPMENT_CARD = "buy_development_card"
    PLAY_KNIGHT = "play_knight"
    PLAY_ROAD_BUILDING = "play_road_building"
    PLAY_YEAR_OF_PLENTY = "play_year_of_plenty"
    PLAY_MONOPOLY = "play_monopoly"

    # Robber
    MOVE_ROBBER = "move_robber"
    STEAL_FROM = "steal_from"
    DISCARD_CARDS = "discard_cards"

    # Trading
    MARITIME_TRADE = "maritime_trade"
    PROPOSE_TRADE = "propose_trade"
    ACCEPT_TRADE = "accept_trade"
    REJECT_TRADE = "reject_trade"
    COUNTER_TRADE = "counter_trade"
    CANCEL_TRADE = "cancel_trade"


@dataclass(frozen=True)
class Action:
    """Base class of all actions."""

    action_type: ClassVar[ActionType]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.action_type.value}
        for f in fields(self):
            data[f.name] = _encode(getattr(self, f.name))
        return data

    def __str__(self) -> str:
        params = ", ".join(f"{f.name}={getattr(self, f.name)}" for f in fields(self))
        return f"{self.action_type.value}({params})"


@dataclass(frozen=True)
class PlaceInitialSettlement(Action):
    action_type: ClassVar[ActionType] = ActionType.PLACE_INITIAL_SETTLEMENT
    vertex: VertexCoord


@dataclass(frozen=True)
class PlaceInitialRoad(Action):
    action_type: ClassVar[ActionType] = ActionType.PLACE_INITIAL_ROAD
    edge: EdgeCoord


@dataclass(frozen=True)
class RollDice(Action):
    action_type: ClassVar[ActionType] = ActionType.ROLL_DICE


@dataclass(frozen=True)
class EndTurn(Action):
    action_type: ClassVar[ActionType] = ActionType.END_TURN


@dataclass(frozen=True)
class BuildRoad(Action):
    action_type: ClassVar[ActionType] = ActionType.BUILD_ROAD
    edge: EdgeCoord


@dataclass(frozen=True)
class BuildSettlement(Action):
    action_type: ClassVar[ActionType] = ActionType.BUILD_SETTLEMENT
    vertex: VertexCoord


@dataclass(frozen=True)
class BuildCity(Action):
    action_type: ClassVar[ActionType] = ActionType.BUILD_CITY
    vertex: VertexCoord


@dataclass(frozen=True)
class BuyDevelopmentCard(Action):
    action_type: ClassVar[ActionType] = ActionType.BUY_DEVELOPMENT_CARD


@dataclass(frozen=True)
class PlayKnight(Action):
    action_type: ClassVar[ActionType] = ActionType.PLAY_KNIGHT


@dataclass(frozen=True)
class PlayRoadBuilding(Action):
    action_type: ClassVar[ActionType] = ActionType.PLAY_ROAD_BUILDING


@dataclass(frozen=True)
class PlayYearOfPlenty(Action):
    """Take two resources from the bank (may be the same resource twice)."""

    action_type: ClassVar[ActionType] = ActionType.PLAY_YEAR_OF_PLENTY
    first: Resource
    second: Resource


@dataclass(frozen=True)
class PlayMonopoly(Action):
    action_type: ClassVar[ActionType] = ActionType.PLAY_MONOPOLY
    resource: Resource


@dataclass(frozen=True)
class MoveRobber(Action):
    action_type: ClassVar[ActionType] = ActionType.MOVE_ROBBER
    hex: HexCoord


@dataclass(frozen=True)
class StealFrom(Action):
    action_type: ClassVar[ActionType] = ActionType.STEAL_FROM
    victim: int


@dataclass(frozen=True)
class DiscardCards(Action):
    action_type: ClassVar[ActionType] = ActionType.DISCARD_CARDS
    cards: ResourceHand

    def __post_init__(self) -> None:
        # Actions own their hands; later edits to the caller's hand do not leak in
        object.__setattr__(self, "cards", self.cards.copy())

    def __hash__(self) -> int:
        return hash((self.action_type, self.cards.as_tuple()))


@dataclass(frozen=True)
class MaritimeTrade(Action):
    """Trade `give_count` of one resource to the bank for one of another."""

    action_type: ClassVar[ActionType] = ActionType.MARITIME_TRADE
    give: Resource
    give_count: int
    receive: Resource


@dataclass(frozen=True)
class ProposeTrade(Action):
    action_type: ClassVar[ActionType] = ActionType.PROPOSE_TRADE
    offer: TradeOffer

    def __post_init__(self) -> None:
        object.__setattr__(self, "offer", self.offer.copy())

    def __hash__(self) -> int:
        return hash((self.action_type, self.offer.key()))


@dataclass(frozen=True)
class AcceptTrade(Action):
    action_type: ClassVar[ActionType] = ActionType.ACCEPT_TRADE


@dataclass(frozen=True)
class RejectTrade(Action):
    action_type: ClassVar[ActionType] = ActionType.REJECT_TRADE


@dataclass(frozen=True)
class CounterTrade(Action):
    action_type: ClassVar[ActionType] = ActionType.COUNTER_TRADE
    offer: TradeOffer

    def __post_init__(self) -> None:
        object.__setattr__(self, "offer", self.offer.copy())

    def __hash__(self) -> int:
        return hash((self.action_type, self.offer.key()))


@dataclass(frozen=True)
class CancelTrade(Action):
    action_type: ClassVar[ActionType] = ActionType.CANCEL_TRADE


ACTION_CLASSES: dict[ActionType, type[Action]] = {
    cls.action_type: cls
    for cls in (
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
}

# Field name -> decoder for action payloads.
_FIELD_DECODERS = {
    "vertex": VertexCoord.from_dict,
    "edge": EdgeCoord.from_dict,
    "hex": HexCoord.from_dict,
    "first": Resource,
    "second": Resource,
    "resource": Resource,
    "give": Resource,
    "receive": Resource,
    "give_count": int,
    "victim": int,
    "cards": ResourceHand.from_dict,
    "offer": TradeOffer.from_dict,
}


def _encode(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


def action_from_dict(data: dict[str, Any]) -> Action:
    """Rebuild an action from its to_dict() form.

    Raises:
        ValueError: If the type tag or a field is unknown or malformed.
    """
    try:
        action_type = ActionType(data["type"])
    except (KeyError, ValueError) as e:
        raise ValueError(f"Unknown action type in {data!r}") from e
    cls = ACTION_CLASSES[action_type]
    kwargs = {}
    for f in fields(cls):
        if f.name not in data:
            raise ValueError(f"Action {action_type.value} missing field '{f.name}'")
        kwargs[f.name] = _FIELD_DECODERS[f.name](data[f.name])
    return cls(**kwargs)
