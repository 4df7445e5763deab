"""Player model for the Catan rules engine.

Each player holds a resource hand, development cards, achievement flags
and a stock of unplaced pieces. Piece counters only decrease, except that
upgrading to a city returns a settlement piece to the stock.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field, fields
from typing import Any, Optional

from .constants import (
    Resource,
    DevelopmentCard,
    PlayerColor,
    MAX_SETTLEMENTS,
    MAX_CITIES,
    MAX_ROADS,
    ROAD_COST,
    SETTLEMENT_COST,
    CITY_COST,
    DEV_CARD_COST,
)


@dataclass
class ResourceHand:
    """Counts of each resource.

    Also used for costs, discards and trade offers.
    """

    brick: int = 0
    lumber: int = 0
    ore: int = 0
    grain: int = 0
    wool: int = 0

    @classmethod
    def from_dict(cls, data: dict[Any, int]) -> ResourceHand:
        """Build a hand from a mapping keyed by Resource or resource name."""
        hand = cls()
        for key, amount in data.items():
            resource = key if isinstance(key, Resource) else Resource(key)
            hand.add(resource, int(amount))
        return hand

    @classmethod
    def single(cls, resource: Resource, amount: int = 1) -> ResourceHand:
        hand = cls()
        hand.add(resource, amount)
        return hand

    def get(self, resource: Resource) -> int:
        return getattr(self, resource.value)

    def set(self, resource: Resource, amount: int) -> None:
        setattr(self, resource.value, amount)

    def add(self, resource: Resource, amount: int = 1) -> None:
        self.set(resource, self.get(resource) + amount)

    def remove(self, resource: Resource, amount: int = 1) -> None:
        """Remove resources.

        Raises:
            ValueError: If the hand holds fewer than `amount`.
        """
        current = self.get(resource)
        if current < amount:
            raise ValueError(f"Cannot remove {amount} {resource.value}, only {current} held")
        self.set(resource, current - amount)

    def total(self) -> int:
        return sum(self.get(resource) for resource in Resource)

    def is_empty(self) -> bool:
        return self.total() == 0

    def can_afford(self, cost: ResourceHand) -> bool:
        return all(self.get(r) >= cost.get(r) for r in Resource)

    def add_hand(self, other: ResourceHand) -> None:
        for resource in Resource:
            self.add(resource, other.get(resource))

    def subtract(self, other: ResourceHand) -> None:
        """Remove every resource in `other`.

        Raises:
            ValueError: If the hand cannot afford `other`; the hand is left unchanged.
        """
        if not self.can_afford(other):
            raise ValueError(f"Cannot subtract {other} from {self}")
        for resource in Resource:
            self.set(resource, self.get(resource) - other.get(resource))

    def steal_random(self, rng: random.Random) -> Optional[Resource]:
        """Remove one card chosen uniformly among all held cards.

        Returns:
            The stolen resource, or None if the hand is empty.
        """
        total = self.total()
        if total == 0:
            return None
        pick = rng.randrange(total)
        for resource in Resource:
            count = self.get(resource)
            if pick < count:
                self.remove(resource)
                return resource
            pick -= count
        return None

    def copy(self) -> ResourceHand:
        return ResourceHand(**{f.name: getattr(self, f.name) for f in fields(self)})

    def as_tuple(self) -> tuple[int, ...]:
        """Counts in canonical resource order."""
        return tuple(self.get(r) for r in Resource)

    def items(self) -> list[tuple[Resource, int]]:
        """Non-zero (resource, count) pairs in canonical order."""
        return [(r, self.get(r)) for r in Resource if self.get(r) > 0]

    def to_dict(self) -> dict[str, int]:
        return {resource.value: self.get(resource) for resource in Resource}

    def __str__(self) -> str:
        parts = [f"{count} {resource.value}" for resource, count in self.items()]
        return ", ".join(parts) if parts else "nothing"


# Read-only cost hands
ROAD = ResourceHand.from_dict(ROAD_COST)
SETTLEMENT = ResourceHand.from_dict(SETTLEMENT_COST)
CITY = ResourceHand.from_dict(CITY_COST)
DEVELOPMENT_CARD = ResourceHand.from_dict(DEV_CARD_COST)


@dataclass
class Player:
    """Represents a player in the game.

    Attributes:
        player_id: Seat index (0-indexed).
        name: Display name.
        color: Seat color.
        resources: Resource hand.
        dev_cards: Playable development cards.
        dev_cards_bought_this_turn: Cards bought this turn, not yet playable.
        knights_played: Number of knights played.
        has_longest_road: Holds the Longest Road award.
        has_largest_army: Holds the Largest Army award.
        settlements_remaining: Settlement pieces not on the board.
        cities_remaining: City pieces not on the board.
        roads_remaining: Road pieces not on the board.
    """

    player_id: int
    name: str = ""
    color: PlayerColor = PlayerColor.RED
    resources: ResourceHand = field(default_factory=ResourceHand)
    dev_cards: list[DevelopmentCard] = field(default_factory=list)
    dev_cards_bought_this_turn: list[DevelopmentCard] = field(default_factory=list)
    knights_played: int = 0
    has_longest_road: bool = False
    has_largest_army: bool = False
    settlements_remaining: int = MAX_SETTLEMENTS
    cities_remaining: int = MAX_CITIES
    roads_remaining: int = MAX_ROADS

    def has_playable(self, card: DevelopmentCard) -> bool:
        """Check if the player holds `card` from a previous turn."""
        return card in self.dev_cards

    def play_dev_card(self, card: DevelopmentCard) -> None:
        """Remove a playable card from the hand.

        Raises:
            ValueError: If the card is not held or was bought this turn.
        """
        if not self.has_playable(card):
            raise ValueError(f"Player {self.player_id} has no playable {card.value} card")
        self.dev_cards.remove(card)

    def buy_dev_card(self, card: DevelopmentCard) -> None:
        self.dev_cards_bought_this_turn.append(card)

    def promote_bought_cards(self) -> None:
        """Make this turn's purchases playable (called at end of turn)."""
        self.dev_cards.extend(self.dev_cards_bought_this_turn)
        self.dev_cards_bought_this_turn.clear()

    @property
    def victory_point_cards(self) -> int:
        held = self.dev_cards + self.dev_cards_bought_this_turn
        return held.count(DevelopmentCard.VICTORY_POINT)

    @property
    def dev_card_count(self) -> int:
        return len(self.dev_cards) + len(self.dev_cards_bought_this_turn)

    def to_dict(self, hide_private: bool = False) -> dict[str, Any]:
        """Serialize the player.

        Args:
            hide_private: Replace the hand and cards with counts only, as
                seen by an opponent.
        """
        data: dict[str, Any] = {
            "player_id": self.player_id,
            "name": self.name,
            "color": self.color.value,
            "knights_played": self.knights_played,
            "has_longest_road": self.has_longest_road,
            "has_largest_army": self.has_largest_army,
            "settlements_remaining": self.settlements_remaining,
            "cities_remaining": self.cities_remaining,
            "roads_remaining": self.roads_remaining,
        }
        if hide_private:
            data["resource_count"] = self.resources.total()
            data["dev_card_count"] = self.dev_card_count
        else:
            data["resources"] = self.resources.to_dict()
            data["dev_cards"] = [card.value for card in self.dev_cards]
            data["dev_cards_bought_this_turn"] = [
                card.value for card in self.dev_cards_bought_this_turn
            ]
        return data

    def __str__(self) -> str:
        return f"Player {self.player_id} ({self.name}, {self.color.value}): {self.resources}"
