"""Configuration constants for the Catan RL environment.

This module defines all configuration values for observation encoding,
action space sizing, and reward shaping.
"""

from dataclasses import dataclass
from typing import ClassVar

from core.constants import (
    MAX_PLAYERS,
    DEV_CARD_COUNTS,
    DevelopmentCard,
    Resource,
    PhaseKind,
)


@dataclass(frozen=True)
class BoardConfig:
    """Configuration for the standard board topology.

    These values match the 19-hex standard layout; smaller custom maps
    fit inside them and are zero-padded.
    """

    MAX_HEXES: int = 19
    MAX_VERTICES: int = 54
    MAX_EDGES: int = 72


@dataclass(frozen=True)
class ObservationConfig:
    """Configuration for observation tensor dimensions.

    All dimension calculations are based on the board topology and
    game rules to create fixed-size tensors suitable for neural networks.
    """

    # Board dimensions
    MAX_HEXES: int = BoardConfig.MAX_HEXES
    MAX_VERTICES: int = BoardConfig.MAX_VERTICES
    MAX_EDGES: int = BoardConfig.MAX_EDGES

    # Game dimensions
    MAX_PLAYERS: int = MAX_PLAYERS
    MAX_HAND: int = 19  # bank holds 19 of each resource
    MAX_DEV_CARDS: int = sum(DEV_CARD_COUNTS.values())
    MAX_KNIGHTS: int = DEV_CARD_COUNTS[DevelopmentCard.KNIGHT]
    MAX_TURNS: int = 500

    # Feature dimensions per component
    # tile type one-hot (5 resources + desert), number, pips, robber
    HEX_FEATURE_DIM: ClassVar[int] = 9
    # settlement/city per relative seat, generic harbor, 2:1 harbor one-hot
    VERTEX_FEATURE_DIM: ClassVar[int] = 2 * MAX_PLAYERS + 1 + len(Resource)
    # road owner per relative seat
    EDGE_FEATURE_DIM: ClassVar[int] = MAX_PLAYERS
    PLAYER_FEATURE_DIM: ClassVar[int] = 10
    # own hand, held non-VP dev cards by type, cards bought this turn
    SELF_FEATURE_DIM: ClassVar[int] = len(Resource) + len(DevelopmentCard)
    GLOBAL_FEATURE_DIM: ClassVar[int] = len(PhaseKind) + 10 + 2 * len(Resource)

    @property
    def hex_features_size(self) -> int:
        return self.MAX_HEXES * self.HEX_FEATURE_DIM

    @property
    def vertex_features_size(self) -> int:
        return self.MAX_VERTICES * self.VERTEX_FEATURE_DIM

    @property
    def edge_features_size(self) -> int:
        return self.MAX_EDGES * self.EDGE_FEATURE_DIM

    @property
    def player_features_size(self) -> int:
        return self.MAX_PLAYERS * self.PLAYER_FEATURE_DIM

    @property
    def self_features_size(self) -> int:
        return self.SELF_FEATURE_DIM

    @property
    def global_features_size(self) -> int:
        return self.GLOBAL_FEATURE_DIM

    @property
    def total_observation_dim(self) -> int:
        """Total dimension of the flat observation tensor."""
        return (
            self.hex_features_size
            + self.vertex_features_size
            + self.edge_features_size
            + self.player_features_size
            + self.self_features_size
            + self.global_features_size
        )


@dataclass(frozen=True)
class ActionSpaceConfig:
    """Configuration for the discrete action space.

    The space is a fixed sequence of segments; each segment covers one
    action category and its index range follows the previous one.
    """

    # Board dimensions for action calculations
    MAX_HEXES: int = BoardConfig.MAX_HEXES
    MAX_VERTICES: int = BoardConfig.MAX_VERTICES
    MAX_EDGES: int = BoardConfig.MAX_EDGES
    MAX_PLAYERS: int = MAX_PLAYERS

    NUM_YEAR_OF_PLENTY: int = 15  # unordered pairs of resources
    NUM_MONOPOLY: int = len(Resource)
    NUM_MARITIME: int = len(Resource) * (len(Resource) - 1)

    @property
    def segments(self) -> tuple[tuple[str, int], ...]:
        """Ordered (category, size) pairs making up the action space."""
        return (
            ("roll_dice", 1),
            ("end_turn", 1),
            ("buy_development_card", 1),
            ("play_knight", 1),
            ("play_road_building", 1),
            ("setup_settlement", self.MAX_VERTICES),
            ("setup_road", self.MAX_EDGES),
            ("build_settlement", self.MAX_VERTICES),
            ("build_city", self.MAX_VERTICES),
            ("build_road", self.MAX_EDGES),
            ("move_robber", self.MAX_HEXES),
            ("steal_from", self.MAX_PLAYERS),
            ("play_year_of_plenty", self.NUM_YEAR_OF_PLENTY),
            ("play_monopoly", self.NUM_MONOPOLY),
            ("maritime_trade", self.NUM_MARITIME),
            ("discard_cards", 1),
            ("accept_trade", 1),
            ("reject_trade", 1),
            ("cancel_trade", 1),
        )

    def start(self, category: str) -> int:
        """First index of a category.

        Raises:
            ValueError: If the category is unknown.
        """
        offset = 0
        for name, size in self.segments:
            if name == category:
                return offset
            offset += size
        raise ValueError(f"Unknown action category: {category}")

    def end(self, category: str) -> int:
        """One past the last index of a category."""
        return self.start(category) + dict(self.segments)[category]

    def category_of(self, action_idx: int) -> tuple[str, int]:
        """Return (category, offset within the category) for an index.

        Raises:
            ValueError: If the index is out of range.
        """
        offset = 0
        for name, size in self.segments:
            if offset <= action_idx < offset + size:
                return name, action_idx - offset
            offset += size
        raise ValueError(f"Action index {action_idx} out of range [0, {self.total_actions})")

    @property
    def total_actions(self) -> int:
        """Total number of discrete actions in the unified action space."""
        return sum(size for _, size in self.segments)


@dataclass(frozen=True)
class RewardConfig:
    """Configuration for reward calculation.

    Terminal rewards are sparse (+1 win, -1 loss); the victory point
    shaping term is small enough never to outweigh the result.
    """

    win_reward: float = 1.0
    loss_reward: float = -1.0
    victory_point_reward: float = 0.01
    invalid_action_penalty: float = -0.1

    # Episode limits
    max_steps: int = 5000


# Default configuration instances
DEFAULT_BOARD_CONFIG = BoardConfig()
DEFAULT_OBS_CONFIG = ObservationConfig()
DEFAULT_ACTION_CONFIG = ActionSpaceConfig()
DEFAULT_REWARD_CONFIG = RewardConfig()
