"""Reinforcement Learning module for the Catan rules engine.

This module provides a Gymnasium-compatible environment for training
RL agents with action masking, built on valid_actions/apply_action.

Key components:
- CatanEnv: Core Gymnasium environment
- ActionMapping: Fixed discrete index space over the board
- ActionMaskGenerator: Legal-action masks
- ObservationEncoder: Flat per-player observations
"""

from .config import (
    BoardConfig,
    ObservationConfig,
    ActionSpaceConfig,
    RewardConfig,
    DEFAULT_BOARD_CONFIG,
    DEFAULT_OBS_CONFIG,
    DEFAULT_ACTION_CONFIG,
    DEFAULT_REWARD_CONFIG,
)
from .observation import ObservationEncoder
from .action_space import ActionMapping, canonical_discard
from .action_masking import ActionMaskGenerator
from .catan_env import CatanEnv, make_catan_env

__all__ = [
    # Configuration
    "BoardConfig",
    "ObservationConfig",
    "ActionSpaceConfig",
    "RewardConfig",
    "DEFAULT_BOARD_CONFIG",
    "DEFAULT_OBS_CONFIG",
    "DEFAULT_ACTION_CONFIG",
    "DEFAULT_REWARD_CONFIG",
    # Observation encoding
    "ObservationEncoder",
    # Action space
    "ActionMapping",
    "canonical_discard",
    # Action masking
    "ActionMaskGenerator",
    # Environment
    "CatanEnv",
    "make_catan_env",
]
