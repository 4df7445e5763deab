"""Gymnasium environment for the Catan rules engine.

Provides a single-agent, turn-based interface for RL training with:
- Shared policy across all seats (self-play)
- Observations from the current player's perspective
- Action masking for legal move enforcement
- Other seats' interrupt decisions (discards, trade responses) auto-played
"""

from __future__ import annotations

import random
from typing import Optional, Any, Tuple, SupportsFloat

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from core.board import Board
from core.game_state import GameState
from core.phases import DiscardRequired
from data.generator import standard_board
from engine.actions import Action
from engine.game_engine import GameEngine, valid_actions
from engine.logging_config import get_logger

from .config import (
    ObservationConfig,
    ActionSpaceConfig,
    RewardConfig,
    DEFAULT_OBS_CONFIG,
    DEFAULT_ACTION_CONFIG,
    DEFAULT_REWARD_CONFIG,
)
from .observation import ObservationEncoder
from .action_space import ActionMapping
from .action_masking import ActionMaskGenerator

logger = get_logger(__name__)

# Upper bound on consecutive auto-played decisions between two agent steps
_MAX_AUTO_ACTIONS = 100


class CatanEnv(gym.Env):
    """Gymnasium environment for the Catan rules engine.

    The agent always plays the current player. Whenever the game waits on
    another seat (a discard after a seven, or a response to a pending
    trade), that seat plays its first valid action before control returns
    to the agent.

    Rewards go to the player who acted: a small bonus per victory point
    gained, plus win_reward or loss_reward when the game ends.

    Attributes:
        observation_space: Box space for flat observation tensor.
        action_space: Discrete space for all possible actions.
        metadata: Environment metadata including render modes.
    """

    metadata = {"render_modes": ["human", "ansi"], "render_fps": 1}

    def __init__(
        self,
        num_players: int = 4,
        board: Optional[Board] = None,
        render_mode: Optional[str] = None,
        obs_config: ObservationConfig = DEFAULT_OBS_CONFIG,
        action_config: ActionSpaceConfig = DEFAULT_ACTION_CONFIG,
        reward_config: RewardConfig = DEFAULT_REWARD_CONFIG,
    ):
        """Initialize the Catan environment.

        Args:
            num_players: Number of players (2-4).
            board: Optional fixed board used for every episode. If None,
                each episode gets a random standard board from its seed.
            render_mode: Rendering mode ("human", "ansi", or None).
            obs_config: Observation encoding configuration.
            action_config: Action space configuration.
            reward_config: Reward calculation configuration.
        """
        super().__init__()

        self.num_players = num_players
        self.player_names = [f"Player {i + 1}" for i in range(num_players)]
        self._board = board
        self.render_mode = render_mode

        # Configuration
        self._obs_config = obs_config
        self._action_config = action_config
        self._reward_config = reward_config

        # Every standard board has the same land shape, so any one of them
        # fixes the index layout.
        topology = board if board is not None else standard_board(random.Random(0))

        # Core components
        self._engine: Optional[GameEngine] = None
        self._obs_encoder = ObservationEncoder(obs_config)
        self._action_mapping = ActionMapping(topology, action_config)
        self._mask_generator = ActionMaskGenerator(self._action_mapping, action_config)

        self._step_count: int = 0

        # Define spaces
        self.observation_space = spaces.Box(
            low=0.0,
            high=1.0,
            shape=(obs_config.total_observation_dim,),
            dtype=np.float32,
        )
        self.action_space = spaces.Discrete(action_config.total_actions)

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[dict] = None,
    ) -> Tuple[np.ndarray, dict]:
        """Reset the environment to a new game.

        Args:
            seed: Random seed; the same seed reproduces the same board,
                deck and dice.
            options: Additional options (unused).

        Returns:
            Tuple of (observation, info).
        """
        super().reset(seed=seed)

        game_seed = seed if seed is not None else int(self.np_random.integers(2**31))
        board = self._board.clone() if self._board is not None else None

        self._engine = GameEngine()
        self._engine.reset(self.player_names, seed=game_seed, board=board)
        self._step_count = 0

        self._auto_advance()
        return self._get_observation(), self._build_info()

    def step(
        self,
        action: int,
    ) -> Tuple[np.ndarray, SupportsFloat, bool, bool, dict]:
        """Execute one step in the environment.

        Args:
            action: Flat action index (0 to total_actions-1).

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
        """
        if self._engine is None:
            raise RuntimeError("Environment not initialized. Call reset() first.")
        if self._engine.is_game_over():
            raise RuntimeError("Episode has ended. Call reset() to start a new game.")

        state = self._engine.state
        acting_player = state.current_player
        points_before = state.victory_points(acting_player)
        self._step_count += 1
        truncated = self._step_count >= self._reward_config.max_steps

        error: Optional[str] = None
        try:
            action_obj = self._action_mapping.index_to_action(int(action), state, acting_player)
        except ValueError as e:
            error = str(e)
        else:
            result = self._engine.step(action_obj, acting_player)
            if not result.success:
                error = f"{result.error.value}: {result.message}"

        if error is not None:
            info = self._build_info()
            info["acting_player"] = acting_player
            info["error"] = error
            info["invalid_action"] = True
            return (
                self._get_observation(),
                self._reward_config.invalid_action_penalty,
                False,
                truncated,
                info,
            )

        self._auto_advance()

        state = self._engine.state
        terminated = state.is_game_over()
        reward = self._reward_config.victory_point_reward * (
            state.victory_points(acting_player) - points_before
        )
        if terminated:
            if state.winner() == acting_player:
                reward += self._reward_config.win_reward
            else:
                reward += self._reward_config.loss_reward
            logger.debug("episode_finished", winner=state.winner(), steps=self._step_count)

        info = self._build_info()
        info["acting_player"] = acting_player
        if terminated or truncated:
            info["game_over"] = True

        return self._get_observation(), float(reward), terminated, truncated, info

    def _auto_seat(self, state: GameState) -> Optional[int]:
        """The next non-current seat the game is waiting on, if any."""
        if isinstance(state.phase, DiscardRequired):
            for player_id in state.phase.players_remaining:
                if player_id != state.current_player:
                    return player_id
            return None
        if state.pending_trade is not None:
            for player_id in range(state.num_players()):
                if player_id != state.current_player and valid_actions(state, player_id):
                    return player_id
        return None

    def _auto_advance(self) -> None:
        """Play other seats' pending decisions with their first valid action.

        Raises:
            RuntimeError: If an auto-played action is rejected, or the game
                keeps waiting on other seats.
        """
        for _ in range(_MAX_AUTO_ACTIONS):
            state = self._engine.state
            if state.is_game_over():
                return
            seat = self._auto_seat(state)
            if seat is None:
                return
            auto_action = valid_actions(state, seat)[0]
            result = self._engine.step(auto_action, seat)
            if not result.success:
                raise RuntimeError(f"Auto-played {auto_action} for player {seat} was rejected: {result.message}")
        raise RuntimeError("Game kept waiting on other seats after repeated auto-play")

    def action_masks(self) -> np.ndarray:
        """Get the action mask for the current player.

        Returns:
            Boolean array of shape (total_actions,) where True = valid action.
        """
        if self._engine is None:
            return np.zeros(self._action_config.total_actions, dtype=np.bool_)

        state = self._engine.state
        return self._mask_generator.mask_for(state, state.current_player)

    def _get_observation(self) -> np.ndarray:
        """Get observation tensor for the current player."""
        if self._engine is None:
            return np.zeros(self._obs_config.total_observation_dim, dtype=np.float32)
        return self._obs_encoder.encode(self._engine.state, self._engine.state.current_player)

    def _build_info(self) -> dict[str, Any]:
        if self._engine is None:
            return {}

        state = self._engine.state
        mask = self.action_masks()
        return {
            "phase": state.phase.kind.value,
            "turn": state.turn_number,
            "current_player": state.current_player,
            "valid_action_count": int(mask.sum()),
            "open_categories": self._mask_generator.open_categories(mask),
            "victory_points": {p.player_id: state.public_victory_points(p.player_id) for p in state.players},
            "winner": state.winner(),
        }

    def render(self) -> Optional[str]:
        """Render the current state.

        Returns:
            String representation if render_mode is "ansi", None otherwise.
        """
        if self._engine is None:
            return None

        if self.render_mode == "human":
            print(self._engine.state)
            return None
        elif self.render_mode == "ansi":
            return str(self._engine.state)
        return None

    def close(self) -> None:
        """Clean up environment resources."""
        self._engine = None

    # -------------------------------------------------------------------------
    # Additional utility methods
    # -------------------------------------------------------------------------

    def get_state(self) -> Optional[GameState]:
        """Get the current game state (for debugging/visualization)."""
        if self._engine is None:
            return None
        return self._engine.state

    def get_valid_actions(self) -> list[Action]:
        """Get the current player's valid Action objects (for debugging)."""
        if self._engine is None:
            return []
        return valid_actions(self._engine.state, self._engine.state.current_player)

    @property
    def action_mapping(self) -> ActionMapping:
        return self._action_mapping


def make_catan_env(
    num_players: int = 4,
    render_mode: Optional[str] = None,
    **kwargs,
) -> CatanEnv:
    """Factory function for creating Catan environments.

    Args:
        num_players: Number of players (2-4).
        render_mode: Rendering mode.
        **kwargs: Additional arguments passed to CatanEnv.

    Returns:
        Configured CatanEnv instance.
    """
    return CatanEnv(num_players=num_players, render_mode=render_mode, **kwargs)
