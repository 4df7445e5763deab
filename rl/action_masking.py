"""Legal-action masks over the flat Catan action space.

Several engine actions can share one index: every legal discard collapses
onto the single discard slot (the env always plays the canonical discard),
and maritime trades at different rates for the same resource pair share a
slot that plays the best available rate.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Iterable

import numpy as np

from engine.actions import Action
from engine.game_engine import valid_actions
from .config import ActionSpaceConfig, DEFAULT_ACTION_CONFIG

if TYPE_CHECKING:
    from core.game_state import GameState
    from .action_space import ActionMapping


class ActionMaskGenerator:
    """Builds boolean masks of shape (total_actions,) from engine actions."""

    def __init__(
        self,
        action_mapping: "ActionMapping",
        config: ActionSpaceConfig = DEFAULT_ACTION_CONFIG,
    ):
        self.action_mapping = action_mapping
        self.config = config

    def mask_for(self, state: "GameState", player_id: int) -> np.ndarray:
        """Mask of everything `player_id` may do right now.

        Seats with nothing to do (not their turn, no pending discard or
        trade response) get an all-False mask.
        """
        actions = valid_actions(state, player_id)
        if not actions:
            return np.zeros(self.config.total_actions, dtype=np.bool_)
        return self.generate_mask(state, actions)

    def generate_mask(
        self,
        state: "GameState",
        actions: Iterable[Action],
    ) -> np.ndarray:
        """Open the index of every action in `actions`.

        Returns:
            All False once the game is over.

        Raises:
            RuntimeError: If an engine action has no index, or a running
                game produced no action at all.
        """
        mask = np.zeros(self.config.total_actions, dtype=np.bool_)

        for action in actions:
            try:
                idx = self.action_mapping.action_to_index(action)
            except ValueError as e:
                raise RuntimeError(f"Engine action {action} has no ActionMapping entry") from e
            mask[idx] = True

        if not mask.any() and not state.is_game_over():
            raise RuntimeError(f"No valid actions during {state.phase}")
        return mask

    def open_categories(self, mask: np.ndarray) -> dict[str, int]:
        """Count open slots per action category, skipping empty categories."""
        counts: Counter[str] = Counter()
        for idx in np.flatnonzero(mask):
            category, _ = self.config.category_of(int(idx))
            counts[category] += 1
        return dict(counts)
