"""Board generation and map loading for the Catan rules engine."""

from .generator import (
    standard_board,
    has_adjacent_red_numbers,
    place_numbers,
    place_harbors,
    surround_with_ocean,
)

from .loader import (
    BoardLoader,
    BoardLoadError,
    load_board,
    load_beginner_board,
    get_board_stats,
)

__all__ = [
    # Generator
    "standard_board",
    "has_adjacent_red_numbers",
    "place_numbers",
    "place_harbors",
    "surround_with_ocean",
    # Loader
    "BoardLoader",
    "BoardLoadError",
    "load_board",
    "load_beginner_board",
    "get_board_stats",
]
