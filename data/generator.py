"""Randomised standard board generation.

The standard board has 19 land hexes (a centre hex and rings of 6 and 12)
surrounded by ocean. Generation:
1. Shuffle the 18 resource tiles and the desert onto the land hexes
2. Shuffle the number tokens onto the resource tiles, retrying until no
   two adjacent tiles both carry a 6 or an 8
3. Synthesise ocean around the land
4. Spread the 9 harbors over the coastline by farthest-point selection
"""

from __future__ import annotations

import random
from typing import Optional

from core.board import Board, Harbor, Tile
from core.constants import (
    Resource,
    TileType,
    STANDARD_LAND_COORDS,
    STANDARD_TILE_COUNTS,
    STANDARD_NUMBERS,
    RED_NUMBERS,
    MAX_NUMBER_PLACEMENT_ATTEMPTS,
    GENERIC_HARBOR_COUNT,
)
from core.hex import HexCoord, EdgeCoord
from engine.logging_config import get_logger

logger = get_logger(__name__)


def standard_board(rng: Optional[random.Random] = None) -> Board:
    """Generate a randomised standard board.

    Args:
        rng: Random source; the same seed always gives the same board.

    Returns:
        A board with tiles, ocean, numbers, harbors and the robber on the desert.
    """
    rng = rng if rng is not None else random.Random()
    board = Board()

    tile_types = [tile_type for tile_type, count in STANDARD_TILE_COUNTS.items() for _ in range(count)]
    rng.shuffle(tile_types)
    for (q, r), tile_type in zip(STANDARD_LAND_COORDS, tile_types):
        coord = HexCoord(q, r)
        board.tiles[coord] = Tile(coord=coord, tile_type=tile_type)

    place_numbers(board, rng)
    surround_with_ocean(board)
    place_robber(board)
    board.harbors = place_harbors(board, rng)
    return board


def place_numbers(board: Board, rng: random.Random, numbers: Optional[list[int]] = None) -> bool:
    """Shuffle number tokens onto the resource tiles.

    Retries up to MAX_NUMBER_PLACEMENT_ATTEMPTS times to keep 6s and 8s
    apart; if every attempt fails, the last one is kept.

    Returns:
        True if a layout without adjacent red numbers was found.
    """
    tokens = list(numbers if numbers is not None else STANDARD_NUMBERS)
    productive = sorted(
        (t for t in board.land_tiles() if t.tile_type != TileType.DESERT),
        key=lambda t: t.coord,
    )
    for attempt in range(1, MAX_NUMBER_PLACEMENT_ATTEMPTS + 1):
        rng.shuffle(tokens)
        for tile, number in zip(productive, tokens):
            tile.number = number
        if not has_adjacent_red_numbers(board):
            return True
        logger.debug("number_placement_retry", attempt=attempt)
    logger.debug("number_placement_fallback", attempts=MAX_NUMBER_PLACEMENT_ATTEMPTS)
    return False


def has_adjacent_red_numbers(board: Board) -> bool:
    """Check if two neighbouring land tiles both carry a 6 or an 8."""
    for tile in board.land_tiles():
        if tile.number not in RED_NUMBERS:
            continue
        for neighbor in tile.coord.neighbors():
            other = board.get_tile(neighbor)
            if other is not None and other.is_land and other.number in RED_NUMBERS:
                return True
    return False


def surround_with_ocean(board: Board) -> None:
    """Add an ocean tile on every non-land hex next to land."""
    for tile in list(board.land_tiles()):
        for neighbor in tile.coord.neighbors():
            if neighbor not in board.tiles:
                board.tiles[neighbor] = Tile(coord=neighbor, tile_type=TileType.OCEAN)


def place_robber(board: Board) -> None:
    """Put the robber on the first desert, or the first land tile if none."""
    land = sorted(board.land_tiles(), key=lambda t: t.coord)
    deserts = [t for t in land if t.tile_type == TileType.DESERT]
    start = deserts[0] if deserts else land[0]
    board.move_robber(start.coord)


def coastal_edges(board: Board) -> list[EdgeCoord]:
    return sorted(e for e in board.land_edges() if board.is_coastal_edge(e))


def place_harbors(board: Board, rng: random.Random) -> list[Harbor]:
    """Spread the standard harbors along the coast.

    The first harbor edge is drawn at random; each following one is the
    coastal edge whose midpoint is farthest from every harbor chosen so
    far (ties go to the first edge in canonical order). Harbor types are
    shuffled onto the chosen edges.
    """
    harbor_types: list[Optional[Resource]] = [None] * GENERIC_HARBOR_COUNT + list(Resource)
    candidates = coastal_edges(board)
    if not candidates:
        return []

    chosen = [rng.choice(candidates)]
    while len(chosen) < len(harbor_types) and len(chosen) < len(candidates):
        best_edge = None
        best_distance = -1.0
        for edge in candidates:
            if edge in chosen:
                continue
            distance = min(_distance_sq(edge, other) for other in chosen)
            if distance > best_distance:
                best_edge, best_distance = edge, distance
        chosen.append(best_edge)

    rng.shuffle(harbor_types)
    return [Harbor(edge=edge, resource=resource) for edge, resource in zip(chosen, harbor_types)]


def _distance_sq(a: EdgeCoord, b: EdgeCoord) -> float:
    ax, ay = a.midpoint()
    bx, by = b.midpoint()
    return (ax - bx) ** 2 + (ay - by) ** 2
