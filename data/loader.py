"""Board data loader for the Catan rules engine.

Loads and validates custom maps from JSON files or dictionaries,
converting them into Board instances ready for use in the game.

Map format:
    {
        "tiles": [{"q": 0, "r": 0, "tile_type": "desert"},
                  {"q": 1, "r": 0, "tile_type": "ore", "number": 5}, ...],
        "harbors": [{"q": 2, "r": -2, "direction": "north_east", "resource": null}, ...],
        "robber": [0, 0]
    }

Ocean tiles may be listed explicitly; any hex next to land that is not
listed becomes ocean. "harbors" and "robber" are optional.
"""

from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Any

from core.board import Board, Harbor, Tile
from core.constants import (
    Resource,
    TileType,
    STANDARD_LAND_COORDS,
    STANDARD_TILE_COUNTS,
    STANDARD_NUMBERS,
)
from core.hex import HexCoord, EdgeCoord

from .generator import has_adjacent_red_numbers, place_robber, surround_with_ocean


def resource_path(relative_path: str) -> Path:
    """Get the absolute path of a file shipped in the data/ directory."""
    return Path(__file__).parent / relative_path


class BoardLoadError(Exception):
    """Raised when board loading or validation fails."""
    pass


class BoardLoader:
    """Loads and validates board data from JSON files."""

    # Expected counts for the standard board
    EXPECTED_LAND_TILES = len(STANDARD_LAND_COORDS)

    def __init__(self, strict: bool = True):
        """Initialize the loader.

        Args:
            strict: If True, require the standard 19-tile layout with the
                    standard tile and number multisets. Set to False for
                    custom maps.
        """
        self.strict = strict

    def load_from_file(self, file_path: str | Path) -> Board:
        """Load a board from a JSON file.

        Raises:
            BoardLoadError: If the file cannot be read or parsed, or if
                validation fails.
        """
        path = Path(file_path)

        if not path.exists():
            raise BoardLoadError(f"Board file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise BoardLoadError(f"Invalid JSON in board file: {e}")
        except IOError as e:
            raise BoardLoadError(f"Error reading board file: {e}")

        return self.load_from_dict(data)

    def load_from_dict(self, data: dict[str, Any]) -> Board:
        """Load a board from a dictionary.

        Raises:
            BoardLoadError: If validation fails.
        """
        self._validate_structure(data)

        board = Board()
        for tile_data in data["tiles"]:
            tile = self._create_tile(tile_data)
            if tile.coord in board.tiles:
                raise BoardLoadError(f"Duplicate tile at {tile.coord}")
            board.tiles[tile.coord] = tile

        if not board.land_tiles():
            raise BoardLoadError("Board must have at least one land tile")
        self._validate_connectivity(board)
        surround_with_ocean(board)

        for harbor_data in data.get("harbors", []):
            harbor = self._create_harbor(harbor_data)
            if not board.is_coastal_edge(harbor.edge):
                raise BoardLoadError(f"Harbor edge {harbor.edge} is not on the coast")
            if any(h.edge == harbor.edge for h in board.harbors):
                raise BoardLoadError(f"Duplicate harbor at {harbor.edge}")
            board.harbors.append(harbor)

        robber = data.get("robber")
        if robber is None:
            place_robber(board)
        else:
            coord = self._parse_coord(robber)
            if not board.is_land_hex(coord):
                raise BoardLoadError(f"Robber must start on a land tile, got {coord}")
            board.move_robber(coord)

        if self.strict:
            self._validate_standard(board)

        return board

    def _validate_structure(self, data: dict[str, Any]) -> None:
        """Validate the basic structure of the board data."""
        if not isinstance(data, dict):
            raise BoardLoadError("Board data must be a dictionary")

        if "tiles" not in data:
            raise BoardLoadError("Board data missing 'tiles' key")

        if not isinstance(data["tiles"], list):
            raise BoardLoadError("'tiles' must be a list")

        if not isinstance(data.get("harbors", []), list):
            raise BoardLoadError("'harbors' must be a list")

        if len(data["tiles"]) == 0:
            raise BoardLoadError("Board must have at least one tile")

    @staticmethod
    def _parse_coord(value: Any) -> HexCoord:
        if isinstance(value, dict) and "q" in value and "r" in value:
            value = [value["q"], value["r"]]
        if (
            not isinstance(value, (list, tuple))
            or len(value) != 2
            or not all(isinstance(v, int) for v in value)
        ):
            raise BoardLoadError(f"Invalid hex coordinate: {value!r}")
        return HexCoord(value[0], value[1])

    def _create_tile(self, tile_data: dict[str, Any]) -> Tile:
        """Create a Tile from a tile dictionary."""
        if not isinstance(tile_data, dict):
            raise BoardLoadError(f"Tile entry must be a dictionary, got {tile_data!r}")
        for field in ("q", "r", "tile_type"):
            if field not in tile_data:
                raise BoardLoadError(f"Tile missing required field: {field}")

        coord = self._parse_coord([tile_data["q"], tile_data["r"]])
        try:
            tile_type = TileType(tile_data["tile_type"])
        except ValueError:
            raise BoardLoadError(
                f"Invalid tile type '{tile_data['tile_type']}' at {coord}. "
                f"Valid types: {[t.value for t in TileType]}"
            )

        number = tile_data.get("number")
        if tile_type.resource is None:
            if number is not None:
                raise BoardLoadError(f"{tile_type.value} tile at {coord} cannot have a number")
        else:
            if not isinstance(number, int) or not 2 <= number <= 12:
                raise BoardLoadError(f"Resource tile at {coord} needs a number from 2 to 12")
            if number == 7:
                raise BoardLoadError(f"7 is not a valid tile number (tile at {coord})")

        return Tile(coord=coord, tile_type=tile_type, number=number)

    def _create_harbor(self, harbor_data: dict[str, Any]) -> Harbor:
        for field in ("q", "r", "direction"):
            if field not in harbor_data:
                raise BoardLoadError(f"Harbor missing required field: {field}")
        try:
            edge = EdgeCoord.from_dict(harbor_data)
        except (KeyError, ValueError, TypeError):
            raise BoardLoadError(f"Invalid harbor edge: {harbor_data!r}")

        resource = harbor_data.get("resource")
        if resource is None:
            return Harbor(edge=edge)
        try:
            return Harbor(edge=edge, resource=Resource(resource))
        except ValueError:
            raise BoardLoadError(f"Invalid harbor resource '{resource}'")

    def _validate_connectivity(self, board: Board) -> None:
        """All land tiles must form one connected island."""
        land = {t.coord for t in board.land_tiles()}
        start = min(land)
        visited = set()
        self._dfs(land, start, visited)

        if len(visited) != len(land):
            unreachable = sorted(land - visited)
            raise BoardLoadError(
                f"Land is not connected. Unreachable tiles: {[str(c) for c in unreachable]}"
            )

    def _dfs(self, land: set[HexCoord], coord: HexCoord, visited: set[HexCoord]) -> None:
        """Depth-first search to check connectivity."""
        visited.add(coord)
        for neighbor in coord.neighbors():
            if neighbor in land and neighbor not in visited:
                self._dfs(land, neighbor, visited)

    def _validate_standard(self, board: Board) -> None:
        land = board.land_tiles()
        if len(land) != self.EXPECTED_LAND_TILES:
            raise BoardLoadError(
                f"Expected {self.EXPECTED_LAND_TILES} land tiles, found {len(land)}"
            )

        tile_counts = Counter(t.tile_type for t in land)
        if tile_counts != Counter(STANDARD_TILE_COUNTS):
            raise BoardLoadError(
                f"Non-standard tile mix: {dict((k.value, v) for k, v in tile_counts.items())}"
            )

        numbers = sorted(t.number for t in land if t.number is not None)
        if numbers != sorted(STANDARD_NUMBERS):
            raise BoardLoadError(f"Non-standard number tokens: {numbers}")


def load_board(file_path: str | Path, strict: bool = True) -> Board:
    """Convenience function to load a board from a file."""
    loader = BoardLoader(strict=strict)
    return loader.load_from_file(file_path)


def load_beginner_board() -> Board:
    """Load the fixed beginner layout (desert in the centre, fixed harbors).

    Raises:
        BoardLoadError: If the bundled board file is missing or invalid.
    """
    return load_board(resource_path("beginner_board.json"), strict=True)


def get_board_stats(board: Board) -> dict[str, Any]:
    """Get statistics about a board.

    Args:
        board: The board to analyze.

    Returns:
        Dictionary with board statistics.
    """
    land = board.land_tiles()
    tile_counts: dict[str, int] = {t.value: 0 for t in TileType if t != TileType.OCEAN}
    for tile in land:
        tile_counts[tile.tile_type.value] += 1

    return {
        "num_land_tiles": len(land),
        "num_ocean_tiles": len(board.tiles) - len(land),
        "num_vertices": len(board.land_vertices()),
        "num_edges": len(board.land_edges()),
        "num_harbors": len(board.harbors),
        "tiles_by_type": tile_counts,
        "robber": str(board.robber_location),
        "adjacent_red_numbers": has_adjacent_red_numbers(board),
        "harbors_by_resource": dict(
            Counter(h.resource.value if h.resource else "generic" for h in board.harbors)
        ),
    }
