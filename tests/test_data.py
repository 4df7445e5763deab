"""Tests for board generation and the board loader."""

import json
import random
import tempfile
from collections import Counter
from pathlib import Path

import pytest

from core.board import Board, Tile
from core.constants import Resource, TileType, STANDARD_NUMBERS, STANDARD_TILE_COUNTS
from core.hex import HexCoord
from data.generator import (
    coastal_edges,
    has_adjacent_red_numbers,
    place_numbers,
    standard_board,
)
from data.loader import (
    BoardLoader,
    BoardLoadError,
    get_board_stats,
    load_beginner_board,
    load_board,
)


def small_map() -> dict:
    """Three-hex island used by the non-strict loader tests."""
    return {
        "tiles": [
            {"q": 0, "r": 0, "tile_type": "ore", "number": 5},
            {"q": 1, "r": 0, "tile_type": "wool", "number": 6},
            {"q": 0, "r": 1, "tile_type": "desert"},
        ],
    }


# =============================================================================
# Generator Tests
# =============================================================================


class TestStandardBoard:
    """Test randomised standard board generation."""

    def test_same_seed_same_board(self):
        """Generation is deterministic for a seed."""
        a = standard_board(random.Random(7))
        b = standard_board(random.Random(7))
        assert a.to_dict() == b.to_dict()

    def test_different_seeds_differ(self):
        a = standard_board(random.Random(1))
        b = standard_board(random.Random(2))
        assert a.to_dict() != b.to_dict()

    @pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
    def test_tile_and_number_multisets(self, seed: int):
        """Every standard board uses the standard tiles and tokens."""
        board = standard_board(random.Random(seed))
        land = board.land_tiles()
        assert len(land) == 19
        assert Counter(t.tile_type for t in land) == Counter(STANDARD_TILE_COUNTS)
        assert sorted(t.number for t in land if t.number is not None) == sorted(STANDARD_NUMBERS)

    @pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
    def test_red_numbers_kept_apart(self, seed: int):
        """6s and 8s never end up on neighbouring tiles."""
        board = standard_board(random.Random(seed))
        assert not has_adjacent_red_numbers(board)

    def test_desert_has_no_number_and_holds_robber(self):
        """The robber starts on the numberless desert."""
        board = standard_board(random.Random(3))
        desert = [t for t in board.land_tiles() if t.tile_type == TileType.DESERT]
        assert len(desert) == 1
        assert desert[0].number is None
        assert board.robber_location == desert[0].coord
        assert desert[0].has_robber

    def test_harbors(self):
        """Nine distinct coastal harbors: four generic and one per resource."""
        board = standard_board(random.Random(5))
        assert len(board.harbors) == 9
        edges = [h.edge for h in board.harbors]
        assert len(set(edges)) == 9
        assert all(board.is_coastal_edge(e) for e in edges)
        resources = Counter(h.resource for h in board.harbors)
        assert resources[None] == 4
        assert all(resources[r] == 1 for r in Resource)

    def test_ocean_ring(self):
        """The 19 land hexes are ringed by 18 ocean hexes."""
        board = standard_board(random.Random(0))
        ocean = [t for t in board.tiles.values() if t.tile_type == TileType.OCEAN]
        assert len(ocean) == 18
        assert len(coastal_edges(board)) == 30


class TestNumberPlacement:
    """Test the retry-then-fallback number placement."""

    def test_fallback_keeps_last_attempt(self):
        """When no layout separates the reds, the last shuffle is kept."""
        board = Board()
        for coord in (HexCoord(0, 0), HexCoord(1, 0)):
            board.tiles[coord] = Tile(coord=coord, tile_type=TileType.GRAIN)
        assert place_numbers(board, random.Random(0), numbers=[6, 8]) is False
        assert sorted(t.number for t in board.land_tiles()) == [6, 8]

    def test_success_reports_true(self):
        board = Board()
        for coord in (HexCoord(0, 0), HexCoord(1, 0)):
            board.tiles[coord] = Tile(coord=coord, tile_type=TileType.GRAIN)
        assert place_numbers(board, random.Random(0), numbers=[6, 9]) is True


# =============================================================================
# BoardLoader Tests
# =============================================================================


class TestBoardLoader:
    """Test loading custom maps."""

    def test_load_small_map(self):
        """A non-strict loader accepts a small island and adds the ocean."""
        board = BoardLoader(strict=False).load_from_dict(small_map())
        assert len(board.land_tiles()) == 3
        assert board.tiles[HexCoord(0, 0)].number == 5
        assert board.robber_location == HexCoord(0, 1)
        assert all(
            n in board.tiles for t in board.land_tiles() for n in t.coord.neighbors()
        )

    def test_strict_loader_rejects_small_map(self):
        """The strict loader requires the standard layout."""
        with pytest.raises(BoardLoadError, match="Expected 19 land tiles"):
            BoardLoader(strict=True).load_from_dict(small_map())

    def test_explicit_robber(self):
        data = small_map()
        data["robber"] = [1, 0]
        board = BoardLoader(strict=False).load_from_dict(data)
        assert board.robber_location == HexCoord(1, 0)

    def test_harbor_loaded(self):
        """A harbor on a coastal edge is accepted with its resource."""
        data = small_map()
        data["harbors"] = [{"q": 1, "r": 0, "direction": "east", "resource": "wool"}]
        board = BoardLoader(strict=False).load_from_dict(data)
        assert len(board.harbors) == 1
        assert board.harbors[0].resource == Resource.WOOL
        assert board.harbors[0].rate == 2


class TestBoardLoaderValidation:
    """Test loader validation errors."""

    def test_missing_tiles_key(self):
        with pytest.raises(BoardLoadError, match="missing 'tiles'"):
            BoardLoader(strict=False).load_from_dict({"harbors": []})

    def test_empty_tiles(self):
        with pytest.raises(BoardLoadError):
            BoardLoader(strict=False).load_from_dict({"tiles": []})

    def test_duplicate_tile(self):
        """Two tiles on one hex are rejected."""
        data = small_map()
        data["tiles"].append({"q": 0, "r": 0, "tile_type": "grain", "number": 4})
        with pytest.raises(BoardLoadError, match="Duplicate tile"):
            BoardLoader(strict=False).load_from_dict(data)

    def test_invalid_tile_type(self):
        data = small_map()
        data["tiles"][0]["tile_type"] = "gold"
        with pytest.raises(BoardLoadError, match="Invalid tile type"):
            BoardLoader(strict=False).load_from_dict(data)

    def test_seven_is_not_a_tile_number(self):
        """No tile may carry the robber number."""
        data = small_map()
        data["tiles"][0]["number"] = 7
        with pytest.raises(BoardLoadError):
            BoardLoader(strict=False).load_from_dict(data)

    def test_resource_tile_needs_number(self):
        data = small_map()
        del data["tiles"][0]["number"]
        with pytest.raises(BoardLoadError, match="needs a number"):
            BoardLoader(strict=False).load_from_dict(data)

    def test_desert_cannot_have_number(self):
        data = small_map()
        data["tiles"][2]["number"] = 4
        with pytest.raises(BoardLoadError, match="cannot have a number"):
            BoardLoader(strict=False).load_from_dict(data)

    def test_disconnected_land(self):
        """Land must form one island."""
        data = small_map()
        data["tiles"].append({"q": 5, "r": 0, "tile_type": "grain", "number": 4})
        with pytest.raises(BoardLoadError, match="not connected"):
            BoardLoader(strict=False).load_from_dict(data)

    def test_harbor_must_be_coastal(self):
        """A harbor between two land tiles is rejected."""
        data = small_map()
        data["harbors"] = [{"q": 0, "r": 0, "direction": "east", "resource": None}]
        with pytest.raises(BoardLoadError, match="not on the coast"):
            BoardLoader(strict=False).load_from_dict(data)

    def test_invalid_harbor_resource(self):
        data = small_map()
        data["harbors"] = [{"q": 1, "r": 0, "direction": "east", "resource": "gold"}]
        with pytest.raises(BoardLoadError, match="Invalid harbor resource"):
            BoardLoader(strict=False).load_from_dict(data)

    def test_robber_on_ocean(self):
        """The robber must start on land."""
        data = small_map()
        data["robber"] = [4, 4]
        with pytest.raises(BoardLoadError, match="Robber"):
            BoardLoader(strict=False).load_from_dict(data)


class TestBoardLoaderFile:
    """Test BoardLoader file operations."""

    def test_load_from_file(self):
        """Should load board from JSON file."""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            json.dump(small_map(), f)
            temp_path = f.name

        try:
            board = load_board(temp_path, strict=False)
            assert len(board.land_tiles()) == 3
        finally:
            Path(temp_path).unlink()

    def test_load_missing_file(self):
        """Should raise error for missing file."""
        loader = BoardLoader(strict=False)
        with pytest.raises(BoardLoadError, match="not found"):
            loader.load_from_file("/nonexistent/path.json")

    def test_load_invalid_json(self):
        """Should raise error for invalid JSON."""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            f.write("{ invalid json }")
            temp_path = f.name

        try:
            loader = BoardLoader(strict=False)
            with pytest.raises(BoardLoadError, match="Invalid JSON"):
                loader.load_from_file(temp_path)
        finally:
            Path(temp_path).unlink()


# =============================================================================
# Beginner Board Tests
# =============================================================================


class TestBeginnerBoard:
    """Test the bundled beginner layout."""

    def test_load_beginner_board(self):
        """The beginner board passes strict validation."""
        board = load_beginner_board()
        assert len(board.land_tiles()) == 19
        assert board.tiles[HexCoord(0, 0)].tile_type == TileType.DESERT
        assert board.tiles[HexCoord(1, 0)].number == 5

    def test_beginner_harbors(self):
        board = load_beginner_board()
        assert len(board.harbors) == 9
        lumber = [h for h in board.harbors if h.resource == Resource.LUMBER]
        assert len(lumber) == 1
        assert lumber[0].edge.touching_hexes()[0] in (HexCoord(2, 0), HexCoord(3, 0))

    def test_beginner_board_stats(self):
        """get_board_stats summarises the layout."""
        stats = get_board_stats(load_beginner_board())
        assert stats["num_land_tiles"] == 19
        assert stats["num_ocean_tiles"] == 18
        assert stats["num_vertices"] == 54
        assert stats["num_edges"] == 72
        assert stats["num_harbors"] == 9
        assert stats["tiles_by_type"]["desert"] == 1
        assert stats["harbors_by_resource"]["generic"] == 4

    def test_beginner_board_is_fresh_each_load(self):
        """Each load returns an independent board."""
        a = load_beginner_board()
        b = load_beginner_board()
        a.move_robber(HexCoord(1, 0))
        assert b.robber_location == HexCoord(0, 0)
