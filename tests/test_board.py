"""Tests for the board model.

Tests cover:
1. Topology of the standard 19-hex board
2. Settlement, road and city placement rules
3. Production for a dice total (cities, robber)
4. Longest road computation
5. Harbor trade rates and serialization
"""

import pytest

from core.board import Board, Building
from core.constants import BuildingKind, Resource
from core.hex import EdgeDirection, VertexDirection, HexCoord, VertexCoord, EdgeCoord
from data.loader import load_beginner_board


# Top corner of the ore 5 hex; touches ore 5, wool 2 and grain 12
ORE_CORNER = VertexCoord(HexCoord(1, 0), VertexDirection.NORTH)


# =============================================================================
# Fixtures and helpers
# =============================================================================


@pytest.fixture
def board() -> Board:
    """The fixed beginner board."""
    return load_beginner_board()


def road_path(board: Board, start: VertexCoord, length: int) -> tuple[list[EdgeCoord], list[VertexCoord]]:
    """A simple land path of `length` edges starting at `start`.

    Returns:
        (edges, vertices) where vertices[i] and vertices[i + 1] are the
        ends of edges[i].
    """
    edges: list[EdgeCoord] = []
    vertices = [start]
    for _ in range(length):
        current = vertices[-1]
        for edge in current.touching_edges():
            nxt = edge.other_endpoint(current)
            if board.is_land_edge(edge) and edge not in edges and nxt not in vertices:
                break
        else:
            raise AssertionError(f"No path continues from {current}")
        edges.append(edge)
        vertices.append(nxt)
    return edges, vertices


# =============================================================================
# Topology Tests
# =============================================================================


class TestBoardTopology:
    """Test land, vertex and edge counts of the standard layout."""

    def test_land_counts(self, board: Board):
        """The standard board has 19 land hexes, 54 corners and 72 sides."""
        assert len(board.land_tiles()) == 19
        assert len(board.land_vertices()) == 54
        assert len(board.land_edges()) == 72

    def test_coastline(self, board: Board):
        """30 sides separate land from ocean."""
        coastal = [e for e in board.land_edges() if board.is_coastal_edge(e)]
        assert len(coastal) == 30

    def test_ocean_surrounds_land(self, board: Board):
        """Every neighbour of a land hex is a tile."""
        for tile in board.land_tiles():
            for neighbor in tile.coord.neighbors():
                assert neighbor in board.tiles

    def test_tiles_at_vertex(self, board: Board):
        """A corner lists only the land tiles touching it."""
        types = sorted(t.tile_type.value for t in board.tiles_at_vertex(ORE_CORNER))
        assert types == ["grain", "ore", "wool"]

    def test_robber_starts_on_desert(self, board: Board):
        """The beginner robber sits on the central desert."""
        assert board.robber_location == HexCoord(0, 0)
        assert board.tiles[HexCoord(0, 0)].has_robber


# =============================================================================
# Placement Tests
# =============================================================================


class TestPlacementRules:
    """Test settlement, road and city placement rules."""

    def test_distance_rule_blocks_adjacent_vertices(self, board: Board):
        """No settlement may be placed next to an existing building."""
        board.place_settlement(ORE_CORNER, 0)
        for adjacent in ORE_CORNER.adjacent_vertices():
            assert not board.satisfies_distance_rule(adjacent)
            assert not board.is_valid_settlement_spot(adjacent, 1, is_setup=True)

    def test_distance_rule_allows_two_steps_away(self, board: Board):
        """A corner two sides away is still available."""
        board.place_settlement(ORE_CORNER, 0)
        _, vertices = road_path(board, ORE_CORNER, 2)
        assert board.is_valid_settlement_spot(vertices[2], 1, is_setup=True)

    def test_occupied_vertex_is_not_valid(self, board: Board):
        """A corner with a building is never a settlement spot."""
        board.place_settlement(ORE_CORNER, 0)
        assert not board.is_valid_settlement_spot(ORE_CORNER, 0, is_setup=True)

    def test_settlement_needs_own_road_outside_setup(self, board: Board):
        """After setup, settlements must touch one of the player's roads."""
        _, vertices = road_path(board, ORE_CORNER, 2)
        target = vertices[2]
        assert not board.is_valid_settlement_spot(target, 0)
        edges, _ = road_path(board, ORE_CORNER, 2)
        board.place_settlement(ORE_CORNER, 0)
        for edge in edges:
            board.place_road(edge, 0)
        assert board.is_valid_settlement_spot(target, 0)
        assert not board.is_valid_settlement_spot(target, 1)

    def test_setup_spots_ignore_roads(self, board: Board):
        """During setup every distance-rule corner on land is valid."""
        assert len(board.valid_settlement_spots(0, is_setup=True)) == 54

    def test_road_must_connect(self, board: Board):
        """Roads extend from the player's building or road."""
        board.place_settlement(ORE_CORNER, 0)
        touching = ORE_CORNER.touching_edges()
        assert all(board.is_valid_road_spot(e, 0) for e in touching if board.is_land_edge(e))
        assert not any(board.is_valid_road_spot(e, 1) for e in touching)

    def test_opponent_building_blocks_road_extension(self, board: Board):
        """A road cannot continue through an opponent's settlement."""
        edges, vertices = road_path(board, ORE_CORNER, 2)
        board.place_settlement(ORE_CORNER, 0)
        board.place_road(edges[0], 0)
        board.place_settlement(vertices[1], 1)
        assert not board.is_valid_road_spot(edges[1], 0)

    def test_city_spots_are_own_settlements(self, board: Board):
        """Only the player's own settlements can become cities."""
        board.place_settlement(ORE_CORNER, 0)
        assert board.valid_city_spots(0) == [ORE_CORNER]
        assert board.valid_city_spots(1) == []
        board.upgrade_to_city(ORE_CORNER, 0)
        assert board.valid_city_spots(0) == []

    def test_count_buildings(self, board: Board):
        """Settlements and cities are counted separately."""
        _, vertices = road_path(board, ORE_CORNER, 2)
        board.place_settlement(ORE_CORNER, 0)
        board.place_settlement(vertices[2], 0)
        board.upgrade_to_city(vertices[2], 0)
        assert board.count_buildings(0) == (1, 1)
        assert board.count_buildings(1) == (0, 0)


# =============================================================================
# Production Tests
# =============================================================================


class TestProduction:
    """Test production for a dice total."""

    def test_settlement_produces_one(self, board: Board):
        """A settlement on a rolled tile yields one of its resource."""
        board.place_settlement(ORE_CORNER, 0)
        assert board.resources_for_roll(5) == {0: {Resource.ORE: 1}}

    def test_city_produces_two(self, board: Board):
        """A city yields two of the tile's resource."""
        board.place_settlement(ORE_CORNER, 0)
        board.upgrade_to_city(ORE_CORNER, 0)
        assert board.resources_for_roll(5) == {0: {Resource.ORE: 2}}

    def test_robber_blocks_production(self, board: Board):
        """A tile under the robber produces nothing."""
        board.place_settlement(ORE_CORNER, 0)
        board.move_robber(HexCoord(1, 0))
        assert board.resources_for_roll(5) == {}

    def test_unrelated_number_produces_nothing(self, board: Board):
        """Only tiles with the rolled number produce."""
        board.place_settlement(ORE_CORNER, 0)
        assert board.resources_for_roll(9) == {}

    def test_move_robber_to_ocean_raises(self, board: Board):
        """The robber only moves onto land."""
        with pytest.raises(ValueError):
            board.move_robber(HexCoord(3, 0))

    def test_move_robber_updates_flags(self, board: Board):
        """Only the new robber tile carries the flag."""
        board.move_robber(HexCoord(1, 0))
        flagged = [t.coord for t in board.tiles.values() if t.has_robber]
        assert flagged == [HexCoord(1, 0)]


# =============================================================================
# Longest Road Tests
# =============================================================================


class TestLongestRoad:
    """Test longest road computation."""

    def test_no_roads(self, board: Board):
        """A player without roads has length zero."""
        assert board.longest_road(0) == 0

    def test_simple_path(self, board: Board):
        """A simple path counts every segment."""
        edges, _ = road_path(board, ORE_CORNER, 5)
        for edge in edges:
            board.place_road(edge, 0)
        assert board.longest_road(0) == 5

    def test_opponent_settlement_splits_road(self, board: Board):
        """An opponent's building in the middle breaks the road."""
        edges, vertices = road_path(board, ORE_CORNER, 5)
        for edge in edges:
            board.place_road(edge, 0)
        board.place_settlement(vertices[2], 1)
        assert board.longest_road(0) == 3

    def test_own_settlement_does_not_split_road(self, board: Board):
        """The player's own buildings never break a road."""
        edges, vertices = road_path(board, ORE_CORNER, 5)
        for edge in edges:
            board.place_road(edge, 0)
        board.place_settlement(vertices[2], 0)
        assert board.longest_road(0) == 5

    def test_branch_counts_longest_arm(self, board: Board):
        """A fork counts the longest single trail."""
        edges, vertices = road_path(board, ORE_CORNER, 3)
        for edge in edges:
            board.place_road(edge, 0)
        spur = next(
            e for e in vertices[1].touching_edges()
            if e not in edges and board.is_land_edge(e)
        )
        board.place_road(spur, 0)
        assert board.longest_road(0) == 3

    def test_opponent_roads_are_ignored(self, board: Board):
        """Only the player's own roads count."""
        edges, _ = road_path(board, ORE_CORNER, 4)
        for i, edge in enumerate(edges):
            board.place_road(edge, i % 2)
        assert board.longest_road(0) == 1
        assert board.longest_road(1) == 1


# =============================================================================
# Harbor Tests
# =============================================================================


class TestHarbors:
    """Test maritime trade rates."""

    def test_default_rate(self, board: Board):
        """Without a harbor every resource trades at 4:1."""
        board.place_settlement(ORE_CORNER, 0)
        assert all(board.trade_rate(0, r) == 4 for r in Resource)

    def test_generic_harbor(self, board: Board):
        """A generic harbor gives 3:1 on everything."""
        board.place_settlement(VertexCoord(HexCoord(2, -1), VertexDirection.NORTH), 0)
        assert all(board.trade_rate(0, r) == 3 for r in Resource)
        assert all(board.trade_rate(1, r) == 4 for r in Resource)

    def test_specific_harbor(self, board: Board):
        """A 2:1 harbor only improves its own resource."""
        harbor_edge = EdgeCoord(HexCoord(2, 0), EdgeDirection.EAST)
        vertex = harbor_edge.endpoints()[0]
        board.place_settlement(vertex, 0)
        assert board.trade_rate(0, Resource.LUMBER) == 2
        assert board.trade_rate(0, Resource.BRICK) == 4


# =============================================================================
# Serialization Tests
# =============================================================================


class TestBoardSerialization:
    """Test plain-data snapshots."""

    def test_to_dict_from_dict(self, board: Board):
        """A restored board equals the original."""
        edges, _ = road_path(board, ORE_CORNER, 1)
        board.place_settlement(ORE_CORNER, 0)
        board.place_road(edges[0], 0)
        restored = Board.from_dict(board.to_dict())
        assert restored == board
        assert restored.get_building(ORE_CORNER) == Building(BuildingKind.SETTLEMENT, 0)

    def test_clone_is_independent(self, board: Board):
        """Mutating a clone leaves the original untouched."""
        clone = board.clone()
        clone.place_settlement(ORE_CORNER, 0)
        assert board.get_building(ORE_CORNER) is None
