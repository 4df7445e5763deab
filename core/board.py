"""Board model for the Catan rules engine.

The board is a set of coordinate-keyed mappings rather than a pointer graph:
- tiles: HexCoord -> Tile (land and the surrounding ocean)
- buildings: VertexCoord -> Building (absent means empty)
- roads: EdgeCoord -> owning player id (absent means empty)
- harbors: list of coastal edges granting better bank-trade rates

Adjacency is recomputed from coordinates on demand, so the board can be
deep-copied, hashed and serialized as plain data.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Optional

from .constants import (
    BuildingKind,
    Resource,
    TileType,
    CITY_VP,
    SETTLEMENT_VP,
    DEFAULT_TRADE_RATE,
    GENERIC_HARBOR_RATE,
    SPECIFIC_HARBOR_RATE,
)
from .hex import HexCoord, VertexCoord, EdgeCoord


@dataclass
class Tile:
    """A single hex tile.

    Attributes:
        coord: Position of the tile.
        tile_type: Resource type, desert or ocean.
        number: Dice number that triggers production (None for desert/ocean).
        has_robber: Whether the robber currently sits here.
    """

    coord: HexCoord
    tile_type: TileType
    number: Optional[int] = None
    has_robber: bool = False

    @property
    def resource(self) -> Optional[Resource]:
        return self.tile_type.resource

    @property
    def is_land(self) -> bool:
        return self.tile_type.is_land

    @property
    def is_productive(self) -> bool:
        return self.resource is not None and self.number is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "q": self.coord.q,
            "r": self.coord.r,
            "tile_type": self.tile_type.value,
            "number": self.number,
            "has_robber": self.has_robber,
        }


@dataclass(frozen=True)
class Building:
    """A settlement or city owned by a player."""

    kind: BuildingKind
    owner: int

    @property
    def victory_points(self) -> int:
        return CITY_VP if self.kind == BuildingKind.CITY else SETTLEMENT_VP

    @property
    def multiplier(self) -> int:
        """Resources produced per triggering roll."""
        return 2 if self.kind == BuildingKind.CITY else 1


@dataclass(frozen=True)
class Harbor:
    """A harbor on a coastal edge.

    Attributes:
        edge: The coastal edge the harbor sits on.
        resource: The resource traded at 2:1, or None for a generic 3:1 harbor.
    """

    edge: EdgeCoord
    resource: Optional[Resource] = None

    @property
    def rate(self) -> int:
        return GENERIC_HARBOR_RATE if self.resource is None else SPECIFIC_HARBOR_RATE

    def to_dict(self) -> dict[str, Any]:
        data = self.edge.to_dict()
        data["resource"] = self.resource.value if self.resource is not None else None
        return data


@dataclass
class Board:
    """The game board: tiles, buildings, roads, harbors and the robber.

    Mutation methods assume the caller has already validated the move.
    """

    tiles: dict[HexCoord, Tile] = field(default_factory=dict)
    buildings: dict[VertexCoord, Building] = field(default_factory=dict)
    roads: dict[EdgeCoord, int] = field(default_factory=dict)
    harbors: list[Harbor] = field(default_factory=list)
    robber_location: Optional[HexCoord] = None

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def get_tile(self, coord: HexCoord) -> Optional[Tile]:
        return self.tiles.get(coord)

    def get_building(self, vertex: VertexCoord) -> Optional[Building]:
        """The building at a vertex, or None when empty."""
        return self.buildings.get(vertex)

    def get_road(self, edge: EdgeCoord) -> Optional[int]:
        """The owner of the road on an edge, or None when empty."""
        return self.roads.get(edge)

    def land_tiles(self) -> list[Tile]:
        return [tile for tile in self.tiles.values() if tile.is_land]

    def land_vertices(self) -> set[VertexCoord]:
        vertices: set[VertexCoord] = set()
        for tile in self.land_tiles():
            vertices.update(tile.coord.vertices())
        return vertices

    def land_edges(self) -> set[EdgeCoord]:
        edges: set[EdgeCoord] = set()
        for tile in self.land_tiles():
            edges.update(tile.coord.edges())
        return edges

    def is_land_hex(self, coord: HexCoord) -> bool:
        tile = self.tiles.get(coord)
        return tile is not None and tile.is_land

    def is_land_vertex(self, vertex: VertexCoord) -> bool:
        return any(self.is_land_hex(h) for h in vertex.touching_hexes())

    def is_land_edge(self, edge: EdgeCoord) -> bool:
        return any(self.is_land_hex(h) for h in edge.touching_hexes())

    def is_coastal_edge(self, edge: EdgeCoord) -> bool:
        """An edge between a land hex and a non-land hex."""
        land = [self.is_land_hex(h) for h in edge.touching_hexes()]
        return any(land) and not all(land)

    def tiles_at_vertex(self, vertex: VertexCoord) -> list[Tile]:
        """Land tiles touching a vertex."""
        return [
            self.tiles[h]
            for h in vertex.touching_hexes()
            if h in self.tiles and self.tiles[h].is_land
        ]

    def player_harbors(self, player_id: int) -> list[Harbor]:
        """Harbors with one of the player's buildings on either endpoint."""
        harbors = []
        for harbor in self.harbors:
            for vertex in harbor.edge.endpoints():
                building = self.buildings.get(vertex)
                if building is not None and building.owner == player_id:
                    harbors.append(harbor)
                    break
        return harbors

    def trade_rate(self, player_id: int, resource: Resource) -> int:
        """Best maritime rate available to a player for giving `resource`."""
        rate = DEFAULT_TRADE_RATE
        for harbor in self.player_harbors(player_id):
            if harbor.resource is None or harbor.resource == resource:
                rate = min(rate, harbor.rate)
        return rate

    def players_adjacent_to_hex(self, coord: HexCoord) -> set[int]:
        """Owners of buildings on the corners of a hex."""
        owners = set()
        for vertex in coord.vertices():
            building = self.buildings.get(vertex)
            if building is not None:
                owners.add(building.owner)
        return owners

    def count_buildings(self, player_id: int) -> tuple[int, int]:
        """Return (settlements, cities) the player has on the board."""
        settlements = cities = 0
        for building in self.buildings.values():
            if building.owner != player_id:
                continue
            if building.kind == BuildingKind.CITY:
                cities += 1
            else:
                settlements += 1
        return settlements, cities

    def count_roads(self, player_id: int) -> int:
        return sum(1 for owner in self.roads.values() if owner == player_id)

    # -------------------------------------------------------------------------
    # Placement validity
    # -------------------------------------------------------------------------

    def satisfies_distance_rule(self, vertex: VertexCoord) -> bool:
        """No building may sit on a vertex adjacent to this one."""
        return all(adj not in self.buildings for adj in vertex.adjacent_vertices())

    def _touches_own_road(self, vertex: VertexCoord, player_id: int) -> bool:
        return any(self.roads.get(edge) == player_id for edge in vertex.touching_edges())

    def is_valid_settlement_spot(
        self, vertex: VertexCoord, player_id: int, is_setup: bool = False
    ) -> bool:
        if not self.is_land_vertex(vertex) or vertex in self.buildings:
            return False
        if not self.satisfies_distance_rule(vertex):
            return False
        return is_setup or self._touches_own_road(vertex, player_id)

    def valid_settlement_spots(self, player_id: int, is_setup: bool = False) -> list[VertexCoord]:
        return sorted(
            v for v in self.land_vertices()
            if self.is_valid_settlement_spot(v, player_id, is_setup)
        )

    def is_connected_to_network(self, edge: EdgeCoord, player_id: int) -> bool:
        """Check if an edge extends the player's road network.

        An endpoint holding the player's building connects directly. An
        endpoint that is empty (or the player's own) connects through an
        adjacent road of the player; an opponent's building blocks it.
        """
        for vertex in edge.endpoints():
            building = self.buildings.get(vertex)
            if building is not None:
                if building.owner == player_id:
                    return True
                continue
            for other in vertex.touching_edges():
                if other != edge and self.roads.get(other) == player_id:
                    return True
        return False

    def is_valid_road_spot(self, edge: EdgeCoord, player_id: int) -> bool:
        return (
            self.is_land_edge(edge)
            and edge not in self.roads
            and self.is_connected_to_network(edge, player_id)
        )

    def valid_road_spots(self, player_id: int) -> list[EdgeCoord]:
        return sorted(e for e in self.land_edges() if self.is_valid_road_spot(e, player_id))

    def is_valid_city_spot(self, vertex: VertexCoord, player_id: int) -> bool:
        building = self.buildings.get(vertex)
        return (
            building is not None
            and building.kind == BuildingKind.SETTLEMENT
            and building.owner == player_id
        )

    def valid_city_spots(self, player_id: int) -> list[VertexCoord]:
        return sorted(v for v in self.buildings if self.is_valid_city_spot(v, player_id))

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def place_settlement(self, vertex: VertexCoord, player_id: int) -> None:
        self.buildings[vertex] = Building(BuildingKind.SETTLEMENT, player_id)

    def upgrade_to_city(self, vertex: VertexCoord, player_id: int) -> None:
        self.buildings[vertex] = Building(BuildingKind.CITY, player_id)

    def place_road(self, edge: EdgeCoord, player_id: int) -> None:
        self.roads[edge] = player_id

    def move_robber(self, coord: HexCoord) -> None:
        """Move the robber; flags and location change together.

        Raises:
            ValueError: If the target is not a land tile.
        """
        target = self.tiles.get(coord)
        if target is None or not target.is_land:
            raise ValueError(f"Robber must move to a land tile, got {coord}")
        if self.robber_location is not None and self.robber_location in self.tiles:
            self.tiles[self.robber_location].has_robber = False
        target.has_robber = True
        self.robber_location = coord

    # -------------------------------------------------------------------------
    # Production and scoring
    # -------------------------------------------------------------------------

    def resources_for_roll(self, number: int) -> dict[int, dict[Resource, int]]:
        """Resources each player receives for a dice total.

        Tiles under the robber, deserts and ocean never produce.

        Returns:
            Mapping player id -> resource -> amount (absent means zero).
        """
        production: dict[int, dict[Resource, int]] = {}
        for tile in self.land_tiles():
            if tile.number != number or tile.has_robber or tile.resource is None:
                continue
            for vertex in tile.coord.vertices():
                building = self.buildings.get(vertex)
                if building is None:
                    continue
                player_resources = production.setdefault(building.owner, {})
                player_resources[tile.resource] = (
                    player_resources.get(tile.resource, 0) + building.multiplier
                )
        return production

    def longest_road(self, player_id: int) -> int:
        """Length of the player's longest continuous road.

        Every road is tried as the first segment of a path, walking away
        from each of its endpoints in turn. Paths never reuse a road and
        cannot continue through a vertex holding an opponent's building.
        """
        player_roads = sorted(e for e, owner in self.roads.items() if owner == player_id)
        best = 0
        for road in player_roads:
            for endpoint in road.endpoints():
                length = 1 + self._extend_road(player_id, endpoint, frozenset([road]))
                best = max(best, length)
        return best

    def _extend_road(self, player_id: int, vertex: VertexCoord, used: frozenset) -> int:
        building = self.buildings.get(vertex)
        if building is not None and building.owner != player_id:
            return 0
        best = 0
        for edge in vertex.touching_edges():
            if edge in used or self.roads.get(edge) != player_id:
                continue
            next_vertex = edge.other_endpoint(vertex)
            best = max(best, 1 + self._extend_road(player_id, next_vertex, used | {edge}))
        return best

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly snapshot with list-of-records instead of keyed maps."""
        return {
            "tiles": [self.tiles[c].to_dict() for c in sorted(self.tiles)],
            "vertices": [
                {**v.to_dict(), "kind": b.kind.value, "owner": b.owner}
                for v, b in sorted(self.buildings.items())
            ],
            "edges": [
                {**e.to_dict(), "owner": owner}
                for e, owner in sorted(self.roads.items())
            ],
            "harbors": [h.to_dict() for h in self.harbors],
            "robber": self.robber_location.to_dict() if self.robber_location else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Board:
        """Restore a board produced by to_dict()."""
        board = cls()
        for tile_data in data["tiles"]:
            coord = HexCoord(int(tile_data["q"]), int(tile_data["r"]))
            board.tiles[coord] = Tile(
                coord=coord,
                tile_type=TileType(tile_data["tile_type"]),
                number=tile_data.get("number"),
                has_robber=bool(tile_data.get("has_robber", False)),
            )
        for vertex_data in data.get("vertices", []):
            board.buildings[VertexCoord.from_dict(vertex_data)] = Building(
                BuildingKind(vertex_data["kind"]), int(vertex_data["owner"])
            )
        for edge_data in data.get("edges", []):
            board.roads[EdgeCoord.from_dict(edge_data)] = int(edge_data["owner"])
        for harbor_data in data.get("harbors", []):
            resource = harbor_data.get("resource")
            board.harbors.append(
                Harbor(
                    EdgeCoord.from_dict(harbor_data),
                    Resource(resource) if resource is not None else None,
                )
            )
        robber = data.get("robber")
        board.robber_location = HexCoord.from_dict(robber) if robber is not None else None
        return board

    def clone(self) -> Board:
        return copy.deepcopy(self)

    def __str__(self) -> str:
        return (
            f"Board({len(self.land_tiles())} land tiles, {len(self.buildings)} buildings, "
            f"{len(self.roads)} roads, {len(self.harbors)} harbors, robber at {self.robber_location})"
        )
