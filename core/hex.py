"""Hex grid coordinate system for the Catan rules engine.

Tiles use axial coordinates (q, r) on a pointy-top grid with the implicit
cube coordinate s = -q - r. Corners (vertices) and sides (edges) of the
grid are identified by an owning hex plus a direction. Several owning
hexes can describe the same physical corner or side, so both coordinate
types canonicalize themselves on construction: two coordinates are equal
exactly when they name the same physical location.

Pixel projection (pointy-top, y pointing down):
    x = size * (sqrt(3) * q + sqrt(3) / 2 * r)
    y = size * 3 / 2 * r

Pixel positions are used for matching during canonicalization and for
spatial heuristics such as harbor spreading. Identity is always the
canonical integer form.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum
from functools import lru_cache
from typing import Any

SQRT3 = math.sqrt(3.0)
EPSILON = 0.001


class EdgeDirection(IntEnum):
    """The six sides of a pointy-top hex, clockwise from north-east."""

    NORTH_EAST = 0
    EAST = 1
    SOUTH_EAST = 2
    SOUTH_WEST = 3
    WEST = 4
    NORTH_WEST = 5

    @property
    def offset(self) -> tuple[int, int]:
        """Axial (dq, dr) offset to the neighbor across this side."""
        return _DIRECTION_OFFSETS[self]

    @property
    def opposite(self) -> EdgeDirection:
        return EdgeDirection((self + 3) % 6)


_DIRECTION_OFFSETS = {
    EdgeDirection.NORTH_EAST: (1, -1),
    EdgeDirection.EAST: (1, 0),
    EdgeDirection.SOUTH_EAST: (0, 1),
    EdgeDirection.SOUTH_WEST: (-1, 1),
    EdgeDirection.WEST: (-1, 0),
    EdgeDirection.NORTH_WEST: (0, -1),
}


class VertexDirection(IntEnum):
    """The top (north) or bottom (south) corner of a hex."""

    NORTH = 0
    SOUTH = 1


# Endpoints of each side as (neighbor step or None for the hex itself, corner).
_EDGE_ENDPOINTS = {
    EdgeDirection.NORTH_EAST: (
        (None, VertexDirection.NORTH),
        (EdgeDirection.NORTH_EAST, VertexDirection.SOUTH),
    ),
    EdgeDirection.EAST: (
        (EdgeDirection.NORTH_EAST, VertexDirection.SOUTH),
        (EdgeDirection.SOUTH_EAST, VertexDirection.NORTH),
    ),
    EdgeDirection.SOUTH_EAST: (
        (EdgeDirection.SOUTH_EAST, VertexDirection.NORTH),
        (None, VertexDirection.SOUTH),
    ),
    EdgeDirection.SOUTH_WEST: (
        (None, VertexDirection.SOUTH),
        (EdgeDirection.SOUTH_WEST, VertexDirection.NORTH),
    ),
    EdgeDirection.WEST: (
        (EdgeDirection.SOUTH_WEST, VertexDirection.NORTH),
        (EdgeDirection.NORTH_WEST, VertexDirection.SOUTH),
    ),
    EdgeDirection.NORTH_WEST: (
        (EdgeDirection.NORTH_WEST, VertexDirection.SOUTH),
        (None, VertexDirection.NORTH),
    ),
}


@dataclass(frozen=True, order=True)
class HexCoord:
    """Axial hex coordinate.

    Attributes:
        q: Column axis.
        r: Row axis.
    """

    q: int
    r: int

    @property
    def s(self) -> int:
        """Implicit third cube coordinate."""
        return -self.q - self.r

    def neighbor(self, direction: EdgeDirection) -> HexCoord:
        dq, dr = direction.offset
        return HexCoord(self.q + dq, self.r + dr)

    def neighbors(self) -> list[HexCoord]:
        """All six neighbors, clockwise from north-east."""
        return [self.neighbor(direction) for direction in EdgeDirection]

    def distance_to(self, other: HexCoord) -> int:
        """Number of hex steps between two hexes."""
        return (
            abs(self.q - other.q) + abs(self.r - other.r) + abs(self.s - other.s)
        ) // 2

    def vertices(self) -> list[VertexCoord]:
        """The six corners of this hex, clockwise from the top."""
        return [
            VertexCoord(self, VertexDirection.NORTH),
            VertexCoord(self.neighbor(EdgeDirection.NORTH_EAST), VertexDirection.SOUTH),
            VertexCoord(self.neighbor(EdgeDirection.SOUTH_EAST), VertexDirection.NORTH),
            VertexCoord(self, VertexDirection.SOUTH),
            VertexCoord(self.neighbor(EdgeDirection.SOUTH_WEST), VertexDirection.NORTH),
            VertexCoord(self.neighbor(EdgeDirection.NORTH_WEST), VertexDirection.SOUTH),
        ]

    def edges(self) -> list[EdgeCoord]:
        """The six sides of this hex, clockwise from north-east."""
        return [EdgeCoord(self, direction) for direction in EdgeDirection]

    def to_pixel(self, size: float = 1.0) -> tuple[float, float]:
        """Center of this hex in Cartesian space."""
        x = size * (SQRT3 * self.q + SQRT3 / 2.0 * self.r)
        y = size * 1.5 * self.r
        return (x, y)

    @classmethod
    def from_pixel(cls, x: float, y: float, size: float = 1.0) -> HexCoord:
        """The hex containing a Cartesian point."""
        q = (SQRT3 / 3.0 * x - y / 3.0) / size
        r = (2.0 / 3.0 * y) / size
        return _axial_round(q, r)

    def to_dict(self) -> list[int]:
        return [self.q, self.r]

    @classmethod
    def from_dict(cls, data: Any) -> HexCoord:
        return cls(int(data[0]), int(data[1]))

    def __str__(self) -> str:
        return f"({self.q}, {self.r})"


def _axial_round(q: float, r: float) -> HexCoord:
    """Round fractional axial coordinates to the nearest hex."""
    s = -q - r
    rq, rr, rs = round(q), round(r), round(s)
    dq, dr, ds = abs(rq - q), abs(rr - r), abs(rs - s)
    if dq > dr and dq > ds:
        rq = -rr - rs
    elif dr > ds:
        rr = -rq - rs
    return HexCoord(int(rq), int(rr))


def _vertex_pixel(hex_coord: HexCoord, direction: VertexDirection) -> tuple[float, float]:
    x, y = hex_coord.to_pixel()
    if direction == VertexDirection.NORTH:
        return (x, y - 1.0)
    return (x, y + 1.0)


def _raw_touching_hexes(hex_coord: HexCoord, direction: VertexDirection) -> list[HexCoord]:
    if direction == VertexDirection.NORTH:
        return [
            hex_coord,
            hex_coord.neighbor(EdgeDirection.NORTH_WEST),
            hex_coord.neighbor(EdgeDirection.NORTH_EAST),
        ]
    return [
        hex_coord,
        hex_coord.neighbor(EdgeDirection.SOUTH_WEST),
        hex_coord.neighbor(EdgeDirection.SOUTH_EAST),
    ]


@lru_cache(maxsize=None)
def canonical_vertex(
    hex_coord: HexCoord, direction: VertexDirection
) -> tuple[HexCoord, VertexDirection]:
    """Pick the canonical (hex, direction) pair for a physical corner.

    Every hex/direction pair among the hexes touching the corner whose
    projected position matches the corner is a candidate; the smallest
    (q, r, direction) wins.
    """
    px, py = _vertex_pixel(hex_coord, direction)
    candidates = []
    for candidate in _raw_touching_hexes(hex_coord, direction):
        for candidate_dir in VertexDirection:
            cx, cy = _vertex_pixel(candidate, candidate_dir)
            if abs(cx - px) < EPSILON and abs(cy - py) < EPSILON:
                candidates.append((candidate.q, candidate.r, int(candidate_dir)))
    q, r, d = min(candidates)
    return HexCoord(q, r), VertexDirection(d)


@dataclass(frozen=True, order=True)
class VertexCoord:
    """A corner where up to three hexes meet.

    Always stored in canonical form; constructing a VertexCoord from any
    equivalent description yields the same value.

    Attributes:
        hex: The owning hex.
        direction: NORTH or SOUTH corner of the owning hex.
    """

    hex: HexCoord
    direction: VertexDirection

    def __post_init__(self) -> None:
        hex_coord, direction = canonical_vertex(self.hex, VertexDirection(self.direction))
        object.__setattr__(self, "hex", hex_coord)
        object.__setattr__(self, "direction", direction)

    def canonicalize(self) -> VertexCoord:
        return VertexCoord(self.hex, self.direction)

    def touching_hexes(self) -> list[HexCoord]:
        """The three hexes sharing this corner."""
        return _raw_touching_hexes(self.hex, self.direction)

    def touching_edges(self) -> list[EdgeCoord]:
        """The three sides meeting at this corner."""
        h = self.hex
        if self.direction == VertexDirection.NORTH:
            return [
                EdgeCoord(h, EdgeDirection.NORTH_WEST),
                EdgeCoord(h, EdgeDirection.NORTH_EAST),
                EdgeCoord(h.neighbor(EdgeDirection.NORTH_WEST), EdgeDirection.EAST),
            ]
        return [
            EdgeCoord(h, EdgeDirection.SOUTH_WEST),
            EdgeCoord(h, EdgeDirection.SOUTH_EAST),
            EdgeCoord(h.neighbor(EdgeDirection.SOUTH_WEST), EdgeDirection.EAST),
        ]

    def adjacent_vertices(self) -> list[VertexCoord]:
        """The three corners one side away."""
        return [edge.other_endpoint(self) for edge in self.touching_edges()]

    def to_pixel(self, size: float = 1.0) -> tuple[float, float]:
        x, y = _vertex_pixel(self.hex, self.direction)
        return (x * size, y * size)

    def to_dict(self) -> dict[str, Any]:
        return {"q": self.hex.q, "r": self.hex.r, "direction": self.direction.name.lower()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VertexCoord:
        return cls(
            HexCoord(int(data["q"]), int(data["r"])),
            VertexDirection[str(data["direction"]).upper()],
        )

    def __str__(self) -> str:
        return f"V{self.hex}{self.direction.name[0]}"


@dataclass(frozen=True, order=True)
class EdgeCoord:
    """A side shared by two hexes.

    Canonical form is anchored on whichever of the two hexes sorts first
    by (q, r).

    Attributes:
        hex: The owning hex.
        direction: Which side of the owning hex.
    """

    hex: HexCoord
    direction: EdgeDirection

    def __post_init__(self) -> None:
        direction = EdgeDirection(self.direction)
        other = self.hex.neighbor(direction)
        if other < self.hex:
            object.__setattr__(self, "hex", other)
            object.__setattr__(self, "direction", direction.opposite)
        else:
            object.__setattr__(self, "direction", direction)

    def canonicalize(self) -> EdgeCoord:
        return EdgeCoord(self.hex, self.direction)

    def endpoints(self) -> list[VertexCoord]:
        """The two corners at either end of this side."""
        endpoints = []
        for hex_step, corner in _EDGE_ENDPOINTS[self.direction]:
            owner = self.hex if hex_step is None else self.hex.neighbor(hex_step)
            endpoints.append(VertexCoord(owner, corner))
        return endpoints

    def other_endpoint(self, vertex: VertexCoord) -> VertexCoord:
        a, b = self.endpoints()
        return b if a == vertex else a

    def touching_hexes(self) -> list[HexCoord]:
        """The two hexes sharing this side."""
        return [self.hex, self.hex.neighbor(self.direction)]

    def adjacent_edges(self) -> list[EdgeCoord]:
        """Sides sharing an endpoint with this one (four on a full grid)."""
        adjacent: set[EdgeCoord] = set()
        for endpoint in self.endpoints():
            adjacent.update(endpoint.touching_edges())
        adjacent.discard(self)
        return sorted(adjacent)

    def midpoint(self, size: float = 1.0) -> tuple[float, float]:
        (ax, ay), (bx, by) = (v.to_pixel(size) for v in self.endpoints())
        return ((ax + bx) / 2.0, (ay + by) / 2.0)

    def to_dict(self) -> dict[str, Any]:
        return {"q": self.hex.q, "r": self.hex.r, "direction": self.direction.name.lower()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EdgeCoord:
        return cls(
            HexCoord(int(data["q"]), int(data["r"])),
            EdgeDirection[str(data["direction"]).upper()],
        )

    def __str__(self) -> str:
        return f"E{self.hex}{self.direction.name}"
