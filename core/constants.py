"""Constants and enums for the Catan rules engine."""

from enum import Enum


class Resource(Enum):
    """The five tradeable resources, in canonical hand order."""

    BRICK = "brick"
    LUMBER = "lumber"
    ORE = "ore"
    GRAIN = "grain"
    WOOL = "wool"


class TileType(Enum):
    """Kinds of hex tiles on the board."""

    BRICK = "brick"
    LUMBER = "lumber"
    ORE = "ore"
    GRAIN = "grain"
    WOOL = "wool"
    DESERT = "desert"
    OCEAN = "ocean"

    @property
    def resource(self) -> "Resource | None":
        """The resource this tile produces, or None for desert/ocean."""
        return TILE_RESOURCES.get(self)

    @property
    def is_land(self) -> bool:
        return self is not TileType.OCEAN


class BuildingKind(Enum):
    """Buildings that can occupy a vertex."""

    SETTLEMENT = "settlement"
    CITY = "city"


class DevelopmentCard(Enum):
    """Development card types."""

    KNIGHT = "knight"
    VICTORY_POINT = "victory_point"
    ROAD_BUILDING = "road_building"
    YEAR_OF_PLENTY = "year_of_plenty"
    MONOPOLY = "monopoly"


class PlayerColor(Enum):
    """Seat colors, assigned in seat order."""

    RED = "red"
    BLUE = "blue"
    ORANGE = "orange"
    WHITE = "white"


class PhaseKind(Enum):
    """Tags of the game phase variants (see core.phases)."""

    SETUP = "setup"
    PRE_ROLL = "pre_roll"
    DISCARD_REQUIRED = "discard_required"
    ROBBER_MOVE_REQUIRED = "robber_move_required"
    ROBBER_STEAL = "robber_steal"
    MAIN = "main"
    ROAD_BUILDING = "road_building"
    FINISHED = "finished"


class SetupPlacement(Enum):
    """What the current player places next during setup."""

    SETTLEMENT = "settlement"
    ROAD = "road"


TILE_RESOURCES = {
    TileType.BRICK: Resource.BRICK,
    TileType.LUMBER: Resource.LUMBER,
    TileType.ORE: Resource.ORE,
    TileType.GRAIN: Resource.GRAIN,
    TileType.WOOL: Resource.WOOL,
}

RESOURCE_TILES = {resource: tile for tile, resource in TILE_RESOURCES.items()}

# Player limits
MIN_PLAYERS = 2
MAX_PLAYERS = 4

# Pieces per player
MAX_SETTLEMENTS = 5
MAX_CITIES = 4
MAX_ROADS = 15

# Scoring
VICTORY_POINTS_TO_WIN = 10
SETTLEMENT_VP = 1
CITY_VP = 2
LONGEST_ROAD_VP = 2
LARGEST_ARMY_VP = 2
MIN_LONGEST_ROAD = 5
MIN_LARGEST_ARMY = 3

# Dice and robber
ROBBER_ROLL = 7
DISCARD_THRESHOLD = 7  # players holding more than this discard half on a 7

# Road building card
ROAD_BUILDING_ROADS = 2

# Maritime trade rates
DEFAULT_TRADE_RATE = 4
GENERIC_HARBOR_RATE = 3
SPECIFIC_HARBOR_RATE = 2

# Building costs
ROAD_COST = {Resource.BRICK: 1, Resource.LUMBER: 1}
SETTLEMENT_COST = {
    Resource.BRICK: 1,
    Resource.LUMBER: 1,
    Resource.GRAIN: 1,
    Resource.WOOL: 1,
}
CITY_COST = {Resource.ORE: 3, Resource.GRAIN: 2}
DEV_CARD_COST = {Resource.ORE: 1, Resource.GRAIN: 1, Resource.WOOL: 1}

# Development deck composition (25 cards)
DEV_CARD_COUNTS = {
    DevelopmentCard.KNIGHT: 14,
    DevelopmentCard.VICTORY_POINT: 5,
    DevelopmentCard.ROAD_BUILDING: 2,
    DevelopmentCard.YEAR_OF_PLENTY: 2,
    DevelopmentCard.MONOPOLY: 2,
}

# Standard board
STANDARD_LAND_COORDS = [
    # Center
    (0, 0),
    # Ring 1
    (1, 0), (1, -1), (0, -1), (-1, 0), (-1, 1), (0, 1),
    # Ring 2
    (2, 0), (2, -1), (2, -2), (1, -2), (0, -2), (-1, -1),
    (-2, 0), (-2, 1), (-2, 2), (-1, 2), (0, 2), (1, 1),
]

STANDARD_TILE_COUNTS = {
    TileType.LUMBER: 4,
    TileType.GRAIN: 4,
    TileType.WOOL: 4,
    TileType.BRICK: 3,
    TileType.ORE: 3,
    TileType.DESERT: 1,
}

STANDARD_NUMBERS = [2, 3, 3, 4, 4, 5, 5, 6, 6, 8, 8, 9, 9, 10, 10, 11, 11, 12]
RED_NUMBERS = (6, 8)
MAX_NUMBER_PLACEMENT_ATTEMPTS = 100

GENERIC_HARBOR_COUNT = 4  # plus one 2:1 harbor per resource
