from enum import Enum, IntEnum, auto
from typing import Dict, NamedTuple, Optional, Tuple

Coordinate = Tuple[int, int]
HalfEdge = Tuple[int, int]


class FeatureKind(Enum):
    ROAD = auto()
    TOWN = auto()
    FIELD = auto()


class Side(IntEnum):
    BOTTOM = 1
    LEFT = 2
    TOP = 3
    RIGHT = 4


class Road(NamedTuple):
    """A road segment; `sides` lists the 1-2 sides it leaves the tile through."""
    sides: Tuple[int, ...]


class Town(NamedTuple):
    """A town segment, possibly walled across several sides."""
    sides: Tuple[int, ...]
    shield: bool = False


class Field(NamedTuple):
    """A field segment addressed by half-edges `(side, half)`."""
    sides: Tuple[HalfEdge, ...]


class Tile(NamedTuple):
    """Geometry of a tile. On a Piece the labels are absolute (post-rotation)."""
    letter: str
    roads: Tuple[Road, ...] = ()
    towns: Tuple[Town, ...] = ()
    fields: Tuple[Field, ...] = ()

    def has_town(self, side: int) -> bool:
        return any(side in town.sides for town in self.towns)

    def has_road(self, side: int) -> bool:
        return any(side in road.sides for road in self.roads)

    def field_halves(self, side: int) -> frozenset:
        """Halves of `side` covered by any field."""
        return frozenset(h for field in self.fields for s, h in field.sides if s == side)


class Piece(NamedTuple):
    """An instance of a Tile, held or placed on the board."""
    id: str
    tile: Tile
    rotation: int = 0
    position: Optional[Coordinate] = None
    placed: bool = False

    def __repr__(self):
        return f"Piece({self.tile.letter}#{self.id}, rotation={self.rotation}, position={self.position})"


class Meeple(NamedTuple):
    """A player's token claiming one feature of the piece at `position`.

    `address` is `(side,)` for roads and towns or `(side, half)` for fields.
    """
    id: str
    player_id: str
    position: Coordinate
    address: Tuple[int, ...]


class Player(NamedTuple):
    id: str
    name: str
    color: str
    score: int = 0
    meeples: int = 8


Board = Dict[Coordinate, Piece]
