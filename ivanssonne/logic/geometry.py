from typing import Tuple

from .errors import InvalidArgument
from .models import Coordinate, Field, HalfEdge, Piece, Road, Side, Tile

# Screen coordinates: y grows towards the bottom side.
NEIGHBOUR_OFFSETS = {
    Side.BOTTOM: (0, 1),
    Side.LEFT: (-1, 0),
    Side.TOP: (0, -1),
    Side.RIGHT: (1, 0),
}

OPPOSITE_SIDE = {
    Side.BOTTOM: Side.TOP,
    Side.LEFT: Side.RIGHT,
    Side.TOP: Side.BOTTOM,
    Side.RIGHT: Side.LEFT,
}


def check_side(side: int) -> Side:
    if isinstance(side, bool) or side not in (1, 2, 3, 4):
        raise InvalidArgument(f"Side must be between 1 and 4, got {side!r}")
    return Side(side)


def check_address(address) -> Tuple[int, ...]:
    """Validates a meeple address: `(side,)` or `(side, half)`."""
    address = tuple(address)
    if len(address) not in (1, 2):
        raise InvalidArgument(f"Feature address must have 1 or 2 entries, got {address!r}")
    check_side(address[0])
    if len(address) == 2 and address[1] not in (1, 2):
        raise InvalidArgument(f"Half-edge must be 1 or 2, got {address[1]!r}")
    return address


def opposite_side(side: int) -> Side:
    return OPPOSITE_SIDE[check_side(side)]


def neighbour(position: Coordinate, side: int) -> Coordinate:
    """Coordinate of the piece touching `side` of the piece at `position`."""
    dx, dy = NEIGHBOUR_OFFSETS[check_side(side)]
    return position[0] + dx, position[1] + dy


def cross_half_edge(half_edge: HalfEdge) -> HalfEdge:
    """The half-edge of the neighbouring piece that touches `half_edge`."""
    side, half = half_edge
    return opposite_side(side), half % 2 + 1


def rotate_side(side: int, steps: int) -> int:
    return (side + steps - 1) % 4 + 1


def _rotate_tile(tile: Tile, steps: int) -> Tile:
    return tile._replace(
        roads=tuple(Road(tuple(rotate_side(s, steps) for s in road.sides)) for road in tile.roads),
        towns=tuple(
            town._replace(sides=tuple(rotate_side(s, steps) for s in town.sides)) for town in tile.towns
        ),
        fields=tuple(
            Field(tuple((rotate_side(s, steps), h) for s, h in field.sides)) for field in tile.fields
        ),
    )


def rotate(piece: Piece, steps: int) -> Piece:
    """Rotates a piece clockwise by `steps` quarter turns.

    All rotations must go through this function: it is the only place where
    side labels get remapped, so the geometry of every piece is always given
    in absolute side numbers.
    """
    if isinstance(steps, bool) or steps not in (1, 2, 3):
        raise InvalidArgument(f"Rotation must be between 1 and 3, got {steps!r}")
    return piece._replace(rotation=(piece.rotation + steps) % 4, tile=_rotate_tile(piece.tile, steps))
