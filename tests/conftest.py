"""
Shared builders for the engine tests.

Positions follow the board convention: side 1 is the bottom edge and the
piece below (x, y) sits at (x, y + 1).
"""
import pytest

from ivanssonne.logic.deck import TILE_TYPES
from ivanssonne.logic.engine import ANCHOR
from ivanssonne.logic.geometry import rotate
from ivanssonne.logic.models import Meeple, Piece

X0, Y0 = ANCHOR


def make_piece(letter: str, n: int = 1, rotation: int = 0) -> Piece:
    """An unplaced piece of catalogue tile `letter`, turned `rotation` quarter turns."""
    piece = Piece(id=f"{letter}-{n}", tile=TILE_TYPES[letter])
    if rotation % 4:
        piece = rotate(piece, rotation % 4)
    return piece


def put(board: dict, letter: str, position, rotation: int = 0, n: int = None) -> Piece:
    """Puts a piece straight onto `board`, skipping legality checks."""
    n = n if n is not None else len(board) + 1
    piece = make_piece(letter, n, rotation)._replace(position=tuple(position), placed=True)
    board[tuple(position)] = piece
    return piece


def meeple(player_id: str, position, *address, n: int = 1) -> Meeple:
    return Meeple(id=f"m-{player_id}-{n}", player_id=player_id, position=tuple(position), address=tuple(address))


@pytest.fixture
def board():
    return {}


@pytest.fixture
def town_ring():
    """Four N tiles whose towns close into one town around the centre point."""
    ring = {}
    put(ring, "N", (X0 - 1, Y0 - 1), rotation=2)  # town bottom and right
    put(ring, "N", (X0, Y0 - 1), rotation=3)      # town left and bottom
    put(ring, "N", (X0 - 1, Y0), rotation=1)      # town top and right
    put(ring, "N", (X0, Y0), rotation=0)          # town top and left
    return ring


@pytest.fixture
def road_ring():
    """Four V curves forming a closed loop of road."""
    ring = {}
    put(ring, "V", (X0 - 1, Y0 - 1), rotation=3)  # road bottom and right
    put(ring, "V", (X0, Y0 - 1), rotation=0)      # road left and bottom
    put(ring, "V", (X0 - 1, Y0), rotation=2)      # road top and right
    put(ring, "V", (X0, Y0), rotation=1)          # road top and left
    return ring
