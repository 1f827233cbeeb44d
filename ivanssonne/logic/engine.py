from typing import Iterable, Optional, Set, Tuple

from .geometry import check_side, neighbour, opposite_side, rotate
from .models import Board, Coordinate, Piece

# The first piece of every game goes here.
ANCHOR: Coordinate = (25, 25)


def compatible(piece_a: Piece, piece_b: Piece, side_of_a: int) -> bool:
    """Checks whether `piece_b` may touch `side_of_a` of `piece_a`.

    Towns must meet towns and roads must meet roads. Fields have to line up
    half-edge by half-edge: every half A exposes on the shared edge has to be
    met by a field half of B and the other way round.
    """
    side_a = check_side(side_of_a)
    side_b = opposite_side(side_a)
    tile_a, tile_b = piece_a.tile, piece_b.tile

    if tile_a.has_town(side_a) != tile_b.has_town(side_b):
        return False
    if tile_a.has_road(side_a) != tile_b.has_road(side_b):
        return False

    # Crossing the edge swaps which half is which.
    crossed = frozenset(h % 2 + 1 for h in tile_a.field_halves(side_a))
    return crossed == tile_b.field_halves(side_b)


def legal_placements(board: Board, piece: Piece) -> frozenset:
    """All free coordinates where `piece`, as currently rotated, can be placed."""
    if not board:
        return frozenset([ANCHOR])

    possible: Set[Coordinate] = set()
    impossible: Set[Coordinate] = set()

    for position, placed in board.items():
        for side in (1, 2, 3, 4):
            pos = neighbour(position, side)
            if pos in impossible:
                continue
            if pos in board:
                impossible.add(pos)
                continue
            if compatible(placed, piece, side):
                possible.add(pos)
            else:
                # One mismatching neighbour rules the spot out for good.
                impossible.add(pos)

    return frozenset(possible - impossible)


def find_placements(board: Board, piece: Piece) -> Tuple[Piece, frozenset]:
    """Turns `piece` clockwise until it fits somewhere, at most three times.

    Returns the first rotation that fits with its placements. When none fits
    the placements are empty and the piece comes back as it was handed in.
    """
    placements = legal_placements(board, piece)
    for _ in range(3):
        if placements:
            break
        piece = rotate(piece, 1)
        placements = legal_placements(board, piece)
    if not placements:
        piece = rotate(piece, 1)
    return piece, placements


def render_ascii(board: Board, highlight: Optional[Iterable[Coordinate]] = None) -> str:
    """Returns an ASCII representation of the board.

    Placed pieces show their tile letter and rotation, highlighted free
    coordinates (typically the legal placements) show as `+`.
    """
    highlight = set(highlight or ())
    if not board and not highlight:
        return "   (Empty Board)"

    cells = set(board) | highlight
    min_x = min(x for x, y in cells) - 1
    max_x = max(x for x, y in cells) + 1
    min_y = min(y for x, y in cells) - 1
    max_y = max(y for x, y in cells) + 1

    output = []
    header = "    " + " ".join(f"{x:3}" for x in range(min_x, max_x + 1))
    output.append(header)
    output.append("   " + "-" * len(header))

    # y grows downwards, so rows are printed top to bottom.
    for y in range(min_y, max_y + 1):
        row = [f"{y:2}|"]
        for x in range(min_x, max_x + 1):
            if (x, y) in board:
                piece = board[(x, y)]
                row.append(f"{piece.tile.letter}{piece.rotation} ")
            elif (x, y) in highlight:
                row.append(" + ")
            else:
                row.append(" . ")
        output.append(" ".join(row))

    return "\n".join(output)
