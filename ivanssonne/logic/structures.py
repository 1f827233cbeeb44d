from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple

from .errors import InconsistentState, InvalidArgument
from .geometry import check_address, check_side, cross_half_edge, neighbour, opposite_side
from .models import Board, Coordinate, FeatureKind, HalfEdge, Meeple, Piece


class Structure(NamedTuple):
    """A road, town or field followed across tile boundaries.

    `sides` lists every visited `(position, label)` pair in visiting order;
    labels are side numbers for roads and towns and half-edges for fields.
    """
    kind: FeatureKind
    meeples: Tuple[Meeple, ...]
    closed: bool
    sides: Tuple[Tuple[Coordinate, object], ...]

    @property
    def positions(self) -> frozenset:
        return frozenset(position for position, _ in self.sides)


def _segments(piece: Piece, kind: FeatureKind):
    if kind is FeatureKind.ROAD:
        return piece.tile.roads
    if kind is FeatureKind.TOWN:
        return piece.tile.towns
    return piece.tile.fields


def _segment_for(piece: Piece, kind: FeatureKind, label):
    return next((segment for segment in _segments(piece, kind) if label in segment.sides), None)


def _address(label) -> Tuple[int, ...]:
    return tuple(label) if isinstance(label, tuple) else (label,)


def find_feature(piece: Piece, address) -> Optional[Tuple[FeatureKind, object]]:
    """Returns `(kind, segment)` of the feature at `address`, or None."""
    address = check_address(address)
    if len(address) == 2:
        segment = _segment_for(piece, FeatureKind.FIELD, address)
        return (FeatureKind.FIELD, segment) if segment is not None else None
    for kind in (FeatureKind.ROAD, FeatureKind.TOWN):
        segment = _segment_for(piece, kind, address[0])
        if segment is not None:
            return kind, segment
    return None


def feature_at(piece: Piece, address) -> Tuple[FeatureKind, object]:
    feature = find_feature(piece, address)
    if feature is None:
        raise InconsistentState(f"{piece!r} has no road, town or field at {tuple(address)}")
    return feature


def _traverse(board: Board, meeples: Iterable[Meeple], start: Piece, label, kind: FeatureKind) -> Structure:
    if start.position is None or start.position not in board:
        raise InconsistentState(f"{start!r} is not on the board")

    by_address: Dict[Tuple[Coordinate, Tuple[int, ...]], List[Meeple]] = {}
    for meeple in meeples:
        by_address.setdefault((meeple.position, tuple(meeple.address)), []).append(meeple)

    # Shared by the whole walk so that loops of tiles terminate.
    visited = set()
    order = []
    found: List[Meeple] = []
    closed = True

    worklist = [(start.position, label)]
    while worklist:
        position, entry = worklist.pop()
        piece = board[position]
        segment = _segment_for(piece, kind, entry)
        if segment is None:
            raise InconsistentState(f"No {kind.name.lower()} at {entry} of {piece!r}")

        for current in segment.sides:
            if (position, current) in visited:
                continue
            visited.add((position, current))
            order.append((position, current))
            found.extend(by_address.get((position, _address(current)), ()))

            if kind is FeatureKind.FIELD:
                next_position = neighbour(position, current[0])
                side, half = cross_half_edge(current)
                next_label = (int(side), half)
            else:
                next_position = neighbour(position, current)
                next_label = int(opposite_side(current))

            if next_position not in board:
                closed = False
            elif (next_position, next_label) not in visited:
                worklist.append((next_position, next_label))

    return Structure(kind=kind, meeples=tuple(found), closed=closed, sides=tuple(order))


def resolve_structure(board: Board, meeples: Iterable[Meeple], piece: Piece, side: int,
                      kind: FeatureKind) -> Structure:
    """Follows the road or town leaving `side` of `piece` across the board."""
    if kind not in (FeatureKind.ROAD, FeatureKind.TOWN):
        raise InvalidArgument(f"resolve_structure handles roads and towns, not {kind!r}")
    return _traverse(board, meeples, piece, int(check_side(side)), kind)


def resolve_field(board: Board, meeples: Iterable[Meeple], piece: Piece, half_edge: HalfEdge) -> Structure:
    half_edge = check_address(half_edge)
    if len(half_edge) != 2:
        raise InvalidArgument(f"A field is addressed by (side, half), got {half_edge!r}")
    return _traverse(board, meeples, piece, half_edge, FeatureKind.FIELD)


def is_field_enclosed(board: Board, piece: Piece, half_edge: HalfEdge) -> bool:
    return resolve_field(board, (), piece, half_edge).closed


def resolve_address(board: Board, meeples: Iterable[Meeple], position: Coordinate, address) -> Structure:
    """Resolves whichever feature sits at `address` of the piece at `position`."""
    piece = board.get(position)
    if piece is None:
        raise InconsistentState(f"No piece at {position}")
    kind, _ = feature_at(piece, address)
    if kind is FeatureKind.FIELD:
        return resolve_field(board, meeples, piece, tuple(address))
    return resolve_structure(board, meeples, piece, address[0], kind)


def structure_for_meeple(board: Board, meeples: Iterable[Meeple], meeple: Meeple) -> Structure:
    return resolve_address(board, meeples, meeple.position, meeple.address)


def structures_on_piece(board: Board, meeples: Iterable[Meeple], position: Coordinate,
                        kinds=(FeatureKind.ROAD, FeatureKind.TOWN)) -> List[Structure]:
    """Every distinct road and town structure running through the piece at `position`."""
    piece = board.get(position)
    if piece is None:
        raise InconsistentState(f"No piece at {position}")
    meeples = tuple(meeples)

    structures = []
    seen = set()
    for kind in kinds:
        for segment in _segments(piece, kind):
            label = segment.sides[0]
            if (kind, position, label) in seen:
                continue
            if kind is FeatureKind.FIELD:
                structure = resolve_field(board, meeples, piece, label)
            else:
                structure = resolve_structure(board, meeples, piece, label, kind)
            seen.update((kind, pos, lbl) for pos, lbl in structure.sides)
            structures.append(structure)
    return structures
