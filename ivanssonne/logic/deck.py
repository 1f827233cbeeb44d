import random
from typing import Dict, List, Mapping, Optional, Sequence

from .models import Field, Piece, Road, Tile, Town

BOT, LFT, TOP, RGT = 1, 2, 3, 4

# Half 1 of a side is the half met first when walking the tile edge clockwise:
# top left->right, right top->bottom, bottom right->left, left bottom->top.
ALL_HALVES = ((BOT, 1), (BOT, 2), (LFT, 1), (LFT, 2), (TOP, 1), (TOP, 2), (RGT, 1), (RGT, 2))


def create_catalogue():
    """The 24 base game tile types (A-X) with how many copies go in a box."""
    catalogue: Dict[str, Tile] = {}
    counts: Dict[str, int] = {}

    def add(count, letter, roads=(), towns=(), fields=()):
        catalogue[letter] = Tile(
            letter,
            roads=tuple(Road(tuple(sides)) for sides in roads),
            towns=tuple(Town(tuple(sides), shield) for sides, shield in towns),
            fields=tuple(Field(tuple(sides)) for sides in fields),
        )
        counts[letter] = count

    # Monasteries: one field wraps all around, A has a road ending at the bottom.
    add(2, "A", roads=[(BOT,)], fields=[ALL_HALVES])
    add(4, "B", fields=[ALL_HALVES])

    # Full town with shield.
    add(1, "C", towns=[((BOT, LFT, TOP, RGT), True)])

    # Town on top, straight road below it (the usual starting tile).
    add(4, "D", roads=[(LFT, RGT)], towns=[((TOP,), False)],
        fields=[((LFT, 2), (RGT, 1)), ((LFT, 1), (BOT, 1), (BOT, 2), (RGT, 2))])

    # Town on top, fields everywhere else.
    add(5, "E", towns=[((TOP,), False)],
        fields=[((BOT, 1), (BOT, 2), (LFT, 1), (LFT, 2), (RGT, 1), (RGT, 2))])

    # Town running across the tile, splitting two fields.
    add(2, "F", towns=[((LFT, RGT), True)], fields=[((TOP, 1), (TOP, 2)), ((BOT, 1), (BOT, 2))])
    add(1, "G", towns=[((BOT, TOP), False)], fields=[((LFT, 1), (LFT, 2)), ((RGT, 1), (RGT, 2))])

    # Two separate town caps.
    add(3, "H", towns=[((LFT,), False), ((RGT,), False)],
        fields=[((BOT, 1), (BOT, 2), (TOP, 1), (TOP, 2))])
    add(2, "I", towns=[((TOP,), False), ((LFT,), False)],
        fields=[((BOT, 1), (BOT, 2), (RGT, 1), (RGT, 2))])

    # Town on top with a curved road.
    add(3, "J", roads=[(RGT, BOT)], towns=[((TOP,), False)],
        fields=[((RGT, 2), (BOT, 1)), ((RGT, 1), (BOT, 2), (LFT, 1), (LFT, 2))])
    add(3, "K", roads=[(LFT, BOT)], towns=[((TOP,), False)],
        fields=[((LFT, 1), (BOT, 2)), ((BOT, 1), (RGT, 1), (RGT, 2), (LFT, 2))])

    # Town on top with a road junction below it.
    add(3, "L", roads=[(LFT,), (RGT,), (BOT,)], towns=[((TOP,), False)],
        fields=[((LFT, 2), (RGT, 1)), ((LFT, 1), (BOT, 2)), ((BOT, 1), (RGT, 2))])

    # Town across two adjacent sides.
    add(2, "M", towns=[((TOP, LFT), True)], fields=[((BOT, 1), (BOT, 2), (RGT, 1), (RGT, 2))])
    add(3, "N", towns=[((TOP, LFT), False)], fields=[((BOT, 1), (BOT, 2), (RGT, 1), (RGT, 2))])
    add(2, "O", roads=[(RGT, BOT)], towns=[((TOP, LFT), True)],
        fields=[((RGT, 2), (BOT, 1)), ((RGT, 1), (BOT, 2))])
    add(3, "P", roads=[(RGT, BOT)], towns=[((TOP, LFT), False)],
        fields=[((RGT, 2), (BOT, 1)), ((RGT, 1), (BOT, 2))])

    # Town across three sides.
    add(1, "Q", towns=[((LFT, TOP, RGT), True)], fields=[((BOT, 1), (BOT, 2))])
    add(3, "R", towns=[((LFT, TOP, RGT), False)], fields=[((BOT, 1), (BOT, 2))])
    add(2, "S", roads=[(BOT,)], towns=[((LFT, TOP, RGT), True)], fields=[((BOT, 1),), ((BOT, 2),)])
    add(1, "T", roads=[(BOT,)], towns=[((LFT, TOP, RGT), False)], fields=[((BOT, 1),), ((BOT, 2),)])

    # Plain roads: straight, curve, T-junction and crossroads.
    add(8, "U", roads=[(TOP, BOT)],
        fields=[((TOP, 1), (LFT, 1), (LFT, 2), (BOT, 2)), ((TOP, 2), (RGT, 1), (RGT, 2), (BOT, 1))])
    add(9, "V", roads=[(LFT, BOT)],
        fields=[((LFT, 1), (BOT, 2)), ((BOT, 1), (RGT, 1), (RGT, 2), (TOP, 1), (TOP, 2), (LFT, 2))])
    add(4, "W", roads=[(LFT,), (RGT,), (BOT,)],
        fields=[((LFT, 2), (TOP, 1), (TOP, 2), (RGT, 1)), ((LFT, 1), (BOT, 2)), ((BOT, 1), (RGT, 2))])
    add(1, "X", roads=[(BOT,), (LFT,), (TOP,), (RGT,)],
        fields=[((BOT, 2), (LFT, 1)), ((LFT, 2), (TOP, 1)), ((TOP, 2), (RGT, 1)), ((RGT, 2), (BOT, 1))])

    return catalogue, counts


TILE_TYPES, TILE_COUNTS = create_catalogue()


def expand_catalogue(catalogue: Mapping[str, Tile] = TILE_TYPES,
                     counts: Mapping[str, int] = TILE_COUNTS) -> List[Piece]:
    """One unplaced, unrotated piece per tile copy, in catalogue order."""
    pieces = []
    for letter, tile in catalogue.items():
        for n in range(counts.get(letter, 1)):
            pieces.append(Piece(id=f"{letter}-{n + 1}", tile=tile))
    return pieces


def shuffle_pieces(pieces: Sequence[Piece], seed: int) -> List[Piece]:
    """A reproducible permutation of `pieces` for the given seed."""
    shuffled = list(pieces)
    random.Random(seed).shuffle(shuffled)
    return shuffled


def create_deck(seed: Optional[int] = None) -> List[Piece]:
    """The full draw pile. Without a seed the pieces stay in catalogue order."""
    pieces = expand_catalogue()
    if seed is None:
        return pieces
    return shuffle_pieces(pieces, seed)
