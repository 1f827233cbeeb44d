import itertools

import pytest

from ivanssonne.logic.deck import TILE_TYPES
from ivanssonne.logic.engine import ANCHOR, compatible, find_placements, legal_placements, render_ascii
from ivanssonne.logic.errors import InvalidArgument
from ivanssonne.logic.geometry import opposite_side
from ivanssonne.logic.models import Field, Piece, Tile

from conftest import X0, Y0, make_piece, put


def _half_field_piece(*half_edges):
    return Piece(id="Z-1", tile=Tile("Z", fields=(Field(tuple(half_edges)),)))


class TestCompatible:
    def test_straight_roads_continue(self):
        assert compatible(make_piece("U"), make_piece("U"), 1)
        assert compatible(make_piece("U"), make_piece("U"), 3)

    def test_field_sides_match(self):
        assert compatible(make_piece("U"), make_piece("U"), 4)

    def test_road_against_town(self):
        assert not compatible(make_piece("U"), make_piece("E"), 1)

    def test_road_against_field(self):
        assert not compatible(make_piece("U"), make_piece("B"), 1)

    def test_town_against_town(self):
        assert compatible(make_piece("C"), make_piece("E"), 1)
        assert not compatible(make_piece("C"), make_piece("E"), 2)

    def test_field_halves_must_cover_each_other(self):
        # B exposes both halves of its bottom, Z only one half of its top.
        half = _half_field_piece((3, 1))
        assert not compatible(make_piece("B"), half, 1)
        assert not compatible(half, make_piece("B"), 3)

    def test_field_halves_flip_across_the_edge(self):
        top_half_1 = _half_field_piece((3, 1))
        assert compatible(_half_field_piece((1, 2)), top_half_1, 1)
        assert not compatible(_half_field_piece((1, 1)), top_half_1, 1)

    def test_invalid_side(self):
        with pytest.raises(InvalidArgument):
            compatible(make_piece("U"), make_piece("U"), 0)

    def test_symmetry_over_catalogue(self):
        pieces = [make_piece(letter, rotation=r) for letter in sorted(TILE_TYPES) for r in range(4)]
        for a, b in itertools.product(pieces, repeat=2):
            for side in (1, 2, 3, 4):
                assert compatible(a, b, side) == compatible(b, a, opposite_side(side)), (a, b, side)

    def test_field_only_tile_fits_itself_on_every_side(self):
        # B is fields only: it must accept itself on every side.
        for side in (1, 2, 3, 4):
            assert compatible(make_piece("B"), make_piece("B"), side)


class TestLegalPlacements:
    def test_empty_board_only_allows_anchor(self, board):
        assert legal_placements(board, make_piece("X")) == frozenset([ANCHOR])

    def test_all_four_neighbours_of_a_matching_piece(self, board):
        put(board, "U", ANCHOR)
        assert legal_placements(board, make_piece("U", 2)) == {
            (X0, Y0 + 1), (X0 - 1, Y0), (X0, Y0 - 1), (X0 + 1, Y0)
        }

    def test_mismatching_sides_are_excluded(self, board):
        put(board, "U", ANCHOR)
        assert legal_placements(board, make_piece("E")) == {(X0 - 1, Y0), (X0 + 1, Y0)}

    def test_occupied_coordinates_are_never_returned(self, board):
        put(board, "B", ANCHOR)
        put(board, "B", (X0 + 1, Y0))
        placements = legal_placements(board, make_piece("B", 3))
        assert ANCHOR not in placements
        assert (X0 + 1, Y0) not in placements
        assert len(placements) == 6

    def test_two_neighbour_conflict(self, board):
        put(board, "B", (X0, Y0))
        put(board, "C", (X0 + 2, Y0))
        gap = (X0 + 1, Y0)

        # B fits next to the left B on its own, but not against the town on the right.
        assert compatible(board[(X0, Y0)], make_piece("B", 3), 4)
        assert gap not in legal_placements(board, make_piece("B", 3))
        assert (X0 - 1, Y0) in legal_placements(board, make_piece("B", 3))

        # E with its town turned to the right satisfies both.
        assert gap in legal_placements(board, make_piece("E", rotation=1))

    def test_result_does_not_depend_on_board_order(self, board):
        put(board, "C", (X0 + 2, Y0))
        put(board, "B", (X0, Y0))
        assert (X0 + 1, Y0) not in legal_placements(board, make_piece("B", 3))


class TestFindPlacements:
    def test_keeps_rotation_that_fits(self, board):
        put(board, "U", ANCHOR)
        piece, placements = find_placements(board, make_piece("U", 2))
        assert piece.rotation == 0
        assert len(placements) == 4

    def test_turns_until_it_fits(self, board):
        put(board, "U", ANCHOR)
        held = make_piece("U", 2, rotation=1)
        assert not legal_placements(board, held)

        piece, placements = find_placements(board, held)
        assert piece.rotation == 2
        assert placements == {(X0, Y0 + 1), (X0 - 1, Y0), (X0, Y0 - 1), (X0 + 1, Y0)}

    def test_no_rotation_fits(self, board):
        put(board, "X", ANCHOR)
        piece, placements = find_placements(board, make_piece("B"))
        assert placements == frozenset()
        assert piece.rotation == 0


def test_render_ascii_empty():
    assert "Empty Board" in render_ascii({})


def test_render_ascii_marks_pieces_and_placements(board):
    put(board, "D", ANCHOR, rotation=1)
    text = render_ascii(board, [(X0 + 1, Y0)])
    assert "D1" in text
    assert " + " in text
