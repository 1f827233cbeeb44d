import pytest

from ivanssonne.logic.engine import ANCHOR
from ivanssonne.logic.errors import InvalidArgument
from ivanssonne.logic.models import FeatureKind
from ivanssonne.logic.scoring import (ScoringPolicy, pieces_spanned, road_value, score_closed_feature,
                                      score_closed_structures, town_value)
from ivanssonne.logic.structures import resolve_field, resolve_structure

from conftest import X0, Y0, meeple, put


class TestScoreClosedFeature:
    def test_no_meeples_no_winners(self):
        assert score_closed_feature([], 6) == ((), 6)

    def test_single_meeple_scores_alone(self):
        result = score_closed_feature([meeple("p1", ANCHOR, 1)], 4)
        assert result.winning_players == ("p1",)
        assert result.value == 4

    def test_majority_wins(self):
        tokens = [meeple("p1", ANCHOR, 1, n=1), meeple("p2", ANCHOR, 3, n=2), meeple("p1", ANCHOR, 2, n=3)]
        assert score_closed_feature(tokens, 8).winning_players == ("p1",)

    def test_ties_share_full_value(self):
        tokens = [meeple("p1", ANCHOR, 1, n=1), meeple("p2", ANCHOR, 3, n=2)]
        result = score_closed_feature(tokens, 8)
        assert result.winning_players == ("p1", "p2")
        assert result.value == 8


def _closed_road(board):
    top = put(board, "A", ANCHOR)
    put(board, "A", (X0, Y0 + 1), rotation=2)
    return resolve_structure(board, [], top, 1, FeatureKind.ROAD)


def test_road_value_counts_distinct_pieces(board):
    assert road_value(board, _closed_road(board)) == 4


def test_road_value_counts_a_piece_once_when_road_loops_through_it(road_ring):
    structure = resolve_structure(road_ring, [], road_ring[(X0, Y0)], 3, FeatureKind.ROAD)
    assert len(structure.sides) == 8
    assert pieces_spanned(road_ring, structure) == {piece.id for piece in road_ring.values()}
    assert road_value(road_ring, structure) == 8


def test_town_value_without_shields(town_ring):
    structure = resolve_structure(town_ring, [], town_ring[(X0, Y0)], 3, FeatureKind.TOWN)
    assert town_value(town_ring, structure) == 8


def test_town_value_with_shield(town_ring):
    put(town_ring, "M", (X0, Y0))
    structure = resolve_structure(town_ring, [], town_ring[(X0, Y0)], 3, FeatureKind.TOWN)
    assert town_value(town_ring, structure) == 10


def test_policy_town_value_is_pluggable(town_ring):
    policy = ScoringPolicy(town_value=lambda board, structure: len(structure.positions))
    structure = resolve_structure(town_ring, [], town_ring[(X0, Y0)], 3, FeatureKind.TOWN)
    assert policy.value(town_ring, structure) == 4


def test_policy_does_not_score_fields(board):
    piece = put(board, "B", ANCHOR)
    with pytest.raises(InvalidArgument):
        ScoringPolicy().value(board, resolve_field(board, [], piece, (1, 1)))


class TestScoreClosedStructures:
    def test_only_closed_and_claimed_features(self, board):
        put(board, "S", ANCHOR)
        put(board, "S", (X0, Y0 + 1), rotation=2)
        road_token = meeple("p1", (X0, Y0 + 1), 3, n=1)
        town_token = meeple("p2", (X0, Y0 + 1), 1, n=2)

        scored = score_closed_structures(board, [road_token, town_token], (X0, Y0 + 1))
        assert len(scored) == 1
        feature = scored[0]
        assert feature.kind is FeatureKind.ROAD
        assert feature.value == 4
        assert feature.winners == ("p1",)
        assert feature.meeples == (road_token,)

    def test_unclaimed_closed_feature_is_skipped(self, board):
        _closed_road(board)
        assert score_closed_structures(board, [], ANCHOR) == []

    def test_custom_policy(self, town_ring):
        token = meeple("p1", (X0, Y0), 2)
        policy = ScoringPolicy(town_value=lambda board, structure: 100)
        scored = score_closed_structures(town_ring, [token], (X0, Y0), policy)
        assert [(f.kind, f.value, f.winners) for f in scored] == [(FeatureKind.TOWN, 100, ("p1",))]
