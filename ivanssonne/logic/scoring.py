import logging
from collections import Counter
from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

from .errors import InvalidArgument
from .models import Board, Coordinate, FeatureKind, Meeple
from .structures import Structure, structures_on_piece

logger = logging.getLogger(__name__)


class ScoreResult(NamedTuple):
    winning_players: Tuple[str, ...]
    value: int


class ScoredFeature(NamedTuple):
    """A closed, occupied road or town and who it pays out to."""
    kind: FeatureKind
    value: int
    winners: Tuple[str, ...]
    meeples: Tuple[Meeple, ...]
    sides: tuple


def score_closed_feature(meeples: Sequence[Meeple], feature_value: int) -> ScoreResult:
    """Picks the players scoring a closed feature.

    A lone meeple scores for its owner. Otherwise every player tied for the
    most meeples on the feature gets the full value.
    """
    if not meeples:
        return ScoreResult((), feature_value)
    if len(meeples) == 1:
        return ScoreResult((meeples[0].player_id,), feature_value)

    counts = Counter(meeple.player_id for meeple in meeples)
    best = max(counts.values())
    return ScoreResult(tuple(player for player, count in counts.items() if count == best), feature_value)


def pieces_spanned(board: Board, structure: Structure) -> frozenset:
    return frozenset(board[position].id for position in structure.positions)


def road_value(board: Board, structure: Structure) -> int:
    """Two points per distinct piece the road runs through."""
    return 2 * len(pieces_spanned(board, structure))


def town_value(board: Board, structure: Structure) -> int:
    """Two points per piece plus two per shield inside the town."""
    touched = set(structure.sides)
    shields = 0
    for position in structure.positions:
        for town in board[position].tile.towns:
            if town.shield and any((position, side) in touched for side in town.sides):
                shields += 1
    return 2 * len(pieces_spanned(board, structure)) + 2 * shields


class ScoringPolicy:
    """Maps a closed structure to its point value.

    Roads are worth `road_value`; towns are an extension point, any callable
    taking `(board, structure)` can be plugged in.
    """
    def __init__(self, road_value: Callable[[Board, Structure], int] = road_value,
                 town_value: Callable[[Board, Structure], int] = town_value):
        self.road_value = road_value
        self.town_value = town_value

    def value(self, board: Board, structure: Structure) -> int:
        if structure.kind is FeatureKind.ROAD:
            return self.road_value(board, structure)
        if structure.kind is FeatureKind.TOWN:
            return self.town_value(board, structure)
        raise InvalidArgument(f"No scoring rule for {structure.kind.name.lower()}s")


DEFAULT_POLICY = ScoringPolicy()


def score_closed_structures(board: Board, meeples: Sequence[Meeple], position: Coordinate,
                            policy: Optional[ScoringPolicy] = None) -> List[ScoredFeature]:
    """Scores the closed roads and towns running through the piece at `position`."""
    policy = policy or DEFAULT_POLICY
    scored = []
    for structure in structures_on_piece(board, meeples, position):
        if not structure.closed or not structure.meeples:
            continue
        result = score_closed_feature(structure.meeples, policy.value(board, structure))
        logger.info("Closed %s at %s worth %d points for %s", structure.kind.name.lower(), position,
                    result.value, ", ".join(result.winning_players))
        scored.append(ScoredFeature(structure.kind, result.value, result.winning_players,
                                    structure.meeples, structure.sides))
    return scored
