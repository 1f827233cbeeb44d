"""Turn-by-turn game state machine.

Every action is a small immutable record and every transition is a pure
function from `(GameState, action)` to a new `GameState`, or a `Rejected`
result when the action is not legal right now. States are never mutated;
the board dict of a state is copied before a piece is added to it.
"""
import logging
from typing import Callable, Dict, NamedTuple, Optional, Tuple, Union

from .deck import create_deck
from .engine import ANCHOR, find_placements, legal_placements
from .errors import InconsistentState, InvalidArgument
from .geometry import check_address, rotate
from .models import Board, Meeple, Piece, Player
from .scoring import DEFAULT_POLICY, ScoringPolicy, score_closed_structures
from .structures import find_feature, resolve_address

logger = logging.getLogger(__name__)


class PlayerSpec(NamedTuple):
    name: str
    color: str


# --- Actions ---

class ResetGame(NamedTuple):
    """Starts a new game. `pieces` is the draw order; without it the default
    catalogue is used, shuffled with `seed`."""
    players: Tuple[PlayerSpec, ...]
    seed: Optional[int] = None
    pieces: Optional[Tuple[Piece, ...]] = None
    meeples: int = 8


class PlacePiece(NamedTuple):
    x: int
    y: int


class RotateCurrentPiece(NamedTuple):
    direction: str  # 'left' or 'right'


class PlaceMeeple(NamedTuple):
    address: Tuple[int, ...]


class EndTurn(NamedTuple):
    pass


class GetNewPiece(NamedTuple):
    pass


class RewardPlayer(NamedTuple):
    player_id: str
    score: int
    message: str = ""


class RemoveMeeple(NamedTuple):
    meeple_id: str


class EndGame(NamedTuple):
    pass


GameAction = Union[ResetGame, PlacePiece, RotateCurrentPiece, PlaceMeeple, EndTurn,
                   GetNewPiece, RewardPlayer, RemoveMeeple, EndGame]


class GameState(NamedTuple):
    board: Board
    unplaced_pieces: Tuple[Piece, ...] = ()
    current_piece: Optional[Piece] = None
    current_piece_impossible_to_place: bool = False
    currently_placed_piece_id: Optional[str] = None
    meeple_placed: bool = False
    meeples: Tuple[Meeple, ...] = ()
    players: Tuple[Player, ...] = ()
    current_player_id: str = ""
    possible_placements: frozenset = frozenset()
    game_ended: bool = False
    show_result: bool = False
    message_log: Tuple[str, ...] = ("Game started!",)
    meeple_serial: int = 0

    def player(self, player_id: str) -> Optional[Player]:
        return next((p for p in self.players if p.id == player_id), None)

    @property
    def current_player(self) -> Optional[Player]:
        return self.player(self.current_player_id)

    @property
    def placed_piece(self) -> Optional[Piece]:
        """The piece placed during the current turn, if any."""
        if self.currently_placed_piece_id is None:
            return None
        return next((p for p in self.board.values() if p.id == self.currently_placed_piece_id), None)


class Rejected(NamedTuple):
    """An action that is not legal in `state`; the state is left untouched."""
    reason: str
    state: GameState


def initial_state() -> GameState:
    return GameState(board={})


def _update_player(players: Tuple[Player, ...], player_id: str, **changes) -> Tuple[Player, ...]:
    return tuple(p._replace(**changes) if p.id == player_id else p for p in players)


def _require_player(players: Tuple[Player, ...], player_id: str) -> Player:
    player = next((p for p in players if p.id == player_id), None)
    if player is None:
        raise InconsistentState(f"Invalid player id: {player_id!r}")
    return player


def _next_player_id(state: GameState) -> str:
    ids = [p.id for p in state.players]
    if state.current_player_id not in ids:
        raise InconsistentState(f"Invalid player id: {state.current_player_id!r}")
    return ids[(ids.index(state.current_player_id) + 1) % len(ids)]


def _draw(state: GameState, **changes) -> GameState:
    """Hands the next piece out, turned until it fits if it fits at all."""
    if not state.unplaced_pieces:
        logger.info("Game over")
        return state._replace(currently_placed_piece_id=None, current_piece=None,
                              possible_placements=frozenset(), current_piece_impossible_to_place=False,
                              meeple_placed=False, game_ended=True)

    piece, placements = find_placements(state.board, state.unplaced_pieces[0])
    return state._replace(currently_placed_piece_id=None, current_piece=piece,
                          unplaced_pieces=state.unplaced_pieces[1:], possible_placements=placements,
                          current_piece_impossible_to_place=not placements, meeple_placed=False, **changes)


def _settle_closed_features(state: GameState, policy: ScoringPolicy) -> GameState:
    """Scores features closed by this turn's piece and hands their meeples back."""
    placed = state.placed_piece
    if placed is None or not state.meeples:
        return state

    scored = score_closed_structures(state.board, state.meeples, placed.position, policy)
    players, meeples, log = state.players, state.meeples, list(state.message_log)
    for feature in scored:
        for player_id in feature.winners:
            player = _require_player(players, player_id)
            players = _update_player(players, player_id, score=player.score + feature.value)
            log.append(f"{player.name} scored {feature.value} points for a {feature.kind.name.lower()}.")
        for meeple in feature.meeples:
            owner = _require_player(players, meeple.player_id)
            players = _update_player(players, owner.id, meeples=owner.meeples + 1)
        returned = {meeple.id for meeple in feature.meeples}
        meeples = tuple(m for m in meeples if m.id not in returned)

    return state._replace(players=players, meeples=meeples, message_log=tuple(log))


# --- Transitions ---

def _reset_game(state: GameState, action: ResetGame, policy: ScoringPolicy):
    if not action.players:
        raise InvalidArgument("A game needs at least one player")
    pieces = tuple(action.pieces) if action.pieces is not None else tuple(create_deck(action.seed))
    if not pieces:
        raise InvalidArgument("A game needs at least one piece")

    players = tuple(
        Player(id=f"player-{i + 1}", name=spec.name, color=spec.color, score=0, meeples=action.meeples)
        for i, spec in enumerate(action.players)
    )
    return GameState(
        board={},
        unplaced_pieces=pieces[1:],
        current_piece=pieces[0],
        players=players,
        current_player_id=players[0].id,
        possible_placements=frozenset([ANCHOR]),
    )


def _place_piece(state: GameState, action: PlacePiece, policy: ScoringPolicy):
    if state.current_piece is None:
        return Rejected("No piece is held", state)
    position = (action.x, action.y)
    if position not in state.possible_placements:
        return Rejected(f"{position} is not a legal placement", state)

    piece = state.current_piece._replace(position=position, placed=True)
    board = dict(state.board)
    board[position] = piece
    return state._replace(board=board, currently_placed_piece_id=piece.id, current_piece=None,
                          possible_placements=frozenset(), meeple_placed=False)


def _rotate_current_piece(state: GameState, action: RotateCurrentPiece, policy: ScoringPolicy):
    if action.direction not in ("left", "right"):
        raise InvalidArgument(f"Direction must be 'left' or 'right', got {action.direction!r}")
    if state.current_piece is None:
        return Rejected("No piece is held", state)

    rotated = rotate(state.current_piece, 3 if action.direction == "left" else 1)
    return state._replace(current_piece=rotated, possible_placements=legal_placements(state.board, rotated))


def _place_meeple(state: GameState, action: PlaceMeeple, policy: ScoringPolicy):
    address = check_address(action.address)
    player = _require_player(state.players, state.current_player_id)
    if player.meeples <= 0:
        return Rejected(f"{player.name} has no meeples left", state)
    placed = state.placed_piece
    if placed is None:
        return Rejected("No piece was placed this turn", state)
    if state.meeple_placed:
        return Rejected("A meeple was already placed this turn", state)
    if find_feature(placed, address) is None:
        return Rejected(f"{placed!r} has no feature at {address}", state)
    if resolve_address(state.board, state.meeples, placed.position, address).meeples:
        return Rejected("The feature is already claimed", state)

    serial = state.meeple_serial + 1
    meeple = Meeple(id=f"meeple-{serial}", player_id=player.id, position=placed.position, address=address)
    return state._replace(meeples=state.meeples + (meeple,),
                          players=_update_player(state.players, player.id, meeples=player.meeples - 1),
                          meeple_placed=True, meeple_serial=serial)


def _end_turn(state: GameState, action: EndTurn, policy: ScoringPolicy):
    if state.game_ended:
        return Rejected("The game is over", state)
    if state.current_piece is not None and not state.current_piece_impossible_to_place:
        return Rejected("The held piece has to be placed first", state)

    state = _settle_closed_features(state, policy)
    if not state.unplaced_pieces:
        return _draw(state)
    return _draw(state, current_player_id=_next_player_id(state))


def _get_new_piece(state: GameState, action: GetNewPiece, policy: ScoringPolicy):
    if not state.current_piece_impossible_to_place:
        return Rejected("The held piece can still be placed", state)
    return _draw(state)


def _reward_player(state: GameState, action: RewardPlayer, policy: ScoringPolicy):
    player = _require_player(state.players, action.player_id)
    return state._replace(players=_update_player(state.players, player.id, score=player.score + action.score),
                          message_log=state.message_log + (f"{player.name}{action.message}",))


def _remove_meeple(state: GameState, action: RemoveMeeple, policy: ScoringPolicy):
    meeple = next((m for m in state.meeples if m.id == action.meeple_id), None)
    if meeple is None:
        return Rejected(f"No meeple {action.meeple_id!r}", state)
    owner = _require_player(state.players, meeple.player_id)
    return state._replace(meeples=tuple(m for m in state.meeples if m.id != meeple.id),
                          players=_update_player(state.players, owner.id, meeples=owner.meeples + 1))


def _end_game(state: GameState, action: EndGame, policy: ScoringPolicy):
    return state._replace(show_result=True, meeples=())


_TRANSITIONS: Dict[type, Callable] = {
    ResetGame: _reset_game,
    PlacePiece: _place_piece,
    RotateCurrentPiece: _rotate_current_piece,
    PlaceMeeple: _place_meeple,
    EndTurn: _end_turn,
    GetNewPiece: _get_new_piece,
    RewardPlayer: _reward_player,
    RemoveMeeple: _remove_meeple,
    EndGame: _end_game,
}


def reduce(state: GameState, action: GameAction,
           policy: ScoringPolicy = DEFAULT_POLICY) -> Union[GameState, Rejected]:
    """Applies `action` to `state`.

    Returns the next state or `Rejected` when the action is not legal now.
    Contract violations (bad rotation, malformed address, unknown player)
    raise an `EngineError` instead.
    """
    transition = _TRANSITIONS.get(type(action))
    if transition is None:
        raise InvalidArgument(f"Unknown action: {action!r}")
    result = transition(state, action, policy)
    if isinstance(result, Rejected):
        logger.debug("Rejected %s: %s", type(action).__name__, result.reason)
    return result


def dispatch(state: GameState, action: GameAction, policy: ScoringPolicy = DEFAULT_POLICY) -> GameState:
    """Like `reduce`, but a rejected action just yields the unchanged state."""
    result = reduce(state, action, policy)
    return result.state if isinstance(result, Rejected) else result


def new_game(players, seed: Optional[int] = None, pieces=None, meeples: int = 8) -> GameState:
    specs = tuple(PlayerSpec(*p) if not isinstance(p, PlayerSpec) else p for p in players)
    pieces = tuple(pieces) if pieces is not None else None
    return dispatch(initial_state(), ResetGame(specs, seed=seed, pieces=pieces, meeples=meeples))
