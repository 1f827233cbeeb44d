import json
import logging
import random
from typing import Any, Dict, Optional, Union

from ivanssonne.config import Settings, load_settings
from ivanssonne.logic.engine import render_ascii
from ivanssonne.logic.errors import EngineError
from ivanssonne.logic.game import (EndGame, EndTurn, GameAction, GameState, GetNewPiece, PlaceMeeple,
                                   PlacePiece, PlayerSpec, Rejected, ResetGame, RotateCurrentPiece,
                                   initial_state, reduce)
from ivanssonne.logic.models import Piece
from ivanssonne.logic.scoring import DEFAULT_POLICY, ScoringPolicy
from ivanssonne.logic.telemetry import TelemetryManager

logger = logging.getLogger(__name__)


def piece_to_dict(piece: Piece) -> Dict[str, Any]:
    tile = piece.tile
    return {
        "id": piece.id,
        "letter": tile.letter,
        "rotation": piece.rotation,
        "position": list(piece.position) if piece.position else None,
        "roads": [list(road.sides) for road in tile.roads],
        "towns": [{"sides": list(town.sides), "shield": town.shield} for town in tile.towns],
        "fields": [[list(half) for half in field.sides] for field in tile.fields],
    }


def state_to_dict(state: GameState) -> Dict[str, Any]:
    return {
        "players": [p._asdict() for p in state.players],
        "current_player_id": state.current_player_id,
        "current_piece": piece_to_dict(state.current_piece) if state.current_piece else None,
        "current_piece_impossible_to_place": state.current_piece_impossible_to_place,
        "possible_placements": sorted(list(p) for p in state.possible_placements),
        "placed_pieces": [
            {"x": x, "y": y, "id": piece.id, "letter": piece.tile.letter, "rotation": piece.rotation}
            for (x, y), piece in sorted(state.board.items())
        ],
        "meeples": [
            {"id": m.id, "player_id": m.player_id, "position": list(m.position), "address": list(m.address)}
            for m in state.meeples
        ],
        "unplaced_pieces": len(state.unplaced_pieces),
        "game_ended": state.game_ended,
        "show_result": state.show_result,
        "message_log": list(state.message_log[-10:]),
    }


class GameSession:
    """Owns the single game the server plays and applies tool calls to it, one at a time."""

    def __init__(self, settings: Optional[Settings] = None, policy: ScoringPolicy = DEFAULT_POLICY,
                 telemetry: Optional[TelemetryManager] = None):
        self.settings = settings or load_settings()
        self.policy = policy
        self.telemetry = telemetry or TelemetryManager(self.settings.telemetry_dir)
        self.state = initial_state()

    def apply(self, action: GameAction) -> Union[GameState, Rejected]:
        result = reduce(self.state, action, self.policy)
        accepted = not isinstance(result, Rejected)
        if accepted:
            self.state = result
        self.telemetry.log_turn({
            "action": type(action).__name__,
            "arguments": {k: v for k, v in action._asdict().items() if k != "pieces"},
            "accepted": accepted,
            "reason": None if accepted else result.reason,
            "player": self.state.current_player_id,
            "scores": {p.id: p.score for p in self.state.players},
        })
        return result

    def _describe(self, result, success: str) -> str:
        if isinstance(result, Rejected):
            return f"Error: {result.reason}."
        return f"Success: {success}"

    def call_tool(self, name: str, arguments: Optional[dict] = None) -> str:
        arguments = arguments or {}
        handler = getattr(self, f"_tool_{name}", None)
        if handler is None:
            raise ValueError(f"Unknown tool: {name}")
        try:
            return handler(arguments)
        except EngineError as e:
            logger.warning("%s failed: %s", name, e)
            return f"Error: {e}"

    def _tool_get_board_state(self, arguments) -> str:
        content = render_ascii(self.state.board, self.state.possible_placements)
        return f"Current Board State:\n{content}"

    def _tool_get_game_state(self, arguments) -> str:
        return json.dumps(state_to_dict(self.state))

    def _tool_get_legal_placements(self, arguments) -> str:
        state = self.state
        return json.dumps({
            "piece": piece_to_dict(state.current_piece) if state.current_piece else None,
            "placements": sorted(list(p) for p in state.possible_placements),
            "impossible_to_place": state.current_piece_impossible_to_place,
        })

    def _tool_rotate_piece(self, arguments) -> str:
        direction = arguments.get("direction", "right")
        result = self.apply(RotateCurrentPiece(direction))
        return self._describe(result, f"Rotated {direction}, {len(self.state.possible_placements)} placements.")

    def _tool_place_piece(self, arguments) -> str:
        try:
            x = int(arguments.get("x"))
            y = int(arguments.get("y"))
        except (ValueError, TypeError):
            return "Error: Coordinates must be integers."
        piece = self.state.current_piece
        result = self.apply(PlacePiece(x, y))
        return self._describe(result, f"Placed {piece.tile.letter if piece else '?'} at ({x}, {y}).")

    def _tool_place_meeple(self, arguments) -> str:
        try:
            address = tuple(int(a) for a in arguments.get("address"))
        except (ValueError, TypeError):
            return "Error: The address must be a list of integers."
        result = self.apply(PlaceMeeple(address))
        return self._describe(result, f"Meeple placed on {list(address)}.")

    def _tool_end_turn(self, arguments) -> str:
        before = {p.id: p.score for p in self.state.players}
        result = self.apply(EndTurn())
        if isinstance(result, Rejected):
            return self._describe(result, "")
        if self.state.game_ended:
            return "Success: No pieces left, the game is over."
        gained = {p.id: p.score - before.get(p.id, 0) for p in self.state.players if p.score != before.get(p.id, 0)}
        return f"Success: Turn ended. Points scored: {json.dumps(gained)}. Next player: {self.state.current_player_id}."

    def _tool_get_new_piece(self, arguments) -> str:
        return self._describe(self.apply(GetNewPiece()), "Drew a new piece.")

    def _tool_end_game(self, arguments) -> str:
        self.apply(EndGame())
        players = self.state.players
        scores = {p.id: {"name": p.name, "score": p.score} for p in players}
        best = max((p.score for p in players), default=0)
        summary = self.telemetry.finalize_game(scores, [p.id for p in players if p.score == best])
        return json.dumps(summary)

    def _tool_reset_game(self, arguments) -> str:
        players = arguments.get("players") or [{"name": "Player 1", "color": "red"},
                                               {"name": "Player 2", "color": "blue"}]
        seed = arguments.get("seed", self.settings.seed)
        try:
            seed = random.randrange(2 ** 32) if seed is None else int(seed)
        except (ValueError, TypeError):
            return "Error: The seed must be an integer."
        try:
            specs = tuple(PlayerSpec(str(p["name"]), str(p.get("color", ""))) for p in players)
        except (KeyError, TypeError, AttributeError):
            return "Error: Each player needs a name."
        self.apply(ResetGame(specs, seed=seed, meeples=self.settings.meeples))
        logger.info("New game with seed %s", seed)
        return f"Success: New game started with seed {seed}."
