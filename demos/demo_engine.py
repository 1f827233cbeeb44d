from ivanssonne.logic.deck import TILE_TYPES
from ivanssonne.logic.engine import ANCHOR, render_ascii
from ivanssonne.logic.game import EndTurn, PlaceMeeple, PlacePiece, RotateCurrentPiece, dispatch, new_game
from ivanssonne.logic.models import Piece


def demo():
    # Two monastery tiles whose roads can meet: A has a road ending at the bottom.
    pieces = [Piece(id="A-1", tile=TILE_TYPES["A"]), Piece(id="A-2", tile=TILE_TYPES["A"]),
              Piece(id="B-1", tile=TILE_TYPES["B"])]
    state = new_game([("Alice", "red"), ("Bob", "blue")], pieces=pieces)

    # 1. Alice places the first tile on the anchor and claims its road.
    state = dispatch(state, PlacePiece(*ANCHOR))
    state = dispatch(state, PlaceMeeple((1,)))
    state = dispatch(state, EndTurn())
    print(render_ascii(state.board, state.possible_placements))
    print(f"Bob holds {state.current_piece!r}, legal: {sorted(state.possible_placements)}")

    # 2. Bob turns his tile upside down so its road points up, then closes the road.
    state = dispatch(state, RotateCurrentPiece("right"))
    state = dispatch(state, RotateCurrentPiece("right"))
    below = (ANCHOR[0], ANCHOR[1] + 1)
    print(f"After rotating, legal: {sorted(state.possible_placements)}")
    state = dispatch(state, PlacePiece(*below))
    state = dispatch(state, EndTurn())

    # 3. The road spans two tiles: Alice gets 4 points and her meeple back.
    print(render_ascii(state.board))
    for player in state.players:
        print(f"{player.name}: {player.score} points, {player.meeples} meeples")
    if state.players[0].score == 4:
        print("SUCCESS: Road closed and scored!")
    else:
        print("FAIL: Road should have been scored.")


if __name__ == "__main__":
    demo()
