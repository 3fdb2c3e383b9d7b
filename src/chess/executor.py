"""
Committing moves
----

The executor never validates: it is only handed moves produced by src/chess/rules.py.
Calling it with anything else is a programming error and raises ExecutorMisuseError.
"""

import logging
from typing import Optional

from src.chess.castling import CASTLING_RULES, castling_directions
from src.chess.fen import STARTING_FEN
from src.chess.moves import PAWN_DIRECTION, Move, is_pawn_push_to_promotion_square
from src.chess.pieces import PROMOTION_OPTIONS, Color, Piece, PieceType
from src.chess.rules import position_fingerprint
from src.chess.square import Square
from src.chess.state import GameState
from src.core.exceptions import ExecutorMisuseError, PromotionRequiredError

logger = logging.getLogger(__name__)


def start(fen: Optional[str] = None) -> GameState:
    """Fresh state for a new game. The starting position counts as the first occurrence for the repetition rule."""
    state = GameState.from_fen(fen or STARTING_FEN)
    state.position_history.append(position_fingerprint(state))
    return state


def execute(state: GameState, move: Move) -> GameState:
    """
    Apply a validated move and return the resulting state. The given state is left untouched.
    ----

    1. move the piece(s): rook alongside the king when castling, remove the pawn taken en passant, promote
    2. revoke castling rights where needed
    3. set or clear the en passant square
    4. update the move counters
    5. flip the side to move, record the move and the new position
    6. recompute check for the new side to move
    """
    mover = _executable_piece(state, move)

    new_state = state.copy()
    captured = new_state.board.apply_move(move)

    _revoke_castling_rights_if_needed(new_state, move, mover, captured)
    new_state.en_passant_square = _determine_en_passant_square(move, mover)

    # move counters
    if mover.type == PieceType.PAWN or captured is not None:
        new_state.half_move_clock = 0
    else:
        new_state.half_move_clock += 1
    if mover.color == Color.BLACK:
        new_state.full_move_number += 1

    new_state.color_to_move = mover.color.opponent
    new_state.moves.append(move)
    new_state.position_history.append(position_fingerprint(new_state))

    # king_square() raises if a move ever broke the one-king-per-color invariant
    new_state.board.king_square(mover.color)
    new_state.is_check = new_state.board.is_check(new_state.color_to_move)

    logger.debug(
        "Executed %s, %s to move%s",
        move.to_uci(),
        new_state.color_to_move.name.lower(),
        " (check)" if new_state.is_check else "",
    )
    return new_state


def _executable_piece(state: GameState, move: Move) -> Piece:
    """Cheap sanity checks, returns the piece that moves. Full legality is the caller's job."""
    mover = state.board.piece(move.from_square)
    if mover is None:
        raise ExecutorMisuseError(
            f"No piece on {move.from_square.to_algebraic()} for move {move.to_uci()}"
        )
    if mover.color != state.color_to_move:
        raise ExecutorMisuseError(
            f"Move {move.to_uci()} moves a {mover.color.name.lower()} piece, but it is {state.color_to_move.name.lower()}'s turn"
        )

    promotes = is_pawn_push_to_promotion_square(move, state.board)
    if promotes and move.promote_to is None:
        raise PromotionRequiredError(
            f"Move {move.to_uci()} reaches the last rank: choose a piece to promote into."
        )
    if move.promote_to is not None and (
        not promotes or move.promote_to not in PROMOTION_OPTIONS
    ):
        raise ExecutorMisuseError(f"Invalid promotion in move {move.to_uci()}")
    return mover


def _revoke_castling_rights_if_needed(
    state: GameState, move: Move, mover: Piece, captured: Optional[Piece]
) -> None:
    """
    Checks which rights should get revoked
    ----

    1. If you are moving your king (castling included) --> revoke both
    2. If you are moving a rook away from its starting square --> revoke the right in that direction
    3. If you are taking your opponent's rook on its starting square --> revoke that right of your opponent
    """
    player_color = mover.color
    opponent_color = player_color.opponent

    if mover.type == PieceType.KING:
        state.revoke_all_castling_rights(player_color)

    if mover.type == PieceType.ROOK:
        for direction in castling_directions(player_color):
            if move.from_square == CASTLING_RULES[direction].rook_from:
                state.revoke_castling_rights(direction)

    if captured is not None and captured.type == PieceType.ROOK:
        for direction in castling_directions(opponent_color):
            if move.to_square == CASTLING_RULES[direction].rook_from:
                state.revoke_castling_rights(direction)


def _determine_en_passant_square(move: Move, mover: Piece) -> Optional[Square]:
    """The en passant square only lives for one move: it is set after a two-square pawn advance and cleared otherwise."""
    rows_moved = abs(move.from_square.row - move.to_square.row)
    if mover.type != PieceType.PAWN or rows_moved != 2:
        return None
    return move.from_square.offset(PAWN_DIRECTION[mover.color], 0)
