"""
Move legality
----

Combines the geometry of src/chess/moves.py with everything that depends on the game state:

1. candidate moves, using the basic movement rules for all pieces (the board does this calculation)
2. castling moves (rights, empty path, no attacked squares for the king)
3. en passant moves (only right after an opponent's two-square pawn advance)
4. remove illegal options --> a move that would put you in check or you are in check and the move does not get you out of it.
5. pawn push to promotion square --> one move for every choice of piece type to promote into.

Nothing in here changes the state: king safety is tested on a simulated board that is restored afterwards.
"""

from dataclasses import replace
from typing import Iterator, Optional

from src.chess.castling import CASTLING_RULES, CastlingDirection, castling_directions
from src.chess.moves import (
    Move,
    candidate_castling_move,
    en_passant_moves,
    is_pawn_push_to_promotion_square,
    pawn_pushes_w_promotion,
)
from src.chess.pieces import PROMOTION_OPTIONS, PieceType
from src.chess.square import Square
from src.chess.state import GameState


# --- SINGLE MOVE LEGALITY ---
def is_legal(state: GameState, from_square: Square, to_square: Square) -> bool:
    """
    Is moving the piece on `from_square` to `to_square` legal for the side to move?
    ----

    Checked in order, stopping at the first failure:
    1. the squares differ and both are on the board
    2. `from_square` holds a piece of the side to move, `to_square` is empty or holds an opponent's piece
    3. the geometry of the piece allows the move (with a clear path for sliding pieces)
    4. the move does not leave your own king attacked

    NOTE: the promotion choice is not part of legality, see `move_for()`
    """
    return _find_move(state, from_square, to_square) is not None


def move_for(
    state: GameState,
    from_square: Square,
    to_square: Square,
    promotion: Optional[PieceType] = None,
) -> Optional[Move]:
    """
    The fully annotated move (castling direction, en passant flag, promotion), or None if the move is illegal.

    A promotion choice on a move that does not promote, or a choice outside the four options, makes the move illegal.
    A missing choice on a promoting move does not: the caller must ask for one (see `requires_promotion()`).
    """
    move = _find_move(state, from_square, to_square)
    if move is None:
        return None

    promotes = is_pawn_push_to_promotion_square(move, state.board)
    if promotion is None:
        return move
    if not promotes or promotion not in PROMOTION_OPTIONS:
        return None
    return replace(move, promote_to=promotion)


def requires_promotion(state: GameState, from_square: Square, to_square: Square) -> bool:
    """Legal pawn move onto the last rank: the mover has to choose a piece type first"""
    move = _find_move(state, from_square, to_square)
    return move is not None and is_pawn_push_to_promotion_square(move, state.board)


def leaves_king_in_check(state: GameState, move: Move) -> bool:
    """Return True if the move leaves the mover's own king attacked

    plan:
    1. make the candidate move on the board
    2. determine if king is in check on the new board
    3. restore the board (always, also when something goes wrong)
    """
    mover = state.board.piece(move.from_square)
    if mover is None:
        return True
    with state.board.simulate(move) as trial:
        return trial.is_check(mover.color)


def _find_move(
    state: GameState, from_square: Square, to_square: Square
) -> Optional[Move]:
    if from_square == to_square:
        return None
    if not (from_square.is_within_bounds() and to_square.is_within_bounds()):
        return None

    board = state.board
    piece = board.piece(from_square)
    if piece is None or piece.color != state.color_to_move:
        return None
    target = board.piece(to_square)
    if target is not None and target.color == piece.color:
        return None

    matching_move = next(
        (
            move
            for move in _candidate_moves_from(state, from_square)
            if move.to_square == to_square
        ),
        None,
    )
    if matching_move is None:
        return None

    if leaves_king_in_check(state, matching_move):
        return None
    return matching_move


# --- MOVE GENERATION ---
def legal_moves(state: GameState) -> list[Move]:
    """
    List of legal moves for the side to move
    ----

    Pawn moves onto the last rank are listed once for every piece type the pawn can promote into.
    """
    moves: list[Move] = []
    for move in _legal_moves_wo_promotions(state):
        if is_pawn_push_to_promotion_square(move, state.board):
            moves.extend(pawn_pushes_w_promotion(move))
        else:
            moves.append(move)
    return moves


def legal_destinations(state: GameState, from_square: Square) -> list[Square]:
    """Squares the piece on `from_square` may move to. Used by the UI to highlight targets."""
    piece = state.board.piece(from_square)
    if piece is None or piece.color != state.color_to_move:
        return []
    return [
        move.to_square
        for move in _candidate_moves_from(state, from_square)
        if not leaves_king_in_check(state, move)
    ]


def has_legal_move(state: GameState) -> bool:
    """Stops at the first legal move found"""
    return next(_legal_moves_wo_promotions(state), None) is not None


def _legal_moves_wo_promotions(state: GameState) -> Iterator[Move]:
    for move in _candidate_moves(state):
        if not leaves_king_in_check(state, move):
            yield move


def _candidate_moves(state: GameState) -> list[Move]:
    color = state.color_to_move
    candidate_moves = state.board.generate_candidate_moves(color)
    candidate_moves.extend(_castling_moves(state))
    candidate_moves.extend(_en_passant_moves(state))
    return candidate_moves


def _candidate_moves_from(state: GameState, from_square: Square) -> list[Move]:
    """Candidate moves of a single piece, including its special moves"""
    piece = state.board.piece(from_square)
    if piece is None:
        return []

    candidate_moves = state.board.candidate_moves_from(from_square)
    if piece.type == PieceType.KING:
        candidate_moves.extend(
            move for move in _castling_moves(state) if move.from_square == from_square
        )
    elif piece.type == PieceType.PAWN:
        candidate_moves.extend(
            move
            for move in _en_passant_moves(state)
            if move.from_square == from_square
        )
    return candidate_moves


# -- CASTLING RULE HELPERS ---
def _castling_moves(state: GameState) -> list[Move]:
    return [
        candidate_castling_move(direction)
        for direction in legal_castling_directions(state)
    ]


def legal_castling_directions(state: GameState) -> list[CastlingDirection]:
    """
    Find the legal castling directions for the side to move
    ---

    **you are allowed to castle if**

    * Castling rights are not yet revoked (neither king nor that rook ever moved).
    * You are not currently in check (you cannot castle out of check).
    * Every square in between the king and the rook is empty.
    * The king does not pass through or land on a square that is under attack.
    """
    color = state.color_to_move
    if not state.can_castle(color):
        return []

    board = state.board
    opponent_color = color.opponent
    # Cannot castle out of a check.
    if board.is_check(color):
        return []

    legal_directions: list[CastlingDirection] = []
    for direction in castling_directions(color):
        if not state.castling_rights[direction]:
            continue

        squares = CASTLING_RULES[direction]
        if board.is_any_occupied(squares.squares_between()):
            continue

        if board.is_any_under_attack(squares.king_path(), opponent_color):
            continue

        legal_directions.append(direction)

    return legal_directions


# --- EN PASSANT RULE HELPERS ----
def _en_passant_moves(state: GameState) -> list[Move]:
    if state.en_passant_square is None:
        return []
    return en_passant_moves(
        en_passant_square=state.en_passant_square,
        color=state.color_to_move,
        board=state.board,
    )


# --- REPETITION ---
def position_fingerprint(state: GameState) -> str:
    """
    Identify a position for the repetition rule
    ----

    Two positions are the same when the pieces stand on the same squares, the same side is to move,
    and the same castling and en passant captures are possible.
    The en passant square only counts if a legal en passant capture actually exists
    (otherwise every two-square pawn advance would create a 'new' position).
    """
    fen_state = state.to_fen_state()
    en_passant_possible = any(
        not leaves_king_in_check(state, move) for move in _en_passant_moves(state)
    )
    if not en_passant_possible:
        fen_state.en_passant_square = None
    return fen_state.position_fen()
