"""Unit tests for /src/chess/moves.py"""

from unittest.mock import call, patch

import pytest

import src.chess.moves as mv
from src.chess.board import Board
from src.chess.castling import CASTLING_RULES, CastlingDirection
from src.chess.moves import (
    Color,
    Move,
    PieceType,
    Square,
    candidate_bishop_moves,
    candidate_castling_move,
    candidate_king_moves,
    candidate_knight_moves,
    candidate_pawn_moves,
    candidate_queen_moves,
    candidate_rook_moves,
    en_passant_capture_square,
    en_passant_moves,
    is_attacked_by_bishop,
    is_attacked_by_king,
    is_attacked_by_knight,
    is_attacked_by_pawn,
    is_attacked_by_queen,
    is_attacked_by_rook,
    is_pawn_push_to_promotion_square,
    pawn_pushes_w_promotion,
    raycasting_move,
    single_step_move,
)

EMPTY_FEN = "/".join(["8"] * 8)


def sq(name: str) -> Square:
    return Square.from_algebraic(name)


def destinations(moves: list[Move]) -> set[str]:
    return {move.to_square.to_algebraic() for move in moves}


# -- MOVE CREATION, ENCODING/DECODING UCI NOTATION ---
@pytest.mark.parametrize(
    "uci_move, from_uci, to_uci",
    [
        ("e2e4", "e2", "e4"),
        ("a1a5", "a1", "a5"),
        ("d2e4", "d2", "e4"),
        ("g3a7", "g3", "a7"),
    ],
)
def test_creating_move_from_uci(uci_move: str, from_uci: str, to_uci: str) -> None:
    """Creating logic / parsing of UCI notation for the move should be <from_square><to_square>"""
    move = Move.from_uci(uci_move)
    assert move.from_square == sq(from_uci)
    assert move.to_square == sq(to_uci)
    assert move.to_uci() == uci_move


def test_creating_move_incl_promotion() -> None:
    move = Move.from_uci("e7e8q")
    assert move.from_square == sq("e7")
    assert move.to_square == sq("e8")
    assert move.promote_to == PieceType.QUEEN
    assert move.to_uci() == "e7e8q"


def test_move_flags_default_to_a_plain_move() -> None:
    move = Move(sq("e2"), sq("e4"))
    assert move.promote_to is None
    assert move.castling_direction is None
    assert not move.is_en_passant


# -- RAYCASTING / SINGLE STEPS ---
def test_raycasting_on_empty_board() -> None:
    """A rook in the corner sees its whole row and column: 14 squares"""
    board = Board.from_fen("R7/8/8/8/8/8/8/8")
    moves = raycasting_move(sq("a8"), board, mv.STRAIGHTS)
    assert len(moves) == 14
    assert all(move.from_square == sq("a8") for move in moves)


def test_raycasting_stops_at_blockers() -> None:
    """Own piece blocks (not included), opponent piece blocks but can be captured"""
    board = Board.from_fen("R2p4/8/P7/8/8/8/8/8")
    moves = raycasting_move(sq("a8"), board, mv.STRAIGHTS)
    assert destinations(moves) == {"b8", "c8", "d8", "a7"}


def test_single_step_move_skips_own_pieces_and_board_edge() -> None:
    board = Board.from_fen("8/8/8/8/8/8/8/KN6")
    moves = single_step_move(sq("a1"), board, mv.KING_DELTAS)
    assert destinations(moves) == {"a2", "b2"}


# -- PIECE MOVEMENT RULES ---
def test_knight_in_the_center() -> None:
    board = Board.from_fen("8/8/8/3N4/8/8/8/8")
    moves = candidate_knight_moves(sq("d5"), board)
    assert destinations(moves) == {"b6", "b4", "c7", "c3", "e7", "e3", "f6", "f4"}


def test_bishop_in_the_corner() -> None:
    board = Board.from_fen("8/8/8/8/8/8/8/B7")
    moves = candidate_bishop_moves(sq("a1"), board)
    assert destinations(moves) == {"b2", "c3", "d4", "e5", "f6", "g7", "h8"}


def test_rook_in_the_center() -> None:
    board = Board.from_fen("8/8/8/3R4/8/8/8/8")
    assert len(candidate_rook_moves(sq("d5"), board)) == 14


def test_queen_combines_rook_and_bishop() -> None:
    board = Board.from_fen("8/8/8/3Q4/8/8/8/8")
    queen_moves = candidate_queen_moves(sq("d5"), board)
    rook_moves = candidate_rook_moves(sq("d5"), board)
    bishop_moves = candidate_bishop_moves(sq("d5"), board)
    assert set(queen_moves) == set(rook_moves) | set(bishop_moves)
    assert len(queen_moves) == 27


def test_king_in_the_center() -> None:
    board = Board.from_fen("8/8/8/3K4/8/8/8/8")
    assert len(candidate_king_moves(sq("d5"), board)) == 8


def test_queen_moves_delegate_to_raycasting() -> None:
    board = Board.from_fen("8/8/8/3Q4/8/8/8/8")
    with patch("src.chess.moves.raycasting_move", return_value=[]) as mock_raycast:
        candidate_queen_moves(sq("d5"), board)
    mock_raycast.assert_has_calls(
        [call(sq("d5"), board, mv.DIAGONALS), call(sq("d5"), board, mv.STRAIGHTS)]
    )


# -- PAWNS ---
@pytest.mark.parametrize(
    "fen, square, expected",
    [
        # white pawn on its starting row: single and double push
        ("8/8/8/8/8/8/4P3/8", "e2", {"e3", "e4"}),
        # black pawn on its starting row moves DOWN the board
        ("8/4p3/8/8/8/8/8/8", "e7", {"e6", "e5"}),
        # no double push once the pawn has left its starting row
        ("8/8/8/8/8/4P3/8/8", "e3", {"e4"}),
        # blocked right in front: neither push
        ("8/8/8/8/8/4n3/4P3/8", "e2", set()),
        # blocked two squares ahead: single push only
        ("8/8/8/8/4n3/8/4P3/8", "e2", {"e3"}),
        # diagonal captures onto opponent pieces only
        ("8/8/8/3p1P2/4P3/8/8/8", "e4", {"e5", "d5"}),
    ],
)
def test_pawn_moves(fen: str, square: str, expected: set[str]) -> None:
    board = Board.from_fen(fen)
    assert destinations(candidate_pawn_moves(sq(square), board)) == expected


def test_pawn_on_the_edge_does_not_wrap_around() -> None:
    board = Board.from_fen("8/8/8/8/1p6/P7/8/8")
    assert destinations(candidate_pawn_moves(sq("a3"), board)) == {"a4", "b4"}


# -- ATTACKS ---
@pytest.mark.parametrize(
    "square, by_color, expected",
    [
        ("d5", Color.WHITE, True),
        ("f5", Color.WHITE, True),
        ("e5", Color.WHITE, False),  # pawns do not attack straight ahead
        ("d3", Color.WHITE, False),  # nor backwards
        ("d5", Color.BLACK, False),
    ],
)
def test_is_attacked_by_white_pawn(square: str, by_color: Color, expected: bool) -> None:
    board = Board.from_fen("8/8/8/8/4P3/8/8/8")
    assert is_attacked_by_pawn(sq(square), by_color, board) is expected


@pytest.mark.parametrize("square, expected", [("d3", True), ("f3", True), ("d5", False)])
def test_is_attacked_by_black_pawn(square: str, expected: bool) -> None:
    board = Board.from_fen("8/8/8/8/4p3/8/8/8")
    assert is_attacked_by_pawn(sq(square), Color.BLACK, board) is expected


def test_is_attacked_by_knight() -> None:
    board = Board.from_fen("8/8/8/3n4/8/8/8/8")
    assert is_attacked_by_knight(sq("e3"), Color.BLACK, board)
    assert not is_attacked_by_knight(sq("e4"), Color.BLACK, board)


def test_is_attacked_by_bishop_until_blocked() -> None:
    board = Board.from_fen("8/8/8/8/8/2N5/8/B7")
    assert is_attacked_by_bishop(sq("b2"), Color.WHITE, board)
    assert not is_attacked_by_bishop(sq("d4"), Color.WHITE, board)


def test_is_attacked_by_rook_not_by_queen() -> None:
    board = Board.from_fen("8/8/8/8/8/8/8/r7")
    assert is_attacked_by_rook(sq("a5"), Color.BLACK, board)
    assert not is_attacked_by_queen(sq("a5"), Color.BLACK, board)


def test_is_attacked_by_queen() -> None:
    board = Board.from_fen("8/8/8/3Q4/8/8/8/8")
    assert is_attacked_by_queen(sq("h1"), Color.WHITE, board)
    assert is_attacked_by_queen(sq("d1"), Color.WHITE, board)
    assert not is_attacked_by_queen(sq("e3"), Color.WHITE, board)


def test_is_attacked_by_king() -> None:
    board = Board.from_fen("8/8/8/8/8/8/8/4K3")
    assert is_attacked_by_king(sq("d2"), Color.WHITE, board)
    assert not is_attacked_by_king(sq("e3"), Color.WHITE, board)


# -- CASTLING / EN PASSANT / PROMOTION ---
def test_candidate_castling_move() -> None:
    move = candidate_castling_move(CastlingDirection.BLACK_KING_SIDE)
    rule = CASTLING_RULES[CastlingDirection.BLACK_KING_SIDE]
    assert move == Move(
        rule.king_from,
        rule.king_to,
        castling_direction=CastlingDirection.BLACK_KING_SIDE,
    )
    assert move.to_uci() == "e8g8"


def test_en_passant_moves_from_both_sides() -> None:
    """black just played d7d5, two white pawns stand next to it"""
    board = Board.from_fen("8/8/8/2PpP3/8/8/8/8")
    moves = en_passant_moves(sq("d6"), Color.WHITE, board)
    assert {move.from_square.to_algebraic() for move in moves} == {"c5", "e5"}
    assert all(move.is_en_passant and move.to_square == sq("d6") for move in moves)


def test_en_passant_moves_for_black() -> None:
    """white just played a2a4"""
    board = Board.from_fen("8/8/8/8/Pp6/8/8/8")
    moves = en_passant_moves(sq("a3"), Color.BLACK, board)
    assert moves == [Move(sq("b4"), sq("a3"), is_en_passant=True)]


def test_en_passant_ignores_opponent_pawns() -> None:
    board = Board.from_fen("8/8/8/2ppP3/8/8/8/8")
    moves = en_passant_moves(sq("d6"), Color.WHITE, board)
    assert [move.from_square for move in moves] == [sq("e5")]


def test_en_passant_capture_square() -> None:
    move = Move(sq("e5"), sq("d6"), is_en_passant=True)
    assert en_passant_capture_square(move) == sq("d5")


@pytest.mark.parametrize(
    "fen, uci, expected",
    [
        ("8/4P3/8/8/8/8/8/8", "e7e8", True),
        ("8/8/8/8/8/8/4p3/8", "e2e1", True),
        ("8/8/8/8/8/8/4P3/8", "e2e4", False),
        ("8/4R3/8/8/8/8/8/8", "e7e8", False),  # not a pawn
    ],
)
def test_is_pawn_push_to_promotion_square(fen: str, uci: str, expected: bool) -> None:
    board = Board.from_fen(fen)
    assert is_pawn_push_to_promotion_square(Move.from_uci(uci), board) is expected


def test_pawn_pushes_w_promotion() -> None:
    moves = pawn_pushes_w_promotion(Move.from_uci("a7b8"))
    assert [move.promote_to for move in moves] == [
        PieceType.QUEEN,
        PieceType.ROOK,
        PieceType.BISHOP,
        PieceType.KNIGHT,
    ]
    assert {(move.from_square, move.to_square) for move in moves} == {
        (sq("a7"), sq("b8"))
    }
