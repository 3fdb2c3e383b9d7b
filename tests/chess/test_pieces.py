"""Unit tests for /src/chess/pieces.py"""

import pytest

from src.chess.pieces import (
    FEN_TO_PIECE,
    PIECE_TO_FEN,
    PROMOTION_OPTIONS,
    Color,
    Piece,
    PieceType,
)


@pytest.mark.parametrize("char", [char.upper() for char in FEN_TO_PIECE.keys()])
def test_creating_white_piece_from_fen(char: str) -> None:
    """Capital letters are used for white pieces"""
    piece = Piece.from_fen(char)
    assert piece.type == FEN_TO_PIECE[char.lower()]
    assert piece.color == Color.WHITE


@pytest.mark.parametrize("char", [char.lower() for char in FEN_TO_PIECE.keys()])
def test_creating_black_piece_from_fen(char: str) -> None:
    """Lower case letters are used for black pieces"""
    piece = Piece.from_fen(char)
    assert piece.type == FEN_TO_PIECE[char.lower()]
    assert piece.color == Color.BLACK


@pytest.mark.parametrize("piece_type", list(PieceType))
def test_white_pieces_to_fen(piece_type: PieceType) -> None:
    piece = Piece(piece_type, Color.WHITE)
    assert piece.to_fen() == PIECE_TO_FEN[piece_type].upper()


@pytest.mark.parametrize("piece_type", list(PieceType))
def test_black_pieces_to_fen(piece_type: PieceType) -> None:
    piece = Piece(piece_type, Color.BLACK)
    assert piece.to_fen() == PIECE_TO_FEN[piece_type].lower()


@pytest.mark.parametrize(
    "piece_type, points",
    [
        (PieceType.PAWN, 1),
        (PieceType.KNIGHT, 3),
        (PieceType.BISHOP, 3),
        (PieceType.ROOK, 5),
        (PieceType.QUEEN, 9),
        (PieceType.KING, 0),
    ],
)
def test_piece_points(piece_type: PieceType, points: int) -> None:
    """The king does not count towards material"""
    assert Piece(piece_type, Color.WHITE).points == points


def test_promotion_options_exclude_king_and_pawn() -> None:
    assert set(PROMOTION_OPTIONS) == {
        PieceType.QUEEN,
        PieceType.ROOK,
        PieceType.BISHOP,
        PieceType.KNIGHT,
    }


def test_opponent_color() -> None:
    assert Color.WHITE.opponent == Color.BLACK
    assert Color.BLACK.opponent == Color.WHITE
