"""
Forsyth-Edwards Notation: parsing, validation and writing.

Used to set up custom starting positions and to fingerprint positions for the repetition rule.
"""

from dataclasses import dataclass
from string import ascii_lowercase
from typing import Callable, Optional, Self

from src.chess.castling import CastlingDirection, castling_from_fen, castling_to_fen
from src.chess.pieces import FEN_TO_PIECE, Color
from src.chess.square import BOARD_DIMENSIONS, Square
from src.core.exceptions import InvalidFENError

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
EN_PASSANT_RANKS = {"3", "6"}


def is_valid_position(position: str) -> bool:
    """Only check the part of the FEN encoding for the board position."""
    num_rows, num_cols = BOARD_DIMENSIONS
    rank_fens = position.split("/")
    if len(rank_fens) != num_rows:
        return False

    for rank_fen in rank_fens:
        file_count = 0
        for character in rank_fen:
            if character.isdigit():
                file_count += int(character)
            elif character.lower() in FEN_TO_PIECE:
                file_count += 1
            else:
                return False
        if file_count != num_cols:
            return False
    return True


def is_valid_color_code(color: str) -> bool:
    return color in {"w", "b"}


def is_valid_castling_rights(castling: str) -> bool:
    """
    Either "-" or the available rights in the fixed order KQkq, each letter at most once.
    A well-formed encoding is exactly what writing its own parse result gives back.
    """
    return bool(castling) and castling_to_fen(castling_from_fen(castling)) == castling


def is_valid_en_passant(en_passant: str) -> bool:
    """A '-' or a square on the 3rd or 6th rank (the square a pawn skipped over)"""
    if en_passant == "-":
        return True
    return is_valid_square(en_passant) and en_passant[1:] in EN_PASSANT_RANKS


def is_valid_square(square: str) -> bool:
    """Valid square should be a letter for the file + a number for the rank"""
    num_rows, num_cols = BOARD_DIMENSIONS
    if len(square) < 2:
        return False
    file_char, rank_char = square[0], square[1:]
    if file_char not in ascii_lowercase[:num_cols]:
        return False
    return rank_char.isdigit() and 1 <= int(rank_char) <= num_rows


def is_valid_half_move_clock(counter: str) -> bool:
    return counter.isdigit()


def is_valid_full_move_number(counter: str) -> bool:
    """Counting starts at 1"""
    return counter.isdigit() and int(counter) >= 1


# One validator per space separated field, in FEN order
FEN_FIELDS: dict[str, Callable[[str], bool]] = {
    "piece placement": is_valid_position,
    "side to move": is_valid_color_code,
    "castling rights": is_valid_castling_rights,
    "en passant square": is_valid_en_passant,
    "half-move clock": is_valid_half_move_clock,
    "full-move number": is_valid_full_move_number,
}


def fen_problem(fen: str) -> Optional[str]:
    """Describe the first thing wrong with the FEN, or None if it is well-formed"""
    parts = fen.split(" ")
    if len(parts) != len(FEN_FIELDS):
        return f"expected {len(FEN_FIELDS)} space separated fields, got {len(parts)}"

    for (field_name, is_valid), value in zip(FEN_FIELDS.items(), parts):
        if not is_valid(value):
            return f"invalid {field_name}: {value!r}"
    return None


def is_valid_fen(fen: str) -> bool:
    return fen_problem(fen) is None


@dataclass
class FENState:
    """
    The six fields of a FEN string, parsed
    ----

    <placement> <side to move> <castling rights> <en passant square> <half-move clock> <full-move number>
    ex) rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1

    The placement string is interpreted by `Board.from_fen()`.
    """

    position: str
    color_to_move: Color
    castling_rights: dict[CastlingDirection, bool]
    en_passant_square: Optional[Square]
    half_move_clock: int
    num_turns: int

    @classmethod
    def from_fen(cls, fen: str) -> Self:
        problem = fen_problem(fen)
        if problem is not None:
            raise InvalidFENError(f"Cannot interpret {fen!r} as FEN: {problem}")

        position, active_color, castling, en_passant, half_move_clock, num_turns = fen.split(" ")
        return cls(
            position=position,
            color_to_move=Color.WHITE if active_color == "w" else Color.BLACK,
            castling_rights=castling_from_fen(castling),
            en_passant_square=(
                Square.from_algebraic(en_passant) if en_passant != "-" else None
            ),
            half_move_clock=int(half_move_clock),
            num_turns=int(num_turns),
        )

    def to_fen(self) -> str:
        """reverse operation: write a FEN from the given data"""
        return f"{self.position_fen()} {self.half_move_clock} {self.num_turns}"

    def position_fen(self) -> str:
        """The first four fields of the FEN: everything that identifies a position, without the move counters"""
        active_color = "w" if self.color_to_move == Color.WHITE else "b"
        castling_str = castling_to_fen(self.castling_rights)
        en_passant_algebraic = (
            self.en_passant_square.to_algebraic()
            if self.en_passant_square is not None
            else "-"
        )
        return f"{self.position} {active_color} {castling_str} {en_passant_algebraic}"
