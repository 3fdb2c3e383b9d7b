"""
State of a single game, as owned by one peer.

Each peer holds exactly one GameState. Only the executor (src/chess/executor.py) produces new states;
the legality checks only read it.
"""

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Optional, Self

from src.chess.board import Board
from src.chess.castling import CASTLING_RULES, CastlingDirection, castling_directions
from src.chess.fen import STARTING_FEN, FENState
from src.chess.moves import Move
from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import Square
from src.core.exceptions import InvalidBoardError, InvalidFENError


@dataclass
class GameState:
    board: Board
    color_to_move: Color
    castling_rights: dict[CastlingDirection, bool]
    en_passant_square: Optional[Square]
    half_move_clock: int
    full_move_number: int
    # fingerprints of every position reached, oldest first (see rules.position_fingerprint)
    position_history: list[str] = field(default_factory=list)
    moves: list[Move] = field(default_factory=list)
    # derived: recomputed after every move, never set directly by callers
    is_check: bool = False

    @classmethod
    def from_fen(cls, fen: str = STARTING_FEN) -> Self:
        """
        Build the state described by the FEN, rejecting positions that cannot occur in a game.
        ----

        * exactly one king per color, no pawns on the back ranks (see `Board.validate()`)
        * castling rights only where king and rook still stand on their home squares
        * the side that just moved cannot be in check

        NOTE: position_history is left empty, see `executor.start()`
        """
        fen_state = FENState.from_fen(fen)
        board = Board.from_fen(fen_state.position)
        try:
            board.validate()
        except InvalidBoardError as error:
            raise InvalidFENError(f"FEN describes an invalid board: {error}") from error

        state = cls(
            board=board,
            color_to_move=fen_state.color_to_move,
            castling_rights=fen_state.castling_rights,
            en_passant_square=fen_state.en_passant_square,
            half_move_clock=fen_state.half_move_clock,
            full_move_number=fen_state.num_turns,
        )
        state._validate_castling_rights()
        state._validate_en_passant_square()
        if board.is_check(state.color_to_move.opponent):
            raise InvalidFENError(
                f"The side not to move is in check, this position cannot be reached: {fen}"
            )
        state.is_check = board.is_check(state.color_to_move)
        return state

    def _validate_castling_rights(self) -> None:
        for color in Color:
            for direction in castling_directions(color):
                if not self.castling_rights[direction]:
                    continue
                squares = CASTLING_RULES[direction]
                king_home = self.board.piece(squares.king_from) == Piece(
                    PieceType.KING, color
                )
                rook_home = self.board.piece(squares.rook_from) == Piece(
                    PieceType.ROOK, color
                )
                if not (king_home and rook_home):
                    raise InvalidFENError(
                        f"Castling right {direction.value!r} claimed, but king or rook left its home square."
                    )

    def _validate_en_passant_square(self) -> None:
        """The target square must be the one just skipped by an opponent pawn that advanced two squares."""
        target = self.en_passant_square
        if target is None:
            return
        # white to move: black's pawn skipped row 2 and landed on row 3. Black to move: row 5 skipped, landed on row 4
        expected_row = 2 if self.color_to_move == Color.WHITE else 5
        pawn_row = target.row + (1 if self.color_to_move == Color.WHITE else -1)
        pawn_square = Square(pawn_row, target.col)
        pawn = Piece(PieceType.PAWN, self.color_to_move.opponent)
        if (
            target.row != expected_row
            or self.board.piece(target) is not None
            or self.board.piece(pawn_square) != pawn
        ):
            raise InvalidFENError(
                f"En passant square {target.to_algebraic()} does not follow a two-square pawn advance."
            )

    def to_fen_state(self) -> FENState:
        return FENState(
            position=self.board.to_fen(),
            color_to_move=self.color_to_move,
            castling_rights=dict(self.castling_rights),
            en_passant_square=self.en_passant_square,
            half_move_clock=self.half_move_clock,
            num_turns=self.full_move_number,
        )

    def to_fen(self) -> str:
        return self.to_fen_state().to_fen()

    def copy(self) -> Self:
        return deepcopy(self)

    # --- CASTLING RIGHTS HELPERS ---
    def can_castle(self, color: Color) -> bool:
        """Any castling rights left for this color?"""
        return any(
            self.castling_rights[direction] for direction in castling_directions(color)
        )

    def revoke_castling_rights(self, direction: CastlingDirection) -> None:
        self.castling_rights[direction] = False

    def revoke_all_castling_rights(self, color: Color) -> None:
        for direction in castling_directions(color):
            self.revoke_castling_rights(direction)
