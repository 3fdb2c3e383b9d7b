"""The Game board implements all rules that effect the `position` (in chess: the configuration of pieces on the board)"""

from collections.abc import Iterator
from contextlib import contextmanager
from copy import deepcopy
from dataclasses import dataclass
from typing import Optional, Self

from src.chess.castling import CASTLING_RULES
from src.chess.moves import (
    ATTACK_RULES,
    MOVEMENT_RULES,
    PROMOTION_ROW,
    CandidateMovesFn,
    Move,
    en_passant_capture_square,
)
from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import BOARD_DIMENSIONS, Square, all_squares
from src.core.exceptions import InvalidBoardError

STARTING_PLACEMENT = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"


@dataclass
class Board:
    position: dict[Square, Optional[Piece]]

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board using a given FEN string.

        That is, we supply the first part of the FEN string that denotes the board position
        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank (row 0), starting with rook on a8, knight on b8, etc.
        * pawns cover 7th rank (row 1) entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank (row 7) are the white pieces.

        NOTE: no validation happens here, see `src.chess.fen.fen_problem()`
        """
        position: dict[Square, Optional[Piece]] = {
            square: None for square in all_squares()
        }
        # FEN string is read from top rank (8th) to bottom rank (1st), which is exactly the row order
        for row, fen_one_rank in enumerate(fen_str.split("/")):
            col = 0
            for character in fen_one_rank:
                if character.isalpha():
                    # simple case: a letter directly denotes the piece that should be created
                    position[Square(row, col)] = Piece.from_fen(character)
                    col += 1
                else:
                    # A number denotes the amount of empty squares after each other
                    col += int(character)
        return cls(position)

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_PLACEMENT)

    @classmethod
    def empty(cls) -> Self:
        return cls({square: None for square in all_squares()})

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(self._row_to_fen(row) for row in range(BOARD_DIMENSIONS[0]))

    def _row_to_fen(self, row: int) -> str:
        """FEN string of a single row"""
        fen_characters: list[str] = []
        empty_count = 0
        for col in range(BOARD_DIMENSIONS[1]):
            piece = self.piece(Square(row, col))

            if piece is not None:
                if empty_count > 0:
                    fen_characters.append(str(empty_count))
                    empty_count = 0
                fen_characters.append(piece.to_fen())
            else:
                empty_count += 1

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    def copy(self) -> Self:
        """Deep copy: boards never share their position or pieces"""
        return deepcopy(self)

    # --- QUERIES ---
    def piece(self, square: Square) -> Optional[Piece]:
        return self.position[square]

    def locate_pieces(
        self, piece_type: PieceType, color: Optional[Color] = None
    ) -> list[Square]:
        return [
            square
            for square, piece in self.position.items()
            if piece is not None
            and piece.type == piece_type
            and (color is None or piece.color == color)
        ]

    def locate_color(self, color: Color) -> list[Square]:
        return [
            square
            for square, piece in self.position.items()
            if piece is not None and piece.color == color
        ]

    def king_square(self, color: Color) -> Square:
        """Every position has exactly one king of each color. Anything else is a corrupt board."""
        kings = self.locate_pieces(PieceType.KING, color)
        if len(kings) != 1:
            raise InvalidBoardError(
                f"Expected exactly one {color.name.lower()} king, found {len(kings)}."
            )
        return kings[0]

    def validate(self) -> None:
        """
        Structural checks for positions coming from outside (custom FEN, ...)
        ----

        * exactly one king per color
        * no pawn on either back rank (it could never have gotten there, it would have promoted)
        """
        for color in Color:
            self.king_square(color)

        back_ranks = set(PROMOTION_ROW.values())
        for square in self.locate_pieces(PieceType.PAWN):
            if square.row in back_ranks:
                raise InvalidBoardError(
                    f"Pawn found on a back rank: {square.to_algebraic()}"
                )

    # --- CHECKS / ATTACKS ---
    def is_square_attacked(self, square: Square, by_color: Color) -> bool:
        """
        Is the square attacked by any piece of `by_color`?
        ----

        Only raw attack patterns are used (never full legality), so a pinned piece still attacks.
        """
        return any(
            is_attacked(square, by_color, self) for is_attacked in ATTACK_RULES.values()
        )

    def is_check(self, color: Color) -> bool:
        """Is the king of the given color under attack?"""
        return self.is_square_attacked(self.king_square(color), color.opponent)

    def is_any_occupied(self, squares: list[Square]) -> bool:
        return any(self.piece(square) is not None for square in squares)

    def is_any_under_attack(self, squares: list[Square], by_color: Color) -> bool:
        return any(self.is_square_attacked(square, by_color) for square in squares)

    # --- CANDIDATE MOVES ---
    def generate_candidate_moves(self, color: Color) -> list[Move]:
        """
        Before knowing the set of legal moves, we use raycasting to find candidate moves, which will later be tested for legality
        (making sure it does not put yourself in check.)

        ---
        NOTE: En passant and castling are taken care of in src/chess/rules.py, as they depend on more than the board.
        """
        candidate_moves: list[Move] = []
        for starting_square in self.locate_color(color):
            candidate_moves.extend(self.candidate_moves_from(starting_square))
        return candidate_moves

    def candidate_moves_from(self, square: Square) -> list[Move]:
        piece = self.piece(square)
        if piece is None:
            return []
        movement_rule: CandidateMovesFn = MOVEMENT_RULES[piece.type]
        return movement_rule(square, self)

    # --- UPDATES ---
    def place_piece(self, piece: Piece, square: Square) -> None:
        self.position[square] = piece

    def remove_piece(self, square: Square) -> None:
        self.position[square] = None

    def move_piece(self, move: Move) -> None:
        """Update the position on the board (only the piece on the starting square moves)"""
        piece_that_moved = self.piece(move.from_square)
        self.position[move.from_square] = None
        self.position[move.to_square] = piece_that_moved

    def apply_move(self, move: Move) -> Optional[Piece]:
        """
        Make the full move on the board, returns the captured piece (if any).
        ----

        * castling: the rook hops over the king in the same update
        * en passant: the captured pawn is removed from its actual square, not the target square
        * promotion: a new piece replaces the pawn on the target square
        """
        moving_piece = self.piece(move.from_square)
        if move.is_en_passant:
            capture_square = en_passant_capture_square(move)
            captured = self.piece(capture_square)
            self.remove_piece(capture_square)
        else:
            captured = self.piece(move.to_square)

        self.move_piece(move)

        if move.castling_direction is not None:
            squares = CASTLING_RULES[move.castling_direction]
            self.move_piece(Move(squares.rook_from, squares.rook_to))

        if move.promote_to is not None and moving_piece is not None:
            self.place_piece(Piece(move.promote_to, moving_piece.color), move.to_square)

        return captured

    @contextmanager
    def simulate(self, move: Move) -> Iterator[Self]:
        """
        Try out a move and restore the position afterwards
        ----

        usage:
            with board.simulate(move) as trial:
                in_check = trial.is_check(color)

        The snapshot is restored in a `finally`, so an exception inside the block cannot leak the trial position.
        """
        snapshot = dict(self.position)
        try:
            self.apply_move(move)
            yield self
        finally:
            self.position = snapshot

    # --- MATERIAL ---
    def count_material(self) -> dict[Color, int]:
        """Tally the points of material each player has on the board"""
        return {color: self._count_material_player(color) for color in Color}

    def player_pieces(self, color: Color) -> list[Piece]:
        """find all pieces of a given color"""
        return [
            piece
            for piece in self.position.values()
            if piece is not None and piece.color == color
        ]

    def _count_material_player(self, color: Color) -> int:
        """Tally the points of material for a specific player"""
        return sum([piece.points for piece in self.player_pieces(color)])
