"""
A square on the board

(placed in its own module as multiple other modules need to import it)

Coordinates are (row, col), both 0-based:
* row 0 is black's back rank (the 8th rank), row 7 is white's back rank (the 1st rank)
* col 0 is the a-file, col 7 the h-file

This is independent of which side a peer renders at the top of the screen.
"""

from __future__ import annotations

from dataclasses import dataclass

# Chess board is always 8x8. Just in case we want to try some funky stuff, make it adjustable
BOARD_DIMENSIONS = (8, 8)


@dataclass(frozen=True)
class Square:
    row: int
    col: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a8' is (0, 0), 'h1' is (7, 7)"""
        col = ord(sq[0]) - ord("a")
        row = BOARD_DIMENSIONS[0] - int(sq[1:])
        return cls(row, col)

    def to_algebraic(self) -> str:
        return f"{chr(self.col + ord('a'))}{BOARD_DIMENSIONS[0] - self.row}"

    def is_within_bounds(self) -> bool:
        return (0 <= self.row < BOARD_DIMENSIONS[0]) and (
            0 <= self.col < BOARD_DIMENSIONS[1]
        )

    def offset(self, d_row: int, d_col: int) -> Square:
        """The square reached by stepping along a vector. May land off the board."""
        return Square(self.row + d_row, self.col + d_col)

    @property
    def is_light(self) -> bool:
        """a8 (0, 0) is a light square, like h1."""
        return (self.row + self.col) % 2 == 0


def all_squares() -> list[Square]:
    """Every square of the board, row by row starting at black's back rank"""
    return [
        Square(row, col)
        for row in range(BOARD_DIMENSIONS[0])
        for col in range(BOARD_DIMENSIONS[1])
    ]
