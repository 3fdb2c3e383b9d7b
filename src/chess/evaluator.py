"""
Game-end evaluation
----

Run after every executed move, for the side that is now to move.

1. checkmate / stalemate (mutually exclusive, evaluated first)
2. draws: dead position / insufficient material, 75-move rule, 50-move rule, threefold repetition

Several draw conditions can hold at once. The first one in the order above is reported.
"""

from dataclasses import dataclass
from typing import Optional

from src.chess.board import Board
from src.chess.pieces import MINOR_PIECES, Color, PieceType
from src.chess.rules import has_legal_move, position_fingerprint
from src.chess.square import Square
from src.chess.state import GameState
from src.core.config import EngineSettings
from src.core.shared_types import Status


@dataclass(frozen=True)
class Outcome:
    status: Status
    winner: Optional[Color] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


IN_PROGRESS = Outcome(Status.IN_PROGRESS)


def evaluate(state: GameState, settings: Optional[EngineSettings] = None) -> Outcome:
    settings = settings or EngineSettings()
    color = state.color_to_move

    if not has_legal_move(state):
        if state.board.is_check(color):
            return Outcome(Status.CHECKMATE, winner=color.opponent)
        return Outcome(Status.STALEMATE)

    draw = draw_status(state, settings)
    if draw is not None:
        return Outcome(draw)
    return IN_PROGRESS


def draw_status(state: GameState, settings: EngineSettings) -> Optional[Status]:
    """The first draw condition that holds, if any"""
    material_draw = material_draw_status(state.board)
    if material_draw is not None:
        return material_draw

    if state.half_move_clock >= settings.seventy_five_move_limit:
        return Status.DRAW_SEVENTY_FIVE_MOVE_RULE

    if state.half_move_clock >= settings.fifty_move_limit:
        return Status.DRAW_FIFTY_MOVE_RULE

    if is_repetition(state, settings.repetition_limit):
        return Status.DRAW_REPETITION

    return None


def material_draw_status(board: Board) -> Optional[Status]:
    """
    Neither side can ever checkmate, whatever the moves
    ----

    * only kings and bishops left, with every bishop on the same square color --> dead position
        (covers king + bishop vs king + bishop with same-colored bishops)
    * neither side has more than king + one minor piece --> insufficient material
        (king vs king, king + minor vs king, king + minor vs king + minor)

    NOTE: king + two knights vs king is NOT a draw here: mate cannot be forced, but it exists if the defender blunders.
    """
    minor_pieces: dict[Color, list[tuple[PieceType, Square]]] = {color: [] for color in Color}
    for square, piece in board.position.items():
        if piece is None or piece.type == PieceType.KING:
            continue
        if piece.type not in MINOR_PIECES:
            # any pawn, rook or queen can still mate (pawns by promoting)
            return None
        minor_pieces[piece.color].append((piece.type, square))

    all_minors = [minor for minors in minor_pieces.values() for minor in minors]
    only_bishops = all(piece_type == PieceType.BISHOP for piece_type, _ in all_minors)
    square_colors = {square.is_light for _, square in all_minors}
    if len(all_minors) >= 2 and only_bishops and len(square_colors) == 1:
        return Status.DRAW_DEAD_POSITION

    if all(len(minors) <= 1 for minors in minor_pieces.values()):
        return Status.DRAW_INSUFFICIENT_MATERIAL

    return None


def is_repetition(state: GameState, limit: int = 3) -> bool:
    """Check if the current position occurred (at least) `limit` times, the current occurrence included"""
    if not state.position_history:
        return False
    current = position_fingerprint(state)
    return state.position_history.count(current) >= limit
