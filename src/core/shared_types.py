"""
Type definitions used across layers

The string values are part of the wire contract with the remote peer and of the results handed to the UI.
"""

from enum import StrEnum


class Status(StrEnum):
    IN_PROGRESS = "in progress"
    AWAITING_PROMOTION = "awaiting promotion"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW_INSUFFICIENT_MATERIAL = "draw by insufficient material"
    DRAW_DEAD_POSITION = "draw by dead position"
    DRAW_REPETITION = "draw by repetition"
    DRAW_FIFTY_MOVE_RULE = "draw by 50-move rule"
    DRAW_SEVENTY_FIVE_MOVE_RULE = "draw by 75-move rule"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self not in (Status.IN_PROGRESS, Status.AWAITING_PROMOTION)

    @property
    def is_draw(self) -> bool:
        return self == Status.STALEMATE or self.name.startswith("DRAW_")
