"""
Custom exceptions used across layers.

Everything the engine raises on purpose derives from GameError, so a caller can catch that one type at its boundary.
"""


class GameError(Exception):
    """Base class of all errors raised by the chess engine."""


# --- INPUT AT THE BOUNDARY ---
class InvalidMoveRequestError(GameError):
    """A move request that cannot even be interpreted (square off the board, unknown promotion piece, ...)"""


class InvalidFENError(GameError):
    """String could not be parsed as FEN."""


class InvalidBoardError(GameError):
    """The board breaks a structural invariant (ex. not exactly one king per color). Unrecoverable for that game."""


# --- GAME FLOW ---
class GameStateError(GameError):
    """Operation not allowed in the current status of the game (ex. moving after checkmate)."""


class NotYourTurnError(GameError):
    """A player tried to move while it is the opponent's turn."""


# --- EXECUTOR MISUSE (programming errors) ---
class ExecutorMisuseError(GameError):
    """The executor was handed a move that was never validated. Indicates a bug in the caller."""


class PromotionRequiredError(ExecutorMisuseError):
    """A pawn reaches the last rank, but no piece type to promote into was supplied."""


# --- PEER PROTOCOL ---
class ProtocolError(GameError):
    """Anything that goes wrong while exchanging moves with the remote peer."""


class MalformedMessageError(ProtocolError):
    """Payload is not a valid move message (bad JSON, wrong fields, squares off the board, ...)"""


class UnsupportedMessageError(MalformedMessageError):
    """Well-formed message, but of a type the engine does not handle (chat, draw offers, ...)"""


class DesyncError(ProtocolError):
    """A received move is illegal against the local game state: both copies of the game no longer agree."""
