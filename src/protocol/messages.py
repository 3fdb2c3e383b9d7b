"""
Wire messages exchanged between the two peers.

A committed move is broadcast as one UTF-8 encoded JSON object:

    {"type": "move", "from": {"row": 6, "col": 4}, "to": {"row": 4, "col": 4}, "promotion": null}

`promotion` is one of "queen", "rook", "bishop", "knight" or null.
Other message types (chat, draw offers, ...) belong to the surrounding application and are not decoded here.
"""

from typing import Literal, Optional, Self

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError

from src.chess.moves import Move
from src.chess.pieces import PieceType
from src.chess.square import BOARD_DIMENSIONS, Square
from src.core.exceptions import MalformedMessageError, UnsupportedMessageError

MOVE_MESSAGE_TYPE = "move"
PromotionName = Literal["queen", "rook", "bishop", "knight"]

PROMOTION_TO_PIECE: dict[str, PieceType] = {
    "queen": PieceType.QUEEN,
    "rook": PieceType.ROOK,
    "bishop": PieceType.BISHOP,
    "knight": PieceType.KNIGHT,
}
PIECE_TO_PROMOTION: dict[PieceType, str] = {
    value: key for key, value in PROMOTION_TO_PIECE.items()
}


# --- MESSAGE MODELS ---
class SquareModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    row: StrictInt = Field(ge=0, lt=BOARD_DIMENSIONS[0])
    col: StrictInt = Field(ge=0, lt=BOARD_DIMENSIONS[1])

    @classmethod
    def from_square(cls, square: Square) -> Self:
        return cls(row=square.row, col=square.col)

    def to_square(self) -> Square:
        return Square(self.row, self.col)


class MessageEnvelope(BaseModel):
    """Just enough to route a message by its type"""

    model_config = ConfigDict(extra="allow")

    type: str


class MoveMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    type: Literal["move"] = MOVE_MESSAGE_TYPE
    from_square: SquareModel = Field(alias="from")
    to_square: SquareModel = Field(alias="to")
    promotion: Optional[PromotionName] = None

    @classmethod
    def from_move(cls, move: Move) -> Self:
        promotion = (
            PIECE_TO_PROMOTION[move.promote_to]
            if move.promote_to is not None
            else None
        )
        return cls(
            from_square=SquareModel.from_square(move.from_square),
            to_square=SquareModel.from_square(move.to_square),
            promotion=promotion,
        )

    def to_request(self) -> tuple[Square, Square, Optional[PieceType]]:
        """The arguments for `Game.propose_move()`"""
        promotion = (
            PROMOTION_TO_PIECE[self.promotion] if self.promotion is not None else None
        )
        return self.from_square.to_square(), self.to_square.to_square(), promotion

    def to_bytes(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")


# --- ENCODING / DECODING ---
def encode_move(move: Move) -> bytes:
    """Only the squares and the promotion choice travel: the receiver works out castling / en passant itself."""
    return MoveMessage.from_move(move).to_bytes()


def decode_message(raw: bytes | str) -> MoveMessage:
    """
    Parse a received payload into a move message
    ----

    raises:
    * MalformedMessageError: not UTF-8, not JSON, missing/invalid fields, squares off the board, unknown promotion piece
    * UnsupportedMessageError: valid message, but not a move (the caller can route it elsewhere)
    """
    try:
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
    except UnicodeDecodeError as error:
        raise MalformedMessageError("Message is not valid UTF-8.") from error

    try:
        envelope = MessageEnvelope.model_validate_json(text)
    except ValidationError as error:
        raise MalformedMessageError(f"Cannot interpret message: {error}") from error

    if envelope.type != MOVE_MESSAGE_TYPE:
        raise UnsupportedMessageError(f"Unsupported message type: {envelope.type!r}")

    try:
        return MoveMessage.model_validate_json(text)
    except ValidationError as error:
        raise MalformedMessageError(f"Invalid move message: {error}") from error
