"""
Orchestration of one peer's side of a two-player game.

There is no server: each peer owns its own Game and both stay in sync by replaying the same moves in the same order.
* local moves are validated and committed first, then encoded for broadcast
* received moves go through the exact same validation; they are never trusted as pre-validated

A received move that is illegal locally means both copies no longer agree (bug, tampering, lost messages).
That is fatal for the session: the game is aborted and DesyncError is raised.
Recovering (ex. a full resync) is left to the `on_desync` hook.

NOTE: ordering is the transport's job. Moves must arrive in the order they were committed.
"""

import logging
from typing import Callable, NoReturn, Optional, Self

from src.chess.game import Game, MoveResult
from src.chess.pieces import Color, PieceType
from src.chess.square import Square
from src.core.config import EngineSettings
from src.core.exceptions import (
    DesyncError,
    GameStateError,
    MalformedMessageError,
    NotYourTurnError,
)
from src.core.shared_types import Status
from src.protocol.messages import decode_message, encode_move

logger = logging.getLogger(__name__)

DesyncHandler = Callable[[DesyncError], None]


class PeerSession:
    """Orchestration of the local game and the messages exchanged with the remote peer."""

    def __init__(
        self,
        local_color: Color,
        game: Optional[Game] = None,
        settings: Optional[EngineSettings] = None,
        on_desync: Optional[DesyncHandler] = None,
    ) -> None:
        self.local_color = local_color
        self.game = game if game is not None else Game.new_game(settings=settings)
        self.on_desync = on_desync

    @classmethod
    def host(cls, **kwargs) -> Self:
        """The peer that opened the room plays white."""
        return cls(Color.WHITE, **kwargs)

    @classmethod
    def guest(cls, **kwargs) -> Self:
        """The peer that joined plays black."""
        return cls(Color.BLACK, **kwargs)

    @property
    def remote_color(self) -> Color:
        return self.local_color.opponent

    @property
    def is_local_turn(self) -> bool:
        return self.game.color_to_move == self.local_color

    @property
    def status(self) -> Status:
        return self.game.status

    # -- LOCAL INPUT ---
    def play_local(
        self,
        from_square: Square,
        to_square: Square,
        promotion: Optional[PieceType] = None,
    ) -> tuple[MoveResult, Optional[bytes]]:
        """
        Make a move for the local player.
        ----

        Returns the result, plus the payload to broadcast when the move was committed (None otherwise).
        """
        self._assert_not_aborted()
        if not self.is_local_turn:
            raise NotYourTurnError(
                f"It is not your turn. Waiting for {self.remote_color.name.lower()} to make a move first."
            )
        result = self.game.propose_move(from_square, to_square, promotion)
        return result, self._payload(result)

    def choose_promotion(
        self, piece_type: PieceType
    ) -> tuple[MoveResult, Optional[bytes]]:
        """The local player picked a piece for the pending promotion."""
        self._assert_not_aborted()
        result = self.game.choose_promotion(piece_type)
        return result, self._payload(result)

    # -- REMOTE INPUT ---
    def receive(self, raw: bytes | str) -> MoveResult:
        """
        Replay a move received from the remote peer.
        ----

        raises:
        * MalformedMessageError / UnsupportedMessageError: payload is not a move message. The game is left untouched.
        * DesyncError: the move cannot be played on the local game. The session is aborted.
        """
        self._assert_not_aborted()
        try:
            message = decode_message(raw)
        except MalformedMessageError as error:
            logger.warning("Discarded message from peer: %s", error)
            raise

        if self.game.outcome.is_terminal:
            self._desync(f"Received a move after the game ended ({self.status}).")
        if self.is_local_turn:
            self._desync("Received a move from the peer while it is our turn.")

        from_square, to_square, promotion = message.to_request()
        result = self.game.propose_move(from_square, to_square, promotion)
        if result.promotion_pending:
            self.game.cancel_promotion()
            self._desync("Received a promotion move without a promotion choice.")
        if not result.accepted:
            self._desync(f"Received an illegal move: {result.reason}")
        return result

    def restart(self) -> None:
        """Start over with a fresh game (same colors)."""
        self.game.restart()

    # -- Internal helpers --
    def _payload(self, result: MoveResult) -> Optional[bytes]:
        if not result.accepted or result.move is None:
            return None
        return encode_move(result.move)

    def _assert_not_aborted(self) -> None:
        if self.status == Status.ABORTED:
            raise GameStateError(
                "Session was aborted after a desync. Restart the game first."
            )

    def _desync(self, reason: str) -> NoReturn:
        error = DesyncError(reason)
        logger.error("Desynchronized from peer: %s", reason)
        self.game.abort(reason)
        if self.on_desync is not None:
            self.on_desync(error)
        raise error
