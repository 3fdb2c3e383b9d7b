"""
The Game class is the entrypoint into the domain layer.
It is responsible for orchestrating all the business logic required to play a turn:
validate the proposed move, commit it, and evaluate whether the game has ended.

Local input and moves received from the remote peer go through the very same `propose_move()`.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Self

from src.chess import executor, rules
from src.chess.evaluator import IN_PROGRESS, Outcome, evaluate
from src.chess.moves import Move
from src.chess.pieces import PROMOTION_OPTIONS, Color, PieceType
from src.chess.square import Square
from src.chess.state import GameState
from src.core.config import EngineSettings
from src.core.exceptions import (
    GameStateError,
    InvalidBoardError,
    InvalidMoveRequestError,
)
from src.core.shared_types import Status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingPromotion:
    """A legal pawn move onto the last rank, waiting for the player to pick a piece"""

    from_square: Square
    to_square: Square
    options: tuple[PieceType, ...] = PROMOTION_OPTIONS


@dataclass(frozen=True)
class MoveResult:
    """
    What the caller gets back after proposing a move.
    ----

    Enough to re-render the board (`state`), broadcast the move (`move`),
    and pick a notification (`is_check`, `outcome`).
    """

    accepted: bool
    state: GameState
    outcome: Outcome = IN_PROGRESS
    move: Optional[Move] = None
    promotion_pending: bool = False
    reason: Optional[str] = None

    @property
    def is_check(self) -> bool:
        return self.state.is_check

    @property
    def terminal(self) -> Optional[Outcome]:
        """Only set once the game has ended"""
        return self.outcome if self.outcome.is_terminal else None


class Game:
    # --- DOMAIN LAYER API ---

    def __init__(
        self,
        state: Optional[GameState] = None,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        self.settings = settings or EngineSettings()
        self.state = state if state is not None else executor.start()
        self.outcome = evaluate(self.state, self.settings)
        self.pending_promotion: Optional[PendingPromotion] = None

    @classmethod
    def new_game(
        cls,
        starting_fen: Optional[str] = None,
        settings: Optional[EngineSettings] = None,
    ) -> Self:
        """Start from the standard position, or from a custom (validated) FEN."""
        return cls(executor.start(starting_fen), settings)

    @property
    def status(self) -> Status:
        if self.pending_promotion is not None:
            return Status.AWAITING_PROMOTION
        return self.outcome.status

    @property
    def winner(self) -> Optional[Color]:
        """Only checkmate has a winner"""
        return self.outcome.winner

    @property
    def color_to_move(self) -> Color:
        return self.state.color_to_move

    def propose_move(
        self,
        from_square: Square,
        to_square: Square,
        promotion: Optional[PieceType] = None,
    ) -> MoveResult:
        """
        Attempt to make a move
        -----

        1. reject malformed requests (raises InvalidMoveRequestError, nothing changes)
        2. reject moves once the game is over
        3. pawn onto the last rank without a choice? --> remember it as pending promotion, nothing is committed
        4. reject illegal moves (accepted=False, nothing changes, a pending promotion keeps waiting)
        5. execute the move and evaluate the new position
        """
        self._validate_request(from_square, to_square, promotion)

        if self.outcome.is_terminal:
            return self._reject(f"Game is over: {self.outcome.status}")

        if promotion is None and rules.requires_promotion(
            self.state, from_square, to_square
        ):
            self.pending_promotion = PendingPromotion(from_square, to_square)
            logger.debug(
                "Promotion pending for %s%s",
                from_square.to_algebraic(),
                to_square.to_algebraic(),
            )
            return MoveResult(
                accepted=False,
                state=self.state,
                outcome=self.outcome,
                promotion_pending=True,
                reason="Choose a piece to promote into.",
            )

        move = rules.move_for(self.state, from_square, to_square, promotion)
        if move is None:
            uci = f"{from_square.to_algebraic()}{to_square.to_algebraic()}"
            return self._reject(f"Move not allowed: {uci}")

        # an accepted move replaces any promotion still waiting for a choice
        self.pending_promotion = None
        return self._commit(move)

    def choose_promotion(self, piece_type: PieceType) -> MoveResult:
        """Complete the pending promotion with the chosen piece."""
        if self.pending_promotion is None:
            raise GameStateError("No promotion is pending.")
        pending = self.pending_promotion
        return self.propose_move(pending.from_square, pending.to_square, piece_type)

    def cancel_promotion(self) -> None:
        self.pending_promotion = None

    def legal_moves(self) -> list[Move]:
        """Legal moves of the side to move (none once the game is over)."""
        if self.outcome.is_terminal:
            return []
        return rules.legal_moves(self.state)

    def legal_destinations(self, square: Square) -> list[Square]:
        if self.outcome.is_terminal or not square.is_within_bounds():
            return []
        return rules.legal_destinations(self.state, square)

    def abort(self, reason: str) -> None:
        """End the game without a result (ex. both peers no longer agree on the position)."""
        logger.warning("Game aborted: %s", reason)
        self.pending_promotion = None
        self.outcome = Outcome(Status.ABORTED)

    def restart(self, starting_fen: Optional[str] = None) -> None:
        """Throw away the current game and set up a fresh one."""
        self.state = executor.start(starting_fen)
        self.outcome = evaluate(self.state, self.settings)
        self.pending_promotion = None
        logger.info("New game started")

    # -- PRIVATE HELPERS ---
    def _validate_request(
        self,
        from_square: Square,
        to_square: Square,
        promotion: Optional[PieceType],
    ) -> None:
        for square in (from_square, to_square):
            if not isinstance(square, Square) or not square.is_within_bounds():
                raise InvalidMoveRequestError(f"Not a square on the board: {square!r}")
        if promotion is not None and promotion not in PROMOTION_OPTIONS:
            raise InvalidMoveRequestError(
                f"Cannot promote into {promotion!r}. Pick one from {', '.join(p.name.lower() for p in PROMOTION_OPTIONS)}"
            )

    def _reject(self, reason: str) -> MoveResult:
        logger.debug("Move rejected: %s", reason)
        return MoveResult(
            accepted=False, state=self.state, outcome=self.outcome, reason=reason
        )

    def _commit(self, move: Move) -> MoveResult:
        try:
            self.state = executor.execute(self.state, move)
        except InvalidBoardError as error:
            # a corrupt board cannot be played on
            self.abort(f"Invalid board after {move.to_uci()}: {error}")
            raise
        self.outcome = evaluate(self.state, self.settings)
        logger.info(
            "Move %s played, %s to move", move.to_uci(), self.color_to_move.name.lower()
        )
        if self.outcome.is_terminal:
            winner = self.winner.name.lower() if self.winner else "none"
            logger.info("Game over: %s (winner: %s)", self.outcome.status, winner)
        return MoveResult(
            accepted=True, state=self.state, outcome=self.outcome, move=move
        )
