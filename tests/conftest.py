"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures required for testing multiple layers.
"""

from typing import Callable, Optional

import pytest

from src.chess import executor
from src.chess.game import Game, MoveResult
from src.chess.moves import Move
from src.chess.state import GameState

# Kings only, on their usual squares: the smallest position moves can be played in.
KINGS_ONLY_FEN = "4k3/8/8/8/8/8/8/4K3 w - - 0 1"
EMPTY_PLACEMENT = "/".join(["8"] * 8)


@pytest.fixture
def state_from_fen() -> Callable[[str], GameState]:
    """Call the inner function with a FEN to get a fresh (validated) state"""

    def _create_state(fen: str) -> GameState:
        return executor.start(fen)

    return _create_state


@pytest.fixture
def game_from_fen() -> Callable[[Optional[str]], Game]:
    """Call the inner function with a FEN (or None for the standard starting position)"""

    def _create_game(fen: Optional[str] = None) -> Game:
        return Game.new_game(starting_fen=fen)

    return _create_game


@pytest.fixture
def play_uci() -> Callable[..., MoveResult]:
    """Play a sequence of UCI moves on a game, failing the test as soon as one is not accepted. Returns the last result."""

    def _play(game: Game, *ucis: str) -> MoveResult:
        result: Optional[MoveResult] = None
        for uci in ucis:
            move = Move.from_uci(uci)
            result = game.propose_move(move.from_square, move.to_square, move.promote_to)
            assert result.accepted, f"{uci} was rejected: {result.reason}"
        assert result is not None
        return result

    return _play
