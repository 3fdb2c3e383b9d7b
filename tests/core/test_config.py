"""Unit tests for src/core/config.py and src/core/log.py"""

import logging

import pytest
from pydantic import ValidationError

from src.core.config import EngineSettings
from src.core.log import configure_logging


def test_defaults() -> None:
    settings = EngineSettings()
    assert settings.log_level == "INFO"
    assert settings.fifty_move_limit == 100
    assert settings.seventy_five_move_limit == 150
    assert settings.repetition_limit == 3


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PEER_CHESS_LOG_LEVEL", "debug")
    monkeypatch.setenv("PEER_CHESS_REPETITION_LIMIT", "5")
    settings = EngineSettings.from_env()
    assert settings.log_level == "DEBUG"
    assert settings.repetition_limit == 5
    assert settings.fifty_move_limit == 100


@pytest.mark.parametrize(
    "overrides",
    [
        {"log_level": "verbose"},
        {"fifty_move_limit": 0},
        {"repetition_limit": 1},
    ],
)
def test_invalid_settings(overrides: dict) -> None:
    with pytest.raises(ValidationError):
        EngineSettings(**overrides)


def test_invalid_env_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PEER_CHESS_FIFTY_MOVE_LIMIT", "fifty")
    with pytest.raises(ValidationError):
        EngineSettings.from_env()


def test_configure_logging() -> None:
    configure_logging(EngineSettings(log_level="warning"))
    assert logging.getLogger("src").level == logging.WARNING
    configure_logging(EngineSettings(log_level="debug"))
    assert logging.getLogger("src.chess.game").getEffectiveLevel() == logging.DEBUG
