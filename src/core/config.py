"""
Engine settings.

Defaults follow the FIDE laws. Every value can be overridden through a PEER_CHESS_* environment variable.
"""

import os
from typing import Self

from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "PEER_CHESS_"


class EngineSettings(BaseModel):
    log_level: str = "INFO"
    # thresholds are counted in half-moves
    fifty_move_limit: int = Field(default=100, gt=0)
    seventy_five_move_limit: int = Field(default=150, gt=0)
    repetition_limit: int = Field(default=3, ge=2)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @classmethod
    def from_env(cls) -> Self:
        """Build the settings from the environment, falling back to the defaults for anything not set."""
        overrides = {
            name: os.environ[f"{ENV_PREFIX}{name.upper()}"]
            for name in cls.model_fields
            if f"{ENV_PREFIX}{name.upper()}" in os.environ
        }
        return cls.model_validate(overrides)
