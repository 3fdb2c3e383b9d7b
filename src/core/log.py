"""Logging setup. Modules log through `logging.getLogger(__name__)`; the embedding application calls `configure_logging` once."""

import logging

from src.core.config import EngineSettings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: EngineSettings | None = None) -> None:
    settings = settings or EngineSettings.from_env()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    logging.getLogger("src").setLevel(settings.log_level)
