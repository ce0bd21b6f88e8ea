"""
logging.py — ROI Backend Logging Setup

Purpose:
- One format for API requests and engine runs:
  timestamp | level | logger | message
- Let the calculation engine run at its own level. The engine reports every
  fallback it takes (default hourly rate, unknown unit, skipped row) at DEBUG,
  which is too chatty for the API logs but useful when auditing a result.

This module does NOT:
- Ship logs anywhere but the console.
"""

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Parent logger of every module under roi_app.services.roi
ENGINE_LOGGER_NAME = "roi_app.services.roi"


def _resolve_level(level: Optional[str], fallback: int = logging.INFO) -> int:
    if level is None:
        return fallback
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else fallback


def configure_logging(level: str = "INFO", engine_level: Optional[str] = None) -> int:
    """
    Configure the root logger and, optionally, the engine logger.

    Args:
        level: Root level name ("DEBUG", "INFO", ...); unknown names mean INFO
        engine_level: Level for the calculation engine; None inherits `level`

    Returns:
        Effective level of the engine logger

    Call once at startup (main.py).
    """
    root_level = _resolve_level(level)
    logging.basicConfig(level=root_level, format=LOG_FORMAT)

    engine = logging.getLogger(ENGINE_LOGGER_NAME)
    engine.setLevel(_resolve_level(engine_level, logging.NOTSET))

    logging.getLogger(__name__).info(
        "Logging initialized: root=%s engine=%s",
        logging.getLevelName(root_level),
        logging.getLevelName(engine.getEffectiveLevel()),
    )
    return engine.getEffectiveLevel()


def get_logger(name: str) -> logging.Logger:
    """
    Module logger; pass `__name__` so engine modules sit under ENGINE_LOGGER_NAME.

        logger = get_logger(__name__)
    """
    return logging.getLogger(name)
