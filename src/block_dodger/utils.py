"""
Block Dodger utils
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger("block_dodger")

DATA_DIR_ENV = "BLOCK_DODGER_HOME"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure the shared package logger.

    :param level: Name of the logging level (``DEBUG``, ``INFO`` ...)
    :type level: str

    :raises ValueError: If the level name is unknown.
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")

    logging.basicConfig(
        level=numeric,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.setLevel(numeric)


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp value into the inclusive range [lo, hi]."""
    return lo if value < lo else hi if value > hi else value


def find_data_dir(create: bool = True) -> Path:
    """Return the directory used for local saves (profile, leaderboard).

    Resolution order:
    - ``$BLOCK_DODGER_HOME`` when set
    - ``~/.block_dodger`` otherwise

    :param create: Create the directory when it does not exist yet.
    :type create: bool
    """
    override = os.environ.get(DATA_DIR_ENV)
    base = Path(override).expanduser() if override else Path.home() / ".block_dodger"

    if create:
        base.mkdir(parents=True, exist_ok=True)
    return base
