"""Core logging implementation for uiforge."""

import logging
import sys
from typing import Optional

__all__ = ["get_logger", "setup_logging", "parse_level"]


def parse_level(level: str | int | None, default: int = logging.INFO) -> int:
    """Resolve a level name such as "debug" or a numeric level.

    Unknown names fall back to ``default``.
    """
    if level is None:
        return default
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else default


def setup_logging(level: int = logging.INFO, stream=sys.stderr) -> None:
    """Configure basic logging.

    Args:
        level: Logging level.
        stream: Output stream.
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=stream,
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Name of the logger.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name or "uiforge")
