"""Logging configuration."""

import logging
from typing import Dict, Union

_loggers: Dict[str, logging.Logger] = {}
_level: int = logging.WARNING


def get_logger(name: str) -> logging.Logger:
    """Get or create a logger for the given name."""
    if name not in _loggers:
        logger = logging.getLogger(name)
        logger.setLevel(_level)
        if not logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
                )
            )
            logger.addHandler(handler)
        _loggers[name] = logger
    return _loggers[name]


def set_log_level(level: Union[int, str]) -> None:
    """Change the level of every trackplayer logger (default: WARNING)."""
    global _level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    _level = level
    for logger in _loggers.values():
        logger.setLevel(level)
