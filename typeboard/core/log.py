"""Named console loggers shared by the application."""

from __future__ import annotations

import logging
from typing import Dict

from .config import LOG_LEVEL

_LOGGERS: Dict[str, logging.Logger] = {}

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Create or retrieve a named logger under the ``typeboard`` namespace."""

    if name in _LOGGERS:
        return _LOGGERS[name]

    logger = logging.getLogger(f"typeboard.{name}")
    logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(console)

    logger.propagate = False
    _LOGGERS[name] = logger
    return logger


def hash_prefix(credential_hash: str) -> str:
    """Short, log-safe identifier for a credential hash."""

    return (credential_hash or "")[:8]


__all__ = ["get_logger", "hash_prefix"]
