"""Logging setup shared by the command-line scripts."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def resolve_level(name: str) -> int:
    """Map a level name to a ``logging`` constant."""
    level = _LEVELS.get(name.strip().upper())
    if level is None:
        raise ValueError(f"Unknown log level {name!r}. Expected one of {sorted(_LEVELS)}.")
    return level


def configure_logging(level: str = "WARNING") -> None:
    """Install a single stderr handler on the root logger."""
    root = logging.getLogger()
    root.setLevel(resolve_level(level))

    # Drop previous handlers so repeated calls do not duplicate output.
    while root.handlers:
        root.handlers.pop()

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
