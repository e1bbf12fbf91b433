# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Utility functions for logging."""

import logging
import sys
from typing import TextIO

LOGGER_NAME = "storctl"
LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "critical": logging.CRITICAL,
    "panic": logging.CRITICAL,
}

_NAMES = {
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warn",
    logging.ERROR: "error",
    logging.CRITICAL: "fatal",
}


def parse_level(text: object) -> int | None:
    """Map a level name such as ``"debug"`` or ``"WARN"`` to a logging level.

    Returns None for anything that is not a known level name.
    """
    if not isinstance(text, str):
        return None
    return _LEVELS.get(text.strip().lower())


def level_name(level: int) -> str:
    """Return the canonical storctl name for a logging *level*."""
    return _NAMES.get(level, logging.getLevelName(level).lower())


def get_logger(stream: TextIO | None = None, name: str = LOGGER_NAME) -> logging.Logger:
    """Create the per-invocation logger writing to *stream* (default: stderr).

    The logger is not registered with the ``logging`` module's global
    manager, so two invocations in one process never share handlers or
    levels.
    """
    logger = logging.Logger(name, level=logging.WARNING)
    handler = logging.StreamHandler(sys.stderr if stream is None else stream)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
