"""
Observability Layer

RESPONSIBILITY: Logging setup for every layer
OUTPUTS: Configured `logging` handlers

WHAT THIS LAYER MUST NOT DO:
============================
- Modify system behavior
- Make decisions based on logged data

Modules obtain their logger with `logging.getLogger(__name__)`; this
module only decides where records go and how they look.

Usage:
    from factiongraph.observability import configure_logging

    configure_logging("DEBUG")
"""

from __future__ import annotations
import logging
import sys
from typing import Optional, Union


DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"

ROOT_LOGGER_NAMES = ("factiongraph", "dashboard")


def configure_logging(
    level: Union[int, str] = logging.INFO,
    detailed: bool = False,
    stream: Optional[object] = None,
) -> None:
    """
    Attach a single console handler to the package loggers.

    Safe to call repeatedly; existing handlers installed by a previous
    call are replaced rather than duplicated.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    formatter = logging.Formatter(DETAILED_FORMAT if detailed else DEFAULT_FORMAT)

    for name in ROOT_LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.setLevel(level)

        for handler in list(logger.handlers):
            if getattr(handler, "_factiongraph_handler", False):
                logger.removeHandler(handler)

        handler = logging.StreamHandler(stream or sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler._factiongraph_handler = True
        logger.addHandler(handler)


__all__ = ['configure_logging', 'DEFAULT_FORMAT', 'DETAILED_FORMAT']
